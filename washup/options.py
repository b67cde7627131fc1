"""Command-line options for starting NATS and a wasmCloud host."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

NATS_SERVER_VERSION = "v2.8.4"
DEFAULT_NATS_HOST = "127.0.0.1"
DEFAULT_NATS_PORT = "4222"
WASMCLOUD_HOST_VERSION = "v0.58.2"
DEFAULT_LATTICE_PREFIX = "default"
DEFAULT_RPC_TIMEOUT_MS = "2000"
DEFAULT_PROV_SHUTDOWN_DELAY_MS = "300"
DEFAULT_STRUCTURED_LOG_LEVEL = "info"

_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class OptionsError(ValueError):
    """The command line or environment holds an invalid combination of options."""


@dataclass
class NatsOpts:
    """How to reach, or launch, the NATS server."""

    nats_credsfile: Path | None = None
    nats_remote_url: str | None = None
    connect_only: bool = False
    nats_version: str = NATS_SERVER_VERSION
    nats_host: str = DEFAULT_NATS_HOST
    nats_port: int = int(DEFAULT_NATS_PORT)
    nats_js_domain: str | None = None


@dataclass
class WasmcloudOpts:
    """Settings handed to the wasmCloud host."""

    wasmcloud_version: str = WASMCLOUD_HOST_VERSION
    lattice_prefix: str = DEFAULT_LATTICE_PREFIX
    host_seed: str | None = None
    rpc_host: str | None = None
    rpc_port: int | None = None
    rpc_seed: str | None = None
    rpc_timeout_ms: int = int(DEFAULT_RPC_TIMEOUT_MS)
    rpc_jwt: str | None = None
    rpc_tls: bool = False
    rpc_credsfile: Path | None = None
    prov_rpc_host: str | None = None
    prov_rpc_port: int | None = None
    prov_rpc_seed: str | None = None
    prov_rpc_tls: bool = False
    prov_rpc_jwt: str | None = None
    prov_rpc_credsfile: Path | None = None
    ctl_host: str | None = None
    ctl_port: int | None = None
    ctl_seed: str | None = None
    ctl_jwt: str | None = None
    ctl_credsfile: Path | None = None
    ctl_tls: bool = False
    cluster_seed: str | None = None
    cluster_issuers: list[str] | None = None
    provider_delay: int = int(DEFAULT_PROV_SHUTDOWN_DELAY_MS)
    allow_latest: bool = False
    allowed_insecure: list[str] | None = None
    wasmcloud_js_domain: str | None = None
    config_service_enabled: bool = False
    enable_structured_logging: bool = False
    structured_log_level: str = DEFAULT_STRUCTURED_LOG_LEVEL
    enable_ipv6: bool = False
    start_only: bool = False


@dataclass
class UpCommand:
    """Everything the ``up`` command was asked to do."""

    detached: bool = False
    nats_opts: NatsOpts = field(default_factory=NatsOpts)
    wasmcloud_opts: WasmcloudOpts = field(default_factory=WasmcloudOpts)


def _integer(bits: int) -> Callable[[str, str], int]:
    limit = 2**bits - 1

    def convert(text: str, name: str) -> int:
        try:
            value = int(text.strip())
        except ValueError:
            raise OptionsError(f"invalid value {text!r} for {name}") from None
        if not 0 <= value <= limit:
            raise OptionsError(f"value {text!r} for {name} is out of range 0..{limit}")
        return value

    return convert


def _path(text: str, name: str) -> Path:
    if not text:
        raise OptionsError(f"empty path given for {name}")
    return Path(text)


@dataclass(frozen=True)
class _Spec:
    dest: str
    flags: tuple[str, ...]
    target: str
    kind: str = "value"
    convert: Callable[[str, str], Any] | None = None
    env: str | None = None
    default: str | None = None
    help: str = ""


_PORT = _integer(16)
_U32 = _integer(32)

_SPECS: tuple[_Spec, ...] = (
    _Spec("detached", ("-d", "--detached", "--detach"), "up", "flag",
          help="Launch NATS and wasmCloud detached from the current terminal"),
    _Spec("nats_credsfile", ("--nats-credsfile",), "nats", convert=_path,
          env="NATS_CREDSFILE", help="NATS credentials file for extending existing infrastructure"),
    _Spec("nats_remote_url", ("--nats-remote-url",), "nats",
          env="NATS_REMOTE_URL", help="Remote URL of existing NATS infrastructure to extend"),
    _Spec("connect_only", ("--nats-connect-only",), "nats", "flag",
          env="NATS_CONNECT_ONLY", help="Only connect to an existing NATS server"),
    _Spec("nats_version", ("--nats-version",), "nats", env="NATS_VERSION",
          default=NATS_SERVER_VERSION, help="NATS server version to download"),
    _Spec("nats_host", ("--nats-host",), "nats", env="NATS_HOST",
          default=DEFAULT_NATS_HOST, help="NATS server host to connect to"),
    _Spec("nats_port", ("--nats-port",), "nats", convert=_PORT, env="NATS_PORT",
          default=DEFAULT_NATS_PORT, help="NATS server port to connect to"),
    _Spec("nats_js_domain", ("--nats-js-domain",), "nats", env="NATS_JS_DOMAIN",
          help="NATS server Jetstream domain"),
    _Spec("wasmcloud_version", ("--wasmcloud-version",), "wasmcloud",
          env="WASMCLOUD_VERSION", default=WASMCLOUD_HOST_VERSION,
          help="wasmCloud host version to download"),
    _Spec("lattice_prefix", ("-x", "--lattice-prefix"), "wasmcloud",
          env="WASMCLOUD_LATTICE_PREFIX", default=DEFAULT_LATTICE_PREFIX,
          help="Unique identifier for a lattice"),
    _Spec("host_seed", ("--host-seed",), "wasmcloud", env="WASMCLOUD_HOST_SEED",
          help="Seed key used by this host to generate its public key"),
    _Spec("rpc_host", ("--rpc-host",), "wasmcloud", env="WASMCLOUD_RPC_HOST",
          help="Host to use for RPC messages"),
    _Spec("rpc_port", ("--rpc-port",), "wasmcloud", convert=_PORT,
          env="WASMCLOUD_RPC_PORT", help="Port to use for RPC messages"),
    _Spec("rpc_seed", ("--rpc-seed",), "wasmcloud", env="WASMCLOUD_RPC_SEED",
          help="Seed nkey for RPC authentication"),
    _Spec("rpc_timeout_ms", ("--rpc-timeout-ms",), "wasmcloud", convert=_U32,
          env="WASMCLOUD_RPC_TIMEOUT_MS", default=DEFAULT_RPC_TIMEOUT_MS,
          help="Timeout in milliseconds for all RPC calls"),
    _Spec("rpc_jwt", ("--rpc-jwt",), "wasmcloud", env="WASMCLOUD_RPC_JWT",
          help="User JWT for RPC authentication"),
    _Spec("rpc_tls", ("--rpc-tls",), "wasmcloud", "flag", env="WASMCLOUD_RPC_TLS",
          help="Use TLS for RPC messages"),
    _Spec("rpc_credsfile", ("--rpc-credsfile",), "wasmcloud", convert=_path,
          env="WASMCLOUD_RPC_CREDSFILE", help="Credentials file for RPC authentication"),
    _Spec("prov_rpc_host", ("--prov-rpc-host",), "wasmcloud",
          env="WASMCLOUD_PROV_RPC_HOST", help="Host to use for provider RPC messages"),
    _Spec("prov_rpc_port", ("--prov-rpc-port",), "wasmcloud", convert=_PORT,
          env="WASMCLOUD_PROV_RPC_PORT", help="Port to use for provider RPC messages"),
    _Spec("prov_rpc_seed", ("--prov-rpc-seed",), "wasmcloud",
          env="WASMCLOUD_PROV_RPC_SEED", help="Seed nkey for provider RPC authentication"),
    _Spec("prov_rpc_tls", ("--prov-rpc-tls",), "wasmcloud", "flag",
          env="WASMCLOUD_PROV_RPC_TLS", help="Use TLS for provider RPC messages"),
    _Spec("prov_rpc_jwt", ("--prov-rpc-jwt",), "wasmcloud",
          env="WASMCLOUD_PROV_RPC_JWT", help="User JWT for provider RPC authentication"),
    _Spec("prov_rpc_credsfile", ("--prov-rpc-credsfile",), "wasmcloud", convert=_path,
          env="WASMCLOUD_PROV_RPC_CREDSFILE",
          help="Credentials file for provider RPC authentication"),
    _Spec("ctl_host", ("--ctl-host",), "wasmcloud", env="WASMCLOUD_CTL_HOST",
          help="Host to use for control interface messages"),
    _Spec("ctl_port", ("--ctl-port",), "wasmcloud", convert=_PORT,
          env="WASMCLOUD_CTL_PORT", help="Port to use for control interface messages"),
    _Spec("ctl_seed", ("--ctl-seed",), "wasmcloud", env="WASMCLOUD_CTL_SEED",
          help="Seed nkey for control interface authentication"),
    _Spec("ctl_jwt", ("--ctl-jwt",), "wasmcloud", env="WASMCLOUD_CTL_JWT",
          help="User JWT for control interface authentication"),
    _Spec("ctl_credsfile", ("--ctl-credsfile",), "wasmcloud", convert=_path,
          env="WASMCLOUD_CTL_CREDSFILE",
          help="Credentials file for control interface authentication"),
    _Spec("ctl_tls", ("--ctl-tls",), "wasmcloud", "flag", env="WASMCLOUD_CTL_TLS",
          help="Use TLS for control interface messages"),
    _Spec("cluster_seed", ("--cluster-seed",), "wasmcloud",
          env="WASMCLOUD_CLUSTER_SEED", help="Seed key used to sign all invocations"),
    _Spec("cluster_issuers", ("--cluster-issuers",), "wasmcloud", "list",
          env="WASMCLOUD_CLUSTER_ISSUERS",
          help="Public keys that can be used as issuers on signed invocations"),
    _Spec("provider_delay", ("--provider-delay",), "wasmcloud", convert=_U32,
          env="WASMCLOUD_PROV_SHUTDOWN_DELAY_MS", default=DEFAULT_PROV_SHUTDOWN_DELAY_MS,
          help="Delay in milliseconds before forcibly terminating a provider"),
    _Spec("allow_latest", ("--allow-latest",), "wasmcloud", "flag",
          env="WASMCLOUD_OCI_ALLOW_LATEST", help="Allow OCI images tagged latest"),
    _Spec("allowed_insecure", ("--allowed-insecure",), "wasmcloud", "list",
          env="WASMCLOUD_OCI_ALLOWED_INSECURE",
          help="OCI hosts to which insecure connections are allowed"),
    _Spec("wasmcloud_js_domain", ("--wasmcloud-js-domain",), "wasmcloud",
          env="WASMCLOUD_JS_DOMAIN", help="Jetstream domain name for the host"),
    _Spec("config_service_enabled", ("--config-service-enabled",), "wasmcloud", "flag",
          env="WASMCLOUD_CONFIG_SERVICE", help="Request a config service on startup"),
    _Spec("enable_structured_logging", ("--enable-structured-logging",), "wasmcloud",
          "flag", env="WASMCLOUD_STRUCTURED_LOGGING_ENABLED",
          help="Enable JSON structured logging from the host"),
    _Spec("structured_log_level", ("--structured-log-level",), "wasmcloud",
          env="WASMCLOUD_STRUCTURED_LOG_LEVEL", default=DEFAULT_STRUCTURED_LOG_LEVEL,
          help="Verbosity of JSON structured logs"),
    _Spec("enable_ipv6", ("--enable-ipv6",), "wasmcloud", "flag",
          env="WASMCLOUD_ENABLE_IPV6", help="Enable IPv6 addressing for hosts"),
    _Spec("start_only", ("--wasmcloud-start-only",), "wasmcloud", "flag",
          help="Do not download wasmCloud if it is not installed"),
)

_REQUIRES: tuple[tuple[str, str], ...] = (
    ("nats_credsfile", "nats_remote_url"),
    ("nats_remote_url", "nats_credsfile"),
    ("rpc_seed", "rpc_jwt"),
    ("rpc_jwt", "rpc_seed"),
    ("prov_rpc_seed", "prov_rpc_jwt"),
    ("prov_rpc_jwt", "prov_rpc_seed"),
    ("ctl_seed", "ctl_jwt"),
    ("ctl_jwt", "ctl_seed"),
)

_CONFLICTS: tuple[tuple[str, str], ...] = (("connect_only", "nats_remote_url"),)

_FLAG_NAMES = {spec.dest: spec.flags[-1] if spec.dest != "detached" else "--detached"
               for spec in _SPECS}


class _RaisingParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise OptionsError(message)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``up`` command."""
    parser = _RaisingParser(
        prog="up", description="Start NATS and a wasmCloud host."
    )
    for spec in _SPECS:
        if spec.kind == "flag":
            parser.add_argument(
                *spec.flags, dest=spec.dest, action="store_true", help=spec.help
            )
        elif spec.kind == "list":
            parser.add_argument(
                *spec.flags, dest=spec.dest, action="append", default=None,
                help=spec.help,
            )
        else:
            parser.add_argument(*spec.flags, dest=spec.dest, default=None, help=spec.help)
    return parser


def _resolve(spec: _Spec, given: Any, env: Mapping[str, str]) -> Any:
    from_env = env.get(spec.env) if spec.env else None
    if from_env == "":
        from_env = None
    if spec.kind == "flag":
        if given:
            return True
        return from_env is not None and from_env.strip().lower() not in _FALSE_WORDS
    if spec.kind == "list":
        if given is not None:
            return list(given)
        return None if from_env is None else [from_env]
    raw = given if given is not None else from_env
    if raw is None:
        raw = spec.default
    if raw is None or spec.convert is None:
        return raw
    return spec.convert(raw, _FLAG_NAMES[spec.dest])


def _is_present(value: Any) -> bool:
    return value is not None and value is not False


def _check_relations(values: Mapping[str, Any]) -> None:
    for name, needed in _REQUIRES:
        if _is_present(values[name]) and not _is_present(values[needed]):
            raise OptionsError(
                f"the argument {_FLAG_NAMES[name]} requires {_FLAG_NAMES[needed]}"
            )
    for name, other in _CONFLICTS:
        if _is_present(values[name]) and _is_present(values[other]):
            raise OptionsError(
                f"the argument {_FLAG_NAMES[name]} cannot be used with {_FLAG_NAMES[other]}"
            )


def parse_up_command(
    argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None
) -> UpCommand:
    """Parse ``up`` arguments, falling back to environment variables and defaults.

    ``argv`` excludes the program name; ``env`` defaults to the process environment.
    """
    if argv is None:
        argv = sys.argv[1:]
    if env is None:
        env = os.environ
    namespace = vars(build_parser().parse_args(list(argv)))
    values = {spec.dest: _resolve(spec, namespace[spec.dest], env) for spec in _SPECS}
    _check_relations(values)

    def pick(target: str) -> dict[str, Any]:
        return {spec.dest: values[spec.dest] for spec in _SPECS if spec.target == target}

    return UpCommand(
        detached=values["detached"],
        nats_opts=NatsOpts(**pick("nats")),
        wasmcloud_opts=WasmcloudOpts(**pick("wasmcloud")),
    )