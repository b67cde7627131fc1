"""Turn wasmCloud options into the environment handed to the host process."""

from __future__ import annotations

from .credsfile import CredsfileError, parse_credsfile
from .options import NatsOpts, WasmcloudOpts

DOWNLOADS_DIR = "downloads"

WASMCLOUD_LATTICE_PREFIX = "WASMCLOUD_LATTICE_PREFIX"
WASMCLOUD_JS_DOMAIN = "WASMCLOUD_JS_DOMAIN"
WASMCLOUD_CLUSTER_ISSUERS = "WASMCLOUD_CLUSTER_ISSUERS"
WASMCLOUD_CLUSTER_SEED = "WASMCLOUD_CLUSTER_SEED"
WASMCLOUD_HOST_SEED = "WASMCLOUD_HOST_SEED"
WASMCLOUD_RPC_HOST = "WASMCLOUD_RPC_HOST"
WASMCLOUD_RPC_PORT = "WASMCLOUD_RPC_PORT"
WASMCLOUD_RPC_TIMEOUT_MS = "WASMCLOUD_RPC_TIMEOUT_MS"
WASMCLOUD_RPC_JWT = "WASMCLOUD_RPC_JWT"
WASMCLOUD_RPC_SEED = "WASMCLOUD_RPC_SEED"
WASMCLOUD_RPC_TLS = "WASMCLOUD_RPC_TLS"
WASMCLOUD_CTL_HOST = "WASMCLOUD_CTL_HOST"
WASMCLOUD_CTL_PORT = "WASMCLOUD_CTL_PORT"
WASMCLOUD_CTL_SEED = "WASMCLOUD_CTL_SEED"
WASMCLOUD_CTL_JWT = "WASMCLOUD_CTL_JWT"
WASMCLOUD_CTL_TLS = "WASMCLOUD_CTL_TLS"
WASMCLOUD_PROV_RPC_HOST = "WASMCLOUD_PROV_RPC_HOST"
WASMCLOUD_PROV_RPC_PORT = "WASMCLOUD_PROV_RPC_PORT"
WASMCLOUD_PROV_SHUTDOWN_DELAY_MS = "WASMCLOUD_PROV_SHUTDOWN_DELAY_MS"
WASMCLOUD_PROV_RPC_SEED = "WASMCLOUD_PROV_RPC_SEED"
WASMCLOUD_PROV_RPC_JWT = "WASMCLOUD_PROV_RPC_JWT"
WASMCLOUD_PROV_RPC_TLS = "WASMCLOUD_PROV_RPC_TLS"
WASMCLOUD_OCI_ALLOWED_INSECURE = "WASMCLOUD_OCI_ALLOWED_INSECURE"
WASMCLOUD_OCI_ALLOW_LATEST = "WASMCLOUD_OCI_ALLOW_LATEST"
WASMCLOUD_STRUCTURED_LOG_LEVEL = "WASMCLOUD_STRUCTURED_LOG_LEVEL"
WASMCLOUD_ENABLE_IPV6 = "WASMCLOUD_ENABLE_IPV6"
WASMCLOUD_STRUCTURED_LOGGING_ENABLED = "WASMCLOUD_STRUCTURED_LOGGING_ENABLED"
WASMCLOUD_CONFIG_SERVICE = "WASMCLOUD_CONFIG_SERVICE"


def _read_credsfile(path) -> tuple[str, str] | None:
    try:
        return parse_credsfile(path)
    except (OSError, UnicodeDecodeError, CredsfileError):
        return None


def _connection(
    env: dict[str, str],
    nats_opts: NatsOpts,
    *,
    host: str | None,
    port: int | None,
    credsfile,
    jwt: str | None,
    seed: str | None,
    tls: bool,
    keys: tuple[str, str, str, str, str],
) -> None:
    host_key, port_key, jwt_key, seed_key, tls_key = keys
    env[host_key] = host if host is not None else nats_opts.nats_host
    env[port_key] = str(port if port is not None else nats_opts.nats_port)
    if credsfile is not None:
        creds = _read_credsfile(credsfile)
        if creds is not None:
            env[jwt_key], env[seed_key] = creds
    else:
        if jwt is not None:
            env[jwt_key] = jwt
        if seed is not None:
            env[seed_key] = seed
    if tls:
        env[tls_key] = "1"


def configure_host_env(
    nats_opts: NatsOpts, wasmcloud_opts: WasmcloudOpts
) -> dict[str, str]:
    """Build the host's environment from its options, using NATS settings as defaults.

    An unreadable or malformed credentials file is skipped silently.
    """
    opts = wasmcloud_opts
    env: dict[str, str] = {WASMCLOUD_LATTICE_PREFIX: opts.lattice_prefix}
    if opts.wasmcloud_js_domain is not None:
        env[WASMCLOUD_JS_DOMAIN] = opts.wasmcloud_js_domain

    if opts.host_seed is not None:
        env[WASMCLOUD_HOST_SEED] = opts.host_seed
    if opts.cluster_seed is not None:
        env[WASMCLOUD_CLUSTER_SEED] = opts.cluster_seed
    if opts.cluster_issuers is not None:
        env[WASMCLOUD_CLUSTER_ISSUERS] = ",".join(opts.cluster_issuers)

    if opts.allow_latest:
        env[WASMCLOUD_OCI_ALLOW_LATEST] = "true"
    if opts.allowed_insecure is not None:
        env[WASMCLOUD_OCI_ALLOWED_INSECURE] = ",".join(opts.allowed_insecure)

    env[WASMCLOUD_RPC_HOST] = (
        opts.rpc_host if opts.rpc_host is not None else nats_opts.nats_host
    )
    env[WASMCLOUD_RPC_PORT] = str(
        opts.rpc_port if opts.rpc_port is not None else nats_opts.nats_port
    )
    env[WASMCLOUD_RPC_TIMEOUT_MS] = str(opts.rpc_timeout_ms)
    if opts.rpc_credsfile is not None:
        creds = _read_credsfile(opts.rpc_credsfile)
        if creds is not None:
            env[WASMCLOUD_RPC_JWT], env[WASMCLOUD_RPC_SEED] = creds
    else:
        if opts.rpc_jwt is not None:
            env[WASMCLOUD_RPC_JWT] = opts.rpc_jwt
        if opts.rpc_seed is not None:
            env[WASMCLOUD_RPC_SEED] = opts.rpc_seed
    if opts.rpc_tls:
        env[WASMCLOUD_RPC_TLS] = "1"

    _connection(
        env,
        nats_opts,
        host=opts.ctl_host,
        port=opts.ctl_port,
        credsfile=opts.ctl_credsfile,
        jwt=opts.ctl_jwt,
        seed=opts.ctl_seed,
        tls=opts.ctl_tls,
        keys=(
            WASMCLOUD_CTL_HOST,
            WASMCLOUD_CTL_PORT,
            WASMCLOUD_CTL_JWT,
            WASMCLOUD_CTL_SEED,
            WASMCLOUD_CTL_TLS,
        ),
    )
    _connection(
        env,
        nats_opts,
        host=opts.prov_rpc_host,
        port=opts.prov_rpc_port,
        credsfile=opts.prov_rpc_credsfile,
        jwt=opts.prov_rpc_jwt,
        seed=opts.prov_rpc_seed,
        tls=opts.prov_rpc_tls,
        keys=(
            WASMCLOUD_PROV_RPC_HOST,
            WASMCLOUD_PROV_RPC_PORT,
            WASMCLOUD_PROV_RPC_JWT,
            WASMCLOUD_PROV_RPC_SEED,
            WASMCLOUD_PROV_RPC_TLS,
        ),
    )
    env[WASMCLOUD_PROV_SHUTDOWN_DELAY_MS] = str(opts.provider_delay)

    if opts.config_service_enabled:
        env[WASMCLOUD_CONFIG_SERVICE] = "1"
    if opts.enable_structured_logging:
        env[WASMCLOUD_STRUCTURED_LOGGING_ENABLED] = "true"
    env[WASMCLOUD_STRUCTURED_LOG_LEVEL] = opts.structured_log_level
    if opts.enable_ipv6:
        env[WASMCLOUD_ENABLE_IPV6] = "1"
    return env