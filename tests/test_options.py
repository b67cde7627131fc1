from pathlib import Path

import pytest

from washup.options import (
    NatsOpts,
    OptionsError,
    UpCommand,
    WasmcloudOpts,
    build_parser,
    parse_up_command,
)

TESTDIR = "./tests/fixtures"
CTL_SEED = "SUALIKDKMIUAKRT5536EXKC3CX73TJD3CFXZMJSHIKSP3LTYIIUQGCUVGA"

ALL_FLAGS = [
    "--allow-latest",
    "--allowed-insecure", "localhost:5000",
    "--cluster-issuers", "CBZZ6BLE7PIJNCEJMXOHAJ65KIXRVXDA74W6LUKXC4EPFHTJREXQCOYI",
    "--cluster-seed", "SCAKLQ2FFT4LZUUVQMH6N37US3IZUEVJBUR3V532VV3DAAHSZXPQY6DYIM",
    "--config-service-enabled",
    "--ctl-credsfile", TESTDIR,
    "--ctl-host", "127.0.0.2",
    "--ctl-jwt", "eyyjWT",
    "--ctl-port", "4232",
    "--ctl-seed", CTL_SEED,
    "--ctl-tls",
    "--enable-ipv6",
    "--enable-structured-logging",
    "--host-seed", "SNAP4UVNHVWSBJ5MHAQ6M3RB23S3ALA3O3A4RF25G2FQB5CCZJBBBWCKBY",
    "--detached",
    "--nats-credsfile", TESTDIR,
    "--nats-host", "127.0.0.2",
    "--nats-js-domain", "domain",
    "--nats-port", "4232",
    "--nats-remote-url", "tls://remote.global",
    "--nats-version", "v2.8.4",
    "--prov-rpc-credsfile", TESTDIR,
    "--prov-rpc-host", "127.0.0.2",
    "--prov-rpc-jwt", "eyyjWT",
    "--prov-rpc-port", "4232",
    "--prov-rpc-seed", CTL_SEED,
    "--prov-rpc-tls",
    "--provider-delay", "500",
    "--rpc-credsfile", TESTDIR,
    "--rpc-host", "127.0.0.2",
    "--rpc-jwt", "eyyjWT",
    "--rpc-port", "4232",
    "--rpc-seed", CTL_SEED,
    "--rpc-timeout-ms", "500",
    "--rpc-tls",
    "--structured-log-level", "warn",
    "--wasmcloud-js-domain", "domain",
    "--wasmcloud-version", "v0.57.1",
    "--lattice-prefix", "anotherprefix",
]


def test_up_comprehensive():
    cmd = parse_up_command(ALL_FLAGS, env={})
    w = cmd.wasmcloud_opts
    n = cmd.nats_opts
    assert w.allow_latest
    assert w.allowed_insecure == ["localhost:5000"]
    assert w.cluster_issuers == ["CBZZ6BLE7PIJNCEJMXOHAJ65KIXRVXDA74W6LUKXC4EPFHTJREXQCOYI"]
    assert w.cluster_seed == "SCAKLQ2FFT4LZUUVQMH6N37US3IZUEVJBUR3V532VV3DAAHSZXPQY6DYIM"
    assert w.config_service_enabled
    assert not n.connect_only
    assert w.ctl_credsfile == Path(TESTDIR)
    assert w.ctl_host == "127.0.0.2"
    assert w.ctl_jwt == "eyyjWT"
    assert w.ctl_port == 4232
    assert w.ctl_seed == CTL_SEED
    assert w.ctl_tls
    assert w.rpc_credsfile == Path(TESTDIR)
    assert w.rpc_host == "127.0.0.2"
    assert w.rpc_jwt == "eyyjWT"
    assert w.rpc_port == 4232
    assert w.rpc_seed == CTL_SEED
    assert w.rpc_tls
    assert w.prov_rpc_credsfile == Path(TESTDIR)
    assert w.prov_rpc_host == "127.0.0.2"
    assert w.prov_rpc_jwt == "eyyjWT"
    assert w.prov_rpc_port == 4232
    assert w.prov_rpc_seed == CTL_SEED
    assert w.prov_rpc_tls
    assert w.enable_ipv6
    assert w.enable_structured_logging
    assert w.host_seed == "SNAP4UVNHVWSBJ5MHAQ6M3RB23S3ALA3O3A4RF25G2FQB5CCZJBBBWCKBY"
    assert w.structured_log_level == "warn"
    assert w.wasmcloud_version == "v0.57.1"
    assert w.lattice_prefix == "anotherprefix"
    assert w.wasmcloud_js_domain == "domain"
    assert n.nats_version == "v2.8.4"
    assert n.nats_remote_url == "tls://remote.global"
    assert w.provider_delay == 500
    assert w.rpc_timeout_ms == 500
    assert cmd.detached


def test_defaults_without_arguments():
    cmd = parse_up_command([], env={})
    assert cmd == UpCommand(detached=False, nats_opts=NatsOpts(), wasmcloud_opts=WasmcloudOpts())
    assert cmd.nats_opts.nats_host == "127.0.0.1"
    assert cmd.nats_opts.nats_port == 4222
    assert cmd.nats_opts.nats_version == "v2.8.4"
    assert cmd.wasmcloud_opts.wasmcloud_version == "v0.58.2"
    assert cmd.wasmcloud_opts.lattice_prefix == "default"
    assert cmd.wasmcloud_opts.rpc_timeout_ms == 2000
    assert cmd.wasmcloud_opts.provider_delay == 300
    assert cmd.wasmcloud_opts.structured_log_level == "info"
    assert cmd.wasmcloud_opts.rpc_port is None


@pytest.mark.parametrize("flag", ["-d", "--detach", "--detached"])
def test_detached_aliases(flag):
    assert parse_up_command([flag], env={}).detached is True


def test_short_lattice_prefix():
    assert parse_up_command(["-x", "mylattice"], env={}).wasmcloud_opts.lattice_prefix == "mylattice"


def test_environment_supplies_values():
    env = {
        "NATS_PORT": "5893",
        "WASMCLOUD_LATTICE_PREFIX": "fromenv",
        "WASMCLOUD_RPC_TLS": "true",
        "WASMCLOUD_CLUSTER_ISSUERS": "CABC",
    }
    cmd = parse_up_command([], env=env)
    assert cmd.nats_opts.nats_port == 5893
    assert cmd.wasmcloud_opts.lattice_prefix == "fromenv"
    assert cmd.wasmcloud_opts.rpc_tls is True
    assert cmd.wasmcloud_opts.cluster_issuers == ["CABC"]


def test_command_line_beats_environment():
    cmd = parse_up_command(["--nats-port", "1234"], env={"NATS_PORT": "5893"})
    assert cmd.nats_opts.nats_port == 1234


@pytest.mark.parametrize("value", ["false", "0", "no", "off", "FALSE"])
def test_false_environment_flag(value):
    assert parse_up_command([], env={"WASMCLOUD_ENABLE_IPV6": value}).wasmcloud_opts.enable_ipv6 is False


def test_repeated_list_option():
    cmd = parse_up_command(
        ["--allowed-insecure", "a:5000", "--allowed-insecure", "b:5000"], env={}
    )
    assert cmd.wasmcloud_opts.allowed_insecure == ["a:5000", "b:5000"]


@pytest.mark.parametrize(
    "argv",
    [
        ["--rpc-seed", "SEED"],
        ["--rpc-jwt", "eyyjWT"],
        ["--ctl-seed", "SEED"],
        ["--prov-rpc-jwt", "eyyjWT"],
        ["--nats-credsfile", TESTDIR],
        ["--nats-remote-url", "tls://remote.global"],
    ],
)
def test_requires_partner_option(argv):
    with pytest.raises(OptionsError, match="requires"):
        parse_up_command(argv, env={})


def test_requirement_met_through_environment():
    cmd = parse_up_command(["--rpc-seed", "SEED"], env={"WASMCLOUD_RPC_JWT": "eyyjWT"})
    assert cmd.wasmcloud_opts.rpc_jwt == "eyyjWT"


def test_connect_only_conflicts_with_remote_url():
    with pytest.raises(OptionsError, match="cannot be used with"):
        parse_up_command(
            ["--nats-connect-only", "--nats-remote-url", "tls://remote.global",
             "--nats-credsfile", TESTDIR],
            env={},
        )


@pytest.mark.parametrize("port", ["70000", "-1", "abc"])
def test_invalid_port(port):
    with pytest.raises(OptionsError):
        parse_up_command(["--nats-port", port], env={})


def test_unknown_option_raises():
    with pytest.raises(OptionsError):
        parse_up_command(["--no-such-flag"], env={})


def test_build_parser_raw_values():
    namespace = build_parser().parse_args(["--rpc-port", "4232", "--ctl-tls"])
    assert namespace.rpc_port == "4232"
    assert namespace.ctl_tls is True
    assert namespace.ctl_port is None