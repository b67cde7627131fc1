# washup

`washup` holds the pieces needed to bring up a local lattice made of a
NATS server and a wasmCloud host. It parses the `up` command line, reads
NATS credentials files, turns the options into the environment that the
host process expects, and builds the summary that is reported once
everything is running.

It is a library. It installs no command.

## Parsing options

`washup.options.parse_up_command(argv, env)` parses command-line
arguments and returns an `UpCommand` holding `detached`, a `NatsOpts`
and a `WasmcloudOpts`. `argv` does not include the program name and
defaults to `sys.argv[1:]`. `env` defaults to `os.environ`.

Each option not given on the command line is taken from its environment
variable, such as `NATS_PORT` or `WASMCLOUD_RPC_HOST`, and otherwise
from its default. Empty environment values are ignored. A flag set
through the environment counts as on unless its value is `0`, `false`,
`no` or `off`. For `--cluster-issuers` and `--allowed-insecure`, an
environment value becomes a single entry. Those two options may also be
repeated on the command line.

Invalid input raises `OptionsError`, a `ValueError`. This covers:

- unknown arguments;
- ports outside 0–65535;
- millisecond values outside the 32-bit unsigned range;
- a seed given without its JWT, or a JWT without its seed;
- `--nats-remote-url` without `--nats-credsfile`, or the other way round;
- `--nats-connect-only` together with `--nats-remote-url`.

`build_parser()` returns the underlying `argparse` parser. It knows the
flags and their help text but not the environment fallbacks or the
checks above.

```python
from washup.options import parse_up_command

cmd = parse_up_command(
    ["--nats-port", "4232", "--lattice-prefix", "anotherprefix", "--detached"],
    env={},
)
assert cmd.nats_opts.nats_port == 4232
assert cmd.wasmcloud_opts.lattice_prefix == "anotherprefix"
```

## Host environment

`washup.host_env.configure_host_env(nats_opts, wasmcloud_opts)` returns a
dictionary of `WASMCLOUD_*` variables for the host process.

The RPC, control (`CTL`) and provider RPC (`PROV_RPC`) connections get
their hosts and ports from the NATS host and port unless they are set
themselves. When a connection has a credentials file, its JWT and seed
are read from that file and any separately given JWT and seed are
ignored. If the file cannot be read or parsed, it is skipped silently.

```python
from washup.host_env import configure_host_env

host_env = configure_host_env(cmd.nats_opts, cmd.wasmcloud_opts)
```

## Credentials files

`washup.credsfile.parse_credsfile(path)` reads a NATS credentials file
and returns a `(jwt, seed)` pair. The JWT is the first decorated block
in the file and the seed is the second.

`parse_decorated_jwt(contents)` and `parse_decorated_nkey(contents)` do
the same for text already in memory. A missing block raises
`CredsfileError`, a `ValueError`.

## Startup decisions and summary

`washup.summary` provides:

- `nats_listen_address(nats_opts)`, the `host:port` of the NATS server;
- `should_start_nats(nats_opts)`, which is true unless `connect_only` is
  set. When both a remote URL and a credentials file are given, it is
  true even with `connect_only`.
- `build_up_output(detached, listen_address, wasmcloud_log_path)`, which
  returns an `UpOutput` with `text` and `json` members. In detached mode
  these also carry the dashboard URL, the log path, the NATS address and
  the `wash down` stop command.

## Utilities

`washup.util` provides:

- `format_optional(value)` returns `"N/A"` for `None`.
- `extract_arg_value(arg)` returns the contents of the file named by
  `arg`, or `arg` itself when no such file can be opened.
- `json_str_to_msgpack_bytes(payload)` encodes a JSON document as
  msgpack.
- `msgpack_to_json_val(msg, bin_str)` decodes msgpack into JSON-ready
  data:
  - nil becomes `False`.
  - Binary values follow `bin_str`: `"s"` gives a string, `"2"` gives
    `{"str": ..., "bin": [...]}`, and any other value gives a list of
    bytes.
  - Undecodable input gives `{"error": "Could not decode data"}`.
- `validate_contract_id(contract_id)` raises `ValueError` for a
  56-character string of upper-case letters and digits. Such a string is
  an actor or provider ID given where a contract ID such as
  `wasmcloud:httpserver` is expected.

## What it does not do

This package does not download, start or stop NATS servers or wasmCloud
hosts. It does not connect to NATS, and it provides no `up` or `down`
command. It prepares the options, the environment and the report that a
launcher would use.