"""Decisions and the final report of the ``up`` command."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from .options import NatsOpts

DASHBOARD_URL = "http://localhost:4000"
KILL_COMMAND = "wash down"


@dataclass
class UpOutput:
    """Human-readable text and machine-readable data describing a finished ``up``."""

    text: str
    json: dict[str, Any] = field(default_factory=dict)


def nats_listen_address(nats_opts: NatsOpts) -> str:
    """Return the ``host:port`` address of the NATS server."""
    return f"{nats_opts.nats_host}:{nats_opts.nats_port}"


def should_start_nats(nats_opts: NatsOpts) -> bool:
    """Whether a local NATS server must be downloaded and started.

    ``connect_only`` is ignored when both a remote URL and a credentials file
    are given, since a leaf node has to be started then.
    """
    return not nats_opts.connect_only or (
        nats_opts.nats_remote_url is not None and nats_opts.nats_credsfile is not None
    )


def build_up_output(
    detached: bool, listen_address: str, wasmcloud_log_path: str | os.PathLike[str]
) -> UpOutput:
    """Build the report shown once ``up`` has finished."""
    data: dict[str, Any] = {"success": True}
    text = "🛁 wash up completed successfully"
    if detached:
        log_path = os.fspath(wasmcloud_log_path)
        data["wasmcloud_url"] = DASHBOARD_URL
        data["wasmcloud_log"] = log_path
        data["kill_cmd"] = KILL_COMMAND
        data["nats_url"] = listen_address
        text += (
            f"\n🕸  NATS is running in the background at http://{listen_address}"
            f"\n🌐 The wasmCloud dashboard is running at {DASHBOARD_URL}"
            f"\n📜 Logs for the host are being written to {log_path}"
            f'\n\n🛑 To stop wasmCloud, run "{KILL_COMMAND}"'
        )
    return UpOutput(text=text, json=data)