"""Small helpers shared by the command-line tools."""

from __future__ import annotations

import json
import math
from typing import Any

import msgpack

NOT_AVAILABLE = "N/A"
DECODE_ERROR = {"error": "Could not decode data"}

_I64_MIN = -(2**63)
_U64_MAX = 2**64 - 1

_CONTRACT_ID_ERROR = (
    "It looks like you used an Actor or Provider ID (e.g. VABC...) instead of "
    "a contract ID (e.g. wasmcloud:httpserver)"
)


def format_optional(value: str | None) -> str:
    """Return the value, or ``"N/A"`` when there is none."""
    return NOT_AVAILABLE if value is None else value


def extract_arg_value(arg: str) -> str:
    """Return the contents of the file named by ``arg``, or ``arg`` itself if it cannot be opened."""
    try:
        handle = open(arg, encoding="utf-8")
    except OSError:
        return arg
    with handle:
        return handle.read()


def _parse_json_int(text: str) -> int | float:
    value = int(text)
    if _I64_MIN <= value <= _U64_MAX:
        return value
    return float(text)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value: {name}")


def json_str_to_msgpack_bytes(payload: str) -> bytes:
    """Encode a JSON document as msgpack bytes."""
    value = json.loads(
        payload, parse_int=_parse_json_int, parse_constant=_reject_constant
    )
    return msgpack.packb(value, use_bin_type=True)


class _Pairs(list):
    """Key/value pairs of a decoded msgpack map, kept in order."""


def _binary_to_json(data: bytes, bin_str: str) -> Any:
    if bin_str == "s":
        return data.decode("utf-8", errors="replace")
    if bin_str == "2":
        return {"str": data.decode("utf-8", errors="replace"), "bin": list(data)}
    return list(data)


def _to_json(value: Any, bin_str: str) -> Any:
    if value is None:
        return False
    if isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value if _I64_MIN <= value <= _U64_MAX else 0
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, _Pairs):
        return {
            (key if isinstance(key, str) else ""): _to_json(item, bin_str)
            for key, item in value
        }
    if isinstance(value, list):
        return [_to_json(item, bin_str) for item in value]
    if isinstance(value, (bytes, bytearray)):
        return _binary_to_json(bytes(value), bin_str)
    if isinstance(value, msgpack.ExtType):
        return {"type": value.code, "data": list(value.data)}
    return False


def msgpack_to_json_val(msg: bytes, bin_str: str) -> Any:
    """Decode the first msgpack value in ``msg`` into JSON-compatible data.

    ``bin_str`` selects how binary values appear: ``"s"`` as a lossy UTF-8
    string, ``"2"`` as an object holding both forms, anything else as a list
    of byte values.
    """
    unpacker = msgpack.Unpacker(
        raw=False,
        unicode_errors="replace",
        strict_map_key=False,
        use_list=True,
        object_pairs_hook=_Pairs,
    )
    unpacker.feed(bytes(msg))
    try:
        value = unpacker.unpack()
    except (ValueError, msgpack.UnpackException):
        return dict(DECODE_ERROR)
    return _to_json(value, bin_str)


def validate_contract_id(contract_id: str) -> None:
    """Raise ``ValueError`` if the contract ID looks like an actor or provider key."""
    if len(contract_id) == 56 and all(
        ch.isascii() and (ch.isdigit() or ch.isupper()) for ch in contract_id
    ):
        raise ValueError(_CONTRACT_ID_ERROR)