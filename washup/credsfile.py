"""Read the user JWT and seed out of a NATS credentials file."""

from __future__ import annotations

import os
import re

_USER_CONFIG_RE = re.compile(
    r"\s*(?:(?:[-]{3,}.*[-]{3,}\r?\n)([\w\-.=]+)(?:\r?\n[-]{3,}.*[-]{3,}\r?\n))"
)


class CredsfileError(ValueError):
    """A credentials file lacks the JWT or the seed."""


def _decorated_value(contents: str, index: int, message: str) -> str:
    for position, match in enumerate(_USER_CONFIG_RE.finditer(contents)):
        if position == index:
            return match.group(1)
    raise CredsfileError(message)


def parse_decorated_jwt(contents: str) -> str:
    """Return the user JWT from the text of a credentials file."""
    return _decorated_value(
        contents, 0, "cannot parse user JWT from the credentials file"
    )


def parse_decorated_nkey(contents: str) -> str:
    """Return the nkey seed from the text of a credentials file."""
    return _decorated_value(
        contents, 1, "cannot parse user seed from the credentials file"
    )


def parse_credsfile(path: str | os.PathLike[str]) -> tuple[str, str]:
    """Read a credentials file and return its ``(jwt, seed)`` pair."""
    with open(path, encoding="utf-8") as handle:
        contents = handle.read()
    return parse_decorated_jwt(contents), parse_decorated_nkey(contents)