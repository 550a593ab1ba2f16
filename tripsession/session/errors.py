"""Error types raised by the session store."""

from __future__ import annotations

from pydantic import ValidationError


class SessionError(Exception):
    """Base class for session store failures."""


class ParseError(SessionError):
    """Payload is not well-formed content block or turn data."""


class ProtocolViolation(SessionError):
    """Well-formed turn rejected by chat structure rules."""


class EmptySession(SessionError):
    """Read operation on a session that has no turns yet."""


def describe_validation_error(exc: ValidationError) -> str:
    """Compact one-line-per-error rendering of a pydantic ValidationError."""
    lines = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        lines.append(f"{loc}: {msg}" if loc else msg)
    return "\n".join(lines) or str(exc)
