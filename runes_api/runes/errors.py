"""Error types raised by the rune query kernel."""

from __future__ import annotations

from typing import Any, Dict


class RunesError(Exception):
    """Base class for failures surfaced by the query layer."""

    code = "runes_error"

    def __init__(self, message: str, *, context: Dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            payload["context"] = self.context
        return payload


class NotFoundError(RunesError):
    """A well-formed identifier matched no row."""

    code = "not_found"


class StoreError(RunesError):
    """The backing store failed (connectivity, timeout or bad SQL)."""

    code = "store_error"


class ParseError(RunesError):
    """A stored numeric string is not a valid integer literal."""

    code = "parse_error"


__all__ = ["NotFoundError", "ParseError", "RunesError", "StoreError"]
