"""Result of dispatching a command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SentryResponse:
    """Either JSON-compatible data or an error message."""

    data: Any = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any) -> SentryResponse:
        return cls(data=data)

    @classmethod
    def ok_simple(cls) -> SentryResponse:
        return cls(data={"status": "ok"})

    @classmethod
    def error(cls, message: Any) -> SentryResponse:
        return cls(message=str(message))

    def is_ok(self) -> bool:
        return self.message is None