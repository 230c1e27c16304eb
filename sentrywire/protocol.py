"""Glue between the connection layer and the Sentry command set."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Sequence
from typing import Any

from sentrywire.acl import AclRequirement, AuthContext
from sentrywire.commands import CommandKind, SentryCommand
from sentrywire.commands import parse_command as _parse_command
from sentrywire.dispatch import dispatch as _dispatch
from sentrywire.response import SentryResponse


class SentryProtocol:
    """Parses, authorises, dispatches and encodes commands for one engine."""

    def engine_name(self) -> str:
        return "sentry"

    def parse_command(self, args: Sequence[str]) -> SentryCommand:
        return _parse_command(args)

    def auth_token(self, cmd: SentryCommand) -> str | None:
        """The token carried by an AUTH command, otherwise ``None``."""
        return cmd.token if cmd.kind is CommandKind.AUTH else None

    def acl_requirement(self, cmd: SentryCommand) -> AclRequirement:
        return cmd.acl_requirement()

    def dispatch(
        self, engine: Any, cmd: SentryCommand, auth: AuthContext | None
    ) -> Awaitable[SentryResponse]:
        return _dispatch(engine, cmd, auth)

    def response_to_frame(self, response: SentryResponse) -> bytes:
        """Encode a response as a RESP3 frame.

        Data becomes a bulk string of compact JSON; an error becomes a
        simple error prefixed with ``ERR``.
        """
        if response.is_ok():
            try:
                text = json.dumps(
                    response.data,
                    separators=(",", ":"),
                    sort_keys=True,
                    ensure_ascii=False,
                )
            except (TypeError, ValueError):
                text = ""
            payload = text.encode("utf-8")
            return b"$%d\r\n%s\r\n" % (len(payload), payload)
        message = response.message.replace("\r", " ").replace("\n", " ")
        return f"-ERR {message}\r\n".encode("utf-8")

    def error_response(self, message: str) -> SentryResponse:
        return SentryResponse.error(message)

    def ok_response(self) -> SentryResponse:
        return SentryResponse.ok_simple()