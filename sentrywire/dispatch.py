"""Route parsed commands to the engine and shape the replies."""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

from sentrywire.acl import AclError, AuthContext, check_dispatch_acl
from sentrywire.commands import CommandKind, SentryCommand
from sentrywire.response import SentryResponse

ENGINE_NAME = "sentry"
ENGINE_VERSION = "1.6.0"
WIRE_PROTOCOL = "RESP3"

COMMAND_LIST: tuple[str, ...] = (
    "AUTH",
    "POLICY CREATE",
    "POLICY GET",
    "POLICY LIST",
    "POLICY HISTORY",
    "POLICY DELETE",
    "POLICY UPDATE",
    "EVALUATE",
    "KEY ROTATE",
    "KEY INFO",
    "JWKS",
    "HEALTH",
    "PING",
    "COMMAND LIST",
    "HELLO",
)


class _Engine(Protocol):
    """The engine operations dispatch relies on."""

    def policy_count(self) -> int: ...
    async def policy_create(self, policy: dict, actor: str) -> Any: ...
    def policy_get(self, name: str) -> Any: ...
    def policy_list(self) -> list[str]: ...
    async def policy_delete(self, name: str, actor: str) -> None: ...
    async def policy_history(self, name: str) -> list[Any]: ...
    async def policy_update(self, name: str, updates: dict, actor: str) -> Any: ...
    async def evaluate_request(self, request: dict) -> Any: ...
    async def key_rotate(self, force: bool, dryrun: bool) -> Any: ...
    def key_info(self) -> dict: ...
    def jwks(self) -> dict: ...


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _text(value: Any) -> Any:
    if isinstance(value, Enum):
        return str(value.value)
    return None if value is None else str(value)


def _decode_object(text: str, what: str) -> dict:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid {what} JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ValueError(f"invalid {what} JSON: expected an object")
    return value


def policy_to_json(policy: Any) -> dict:
    """The full JSON document describing a stored policy."""
    return {
        "status": "ok",
        "name": _field(policy, "name"),
        "description": _field(policy, "description"),
        "effect": _text(_field(policy, "effect")),
        "priority": _field(policy, "priority"),
        "version": _field(policy, "version"),
        "principal": _field(policy, "principal"),
        "resource": _field(policy, "resource"),
        "action": _field(policy, "action"),
        "conditions": _field(policy, "conditions"),
        "created_at": _field(policy, "created_at"),
        "updated_at": _field(policy, "updated_at"),
    }


async def dispatch(
    engine: _Engine,
    cmd: SentryCommand,
    auth_context: AuthContext | None = None,
) -> SentryResponse:
    """Check access for ``cmd``, run it on ``engine`` and return the reply.

    AUTH belongs to the connection layer and is answered with an error here.
    """
    try:
        check_dispatch_acl(auth_context, cmd.acl_requirement())
    except AclError as exc:
        return SentryResponse.error(exc)

    actor = auth_context.actor if auth_context is not None else "anonymous"
    try:
        return SentryResponse.ok(await _run(engine, cmd, actor))
    except Exception as exc:  # engine failures become error replies
        return SentryResponse.error(exc)


async def _run(engine: _Engine, cmd: SentryCommand, actor: str) -> Any:
    match cmd.kind:
        case CommandKind.AUTH:
            raise RuntimeError("AUTH must be handled at the connection layer")

        case CommandKind.POLICY_CREATE:
            policy = _decode_object(cmd.policy_json, "policy")
            policy["name"] = cmd.name
            now = int(time.time())
            if not policy.get("created_at"):
                policy["created_at"] = now
            policy["updated_at"] = now
            created = await engine.policy_create(policy, actor)
            return {
                "status": "ok",
                "name": _field(created, "name"),
                "effect": _text(_field(created, "effect")),
                "priority": _field(created, "priority"),
                "version": _field(created, "version"),
            }

        case CommandKind.POLICY_GET:
            return policy_to_json(engine.policy_get(cmd.name))

        case CommandKind.POLICY_LIST:
            names = list(engine.policy_list())
            return {"status": "ok", "count": len(names), "policies": names}

        case CommandKind.POLICY_DELETE:
            await engine.policy_delete(cmd.name, actor)
            return {"status": "ok"}

        case CommandKind.POLICY_HISTORY:
            entries = [policy_to_json(p) for p in await engine.policy_history(cmd.name)]
            return {
                "status": "ok",
                "name": cmd.name,
                "count": len(entries),
                "versions": entries,
            }

        case CommandKind.POLICY_UPDATE:
            updates = _decode_object(cmd.policy_json, "policy")
            updated = await engine.policy_update(cmd.name, updates, actor)
            return {
                "status": "ok",
                "name": _field(updated, "name"),
                "effect": _text(_field(updated, "effect")),
                "priority": _field(updated, "priority"),
                "version": _field(updated, "version"),
                "updated_at": _field(updated, "updated_at"),
            }

        case CommandKind.EVALUATE:
            request = _decode_object(cmd.request_json, "evaluation request")
            signed = await engine.evaluate_request(request)
            return {
                "status": "ok",
                "decision": _text(_field(signed, "decision")),
                "token": _field(signed, "token"),
                "matched_policy": _field(signed, "matched_policy"),
                "cache_until": _field(signed, "cache_until"),
            }

        case CommandKind.KEY_ROTATE:
            result = await engine.key_rotate(cmd.force, cmd.dryrun)
            return {
                "status": "ok",
                "rotated": _field(result, "rotated"),
                "key_version": _field(result, "key_version"),
                "previous_version": _field(result, "previous_version"),
            }

        case CommandKind.KEY_INFO:
            return {**engine.key_info(), "status": "ok"}

        case CommandKind.JWKS:
            return engine.jwks()

        case CommandKind.HEALTH:
            return {"status": "ok", "policy_count": engine.policy_count()}

        case CommandKind.PING:
            return "PONG"

        case CommandKind.COMMAND_LIST:
            return {"status": "ok", "commands": list(COMMAND_LIST)}

        case CommandKind.HELLO:
            return {
                "engine": ENGINE_NAME,
                "version": ENGINE_VERSION,
                "protocol": WIRE_PROTOCOL,
                "commands": list(COMMAND_LIST),
                "capabilities": [],
            }

    raise ValueError(f"unsupported command: {cmd.kind.value}")