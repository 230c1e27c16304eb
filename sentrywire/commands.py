"""Command model and argument parser for the Sentry wire protocol."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from sentrywire.acl import AclRequirement, Scope


class CommandKind(Enum):
    """Every command the engine understands, valued by its wire name."""

    AUTH = "AUTH"
    POLICY_CREATE = "POLICY CREATE"
    POLICY_GET = "POLICY GET"
    POLICY_LIST = "POLICY LIST"
    POLICY_DELETE = "POLICY DELETE"
    POLICY_HISTORY = "POLICY HISTORY"
    POLICY_UPDATE = "POLICY UPDATE"
    EVALUATE = "EVALUATE"
    KEY_ROTATE = "KEY ROTATE"
    KEY_INFO = "KEY INFO"
    JWKS = "JWKS"
    HEALTH = "HEALTH"
    PING = "PING"
    COMMAND_LIST = "COMMAND LIST"
    HELLO = "HELLO"


_PUBLIC = frozenset(
    {
        CommandKind.AUTH,
        CommandKind.HEALTH,
        CommandKind.PING,
        CommandKind.COMMAND_LIST,
        CommandKind.HELLO,
        CommandKind.KEY_INFO,
        CommandKind.JWKS,
    }
)
_ADMIN = frozenset(
    {
        CommandKind.POLICY_CREATE,
        CommandKind.POLICY_DELETE,
        CommandKind.POLICY_UPDATE,
        CommandKind.KEY_ROTATE,
    }
)
_POLICY_READ = frozenset(
    {CommandKind.POLICY_GET, CommandKind.POLICY_HISTORY, CommandKind.POLICY_LIST}
)


@dataclass(frozen=True)
class SentryCommand:
    """A parsed command with the arguments its kind carries."""

    kind: CommandKind
    name: str | None = None
    policy_json: str | None = None
    request_json: str | None = None
    token: str | None = None
    force: bool = False
    dryrun: bool = False

    def acl_requirement(self) -> AclRequirement:
        """The access requirement for this command."""
        if self.kind in _PUBLIC:
            return AclRequirement()
        if self.kind in _ADMIN:
            return AclRequirement(admin=True)
        if self.kind in _POLICY_READ:
            return AclRequirement(namespace="sentry.policies.*", scope=Scope.READ)
        return AclRequirement(namespace="sentry.evaluate.*", scope=Scope.READ)


def parse_command(args: Sequence[str]) -> SentryCommand:
    """Parse wire arguments into a command; raise ValueError when malformed."""
    if not args:
        raise ValueError("empty command")

    verb = args[0].upper()
    if verb == "AUTH":
        if len(args) < 2:
            raise ValueError("usage: AUTH <token>")
        return SentryCommand(CommandKind.AUTH, token=args[1])
    if verb == "POLICY":
        return _parse_policy(args)
    if verb == "EVALUATE":
        if len(args) < 2:
            raise ValueError("usage: EVALUATE <json>")
        return SentryCommand(CommandKind.EVALUATE, request_json=args[1])
    if verb == "KEY":
        return _parse_key(args)

    simple = {
        "JWKS": CommandKind.JWKS,
        "HEALTH": CommandKind.HEALTH,
        "PING": CommandKind.PING,
        "COMMAND": CommandKind.COMMAND_LIST,
        "HELLO": CommandKind.HELLO,
    }
    if verb in simple:
        return SentryCommand(simple[verb])
    raise ValueError(f"unknown command: {args[0]}")


def _parse_policy(args: Sequence[str]) -> SentryCommand:
    if len(args) < 2:
        raise ValueError("usage: POLICY <CREATE|GET|LIST|DELETE|UPDATE> ...")

    sub = args[1].upper()
    if sub in ("CREATE", "UPDATE"):
        if len(args) < 4:
            raise ValueError(f"usage: POLICY {sub} <name> <json>")
        kind = CommandKind.POLICY_CREATE if sub == "CREATE" else CommandKind.POLICY_UPDATE
        return SentryCommand(kind, name=args[2], policy_json=args[3])
    if sub == "LIST":
        return SentryCommand(CommandKind.POLICY_LIST)

    named = {
        "GET": CommandKind.POLICY_GET,
        "HISTORY": CommandKind.POLICY_HISTORY,
        "DELETE": CommandKind.POLICY_DELETE,
    }
    if sub in named:
        if len(args) < 3:
            raise ValueError(f"usage: POLICY {sub} <name>")
        return SentryCommand(named[sub], name=args[2])
    raise ValueError(f"unknown POLICY subcommand: {args[1]}")


def _parse_key(args: Sequence[str]) -> SentryCommand:
    if len(args) < 2:
        raise ValueError("usage: KEY <ROTATE|INFO>")

    sub = args[1].upper()
    if sub == "ROTATE":
        return SentryCommand(
            CommandKind.KEY_ROTATE,
            force=_has_flag(args, "FORCE"),
            dryrun=_has_flag(args, "DRYRUN"),
        )
    if sub == "INFO":
        return SentryCommand(CommandKind.KEY_INFO)
    raise ValueError(f"unknown KEY subcommand: {args[1]}")


def _has_flag(args: Sequence[str], flag: str) -> bool:
    wanted = flag.upper()
    return any(a.upper() == wanted for a in args)