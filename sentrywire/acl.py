"""Access-control primitives used to gate command dispatch."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum


class Scope(Enum):
    """A permission scope that a grant can carry."""

    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class AclRequirement:
    """What a command needs from the caller.

    With no arguments the requirement is empty: anyone may run the command.
    ``admin=True`` demands a platform identity. Setting ``namespace`` and
    ``scope`` demands a matching grant.
    """

    admin: bool = False
    namespace: str | None = None
    scope: Scope | None = None
    tenant_override: str | None = None

    def __post_init__(self) -> None:
        if self.admin and self.namespace is not None:
            raise ValueError("a requirement is either admin or namespace, not both")
        if (self.namespace is None) != (self.scope is None):
            raise ValueError("namespace and scope must be given together")

    @property
    def is_none(self) -> bool:
        return not self.admin and self.namespace is None


@dataclass(frozen=True)
class Grant:
    """Scopes granted on a namespace pattern such as ``sentry.policies.*``."""

    namespace: str
    scopes: tuple[Scope, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "scopes", tuple(Scope(s) for s in self.scopes))

    def covers(self, namespace: str) -> bool:
        """Whether this grant's namespace pattern covers ``namespace``."""
        if self.namespace == namespace or self.namespace == "*":
            return True
        if self.namespace.endswith("*"):
            return namespace.startswith(self.namespace[:-1])
        return False


class AclError(PermissionError):
    """Raised when a caller does not satisfy a command's requirement."""


@dataclass(frozen=True)
class AuthContext:
    """The identity attached to an authenticated connection."""

    tenant_id: str
    actor: str
    is_platform: bool = False
    grants: tuple[Grant, ...] = field(default_factory=tuple)
    expires_at: float | None = None

    @classmethod
    def tenant(cls, tenant, actor, grants, expires_at=None) -> AuthContext:
        """A tenant-scoped identity limited to its grants."""
        return cls(
            tenant_id=tenant,
            actor=actor,
            is_platform=False,
            grants=tuple(grants),
            expires_at=expires_at,
        )

    @classmethod
    def platform(cls, tenant, actor) -> AuthContext:
        """A platform (administrative) identity with every permission."""
        return cls(tenant_id=tenant, actor=actor, is_platform=True)

    def has_scope(self, namespace: str, scope: Scope) -> bool:
        if self.is_platform:
            return True
        return any(g.covers(namespace) and scope in g.scopes for g in self.grants)

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (time.time() if now is None else now)


def check_dispatch_acl(auth_context: AuthContext | None, requirement: AclRequirement) -> None:
    """Raise :class:`AclError` unless ``auth_context`` satisfies ``requirement``.

    A missing context means authentication is not enforced and everything
    is allowed.
    """
    if requirement.is_none or auth_context is None:
        return
    if auth_context.is_expired():
        raise AclError("access denied: token expired")
    if requirement.admin:
        if not auth_context.is_platform:
            raise AclError("access denied: admin required")
        return
    if (
        requirement.tenant_override is not None
        and not auth_context.is_platform
        and requirement.tenant_override != auth_context.tenant_id
    ):
        raise AclError(
            f"access denied: tenant {auth_context.tenant_id} cannot act for "
            f"{requirement.tenant_override}"
        )
    assert requirement.namespace is not None and requirement.scope is not None
    if not auth_context.has_scope(requirement.namespace, requirement.scope):
        raise AclError(
            f"access denied: {requirement.scope.value} on {requirement.namespace} required"
        )