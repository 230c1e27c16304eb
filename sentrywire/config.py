"""Server configuration loaded from a TOML document."""

from __future__ import annotations

import ipaddress
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1

DEFAULT_TCP_BIND = "0.0.0.0:6799"


class ConfigError(ValueError):
    """Raised when a configuration document is malformed."""


def _check_socket_addr(text: Any) -> str:
    if not isinstance(text, str):
        raise ConfigError(f"tcp_bind must be a string, got {text!r}")
    host, sep, port = text.rpartition(":")
    if not sep or not port.isdigit():
        raise ConfigError(f"invalid socket address: {text}")
    try:
        if host.startswith("[") and host.endswith("]"):
            ipaddress.IPv6Address(host[1:-1])
        else:
            ipaddress.IPv4Address(host)
    except ValueError as exc:
        raise ConfigError(f"invalid socket address: {text}") from exc
    if int(port) > 65535:
        raise ConfigError(f"invalid socket address: {text}")
    return text


def _section(data: dict, key: str) -> dict:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{key}] must be a table")
    return value


def _str(data: dict, key: str, default: str | None) -> str | None:
    value = data.get(key, default)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value


def _int(data: dict, key: str, default: int, low: int, high: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer")
    if not low <= value <= high:
        raise ConfigError(f"{key} out of range: {value}")
    return value


def _bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{key} must be a boolean")
    return value


def _str_list(data: dict, key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return list(value)


def _optional_table(data: dict, key: str) -> dict | None:
    value = data.get(key)
    if value is not None and not isinstance(value, dict):
        raise ConfigError(f"{key} must be a table")
    return value


@dataclass
class ServerConfig:
    """Listener settings."""

    tcp_bind: str = DEFAULT_TCP_BIND
    log_level: str | None = None
    tls: dict | None = None

    def __post_init__(self) -> None:
        _check_socket_addr(self.tcp_bind)

    @classmethod
    def _from_dict(cls, data: dict) -> ServerConfig:
        return cls(
            tcp_bind=_check_socket_addr(data.get("tcp_bind", DEFAULT_TCP_BIND)),
            log_level=_str(data, "log_level", None),
            tls=_optional_table(data, "tls"),
        )


@dataclass
class StoreConfig:
    """Where policies and keys are kept."""

    mode: str = "embedded"
    data_dir: Path = field(default_factory=lambda: Path("./sentry-data"))
    uri: str | None = None

    @classmethod
    def _from_dict(cls, data: dict) -> StoreConfig:
        return cls(
            mode=_str(data, "mode", "embedded"),
            data_dir=Path(_str(data, "data_dir", "./sentry-data")),
            uri=_str(data, "uri", None),
        )


@dataclass
class EngineConfig:
    """Signing and scheduling settings for the engine."""

    signing_algorithm: str = "ES256"
    rotation_days: int = 90
    drain_days: int = 30
    decision_ttl_secs: int = 300
    scheduler_interval_secs: int = 3600
    require_audit: bool = False

    @classmethod
    def _from_dict(cls, data: dict) -> EngineConfig:
        return cls(
            signing_algorithm=_str(data, "signing_algorithm", "ES256"),
            rotation_days=_int(data, "rotation_days", 90, 0, _U32_MAX),
            drain_days=_int(data, "drain_days", 30, 0, _U32_MAX),
            decision_ttl_secs=_int(data, "decision_ttl_secs", 300, 0, _U64_MAX),
            scheduler_interval_secs=_int(
                data, "scheduler_interval_secs", 3600, 0, _U64_MAX
            ),
            require_audit=_bool(data, "require_audit", False),
        )


@dataclass
class PolicySeedConfig:
    """A policy declared in the configuration file."""

    effect: str
    description: str = ""
    priority: int = 0
    principal_roles: list[str] = field(default_factory=list)
    resource_type: str = ""
    action_names: list[str] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, name: str, data: Any) -> PolicySeedConfig:
        if not isinstance(data, dict):
            raise ConfigError(f"[policies.{name}] must be a table")
        if "effect" not in data:
            raise ConfigError(f"[policies.{name}] is missing field `effect`")
        return cls(
            effect=_str(data, "effect", None),
            description=_str(data, "description", ""),
            priority=_int(data, "priority", 0, _I32_MIN, _I32_MAX),
            principal_roles=_str_list(data, "principal_roles"),
            resource_type=_str(data, "resource_type", ""),
            action_names=_str_list(data, "action_names"),
        )


@dataclass
class SentryServerConfig:
    """The whole server configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    auth: dict = field(default_factory=dict)
    policies: dict[str, PolicySeedConfig] = field(default_factory=dict)
    audit: dict | None = None

    @classmethod
    def from_dict(cls, data: dict) -> SentryServerConfig:
        """Build a configuration from already-decoded TOML data."""
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a table")
        policies = _section(data, "policies")
        return cls(
            server=ServerConfig._from_dict(_section(data, "server")),
            store=StoreConfig._from_dict(_section(data, "store")),
            engine=EngineConfig._from_dict(_section(data, "engine")),
            auth=dict(_section(data, "auth")),
            policies={
                name: PolicySeedConfig._from_dict(name, seed)
                for name, seed in policies.items()
            },
            audit=_optional_table(data, "audit"),
        )


def parse_config(text: str) -> SentryServerConfig:
    """Parse a TOML document into a configuration."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}") from exc
    return SentryServerConfig.from_dict(data)


def load_config(path: str | Path | None = None) -> SentryServerConfig:
    """Read the configuration file at ``path``, or the defaults when ``None``."""
    if path is None:
        return parse_config("")
    return parse_config(Path(path).read_text(encoding="utf-8"))