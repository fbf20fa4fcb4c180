"""YAML configuration for the chat, analytics and bot services."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence, TypeVar

import yaml

T = TypeVar("T")


class ConfigNotFoundError(FileNotFoundError):
    """No configuration file could be located."""


def _section(data: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("configuration must be a mapping")
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, Mapping):
        raise ValueError(f"field `{key}` must be a mapping")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _port(data: Mapping[str, Any], key: str = "port") -> int:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 65535:
        raise ValueError(f"field `{key}` must be an integer between 0 and 65535")
    return value


def _load(
    paths: Sequence[str], env_var: str, build: Callable[[Any], T]
) -> T:
    for candidate in paths:
        try:
            with open(candidate, encoding="utf-8") as fh:
                return build(yaml.safe_load(fh))
        except OSError:
            continue
    env_path = os.environ.get(env_var)
    if env_path is not None:
        with open(env_path, encoding="utf-8") as fh:
            return build(yaml.safe_load(fh))
    raise ConfigNotFoundError("No config file found")


@dataclass
class AuthConfig:
    """Key material used to sign and verify tokens."""

    sk: str
    pk: str

    @classmethod
    def _from(cls, data: Mapping[str, Any]) -> "AuthConfig":
        return cls(sk=_str(data, "sk"), pk=_str(data, "pk"))


@dataclass
class ChatServerSettings:
    host: str
    port: int
    db_url: str
    base_dir: Path


@dataclass
class ChatConfig:
    """Configuration of the chat service."""

    server: ChatServerSettings
    auth: AuthConfig

    @classmethod
    def from_mapping(cls, data: Any) -> "ChatConfig":
        server = _section(data, "server")
        auth = _section(data, "auth")
        return cls(
            server=ChatServerSettings(
                host=_str(server, "host"),
                port=_port(server),
                db_url=_str(server, "db_url"),
                base_dir=Path(_str(server, "base_dir")),
            ),
            auth=AuthConfig._from(auth),
        )

    @classmethod
    def try_load(cls) -> "ChatConfig":
        """Load from the first known location, else from $CHAT_CONFIG."""
        return _load(
            ["../chat_server/app.yaml", "chat_server/app.yaml", "/app/app.yaml"],
            "CHAT_CONFIG",
            cls.from_mapping,
        )


@dataclass
class AnalyticsServerSettings:
    host: str
    port: int
    db_url: str
    db_name: str
    user: str
    password: str
    base_dir: Path


@dataclass
class AnalyticsConfig:
    """Configuration of the analytics service."""

    server: AnalyticsServerSettings
    auth: AuthConfig

    @classmethod
    def from_mapping(cls, data: Any) -> "AnalyticsConfig":
        server = _section(data, "server")
        auth = _section(data, "auth")
        return cls(
            server=AnalyticsServerSettings(
                host=_str(server, "host"),
                port=_port(server),
                db_url=_str(server, "db_url"),
                db_name=_str(server, "db_name"),
                user=_str(server, "user"),
                password=_str(server, "password"),
                base_dir=Path(_str(server, "base_dir")),
            ),
            auth=AuthConfig._from(auth),
        )

    @classmethod
    def try_load(cls) -> "AnalyticsConfig":
        """Load from the first known location, else from $ANALYTICS_CONFIG."""
        return _load(
            ["../analytics_server/analytics.yaml", "/app/analytics.yaml"],
            "ANALYTICS_CONFIG",
            cls.from_mapping,
        )


@dataclass
class BotServerSettings:
    host: str
    port: int
    db_url: str
    base_dir: Path


@dataclass
class BotConfig:
    """Configuration of the bot service."""

    server: BotServerSettings

    @classmethod
    def from_mapping(cls, data: Any) -> "BotConfig":
        server = _section(data, "server")
        return cls(
            server=BotServerSettings(
                host=_str(server, "host"),
                port=_port(server),
                db_url=_str(server, "db_url"),
                base_dir=Path(_str(server, "base_dir")),
            )
        )

    @classmethod
    def try_load(cls) -> "BotConfig":
        """Load from the first known location, else from $BOT_CONFIG."""
        return _load(
            ["../bot_server/bot.yaml", "bot_server/bot.yaml", "/app/bot.yaml"],
            "BOT_CONFIG",
            cls.from_mapping,
        )