"""Workflow configuration loaded from the environment and ``.env``."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .errors import ConfigError

# Older deployments named the droplet variable after the game server it hosted.
LEGACY_NAMES = {"DROPLET_NAME": "COPROSERVER_NAME"}


@dataclass(frozen=True)
class UpConfig:
    project_name: str
    droplet_name: str
    domain_name: str
    host_name: str
    snapshot_name: str
    region: str
    size: str

    @property
    def record_name(self) -> str:
        """Host name relative to the domain, as DigitalOcean stores it."""
        return self.host_name.removesuffix(f".{self.domain_name}")


@dataclass(frozen=True)
class DownConfig:
    droplet_name: str
    snapshot_name: str
    domain_name: str
    host_name: str


@dataclass(frozen=True)
class BotConfig:
    token: str
    target_chat: int
    up: UpConfig
    down: DownConfig


def require_env(name: str) -> str:
    """:raises ConfigError: If the variable (or its legacy alias) is unset or empty"""
    value = os.getenv(name)
    if not value and name in LEGACY_NAMES:
        value = os.getenv(LEGACY_NAMES[name])
    if not value:
        raise ConfigError(f"{name} is missing")
    return value


def load_token() -> str:
    load_dotenv()
    return require_env("DIGITALOCEAN_TOKEN")


def load_down_config() -> DownConfig:
    load_dotenv()
    return DownConfig(
        droplet_name=require_env("DROPLET_NAME"),
        snapshot_name=require_env("SNAPSHOT_NAME"),
        domain_name=require_env("DOMAIN_NAME"),
        host_name=require_env("HOST_NAME"),
    )


def load_up_config() -> UpConfig:
    down = load_down_config()
    return UpConfig(
        project_name=require_env("PROJECT_NAME"),
        droplet_name=down.droplet_name,
        domain_name=down.domain_name,
        host_name=down.host_name,
        snapshot_name=down.snapshot_name,
        region=require_env("REGION"),
        size=require_env("SIZE"),
    )


def load_bot_config() -> BotConfig:
    up = load_up_config()
    token = require_env("TELEGRAM_TOKEN")
    chat = require_env("TELEGRAM_CHAT_ID")
    try:
        target_chat = int(chat)
    except ValueError:
        raise ConfigError(f"TELEGRAM_CHAT_ID must be an integer, got '{chat}'") from None
    return BotConfig(
        token=token,
        target_chat=target_chat,
        up=up,
        down=load_down_config(),
    )
