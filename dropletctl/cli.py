#!/usr/bin/env python3
"""Park a DigitalOcean droplet as a snapshot and bring it back on demand.

Prerequisites: doctl installed, a .env (or environment) with DIGITALOCEAN_TOKEN,
DROPLET_NAME, SNAPSHOT_NAME, DOMAIN_NAME and HOST_NAME.

Usage: uv run dropletctl <command> [options]

Examples:
    uv run dropletctl up
    uv run dropletctl down --timeout 1800
    uv run dropletctl status
    uv run dropletctl bot
"""

import asyncio

import cyclopts
from rich import print
from telegram.error import InvalidToken

from . import lifecycle
from .bot import TelegramBot
from .config import load_bot_config, load_down_config, load_token, load_up_config
from .errors import DropletctlError
from .providers import DigitalOceanProvider
from .utils import error, log, setup_logging, warn

app = cyclopts.App(
    name="dropletctl",
    help="Bring a droplet up from its snapshot or park it as one",
    sort_key=None,
)


def _provider() -> DigitalOceanProvider:
    return DigitalOceanProvider(load_token())


@app.default
def usage(*tokens: str):
    """Print usage; also used for unknown commands."""
    if tokens:
        warn(f"Unknown command '{tokens[0]}'")
    app.help_print()


@app.command(name="up", sort_key=1)
def up_command(*, timeout: float | None = None, log_level: str = "INFO"):
    """Create the droplet from its snapshot, add the DNS record, delete the snapshot.

    :param timeout: Seconds to wait for the droplet to become active (default: no limit)
    :param log_level: Logging level
    """
    setup_logging(log_level)
    try:
        config = load_up_config()
        lifecycle.up(_provider(), config, timeout=timeout)
    except DropletctlError as e:
        error(str(e))
    log(f"Droplet '{config.droplet_name}' is up at '{config.host_name}'")


@app.command(name="down", sort_key=2)
def down_command(*, timeout: float | None = None, log_level: str = "INFO"):
    """Snapshot the droplet, destroy it, and remove its DNS record.

    :param timeout: Seconds to wait for each shutdown/snapshot action (default: no limit)
    :param log_level: Logging level
    """
    setup_logging(log_level)
    try:
        config = load_down_config()
        lifecycle.down(_provider(), config, timeout=timeout)
    except DropletctlError as e:
        error(str(e))
    log(f"Droplet '{config.droplet_name}' is parked as '{config.snapshot_name}'")


@app.command(name="status", sort_key=3)
def status_command(*, log_level: str = "INFO"):
    """Show whether the droplet and its snapshot exist.

    :param log_level: Logging level
    """
    setup_logging(log_level)
    try:
        report = lifecycle.status(_provider(), load_down_config())
    except DropletctlError as e:
        error(str(e))
    print(lifecycle.format_status(report))


@app.command(name="bot", sort_key=4)
def bot_command(*, timeout: float | None = None, log_level: str = "INFO"):
    """Run the Telegram bot that accepts /up, /down, /status and /ping.

    :param timeout: Seconds to wait for each provider action (default: no limit)
    :param log_level: Logging level
    """
    setup_logging(log_level)
    try:
        config = load_bot_config()
        bot = TelegramBot(config, _provider(), timeout=timeout)
        asyncio.run(bot.run())
    except DropletctlError as e:
        error(str(e))
    except InvalidToken as e:
        error(f"Telegram rejected the bot token: {e}")


if __name__ == "__main__":
    app()
