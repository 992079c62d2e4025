"""Shared utility functions."""

import json
import logging
import os
import subprocess
import sys

from rich.console import Console
from rich.logging import RichHandler

from .errors import ProviderError

logger = logging.getLogger("dropletctl")

# doctl can hang on a stalled API connection; bound every invocation.
DEFAULT_CMD_TIMEOUT = 120


def setup_logging(level: int | str = logging.INFO) -> None:
    """Set up logging with Rich handler to stderr."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    rich_handler = RichHandler(
        console=Console(stderr=True),
        log_time_format="[%X]",
        show_path=False,
        markup=False,
    )
    rich_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.addHandler(rich_handler)

    for name, lvl, propagate in [
        ("httpx", logging.WARNING, True),
        ("httpcore", logging.WARNING, True),
        ("telegram", logging.WARNING, True),
        ("telegram.ext", logging.WARNING, True),
        ("apscheduler", logging.WARNING, True),
    ]:
        lg = logging.getLogger(name)
        for h in lg.handlers[:]:
            lg.removeHandler(h)
        lg.setLevel(lvl)
        lg.propagate = propagate


def log(msg: str) -> None:
    """Log info message."""
    logger.info(msg)


def warn(msg: str) -> None:
    """Log warning message."""
    logger.warning(msg)


def error(msg: str) -> None:
    """Log error message and exit."""
    logger.error(msg)
    sys.exit(1)


def run_cmd(
    *args,
    env: dict[str, str] | None = None,
    timeout: float | None = DEFAULT_CMD_TIMEOUT,
) -> str:
    """Execute local command and return stdout.

    :param env: Extra environment variables layered over the current environment
    :param timeout: Seconds before the command is killed
    :return: Stripped stdout
    :raises ProviderError: If the command is missing, times out, or exits non-zero
    """
    full_env = {**os.environ, **env} if env else None
    try:
        result = subprocess.run(
            args, capture_output=True, text=True, env=full_env, timeout=timeout
        )
    except FileNotFoundError as e:
        raise ProviderError(f"Command not found: '{args[0]}'") from e
    except subprocess.TimeoutExpired as e:
        raise ProviderError(f"Command timed out after {timeout}s: '{' '.join(args[:4])}'") from e
    if result.returncode != 0:
        raise ProviderError(f"Command failed: {result.stderr.strip()}")
    return result.stdout.strip()


def run_cmd_json(
    *args,
    env: dict[str, str] | None = None,
    timeout: float | None = DEFAULT_CMD_TIMEOUT,
) -> dict | list:
    """Execute command with -o json flag and parse output."""
    output = run_cmd(*args, "-o", "json", env=env, timeout=timeout)
    try:
        return json.loads(output) if output else []
    except json.JSONDecodeError as e:
        raise ProviderError(f"Invalid JSON from '{' '.join(args[:4])}': {e}") from e
