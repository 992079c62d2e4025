"""dropletctl - park a DigitalOcean droplet as a snapshot and bring it back."""

from .config import BotConfig, DownConfig, UpConfig
from .dispatcher import ChatCommand, Dispatcher
from .errors import DropletctlError, LifecycleError
from .lifecycle import down, remove_host_record, status, up
from .providers import DigitalOcean, DigitalOceanProvider
from .utils import error, log, setup_logging, warn

__all__ = [
    "BotConfig",
    "ChatCommand",
    "DigitalOcean",
    "DigitalOceanProvider",
    "Dispatcher",
    "DownConfig",
    "DropletctlError",
    "LifecycleError",
    "UpConfig",
    "down",
    "error",
    "log",
    "remove_host_record",
    "setup_logging",
    "status",
    "up",
    "warn",
]
