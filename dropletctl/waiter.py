"""Poll long-running DigitalOcean actions until they settle.

Both waiters block the calling thread. They sleep by waiting on the cancel
event, so setting it wakes them at once and they raise ``Cancelled``.
Without a timeout the wait is unbounded, matching how long DigitalOcean may
take to snapshot a large disk.
"""

import threading
import time

from .errors import Cancelled, ProviderError, WaitFailed, WaitTimeout
from .providers import DigitalOcean
from .types import Droplet

POLL_INTERVAL = 5


def _sleep(
    what: str,
    interval: float,
    deadline: float | None,
    cancel: threading.Event | None,
) -> None:
    if cancel is not None and cancel.is_set():
        raise Cancelled(f"cancelled while waiting for {what}")
    if deadline is not None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise WaitTimeout(f"timed out waiting for {what}")
        interval = min(interval, remaining)
    if cancel is None:
        time.sleep(interval)
    elif cancel.wait(interval):
        raise Cancelled(f"cancelled while waiting for {what}")


def wait_for_action(
    client: DigitalOcean,
    droplet_id: int,
    action_id: int,
    *,
    interval: float | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> None:
    """Block until a droplet action is completed.

    :param interval: Seconds between polls (default: POLL_INTERVAL)
    :param timeout: Give up after this many seconds (None waits forever)
    :param cancel: Event that aborts the wait when set
    :raises WaitFailed: If fetching the action fails or the action errors
    :raises WaitTimeout: If ``timeout`` elapses first
    :raises Cancelled: If ``cancel`` is set
    """
    what = f"action {action_id}"
    deadline = time.monotonic() + timeout if timeout is not None else None
    while True:
        try:
            action = client.get_action(droplet_id, action_id)
        except ProviderError as e:
            raise WaitFailed(f"failed to run action: {e}") from e

        status = action.get("status")
        if status == "completed":
            return
        if status == "errored":
            raise WaitFailed(f"action {action_id} ({action.get('type', '?')}) errored")

        _sleep(what, POLL_INTERVAL if interval is None else interval, deadline, cancel)


def wait_for_droplet_status(
    client: DigitalOcean,
    droplet_id: int,
    status: str,
    *,
    interval: float | None = None,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> Droplet:
    """Block until the droplet reports ``status``; return the fresh droplet."""
    what = f"droplet {droplet_id} to become '{status}'"
    deadline = time.monotonic() + timeout if timeout is not None else None
    while True:
        try:
            droplet = client.get_droplet(droplet_id)
        except ProviderError as e:
            raise WaitFailed(f"failed to get droplet: {e}") from e

        if droplet.get("status") == status:
            return droplet

        _sleep(what, POLL_INTERVAL if interval is None else interval, deadline, cancel)
