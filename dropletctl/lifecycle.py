"""The up and down workflows for the managed droplet.

Each workflow is a fixed sequence of guarded steps. The first failing step
raises and the rest are skipped; nothing done earlier is rolled back, so a
failure late in ``up`` can leave a live droplet without its DNS record. The
raised error says which step failed.

Workflows never exit the process. The CLI treats their errors as fatal and
the bot reports them to the chat.
"""

import threading
from collections.abc import Callable

from .config import DownConfig, UpConfig
from .errors import (
    AlreadyExists,
    AssignFailed,
    Cancelled,
    CreateFailed,
    DeleteFailed,
    DNSCreateFailed,
    DNSDeleteFailed,
    InvalidSnapshotID,
    LookupFailed,
    NoPublicIP,
    NotFound,
    ProviderError,
    ResourceStillExists,
    ShutdownFailed,
    SnapshotCleanupFailed,
    SnapshotFailed,
    SnapshotVerificationFailed,
)
from .locator import find_droplet, find_project, find_snapshot
from .providers import DigitalOcean, public_ipv4
from .types import StatusReport
from .utils import log
from .waiter import wait_for_action, wait_for_droplet_status

Notify = Callable[[str], None]

RECORD_TTL = 3600


def _checkpoint(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise Cancelled("cancelled")


def up(
    client: DigitalOcean,
    config: UpConfig,
    notify: Notify = log,
    *,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> None:
    """Recreate the droplet from its snapshot and point the host record at it.

    :param notify: Receives one human-readable line per finished step
    :param cancel: Aborts the workflow at the next step or poll when set
    :param timeout: Upper bound in seconds for waiting on the new droplet
    :raises LifecycleError: On the first failing step
    """
    snapshot = find_snapshot(client, config.snapshot_name)
    if snapshot is None:
        raise NotFound(f"failed to find snapshot: {config.snapshot_name}")

    project = find_project(client, config.project_name)
    if project is None:
        raise NotFound(f"failed to find project: {config.project_name}")

    if find_droplet(client, config.droplet_name) is not None:
        raise AlreadyExists(f"droplet already exists: {config.droplet_name}")

    try:
        image_id = int(snapshot["id"])
    except (KeyError, TypeError, ValueError):
        raise InvalidSnapshotID(
            f"failed to convert snapshot ID: {snapshot.get('id')}"
        ) from None

    _checkpoint(cancel)
    notify(f"Creating droplet from snapshot: {snapshot['name']}")
    try:
        droplet = client.create_droplet(
            config.droplet_name, config.region, config.size, image_id
        )
    except ProviderError as e:
        raise CreateFailed(f"failed to create droplet: {e}") from e

    droplet = wait_for_droplet_status(
        client, droplet["id"], "active", timeout=timeout, cancel=cancel
    )
    notify(f"Droplet has been created: {droplet['name']}")

    _checkpoint(cancel)
    try:
        client.assign_droplet(project["id"], droplet["id"])
    except ProviderError as e:
        raise AssignFailed(f"failed to assign droplet to project: {e}") from e
    notify(f"Droplet became a part of project: {config.project_name}")

    ip = public_ipv4(droplet)
    if not ip:
        raise NoPublicIP(f"failed to get public IPv4 of the droplet: {droplet['name']}")

    _checkpoint(cancel)
    try:
        client.create_record(
            config.domain_name, "A", config.record_name, ip, RECORD_TTL
        )
    except ProviderError as e:
        raise DNSCreateFailed(f"failed to create 'A' record: {e}") from e
    notify(f"'A' record has been created: {config.host_name} -> {ip}")

    try:
        client.delete_snapshot(snapshot["id"])
    except ProviderError as e:
        raise SnapshotCleanupFailed(
            f"droplet is up but failed to delete snapshot: {e}"
        ) from e
    notify(f"Snapshot has been deleted: {snapshot['name']}")


def down(
    client: DigitalOcean,
    config: DownConfig,
    notify: Notify = log,
    *,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> None:
    """Snapshot the droplet, destroy it and drop its host record.

    The snapshot is confirmed to exist before the droplet is deleted, so a
    provider failure never leaves neither a droplet nor a backup.

    :raises LifecycleError: On the first failing step
    """
    droplet = find_droplet(client, config.droplet_name)
    if droplet is None:
        raise NotFound(f"unable to find droplet: {config.droplet_name}")

    if find_snapshot(client, config.snapshot_name) is not None:
        raise AlreadyExists(f"snapshot already exists: {config.snapshot_name}")

    notify(f"Found droplet: {droplet['name']}")

    if droplet.get("status") != "off":
        _checkpoint(cancel)
        notify("Shutting down droplet")
        try:
            action = client.shutdown_droplet(droplet["id"])
        except ProviderError as e:
            raise ShutdownFailed(f"failed to shutdown droplet: {e}") from e
        wait_for_action(client, droplet["id"], action["id"], timeout=timeout, cancel=cancel)
    notify("Droplet is down")

    _checkpoint(cancel)
    notify(f"Creating snapshot: {config.snapshot_name}")
    try:
        action = client.snapshot_droplet(droplet["id"], config.snapshot_name)
    except ProviderError as e:
        raise SnapshotFailed(f"failed to create snapshot: {e}") from e
    wait_for_action(client, droplet["id"], action["id"], timeout=timeout, cancel=cancel)

    if find_snapshot(client, config.snapshot_name) is None:
        raise SnapshotVerificationFailed(
            f"unable to find snapshot: {config.snapshot_name}"
        )
    notify("Snapshot has been created")

    _checkpoint(cancel)
    notify("Exterminating droplet")
    try:
        client.delete_droplet(droplet["id"])
    except ProviderError as e:
        raise DeleteFailed(f"unable to exterminate droplet: {e}") from e

    if find_droplet(client, config.droplet_name) is not None:
        raise ResourceStillExists(f"droplet still exists: {config.droplet_name}")
    notify("Droplet has been exterminated")

    remove_host_record(client, config.domain_name, config.host_name, notify)


def remove_host_record(
    client: DigitalOcean, domain: str, host_name: str, notify: Notify = log
) -> bool:
    """Delete the record whose full name is ``host_name``, if there is one.

    :return: True if a record was deleted, False if none matched
    """
    try:
        records = client.list_records(domain)
    except ProviderError as e:
        raise LookupFailed(f"failed to get domain records: {e}") from e

    record = next(
        (r for r in records if f"{r.get('name')}.{domain}" == host_name), None
    )
    if record is None:
        return False

    try:
        client.delete_record(domain, record["id"])
    except ProviderError as e:
        raise DNSDeleteFailed(f"failed to delete record {host_name}: {e}") from e
    notify(f"Record has been removed: {host_name}")
    return True


def status(client: DigitalOcean, config: UpConfig | DownConfig) -> StatusReport:
    """Report whether the droplet and its snapshot currently exist."""
    droplet = find_droplet(client, config.droplet_name)
    snapshot = find_snapshot(client, config.snapshot_name)
    return {
        "droplet": config.droplet_name,
        "droplet_status": droplet.get("status") if droplet else None,
        "ip": public_ipv4(droplet) if droplet else None,
        "snapshot": config.snapshot_name,
        "snapshot_exists": snapshot is not None,
    }


def format_status(report: StatusReport) -> str:
    if report["droplet_status"] is None:
        droplet_line = f"Droplet '{report['droplet']}': not found"
    else:
        droplet_line = (
            f"Droplet '{report['droplet']}': {report['droplet_status']}"
            f" ({report['ip'] or 'no public IP'})"
        )
    snapshot_state = "present" if report["snapshot_exists"] else "not found"
    return f"{droplet_line}\nSnapshot '{report['snapshot']}': {snapshot_state}"
