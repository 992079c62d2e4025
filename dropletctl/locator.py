"""Find provider resources by exact name."""

from collections.abc import Callable

from .errors import LookupFailed, ProviderError
from .providers import DigitalOcean
from .types import Droplet, Project, Snapshot


def find_by_name(fetch: Callable[[], list[dict]], name: str, kind: str) -> dict | None:
    """Return the first item of ``fetch()`` whose name is exactly ``name``.

    :param fetch: Lists the whole collection in one call
    :param name: Name to match
    :param kind: Collection name used in the error message ("droplets", ...)
    :return: Matching item, or None if absent
    :raises LookupFailed: If the listing itself fails
    """
    try:
        items = fetch()
    except ProviderError as e:
        raise LookupFailed(f"failed to get {kind}: {e}") from e
    return next((item for item in items if item.get("name") == name), None)


def find_droplet(client: DigitalOcean, name: str) -> Droplet | None:
    return find_by_name(client.list_droplets, name, "droplets")


def find_snapshot(client: DigitalOcean, name: str) -> Snapshot | None:
    return find_by_name(client.list_snapshots, name, "snapshots")


def find_project(client: DigitalOcean, name: str) -> Project | None:
    return find_by_name(client.list_projects, name, "projects")
