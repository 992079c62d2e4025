"""Type definitions for the doctl JSON payloads dropletctl consumes."""

from typing import TypedDict


class NetworkV4(TypedDict, total=False):
    ip_address: str
    type: str  # "public" or "private"


class Networks(TypedDict, total=False):
    v4: list[NetworkV4]


class Droplet(TypedDict, total=False):
    """Droplet as returned by ``doctl compute droplet list``."""

    id: int
    name: str
    status: str  # new, active, off, archive
    networks: Networks


class Snapshot(TypedDict, total=False):
    id: str
    name: str
    resource_id: str
    resource_type: str


class Project(TypedDict, total=False):
    id: str
    name: str


class Action(TypedDict, total=False):
    id: int
    status: str  # in-progress, completed, errored
    type: str


class DomainRecord(TypedDict, total=False):
    id: int
    type: str
    name: str
    data: str
    ttl: int


class StatusReport(TypedDict):
    """Read-only summary of the managed droplet and its snapshot."""

    droplet: str
    droplet_status: str | None
    ip: str | None
    snapshot: str
    snapshot_exists: bool
