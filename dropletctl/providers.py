"""DigitalOcean access through the doctl CLI."""

from typing import Protocol

from .errors import ProviderError
from .types import Action, DomainRecord, Droplet, Project, Snapshot
from .utils import DEFAULT_CMD_TIMEOUT, run_cmd, run_cmd_json


def public_ipv4(droplet: Droplet) -> str | None:
    """:return: The droplet's public IPv4 address, or None if it has none yet"""
    return next(
        (
            n["ip_address"]
            for n in droplet.get("networks", {}).get("v4", [])
            if n.get("type") == "public"
        ),
        None,
    )


class DigitalOcean(Protocol):
    """Operations the lifecycle workflows need from the provider.

    Implementations raise ``ProviderError`` on any failure.
    """

    def list_droplets(self) -> list[Droplet]: ...

    def get_droplet(self, droplet_id: int) -> Droplet: ...

    def create_droplet(
        self, name: str, region: str, size: str, image_id: int
    ) -> Droplet: ...

    def delete_droplet(self, droplet_id: int) -> None: ...

    def shutdown_droplet(self, droplet_id: int) -> Action: ...

    def snapshot_droplet(self, droplet_id: int, snapshot_name: str) -> Action: ...

    def get_action(self, droplet_id: int, action_id: int) -> Action: ...

    def list_snapshots(self) -> list[Snapshot]: ...

    def delete_snapshot(self, snapshot_id: str) -> None: ...

    def list_projects(self) -> list[Project]: ...

    def assign_droplet(self, project_id: str, droplet_id: int) -> None: ...

    def list_records(self, domain: str) -> list[DomainRecord]: ...

    def create_record(
        self, domain: str, record_type: str, name: str, data: str, ttl: int
    ) -> DomainRecord: ...

    def delete_record(self, domain: str, record_id: int) -> None: ...


class DigitalOceanProvider:
    """Stateless doctl wrapper; safe to share between threads.

    The token is handed to doctl through ``DIGITALOCEAN_ACCESS_TOKEN`` so it
    never shows up in the process list.
    """

    def __init__(self, token: str, timeout: float | None = DEFAULT_CMD_TIMEOUT):
        self._env = {"DIGITALOCEAN_ACCESS_TOKEN": token}
        self.timeout = timeout

    def _run(self, *args) -> str:
        return run_cmd("doctl", *args, env=self._env, timeout=self.timeout)

    def _json(self, *args) -> list:
        result = run_cmd_json("doctl", *args, env=self._env, timeout=self.timeout)
        if isinstance(result, dict):
            return [result]
        return result

    def _one(self, *args) -> dict:
        items = self._json(*args)
        if not items:
            raise ProviderError(f"Empty response from 'doctl {' '.join(args[:3])}'")
        return items[0]

    def validate_auth(self) -> None:
        """Validate the DigitalOcean token via doctl.

        :raises ProviderError: If doctl is missing or the token is rejected
        """
        self._run("account", "get")

    def list_droplets(self) -> list[Droplet]:
        return self._json("compute", "droplet", "list")

    def get_droplet(self, droplet_id: int) -> Droplet:
        return self._one("compute", "droplet", "get", str(droplet_id))

    def create_droplet(
        self, name: str, region: str, size: str, image_id: int
    ) -> Droplet:
        """Request a new droplet from an image; returns without waiting.

        :param image_id: Numeric image ID (a snapshot ID works here)
        :return: The droplet as reported right after the create request
        """
        return self._one(
            "compute",
            "droplet",
            "create",
            name,
            "--region",
            region,
            "--size",
            size,
            "--image",
            str(image_id),
        )

    def delete_droplet(self, droplet_id: int) -> None:
        self._run("compute", "droplet", "delete", str(droplet_id), "--force")

    def shutdown_droplet(self, droplet_id: int) -> Action:
        return self._one("compute", "droplet-action", "shutdown", str(droplet_id))

    def snapshot_droplet(self, droplet_id: int, snapshot_name: str) -> Action:
        return self._one(
            "compute",
            "droplet-action",
            "snapshot",
            str(droplet_id),
            "--snapshot-name",
            snapshot_name,
        )

    def get_action(self, droplet_id: int, action_id: int) -> Action:
        return self._one(
            "compute",
            "droplet-action",
            "get",
            str(droplet_id),
            "--action-id",
            str(action_id),
        )

    def list_snapshots(self) -> list[Snapshot]:
        return self._json("compute", "snapshot", "list", "--resource", "droplet")

    def delete_snapshot(self, snapshot_id: str) -> None:
        self._run("compute", "snapshot", "delete", str(snapshot_id), "--force")

    def list_projects(self) -> list[Project]:
        return self._json("projects", "list")

    def assign_droplet(self, project_id: str, droplet_id: int) -> None:
        self._json(
            "projects",
            "resources",
            "assign",
            project_id,
            f"--resource=do:droplet:{droplet_id}",
        )

    def list_records(self, domain: str) -> list[DomainRecord]:
        return self._json("compute", "domain", "records", "list", domain)

    def create_record(
        self, domain: str, record_type: str, name: str, data: str, ttl: int
    ) -> DomainRecord:
        return self._one(
            "compute",
            "domain",
            "records",
            "create",
            domain,
            "--record-type",
            record_type,
            "--record-name",
            name,
            "--record-data",
            data,
            "--record-ttl",
            str(ttl),
        )

    def delete_record(self, domain: str, record_id: int) -> None:
        self._run(
            "compute", "domain", "records", "delete", domain, str(record_id), "--force"
        )
