"""In-memory DigitalOcean double shared by the unit tests."""

import pytest

from dropletctl.config import DownConfig, UpConfig
from dropletctl.errors import ProviderError


class FakeDigitalOcean:
    """Records every call in ``calls`` and mutates in-memory state.

    Droplets become active on the first ``get_droplet`` after creation and
    actions complete on their first poll. ``fail`` maps a method name to the
    message of a ``ProviderError`` it should raise.
    """

    def __init__(self):
        self.droplets: list[dict] = []
        self.snapshots: list[dict] = []
        self.projects: list[dict] = []
        self.records: dict[str, list[dict]] = {}
        self.actions: dict[int, dict] = {}
        self.assigned: list[tuple[str, int]] = []
        self.calls: list[tuple] = []
        self.fail: dict[str, str] = {}
        self.action_polls_until_done = 1
        self._next_id = 1000

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail:
            raise ProviderError(self.fail[name])

    def _id(self) -> int:
        self._next_id += 1
        return self._next_id

    def call_names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def add_droplet(self, name, status="active", ip="203.0.113.10") -> dict:
        droplet = {
            "id": self._id(),
            "name": name,
            "status": status,
            "networks": {"v4": [{"ip_address": ip, "type": "public"}]},
        }
        self.droplets.append(droplet)
        return droplet

    def add_snapshot(self, name, snapshot_id="123") -> dict:
        snapshot = {"id": snapshot_id, "name": name, "resource_type": "droplet"}
        self.snapshots.append(snapshot)
        return snapshot

    def add_project(self, name, project_id="proj-uuid") -> dict:
        project = {"id": project_id, "name": name}
        self.projects.append(project)
        return project

    def add_record(self, domain, name, data="203.0.113.10") -> dict:
        record = {"id": self._id(), "type": "A", "name": name, "data": data, "ttl": 3600}
        self.records.setdefault(domain, []).append(record)
        return record

    def list_droplets(self):
        self._call("list_droplets")
        return [dict(d) for d in self.droplets]

    def get_droplet(self, droplet_id):
        self._call("get_droplet", droplet_id)
        droplet = next(d for d in self.droplets if d["id"] == droplet_id)
        if droplet["status"] == "new":
            droplet["status"] = "active"
            return {**droplet, "status": "new"}
        return dict(droplet)

    def create_droplet(self, name, region, size, image_id):
        self._call("create_droplet", name, region, size, image_id)
        droplet = self.add_droplet(name, status="new")
        droplet["region"] = region
        droplet["size"] = size
        droplet["image_id"] = image_id
        return dict(droplet)

    def delete_droplet(self, droplet_id):
        self._call("delete_droplet", droplet_id)
        self.droplets = [d for d in self.droplets if d["id"] != droplet_id]

    def _action(self, droplet_id, kind, on_complete) -> dict:
        action = {"id": self._id(), "status": "in-progress", "type": kind}
        self.actions[action["id"]] = {
            **action,
            "droplet_id": droplet_id,
            "polls": 0,
            "on_complete": on_complete,
        }
        return action

    def shutdown_droplet(self, droplet_id):
        self._call("shutdown_droplet", droplet_id)

        def power_off():
            for d in self.droplets:
                if d["id"] == droplet_id:
                    d["status"] = "off"

        return self._action(droplet_id, "shutdown", power_off)

    def snapshot_droplet(self, droplet_id, snapshot_name):
        self._call("snapshot_droplet", droplet_id, snapshot_name)
        return self._action(
            droplet_id,
            "snapshot",
            lambda: self.add_snapshot(snapshot_name, snapshot_id=str(self._id())),
        )

    def get_action(self, droplet_id, action_id):
        self._call("get_action", droplet_id, action_id)
        action = self.actions[action_id]
        action["polls"] += 1
        if action["status"] != "completed" and action["polls"] >= self.action_polls_until_done:
            action["status"] = "completed"
            action["on_complete"]()
        return {"id": action_id, "status": action["status"], "type": action["type"]}

    def list_snapshots(self):
        self._call("list_snapshots")
        return [dict(s) for s in self.snapshots]

    def delete_snapshot(self, snapshot_id):
        self._call("delete_snapshot", snapshot_id)
        self.snapshots = [s for s in self.snapshots if s["id"] != snapshot_id]

    def list_projects(self):
        self._call("list_projects")
        return [dict(p) for p in self.projects]

    def assign_droplet(self, project_id, droplet_id):
        self._call("assign_droplet", project_id, droplet_id)
        self.assigned.append((project_id, droplet_id))

    def list_records(self, domain):
        self._call("list_records", domain)
        return [dict(r) for r in self.records.get(domain, [])]

    def create_record(self, domain, record_type, name, data, ttl):
        self._call("create_record", domain, record_type, name, data, ttl)
        record = {"id": self._id(), "type": record_type, "name": name, "data": data, "ttl": ttl}
        self.records.setdefault(domain, []).append(record)
        return record

    def delete_record(self, domain, record_id):
        self._call("delete_record", domain, record_id)
        self.records[domain] = [r for r in self.records.get(domain, []) if r["id"] != record_id]


@pytest.fixture
def client():
    return FakeDigitalOcean()


@pytest.fixture
def up_config():
    return UpConfig(
        project_name="proj",
        droplet_name="host-a",
        domain_name="example.com",
        host_name="host.example.com",
        snapshot_name="snap-1",
        region="fra1",
        size="s-1vcpu-1gb",
    )


@pytest.fixture
def down_config():
    return DownConfig(
        droplet_name="host-a",
        snapshot_name="snap-1",
        domain_name="example.com",
        host_name="host.example.com",
    )


@pytest.fixture(autouse=True)
def no_poll_sleep(monkeypatch):
    """Polling in the workflows should not actually sleep in unit tests."""
    monkeypatch.setattr("dropletctl.waiter.POLL_INTERVAL", 0)
