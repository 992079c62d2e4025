"""Read-only checks against a real DigitalOcean account.

Nothing here creates or deletes resources. Run with:

    DIGITALOCEAN_TOKEN=... uv run pytest tests/ -m integration
"""

import os

import pytest
from dotenv import load_dotenv

from dropletctl.config import DownConfig
from dropletctl.lifecycle import status
from dropletctl.locator import find_droplet
from dropletctl.providers import DigitalOceanProvider


@pytest.fixture(scope="module")
def provider():
    load_dotenv()
    token = os.getenv("DIGITALOCEAN_TOKEN")
    if not token:
        pytest.skip("DIGITALOCEAN_TOKEN not set")
    p = DigitalOceanProvider(token)
    p.validate_auth()
    return p


@pytest.mark.integration
def test_listings_are_lists(provider):
    assert isinstance(provider.list_droplets(), list)
    assert isinstance(provider.list_snapshots(), list)
    assert isinstance(provider.list_projects(), list)


@pytest.mark.integration
def test_unknown_droplet_is_not_found(provider):
    assert find_droplet(provider, "dropletctl-does-not-exist-7f3a") is None


@pytest.mark.integration
def test_status_of_configured_droplet(provider):
    name = os.getenv("DROPLET_NAME") or "dropletctl-does-not-exist-7f3a"
    config = DownConfig(name, os.getenv("SNAPSHOT_NAME", "none"), "example.com", "x.example.com")

    report = status(provider, config)

    assert report["droplet"] == name
    assert isinstance(report["snapshot_exists"], bool)
