import pytest

from dropletctl import config
from dropletctl.errors import ConfigError

ENV = {
    "DIGITALOCEAN_TOKEN": "do-token",
    "DROPLET_NAME": "host-a",
    "SNAPSHOT_NAME": "snap-1",
    "DOMAIN_NAME": "example.com",
    "HOST_NAME": "host.example.com",
    "PROJECT_NAME": "proj",
    "REGION": "fra1",
    "SIZE": "s-1vcpu-1gb",
    "TELEGRAM_TOKEN": "123:abc",
    "TELEGRAM_CHAT_ID": "-100123",
}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in [*ENV, "COPROSERVER_NAME"]:
        monkeypatch.delenv(name, raising=False)
    for name, value in ENV.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


def test_load_bot_config(env):
    bot = config.load_bot_config()

    assert bot.token == "123:abc"
    assert bot.target_chat == -100123
    assert bot.up.region == "fra1"
    assert bot.up.record_name == "host"
    assert bot.down == config.DownConfig("host-a", "snap-1", "example.com", "host.example.com")


def test_down_does_not_need_up_settings(env):
    env.delenv("REGION")
    env.delenv("SIZE")
    env.delenv("PROJECT_NAME")

    assert config.load_down_config().droplet_name == "host-a"


@pytest.mark.parametrize("name", ["DROPLET_NAME", "SIZE", "TELEGRAM_TOKEN"])
def test_missing_value_is_named(env, name):
    env.delenv(name)

    with pytest.raises(ConfigError, match=f"{name} is missing"):
        config.load_bot_config()


def test_empty_value_counts_as_missing(env):
    env.setenv("HOST_NAME", "")

    with pytest.raises(ConfigError, match="HOST_NAME is missing"):
        config.load_down_config()


def test_legacy_droplet_variable(env):
    env.delenv("DROPLET_NAME")
    env.setenv("COPROSERVER_NAME", "legacy")

    assert config.load_down_config().droplet_name == "legacy"


def test_chat_id_must_be_integer(env):
    env.setenv("TELEGRAM_CHAT_ID", "@mychannel")

    with pytest.raises(ConfigError, match="must be an integer"):
        config.load_bot_config()


def test_configs_are_immutable(env):
    up = config.load_up_config()

    with pytest.raises(AttributeError):
        up.size = "s-8vcpu-16gb"


def test_record_name_without_domain_suffix():
    up = config.UpConfig("p", "d", "example.com", "example.com", "s", "r", "z")

    assert up.record_name == "example.com"
