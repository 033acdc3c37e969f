import pytest

from local_proxy.config import Config, parse_port_list
from local_proxy.errors import ConfigError


def test_parse_port_list_ignores_invalid_items():
    assert parse_port_list("80, 8080,abc,,443") == (80, 8080, 443)


def test_parse_port_list_keeps_duplicates():
    assert parse_port_list("80,80") == (80, 80)


def test_from_env(monkeypatch):
    monkeypatch.setenv("HOSTS_FILE", "/tmp/hosts")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("PROJECT_ROOT", "/srv/proxy")
    monkeypatch.delenv("COMPOSE_FILE", raising=False)
    config = Config.from_env()

    assert config.hosts_file_path == "/tmp/hosts"
    assert config.log_level == "DEBUG"
    assert str(config.compose_path) == "/srv/proxy/docker-compose.yml"
    assert str(config.generated_dir) == "/srv/proxy/generated"


def test_with_options_ignores_none():
    config = Config().with_options(http_ports=[8080], filter_name=None, log_level="warning")
    assert config.http_ports == (8080,)
    assert config.filter_name == "internal-proxy"
    assert config.log_level == "WARNING"
    assert config.port_policy.http_ports == (8080,)


@pytest.mark.parametrize("overrides", [
    {"log_level": "LOUD"},
    {"http_ports": ()},
    {"tcp_ports": (0,)},
    {"http_ports": (70000,)},
    {"filter_name": ""},
])
def test_validate_rejects(overrides):
    with pytest.raises(ConfigError):
        Config(**overrides).validate()


def test_defaults_are_valid():
    Config().validate()
