import logging

from click.testing import CliRunner

import local_proxy.cli as cli_module
from local_proxy.cli import cli
from local_proxy.errors import NetworkAttachmentError


class FakeProxy:
    instances = []

    def __init__(self, config, fail=None):
        self.config = config
        self.fail = fail
        self.cleaned = False
        self.logger = logging.getLogger("docker-local-proxy-tests")
        FakeProxy.instances.append(self)

    def run(self):
        if self.fail:
            raise self.fail

    def cleanup(self):
        self.cleaned = True


def test_help():
    result = CliRunner().invoke(cli, ['-h'])
    assert result.exit_code == 0
    assert '--httpPort' in result.output
    assert '--filterName' in result.output


def test_options_build_config(monkeypatch):
    FakeProxy.instances.clear()
    monkeypatch.setattr(cli_module, "DockerLocalProxy", FakeProxy)

    result = CliRunner().invoke(cli, ['-p', '80,8080', '-q', '5432,x,6379', '-f', 'dev', '-o'])

    assert result.exit_code == 0, result.output
    proxy = FakeProxy.instances[-1]
    assert proxy.config.http_ports == (80, 8080)
    assert proxy.config.tcp_ports == (5432, 6379)
    assert proxy.config.filter_name == 'dev'
    assert proxy.config.hosts_only is True
    assert proxy.config.network_only is False
    assert proxy.cleaned


def test_defaults(monkeypatch):
    FakeProxy.instances.clear()
    monkeypatch.setattr(cli_module, "DockerLocalProxy", FakeProxy)

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0, result.output
    config = FakeProxy.instances[-1].config
    assert config.http_ports == (80,)
    assert config.tcp_ports == (5432,)
    assert config.filter_name == 'internal-proxy'


def test_invalid_port_is_usage_error():
    result = CliRunner().invoke(cli, ['-p', '70000'])
    assert result.exit_code == 2


def test_empty_port_list_is_usage_error():
    result = CliRunner().invoke(cli, ['-q', 'abc'])
    assert result.exit_code == 2


def test_fatal_error_exits_with_1(monkeypatch):
    FakeProxy.instances.clear()
    monkeypatch.setattr(
        cli_module, "DockerLocalProxy",
        lambda config: FakeProxy(config, fail=NetworkAttachmentError("detached")),
    )

    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 1
    assert FakeProxy.instances[-1].cleaned
