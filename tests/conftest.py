import logging
from types import SimpleNamespace

import pytest
from docker.errors import NotFound

from local_proxy.config import Config
from local_proxy.models import CommandResult, ContainerRecord


class FakeNetworks:
    def __init__(self, networks=None):
        self.networks = dict(networks or {})
        self.created = []

    def list(self, names=None):
        return [n for name, n in self.networks.items() if names is None or name in names]

    def create(self, name, driver=None):
        network = SimpleNamespace(id=f"net-{name}", name=name, attrs={"Containers": {}})
        self.networks[name] = network
        self.created.append((name, driver))
        return network

    def get(self, name):
        if name not in self.networks:
            raise NotFound(f"network {name} not found")
        return self.networks[name]

    def attach(self, name, *container_ids):
        members = self.networks[name].attrs["Containers"]
        for container_id in container_ids:
            members[container_id] = {"Name": container_id}


class FakeContainers:
    def __init__(self, containers):
        self.containers = list(containers)

    def list(self, all=False):
        return list(self.containers)


class FakeDockerClient:
    def __init__(self, containers=(), networks=None):
        self.containers = FakeContainers(containers)
        self.networks = FakeNetworks(networks)
        self.closed = False

    def ping(self):
        return True

    def close(self):
        self.closed = True


class RecordingRunner:
    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def __call__(self, args, cwd):
        self.calls.append((tuple(args), cwd))
        return self.result or CommandResult(args=tuple(args), returncode=0, stdout="done")


def fake_container(container_id, name, labels=None):
    return SimpleNamespace(id=container_id, name=name, labels=labels or {})


def record(full_name, hostname=None, container_id=None):
    short_name = full_name.split("-", 1)[0]
    return ContainerRecord(
        id=container_id or f"id-{full_name}",
        short_name=short_name,
        full_name=full_name,
        hostname=hostname or f"{short_name}.localhost",
    )


@pytest.fixture
def logger():
    return logging.getLogger("docker-local-proxy-tests")


@pytest.fixture
def config(tmp_path):
    hosts = tmp_path / "hosts"
    hosts.write_text("127.0.0.1 localhost\n")
    return Config(project_root=str(tmp_path), hosts_file_path=str(hosts))
