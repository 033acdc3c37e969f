import pytest

from local_proxy.allocation import allocate
from local_proxy.errors import ConfigError, PortAllocationError
from local_proxy.models import PortPolicy

from conftest import record


def test_http_bindings_are_cross_product():
    web, api = record("proj-web-1"), record("proj-api-1")
    allocation = allocate([web, api], PortPolicy(http_ports=(80, 8080), tcp_base_ports=()))

    assert [(b.container.full_name, b.port) for b in allocation.http_bindings] == [
        ("proj-web-1", 80),
        ("proj-web-1", 8080),
        ("proj-api-1", 80),
        ("proj-api-1", 8080),
    ]
    assert allocation.http_bindings[0].upstream == "http://proj-web-1:80"


def test_tcp_ports_offset_by_discovery_index():
    containers = [record(f"svc{i}-1") for i in range(3)]
    allocation = allocate(containers, PortPolicy(http_ports=(80,), tcp_base_ports=(5432, 6379)))

    assert [(b.container.full_name, b.listen_port, b.base_port) for b in allocation.tcp_bindings] == [
        ("svc0-1", 5432, 5432),
        ("svc0-1", 6379, 6379),
        ("svc1-1", 5433, 5432),
        ("svc1-1", 6380, 6379),
        ("svc2-1", 5434, 5432),
        ("svc2-1", 6381, 6379),
    ]
    assert allocation.tcp_bindings[2].upstream == "svc1-1:5432"


def test_tcp_listen_ports_are_unique():
    containers = [record(f"svc{i}-1") for i in range(20)]
    allocation = allocate(containers, PortPolicy(tcp_base_ports=(5432,)))

    listen_ports = [b.listen_port for b in allocation.tcp_bindings]
    assert len(set(listen_ports)) == 20


def test_allocation_is_deterministic():
    containers = [record("proj-web-1"), record("proj-api-1")]
    policy = PortPolicy(http_ports=(80, 443), tcp_base_ports=(5432,))
    assert allocate(containers, policy) == allocate(list(containers), policy)


def test_collision_between_base_ports_is_rejected():
    containers = [record(f"svc{i}-1") for i in range(3)]
    with pytest.raises(PortAllocationError) as exc:
        allocate(containers, PortPolicy(tcp_base_ports=(5432, 5433)))
    assert "5433" in str(exc.value)


def test_duplicate_base_port_is_rejected():
    with pytest.raises(ConfigError):
        allocate([record("web-1")], PortPolicy(tcp_base_ports=(5432, 5432)))


def test_listen_port_out_of_range():
    containers = [record("a-1"), record("b-1")]
    with pytest.raises(PortAllocationError):
        allocate(containers, PortPolicy(tcp_base_ports=(65535,)))


def test_no_containers():
    allocation = allocate([], PortPolicy())
    assert allocation.http_bindings == ()
    assert allocation.tcp_bindings == ()
    assert allocation.http_ports == (80,)
