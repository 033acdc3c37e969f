"""
端口分配策略
"""

from collections import defaultdict
from typing import Dict, List, Sequence

from local_proxy.errors import PortAllocationError
from local_proxy.models import Allocation, ContainerRecord, HttpBinding, PortPolicy, TcpBinding

MAX_PORT = 65535


def allocate(containers: Sequence[ContainerRecord], policy: PortPolicy) -> Allocation:
    """
    为容器分配端口

    HTTP: 每个容器在每个 HTTP 端口上可达，按主机名路由。
    TCP: 第 i 个容器的基础端口 p 监听在 p + i，转发到容器内部端口 p。

    结果只依赖于容器顺序和端口策略。

    异常:
        PortAllocationError: 监听端口冲突或超出 65535
    """
    containers = tuple(containers)

    http_bindings = tuple(
        HttpBinding(container=container, port=port)
        for container in containers
        for port in policy.http_ports
    )
    tcp_bindings = tuple(
        TcpBinding(container=container, base_port=port, listen_port=port + index, index=index)
        for index, container in enumerate(containers)
        for port in policy.tcp_base_ports
    )

    _check_tcp_listen_ports(tcp_bindings)

    return Allocation(
        containers=containers,
        http_ports=tuple(policy.http_ports),
        http_bindings=http_bindings,
        tcp_bindings=tcp_bindings,
    )


def _check_tcp_listen_ports(bindings: Sequence[TcpBinding]) -> None:
    by_port: Dict[int, List[TcpBinding]] = defaultdict(list)
    for binding in bindings:
        by_port[binding.listen_port].append(binding)

    out_of_range = sorted(p for p in by_port if p > MAX_PORT)
    if out_of_range:
        raise PortAllocationError(
            f"TCP 监听端口超出范围: {', '.join(map(str, out_of_range))}"
        )

    collisions = []
    for port, owners in sorted(by_port.items()):
        if len(owners) > 1:
            targets = ", ".join(b.upstream for b in owners)
            collisions.append(f"{port} ({targets})")
    if collisions:
        raise PortAllocationError(
            "TCP 监听端口冲突: " + "; ".join(collisions) + ". "
            "容器数量不能超过相邻 TCP 基础端口之间的间隔"
        )
