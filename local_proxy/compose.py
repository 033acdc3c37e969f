"""
docker compose 文件端口同步
"""

import logging
from pathlib import Path
from typing import List, Union

import yaml

from local_proxy.errors import ManifestError
from local_proxy.fileio import atomic_write_text
from local_proxy.models import Allocation


def port_mappings(allocation: Allocation) -> List[str]:
    """
    计算代理服务需要发布的端口

    先是每个 HTTP 端口 "p:p"，然后是每个 TCP 绑定的监听端口 "l:l"。
    """
    http = [f"{port}:{port}" for port in allocation.http_ports]
    tcp = [f"{b.listen_port}:{b.listen_port}" for b in allocation.tcp_bindings]
    return http + tcp


def sync_manifest_ports(text: str, service: str, allocation: Allocation) -> str:
    """
    替换 compose 文档中某个服务的 ports 列表

    旧的端口条目全部丢弃，其他字段及其顺序保持不变。

    参数:
        text: compose 文件内容
        service: 服务键，例如 nginx-proxy
        allocation: 本次运行的端口分配

    返回:
        新的 compose 文件内容

    异常:
        ManifestError: 文档无法解析或缺少目标服务
    """
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"无法解析 compose 文件: {e}") from e

    if not isinstance(doc, dict):
        raise ManifestError("compose 文件顶层必须是映射")

    services = doc.get("services")
    if not isinstance(services, dict) or service not in services:
        raise ManifestError(f"compose 文件中没有服务 '{service}'")

    definition = services[service]
    if definition is None:
        definition = services[service] = {}
    if not isinstance(definition, dict):
        raise ManifestError(f"服务 '{service}' 的定义必须是映射")

    definition["ports"] = port_mappings(allocation)

    return yaml.dump(
        doc,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


class ComposeManifest:
    """
    读取、修改并回写 docker compose 文件

    失败不会中断整个流程：记录错误，文件保持不变。
    """

    def __init__(self, compose_path: Union[str, Path], service: str, logger: logging.Logger):
        """
        参数:
            compose_path: compose 文件路径
            service: 要更新端口的服务键
            logger: 日志记录器实例
        """
        self.compose_path = Path(compose_path)
        self.service = service
        self.logger = logger

    def update(self, allocation: Allocation) -> bool:
        """
        同步服务端口并写回文件

        返回:
            成功写入返回 True，失败返回 False
        """
        try:
            with open(self.compose_path, 'r', encoding='utf-8') as f:
                current = f.read()
            updated = sync_manifest_ports(current, self.service, allocation)
            if updated != current:
                atomic_write_text(self.compose_path, updated)
        except (ManifestError, OSError, UnicodeDecodeError) as e:
            self.logger.error(f"更新 Docker Compose 文件失败 ({self.compose_path}): {e}")
            return False

        http_ports = ", ".join(map(str, allocation.http_ports))
        tcp_ports = ", ".join(str(b.listen_port) for b in allocation.tcp_bindings) or "-"
        self.logger.info(f"已更新 Docker Compose 文件 HTTP 端口: {http_ports}")
        self.logger.info(f"已更新 Docker Compose 文件 TCP 端口: {tcp_ports}")
        return True
