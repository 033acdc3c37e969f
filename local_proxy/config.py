"""
配置管理模块，支持环境变量和命令行覆盖
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Optional, Tuple

from local_proxy.errors import ConfigError
from local_proxy.models import PortPolicy

DEFAULT_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent)

START_MARKER = "### START GENERATED BY docker-local-proxy ###"
END_MARKER = "### END docker-local-proxy ###"


@dataclass(frozen=True)
class Config:
    """
    应用配置类

    启动时构造一次，之后显式传递给每个组件，不存在全局状态。
    """

    http_ports: Tuple[int, ...] = (80,)
    tcp_ports: Tuple[int, ...] = (5432,)
    filter_name: str = "internal-proxy"
    network_only: bool = False
    hosts_only: bool = False
    clean_hosts: bool = False

    name_separator: str = "-"
    hostname_label: str = "hostname"
    hostname_domain: str = "localhost"

    project_root: str = DEFAULT_PROJECT_ROOT
    hosts_file_path: str = "/etc/hosts"
    start_marker: str = START_MARKER
    end_marker: str = END_MARKER
    network_name: str = "docker-local-proxy"
    compose_project: str = "docker-local-proxy"
    compose_file: str = "docker-compose.yml"
    compose_service: str = "nginx-proxy"
    docker_host: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """
        从环境变量加载配置

        环境变量说明:
            HOSTS_FILE: hosts 文件路径 (默认: /etc/hosts)
            DOCKER_HOST: Docker 守护进程 socket URL (默认: 自动检测)
            PROJECT_ROOT: 存放 docker-compose.yml 和 generated/ 的目录
            NETWORK_NAME: 代理使用的虚拟网络 (默认: docker-local-proxy)
            COMPOSE_FILE: compose 文件名 (默认: docker-compose.yml)
            LOG_LEVEL: 日志级别 (默认: INFO)
        """
        return cls(
            hosts_file_path=os.getenv("HOSTS_FILE", "/etc/hosts"),
            docker_host=os.getenv("DOCKER_HOST"),
            project_root=os.getenv("PROJECT_ROOT", DEFAULT_PROJECT_ROOT),
            network_name=os.getenv("NETWORK_NAME", "docker-local-proxy"),
            compose_file=os.getenv("COMPOSE_FILE", "docker-compose.yml"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper()
        )

    def with_options(self, **overrides) -> "Config":
        """返回应用了命令行选项的新配置，值为 None 的选项被忽略"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        for key in ("http_ports", "tcp_ports"):
            if key in changes:
                changes[key] = tuple(changes[key])
        if "log_level" in changes:
            changes["log_level"] = changes["log_level"].upper()
        return replace(self, **changes)

    @property
    def port_policy(self) -> PortPolicy:
        return PortPolicy(http_ports=self.http_ports, tcp_base_ports=self.tcp_ports)

    @property
    def generated_dir(self) -> Path:
        return Path(self.project_root) / "generated"

    @property
    def compose_path(self) -> Path:
        return Path(self.project_root) / self.compose_file

    def validate(self) -> None:
        """验证配置是否有效"""
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_log_levels:
            raise ConfigError(
                f"无效的 LOG_LEVEL: {self.log_level}. "
                f"必须是以下之一: {', '.join(sorted(valid_log_levels))}"
            )
        _validate_ports("HTTP", self.http_ports)
        _validate_ports("TCP", self.tcp_ports)
        if not self.filter_name:
            raise ConfigError("容器名过滤条件不能为空")
        if not self.name_separator:
            raise ConfigError("名称分隔符不能为空")


def _validate_ports(kind: str, ports: Iterable[int]) -> None:
    ports = list(ports)
    if not ports:
        raise ConfigError(f"至少需要一个 {kind} 端口")
    for port in ports:
        if not 1 <= port <= 65535:
            raise ConfigError(f"无效的 {kind} 端口: {port} (必须在 1-65535 之间)")


def parse_port_list(value: str) -> Tuple[int, ...]:
    """
    解析逗号分隔的端口列表

    无法解析为整数的项会被忽略，保持原有顺序且不去重。
    """
    ports = []
    for item in value.split(","):
        item = item.strip()
        try:
            ports.append(int(item))
        except ValueError:
            continue
    return tuple(ports)
