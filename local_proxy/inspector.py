"""
容器发现模块
"""

import logging
from typing import List

import docker
from docker.models.containers import Container

from local_proxy.config import Config
from local_proxy.models import ContainerRecord
from local_proxy.resolver import resolve_hostname


class ContainerInspector:
    """
    从 Docker 查询运行中的容器并转换为 ContainerRecord

    只处理名称包含过滤字符串的容器，保留 Docker 返回的顺序。
    """

    def __init__(self, client: docker.DockerClient, config: Config, logger: logging.Logger):
        """
        初始化容器检查器

        参数:
            client: Docker 客户端实例
            config: 应用配置
            logger: 日志记录器实例
        """
        self.client = client
        self.config = config
        self.logger = logger

    def should_process_container(self, container: Container) -> bool:
        """根据名称过滤检查是否应该处理此容器"""
        name = container.name.lstrip('/')
        matched = self.config.filter_name in name
        if not matched:
            self.logger.debug(f"容器 {name} 被名称过滤器跳过")
        return matched

    def to_record(self, container: Container) -> ContainerRecord:
        """
        将 Docker 容器转换为 ContainerRecord

        如果容器有 hostname 标签则使用标签值作为主机名。
        """
        full_name = container.name.lstrip('/')
        short_name, hostname = resolve_hostname(
            full_name,
            container.labels or {},
            separator=self.config.name_separator,
            label_key=self.config.hostname_label,
            domain=self.config.hostname_domain,
        )
        record = ContainerRecord(
            id=container.id,
            short_name=short_name,
            full_name=full_name,
            hostname=hostname,
        )
        self.logger.debug(f"发现容器 {record}")
        return record

    def discover(self) -> List[ContainerRecord]:
        """
        列出匹配过滤条件的运行中容器

        异常:
            docker.errors.DockerException: 如果 Docker API 通信失败
        """
        containers = self.client.containers.list(all=False)
        self.logger.debug(f"发现 {len(containers)} 个运行中的容器")

        records = [
            self.to_record(container)
            for container in containers
            if self.should_process_container(container)
        ]
        self.logger.info(
            f"{len(records)} 个容器匹配过滤条件 '{self.config.filter_name}'"
        )
        return records
