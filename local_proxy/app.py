"""
Docker Local Proxy 主应用模块
"""

import logging
import os
import sys
from typing import Callable, List, Optional

import docker
from docker.errors import DockerException

from local_proxy.allocation import allocate
from local_proxy.compose import ComposeManifest
from local_proxy.config import Config
from local_proxy.gateway import CommandRunner, RuntimeGateway, run_command
from local_proxy.hosts_manager import HostsFileManager
from local_proxy.inspector import ContainerInspector
from local_proxy.models import Allocation, ContainerRecord
from local_proxy.nginx import render_configs, write_configs
from local_proxy.resolver import find_hostname_conflicts


def is_privileged() -> bool:
    """当前进程是否以 root 运行"""
    return hasattr(os, "geteuid") and os.geteuid() == 0


class DockerLocalProxy:
    """
    主应用控制器，按顺序协调所有组件

    一次运行的步骤：
    - 发现匹配过滤条件的容器
    - 确保虚拟网络存在并检查容器连接
    - 分配端口并生成 nginx 配置
    - 更新 hosts 文件标记区域（需要管理员权限）
    - 同步 docker compose 端口并执行 up
    """

    def __init__(
        self,
        config: Config,
        client: Optional[docker.DockerClient] = None,
        runner: CommandRunner = run_command,
        privilege_check: Callable[[], bool] = is_privileged,
    ):
        """
        初始化 Docker Local Proxy 应用

        参数:
            config: 应用配置
            client: Docker 客户端，默认按配置连接
            runner: 外部命令执行器
            privilege_check: 判断是否可以写 hosts 文件

        异常:
            DockerException: 如果无法连接到 Docker 守护进程
            ConfigError: 如果配置无效
        """
        self.config = config
        self.config.validate()

        self.logger = self._setup_logging()
        self.privilege_check = privilege_check
        self.client = client if client is not None else self._connect()

        # 初始化组件
        self.inspector = ContainerInspector(self.client, config, self.logger)
        self.gateway = RuntimeGateway(self.client, config, self.logger, runner)
        self.hosts_manager = HostsFileManager(
            config.hosts_file_path,
            config.start_marker,
            config.end_marker,
            self.logger
        )
        self.manifest = ComposeManifest(config.compose_path, config.compose_service, self.logger)

    def _connect(self) -> docker.DockerClient:
        try:
            if self.config.docker_host:
                self.logger.info(f"正在连接到 Docker: {self.config.docker_host}")
                client = docker.DockerClient(base_url=self.config.docker_host)
            else:
                self.logger.info("使用环境检测连接到 Docker")
                client = docker.from_env()

            # 测试连接
            client.ping()
            self.logger.info("成功连接到 Docker 守护进程")
            return client

        except DockerException as e:
            self.logger.error(f"连接到 Docker 守护进程失败: {e}")
            self.logger.error(
                "请确保 Docker 正在运行且 socket 可访问。"
                "如果使用自定义 socket，请检查 DOCKER_HOST 环境变量。"
            )
            raise

    def _setup_logging(self) -> logging.Logger:
        """
        配置日志系统

        返回:
            配置好的日志记录器实例
        """
        logger = logging.getLogger('docker-local-proxy')
        logger.setLevel(self.config.log_level)

        # 避免重复的处理器
        if logger.handlers:
            return logger

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(self.config.log_level)

        # 格式: 时间戳 - 名称 - 级别 - 消息
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        return logger

    def log_startup(self) -> None:
        self.logger.info("=" * 60)
        self.logger.info(f"HTTP 端口: {', '.join(map(str, self.config.http_ports))}")
        self.logger.info(f"TCP 端口: {', '.join(map(str, self.config.tcp_ports))}")
        self.logger.info(f"容器名过滤: {self.config.filter_name}")
        self.logger.info("=" * 60)

    def update_hosts(self, containers: List[ContainerRecord]) -> bool:
        """
        更新 hosts 文件标记区域

        没有管理员权限时记录错误并跳过，不中断运行。
        """
        if not self.privilege_check():
            self.logger.error(
                f"需要管理员权限才能更新 {self.config.hosts_file_path}，已跳过"
            )
            return False

        try:
            self.hosts_manager.update_hosts([c.hostname for c in containers])
        except (OSError, UnicodeDecodeError):
            # 错误已由 HostsFileManager 记录
            return False
        self.logger.info(f"成功更新 {self.config.hosts_file_path}")
        return True

    def clean_hosts(self) -> bool:
        """移除 hosts 文件中的标记区域"""
        if not self.privilege_check():
            self.logger.error(
                f"需要管理员权限才能修改 {self.config.hosts_file_path}，已跳过"
            )
            return False

        try:
            return self.hosts_manager.remove_region()
        except (OSError, UnicodeDecodeError):
            return False

    def report_hostname_conflicts(self, containers: List[ContainerRecord]) -> None:
        for hostname, names in find_hostname_conflicts(containers).items():
            self.logger.warning(
                f"主机名 {hostname} 被多个容器使用: {', '.join(names)}. "
                "nginx 只会路由到其中一个"
            )

    def log_summary(self, allocation: Allocation) -> None:
        http_bindings = ", ".join(map(str, allocation.http_ports))
        for container in allocation.containers:
            tcp_bindings = ", ".join(
                f"{b.listen_port}:{b.base_port}" for b in allocation.tcp_bindings_for(container)
            )
            self.logger.info(
                f"  • Container: {container.full_name}, Hostname: {container.hostname}, "
                f"HTTP: {http_bindings}, TCP: {tcp_bindings}"
            )

    def run(self) -> None:
        """
        执行一次完整的同步

        异常:
            DockerException: 容器发现或网络操作失败
            NetworkAttachmentError: 有容器未连接到虚拟网络
            PortAllocationError: TCP 监听端口冲突
        """
        self.log_startup()
        containers = self.inspector.discover()

        if self.config.network_only:
            self.logger.info("只创建网络")
            self.gateway.ensure_network()
            return
        if self.config.hosts_only:
            self.logger.info("只更新 hosts 文件")
            self.update_hosts(containers)
            return
        if self.config.clean_hosts:
            self.logger.info("只清理 hosts 文件")
            self.clean_hosts()
            return

        allocation = allocate(containers, self.config.port_policy)
        self.report_hostname_conflicts(containers)

        self.config.generated_dir.mkdir(parents=True, exist_ok=True)
        self.gateway.ensure_network()
        self.gateway.verify_attachment(containers)

        configs = render_configs(allocation)
        write_configs(configs, self.config.generated_dir, self.logger)

        self.update_hosts(containers)
        self.manifest.update(allocation)
        self.gateway.compose_up()

        self.log_summary(allocation)

    def cleanup(self) -> None:
        """关闭 Docker 客户端"""
        try:
            self.client.close()
        except Exception as e:
            self.logger.error(f"清理期间出错: {e}", exc_info=True)
