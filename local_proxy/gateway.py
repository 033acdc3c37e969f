"""
Docker 网络管理和 compose 调用
"""

import logging
import subprocess
from typing import Callable, List, Sequence

import docker

from local_proxy.config import Config
from local_proxy.errors import NetworkAttachmentError
from local_proxy.models import CommandResult, ContainerRecord

CommandRunner = Callable[[Sequence[str], str], CommandResult]


def run_command(args: Sequence[str], cwd: str) -> CommandResult:
    """执行外部命令并等待完成，不设超时"""
    completed = subprocess.run(
        list(args), cwd=cwd, capture_output=True, text=True, check=False
    )
    return CommandResult(
        args=tuple(args),
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


class RuntimeGateway:
    """
    与 Docker 运行时交互

    - 确保代理使用的虚拟网络存在
    - 检查容器是否都连接到该网络
    - 调用 docker compose 应用 compose 文件
    """

    def __init__(
        self,
        client: docker.DockerClient,
        config: Config,
        logger: logging.Logger,
        runner: CommandRunner = run_command,
    ):
        self.client = client
        self.config = config
        self.logger = logger
        self.runner = runner

    def ensure_network(self) -> bool:
        """
        创建虚拟网络（如果不存在）

        返回:
            新建网络时返回 True
        """
        name = self.config.network_name
        existing = [n for n in self.client.networks.list(names=[name]) if n.name == name]
        if existing:
            self.logger.info(f"网络 {name} 已存在")
            return False

        network = self.client.networks.create(name, driver="bridge")
        self.logger.info(f"已创建网络 {name}: {network.id}")
        return True

    def verify_attachment(self, containers: Sequence[ContainerRecord]) -> None:
        """
        检查所有容器都已连接到虚拟网络

        异常:
            NetworkAttachmentError: 如果有容器未连接
        """
        name = self.config.network_name
        network = self.client.networks.get(name)
        members = set((network.attrs.get('Containers') or {}).keys())

        detached: List[str] = [c.full_name for c in containers if c.id not in members]
        if detached:
            raise NetworkAttachmentError(
                f"容器未连接到网络 {name}: {', '.join(detached)}. "
                f"请执行: docker network connect {name} <容器名>"
            )
        self.logger.info(f"所有容器都已连接到网络 {name}")

    def compose_up(self) -> CommandResult:
        """
        在项目目录中执行 docker compose up -d

        失败时只记录输出，不重试也不回滚已写入的文件。
        """
        args = (
            "docker", "compose",
            "-p", self.config.compose_project,
            "-f", str(self.config.compose_path),
            "up", "-d",
        )
        self.logger.info(f"正在执行: {' '.join(args)}")

        try:
            result = self.runner(args, self.config.project_root)
        except OSError as e:
            self.logger.error(f"执行 docker compose 失败: {e}")
            return CommandResult(args=args, returncode=127, stderr=str(e))

        if result.stdout:
            self.logger.info(f"stdout: {result.stdout.strip()}")
        if result.stderr:
            # docker compose 将进度信息写到 stderr
            log = self.logger.info if result.ok else self.logger.error
            log(f"stderr: {result.stderr.strip()}")
        if not result.ok:
            self.logger.error(f"docker compose up 退出码 {result.returncode}")
        return result
