"""
Docker Local Proxy 数据模型
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class ContainerRecord:
    """
    代表一个被发现的容器

    属性:
        id: Docker 分配的容器 ID
        short_name: 名称中第一个分隔符之前的部分
        full_name: 完整容器名（去掉开头的 /），在虚拟网络内可解析
        hostname: 对外暴露的主机名
    """

    id: str
    short_name: str
    full_name: str
    hostname: str

    def __str__(self) -> str:
        return f"{self.hostname} -> {self.full_name} ({self.id[:12]})"


@dataclass(frozen=True)
class PortPolicy:
    """HTTP 端口与 TCP 基础端口，按配置顺序保存，不去重"""

    http_ports: Tuple[int, ...] = (80,)
    tcp_base_ports: Tuple[int, ...] = (5432,)


@dataclass(frozen=True)
class HttpBinding:
    """按主机名路由的 HTTP 绑定，端口对所有容器相同"""

    container: ContainerRecord
    port: int

    @property
    def upstream(self) -> str:
        return f"http://{self.container.full_name}:{self.port}"


@dataclass(frozen=True)
class TcpBinding:
    """
    TCP 转发绑定

    属性:
        container: 目标容器
        base_port: 容器内部端口
        listen_port: 代理监听端口（base_port + index）
        index: 容器在发现顺序中的位置
    """

    container: ContainerRecord
    base_port: int
    listen_port: int
    index: int

    @property
    def upstream(self) -> str:
        return f"{self.container.full_name}:{self.base_port}"


@dataclass(frozen=True)
class Allocation:
    """一次运行中计算出的全部绑定，不单独持久化"""

    containers: Tuple[ContainerRecord, ...]
    http_ports: Tuple[int, ...]
    http_bindings: Tuple[HttpBinding, ...] = ()
    tcp_bindings: Tuple[TcpBinding, ...] = ()

    def tcp_bindings_for(self, container: ContainerRecord) -> List[TcpBinding]:
        return [b for b in self.tcp_bindings if b.container == container]


@dataclass(frozen=True)
class HostEntry:
    """
    hosts 文件中的单个条目

    属性:
        hostname: 要映射的主机名
        ip_address: 目标地址，代理监听在本机
    """

    hostname: str
    ip_address: str = "127.0.0.1"

    def to_hosts_line(self) -> str:
        """
        转换为 hosts 文件行格式

        格式: <IP> <主机名>
        """
        return f"{self.ip_address} {self.hostname}"

    def __str__(self) -> str:
        return f"{self.hostname} -> {self.ip_address}"


@dataclass(frozen=True)
class GeneratedConfigs:
    """生成的 nginx 配置文本，每次运行完整覆盖"""

    http_config: str
    tcp_config: str


@dataclass(frozen=True)
class CommandResult:
    """外部命令的执行结果"""

    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0
