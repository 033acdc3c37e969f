"""
Docker Local Proxy - 为 Docker 容器生成本地反向代理和 /etc/hosts 条目
"""

__version__ = "1.0.0"
__author__ = "Docker Local Proxy Project"

from local_proxy.app import DockerLocalProxy
from local_proxy.config import Config
from local_proxy.models import ContainerRecord, HostEntry, PortPolicy

__all__ = ["DockerLocalProxy", "Config", "ContainerRecord", "HostEntry", "PortPolicy"]
