"""
Docker Local Proxy 异常定义
"""


class LocalProxyError(Exception):
    """所有 docker-local-proxy 异常的基类"""


class ConfigError(LocalProxyError, ValueError):
    """配置无效（端口、日志级别等）"""


class PortAllocationError(ConfigError):
    """TCP 端口分配发生冲突或越界"""


class NetworkAttachmentError(LocalProxyError):
    """容器未连接到代理所在的虚拟网络"""


class ManifestError(LocalProxyError):
    """docker compose 文件无法解析或缺少目标服务"""
