"""
容器名到本地主机名的解析
"""

from collections import OrderedDict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from local_proxy.models import ContainerRecord


def resolve_hostname(
    raw_name: str,
    labels: Optional[Mapping[str, str]] = None,
    separator: str = "-",
    label_key: str = "hostname",
    domain: str = "localhost",
) -> Tuple[str, str]:
    """
    计算容器的短名称和主机名

    参数:
        raw_name: Docker 返回的容器名（可带开头的 /）
        labels: 容器标签
        separator: 短名称分隔符
        label_key: 覆盖主机名的标签键
        domain: 默认主机名后缀

    返回:
        (short_name, hostname)，例如 "api-worker-1" -> ("api", "api.localhost")
    """
    name = raw_name.lstrip("/")
    short_name = name.split(separator, 1)[0]

    label_hostname = (labels or {}).get(label_key)
    if label_hostname:
        return short_name, label_hostname
    return short_name, f"{short_name}.{domain}"


def find_hostname_conflicts(containers: Iterable[ContainerRecord]) -> Dict[str, List[str]]:
    """返回被多个容器占用的主机名 -> 容器全名列表（按发现顺序）"""
    claims: "OrderedDict[str, List[str]]" = OrderedDict()
    for container in containers:
        claims.setdefault(container.hostname, []).append(container.full_name)
    return OrderedDict((h, names) for h, names in claims.items() if len(names) > 1)
