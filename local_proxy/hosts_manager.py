"""
Hosts 文件管理模块，只修改标记区域，支持原子性更新
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from local_proxy.fileio import atomic_write_text
from local_proxy.models import HostEntry


def _find_region(text: str, start_marker: str, end_marker: str) -> Optional[Tuple[int, int]]:
    """
    返回 (开始标记位置, 结束标记位置)

    取第一个前面有开始标记的结束标记，与它之前最近的开始标记配对。
    """
    end_idx = text.find(end_marker)
    while end_idx != -1:
        start_idx = text.rfind(start_marker, 0, end_idx)
        if start_idx != -1:
            return start_idx, end_idx
        end_idx = text.find(end_marker, end_idx + len(end_marker))
    return None


def render_entries(hostnames: Iterable[str]) -> str:
    """每个主机名渲染为一行 "127.0.0.1 <主机名>" """
    return "\n".join(HostEntry(hostname).to_hosts_line() for hostname in hostnames)


def patch_region(
    existing_text: str,
    hostnames: Sequence[str],
    start_marker: str,
    end_marker: str,
) -> str:
    """
    将主机条目合并到标记区域中

    如果两个标记都存在，只替换标记之间的内容，区域外内容（包括标记本身）
    逐字节保留；否则在文件末尾追加一个新区域。重复执行结果不变。

    参数:
        existing_text: 当前 hosts 文件内容
        hostnames: 要写入的主机名（按顺序）
        start_marker: 开始标记行
        end_marker: 结束标记行

    返回:
        新的 hosts 文件内容
    """
    entries = render_entries(hostnames)
    interior = f"\n{entries}\n" if entries else "\n"

    region = _find_region(existing_text, start_marker, end_marker)
    if region is None:
        return f"{existing_text}\n{start_marker}{interior}{end_marker}\n"

    start_idx, end_idx = region
    return existing_text[:start_idx + len(start_marker)] + interior + existing_text[end_idx:]


def remove_region(existing_text: str, start_marker: str, end_marker: str) -> str:
    """移除标记区域（包括标记），撤销追加区域时插入的空行"""
    region = _find_region(existing_text, start_marker, end_marker)
    if region is None:
        return existing_text

    start_idx, end_idx = region
    before = existing_text[:start_idx]
    after = existing_text[end_idx + len(end_marker):]
    if after.startswith("\n"):
        after = after[1:]
    if before.endswith("\n\n"):
        before = before[:-1]
    return before + after


class HostsFileManager:
    """
    管理 hosts 文件中由 docker-local-proxy 拥有的标记区域

    hosts 文件属于系统，本类只读写标记之间的内容。
    使用原子性文件操作（临时文件 + 重命名）防止文件损坏。
    是否有权限写入由调用方判断。
    """

    def __init__(self, hosts_path: str, start_marker: str, end_marker: str, logger: logging.Logger):
        """
        初始化 hosts 文件管理器

        参数:
            hosts_path: hosts 文件路径
            start_marker: 开始标记行
            end_marker: 结束标记行
            logger: 日志记录器实例
        """
        self.hosts_path = Path(hosts_path)
        self.start_marker = start_marker
        self.end_marker = end_marker
        self.logger = logger

    def read(self) -> str:
        """
        读取 hosts 文件全部内容，文件不存在时返回空字符串

        异常:
            PermissionError: 如果没有读取权限
            UnicodeDecodeError: 如果文件不是 UTF-8 编码
        """
        if not self.hosts_path.exists():
            self.logger.warning(f"Hosts 文件不存在: {self.hosts_path}")
            return ""

        try:
            with open(self.hosts_path, 'r', encoding='utf-8', newline='') as f:
                return f.read()
        except PermissionError:
            self.logger.error(f"读取 hosts 文件权限被拒绝: {self.hosts_path}")
            raise
        except UnicodeDecodeError as e:
            self.logger.error(f"hosts 文件不是有效的 UTF-8: {self.hosts_path}: {e}")
            raise

    def _write(self, content: str) -> None:
        try:
            atomic_write_text(self.hosts_path, content)
        except PermissionError:
            self.logger.error(
                f"写入 hosts 文件权限被拒绝: {self.hosts_path}. "
                "请使用管理员权限运行。"
            )
            raise
        except OSError as e:
            self.logger.error(f"更新 hosts 文件失败: {e}")
            raise

    def update_hosts(self, hostnames: Sequence[str]) -> bool:
        """
        用给定主机名替换标记区域的内容

        参数:
            hostnames: 要映射到 127.0.0.1 的主机名列表

        返回:
            文件内容发生变化时返回 True

        异常:
            PermissionError: 如果没有写入 hosts 文件的权限
            OSError: 如果文件系统操作失败
        """
        current = self.read()
        updated = patch_region(current, hostnames, self.start_marker, self.end_marker)

        if updated == current:
            self.logger.info(f"Hosts 文件已是最新 ({len(hostnames)} 条记录)")
            return False

        self._write(updated)
        self.logger.info(f"已更新 {len(hostnames)} 条 host 记录")
        return True

    def remove_region(self) -> bool:
        """
        移除 docker-local-proxy 管理的区域

        返回:
            找到并移除区域时返回 True
        """
        current = self.read()
        updated = remove_region(current, self.start_marker, self.end_marker)

        if updated == current:
            self.logger.info("Hosts 文件中没有 docker-local-proxy 区域")
            return False

        self._write(updated)
        self.logger.info("已移除所有 docker-local-proxy 条目")
        return True
