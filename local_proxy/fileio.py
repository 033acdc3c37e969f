"""
原子性文件写入
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Union

DEFAULT_MODE = 0o644


def atomic_write_text(path: Union[str, Path], content: str) -> None:
    """
    原子性写入文本文件

    写入同目录下的临时文件后重命名（同一文件系统内有效），
    读者只会看到完整的旧内容或完整的新内容。已有文件的权限会被保留。

    异常:
        PermissionError: 如果没有写入目录的权限
        OSError: 如果文件系统操作失败
    """
    path = Path(path)
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        mode = DEFAULT_MODE

    temp_fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.tmp.",
        text=True
    )

    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except Exception:
        # 出错时清理临时文件
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
