#!/usr/bin/env python3
"""
Docker Local Proxy - 主入口点

为运行中的 Docker 容器生成本地 nginx 代理配置和 /etc/hosts 条目。
"""

import sys
from pathlib import Path

# 将当前目录添加到路径以导入 local_proxy 模块
sys.path.insert(0, str(Path(__file__).parent))

from local_proxy.cli import main


if __name__ == '__main__':
    main()
