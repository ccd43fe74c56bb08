#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
开发调试入口 - 用于 mcp dev 命令

使用方法:
    VSPHERE_HOST=vc01.example.com VSPHERE_USERNAME=... VSPHERE_PASSWORD=... \
        uv run mcp dev dev_server.py:mcp
"""

import os
import sys

# 将 src 目录添加到 Python 路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from vsphere_admin.server import mcp, run_server  # noqa: E402

if __name__ == "__main__":
    run_server()
