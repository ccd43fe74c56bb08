# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server

基于 MCP 的 vSphere 日常管理工具集：数据存储疏散、网络与虚拟机查询、
主机硬件信息、模板迁移和角色复制。
"""

from .server import mcp, run_server
from .client import VSphereClient, ConnectionManager
from .models import MCPResult, MCPError, ErrorType

__version__ = "0.1.0"

__all__ = [
    "mcp",
    "run_server",
    "VSphereClient",
    "ConnectionManager",
    "MCPResult",
    "MCPError",
    "ErrorType",
]
