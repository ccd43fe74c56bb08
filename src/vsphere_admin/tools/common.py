# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 工具公共部分

工具函数从 MCP 请求上下文中取得 ConnectionManager，
再选择连接并调用 commands 中的命令，统一包装为 MCPResult。
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from mcp.server.fastmcp import Context

from ..client import ConnectionManager, VSphereClient
from ..config import Settings
from ..models import MCPError, MCPResult
from ..utils.errors import VSphereAdminError, parse_vsphere_error


logger = logging.getLogger(__name__)

NO_MATCH_WARNING = "没有匹配的对象，返回空结果"


@dataclass
class AppContext:
    """服务器生命周期内共享的状态"""
    settings: Settings
    connections: ConnectionManager


def get_connections(ctx: Context) -> ConnectionManager:
    return ctx.request_context.lifespan_context.connections


def get_client(ctx: Context, server: Optional[str] = None) -> Tuple[Optional[VSphereClient], Optional[MCPError]]:
    """获取指定 (或默认) vCenter 的客户端，自动处理连接"""
    try:
        return get_connections(ctx).get(server), None
    except VSphereAdminError as e:
        return None, e.error


def run_command(
    ctx: Context,
    server: Optional[str],
    operation: str,
    command: Callable[..., Any],
    *args,
    **kwargs
) -> MCPResult:
    """在选定的连接上执行命令，空列表结果附带提示而不是错误"""
    client, error = get_client(ctx, server)
    if error:
        return MCPResult.fail(error)

    try:
        data = command(client, *args, **kwargs)
    except VSphereAdminError as e:
        logger.warning(f"{operation} 失败: {e.error.message}")
        return MCPResult.fail(e.error)
    except Exception as e:
        logger.error(f"{operation} 失败: {e}")
        return MCPResult.fail(parse_vsphere_error(e, operation))

    if isinstance(data, list) and not data:
        return MCPResult.ok(data, warnings=[NO_MATCH_WARNING])
    return MCPResult.ok(data)
