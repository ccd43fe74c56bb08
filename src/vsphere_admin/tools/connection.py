# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 连接与任务工具
"""

import logging
from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from ..models import MCPResult
from ..utils import VSphereAdminError, parse_vsphere_error
from .common import get_client, get_connections


logger = logging.getLogger(__name__)


async def connect_vsphere(
    ctx: Context,
    servers: Optional[List[str]] = Field(default=None, description="vCenter 地址列表，不填则使用 VSPHERE_HOST"),
    username: Optional[str] = Field(default=None, description="登录用户，不填则使用 VSPHERE_USERNAME"),
    password: Optional[str] = Field(default=None, description="登录密码，不填则使用 VSPHERE_PASSWORD"),
    port: Optional[int] = Field(default=None, description="端口，默认 443")
) -> MCPResult:
    """连接到一个或多个 vCenter，已连接的服务器直接复用"""
    connections = get_connections(ctx)
    try:
        results = connections.connect(servers, username=username, password=password, port=port)
    except VSphereAdminError as e:
        return MCPResult.fail(e.error)

    if not results:
        return MCPResult.ok(results, warnings=["没有提供 vCenter 地址，也没有设置 VSPHERE_HOST"])

    failed = [r for r in results if not r.connected]
    warnings = [f"{r.server}: {r.error}" for r in failed]
    if len(failed) == len(results):
        return MCPResult(success=False, data=results, warnings=warnings,
                         error=parse_vsphere_error(ConnectionError(failed[0].error), "connect"))
    return MCPResult.ok(results, warnings=warnings)


async def disconnect_vsphere(
    ctx: Context,
    servers: Optional[List[str]] = Field(default=None, description="要断开的 vCenter 地址，不填则断开全部")
) -> MCPResult:
    """断开 vCenter 连接"""
    results = get_connections(ctx).disconnect(servers)
    if not results:
        return MCPResult.ok(results, warnings=["没有需要断开的连接"])
    return MCPResult.ok(results)


async def get_task_info(
    ctx: Context,
    task_id: str = Field(description="任务 ID，如 task-1234 (evacuateDatastore 异步模式返回)"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查询异步任务的状态和进度"""
    client, error = get_client(ctx, server)
    if error:
        return MCPResult.fail(error)

    try:
        return MCPResult.ok(client.get_task_info(task_id), request_id=task_id)
    except VSphereAdminError as e:
        return MCPResult.fail(e.error)
    except Exception as e:
        logger.error(f"查询任务 {task_id} 失败: {e}")
        return MCPResult.fail(parse_vsphere_error(e, "get_task_info"))
