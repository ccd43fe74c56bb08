# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 模板迁移与角色复制工具
"""

import logging
from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from .. import commands
from ..models import ErrorType, MCPError, MCPResult
from ..utils import VSphereAdminError, parse_vsphere_error, validate_required_name
from .common import get_client, run_command


logger = logging.getLogger(__name__)


async def move_template_to_host(
    ctx: Context,
    template_names: List[str] = Field(description="模板名称列表 (精确)"),
    destination_cluster: Optional[str] = Field(default=None, description="目标集群，不填则留在模板当前集群"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """把模板重新注册到集群中另一台已连接且不在维护模式的主机上"""
    if not template_names:
        return MCPResult.fail(MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter="template_names",
            message="缺少必需参数: template_names (模板名称列表)",
            suggestion="请提供至少一个模板名称"
        ))
    return run_command(ctx, server, "move_template_to_host", commands.move_template_to_host,
                       template_names, destination_cluster=destination_cluster)


async def copy_role(
    ctx: Context,
    source_role_name: str = Field(description="源角色名称"),
    destination_role_name: str = Field(description="新角色名称，必须尚不存在"),
    source_server: Optional[str] = Field(default=None, description="源 vCenter，不填则使用默认连接"),
    destination_server: Optional[str] = Field(default=None, description="目标 vCenter，不填则与源相同")
) -> MCPResult:
    """复制角色及其全部权限，可跨 vCenter"""
    for value, parameter, label in (
        (source_role_name, "source_role_name", "源角色"),
        (destination_role_name, "destination_role_name", "目标角色"),
    ):
        if error := validate_required_name(value, parameter, label):
            return MCPResult.fail(error)

    source_client, error = get_client(ctx, source_server)
    if error:
        return MCPResult.fail(error)
    destination_client, error = get_client(ctx, destination_server or source_server)
    if error:
        return MCPResult.fail(error)

    try:
        role = commands.copy_role(source_role_name, destination_role_name, source_client, destination_client)
        return MCPResult.ok(role)
    except VSphereAdminError as e:
        return MCPResult.fail(e.error)
    except Exception as e:
        logger.error(f"复制角色 {source_role_name} 失败: {e}")
        return MCPResult.fail(parse_vsphere_error(e, "copy_role"))
