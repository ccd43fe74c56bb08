# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 主机硬件查询工具

主机可以按名称正则、主机 ID (如 host-10) 或集群选择，三者互斥；
都不填时查询所有主机。
"""

from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from .. import commands
from ..models import MCPResult
from ..utils import validate_name_selection
from .common import run_command


def _check_pattern(name_pattern: Optional[str]):
    return validate_name_selection([name_pattern] if name_pattern else None, None)


async def get_host_hba_wwn(
    ctx: Context,
    name_pattern: Optional[str] = Field(default=None, description="主机名称正则"),
    ids: Optional[List[str]] = Field(default=None, description="主机 ID，如 host-10"),
    cluster_name: Optional[str] = Field(default=None, description="集群名称"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """列出主机光纤通道 HBA 的 WWNN / WWPN"""
    if error := _check_pattern(name_pattern):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_host_hba_wwn", commands.get_host_hba_wwn,
                       name_pattern=name_pattern, ids=ids, cluster_name=cluster_name)


async def get_host_firmware_info(
    ctx: Context,
    name_pattern: Optional[str] = Field(default=None, description="主机名称正则"),
    ids: Optional[List[str]] = Field(default=None, description="主机 ID，如 host-10"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查询主机 BIOS、阵列卡和带外管理固件版本"""
    if error := _check_pattern(name_pattern):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_host_firmware_info", commands.get_host_firmware_info,
                       name_pattern=name_pattern, ids=ids)


async def get_host_nic_firmware_driver_info(
    ctx: Context,
    name_pattern: Optional[str] = Field(default=None, description="主机名称正则"),
    ids: Optional[List[str]] = Field(default=None, description="主机 ID，如 host-10"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查询主机物理网卡的驱动与固件版本"""
    if error := _check_pattern(name_pattern):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_host_nic_firmware_driver_info",
                       commands.get_host_nic_firmware_driver_info,
                       name_pattern=name_pattern, ids=ids)


async def get_host_logical_volume_info(
    ctx: Context,
    name_pattern: Optional[str] = Field(default=None, description="主机名称正则"),
    ids: Optional[List[str]] = Field(default=None, description="主机 ID，如 host-10"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查询主机本地阵列逻辑卷的健康状态"""
    if error := _check_pattern(name_pattern):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_host_logical_volume_info", commands.get_host_logical_volume_info,
                       name_pattern=name_pattern, ids=ids)
