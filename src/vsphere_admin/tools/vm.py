# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 虚拟机查询工具
"""

from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from .. import commands
from ..models import ErrorType, MCPError, MCPResult
from ..utils import (
    validate_ip_address,
    validate_mac_addresses,
    validate_name_selection,
    validate_required_name,
    validate_uuid,
)
from .common import run_command


async def get_vm_by_address(
    ctx: Context,
    mac: Optional[List[str]] = Field(default=None, description="MAC 地址列表，如 00:50:56:aa:bb:cc"),
    ip: Optional[str] = Field(default=None, description="完整的客户机 IP 地址"),
    ip_wildcard: Optional[str] = Field(default=None, description="IP 通配，如 10.0.1.*"),
    guest_hostname: Optional[str] = Field(default=None, description="客户机主机名 (精确，不区分大小写)"),
    uuid: Optional[str] = Field(default=None, description="虚拟机 BIOS UUID 或实例 UUID"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """按 MAC、IP、客户机主机名或 UUID 查找虚拟机，五个条件只能提供一个"""
    for error in (validate_mac_addresses(mac), validate_ip_address(ip), validate_uuid(uuid)):
        if error:
            return MCPResult.fail(error)
    return run_command(ctx, server, "get_vm_by_address", commands.get_vm_by_address,
                       mac=mac, ip=ip, ip_wildcard=ip_wildcard, guest_hostname=guest_hostname, uuid=uuid)


async def get_vm_by_rdm(
    ctx: Context,
    canonical_names: List[str] = Field(description="LUN 规范名称，如 naa.600508b1001c..."),
    cluster_name: str = Field(description="集群名称"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查找集群内使用指定 LUN 作为 RDM 磁盘的虚拟机"""
    if error := validate_required_name(cluster_name, "cluster_name", "集群"):
        return MCPResult.fail(error)
    if not canonical_names:
        return MCPResult.fail(MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter="canonical_names",
            message="缺少必需参数: canonical_names (LUN 规范名称)",
            suggestion="可通过 getVMDisksAndRDM 查看虚拟机 RDM 磁盘的规范名称"
        ))
    return run_command(ctx, server, "get_vm_by_rdm", commands.get_vm_by_rdm,
                       canonical_names, cluster_name)


async def get_vm_disks_and_rdm(
    ctx: Context,
    name_patterns: Optional[List[str]] = Field(default=None, description="虚拟机名称正则 (不区分大小写)"),
    literal_names: Optional[List[str]] = Field(default=None, description="精确的虚拟机名称"),
    ids: Optional[List[str]] = Field(default=None, description="虚拟机 ID，如 vm-42"),
    show_datastore_path: bool = Field(default=False, description="输出磁盘文件的数据存储路径"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """列出虚拟机磁盘及 RDM 信息，三种选择方式互斥，都不填则列出全部虚拟机"""
    if error := validate_name_selection(name_patterns, literal_names):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_vm_disks_and_rdm", commands.get_vm_disks_and_rdm,
                       name_patterns=name_patterns, literal_names=literal_names, ids=ids,
                       show_datastore_path=show_datastore_path)


async def get_vm_evc_info(
    ctx: Context,
    cluster_names: Optional[List[str]] = Field(default=None, description="集群名称，列出其中所有虚拟机"),
    vm_names: Optional[List[str]] = Field(default=None, description="虚拟机名称，与 cluster_names 互斥"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """对比虚拟机所需的 EVC 模式与所在集群的 EVC 模式"""
    return run_command(ctx, server, "get_vm_evc_info", commands.get_vm_evc_info,
                       cluster_names=cluster_names, vm_names=vm_names)


async def find_duplicate_mac_addresses(
    ctx: Context,
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查找被多块虚拟网卡同时使用的 MAC 地址"""
    return run_command(ctx, server, "find_duplicate_mac_addresses", commands.find_duplicate_mac_addresses)
