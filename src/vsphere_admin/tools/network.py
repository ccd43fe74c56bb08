# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 网络查询工具
"""

from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from ..commands import get_host_broken_uplinks as query_broken_uplinks
from ..commands import get_network_cluster_info as query_network_clusters
from ..commands import get_vm_by_network as query_vm_by_network
from ..models import MCPResult
from ..utils import validate_name_selection
from .common import run_command


async def get_network_cluster_info(
    ctx: Context,
    name_patterns: Optional[List[str]] = Field(default=None, description="网络名称正则 (不区分大小写，任一匹配即可)"),
    literal_names: Optional[List[str]] = Field(default=None, description="精确的网络名称，与 name_patterns 互斥"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查询网络可在哪些集群中使用"""
    if error := validate_name_selection(name_patterns, literal_names):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_network_cluster_info", query_network_clusters,
                       name_patterns=name_patterns, literal_names=literal_names)


async def get_host_broken_uplinks(
    ctx: Context,
    name_pattern: Optional[str] = Field(default=None, description="主机名称正则，不填则检查所有主机"),
    literal_name: Optional[str] = Field(default=None, description="精确的主机名称，与 name_pattern 互斥"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """查找没有链路或速率为 0 的主机上行链路"""
    patterns = [name_pattern] if name_pattern else None
    literals = [literal_name] if literal_name else None
    if error := validate_name_selection(patterns, literals):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_host_broken_uplinks", query_broken_uplinks,
                       name_pattern=name_pattern or ".+", literal_name=literal_name)


async def get_vm_by_network(
    ctx: Context,
    name_patterns: Optional[List[str]] = Field(default=None, description="网络名称正则 (不区分大小写，任一匹配即可)"),
    literal_names: Optional[List[str]] = Field(default=None, description="精确的网络名称，与 name_patterns 互斥"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """列出连接到指定网络的虚拟机"""
    if error := validate_name_selection(name_patterns, literal_names, required=True):
        return MCPResult.fail(error)
    return run_command(ctx, server, "get_vm_by_network", query_vm_by_network,
                       name_patterns=name_patterns, literal_names=literal_names)
