# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 参数验证模块
"""

import re
import ipaddress
from typing import Any, Dict, List, Optional

from ..models import ErrorType, MCPError
from .errors import TOOL_CONNECT


MAC_RE = re.compile(r'^[0-9a-fA-F]{2}([:-][0-9a-fA-F]{2}){5}$')
UUID_RE = re.compile(r'^[0-9a-fA-F]{8}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{4}-?[0-9a-fA-F]{12}$')


def _is_given(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, set, str)):
        return len(value) > 0
    return True


def validate_exclusive(options: Dict[str, Any], required: bool = True) -> Optional[MCPError]:
    """验证一组选择参数互斥，required 时必须恰好提供一个"""
    given = [name for name, value in options.items() if _is_given(value)]
    names = ", ".join(options)

    if len(given) > 1:
        return MCPError(
            error_type=ErrorType.INVALID_PARAMETER,
            parameter=given[1],
            message=f"参数 {', '.join(given)} 不能同时使用",
            suggestion=f"请只提供以下参数中的一个: {names}"
        )

    if required and not given:
        return MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            message=f"缺少选择参数，需要提供以下之一: {names}",
            suggestion=f"请只提供以下参数中的一个: {names}"
        )

    return None


def validate_name_selection(
    name_patterns: Optional[List[str]],
    literal_names: Optional[List[str]],
    required: bool = False,
) -> Optional[MCPError]:
    """验证正则名称与精确名称互斥，并检查正则是否可编译"""
    if error := validate_exclusive(
        {"name_patterns": name_patterns, "literal_names": literal_names}, required=required
    ):
        return error

    for pattern in name_patterns or []:
        try:
            re.compile(pattern)
        except re.error as e:
            return MCPError(
                error_type=ErrorType.INVALID_PARAMETER,
                parameter="name_patterns",
                message=f"无效的正则表达式 '{pattern}': {e}",
                suggestion="请检查正则语法；如需按名称精确匹配，请改用 literal_names"
            )

    return None


def validate_required_name(value: Optional[str], parameter: str, label: str) -> Optional[MCPError]:
    """验证必需的对象名称参数"""
    if not value or not value.strip():
        return MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter=parameter,
            message=f"缺少必需参数: {parameter} ({label})",
            suggestion=f"请提供完整的{label}名称"
        )
    return None


def validate_mac_addresses(macs: Optional[List[str]]) -> Optional[MCPError]:
    for mac in macs or []:
        if not MAC_RE.match(mac):
            return MCPError(
                error_type=ErrorType.INVALID_PARAMETER,
                parameter="mac",
                message=f"无效的 MAC 地址: '{mac}'",
                suggestion="请使用 00:50:56:aa:bb:cc 格式"
            )
    return None


def validate_ip_address(ip: Optional[str]) -> Optional[MCPError]:
    if ip is None:
        return None
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return MCPError(
            error_type=ErrorType.INVALID_PARAMETER,
            parameter="ip",
            message=f"无效的 IP 地址: '{ip}'",
            suggestion="请提供完整的 IPv4 / IPv6 地址；需要通配请使用 ip_wildcard"
        )
    return None


def validate_uuid(uuid: Optional[str]) -> Optional[MCPError]:
    if uuid is None:
        return None
    if not UUID_RE.match(uuid):
        return MCPError(
            error_type=ErrorType.INVALID_PARAMETER,
            parameter="uuid",
            message=f"无效的 UUID: '{uuid}'",
            suggestion="请提供虚拟机的 BIOS UUID 或实例 UUID，如 4210e3c2-xxxx-xxxx-xxxx-xxxxxxxxxxxx"
        )
    return None


def validate_servers(servers: Optional[List[str]]) -> Optional[MCPError]:
    if not servers:
        return MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            parameter="servers",
            message="缺少必需参数: servers (vCenter 地址列表)",
            suggestion="请提供 vCenter 地址，或设置环境变量 VSPHERE_HOST",
            related_tools=[TOOL_CONNECT]
        )
    return None
