# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 工具函数包导出
"""

from .errors import (
    TOOL_CONNECT,
    TOOL_GET_NETWORK_CLUSTER_INFO,
    TOOL_GET_VM_DISKS,
    TOOL_GET_TASK_INFO,
    TOOL_EVACUATE_DATASTORE,
    VSphereAdminError,
    ResolutionError,
    RemoteOperationError,
    PreconditionError,
    fault_message,
    parse_vsphere_error,
)

from .filters import (
    NameFilter,
    build_name_filter,
)

from .validators import (
    validate_exclusive,
    validate_name_selection,
    validate_required_name,
    validate_mac_addresses,
    validate_ip_address,
    validate_uuid,
    validate_servers,
)

__all__ = [
    # 错误处理
    "TOOL_CONNECT",
    "TOOL_GET_NETWORK_CLUSTER_INFO",
    "TOOL_GET_VM_DISKS",
    "TOOL_GET_TASK_INFO",
    "TOOL_EVACUATE_DATASTORE",
    "VSphereAdminError",
    "ResolutionError",
    "RemoteOperationError",
    "PreconditionError",
    "fault_message",
    "parse_vsphere_error",
    # 名称筛选
    "NameFilter",
    "build_name_filter",
    # 验证函数
    "validate_exclusive",
    "validate_name_selection",
    "validate_required_name",
    "validate_mac_addresses",
    "validate_ip_address",
    "validate_uuid",
    "validate_servers",
]
