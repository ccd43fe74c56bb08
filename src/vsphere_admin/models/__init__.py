# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 模型包导出
"""

from .base import (
    ErrorType,
    MyBaseModel,
    ToolSuggestion,
    MCPError,
    MCPResult,
)

from .vsphere import (
    NetworkClusterInfo,
    BrokenUplinkInfo,
    VMNetworkInfo,
    VMAddressMatch,
    VMRdmInfo,
    VMDiskInfo,
    VMEvcInfo,
    DuplicateMacInfo,
    TemplateInfo,
    HostHbaInfo,
    HostFirmwareInfo,
    HostNicDriverInfo,
    HostLogicalVolumeInfo,
    RoleInfo,
    ConnectionInfo,
    TaskInfo,
)

from .evacuation import (
    SkipReason,
    EvacuationStatus,
    DiskRelocation,
    RelocationPlan,
    SkippedObject,
    EvacuationResult,
    EvacuationReport,
)

__all__ = [
    # 基础模型
    "ErrorType",
    "MyBaseModel",
    "ToolSuggestion",
    "MCPError",
    "MCPResult",
    # 查询结果模型
    "NetworkClusterInfo",
    "BrokenUplinkInfo",
    "VMNetworkInfo",
    "VMAddressMatch",
    "VMRdmInfo",
    "VMDiskInfo",
    "VMEvcInfo",
    "DuplicateMacInfo",
    "TemplateInfo",
    "HostHbaInfo",
    "HostFirmwareInfo",
    "HostNicDriverInfo",
    "HostLogicalVolumeInfo",
    "RoleInfo",
    "ConnectionInfo",
    "TaskInfo",
    # 疏散模型
    "SkipReason",
    "EvacuationStatus",
    "DiskRelocation",
    "RelocationPlan",
    "SkippedObject",
    "EvacuationResult",
    "EvacuationReport",
]
