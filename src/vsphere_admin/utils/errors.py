# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 错误处理模块

包含：
- 命令层异常 (携带结构化 MCPError)
- 工具建议常量
- vSphere 错误解析函数
"""

import logging
from typing import Optional, List

from ..models import ErrorType, MCPError, ToolSuggestion


logger = logging.getLogger(__name__)


# =============================================================================
# 工具建议常量 - 用于错误响应中引导 LLM
# =============================================================================
TOOL_CONNECT = ToolSuggestion(
    tool_name="connectVSphere",
    description="连接到 vCenter",
    example_params={"servers": ["vcenter01.example.com"]}
)

TOOL_GET_NETWORK_CLUSTER_INFO = ToolSuggestion(
    tool_name="getNetworkClusterInfo",
    description="按名称查询网络及其所在集群",
    example_params={"name_patterns": ["^VLAN"]}
)

TOOL_GET_VM_DISKS = ToolSuggestion(
    tool_name="getVMDisksAndRDM",
    description="查询虚拟机磁盘及其所在数据存储",
    example_params={"name_patterns": ["web"], "show_datastore_path": True}
)

TOOL_GET_TASK_INFO = ToolSuggestion(
    tool_name="getTaskInfo",
    description="查询异步任务的执行状态",
    example_params={"task_id": "task-1234"}
)

TOOL_EVACUATE_DATASTORE = ToolSuggestion(
    tool_name="evacuateDatastore",
    description="先以 dry_run 模式预览迁移计划",
    example_params={"source_datastore": "ds01", "destination": "ds02", "dry_run": True}
)


# =============================================================================
# 命令层异常
# =============================================================================
class VSphereAdminError(Exception):
    """命令执行失败，error 属性为结构化错误，可直接放入 MCPResult"""

    def __init__(self, error: MCPError):
        super().__init__(error.message)
        self.error = error


class ResolutionError(VSphereAdminError):
    """名称未能解析为唯一对象"""

    @classmethod
    def not_found(cls, kind: str, name: str, parameter: Optional[str] = None,
                  related_tools: Optional[List[ToolSuggestion]] = None) -> "ResolutionError":
        return cls(MCPError(
            error_type=ErrorType.RESOURCE_NOT_FOUND,
            parameter=parameter,
            message=f"{kind} '{name}' 不存在",
            suggestion=f"请确认{kind}名称 (区分大小写，需完全匹配)",
            related_tools=related_tools
        ))

    @classmethod
    def ambiguous(cls, kind: str, name: str, count: int,
                  parameter: Optional[str] = None) -> "ResolutionError":
        return cls(MCPError(
            error_type=ErrorType.AMBIGUOUS_RESOURCE,
            parameter=parameter,
            message=f"名称 '{name}' 匹配到 {count} 个{kind}，无法确定目标",
            suggestion=f"请使用唯一的{kind}名称"
        ))


class RemoteOperationError(VSphereAdminError):
    """vCenter 拒绝或执行失败的变更操作"""

    @classmethod
    def from_exception(cls, error: Exception, operation: str) -> "RemoteOperationError":
        return cls(parse_vsphere_error(error, operation))


class PreconditionError(VSphereAdminError):
    """变更前检查未通过，尚未对 vCenter 做任何修改"""

    @classmethod
    def failed(cls, message: str, suggestion: str,
               parameter: Optional[str] = None) -> "PreconditionError":
        return cls(MCPError(
            error_type=ErrorType.PRECONDITION_FAILED,
            parameter=parameter,
            message=message,
            suggestion=suggestion
        ))


def fault_message(error: Exception) -> str:
    """pyVmomi 故障对象的 msg 比 str() 更易读"""
    msg = getattr(error, 'msg', None)
    if msg:
        return str(msg)
    return str(error) or type(error).__name__


def parse_vsphere_error(error: Exception, operation: str) -> MCPError:
    """
    解析 vSphere API 错误，转换为结构化的 MCPError

    这是 MCP 最佳实践的核心：将底层 API 错误转换为对 LLM 友好的错误信息
    """
    if isinstance(error, VSphereAdminError):
        return error.error

    error_msg = fault_message(error)
    fault_name = type(error).__name__
    lowered = f"{fault_name} {error_msg}".lower()

    # 连接错误
    if 'connection' in lowered or 'timeout' in lowered or 'notauthenticated' in lowered:
        return MCPError(
            error_type=ErrorType.CONNECTION_ERROR,
            message=f"无法连接到 vSphere: {error_msg}",
            suggestion="请检查 vCenter 地址、端口和网络连接，必要时重新连接",
            related_tools=[TOOL_CONNECT]
        )

    # 权限不足
    if 'nopermission' in lowered or 'permission' in lowered or 'unauthorized' in lowered \
            or 'invalidlogin' in lowered:
        return MCPError(
            error_type=ErrorType.PERMISSION_DENIED,
            message=f"权限不足: {error_msg}",
            suggestion="请检查用户名、密码和角色权限配置"
        )

    # 对象已被删除或引用过期
    if 'managedobjectnotfound' in lowered or 'not found' in lowered or 'not exist' in lowered:
        return MCPError(
            error_type=ErrorType.RESOURCE_NOT_FOUND,
            message=f"{operation}: 对象不存在或已被删除 ({error_msg})",
            suggestion="对象可能在查询后被删除或迁移，请重新查询后再试"
        )

    # 资源不足
    if 'insufficient' in lowered or 'quota' in lowered or 'nodiskspace' in lowered \
            or 'capacity' in lowered:
        return MCPError(
            error_type=ErrorType.QUOTA_EXCEEDED,
            message=f"资源不足: {error_msg}",
            suggestion="请检查目标数据存储 / 主机的可用容量，或选择其他目标"
        )

    # 冲突错误（名称重复）
    if 'duplicate' in lowered or 'alreadyexists' in lowered or 'already exists' in lowered:
        return MCPError(
            error_type=ErrorType.PRECONDITION_FAILED,
            message=f"对象已存在: {error_msg}",
            suggestion="请使用不同的名称"
        )

    # 对象状态不允许该操作
    if 'invalidstate' in lowered or 'invalidpowerstate' in lowered or 'taskinprogress' in lowered:
        return MCPError(
            error_type=ErrorType.PRECONDITION_FAILED,
            message=f"{operation}: 对象当前状态不允许该操作 ({error_msg})",
            suggestion="请等待正在进行的任务完成，或检查对象状态后重试"
        )

    # 默认错误处理
    return MCPError(
        error_type=ErrorType.API_ERROR,
        message=f"vSphere 操作失败 ({operation}): {error_msg}",
        suggestion="请检查参数是否正确，或稍后重试"
    )
