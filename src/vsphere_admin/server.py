# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 服务器入口模块

MCP 服务器的主入口，包含：
- ToolRegistry：工具注册类
- lifespan：生命周期管理，持有 ConnectionManager
- mcp：FastMCP 实例
- run_server：服务器运行函数
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from mcp.server.fastmcp import FastMCP

from .client import ConnectionManager
from .config import load_settings
from .tools import (
    AppContext,
    connect_vsphere,
    disconnect_vsphere,
    get_task_info,
    evacuate_datastore,
    get_network_cluster_info,
    get_host_broken_uplinks,
    get_vm_by_network,
    get_vm_by_address,
    get_vm_by_rdm,
    get_vm_disks_and_rdm,
    get_vm_evc_info,
    find_duplicate_mac_addresses,
    get_host_hba_wwn,
    get_host_firmware_info,
    get_host_nic_firmware_driver_info,
    get_host_logical_volume_info,
    move_template_to_host,
    copy_role,
)


logger = logging.getLogger(__name__)

READ_ONLY = {"readOnlyHint": True}


# =============================================================================
# 工具注册类
# =============================================================================
class ToolRegistry:
    """工具注册类 - 管理所有 MCP 工具的注册"""

    def __init__(self, mcp_instance):
        self.mcp = mcp_instance

    def register_tools(self):
        """注册所有 MCP 工具"""
        self._register_connection_tools()
        self._register_network_tools()
        self._register_vm_tools()
        self._register_host_tools()
        self._register_admin_tools()
        return self.mcp

    def _register_connection_tools(self):
        """注册连接与任务工具"""
        self.mcp.tool(
            name="connectVSphere",
            description="连接一个或多个 vCenter。不带参数时使用环境变量中的地址和凭据",
            annotations={"title": "连接 vCenter", "readOnlyHint": False, "destructiveHint": False}
        )(connect_vsphere)

        self.mcp.tool(
            name="disconnectVSphere",
            description="断开 vCenter 连接，不带参数时断开全部",
            annotations={"title": "断开 vCenter", "readOnlyHint": False, "destructiveHint": False}
        )(disconnect_vsphere)

        self.mcp.tool(
            name="getTaskInfo",
            description="查询 vCenter 任务的状态和进度，用于跟踪 evacuateDatastore 异步提交的迁移任务",
            annotations={"title": "查询任务", **READ_ONLY}
        )(get_task_info)

    def _register_network_tools(self):
        """注册网络查询工具"""
        self.mcp.tool(
            name="getNetworkClusterInfo",
            description="查询网络 (端口组) 在哪些集群中可用。name_patterns 为正则，literal_names 为精确名称",
            annotations={"title": "网络所在集群", **READ_ONLY}
        )(get_network_cluster_info)

        self.mcp.tool(
            name="getHostBrokenUplinks",
            description="查找主机上没有链路或速率为 0 的物理网卡上行链路",
            annotations={"title": "故障上行链路", **READ_ONLY}
        )(get_host_broken_uplinks)

        self.mcp.tool(
            name="getVMByNetwork",
            description="列出连接到指定网络的虚拟机",
            annotations={"title": "按网络查询虚拟机", **READ_ONLY}
        )(get_vm_by_network)

    def _register_vm_tools(self):
        """注册虚拟机查询工具"""
        self.mcp.tool(
            name="getVMByAddress",
            description="按 MAC、IP、IP 通配、客户机主机名或 UUID 查找虚拟机 (只能提供一个条件)",
            annotations={"title": "按地址查询虚拟机", **READ_ONLY}
        )(get_vm_by_address)

        self.mcp.tool(
            name="getVMByRDM",
            description="查找集群中使用指定 LUN (naa.* 规范名称) 作为 RDM 的虚拟机",
            annotations={"title": "按 RDM 查询虚拟机", **READ_ONLY}
        )(get_vm_by_rdm)

        self.mcp.tool(
            name="getVMDisksAndRDM",
            description="列出虚拟机的磁盘、SCSI 地址、容量以及 RDM 对应的 LUN",
            annotations={"title": "虚拟机磁盘", **READ_ONLY}
        )(get_vm_disks_and_rdm)

        self.mcp.tool(
            name="getVMEvcInfo",
            description="对比虚拟机所需 EVC 模式与其所在集群的 EVC 模式",
            annotations={"title": "虚拟机 EVC", **READ_ONLY}
        )(get_vm_evc_info)

        self.mcp.tool(
            name="findDuplicateMacAddresses",
            description="查找在多块虚拟网卡上重复使用的 MAC 地址",
            annotations={"title": "重复 MAC 地址", **READ_ONLY}
        )(find_duplicate_mac_addresses)

    def _register_host_tools(self):
        """注册主机硬件查询工具"""
        self.mcp.tool(
            name="getHostHbaWwn",
            description="列出主机光纤通道 HBA 的 WWNN / WWPN",
            annotations={"title": "HBA WWN", **READ_ONLY}
        )(get_host_hba_wwn)

        self.mcp.tool(
            name="getHostFirmwareInfo",
            description="查询主机 BIOS、阵列卡和 iLO 固件版本",
            annotations={"title": "主机固件", **READ_ONLY}
        )(get_host_firmware_info)

        self.mcp.tool(
            name="getHostNicFirmwareDriverInfo",
            description="查询主机物理网卡的驱动与固件版本",
            annotations={"title": "网卡驱动与固件", **READ_ONLY}
        )(get_host_nic_firmware_driver_info)

        self.mcp.tool(
            name="getHostLogicalVolumeInfo",
            description="查询主机本地阵列逻辑卷状态",
            annotations={"title": "逻辑卷状态", **READ_ONLY}
        )(get_host_logical_volume_info)

    def _register_admin_tools(self):
        """注册会修改清单的工具"""
        self.mcp.tool(
            name="evacuateDatastore",
            description=(
                "将源数据存储上的虚拟机和模板迁移到目标数据存储或数据存储集群。"
                "建议先以 dry_run=true 预览计划; "
                "run_async=true 时虚拟机迁移只提交任务，可用 getTaskInfo 跟踪; "
                "模板会临时转换为虚拟机，迁移后转换回模板"
            ),
            annotations={"title": "疏散数据存储", "readOnlyHint": False, "destructiveHint": True}
        )(evacuate_datastore)

        self.mcp.tool(
            name="moveTemplateToHost",
            description="把模板重新注册到集群中另一台已连接且不在维护模式的主机上",
            annotations={"title": "迁移模板主机", "readOnlyHint": False, "destructiveHint": True}
        )(move_template_to_host)

        self.mcp.tool(
            name="copyRole",
            description="复制角色及其全部权限，可在同一 vCenter 内或跨 vCenter 复制",
            annotations={"title": "复制角色", "readOnlyHint": False, "destructiveHint": False}
        )(copy_role)


# =============================================================================
# 生命周期管理
# =============================================================================
@asynccontextmanager
async def lifespan(app) -> AsyncGenerator[AppContext, None]:
    """MCP 服务器生命周期管理，退出时关闭所有 vCenter 会话"""
    logger.info("初始化 vSphere Admin MCP Server...")

    settings = load_settings()
    connections = ConnectionManager(settings)
    logger.info(f"vSphere 配置: {settings.vsphere_hosts or '未设置'}")

    try:
        yield AppContext(settings=settings, connections=connections)
    finally:
        connections.close_all()
        logger.info("关闭 vSphere Admin MCP Server...")


# =============================================================================
# FastMCP 实例创建
# =============================================================================
_settings = load_settings()

mcp = FastMCP(
    "vSphereAdminAssistant",
    lifespan=lifespan,
    instructions=(
        "vSphere 管理助手，提供数据存储疏散、网络 / 虚拟机 / 主机硬件查询、模板迁移和角色复制等功能。\n\n"
        "**工具使用指南**:\n"
        "1. 连接: 工具会自动连接 VSPHERE_HOST 中的第一个 vCenter; 多个 vCenter 时用 connectVSphere 后通过 server 参数选择\n"
        "2. 名称筛选: name_patterns 为不区分大小写的正则 (任一匹配即可); literal_names 为精确名称\n"
        "3. 疏散数据存储: 先 evacuateDatastore(dry_run=true) 预览，再正式执行; 异步任务用 getTaskInfo 跟踪\n\n"
        "**错误处理**: 所有工具返回统一的 MCPResult 格式，失败时包含错误类型、建议和相关工具推荐；"
        "查询无匹配时 success 为 true，提示信息在 warnings 中。"
    ),
    host=_settings.server_host,
    port=_settings.server_port
)

ToolRegistry(mcp).register_tools()


# =============================================================================
# 服务器运行函数
# =============================================================================
def run_server():
    """运行 MCP 服务器"""
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info(f"启动 vSphere Admin MCP 服务器，日志级别: {settings.log_level}")
    logger.info(f"使用传输协议: {settings.transport}")

    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    run_server()
