# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 查询命令的结果模型

每个命令对应一个扁平的结果类型，字段只包含报表需要的内容。
"""

from typing import Optional, List

from pydantic import Field

from .base import MyBaseModel


# =============================================================================
# 网络相关模型
# =============================================================================
class NetworkClusterInfo(MyBaseModel):
    """网络及其所在集群"""
    name: str = Field(description="网络 / 端口组名称")
    cluster_names: List[str] = Field(default_factory=list, description="可访问该网络的集群名称")
    cluster_ids: List[str] = Field(default_factory=list, description="集群 ID")
    object_type: str = Field(description="对象类型 (Network / DistributedVirtualPortgroup / OpaqueNetwork)")
    ref: str = Field(description="网络对象 ID")


class BrokenUplinkInfo(MyBaseModel):
    """作为上行链路但没有链路速率的物理网卡"""
    host: str = Field(description="主机名称")
    virtual_switch: str = Field(description="虚拟交换机名称")
    nic: str = Field(description="物理网卡设备名，如 vmnic2")
    link_speed_mbps: int = Field(default=0, description="链路速率 (Mb/s)，断开时为 0")


class VMNetworkInfo(MyBaseModel):
    """连接到某个网络的虚拟机"""
    vm_name: str = Field(description="虚拟机名称")
    network: str = Field(description="网络名称")
    host: Optional[str] = Field(default=None, description="所在主机")
    cluster: Optional[str] = Field(default=None, description="所在集群")
    power_state: Optional[str] = Field(default=None, description="电源状态")
    ref: str = Field(description="虚拟机 ID")


# =============================================================================
# 虚拟机相关模型
# =============================================================================
class VMAddressMatch(MyBaseModel):
    """按 MAC / IP / 主机名 / UUID 查找到的虚拟机"""
    name: str = Field(description="虚拟机名称")
    matched_address_or_id: str = Field(description="命中的地址或 ID")
    ref: str = Field(description="虚拟机 ID")


class VMRdmInfo(MyBaseModel):
    """使用某个 LUN 作为 RDM 的虚拟机磁盘"""
    vm_name: str = Field(description="虚拟机名称")
    disk_name: str = Field(description="磁盘标签，如 Hard disk 2")
    compatibility_mode: Optional[str] = Field(default=None, description="兼容模式 (physicalMode / virtualMode)")
    canonical_name: Optional[str] = Field(default=None, description="LUN 规范名称，如 naa.600...")
    device_display_name: Optional[str] = Field(default=None, description="LUN 显示名称")
    ref: str = Field(description="虚拟机 ID")


class VMDiskInfo(MyBaseModel):
    """虚拟机磁盘 (含 RDM) 信息"""
    vm_name: str = Field(description="虚拟机名称")
    disk_name: str = Field(description="磁盘标签")
    scsi_address: Optional[str] = Field(default=None, description="SCSI 地址，格式 总线号:单元号")
    device_display_name: Optional[str] = Field(default=None, description="RDM 对应 LUN 的显示名称")
    size_gb: float = Field(description="容量 (GB)")
    canonical_name: Optional[str] = Field(default=None, description="RDM 对应 LUN 的规范名称")
    datastore_path: Optional[str] = Field(default=None, description="磁盘文件的数据存储路径")


class VMEvcInfo(MyBaseModel):
    """虚拟机与所在集群的 EVC 模式"""
    name: str = Field(description="虚拟机名称")
    power_state: Optional[str] = Field(default=None, description="电源状态")
    vm_evc_mode: Optional[str] = Field(default=None, description="虚拟机当前所需的 EVC 模式")
    cluster_evc_mode: Optional[str] = Field(default=None, description="集群 EVC 模式")
    cluster_name: Optional[str] = Field(default=None, description="集群名称")


class DuplicateMacInfo(MyBaseModel):
    """重复的 MAC 地址"""
    vm_names: List[str] = Field(description="使用该 MAC 的虚拟机名称")
    duplicated_mac: str = Field(description="重复的 MAC 地址")
    refs: List[str] = Field(description="虚拟机 ID")
    count: int = Field(description="使用该 MAC 的网卡数量")


class TemplateInfo(MyBaseModel):
    """模板注册位置"""
    name: str = Field(description="模板名称")
    host: Optional[str] = Field(default=None, description="注册所在主机")
    cluster: Optional[str] = Field(default=None, description="主机所在集群")
    ref: str = Field(description="模板 ID")


# =============================================================================
# 主机相关模型
# =============================================================================
class HostHbaInfo(MyBaseModel):
    """光纤通道 HBA 信息"""
    host: str = Field(description="主机名称")
    device_name: str = Field(description="HBA 设备名，如 vmhba2")
    port_wwn: str = Field(description="端口 WWN")
    node_wwn: str = Field(description="节点 WWN")
    status: Optional[str] = Field(default=None, description="HBA 状态")


class HostFirmwareInfo(MyBaseModel):
    """主机固件版本"""
    host: str = Field(description="主机名称")
    system_bios: Optional[str] = Field(default=None, description="系统 BIOS 版本")
    smart_array_firmware: Optional[str] = Field(default=None, description="Smart Array 控制器固件")
    ilo_firmware: Optional[str] = Field(default=None, description="iLO 固件")
    model: Optional[str] = Field(default=None, description="服务器型号")


class HostNicDriverInfo(MyBaseModel):
    """主机网卡驱动与固件版本"""
    host: str = Field(description="主机名称")
    nic_driver_versions: List[str] = Field(default_factory=list, description="网卡驱动组件版本")
    nic_firmware_versions: List[str] = Field(default_factory=list, description="网卡固件版本")


class HostLogicalVolumeInfo(MyBaseModel):
    """主机阵列控制器上的逻辑卷"""
    host: str = Field(description="主机名称")
    logical_volumes: List[str] = Field(default_factory=list, description="逻辑卷描述")


# =============================================================================
# 权限 / 连接 / 任务
# =============================================================================
class RoleInfo(MyBaseModel):
    """vCenter 角色"""
    name: str = Field(description="角色名称")
    role_id: int = Field(description="角色 ID")
    privileges: List[str] = Field(default_factory=list, description="权限 ID 列表")
    server: Optional[str] = Field(default=None, description="所在 vCenter")


class ConnectionInfo(MyBaseModel):
    """vCenter 连接"""
    server: str = Field(description="vCenter 地址")
    port: int = Field(default=443, description="端口")
    user: Optional[str] = Field(default=None, description="登录用户")
    connected: bool = Field(description="是否已连接")
    error: Optional[str] = Field(default=None, description="连接失败原因")


class TaskInfo(MyBaseModel):
    """vCenter 任务状态"""
    task_id: str = Field(description="任务 ID")
    state: Optional[str] = Field(default=None, description="任务状态 (queued/running/success/error)")
    progress: Optional[int] = Field(default=None, description="进度 (%)")
    entity_name: Optional[str] = Field(default=None, description="任务作用的对象")
    description: Optional[str] = Field(default=None, description="任务描述")
    error: Optional[str] = Field(default=None, description="失败原因")
