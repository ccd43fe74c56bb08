# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 工具包导出
"""

from .common import AppContext

from .connection import (
    connect_vsphere,
    disconnect_vsphere,
    get_task_info,
)

from .evacuation import evacuate_datastore

from .network import (
    get_network_cluster_info,
    get_host_broken_uplinks,
    get_vm_by_network,
)

from .vm import (
    get_vm_by_address,
    get_vm_by_rdm,
    get_vm_disks_and_rdm,
    get_vm_evc_info,
    find_duplicate_mac_addresses,
)

from .host import (
    get_host_hba_wwn,
    get_host_firmware_info,
    get_host_nic_firmware_driver_info,
    get_host_logical_volume_info,
)

from .admin import (
    move_template_to_host,
    copy_role,
)

__all__ = [
    "AppContext",
    # 连接与任务
    "connect_vsphere",
    "disconnect_vsphere",
    "get_task_info",
    # 数据存储疏散
    "evacuate_datastore",
    # 网络
    "get_network_cluster_info",
    "get_host_broken_uplinks",
    "get_vm_by_network",
    # 虚拟机
    "get_vm_by_address",
    "get_vm_by_rdm",
    "get_vm_disks_and_rdm",
    "get_vm_evc_info",
    "find_duplicate_mac_addresses",
    # 主机
    "get_host_hba_wwn",
    "get_host_firmware_info",
    "get_host_nic_firmware_driver_info",
    "get_host_logical_volume_info",
    # 模板与角色
    "move_template_to_host",
    "copy_role",
]
