# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 命令包导出

每个命令都以显式的 VSphereClient 作为第一个参数。
"""

from .evacuation import (
    plan_evacuation,
    execute_plans,
    evacuate_datastore,
)

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

from .template import (
    TemplateConversion,
    move_template_to_host,
)

from .role import copy_role

__all__ = [
    # 数据存储疏散
    "plan_evacuation",
    "execute_plans",
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
    # 模板
    "TemplateConversion",
    "move_template_to_host",
    # 角色
    "copy_role",
]
