# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 主机硬件相关查询

固件、驱动和逻辑卷信息来自主机的硬件健康传感器 (CIM 提供者上报)，
主要面向 HPE 服务器；其他厂商的主机可能没有对应条目，字段为空。
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pyVmomi import vim

from ..client import VSphereClient
from ..models import HostFirmwareInfo, HostHbaInfo, HostLogicalVolumeInfo, HostNicDriverInfo
from ..utils.errors import VSphereAdminError
from ..utils.filters import NameFilter
from ..utils.validators import validate_exclusive


logger = logging.getLogger(__name__)

SOFTWARE_COMPONENTS = "software components"
NIC_FIRMWARE_HINTS = ("nic", "network", "ethernet", "flexfabric", "adapter")


def select_hosts(
    client: VSphereClient,
    properties: Sequence[str],
    name_pattern: Optional[str] = None,
    ids: Optional[Sequence[str]] = None,
    cluster_name: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """按名称正则、对象 ID 或集群选择主机 (三者互斥，都不提供时选择全部)"""
    if error := validate_exclusive(
        {"name_pattern": name_pattern, "ids": ids, "cluster_name": cluster_name}, required=False
    ):
        raise VSphereAdminError(error)

    if ids:
        hosts = client.find_by_ids(vim.HostSystem, ids, properties)
    elif cluster_name:
        cluster = client.resolve_single(vim.ClusterComputeResource, cluster_name, "集群", "cluster_name")
        hosts = client.find_objects(vim.HostSystem, properties, root=cluster)
    else:
        hosts = client.find_objects(
            vim.HostSystem, properties, name_filter=NameFilter.from_patterns([name_pattern or ".+"])
        )

    if not hosts:
        logger.warning("没有匹配的主机")
    return hosts


def format_wwn(value: Optional[int]) -> str:
    """WWN 以有符号 64 位整数上报，转换为 20:00:00:25:b5:... 格式"""
    if value is None:
        return ""
    digits = "%016x" % (value & 0xFFFFFFFFFFFFFFFF)
    return ":".join(digits[i:i + 2] for i in range(0, 16, 2))


def _numeric_sensors(health_runtime) -> List[Any]:
    info = getattr(health_runtime, 'systemHealthInfo', None)
    return list(getattr(info, 'numericSensorInfo', None) or [])


def _sensor_named(sensors, *needles: str) -> Optional[str]:
    for sensor in sensors:
        name = sensor.name or ""
        if any(needle.lower() in name.lower() for needle in needles):
            return name.strip()
    return None


def get_host_hba_wwn(
    client: VSphereClient,
    name_pattern: Optional[str] = None,
    ids: Optional[Sequence[str]] = None,
    cluster_name: Optional[str] = None,
) -> List[HostHbaInfo]:
    """列出主机光纤通道 HBA 的端口 / 节点 WWN"""
    results = []
    hosts = select_hosts(client, ["config.storageDevice.hostBusAdapter"], name_pattern, ids, cluster_name)
    for item in hosts:
        for hba in item.get('config.storageDevice.hostBusAdapter') or []:
            if not isinstance(hba, vim.host.FibreChannelHba):
                continue
            results.append(HostHbaInfo(
                host=item['name'],
                device_name=hba.device,
                port_wwn=format_wwn(hba.portWorldWideName),
                node_wwn=format_wwn(hba.nodeWorldWideName),
                status=hba.status
            ))
    return results


def get_host_firmware_info(
    client: VSphereClient,
    name_pattern: Optional[str] = None,
    ids: Optional[Sequence[str]] = None,
) -> List[HostFirmwareInfo]:
    """主机 BIOS、Smart Array 控制器和 iLO 固件版本"""
    properties = ["hardware.systemInfo", "hardware.biosInfo", "runtime.healthSystemRuntime"]
    results = []
    for item in select_hosts(client, properties, name_pattern, ids):
        sensors = _numeric_sensors(item.get('runtime.healthSystemRuntime'))
        system_info = item.get('hardware.systemInfo')

        bios = _sensor_named(sensors, "System BIOS")
        bios_info = item.get('hardware.biosInfo')
        if bios is None and bios_info is not None and bios_info.biosVersion:
            release = bios_info.releaseDate.date().isoformat() if bios_info.releaseDate else None
            bios = f"{bios_info.biosVersion} {release}" if release else bios_info.biosVersion

        results.append(HostFirmwareInfo(
            host=item['name'],
            system_bios=bios,
            smart_array_firmware=_sensor_named(sensors, "Smart Array"),
            ilo_firmware=_sensor_named(sensors, "iLO", "Integrated Lights-Out"),
            model=system_info.model if system_info else None
        ))
    return results


def get_host_nic_firmware_driver_info(
    client: VSphereClient,
    name_pattern: Optional[str] = None,
    ids: Optional[Sequence[str]] = None,
) -> List[HostNicDriverInfo]:
    """
    主机网卡驱动与固件版本

    驱动版本取自 "Software Components" 传感器中与物理网卡驱动同名的组件，
    固件版本取自名称含 firmware 且与网卡相关的传感器。
    """
    results = []
    for item in select_hosts(client, ["config.network.pnic", "runtime.healthSystemRuntime"], name_pattern, ids):
        sensors = _numeric_sensors(item.get('runtime.healthSystemRuntime'))
        drivers = sorted({
            pnic.driver.replace('_', '-').lower()
            for pnic in item.get('config.network.pnic') or []
            if pnic.driver
        })

        driver_versions, firmware_versions = [], []
        for sensor in sensors:
            name = (sensor.name or "").strip()
            lowered = name.lower()
            normalized = lowered.replace('_', '-')
            if (sensor.sensorType or "").lower() == SOFTWARE_COMPONENTS \
                    and any(driver in normalized for driver in drivers):
                driver_versions.append(name)
            elif "firmware" in lowered and any(hint in lowered for hint in NIC_FIRMWARE_HINTS):
                firmware_versions.append(name)

        results.append(HostNicDriverInfo(
            host=item['name'],
            nic_driver_versions=driver_versions,
            nic_firmware_versions=firmware_versions
        ))
    return results


def get_host_logical_volume_info(
    client: VSphereClient,
    name_pattern: Optional[str] = None,
    ids: Optional[Sequence[str]] = None,
) -> List[HostLogicalVolumeInfo]:
    """主机阵列控制器上的逻辑卷 (来自存储健康状态)"""
    results = []
    for item in select_hosts(client, ["runtime.healthSystemRuntime"], name_pattern, ids):
        health = item.get('runtime.healthSystemRuntime')
        status_info = getattr(health, 'hardwareStatusInfo', None)
        volumes = [
            storage.name.strip()
            for storage in getattr(status_info, 'storageStatusInfo', None) or []
            if storage.name and storage.name.strip().startswith("Logical Volume")
        ]
        results.append(HostLogicalVolumeInfo(host=item['name'], logical_volumes=volumes))
    return results
