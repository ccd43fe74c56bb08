# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 虚拟机相关查询
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pyVmomi import vim

from ..client import VSphereClient, ref_id
from ..models import DuplicateMacInfo, VMAddressMatch, VMDiskInfo, VMEvcInfo, VMRdmInfo
from ..utils.errors import VSphereAdminError
from ..utils.filters import NameFilter, build_name_filter
from ..utils.validators import validate_exclusive


logger = logging.getLogger(__name__)

KB_PER_GB = 1024 * 1024


def normalize_mac(mac: str) -> str:
    return mac.strip().lower().replace('-', ':')


def _normalize_uuid(value: str) -> str:
    """vCenter 返回带连字符的 UUID，输入允许省略连字符"""
    return value.strip().lower().replace('-', '')


def _ethernet_cards(devices) -> Iterable:
    for device in devices or []:
        if isinstance(device, vim.vm.device.VirtualEthernetCard) and device.macAddress:
            yield device


def _virtual_disks(devices) -> Iterable:
    for device in devices or []:
        if isinstance(device, vim.vm.device.VirtualDisk):
            yield device


def _is_rdm(disk) -> bool:
    return isinstance(disk.backing, vim.vm.device.VirtualDisk.RawDiskMappingVer1BackingInfo)


def _label(device) -> str:
    if device.deviceInfo and device.deviceInfo.label:
        return device.deviceInfo.label
    return str(device.key)


# =============================================================================
# 按地址查找
# =============================================================================
def get_vm_by_address(
    client: VSphereClient,
    mac: Optional[Sequence[str]] = None,
    ip: Optional[str] = None,
    ip_wildcard: Optional[str] = None,
    guest_hostname: Optional[str] = None,
    uuid: Optional[str] = None,
) -> List[VMAddressMatch]:
    """
    按 MAC 地址、IP 地址 (精确或通配)、客户机主机名或 UUID 查找虚拟机

    五种方式互斥。IP 与主机名依赖 VMware Tools 上报的客户机信息。
    """
    if error := validate_exclusive({
        "mac": mac, "ip": ip, "ip_wildcard": ip_wildcard,
        "guest_hostname": guest_hostname, "uuid": uuid,
    }):
        raise VSphereAdminError(error)

    results = []

    if mac:
        wanted = {normalize_mac(m) for m in mac}
        for item in client.find_objects(vim.VirtualMachine, ["config.hardware.device"]):
            for nic in _ethernet_cards(item.get('config.hardware.device')):
                if normalize_mac(nic.macAddress) in wanted:
                    results.append(VMAddressMatch(
                        name=item['name'], matched_address_or_id=nic.macAddress, ref=ref_id(item['obj'])
                    ))

    elif ip or ip_wildcard:
        matcher = NameFilter.from_literals([ip]) if ip else NameFilter.from_wildcard(ip_wildcard)
        for item in client.find_objects(vim.VirtualMachine, ["guest.net"]):
            for guest_nic in item.get('guest.net') or []:
                for address in guest_nic.ipAddress or []:
                    if matcher.matches(address):
                        results.append(VMAddressMatch(
                            name=item['name'], matched_address_or_id=address, ref=ref_id(item['obj'])
                        ))

    elif guest_hostname:
        wanted_host = guest_hostname.lower()
        for item in client.find_objects(vim.VirtualMachine, ["guest.hostName"]):
            hostname = item.get('guest.hostName')
            if hostname and hostname.lower() == wanted_host:
                results.append(VMAddressMatch(
                    name=item['name'], matched_address_or_id=hostname, ref=ref_id(item['obj'])
                ))

    else:
        wanted_uuid = _normalize_uuid(uuid)
        for item in client.find_objects(vim.VirtualMachine, ["config.uuid", "config.instanceUuid"]):
            for key in ('config.uuid', 'config.instanceUuid'):
                value = item.get(key)
                if value and _normalize_uuid(value) == wanted_uuid:
                    results.append(VMAddressMatch(
                        name=item['name'], matched_address_or_id=value, ref=ref_id(item['obj'])
                    ))
                    break

    if not results:
        logger.warning("没有找到匹配该地址的虚拟机")
    return results


# =============================================================================
# RDM
# =============================================================================
def _lun_index(client: VSphereClient, root=None) -> Dict[str, object]:
    """LUN uuid -> ScsiLun，来自主机的存储设备信息"""
    luns = {}
    for host in client.collect_properties(vim.HostSystem, ["config.storageDevice.scsiLun"], root=root):
        for lun in host.get('config.storageDevice.scsiLun') or []:
            luns.setdefault(lun.uuid, lun)
    return luns


def get_vm_by_rdm(
    client: VSphereClient,
    canonical_names: Sequence[str],
    cluster_name: str,
) -> List[VMRdmInfo]:
    """查找集群中以指定 LUN (按规范名称) 作为 RDM 的虚拟机"""
    cluster = client.resolve_single(vim.ClusterComputeResource, cluster_name, "集群", "cluster_name")
    wanted = {name.lower() for name in canonical_names}
    luns = _lun_index(client, root=cluster)

    results = []
    for item in client.find_objects(vim.VirtualMachine, ["config.hardware.device"], root=cluster):
        for disk in _virtual_disks(item.get('config.hardware.device')):
            if not _is_rdm(disk):
                continue
            lun = luns.get(disk.backing.lunUuid)
            if lun is None or lun.canonicalName.lower() not in wanted:
                continue
            results.append(VMRdmInfo(
                vm_name=item['name'],
                disk_name=_label(disk),
                compatibility_mode=disk.backing.compatibilityMode,
                canonical_name=lun.canonicalName,
                device_display_name=lun.displayName,
                ref=ref_id(item['obj'])
            ))

    if not results:
        logger.warning(f"集群 {cluster_name} 中没有虚拟机使用这些 LUN 作为 RDM")
    return results


def get_vm_disks_and_rdm(
    client: VSphereClient,
    name_patterns: Optional[Sequence[str]] = None,
    literal_names: Optional[Sequence[str]] = None,
    ids: Optional[Sequence[str]] = None,
    show_datastore_path: bool = False,
) -> List[VMDiskInfo]:
    """列出虚拟机的磁盘，RDM 磁盘附带 LUN 规范名称和显示名称"""
    if error := validate_exclusive(
        {"name_patterns": name_patterns, "literal_names": literal_names, "ids": ids}, required=False
    ):
        raise VSphereAdminError(error)

    properties = ["config.hardware.device"]
    if ids:
        vms = client.find_by_ids(vim.VirtualMachine, ids, properties)
    else:
        vms = client.find_objects(
            vim.VirtualMachine, properties, name_filter=build_name_filter(name_patterns, literal_names)
        )
    if not vms:
        logger.warning("没有匹配的虚拟机")
        return []

    luns = None
    results = []
    for item in vms:
        devices = item.get('config.hardware.device') or []
        controllers = {
            d.key: d for d in devices if isinstance(d, vim.vm.device.VirtualSCSIController)
        }
        for disk in _virtual_disks(devices):
            controller = controllers.get(disk.controllerKey)
            lun = None
            if _is_rdm(disk):
                if luns is None:
                    luns = _lun_index(client)
                lun = luns.get(disk.backing.lunUuid)

            results.append(VMDiskInfo(
                vm_name=item['name'],
                disk_name=_label(disk),
                scsi_address=f"{controller.busNumber}:{disk.unitNumber}" if controller else None,
                device_display_name=lun.displayName if lun else None,
                size_gb=round((disk.capacityInKB or 0) / KB_PER_GB, 2),
                canonical_name=lun.canonicalName if lun else None,
                datastore_path=getattr(disk.backing, 'fileName', None) if show_datastore_path else None
            ))

    return results


# =============================================================================
# EVC
# =============================================================================
VM_EVC_PROPERTIES = ["runtime.powerState", "runtime.minRequiredEVCModeKey", "runtime.host"]


def get_vm_evc_info(
    client: VSphereClient,
    cluster_names: Optional[Sequence[str]] = None,
    vm_names: Optional[Sequence[str]] = None,
) -> List[VMEvcInfo]:
    """对比虚拟机所需 EVC 模式与其所在集群的 EVC 模式"""
    if error := validate_exclusive({"cluster_names": cluster_names, "vm_names": vm_names}):
        raise VSphereAdminError(error)

    clusters = client.index_by_id(vim.ClusterComputeResource, ["name", "summary"])
    hosts = client.index_by_id(vim.HostSystem, ["parent"])

    if cluster_names:
        vms = []
        for name in cluster_names:
            cluster = client.resolve_single(vim.ClusterComputeResource, name, "集群", "cluster_names")
            vms.extend(client.find_objects(vim.VirtualMachine, VM_EVC_PROPERTIES, root=cluster))
    else:
        vms = client.find_objects(
            vim.VirtualMachine, VM_EVC_PROPERTIES, name_filter=NameFilter.from_literals(vm_names)
        )

    if not vms:
        logger.warning("没有匹配的虚拟机")
        return []

    results = []
    for item in vms:
        host = hosts.get(ref_id(item.get('runtime.host')))
        parent = host.get('parent') if host else None
        cluster = clusters.get(ref_id(parent)) if isinstance(parent, vim.ClusterComputeResource) else None
        summary = cluster.get('summary') if cluster else None
        power_state = item.get('runtime.powerState')

        results.append(VMEvcInfo(
            name=item['name'],
            power_state=str(power_state) if power_state else None,
            vm_evc_mode=item.get('runtime.minRequiredEVCModeKey'),
            cluster_evc_mode=getattr(summary, 'currentEVCModeKey', None),
            cluster_name=cluster['name'] if cluster else None
        ))

    return results


# =============================================================================
# 重复 MAC
# =============================================================================
def group_duplicate_macs(records: Iterable[Tuple[str, str, str]]) -> List[DuplicateMacInfo]:
    """
    records 为 (虚拟机名称, 虚拟机 ID, MAC) 三元组，每块网卡一条

    返回出现超过一次的 MAC 分组，按 MAC 排序。
    """
    groups: Dict[str, List[Tuple[str, str]]] = OrderedDict()
    for vm_name, ref, mac in records:
        groups.setdefault(normalize_mac(mac), []).append((vm_name, ref))

    duplicates = []
    for mac in sorted(groups):
        members = groups[mac]
        if len(members) < 2:
            continue
        duplicates.append(DuplicateMacInfo(
            vm_names=[name for name, _ in members],
            duplicated_mac=mac,
            refs=[ref for _, ref in members],
            count=len(members)
        ))
    return duplicates


def find_duplicate_mac_addresses(client: VSphereClient) -> List[DuplicateMacInfo]:
    """查找所有虚拟机网卡中重复使用的 MAC 地址"""
    records = []
    for item in client.find_objects(vim.VirtualMachine, ["config.hardware.device"]):
        for nic in _ethernet_cards(item.get('config.hardware.device')):
            records.append((item['name'], ref_id(item['obj']), nic.macAddress))

    duplicates = group_duplicate_macs(records)
    if not duplicates:
        logger.info("没有发现重复的 MAC 地址")
    return duplicates
