# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 网络相关查询
"""

import logging
from typing import List, Optional, Sequence

from pyVmomi import vim

from ..client import VSphereClient, ref_id, ref_type
from ..models import BrokenUplinkInfo, NetworkClusterInfo, VMNetworkInfo
from ..utils.filters import NameFilter, build_name_filter


logger = logging.getLogger(__name__)


def _cluster_of(host_item: Optional[dict]):
    """主机的父对象为集群时返回该集群，独立主机返回 None"""
    if not host_item:
        return None
    parent = host_item.get('parent')
    if isinstance(parent, vim.ClusterComputeResource):
        return parent
    return None


def get_network_cluster_info(
    client: VSphereClient,
    name_patterns: Optional[Sequence[str]] = None,
    literal_names: Optional[Sequence[str]] = None,
) -> List[NetworkClusterInfo]:
    """查询网络 (标准端口组 / 分布式端口组) 可在哪些集群中使用"""
    name_filter = build_name_filter(name_patterns, literal_names)
    networks = client.find_objects(vim.Network, ["host"], name_filter=name_filter)
    if not networks:
        logger.warning(f"没有匹配 {name_filter.pattern} 的网络")
        return []

    hosts = client.index_by_id(vim.HostSystem, ["parent"])
    clusters = client.index_by_id(vim.ClusterComputeResource, ["name"])

    results = []
    for item in networks:
        cluster_ids = []
        for host in item.get('host') or []:
            cluster = _cluster_of(hosts.get(ref_id(host)))
            cluster_id = ref_id(cluster)
            if cluster_id and cluster_id not in cluster_ids:
                cluster_ids.append(cluster_id)

        cluster_ids.sort()
        results.append(NetworkClusterInfo(
            name=item['name'],
            cluster_names=[clusters[c]['name'] for c in cluster_ids if c in clusters],
            cluster_ids=cluster_ids,
            object_type=ref_type(item['obj']),
            ref=ref_id(item['obj'])
        ))

    return results


def _uplinks(network_config) -> List[tuple]:
    """返回 (交换机名称, 物理网卡 key) 列表，包括标准交换机和分布式交换机代理"""
    uplinks = []
    for vswitch in getattr(network_config, 'vswitch', None) or []:
        for pnic_key in vswitch.pnic or []:
            uplinks.append((vswitch.name, pnic_key))
    for proxy in getattr(network_config, 'proxySwitch', None) or []:
        for pnic_key in proxy.pnic or []:
            uplinks.append((proxy.dvsName, pnic_key))
    return uplinks


def get_host_broken_uplinks(
    client: VSphereClient,
    name_pattern: Optional[str] = ".+",
    literal_name: Optional[str] = None,
) -> List[BrokenUplinkInfo]:
    """
    查找链路断开的上行链路

    作为虚拟交换机上行链路使用，但没有链路速率 (linkSpeed 为空或速率为 0)
    的物理网卡。
    """
    if literal_name:
        name_filter = NameFilter.from_literals([literal_name])
    else:
        name_filter = NameFilter.from_patterns([name_pattern or ".+"])

    hosts = client.find_objects(vim.HostSystem, ["config.network"], name_filter=name_filter)
    if not hosts:
        logger.warning(f"没有匹配 {name_filter.pattern} 的主机")
        return []

    results = []
    for item in hosts:
        network_config = item.get('config.network')
        if network_config is None:
            logger.warning(f"主机 {item['name']} 没有网络配置 (可能已断开连接)")
            continue

        pnics = {pnic.key: pnic for pnic in network_config.pnic or []}
        for switch_name, pnic_key in _uplinks(network_config):
            pnic = pnics.get(pnic_key)
            if pnic is None:
                continue
            speed = pnic.linkSpeed.speedMb if pnic.linkSpeed else 0
            if speed:
                continue
            results.append(BrokenUplinkInfo(
                host=item['name'],
                virtual_switch=switch_name,
                nic=pnic.device,
                link_speed_mbps=0
            ))

    return results


def get_vm_by_network(
    client: VSphereClient,
    name_patterns: Optional[Sequence[str]] = None,
    literal_names: Optional[Sequence[str]] = None,
) -> List[VMNetworkInfo]:
    """查询连接到指定网络的虚拟机，并给出其主机和集群"""
    name_filter = build_name_filter(name_patterns, literal_names)
    networks = client.find_objects(vim.Network, ["vm"], name_filter=name_filter)
    if not networks:
        logger.warning(f"没有匹配 {name_filter.pattern} 的网络")
        return []

    vms = client.index_by_id(vim.VirtualMachine, ["name", "runtime.host", "runtime.powerState"])
    hosts = client.index_by_id(vim.HostSystem, ["name", "parent"])
    clusters = client.index_by_id(vim.ClusterComputeResource, ["name"])

    results = []
    for network in networks:
        for vm_ref in network.get('vm') or []:
            vm = vms.get(ref_id(vm_ref))
            if vm is None:
                continue
            host = hosts.get(ref_id(vm.get('runtime.host')))
            cluster = clusters.get(ref_id(_cluster_of(host)))
            power_state = vm.get('runtime.powerState')
            results.append(VMNetworkInfo(
                vm_name=vm['name'],
                network=network['name'],
                host=host['name'] if host else None,
                cluster=cluster['name'] if cluster else None,
                power_state=str(power_state) if power_state else None,
                ref=ref_id(vm_ref)
            ))

    return results
