# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 模板操作

模板无法直接迁移或更换注册主机，需要经过
模板 -> 临时虚拟机 -> 模板 的转换。
"""

import random
import logging
from enum import Enum
from typing import List, Optional, Sequence

from pyVmomi import vim, vmodl

from ..client import VSphereClient, ref_id
from ..models import TemplateInfo
from ..utils.errors import PreconditionError, RemoteOperationError, ResolutionError, fault_message
from ..utils.filters import NameFilter


logger = logging.getLogger(__name__)


class TemplateState(str, Enum):
    TEMPLATE = "template"
    MACHINE = "machine"


class TemplateConversion:
    """
    模板 -> 临时虚拟机 -> 模板

    进入时转换为虚拟机 (默认注册在其当前主机上)，退出时无论中间操作
    是否成功都转换回模板。迁移只能在 MACHINE 状态下进行。
    """

    def __init__(self, vm, name: str, host=None, pool=None):
        self.vm = vm
        self.name = name
        self.host = host
        self.pool = pool
        self.state = TemplateState.TEMPLATE

    def __enter__(self) -> "TemplateConversion":
        host = self.host or self.vm.runtime.host
        if host is None:
            raise PreconditionError.failed(
                f"模板 {self.name} 没有注册主机，无法转换为虚拟机",
                "请检查模板是否处于孤立 (orphaned) 状态，或先用 moveTemplateToHost 指定主机",
                parameter="host"
            )
        pool = self.pool or host.parent.resourcePool
        logger.info(f"模板 {self.name} 临时转换为虚拟机")
        try:
            self.vm.MarkAsVirtualMachine(pool=pool, host=host)
        except vmodl.MethodFault as e:
            raise RemoteOperationError.from_exception(e, f"MarkAsVirtualMachine {self.name}")
        self.state = TemplateState.MACHINE
        return self

    def relocate(self, client: VSphereClient, spec):
        if self.state != TemplateState.MACHINE:
            raise PreconditionError.failed(
                f"模板 {self.name} 尚未转换为虚拟机，不能迁移",
                "请在 TemplateConversion 上下文中执行迁移"
            )
        try:
            task = self.vm.RelocateVM_Task(spec=spec)
        except vmodl.MethodFault as e:
            raise RemoteOperationError.from_exception(e, f"relocate template {self.name}")
        return client.wait_for_task(task, f"relocate template {self.name}")

    def __exit__(self, exc_type, exc, tb):
        if self.state != TemplateState.MACHINE:
            return False
        try:
            self.vm.MarkAsTemplate()
            self.state = TemplateState.TEMPLATE
            logger.info(f"{self.name} 已转换回模板")
        except vmodl.MethodFault as e:
            logger.error(f"{self.name} 转换回模板失败，需要手动处理: {fault_message(e)}")
            if exc_type is None:
                raise RemoteOperationError.from_exception(e, f"MarkAsTemplate {self.name}")
        return False


def _eligible_hosts(hosts_index, cluster_item) -> List[dict]:
    """集群中已连接且不在维护模式的主机"""
    eligible = []
    for host in cluster_item.get('host') or []:
        item = hosts_index.get(ref_id(host))
        if item is None:
            continue
        if str(item.get('runtime.connectionState')) != 'connected':
            continue
        if item.get('runtime.inMaintenanceMode'):
            continue
        eligible.append(item)
    return eligible


def move_template_to_host(
    client: VSphereClient,
    template_names: Sequence[str],
    destination_cluster: Optional[str] = None,
    rng=None,
) -> List[TemplateInfo]:
    """
    将模板重新注册到目标集群 (默认为当前集群) 中一台可用主机上

    常用于主机进入维护模式前把模板移走。
    """
    rng = rng or random.Random()

    hosts = client.index_by_id(
        vim.HostSystem, ["name", "parent", "runtime.connectionState", "runtime.inMaintenanceMode"]
    )
    clusters = client.index_by_id(vim.ClusterComputeResource, ["name", "host", "resourcePool"])

    target_cluster = None
    if destination_cluster:
        target_cluster = client.resolve_single(
            vim.ClusterComputeResource, destination_cluster, "集群", "destination_cluster"
        )

    templates = client.find_objects(
        vim.VirtualMachine, ["config.template", "runtime.host"],
        name_filter=NameFilter.from_literals(template_names)
    )
    found = {item['name'] for item in templates}
    missing = [name for name in template_names if name not in found]
    if missing:
        raise ResolutionError.not_found("模板", ", ".join(missing), "template_names")

    results = []
    for item in templates:
        name = item['name']
        if not item.get('config.template'):
            raise PreconditionError.failed(
                f"'{name}' 不是模板", "请只提供模板名称", parameter="template_names"
            )

        current_host = hosts.get(ref_id(item.get('runtime.host')))
        cluster_ref = target_cluster or (current_host.get('parent') if current_host else None)
        cluster = clusters.get(ref_id(cluster_ref))
        if cluster is None:
            raise PreconditionError.failed(
                f"无法确定模板 {name} 的目标集群", "请通过 destination_cluster 指定集群",
                parameter="destination_cluster"
            )

        candidates = _eligible_hosts(hosts, cluster)
        if not candidates:
            raise PreconditionError.failed(
                f"集群 {cluster['name']} 中没有可用的主机 (已连接且未处于维护模式)",
                "请退出维护模式或选择其他集群", parameter="destination_cluster"
            )

        target = rng.choice(candidates)
        logger.info(f"模板 {name} 注册到主机 {target['name']} (集群 {cluster['name']})")
        with TemplateConversion(item['obj'], name, host=target['obj'], pool=cluster.get('resourcePool')):
            pass

        results.append(TemplateInfo(
            name=name,
            host=target['name'],
            cluster=cluster['name'],
            ref=ref_id(item['obj'])
        ))

    return results
