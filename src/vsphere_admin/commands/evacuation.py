# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 数据存储疏散

把源数据存储上的虚拟机 / 模板的配置文件和磁盘迁移到目标数据存储池：

1. 规划 (plan_evacuation)：找出引用源数据存储的所有对象，按排除规则跳过，
   对位于源上的配置文件和每块磁盘独立地从目标池中随机选择目标。
2. 执行 (execute_plans)：逐个对象调用 RelocateVM_Task。模板需要先转换为
   虚拟机，迁移完成后再转换回模板，且总是同步执行。

单个对象失败不会中断后续对象的处理。
"""

import re
import random
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pyVmomi import vim, vmodl

from ..client import VSphereClient, ref_id
from ..models import (
    DiskRelocation,
    EvacuationReport,
    EvacuationResult,
    EvacuationStatus,
    RelocationPlan,
    SkippedObject,
    SkipReason,
)
from ..utils.errors import (
    RemoteOperationError,
    ResolutionError,
    VSphereAdminError,
    parse_vsphere_error,
)
from ..utils.filters import NameFilter
from .template import TemplateConversion


logger = logging.getLogger(__name__)

# 数据存储路径，如 "[ds01] web01/web01.vmx"
DATASTORE_PATH_RE = re.compile(r'^\[\s*([^\]]+?)\s*\]')

VM_PROPERTIES = [
    "name",
    "config.template",
    "config.files.vmPathName",
    "config.hardware.device",
]

# 目标池成员：(名称, 数据存储引用)
PoolMember = Tuple[str, Any]


def datastore_name_from_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    match = DATASTORE_PATH_RE.match(path)
    return match.group(1) if match else None


# =============================================================================
# 目标解析
# =============================================================================
def resolve_destination_pool(client: VSphereClient, destination: str, source=None) -> List[PoolMember]:
    """
    将目标名称解析为数据存储池

    先按数据存储名称精确匹配；没有匹配时按数据存储集群 (StoragePod)
    匹配，取其全部成员。源数据存储本身不会进入目标池。
    """
    literal = NameFilter.from_literals([destination])

    datastores = client.find_objects(vim.Datastore, name_filter=literal)
    if len(datastores) > 1:
        raise ResolutionError.ambiguous("数据存储", destination, len(datastores), "destination")

    if datastores:
        members = [(datastores[0]['name'], datastores[0]['obj'])]
    else:
        pods = client.find_objects(vim.StoragePod, ["childEntity"], name_filter=literal)
        if not pods:
            raise ResolutionError.not_found("数据存储或数据存储集群", destination, "destination")
        if len(pods) > 1:
            raise ResolutionError.ambiguous("数据存储集群", destination, len(pods), "destination")

        children = [c for c in pods[0].get('childEntity') or [] if isinstance(c, vim.Datastore)]
        members = [
            (item['name'], item['obj'])
            for item in client.collect_properties(vim.Datastore, ["name"], objects=children)
        ]

    source_id = ref_id(source)
    pool = [(name, ds) for name, ds in members if ref_id(ds) != source_id]
    if not pool:
        raise ResolutionError.not_found("可用的目标数据存储", destination, "destination")

    return pool


# =============================================================================
# 规划
# =============================================================================
def build_plan(
    item: Dict[str, Any],
    source_name: str,
    source_id: str,
    pool: Sequence[PoolMember],
    rng,
    datastore_names: Dict[str, str],
    datastore_refs: Dict[str, Any],
) -> RelocationPlan:
    """
    为单个对象生成迁移计划

    只有当前位于源数据存储上的配置文件和磁盘会被分配新目标；
    其他磁盘作为不迁移条目保留其当前位置。每一项独立随机选择。
    """
    vm = item['obj']
    config_path = item.get('config.files.vmPathName')
    config_current = datastore_name_from_path(config_path)

    plan = RelocationPlan(
        vm_name=item.get('name'),
        ref=ref_id(vm),
        is_template=bool(item.get('config.template')),
        source_datastore=source_name,
        config_current_datastore=config_current,
        vm=vm,
        config_current_ref=datastore_refs.get(config_current),
    )

    if config_current == source_name:
        name, ds = rng.choice(pool)
        plan.config_destination = name
        plan.config_destination_ref = ds

    for device in item.get('config.hardware.device') or []:
        if not isinstance(device, vim.vm.device.VirtualDisk):
            continue

        current_ref = getattr(device.backing, 'datastore', None)
        current_id = ref_id(current_ref)
        entry = DiskRelocation(
            disk_key=device.key,
            label=device.deviceInfo.label if device.deviceInfo else None,
            current_datastore=datastore_names.get(current_id),
            current_ref=current_ref,
        )

        if current_id is not None and current_id == source_id:
            name, ds = rng.choice(pool)
            entry.target_datastore = name
            entry.target_ref = ds
            entry.moves = True
        else:
            entry.target_datastore = entry.current_datastore
            entry.target_ref = current_ref

        plan.disks.append(entry)

    return plan


def plan_evacuation(
    client: VSphereClient,
    source_datastore: str,
    destination: str,
    exclude_names: Optional[Sequence[str]] = None,
    exclude_all_templates: bool = False,
    rng=None,
) -> Tuple[List[RelocationPlan], List[SkippedObject], List[PoolMember]]:
    """
    生成疏散计划

    rng 可注入 (需提供 choice 方法)，默认使用新的 random.Random。
    返回 (计划列表, 被跳过的对象, 目标池)。
    """
    rng = rng or random.Random()
    excluded = set(exclude_names or [])

    source = client.resolve_single(vim.Datastore, source_datastore, "数据存储", "source_datastore")
    pool = resolve_destination_pool(client, destination, source)
    logger.info(f"疏散 {source_datastore} -> 目标池 {[name for name, _ in pool]}")

    datastores = client.find_objects(vim.Datastore)
    datastore_names = {ref_id(d['obj']): d['name'] for d in datastores}
    datastore_refs = {d['name']: d['obj'] for d in datastores}
    source_id = ref_id(source)

    candidates = client.collect_properties(vim.VirtualMachine, VM_PROPERTIES, objects=list(source.vm or []))

    plans, skipped = [], []
    for item in candidates:
        name = item.get('name')
        is_template = bool(item.get('config.template'))

        if name in excluded:
            logger.info(f"跳过 {name}: 在排除列表中")
            skipped.append(SkippedObject(name=name, ref=ref_id(item['obj']), reason=SkipReason.EXCLUDED_BY_NAME))
            continue

        if is_template and exclude_all_templates:
            logger.info(f"跳过模板 {name}: 已排除所有模板")
            skipped.append(SkippedObject(name=name, ref=ref_id(item['obj']), reason=SkipReason.EXCLUDED_TEMPLATE))
            continue

        plan = build_plan(item, source_datastore, source_id, pool, rng, datastore_names, datastore_refs)
        if not plan.has_moves:
            logger.warning(f"{name} 引用了 {source_datastore}，但配置文件和磁盘都不在其上 (可能是 ISO 或快照文件)")
        plans.append(plan)

    return plans, skipped, pool


# =============================================================================
# 执行
# =============================================================================
def build_relocate_spec(plan: RelocationPlan):
    """
    构造 RelocateSpec

    未列出的磁盘会跟随配置文件迁移，因此所有磁盘都写入磁盘定位器，
    不迁移的磁盘指向其当前数据存储。
    """
    spec = vim.vm.RelocateSpec()
    datastore = plan.config_destination_ref
    if datastore is None:
        datastore = plan.config_current_ref
    if datastore is not None:
        spec.datastore = datastore
    spec.disk = [
        vim.vm.RelocateSpec.DiskLocator(diskId=disk.disk_key, datastore=disk.target_ref)
        for disk in plan.disks
        if disk.target_ref is not None
    ]
    return spec


def _result(plan: RelocationPlan, status: EvacuationStatus, **kwargs) -> EvacuationResult:
    return EvacuationResult(
        vm_name=plan.vm_name,
        ref=plan.ref,
        is_template=plan.is_template,
        source_datastore=plan.source_datastore,
        config_destination=plan.config_destination,
        disk_moves=plan.moving_disks,
        status=status,
        **kwargs
    )


def _describe(plan: RelocationPlan) -> str:
    parts = []
    if plan.config_destination:
        parts.append(f"config -> {plan.config_destination}")
    parts.extend(f"{d.label or d.disk_key} -> {d.target_datastore}" for d in plan.moving_disks)
    return ", ".join(parts) or "无需迁移"


def execute_plan(client: VSphereClient, plan: RelocationPlan, dry_run: bool = False,
                 run_async: bool = False) -> EvacuationResult:
    """执行单个计划，远端错误以异常形式抛出"""
    kind = "模板" if plan.is_template else "虚拟机"

    if dry_run:
        logger.info(f"[dry-run] {kind} {plan.vm_name}: {_describe(plan)}")
        return _result(plan, EvacuationStatus.DRY_RUN)

    if not plan.has_moves:
        return _result(plan, EvacuationStatus.NO_CHANGE)

    spec = build_relocate_spec(plan)
    logger.info(f"迁移{kind} {plan.vm_name}: {_describe(plan)}")

    if plan.is_template:
        with TemplateConversion(plan.vm, plan.vm_name) as conversion:
            conversion.relocate(client, spec)
        return _result(plan, EvacuationStatus.COMPLETED)

    try:
        task = plan.vm.RelocateVM_Task(spec=spec)
    except vmodl.MethodFault as e:
        raise RemoteOperationError.from_exception(e, f"relocate {plan.vm_name}")

    if run_async:
        task_id = ref_id(task)
        logger.info(f"{plan.vm_name} 迁移任务已提交: {task_id}")
        return _result(plan, EvacuationStatus.SUBMITTED, task_id=task_id)

    client.wait_for_task(task, f"relocate {plan.vm_name}")
    return _result(plan, EvacuationStatus.COMPLETED, task_id=ref_id(task))


def execute_plans(client: VSphereClient, plans: Sequence[RelocationPlan], dry_run: bool = False,
                  run_async: bool = False) -> List[EvacuationResult]:
    """按顺序执行所有计划，单个对象失败记录在其结果中并继续处理后续对象"""
    results = []
    for plan in plans:
        try:
            results.append(execute_plan(client, plan, dry_run=dry_run, run_async=run_async))
        except (vmodl.MethodFault, VSphereAdminError) as e:
            error = parse_vsphere_error(e, f"relocate {plan.vm_name}")
            logger.error(f"{plan.vm_name} 迁移失败: {error.message}")
            results.append(_result(plan, EvacuationStatus.FAILED, error=error.message))
        except Exception as e:
            error = parse_vsphere_error(e, f"relocate {plan.vm_name}")
            logger.exception(f"{plan.vm_name} 迁移时发生意外错误: {error.message}")
            results.append(_result(plan, EvacuationStatus.FAILED, error=error.message))
    return results


def evacuate_datastore(
    client: VSphereClient,
    source_datastore: str,
    destination: str,
    exclude_names: Optional[Sequence[str]] = None,
    exclude_all_templates: bool = False,
    run_async: bool = False,
    dry_run: bool = False,
    rng=None,
) -> EvacuationReport:
    """规划并执行一次数据存储疏散"""
    plans, skipped, pool = plan_evacuation(
        client, source_datastore, destination,
        exclude_names=exclude_names,
        exclude_all_templates=exclude_all_templates,
        rng=rng,
    )
    results = execute_plans(client, plans, dry_run=dry_run, run_async=run_async)

    report = EvacuationReport(
        source_datastore=source_datastore,
        destination_pool=[name for name, _ in pool],
        dry_run=dry_run,
        run_async=run_async,
        results=results,
        skipped=skipped,
    )
    if report.failed:
        logger.warning(f"疏散 {source_datastore} 完成，{len(report.failed)} 个对象失败")
    return report
