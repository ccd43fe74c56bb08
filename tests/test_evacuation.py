# -*- coding: utf-8 -*-
"""数据存储疏散：规划与执行"""

from unittest.mock import MagicMock

import pytest
from pyVmomi import vim, vmodl

from vsphere_admin.commands.evacuation import (
    build_relocate_spec,
    datastore_name_from_path,
    evacuate_datastore,
    execute_plans,
    plan_evacuation,
)
from vsphere_admin.models import ErrorType, EvacuationStatus, SkipReason
from vsphere_admin.utils.errors import RemoteOperationError, ResolutionError

from .conftest import CycleChoice, FirstChoice


def _plans_by_name(plans):
    return {plan.vm_name: plan for plan in plans}


# =============================================================================
# 规划
# =============================================================================
def test_datastore_name_from_path():
    assert datastore_name_from_path("[ds1] vmA/vmA.vmx") == "ds1"
    assert datastore_name_from_path("[ shared ds ] a/a.vmx") == "shared ds"
    assert datastore_name_from_path("vmA.vmx") is None
    assert datastore_name_from_path(None) is None


def test_plan_moves_only_items_on_source(evacuation_client):
    plans, skipped, pool = plan_evacuation(evacuation_client, "ds1", "pod1", rng=FirstChoice())

    assert [name for name, _ in pool] == ["ds2", "ds3"]
    assert skipped == []

    by_name = _plans_by_name(plans)
    assert set(by_name) == {"vmA", "tmpl-rhel9", "vmC"}

    vm_a = by_name["vmA"]
    assert vm_a.config_destination == "ds2"
    disks = {d.disk_key: d for d in vm_a.disks}
    assert disks[2000].moves and disks[2000].target_datastore == "ds2"
    assert not disks[2001].moves
    assert disks[2001].current_datastore == "ds4"
    assert disks[2001].target_datastore == "ds4"

    vm_c = by_name["vmC"]
    assert vm_c.config_destination is None
    assert [d.disk_key for d in vm_c.moving_disks] == [2000]

    assert by_name["tmpl-rhel9"].is_template


def test_plan_chooses_target_per_item(evacuation_client):
    plans, _, _ = plan_evacuation(evacuation_client, "ds1", "pod1", rng=CycleChoice())
    vm_a = _plans_by_name(plans)["vmA"]

    assert vm_a.config_destination == "ds2"
    assert vm_a.moving_disks[0].target_datastore == "ds3"


def test_plan_single_datastore_destination(evacuation_client):
    plans, _, pool = plan_evacuation(evacuation_client, "ds1", "ds3")

    assert [name for name, _ in pool] == ["ds3"]
    for plan in plans:
        assert all(d.target_datastore == "ds3" for d in plan.moving_disks)


def test_plan_exclusions_are_reported(evacuation_client):
    plans, skipped, _ = plan_evacuation(
        evacuation_client, "ds1", "pod1",
        exclude_names=["vmC"], exclude_all_templates=True, rng=FirstChoice()
    )

    assert [plan.vm_name for plan in plans] == ["vmA"]
    reasons = {s.name: s.reason for s in skipped}
    assert reasons == {
        "vmC": SkipReason.EXCLUDED_BY_NAME,
        "tmpl-rhel9": SkipReason.EXCLUDED_TEMPLATE,
    }


def test_plan_exclude_names_is_exact(evacuation_client):
    plans, skipped, _ = plan_evacuation(evacuation_client, "ds1", "pod1", exclude_names=["vm"])

    assert skipped == []
    assert len(plans) == 3


def test_plan_unknown_destination(evacuation_client):
    with pytest.raises(ResolutionError) as excinfo:
        plan_evacuation(evacuation_client, "ds1", "missing")
    assert excinfo.value.error.error_type == ErrorType.RESOURCE_NOT_FOUND
    assert excinfo.value.error.parameter == "destination"


def test_plan_source_removed_from_pool(evacuation_client):
    with pytest.raises(ResolutionError):
        plan_evacuation(evacuation_client, "ds1", "ds1")


def test_plan_unknown_source(evacuation_client):
    with pytest.raises(ResolutionError) as excinfo:
        plan_evacuation(evacuation_client, "DS1", "pod1")
    assert excinfo.value.error.parameter == "source_datastore"


def test_relocate_spec_lists_every_disk(evacuation_client, datastores):
    plans, _, _ = plan_evacuation(evacuation_client, "ds1", "pod1", rng=FirstChoice())
    by_name = _plans_by_name(plans)

    spec = build_relocate_spec(by_name["vmA"])
    assert spec.datastore is datastores["ds2"]
    locators = {loc.diskId: loc.datastore for loc in spec.disk}
    assert locators == {2000: datastores["ds2"], 2001: datastores["ds4"]}

    # 配置文件不在源上时保持原位
    spec = build_relocate_spec(by_name["vmC"])
    assert spec.datastore is datastores["ds4"]


# =============================================================================
# 执行
# =============================================================================
def _vm(evacuation_inventory, name):
    for item in evacuation_inventory[vim.VirtualMachine]:
        if item['name'] == name:
            return item['obj']
    raise KeyError(name)


def test_dry_run_makes_no_changes(evacuation_client, evacuation_inventory):
    report = evacuate_datastore(evacuation_client, "ds1", "pod1", dry_run=True, rng=FirstChoice())

    assert report.dry_run
    assert {r.status for r in report.results} == {EvacuationStatus.DRY_RUN}
    for item in evacuation_inventory[vim.VirtualMachine]:
        item['obj'].RelocateVM_Task.assert_not_called()
        item['obj'].MarkAsVirtualMachine.assert_not_called()
        item['obj'].MarkAsTemplate.assert_not_called()

    vm_a = next(r for r in report.results if r.vm_name == "vmA")
    assert vm_a.config_destination == "ds2"
    assert [d.disk_key for d in vm_a.disk_moves] == [2000]


def test_sync_run_relocates_and_waits(evacuation_client, evacuation_inventory):
    report = evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())

    assert {r.status for r in report.results} == {EvacuationStatus.COMPLETED}
    assert report.failed == []
    assert len(evacuation_client.waited) == 3

    vm_a = _vm(evacuation_inventory, "vmA")
    vm_a.RelocateVM_Task.assert_called_once()
    vm_a.MarkAsVirtualMachine.assert_not_called()


def test_template_round_trip(evacuation_client, evacuation_inventory):
    evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())

    template = _vm(evacuation_inventory, "tmpl-rhel9")
    calls = [name for name, _, _ in template.method_calls]
    assert calls.index("MarkAsVirtualMachine") < calls.index("RelocateVM_Task") < calls.index("MarkAsTemplate")


def test_async_run_returns_task_ids(evacuation_client, evacuation_inventory):
    report = evacuate_datastore(evacuation_client, "ds1", "pod1", run_async=True, rng=FirstChoice())
    results = {r.vm_name: r for r in report.results}

    assert results["vmA"].status == EvacuationStatus.SUBMITTED
    assert results["vmA"].task_id == "task-vm-1"
    assert results["vmC"].task_id == "task-vm-3"

    # 模板总是同步处理
    assert results["tmpl-rhel9"].status == EvacuationStatus.COMPLETED
    template = _vm(evacuation_inventory, "tmpl-rhel9")
    assert evacuation_client.waited == [template.RelocateVM_Task.return_value]


def test_template_reconverted_when_relocation_fails(evacuation_client, evacuation_inventory):
    fault = vim.fault.NoDiskSpace(msg="Insufficient disk space on datastore 'ds2'.")
    evacuation_client.wait_for_task = MagicMock(
        side_effect=RemoteOperationError.from_exception(fault, "relocate template")
    )

    plans, _, _ = plan_evacuation(
        evacuation_client, "ds1", "pod1", exclude_names=["vmA", "vmC"], rng=FirstChoice()
    )
    results = execute_plans(evacuation_client, plans)

    assert results[0].status == EvacuationStatus.FAILED
    assert "ds2" in results[0].error
    _vm(evacuation_inventory, "tmpl-rhel9").MarkAsTemplate.assert_called_once()


def test_failure_does_not_stop_remaining_objects(evacuation_client, evacuation_inventory):
    vm_a = _vm(evacuation_inventory, "vmA")
    vm_a.RelocateVM_Task.side_effect = vim.fault.NoDiskSpace(msg="Insufficient disk space")

    report = evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())
    statuses = {r.vm_name: r.status for r in report.results}

    assert statuses == {
        "vmA": EvacuationStatus.FAILED,
        "tmpl-rhel9": EvacuationStatus.COMPLETED,
        "vmC": EvacuationStatus.COMPLETED,
    }
    assert [r.vm_name for r in report.failed] == ["vmA"]
    _vm(evacuation_inventory, "vmC").RelocateVM_Task.assert_called_once()


def test_stale_reference_is_per_object_failure(evacuation_client, evacuation_inventory):
    vm_c = _vm(evacuation_inventory, "vmC")
    vm_c.RelocateVM_Task.side_effect = vmodl.fault.ManagedObjectNotFound(
        msg="The object 'vim.VirtualMachine:vm-3' has already been deleted"
    )

    report = evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())
    result = next(r for r in report.results if r.vm_name == "vmC")

    assert result.status == EvacuationStatus.FAILED
    assert len(report.failed) == 1



def test_orphaned_template_fails_without_stopping_batch(evacuation_client, evacuation_inventory):
    template = _vm(evacuation_inventory, "tmpl-rhel9")
    template.runtime.host = None

    report = evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())
    statuses = {r.vm_name: r.status for r in report.results}

    assert statuses == {
        "vmA": EvacuationStatus.COMPLETED,
        "tmpl-rhel9": EvacuationStatus.FAILED,
        "vmC": EvacuationStatus.COMPLETED,
    }
    template.MarkAsVirtualMachine.assert_not_called()
    template.MarkAsTemplate.assert_not_called()
    _vm(evacuation_inventory, "vmC").RelocateVM_Task.assert_called_once()


def test_transport_error_is_per_object_failure(evacuation_client, evacuation_inventory):
    vm_a = _vm(evacuation_inventory, "vmA")
    vm_a.RelocateVM_Task.side_effect = ConnectionResetError("Connection reset by peer")

    report = evacuate_datastore(evacuation_client, "ds1", "pod1", rng=FirstChoice())
    result = next(r for r in report.results if r.vm_name == "vmA")

    assert result.status == EvacuationStatus.FAILED
    assert "Connection reset by peer" in result.error
    assert [r.vm_name for r in report.failed] == ["vmA"]
    _vm(evacuation_inventory, "vmC").RelocateVM_Task.assert_called_once()
