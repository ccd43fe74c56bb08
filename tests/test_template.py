# -*- coding: utf-8 -*-
"""模板转换与模板迁移"""

from unittest.mock import MagicMock

import pytest
from pyVmomi import vim

from vsphere_admin.commands.template import TemplateConversion, TemplateState, move_template_to_host
from vsphere_admin.utils.errors import PreconditionError, RemoteOperationError, ResolutionError

from .conftest import FakeClient, FirstChoice, make_vm


# =============================================================================
# TemplateConversion
# =============================================================================
def test_conversion_round_trip():
    vm = make_vm("vm-20")
    host, pool = MagicMock(name="host"), MagicMock(name="pool")

    with TemplateConversion(vm, "tmpl", host=host, pool=pool) as conversion:
        assert conversion.state == TemplateState.MACHINE
        vm.MarkAsVirtualMachine.assert_called_once_with(pool=pool, host=host)
        vm.MarkAsTemplate.assert_not_called()

    vm.MarkAsTemplate.assert_called_once()
    assert conversion.state == TemplateState.TEMPLATE


def test_conversion_defaults_to_current_host():
    vm = make_vm("vm-20")

    with TemplateConversion(vm, "tmpl"):
        pass

    host = vm.runtime.host
    vm.MarkAsVirtualMachine.assert_called_once_with(pool=host.parent.resourcePool, host=host)


def test_conversion_reconverts_after_error():
    vm = make_vm("vm-20")

    with pytest.raises(RuntimeError):
        with TemplateConversion(vm, "tmpl"):
            raise RuntimeError("relocation failed")

    vm.MarkAsTemplate.assert_called_once()


def test_conversion_keeps_original_error_when_reconversion_fails():
    vm = make_vm("vm-20")
    vm.MarkAsTemplate.side_effect = vim.fault.InvalidState(msg="invalid state")

    with pytest.raises(RuntimeError):
        with TemplateConversion(vm, "tmpl"):
            raise RuntimeError("relocation failed")


def test_conversion_reports_reconversion_failure():
    vm = make_vm("vm-20")
    vm.MarkAsTemplate.side_effect = vim.fault.InvalidState(msg="invalid state")

    with pytest.raises(RemoteOperationError):
        with TemplateConversion(vm, "tmpl"):
            pass


def test_conversion_failure_leaves_template_untouched():
    vm = make_vm("vm-20")
    vm.MarkAsVirtualMachine.side_effect = vim.fault.InvalidState(msg="invalid state")

    with pytest.raises(RemoteOperationError):
        with TemplateConversion(vm, "tmpl"):
            pass

    vm.MarkAsTemplate.assert_not_called()


def test_conversion_requires_registered_host():
    vm = make_vm("vm-20")
    vm.runtime.host = None

    with pytest.raises(PreconditionError) as excinfo:
        with TemplateConversion(vm, "tmpl"):
            pass

    assert excinfo.value.error.parameter == "host"
    vm.MarkAsVirtualMachine.assert_not_called()
    vm.MarkAsTemplate.assert_not_called()


def test_relocate_requires_machine_state():
    conversion = TemplateConversion(make_vm("vm-20"), "tmpl")

    with pytest.raises(PreconditionError):
        conversion.relocate(FakeClient(), vim.vm.RelocateSpec())


# =============================================================================
# move_template_to_host
# =============================================================================
@pytest.fixture
def template_env():
    prod = vim.ClusterComputeResource("domain-c7")
    dev = vim.ClusterComputeResource("domain-c12")
    prod_pool = vim.ResourcePool("resgroup-8")
    dev_pool = vim.ResourcePool("resgroup-13")

    esx01 = vim.HostSystem("host-10")
    esx02 = vim.HostSystem("host-11")
    esx03 = vim.HostSystem("host-12")
    esx04 = vim.HostSystem("host-13")

    template = make_vm("vm-20")
    machine = make_vm("vm-21")

    client = FakeClient({
        vim.HostSystem: [
            {'obj': esx01, 'name': "esx01", 'parent': prod,
             'runtime.connectionState': "connected", 'runtime.inMaintenanceMode': True},
            {'obj': esx02, 'name': "esx02", 'parent': prod,
             'runtime.connectionState': "disconnected", 'runtime.inMaintenanceMode': False},
            {'obj': esx03, 'name': "esx03", 'parent': prod,
             'runtime.connectionState': "connected", 'runtime.inMaintenanceMode': False},
            {'obj': esx04, 'name': "esx04", 'parent': dev,
             'runtime.connectionState': "connected", 'runtime.inMaintenanceMode': True},
        ],
        vim.ClusterComputeResource: [
            {'obj': prod, 'name': "Prod", 'host': [esx01, esx02, esx03], 'resourcePool': prod_pool},
            {'obj': dev, 'name': "Dev", 'host': [esx04], 'resourcePool': dev_pool},
        ],
        vim.VirtualMachine: [
            {'obj': template, 'name': "tmpl-rhel9", 'config.template': True, 'runtime.host': esx01},
            {'obj': machine, 'name': "web01", 'config.template': False, 'runtime.host': esx03},
        ],
    })
    return client, template, machine, {"esx03": esx03, "prod_pool": prod_pool}


def test_move_template_to_eligible_host(template_env):
    client, template, _, refs = template_env

    results = move_template_to_host(client, ["tmpl-rhel9"], rng=FirstChoice())

    assert [(r.name, r.host, r.cluster) for r in results] == [("tmpl-rhel9", "esx03", "Prod")]
    template.MarkAsVirtualMachine.assert_called_once_with(pool=refs["prod_pool"], host=refs["esx03"])
    template.MarkAsTemplate.assert_called_once()


def test_move_template_no_eligible_host(template_env):
    client, template, _, _ = template_env

    with pytest.raises(PreconditionError):
        move_template_to_host(client, ["tmpl-rhel9"], destination_cluster="Dev")
    template.MarkAsVirtualMachine.assert_not_called()


def test_move_template_rejects_virtual_machines(template_env):
    client, _, machine, _ = template_env

    with pytest.raises(PreconditionError):
        move_template_to_host(client, ["web01"])
    machine.MarkAsVirtualMachine.assert_not_called()


def test_move_template_missing_name(template_env):
    client, template, _, _ = template_env

    with pytest.raises(ResolutionError) as excinfo:
        move_template_to_host(client, ["tmpl-rhel9", "tmpl-win2022"])
    assert "tmpl-win2022" in excinfo.value.error.message
    template.MarkAsVirtualMachine.assert_not_called()
