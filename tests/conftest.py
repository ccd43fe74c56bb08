# -*- coding: utf-8 -*-
"""
测试公共部分

FakeClient 用内存清单替换属性收集器，其余名称解析逻辑 (find_objects、
resolve_single、index_by_id) 沿用 VSphereClient 的实现。
托管对象使用真实的 pyVmomi 类型；需要调用方法的对象 (虚拟机) 使用 MagicMock。
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from pyVmomi import vim

from vsphere_admin.client import VSphereClient, ref_id


class FakeClient(VSphereClient):
    """
    inventory: {vim 类型: [属性字典]}，每个字典必须包含 'obj'，
    可选 '_within' 列出包含该对象的容器 (用于 root 查询)。
    """

    authorization_manager = None

    def __init__(self, inventory=None, host="vc01.example.com"):
        super().__init__(host, "admin", "secret")
        self.inventory = inventory or {}
        self.waited = []
        self.authorization_manager = MagicMock(name="authorizationManager")
        self.authorization_manager.roleList = []
        self._connection = object()

    def collect_properties(self, vim_type, properties, root=None, objects=None):
        items = self.inventory.get(vim_type, [])
        if objects is not None:
            wanted = {ref_id(o) for o in objects}
            items = [i for i in items if ref_id(i['obj']) in wanted]
        if root is not None:
            items = [i for i in items if root in i.get('_within', ())]
        paths = set(properties)
        return [
            {k: v for k, v in item.items() if k == 'obj' or k in paths}
            for item in items
        ]

    def wait_for_task(self, task, operation):
        self.waited.append(task)
        return None


class FirstChoice:
    """总是选择第一个候选项，便于断言"""

    def choice(self, seq):
        return seq[0]


class CycleChoice:
    """依次循环选择候选项"""

    def __init__(self):
        self.calls = 0

    def choice(self, seq):
        value = seq[self.calls % len(seq)]
        self.calls += 1
        return value


def make_vm(moid):
    vm = MagicMock(name=moid)
    vm._moId = moid
    task = MagicMock(name=f"task-for-{moid}")
    task._moId = f"task-{moid}"
    vm.RelocateVM_Task.return_value = task
    return vm


def make_disk(key, label, datastore, path=None, controller_key=1000, unit=0, capacity_kb=10 * 1024 * 1024):
    return vim.vm.device.VirtualDisk(
        key=key,
        controllerKey=controller_key,
        unitNumber=unit,
        capacityInKB=capacity_kb,
        deviceInfo=vim.Description(label=label, summary=""),
        backing=vim.vm.device.VirtualDisk.FlatVer2BackingInfo(
            fileName=path or f"[{datastore._moId}] disk-{key}.vmdk",
            datastore=datastore,
            diskMode="persistent"
        )
    )


def make_nic(key, mac):
    return vim.vm.device.VirtualVmxnet3(
        key=key,
        macAddress=mac,
        deviceInfo=vim.Description(label=f"Network adapter {key - 3999}", summary="")
    )


def make_role(name, role_id, privileges):
    return SimpleNamespace(name=name, roleId=role_id, privilege=list(privileges))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def datastores():
    """ds1 为源，ds2 / ds3 组成数据存储集群 pod1，ds4 独立"""
    return {name: vim.Datastore(f"datastore-{i}") for i, name in enumerate(["ds1", "ds2", "ds3", "ds4"], 1)}


@pytest.fixture
def evacuation_inventory(datastores):
    ds1, ds2, ds3, ds4 = (datastores[n] for n in ("ds1", "ds2", "ds3", "ds4"))

    vm_a = make_vm("vm-1")
    tmpl = make_vm("vm-2")
    vm_c = make_vm("vm-3")

    vm_items = [
        {
            'obj': vm_a,
            'name': "vmA",
            'config.template': False,
            'config.files.vmPathName': "[ds1] vmA/vmA.vmx",
            'config.hardware.device': [
                make_disk(2000, "Hard disk 1", ds1, "[ds1] vmA/vmA.vmdk"),
                make_disk(2001, "Hard disk 2", ds4, "[ds4] vmA/vmA_1.vmdk", unit=1),
            ],
        },
        {
            'obj': tmpl,
            'name': "tmpl-rhel9",
            'config.template': True,
            'config.files.vmPathName': "[ds1] tmpl-rhel9/tmpl-rhel9.vmtx",
            'config.hardware.device': [make_disk(2000, "Hard disk 1", ds1)],
        },
        {
            'obj': vm_c,
            'name': "vmC",
            'config.template': False,
            'config.files.vmPathName': "[ds4] vmC/vmC.vmx",
            'config.hardware.device': [make_disk(2000, "Hard disk 1", ds1, "[ds1] vmC/vmC.vmdk")],
        },
    ]

    pod = vim.StoragePod("group-p1")

    inventory = {
        vim.Datastore: [
            {'obj': ds1, 'name': "ds1"},
            {'obj': ds2, 'name': "ds2"},
            {'obj': ds3, 'name': "ds3"},
            {'obj': ds4, 'name': "ds4"},
        ],
        vim.StoragePod: [{'obj': pod, 'name': "pod1", 'childEntity': [ds2, ds3]}],
        vim.VirtualMachine: vm_items,
    }
    return inventory


@pytest.fixture
def evacuation_client(evacuation_inventory, datastores):
    client = FakeClient(evacuation_inventory)
    ds1 = datastores["ds1"]
    vms = [item['obj'] for item in evacuation_inventory[vim.VirtualMachine]]

    # 数据存储对象本身不能取属性，源数据存储的 vm 列表单独提供
    original_resolve = client.resolve_single

    def resolve_single(vim_type, name, kind, parameter=None, root=None):
        obj = original_resolve(vim_type, name, kind, parameter, root)
        if obj is ds1:
            return SimpleNamespace(_moId=ds1._moId, vm=vms)
        return obj

    client.resolve_single = resolve_single
    return client
