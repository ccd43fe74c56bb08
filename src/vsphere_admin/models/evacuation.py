# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 数据存储疏散模型

RelocationPlan 由规划器生成，执行器按计划调用 RelocateVM_Task。
计划中同时保存托管对象引用 (不参与序列化) 和名称 (用于报表)。
"""

from enum import Enum
from typing import Any, Optional, List

from pydantic import Field

from .base import MyBaseModel


class SkipReason(str, Enum):
    EXCLUDED_BY_NAME = "excluded_by_name"
    EXCLUDED_TEMPLATE = "excluded_template"


class EvacuationStatus(str, Enum):
    DRY_RUN = "dry_run"
    COMPLETED = "completed"
    SUBMITTED = "submitted"
    NO_CHANGE = "no_change"
    FAILED = "failed"


class DiskRelocation(MyBaseModel):
    """单块磁盘的目标位置，moves 为 False 时目标即当前位置"""
    disk_key: int = Field(description="磁盘在虚拟机内的设备 key")
    label: Optional[str] = Field(default=None, description="磁盘标签")
    current_datastore: Optional[str] = Field(default=None, description="当前数据存储")
    target_datastore: Optional[str] = Field(default=None, description="目标数据存储")
    moves: bool = Field(default=False, description="是否需要迁移")
    current_ref: Any = Field(default=None, exclude=True, repr=False)
    target_ref: Any = Field(default=None, exclude=True, repr=False)


class RelocationPlan(MyBaseModel):
    """一个虚拟机 / 模板的迁移计划"""
    vm_name: str = Field(description="虚拟机或模板名称")
    ref: str = Field(description="对象 ID")
    is_template: bool = Field(default=False, description="是否为模板")
    source_datastore: str = Field(description="被疏散的数据存储")
    config_current_datastore: Optional[str] = Field(default=None, description="配置文件当前所在数据存储")
    config_destination: Optional[str] = Field(default=None, description="配置文件目标数据存储，不迁移时为空")
    disks: List[DiskRelocation] = Field(default_factory=list, description="磁盘迁移条目")
    vm: Any = Field(default=None, exclude=True, repr=False)
    config_current_ref: Any = Field(default=None, exclude=True, repr=False)
    config_destination_ref: Any = Field(default=None, exclude=True, repr=False)

    @property
    def moving_disks(self) -> List[DiskRelocation]:
        return [d for d in self.disks if d.moves]

    @property
    def has_moves(self) -> bool:
        return self.config_destination is not None or bool(self.moving_disks)


class SkippedObject(MyBaseModel):
    """因排除规则未生成计划的对象"""
    name: str = Field(description="对象名称")
    ref: str = Field(description="对象 ID")
    reason: SkipReason = Field(description="跳过原因")


class EvacuationResult(MyBaseModel):
    """
    单个计划的执行结果

    dry run 与真实执行使用同一格式，仅 status 不同。
    """
    vm_name: str = Field(description="虚拟机或模板名称")
    ref: str = Field(description="对象 ID")
    is_template: bool = Field(default=False, description="是否为模板")
    source_datastore: str = Field(description="被疏散的数据存储")
    config_destination: Optional[str] = Field(default=None, description="配置文件目标数据存储")
    disk_moves: List[DiskRelocation] = Field(default_factory=list, description="需要迁移的磁盘")
    status: EvacuationStatus = Field(description="执行状态")
    task_id: Optional[str] = Field(default=None, description="异步提交时的任务 ID")
    error: Optional[str] = Field(default=None, description="失败原因")


class EvacuationReport(MyBaseModel):
    """一次疏散运行的汇总"""
    source_datastore: str = Field(description="被疏散的数据存储")
    destination_pool: List[str] = Field(description="目标数据存储池")
    dry_run: bool = Field(default=False, description="是否为演练")
    run_async: bool = Field(default=False, description="是否异步提交")
    results: List[EvacuationResult] = Field(default_factory=list, description="逐个对象的结果")
    skipped: List[SkippedObject] = Field(default_factory=list, description="被排除的对象")

    @property
    def failed(self) -> List[EvacuationResult]:
        return [r for r in self.results if r.status == EvacuationStatus.FAILED]
