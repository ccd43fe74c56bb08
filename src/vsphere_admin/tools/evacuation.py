# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 数据存储疏散工具
"""

import logging
from typing import List, Optional

from mcp.server.fastmcp import Context
from pydantic import Field

from ..commands import evacuate_datastore as run_evacuation
from ..models import MCPResult
from ..utils import validate_required_name
from .common import run_command


logger = logging.getLogger(__name__)


async def evacuate_datastore(
    ctx: Context,
    source_datastore: str = Field(description="要清空的源数据存储名称"),
    destination: str = Field(description="目标数据存储或数据存储集群名称"),
    exclude_names: Optional[List[str]] = Field(default=None, description="不迁移的虚拟机 / 模板名称"),
    exclude_all_templates: bool = Field(default=False, description="跳过所有模板"),
    run_async: bool = Field(default=False, description="虚拟机迁移只提交任务不等待 (模板总是同步)"),
    dry_run: bool = Field(default=False, description="只输出迁移计划，不做任何修改"),
    server: Optional[str] = Field(default=None, description="vCenter 地址，不填则使用默认连接")
) -> MCPResult:
    """将源数据存储上的虚拟机和模板迁移到目标数据存储池"""
    for value, parameter, label in (
        (source_datastore, "source_datastore", "源数据存储"),
        (destination, "destination", "目标数据存储"),
    ):
        if error := validate_required_name(value, parameter, label):
            return MCPResult.fail(error)

    result = run_command(
        ctx, server, "evacuate_datastore", run_evacuation,
        source_datastore, destination,
        exclude_names=exclude_names,
        exclude_all_templates=exclude_all_templates,
        run_async=run_async,
        dry_run=dry_run,
    )

    if result.success and result.data.failed:
        result.warnings = [f"{r.vm_name}: {r.error}" for r in result.data.failed]
    return result
