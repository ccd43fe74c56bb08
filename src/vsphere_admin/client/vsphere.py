# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - vSphere 客户端模块

封装与 vSphere/vCenter 的所有交互：
- 连接管理
- 属性收集器 (只取需要的属性路径)
- 名称解析为唯一对象
- 任务等待与查询
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pyVim.connect import SmartConnect, Disconnect
from pyVim.task import WaitForTask
from pyVmomi import vim, vmodl

from ..models import ErrorType, MCPError, TaskInfo
from ..utils.errors import (
    TOOL_CONNECT,
    ResolutionError,
    RemoteOperationError,
    VSphereAdminError,
    fault_message,
    parse_vsphere_error,
)
from ..utils.filters import NameFilter


logger = logging.getLogger(__name__)

# RetrievePropertiesEx 单页最大对象数
PAGE_SIZE = 500


def ref_id(obj) -> Optional[str]:
    """托管对象 ID，如 vm-42"""
    if obj is None:
        return None
    return getattr(obj, '_moId', None)


def ref_type(obj) -> str:
    """托管对象的 WSDL 类型名，如 DistributedVirtualPortgroup"""
    return getattr(obj, '_wsdlName', None) or type(obj).__name__


class VSphereClient:
    """vSphere 客户端封装 - 管理单个 vCenter 连接和基本操作"""

    def __init__(self, host: str, username: str, password: str, port: int = 443,
                 disable_ssl_verify: bool = True):
        self.host = host
        self.username = username
        self.password = password
        self.port = port
        self.disable_ssl_verify = disable_ssl_verify
        self._connection = None

    def __repr__(self) -> str:
        return f"VSphereClient({self.username}@{self.host}:{self.port})"

    # =========================================================================
    # 连接管理
    # =========================================================================
    def connect(self) -> Optional[MCPError]:
        """连接到 vCenter，失败时返回结构化错误"""
        try:
            self._connection = SmartConnect(
                host=self.host,
                user=self.username,
                pwd=self.password,
                port=self.port,
                disableSslCertVerification=self.disable_ssl_verify
            )
            logger.info(f"已连接到 vCenter {self.host}:{self.port} ({self.username})")
            return None

        except Exception as e:
            logger.error(f"连接 vCenter {self.host} 失败: {fault_message(e)}")
            return parse_vsphere_error(e, "connect")

    def disconnect(self):
        """断开连接"""
        if self._connection:
            Disconnect(self._connection)
            self._connection = None
            logger.info(f"已断开 vCenter {self.host}")

    def is_connected(self) -> bool:
        """检查是否已连接"""
        return self._connection is not None

    @property
    def content(self):
        """ServiceContent，未连接时抛出连接错误"""
        if not self._connection:
            raise self._not_connected()
        return self._connection.RetrieveContent()

    def _not_connected(self) -> VSphereAdminError:
        return VSphereAdminError(MCPError(
            error_type=ErrorType.CONNECTION_ERROR,
            message=f"未连接到 vCenter {self.host}",
            suggestion="请先调用 connectVSphere 建立连接",
            related_tools=[TOOL_CONNECT]
        ))

    @property
    def authorization_manager(self):
        return self.content.authorizationManager

    # =========================================================================
    # 视图与属性收集
    # =========================================================================
    def create_container_view(self, vim_types: Sequence, root=None, recursive: bool = True):
        content = self.content
        return content.viewManager.CreateContainerView(
            container=root or content.rootFolder,
            type=list(vim_types),
            recursive=recursive
        )

    def collect_properties(
        self,
        vim_type,
        properties: Iterable[str],
        root=None,
        objects: Optional[List[Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        通过属性收集器批量读取属性

        objects 给定时只收集这些对象 (ListView)，否则收集 root 下所有 vim_type 对象。
        返回字典列表，每个字典包含 'obj' 及请求的属性路径；未设置的属性不出现在字典中。
        """
        content = self.content
        if objects is not None:
            if not objects:
                return []
            view = content.viewManager.CreateListView(obj=list(objects))
        else:
            view = self.create_container_view([vim_type], root)

        pc = vmodl.query.PropertyCollector
        traversal = pc.TraversalSpec(name='traverseEntities', path='view', skip=False, type=type(view))
        object_spec = pc.ObjectSpec(obj=view, skip=True, selectSet=[traversal])
        property_spec = pc.PropertySpec(type=vim_type, pathSet=list(properties), all=False)
        filter_spec = pc.FilterSpec(objectSet=[object_spec], propSet=[property_spec])

        results = []
        try:
            collector = content.propertyCollector
            retrieved = collector.RetrievePropertiesEx(
                specSet=[filter_spec], options=pc.RetrieveOptions(maxObjects=PAGE_SIZE)
            )
            while retrieved:
                for obj_content in retrieved.objects or []:
                    item = {prop.name: prop.val for prop in obj_content.propSet or []}
                    item['obj'] = obj_content.obj
                    results.append(item)
                if not retrieved.token:
                    break
                retrieved = collector.ContinueRetrievePropertiesEx(token=retrieved.token)
        finally:
            view.Destroy()

        return results

    def find_objects(
        self,
        vim_type,
        properties: Iterable[str] = (),
        name_filter: Optional[NameFilter] = None,
        root=None,
    ) -> List[Dict[str, Any]]:
        """按名称筛选对象，返回属性字典列表 (总是包含 name)"""
        paths = ['name'] + [p for p in properties if p != 'name']
        items = self.collect_properties(vim_type, paths, root=root)
        if name_filter is None:
            return items
        return [item for item in items if name_filter.matches(item.get('name'))]

    def find_by_ids(self, vim_type, ids: Iterable[str], properties: Iterable[str] = ()) -> List[Dict[str, Any]]:
        """按托管对象 ID 收集属性"""
        wanted = set(ids)
        items = self.find_objects(vim_type, properties)
        return [item for item in items if ref_id(item['obj']) in wanted]

    def resolve_single(self, vim_type, name: str, kind: str, parameter: Optional[str] = None,
                       root=None):
        """将名称精确解析为唯一对象，否则抛出 ResolutionError"""
        matches = self.find_objects(vim_type, name_filter=NameFilter.from_literals([name]), root=root)
        if not matches:
            raise ResolutionError.not_found(kind, name, parameter)
        if len(matches) > 1:
            raise ResolutionError.ambiguous(kind, name, len(matches), parameter)
        return matches[0]['obj']

    def index_by_id(self, vim_type, properties: Iterable[str], root=None) -> Dict[str, Dict[str, Any]]:
        """按对象 ID 建立属性索引，用于解析关联字段 (如主机 -> 集群)"""
        return {ref_id(item['obj']): item for item in self.collect_properties(vim_type, properties, root=root)}

    # =========================================================================
    # 任务
    # =========================================================================
    def wait_for_task(self, task, operation: str):
        """等待任务完成，失败时抛出 RemoteOperationError"""
        try:
            WaitForTask(task, si=self._connection)
        except vmodl.MethodFault as e:
            logger.error(f"{operation} 任务失败: {fault_message(e)}")
            raise RemoteOperationError.from_exception(e, operation)
        return task.info.result

    def get_task(self, task_id: str):
        """根据任务 ID 构造任务对象引用"""
        if not self._connection:
            raise self._not_connected()
        return vim.Task(task_id, self._connection._stub)

    def get_task_info(self, task_id: str) -> TaskInfo:
        """查询任务状态"""
        task = self.get_task(task_id)
        try:
            info = task.info
        except vmodl.fault.ManagedObjectNotFound:
            raise ResolutionError.not_found("任务", task_id, "task_id")

        return TaskInfo(
            task_id=task_id,
            state=str(info.state) if info.state else None,
            progress=info.progress,
            entity_name=info.entityName,
            description=info.descriptionId,
            error=fault_message(info.error) if info.error else None
        )
