# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 角色复制
"""

import logging

from pyVmomi import vmodl

from ..client import VSphereClient
from ..models import RoleInfo
from ..utils.errors import PreconditionError, RemoteOperationError, ResolutionError


logger = logging.getLogger(__name__)


def find_role(client: VSphereClient, name: str):
    for role in client.authorization_manager.roleList or []:
        if role.name == name:
            return role
    return None


def copy_role(
    source_role_name: str,
    destination_role_name: str,
    source_client: VSphereClient,
    destination_client: VSphereClient,
) -> RoleInfo:
    """
    将角色及其权限从一个 vCenter 复制到另一个 (或同一个) vCenter

    源角色必须存在，目标名称必须未被使用；检查都在创建之前完成。
    """
    source_role = find_role(source_client, source_role_name)
    if source_role is None:
        raise ResolutionError.not_found(f"{source_client.host} 上的角色", source_role_name, "source_role_name")

    if find_role(destination_client, destination_role_name) is not None:
        raise PreconditionError.failed(
            f"角色 '{destination_role_name}' 在 {destination_client.host} 上已存在",
            "请使用其他目标角色名称，或先删除已有角色",
            parameter="destination_role_name"
        )

    privileges = list(source_role.privilege or [])
    try:
        role_id = destination_client.authorization_manager.AddAuthorizationRole(
            name=destination_role_name, privIds=privileges
        )
    except vmodl.MethodFault as e:
        raise RemoteOperationError.from_exception(e, f"create role {destination_role_name}")

    logger.info(
        f"角色 {source_client.host}/{source_role_name} 已复制为 "
        f"{destination_client.host}/{destination_role_name} ({len(privileges)} 项权限)"
    )
    return RoleInfo(
        name=destination_role_name,
        role_id=role_id,
        privileges=privileges,
        server=destination_client.host
    )
