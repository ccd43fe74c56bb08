# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 客户端包导出
"""

from .vsphere import (
    VSphereClient,
    ref_id,
    ref_type,
)

from .connections import ConnectionManager

__all__ = [
    "VSphereClient",
    "ConnectionManager",
    "ref_id",
    "ref_type",
]
