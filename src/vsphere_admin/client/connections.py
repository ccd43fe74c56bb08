# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 连接管理

ConnectionManager 由服务器生命周期创建并显式传递给各工具，
不使用模块级全局连接。
"""

import logging
from typing import Callable, Dict, List, Optional

from ..config import Settings
from ..models import ConnectionInfo, ErrorType, MCPError
from ..utils.errors import TOOL_CONNECT, VSphereAdminError
from .vsphere import VSphereClient


logger = logging.getLogger(__name__)


class ConnectionManager:
    """管理到一个或多个 vCenter 的连接"""

    def __init__(self, settings: Settings,
                 client_factory: Callable[..., VSphereClient] = VSphereClient):
        self.settings = settings
        self._client_factory = client_factory
        self._clients: Dict[str, VSphereClient] = {}

    def _info(self, client: VSphereClient, error: Optional[MCPError] = None) -> ConnectionInfo:
        return ConnectionInfo(
            server=client.host,
            port=client.port,
            user=client.username,
            connected=client.is_connected(),
            error=error.message if error else None
        )

    def connect(
        self,
        servers: Optional[List[str]] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        port: Optional[int] = None,
    ) -> List[ConnectionInfo]:
        """
        连接到一个或多个 vCenter

        未提供的参数使用环境变量配置。已连接的服务器直接复用。
        单个服务器连接失败不影响其余服务器，失败原因记录在返回结果中。
        """
        servers = servers or self.settings.vsphere_hosts
        username = username or self.settings.vsphere_username
        password = password or self.settings.vsphere_password
        port = port or self.settings.vsphere_port

        if not username or not password:
            raise VSphereAdminError(MCPError(
                error_type=ErrorType.MISSING_PARAMETER,
                parameter="username",
                message="vSphere 登录凭据不完整",
                suggestion="请提供 username / password，或设置环境变量 VSPHERE_USERNAME, VSPHERE_PASSWORD"
            ))

        results = []
        for server in servers:
            existing = self._clients.get(server)
            if existing is not None and existing.is_connected():
                results.append(self._info(existing))
                continue

            client = self._client_factory(
                server, username, password, port,
                disable_ssl_verify=self.settings.disable_ssl_verify
            )
            error = client.connect()
            if error:
                logger.warning(f"连接 {server} 失败: {error.message}")
            else:
                self._clients[server] = client
            results.append(self._info(client, error))

        return results

    def disconnect(self, servers: Optional[List[str]] = None) -> List[ConnectionInfo]:
        """断开指定服务器的连接，未指定时断开全部"""
        targets = list(servers) if servers else list(self._clients)
        results = []
        for server in targets:
            client = self._clients.pop(server, None)
            if client is None:
                logger.warning(f"未找到到 {server} 的连接")
                continue
            client.disconnect()
            results.append(self._info(client))
        return results

    def list_connections(self) -> List[ConnectionInfo]:
        return [self._info(c) for c in self._clients.values()]

    def get(self, server: Optional[str] = None) -> VSphereClient:
        """
        获取客户端

        未指定 server 时使用最早建立的连接；没有任何连接且环境变量
        配置完整时自动连接第一个配置的 vCenter。
        """
        if server:
            client = self._clients.get(server)
            if client is None or not client.is_connected():
                raise VSphereAdminError(MCPError(
                    error_type=ErrorType.CONNECTION_ERROR,
                    parameter="server",
                    message=f"未连接到 vCenter '{server}'",
                    suggestion="请先调用 connectVSphere 连接该服务器",
                    related_tools=[TOOL_CONNECT]
                ))
            return client

        for client in self._clients.values():
            if client.is_connected():
                return client

        if self.settings.vsphere_hosts and self.settings.has_credentials:
            default = self.settings.vsphere_hosts[0]
            info = self.connect([default])[0]
            if info.connected:
                return self._clients[default]
            raise VSphereAdminError(MCPError(
                error_type=ErrorType.CONNECTION_ERROR,
                message=f"无法连接到 vCenter '{default}': {info.error}",
                suggestion="请检查 vCenter 地址、端口和凭据",
                related_tools=[TOOL_CONNECT]
            ))

        raise VSphereAdminError(MCPError(
            error_type=ErrorType.MISSING_PARAMETER,
            message="vSphere 连接配置不完整",
            suggestion="请调用 connectVSphere，或设置环境变量: VSPHERE_HOST, VSPHERE_USERNAME, VSPHERE_PASSWORD",
            related_tools=[TOOL_CONNECT]
        ))

    def close_all(self):
        for client in self._clients.values():
            client.disconnect()
        self._clients.clear()
