# -*- coding: utf-8 -*-
"""
vSphere Admin MCP Server - 配置

所有配置来自环境变量：
- VSPHERE_HOST: vCenter 地址，多个用逗号分隔
- VSPHERE_USERNAME / VSPHERE_PASSWORD / VSPHERE_PORT
- VSPHERE_DISABLE_SSL_VERIFY: 是否跳过证书校验 (默认 true)
- LOG_LEVEL / SERVER_TRANSPORT / SERVER_HOST / SERVER_PORT
"""

import os
from typing import List, Optional

from pydantic import Field

from .models import MyBaseModel


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(MyBaseModel):
    """服务器配置"""
    vsphere_hosts: List[str] = Field(default_factory=list, description="vCenter 地址列表")
    vsphere_username: Optional[str] = Field(default=None, description="登录用户")
    vsphere_password: Optional[str] = Field(default=None, description="登录密码", repr=False)
    vsphere_port: int = Field(default=443, description="vCenter 端口")
    disable_ssl_verify: bool = Field(default=True, description="跳过证书校验")
    log_level: str = Field(default="INFO", description="日志级别")
    transport: str = Field(default="stdio", description="MCP 传输协议")
    server_host: str = Field(default="0.0.0.0", description="HTTP 传输监听地址")
    server_port: int = Field(default=8000, description="HTTP 传输监听端口")

    @property
    def has_credentials(self) -> bool:
        return bool(self.vsphere_username and self.vsphere_password)


def load_settings() -> Settings:
    """从环境变量读取配置"""
    hosts = os.getenv("VSPHERE_HOST", "")
    return Settings(
        vsphere_hosts=[h.strip() for h in hosts.split(",") if h.strip()],
        vsphere_username=os.getenv("VSPHERE_USERNAME"),
        vsphere_password=os.getenv("VSPHERE_PASSWORD"),
        vsphere_port=int(os.getenv("VSPHERE_PORT", "443")),
        disable_ssl_verify=_env_bool("VSPHERE_DISABLE_SSL_VERIFY", True),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        transport=os.getenv("SERVER_TRANSPORT", "stdio"),
        server_host=os.getenv("SERVER_HOST", "0.0.0.0"),
        server_port=int(os.getenv("SERVER_PORT", "8000")),
    )
