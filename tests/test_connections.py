# -*- coding: utf-8 -*-
"""连接管理与配置"""

import pytest

from vsphere_admin.client import ConnectionManager
from vsphere_admin.config import Settings, load_settings
from vsphere_admin.models import ErrorType, MCPError
from vsphere_admin.utils.errors import VSphereAdminError


class StubClient:
    """记录连接调用；主机名以 down 开头时连接失败"""

    instances = []

    def __init__(self, host, username, password, port=443, disable_ssl_verify=True):
        self.host = host
        self.username = username
        self.password = password
        self.port = port
        self.disable_ssl_verify = disable_ssl_verify
        self.connected = False
        self.connect_calls = 0
        StubClient.instances.append(self)

    def connect(self):
        self.connect_calls += 1
        if self.host.startswith("down"):
            return MCPError(error_type=ErrorType.CONNECTION_ERROR, message="Connection refused",
                            suggestion="检查网络")
        self.connected = True
        return None

    def disconnect(self):
        self.connected = False

    def is_connected(self):
        return self.connected


@pytest.fixture(autouse=True)
def reset_instances():
    StubClient.instances = []


def _manager(**overrides):
    values = dict(
        vsphere_hosts=["vc01.example.com", "vc02.example.com"],
        vsphere_username="administrator@vsphere.local",
        vsphere_password="secret",
        disable_ssl_verify=False,
    )
    values.update(overrides)
    return ConnectionManager(Settings(**values), client_factory=StubClient)


def test_connect_uses_configured_hosts():
    manager = _manager()

    results = manager.connect()

    assert [(r.server, r.connected) for r in results] == [
        ("vc01.example.com", True), ("vc02.example.com", True)
    ]
    assert all(not c.disable_ssl_verify for c in StubClient.instances)


def test_connect_reuses_open_connections():
    manager = _manager()
    manager.connect(["vc01.example.com"])

    manager.connect(["vc01.example.com"])

    assert len(StubClient.instances) == 1


def test_connect_records_per_server_failures():
    manager = _manager()

    results = manager.connect(["down.example.com", "vc01.example.com"])

    assert results[0].connected is False
    assert results[0].error == "Connection refused"
    assert results[1].connected is True
    assert [c.server for c in manager.list_connections()] == ["vc01.example.com"]


def test_connect_requires_credentials():
    manager = _manager(vsphere_username=None)

    with pytest.raises(VSphereAdminError) as excinfo:
        manager.connect()
    assert excinfo.value.error.error_type == ErrorType.MISSING_PARAMETER


def test_get_auto_connects_first_configured_host():
    manager = _manager()

    client = manager.get()

    assert client.host == "vc01.example.com"
    assert len(StubClient.instances) == 1


def test_get_named_server_requires_connection():
    manager = _manager()
    manager.connect(["vc01.example.com"])

    assert manager.get("vc01.example.com").host == "vc01.example.com"
    with pytest.raises(VSphereAdminError) as excinfo:
        manager.get("vc02.example.com")
    assert excinfo.value.error.error_type == ErrorType.CONNECTION_ERROR


def test_get_without_configuration():
    manager = _manager(vsphere_hosts=[])

    with pytest.raises(VSphereAdminError) as excinfo:
        manager.get()
    assert excinfo.value.error.error_type == ErrorType.MISSING_PARAMETER


def test_disconnect_and_close_all():
    manager = _manager()
    manager.connect()

    results = manager.disconnect(["vc02.example.com", "unknown.example.com"])
    assert [(r.server, r.connected) for r in results] == [("vc02.example.com", False)]

    manager.close_all()
    assert manager.list_connections() == []
    assert not any(c.connected for c in StubClient.instances)


def test_load_settings(monkeypatch):
    monkeypatch.setenv("VSPHERE_HOST", "vc01.example.com, vc02.example.com,")
    monkeypatch.setenv("VSPHERE_USERNAME", "administrator@vsphere.local")
    monkeypatch.setenv("VSPHERE_PASSWORD", "secret")
    monkeypatch.setenv("VSPHERE_DISABLE_SSL_VERIFY", "false")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("VSPHERE_PORT", raising=False)

    settings = load_settings()

    assert settings.vsphere_hosts == ["vc01.example.com", "vc02.example.com"]
    assert settings.vsphere_port == 443
    assert settings.disable_ssl_verify is False
    assert settings.log_level == "DEBUG"
    assert settings.has_credentials
