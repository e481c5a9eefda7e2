"""
Pytest configuration and shared fixtures for deploykit-cli tests.

The daemon is replaced by ``FakeTransport``, which answers each method from
a scripted queue of raw replies and records every request.
"""

import json
from collections import defaultdict, deque
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from deploykit_cli.daemon.client import DaemonClient
from deploykit_cli.daemon.methods import DaemonMethod
from deploykit_cli.domain import Partition, VariantManifest


def ok(data: Any = None) -> str:
    return json.dumps({"result": "Ok", "data": data})


def error(data: Any) -> str:
    return json.dumps({"result": "Error", "data": data})


class FakeTransport:
    """Scripted stand-in for the D-Bus transport."""

    def __init__(self) -> None:
        self.replies: Dict[DaemonMethod, deque] = defaultdict(deque)
        self.defaults: Dict[DaemonMethod, Any] = {}
        self.calls: List[tuple] = []

    def script(self, method: DaemonMethod, *replies) -> "FakeTransport":
        """Queue replies; a reply that is an exception instance is raised."""
        self.replies[method].extend(replies)
        return self

    def default(self, method: DaemonMethod, reply) -> "FakeTransport":
        self.defaults[method] = reply
        return self

    def invoke(self, method: DaemonMethod, args: tuple) -> str:
        self.calls.append((method, args))
        if self.replies[method]:
            reply = self.replies[method].popleft()
        elif method in self.defaults:
            reply = self.defaults[method]
        else:
            reply = ok(None)
        if isinstance(reply, BaseException):
            raise reply
        return reply

    def methods(self) -> List[DaemonMethod]:
        return [method for method, _ in self.calls]

    def set_config_fields(self) -> List[str]:
        return [args[0] for method, args in self.calls if method is DaemonMethod.SET_CONFIG]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport) -> DaemonClient:
    return DaemonClient(transport)


# ==============================================================================
# Manifest Fixtures
# ==============================================================================


@pytest.fixture
def manifest_dict() -> Dict[str, Any]:
    """A recipe.json document with three variants."""
    return {
        "variants": [
            {
                "name": "Desktop",
                "dir-name": "desktop",
                "retro": False,
                "squashfs": [
                    {
                        "arch": "amd64",
                        "data": "20240101",
                        "downloadSize": 2147483648,
                        "instSize": 8589934592,
                        "path": "os-amd64/desktop/aosc-os_desktop_20240101_amd64.squashfs",
                        "sha256sum": "a" * 64,
                        "inodes": 300000,
                    },
                    {
                        "arch": "amd64",
                        "data": "20240301",
                        "downloadSize": 2147483648,
                        "instSize": 8589934592,
                        "path": "os-amd64/desktop/aosc-os_desktop_20240301_amd64.squashfs",
                        "sha256sum": "b" * 64,
                        "inodes": 300100,
                    },
                    {
                        "arch": "arm64",
                        "data": "20240202",
                        "downloadSize": 2147483648,
                        "instSize": 8589934592,
                        "path": "os-arm64/desktop/aosc-os_desktop_20240202_arm64.squashfs",
                        "sha256sum": "c" * 64,
                        "inodes": 290000,
                    },
                ],
            },
            {
                "name": "Server",
                "retro": False,
                "squashfs": [
                    {
                        "arch": "amd64",
                        "data": "20240301",
                        "downloadSize": 536870912,
                        "instSize": 2147483648,
                        "path": "os-amd64/server/aosc-os_server_20240301_amd64.squashfs",
                        "sha256sum": "d" * 64,
                        "inodes": 80000,
                    },
                ],
            },
            {"name": "BuildKit", "dir-name": "buildkit", "retro": False, "squashfs": []},
            {"name": "Base (Retro)", "dir-name": "base-retro", "retro": True, "squashfs": []},
        ],
        "mirrors": [{"name": "origin", "url": "https://repo.aosc.io/"}],
    }


@pytest.fixture
def manifest(manifest_dict) -> VariantManifest:
    return VariantManifest.from_dict(manifest_dict)


# ==============================================================================
# Storage Fixtures
# ==============================================================================


@pytest.fixture
def devices_data() -> List[Dict[str, Any]]:
    return [
        {"model": "Samsung SSD 970", "path": "/dev/nvme0n1", "size": 512110190592},
        {"model": "QEMU HARDDISK", "path": "/dev/sda", "size": 34359738368},
    ]


@pytest.fixture
def partitions_data() -> List[Dict[str, Any]]:
    return [
        {"path": "/dev/sda1", "parent_path": "/dev/sda", "fs_type": "vfat", "size": 536870912},
        {"path": "/dev/sda2", "parent_path": "/dev/sda", "fs_type": "ext4", "size": 33821818880},
        {"path": None, "parent_path": "/dev/sda", "fs_type": None, "size": 1048576},
    ]


@pytest.fixture
def esp_partition() -> Partition:
    return Partition(path="/dev/sda1", parent_path="/dev/sda", fs_type="vfat", size=536870912)


@pytest.fixture
def target_partition() -> Partition:
    return Partition(path="/dev/sda2", parent_path="/dev/sda", fs_type="ext4", size=33821818880)


@pytest.fixture
def fake_dbus():
    """A stand-in for the dbus-python module."""
    module = MagicMock()

    class DBusException(Exception):
        pass

    module.DBusException = DBusException
    return module
