"""Shared fixtures for builder and emitter tests."""

from __future__ import annotations

from typing import Any

import pytest

from subconv.normalize import normalize_rules
from subconv.providers import CLASH_SOURCE, resolve_providers


@pytest.fixture
def clash_proxies() -> list[dict[str, Any]]:
    """Return two already-parsed Clash proxy nodes."""
    return [
        {
            "name": "HK-Node-1",
            "type": "ss",
            "server": "example.com",
            "port": 443,
            "cipher": "aes-128-gcm",
            "password": "test",
        },
        {
            "name": "US-Node-1",
            "type": "ss",
            "server": "example.com",
            "port": 444,
            "cipher": "aes-128-gcm",
            "password": "test",
        },
    ]


@pytest.fixture
def singbox_proxies() -> list[dict[str, Any]]:
    """Return one already-parsed sing-box outbound."""
    return [
        {
            "type": "shadowsocks",
            "tag": "HK-Node-1",
            "server": "example.com",
            "server_port": 443,
            "method": "aes-128-gcm",
            "password": "test",
        },
    ]


@pytest.fixture
def surge_proxies() -> list[str]:
    """Return one already-parsed Surge proxy line."""
    return ["HK-Node-1 = ss, example.com, 443, encrypt-method=aes-128-gcm, password=test"]


@pytest.fixture
def balanced_rules():
    """Return the balanced preset resolved against the Clash provider source."""
    return resolve_providers(normalize_rules("balanced", [], lang="zh-CN"), CLASH_SOURCE)
