"""Base documents for each backend, filled in by the config builders."""

from __future__ import annotations

import copy
from typing import Any

CLASH_BASE: dict[str, Any] = {
    "port": 7890,
    "socks-port": 7891,
    "allow-lan": False,
    "mode": "rule",
    "log-level": "info",
    "external-controller": "127.0.0.1:9090",
    "dns": {
        "enable": True,
        "ipv6": True,
        "respect-rules": True,
        "enhanced-mode": "fake-ip",
        "nameserver": [
            "https://120.53.53.53/dns-query",
            "https://223.5.5.5/dns-query",
        ],
        "proxy-server-nameserver": [
            "https://120.53.53.53/dns-query",
            "https://223.5.5.5/dns-query",
        ],
        "nameserver-policy": {
            "geosite:cn,private": [
                "https://120.53.53.53/dns-query",
                "https://223.5.5.5/dns-query",
            ],
            "geosite:geolocation-!cn": [
                "https://dns.cloudflare.com/dns-query",
                "https://dns.google/dns-query",
            ],
        },
    },
    "proxies": [],
    "proxy-groups": [],
}

SINGBOX_BASE: dict[str, Any] = {
    "log": {"disabled": False, "level": "info", "timestamp": True},
    "dns": {
        "servers": [
            {"tag": "dns_proxy", "address": "tcp://1.1.1.1", "detour": "DIRECT"},
            {"tag": "dns_direct", "address": "https://223.5.5.5/dns-query", "detour": "DIRECT"},
        ],
        "final": "dns_proxy",
    },
    "inbounds": [
        {"type": "mixed", "tag": "mixed-in", "listen": "0.0.0.0", "listen_port": 2080},
        {
            "type": "tun",
            "tag": "tun-in",
            "address": "172.19.0.1/30",
            "auto_route": True,
            "strict_route": True,
            "stack": "mixed",
        },
    ],
    "outbounds": [{"type": "direct", "tag": "DIRECT"}, {"type": "block", "tag": "REJECT"}],
    "route": {
        "rules": [
            {"action": "sniff"},
            {"protocol": "dns", "action": "hijack-dns"},
        ],
        "rule_set": [],
        "auto_detect_interface": True,
    },
    "experimental": {"cache_file": {"enabled": True}},
}

SURGE_BASE: dict[str, Any] = {
    "General": [
        "allow-wifi-access = false",
        "wifi-access-http-port = 6152",
        "wifi-access-socks5-port = 6153",
        "http-listen = 127.0.0.1:6152",
        "socks5-listen = 127.0.0.1:6153",
        "loglevel = notify",
        "skip-proxy = 127.0.0.1, 192.168.0.0/16, 10.0.0.0/8, 172.16.0.0/12, localhost, *.local",
        "dns-server = 119.29.29.29, 223.5.5.5, system",
        "ipv6 = true",
    ],
}


def base_config(template: dict[str, Any]) -> dict[str, Any]:  # noqa: D103
    return copy.deepcopy(template)
