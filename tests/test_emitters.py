"""Backend emitters and their capability tables."""

from __future__ import annotations

import logging

import pytest

from subconv import emitters
from subconv.errors import InternalInvariantViolation
from subconv.models import MatchType, Rule, Support
from subconv.providers import CLASH_SOURCE, SINGBOX_SOURCE, SURGE_SOURCE, resolve_providers


@pytest.mark.parametrize(
    "table",
    [emitters.CLASH_CAPABILITIES, emitters.SINGBOX_CAPABILITIES, emitters.SURGE_CAPABILITIES],
)
def test_capability_tables_cover_every_match_type(table: dict) -> None:
    assert set(table) == set(MatchType)


def test_clash_site_and_ip_rules_use_their_own_keys(balanced_rules) -> None:
    rules, providers = balanced_rules

    emission = emitters.emit_clash_rules(rules, providers)

    assert "RULE-SET,google,🔍 谷歌服务" in emission.rules
    assert "RULE-SET,google-ip,🔍 谷歌服务,no-resolve" in emission.rules
    assert emission.providers["google"]["behavior"] == "domain"
    assert emission.providers["google-ip"]["behavior"] == "ipcidr"
    assert emission.providers["google-ip"]["path"] == "./ruleset/google-ip.mrs"


def test_clash_emits_one_line_per_value() -> None:
    rules, providers = resolve_providers(
        [
            Rule(
                outbound="LAN",
                domain=(".corp.example",),
                domain_keyword=("intranet",),
                ipcidr=("10.0.0.1", "2001:db8::/32"),
                src_ip_cidr=("192.168.11.13/32", "192.168.10.0/24"),
            )
        ],
        CLASH_SOURCE,
    )

    emission = emitters.emit_clash_rules(rules, providers)

    assert emission.rules == [
        "DOMAIN-SUFFIX,corp.example,LAN",
        "DOMAIN-KEYWORD,intranet,LAN",
        "IP-CIDR,10.0.0.1/32,LAN,no-resolve",
        "IP-CIDR6,2001:db8::/32,LAN,no-resolve",
        "SRC-IP-CIDR,192.168.11.13/32,LAN",
        "SRC-IP-CIDR,192.168.10.0/24,LAN",
    ]
    assert emission.warnings == []


def test_clash_respects_no_resolve_flag() -> None:
    rules, providers = resolve_providers(
        [Rule(outbound="X", geoip=("cn",), ipcidr=("1.1.1.1/32",), no_resolve=False)],
        CLASH_SOURCE,
    )

    emission = emitters.emit_clash_rules(rules, providers)

    assert emission.rules == ["RULE-SET,cn-ip,X", "IP-CIDR,1.1.1.1/32,X"]


def test_clash_protocol_degrades_to_network(caplog: pytest.LogCaptureFixture) -> None:
    rule = Rule(outbound="X", protocol=("udp", "http"))

    with caplog.at_level(logging.WARNING, logger="subconv.emitters"):
        emission = emitters.emit_clash_rules([rule], {})

    assert emission.rules == ["NETWORK,UDP,X"]
    assert [(w.construct, w.value) for w in emission.warnings] == [("PROTOCOL", "http")]
    assert "PROTOCOL not supported by Clash, skipped: http" in caplog.text


def test_empty_rule_is_inert_in_every_backend() -> None:
    rule = Rule(outbound="LAN")

    for emit in (emitters.emit_clash_rules, emitters.emit_singbox_rules, emitters.emit_surge_rules):
        emission = emit([rule], {})
        assert emission.rules == []
        assert emission.warnings == []


def test_unregistered_provider_key_is_fatal() -> None:
    with pytest.raises(InternalInvariantViolation):
        emitters.emit_clash_rules([Rule(outbound="X", geosite=("google",))], {})


def test_singbox_emits_one_object_with_populated_fields_only() -> None:
    rules, providers = resolve_providers(
        [
            Rule(outbound="LAN", src_ip_cidr=("192.168.11.13/32",)),
            Rule(outbound="LAN", src_ip_cidr=("192.168.11.13/32",), protocol=("http",)),
            Rule(outbound="G", geosite=("google",), geoip=("google",)),
        ],
        SINGBOX_SOURCE,
    )

    emission = emitters.emit_singbox_rules(rules, providers)

    assert emission.rules == [
        {"source_ip_cidr": ["192.168.11.13/32"], "outbound": "LAN"},
        {"source_ip_cidr": ["192.168.11.13/32"], "protocol": ["http"], "outbound": "LAN"},
        {"rule_set": ["google", "google-ip"], "outbound": "G"},
    ]
    assert [entry["tag"] for entry in emission.providers] == ["google", "google-ip"]
    assert all(entry["format"] == "binary" for entry in emission.providers)


def test_surge_degrades_host_source_cidr_and_comments_broader_ranges() -> None:
    rules, providers = resolve_providers(
        [
            Rule(outbound="LAN", src_ip_cidr=("192.168.11.13/32", "192.168.10.0/24", "2001:db8::1/128")),
            Rule(outbound="Work", domain=("corp.example",)),
        ],
        SURGE_SOURCE,
    )

    emission = emitters.emit_surge_rules(rules, providers)

    assert emission.rules == [
        "SRC-IP,192.168.11.13,LAN",
        "# SRC-IP-CIDR not supported by Surge, skipped: 192.168.10.0/24",
        "SRC-IP,2001:db8::1,LAN",
        "DOMAIN-SUFFIX,corp.example,Work",
    ]
    assert [w.value for w in emission.warnings] == ["192.168.10.0/24"]


def test_surge_comments_unparseable_source_address() -> None:
    emission = emitters.emit_surge_rules([Rule(outbound="LAN", src_ip_cidr=("lan-box",))], {})

    assert emission.rules == ["# SRC-IP-CIDR not supported by Surge, skipped: lan-box"]


def test_surge_inlines_provider_urls() -> None:
    rules, providers = resolve_providers(
        [Rule(outbound="G", geosite=("google",), geoip=("google",), protocol=("quic",))],
        SURGE_SOURCE,
    )

    emission = emitters.emit_surge_rules(rules, providers)

    assert emission.rules == [
        f"RULE-SET,{providers['google'].url},G",
        f"RULE-SET,{providers['google-ip'].url},G,no-resolve",
        "PROTOCOL,QUIC,G",
    ]
    assert emission.providers == {}


def test_unsupported_tier_skips_only_that_match_type(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(emitters.SURGE_CAPABILITIES, MatchType.PROTOCOL, Support.UNSUPPORTED)
    rule = Rule(outbound="X", domain=("example.com",), protocol=("http",))

    emission = emitters.emit_surge_rules([rule], {})

    assert emission.rules == ["DOMAIN-SUFFIX,example.com,X"]
    assert str(emission.warnings[0]) == "PROTOCOL not supported by Surge, skipped: http"
