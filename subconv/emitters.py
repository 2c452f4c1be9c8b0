"""Render canonical rules into each backend's native rule syntax."""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from subconv.errors import InternalInvariantViolation, UnsupportedConstructWarning
from subconv.models import MATCH_ORDER, Emission, MatchType, ProviderDescriptor, Rule, Support

logger = logging.getLogger(__name__)

PROVIDER_INTERVAL = 86400

CLASH_CAPABILITIES = {
    MatchType.GEOSITE: Support.SUPPORTED,
    MatchType.GEOIP: Support.SUPPORTED,
    MatchType.DOMAIN: Support.SUPPORTED,
    MatchType.DOMAIN_KEYWORD: Support.SUPPORTED,
    MatchType.IPCIDR: Support.SUPPORTED,
    MatchType.SRC_IP_CIDR: Support.SUPPORTED,
    MatchType.PROTOCOL: Support.DEGRADED,
}

SINGBOX_CAPABILITIES = dict.fromkeys(MatchType, Support.SUPPORTED)

SURGE_CAPABILITIES = {
    MatchType.GEOSITE: Support.SUPPORTED,
    MatchType.GEOIP: Support.SUPPORTED,
    MatchType.DOMAIN: Support.SUPPORTED,
    MatchType.DOMAIN_KEYWORD: Support.SUPPORTED,
    MatchType.IPCIDR: Support.SUPPORTED,
    MatchType.SRC_IP_CIDR: Support.DEGRADED,
    MatchType.PROTOCOL: Support.SUPPORTED,
}

CLASH_MATCHER = {
    MatchType.GEOSITE: "RULE-SET",
    MatchType.GEOIP: "RULE-SET",
    MatchType.DOMAIN: "DOMAIN-SUFFIX",
    MatchType.DOMAIN_KEYWORD: "DOMAIN-KEYWORD",
    MatchType.IPCIDR: "IP-CIDR",
    MatchType.SRC_IP_CIDR: "SRC-IP-CIDR",
    MatchType.PROTOCOL: "NETWORK",
}

SURGE_MATCHER = {
    MatchType.GEOSITE: "RULE-SET",
    MatchType.GEOIP: "RULE-SET",
    MatchType.DOMAIN: "DOMAIN-SUFFIX",
    MatchType.DOMAIN_KEYWORD: "DOMAIN-KEYWORD",
    MatchType.IPCIDR: "IP-CIDR",
    MatchType.SRC_IP_CIDR: "SRC-IP-CIDR",
    MatchType.PROTOCOL: "PROTOCOL",
}

SINGBOX_FIELD = {
    MatchType.GEOSITE: "rule_set",
    MatchType.GEOIP: "rule_set",
    MatchType.DOMAIN: "domain_suffix",
    MatchType.DOMAIN_KEYWORD: "domain_keyword",
    MatchType.IPCIDR: "ip_cidr",
    MatchType.SRC_IP_CIDR: "source_ip_cidr",
    MatchType.PROTOCOL: "protocol",
}

SINGBOX_ORDER = [
    "rule_set",
    "domain_suffix",
    "domain_keyword",
    "ip_cidr",
    "source_ip_cidr",
    "protocol",
]

_NETWORK_PROTOCOLS = frozenset({"TCP", "UDP"})


def normalize_cidr(entry: str) -> str:  # noqa: D103
    if "/" in entry:
        return entry
    try:
        addr = ipaddress.ip_address(entry)
    except ValueError:
        return entry
    return f"{entry}/32" if addr.version == 4 else f"{entry}/128"  # noqa: PLR2004


def ip_cidr_matcher(entry: str) -> str:  # noqa: D103
    try:
        network = ipaddress.ip_network(entry, strict=False)
    except ValueError:
        return "IP-CIDR"
    return "IP-CIDR6" if network.version == 6 else "IP-CIDR"  # noqa: PLR2004


def _provider(providers: Mapping[str, ProviderDescriptor], key: str) -> ProviderDescriptor:
    if (descriptor := providers.get(key)) is None:
        msg = f"rule references unregistered provider key {key!r}"
        raise InternalInvariantViolation(msg)
    return descriptor


def _skip(
    emission: Emission, backend: str, construct: str, value: str
) -> UnsupportedConstructWarning:
    warning = UnsupportedConstructWarning(backend, construct, value)
    logger.warning("%s", warning)
    emission.warnings.append(warning)
    return warning


def _skip_unsupported(
    emission: Emission,
    backend: str,
    capabilities: Mapping[MatchType, Support],
    rule: Rule,
    matchers: Mapping[MatchType, str],
) -> list[MatchType]:
    """Return the match types the backend can render for this rule.

    Values of unsupported match types are recorded as warnings.
    """
    renderable: list[MatchType] = []
    for match_type in MATCH_ORDER:
        if not (values := rule.values(match_type)):
            continue
        if capabilities[match_type] is Support.UNSUPPORTED:
            for value in values:
                _skip(emission, backend, matchers[match_type], value)
            continue
        renderable.append(match_type)
    return renderable


def emit_clash_rules(  # noqa: C901
    rules: Iterable[Rule], providers: Mapping[str, ProviderDescriptor]
) -> Emission:
    emission = Emission()

    def _line(match_type: MatchType, value: str, rule: Rule, *, resolve_flag: bool) -> str:
        suffix = ",no-resolve" if resolve_flag and rule.no_resolve else ""
        return f"{CLASH_MATCHER[match_type]},{value},{rule.outbound}{suffix}"

    for rule in rules:
        for match_type in _skip_unsupported(
            emission, "Clash", CLASH_CAPABILITIES, rule, CLASH_MATCHER
        ):
            values = rule.values(match_type)
            match match_type:
                case MatchType.GEOSITE:
                    emission.rules.extend(
                        _line(match_type, _provider(providers, key).key, rule, resolve_flag=False)
                        for key in values
                    )
                case MatchType.GEOIP:
                    emission.rules.extend(
                        _line(match_type, _provider(providers, key).key, rule, resolve_flag=True)
                        for key in values
                    )
                case MatchType.DOMAIN:
                    emission.rules.extend(
                        _line(match_type, value.lstrip("."), rule, resolve_flag=False)
                        for value in values
                    )
                case MatchType.DOMAIN_KEYWORD:
                    emission.rules.extend(
                        _line(match_type, value, rule, resolve_flag=False) for value in values
                    )
                case MatchType.IPCIDR:
                    suffix = ",no-resolve" if rule.no_resolve else ""
                    emission.rules.extend(
                        f"{ip_cidr_matcher(value)},{normalize_cidr(value)},{rule.outbound}{suffix}"
                        for value in values
                    )
                case MatchType.SRC_IP_CIDR:
                    emission.rules.extend(
                        _line(match_type, normalize_cidr(value), rule, resolve_flag=False)
                        for value in values
                    )
                case MatchType.PROTOCOL:
                    for value in values:
                        if value.upper() in _NETWORK_PROTOCOLS:
                            emission.rules.append(
                                _line(match_type, value.upper(), rule, resolve_flag=False)
                            )
                        else:
                            _skip(emission, "Clash", "PROTOCOL", value)

    emission.providers = {
        key: {
            "type": "http",
            "format": descriptor.format,
            "behavior": descriptor.behavior.value,
            "url": descriptor.url,
            "path": f"./ruleset/{key}.{descriptor.format}",
            "interval": PROVIDER_INTERVAL,
        }
        for key, descriptor in providers.items()
    }
    return emission


def emit_singbox_rules(
    rules: Iterable[Rule], providers: Mapping[str, ProviderDescriptor]
) -> Emission:
    emission = Emission()

    for rule in rules:
        fields: dict[str, list[str]] = {}
        for match_type in _skip_unsupported(
            emission, "sing-box", SINGBOX_CAPABILITIES, rule, SINGBOX_FIELD
        ):
            values = rule.values(match_type)
            match match_type:
                case MatchType.GEOSITE | MatchType.GEOIP:
                    rendered = [_provider(providers, key).key for key in values]
                case MatchType.DOMAIN:
                    rendered = [value.lstrip(".") for value in values]
                case MatchType.IPCIDR | MatchType.SRC_IP_CIDR:
                    rendered = [normalize_cidr(value) for value in values]
                case _:
                    rendered = list(values)
            fields.setdefault(SINGBOX_FIELD[match_type], []).extend(rendered)

        ordered: dict[str, Any] = {
            field: list(dict.fromkeys(fields[field]))
            for field in SINGBOX_ORDER
            if fields.get(field)
        }
        if ordered:
            ordered["outbound"] = rule.outbound
            emission.rules.append(ordered)

    emission.providers = [
        {
            "tag": key,
            "type": "remote",
            "format": descriptor.format,
            "url": descriptor.url,
        }
        for key, descriptor in providers.items()
    ]
    return emission


def emit_surge_rules(  # noqa: C901
    rules: Iterable[Rule], providers: Mapping[str, ProviderDescriptor]
) -> Emission:
    emission = Emission()

    def _src_ip(value: str, rule: Rule) -> str:
        try:
            network = ipaddress.ip_network(value, strict=False)
        except ValueError:
            network = None
        if network is not None and network.prefixlen == network.max_prefixlen:
            return f"SRC-IP,{network.network_address},{rule.outbound}"
        return f"# {_skip(emission, 'Surge', 'SRC-IP-CIDR', value)}"

    for rule in rules:
        suffix = ",no-resolve" if rule.no_resolve else ""
        for match_type in _skip_unsupported(
            emission, "Surge", SURGE_CAPABILITIES, rule, SURGE_MATCHER
        ):
            values = rule.values(match_type)
            matcher = SURGE_MATCHER[match_type]
            match match_type:
                case MatchType.GEOSITE:
                    emission.rules.extend(
                        f"{matcher},{_provider(providers, key).url},{rule.outbound}"
                        for key in values
                    )
                case MatchType.GEOIP:
                    emission.rules.extend(
                        f"{matcher},{_provider(providers, key).url},{rule.outbound}{suffix}"
                        for key in values
                    )
                case MatchType.DOMAIN:
                    emission.rules.extend(
                        f"{matcher},{value.lstrip('.')},{rule.outbound}" for value in values
                    )
                case MatchType.DOMAIN_KEYWORD:
                    emission.rules.extend(f"{matcher},{value},{rule.outbound}" for value in values)
                case MatchType.IPCIDR:
                    emission.rules.extend(
                        f"{ip_cidr_matcher(value)},{normalize_cidr(value)},{rule.outbound}{suffix}"
                        for value in values
                    )
                case MatchType.SRC_IP_CIDR:
                    emission.rules.extend(_src_ip(value, rule) for value in values)
                case MatchType.PROTOCOL:
                    emission.rules.extend(
                        f"{matcher},{value.upper()},{rule.outbound}" for value in values
                    )

    # Surge references rule sets by URL inside each rule line.
    emission.providers = {}
    return emission
