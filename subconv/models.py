"""Canonical rule model shared by the normalizer, registry and emitters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from subconv.errors import UnsupportedConstructWarning


class MatchType(StrEnum):
    GEOSITE = "geosite"
    GEOIP = "geoip"
    DOMAIN = "domain"
    DOMAIN_KEYWORD = "domain_keyword"
    IPCIDR = "ipcidr"
    SRC_IP_CIDR = "src_ip_cidr"
    PROTOCOL = "protocol"


class GeoKind(StrEnum):
    SITE = "site"
    IP = "ip"


class Behavior(StrEnum):
    DOMAIN = "domain"
    IPCIDR = "ipcidr"


class Support(StrEnum):
    SUPPORTED = "supported"
    DEGRADED = "degraded"
    UNSUPPORTED = "unsupported"


# Per-rule emission order: domain matchers precede IP matchers.
MATCH_ORDER = (
    MatchType.GEOSITE,
    MatchType.DOMAIN,
    MatchType.DOMAIN_KEYWORD,
    MatchType.GEOIP,
    MatchType.IPCIDR,
    MatchType.SRC_IP_CIDR,
    MatchType.PROTOCOL,
)

GEO_KINDS = {MatchType.GEOSITE: GeoKind.SITE, MatchType.GEOIP: GeoKind.IP}

KIND_BEHAVIOR = {GeoKind.SITE: Behavior.DOMAIN, GeoKind.IP: Behavior.IPCIDR}


@dataclass(frozen=True)
class Rule:
    """A canonical, backend-agnostic routing directive.

    Every value tuple is always present; an absent input field is ``()``.
    """

    outbound: str
    geosite: tuple[str, ...] = ()
    geoip: tuple[str, ...] = ()
    domain: tuple[str, ...] = ()
    domain_keyword: tuple[str, ...] = ()
    ipcidr: tuple[str, ...] = ()
    src_ip_cidr: tuple[str, ...] = ()
    protocol: tuple[str, ...] = ()
    no_resolve: bool = True
    catch_all: bool = False

    def values(self, match_type: MatchType) -> tuple[str, ...]:
        return getattr(self, match_type.value)

    @property
    def is_empty(self) -> bool:
        return not any(self.values(match_type) for match_type in MatchType)


@dataclass(frozen=True)
class ProviderDescriptor:
    key: str
    base: str
    kind: GeoKind
    behavior: Behavior
    url: str
    format: str


@dataclass
class Emission:
    """Backend-native output of one emitter run."""

    rules: list[Any] = field(default_factory=list)
    providers: Any = field(default_factory=dict)
    warnings: list[UnsupportedConstructWarning] = field(default_factory=list)
