"""Provider key derivation and per-build provider registry."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from typing import NamedTuple

from subconv.errors import InternalInvariantViolation
from subconv.models import GEO_KINDS, KIND_BEHAVIOR, GeoKind, ProviderDescriptor, Rule

logger = logging.getLogger(__name__)


class ProviderSource(NamedTuple):
    """URL templates for one backend's classification bundles."""

    site_url: str
    ip_url: str
    format: str

    def url_for(self, base: str, kind: GeoKind) -> str:
        template = self.site_url if kind is GeoKind.SITE else self.ip_url
        return template.format(base=base)


_META_RULES = "https://raw.githubusercontent.com/MetaCubeX/meta-rules-dat"

CLASH_SOURCE = ProviderSource(
    site_url=f"{_META_RULES}/meta/geo/geosite/{{base}}.mrs",
    ip_url=f"{_META_RULES}/meta/geo/geoip/{{base}}.mrs",
    format="mrs",
)

SINGBOX_SOURCE = ProviderSource(
    site_url=f"{_META_RULES}/sing/geo/geosite/{{base}}.srs",
    ip_url=f"{_META_RULES}/sing/geo/geoip/{{base}}.srs",
    format="binary",
)

SURGE_SOURCE = ProviderSource(
    site_url="https://github.com/NSZA156/surge-geox-rules/raw/refs/heads/release/geo/geosite/{base}.list",
    ip_url="https://github.com/NSZA156/surge-geox-rules/raw/refs/heads/release/geo/geoip/{base}.list",
    format="list",
)


class ProviderRegistry:
    """Collision-free mapping of provider key to descriptor for one build."""

    KEY_SUFFIX = {GeoKind.SITE: "", GeoKind.IP: "-ip"}

    def __init__(self, source: ProviderSource) -> None:
        self.source = source
        self.providers: dict[str, ProviderDescriptor] = {}

    def key_for(self, base: str, kind: GeoKind) -> str:
        return f"{base}{self.KEY_SUFFIX[kind]}"

    def register(self, base: str, kind: GeoKind) -> str:
        key = self.key_for(base, kind)
        if (existing := self.providers.get(key)) is not None:
            if (existing.base, existing.kind) != (base, kind):
                msg = (
                    f"provider key {key!r} derived for {kind} {base!r} is already "
                    f"held by {existing.kind} {existing.base!r}"
                )
                raise InternalInvariantViolation(msg)
            return key

        self.providers[key] = ProviderDescriptor(
            key=key,
            base=base,
            kind=kind,
            behavior=KIND_BEHAVIOR[kind],
            url=self.source.url_for(base, kind),
            format=self.source.format,
        )
        return key

    def resolve(self, rule: Rule) -> Rule:
        changes = {
            match_type.value: tuple(
                dict.fromkeys(self.register(base, kind) for base in rule.values(match_type))
            )
            for match_type, kind in GEO_KINDS.items()
        }
        return dataclasses.replace(rule, **changes)


def resolve_providers(
    rules: Iterable[Rule], source: ProviderSource
) -> tuple[list[Rule], dict[str, ProviderDescriptor]]:
    """Register every geo-reference and rewrite rules to carry provider keys."""
    registry = ProviderRegistry(source)
    resolved = [registry.resolve(rule) for rule in rules]
    logger.debug("Resolved %d rule providers", len(registry.providers))
    return resolved, registry.providers
