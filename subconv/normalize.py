"""Turn preset selections and custom rule records into canonical rules."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from subconv.errors import ValidationError
from subconv.models import Rule
from subconv.presets import CATALOGUE, CATALOGUE_NAMES, DEFAULT_LANG, PRESETS, outbound_label

logger = logging.getLogger(__name__)

# Custom rule input field -> Rule attribute.
CUSTOM_FIELDS = {
    "site": "geosite",
    "ip": "geoip",
    "domain": "domain",
    "domain_suffix": "domain",
    "domain_keyword": "domain_keyword",
    "ip_cidr": "ipcidr",
    "src_ip_cidr": "src_ip_cidr",
    "protocol": "protocol",
}


def coerce_values(value: Any, *, outbound: str, field: str) -> tuple[str, ...]:
    """Normalize a delimited string or a sequence of strings to a clean tuple.

    ``None`` and blank input become ``()``. Items are trimmed, empty items are
    dropped and duplicates removed keeping the first occurrence.
    """
    match value:
        case None:
            items: Sequence[Any] = ()
        case str():
            items = value.split(",")
        case list() | tuple():
            items = value
        case _:
            msg = f"expected a string or a list of strings, got {type(value).__name__}"
            raise ValidationError(msg, outbound=outbound, field=field)

    cleaned: list[str] = []
    for item in items:
        if not isinstance(item, str):
            msg = f"list items must be strings, got {type(item).__name__}"
            raise ValidationError(msg, outbound=outbound, field=field)
        if stripped := item.strip():
            cleaned.append(stripped)
    return tuple(dict.fromkeys(cleaned))


def select_presets(preset_rules: str | Sequence[str]) -> tuple[str, ...]:
    """Resolve a preset identifier or an explicit list of built-in rule names."""
    if isinstance(preset_rules, str):
        if preset_rules not in PRESETS:
            msg = f"unknown preset {preset_rules!r}"
            raise ValidationError(msg, field="preset")
        return PRESETS[preset_rules]

    names = coerce_values(list(preset_rules), outbound="<preset>", field="preset")
    if unknown := [name for name in names if name not in CATALOGUE_NAMES]:
        msg = f"unknown built-in rules {', '.join(unknown)}"
        raise ValidationError(msg, field="preset")
    return names


def _custom_rule(record: Any, index: int) -> Rule:
    if not isinstance(record, Mapping):
        msg = f"custom rule #{index} must be a mapping, got {type(record).__name__}"
        raise ValidationError(msg, field="custom_rules")

    outbound = record.get("name")
    if not isinstance(outbound, str) or not outbound.strip():
        msg = f"custom rule #{index} needs a non-empty name"
        raise ValidationError(msg, outbound=outbound, field="name")
    outbound = outbound.strip()

    values: dict[str, tuple[str, ...]] = {}
    for source, target in CUSTOM_FIELDS.items():
        coerced = coerce_values(record.get(source), outbound=outbound, field=source)
        values[target] = tuple(dict.fromkeys(values.get(target, ()) + coerced))
    values["protocol"] = tuple(dict.fromkeys(p.lower() for p in values["protocol"]))

    no_resolve = record.get("no_resolve", True)
    if not isinstance(no_resolve, bool):
        msg = f"expected a boolean, got {type(no_resolve).__name__}"
        raise ValidationError(msg, outbound=outbound, field="no_resolve")

    return Rule(outbound=outbound, no_resolve=no_resolve, **values)


def normalize_rules(
    preset_rules: str | Sequence[str],
    custom_rules: Sequence[Mapping[str, Any]] = (),
    *,
    lang: str = DEFAULT_LANG,
) -> list[Rule]:
    """Build the ordered canonical rule list for one build.

    Specific presets come first in catalogue order, then custom rules in the
    order given, then catch-all presets.
    """
    if isinstance(custom_rules, (str, Mapping)) or not isinstance(custom_rules, Sequence):
        msg = "custom rules must be a list of mappings"
        raise ValidationError(msg, field="custom_rules")

    selected = frozenset(select_presets(preset_rules))
    custom = [_custom_rule(record, idx) for idx, record in enumerate(custom_rules, 1)]

    specific: list[Rule] = []
    catch_all: list[Rule] = []
    for preset in CATALOGUE:
        if preset.name not in selected:
            continue
        rule = Rule(
            outbound=outbound_label(preset.name, lang),
            geosite=preset.site,
            geoip=preset.ip,
            catch_all=preset.catch_all,
        )
        (catch_all if preset.catch_all else specific).append(rule)

    rules = specific + custom + catch_all
    logger.debug(
        "Normalized %d preset and %d custom rules", len(specific) + len(catch_all), len(custom)
    )
    return rules
