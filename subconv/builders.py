"""Per-backend configuration builders."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar

import orjson
import yaml

from subconv.emitters import emit_clash_rules, emit_singbox_rules, emit_surge_rules
from subconv.models import Emission, ProviderDescriptor, Rule
from subconv.normalize import normalize_rules
from subconv.presets import DEFAULT_LANG, outbound_label
from subconv.providers import (
    CLASH_SOURCE,
    SINGBOX_SOURCE,
    SURGE_SOURCE,
    ProviderSource,
    resolve_providers,
)
from subconv.templates import CLASH_BASE, SINGBOX_BASE, SURGE_BASE, base_config

logger = logging.getLogger(__name__)

BUILTIN_OUTBOUNDS = frozenset({"DIRECT", "REJECT"})


class BaseConfigBuilder:
    """Normalize, resolve, emit, assemble and serialize one configuration.

    Every call to :meth:`build` starts from fresh rules, a fresh provider
    registry and a deep copy of the base template.
    """

    backend: ClassVar[str]
    source: ClassVar[ProviderSource]
    template: ClassVar[dict[str, Any]]
    emitter: ClassVar[Callable[[Sequence[Rule], Mapping[str, ProviderDescriptor]], Emission]]

    def __init__(
        self,
        preset_rules: str | Sequence[str] = "balanced",
        custom_rules: Sequence[Mapping[str, Any]] = (),
        *,
        lang: str = DEFAULT_LANG,
        proxies: Sequence[Any] = (),
        base: dict[str, Any] | None = None,
    ) -> None:
        self.preset_rules = preset_rules
        self.custom_rules = custom_rules
        self.lang = lang
        self.proxies = list(proxies)
        self.base = base
        self.rules: list[Rule] = []
        self.emission: Emission | None = None
        self.config: dict[str, Any] | None = None
        self.notices: list[str] = []

    @property
    def node_select(self) -> str:
        return outbound_label("Node Select", self.lang)

    @property
    def fall_back(self) -> str:
        return outbound_label("Fall Back", self.lang)

    def proxy_name(self, proxy: Any) -> str:
        return proxy["name"]

    def proxy_names(self) -> list[str]:
        return [self.proxy_name(proxy) for proxy in self.proxies]

    def rule_groups(self, rules: Sequence[Rule]) -> list[str]:
        """Return the selector groups rules route to, excluding policies and nodes."""
        reserved = BUILTIN_OUTBOUNDS | {self.node_select, self.fall_back, *self.proxy_names()}
        return [
            outbound
            for outbound in dict.fromkeys(rule.outbound for rule in rules if not rule.is_empty)
            if outbound not in reserved
        ]

    def group_members(self) -> list[str]:
        return [self.node_select, "DIRECT", "REJECT", *self.proxy_names()]

    def build(self) -> str:
        normalized = normalize_rules(self.preset_rules, self.custom_rules, lang=self.lang)
        rules, providers = resolve_providers(normalized, self.source)
        emission = type(self).emitter(rules, providers)
        config = base_config(self.base if self.base is not None else self.template)
        self.assemble(config, rules, emission)
        text = self.serialize(config)

        self.rules, self.emission, self.config = rules, emission, config
        logger.info(
            "Built %s config: %d rules, %d providers, %d skipped",
            self.backend,
            len(emission.rules),
            len(providers),
            len(emission.warnings),
        )
        return text

    def assemble(
        self, config: dict[str, Any], rules: Sequence[Rule], emission: Emission
    ) -> None:
        raise NotImplementedError

    def serialize(self, config: dict[str, Any]) -> str:
        raise NotImplementedError


class ClashConfigBuilder(BaseConfigBuilder):
    backend = "clash"
    source = CLASH_SOURCE
    template = CLASH_BASE
    emitter = staticmethod(emit_clash_rules)

    def assemble(  # noqa: D102
        self, config: dict[str, Any], rules: Sequence[Rule], emission: Emission
    ) -> None:
        names = self.proxy_names()
        config["proxies"] = [*config.get("proxies", []), *self.proxies]
        config["proxy-groups"] = [
            {"name": self.node_select, "type": "select", "proxies": ["DIRECT", *names]},
            *(
                {"name": group, "type": "select", "proxies": self.group_members()}
                for group in self.rule_groups(rules)
            ),
            {"name": self.fall_back, "type": "select", "proxies": self.group_members()},
        ]
        config["rule-providers"] = emission.providers
        config["rules"] = [*emission.rules, f"MATCH,{self.fall_back}"]
        self.notices = [f"# {warning}" for warning in emission.warnings]

    def serialize(self, config: dict[str, Any]) -> str:
        """Dump the document; skipped constructs are listed as comments above ``rules``."""
        head = {key: value for key, value in config.items() if key != "rules"}
        text = yaml.dump(head, default_flow_style=False, sort_keys=False, allow_unicode=True)
        if "rules" not in config:
            return text
        notices = "".join(f"{notice}\n" for notice in self.notices)
        rules = yaml.dump(
            {"rules": config["rules"]},
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return text + notices + rules


class SingboxConfigBuilder(BaseConfigBuilder):
    backend = "singbox"
    source = SINGBOX_SOURCE
    template = SINGBOX_BASE
    emitter = staticmethod(emit_singbox_rules)

    def proxy_name(self, proxy: Any) -> str:  # noqa: D102
        return proxy["tag"]

    def assemble(  # noqa: D102
        self, config: dict[str, Any], rules: Sequence[Rule], emission: Emission
    ) -> None:
        names = self.proxy_names()
        selectors = [
            {"type": "selector", "tag": self.node_select, "outbounds": names or ["DIRECT"]},
            *(
                {"type": "selector", "tag": group, "outbounds": self.group_members()}
                for group in self.rule_groups(rules)
            ),
            {"type": "selector", "tag": self.fall_back, "outbounds": self.group_members()},
        ]
        config["outbounds"] = [*selectors, *config.get("outbounds", []), *self.proxies]

        route = config.setdefault("route", {})
        route["rules"] = [*route.get("rules", []), *emission.rules]
        route["rule_set"] = [
            *route.get("rule_set", []),
            *({**entry, "download_detour": "DIRECT"} for entry in emission.providers),
        ]
        route["final"] = self.fall_back

    def serialize(self, config: dict[str, Any]) -> str:  # noqa: D102
        return orjson.dumps(config, option=orjson.OPT_INDENT_2).decode("utf-8")


class SurgeConfigBuilder(BaseConfigBuilder):
    backend = "surge"
    source = SURGE_SOURCE
    template = SURGE_BASE
    emitter = staticmethod(emit_surge_rules)

    def proxy_name(self, proxy: Any) -> str:  # noqa: D102
        return str(proxy).split("=", 1)[0].strip()

    def assemble(  # noqa: D102
        self, config: dict[str, Any], rules: Sequence[Rule], emission: Emission
    ) -> None:
        names = self.proxy_names()

        def _select(group: str, members: Sequence[str]) -> str:
            return f"{group} = select, {', '.join(members)}"

        config["Proxy"] = [*config.get("Proxy", []), *map(str, self.proxies)]
        config["Proxy Group"] = [
            _select(self.node_select, names or ["DIRECT"]),
            *(_select(group, self.group_members()) for group in self.rule_groups(rules)),
            _select(self.fall_back, self.group_members()),
        ]
        config["Rule"] = [*emission.rules, f"FINAL,{self.fall_back}"]

    def serialize(self, config: dict[str, Any]) -> str:  # noqa: D102
        sections = ["\n".join([f"[{name}]", *lines]) for name, lines in config.items()]
        return "\n\n".join(sections) + "\n"


BUILDERS: dict[str, type[BaseConfigBuilder]] = {
    "clash": ClashConfigBuilder,
    "singbox": SingboxConfigBuilder,
    "surge": SurgeConfigBuilder,
}
