"""Build request loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from subconv.errors import ConfigError
from subconv.presets import DEFAULT_LANG

TARGETS = ("clash", "singbox", "surge")

OUTPUT_FILENAMES = {
    "clash": "clash.yaml",
    "singbox": "sing-box.json",
    "surge": "surge.conf",
}


@dataclass(frozen=True)
class BuildRequest:
    """Everything one build needs besides the built-in catalogue."""

    preset: str | tuple[str, ...] = "balanced"
    custom_rules: tuple[dict[str, Any], ...] = ()
    lang: str = DEFAULT_LANG
    proxies: dict[str, tuple[Any, ...]] = field(default_factory=dict)
    targets: tuple[str, ...] = TARGETS
    output_dir: Path = Path("dist")


def _mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    return value


def _list(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list")
    return value


def parse_build_request(raw: Any, *, base_dir: Path | None = None) -> BuildRequest:
    """Validate the shape of a decoded request document."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("build request must be a YAML mapping")

    preset = raw.get("preset", "balanced")
    if isinstance(preset, list):
        preset = tuple(preset)
    elif not isinstance(preset, str):
        raise ConfigError("preset must be a preset name or a list of rule names")

    lang = raw.get("lang", DEFAULT_LANG)
    if not isinstance(lang, str):
        raise ConfigError("lang must be a string")

    proxies = {
        target: tuple(_list(_mapping(raw, "proxies"), target))
        for target in _mapping(raw, "proxies")
    }
    if unknown := sorted(set(proxies) - set(TARGETS)):
        raise ConfigError(f"proxies has unknown targets: {', '.join(unknown)}")

    entries = _list(raw, "targets")
    if bad := [entry for entry in entries if not isinstance(entry, str)]:
        raise ConfigError(f"targets entries must be strings: {bad!r}")
    targets = tuple(dict.fromkeys(entries)) or TARGETS
    if unknown := sorted(set(targets) - set(TARGETS)):
        raise ConfigError(f"targets has unknown entries: {', '.join(map(str, unknown))}")

    output_dir = Path(str(raw.get("output_dir", "dist")))
    if base_dir is not None and not output_dir.is_absolute():
        output_dir = base_dir / output_dir

    return BuildRequest(
        preset=preset,
        custom_rules=tuple(_list(raw, "custom_rules")),
        lang=lang,
        proxies=proxies,
        targets=targets,
        output_dir=output_dir,
    )


def load_build_request(path: Path) -> BuildRequest:
    """Load a build request from a YAML file; relative output paths follow the file."""
    path = path.resolve()
    if not path.exists():
        raise ConfigError(f"Build request not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML build request at {path}: {exc}") from exc
    return parse_build_request(raw, base_dir=path.parent)
