"""Build request loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from subconv.errors import ConfigError
from subconv.settings import TARGETS, load_build_request, parse_build_request


def test_defaults_for_empty_request() -> None:
    request = parse_build_request(None)

    assert request.preset == "balanced"
    assert request.lang == "zh-CN"
    assert request.targets == TARGETS
    assert request.custom_rules == ()


def test_load_request_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "subconv.yaml"
    path.write_text(
        "\n".join(
            [
                "preset: [Google, Non-China]",
                "lang: en-US",
                "custom_rules:",
                "  - name: LAN",
                "    src_ip_cidr: 192.168.11.13/32",
                "proxies:",
                "  surge:",
                "    - HK = ss, example.com, 443",
                "targets: [surge]",
                "output_dir: out",
            ]
        ),
        encoding="utf-8",
    )

    request = load_build_request(path)

    assert request.preset == ("Google", "Non-China")
    assert request.custom_rules == ({"name": "LAN", "src_ip_cidr": "192.168.11.13/32"},)
    assert request.proxies == {"surge": ("HK = ss, example.com, 443",)}
    assert request.targets == ("surge",)
    assert request.output_dir == tmp_path.resolve() / "out"


def test_missing_file_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_build_request(tmp_path / "missing.yaml")


def test_invalid_yaml_is_config_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("preset: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_build_request(path)


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        (["not", "a", "mapping"], "must be a YAML mapping"),
        ({"preset": 3}, "preset"),
        ({"lang": ["zh-CN"]}, "lang"),
        ({"targets": ["clash", "quantumult"]}, "quantumult"),
        ({"targets": [["clash"]]}, "must be strings"),
        ({"proxies": {"v2ray": []}}, "v2ray"),
        ({"custom_rules": {"name": "LAN"}}, "custom_rules"),
    ],
)
def test_malformed_requests(raw: object, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        parse_build_request(raw)


def test_duplicate_targets_are_collapsed() -> None:
    request = parse_build_request({"targets": ["clash", "surge", "clash"]})

    assert request.targets == ("clash", "surge")
