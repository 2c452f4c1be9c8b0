"""Compile routing rules into Clash, sing-box and Surge configurations."""

from __future__ import annotations

import logging

from subconv.builders import (
    BUILDERS,
    ClashConfigBuilder,
    SingboxConfigBuilder,
    SurgeConfigBuilder,
)
from subconv.errors import (
    ConfigError,
    InternalInvariantViolation,
    SubconvError,
    UnsupportedConstructWarning,
    ValidationError,
)
from subconv.models import MatchType, ProviderDescriptor, Rule
from subconv.normalize import normalize_rules
from subconv.providers import resolve_providers

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BUILDERS",
    "ClashConfigBuilder",
    "ConfigError",
    "InternalInvariantViolation",
    "MatchType",
    "ProviderDescriptor",
    "Rule",
    "SingboxConfigBuilder",
    "SubconvError",
    "SurgeConfigBuilder",
    "UnsupportedConstructWarning",
    "ValidationError",
    "normalize_rules",
    "resolve_providers",
]
