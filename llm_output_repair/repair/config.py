"""
Configuration for the LLM Output Repair Engine

Profiles bundle iteration caps, diagnostic limits and the truncated key
fragment table. Environment settings (see llm_output_repair.core.config)
override individual values on top of the selected profile.
"""

import logging
import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional

from ..core.config import MAX_CONTEXT_LOOKBACK, MIN_CONTEXT_LOOKBACK, Settings

logger = logging.getLogger(__name__)


class RepairProfile(Enum):
    """Predefined repair profiles for different use cases"""
    STRICT = "strict"
    STANDARD = "standard"
    LENIENT = "lenient"
    DEVELOPMENT = "development"


# Truncated property-name fragments -> canonical names. Single letters are
# too ambiguous to map.
DEFAULT_KEY_FRAGMENTS: Dict[str, str] = {
    "se": "name",
    "me": "name",
    "na": "name",
    "nam": "name",
    "pu": "purpose",
    "pur": "purpose",
    "de": "description",
    "des": "description",
    "ty": "type",
    "typ": "type",
    "va": "value",
    "val": "value",
}

DEFAULT_KNOWN_KEYS: FrozenSet[str] = frozenset({
    "name", "type", "value", "description", "purpose", "id", "key",
    "title", "path", "namespace", "version", "methods", "parameters",
    "properties", "items", "dependencies", "returns", "imports",
})


@dataclass(frozen=True)
class RepairConfig:
    """Configuration for repair behavior"""

    max_diagnostics: int = 10
    max_passes: int = 10
    context_lookback: int = 200
    preflight_enabled: bool = True
    log_diagnostics: bool = False

    # Fragment -> canonical key; None means DEFAULT_KEY_FRAGMENTS
    key_fragments: Optional[Mapping[str, str]] = None
    # Keys eligible for duplicated-prefix collapsing; None means DEFAULT_KNOWN_KEYS
    known_keys: Optional[FrozenSet[str]] = None

    def __post_init__(self):
        if self.key_fragments is None:
            object.__setattr__(self, "key_fragments", dict(DEFAULT_KEY_FRAGMENTS))
        if self.known_keys is None:
            object.__setattr__(self, "known_keys", DEFAULT_KNOWN_KEYS | frozenset(self.key_fragments.values()))
        object.__setattr__(self, "max_diagnostics", max(1, self.max_diagnostics))
        object.__setattr__(self, "max_passes", max(1, self.max_passes))
        object.__setattr__(
            self,
            "context_lookback",
            min(MAX_CONTEXT_LOOKBACK, max(MIN_CONTEXT_LOOKBACK, self.context_lookback)),
        )


def get_repair_config(profile: Optional[RepairProfile] = None) -> RepairConfig:
    """
    Get repair configuration for specified profile

    Args:
        profile: Repair profile to use. If None, determines from environment

    Returns:
        RepairConfig instance
    """

    if profile is None:
        env_profile = os.getenv("REPAIR_PROFILE", "standard").lower()
        try:
            profile = RepairProfile(env_profile)
        except ValueError:
            profile = RepairProfile.STANDARD

    if profile == RepairProfile.STRICT:
        return RepairConfig(
            max_diagnostics=10,
            max_passes=5,
            key_fragments={},
        )

    elif profile == RepairProfile.LENIENT:
        return RepairConfig(
            max_diagnostics=25,
            max_passes=20,
            context_lookback=500,
        )

    elif profile == RepairProfile.DEVELOPMENT:
        return RepairConfig(
            max_diagnostics=50,
            max_passes=20,
            preflight_enabled=False,
            log_diagnostics=True,
        )

    else:  # STANDARD
        return RepairConfig()


def get_key_fragment_map(config: Optional[RepairConfig] = None) -> Dict[str, str]:
    """Fragment table in effect for ``config`` (defaults when None)"""
    if config is None:
        return dict(DEFAULT_KEY_FRAGMENTS)
    return dict(config.key_fragments)


def register_key_fragment(config: RepairConfig, fragment: str, canonical: str) -> RepairConfig:
    """
    Return a copy of ``config`` whose fragment table also maps ``fragment``
    to ``canonical``. The original config is left untouched.
    """
    fragment = fragment.strip().lower()
    if len(fragment) < 2 or not fragment.isalpha():
        raise ValueError(f"Key fragment must be at least two letters: {fragment!r}")
    fragments = dict(config.key_fragments)
    fragments[fragment] = canonical
    return replace(config, key_fragments=fragments, known_keys=config.known_keys | {canonical})


def load_repair_config_from_env(profile: Optional[RepairProfile] = None) -> RepairConfig:
    """Load repair configuration from environment variables"""

    env_settings = Settings()

    if profile is None:
        try:
            profile = RepairProfile(env_settings.repair_profile)
        except ValueError:
            logger.debug(f"Unknown repair profile '{env_settings.repair_profile}', using standard")
            profile = RepairProfile.STANDARD

    config = get_repair_config(profile)

    overrides = env_settings.get_repair_overrides()
    if overrides:
        config = replace(config, **overrides)

    return config


def load_repair_config(profile: Optional[RepairProfile] = None) -> RepairConfig:
    """
    Alias for load_repair_config_from_env

    Args:
        profile: Repair profile to use

    Returns:
        RepairConfig instance
    """
    return load_repair_config_from_env(profile)
