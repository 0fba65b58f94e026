"""
Pre-flight Validator

Cheap check run before the repair engine: text that already parses and
carries none of the known corruption signatures is returned untouched.
Skipping must never change the outcome, so every signature here covers a rule
that can fire on otherwise valid JSON.
"""

import json
import logging
import re
from typing import List, Optional

from .config import RepairConfig
from .rules.placeholder_rules import PLACEHOLDER_TOKEN
from .rules.rule_base import IDENT

logger = logging.getLogger(__name__)

_NON_ASCII = r"[^\x00-\x7f\s\"]"

SIGNATURE_PATTERNS = {
    "glyph_beside_identifier": re.compile(
        rf'"{_NON_ASCII}+{IDENT}\.|{IDENT}\.{IDENT}{_NON_ASCII}+"'
    ),
    "control_escape_beside_identifier": re.compile(
        r"[A-Za-z0-9_$.]\\u00[01][0-9A-Fa-f]|\\u00[01][0-9A-Fa-f][A-Za-z0-9_$.]"
    ),
    "placeholder_token": re.compile(PLACEHOLDER_TOKEN),
}


def try_parse(text: str) -> bool:
    """True when ``text`` is strict JSON"""
    try:
        json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return False
    return True


def _duplicated_key_pattern(config: RepairConfig):
    keys = "|".join(re.escape(key) for key in sorted(config.known_keys))
    return re.compile(rf'"({keys})\1"\s*:')


def find_corruption_signatures(text: str, config: Optional[RepairConfig] = None) -> List[str]:
    """Names of the corruption signatures present in ``text``"""
    config = config or RepairConfig()
    found = [name for name, pattern in SIGNATURE_PATTERNS.items() if pattern.search(text)]
    if config.known_keys and _duplicated_key_pattern(config).search(text):
        found.append("duplicated_key_prefix")
    return found


def should_repair(text: str, config: Optional[RepairConfig] = None) -> bool:
    """
    Decide whether the repair engine needs to run.

    Args:
        text: Raw LLM output
        config: Repair configuration; supplies the known key names

    Returns:
        False only when ``text`` parses and shows no corruption signature
    """
    if not try_parse(text):
        return True

    signatures = find_corruption_signatures(text, config)
    if signatures:
        logger.debug(f"Parseable input carries corruption signatures: {', '.join(signatures)}")
        return True
    return False
