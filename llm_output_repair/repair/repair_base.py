"""
Base types for the LLM output repair engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ContainerKind(Enum):
    """Kind of container enclosing an offset"""
    OBJECT = "object"
    ARRAY = "array"
    NONE = "none"


class RuleCategory(Enum):
    """Corruption categories covered by the rule catalog"""
    CHARACTER_NORMALIZATION = "character_normalization"
    STRUCTURAL_IMBALANCE = "structural_imbalance"
    EMBEDDED_CONTENT = "embedded_content"
    EMBEDDED_PROSE = "embedded_prose"
    PLACEHOLDER = "placeholder"
    STRAY_TOKEN = "stray_token"
    KEY_NAME = "key_name"
    CORRUPTED_SCALAR = "corrupted_scalar"
    NON_ASCII = "non_ascii"
    SEPARATOR = "separator"
    ARRAY_ELEMENT = "array_element"
    CLOSURE = "closure"


@dataclass(frozen=True)
class EnclosingContext:
    """Innermost open container at an offset and how deeply it is nested"""
    kind: ContainerKind
    depth: int

    @property
    def in_object(self) -> bool:
        return self.kind == ContainerKind.OBJECT

    @property
    def in_array(self) -> bool:
        return self.kind == ContainerKind.ARRAY


@dataclass(frozen=True)
class Diagnostic:
    """One applied fix"""
    rule_id: str
    message: str


@dataclass(frozen=True)
class RepairResult:
    """
    Outcome of one repair call.

    ``content`` equals the input whenever ``changed`` is False. ``diagnostics``
    is None unless at least one fix was recorded.
    """
    content: str
    changed: bool
    diagnostics: Optional[Tuple[str, ...]] = None
    records: Tuple[Diagnostic, ...] = field(default=(), repr=False)

    @property
    def rule_ids(self) -> Tuple[str, ...]:
        """Ids of the rules behind each recorded diagnostic, in order"""
        return tuple(record.rule_id for record in self.records)

    @classmethod
    def unchanged(cls, content: str, diagnostics: Optional[Tuple[str, ...]] = None) -> "RepairResult":
        return cls(content=content, changed=False, diagnostics=diagnostics)
