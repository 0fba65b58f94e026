"""
Property-name normalization.

This group converges: restoring one key quote often exposes the next anomaly
on the same key (a duplicated prefix, a stray word after the colon).
"""

import re
from re import Match

from ..repair_base import ContainerKind, RuleCategory
from .rule_base import AnomalyRule, RuleContext, all_of, group_in, is_keyword, keep_groups

_KEY_LEAD = r"(?P<lead>[{,]|\A)(?P<ws>\s*)"
_QUOTE_LIKE = r"[\u02bb\u02bc\u2018\u2019\u201a\u201b'`\u00b4]"
_QUOTED = re.compile(r'"[^"]*"')
_STRING_BODY = r'(?:[^"\\\n]|\\.)'

# Longest property name checked for a doubled prefix
_MAX_KEY_HALF = 64


def _object_or_root(name: str):
    """Guard: group ``name`` sits inside a container, or the match is at the buffer start"""
    def _guard(match: Match, ctx: RuleContext) -> bool:
        if not match.group("lead"):
            return True
        return ctx.kind(match.start(name)) in (ContainerKind.OBJECT, ContainerKind.ARRAY)
    return _guard


def _quoted_key(match: Match, ctx: RuleContext) -> str:
    return f'{match.group("lead")}{match.group("ws")}"{match.group("name")}"{match.group("colon")}'


def _restore_fragment(match: Match, ctx: RuleContext):
    canonical = ctx.config.key_fragments.get(match.group("frag").lower())
    if canonical is None:
        return None
    return f'{match.group("lead")}{match.group("ws")}"{canonical}"{match.group("colon")}'


def _known_half(match: Match, ctx: RuleContext) -> bool:
    return match.group("half") in ctx.config.known_keys


QUOTE_LIKE_KEY = AnomalyRule(
    rule_id="quote_like_key",
    category=RuleCategory.KEY_NAME,
    pattern=(
        rf"(?P<lead>[{{,])(?P<ws>\s*){_QUOTE_LIKE}"
        rf"(?P<name>[A-Za-z_$][A-Za-z0-9_$ \-]*?)(?:{_QUOTE_LIKE}|\")(?P<colon>\s*:)"
    ),
    rewrite=_quoted_key,
    guard=group_in("name", ContainerKind.OBJECT),
    diagnostic=lambda match, _: f"Replaced non-standard quote around property name: {match.group('name')}",
)

CONCATENATED_KEY_PARTS = AnomalyRule(
    rule_id="concatenated_key_parts",
    category=RuleCategory.KEY_NAME,
    pattern=rf'"(?P<first>{_STRING_BODY}*)"\s*\+\s*"(?P<second>{_STRING_BODY}*)"(?=\s*:)',
    rewrite=lambda match, ctx: f'"{match.group("first")}{match.group("second")}"',
    diagnostic=lambda match, _: f"Joined concatenated property name parts: {match.group('first')} + {match.group('second')}",
)

TRUNCATED_KEY_FRAGMENT = AnomalyRule(
    rule_id="truncated_key_fragment",
    category=RuleCategory.KEY_NAME,
    pattern=rf'{_KEY_LEAD}(?P<frag>[A-Za-z]{{2,3}})"(?P<colon>\s*:\s*)(?=")',
    rewrite=_restore_fragment,
    guard=_object_or_root("frag"),
    diagnostic=lambda match, replacement: (
        f"Restored truncated property name: {match.group('frag')}\" -> {_QUOTED.search(replacement).group(0)}"
    ),
)

MISSING_OPENING_KEY_QUOTE = AnomalyRule(
    rule_id="missing_opening_key_quote",
    category=RuleCategory.KEY_NAME,
    pattern=rf'{_KEY_LEAD}(?P<name>[A-Za-z_$][A-Za-z0-9_$.\-]*)"(?P<colon>\s*:)',
    rewrite=_quoted_key,
    guard=_object_or_root("name"),
    diagnostic=lambda match, _: (
        f"Fixed missing opening quote on property name: {match.group('name')}\" -> \"{match.group('name')}\""
    ),
)

UNQUOTED_KEY = AnomalyRule(
    rule_id="unquoted_key",
    category=RuleCategory.KEY_NAME,
    pattern=r"(?P<lead>[{,])(?P<ws>\s*)(?P<name>[A-Za-z_$][A-Za-z0-9_$\-]*)(?P<colon>\s*:)",
    rewrite=_quoted_key,
    guard=all_of(
        group_in("name", ContainerKind.OBJECT),
        lambda match, ctx: not is_keyword(match.group("name")),
    ),
    diagnostic=lambda match, _: f"Added quotes around unquoted property name: {match.group('name')}",
)

DUPLICATED_KEY_PREFIX = AnomalyRule(
    rule_id="duplicated_key_prefix",
    category=RuleCategory.KEY_NAME,
    pattern=rf'"(?P<half>[A-Za-z_][A-Za-z0-9_]{{0,{_MAX_KEY_HALF - 1}}}?)(?P=half)"(?=\s*:)',
    rewrite=lambda match, ctx: f'"{match.group("half")}"',
    guard=all_of(_known_half, group_in("half", ContainerKind.OBJECT)),
    diagnostic=lambda match, _: (
        f"Collapsed duplicated property name: {match.group('half') * 2} -> {match.group('half')}"
    ),
)

DUPLICATE_PROPERTY_NAME = AnomalyRule(
    rule_id="duplicate_property_name",
    category=RuleCategory.KEY_NAME,
    pattern=rf'(?P<key>"(?P<name>{_STRING_BODY}+)"\s*:\s*)"(?P=name)"\s*:\s*',
    rewrite=keep_groups("key"),
    diagnostic=lambda match, _: f"Removed repeated property name: {match.group('name')}",
)

STRAY_WORD_AFTER_COLON = AnomalyRule(
    rule_id="stray_word_after_colon",
    category=RuleCategory.KEY_NAME,
    pattern=r'(?P<key>"[A-Za-z_$][A-Za-z0-9_$]*"\s*:)\s*(?P<stray>[A-Za-z_][A-Za-z0-9_]*)"\s*:\s*(?=")',
    rewrite=lambda match, ctx: match.group("key") + " ",
    diagnostic=lambda match, _: f"Removed stray text after colon: {match.group('stray')}",
)

KEY_NAME_RULES = (
    QUOTE_LIKE_KEY,
    CONCATENATED_KEY_PARTS,
    TRUNCATED_KEY_FRAGMENT,
    MISSING_OPENING_KEY_QUOTE,
    UNQUOTED_KEY,
    DUPLICATED_KEY_PREFIX,
    DUPLICATE_PROPERTY_NAME,
    STRAY_WORD_AFTER_COLON,
)
