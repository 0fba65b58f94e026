"""
Lexical Context Tracker

Answers two questions about an offset in a buffer: is it inside a quoted
string, and which container (object, array or none) encloses it. An offset
describes the scanner state after consuming ``buffer[:offset]``.

``is_inside_string`` and ``enclosing_context`` rescan from the start on every
call. ``LexicalContextTable`` does the same scan once per buffer version and
answers every query for that snapshot in O(1); the two must always agree.
"""

import logging
from array import array
from typing import List, Optional

from .repair_base import ContainerKind, EnclosingContext

logger = logging.getLogger(__name__)

_OPENERS = {"{": ContainerKind.OBJECT, "[": ContainerKind.ARRAY}
_CLOSERS = {"}": ContainerKind.OBJECT, "]": ContainerKind.ARRAY}
_CLOSER_FOR = {ContainerKind.OBJECT: "}", ContainerKind.ARRAY: "]"}

_KIND_CODES = {ContainerKind.NONE: 0, ContainerKind.OBJECT: 1, ContainerKind.ARRAY: 2}
_CODE_KINDS = {code: kind for kind, code in _KIND_CODES.items()}


class ScanState:
    """Incremental scanner state: ``{in_string, escape, stack}``"""

    __slots__ = ("in_string", "escape", "stack")

    def __init__(self):
        self.in_string = False
        self.escape = False
        self.stack: List[ContainerKind] = []

    def advance(self, ch: str) -> None:
        if self.in_string:
            if self.escape:
                self.escape = False
            elif ch == "\\":
                self.escape = True
            elif ch == '"':
                self.in_string = False
            return

        if ch == '"':
            self.in_string = True
        elif ch in _OPENERS:
            self.stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            # Unmatched closers clamp at NONE; mismatched ones still pop
            if self.stack:
                self.stack.pop()

    @property
    def kind(self) -> ContainerKind:
        return self.stack[-1] if self.stack else ContainerKind.NONE

    @property
    def depth(self) -> int:
        return len(self.stack)


def _clamp(offset: int, buffer: str) -> int:
    return max(0, min(offset, len(buffer)))


def _scan_to(offset: int, buffer: str) -> ScanState:
    state = ScanState()
    for ch in buffer[:_clamp(offset, buffer)]:
        state.advance(ch)
    return state


def is_inside_string(offset: int, buffer: str) -> bool:
    """True when ``offset`` sits inside a quoted string literal"""
    return _scan_to(offset, buffer).in_string


def enclosing_context(offset: int, buffer: str) -> EnclosingContext:
    """Innermost container open at ``offset``"""
    state = _scan_to(offset, buffer)
    return EnclosingContext(kind=state.kind, depth=state.depth)


class LexicalContextTable:
    """
    Precomputed lexical context for one buffer snapshot.

    Built with a single forward scan. Offsets always refer to the buffer the
    table was built from; once the buffer is rewritten a new table is needed.
    """

    __slots__ = ("buffer", "_in_string", "_kinds", "_depths", "_expected")

    def __init__(self, buffer: str):
        self.buffer = buffer
        size = len(buffer) + 1
        self._in_string = bytearray(size)
        self._kinds = bytearray(size)
        self._depths = array("i", [0]) * size

        state = ScanState()
        for index, ch in enumerate(buffer):
            self._snapshot(index, state)
            state.advance(ch)
        self._snapshot(len(buffer), state)
        self._expected = tuple(state.stack)

    def _snapshot(self, index: int, state: ScanState) -> None:
        self._in_string[index] = 1 if state.in_string else 0
        self._kinds[index] = _KIND_CODES[state.kind]
        self._depths[index] = state.depth

    def __len__(self) -> int:
        return len(self.buffer)

    def inside_string(self, offset: int) -> bool:
        return bool(self._in_string[_clamp(offset, self.buffer)])

    def kind(self, offset: int) -> ContainerKind:
        return _CODE_KINDS[self._kinds[_clamp(offset, self.buffer)]]

    def depth(self, offset: int) -> int:
        return self._depths[_clamp(offset, self.buffer)]

    def enclosing(self, offset: int) -> EnclosingContext:
        index = _clamp(offset, self.buffer)
        return EnclosingContext(kind=_CODE_KINDS[self._kinds[index]], depth=self._depths[index])

    @property
    def ends_in_string(self) -> bool:
        return self.inside_string(len(self.buffer))

    @property
    def unclosed(self) -> str:
        """Closers still expected at the end of the buffer, innermost first"""
        return "".join(_CLOSER_FOR[kind] for kind in reversed(self._expected))


def expected_closer(kind: ContainerKind) -> Optional[str]:
    return _CLOSER_FOR.get(kind)


def find_root_start(buffer: str) -> Optional[int]:
    """Index of the first non-whitespace character if it opens a container"""
    stripped = len(buffer) - len(buffer.lstrip())
    if stripped < len(buffer) and buffer[stripped] in _OPENERS:
        return stripped
    return None


def find_root_close(buffer: str) -> Optional[int]:
    """
    Index of the closer matching the root container, using the same bracket
    stack scan as the context table. None when the buffer does not start with
    a container or the root never closes.
    """
    start = find_root_start(buffer)
    if start is None:
        return None

    state = ScanState()
    for index in range(start, len(buffer)):
        ch = buffer[index]
        was_in_string = state.in_string
        state.advance(ch)
        if not was_in_string and ch in _CLOSERS and state.depth == 0:
            return index
    return None
