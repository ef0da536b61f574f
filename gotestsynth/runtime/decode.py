"""Capture decoder: capture tree -> dereference assignments and assertions.

Walks down the wrapper nodes, collecting loop replacements and dereference
assignments, and turns the leaf into one assertion:

    {"type":"int","var_name":"x","val":"42"}          s.EqualValues(int(42), x)
    pointer p -> int y (val 7)                         y := *p
                                                       s.EqualValues(int(7), y)
    arr i=2 -> string res[i] (val "a")                 s.EqualValues(string(`a`), res[2])

A Decoder remembers the dereference targets it has declared, so one Decoder
serves exactly one test-case run. Targets count as declared only once their
leaf yields an assertion.
"""

from __future__ import annotations

import logging
import re

from gotestsynth.backend.util import quote, raw_quote
from gotestsynth.ir import (
    COMPLEX_TYPES,
    ERROR_TYPE,
    FLOAT_TYPES,
    INT_TYPES,
    Assert,
    AssertKind,
    Assign,
    BasicLit,
    Name,
    Stmt,
    UnaryExpr,
)

from .capture import (
    ARRAY_LOOP,
    CUSTOM,
    MAP_LOOP,
    NIL_VALUE,
    POINTER,
    TRUE_VALUE,
    Capture,
    CaptureError,
    Replacement,
    TypeCorrection,
    parse_capture,
)

logger = logging.getLogger(__name__)

# Leaf types asserted through a conversion: `<type>(<val>)`
NUMERIC_TYPES: frozenset[str] = INT_TYPES | FLOAT_TYPES


def substitute(text: str, replacements: list[Replacement]) -> str:
    """Replace each placeholder where it occurs as a whole identifier."""
    for r in replacements:
        if r.key == "":
            continue
        pattern = r"(?<![\w])" + re.escape(r.key) + r"(?![\w])"
        text = re.sub(pattern, lambda _m, val=r.val: val, text)
    return text


class Decoder:
    """Decodes the captures of one test-case run."""

    def __init__(self) -> None:
        self.declared: set[str] = set()

    def decode_line(self, line: str) -> list[Stmt]:
        """Decode one JSON capture line; malformed input yields no statements."""
        try:
            capture = parse_capture(line)
        except CaptureError as e:
            logger.error("unable to parse runtime output %r: %s", line, e)
            return []
        return self.decode(capture)

    def decode(
        self,
        capture: Capture,
        replacements: list[Replacement] | None = None,
        correction: TypeCorrection | None = None,
    ) -> list[Stmt]:
        return self._walk(capture, list(replacements or []), correction or TypeCorrection(), [], [])

    def _walk(
        self,
        node: Capture,
        replacements: list[Replacement],
        correction: TypeCorrection,
        stmts: list[Stmt],
        targets: list[str],
    ) -> list[Stmt]:
        if node.type == POINTER and node.val != NIL_VALUE and node.child is None:
            logger.warning("pointer %s has value %s but no child capture", node.var_name, node.val)
            return []
        if node.child is None:
            return self._leaf(node, replacements, correction, stmts, targets)
        if node.type == ARRAY_LOOP:
            replacements = replacements + [Replacement(node.arr_ident, node.val)]
        elif node.type == MAP_LOOP:
            key = node.val
            if node.map_key_type == "string":
                key = quote(key)
            replacements = replacements + [Replacement(node.arr_ident, key)]
        elif node.type == POINTER and node.val != NIL_VALUE:
            target = node.child.var_name
            first = target not in self.declared and target not in targets
            targets = targets + [target]
            stmts = stmts + [Assign(target, UnaryExpr("*", Name(node.var_name)), is_declaration=first)]
        elif node.type != CUSTOM and node.type != POINTER:
            logger.debug("treating %s node %s as a wrapper", node.type, node.var_name)
        return self._walk(node.child, replacements, correction, stmts, targets)

    def _leaf(
        self,
        node: Capture,
        replacements: list[Replacement],
        correction: TypeCorrection,
        stmts: list[Stmt],
        targets: list[str],
    ) -> list[Stmt]:
        value = Name(substitute(node.var_name, replacements))
        assertion = self._assertion(node, value, correction)
        if assertion is None:
            logger.warning("skipping unverifiable value of type %r: %s (%s)", node.type, node.val, node.var_name)
            return []
        self.declared.update(targets)
        for stmt in stmts:
            _substitute_stmt(stmt, replacements)
        return stmts + [assertion]

    def _assertion(self, node: Capture, value: Name, correction: TypeCorrection) -> Assert | None:
        kind = node.type
        if kind in NUMERIC_TYPES:
            expected = f"{correction.prefix}{kind}({node.val}){correction.suffix}"
            return Assert(AssertKind.EQUAL_VALUES, value, BasicLit(expected))
        if kind == "string":
            expected = f"{correction.prefix}string({raw_quote(node.val)}){correction.suffix}"
            return Assert(AssertKind.EQUAL_VALUES, value, BasicLit(expected))
        if kind == "bool":
            if node.val == TRUE_VALUE:
                return Assert(AssertKind.TRUE, value)
            return Assert(AssertKind.FALSE, value)
        if kind in COMPLEX_TYPES:
            expected = f"{correction.prefix}{kind}{node.val}{correction.suffix}"
            return Assert(AssertKind.EQUAL_VALUES, value, BasicLit(expected))
        if kind == POINTER:
            return Assert(AssertKind.NIL, value)
        if kind == ERROR_TYPE:
            if node.val == NIL_VALUE:
                return Assert(AssertKind.NO_ERROR, value)
            return Assert(AssertKind.ERROR, value)
        return None


def _substitute_stmt(stmt: Stmt, replacements: list[Replacement]) -> None:
    if isinstance(stmt, Assign):
        stmt.target = substitute(stmt.target, replacements)
        if isinstance(stmt.value, UnaryExpr) and isinstance(stmt.value.x, Name):
            stmt.value.x.name = substitute(stmt.value.x.name, replacements)
