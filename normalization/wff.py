"""
Grammar-only well-formedness check.

Recognizes the same language as ``normalization.ast_canon.parse`` without
building a tree, so it can be used as a cheap pre-filter on raw tile rows.
"""

from __future__ import annotations

from typing import Optional, Sequence

from normalization.tiles import (
    AND_SIGN,
    IFF_SIGN,
    IMPLIES_SIGN,
    MAX_FORMULA_LENGTH,
    OR_SIGN,
    Formula,
    Symbol,
    SymbolKind,
)

_FAIL = -1


def _binary(symbols: Sequence[Symbol], pos: int, operators: frozenset) -> bool:
    return (
        pos < len(symbols)
        and symbols[pos].kind == SymbolKind.BINARY_OPERATOR
        and symbols[pos].text in operators
    )


_CONDITIONALS = frozenset({IMPLIES_SIGN, IFF_SIGN})
_ORS = frozenset({OR_SIGN})
_ANDS = frozenset({AND_SIGN})


def _conditional(symbols: Sequence[Symbol], pos: int) -> int:
    pos = _disjunction(symbols, pos)
    if pos != _FAIL and _binary(symbols, pos, _CONDITIONALS):
        return _conditional(symbols, pos + 1)
    return pos


def _disjunction(symbols: Sequence[Symbol], pos: int) -> int:
    pos = _conjunction(symbols, pos)
    while pos != _FAIL and _binary(symbols, pos, _ORS):
        pos = _conjunction(symbols, pos + 1)
    return pos


def _conjunction(symbols: Sequence[Symbol], pos: int) -> int:
    pos = _unary(symbols, pos)
    while pos != _FAIL and _binary(symbols, pos, _ANDS):
        pos = _unary(symbols, pos + 1)
    return pos


def _unary(symbols: Sequence[Symbol], pos: int) -> int:
    while pos < len(symbols) and symbols[pos].kind == SymbolKind.UNARY_OPERATOR:
        pos += 1
    if pos >= len(symbols):
        return _FAIL
    kind = symbols[pos].kind
    if kind == SymbolKind.VARIABLE:
        return pos + 1
    if kind == SymbolKind.LEFT_PAREN:
        pos = _conditional(symbols, pos + 1)
        if pos == _FAIL or pos >= len(symbols) or symbols[pos].kind != SymbolKind.RIGHT_PAREN:
            return _FAIL
        return pos + 1
    return _FAIL


def is_wff(formula: Formula) -> bool:
    """True iff the tile sequence is a WFF of at most ``MAX_FORMULA_LENGTH`` tiles."""
    symbols = formula.symbols
    if not symbols or len(symbols) > MAX_FORMULA_LENGTH:
        return False
    try:
        return _conditional(symbols, 0) == len(symbols)
    except RecursionError:
        return False


def first_error_index(formula: Formula) -> Optional[int]:
    """
    Index of the first tile at which no WFF prefix can be extended, or
    ``None`` when the formula is well formed.

    Used by editors to highlight the offending tile; the index equals
    ``len(formula)`` when the row simply ends too early, and
    ``MAX_FORMULA_LENGTH`` when an otherwise sound row is too long.
    """
    if is_wff(formula):
        return None
    symbols = formula.symbols
    depth = 0
    expect_operand = True
    for index, sym in enumerate(symbols):
        if index == MAX_FORMULA_LENGTH:
            return index
        if expect_operand:
            if sym.kind == SymbolKind.UNARY_OPERATOR:
                continue
            if sym.kind == SymbolKind.LEFT_PAREN:
                depth += 1
                continue
            if sym.kind == SymbolKind.VARIABLE:
                expect_operand = False
                continue
            return index
        if sym.kind == SymbolKind.BINARY_OPERATOR:
            expect_operand = True
            continue
        if sym.kind == SymbolKind.RIGHT_PAREN and depth > 0:
            depth -= 1
            continue
        return index
    return len(symbols)


__all__ = ["is_wff", "first_error_index"]
