"""
Tile model for propositional formulas.

A formula is an ordered sequence of symbols ("tiles"), exactly what a player
drops onto the proof board. Two formulas are equal only when their symbol
sequences are identical; use ``normalization.ast_canon.normalize`` to compare
them up to parenthesization.

Usage:
    from normalization.tiles import formula_from_string

    f = formula_from_string("(p -> q) & ~r")
    str(f)  # '(p→q)∧¬r'
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Iterator, Tuple


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

class SymbolKind(Enum):
    """Lexical class of a tile."""
    VARIABLE = auto()
    UNARY_OPERATOR = auto()
    BINARY_OPERATOR = auto()
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()


@dataclass(frozen=True, slots=True)
class Symbol:
    """A single tile: its display text and lexical class."""
    text: str
    kind: SymbolKind

    def __str__(self) -> str:
        return self.text


NOT_SIGN = "¬"
AND_SIGN = "∧"
OR_SIGN = "∨"
IMPLIES_SIGN = "→"
IFF_SIGN = "↔"

NOT = Symbol(NOT_SIGN, SymbolKind.UNARY_OPERATOR)
AND = Symbol(AND_SIGN, SymbolKind.BINARY_OPERATOR)
OR = Symbol(OR_SIGN, SymbolKind.BINARY_OPERATOR)
IMPLIES = Symbol(IMPLIES_SIGN, SymbolKind.BINARY_OPERATOR)
IFF = Symbol(IFF_SIGN, SymbolKind.BINARY_OPERATOR)
LPAREN = Symbol("(", SymbolKind.LEFT_PAREN)
RPAREN = Symbol(")", SymbolKind.RIGHT_PAREN)

OPERATORS: Tuple[Symbol, ...] = (NOT, AND, OR, IMPLIES, IFF)
BINARY_SIGNS = frozenset({AND_SIGN, OR_SIGN, IMPLIES_SIGN, IFF_SIGN})

VARIABLE_NAMES: Tuple[str, ...] = tuple(string.ascii_lowercase + string.ascii_uppercase)
# Letters the generator draws from when building problems.
PROBLEM_VARIABLE_NAMES: Tuple[str, ...] = tuple("pqrstuvw")
# Longest tile row accepted as a formula. Bounds the nesting every
# recursive tree walk has to handle.
MAX_FORMULA_LENGTH = 200


def variable(name: str) -> Symbol:
    """Return the variable tile for a single letter."""
    if name not in VARIABLE_NAMES:
        raise ValueError(f"Not a variable letter: {name!r}")
    return Symbol(name, SymbolKind.VARIABLE)


_OPERATOR_BY_TEXT: Dict[str, Symbol] = {s.text: s for s in (*OPERATORS, LPAREN, RPAREN)}


def symbol_for(text: str) -> Symbol:
    """Look up the tile for a canonical symbol text."""
    if text in _OPERATOR_BY_TEXT:
        return _OPERATOR_BY_TEXT[text]
    return variable(text)


# ---------------------------------------------------------------------------
# Formula
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Formula:
    """Ordered, immutable sequence of tiles."""
    symbols: Tuple[Symbol, ...] = ()

    @classmethod
    def of(cls, symbols: Iterable[Symbol]) -> "Formula":
        return cls(tuple(symbols))

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.symbols)

    def is_empty(self) -> bool:
        return not self.symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols)

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        return self.text


# ---------------------------------------------------------------------------
# ASCII aliases
# ---------------------------------------------------------------------------

# Longest aliases first so "<->" is not read as "<" followed by "->".
_ASCII_ALIASES: Tuple[Tuple[str, str], ...] = (
    ("<->", IFF_SIGN),
    ("->", IMPLIES_SIGN),
    ("/\\", AND_SIGN),
    ("\\/", OR_SIGN),
    ("&", AND_SIGN),
    ("^", AND_SIGN),
    ("|", OR_SIGN),
    ("~", NOT_SIGN),
    ("!", NOT_SIGN),
    ("⇒", IMPLIES_SIGN),
    ("⇔", IFF_SIGN),
    ("￢", NOT_SIGN),
)


def formula_from_string(text: str) -> Formula:
    """
    Build a formula from text, translating ASCII aliases to canonical tiles.

    Whitespace is ignored. Any character that is neither a variable letter,
    a canonical operator, a parenthesis, nor a known alias raises ValueError.
    The result is not checked for well-formedness.
    """
    symbols = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue
        for alias, canonical in _ASCII_ALIASES:
            if text.startswith(alias, pos):
                symbols.append(_OPERATOR_BY_TEXT[canonical])
                pos += len(alias)
                break
        else:
            if ch in _OPERATOR_BY_TEXT:
                symbols.append(_OPERATOR_BY_TEXT[ch])
            elif ch in VARIABLE_NAMES:
                symbols.append(Symbol(ch, SymbolKind.VARIABLE))
            else:
                raise ValueError(f"Unexpected character at position {pos}: {ch!r}")
            pos += 1
    return Formula(tuple(symbols))


__all__ = [
    "SymbolKind",
    "Symbol",
    "Formula",
    "NOT", "AND", "OR", "IMPLIES", "IFF", "LPAREN", "RPAREN",
    "NOT_SIGN", "AND_SIGN", "OR_SIGN", "IMPLIES_SIGN", "IFF_SIGN",
    "OPERATORS",
    "BINARY_SIGNS",
    "VARIABLE_NAMES",
    "PROBLEM_VARIABLE_NAMES",
    "MAX_FORMULA_LENGTH",
    "variable",
    "symbol_for",
    "formula_from_string",
]
