"""
Syntax trees, parsing and canonical rendering for tile formulas.

This module turns a tile sequence into a structural syntax tree and back:
1. ``parse`` runs a precedence-climbing recursive descent over the tiles
2. ``render`` regenerates a formula with minimal parenthesization
3. ``normalize`` composes the two, so structurally identical formulas
   compare equal regardless of surface parentheses

Precedence, lowest to highest:
    → ↔   (right-associative)
    ∨     (left-associative)
    ∧     (left-associative)
    ¬, atoms, parenthesized groups

Trees compare by deep value equality, which is what every "same formula"
check in the rule engine, validator and generator relies on.

Usage:
    from normalization.ast_canon import parse, render, normalize

    tree = parse(formula_from_string("((p → q))"))
    str(render(tree))  # 'p→q'
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, List, Optional, Sequence, Union

from normalization.tiles import (
    AND_SIGN,
    IFF_SIGN,
    IMPLIES_SIGN,
    LPAREN,
    MAX_FORMULA_LENGTH,
    NOT,
    NOT_SIGN,
    OR_SIGN,
    RPAREN,
    Formula,
    Symbol,
    SymbolKind,
    formula_from_string,
    symbol_for,
)


# ---------------------------------------------------------------------------
# Tree Node Types
# ---------------------------------------------------------------------------

class Node:
    """Base class for syntax tree nodes."""
    __slots__ = ()

    def __str__(self) -> str:
        return to_text(self)


@dataclass(frozen=True, slots=True)
class Variable(Node):
    """Atomic proposition."""
    symbol: str

    def __str__(self) -> str:
        return self.symbol


@dataclass(frozen=True, slots=True)
class UnaryOp(Node):
    """Negation."""
    operator: str
    child: Node

    def __str__(self) -> str:
        return to_text(self)


@dataclass(frozen=True, slots=True)
class BinaryOp(Node):
    """Conjunction, disjunction, implication or biconditional."""
    operator: str
    left: Node
    right: Node

    def __str__(self) -> str:
        return to_text(self)


Tree = Union[Variable, UnaryOp, BinaryOp]


# ---------------------------------------------------------------------------
# Builders and predicates
# ---------------------------------------------------------------------------

def var(name: str) -> Variable:
    return Variable(name)


def neg(child: Node) -> UnaryOp:
    return UnaryOp(NOT_SIGN, child)


def conj(left: Node, right: Node) -> BinaryOp:
    return BinaryOp(AND_SIGN, left, right)


def disj(left: Node, right: Node) -> BinaryOp:
    return BinaryOp(OR_SIGN, left, right)


def impl(left: Node, right: Node) -> BinaryOp:
    return BinaryOp(IMPLIES_SIGN, left, right)


def iff(left: Node, right: Node) -> BinaryOp:
    return BinaryOp(IFF_SIGN, left, right)


def is_variable(node: Node) -> bool:
    return isinstance(node, Variable)


def is_negation(node: Node) -> bool:
    return isinstance(node, UnaryOp) and node.operator == NOT_SIGN


def _is_binary(node: Node, operator: str) -> bool:
    return isinstance(node, BinaryOp) and node.operator == operator


def is_conjunction(node: Node) -> bool:
    return _is_binary(node, AND_SIGN)


def is_disjunction(node: Node) -> bool:
    return _is_binary(node, OR_SIGN)


def is_implication(node: Node) -> bool:
    return _is_binary(node, IMPLIES_SIGN)


def is_biconditional(node: Node) -> bool:
    return _is_binary(node, IFF_SIGN)


def is_literal(node: Node) -> bool:
    """A variable or the direct negation of one."""
    return is_variable(node) or (is_negation(node) and is_variable(node.child))


def variables(node: Node) -> FrozenSet[str]:
    """Return the set of variable letters occurring in the tree."""
    if isinstance(node, Variable):
        return frozenset({node.symbol})
    if isinstance(node, UnaryOp):
        return variables(node.child)
    return variables(node.left) | variables(node.right)


def depth(node: Node) -> int:
    if isinstance(node, Variable):
        return 0
    if isinstance(node, UnaryOp):
        return 1 + depth(node.child)
    return 1 + max(depth(node.left), depth(node.right))


# ---------------------------------------------------------------------------
# Precedence-climbing Parser
# ---------------------------------------------------------------------------

class ParseError(ValueError):
    """Raised inside the parser; ``parse`` converts it to ``None``."""


class Parser:
    """Recursive descent parser over a tile sequence."""

    def __init__(self, symbols: Sequence[Symbol]):
        self.symbols = symbols
        self.pos = 0

    def current(self) -> Optional[Symbol]:
        if self.pos < len(self.symbols):
            return self.symbols[self.pos]
        return None

    def consume(self, kind: SymbolKind) -> Symbol:
        sym = self.current()
        if sym is None or sym.kind != kind:
            raise ParseError(f"Expected {kind.name} at position {self.pos}")
        self.pos += 1
        return sym

    def _at_operator(self, *operators: str) -> bool:
        sym = self.current()
        return sym is not None and sym.kind == SymbolKind.BINARY_OPERATOR and sym.text in operators

    def parse(self) -> Node:
        if not self.symbols:
            raise ParseError("Empty formula")
        if len(self.symbols) > MAX_FORMULA_LENGTH:
            raise ParseError(f"Formula is longer than {MAX_FORMULA_LENGTH} symbols")
        node = self.parse_conditional()
        if self.current() is not None:
            raise ParseError(f"Unexpected symbol at position {self.pos}")
        return node

    def parse_conditional(self) -> Node:
        """Parse implication and biconditional (lowest precedence, right-associative)."""
        left = self.parse_or()
        if self._at_operator(IMPLIES_SIGN, IFF_SIGN):
            operator = self.consume(SymbolKind.BINARY_OPERATOR).text
            right = self.parse_conditional()
            return BinaryOp(operator, left, right)
        return left

    def parse_or(self) -> Node:
        """Parse disjunction (left-associative)."""
        left = self.parse_and()
        while self._at_operator(OR_SIGN):
            self.consume(SymbolKind.BINARY_OPERATOR)
            left = BinaryOp(OR_SIGN, left, self.parse_and())
        return left

    def parse_and(self) -> Node:
        """Parse conjunction (left-associative)."""
        left = self.parse_unary()
        while self._at_operator(AND_SIGN):
            self.consume(SymbolKind.BINARY_OPERATOR)
            left = BinaryOp(AND_SIGN, left, self.parse_unary())
        return left

    def parse_unary(self) -> Node:
        """Parse a run of negations followed by a primary."""
        operators: List[str] = []
        while True:
            sym = self.current()
            if sym is None or sym.kind != SymbolKind.UNARY_OPERATOR:
                break
            operators.append(self.consume(SymbolKind.UNARY_OPERATOR).text)
        node = self.parse_primary()
        for operator in reversed(operators):
            node = UnaryOp(operator, node)
        return node

    def parse_primary(self) -> Node:
        """Parse variables and parenthesized groups."""
        sym = self.current()
        if sym is None:
            raise ParseError("Operator is missing an operand")
        if sym.kind == SymbolKind.VARIABLE:
            self.consume(SymbolKind.VARIABLE)
            return Variable(sym.text)
        if sym.kind == SymbolKind.LEFT_PAREN:
            self.consume(SymbolKind.LEFT_PAREN)
            node = self.parse_conditional()
            self.consume(SymbolKind.RIGHT_PAREN)
            return node
        raise ParseError(f"Unexpected {sym.kind.name} at position {self.pos}")


@lru_cache(maxsize=4096)
def parse(formula: Formula) -> Optional[Node]:
    """
    Parse a formula into a syntax tree, or ``None`` when it is not a WFF.

    Rows longer than ``MAX_FORMULA_LENGTH`` tiles are not WFFs.
    """
    try:
        return Parser(formula.symbols).parse()
    except (ParseError, RecursionError):
        return None


def parse_text(text: str) -> Optional[Node]:
    """Parse a string, translating ASCII aliases first.

    Unknown characters raise ``ValueError``; malformed structure gives ``None``.
    """
    return parse(formula_from_string(text))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

_PRECEDENCE = {IMPLIES_SIGN: 1, IFF_SIGN: 1, OR_SIGN: 2, AND_SIGN: 3}
_RIGHT_ASSOCIATIVE = frozenset({IMPLIES_SIGN, IFF_SIGN})


def _needs_parens(child: Node, parent_operator: str, is_right: bool) -> bool:
    if not isinstance(child, BinaryOp):
        return False
    child_prec = _PRECEDENCE[child.operator]
    parent_prec = _PRECEDENCE[parent_operator]
    if child_prec != parent_prec:
        return child_prec < parent_prec
    if parent_operator in _RIGHT_ASSOCIATIVE:
        return not is_right
    return is_right


def _emit(node: Node, out: List[Symbol]) -> None:
    if isinstance(node, Variable):
        out.append(symbol_for(node.symbol))
    elif isinstance(node, UnaryOp):
        out.append(NOT)
        _emit_group(node.child, isinstance(node.child, BinaryOp), out)
    elif isinstance(node, BinaryOp):
        _emit_group(node.left, _needs_parens(node.left, node.operator, False), out)
        out.append(symbol_for(node.operator))
        _emit_group(node.right, _needs_parens(node.right, node.operator, True), out)
    else:
        raise TypeError(f"Unknown node type: {type(node)}")


def _emit_group(node: Node, parenthesize: bool, out: List[Symbol]) -> None:
    if parenthesize:
        out.append(LPAREN)
        _emit(node, out)
        out.append(RPAREN)
    else:
        _emit(node, out)


def render(node: Node) -> Formula:
    """Render a tree as a formula with minimal parenthesization."""
    out: List[Symbol] = []
    _emit(node, out)
    return Formula(tuple(out))


def to_text(node: Node) -> str:
    return render(node).text


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize(formula: Formula) -> Formula:
    """
    Canonical minimal-parenthesization form of a formula.

    A formula that does not parse is returned unchanged, so the function is
    total; callers that care use ``parse`` or ``is_wff`` first.
    """
    tree = parse(formula)
    if tree is None:
        return formula
    return render(tree)


def formulas_equal(a: Formula, b: Formula) -> bool:
    """Structural identity of two formulas, ignoring cosmetic parentheses."""
    return normalize(a) == normalize(b)


# ---------------------------------------------------------------------------
# Atomic assertions
# ---------------------------------------------------------------------------

def atomic_assertions(node: Node) -> List[Node]:
    """
    Literals asserted by the variable occurrences of a tree.

    Each occurrence contributes its variable, or the negated variable when
    the occurrence sits directly under a negation. Duplicates are dropped and
    first-occurrence order is kept:

        (¬p ∧ q) ∨ r   ->  [¬p, q, r]
        ¬(p ∧ q)       ->  [p, q]
    """
    found: List[Node] = []

    def walk(current: Node) -> None:
        if isinstance(current, Variable):
            literal: Node = current
        elif isinstance(current, UnaryOp) and isinstance(current.child, Variable):
            literal = current
        elif isinstance(current, UnaryOp):
            walk(current.child)
            return
        else:
            walk(current.left)
            walk(current.right)
            return
        if literal not in found:
            found.append(literal)

    walk(node)
    return found


def base_variable(node: Node) -> Optional[Variable]:
    """The variable underneath a literal, or ``None`` for compound trees."""
    if isinstance(node, Variable):
        return node
    if is_negation(node) and isinstance(node.child, Variable):
        return node.child
    return None


def contradicts(a: Node, b: Node) -> bool:
    """True when two literals assert the same variable with opposite signs."""
    return (is_negation(a) and a.child == b) or (is_negation(b) and b.child == a)


__all__ = [
    # Tree types
    "Node",
    "Variable",
    "UnaryOp",
    "BinaryOp",
    "Tree",
    # Builders / predicates
    "var", "neg", "conj", "disj", "impl", "iff",
    "is_variable", "is_negation", "is_conjunction", "is_disjunction",
    "is_implication", "is_biconditional", "is_literal",
    "variables",
    "depth",
    # Parsing
    "Parser",
    "ParseError",
    "parse",
    "parse_text",
    # Rendering / normalization
    "render",
    "to_text",
    "normalize",
    "formulas_equal",
    # Atomic assertions
    "atomic_assertions",
    "base_variable",
    "contradicts",
]
