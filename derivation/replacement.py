"""
Replacement (equivalence) rules.

Each rule is a two-directional, truth-preserving rewrite of one formula into
another. A proof line justified by replacement cites a single earlier line;
the rewrite may apply to the whole formula or to any one sub-formula.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List

from normalization.ast_canon import (
    BinaryOp,
    Node,
    UnaryOp,
    conj,
    disj,
    iff,
    impl,
    is_biconditional,
    is_conjunction,
    is_disjunction,
    is_implication,
    is_negation,
    neg,
    parse,
)
from normalization.tiles import Formula


class ReplacementRule(Enum):
    DE_MORGAN = ("De Morgan's Theorem", "DM")
    COMMUTATION = ("Commutation", "Comm")
    ASSOCIATION = ("Association", "Assoc")
    DISTRIBUTION = ("Distribution", "Dist")
    DOUBLE_NEGATION = ("Double Negation", "DN")
    TRANSPOSITION = ("Transposition", "Trans")
    MATERIAL_IMPLICATION = ("Material Implication", "MI")
    MATERIAL_EQUIVALENCE = ("Material Equivalence", "ME")
    EXPORTATION = ("Exportation", "Exp")
    TAUTOLOGY = ("Tautology", "Taut")

    @property
    def rule_name(self) -> str:
        return self.value[0]

    @property
    def abbreviation(self) -> str:
        return self.value[1]

    @classmethod
    def from_abbreviation(cls, abbreviation: str) -> "ReplacementRule":
        for rule in cls:
            if rule.abbreviation.lower() == abbreviation.lower():
                return rule
        raise ValueError(f"Unknown replacement rule: {abbreviation!r}")


# ---------------------------------------------------------------------------
# Top-level rewrites
# ---------------------------------------------------------------------------

def _de_morgan(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_negation(n) and is_conjunction(n.child):
        out.append(disj(neg(n.child.left), neg(n.child.right)))
    if is_negation(n) and is_disjunction(n.child):
        out.append(conj(neg(n.child.left), neg(n.child.right)))
    if is_disjunction(n) and is_negation(n.left) and is_negation(n.right):
        out.append(neg(conj(n.left.child, n.right.child)))
    if is_conjunction(n) and is_negation(n.left) and is_negation(n.right):
        out.append(neg(disj(n.left.child, n.right.child)))
    return out


def _commutation(n: Node) -> List[Node]:
    if is_conjunction(n) or is_disjunction(n):
        return [BinaryOp(n.operator, n.right, n.left)]
    return []


def _association(n: Node) -> List[Node]:
    out: List[Node] = []
    if not (is_conjunction(n) or is_disjunction(n)):
        return out
    op = n.operator
    if isinstance(n.right, BinaryOp) and n.right.operator == op:
        out.append(BinaryOp(op, BinaryOp(op, n.left, n.right.left), n.right.right))
    if isinstance(n.left, BinaryOp) and n.left.operator == op:
        out.append(BinaryOp(op, n.left.left, BinaryOp(op, n.left.right, n.right)))
    return out


def _distribution(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_conjunction(n) and is_disjunction(n.right):
        p, q, r = n.left, n.right.left, n.right.right
        out.append(disj(conj(p, q), conj(p, r)))
    if is_disjunction(n) and is_conjunction(n.right):
        p, q, r = n.left, n.right.left, n.right.right
        out.append(conj(disj(p, q), disj(p, r)))
    if is_conjunction(n) and is_disjunction(n.left):
        q, r, p = n.left.left, n.left.right, n.right
        out.append(disj(conj(q, p), conj(r, p)))
    if is_disjunction(n) and is_conjunction(n.left):
        q, r, p = n.left.left, n.left.right, n.right
        out.append(conj(disj(q, p), disj(r, p)))
    if is_disjunction(n) and is_conjunction(n.left) and is_conjunction(n.right):
        if n.left.left == n.right.left:
            out.append(conj(n.left.left, disj(n.left.right, n.right.right)))
    if is_conjunction(n) and is_disjunction(n.left) and is_disjunction(n.right):
        if n.left.left == n.right.left:
            out.append(disj(n.left.left, conj(n.left.right, n.right.right)))
    if is_disjunction(n) and is_conjunction(n.left) and is_conjunction(n.right):
        if n.left.right == n.right.right:
            out.append(conj(disj(n.left.left, n.right.left), n.left.right))
    if is_conjunction(n) and is_disjunction(n.left) and is_disjunction(n.right):
        if n.left.right == n.right.right:
            out.append(disj(conj(n.left.left, n.right.left), n.left.right))
    return out


def _double_negation(n: Node) -> List[Node]:
    out: List[Node] = [neg(neg(n))]
    if is_negation(n) and is_negation(n.child):
        out.append(n.child.child)
    return out


def _transposition(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_implication(n):
        out.append(impl(neg(n.right), neg(n.left)))
        if is_negation(n.left) and is_negation(n.right):
            out.append(impl(n.right.child, n.left.child))
    return out


def _material_implication(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_implication(n):
        out.append(disj(neg(n.left), n.right))
    if is_disjunction(n) and is_negation(n.left):
        out.append(impl(n.left.child, n.right))
    return out


def _material_equivalence(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_biconditional(n):
        p, q = n.left, n.right
        out.append(conj(impl(p, q), impl(q, p)))
        out.append(disj(conj(p, q), conj(neg(p), neg(q))))
    if is_conjunction(n) and is_implication(n.left) and is_implication(n.right):
        if n.left.left == n.right.right and n.left.right == n.right.left:
            out.append(iff(n.left.left, n.left.right))
    if is_disjunction(n) and is_conjunction(n.left) and is_conjunction(n.right):
        both, neither = n.left, n.right
        if neither.left == neg(both.left) and neither.right == neg(both.right):
            out.append(iff(both.left, both.right))
    return out


def _exportation(n: Node) -> List[Node]:
    out: List[Node] = []
    if is_implication(n) and is_conjunction(n.left):
        out.append(impl(n.left.left, impl(n.left.right, n.right)))
    if is_implication(n) and is_implication(n.right):
        out.append(impl(conj(n.left, n.right.left), n.right.right))
    return out


def _tautology(n: Node) -> List[Node]:
    out: List[Node] = [disj(n, n), conj(n, n)]
    if (is_conjunction(n) or is_disjunction(n)) and n.left == n.right:
        out.append(n.left)
    return out


_REWRITES: Dict[ReplacementRule, Callable[[Node], List[Node]]] = {
    ReplacementRule.DE_MORGAN: _de_morgan,
    ReplacementRule.COMMUTATION: _commutation,
    ReplacementRule.ASSOCIATION: _association,
    ReplacementRule.DISTRIBUTION: _distribution,
    ReplacementRule.DOUBLE_NEGATION: _double_negation,
    ReplacementRule.TRANSPOSITION: _transposition,
    ReplacementRule.MATERIAL_IMPLICATION: _material_implication,
    ReplacementRule.MATERIAL_EQUIVALENCE: _material_equivalence,
    ReplacementRule.EXPORTATION: _exportation,
    ReplacementRule.TAUTOLOGY: _tautology,
}


def rewrites(rule: ReplacementRule, node: Node) -> List[Node]:
    """Rewrites of the whole tree (no sub-formula positions)."""
    return _REWRITES[rule](node)


def replacements(rule: ReplacementRule, node: Node) -> List[Node]:
    """Every tree obtained by rewriting ``node`` or exactly one of its sub-trees."""
    out: List[Node] = []

    def add(candidate: Node) -> None:
        if candidate not in out:
            out.append(candidate)

    for candidate in rewrites(rule, node):
        add(candidate)
    if isinstance(node, UnaryOp):
        for child in replacements(rule, node.child):
            add(UnaryOp(node.operator, child))
    elif isinstance(node, BinaryOp):
        for left in replacements(rule, node.left):
            add(BinaryOp(node.operator, left, node.right))
        for right in replacements(rule, node.right):
            add(BinaryOp(node.operator, node.left, right))
    return out


def is_valid_replacement(rule: ReplacementRule, premise: Formula, conclusion: Formula) -> bool:
    source = parse(premise)
    target = parse(conclusion)
    if source is None or target is None:
        return False
    return target in replacements(rule, source)


__all__ = [
    "ReplacementRule",
    "rewrites",
    "replacements",
    "is_valid_replacement",
]
