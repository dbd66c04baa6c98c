"""
Backward inference: premise sets that would yield a given conclusion.

Each rule has its own pure function mirroring its forward counterpart in
``derivation.rules``. Fresh sub-formulas are single variables drawn from the
caller's pool, in pool order, skipping any variable that would make a
premise degenerate (equal to the target or to another fixed part).

Modus Tollens and Disjunctive Syllogism assert their fresh part both
positively and under a negation. With a single letter that is a
contradiction, so they also offer conjunctions of two consecutive fresh
letters: ``¬(q∧r)`` asserts q and r, the same as ``q∧r`` does.

For every target whose shape fits a rule's conclusion, at least one returned
premise list forward-derives exactly that target.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from normalization.ast_canon import (
    Node,
    Variable,
    conj,
    disj,
    impl,
    is_conjunction,
    is_disjunction,
    is_implication,
    is_negation,
    neg,
    parse,
    render,
)
from normalization.tiles import Formula

from derivation.rules import InferenceRule

PremiseTrees = Tuple[Node, ...]


def _fresh(pool: Sequence[str], *avoid: Node) -> Iterable[Variable]:
    seen = set()
    for name in pool:
        candidate = Variable(name)
        if candidate in avoid or name in seen:
            continue
        seen.add(name)
        yield candidate


def _fresh_parts(pool: Sequence[str], *avoid: Node) -> List[Node]:
    """Single fresh letters, then conjunctions of consecutive fresh letters."""
    letters = list(_fresh(pool, *avoid))
    pairs = [conj(a, b) for a, b in zip(letters, letters[1:])]
    return letters + [pair for pair in pairs if pair not in avoid]


def backward_modus_ponens(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    return [(impl(v, target), v) for v in _fresh(pool, target)]


def backward_modus_tollens(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not is_negation(target):
        return []
    antecedent = target.child
    return [(impl(antecedent, v), neg(v)) for v in _fresh_parts(pool, antecedent)]


def backward_hypothetical_syllogism(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not is_implication(target):
        return []
    return [
        (impl(target.left, v), impl(v, target.right))
        for v in _fresh(pool, target.left, target.right)
    ]


def backward_disjunctive_syllogism(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    out: List[PremiseTrees] = []
    for v in _fresh_parts(pool, target):
        out.append((disj(v, target), neg(v)))
        out.append((disj(target, v), neg(v)))
    return out


def backward_constructive_dilemma(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not is_disjunction(target):
        return []
    q, s = target.left, target.right
    fresh = list(_fresh(pool, q, s))
    return [
        (conj(impl(p, q), impl(r, s)), disj(p, r))
        for p in fresh
        for r in fresh
        if p != r
    ]


def backward_absorption(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not (is_implication(target) and is_conjunction(target.right)):
        return []
    if target.right.left != target.left:
        return []
    return [(impl(target.left, target.right.right),)]


def backward_simplification(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    out: List[PremiseTrees] = []
    for v in _fresh(pool, target):
        out.append((conj(target, v),))
        out.append((conj(v, target),))
    return out


def backward_conjunction(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not is_conjunction(target):
        return []
    return [(target.left, target.right)]


def backward_addition(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    if not is_disjunction(target):
        return []
    return [(target.left,)]


def _backward_assumption(target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    return []


_BACKWARD: Dict[InferenceRule, Callable[[Node, Sequence[str]], List[PremiseTrees]]] = {
    InferenceRule.MODUS_PONENS: backward_modus_ponens,
    InferenceRule.MODUS_TOLLENS: backward_modus_tollens,
    InferenceRule.HYPOTHETICAL_SYLLOGISM: backward_hypothetical_syllogism,
    InferenceRule.DISJUNCTIVE_SYLLOGISM: backward_disjunctive_syllogism,
    InferenceRule.CONSTRUCTIVE_DILEMMA: backward_constructive_dilemma,
    InferenceRule.ABSORPTION: backward_absorption,
    InferenceRule.SIMPLIFICATION: backward_simplification,
    InferenceRule.CONJUNCTION: backward_conjunction,
    InferenceRule.ADDITION: backward_addition,
    InferenceRule.ASSUMPTION: _backward_assumption,
}


def premise_trees_for_conclusion(rule: InferenceRule, target: Node, pool: Sequence[str]) -> List[PremiseTrees]:
    """Tree-level backward step for one rule."""
    return _BACKWARD[rule](target, pool)


def premise_shapes_for_conclusion(
    rule: InferenceRule,
    target: Formula,
    pool: Sequence[str],
) -> List[List[Formula]]:
    """
    Candidate premise lists that derive ``target`` by ``rule``.

    Args:
        rule: Rule to invert
        target: Desired conclusion
        pool: Variable letters available for fresh sub-formulas

    Returns:
        Premise lists in the order the forward rule reads them; empty when
        the target is not a WFF or does not fit the rule's conclusion shape.
    """
    tree = parse(target)
    if tree is None:
        return []
    return [
        [render(premise) for premise in premises]
        for premises in premise_trees_for_conclusion(rule, tree, pool)
    ]


__all__ = [
    "PremiseTrees",
    "backward_modus_ponens",
    "backward_modus_tollens",
    "backward_hypothetical_syllogism",
    "backward_disjunctive_syllogism",
    "backward_constructive_dilemma",
    "backward_absorption",
    "backward_simplification",
    "backward_conjunction",
    "backward_addition",
    "premise_trees_for_conclusion",
    "premise_shapes_for_conclusion",
]
