"""
Forward inference for the nine rules of the proof tutor.

Provides:
- InferenceRule enumeration (names, abbreviations, premise counts)
- Application: a fired rule, optionally carrying the applications that
  produced its premises (a derivation tree)
- One pure forward function per rule over syntax trees
- possible_conclusions / find_application / is_valid_inference

Premise matching is structural: sub-trees are compared by value, so
parenthesization and operand order in the supplied premises never block a
match.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from normalization.ast_canon import (
    BinaryOp,
    Node,
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


class InferenceRule(Enum):
    """The closed rule set, plus the generator's synthetic leaf tag."""
    MODUS_PONENS = ("Modus Ponens", "MP", 2)
    MODUS_TOLLENS = ("Modus Tollens", "MT", 2)
    HYPOTHETICAL_SYLLOGISM = ("Hypothetical Syllogism", "HS", 2)
    DISJUNCTIVE_SYLLOGISM = ("Disjunctive Syllogism", "DS", 2)
    CONSTRUCTIVE_DILEMMA = ("Constructive Dilemma", "CD", 2)
    ABSORPTION = ("Absorption", "Abs", 1)
    SIMPLIFICATION = ("Simplification", "Simp", 1)
    CONJUNCTION = ("Conjunction", "Conj", 2)
    ADDITION = ("Addition", "Add", 1)
    ASSUMPTION = ("Assumption", "A", 0)

    @property
    def rule_name(self) -> str:
        return self.value[0]

    @property
    def abbreviation(self) -> str:
        return self.value[1]

    @property
    def premise_count(self) -> int:
        return self.value[2]

    @classmethod
    def from_abbreviation(cls, abbreviation: str) -> "InferenceRule":
        for rule in cls:
            if rule.abbreviation.lower() == abbreviation.lower():
                return rule
        raise ValueError(f"Unknown inference rule: {abbreviation!r}")

    @classmethod
    def proper_rules(cls) -> Tuple["InferenceRule", ...]:
        """The nine rules a proof line may cite."""
        return tuple(rule for rule in cls if rule is not cls.ASSUMPTION)


@dataclass(frozen=True, slots=True)
class Application:
    """
    Result of firing a rule.

    Attributes:
        conclusion: The derived formula (canonical rendering)
        rule: Rule that produced it
        premises: Formulas consumed, in the order the rule reads them
        children: Applications that produced the premises, when known
    """
    conclusion: Formula
    rule: InferenceRule
    premises: Tuple[Formula, ...] = ()
    children: Tuple["Application", ...] = ()

    @property
    def is_leaf(self) -> bool:
        return self.rule is InferenceRule.ASSUMPTION

    def size(self) -> int:
        """Number of rule firings in the derivation tree."""
        if self.is_leaf:
            return 0
        return 1 + sum(child.size() for child in self.children)

    def leaves(self) -> List["Application"]:
        if self.is_leaf:
            return [self]
        found: List[Application] = []
        for child in self.children:
            found.extend(child.leaves())
        return found

    def to_dict(self) -> dict:
        return {
            "conclusion": self.conclusion.text,
            "rule": self.rule.abbreviation,
            "premises": [p.text for p in self.premises],
            "children": [c.to_dict() for c in self.children],
        }


def assumption(formula: Formula) -> Application:
    """Leaf application standing for a given premise."""
    return Application(conclusion=formula, rule=InferenceRule.ASSUMPTION)


# ---------------------------------------------------------------------------
# Forward functions
# ---------------------------------------------------------------------------

# (conclusion tree, indices of consumed premises)
Derived = Tuple[Node, Tuple[int, ...]]


def _ordered_pairs(trees: Sequence[Node]) -> Iterable[Tuple[int, int]]:
    for i in range(len(trees)):
        for j in range(len(trees)):
            if i != j:
                yield i, j


def forward_modus_ponens(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P→Q), P ⊢ Q"""
    out: List[Derived] = []
    for i, j in _ordered_pairs(trees):
        a = trees[i]
        if is_implication(a) and trees[j] == a.left:
            out.append((a.right, (i, j)))
    return out


def forward_modus_tollens(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P→Q), ¬Q ⊢ ¬P"""
    out: List[Derived] = []
    for i, j in _ordered_pairs(trees):
        a, b = trees[i], trees[j]
        if is_implication(a) and is_negation(b) and b.child == a.right:
            out.append((neg(a.left), (i, j)))
    return out


def forward_hypothetical_syllogism(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P→Q), (Q→R) ⊢ (P→R)"""
    out: List[Derived] = []
    for i, j in _ordered_pairs(trees):
        a, b = trees[i], trees[j]
        if is_implication(a) and is_implication(b) and a.right == b.left:
            out.append((impl(a.left, b.right), (i, j)))
    return out


def forward_disjunctive_syllogism(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P∨Q), ¬P ⊢ Q  and  (P∨Q), ¬Q ⊢ P"""
    out: List[Derived] = []
    for i, j in _ordered_pairs(trees):
        a, b = trees[i], trees[j]
        if not (is_disjunction(a) and is_negation(b)):
            continue
        if b.child == a.left:
            out.append((a.right, (i, j)))
        if b.child == a.right:
            out.append((a.left, (i, j)))
    return out


def forward_constructive_dilemma(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P→Q)∧(R→S), (P∨R) ⊢ (Q∨S)"""
    out: List[Derived] = []
    for i, j in _ordered_pairs(trees):
        a, b = trees[i], trees[j]
        if not (is_conjunction(a) and is_disjunction(b)):
            continue
        first, second = a.left, a.right
        if not (is_implication(first) and is_implication(second)):
            continue
        if b.left == first.left and b.right == second.left:
            out.append((disj(first.right, second.right), (i, j)))
    return out


def forward_absorption(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P→Q) ⊢ P→(P∧Q)"""
    return [
        (impl(a.left, conj(a.left, a.right)), (i,))
        for i, a in enumerate(trees)
        if is_implication(a)
    ]


def forward_simplification(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """(P∧Q) ⊢ P  and  (P∧Q) ⊢ Q"""
    out: List[Derived] = []
    for i, a in enumerate(trees):
        if is_conjunction(a):
            out.append((a.left, (i,)))
            out.append((a.right, (i,)))
    return out


def forward_conjunction(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """P, Q ⊢ (P∧Q)  and  (Q∧P)"""
    out: List[Derived] = []
    for i in range(len(trees)):
        for j in range(i + 1, len(trees)):
            out.append((conj(trees[i], trees[j]), (i, j)))
            out.append((conj(trees[j], trees[i]), (j, i)))
    return out


def forward_addition(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """
    P ⊢ (P∨Q)

    Q ranges over the other supplied premises and the optional addend pool;
    the rule itself admits any Q, so callers checking a specific conclusion
    pass its disjuncts as addends.
    """
    out: List[Derived] = []
    for i, a in enumerate(trees):
        others = [b for j, b in enumerate(trees) if j != i]
        for q in [*others, *addends]:
            out.append((disj(a, q), (i,)))
    return out


def _forward_assumption(trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    return []


_FORWARD: Dict[InferenceRule, Callable[..., List[Derived]]] = {
    InferenceRule.MODUS_PONENS: forward_modus_ponens,
    InferenceRule.MODUS_TOLLENS: forward_modus_tollens,
    InferenceRule.HYPOTHETICAL_SYLLOGISM: forward_hypothetical_syllogism,
    InferenceRule.DISJUNCTIVE_SYLLOGISM: forward_disjunctive_syllogism,
    InferenceRule.CONSTRUCTIVE_DILEMMA: forward_constructive_dilemma,
    InferenceRule.ABSORPTION: forward_absorption,
    InferenceRule.SIMPLIFICATION: forward_simplification,
    InferenceRule.CONJUNCTION: forward_conjunction,
    InferenceRule.ADDITION: forward_addition,
    InferenceRule.ASSUMPTION: _forward_assumption,
}


def derive_trees(rule: InferenceRule, trees: Sequence[Node], addends: Sequence[Node] = ()) -> List[Derived]:
    """Tree-level forward step for one rule."""
    return _FORWARD[rule](trees, addends)


# ---------------------------------------------------------------------------
# Formula-level API
# ---------------------------------------------------------------------------

def possible_conclusions(
    rule: InferenceRule,
    premises: Sequence[Formula],
    addends: Sequence[Formula] = (),
) -> List[Application]:
    """
    Every application of ``rule`` to the supplied premises.

    Premises that are not WFFs never match. Results are de-duplicated by
    conclusion and consumed premises, in discovery order.
    """
    usable = [(f, parse(f)) for f in premises]
    usable = [(f, t) for f, t in usable if t is not None]
    trees = [t for _, t in usable]
    addend_trees = [t for t in (parse(a) for a in addends) if t is not None]

    seen = set()
    results: List[Application] = []
    for conclusion_tree, indices in derive_trees(rule, trees, addend_trees):
        consumed = tuple(usable[i][0] for i in indices)
        conclusion = render(conclusion_tree)
        key = (conclusion, consumed)
        if key in seen:
            continue
        seen.add(key)
        results.append(Application(conclusion=conclusion, rule=rule, premises=consumed))
    return results


def _addends_for(tree: Node) -> List[Formula]:
    if isinstance(tree, BinaryOp) and is_disjunction(tree):
        return [render(tree.left), render(tree.right)]
    return []


def find_application(
    rule: InferenceRule,
    premises: Sequence[Formula],
    conclusion: Formula,
) -> Optional[Application]:
    """The application of ``rule`` to ``premises`` that yields ``conclusion``, if any."""
    target = parse(conclusion)
    if target is None:
        return None
    for application in possible_conclusions(rule, premises, _addends_for(target)):
        if parse(application.conclusion) == target:
            return application
    return None


def is_valid_inference(rule: InferenceRule, premises: Sequence[Formula], conclusion: Formula) -> bool:
    """
    True when ``conclusion`` follows from exactly the given premises by ``rule``.

    The premise count must match the rule's arity, so a proof line cannot cite
    stray lines.
    """
    if rule is InferenceRule.ASSUMPTION or len(premises) != rule.premise_count:
        return False
    return find_application(rule, premises, conclusion) is not None


__all__ = [
    "InferenceRule",
    "Application",
    "assumption",
    "Derived",
    "forward_modus_ponens",
    "forward_modus_tollens",
    "forward_hypothetical_syllogism",
    "forward_disjunctive_syllogism",
    "forward_constructive_dilemma",
    "forward_absorption",
    "forward_simplification",
    "forward_conjunction",
    "forward_addition",
    "derive_trees",
    "possible_conclusions",
    "find_application",
    "is_valid_inference",
]
