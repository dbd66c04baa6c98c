"""
Phase 1 of problem generation: the proof plan.

A plan is a tree of shape-constrained nodes. Internal nodes name the rule
that will produce them; leaves (``InferenceRule.ASSUMPTION``) become the
problem's premises. No concrete formulas are chosen here.

Nodes live in an arena (``ProofPlan.nodes``) and refer to each other by
index, so a node can be created before its rule and children are known.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, List, Optional, Tuple

from normalization.ast_canon import (
    Node,
    is_conjunction,
    is_disjunction,
    is_implication,
    is_negation,
    is_variable,
)

from derivation.rules import InferenceRule
from generator.bounds import GeneratorBounds

logger = logging.getLogger(__name__)


class FormulaShape(Enum):
    """Structural constraint on the formula a plan node must hold."""
    ANY = "any"
    IS_IMPLICATION = "implication"
    IS_CONJUNCTION = "conjunction"
    IS_DISJUNCTION = "disjunction"
    IS_NEGATION = "negation"
    IS_ATOMIC = "atomic"


def shape_matches(shape: FormulaShape, node: Node) -> bool:
    if shape is FormulaShape.ANY:
        return True
    if shape is FormulaShape.IS_IMPLICATION:
        return is_implication(node)
    if shape is FormulaShape.IS_CONJUNCTION:
        return is_conjunction(node)
    if shape is FormulaShape.IS_DISJUNCTION:
        return is_disjunction(node)
    if shape is FormulaShape.IS_NEGATION:
        return is_negation(node)
    return is_variable(node)


_S = FormulaShape

# Premise shapes in the order the forward rule reads its premises.
RULE_PREMISE_SHAPES: Dict[InferenceRule, Tuple[FormulaShape, ...]] = {
    InferenceRule.ABSORPTION: (_S.IS_IMPLICATION,),
    InferenceRule.ADDITION: (_S.ANY,),
    InferenceRule.CONJUNCTION: (_S.ANY, _S.ANY),
    InferenceRule.CONSTRUCTIVE_DILEMMA: (_S.IS_CONJUNCTION, _S.IS_DISJUNCTION),
    InferenceRule.DISJUNCTIVE_SYLLOGISM: (_S.IS_DISJUNCTION, _S.IS_NEGATION),
    InferenceRule.HYPOTHETICAL_SYLLOGISM: (_S.IS_IMPLICATION, _S.IS_IMPLICATION),
    InferenceRule.MODUS_PONENS: (_S.IS_IMPLICATION, _S.IS_ATOMIC),
    InferenceRule.MODUS_TOLLENS: (_S.IS_IMPLICATION, _S.IS_NEGATION),
    InferenceRule.SIMPLIFICATION: (_S.IS_CONJUNCTION,),
}

RULE_CONCLUSION_SHAPES: Dict[InferenceRule, FormulaShape] = {
    InferenceRule.MODUS_PONENS: _S.ANY,
    InferenceRule.MODUS_TOLLENS: _S.IS_NEGATION,
    InferenceRule.HYPOTHETICAL_SYLLOGISM: _S.IS_IMPLICATION,
    InferenceRule.DISJUNCTIVE_SYLLOGISM: _S.ANY,
    InferenceRule.CONSTRUCTIVE_DILEMMA: _S.IS_DISJUNCTION,
    InferenceRule.ABSORPTION: _S.IS_IMPLICATION,
    InferenceRule.SIMPLIFICATION: _S.ANY,
    InferenceRule.CONJUNCTION: _S.IS_CONJUNCTION,
    InferenceRule.ADDITION: _S.IS_DISJUNCTION,
}


@dataclass
class PlanNode:
    index: int
    shape: FormulaShape
    parent: Optional[int] = None
    rule: Optional[InferenceRule] = None
    children: List[int] = field(default_factory=list)

    @property
    def node_id(self) -> str:
        return f"ID_{self.index}"

    @property
    def is_leaf(self) -> bool:
        return self.rule is None or self.rule is InferenceRule.ASSUMPTION


@dataclass
class ProofPlan:
    nodes: List[PlanNode] = field(default_factory=list)

    ROOT = 0

    def add_node(self, shape: FormulaShape, parent: Optional[int] = None) -> int:
        index = len(self.nodes)
        self.nodes.append(PlanNode(index=index, shape=shape, parent=parent))
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def node(self, index: int) -> PlanNode:
        return self.nodes[index]

    @property
    def root(self) -> PlanNode:
        return self.nodes[self.ROOT]

    def leaves(self) -> List[PlanNode]:
        return [n for n in self.nodes if n.is_leaf]

    def size(self) -> int:
        return len(self.nodes)

    def describe(self) -> str:
        parts = []
        for n in self.nodes:
            rule = n.rule.abbreviation if n.rule else "?"
            kids = ",".join(self.nodes[c].node_id for c in n.children)
            parts.append(f"{n.node_id}[{n.shape.value}:{rule}]({kids})")
        return " ".join(parts)


def applicable_rules(shape: FormulaShape, budget: int, bounds: GeneratorBounds) -> List[InferenceRule]:
    """Rules whose conclusion can satisfy ``shape`` within ``budget`` premises."""
    out = []
    for rule, conclusion_shape in RULE_CONCLUSION_SHAPES.items():
        if bounds.weight_for(rule) <= 0 or rule.premise_count > budget:
            continue
        if shape is FormulaShape.ANY or conclusion_shape is shape or conclusion_shape is FormulaShape.ANY:
            out.append(rule)
    return out


def build_plan(difficulty: int, bounds: GeneratorBounds, rng: random.Random) -> ProofPlan:
    """
    Grow a plan from a single unconstrained goal node.

    ``difficulty`` is the step budget: each rule placed costs one step and a
    rule may only be placed while its premise count fits what is left. Nodes
    reached with no budget, or with no applicable rule, become leaves.
    """
    plan = ProofPlan()
    plan.add_node(FormulaShape.ANY)
    budget = difficulty
    queue: Deque[int] = deque([ProofPlan.ROOT])

    while queue:
        node = plan.node(queue.popleft())
        candidates = applicable_rules(node.shape, budget, bounds) if budget > 0 else []
        if not candidates:
            node.rule = InferenceRule.ASSUMPTION
            continue

        weights = [bounds.weight_for(rule) for rule in candidates]
        rule = rng.choices(candidates, weights=weights)[0]
        node.rule = rule
        budget -= 1

        children = [plan.add_node(shape, node.index) for shape in RULE_PREMISE_SHAPES[rule]]
        order = list(children)
        rng.shuffle(order)
        if rng.random() < bounds.branching_chance:
            queue.extend(order)
        else:
            queue.append(order[0])
            for frozen in order[1:]:
                plan.node(frozen).rule = InferenceRule.ASSUMPTION

    logger.debug("Planned %d nodes at difficulty %d: %s", plan.size(), difficulty, plan.describe())
    return plan


__all__ = [
    "FormulaShape",
    "shape_matches",
    "RULE_PREMISE_SHAPES",
    "RULE_CONCLUSION_SHAPES",
    "PlanNode",
    "ProofPlan",
    "applicable_rules",
    "build_plan",
]
