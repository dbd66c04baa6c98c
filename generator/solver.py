"""
Phase 2 of problem generation: fill a plan with concrete formulas.

The solver walks the plan from the goal down. An internal node fixes (or is
handed) a target conclusion, asks the backward engine for premise lists that
would yield it, assigns those premises to its children by shape, and solves
the children with the variable snapshot threaded through them. The forward
engine then confirms the node. A leaf commits the atomic assertions of its
formula, which fails on the first contradiction with anything already
committed in the attempt.

Work is bounded three ways: retries per node, candidates per retry, and a
step budget for the whole attempt.
"""

from __future__ import annotations

import itertools
import logging
import random
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from normalization.ast_canon import Node, Variable, conj, disj, impl, neg, render

from derivation.backward import premise_trees_for_conclusion
from derivation.rules import Application, InferenceRule, assumption, find_application
from generator.bounds import GeneratorBounds
from generator.plan import RULE_CONCLUSION_SHAPES, FormulaShape, PlanNode, ProofPlan, shape_matches
from generator.varlists import VarLists

logger = logging.getLogger(__name__)

# (application, its conclusion tree, snapshot after committing its leaves)
Solved = Tuple[Application, Node, VarLists]


class StepBudgetExceeded(Exception):
    """Raised when an attempt visits more nodes than its budget allows."""


def sample_formula(shape: FormulaShape, letters: Sequence[str]) -> Optional[Node]:
    """Smallest formula of ``shape`` over the first letters of ``letters``."""
    if not letters:
        return None
    a = Variable(letters[0])
    if shape in (FormulaShape.ANY, FormulaShape.IS_ATOMIC):
        return a
    if shape is FormulaShape.IS_NEGATION:
        return neg(a)
    if len(letters) < 2:
        return None
    b = Variable(letters[1])
    if shape is FormulaShape.IS_IMPLICATION:
        return impl(a, b)
    if shape is FormulaShape.IS_CONJUNCTION:
        return conj(a, b)
    return disj(a, b)


class PlanSolver:
    """
    Top-down backtracking solver for one plan.

    Usage:
        solver = PlanSolver(plan, bounds, rng)
        solved = solver.solve(VarLists.create(bounds.variables, rng))
    """

    def __init__(self, plan: ProofPlan, bounds: GeneratorBounds, rng: random.Random) -> None:
        self._plan = plan
        self._bounds = bounds
        self._rng = rng
        self._steps = 0

    @property
    def steps(self) -> int:
        return self._steps

    def solve(self, variables: VarLists) -> Optional[Solved]:
        try:
            return self._solve(ProofPlan.ROOT, None, variables)
        except StepBudgetExceeded:
            logger.debug("Solver gave up after %d steps", self._steps)
            return None

    # ------------------------------------------------------------------

    def _tick(self) -> None:
        self._steps += 1
        if self._steps > self._bounds.max_solver_steps:
            raise StepBudgetExceeded()

    def _pool(self, variables: VarLists) -> Tuple[str, ...]:
        fresh = list(variables.available)
        reused = list(variables.used_letters())
        self._rng.shuffle(fresh)
        self._rng.shuffle(reused)
        return tuple(fresh + reused)

    def _solve(self, index: int, required: Optional[Node], variables: VarLists) -> Optional[Solved]:
        self._tick()
        node = self._plan.node(index)
        if required is not None and not shape_matches(node.shape, required):
            return None
        if node.is_leaf:
            return self._solve_leaf(node, required, variables)

        for attempt in range(self._bounds.node_retries):
            target = required if required is not None else self._draw_target(node, variables)
            if target is None:
                continue
            candidates = premise_trees_for_conclusion(node.rule, target, self._pool(variables))
            if not candidates:
                if required is not None:
                    logger.debug("%s: %s cannot conclude %s", node.node_id, node.rule.abbreviation, target)
                    return None
                continue
            self._rng.shuffle(candidates)
            for premises in candidates[: self._bounds.candidate_limit]:
                for assignment in self._assignments(node, premises):
                    solved = self._solve_children(node, assignment, target, variables)
                    if solved is not None:
                        return solved
            logger.debug("%s: retry %d for %s failed", node.node_id, attempt + 1, target)
        return None

    def _solve_leaf(self, node: PlanNode, required: Optional[Node], variables: VarLists) -> Optional[Solved]:
        for _ in range(self._bounds.node_retries):
            formula = required if required is not None else sample_formula(node.shape, self._pool(variables))
            if formula is None:
                return None
            committed = variables.claim(formula)
            if committed is not None:
                return assumption(render(formula)), formula, committed
            if required is not None:
                return None
        return None

    def _draw_target(self, node: PlanNode, variables: VarLists) -> Optional[Node]:
        letters = itertools.cycle(self._pool(variables))
        return self._template(node, lambda: next(letters))

    def _template(self, node: PlanNode, draw: Callable[[], str]) -> Node:
        """
        A conclusion for ``node`` that its own sub-plan can produce.

        Conjunction, Addition and Absorption read their premises straight off
        the conclusion, so their templates are built from the children's
        templates; other rules only need the node's shape.
        """
        children = [self._plan.node(i) for i in node.children]
        if node.rule is InferenceRule.CONJUNCTION:
            return conj(self._template(children[0], draw), self._template(children[1], draw))
        if node.rule is InferenceRule.ADDITION:
            return disj(self._template(children[0], draw), Variable(draw()))
        if node.rule is InferenceRule.ABSORPTION:
            premise = self._template(children[0], draw)
            return impl(premise.left, conj(premise.left, premise.right))
        shape = node.shape
        if shape is FormulaShape.ANY and not node.is_leaf:
            shape = RULE_CONCLUSION_SHAPES[node.rule]
        return sample_formula(shape, [draw(), draw()])

    def _assignments(self, node: PlanNode, premises: Sequence[Node]) -> Iterator[List[Tuple[int, Node]]]:
        """Ways to hand ``premises`` to the node's children so every shape fits."""
        children = [self._plan.node(i) for i in node.children]
        seen = []
        for ordering in itertools.permutations(premises):
            if ordering in seen:
                continue
            seen.append(ordering)
            if all(shape_matches(child.shape, p) for child, p in zip(children, ordering)):
                yield [(child.index, p) for child, p in zip(children, ordering)]

    def _solve_children(
        self,
        node: PlanNode,
        assignment: List[Tuple[int, Node]],
        target: Node,
        variables: VarLists,
    ) -> Optional[Solved]:
        state = variables
        solved_children: List[Application] = []
        for child_index, premise in assignment:
            solved = self._solve(child_index, premise, state)
            if solved is None:
                return None
            application, _, state = solved
            solved_children.append(application)

        premises = [child.conclusion for child in solved_children]
        confirmed = find_application(node.rule, premises, render(target))
        if confirmed is None:
            return None

        ordered: List[Application] = []
        remaining = list(solved_children)
        for premise in confirmed.premises:
            match = next(child for child in remaining if child.conclusion == premise)
            remaining.remove(match)
            ordered.append(match)
        application = Application(
            conclusion=confirmed.conclusion,
            rule=node.rule,
            premises=confirmed.premises,
            children=tuple(ordered),
        )
        return application, target, state


__all__ = ["PlanSolver", "StepBudgetExceeded", "sample_formula", "Solved"]
