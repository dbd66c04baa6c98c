"""
Planned problem generator.

Each attempt plans an abstract proof shape (``generator.plan``), fills it
with concrete formulas (``generator.solver``), prunes the derivation and
applies the acceptance filters. Attempts repeat until one passes or the
attempt budget runs out, in which case ``generate`` returns ``None``.

Usage:
    from generator.planned import PlannedProblemGenerator

    problem = PlannedProblemGenerator(seed=7).generate(3)
"""

from __future__ import annotations

import hashlib
import logging
import random
from typing import List, Optional, Sequence

from normalization.ast_canon import Node, atomic_assertions, parse
from normalization.tiles import Formula

from derivation.proof import Problem
from derivation.rules import Application, assumption
from generator.bounds import GeneratorBounds, load_bounds
from generator.plan import build_plan
from generator.replay import rederives
from generator.solver import PlanSolver
from generator.varlists import VarLists, consistent

logger = logging.getLogger(__name__)


def problem_id(premises: Sequence[Formula], conclusion: Formula) -> str:
    """Content-addressed id: same premises and goal, same id."""
    payload = "|".join(p.text for p in premises) + "⊢" + conclusion.text
    return "gen_" + hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def prune_derivation(root: Application) -> Application:
    """
    Collapse every derived sub-tree whose conclusion is already given as a
    premise elsewhere; the collapsed node becomes that premise.
    """
    given = {parse(leaf.conclusion) for leaf in root.leaves()}

    def prune(application: Application, is_root: bool) -> Application:
        if application.is_leaf:
            return application
        if not is_root and parse(application.conclusion) in given:
            return assumption(application.conclusion)
        return Application(
            conclusion=application.conclusion,
            rule=application.rule,
            premises=application.premises,
            children=tuple(prune(child, False) for child in application.children),
        )

    return prune(root, True)


def distinct_premises(root: Application) -> List[Formula]:
    """Leaf conclusions of the derivation, de-duplicated and sorted by text."""
    seen = {}
    for leaf in root.leaves():
        seen.setdefault(parse(leaf.conclusion), leaf.conclusion)
    return sorted(seen.values(), key=lambda f: f.text)


class PlannedProblemGenerator:
    """
    Two-phase (plan, then solve) problem generator.

    Args:
        bounds: Search limits; loaded from configuration when omitted.
        seed: Makes the sequence of generated problems reproducible.
    """

    def __init__(self, bounds: Optional[GeneratorBounds] = None, seed: Optional[int] = None) -> None:
        self.bounds = bounds or load_bounds()
        self._seed = seed
        self._entropy = random.Random(seed)
        self._calls = 0

    def _attempt_rng(self, call: int, attempt: int) -> random.Random:
        if self._seed is None:
            return random.Random(self._entropy.getrandbits(64))
        path = f"{self._seed}::generate/{call}/attempt/{attempt}"
        return random.Random(int(hashlib.sha256(path.encode("utf-8")).hexdigest()[:16], 16))

    def generate(self, difficulty: int) -> Optional[Problem]:
        level = max(1, min(int(difficulty), self.bounds.max_difficulty))
        call = self._calls
        self._calls += 1

        for attempt in range(self.bounds.max_attempts):
            problem = self._attempt(level, self._attempt_rng(call, attempt))
            if problem is not None:
                logger.info(
                    "Generated %s at difficulty %d after %d attempt(s): %s ⊢ %s",
                    problem.id,
                    level,
                    attempt + 1,
                    ", ".join(p.text for p in problem.premises),
                    problem.conclusion.text,
                )
                return problem
            logger.debug("Attempt %d at difficulty %d rejected", attempt + 1, level)

        logger.warning("No problem found at difficulty %d after %d attempts", level, self.bounds.max_attempts)
        return None

    def _attempt(self, level: int, rng: random.Random) -> Optional[Problem]:
        plan = build_plan(level, self.bounds, rng)
        variables = VarLists.create(self.bounds.variables, rng)
        solved = PlanSolver(plan, self.bounds, rng).solve(variables)
        if solved is None:
            return None
        root = prune_derivation(solved[0])
        return self._accept(root, level)

    def _accept(self, root: Application, level: int) -> Optional[Problem]:
        premises = distinct_premises(root)
        if not premises:
            return None
        premise_trees: List[Node] = [parse(p) for p in premises]

        literals: List[Node] = []
        for tree in premise_trees:
            literals.extend(atomic_assertions(tree))
        if not consistent(literals):
            logger.debug("Rejected: premises assert a variable both ways")
            return None

        if parse(root.conclusion) in premise_trees:
            logger.debug("Rejected: goal %s is already a premise", root.conclusion)
            return None

        if not rederives(root):
            logger.debug("Rejected: derivation does not replay")
            return None

        return Problem(
            id=problem_id(premises, root.conclusion),
            name=f"Generated Problem (Lvl {level})",
            premises=tuple(premises),
            conclusion=root.conclusion,
            difficulty=root.size(),
            derivation=root,
        )


_default_generator: Optional[PlannedProblemGenerator] = None


def generate(difficulty: int) -> Optional[Problem]:
    """Generate a problem with the process-wide default generator."""
    global _default_generator
    if _default_generator is None:
        _default_generator = PlannedProblemGenerator()
    return _default_generator.generate(difficulty)


__all__ = [
    "PlannedProblemGenerator",
    "generate",
    "problem_id",
    "prune_derivation",
    "distinct_premises",
]
