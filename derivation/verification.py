"""
Line-by-line validation of justified proofs.

The validator replays a proof top to bottom, keeping:
    - the parsed tree of every accepted line
    - a stack of open sub-proofs (each opened by an Assumption line)

A line is in scope for a later line when it belongs to the main proof or to
a sub-proof that is still open. Closing a sub-proof (Implication
Introduction or Reductio ad Absurdum) discards its lines from scope.

The first failing line short-circuits validation; its number and a readable
reason are returned in the ValidationResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from normalization.ast_canon import (
    Node,
    formulas_equal,
    impl,
    is_conjunction,
    is_negation,
    neg,
    parse,
    render,
)
from normalization.tiles import Formula

from derivation.proof import (
    Assumption,
    ImplicationIntroduction,
    Inference,
    Premise,
    Problem,
    Proof,
    ProofLine,
    ReductioAdAbsurdum,
    Reiteration,
    Replacement,
    ValidationResult,
)
from derivation.replacement import is_valid_replacement
from derivation.rules import is_valid_inference

logger = logging.getLogger(__name__)


def is_contradiction(node: Node) -> bool:
    """X ∧ ¬X in either conjunct order."""
    if not is_conjunction(node):
        return False
    left, right = node.left, node.right
    return (is_negation(right) and right.child == left) or (is_negation(left) and left.child == right)


@dataclass
class _SubProof:
    start: int
    members: List[int] = field(default_factory=list)


class _LineFailure(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProofValidator:
    """
    Stateless validator; one ``validate`` call owns all replay state.

    Usage:
        result = ProofValidator().validate(proof)
        if not result.is_valid:
            print(result.error_message)
    """

    def validate(self, proof: Proof) -> ValidationResult:
        all_numbers = {line.line_number for line in proof.lines}
        trees: Dict[int, Node] = {}
        main: List[int] = []
        open_subproofs: List[_SubProof] = []
        previous_depth = 0

        for line in proof.lines:
            number = line.line_number
            try:
                if number in trees:
                    raise _LineFailure("Duplicate line number.")
                tree = parse(line.formula)
                if tree is None:
                    raise _LineFailure("Formula is not a WFF.")
                scope = self._scope(main, open_subproofs)
                closed = self._check_depth(line, previous_depth, open_subproofs)
                self._check_justification(line, tree, trees, scope, all_numbers, closed)
            except _LineFailure as failure:
                logger.debug("Proof rejected at line %d: %s", number, failure.message)
                return ValidationResult.fail(number, failure.message)

            trees[number] = tree
            if closed is not None:
                open_subproofs.pop()
            if isinstance(line.justification, Assumption):
                open_subproofs.append(_SubProof(start=number))
            (open_subproofs[-1].members if open_subproofs else main).append(number)
            previous_depth = line.depth

        return ValidationResult.ok()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @staticmethod
    def _scope(main: List[int], open_subproofs: List[_SubProof]) -> Set[int]:
        scope = set(main)
        for sub in open_subproofs:
            scope.update(sub.members)
        return scope

    @staticmethod
    def _check_depth(
        line: ProofLine,
        previous_depth: int,
        open_subproofs: List[_SubProof],
    ) -> Optional[_SubProof]:
        """Check nesting; return the sub-proof this line closes, if any."""
        depth = line.depth
        justification = line.justification
        closes = isinstance(justification, (ImplicationIntroduction, ReductioAdAbsurdum))

        if depth < 0:
            raise _LineFailure("Depth cannot be negative.")
        if depth > previous_depth + 1:
            raise _LineFailure("Depth can increase by at most one per line.")
        if depth == previous_depth + 1:
            if not isinstance(justification, Assumption):
                raise _LineFailure("A new sub-proof must begin with an Assumption.")
            return None
        if isinstance(justification, Assumption):
            raise _LineFailure("An Assumption must open a new sub-proof one level deeper.")
        if depth < previous_depth:
            if not closes:
                raise _LineFailure("Only Implication Introduction or Reductio ad Absurdum can close a sub-proof.")
            if depth != previous_depth - 1:
                raise _LineFailure("A closing line can close only one sub-proof.")
            sub = open_subproofs[-1]
            if justification.start != sub.start:
                raise _LineFailure(
                    f"Sub-proof to close starts at line {sub.start}, not line {justification.start}."
                )
            if justification.end != sub.members[-1]:
                raise _LineFailure(
                    f"Sub-proof to close ends at line {sub.members[-1]}, not line {justification.end}."
                )
            return sub
        if closes:
            raise _LineFailure("A closing line must sit one level below the sub-proof it closes.")
        return None

    # ------------------------------------------------------------------
    # Justifications
    # ------------------------------------------------------------------

    def _check_justification(
        self,
        line: ProofLine,
        tree: Node,
        trees: Dict[int, Node],
        scope: Set[int],
        all_numbers: Set[int],
        closed: Optional[_SubProof],
    ) -> None:
        justification = line.justification

        if isinstance(justification, Premise):
            if line.depth != 0:
                raise _LineFailure("Premises may only appear in the main proof.")
            return

        if isinstance(justification, Assumption):
            return

        if isinstance(justification, Inference):
            rule = justification.rule
            if len(justification.lines) != rule.premise_count:
                raise _LineFailure(f"{rule.rule_name} requires {rule.premise_count} reference line(s).")
            for ref in justification.lines:
                self._require_in_scope(ref, scope, all_numbers)
            premises = self._formulas(justification.lines, trees)
            if not is_valid_inference(rule, premises, line.formula):
                raise _LineFailure(f"Does not follow by {rule.rule_name}.")
            return

        if isinstance(justification, Replacement):
            self._require_in_scope(justification.line, scope, all_numbers)
            (source,) = self._formulas((justification.line,), trees)
            if not is_valid_replacement(justification.rule, source, line.formula):
                raise _LineFailure(f"Is not a valid application of {justification.rule.rule_name}.")
            return

        if isinstance(justification, Reiteration):
            self._require_in_scope(justification.line, scope, all_numbers)
            if trees[justification.line] != tree:
                raise _LineFailure(f"Does not repeat line {justification.line}.")
            return

        if isinstance(justification, ImplicationIntroduction):
            assumed = trees[closed.start]
            concluded = trees[closed.members[-1]]
            if tree != impl(assumed, concluded):
                raise _LineFailure("Implication Introduction must conclude (assumption → last line of the sub-proof).")
            return

        if isinstance(justification, ReductioAdAbsurdum):
            last = trees[closed.members[-1]]
            if not is_contradiction(last):
                raise _LineFailure("The sub-proof must end in a contradiction (X ∧ ¬X).")
            if justification.contradiction_line not in closed.members:
                raise _LineFailure(
                    f"Contradiction line {justification.contradiction_line} is not inside the sub-proof."
                )
            if trees[justification.contradiction_line] != last:
                raise _LineFailure(f"Line {justification.contradiction_line} does not hold the contradiction.")
            if tree != neg(trees[closed.start]):
                raise _LineFailure("Reductio ad Absurdum must conclude the negation of the assumption.")
            return

        raise _LineFailure(f"Unsupported justification: {type(justification).__name__}.")

    @staticmethod
    def _require_in_scope(ref: int, scope: Set[int], all_numbers: Set[int]) -> None:
        if ref not in all_numbers:
            raise _LineFailure(f"References non-existent line {ref}.")
        if ref not in scope:
            raise _LineFailure(f"References line {ref}, which is not in scope.")

    @staticmethod
    def _formulas(numbers: Sequence[int], trees: Dict[int, Node]) -> List[Formula]:
        return [render(trees[n]) for n in numbers]


_DEFAULT_VALIDATOR = ProofValidator()


def validate(proof: Proof) -> ValidationResult:
    """Validate a proof with the default validator."""
    return _DEFAULT_VALIDATOR.validate(proof)


def check_solution(problem: Problem, proof: Proof) -> ValidationResult:
    """
    Validate ``proof`` and confirm it solves ``problem``.

    Every premise line must state one of the problem's premises, and the last
    line must reach the conclusion in the main proof.
    """
    result = validate(proof)
    if not result.is_valid:
        return result
    if not proof.lines:
        return ValidationResult.fail(None, "Proof is empty.")
    for line in proof.lines:
        if isinstance(line.justification, Premise) and not any(
            formulas_equal(line.formula, given) for given in problem.premises
        ):
            return ValidationResult.fail(line.line_number, "Is not one of the problem's premises.")
    last = proof.lines[-1]
    if last.depth != 0:
        return ValidationResult.fail(last.line_number, "Proof ends inside an open sub-proof.")
    if not formulas_equal(last.formula, problem.conclusion):
        return ValidationResult.fail(last.line_number, f"Does not reach the goal {problem.conclusion}.")
    return ValidationResult.ok()


__all__ = [
    "ProofValidator",
    "validate",
    "check_solution",
    "is_contradiction",
]
