"""Turn a generator derivation tree back into a checkable proof."""

from __future__ import annotations

from typing import Dict, List

from normalization.ast_canon import Node, parse

from derivation.proof import Inference, Premise, Problem, Proof, ProofLine, Reiteration
from derivation.rules import Application, find_application


def rederives(application: Application) -> bool:
    """True when every rule firing in the tree reproduces its stored conclusion."""
    if application.is_leaf:
        return True
    premises = [child.conclusion for child in application.children]
    if find_application(application.rule, premises, application.conclusion) is None:
        return False
    return all(rederives(child) for child in application.children)


def replay_derivation(problem: Problem) -> Proof:
    """
    Proof of ``problem`` read off its derivation tree.

    Premises come first, then each rule firing in post-order citing the lines
    that hold its premises. A conclusion derived twice is written once; if the
    goal was already written earlier it is reiterated as the last line.

    Raises:
        ValueError: If the problem has no derivation, or the derivation uses
            a leaf that is not one of the problem's premises.
    """
    if problem.derivation is None:
        raise ValueError(f"Problem {problem.id} carries no derivation")

    lines: List[ProofLine] = []
    numbered: Dict[Node, int] = {}

    def write(tree: Node, line: ProofLine) -> None:
        lines.append(line)
        numbered.setdefault(tree, line.line_number)

    for premise in problem.premises:
        write(parse(premise), ProofLine(len(lines) + 1, premise, Premise()))

    def visit(application: Application) -> None:
        tree = parse(application.conclusion)
        if application.is_leaf:
            if tree not in numbered:
                raise ValueError(f"Leaf {application.conclusion} is not a premise of {problem.id}")
            return
        for child in application.children:
            visit(child)
        if tree in numbered:
            return
        refs = tuple(numbered[parse(p)] for p in application.premises)
        write(tree, ProofLine(len(lines) + 1, application.conclusion, Inference(application.rule, refs)))

    root = problem.derivation
    visit(root)
    goal = parse(root.conclusion)
    if lines[-1].line_number != numbered[goal]:
        lines.append(ProofLine(len(lines) + 1, root.conclusion, Reiteration(numbered[goal])))
    return Proof(tuple(lines))


__all__ = ["replay_derivation", "rederives"]
