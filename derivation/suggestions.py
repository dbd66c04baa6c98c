"""Suggestions for a proof editor: what can be written next from selected lines."""

from __future__ import annotations

from typing import Dict, List, Sequence

from normalization.ast_canon import parse, render
from normalization.tiles import Formula

from derivation.replacement import ReplacementRule, replacements
from derivation.rules import InferenceRule, possible_conclusions


def inference_suggestions(rule: InferenceRule, selected: Sequence[Formula]) -> List[Formula]:
    """
    Distinct conclusions ``rule`` yields from exactly the selected formulas.

    Addition is left open-ended by the rule itself, so only disjunctions with
    the other selected formulas are offered.
    """
    if len(selected) != rule.premise_count and rule is not InferenceRule.ADDITION:
        return []
    out: List[Formula] = []
    for application in possible_conclusions(rule, selected):
        if application.conclusion not in out:
            out.append(application.conclusion)
    return out


def replacement_suggestions(rule: ReplacementRule, formula: Formula) -> List[Formula]:
    tree = parse(formula)
    if tree is None:
        return []
    return [render(candidate) for candidate in replacements(rule, tree)]


def all_suggestions(selected: Sequence[Formula]) -> Dict[str, List[Formula]]:
    """Every non-empty suggestion list, keyed by rule abbreviation."""
    found: Dict[str, List[Formula]] = {}
    for rule in InferenceRule.proper_rules():
        conclusions = inference_suggestions(rule, selected)
        if conclusions:
            found[rule.abbreviation] = conclusions
    if len(selected) == 1:
        for rule in ReplacementRule:
            rewritten = replacement_suggestions(rule, selected[0])
            if rewritten:
                found[rule.abbreviation] = rewritten
    return found


__all__ = ["inference_suggestions", "replacement_suggestions", "all_suggestions"]
