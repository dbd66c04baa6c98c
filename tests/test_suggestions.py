"""
Tests for derivation/suggestions.py.
"""

from derivation.replacement import ReplacementRule
from derivation.rules import InferenceRule
from derivation.suggestions import all_suggestions, inference_suggestions, replacement_suggestions
from normalization.tiles import formula_from_string as F


def texts(formulas):
    return [f.text for f in formulas]


def test_inference_suggestions_need_matching_selection():
    assert texts(inference_suggestions(InferenceRule.MODUS_PONENS, [F("p -> q"), F("p")])) == ["q"]
    assert inference_suggestions(InferenceRule.MODUS_PONENS, [F("p -> q")]) == []


def test_addition_offers_disjunctions_with_other_selection():
    assert texts(inference_suggestions(InferenceRule.ADDITION, [F("p"), F("q")])) == ["p∨q", "q∨p"]


def test_replacement_suggestions():
    assert texts(replacement_suggestions(ReplacementRule.DOUBLE_NEGATION, F("~~p"))) == ["¬¬¬¬p", "p"]
    assert replacement_suggestions(ReplacementRule.COMMUTATION, F("p &")) == []


def test_all_suggestions_for_single_line():
    found = all_suggestions([F("p & q")])
    assert texts(found["Simp"]) == ["p", "q"]
    assert texts(found["Comm"]) == ["q∧p"]
    assert "MP" not in found
