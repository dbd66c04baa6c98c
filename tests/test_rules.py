"""
Tests for derivation/rules.py forward inference.
"""

import pytest

from derivation.rules import (
    Application,
    InferenceRule,
    assumption,
    find_application,
    forward_modus_ponens,
    is_valid_inference,
    possible_conclusions,
)
from normalization.ast_canon import parse_text
from normalization.tiles import formula_from_string as F

MP = InferenceRule.MODUS_PONENS
MT = InferenceRule.MODUS_TOLLENS
HS = InferenceRule.HYPOTHETICAL_SYLLOGISM
DS = InferenceRule.DISJUNCTIVE_SYLLOGISM
CD = InferenceRule.CONSTRUCTIVE_DILEMMA
ABS = InferenceRule.ABSORPTION
SIMP = InferenceRule.SIMPLIFICATION
CONJ = InferenceRule.CONJUNCTION
ADD = InferenceRule.ADDITION


def conclusions(rule, *premises, addends=()):
    return [a.conclusion.text for a in possible_conclusions(rule, [F(p) for p in premises], [F(a) for a in addends])]


class TestInferenceRuleEnum:
    """Names, abbreviations and arities."""

    def test_nine_proper_rules(self):
        assert len(InferenceRule.proper_rules()) == 9
        assert InferenceRule.ASSUMPTION not in InferenceRule.proper_rules()

    def test_abbreviation_lookup(self):
        assert InferenceRule.from_abbreviation("mp") is MP
        assert InferenceRule.from_abbreviation("Simp") is SIMP

    def test_unknown_abbreviation(self):
        with pytest.raises(ValueError):
            InferenceRule.from_abbreviation("XYZ")

    def test_premise_counts(self):
        assert MP.premise_count == 2
        assert ABS.premise_count == 1
        assert ADD.premise_count == 1


class TestForwardRules:
    """Each rule synthesizes the expected conclusions."""

    def test_modus_ponens(self):
        assert conclusions(MP, "p -> q", "p") == ["q"]

    def test_modus_ponens_order_independent(self):
        assert conclusions(MP, "p", "p -> q") == ["q"]

    def test_modus_ponens_matches_structurally(self):
        assert conclusions(MP, "((p)) -> q", "(p)") == ["q"]

    def test_modus_ponens_needs_antecedent(self):
        assert conclusions(MP, "p -> q", "q") == []

    def test_modus_tollens(self):
        assert conclusions(MT, "p -> q", "~q") == ["¬p"]

    def test_modus_tollens_requires_negated_consequent(self):
        assert conclusions(MT, "p -> q", "~p") == []

    def test_hypothetical_syllogism(self):
        assert conclusions(HS, "p -> q", "q -> r") == ["p→r"]

    def test_disjunctive_syllogism_either_side(self):
        assert conclusions(DS, "p | q", "~p") == ["q"]
        assert conclusions(DS, "p | q", "~q") == ["p"]

    def test_constructive_dilemma(self):
        assert conclusions(CD, "(p -> q) & (r -> s)", "p | r") == ["q∨s"]

    def test_constructive_dilemma_needs_matching_disjunction(self):
        assert conclusions(CD, "(p -> q) & (r -> s)", "p | s") == []

    def test_absorption(self):
        assert conclusions(ABS, "p -> q") == ["p→p∧q"]

    def test_simplification_gives_both_conjuncts(self):
        assert conclusions(SIMP, "p & q") == ["p", "q"]

    def test_conjunction_gives_both_orders(self):
        assert conclusions(CONJ, "p", "q") == ["p∧q", "q∧p"]

    def test_addition_over_other_premises(self):
        assert conclusions(ADD, "p", "q") == ["p∨q", "q∨p"]

    def test_addition_with_addends(self):
        assert conclusions(ADD, "p", addends=["r", "s & t"]) == ["p∨r", "p∨s∧t"]

    def test_addition_alone_has_no_candidates(self):
        assert conclusions(ADD, "p") == []

    def test_non_wff_premises_never_match(self):
        assert conclusions(MP, "p -> (q", "p") == []

    def test_application_records_consumed_premises(self):
        (application,) = possible_conclusions(MP, [F("p"), F("p -> q")])
        assert application.premises == (F("p -> q"), F("p"))
        assert application.rule is MP

    def test_tree_level_function(self):
        trees = [parse_text("p -> q"), parse_text("p")]
        assert forward_modus_ponens(trees) == [(parse_text("q"), (0, 1))]


class TestValidity:
    """is_valid_inference and find_application."""

    def test_modus_ponens_example(self):
        assert is_valid_inference(MP, [F("p -> q"), F("p")], F("q"))

    def test_hypothetical_syllogism_example(self):
        assert is_valid_inference(HS, [F("p -> q"), F("q -> r")], F("p -> r"))

    def test_simplification_cannot_conclude_unrelated_atom(self):
        assert not is_valid_inference(SIMP, [F("p & q")], F("r"))

    def test_addition_accepts_any_disjunct(self):
        assert is_valid_inference(ADD, [F("p")], F("p | (r -> s)"))

    def test_addition_requires_premise_on_the_left(self):
        assert not is_valid_inference(ADD, [F("p")], F("r | p"))

    def test_conjunction_precedence_trap(self):
        premises = [F("p -> s"), F("q -> v")]
        assert not is_valid_inference(CONJ, premises, F("(p->s) & q->v"))
        assert is_valid_inference(CONJ, premises, F("(p->s) & (q->v)"))

    def test_conjunction_with_itself(self):
        assert is_valid_inference(CONJ, [F("p"), F("p")], F("p & p"))

    def test_premise_count_must_match(self):
        assert not is_valid_inference(MP, [F("p -> q"), F("p"), F("r")], F("q"))
        assert not is_valid_inference(SIMP, [F("p & q"), F("r")], F("p"))

    def test_assumption_is_never_a_valid_inference(self):
        assert not is_valid_inference(InferenceRule.ASSUMPTION, [], F("p"))

    def test_non_wff_conclusion(self):
        assert not is_valid_inference(MP, [F("p -> q"), F("p")], F("q &"))

    def test_find_application_returns_match(self):
        application = find_application(DS, [F("p | q"), F("~q")], F("p"))
        assert application is not None
        assert application.conclusion == F("p")

    SOUNDNESS_CASES = [
        (MP, ["p -> q", "p"]),
        (MT, ["p -> q", "~q"]),
        (HS, ["p -> q", "q -> r"]),
        (DS, ["p | q", "~p"]),
        (CD, ["(p -> q) & (r -> s)", "p | r"]),
        (ABS, ["p -> q"]),
        (SIMP, ["(p | q) & r"]),
        (CONJ, ["p -> q", "~r"]),
    ]

    @pytest.mark.parametrize("rule,premises", SOUNDNESS_CASES)
    def test_every_synthesized_conclusion_validates(self, rule, premises):
        applications = possible_conclusions(rule, [F(p) for p in premises])
        assert applications
        for application in applications:
            assert is_valid_inference(rule, list(application.premises), application.conclusion)


class TestApplicationTree:
    """Derivation-tree helpers on Application."""

    def test_size_and_leaves(self):
        p, pq = assumption(F("p")), assumption(F("p→q"))
        root = Application(F("q"), MP, (F("p→q"), F("p")), (pq, p))
        assert root.size() == 1
        assert root.leaves() == [pq, p]
        assert p.is_leaf and not root.is_leaf

    def test_to_dict(self):
        root = Application(F("q"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        data = root.to_dict()
        assert data["rule"] == "MP"
        assert data["premises"] == ["p→q", "p"]
        assert [c["rule"] for c in data["children"]] == ["A", "A"]
