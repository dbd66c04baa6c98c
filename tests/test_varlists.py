"""
Tests for generator/varlists.py literal bookkeeping.
"""

import random

import pytest

from generator.varlists import VarLists, consistent
from normalization.ast_canon import parse_text


def lit(text):
    return parse_text(text)


class TestUseAtomicAssertion:
    def test_new_literal_moves_letter_out_of_available(self):
        state = VarLists.create(["p", "q", "r"]).use_atomic_assertion(lit("p"))
        assert state.available == ("q", "r")
        assert state.used == (lit("p"),)

    def test_opposite_sign_is_rejected(self):
        state = VarLists.create(["p", "q"]).use_atomic_assertion(lit("p"))
        assert state.use_atomic_assertion(lit("~p")) is None

    def test_same_literal_can_be_reused(self):
        state = VarLists.create(["p", "q"]).use_atomic_assertion(lit("~q"))
        assert state.use_atomic_assertion(lit("~q")) is state

    def test_snapshots_are_independent(self):
        start = VarLists.create(["p", "q"])
        start.use_atomic_assertion(lit("p"))
        assert start.available == ("p", "q")
        assert start.used == ()

    def test_compound_tree_is_not_a_literal(self):
        with pytest.raises(ValueError):
            VarLists.create(["p", "q"]).use_atomic_assertion(lit("p & q"))


class TestClaim:
    def test_claims_every_occurrence(self):
        state = VarLists.create(["p", "q", "r"]).claim(lit("p -> ~q"))
        assert state.available == ("r",)
        assert state.used == (lit("p"), lit("~q"))

    def test_self_contradicting_tree(self):
        assert VarLists.create(["p", "q"]).claim(lit("p & ~p")) is None

    def test_conflict_with_earlier_claim(self):
        state = VarLists.create(["p", "q"]).claim(lit("p | q"))
        assert state.claim(lit("~q -> r")) is None

    def test_used_letters_follow_claim_order(self):
        state = VarLists.create(["p", "q", "r"]).claim(lit("~p"))
        assert state.available == ("q", "r")
        assert state.used_letters() == ("p",)


class TestCreate:
    def test_shuffle_keeps_letters(self):
        state = VarLists.create(["p", "q", "r", "s"], random.Random(5))
        assert sorted(state.available) == ["p", "q", "r", "s"]

    def test_copy_is_equal(self):
        state = VarLists.create(["p", "q"]).claim(lit("q"))
        assert state.copy() == state


class TestConsistent:
    def test_mixed_letters(self):
        assert consistent([lit("p"), lit("~q"), lit("r")])

    def test_opposite_signs(self):
        assert not consistent([lit("p"), lit("q"), lit("~p")])

    def test_empty(self):
        assert consistent([])
