"""
Tests for normalization/wff.py grammar-only acceptor.
"""

import pytest

from normalization.ast_canon import parse
from normalization.tiles import MAX_FORMULA_LENGTH, formula_from_string as F
from normalization.wff import first_error_index, is_wff

CASES = [
    "p",
    "~p",
    "~~~p",
    "p & q",
    "p | q & r",
    "p -> q -> r",
    "(p -> q) & (q -> r)",
    "((p))",
    "p <-> ~(q | r)",
    "",
    "(",
    ")",
    "p q",
    "p &",
    "& p",
    "(p",
    "p)",
    "()",
    "~",
    "p ~",
    "(p -> q))",
    "((p -> q)",
    "p -> & q",
]


class TestIsWff:
    """The acceptor agrees with the parser."""

    @pytest.mark.parametrize("text", CASES)
    def test_agrees_with_parser(self, text):
        formula = F(text)
        assert is_wff(formula) == (parse(formula) is not None)

    def test_accepts_well_formed(self):
        assert is_wff(F("(p → q) ∧ ¬r"))

    def test_rejects_empty(self):
        assert not is_wff(F(""))


class TestFirstErrorIndex:
    """Diagnostics for malformed rows."""

    def test_none_for_wff(self):
        assert first_error_index(F("p & q")) is None

    def test_operator_without_left_operand(self):
        assert first_error_index(F("& p")) == 0

    def test_two_variables_in_a_row(self):
        assert first_error_index(F("p q")) == 1

    def test_unclosed_group_points_past_the_end(self):
        assert first_error_index(F("(p")) == 2

    def test_stray_closing_paren(self):
        assert first_error_index(F("p)")) == 1


class TestLongRows:
    def test_overlong_row_points_at_the_limit(self):
        formula = F("~" * 3000 + "p")
        assert not is_wff(formula)
        assert first_error_index(formula) == MAX_FORMULA_LENGTH

    def test_earlier_error_wins(self):
        assert first_error_index(F("p q" + " & p" * 200)) == 1
