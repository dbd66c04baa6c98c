"""
Tests for the planned problem generator and derivation replay.
"""

import random

import pytest

from derivation.proof import Problem
from derivation.rules import Application, InferenceRule, assumption
from derivation.verification import check_solution, validate
from generator.bounds import GeneratorBounds
from generator.plan import FormulaShape, ProofPlan
from generator.planned import PlannedProblemGenerator, distinct_premises, problem_id, prune_derivation
from generator.replay import rederives, replay_derivation
from generator.solver import PlanSolver, sample_formula
from generator.varlists import VarLists, consistent
from normalization.ast_canon import atomic_assertions, parse, to_text
from normalization.tiles import formula_from_string as F

MP = InferenceRule.MODUS_PONENS
SIMP = InferenceRule.SIMPLIFICATION


def literals_of(problem):
    out = []
    for premise in problem.premises:
        out.extend(atomic_assertions(parse(premise)))
    return out


class TestGeneratedProblems:
    """Every accepted problem satisfies the acceptance filters."""

    @pytest.mark.parametrize("difficulty", [1, 2, 3])
    def test_acceptance_properties(self, bounds, difficulty):
        generator = PlannedProblemGenerator(bounds=bounds, seed=difficulty)
        for _ in range(10):
            problem = generator.generate(difficulty)
            assert problem is not None
            assert problem.premises
            assert consistent(literals_of(problem))
            goal = parse(problem.conclusion)
            assert goal not in [parse(p) for p in problem.premises]
            assert rederives(problem.derivation)
            assert 1 <= problem.difficulty <= difficulty
            assert problem.id == problem_id(problem.premises, problem.conclusion)
            assert problem.name == f"Generated Problem (Lvl {difficulty})"

    @pytest.mark.parametrize("difficulty", [1, 3, 5])
    def test_replayed_proof_solves_problem(self, bounds, difficulty):
        generator = PlannedProblemGenerator(bounds=bounds, seed=100 + difficulty)
        for _ in range(5):
            problem = generator.generate(difficulty)
            assert problem is not None
            proof = replay_derivation(problem)
            assert validate(proof).is_valid
            assert check_solution(problem, proof).is_valid

    @pytest.mark.parametrize("rule", [InferenceRule.MODUS_TOLLENS, InferenceRule.DISJUNCTIVE_SYLLOGISM])
    def test_rules_with_negated_fresh_part_are_generated(self, rule):
        only = GeneratorBounds(max_attempts=200, rule_weights={rule.abbreviation: 1.0})
        generator = PlannedProblemGenerator(bounds=only, seed=17)
        for _ in range(5):
            problem = generator.generate(2)
            assert problem is not None
            assert problem.derivation.rule is rule
            assert consistent(literals_of(problem))
            assert check_solution(problem, replay_derivation(problem)).is_valid

    def test_level_is_clamped(self, bounds):
        problem = PlannedProblemGenerator(bounds=bounds, seed=4).generate(0)
        assert problem is not None
        assert problem.difficulty == 1
        assert problem.name == "Generated Problem (Lvl 1)"

    def test_higher_difficulty_is_not_simpler(self, bounds):
        easy = PlannedProblemGenerator(bounds=bounds, seed=21)
        hard = PlannedProblemGenerator(bounds=bounds, seed=21)
        easy_sizes = [easy.generate(1).difficulty for _ in range(10)]
        hard_sizes = [hard.generate(6).difficulty for _ in range(10)]
        assert sum(hard_sizes) > sum(easy_sizes)

    def test_seed_reproduces_sequence(self, bounds):
        first = PlannedProblemGenerator(bounds=bounds, seed=9)
        second = PlannedProblemGenerator(bounds=bounds, seed=9)
        assert [first.generate(3) for _ in range(3)] == [second.generate(3) for _ in range(3)]

    def test_problem_dict_drops_nothing_needed_to_solve(self, bounds):
        problem = PlannedProblemGenerator(bounds=bounds, seed=2).generate(2)
        data = problem.to_dict()
        assert data["derivation"]["rule"] == problem.derivation.rule.abbreviation
        assert Problem.from_dict(data) == problem


class TestPruning:
    def test_collapses_rederived_premises(self):
        # Both p and p∧q are leaves somewhere, so neither is derived again.
        rebuilt = Application(
            F("p∧q"),
            InferenceRule.CONJUNCTION,
            (F("p"), F("q")),
            (assumption(F("p")), assumption(F("q"))),
        )
        left = Application(F("p"), SIMP, (F("p∧q"),), (assumption(F("p∧q")),))
        root = Application(F("p∧(p∧q)"), InferenceRule.CONJUNCTION, (F("p"), F("p∧q")), (left, rebuilt))
        pruned = prune_derivation(root)
        assert all(child.is_leaf for child in pruned.children)
        assert pruned.size() == 1
        assert [f.text for f in distinct_premises(pruned)] == ["p", "p∧q"]

    def test_keeps_derivations_of_new_formulas(self):
        inner = Application(F("q"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        root = Application(F("q∨r"), InferenceRule.ADDITION, (F("q"),), (inner,))
        assert prune_derivation(root).size() == 2

    def test_root_is_never_collapsed(self):
        root = Application(F("q"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        assert prune_derivation(root) == root

    def test_problem_id_is_content_addressed(self):
        a = problem_id([F("p→q"), F("p")], F("q"))
        assert a == problem_id([F("p→q"), F("p")], F("q"))
        assert a != problem_id([F("p→q"), F("p")], F("p"))
        assert a.startswith("gen_") and len(a) == 16


class TestReplay:
    def test_modus_ponens_replay(self):
        root = Application(F("q"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        problem = Problem("t", "t", (F("p"), F("p→q")), F("q"), 1, root)
        proof = replay_derivation(problem)
        assert [line.justification.display_text for line in proof.lines] == ["Premise", "Premise", "2,1: MP"]
        assert check_solution(problem, proof).is_valid

    def test_missing_derivation(self):
        with pytest.raises(ValueError):
            replay_derivation(Problem("t", "t", (F("p"),), F("p∨q")))

    def test_leaf_outside_premises(self):
        root = Application(F("q"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        with pytest.raises(ValueError):
            replay_derivation(Problem("t", "t", (F("p→q"),), F("q"), 1, root))

    def test_rederives_rejects_tampered_tree(self):
        bad = Application(F("r"), MP, (F("p→q"), F("p")), (assumption(F("p→q")), assumption(F("p"))))
        assert not rederives(bad)


class TestSolver:
    def test_sample_formula_shapes(self):
        assert to_text(sample_formula(FormulaShape.IS_IMPLICATION, ["p", "q"])) == "p→q"
        assert to_text(sample_formula(FormulaShape.IS_NEGATION, ["r"])) == "¬r"
        assert sample_formula(FormulaShape.IS_CONJUNCTION, ["p"]) is None
        assert sample_formula(FormulaShape.ANY, []) is None

    def test_single_step_plan(self, bounds):
        plan = ProofPlan()
        root = plan.add_node(FormulaShape.ANY)
        plan.node(root).rule = SIMP
        leaf = plan.add_node(FormulaShape.IS_CONJUNCTION, root)
        plan.node(leaf).rule = InferenceRule.ASSUMPTION

        rng = random.Random(0)
        solved = PlanSolver(plan, bounds, rng).solve(VarLists.create(bounds.variables, rng))
        assert solved is not None
        application, target, state = solved
        assert application.rule is SIMP
        assert parse(application.conclusion) == target
        assert application.children[0].is_leaf
        assert len(state.used) == 2
