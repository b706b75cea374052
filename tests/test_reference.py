import math

import numpy as np
import pytest

pytest.importorskip("scipy")

from lpsolver.data_models import Problem, Relation, Sense, SolveStatus
from lpsolver.reference import solve_with_highs
from lpsolver.solver import Algorithm, solve

from conftest import random_packing_problem


def test_linprog_scenarios(wyndor, covering_model):
    ref = solve_with_highs(wyndor)
    assert ref.status is SolveStatus.OPTIMAL
    assert ref.objective_value == pytest.approx(36.0)
    assert np.allclose(ref.solution, [2, 6])
    assert solve_with_highs(covering_model).objective_value == pytest.approx(20.0)


def test_linprog_infeasible_and_unbounded():
    infeasible = Problem.from_arrays(Sense.MAXIMIZE, [1], [[1]], [Relation.LE], [-5])
    assert solve_with_highs(infeasible).status is SolveStatus.INFEASIBLE
    unbounded = Problem.from_arrays(Sense.MAXIMIZE, [1, 1], [[1, -1]], [Relation.LE], [2])
    ref = solve_with_highs(unbounded)
    assert ref.status is SolveStatus.UNBOUNDED
    assert ref.objective_value == math.inf


def test_milp_scenarios(integer_model, knapsack_model):
    ref = solve_with_highs(integer_model, integer=True)
    assert ref.status is SolveStatus.OPTIMAL_INTEGER
    assert ref.objective_value == pytest.approx(40.0)
    assert solve_with_highs(knapsack_model, binary=True).objective_value == pytest.approx(220.0)


def test_equality_rows_are_passed_to_highs():
    p = Problem.from_arrays(Sense.MINIMIZE, [1, 1], [[1, 2], [1, 0]], [Relation.EQ, Relation.GE], [4, 1])
    ref = solve_with_highs(p)
    assert ref.objective_value == pytest.approx(2.5)


@pytest.mark.parametrize("algorithm", [Algorithm.PRIMAL_SIMPLEX, Algorithm.REVISED_PRIMAL_SIMPLEX,
                                       Algorithm.DUAL_SIMPLEX])
def test_engines_agree_with_highs(algorithm):
    rng = np.random.default_rng(99)
    for _ in range(10):
        p = random_packing_problem(rng, n=5, m=4)
        ref = solve_with_highs(p)
        assert ref.agrees_with(solve(p, algorithm))


def test_dual_simplex_agrees_with_highs_on_mixed_rows():
    rng = np.random.default_rng(4)
    for _ in range(10):
        A = rng.integers(1, 8, size=(3, 3))
        b = rng.integers(5, 20, size=3)
        p = Problem.from_arrays(Sense.MINIMIZE, rng.integers(1, 9, size=3), A,
                                [Relation.GE, Relation.GE, Relation.GE], b)
        ref = solve_with_highs(p)
        assert ref.agrees_with(solve(p, Algorithm.DUAL_SIMPLEX))


def test_branch_and_bound_agrees_with_milp():
    rng = np.random.default_rng(8)
    for _ in range(10):
        p = random_packing_problem(rng, n=4, m=3)
        ref = solve_with_highs(p, integer=True)
        assert ref.agrees_with(solve(p, Algorithm.BRANCH_AND_BOUND))


def test_integer_infeasible_with_unbounded_relaxation():
    p = Problem.from_arrays(Sense.MAXIMIZE, [1, 1], [[4, -2]], [Relation.EQ], [-1])
    ref = solve_with_highs(p, integer=True)
    assert ref.status is SolveStatus.NO_FEASIBLE_SOLUTION
    assert ref.agrees_with(solve(p, Algorithm.BRANCH_AND_BOUND))
