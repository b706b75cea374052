import math

import numpy as np
import pytest

from lpsolver.data_models import Problem, Relation, Sense, SolveStatus
from lpsolver.dual_simplex import DualSimplex
from lpsolver.errors import IterationLimitError
from lpsolver.primal_simplex import PrimalSimplex
from lpsolver.revised_simplex import RevisedPrimalSimplex

from conftest import random_packing_problem


def test_covering_model(covering_model):
    result = DualSimplex().solve(covering_model)
    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(20.0)
    assert np.allclose(result.solution, [10, 0])


def test_infeasible_negative_rhs():
    p = Problem.from_arrays(Sense.MAXIMIZE, [1], [[1]], [Relation.LE], [-5])
    result = DualSimplex().solve(p)
    assert result.status is SolveStatus.INFEASIBLE
    assert math.isnan(result.objective_value)
    assert result.solution is None


def test_infeasible_conflicting_rows():
    p = Problem.from_arrays(Sense.MINIMIZE, [1, 1], [[1, 1], [1, 1]], [Relation.GE, Relation.LE], [5, 3])
    assert DualSimplex().solve(p).status is SolveStatus.INFEASIBLE


def test_equality_and_lower_bound():
    # min x1 + x2, x1 + 2x2 = 4, x1 >= 1 -> (1, 1.5)
    p = Problem.from_arrays(Sense.MINIMIZE, [1, 1], [[1, 2], [1, 0]], [Relation.EQ, Relation.GE], [4, 1])
    result = DualSimplex().solve(p)
    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(2.5)
    assert np.allclose(result.solution, [1, 1.5])


def test_maximize_with_lower_bound_needs_repair():
    # Objective row starts negative, so the repair phase runs first.
    p = Problem.from_arrays(Sense.MAXIMIZE, [8, 5], [[1, 1], [9, 5], [1, 0]],
                            [Relation.LE, Relation.LE, Relation.GE], [6, 45, 4])
    result = DualSimplex().solve(p)
    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(41.0)
    assert np.allclose(result.solution, [4, 1.8])


def test_unbounded_after_cleanup():
    p = Problem.from_arrays(Sense.MAXIMIZE, [1, 1], [[1, 0]], [Relation.GE], [2])
    result = DualSimplex().solve(p)
    assert result.status is SolveStatus.UNBOUNDED
    assert result.objective_value == math.inf


def test_agrees_with_primal_on_canonical_models():
    rng = np.random.default_rng(7)
    for _ in range(20):
        p = random_packing_problem(rng, n=3, m=3)
        dual = DualSimplex().solve(p)
        primal = PrimalSimplex().solve(p)
        assert dual.status is primal.status is SolveStatus.OPTIMAL
        assert dual.objective_value == pytest.approx(primal.objective_value, abs=1e-6)


@pytest.mark.parametrize("solver_cls", [PrimalSimplex, RevisedPrimalSimplex, DualSimplex])
def test_methods_agree_on_wyndor(solver_cls, wyndor):
    result = solver_cls().solve(wyndor)
    assert result.objective_value == pytest.approx(36.0, abs=1e-6)
    assert wyndor.is_feasible(result.solution)


def test_result_is_feasible_for_mixed_rows():
    p = Problem.from_arrays(Sense.MINIMIZE, [3, 2, 4], [[1, 1, 1], [2, 1, 0], [0, 1, 3]],
                            [Relation.GE, Relation.GE, Relation.LE], [6, 4, 12])
    result = DualSimplex().solve(p)
    assert result.status is SolveStatus.OPTIMAL
    assert p.is_feasible(result.solution)
    assert p.evaluate(result.solution) == pytest.approx(result.objective_value)


def test_repair_phase_respects_iteration_cap():
    p = Problem.from_arrays(Sense.MAXIMIZE, [8, 5], [[1, 1], [9, 5], [1, 0]],
                            [Relation.LE, Relation.LE, Relation.GE], [6, 45, 4])
    with pytest.raises(IterationLimitError):
        DualSimplex(max_iterations=0).solve(p)
