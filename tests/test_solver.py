import numpy as np
import pytest

from lpsolver.data_models import SolveStatus
from lpsolver.errors import UnsupportedAlgorithmError
from lpsolver.solver import Algorithm, create_solver, solve

from conftest import random_packing_problem


@pytest.mark.parametrize("name, expected", [
    ("Primal Simplex", Algorithm.PRIMAL_SIMPLEX),
    ("revised-primal-simplex", Algorithm.REVISED_PRIMAL_SIMPLEX),
    ("  DUAL_SIMPLEX ", Algorithm.DUAL_SIMPLEX),
    ("Branch & Bound", Algorithm.BRANCH_AND_BOUND),
    ("branch-and-bound knapsack", Algorithm.BRANCH_AND_BOUND_KNAPSACK),
    ("Cutting Plane", Algorithm.CUTTING_PLANE),
    ("Cutting Plane (Revised)", Algorithm.CUTTING_PLANE_REVISED),
    (Algorithm.DUAL_SIMPLEX, Algorithm.DUAL_SIMPLEX),
])
def test_from_name(name, expected):
    assert Algorithm.from_name(name) is expected


def test_unknown_algorithm():
    with pytest.raises(UnsupportedAlgorithmError):
        Algorithm.from_name("interior point")
    with pytest.raises(ValueError):
        solve(None, "ellipsoid")


def test_create_solver_ignores_foreign_options():
    solver = create_solver("primal simplex", max_cuts=3, max_iterations=7)
    assert solver.max_iterations == 7
    cutting = create_solver(Algorithm.CUTTING_PLANE_REVISED, max_cuts=3)
    assert cutting.revised and cutting.max_cuts == 3


def test_scenarios(wyndor, integer_model, covering_model, knapsack_model):
    assert solve(wyndor, "primal simplex").objective_value == pytest.approx(36.0)
    assert solve(integer_model, "branch and bound").objective_value == pytest.approx(40.0)
    assert solve(covering_model, "dual simplex").objective_value == pytest.approx(20.0)
    assert solve(knapsack_model, "branch and bound knapsack").objective_value == pytest.approx(220.0)


def test_step_sink_is_forwarded(wyndor, recorder):
    solve(wyndor, Algorithm.DUAL_SIMPLEX, step_sink=recorder)
    assert recorder.calls


@pytest.mark.parametrize("algorithm", [Algorithm.PRIMAL_SIMPLEX, Algorithm.REVISED_PRIMAL_SIMPLEX,
                                       Algorithm.DUAL_SIMPLEX])
def test_lp_methods_agree(algorithm):
    rng = np.random.default_rng(2024)
    for _ in range(10):
        p = random_packing_problem(rng, n=4, m=3)
        reference = solve(p, Algorithm.PRIMAL_SIMPLEX)
        result = solve(p, algorithm)
        assert result.status is SolveStatus.OPTIMAL
        assert result.objective_value == pytest.approx(reference.objective_value, abs=1e-6)
        assert p.is_feasible(result.solution)
        assert p.evaluate(result.solution) == pytest.approx(result.objective_value, abs=1e-6)


def test_integer_methods_agree(integer_model):
    branch = solve(integer_model, Algorithm.BRANCH_AND_BOUND)
    for algorithm in (Algorithm.CUTTING_PLANE, Algorithm.CUTTING_PLANE_REVISED):
        result = solve(integer_model, algorithm, max_cuts=50)
        if result.status is SolveStatus.OPTIMAL_INTEGER:
            assert result.objective_value == pytest.approx(branch.objective_value)
