import numpy as np
import pytest

from lpsolver.cutting_plane import CuttingPlane, gomory_cut
from lpsolver.data_models import Problem, Relation, Sense, SolveStatus
from lpsolver.primal_simplex import PrimalSimplex
from lpsolver.utils import first_fractional_index

from conftest import brute_force_integer


@pytest.fixture
def triangle_model():
    """max x2, 3x1 + 2x2 <= 6, -3x1 + 2x2 <= 0; LP optimum (1, 1.5), integer optimum z = 1."""
    return Problem.from_arrays(Sense.MAXIMIZE, [0, 1], [[3, 2], [-3, 2]], [Relation.LE] * 2, [6, 0])


def _first_cut(problem):
    lp = PrimalSimplex().solve(problem)
    j = first_fractional_index(lp.solution)
    row = int(np.flatnonzero(lp.basis == j)[0]) + 1
    return lp, gomory_cut(lp, row)


def test_first_cut_of_triangle(triangle_model):
    lp, cut = _first_cut(triangle_model)
    assert np.allclose(lp.solution, [1, 1.5])
    assert cut.relation is Relation.LE
    assert np.allclose(cut.a, [0, 1])
    assert cut.b == pytest.approx(1.0)


@pytest.mark.parametrize("fixture_name", ["triangle_model", "integer_model"])
def test_cut_separates_vertex_and_keeps_integer_points(fixture_name, request):
    problem = request.getfixturevalue(fixture_name)
    lp, cut = _first_cut(problem)
    assert not cut.is_satisfied(lp.solution, tol=1e-9)
    for x1 in range(8):
        for x2 in range(8):
            x = np.array([x1, x2], dtype=float)
            if problem.is_feasible(x):
                assert cut.is_satisfied(x)


def test_cut_coefficients_are_integral_for_integral_data(integer_model):
    _, cut = _first_cut(integer_model)
    assert np.allclose(cut.a, np.round(cut.a))
    assert cut.b == pytest.approx(round(cut.b))


@pytest.mark.parametrize("revised", [False, True])
def test_triangle_integer_optimum(revised, triangle_model):
    solver = CuttingPlane(revised=revised)
    result = solver.solve(triangle_model)
    assert result.status is SolveStatus.OPTIMAL_INTEGER
    assert result.objective_value == pytest.approx(1.0)
    assert triangle_model.is_feasible(result.solution)
    assert np.allclose(result.solution, np.round(result.solution))
    assert result.iterations == len(solver.cuts) >= 1


def test_already_integral_needs_no_cut(wyndor):
    solver = CuttingPlane()
    result = solver.solve(wyndor)
    assert result.status is SolveStatus.OPTIMAL_INTEGER
    assert result.objective_value == pytest.approx(36.0)
    assert solver.cuts == []


def test_cut_limit_reports_incomplete(triangle_model):
    result = CuttingPlane(max_cuts=0).solve(triangle_model)
    assert result.status is SolveStatus.INCOMPLETE
    assert np.allclose(result.solution, [1, 1.5])


def test_integer_model_result_is_sound(integer_model):
    result = CuttingPlane(max_cuts=50).solve(integer_model)
    assert result.status in (SolveStatus.OPTIMAL_INTEGER, SolveStatus.INCOMPLETE)
    if result.status is SolveStatus.OPTIMAL_INTEGER:
        best, _ = brute_force_integer(integer_model, 6)
        assert result.objective_value == pytest.approx(best)


def test_does_not_mutate_input(triangle_model):
    CuttingPlane().solve(triangle_model)
    assert triangle_model.num_constraints == 2


def test_unbounded_relaxation_stops():
    p = Problem(Sense.MAXIMIZE, [1.0, 1.0])
    assert CuttingPlane().solve(p).status is SolveStatus.UNBOUNDED
