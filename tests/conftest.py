import itertools

import numpy as np
import pytest

from lpsolver.data_models import Problem, Relation, Sense


def brute_force_integer(problem, upper):
    """Best integer point in the box [0, upper]^n, or (None, None) if none is feasible."""
    best_value, best_x = None, None
    better = (lambda a, b: a > b) if problem.sense is Sense.MAXIMIZE else (lambda a, b: a < b)
    for point in itertools.product(range(upper + 1), repeat=problem.num_vars):
        x = np.array(point, dtype=float)
        if not problem.is_feasible(x):
            continue
        value = problem.evaluate(x)
        if best_value is None or better(value, best_value):
            best_value, best_x = value, x
    return best_value, best_x


def brute_force_knapsack(profits, weights, capacity):
    best = 0.0
    for choice in itertools.product((0, 1), repeat=len(profits)):
        x = np.array(choice)
        if x @ weights <= capacity:
            best = max(best, float(x @ profits))
    return best


def random_packing_problem(rng, n, m):
    """Bounded maximize model with <= rows, positive data."""
    A = rng.integers(1, 10, size=(m, n))
    b = rng.integers(10, 40, size=m)
    c = rng.integers(1, 10, size=n)
    return Problem.from_arrays(Sense.MAXIMIZE, c, A, [Relation.LE] * m, b)


@pytest.fixture
def wyndor():
    """max 3x1 + 5x2, x1 <= 4, 2x2 <= 12, 3x1 + 2x2 <= 18."""
    return Problem.from_arrays(
        Sense.MAXIMIZE, [3, 5],
        [[1, 0], [0, 2], [3, 2]],
        [Relation.LE] * 3, [4, 12, 18],
    )


@pytest.fixture
def integer_model():
    """max 8x1 + 5x2, x1 + x2 <= 6, 9x1 + 5x2 <= 45; LP optimum (3.75, 2.25)."""
    return Problem.from_arrays(
        Sense.MAXIMIZE, [8, 5],
        [[1, 1], [9, 5]],
        [Relation.LE] * 2, [6, 45],
    )


@pytest.fixture
def covering_model():
    """min 2x1 + 3x2, x1 + x2 >= 10."""
    return Problem.from_arrays(Sense.MINIMIZE, [2, 3], [[1, 1]], [Relation.GE], [10])


@pytest.fixture
def knapsack_model():
    return Problem.from_arrays(Sense.MAXIMIZE, [60, 100, 120], [[10, 20, 30]], [Relation.LE], [50])


@pytest.fixture
def recorder():
    """Step sink that keeps every (text, mask) call."""
    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, text, mask):
            self.calls.append((text, mask))

    return Recorder()
