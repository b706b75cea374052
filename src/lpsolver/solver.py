"""
Algorithm registry and the single ``solve`` entry point.
"""

import inspect
import logging
import re
from enum import Enum
from typing import Optional

from .branch_and_bound import BranchAndBound
from .cutting_plane import CuttingPlane
from .data_models import Problem, SimplexResult, StepSink
from .dual_simplex import DualSimplex
from .errors import UnsupportedAlgorithmError
from .knapsack import BranchAndBoundKnapsack
from .primal_simplex import PrimalSimplex
from .revised_simplex import RevisedPrimalSimplex

logger = logging.getLogger(__name__)


class Algorithm(Enum):
    PRIMAL_SIMPLEX = "primal simplex"
    REVISED_PRIMAL_SIMPLEX = "revised primal simplex"
    DUAL_SIMPLEX = "dual simplex"
    BRANCH_AND_BOUND = "branch and bound"
    BRANCH_AND_BOUND_KNAPSACK = "branch and bound knapsack"
    CUTTING_PLANE = "cutting plane"
    CUTTING_PLANE_REVISED = "cutting plane revised"

    @classmethod
    def from_name(cls, name: str) -> "Algorithm":
        """
        Look up an algorithm by a loosely written name.

        Case, surrounding whitespace, "-", "_", "&" and parentheses are
        normalized, so "Branch & Bound", "branch-and-bound knapsack" and
        "CUTTING_PLANE (revised)" all resolve.
        """
        if isinstance(name, cls):
            return name
        key = str(name).lower().replace("&", " and ")
        key = re.sub(r"[-_()]", " ", key)
        key = " ".join(key.split())
        for algorithm in cls:
            if algorithm.value == key:
                return algorithm
        raise UnsupportedAlgorithmError(name)


_ENGINES = {
    Algorithm.PRIMAL_SIMPLEX: (PrimalSimplex, {}),
    Algorithm.REVISED_PRIMAL_SIMPLEX: (RevisedPrimalSimplex, {}),
    Algorithm.DUAL_SIMPLEX: (DualSimplex, {}),
    Algorithm.BRANCH_AND_BOUND: (BranchAndBound, {}),
    Algorithm.BRANCH_AND_BOUND_KNAPSACK: (BranchAndBoundKnapsack, {}),
    Algorithm.CUTTING_PLANE: (CuttingPlane, {"revised": False}),
    Algorithm.CUTTING_PLANE_REVISED: (CuttingPlane, {"revised": True}),
}


def create_solver(algorithm, step_sink: Optional[StepSink] = None, **options):
    """
    Instantiate the engine for an algorithm.

    Options the engine does not take (e.g. ``max_cuts`` for a simplex) are
    ignored, so one option set can be shared across algorithms.
    """
    algorithm = Algorithm.from_name(algorithm)
    cls, fixed = _ENGINES[algorithm]
    accepted = inspect.signature(cls.__init__).parameters
    kwargs = {k: v for k, v in options.items() if k in accepted and v is not None}
    ignored = sorted(set(options) - set(kwargs))
    if ignored:
        logger.debug(f"{cls.__name__} ignores options: {', '.join(ignored)}")
    kwargs.update(fixed)
    return cls(step_sink=step_sink, **kwargs)


def solve(problem: Problem, algorithm, step_sink: Optional[StepSink] = None, **options) -> SimplexResult:
    """
    Solve ``problem`` with the named algorithm.

    Args:
        problem: Model to solve; never mutated
        algorithm: Algorithm member or a name accepted by Algorithm.from_name
        step_sink: Optional callable receiving (snapshot text, highlight mask)
        **options: tolerance, max_iterations, max_depth, max_cuts, use_revised, ...

    Returns:
        SimplexResult with the objective value in the problem's own sense
    """
    engine = create_solver(algorithm, step_sink=step_sink, **options)
    logger.info(f"Solving {problem!r} with {engine.name}")
    result = engine.solve(problem)
    logger.info(f"{engine.name}: {result.status.value}")
    return result
