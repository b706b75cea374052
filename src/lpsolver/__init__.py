"""
Simplex-family solvers for small linear and integer programs.

This package provides tableau-level implementations of:
- Primal Simplex Method
- Revised Primal Simplex Method
- Dual Simplex Method
- Branch-and-Bound (general integer programs and 0/1 knapsack)
- Gomory Cutting-Plane Method
"""

from .branch_and_bound import BranchAndBound
from .cutting_plane import CuttingPlane, gomory_cut
from .data_models import Constraint, Problem, Relation, Sense, SimplexResult, SolveStatus, StepSink
from .dual_simplex import DualSimplex
from .errors import (IterationLimitError, ModelError, NumericalError, SingularBasisError, SolverError,
                     UnsupportedAlgorithmError, ZeroPivotError)
from .knapsack import BranchAndBoundKnapsack
from .parser import parse_problem, parse_problem_file
from .primal_simplex import PrimalSimplex
from .revised_simplex import RevisedIteration, RevisedPrimalSimplex
from .solver import Algorithm, create_solver, solve
from .standardizer import needs_dual_simplex, to_canonical_form, to_less_equal_form

__version__ = "1.0.0"

__all__ = [
    "Algorithm",
    "BranchAndBound",
    "BranchAndBoundKnapsack",
    "Constraint",
    "CuttingPlane",
    "DualSimplex",
    "IterationLimitError",
    "ModelError",
    "NumericalError",
    "PrimalSimplex",
    "Problem",
    "Relation",
    "RevisedIteration",
    "RevisedPrimalSimplex",
    "Sense",
    "SimplexResult",
    "SingularBasisError",
    "SolveStatus",
    "SolverError",
    "StepSink",
    "UnsupportedAlgorithmError",
    "ZeroPivotError",
    "create_solver",
    "gomory_cut",
    "needs_dual_simplex",
    "parse_problem",
    "parse_problem_file",
    "solve",
    "to_canonical_form",
    "to_less_equal_form",
]
