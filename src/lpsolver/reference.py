"""
Cross-check against HiGHS through scipy.optimize.

Used by the CLI ``--check`` flag and by the test suite; the engines
themselves never depend on scipy.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, linprog, milp

from .data_models import Problem, Relation, Sense, SimplexResult, SolveStatus

logger = logging.getLogger(__name__)


def _safe_float(x) -> float:
    if x is None:
        return float("nan")
    return float(x)


def _normalize_status(status: int, message: Optional[str], integer: bool) -> SolveStatus:
    """Map a scipy status code / message onto SolveStatus."""
    if status == 0:
        return SolveStatus.OPTIMAL_INTEGER if integer else SolveStatus.OPTIMAL
    low = (message or "").lower()
    if status == 2 or "infeasible" in low:
        return SolveStatus.NO_FEASIBLE_SOLUTION if integer else SolveStatus.INFEASIBLE
    if status == 3 or "unbounded" in low:
        return SolveStatus.UNBOUNDED
    return SolveStatus.INCOMPLETE


@dataclass
class ReferenceSolution:
    status: SolveStatus
    objective_value: float
    solution: Optional[np.ndarray]
    message: str = ""

    def agrees_with(self, result: SimplexResult, tol: float = 1e-6) -> bool:
        """Same status family and, when optimal, the same objective value."""
        if self.status is not result.status:
            return False
        if self.status in (SolveStatus.OPTIMAL, SolveStatus.OPTIMAL_INTEGER):
            return abs(self.objective_value - result.objective_value) <= tol * max(1.0, abs(self.objective_value))
        return True


def solve_with_highs(problem: Problem, integer: bool = False, binary: bool = False) -> ReferenceSolution:
    """
    Solve ``problem`` with HiGHS.

    Args:
        problem: Model to solve, x >= 0 implied
        integer: Require all variables to be integral (scipy.optimize.milp)
        binary: Additionally bound every variable by 1 (0/1 models such as knapsack)

    Returns:
        ReferenceSolution with the objective in the problem's own sense
    """
    n = problem.num_vars
    sign = -1.0 if problem.sense is Sense.MAXIMIZE else 1.0
    c = sign * problem.objective

    integer = integer or binary
    if integer:
        constraints = None
        if problem.constraints:
            A = np.array([cons.a for cons in problem.constraints])
            b = np.array([cons.b for cons in problem.constraints])
            lb = np.where([cons.relation is Relation.LE for cons in problem.constraints], -np.inf, b)
            ub = np.where([cons.relation is Relation.GE for cons in problem.constraints], np.inf, b)
            constraints = LinearConstraint(A, lb, ub)
        res = milp(c, integrality=np.ones(n), bounds=Bounds(0, 1 if binary else np.inf), constraints=constraints)
    else:
        A_ub = [cons.a if cons.relation is Relation.LE else -cons.a
                for cons in problem.constraints if cons.relation is not Relation.EQ]
        b_ub = [cons.b if cons.relation is Relation.LE else -cons.b
                for cons in problem.constraints if cons.relation is not Relation.EQ]
        A_eq = [cons.a for cons in problem.constraints if cons.relation is Relation.EQ]
        b_eq = [cons.b for cons in problem.constraints if cons.relation is Relation.EQ]
        res = linprog(c, A_ub=np.array(A_ub) if A_ub else None, b_ub=np.array(b_ub) if b_ub else None,
                      A_eq=np.array(A_eq) if A_eq else None, b_eq=np.array(b_eq) if b_eq else None,
                      bounds=(0, None), method="highs", options={"disp": False})

    status = _normalize_status(res.status, res.message, integer)
    logger.debug(f"HiGHS ({'milp' if integer else 'linprog'}): {status.value} - {res.message}")

    if status in (SolveStatus.OPTIMAL, SolveStatus.OPTIMAL_INTEGER):
        x = np.asarray(res.x, dtype=float)
        if integer:
            x = np.round(x) + 0.0
        return ReferenceSolution(status, sign * _safe_float(res.fun), x, str(res.message))
    if status is SolveStatus.UNBOUNDED:
        return ReferenceSolution(status, -sign * np.inf, None, str(res.message))
    return ReferenceSolution(status, float("nan"), None, str(res.message))
