"""
Primal Simplex method on a full tableau.

Requires a model whose slack basis is feasible (all rows <= with b >= 0
after converting to maximization); anything else is rejected with a
ModelError that points to the Dual Simplex.
"""

import logging
from typing import Optional, Tuple

from .data_models import Problem, SimplexResult, SolveStatus, StepSink
from .errors import IterationLimitError
from .reporting import emit, format_tableau
from .standardizer import to_canonical_form
from .tableau import DEFAULT_TOLERANCE, Tableau

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10_000


def run_primal_iterations(
    tableau: Tableau,
    max_iterations: int,
    step_sink: Optional[StepSink] = None,
    method: str = "Primal Simplex",
    first_iteration: int = 1,
) -> Tuple[SolveStatus, int]:
    """
    Pivot a primal-feasible tableau until optimal or unbounded.

    Args:
        tableau: Tableau to pivot in place
        max_iterations: Cap on the iteration counter
        step_sink: Optional progress sink, called once per pivot
        method: Name used in snapshots and errors
        first_iteration: Number of the first pivot (for continued runs)

    Returns:
        Tuple of (status, number of pivots performed)

    Raises:
        IterationLimitError: if the cap is exceeded
    """
    iteration = first_iteration
    pivots = 0
    while True:
        entering = tableau.choose_entering()
        if entering == -1:
            return SolveStatus.OPTIMAL, pivots

        leaving = tableau.choose_leaving(entering)
        if leaving == -1:
            logger.debug(f"{method}: column {tableau.var_names[entering]} has no positive entry -> unbounded")
            return SolveStatus.UNBOUNDED, pivots

        if iteration > max_iterations:
            raise IterationLimitError(method, max_iterations)

        logger.debug(f"{method} iter {iteration}: {tableau.var_names[entering]} enters, "
                     f"{tableau.var_names[tableau.basis[leaving - 1]]} leaves")
        tableau.pivot(leaving, entering)
        emit(step_sink,
             format_tableau(tableau.T, tableau.basis, tableau.var_names, f"{method} tableau, iteration {iteration}"),
             tableau.pivot_mask(leaving, entering))
        iteration += 1
        pivots += 1


class PrimalSimplex:
    """
    Tableau Primal Simplex with Dantzig's entering rule and a first-occurrence
    min-ratio test.
    """

    name = "Primal Simplex"

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, max_iterations: int = MAX_ITERATIONS,
                 step_sink: Optional[StepSink] = None):
        """
        Args:
            tolerance: Numerical tolerance for sign and ratio decisions
            max_iterations: Iteration cap; exceeding it raises IterationLimitError
            step_sink: Optional progress sink receiving one snapshot per pivot
        """
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.step_sink = step_sink

    def solve(self, problem: Problem) -> SimplexResult:
        model = to_canonical_form(problem, self.name)
        tableau = Tableau.from_problem(model, self.tolerance)
        emit(self.step_sink, format_tableau(tableau.T, tableau.basis, tableau.var_names,
                                            f"{self.name} tableau, iteration 0"))

        status, pivots = run_primal_iterations(tableau, self.max_iterations, self.step_sink, self.name)
        result = tableau.to_result(status, problem.sense, model, self.name, pivots)
        logger.debug(f"{self.name} finished: {status.value} after {pivots} pivots")
        return result
