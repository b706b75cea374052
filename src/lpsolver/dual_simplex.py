"""
Dual Simplex method on a full tableau.

Accepts >=, = and negative right-hand-side rows: the model is brought to
maximize/<= form with b unrestricted, so the slack basis may be primal
infeasible. The method keeps the objective row non-negative while driving
the negative right-hand sides out of the basis.
"""

import logging
from typing import Optional

from .data_models import Problem, SimplexResult, SolveStatus, StepSink
from .errors import IterationLimitError
from .primal_simplex import MAX_ITERATIONS, run_primal_iterations
from .reporting import emit, format_tableau
from .standardizer import to_less_equal_form
from .tableau import DEFAULT_TOLERANCE, Tableau

logger = logging.getLogger(__name__)


class DualSimplex:
    """
    Tableau Dual Simplex.

    Phases:
    1. Repair: if the objective row has negative entries, run primal pivots
       restricted to rows with non-negative RHS until dual feasible or no
       pivot is possible.
    2. Dual iterations: leaving row = most negative RHS, entering column =
       dual ratio test on that row. No candidate column means INFEASIBLE.
    3. Cleanup: if repair could not reach dual feasibility, the now primal
       feasible tableau is finished with ordinary primal pivots.
    """

    name = "Dual Simplex"

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, max_iterations: int = MAX_ITERATIONS,
                 step_sink: Optional[StepSink] = None):
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.step_sink = step_sink

    def solve(self, problem: Problem) -> SimplexResult:
        model = to_less_equal_form(problem)
        tableau = Tableau.from_problem(model, self.tolerance)

        repairs = self._repair_dual_feasibility(tableau)
        emit(self.step_sink, format_tableau(tableau.T, tableau.basis, tableau.var_names,
                                            f"{self.name} tableau, iteration 0"))

        iteration = 1
        while True:
            leaving = tableau.choose_dual_leaving()
            if leaving == -1:
                break

            entering = tableau.choose_dual_entering(leaving)
            if entering == -1:
                logger.debug(f"{self.name}: row of {tableau.var_names[tableau.basis[leaving - 1]]} "
                             "has no negative entry -> infeasible")
                return tableau.to_result(SolveStatus.INFEASIBLE, problem.sense, model, self.name,
                                         repairs + iteration - 1,
                                         "dual ratio test found no entering column")

            if iteration > self.max_iterations:
                raise IterationLimitError(self.name, self.max_iterations)

            logger.debug(f"{self.name} iter {iteration}: {tableau.var_names[entering]} enters, "
                         f"{tableau.var_names[tableau.basis[leaving - 1]]} leaves")
            tableau.pivot(leaving, entering)
            emit(self.step_sink,
                 format_tableau(tableau.T, tableau.basis, tableau.var_names,
                                f"{self.name} tableau, iteration {iteration}"),
                 tableau.pivot_mask(leaving, entering))
            iteration += 1

        pivots = repairs + iteration - 1
        status = SolveStatus.OPTIMAL
        if not tableau.is_dual_feasible():
            logger.debug(f"{self.name}: primal feasible but not dual feasible, finishing with primal pivots")
            status, extra = run_primal_iterations(tableau, self.max_iterations, self.step_sink,
                                                  self.name, first_iteration=iteration)
            pivots += extra

        logger.debug(f"{self.name} finished: {status.value} after {pivots} pivots")
        return tableau.to_result(status, problem.sense, model, self.name, pivots)

    def _repair_dual_feasibility(self, tableau: Tableau) -> int:
        """Primal pivots that push the objective row towards non-negativity."""
        repairs = 0
        while True:
            entering = tableau.choose_entering()
            if entering == -1:
                break
            leaving = tableau.choose_leaving(entering, feasible_rows_only=True)
            if leaving == -1:
                break
            if repairs >= self.max_iterations:
                raise IterationLimitError(self.name, self.max_iterations)
            tableau.pivot(leaving, entering)
            repairs += 1
        if repairs:
            logger.debug(f"{self.name}: {repairs} repair pivot(s), dual feasible={tableau.is_dual_feasible()}")
        return repairs
