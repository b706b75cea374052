"""
Gomory fractional cutting-plane method for pure integer programs.

Each round solves the LP relaxation, picks the first fractional decision
variable and adds the Gomory cut of the tableau row in which it is basic.
Cuts are valid for every integer point when the model data is integral.
"""

import logging
from typing import Optional

import numpy as np

from .data_models import Constraint, Problem, Relation, SimplexResult, SolveStatus, StepSink
from .dual_simplex import DualSimplex
from .errors import NumericalError
from .primal_simplex import MAX_ITERATIONS, PrimalSimplex
from .reporting import emit, format_problem
from .revised_simplex import RevisedPrimalSimplex
from .standardizer import needs_dual_simplex
from .tableau import DEFAULT_TOLERANCE
from .utils import INTEGRALITY_TOLERANCE, first_fractional_index, fractional_part, round_integral

logger = logging.getLogger(__name__)

MAX_CUTS = 50


def gomory_cut(lp_result: SimplexResult, row: int, tolerance: float = DEFAULT_TOLERANCE) -> Constraint:
    """
    Gomory fractional cut from tableau row ``row`` of an optimal LP result.

    With f_j the fractional parts of the row entries (decision and slack
    columns) and f_0 that of its right-hand side, the cut is

        sum_j f_j w_j >= f_0.

    Slacks are substituted from the standardized rows (s = b - A x) so the
    returned constraint is a <= row over the decision variables only.

    Args:
        lp_result: Optimal result carrying tableau and standard_form
        row: Tableau row (1-based) whose basic variable is fractional
        tolerance: Fractional parts within tolerance of 0 or 1 count as 0
    """
    std = lp_result.standard_form
    T = lp_result.tableau
    n, m = std.num_vars, std.num_constraints
    f = np.array([fractional_part(v, tolerance) for v in T[row, :n + m]])
    f0 = fractional_part(T[row, -1], tolerance)
    A = np.array([c.a for c in std.constraints]).reshape(m, n)
    b = np.array([c.b for c in std.constraints], dtype=float)

    coefs = f[n:] @ A - f[:n]
    rhs = float(f[n:] @ b - f0)
    # Integral data gives integral cuts; strip round-off so later slacks stay integral.
    snapped = np.round(coefs)
    coefs = np.where(np.abs(coefs - snapped) <= 1e-9, snapped, coefs) + 0.0
    if abs(rhs - round(rhs)) <= 1e-9:
        rhs = float(round(rhs))
    return Constraint(a=coefs, relation=Relation.LE, b=rhs)


class CuttingPlane:
    """
    Gomory cutting-plane driver.

    The relaxation is solved with the Primal Simplex (or the Revised Primal
    Simplex when ``revised=True``); once cuts make the slack basis infeasible
    the Dual Simplex takes over.
    """

    def __init__(self, revised: bool = False, tolerance: float = INTEGRALITY_TOLERANCE,
                 max_cuts: int = MAX_CUTS, max_iterations: int = MAX_ITERATIONS,
                 step_sink: Optional[StepSink] = None):
        """
        Args:
            revised: Use the Revised Primal Simplex for canonical relaxations
            tolerance: Integrality tolerance of the decision variables
            max_cuts: Number of cuts after which the run reports INCOMPLETE
            max_iterations: Iteration cap handed to the LP engines
            step_sink: Optional progress sink
        """
        self.revised = revised
        self.tolerance = tolerance
        self.max_cuts = max_cuts
        self.max_iterations = max_iterations
        self.step_sink = step_sink
        self.name = "Cutting Plane (Revised)" if revised else "Cutting Plane"
        self.cuts = []

    def _lp_solver(self, model: Problem):
        if needs_dual_simplex(model):
            return DualSimplex(max_iterations=self.max_iterations, step_sink=self.step_sink)
        if self.revised:
            return RevisedPrimalSimplex(max_iterations=self.max_iterations, step_sink=self.step_sink)
        return PrimalSimplex(max_iterations=self.max_iterations, step_sink=self.step_sink)

    def solve(self, problem: Problem) -> SimplexResult:
        model = problem.clone()
        self.cuts = []
        logger.info(f"Starting {self.name}: {problem.num_vars} variables, {problem.num_constraints} constraints")
        emit(self.step_sink, f"=== Gomory {self.name} ===\n{format_problem(problem)}\n  x integer\n")

        for round_no in range(1, self.max_cuts + 2):
            solver = self._lp_solver(model)
            lp_result = solver.solve(model)
            emit(self.step_sink, f"--- Round {round_no} ({solver.name}) ---\n{lp_result.summary()}\n")

            if lp_result.status is not SolveStatus.OPTIMAL:
                logger.info(f"{self.name}: LP relaxation {lp_result.status.value} in round {round_no}; stopping")
                return self._result(lp_result, lp_result.status,
                                    f"LP relaxation {lp_result.status.value}; cutting stopped")

            x = lp_result.solution
            frac_index = first_fractional_index(x, self.tolerance)
            if frac_index == -1:
                logger.info(f"{self.name}: integer optimum {lp_result.objective_value:.6g} after {len(self.cuts)} cuts")
                return self._result(lp_result, SolveStatus.OPTIMAL_INTEGER,
                                    f"integer solution after {len(self.cuts)} cut(s)")

            if len(self.cuts) >= self.max_cuts:
                break

            rows = np.flatnonzero(lp_result.basis == frac_index)
            if len(rows) == 0:
                raise NumericalError(f"Fractional variable x{frac_index + 1} is not basic")

            cut = gomory_cut(lp_result, int(rows[0]) + 1)
            model.constraints.append(cut)
            self.cuts.append(cut)
            logger.debug(f"{self.name} round {round_no}: x{frac_index + 1} = {x[frac_index]:.6g}, added {cut}")
            emit(self.step_sink, f"Added Gomory cut from x{frac_index + 1} = {x[frac_index]:.4g}: {cut}\n")

        logger.warning(f"{self.name}: cut limit of {self.max_cuts} reached without an integer solution")
        return self._result(lp_result, SolveStatus.INCOMPLETE,
                            f"cut limit of {self.max_cuts} reached; solution may still be fractional")

    def _result(self, lp_result: SimplexResult, status: SolveStatus, message: str) -> SimplexResult:
        solution = lp_result.solution
        if status is SolveStatus.OPTIMAL_INTEGER:
            solution = round_integral(solution)
        return SimplexResult(
            status=status,
            objective_value=lp_result.objective_value,
            solution=solution,
            tableau=lp_result.tableau,
            basis=lp_result.basis,
            var_names=lp_result.var_names,
            standard_form=lp_result.standard_form,
            iterations=len(self.cuts),
            algorithm=self.name,
            message=message,
        )
