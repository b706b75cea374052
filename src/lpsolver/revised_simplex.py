"""
Revised Primal Simplex (price-out form).

Works on the constraint matrix [A | I] with explicit basic / non-basic index
lists. The basis inverse is recomputed every iteration by Gauss-Jordan
inversion.

Pricing uses the minimization costs c = -c_max, so an improving column is
one with a negative reduced cost r_N = c_N - (c_B B^-1) N.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .data_models import Problem, SimplexResult, SolveStatus, StepSink
from .errors import IterationLimitError
from .primal_simplex import MAX_ITERATIONS
from .reporting import emit, format_matrix, format_vector
from .standardizer import to_canonical_form
from .tableau import DEFAULT_TOLERANCE, Tableau, invert, min_ratio_test, pivot_rule_dantzig, ratio_values

logger = logging.getLogger(__name__)


@dataclass
class RevisedIteration:
    """
    State of one revised-simplex iteration, as published to the step sink.

    Iteration 0 carries only the initial basis, B^-1, x_B and z.
    """
    iteration: int
    basis: List[int]
    nonbasis: List[int]
    B_inv: np.ndarray
    x_B: np.ndarray
    z: float
    reduced_costs: Optional[np.ndarray] = None  # aligned with the non-basis before the swap
    entering: Optional[int] = None
    direction: Optional[np.ndarray] = None
    ratios: Optional[np.ndarray] = None
    leaving: Optional[int] = None


class RevisedPrimalSimplex:
    """
    Revised Primal Simplex with Dantzig pricing.

    ``history`` holds one RevisedIteration per iteration of the last solve.
    """

    name = "Revised Primal Simplex"

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE, max_iterations: int = MAX_ITERATIONS,
                 step_sink: Optional[StepSink] = None):
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.step_sink = step_sink
        self.history: List[RevisedIteration] = []

    def solve(self, problem: Problem) -> SimplexResult:
        model = to_canonical_form(problem, self.name)
        m, n = model.num_constraints, model.num_vars
        A = np.hstack([np.array([c.a for c in model.constraints]).reshape(m, n), np.eye(m)])
        b = np.array([c.b for c in model.constraints], dtype=float)
        c = np.concatenate([-model.objective, np.zeros(m)])
        names = [f"x{j + 1}" for j in range(n)] + [f"s{i + 1}" for i in range(m)]

        basis = list(range(n, n + m))
        nonbasis = list(range(n))
        B_inv = invert(A[:, basis], self.tolerance)
        x_B = B_inv @ b
        z = -float(c[basis] @ x_B)

        self.history = []
        self._publish(RevisedIteration(0, list(basis), list(nonbasis), B_inv, x_B, z), names)

        iteration = 1
        while True:
            pi = c[basis] @ B_inv
            r_N = c[nonbasis] - pi @ A[:, nonbasis]
            entering_pos = pivot_rule_dantzig(r_N, self.tolerance)
            if entering_pos == -1:
                return self._finish(SolveStatus.OPTIMAL, model, problem, A, b, c, basis, B_inv,
                                    names, iteration - 1)

            entering = nonbasis[entering_pos]
            d = B_inv @ A[:, entering]
            ratios = ratio_values(x_B, d, self.tolerance)
            leaving_pos = min_ratio_test(x_B, d, self.tolerance)
            if leaving_pos == -1:
                logger.debug(f"{self.name}: direction of {names[entering]} has no positive entry -> unbounded")
                return self._finish(SolveStatus.UNBOUNDED, model, problem, A, b, c, basis, B_inv,
                                    names, iteration - 1)

            if iteration > self.max_iterations:
                raise IterationLimitError(self.name, self.max_iterations)

            leaving = basis[leaving_pos]
            basis[leaving_pos] = entering
            nonbasis[entering_pos] = leaving
            nonbasis.sort()
            logger.debug(f"{self.name} iter {iteration}: {names[entering]} enters, {names[leaving]} leaves")

            B_inv = invert(A[:, basis], self.tolerance)
            x_B = B_inv @ b
            z = -float(c[basis] @ x_B)

            self._publish(
                RevisedIteration(iteration, list(basis), list(nonbasis), B_inv, x_B, z,
                                 reduced_costs=r_N, entering=entering, direction=d,
                                 ratios=ratios, leaving=leaving),
                names, pivot=(leaving_pos + 1, entering), shape=(m + 1, n + m + 1))
            iteration += 1

    def _finish(self, status: SolveStatus, model: Problem, problem: Problem, A: np.ndarray, b: np.ndarray,
                c: np.ndarray, basis: List[int], B_inv: np.ndarray, names: List[str],
                iterations: int) -> SimplexResult:
        """Build the equivalent full tableau from B^-1 and package the result."""
        m = len(basis)
        T = np.zeros((m + 1, A.shape[1] + 1))
        T[1:, :-1] = B_inv @ A
        T[1:, -1] = B_inv @ b
        pi = c[basis] @ B_inv
        T[0, :-1] = c - pi @ A
        T[0, basis] = 0.0
        T[0, -1] = -float(c[basis] @ T[1:, -1])
        tableau = Tableau(T, np.array(basis, dtype=int), names, model.num_vars, self.tolerance)
        logger.debug(f"{self.name} finished: {status.value} after {iterations} iterations")
        return tableau.to_result(status, problem.sense, model, self.name, iterations)

    def _publish(self, record: RevisedIteration, names: List[str], pivot=None, shape=None) -> None:
        self.history.append(record)
        if self.step_sink is None:
            return
        lines = [f"=== {self.name} iteration {record.iteration} ===",
                 "Basis: " + ", ".join(names[k] for k in record.basis),
                 "Nonbasic: " + ", ".join(names[k] for k in record.nonbasis),
                 "B^-1:", format_matrix(record.B_inv),
                 format_vector("x_B", record.x_B),
                 f"z = {record.z:.4g}"]
        if record.reduced_costs is not None:
            lines.append("Reduced costs r_N = c_N - c_B B^-1 N (before the swap)")
            lines.append(format_vector("r_N", record.reduced_costs))
        if record.entering is not None:
            lines.append(f"Entering: {names[record.entering]}, leaving: {names[record.leaving]}")
            lines.append(format_vector("d = B^-1 a_q", record.direction))
            lines.append(format_vector("ratios", record.ratios))
        mask = None
        if pivot is not None:
            mask = np.zeros(shape, dtype=bool)
            mask[pivot[0], :] = True
            mask[:, pivot[1]] = True
        emit(self.step_sink, "\n".join(lines) + "\n", mask)
