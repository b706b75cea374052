"""
Tableau engine: pivot primitives shared by the tableau-based simplex methods.

Layout of a tableau for a model with n decision variables and m rows:

    row 0        [ -c_1 ... -c_n | 0 ... 0 | z   ]   objective row
    rows 1..m    [  a_i1 ... a_in | e_i     | b_i ]   constraint rows

``basis[i]`` is the column that is basic in tableau row ``i + 1``.
"""

from typing import List, Optional

import numpy as np

from .data_models import Problem, Relation, Sense, SimplexResult, SolveStatus
from .errors import ModelError, SingularBasisError, ZeroPivotError

DEFAULT_TOLERANCE = 1e-9


def gauss_jordan_pivot(matrix: np.ndarray, row: int, col: int, tolerance: float = DEFAULT_TOLERANCE) -> None:
    """
    Pivot ``matrix`` in place on (row, col).

    The pivot row is divided by the pivot element, then the pivot column is
    eliminated from every other row.

    Raises:
        ZeroPivotError: if |matrix[row, col]| <= tolerance
    """
    pivot = matrix[row, col]
    if abs(pivot) <= tolerance:
        raise ZeroPivotError(f"Pivot element at ({row}, {col}) is numerically zero ({pivot:.3g})")
    matrix[row, :] = matrix[row, :] / pivot
    factors = matrix[:, col].copy()
    factors[row] = 0.0
    matrix -= np.outer(factors, matrix[row, :])
    # Exact unit column; removes round-off left by the elimination.
    matrix[:, col] = 0.0
    matrix[row, col] = 1.0


def invert(matrix: np.ndarray, tolerance: float = DEFAULT_TOLERANCE) -> np.ndarray:
    """
    Invert a square matrix by Gauss-Jordan elimination on [M | I].

    Partial pivoting (largest magnitude in the column) is used for stability.

    Raises:
        SingularBasisError: if the matrix is singular
    """
    m = matrix.shape[0]
    if matrix.shape != (m, m):
        raise SingularBasisError(f"Cannot invert non-square matrix of shape {matrix.shape}")
    work = np.hstack([np.array(matrix, dtype=float), np.eye(m)])
    for col in range(m):
        pivot_row = col + int(np.argmax(np.abs(work[col:, col])))
        if abs(work[pivot_row, col]) <= tolerance:
            raise SingularBasisError(f"Basis matrix is singular (column {col})")
        if pivot_row != col:
            work[[col, pivot_row]] = work[[pivot_row, col]]
        gauss_jordan_pivot(work, col, col, tolerance)
    return work[:, m:]


def pivot_rule_dantzig(r: np.ndarray, tolerance: float = DEFAULT_TOLERANCE) -> int:
    """
    Dantzig's rule: index of the most negative entry of r.

    Ties go to the lowest index. Returns -1 when no entry is below -tolerance.
    """
    best = -1
    best_value = -tolerance
    for j, value in enumerate(r):
        if value < best_value:
            best_value = value
            best = j
    return best


def min_ratio_test(rhs: np.ndarray, column: np.ndarray, tolerance: float = DEFAULT_TOLERANCE,
                   eligible: Optional[np.ndarray] = None) -> int:
    """
    Primal ratio test: position minimizing rhs_i / column_i over column_i > tolerance.

    A later row replaces the incumbent only if its ratio is smaller by more
    than ``tolerance``, so ties go to the first occurrence. ``eligible`` can
    further restrict the candidate rows. Returns -1 if no row qualifies.
    """
    best = -1
    best_ratio = np.inf
    for i, (b_i, d_i) in enumerate(zip(rhs, column)):
        if d_i <= tolerance or (eligible is not None and not eligible[i]):
            continue
        ratio = b_i / d_i
        if ratio < best_ratio - tolerance:
            best_ratio = ratio
            best = i
    return best


def ratio_values(rhs: np.ndarray, column: np.ndarray, tolerance: float = DEFAULT_TOLERANCE) -> np.ndarray:
    """Per-row ratios of the primal ratio test, +inf where the row is not eligible."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(column > tolerance, rhs / np.where(column > tolerance, column, 1.0), np.inf)


class Tableau:
    """
    Dense simplex tableau with its basis.

    Attributes:
        T: (m+1) x (n+m+1) matrix, row 0 is the objective row
        basis: basis[i] is the column basic in row i + 1
        var_names: names of the n + m columns (x1..xn, s1..sm)
        num_vars: number of decision variables n
    """

    def __init__(self, T: np.ndarray, basis: np.ndarray, var_names: List[str], num_vars: int,
                 tolerance: float = DEFAULT_TOLERANCE):
        self.T = T
        self.basis = basis
        self.var_names = var_names
        self.num_vars = num_vars
        self.tolerance = tolerance

    @classmethod
    def from_problem(cls, model: Problem, tolerance: float = DEFAULT_TOLERANCE) -> "Tableau":
        """
        Build the initial slack-basis tableau of a maximize, all-<= model.

        Args:
            model: Standardized problem (maximize, <= rows only)
            tolerance: Numerical tolerance for pivoting decisions
        """
        if model.has_relation(Relation.GE, Relation.EQ):
            raise ModelError("Tableau construction requires a model with <= rows only")
        m, n = model.num_constraints, model.num_vars
        T = np.zeros((m + 1, n + m + 1))
        T[0, :n] = -model.objective
        for i, cons in enumerate(model.constraints):
            T[i + 1, :n] = cons.a
            T[i + 1, n + i] = 1.0
            T[i + 1, -1] = cons.b
        basis = np.arange(n, n + m, dtype=int)
        var_names = [f"x{j + 1}" for j in range(n)] + [f"s{i + 1}" for i in range(m)]
        return cls(T, basis, var_names, n, tolerance)

    @property
    def num_columns(self) -> int:
        return self.T.shape[1] - 1

    @property
    def objective_row(self) -> np.ndarray:
        return self.T[0, :-1]

    @property
    def rhs(self) -> np.ndarray:
        return self.T[1:, -1]

    @property
    def objective_value(self) -> float:
        """Current objective value in maximize form."""
        return float(self.T[0, -1])

    def is_dual_feasible(self) -> bool:
        return bool(np.all(self.objective_row >= -self.tolerance))

    def choose_entering(self) -> int:
        """Most negative objective-row column, -1 when optimal."""
        return pivot_rule_dantzig(self.objective_row, self.tolerance)

    def choose_leaving(self, entering: int, feasible_rows_only: bool = False) -> int:
        """
        Tableau row (1-based) selected by the min-ratio test, -1 if unbounded.

        Args:
            entering: Entering column
            feasible_rows_only: Skip rows with negative right-hand side
        """
        eligible = self.rhs >= -self.tolerance if feasible_rows_only else None
        pos = min_ratio_test(self.rhs, self.T[1:, entering], self.tolerance, eligible)
        return pos + 1 if pos >= 0 else -1

    def choose_dual_leaving(self) -> int:
        """Tableau row (1-based) with the most negative RHS, -1 if primal feasible."""
        pos = pivot_rule_dantzig(self.rhs, self.tolerance)
        return pos + 1 if pos >= 0 else -1

    def choose_dual_entering(self, row: int) -> int:
        """
        Dual ratio test on tableau row ``row``.

        Among columns with a negative entry in the row, picks the one
        minimizing objective_row[j] / |row[j]|; -1 if there is none.
        """
        best = -1
        best_ratio = np.inf
        for j in range(self.num_columns):
            a = self.T[row, j]
            if a < -self.tolerance:
                ratio = self.T[0, j] / -a
                if ratio < best_ratio - self.tolerance:
                    best_ratio = ratio
                    best = j
        return best

    def pivot(self, row: int, col: int) -> None:
        """Gauss-Jordan pivot on tableau row ``row`` (1-based) and column ``col``."""
        gauss_jordan_pivot(self.T, row, col, self.tolerance)
        self.basis[row - 1] = col

    def pivot_mask(self, row: int, col: int) -> np.ndarray:
        """Boolean mask highlighting the pivot row and column."""
        mask = np.zeros(self.T.shape, dtype=bool)
        mask[row, :] = True
        mask[:, col] = True
        return mask

    def primal_solution(self) -> np.ndarray:
        """Decision-variable values; non-basic variables are zero."""
        x = np.zeros(self.num_vars)
        for i, col in enumerate(self.basis):
            if col < self.num_vars:
                x[col] = self.T[i + 1, -1]
        return x

    def to_result(self, status: SolveStatus, sense: Sense, standard_form: Problem,
                  algorithm: str, iterations: int, message: str = "") -> SimplexResult:
        """
        Package the tableau as a SimplexResult.

        The objective is converted back to the caller's ``sense``; UNBOUNDED
        reports an infinite objective and INFEASIBLE a NaN, neither with a
        solution vector.
        """
        sign = 1.0 if sense is Sense.MAXIMIZE else -1.0
        if status is SolveStatus.OPTIMAL:
            value = sign * self.objective_value
            solution = self.primal_solution()
        elif status is SolveStatus.UNBOUNDED:
            value = sign * np.inf
            solution = None
        else:
            value = float("nan")
            solution = None
        return SimplexResult(
            status=status,
            objective_value=float(value),
            solution=solution,
            tableau=self.T.copy(),
            basis=self.basis.copy(),
            var_names=list(self.var_names),
            standard_form=standard_form,
            iterations=iterations,
            algorithm=algorithm,
            message=message,
        )
