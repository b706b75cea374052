"""
Data models for linear and integer programs and their solve results.

    max/min cᵀx
    s.t. a_i·x (<=, >=, =) b_i
         x ≥ 0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from .errors import ModelError

# (snapshot text, optional highlight mask over the tableau cells)
StepSink = Callable[[str, Optional[np.ndarray]], None]


class Sense(Enum):
    MAXIMIZE = "max"
    MINIMIZE = "min"


class Relation(Enum):
    LE = "<="
    GE = ">="
    EQ = "="

    def holds(self, lhs: float, rhs: float, tol: float) -> bool:
        if self is Relation.LE:
            return lhs <= rhs + tol
        if self is Relation.GE:
            return lhs >= rhs - tol
        return abs(lhs - rhs) <= tol


class SolveStatus(Enum):
    OPTIMAL = "OPTIMAL"
    UNBOUNDED = "UNBOUNDED"
    INFEASIBLE = "INFEASIBLE"
    INCOMPLETE = "INCOMPLETE"
    OPTIMAL_INTEGER = "OPTIMAL INTEGER"
    NO_FEASIBLE_SOLUTION = "NO FEASIBLE SOLUTION"


@dataclass
class Constraint:
    """A single row a·x (relation) b."""
    a: np.ndarray
    relation: Relation
    b: float

    def __post_init__(self):
        self.a = np.array(self.a, dtype=float)
        self.b = float(self.b)
        if self.a.ndim != 1:
            raise ModelError(f"Constraint coefficients must be a vector, got shape {self.a.shape}")

    def clone(self) -> "Constraint":
        return Constraint(a=self.a.copy(), relation=self.relation, b=self.b)

    def negated(self) -> "Constraint":
        """Multiply both sides by -1, flipping the relation."""
        flipped = {Relation.LE: Relation.GE, Relation.GE: Relation.LE, Relation.EQ: Relation.EQ}
        return Constraint(a=-self.a, relation=flipped[self.relation], b=-self.b)

    def is_satisfied(self, x: np.ndarray, tol: float = 1e-6) -> bool:
        return self.relation.holds(float(self.a @ x), self.b, tol)

    def __repr__(self) -> str:
        terms = " ".join(f"{v:+g}x{j + 1}" for j, v in enumerate(self.a) if v != 0) or "0"
        return f"Constraint({terms} {self.relation.value} {self.b:g})"


@dataclass
class Problem:
    """
    Linear (or integer) program over non-negative decision variables.

    Algorithms never mutate a Problem they receive; they work on clones so
    that search procedures can backtrack freely.
    """
    sense: Sense
    objective: np.ndarray
    constraints: List[Constraint] = field(default_factory=list)

    def __post_init__(self):
        self.objective = np.array(self.objective, dtype=float)
        self.validate()

    @property
    def num_vars(self) -> int:
        return len(self.objective)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def validate(self) -> None:
        """Check dimensions and finiteness of every row."""
        if self.objective.ndim != 1 or self.num_vars == 0:
            raise ModelError("Objective must be a non-empty coefficient vector")
        if not np.all(np.isfinite(self.objective)):
            raise ModelError("Objective contains non-finite coefficients")
        for i, cons in enumerate(self.constraints):
            if len(cons.a) != self.num_vars:
                raise ModelError(
                    f"Constraint {i + 1} has {len(cons.a)} coefficients, expected {self.num_vars}"
                )
            if not (np.all(np.isfinite(cons.a)) and np.isfinite(cons.b)):
                raise ModelError(f"Constraint {i + 1} contains non-finite values")

    def clone(self) -> "Problem":
        return Problem(
            sense=self.sense,
            objective=self.objective.copy(),
            constraints=[c.clone() for c in self.constraints],
        )

    def with_constraint(self, constraint: Constraint) -> "Problem":
        """Clone of this problem with one extra row appended."""
        child = self.clone()
        child.constraints.append(constraint.clone())
        child.validate()
        return child

    def has_relation(self, *relations: Relation) -> bool:
        return any(c.relation in relations for c in self.constraints)

    def evaluate(self, x: Sequence[float]) -> float:
        return float(self.objective @ np.asarray(x, dtype=float))

    def is_feasible(self, x: Sequence[float], tol: float = 1e-6) -> bool:
        """True when x satisfies every row and non-negativity."""
        x = np.asarray(x, dtype=float)
        if len(x) != self.num_vars or np.any(x < -tol):
            return False
        return all(c.is_satisfied(x, tol) for c in self.constraints)

    @classmethod
    def from_arrays(
        cls,
        sense: Sense,
        c: Sequence[float],
        A: Sequence[Sequence[float]],
        relations: Sequence[Relation],
        b: Sequence[float],
    ) -> "Problem":
        """Build a problem from dense arrays, one relation per row."""
        A = np.atleast_2d(np.array(A, dtype=float)) if len(A) else np.zeros((0, len(c)))
        if not (len(A) == len(relations) == len(b)):
            raise ModelError("A, relations and b must have the same number of rows")
        constraints = [Constraint(a=row, relation=rel, b=rhs) for row, rel, rhs in zip(A, relations, b)]
        return cls(sense=sense, objective=np.array(c, dtype=float), constraints=constraints)

    def __repr__(self) -> str:
        return f"Problem({self.sense.value}, vars={self.num_vars}, constraints={self.num_constraints})"


@dataclass(frozen=True)
class SimplexResult:
    """
    Outcome of one solve call.

    ``objective_value`` is expressed in the caller's sense (a minimization
    reports the minimum, not its negated maximize form). ``tableau``,
    ``basis`` and ``var_names`` describe the final tableau; together with
    ``standard_form`` (whose rows map to the slack columns) they are what a
    sensitivity analysis needs.
    """
    status: SolveStatus
    objective_value: float = float("nan")
    solution: Optional[np.ndarray] = None
    tableau: Optional[np.ndarray] = None
    basis: Optional[np.ndarray] = None
    var_names: List[str] = field(default_factory=list)
    standard_form: Optional[Problem] = None
    iterations: int = 0
    algorithm: str = ""
    message: str = ""

    @property
    def is_optimal(self) -> bool:
        return self.status in (SolveStatus.OPTIMAL, SolveStatus.OPTIMAL_INTEGER)

    def summary(self) -> str:
        lines = [f"Status: {self.status.value}"]
        if self.solution is not None and not np.isnan(self.objective_value):
            lines.append(f"z* = {self.objective_value:.6g}")
            lines.append("x* = [" + ", ".join(f"{v:.6g}" for v in self.solution) + "]")
        if self.message:
            lines.append(self.message)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"SimplexResult(algorithm={self.algorithm}, status={self.status.value}, "
                f"obj={self.objective_value:.6g}, iters={self.iterations})")
