"""
Standard-form transformations.

Every function here is pure: it returns a new Problem and leaves its
argument untouched.
"""

import logging
from typing import List

from .data_models import Constraint, Problem, Relation, Sense
from .errors import ModelError

logger = logging.getLogger(__name__)

RHS_TOLERANCE = 1e-9


def to_maximization(problem: Problem) -> Problem:
    """Negate the objective of a minimization so the result maximizes."""
    model = problem.clone()
    if model.sense is Sense.MINIMIZE:
        model.objective = -model.objective
        model.sense = Sense.MAXIMIZE
    return model


def split_equalities(problem: Problem) -> Problem:
    """
    Replace every equality row by the pair a·x <= b and -a·x <= -b.

    Row order is preserved; the pair takes the place of the original row.
    """
    model = problem.clone()
    rows: List[Constraint] = []
    for cons in model.constraints:
        if cons.relation is Relation.EQ:
            rows.append(Constraint(a=cons.a.copy(), relation=Relation.LE, b=cons.b))
            rows.append(Constraint(a=-cons.a, relation=Relation.LE, b=-cons.b))
        else:
            rows.append(cons)
    model.constraints = rows
    return model


def to_less_equal_form(problem: Problem) -> Problem:
    """
    Maximize form with <= rows only; right-hand sides may be negative.

    This is the starting point of the Dual Simplex, which repairs primal
    infeasibility of the slack basis itself.
    """
    model = split_equalities(to_maximization(problem))
    model.constraints = [
        cons.negated() if cons.relation is Relation.GE else cons
        for cons in model.constraints
    ]
    return model


def to_canonical_form(problem: Problem, method: str = "Primal Simplex") -> Problem:
    """
    Maximize form with <= rows and b >= 0, so the slack basis is feasible.

    Args:
        problem: Problem to transform
        method: Name used in error messages

    Raises:
        ModelError: if a >= row is present, or a negative right-hand side
            survives the equality split. Those models need the Dual Simplex.
    """
    model = to_maximization(problem)
    for i, cons in enumerate(model.constraints):
        if cons.relation is Relation.GE:
            raise ModelError(
                f"Constraint {i + 1} contains '>='. {method} cannot handle this; "
                "use the Dual Simplex algorithm instead."
            )
    model = split_equalities(model)
    for i, cons in enumerate(model.constraints):
        if cons.b < -RHS_TOLERANCE:
            raise ModelError(
                f"Standardized row {i + 1} has a negative right-hand side ({cons.b:g}). "
                f"{method} needs b >= 0; use the Dual Simplex algorithm instead."
            )
    logger.debug(f"Canonical form: {model.num_vars} variables, {model.num_constraints} rows")
    return model


def needs_dual_simplex(problem: Problem) -> bool:
    """True when the slack basis of the problem is not primal feasible."""
    if problem.has_relation(Relation.GE, Relation.EQ):
        return True
    return any(cons.b < -RHS_TOLERANCE for cons in problem.constraints)
