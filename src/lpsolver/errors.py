"""
Exception types raised by the solving engine.

UNBOUNDED and INFEASIBLE are solve outcomes and are reported through
``SimplexResult.status``; the exceptions below are reserved for models a
method cannot accept and for numerical breakdowns.
"""


class SolverError(Exception):
    pass


class ModelError(SolverError):
    """Malformed problem, or a constraint shape the chosen method cannot handle."""


class NumericalError(SolverError):
    pass


class SingularBasisError(NumericalError):
    """Basis matrix could not be inverted."""


class ZeroPivotError(NumericalError):
    """Pivot element is numerically zero."""


class IterationLimitError(SolverError):
    """A simplex loop exceeded its iteration cap."""

    def __init__(self, method: str, max_iterations: int):
        super().__init__(f"{method}: iteration limit of {max_iterations} exceeded")
        self.method = method
        self.max_iterations = max_iterations


class UnsupportedAlgorithmError(SolverError, ValueError):
    def __init__(self, name: str):
        super().__init__(f"Algorithm not supported: {name!r}")
        self.name = name
