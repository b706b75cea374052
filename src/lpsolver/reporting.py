"""
Plain-text snapshots published to a step sink.

The exact layout is not part of the engine's contract; consumers only rely
on receiving one snapshot per pivot, node or cut, in execution order.
"""

from typing import List, Optional, Sequence

import numpy as np

from .data_models import Problem, SimplexResult, StepSink

COL_WIDTH = 10


def _fmt(value: float) -> str:
    if np.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:.4g}"


def format_tableau(T: np.ndarray, basis: Sequence[int], var_names: Sequence[str], title: str) -> str:
    """Render a tableau with its basis labels, objective row first."""
    ncols = T.shape[1] - 1
    lines = [title]
    header = "Basis".rjust(COL_WIDTH) + "".join(n.rjust(COL_WIDTH) for n in var_names[:ncols])
    lines.append(header + "RHS".rjust(COL_WIDTH))
    lines.append("-" * (COL_WIDTH * (ncols + 2)))
    labels = ["z"] + [var_names[b] for b in basis]
    for label, row in zip(labels, T):
        lines.append(label.rjust(COL_WIDTH) + "".join(_fmt(v).rjust(COL_WIDTH) for v in row))
    return "\n".join(lines) + "\n"


def format_vector(name: str, values: Sequence[float]) -> str:
    return f"{name} = [" + ", ".join(_fmt(v) for v in values) + "]"


def format_matrix(M: np.ndarray) -> str:
    return "\n".join("".join(_fmt(v).rjust(COL_WIDTH) for v in row) for row in M)


def format_problem(problem: Problem) -> str:
    """Canonical algebraic rendering of a model."""
    def expr(coefs: np.ndarray) -> str:
        terms = [f"{'+' if v >= 0 else '-'} {abs(v):g}x{j + 1}" for j, v in enumerate(coefs) if v != 0]
        return " ".join(terms).lstrip("+ ") or "0"

    lines = [f"{problem.sense.value}: {expr(problem.objective)}"]
    for cons in problem.constraints:
        lines.append(f"  {expr(cons.a)} {cons.relation.value} {cons.b:g}")
    lines.append("  x >= 0")
    return "\n".join(lines)


def format_result(result: SimplexResult) -> str:
    lines: List[str] = [f"Algorithm: {result.algorithm}", result.summary()]
    if result.iterations:
        lines.append(f"Iterations: {result.iterations}")
    return "\n".join(lines)


def emit(sink: Optional[StepSink], text: str, highlight: Optional[np.ndarray] = None) -> None:
    """Forward a snapshot to the sink, if one is attached."""
    if sink is not None:
        sink(text, highlight)
