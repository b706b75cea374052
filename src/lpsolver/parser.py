"""
Parser for the plain-text model format.

    # comment
    max: 2x1 + 3x2 + 3x3
    x1 + x2 + 2x3 <= 10
    -x1 + 3x3 >= -2
    x2 = 4

The first statement is the objective, every further line one constraint.
Variables are x1..xn; an omitted coefficient means 1.
"""

import re
from pathlib import Path
from typing import Dict, List, Tuple

from .data_models import Constraint, Problem, Relation, Sense
from .errors import ModelError

_OBJECTIVE_RE = re.compile(r'^(max|min)(?:imi[sz]e)?\s*:?\s*(.+)$', re.IGNORECASE)
_CONSTRAINT_RE = re.compile(r'^(.+?)\s*(<=|>=|=)\s*([+-]?\s*(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)$')
_TERM_RE = re.compile(r'([+-]?)((?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)?\*?x(\d+)')


def _parse_expression(text: str, line_no: int) -> Dict[int, float]:
    """Parse a linear expression into {0-based variable index: coefficient}."""
    compact = re.sub(r'\s+', '', text)
    if not compact:
        raise ModelError(f"Line {line_no}: empty expression")

    terms: Dict[int, float] = {}
    pos = 0
    for match in _TERM_RE.finditer(compact):
        if match.start() != pos or (pos > 0 and not match.group(1)):
            raise ModelError(f"Line {line_no}: cannot parse expression '{text.strip()}'")
        sign, coef, index = match.groups()
        value = float(coef) if coef else 1.0
        if sign == '-':
            value = -value
        k = int(index)
        if k < 1:
            raise ModelError(f"Line {line_no}: variable indices start at x1, got x{k}")
        terms[k - 1] = terms.get(k - 1, 0.0) + value
        pos = match.end()

    if pos != len(compact):
        raise ModelError(f"Line {line_no}: cannot parse expression '{text.strip()}'")
    return terms


def _dense(terms: Dict[int, float], n: int) -> List[float]:
    row = [0.0] * n
    for k, v in terms.items():
        row[k] = v
    return row


def parse_problem(text: str) -> Problem:
    """
    Parse a model from text.

    Args:
        text: Model source in the format described in the module docstring

    Returns:
        Problem whose variable count is the highest index referenced
    """
    sense = None
    objective: Dict[int, float] = {}
    rows: List[Tuple[Dict[int, float], Relation, float]] = []

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.split('#', 1)[0].strip()
        if not line:
            continue

        if sense is None:
            match = _OBJECTIVE_RE.match(line)
            if not match:
                raise ModelError(f"Line {line_no}: expected 'max: ...' or 'min: ...', got '{line}'")
            sense = Sense.MAXIMIZE if match.group(1).lower() == 'max' else Sense.MINIMIZE
            objective = _parse_expression(match.group(2), line_no)
            continue

        match = _CONSTRAINT_RE.match(line)
        if not match:
            raise ModelError(f"Line {line_no}: expected '<lhs> (<=|>=|=) <rhs>', got '{line}'")
        lhs, rel, rhs = match.groups()
        rows.append((_parse_expression(lhs, line_no), Relation(rel), float(rhs.replace(' ', ''))))

    if sense is None:
        raise ModelError("Model has no objective line")

    n = max([k + 1 for k in objective] + [k + 1 for terms, _, _ in rows for k in terms])
    constraints = [Constraint(a=_dense(terms, n), relation=rel, b=rhs) for terms, rel, rhs in rows]
    return Problem(sense=sense, objective=_dense(objective, n), constraints=constraints)


def parse_problem_file(filepath: Path) -> Problem:
    """Read and parse a model file."""
    with open(filepath, 'r') as f:
        content = f.read()
    return parse_problem(content)
