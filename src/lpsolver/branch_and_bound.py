"""
Depth-first Branch-and-Bound for general integer programs.

Each node is a clone of its parent with one extra unit bound row. LP
relaxations are solved with the Dual Simplex when the node has >= or = rows
(branching adds >= rows, so this is re-evaluated per node) and with the
Revised (or tableau) Primal Simplex otherwise.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .data_models import Constraint, Problem, Relation, Sense, SimplexResult, SolveStatus, StepSink
from .dual_simplex import DualSimplex
from .errors import SolverError
from .primal_simplex import MAX_ITERATIONS, PrimalSimplex
from .reporting import emit, format_vector
from .revised_simplex import RevisedPrimalSimplex
from .standardizer import needs_dual_simplex
from .utils import INTEGRALITY_TOLERANCE, is_integral, most_fractional_index, round_integral, unit_vector

logger = logging.getLogger(__name__)

MAX_DEPTH = 200


@dataclass
class BranchNode:
    problem: Problem
    label: str
    depth: int = 0


@dataclass
class SearchState:
    """
    Incumbent and counters of one Branch-and-Bound run.

    ``best_value`` is kept in maximize form so bounding is a single
    comparison regardless of the caller's sense.
    """
    best_value: float = -math.inf
    best_solution: Optional[np.ndarray] = None
    best_relaxation: Optional[SimplexResult] = None
    nodes: int = 0
    pruned_by_depth: int = 0
    unbounded_relaxations: int = 0

    @property
    def has_incumbent(self) -> bool:
        return self.best_solution is not None


class BranchAndBound:
    """
    Branch-and-Bound driver with most-fractional branching, ceiling branch first.
    """

    name = "Branch and Bound"

    def __init__(self, use_revised: bool = True, tolerance: float = INTEGRALITY_TOLERANCE,
                 max_depth: int = MAX_DEPTH, max_iterations: int = MAX_ITERATIONS,
                 step_sink: Optional[StepSink] = None, trace_relaxations: bool = False):
        """
        Args:
            use_revised: Solve <=-only nodes with the Revised Primal Simplex
                instead of the tableau Primal Simplex
            tolerance: Integrality and bounding tolerance
            max_depth: Nodes deeper than this are pruned with a warning
            max_iterations: Iteration cap handed to the LP engines
            step_sink: Optional progress sink, one snapshot per node
            trace_relaxations: Also forward every pivot of the node LPs to the sink
        """
        self.use_revised = use_revised
        self.tolerance = tolerance
        self.max_depth = max_depth
        self.max_iterations = max_iterations
        self.step_sink = step_sink
        self.trace_relaxations = trace_relaxations

    def _lp_solver(self, model: Problem):
        sink = self.step_sink if self.trace_relaxations else None
        if needs_dual_simplex(model):
            return DualSimplex(max_iterations=self.max_iterations, step_sink=sink)
        if self.use_revised:
            return RevisedPrimalSimplex(max_iterations=self.max_iterations, step_sink=sink)
        return PrimalSimplex(max_iterations=self.max_iterations, step_sink=sink)

    def solve(self, problem: Problem) -> SimplexResult:
        logger.info(f"Starting {self.name}: {problem.num_vars} variables, {problem.num_constraints} constraints")
        state = SearchState()
        self._explore(BranchNode(problem.clone(), "Root", 0), problem, state)

        sign = 1.0 if problem.sense is Sense.MAXIMIZE else -1.0
        message = f"{state.nodes} node(s) explored"
        if state.pruned_by_depth:
            message += f", {state.pruned_by_depth} pruned by depth limit"
        if state.unbounded_relaxations:
            message += f", {state.unbounded_relaxations} unbounded relaxation(s) pruned"

        if not state.has_incumbent:
            status = SolveStatus.NO_FEASIBLE_SOLUTION
            logger.info(f"{self.name} finished: {status.value} ({message})")
            return SimplexResult(status=status, objective_value=float("nan"), iterations=state.nodes,
                                 algorithm=self.name, message=message)

        relaxation = state.best_relaxation
        value = sign * state.best_value
        logger.info(f"{self.name} finished: z* = {value:.6g} ({message})")
        emit(self.step_sink, f"{self.name} finished.\nBest integer z* = {value:.6g}\n"
                             f"{format_vector('Best integer x*', state.best_solution)}\n")
        return SimplexResult(
            status=SolveStatus.OPTIMAL_INTEGER,
            objective_value=value,
            solution=state.best_solution,
            tableau=relaxation.tableau,
            basis=relaxation.basis,
            var_names=relaxation.var_names,
            standard_form=relaxation.standard_form,
            iterations=state.nodes,
            algorithm=self.name,
            message=message,
        )

    def _explore(self, node: BranchNode, original: Problem, state: SearchState) -> None:
        if node.depth > self.max_depth:
            logger.warning(f"{node.label}: maximum depth {self.max_depth} reached, pruning")
            emit(self.step_sink, f"{node.label}: maximum recursion depth reached -> prune\n")
            state.pruned_by_depth += 1
            return

        state.nodes += 1
        solver = self._lp_solver(node.problem)
        try:
            relaxation = solver.solve(node.problem)
        except SolverError as e:
            logger.debug(f"{node.label}: relaxation failed ({e}), pruning")
            emit(self.step_sink, f"{node.label}: LP relaxation error: {e} -> prune\n")
            return

        if relaxation.status is not SolveStatus.OPTIMAL:
            if relaxation.status is SolveStatus.UNBOUNDED:
                state.unbounded_relaxations += 1
            logger.debug(f"{node.label}: relaxation {relaxation.status.value}, pruning")
            emit(self.step_sink, f"{node.label} ({solver.name}): {relaxation.status.value} -> prune\n")
            return

        x = relaxation.solution
        value = relaxation.objective_value if original.sense is Sense.MAXIMIZE else -relaxation.objective_value
        emit(self.step_sink, f"{node.label} ({solver.name}): z = {relaxation.objective_value:.6g}, "
                             f"{format_vector('x', x)}\n")

        if value <= state.best_value + self.tolerance:
            logger.debug(f"{node.label}: bound {value:.6g} cannot beat incumbent {state.best_value:.6g}")
            emit(self.step_sink, f"{node.label}: pruned by bound\n")
            return

        if is_integral(x, self.tolerance):
            candidate = round_integral(x)
            if original.is_feasible(candidate, self.tolerance):
                state.best_value = value
                state.best_solution = candidate
                state.best_relaxation = relaxation
                logger.debug(f"{node.label}: new incumbent {value:.6g}")
                emit(self.step_sink, f"{node.label}: integer feasible, new incumbent\n")
            else:
                emit(self.step_sink, f"{node.label}: integral point violates the model -> prune\n")
            return

        index = most_fractional_index(x, self.tolerance)
        floor_value = math.floor(x[index])
        ceil_value = math.ceil(x[index])
        prefix = "" if node.depth == 0 else f"{node.label}."
        ceil_node = BranchNode(
            node.problem.with_constraint(Constraint(unit_vector(original.num_vars, index), Relation.GE, ceil_value)),
            f"{prefix}1", node.depth + 1)
        floor_node = BranchNode(
            node.problem.with_constraint(Constraint(unit_vector(original.num_vars, index), Relation.LE, floor_value)),
            f"{prefix}2", node.depth + 1)

        logger.debug(f"{node.label}: branching on x{index + 1} = {x[index]:.6g}")
        emit(self.step_sink, f"{node.label}: branch on x{index + 1} = {x[index]:.4g} -> "
                             f"{ceil_node.label}: x{index + 1} >= {ceil_value}, "
                             f"{floor_node.label}: x{index + 1} <= {floor_value}\n")
        self._explore(ceil_node, original, state)
        self._explore(floor_node, original, state)
