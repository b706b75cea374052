"""
Best-first Branch-and-Bound for the 0/1 knapsack problem.

    max  p·x
    s.t. w·x <= C,  x ∈ {0, 1}^n

Bounds come from the fractional (greedy) relaxation, so no simplex is
involved. Nodes wait in a max-heap keyed by their bound.
"""

import heapq
import itertools
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .data_models import Problem, Relation, Sense, SimplexResult, SolveStatus, StepSink
from .errors import ModelError
from .reporting import emit, format_vector

logger = logging.getLogger(__name__)

KNAPSACK_TOLERANCE = 1e-9

UNDECIDED, FIXED_OUT, FIXED_IN = -1, 0, 1


@dataclass
class Item:
    index: int
    profit: float
    weight: float

    @property
    def ratio(self) -> float:
        return self.profit / self.weight if self.weight > 0 else math.inf


@dataclass
class Relaxation:
    """Fractional relaxation of a node; ``fractional`` is -1 when integral."""
    x: np.ndarray
    bound: float
    weight: float
    fractional: int = -1
    overweight: bool = False

    @property
    def is_integral(self) -> bool:
        return self.fractional == -1


@dataclass
class KnapsackNode:
    assigned: np.ndarray  # UNDECIDED / FIXED_OUT / FIXED_IN per original item
    label: str
    relaxation: Relaxation = field(repr=False, default=None)

    @property
    def bound(self) -> float:
        return self.relaxation.bound


class BranchAndBoundKnapsack:
    """
    0/1 knapsack solver.

    The model must have a maximize objective (profits) and exactly one <=
    row (weights and capacity) with non-negative weights.
    """

    name = "Branch and Bound (Knapsack)"

    def __init__(self, tolerance: float = KNAPSACK_TOLERANCE, step_sink: Optional[StepSink] = None):
        self.tolerance = tolerance
        self.step_sink = step_sink
        self.items: List[Item] = []
        self.capacity = 0.0

    def _load(self, problem: Problem) -> None:
        if problem.sense is not Sense.MAXIMIZE:
            raise ModelError("Knapsack solver requires a maximize objective")
        if problem.num_constraints != 1:
            raise ModelError("Knapsack solver requires exactly one constraint (weights and capacity), "
                             f"got {problem.num_constraints}")
        cons = problem.constraints[0]
        if cons.relation is not Relation.LE:
            raise ModelError(f"Knapsack solver requires a <= constraint, got {cons.relation.value}")
        if np.any(cons.a < 0):
            raise ModelError("Knapsack weights must be non-negative")

        self.capacity = cons.b
        items = [Item(j, float(problem.objective[j]), float(cons.a[j])) for j in range(problem.num_vars)]
        # Python's sort is stable, so equal keys keep their original order
        self.items = sorted(items, key=lambda it: (-it.ratio, -it.profit))

    def relax(self, assigned: np.ndarray) -> Relaxation:
        """
        Fractional relaxation for a partial assignment.

        Items fixed to 1 are packed first; undecided items with positive
        profit are then packed greedily in ratio order, the first one that
        does not fit entering fractionally.
        """
        tol = self.tolerance
        x = np.where(assigned == FIXED_IN, 1.0, 0.0)
        weight = sum(it.weight for it in self.items if assigned[it.index] == FIXED_IN)
        profit = sum(it.profit for it in self.items if assigned[it.index] == FIXED_IN)
        if weight > self.capacity + tol:
            return Relaxation(x, profit, weight, overweight=True)

        for it in self.items:
            if assigned[it.index] != UNDECIDED or it.profit <= 0:
                continue
            if weight + it.weight <= self.capacity + tol:
                x[it.index] = 1.0
                weight += it.weight
                profit += it.profit
                continue
            remain = self.capacity - weight
            if remain > tol:
                frac = remain / it.weight
                x[it.index] = frac
                weight += it.weight * frac
                profit += it.profit * frac
                return Relaxation(x, profit, weight, fractional=it.index)
            break
        return Relaxation(x, profit, weight)

    def solve(self, problem: Problem) -> SimplexResult:
        self._load(problem)
        n = problem.num_vars
        tol = self.tolerance
        logger.info(f"Starting {self.name}: {n} items, capacity {self.capacity:g}")

        ranking = "\n".join(f"  x{it.index + 1}: ratio {it.ratio:.4g} (rank {rank})"
                            for rank, it in enumerate(self.items, start=1))
        emit(self.step_sink, f"=== {self.name} ===\nRatio test:\n{ranking}\n")

        best_value = -math.inf
        best_x: Optional[np.ndarray] = None
        counter = itertools.count()
        heap: List[Tuple[float, int, KnapsackNode]] = []
        popped = 0

        root = KnapsackNode(np.full(n, UNDECIDED, dtype=int), "0")
        root.relaxation = self.relax(root.assigned)
        if root.relaxation.overweight:
            emit(self.step_sink, "Sub-problem 0: infeasible\n")
        else:
            heapq.heappush(heap, (-root.bound, next(counter), root))

        while heap:
            _, _, node = heapq.heappop(heap)
            popped += 1
            relaxation = node.relaxation
            if node.bound <= best_value + tol:
                logger.debug(f"Sub-problem {node.label}: bound {node.bound:.6g} <= incumbent, discarded")
                continue

            emit(self.step_sink, f"Sub-problem {node.label}: bound {node.bound:.6g}, "
                                 f"{format_vector('x', relaxation.x)}\n")

            if relaxation.is_integral:
                if relaxation.bound > best_value + tol:
                    best_value = relaxation.bound
                    best_x = np.round(relaxation.x) + 0.0
                    logger.debug(f"Sub-problem {node.label}: new best candidate {best_value:.6g}")
                    emit(self.step_sink, f"  best candidate z = {best_value:.6g}\n")
                else:
                    emit(self.step_sink, f"  candidate z = {relaxation.bound:.6g}\n")
                continue

            j = relaxation.fractional
            prefix = "" if node.label == "0" else f"{node.label}."
            for suffix, fixed in (("1", FIXED_OUT), ("2", FIXED_IN)):
                assigned = node.assigned.copy()
                assigned[j] = fixed
                child = KnapsackNode(assigned, f"{prefix}{suffix}")
                child.relaxation = self.relax(assigned)
                if child.relaxation.overweight:
                    logger.debug(f"Sub-problem {child.label} (x{j + 1} = {fixed}): over capacity, discarded")
                    emit(self.step_sink, f"  {child.label}: x{j + 1} = {fixed} -> infeasible\n")
                elif child.bound <= best_value + tol:
                    logger.debug(f"Sub-problem {child.label} (x{j + 1} = {fixed}): "
                                 f"bound {child.bound:.6g} <= incumbent {best_value:.6g}, discarded")
                    emit(self.step_sink, f"  {child.label}: x{j + 1} = {fixed} -> bound {child.bound:.6g}, "
                                         "pruned\n")
                else:
                    heapq.heappush(heap, (-child.bound, next(counter), child))
                    emit(self.step_sink, f"  {child.label}: x{j + 1} = {fixed} -> bound {child.bound:.6g}\n")

        message = f"{popped} node(s) explored"
        if best_x is None:
            logger.info(f"{self.name} finished: no feasible candidate ({message})")
            return SimplexResult(status=SolveStatus.NO_FEASIBLE_SOLUTION, iterations=popped,
                                 algorithm=self.name, message=message)

        logger.info(f"{self.name} finished: z* = {best_value:.6g} ({message})")
        emit(self.step_sink, f"{self.name} finished.\nBest candidate z* = {best_value:.6g}\n"
                             f"{format_vector('Best x*', best_x)}\n")
        return SimplexResult(
            status=SolveStatus.OPTIMAL_INTEGER,
            objective_value=best_value,
            solution=best_x,
            var_names=[f"x{j + 1}" for j in range(n)],
            iterations=popped,
            algorithm=self.name,
            message=message,
        )
