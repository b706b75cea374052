"""
Command-line entry point: solve a text model with one of the engines.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .branch_and_bound import MAX_DEPTH
from .cutting_plane import MAX_CUTS
from .errors import SolverError
from .parser import parse_problem_file
from .primal_simplex import MAX_ITERATIONS
from .reporting import format_problem, format_result
from .solver import Algorithm, solve

INTEGER_ALGORITHMS = {
    Algorithm.BRANCH_AND_BOUND,
    Algorithm.BRANCH_AND_BOUND_KNAPSACK,
    Algorithm.CUTTING_PLANE,
    Algorithm.CUTTING_PLANE_REVISED,
}


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, set logging level to DEBUG
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description='Solve linear and integer programs with simplex-family methods',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        'model',
        type=str,
        help='Path to the model file (first line "max: ..." or "min: ...", one constraint per line)'
    )
    parser.add_argument(
        '--algorithm',
        type=str,
        default='primal simplex',
        help='Algorithm: ' + ', '.join(repr(a.value) for a in Algorithm)
    )
    parser.add_argument(
        '--tolerance',
        type=float,
        default=None,
        help='Numerical tolerance (engine default when omitted)'
    )
    parser.add_argument(
        '--max-iter',
        type=int,
        default=MAX_ITERATIONS,
        help='Maximum simplex iterations per LP'
    )
    parser.add_argument(
        '--max-depth',
        type=int,
        default=MAX_DEPTH,
        help='Maximum Branch-and-Bound depth'
    )
    parser.add_argument(
        '--max-cuts',
        type=int,
        default=MAX_CUTS,
        help='Maximum number of Gomory cuts'
    )
    parser.add_argument(
        '--trace',
        action='store_true',
        help='Print every tableau / node / cut snapshot'
    )
    parser.add_argument(
        '--check',
        action='store_true',
        help='Compare the result with HiGHS (requires scipy)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose (DEBUG) logging'
    )

    return parser.parse_args(argv)


def _print_snapshot(text: str, highlight: Optional[np.ndarray]) -> None:
    print(text)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure, 2 when --check disagrees)
    """
    args = parse_arguments(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        model_path = Path(args.model)
        if not model_path.exists():
            logger.error(f"Model file not found: {model_path}")
            return 1

        algorithm = Algorithm.from_name(args.algorithm)
        problem = parse_problem_file(model_path)
        logger.info(f"Loaded {model_path.name}: {problem.num_vars} variables, "
                    f"{problem.num_constraints} constraints")

        print("=" * 60)
        print(format_problem(problem))
        print("=" * 60)

        options = dict(max_iterations=args.max_iter, max_depth=args.max_depth, max_cuts=args.max_cuts)
        if args.tolerance is not None:
            options['tolerance'] = args.tolerance
        result = solve(problem, algorithm, step_sink=_print_snapshot if args.trace else None, **options)

        print("\n" + "=" * 60)
        print(format_result(result))
        print("=" * 60)

        if args.check:
            from .reference import solve_with_highs

            reference = solve_with_highs(problem, integer=algorithm in INTEGER_ALGORITHMS,
                                         binary=algorithm is Algorithm.BRANCH_AND_BOUND_KNAPSACK)
            print(f"HiGHS: {reference.status.value}, z* = {reference.objective_value:.6g}")
            if not reference.agrees_with(result):
                logger.warning(f"Result differs from HiGHS ({reference.message})")
                return 2
            print("HiGHS agrees")

        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1

    except SolverError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    except Exception as e:
        logger.exception(f"Error occurred: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
