"""Run a scan benchmark against the torch reference engine.

    python -m scanbench --num-elements 1048576 --iterations 100 --operator sum
    python -m scanbench --num-elements 8 --exclusive --verbose
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import torch

from scanbench.benchmark.problems import INPUT_KINDS, generate_input, make_problem
from scanbench.common.logger import get_logger, setup_logging
from scanbench.errors import ScanBenchError
from scanbench.harness.engine import ProblemSizeGenre, TorchScanEngine
from scanbench.harness.scan_harness import ScanConfig, ScanHarness
from scanbench.operators import OPERATOR_FACTORIES, get_operator

logger = get_logger(__name__)

DTYPES = {
    "int32": torch.int32,
    "int64": torch.int64,
    "float32": torch.float32,
    "float64": torch.float64,
}

EXIT_MISMATCH = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scanbench", description=__doc__.splitlines()[0])
    parser.add_argument("--num-elements", "-n", type=int, default=1 << 20)
    parser.add_argument("--iterations", "-i", type=int, default=100)
    parser.add_argument("--operator", choices=sorted(OPERATOR_FACTORIES), default="sum")
    parser.add_argument("--dtype", choices=sorted(DTYPES), default="int32")
    parser.add_argument("--exclusive", action="store_true", help="Exclusive scan (default: inclusive)")
    parser.add_argument("--input", choices=INPUT_KINDS, default="ones", dest="input_kind")
    parser.add_argument("--max-ctas", type=int, default=0, help="Parallelism hint for the engine")
    parser.add_argument(
        "--problem-size",
        choices=[genre.value for genre in ProblemSizeGenre],
        default=ProblemSizeGenre.UNKNOWN.value,
    )
    parser.add_argument("--device", default=None, help="Device (default: cuda if available)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="Print every output element")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        dtype = DTYPES[args.dtype]
        operator = get_operator(args.operator, dtype)
        values = generate_input(args.num_elements, dtype, kind=args.input_kind, seed=args.seed)
        problem = make_problem(values, operator, exclusive=args.exclusive)
        config = ScanConfig(
            iterations=args.iterations,
            max_ctas=args.max_ctas,
            problem_size=ProblemSizeGenre(args.problem_size),
            verbose=args.verbose,
            device=args.device,
            seed=args.seed,
        )
        result = ScanHarness(TorchScanEngine(), config).run(problem)
    except ScanBenchError:
        logger.exception("Scan benchmark aborted")
        return 1

    return 0 if result.outcome.passed else EXIT_MISMATCH


if __name__ == "__main__":
    sys.exit(main())
