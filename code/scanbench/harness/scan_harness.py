"""Timed scan harness: warm-up, timed iterations, verification, report.

One run follows a fixed sequence of states:

    IDLE -> ACQUIRED -> STAGED -> WARMED_UP -> TIMING -> RETRIEVED
         -> VERIFIED -> REPORTED -> RELEASED

Any failure jumps straight to RELEASED (buffers freed) and the error is
re-raised. A verification mismatch is not a failure; it is returned in the
run result so the caller decides the pass/fail policy.

Usage:
    harness = ScanHarness(TorchScanEngine(), ScanConfig(iterations=100))
    problem = make_problem(torch.ones(8, dtype=torch.int32), sum_operator())
    result = harness.run(problem)
    result.outcome.passed, result.throughput
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, TextIO, Union

import numpy as np
import torch

from scanbench.benchmark.metrics import RunStatistics, compute_run_statistics
from scanbench.benchmark.problems import ScanProblem
from scanbench.benchmark.verification import VerificationOutcome, compare_results, report
from scanbench.common.device_utils import resolve_device, synchronize
from scanbench.common.logger import get_logger, log_run_complete, log_run_error, log_run_start
from scanbench.common.nvtx_helper import get_nvtx_enabled, nvtx_range
from scanbench.errors import ConfigurationError, EngineError
from scanbench.harness.buffers import DeviceAllocator, DeviceBufferManager
from scanbench.harness.engine import ProblemSizeGenre, ScanEngine

logger = get_logger(__name__)


class RunState(Enum):
    IDLE = "idle"
    ACQUIRED = "acquired"
    STAGED = "staged"
    WARMED_UP = "warmed_up"
    TIMING = "timing"
    RETRIEVED = "retrieved"
    VERIFIED = "verified"
    REPORTED = "reported"
    RELEASED = "released"


@dataclass
class ScanConfig:
    """Configuration for a scan benchmark run."""
    iterations: int = 100
    max_ctas: int = 0  # Parallelism hint for the engine (0 = engine default)
    problem_size: ProblemSizeGenre = ProblemSizeGenre.UNKNOWN
    verbose: bool = False  # Print every output element before the summary
    device: Optional[Union[str, torch.device]] = None
    enable_nvtx: bool = False
    seed: Optional[int] = None
    deterministic: bool = False

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ConfigurationError(f"iterations must be non-negative, got {self.iterations}")
        if self.max_ctas < 0:
            raise ConfigurationError(f"max_ctas must be non-negative, got {self.max_ctas}")


@dataclass
class ScanRunResult:
    """Everything one run produced."""
    stats: RunStatistics
    outcome: VerificationOutcome
    output: torch.Tensor
    exclusive: bool
    operator_name: str
    states: List[RunState] = field(default_factory=list)

    @property
    def throughput(self) -> float:
        """Throughput in x10^9 elements/sec."""
        return self.stats.gelements_per_sec


class RunTimer:
    """Per-run timing resources.

    CUDA devices use a start/stop event pair created for this run only;
    other devices use time.perf_counter. `stop()` synchronizes before
    reading, so the interval covers completion, not just dispatch.
    """

    def __init__(self, device: torch.device) -> None:
        self.device = device
        self._use_events = device.type == "cuda"
        if self._use_events:
            self._start_event = torch.cuda.Event(enable_timing=True)
            self._stop_event = torch.cuda.Event(enable_timing=True)
        self._start_time = 0.0

    def start(self) -> None:
        if self._use_events:
            self._start_event.record()
        else:
            self._start_time = time.perf_counter()

    def stop(self) -> float:
        """Return milliseconds elapsed since start()."""
        if self._use_events:
            self._stop_event.record()
            self._stop_event.synchronize()
            return self._start_event.elapsed_time(self._stop_event)
        synchronize(self.device)
        return (time.perf_counter() - self._start_time) * 1000.0


class ScanHarness:
    """Drives one scan engine through warm-up, timed iterations and checks."""

    def __init__(
        self,
        engine: ScanEngine,
        config: Optional[ScanConfig] = None,
        allocator: Optional[DeviceAllocator] = None,
        value_printer: Callable[[object], str] = str,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.engine = engine
        self.config = config or ScanConfig()
        self.device = resolve_device(self.config.device)
        self.allocator = allocator
        self.value_printer = value_printer
        self.stream = stream
        self.states: List[RunState] = []
        self._setup_reproducibility()

    def _setup_reproducibility(self) -> None:
        """Setup for reproducible benchmarks."""
        if self.config.deterministic:
            torch.use_deterministic_algorithms(True, warn_only=True)

        if self.config.seed is not None:
            random.seed(self.config.seed)
            np.random.seed(self.config.seed)
            torch.manual_seed(self.config.seed)
            if torch.cuda.is_available():
                torch.cuda.manual_seed_all(self.config.seed)

    def _transition(self, state: RunState) -> None:
        self.states.append(state)
        logger.debug(f"scan run -> {state.value}")

    @property
    def state(self) -> RunState:
        return self.states[-1] if self.states else RunState.IDLE

    def run(self, problem: ScanProblem) -> ScanRunResult:
        """Run warm-up + timed iterations for `problem` and verify the output.

        Raises:
            AllocationError, TransferError, EngineError: fatal to the run;
                buffers are released before the error propagates.
        """
        config = self.config
        label = f"{problem.operator.name} {'exclusive' if problem.exclusive else 'inclusive'}"
        self.states = [RunState.IDLE]
        log_run_start(logger, label, problem.num_elements, config.iterations)

        if not problem.operator.is_identity_for(problem.values):
            logger.warning(
                f"Identity {problem.operator.identity()!r} of '{problem.operator.name}' is not neutral "
                f"for every input element; scan results may be corrupted"
            )

        buffers = DeviceBufferManager(self.device, self.allocator)
        try:
            with buffers:
                buffers.acquire(problem.num_elements, problem.dtype)
                self._transition(RunState.ACQUIRED)

                buffers.stage(problem.values)
                self._transition(RunState.STAGED)

                self._warmup(buffers, problem)
                self._transition(RunState.WARMED_UP)

                self._transition(RunState.TIMING)
                times_ms = self._benchmark_timed(buffers, problem)

                output = buffers.retrieve()
                self._transition(RunState.RETRIEVED)

                stats = compute_run_statistics(times_ms, problem.num_elements, problem.element_size)
                outcome = compare_results(output, problem.reference)
                self._transition(RunState.VERIFIED)

                self._report(stats, outcome, output, problem)
                self._transition(RunState.REPORTED)
        except Exception as exc:
            self._transition(RunState.RELEASED)
            log_run_error(logger, label, exc)
            raise

        self._transition(RunState.RELEASED)
        log_run_complete(logger, label, stats.avg_latency_ms, outcome.passed)

        return ScanRunResult(
            stats=stats,
            outcome=outcome,
            output=output,
            exclusive=problem.exclusive,
            operator_name=problem.operator.name,
            states=list(self.states),
        )

    def _report(
        self,
        stats: RunStatistics,
        outcome: VerificationOutcome,
        output: torch.Tensor,
        problem: ScanProblem,
    ) -> None:
        """Print the run summary. Output failures are logged, never fatal."""
        try:
            report(
                stats,
                outcome,
                problem.exclusive,
                output=output,
                verbose=self.config.verbose,
                value_printer=self.value_printer,
                operator_name=problem.operator.name,
                stream=self.stream,
            )
        except Exception:
            logger.exception(f"Reporting {problem.operator.name} scan results failed")

    def _invoke(self, buffers: DeviceBufferManager, problem: ScanProblem, debug: bool) -> None:
        try:
            ok = self.engine.execute(
                buffers.destination,
                buffers.source,
                problem.num_elements,
                self.config.max_ctas,
                problem.operator,
                problem.exclusive,
                self.config.problem_size,
                debug=debug,
            )
        except EngineError:
            raise
        except Exception as exc:
            raise EngineError(f"Scan engine invocation failed: {exc}") from exc
        if ok is False:
            raise EngineError("Scan engine reported failure")

    def _warmup(self, buffers: DeviceBufferManager, problem: ScanProblem) -> None:
        """Single untimed call with engine debug output enabled."""
        with nvtx_range("scan_warmup", enable=get_nvtx_enabled(self.config)):
            self._invoke(buffers, problem, debug=True)
        synchronize(self.device)

    def _benchmark_timed(self, buffers: DeviceBufferManager, problem: ScanProblem) -> List[float]:
        times_ms: List[float] = []
        if self.config.iterations == 0:
            return times_ms
        timer = RunTimer(self.device)
        enable_nvtx = get_nvtx_enabled(self.config)
        synchronize(self.device)
        for _ in range(self.config.iterations):
            with nvtx_range("scan_timed", enable=enable_nvtx):
                timer.start()
                self._invoke(buffers, problem, debug=False)
                times_ms.append(timer.stop())
        return times_ms


def timed_scan(
    engine: ScanEngine,
    problem: ScanProblem,
    config: Optional[ScanConfig] = None,
    **harness_kwargs,
) -> ScanRunResult:
    """One-shot convenience wrapper around ScanHarness.run()."""
    return ScanHarness(engine, config, **harness_kwargs).run(problem)


__all__ = [
    "RunState",
    "ScanConfig",
    "ScanRunResult",
    "RunTimer",
    "ScanHarness",
    "timed_scan",
]
