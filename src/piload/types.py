"""
Copyright 2025 The Flame Authors.
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at
    http://www.apache.org/licenses/LICENSE-2.0
Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel

# Type aliases
RuntimeSchedule = List[int]

DEFAULT_RUNTIME_SECONDS = 15
ENDTIME_CHECK_MODULUS = 100_000


class PiLoadErrorCode(IntEnum):
    """Error codes for piload errors."""

    INVALID_CONFIG = 0
    INVALID_STATE = 1
    INTERNAL = 2


class PiLoadError(Exception):
    """Exception raised by the piload engine."""

    def __init__(self, code: PiLoadErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(code, message)

    def __str__(self) -> str:
        return f"{PiLoadErrorCode(self.code).name}: {self.message}"


class DispatchStrategy(str, Enum):
    """Concurrency mechanism used to launch and join the workers."""

    SERIAL = "serial"
    FIXED_POOL = "fixed-pool"
    TASK_FAN_OUT = "task-fan-out"


class ExecutorKind(str, Enum):
    """Native primitive backing the concurrent strategies."""

    PROCESS = "process"
    THREAD = "thread"


class ProcessingMode(IntEnum):
    """The four user-facing processing modes.

    Values match the numbers accepted by ``--mode``. Several modes share one
    dispatch strategy; they differ only in the name shown in the report.
    """

    SERIAL = 1
    PARALLEL_FOR = 2
    TPL40 = 3
    TPL45 = 4

    @property
    def strategy(self) -> DispatchStrategy:
        return _MODE_STRATEGIES[self]

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value) -> "ProcessingMode":
        """Resolve a mode from its number, alias, or enum name."""
        if isinstance(value, ProcessingMode):
            return value

        text = str(value).strip().lower()
        if text.isdigit():
            try:
                return cls(int(text))
            except ValueError:
                pass
        elif text in _MODE_ALIASES:
            return _MODE_ALIASES[text]

        raise PiLoadError(
            PiLoadErrorCode.INVALID_CONFIG,
            f"invalid mode '{value}'; expected one of 1, 2, 3, 4 or {', '.join(sorted(_MODE_ALIASES))}",
        )


_MODE_STRATEGIES = {
    ProcessingMode.SERIAL: DispatchStrategy.SERIAL,
    ProcessingMode.PARALLEL_FOR: DispatchStrategy.FIXED_POOL,
    ProcessingMode.TPL40: DispatchStrategy.TASK_FAN_OUT,
    ProcessingMode.TPL45: DispatchStrategy.TASK_FAN_OUT,
}

_MODE_LABELS = {
    ProcessingMode.SERIAL: "SerialCalculation",
    ProcessingMode.PARALLEL_FOR: "ParallelFor",
    ProcessingMode.TPL40: "TPL 4.0",
    ProcessingMode.TPL45: "TPL 4.5",
}

_MODE_DESCRIPTIONS = {
    ProcessingMode.SERIAL: "Serial calculation (single core)",
    ProcessingMode.PARALLEL_FOR: "ParallelFor",
    ProcessingMode.TPL40: "Task Parallel Library (Task Factory)",
    ProcessingMode.TPL45: "Task Parallel Library (No Factory)",
}

_MODE_ALIASES = {
    "serial": ProcessingMode.SERIAL,
    "parallel-for": ProcessingMode.PARALLEL_FOR,
    "tpl40": ProcessingMode.TPL40,
    "tpl45": ProcessingMode.TPL45,
}

_DEFAULT_MODE_FOR_STRATEGY = {
    DispatchStrategy.SERIAL: ProcessingMode.SERIAL,
    DispatchStrategy.FIXED_POOL: ProcessingMode.PARALLEL_FOR,
    DispatchStrategy.TASK_FAN_OUT: ProcessingMode.TPL45,
}


@dataclass(frozen=True)
class RunConfig:
    """Immutable configuration for one load run.

    Attributes:
        thread_count: Number of workers to launch. Forced to 1 for the
                      serial strategy.
        runtime_seconds: Base runtime of each worker, clamped to at least 1.
        tiered_runtime: If True, successive workers get shrinking budgets.
        preview_mode: If True, workers report what they would run and return
                      without generating load.
        mode: The processing mode the run was requested with. When omitted it
              is derived from ``strategy``.
        strategy: The dispatch strategy. When omitted it is derived from
                  ``mode``.
        executor: The primitive backing the concurrent strategies.
        seed: Optional base seed; worker ``i`` uses ``seed + i``.
    """

    thread_count: int = 1
    runtime_seconds: int = DEFAULT_RUNTIME_SECONDS
    tiered_runtime: bool = False
    preview_mode: bool = False
    mode: Optional[ProcessingMode] = None
    strategy: Optional[DispatchStrategy] = None
    executor: ExecutorKind = ExecutorKind.PROCESS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate and normalize RunConfig fields."""
        if isinstance(self.thread_count, bool) or not isinstance(self.thread_count, int):
            raise ValueError(f"thread_count must be an int, got {type(self.thread_count)}")
        if isinstance(self.runtime_seconds, bool) or not isinstance(self.runtime_seconds, int):
            raise ValueError(f"runtime_seconds must be an int, got {type(self.runtime_seconds)}")
        if self.seed is not None and not isinstance(self.seed, int):
            raise ValueError(f"seed must be an int or None, got {type(self.seed)}")

        if self.thread_count < 1:
            raise PiLoadError(
                PiLoadErrorCode.INVALID_CONFIG,
                f"thread_count must be positive, got {self.thread_count}",
            )

        # frozen=True: normalize through object.__setattr__
        if self.runtime_seconds < 1:
            object.__setattr__(self, "runtime_seconds", 1)

        mode = ProcessingMode.parse(self.mode) if self.mode is not None else None
        strategy = DispatchStrategy(self.strategy) if self.strategy is not None else None

        if mode is None:
            mode = _DEFAULT_MODE_FOR_STRATEGY[strategy or DispatchStrategy.TASK_FAN_OUT]
        if strategy is None:
            strategy = mode.strategy
        elif strategy != mode.strategy:
            raise PiLoadError(
                PiLoadErrorCode.INVALID_CONFIG,
                f"mode {mode.name} runs with strategy {mode.strategy.value}, not {strategy.value}",
            )

        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "strategy", strategy)
        object.__setattr__(self, "executor", ExecutorKind(self.executor))

        if strategy == DispatchStrategy.SERIAL:
            object.__setattr__(self, "thread_count", 1)

    @property
    def strategy_name(self) -> str:
        return self.mode.label


@dataclass(frozen=True)
class WorkerResult:
    """Counters produced by exactly one worker."""

    thread_index: int
    hits_in_circle: int = 0
    total_iterations: int = 0
    allotted_seconds: int = 0
    elapsed_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.thread_index < 0:
            raise ValueError(f"thread_index must not be negative, got {self.thread_index}")
        if self.hits_in_circle < 0 or self.total_iterations < 0:
            raise ValueError("worker counters must not be negative")
        if self.hits_in_circle > self.total_iterations:
            raise ValueError(
                f"hits_in_circle ({self.hits_in_circle}) exceeds total_iterations ({self.total_iterations})"
            )

    @property
    def pi_estimate(self) -> float:
        """Estimate from this worker alone, 0 when it never sampled."""
        if self.total_iterations == 0:
            return 0.0
        return 4 * (self.hits_in_circle / self.total_iterations)


class ReportModel(BaseModel):
    """Wire format of a Report."""

    strategy: str
    pi_estimate: Optional[float] = None
    total_iterations: Optional[int] = None
    elapsed_seconds: Optional[float] = None
    preview: bool = False


@dataclass(frozen=True)
class Report:
    """Outcome of one run.

    ``pi_estimate`` is None when the estimate is undefined, either because
    the run was a preview or because no iteration was performed.
    """

    strategy_name: str
    pi_estimate: Optional[float] = None
    total_iterations: int = 0
    elapsed_seconds: float = 0.0
    preview_mode: bool = False
    hits_in_circle: int = field(default=0, repr=False)

    @property
    def is_defined(self) -> bool:
        return self.pi_estimate is not None and not math.isnan(self.pi_estimate)

    def format(self) -> str:
        """Render the one-line summary."""
        if self.preview_mode:
            return f"{self.strategy_name} preview: no load generated"

        estimate = f"{self.pi_estimate:.8f}" if self.is_defined else "undefined"
        return (
            f"{self.strategy_name} approximated Pi = {estimate} "
            f"using {self.total_iterations:,} iterations over {self.elapsed_seconds:.1f} seconds"
        )

    def to_model(self) -> ReportModel:
        if self.preview_mode:
            return ReportModel(strategy=self.strategy_name, preview=True)
        return ReportModel(
            strategy=self.strategy_name,
            pi_estimate=self.pi_estimate if self.is_defined else None,
            total_iterations=self.total_iterations,
            elapsed_seconds=round(self.elapsed_seconds, 3),
        )

    def to_json(self) -> str:
        return self.to_model().model_dump_json()
