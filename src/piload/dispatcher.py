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

import logging
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor, wait
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from . import worker
from .types import (
    DispatchStrategy,
    ExecutorKind,
    PiLoadError,
    PiLoadErrorCode,
    RuntimeSchedule,
    WorkerResult,
)

logger = logging.getLogger(__name__)


class DispatchState(IntEnum):
    """Lifecycle of a Dispatcher; transitions only move forward."""

    IDLE = 0
    SCHEDULED = 1
    RUNNING = 2
    JOINED = 3
    REPORTED = 4


class SharedTotals:
    """Hit and iteration totals shared by all workers of a fixed pool."""

    def __init__(self):
        self._lock = threading.Lock()
        self._hits = 0
        self._iterations = 0

    def add(self, hits: int, iterations: int) -> None:
        with self._lock:
            self._hits += hits
            self._iterations += iterations

    def snapshot(self) -> Tuple[int, int]:
        with self._lock:
            return self._hits, self._iterations


def create_executor(kind: ExecutorKind, max_workers: int) -> Executor:
    """Create the native pool backing a concurrent strategy."""
    if ExecutorKind(kind) == ExecutorKind.THREAD:
        return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="piload-worker")
    return ProcessPoolExecutor(max_workers=max_workers)


class Dispatcher:
    """Launches one worker per schedule entry and joins on all of them.

    A Dispatcher serves exactly one run. The strategy only decides which
    primitive launches and joins the workers; scheduling, seeding and result
    ordering are shared by every strategy.

    Attributes:
        strategy: The dispatch strategy
        executor: The primitive backing FIXED_POOL and TASK_FAN_OUT
        seed: Optional base seed; worker ``i`` is seeded with ``seed + i``
    """

    def __init__(
        self,
        strategy: DispatchStrategy,
        executor: ExecutorKind = ExecutorKind.PROCESS,
        seed: Optional[int] = None,
    ):
        self.strategy = DispatchStrategy(strategy)
        self.executor = ExecutorKind(executor)
        self.seed = seed
        self._state = DispatchState.IDLE
        self._schedule: RuntimeSchedule = []
        self._totals: Optional[SharedTotals] = None

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def totals(self) -> Optional[Tuple[int, int]]:
        """Shared (hits, iterations) accumulated by a FIXED_POOL run, None otherwise."""
        if self._totals is None:
            return None
        return self._totals.snapshot()

    def _transition(self, expected: DispatchState, target: DispatchState) -> None:
        if self._state != expected:
            raise PiLoadError(
                PiLoadErrorCode.INVALID_STATE,
                f"cannot move dispatcher to {target.name} from {self._state.name}",
            )
        logger.debug(f"Dispatcher {self.strategy.value}: {self._state.name} -> {target.name}")
        self._state = target

    def _worker_seed(self, thread_index: int) -> Optional[int]:
        if self.seed is None:
            return None
        return self.seed + thread_index

    def _normalize(self, schedule: Sequence[int]) -> RuntimeSchedule:
        if not schedule:
            raise PiLoadError(PiLoadErrorCode.INVALID_CONFIG, "schedule must contain at least one entry")

        entries = list(schedule)
        if self.strategy == DispatchStrategy.SERIAL:
            entries = entries[:1]
        return entries

    def schedule(self, schedule: Sequence[int]) -> RuntimeSchedule:
        """Accept the runtime schedule of the run.

        The serial strategy keeps only the first entry.
        """
        entries = self._normalize(schedule)
        self._transition(DispatchState.IDLE, DispatchState.SCHEDULED)
        self._schedule = entries
        return list(entries)

    def dispatch(self, schedule: Optional[Sequence[int]] = None, preview_mode: bool = False) -> List[WorkerResult]:
        """
        Run one worker per schedule entry and block until all of them complete.

        Args:
            schedule: Runtime of each worker in seconds. May be omitted when
                      schedule() was already called; if given, it must match
            preview_mode: If True, workers only report what they would run

        Returns:
            The WorkerResults ordered by thread index

        Raises:
            PiLoadError: If the dispatcher was already used, the schedule is missing or
                         differs from the accepted one, or a worker could not complete
        """
        if self._state == DispatchState.SCHEDULED:
            if schedule is not None and self._normalize(schedule) != self._schedule:
                raise PiLoadError(
                    PiLoadErrorCode.INVALID_STATE,
                    f"dispatcher already scheduled {self._schedule}, got {list(schedule)}",
                )
        elif self._state != DispatchState.IDLE:
            raise PiLoadError(
                PiLoadErrorCode.INVALID_STATE,
                f"cannot dispatch from {self._state.name}; a dispatcher serves one run",
            )
        elif schedule is None:
            raise PiLoadError(PiLoadErrorCode.INVALID_CONFIG, "no schedule to dispatch")
        else:
            self.schedule(schedule)

        self._transition(DispatchState.SCHEDULED, DispatchState.RUNNING)

        logger.debug(f"Dispatching {len(self._schedule)} workers with {self.strategy.value}: {self._schedule}")

        if self.strategy == DispatchStrategy.SERIAL:
            results = self._run_serial(preview_mode)
        elif self.strategy == DispatchStrategy.FIXED_POOL:
            results = self._run_fixed_pool(preview_mode)
        else:
            results = self._run_task_fan_out(preview_mode)

        self._transition(DispatchState.RUNNING, DispatchState.JOINED)
        return sorted(results, key=lambda result: result.thread_index)

    def mark_reported(self) -> None:
        """Record that the joined results have been aggregated."""
        self._transition(DispatchState.JOINED, DispatchState.REPORTED)

    def _run_serial(self, preview_mode: bool) -> List[WorkerResult]:
        return [worker.run(0, self._schedule[0], preview_mode, self._worker_seed(0))]

    def _submit_all(self, pool: Executor, preview_mode: bool) -> List[Future]:
        return [
            pool.submit(worker.run, index, runtime, preview_mode, self._worker_seed(index))
            for index, runtime in enumerate(self._schedule)
        ]

    def _run_fixed_pool(self, preview_mode: bool) -> List[WorkerResult]:
        self._totals = SharedTotals()
        totals = self._totals

        def accumulate(future: Future) -> None:
            if future.cancelled() or future.exception() is not None:
                return
            result = future.result()
            totals.add(result.hits_in_circle, result.total_iterations)

        with create_executor(self.executor, len(self._schedule)) as pool:
            futures = self._submit_all(pool, preview_mode)
            for future in futures:
                future.add_done_callback(accumulate)
            results = [self._join(future) for future in futures]

        return results

    def _run_task_fan_out(self, preview_mode: bool) -> List[WorkerResult]:
        slots: List[Optional[WorkerResult]] = [None] * len(self._schedule)

        with create_executor(self.executor, len(self._schedule)) as pool:
            futures = self._submit_all(pool, preview_mode)
            wait(futures)

        for index, future in enumerate(futures):
            slots[index] = self._join(future)

        return slots

    @staticmethod
    def _join(future: Future) -> WorkerResult:
        try:
            return future.result()
        except Exception as e:
            raise PiLoadError(PiLoadErrorCode.INTERNAL, f"worker failed: {e}") from e


def dispatch(
    schedule: Sequence[int],
    preview_mode: bool,
    strategy: DispatchStrategy,
    executor: ExecutorKind = ExecutorKind.PROCESS,
    seed: Optional[int] = None,
) -> List[WorkerResult]:
    """Dispatch a schedule with a fresh Dispatcher and return the ordered results."""
    return Dispatcher(strategy, executor=executor, seed=seed).dispatch(schedule, preview_mode)
