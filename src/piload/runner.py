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
import time
from typing import List, Optional, Tuple

from .aggregator import aggregate
from .dispatcher import Dispatcher, DispatchState
from .schedule import compute_schedule
from .types import DispatchStrategy, Report, RunConfig, RuntimeSchedule, WorkerResult

logger = logging.getLogger(__name__)


class LoadRunner:
    """Drives one load run from schedule to report.

    The runner owns a single Dispatcher, so it can only run once. Results and
    the report stay available afterwards for inspection.

    Attributes:
        config: The immutable configuration of the run
        schedule: The runtime budget of every worker
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.schedule: RuntimeSchedule = compute_schedule(
            config.thread_count, config.runtime_seconds, config.tiered_runtime
        )
        self._dispatcher = Dispatcher(config.strategy, executor=config.executor, seed=config.seed)
        self.results: List[WorkerResult] = []
        self.report: Optional[Report] = None

    @property
    def state(self) -> DispatchState:
        return self._dispatcher.state

    @property
    def totals(self) -> Optional[Tuple[int, int]]:
        """Shared (hits, iterations) of a FIXED_POOL run, None for the other strategies."""
        return self._dispatcher.totals

    def _banner(self) -> str:
        mode = self.config.mode
        if self.config.strategy == DispatchStrategy.SERIAL:
            return f"Estimating Pi using {mode.description}"
        threads = "thread" if self.config.thread_count == 1 else "threads"
        return f"Estimating Pi using {mode.description}, {self.config.thread_count} {threads}"

    def run(self) -> Report:
        """
        Run the workers, wait for all of them, and aggregate their results.

        Returns:
            The Report of the run

        Raises:
            PiLoadError: If the runner was already used or a worker could not complete
        """
        preview = self.config.preview_mode

        if preview:
            logger.debug(self._banner())
        else:
            logger.info(self._banner())

        start = time.monotonic()
        self.results = self._dispatcher.dispatch(self.schedule, preview)
        elapsed = time.monotonic() - start

        self.report = aggregate(
            self.results,
            preview_mode=preview,
            strategy_name=self.config.strategy_name,
            elapsed_seconds=elapsed,
            totals=self._dispatcher.totals,
        )
        self._dispatcher.mark_reported()

        if not preview:
            logger.info("")
            logger.info(self.report.format())
            logger.info(f"Done, {elapsed:.2f} seconds elapsed")

        return self.report


def run(config: RunConfig) -> Report:
    """Run a load test described by ``config`` and return its Report."""
    return LoadRunner(config).run()
