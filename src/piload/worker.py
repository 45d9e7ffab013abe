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
import random
import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from .sampler import draw
from .types import ENDTIME_CHECK_MODULUS, WorkerResult

logger = logging.getLogger(__name__)


def _formatted_time(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now()).strftime("%I:%M:%S")


def sample_until(
    rng: random.Random,
    deadline: float,
    clock: Callable[[], float] = time.monotonic,
    batch_size: int = ENDTIME_CHECK_MODULUS,
    max_iterations: Optional[int] = None,
) -> Tuple[int, int]:
    """
    Sample random points until the deadline passes.

    The clock is only consulted once per batch, so the loop may overrun the
    deadline by the time it takes to run one batch.

    Args:
        rng: The random stream owned by the caller
        deadline: Absolute deadline, in the same unit as ``clock``
        clock: Source of the current time
        batch_size: Number of iterations between two deadline checks
        max_iterations: Optional iteration budget; sampling stops once reached

    Returns:
        A tuple of (hits_in_circle, total_iterations)

    Raises:
        ValueError: If max_iterations is negative
    """
    if max_iterations is not None and max_iterations < 0:
        raise ValueError(f"max_iterations must not be negative, got {max_iterations}")

    hits = 0
    iterations = 0

    while True:
        count = batch_size
        if max_iterations is not None:
            count = min(batch_size, max_iterations - iterations)

        for _ in range(count):
            if draw(rng):
                hits += 1
        iterations += count

        if max_iterations is not None and iterations >= max_iterations:
            break
        if clock() > deadline:
            break

    return hits, iterations


def run(thread_index: int, allotted_seconds: int, preview_mode: bool = False, seed: Optional[int] = None) -> WorkerResult:
    """
    Run one worker until its own deadline.

    Args:
        thread_index: 0-based index of the worker
        allotted_seconds: Runtime budget; values below 1 run for one second
        preview_mode: If True, only report what would run
        seed: Seed of the worker's private random stream; None seeds from OS entropy

    Returns:
        The WorkerResult of this worker
    """
    runtime_seconds = max(1, allotted_seconds)
    thread_number = thread_index + 1

    if preview_mode:
        end_time = datetime.now() + timedelta(seconds=runtime_seconds)
        logger.info(
            f"  Thread {thread_number} would start at {_formatted_time()} with runtime {runtime_seconds} seconds "
            f"(ending at {_formatted_time(end_time)})"
        )
        return WorkerResult(thread_index=thread_index, allotted_seconds=runtime_seconds)

    rng = random.Random(seed)
    start = time.monotonic()
    deadline = start + runtime_seconds

    logger.info(f"  Thread {thread_number} starting at {_formatted_time()} with runtime {runtime_seconds} seconds")

    hits, iterations = sample_until(rng, deadline)
    elapsed = time.monotonic() - start

    logger.info(f"  Thread {thread_number} complete at {_formatted_time()}, {elapsed:.1f} seconds elapsed")
    logger.debug(f"Thread {thread_number}: {hits:,} hits out of {iterations:,} iterations")

    return WorkerResult(
        thread_index=thread_index,
        hits_in_circle=hits,
        total_iterations=iterations,
        allotted_seconds=runtime_seconds,
        elapsed_seconds=elapsed,
    )
