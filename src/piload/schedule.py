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
import math

from .types import PiLoadError, PiLoadErrorCode, RuntimeSchedule

logger = logging.getLogger(__name__)


def decrement_runtime(runtime_seconds: int, thread_count: int) -> int:
    """Shrink a runtime by the thread-count-relative factor 1 - 1/thread_count.

    The result never drops below one second.
    """
    factor = 1 - 1.0 / thread_count
    return max(1, math.floor(runtime_seconds * factor))


def compute_schedule(thread_count: int, base_seconds: int, tiered: bool = False) -> RuntimeSchedule:
    """
    Compute the runtime budget of every worker.

    Args:
        thread_count: Number of workers, must be positive
        base_seconds: Runtime of the first worker; values below 1 are clamped to 1
        tiered: If True, each worker gets a shorter budget than the previous one

    Returns:
        A list of ``thread_count`` runtimes in seconds, each at least 1

    Raises:
        PiLoadError: If thread_count is not positive
    """
    if thread_count < 1:
        raise PiLoadError(PiLoadErrorCode.INVALID_CONFIG, f"thread_count must be positive, got {thread_count}")

    runtime_seconds = max(1, base_seconds)
    schedule = []

    for _ in range(thread_count):
        schedule.append(runtime_seconds)
        if tiered:
            runtime_seconds = decrement_runtime(runtime_seconds, thread_count)

    logger.debug(f"Computed schedule for {thread_count} threads (tiered={tiered}): {schedule}")
    return schedule
