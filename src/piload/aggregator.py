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
from typing import Iterable, Optional, Tuple

from .types import Report, WorkerResult

logger = logging.getLogger(__name__)


def compute_pi(hits_in_circle: int, total_iterations: int) -> Optional[float]:
    """Compute 4 * hits / iterations, or None when nothing was sampled."""
    if total_iterations == 0:
        return None
    return 4 * (hits_in_circle / float(total_iterations))


def aggregate(
    results: Iterable[WorkerResult],
    preview_mode: bool = False,
    strategy_name: str = "",
    elapsed_seconds: float = 0.0,
    totals: Optional[Tuple[int, int]] = None,
) -> Report:
    """
    Combine the worker results of one run into a Report.

    Args:
        results: The results returned by the dispatcher
        preview_mode: If True, no load ran and no estimate is computed
        strategy_name: Name shown in the report line
        elapsed_seconds: Wall-clock duration of the whole run
        totals: (hits, iterations) already accumulated while the workers ran;
                when given, the results are not summed again

    Returns:
        The Report of the run; its estimate is None when undefined
    """
    if preview_mode:
        return Report(strategy_name=strategy_name, preview_mode=True)

    if totals is not None:
        hits, iterations = totals
    else:
        hits = 0
        iterations = 0
        for result in results:
            hits += result.hits_in_circle
            iterations += result.total_iterations

    pi_estimate = compute_pi(hits, iterations)
    if pi_estimate is None:
        logger.warning(f"{strategy_name or 'Run'} completed zero iterations; the estimate is undefined")

    return Report(
        strategy_name=strategy_name,
        pi_estimate=pi_estimate,
        total_iterations=iterations,
        elapsed_seconds=elapsed_seconds,
        hits_in_circle=hits,
    )


def format_report(report: Report) -> str:
    return report.format()
