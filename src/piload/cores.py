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

import psutil

logger = logging.getLogger(__name__)


def get_core_count() -> int:
    """
    Return the number of physical cores on this machine.

    Hyperthreading is not counted, so a computer with two 4-core chips
    reports 8 cores. Falls back to the logical CPU count, then to 1.
    """
    physical = psutil.cpu_count(logical=False)
    if physical is not None and physical >= 1:
        return physical

    logical = psutil.cpu_count(logical=True)
    if logical is not None and logical >= 1:
        logger.warning(f"Physical core count unavailable; using logical CPU count {logical}")
        return logical

    logger.warning(f"Core count reported as {physical}; will use 1 thread")
    return 1
