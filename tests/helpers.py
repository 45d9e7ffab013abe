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

import itertools

from piload import ExecutorKind, RunConfig


class FakeClock:
    """A clock that advances one tick every time it is read."""

    def __init__(self, start: int = 1):
        self._ticks = itertools.count(start)
        self.reads = 0

    def __call__(self) -> float:
        self.reads += 1
        return float(next(self._ticks))


def thread_config(**kwargs) -> RunConfig:
    """Build a RunConfig that runs workers in threads.

    Args:
        **kwargs: RunConfig fields overriding the defaults

    Returns:
        A RunConfig with a 1 second runtime and the thread executor
    """
    values = dict(thread_count=1, runtime_seconds=1, executor=ExecutorKind.THREAD)
    values.update(kwargs)
    return RunConfig(**values)
