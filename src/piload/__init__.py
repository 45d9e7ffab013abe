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
import os
import sys

CONSOLE_LOGGER = "piload"

_console = logging.getLogger(CONSOLE_LOGGER)
if not _console.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    if os.getenv("PILOAD_LOG_LEVEL", "INFO") == "DEBUG":
        _console.setLevel(logging.DEBUG)
        _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(processName)s %(name)s: %(message)s"))
    else:
        _console.setLevel(logging.INFO)
        _handler.setFormatter(logging.Formatter("%(message)s"))
    _console.addHandler(_handler)
    _console.propagate = False

__version__ = "0.1.0"

from .types import (
    # Type aliases
    RuntimeSchedule,

    # Constants
    DEFAULT_RUNTIME_SECONDS,
    ENDTIME_CHECK_MODULUS,

    # Enums
    DispatchStrategy,
    ExecutorKind,
    ProcessingMode,
    PiLoadErrorCode,

    # Classes
    PiLoadError,
    RunConfig,
    WorkerResult,
    Report,
    ReportModel,
)

from .sampler import in_circle, draw
from .schedule import compute_schedule
from .worker import sample_until
from .dispatcher import Dispatcher, DispatchState, dispatch
from .aggregator import aggregate, compute_pi, format_report
from .runner import LoadRunner, run
from .context import PiLoadContext
from .cores import get_core_count

__all__ = [
    # Type aliases
    "RuntimeSchedule",

    # Constants
    "DEFAULT_RUNTIME_SECONDS",
    "ENDTIME_CHECK_MODULUS",
    "CONSOLE_LOGGER",

    # Enums
    "DispatchStrategy",
    "ExecutorKind",
    "ProcessingMode",
    "PiLoadErrorCode",
    "DispatchState",

    # Classes
    "PiLoadError",
    "RunConfig",
    "WorkerResult",
    "Report",
    "ReportModel",

    # Engine
    "in_circle",
    "draw",
    "compute_schedule",
    "sample_until",
    "Dispatcher",
    "dispatch",
    "aggregate",
    "compute_pi",
    "format_report",

    # Orchestration
    "LoadRunner",
    "run",
    "PiLoadContext",
    "get_core_count",
]
