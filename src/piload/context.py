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
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError

from .cores import get_core_count
from .types import (
    DEFAULT_RUNTIME_SECONDS,
    ExecutorKind,
    PiLoadError,
    PiLoadErrorCode,
    ProcessingMode,
    RunConfig,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "PILOAD_"
DEFAULT_MODE = ProcessingMode.TPL45


class EnvironmentSettings(BaseModel):
    """Settings read from ``PILOAD_*`` environment variables."""

    threads: Optional[int] = None
    runtime: Optional[int] = None
    mode: Optional[str] = None
    tiered: Optional[bool] = None
    preview: Optional[bool] = None
    executor: Optional[ExecutorKind] = None
    seed: Optional[int] = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "EnvironmentSettings":
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise PiLoadError(PiLoadErrorCode.INVALID_CONFIG, f"invalid {ENV_PREFIX}* environment: {e}") from e


class PiLoadContext:
    """Resolves the settings of a run.

    Explicit values win over ``PILOAD_*`` environment variables, which win
    over the built-in defaults. The thread count defaults to the number of
    physical cores.
    """

    def __init__(
        self,
        threads: Optional[int] = None,
        runtime: Optional[int] = None,
        mode: Optional[Any] = None,
        tiered: Optional[bool] = None,
        preview: Optional[bool] = None,
        executor: Optional[Any] = None,
        seed: Optional[int] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        env = EnvironmentSettings.from_environ(os.environ if environ is None else environ)

        self.mode = ProcessingMode.parse(_first(mode, env.mode, DEFAULT_MODE))
        self.runtime = _first(runtime, env.runtime, DEFAULT_RUNTIME_SECONDS)
        self.tiered = bool(_first(tiered, env.tiered, False))
        self.preview = bool(_first(preview, env.preview, False))
        self.executor = ExecutorKind(_first(executor, env.executor, ExecutorKind.PROCESS))
        self.seed = _first(seed, env.seed, None)

        threads = _first(threads, env.threads, None)
        if threads is None:
            threads = get_core_count()
            logger.debug(f"Using detected core count: {threads}")
        self.threads = threads

    def to_config(self) -> RunConfig:
        """Build the immutable RunConfig of these settings.

        Raises:
            PiLoadError: If the thread count is not positive
        """
        if self.runtime < 1:
            logger.warning(f"Runtime {self.runtime} is below 1 second; using 1 second")

        return RunConfig(
            thread_count=self.threads,
            runtime_seconds=self.runtime,
            tiered_runtime=self.tiered,
            preview_mode=self.preview,
            mode=self.mode,
            executor=self.executor,
            seed=self.seed,
        )


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None
