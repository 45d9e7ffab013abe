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

import pytest

from piload import CONSOLE_LOGGER


@pytest.fixture
def console_log(caplog):
    """Capture the records of the piload console logger.

    The console logger does not propagate to the root logger, so the
    capture handler is attached to it directly.
    """
    console = logging.getLogger(CONSOLE_LOGGER)
    console.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        console.removeHandler(caplog.handler)
