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

import json
import logging

import pytest

from piload import ExecutorKind, PiLoadContext, PiLoadError, PiLoadErrorCode, ProcessingMode, get_core_count
from piload.cli import EXIT_ERROR, EXIT_OK, build_parser, main


@pytest.fixture
def four_cores(monkeypatch):
    """Pretend the machine has four physical cores."""
    monkeypatch.setattr("piload.context.get_core_count", lambda: 4)


def test_context_defaults(four_cores):
    context = PiLoadContext(environ={})
    config = context.to_config()

    assert config.thread_count == 4
    assert config.runtime_seconds == 15
    assert config.mode == ProcessingMode.TPL45
    assert config.tiered_runtime is False
    assert config.preview_mode is False
    assert config.executor == ExecutorKind.PROCESS
    assert config.seed is None


def test_context_reads_environment(four_cores):
    environ = {
        "PILOAD_THREADS": "6",
        "PILOAD_RUNTIME": "3",
        "PILOAD_MODE": "parallel-for",
        "PILOAD_TIERED": "true",
        "PILOAD_PREVIEW": "1",
        "PILOAD_EXECUTOR": "thread",
        "PILOAD_SEED": "99",
    }

    config = PiLoadContext(environ=environ).to_config()

    assert config.thread_count == 6
    assert config.runtime_seconds == 3
    assert config.mode == ProcessingMode.PARALLEL_FOR
    assert config.tiered_runtime is True
    assert config.preview_mode is True
    assert config.executor == ExecutorKind.THREAD
    assert config.seed == 99


def test_explicit_values_override_environment(four_cores):
    environ = {"PILOAD_THREADS": "6", "PILOAD_MODE": "2"}

    config = PiLoadContext(threads=2, mode=3, environ=environ).to_config()

    assert config.thread_count == 2
    assert config.mode == ProcessingMode.TPL40


def test_invalid_environment(four_cores):
    with pytest.raises(PiLoadError) as exc_info:
        PiLoadContext(environ={"PILOAD_THREADS": "many"})

    assert exc_info.value.code == PiLoadErrorCode.INVALID_CONFIG


def test_context_clamps_runtime(four_cores):
    assert PiLoadContext(runtime=0, environ={}).to_config().runtime_seconds == 1


def test_context_rejects_zero_threads(four_cores):
    with pytest.raises(PiLoadError):
        PiLoadContext(threads=0, environ={}).to_config()


def test_core_count_is_positive():
    assert get_core_count() >= 1


def test_core_count_fallback(monkeypatch):
    monkeypatch.setattr("piload.cores.psutil.cpu_count", lambda logical=True: None)
    assert get_core_count() == 1

    monkeypatch.setattr("piload.cores.psutil.cpu_count", lambda logical=True: 8 if logical else None)
    assert get_core_count() == 8


def test_parser_defaults():
    args = build_parser().parse_args([])

    assert args.mode is None
    assert args.runtime is None
    assert args.threads is None
    assert args.tiered is None
    assert args.preview is None
    assert args.json is False


def test_cli_preview(monkeypatch, four_cores, console_log):
    monkeypatch.delenv("PILOAD_THREADS", raising=False)
    console_log.set_level(logging.INFO, logger="piload")

    code = main(["--preview", "--tiered", "--runtime", "10", "--executor", "thread"])

    assert code == EXIT_OK
    assert console_log.text.count("would start") == 4
    assert "approximated" not in console_log.text


def test_parser_negated_flags():
    args = build_parser().parse_args(["--no-tiered", "--no-preview"])

    assert args.tiered is False
    assert args.preview is False


def test_cli_flags_turn_off_environment(monkeypatch, four_cores, console_log):
    monkeypatch.delenv("PILOAD_THREADS", raising=False)
    monkeypatch.setenv("PILOAD_TIERED", "true")
    console_log.set_level(logging.INFO, logger="piload")

    code = main(["--preview", "--no-tiered", "--runtime", "10", "--executor", "thread"])

    assert code == EXIT_OK
    assert console_log.text.count("with runtime 10 seconds") == 4


def test_context_preview_turned_off_over_environment(four_cores):
    args = build_parser().parse_args(["--no-preview"])

    context = PiLoadContext(preview=args.preview, environ={"PILOAD_PREVIEW": "1"})

    assert context.to_config().preview_mode is False


def test_cli_json(capsys):
    code = main(["--mode", "serial", "--runtime", "1", "--seed", "5", "--json"])

    assert code == EXIT_OK
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["strategy"] == "SerialCalculation"
    assert 0 < payload["pi_estimate"] < 4
    assert payload["total_iterations"] > 0


@pytest.mark.parametrize("argv", [["--threads", "0"], ["--mode", "9"]])
def test_cli_invalid_config(argv, capsys):
    code = main(argv + ["--preview"])

    assert code == EXIT_ERROR
    assert "Error:" in capsys.readouterr().err


def test_cli_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        main(["--runtime", "soon"])

    assert exc_info.value.code == 2
