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

import argparse
import sys
from typing import List, Optional

from . import __version__
from .context import PiLoadContext
from .runner import LoadRunner
from .types import ExecutorKind, PiLoadError

EXIT_OK = 0
EXIT_ERROR = 1

DESCRIPTION = """\
Run test calculations on one or more cores to simulate a multi-threaded
application. Each worker estimates Pi by Monte Carlo sampling until its
runtime elapses.
"""

EPILOG = """\
modes:
  1, serial         serial calculation on a single core
  2, parallel-for   fixed pool, one worker per thread, shared totals
  3, tpl40          one task per thread writing into its own slot
  4, tpl45          like tpl40 (default)

Every option may also be set through PILOAD_<OPTION> environment variables,
for example PILOAD_THREADS=4 or PILOAD_TIERED=true. Use --no-tiered or
--no-preview to turn off a flag set in the environment.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="piload",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-m", "--mode", default=None, help="processing mode, 1-4 or its name (default: 4)")
    parser.add_argument("-r", "--runtime", type=int, default=None, help="runtime in seconds (default: 15)")
    parser.add_argument(
        "-t", "--threads", type=int, default=None, help="number of threads (default: number of physical cores)"
    )
    parser.add_argument(
        "--tiered",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="give each successive thread a shorter runtime than the previous one",
    )
    parser.add_argument(
        "--preview",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="show what would run without generating load",
    )
    parser.add_argument(
        "--executor",
        choices=[kind.value for kind in ExecutorKind],
        default=None,
        help="run workers in processes or threads (default: process)",
    )
    parser.add_argument("--seed", type=int, default=None, help="base seed of the per-worker random streams")
    parser.add_argument("--json", action="store_true", help="print the final report as JSON")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the piload command; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        context = PiLoadContext(
            threads=args.threads,
            runtime=args.runtime,
            mode=args.mode,
            tiered=args.tiered,
            preview=args.preview,
            executor=args.executor,
            seed=args.seed,
        )
        config = context.to_config()
        report = LoadRunner(config).run()
    except PiLoadError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        print(report.to_json())

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
