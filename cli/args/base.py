from __future__ import annotations

import argparse


def add_base_args(parser: argparse.ArgumentParser) -> None:
    """Register CLI flags shared by every mode.

    Path flags override the matching ``SSA_BENCH_*`` environment variables.
    """

    parser.add_argument(
        "--mode",
        choices=["run", "status"],
        default="run",
        help="run = one benchmark tick (default), status = print persisted state",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: .env at the project root).",
    )
    parser.add_argument("--service-dir", default=None, help="State, lock, engine cache and logs.")
    parser.add_argument("--configs-dir", default=None, help="One subdirectory per project.")
    parser.add_argument("--report-dir", default=None, help="Scan and comparison reports.")
    parser.add_argument("--work-dir", default=None, help="Working directory for engine invocations.")
    parser.add_argument("--verbose", action="store_true", help="Debug-level logging.")


def add_run_args(parser: argparse.ArgumentParser) -> None:
    """Register flags for run mode."""

    parser.add_argument(
        "--baseline-version",
        default=None,
        help="Engine version used to seed missing baselines.",
    )
    parser.add_argument(
        "--tolerance",
        type=int,
        default=None,
        help="Permitted difference (percent) passed to the engine comparison.",
    )
