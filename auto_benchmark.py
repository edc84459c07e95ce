#!/usr/bin/env python3
"""
SSA benchmark auto runner.

Detects new engine releases, downloads the build, scans every registered
project, compares each scan against its baseline and records the outcome.
Meant to be invoked by an external timer (one invocation = one tick).

Usage:
  python auto_benchmark.py
  python auto_benchmark.py --mode status
  python auto_benchmark.py --service-dir /srv/ssa-benchmark --configs-dir ./configs

Run mode always exits 0; inspect the state file and failure logs for results.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# ---------------------------------------------------------------------------
# Minimal bootstrap so this file can be executed directly from a checkout.
# ---------------------------------------------------------------------------
if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parent))

from cli.args.base import add_base_args, add_run_args
from cli.dispatch import dispatch


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scheduled regression benchmark runner for the SSA engine.")
    add_base_args(parser)
    add_run_args(parser)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    raise SystemExit(dispatch(args))


if __name__ == "__main__":
    main()
