from __future__ import annotations

import argparse
from pathlib import Path

from cli.commands.run import run_tick
from cli.commands.status import run_status
from ssa_benchmark.settings import BenchmarkSettings, load_settings


def settings_from_args(args: argparse.Namespace) -> BenchmarkSettings:
    """Resolve settings from .env, environment and CLI overrides."""
    return load_settings(
        Path(args.env_file) if args.env_file else None,
        service_dir=args.service_dir,
        configs_dir=args.configs_dir,
        report_dir=args.report_dir,
        work_dir=args.work_dir,
        baseline_version=getattr(args, "baseline_version", None),
        tolerance=getattr(args, "tolerance", None),
    )


def dispatch(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    if args.mode == "status":
        return run_status(settings)
    return run_tick(settings, verbose=bool(args.verbose))
