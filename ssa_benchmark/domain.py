"""ssa_benchmark.domain

Domain types shared by the engine adapters and the orchestrator.
"""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

CONFIG_FILENAME = "config.json"
BASELINE_FILENAME = "baseline.json"


@dataclass(frozen=True)
class Project:
    """One registered benchmark target (a subdirectory of the configs root)."""

    name: str
    directory: Path

    @property
    def config_file(self) -> Path:
        return self.directory / CONFIG_FILENAME

    @property
    def baseline_file(self) -> Path:
        return self.directory / BASELINE_FILENAME

    def has_config(self) -> bool:
        return self.config_file.is_file() and os.access(str(self.config_file), os.R_OK)


class Verdict(enum.Enum):
    MATCH = "match"


def discover_projects(configs_dir: Path) -> List[Project]:
    """List subdirectories of *configs_dir* as projects, sorted by name.

    Projects without a config file are included; callers decide to skip them.
    """
    return [
        Project(name=p.name, directory=p)
        for p in sorted(Path(configs_dir).iterdir(), key=lambda x: x.name)
        if p.is_dir()
    ]
