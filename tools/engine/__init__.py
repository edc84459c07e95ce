"""tools.engine

Adapters around the external engine: HTTP distribution endpoints, the local
binary cache, and subprocess invocation of scan and compare modes.
"""

from __future__ import annotations

from .repository import EngineRepository
from .runner import ComparisonRunner, ProjectRunner
from .versions import VersionResolver

__all__ = [
    "ComparisonRunner",
    "EngineRepository",
    "ProjectRunner",
    "VersionResolver",
]
