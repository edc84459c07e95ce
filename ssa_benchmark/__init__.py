"""ssa_benchmark

Core package for the SSA benchmark auto runner.

It owns the pieces every other layer depends on:

* run state persistence (:mod:`ssa_benchmark.state`)
* single-instance locking (:mod:`ssa_benchmark.lock`)
* configuration and logging setup
* filesystem layout contracts (:mod:`ssa_benchmark.io`)

``tools`` (engine adapters) and ``pipeline`` (orchestration) import from here;
this package imports from neither.
"""

from __future__ import annotations

__version__ = "0.1.0"
