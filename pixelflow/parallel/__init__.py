"""
Row and channel scheduling across a thread pool.
"""

from pixelflow.parallel.scheduler import (
    ParallelScheduler,
    get_default_scheduler,
    resolve_scheduler,
    set_default_scheduler,
)

__all__ = [
    "ParallelScheduler",
    "get_default_scheduler",
    "set_default_scheduler",
    "resolve_scheduler",
]
