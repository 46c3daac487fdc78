"""
Parallel Execution Scheduler.

Partitions a loop over rows or channels across a fixed-size thread pool:
- Work below `min_work_size` elements runs sequentially on the caller
- Rows are grouped into contiguous bands, one task per band
- The caller blocks until every unit has finished
- The first failing unit is re-raised to the caller unchanged

Callers guarantee that units write disjoint targets (rows, bands, channels);
the scheduler does no locking around the work itself.
"""

import logging
import math
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple, Union

import psutil

from pixelflow.core.constants import ParallelConstants
from pixelflow.core.exceptions import verify_positive
from pixelflow.core.geometry import Size

if TYPE_CHECKING:
    from pixelflow.core.image import Image

logger = logging.getLogger(__name__)

# Set on pool threads so nested calls run inline instead of waiting on the pool
_worker_state = threading.local()


def _mark_worker() -> None:
    _worker_state.active = True


def _in_worker() -> bool:
    return getattr(_worker_state, "active", False)


def hardware_parallelism() -> int:
    """Number of logical CPUs, or the fallback when it cannot be detected."""
    count = psutil.cpu_count(logical=True)
    return count if count else ParallelConstants.FALLBACK_WORKER_COUNT


class ParallelScheduler:
    """
    Row and channel loop scheduler backed by a ThreadPoolExecutor.

    Example:
        >>> scheduler = ParallelScheduler(worker_count=4)
        >>> scheduler.for_each_row(image, lambda y: process_row(y))
    """

    def __init__(
        self,
        min_work_size: int = ParallelConstants.MIN_WORK_SIZE_DEFAULT,
        worker_count: Optional[int] = None,
    ):
        """
        Args:
            min_work_size: Elements below which execution is sequential
            worker_count: Pool size, defaults to the hardware parallelism
        """
        self._lock = threading.RLock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._min_work_size = verify_positive(min_work_size, "min_work_size")
        self._worker_count = (
            hardware_parallelism()
            if worker_count is None
            else verify_positive(worker_count, "worker_count")
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def min_work_size(self) -> int:
        return self._min_work_size

    @min_work_size.setter
    def min_work_size(self, value: int) -> None:
        value = verify_positive(value, "min_work_size")
        with self._lock:
            self._min_work_size = value
        logger.info(f"Scheduler min_work_size set to {value}")

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @worker_count.setter
    def worker_count(self, value: int) -> None:
        value = verify_positive(value, "worker_count")
        with self._lock:
            if value == self._worker_count:
                return
            self._worker_count = value
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        logger.info(f"Scheduler worker_count set to {value}")

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._worker_count,
                    thread_name_prefix=ParallelConstants.THREAD_NAME_PREFIX,
                    initializer=_mark_worker,
                )
                logger.debug(f"Started thread pool with {self._worker_count} worker(s)")
            return self._executor

    def shutdown(self) -> None:
        """Release the pool; a later call starts a new one."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
            logger.debug("Thread pool shut down")

    def __enter__(self) -> "ParallelScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Partitioning
    # ------------------------------------------------------------------

    def partition(self, count: int, unit_work: int = 1) -> List[Tuple[int, int]]:
        """
        Split range(count) into contiguous [start, stop) chunks.

        Args:
            count: Number of units (rows or channels)
            unit_work: Elements processed per unit (e.g. image width)

        Returns:
            Chunks covering every unit exactly once, in order
        """
        if count <= 0:
            return []
        units_per_chunk = max(1, math.ceil(self._min_work_size / max(1, unit_work)))
        chunks = max(1, min(self._worker_count, count // units_per_chunk))
        step, extra = divmod(count, chunks)

        bounds = []
        start = 0
        for index in range(chunks):
            stop = start + step + (1 if index < extra else 0)
            bounds.append((start, stop))
            start = stop
        return bounds

    def _submit(
        self, chunks: List[Tuple[int, int]], task: Callable[[int, int], None]
    ) -> List[Future]:
        futures: List[Future] = []
        executor = self._get_executor()
        for start, stop in chunks:
            while True:
                try:
                    futures.append(executor.submit(task, start, stop))
                    break
                except RuntimeError:
                    # Pool replaced by a concurrent worker_count change or shutdown
                    with self._lock:
                        if self._executor is executor:
                            raise
                    logger.debug("Thread pool replaced while submitting, retrying")
                    executor = self._get_executor()
        return futures

    def _run(self, chunks: List[Tuple[int, int]], task: Callable[[int, int], None]) -> None:
        if len(chunks) <= 1 or self._worker_count == 1 or _in_worker():
            for start, stop in chunks:
                task(start, stop)
            return

        futures = self._submit(chunks, task)
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)

        failed = next((f for f in futures if f in done and f.exception() is not None), None)
        if failed is None:
            return

        for future in pending:
            future.cancel()
        # In-flight units finish; their results are discarded
        wait(pending)
        error = failed.exception()
        logger.error(f"Parallel unit failed: {type(error).__name__}: {error}")
        raise error

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    def for_each_band(
        self, space: Union[Size, "Image", Tuple[int, int]], body: Callable[[int, int], None]
    ) -> None:
        """
        Run body(y_start, y_stop) over disjoint row bands covering the image.

        Args:
            space: Image or Size whose rows are iterated
            body: Callable processing rows y_start..y_stop-1
        """
        width, height = _extent(space)
        chunks = self.partition(height, width)
        logger.debug(f"Scheduling {height} row(s) of width {width} in {len(chunks)} band(s)")
        self._run(chunks, body)

    def for_each_row(
        self, space: Union[Size, "Image", Tuple[int, int]], body: Callable[[int], None]
    ) -> None:
        """Run body(y) once for every row y."""

        def band(start: int, stop: int) -> None:
            for y in range(start, stop):
                body(y)

        self.for_each_band(space, band)

    def for_each_channel(self, image: "Image", body: Callable[[int], None]) -> None:
        """Run body(channel) once for every channel of image."""

        def chunk(start: int, stop: int) -> None:
            for channel in range(start, stop):
                body(channel)

        chunks = self.partition(image.channels, image.width * image.height)
        self._run(chunks, chunk)

    def __repr__(self) -> str:
        return (
            f"ParallelScheduler(min_work_size={self._min_work_size}, "
            f"worker_count={self._worker_count})"
        )


def _extent(space) -> Tuple[int, int]:
    if isinstance(space, Size):
        return space.width, space.height
    if hasattr(space, "width") and hasattr(space, "height"):
        return space.width, space.height
    width, height = space
    return width, height


# ----------------------------------------------------------------------
# Process-wide default
# ----------------------------------------------------------------------

_default_scheduler: Optional[ParallelScheduler] = None
_default_lock = threading.Lock()


def get_default_scheduler() -> ParallelScheduler:
    """Process-wide scheduler, created from settings on first use."""
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            from pixelflow.config import get_settings

            parallel = get_settings().parallel
            _default_scheduler = ParallelScheduler(
                min_work_size=parallel.min_work_size,
                worker_count=parallel.worker_count,
            )
            logger.debug(f"Created default {_default_scheduler!r}")
        return _default_scheduler


def set_default_scheduler(scheduler: Optional[ParallelScheduler]) -> None:
    """Replace the process-wide scheduler; None recreates it from settings on next use."""
    global _default_scheduler
    with _default_lock:
        previous, _default_scheduler = _default_scheduler, scheduler
    if previous is not None and previous is not scheduler:
        previous.shutdown()


def resolve_scheduler(scheduler: Optional[ParallelScheduler]) -> ParallelScheduler:
    """Return scheduler, or the process-wide default when None."""
    return scheduler if scheduler is not None else get_default_scheduler()
