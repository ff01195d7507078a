"""Bounded worker pool that maps one per-file operation over a file list."""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from suite_doctor.models import FileFailure, PipelineStage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BatchOutcome(BaseModel, Generic[T]):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    results: list[T] = Field(default_factory=list)          # in input order
    failures: list[FileFailure] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)        # never scheduled


def map_files(
    paths: list[str],
    worker: Callable[[str], T],
    stage: PipelineStage,
    max_workers: int = 4,
    deadline: float | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> BatchOutcome[T]:
    """Run ``worker`` over ``paths`` with at most ``max_workers`` in flight.

    Any exception raised by ``worker`` becomes a :class:`FileFailure` for
    that path. Once ``clock()`` reaches ``deadline`` no further paths are
    submitted; work already in flight is allowed to finish.

    Args:
        paths: Files to process.
        worker: Per-file operation.
        stage: Stage recorded on failures.
        max_workers: Pool size and in-flight window.
        deadline: Value of ``clock()`` after which scheduling stops.
        clock: Monotonic clock.

    Returns:
        BatchOutcome with results ordered like ``paths``.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    results: dict[int, T] = {}
    failures: dict[int, FileFailure] = {}
    skipped: list[str] = []
    pending: dict[Future, int] = {}
    started = time.perf_counter()

    def collect(done: set[Future]) -> None:
        for future in done:
            index = pending.pop(future)
            try:
                results[index] = future.result()
            except Exception as exc:
                logger.warning(
                    "%s failed for %s: %s", stage.value, paths[index], exc,
                    extra={"file_path": paths[index], "stage": stage.value},
                )
                failures[index] = FileFailure(
                    file_path=paths[index], stage=stage, error=str(exc) or type(exc).__name__
                )

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for index, path in enumerate(paths):
            if len(pending) >= max_workers:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                collect(done)
            if deadline is not None and clock() >= deadline:
                skipped = list(paths[index:])
                logger.warning(
                    "Time budget expired during %s; %d file(s) not scheduled",
                    stage.value, len(skipped),
                    extra={"stage": stage.value},
                )
                break
            pending[pool.submit(worker, path)] = index

        if pending:
            done, _ = wait(pending)
            collect(done)

    logger.info(
        "%s finished: %d ok, %d failed, %d skipped",
        stage.value, len(results), len(failures), len(skipped),
        extra={"stage": stage.value, "duration_ms": (time.perf_counter() - started) * 1000},
    )
    return BatchOutcome(
        results=[results[index] for index in sorted(results)],
        failures=[failures[index] for index in sorted(failures)],
        skipped=skipped,
    )
