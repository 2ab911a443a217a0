# gauge_coverage/core/join.py
from __future__ import annotations
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Literal, Sequence
import logging, os, time

from .errors import SeriesLoadError
from .model import StationRecord, StationSeries, readings_frame

_LOG = logging.getLogger(__name__)

OnError = Literal["raise", "collect"]
SeriesLoader = Callable[[Path], object]   # returns DataFrame(time, discharge) or iterable of Reading

@dataclass(frozen=True)
class JoinResult:
    series: list[StationSeries]                            # successes, input order
    errors: list[SeriesLoadError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __len__(self) -> int:
        return len(self.series)

    def __iter__(self) -> Iterator[StationSeries]:
        return iter(self.series)


def _load_one(record: StationRecord, loader: SeriesLoader) -> StationSeries:
    return StationSeries(record=record, df=readings_frame(loader(record.source_path)))


def join(records: Sequence[StationRecord],
         series_loader: SeriesLoader | None = None,
         *,
         on_error: OnError = "raise",
         max_workers: int | None = None,
         timeout: float | None = None) -> JoinResult:
    """
    Attach each station's series to its record (one loader call per record).

    At most ``max_workers`` loads (default: CPU count) run at once; a station is
    submitted only when a slot is free, so its clock starts with its load.
    Results are slotted by input position, so ``result.series`` follows the
    order of ``records`` whatever the completion order.

    on_error:
      "raise"   -> first failure observed raised as SeriesLoadError, pending loads cancelled
      "collect" -> failures gathered in ``result.errors`` (input order), successes kept

    timeout: seconds a single load may run; expiry counts as a SeriesLoadError
    caused by TimeoutError. The stuck worker is abandoned and frees its slot.
    """
    if on_error not in ("raise", "collect"):
        raise ValueError(f"on_error must be 'raise' or 'collect', got {on_error!r}")
    if series_loader is None:
        from ..loaders.series_loader import load as series_loader

    records = list(records)
    if not records:
        return JoinResult(series=[])
    workers = max_workers or os.cpu_count() or 1
    workers = max(1, min(int(workers), len(records)))

    slots: list[StationSeries | None] = [None] * len(records)
    errors: list[tuple[int, SeriesLoadError]] = []
    pending = deque(enumerate(records))
    running: dict[Future, tuple[int, StationRecord, float]] = {}

    # concurrency is bounded by ``running``; the pool only spawns threads on demand,
    # its size leaves room for replacements of abandoned (timed-out) workers
    pool = ThreadPoolExecutor(max_workers=len(records), thread_name_prefix="series-load")
    try:
        while pending or running:
            while pending and len(running) < workers:
                pos, record = pending.popleft()
                fut = pool.submit(_load_one, record, series_loader)
                running[fut] = (pos, record, time.monotonic())

            wait_s = None
            if timeout is not None:
                oldest = min(start for _, _, start in running.values())
                wait_s = max(0.0, oldest + timeout - time.monotonic())
            done, _ = wait(running, timeout=wait_s, return_when=FIRST_COMPLETED)

            failed: list[tuple[int, StationRecord, BaseException]] = []
            for fut in done:
                pos, record, _ = running.pop(fut)
                try:
                    slots[pos] = fut.result()
                except Exception as e:
                    failed.append((pos, record, e))
            if timeout is not None:
                now = time.monotonic()
                for fut, (pos, record, start) in list(running.items()):
                    if now - start >= timeout:
                        del running[fut]
                        failed.append((pos, record, TimeoutError(f"no result within {timeout}s")))

            for pos, record, cause in sorted(failed, key=lambda f: f[0]):
                err = SeriesLoadError(record.id, cause)
                err.__cause__ = cause
                if on_error == "raise":
                    _LOG.error("series load failed for %s; aborting join", record.id)
                    raise err
                _LOG.warning("%s", err)
                errors.append((pos, err))
    finally:
        # abandoned loads keep running in their worker; do not block on them
        pool.shutdown(wait=False, cancel_futures=True)

    series = [s for s in slots if s is not None]
    _LOG.info("joined %d/%d station series (%d failed)", len(series), len(records), len(errors))
    return JoinResult(series=series, errors=[err for _, err in sorted(errors, key=lambda e: e[0])])
