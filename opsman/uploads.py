"""
Chunked upload processing — bounded concurrency over a list of items.

Items are processed in fixed-size chunks. Inside a chunk, sub-batches of
at most ``max_concurrent`` items are started together and awaited together,
so one item's failure never cancels its siblings. Chunks run strictly one
after another with a pause in between.

Usage:
    result = await process_in_chunks(files, save_file, on_progress=report)
    result.successful, result.failed

Pre-flight helpers (analyze_files, validate_files) work on any objects
exposing ``.size`` in bytes and ``.name`` (Django UploadedFile does).
"""

import asyncio
import inspect
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from opsman.conf import opsman_settings
from opsman.exceptions import UploadError

logger = logging.getLogger('opsman')

MB = 1024 * 1024

# (average size ceiling in MB, recommended batch size, warn above N files)
SIZE_TIERS = (
    (2, 10, 20),
    (10, 5, 10),
    (None, 3, 5),
)

# Rough cost of one sub-batch round, used for the time estimate
SECONDS_PER_ROUND = 2


@dataclass
class UploadResult:
    """Tally of a chunked run."""

    total: int
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    errors: list[tuple[int, BaseException]] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.successful + self.failed


@dataclass(frozen=True)
class FileAnalysis:
    total_size: int
    average_size: float
    recommended_batch_size: int
    estimated_seconds: int = 0
    warning_message: str | None = None


@dataclass(frozen=True)
class BatchValidation:
    valid: bool
    errors: tuple[str, ...] = ()


def _chunks(items: Sequence, size: int):
    for start in range(0, len(items), size):
        yield start, items[start:start + size]


def _cancel(result: UploadResult) -> UploadResult:
    result.cancelled = True
    result.skipped = result.total - result.processed
    logger.info(
        "upload.cancelled",
        extra={"processed": result.processed, "skipped": result.skipped},
    )
    return result


async def _notify(on_progress, processed: int, total: int) -> None:
    if on_progress is None:
        return
    ret = on_progress(processed, total)
    if inspect.isawaitable(ret):
        await ret


async def process_in_chunks(
    items: Sequence[Any],
    processor: Callable[[Any, int], Awaitable[Any]],
    on_progress: Callable[[int, int], Any] | None = None,
    *,
    chunk_size: int | None = None,
    max_concurrent: int | None = None,
    chunk_delay: float | None = None,
    cancel_event: asyncio.Event | None = None,
) -> UploadResult:
    """
    Run ``processor(item, index)`` over every item.

    Args:
        items: Items to process, in order
        processor: Async callable; a raised exception marks the item failed
        on_progress: Called as (processed, total) after every sub-batch.
            May return an awaitable.
        chunk_size: Items per chunk (default from settings, 5)
        max_concurrent: In-flight items per sub-batch (default 3)
        chunk_delay: Seconds to wait between chunks (default 0.5)
        cancel_event: When set, remaining items are skipped

    Returns:
        UploadResult where successful + failed + skipped == len(items)

    Raises:
        UploadError('INVALID_OPTION'): chunk_size or max_concurrent below 1
    """
    conf = opsman_settings
    chunk_size = conf.UPLOAD_CHUNK_SIZE if chunk_size is None else chunk_size
    max_concurrent = conf.UPLOAD_MAX_CONCURRENT if max_concurrent is None else max_concurrent
    if chunk_delay is None:
        chunk_delay = conf.UPLOAD_CHUNK_DELAY_MS / 1000

    if chunk_size < 1:
        raise UploadError('INVALID_OPTION', option='chunk_size', value=chunk_size)
    if max_concurrent < 1:
        raise UploadError('INVALID_OPTION', option='max_concurrent', value=max_concurrent)

    items = list(items)
    result = UploadResult(total=len(items))

    for chunk_start, chunk in _chunks(items, chunk_size):
        if chunk_start > 0 and chunk_delay > 0:
            if cancel_event is not None and cancel_event.is_set():
                return _cancel(result)
            await asyncio.sleep(chunk_delay)

        for sub_start, sub_batch in _chunks(chunk, max_concurrent):
            if cancel_event is not None and cancel_event.is_set():
                return _cancel(result)

            base = chunk_start + sub_start
            outcomes = await asyncio.gather(
                *(processor(item, base + offset) for offset, item in enumerate(sub_batch)),
                return_exceptions=True,
            )

            for offset, outcome in enumerate(outcomes):
                if isinstance(outcome, BaseException):
                    result.failed += 1
                    result.errors.append((base + offset, outcome))
                    logger.warning(
                        "upload.item_failed",
                        extra={"index": base + offset, "error": repr(outcome)},
                    )
                else:
                    result.successful += 1

            await _notify(on_progress, result.processed, result.total)

    return result


def estimate_seconds(count: int, chunk_size: int | None = None,
                     max_concurrent: int | None = None, chunk_delay: float | None = None) -> int:
    """Whole seconds a run over ``count`` items is expected to take."""
    conf = opsman_settings
    chunk_size = conf.UPLOAD_CHUNK_SIZE if chunk_size is None else chunk_size
    max_concurrent = conf.UPLOAD_MAX_CONCURRENT if max_concurrent is None else max_concurrent
    if chunk_delay is None:
        chunk_delay = conf.UPLOAD_CHUNK_DELAY_MS / 1000
    if chunk_size < 1 or max_concurrent < 1:
        raise UploadError('INVALID_OPTION', chunk_size=chunk_size, max_concurrent=max_concurrent)
    if count <= 0:
        return 0

    full, rest = divmod(count, chunk_size)
    rounds = full * math.ceil(chunk_size / max_concurrent) + math.ceil(rest / max_concurrent)
    chunks = full + (1 if rest else 0)
    return math.ceil(rounds * SECONDS_PER_ROUND + (chunks - 1) * chunk_delay)


def analyze_files(files: Sequence[Any], max_total_size_mb: int | None = None,
                  **options) -> FileAnalysis:
    """
    Recommend a batch size from the average file size.

    Tiers by average size: under 2MB, under 10MB, 10MB and up. A warning is
    produced when the file count exceeds the tier's threshold or the total
    exceeds the total-size ceiling. ``options`` (chunk_size, max_concurrent,
    chunk_delay) only feed the time estimate.
    """
    if max_total_size_mb is None:
        max_total_size_mb = opsman_settings.UPLOAD_MAX_TOTAL_SIZE_MB

    count = len(files)
    total = sum(f.size for f in files)
    average = total / count if count else 0.0
    average_mb = average / MB

    for ceiling, recommended, warn_above in SIZE_TIERS:
        if ceiling is None or average_mb < ceiling:
            break

    warnings = []
    if count > warn_above:
        warnings.append(
            f"Large batch detected ({count} files, average {average_mb:.1f}MB). "
            f"Consider uploading in batches of {recommended} for best performance."
        )
    if total > max_total_size_mb * MB:
        warnings.append(
            f"Total size {total / MB:.1f}MB exceeds the recommended {max_total_size_mb}MB."
        )

    return FileAnalysis(
        total_size=total,
        average_size=average,
        recommended_batch_size=recommended,
        estimated_seconds=estimate_seconds(count, **options),
        warning_message=" ".join(warnings) or None,
    )


def validate_files(files: Sequence[Any], max_file_size_mb: int | None = None,
                   max_total_size_mb: int | None = None) -> BatchValidation:
    """Check per-file and total size ceilings. Never raises."""
    conf = opsman_settings
    if max_file_size_mb is None:
        max_file_size_mb = conf.UPLOAD_MAX_FILE_SIZE_MB
    if max_total_size_mb is None:
        max_total_size_mb = conf.UPLOAD_MAX_TOTAL_SIZE_MB

    errors = [
        f"{f.name} exceeds the maximum file size of {max_file_size_mb}MB"
        for f in files
        if f.size > max_file_size_mb * MB
    ]

    total = sum(f.size for f in files)
    if total > max_total_size_mb * MB:
        errors.append(
            f"Total batch size ({total / MB:.1f}MB) exceeds the maximum of {max_total_size_mb}MB"
        )

    return BatchValidation(valid=not errors, errors=tuple(errors))
