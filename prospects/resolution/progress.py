"""
Batch progress tracking.

Processes items sequentially in fixed-size chunks, keeps monotonic outcome
counters, emits a ProgressEvent after every item and flushes totals to the
job tracker after every chunk.
"""

import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from config.logging import get_logger
from config.settings import settings

logger = get_logger("progress")


class ProgressStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ItemStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class BatchTotals:
    """Outcome counters for a batch; only ever incremented."""
    total: int = 0
    processed: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    matched: int = 0

    def record(self, status: ItemStatus, matched: bool = False):
        self.processed += 1
        if status is ItemStatus.SUCCESS:
            self.success += 1
        elif status is ItemStatus.FAILED:
            self.failed += 1
        elif status is ItemStatus.SKIPPED:
            self.skipped += 1
        if matched:
            self.matched += 1

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CurrentItem:
    """The item a progress event refers to."""
    id: str
    name: str
    step: str
    fields_filled: Optional[list[str]] = None
    company_matched: Optional[str] = None


@dataclass
class ProgressEvent:
    """Snapshot of a batch's progress for the job tracker."""
    operation_type: str
    status: ProgressStatus
    totals: BatchTotals
    current: Optional[CurrentItem] = None
    message: Optional[str] = None

    items_per_second: float = 0.0
    estimated_time_remaining: float = 0.0
    current_batch: int = 0
    total_batches: int = 0

    @property
    def percent_complete(self) -> int:
        if not self.totals.total:
            return 100 if self.status is ProgressStatus.COMPLETED else 0
        return round(self.totals.processed / self.totals.total * 100)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class ItemOutcome:
    """What a batch handler reports for one item."""
    status: ItemStatus
    matched: bool = False
    step: str = ""
    fields_filled: Optional[list[str]] = None
    company_matched: Optional[str] = None
    result: Any = None


@dataclass
class BatchResult:
    """Final totals, per-item outcomes and errors of a batch run."""
    totals: BatchTotals
    status: ProgressStatus
    outcomes: list[ItemOutcome] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    stats: dict = field(default_factory=dict)


ProgressCallback = Callable[[ProgressEvent], None]


def calculate_eta(processed: int, total: int, elapsed: float) -> tuple[float, float]:
    """Return (items_per_second, estimated_seconds_remaining)."""
    if processed == 0 or elapsed <= 0:
        return 0.0, 0.0
    items_per_second = processed / elapsed
    remaining = total - processed
    eta = remaining / items_per_second if items_per_second > 0 else 0.0
    return items_per_second, eta


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{round(seconds)}s"
    minutes = int(seconds // 60)
    return f"{minutes}m {round(seconds % 60)}s"


def format_progress_message(event: ProgressEvent) -> str:
    """Human-readable progress line, e.g. ``40% complete (40/100) • 12.5/sec • ETA: 5s``."""
    totals = event.totals
    message = (
        f"{event.percent_complete}% complete ({totals.processed}/{totals.total}) "
        f"• {event.items_per_second:.1f}/sec"
    )
    if event.estimated_time_remaining > 0:
        message += f" • ETA: {format_duration(event.estimated_time_remaining)}"
    return message


class BatchProcessor:
    """
    Sequential chunked batch runner.

    Usage:
        processor = BatchProcessor("bulk-autofill", tracker=tracker, on_progress=print)
        result = processor.process(contacts, handle_contact, item_label=label)

    The handler returns an ItemOutcome per item. Exceptions raised by the
    handler are recorded as failures and the batch moves on. Between chunks
    the tracker's cancellation flag is checked.
    """

    def __init__(
        self,
        operation_type: str,
        tracker=None,
        on_progress: Optional[ProgressCallback] = None,
        batch_size: Optional[int] = None,
        job_id: Optional[str] = None,
    ):
        self.operation_type = operation_type
        self.tracker = tracker
        self.on_progress = on_progress
        self.batch_size = max(1, batch_size or settings.BATCH_SIZE)
        self.job_id = job_id

    def _emit(self, event: ProgressEvent):
        if self.on_progress:
            self.on_progress(event)

    def _event(
        self,
        status: ProgressStatus,
        totals: BatchTotals,
        started: float,
        current_batch: int = 0,
        total_batches: int = 0,
        current: Optional[CurrentItem] = None,
        message: Optional[str] = None,
    ) -> ProgressEvent:
        items_per_second, eta = calculate_eta(
            totals.processed, totals.total, time.monotonic() - started
        )
        return ProgressEvent(
            operation_type=self.operation_type,
            status=status,
            totals=BatchTotals(**totals.to_dict()),
            current=current,
            message=message,
            items_per_second=items_per_second,
            estimated_time_remaining=eta,
            current_batch=current_batch,
            total_batches=total_batches,
        )

    def start(self, total: int) -> BatchTotals:
        """Create the job (if tracked) and announce the batch."""
        totals = BatchTotals(total=total)
        if self.tracker is not None and self.job_id is None:
            self.job_id = self.tracker.start(self.operation_type, total)
        self._emit(self._event(ProgressStatus.PENDING, totals, time.monotonic()))
        return totals

    def set_total(self, totals: BatchTotals, total: int):
        """Record the work-set size once it is known and persist it."""
        totals.total = total
        if self.tracker is not None and self.job_id is not None:
            self.tracker.update_progress(self.job_id, totals)

    def fail(self, totals: BatchTotals, error: Exception):
        """Mark the batch failed; counters persisted so far stay valid."""
        message = f"{self.operation_type} failed: {error}"
        logger.error(message)
        if self.tracker is not None and self.job_id is not None:
            self.tracker.finish(self.job_id, ProgressStatus.FAILED, totals, message)
        self._emit(ProgressEvent(
            operation_type=self.operation_type,
            status=ProgressStatus.FAILED,
            totals=BatchTotals(**totals.to_dict()),
            message=message,
        ))

    def process(
        self,
        items: Sequence[Any],
        handler: Callable[[Any], ItemOutcome],
        item_label: Callable[[Any], tuple[str, str]] = lambda item: (str(item), str(item)),
        totals: Optional[BatchTotals] = None,
    ) -> BatchResult:
        """
        Run the handler over all items.

        Args:
            items: Items to process
            handler: Callable returning an ItemOutcome for one item
            item_label: Callable returning (id, display name) for an item
            totals: Counters from start(); created here if omitted

        Returns:
            BatchResult with final totals, outcomes and per-item errors
        """
        if totals is None:
            totals = self.start(len(items))

        started = time.monotonic()
        total_batches = (len(items) + self.batch_size - 1) // self.batch_size
        outcomes: list[ItemOutcome] = []
        errors: list[dict] = []
        status = ProgressStatus.RUNNING

        logger.info(
            f"Starting {self.operation_type}: {len(items)} items in "
            f"{total_batches} chunk(s) of {self.batch_size}"
        )
        self._emit(self._event(status, totals, started, 0, total_batches))

        for batch_index in range(total_batches):
            if self.tracker is not None and self.job_id is not None:
                if self.tracker.is_cancelled(self.job_id):
                    logger.warning(
                        f"{self.operation_type} cancelled after {totals.processed} items"
                    )
                    status = ProgressStatus.CANCELLED
                    break

            chunk = items[batch_index * self.batch_size:(batch_index + 1) * self.batch_size]
            for item in chunk:
                item_id, item_name = item_label(item)
                try:
                    outcome = handler(item)
                except Exception as e:
                    logger.error(f"Failed to process {item_name} ({item_id}): {e}")
                    outcome = ItemOutcome(status=ItemStatus.FAILED, step="error")
                    error = {"item_id": item_id, "item_name": item_name, "error": str(e)}
                    errors.append(error)
                    if self.tracker is not None and self.job_id is not None:
                        self.tracker.record_error(self.job_id, error)

                totals.record(outcome.status, outcome.matched)
                outcomes.append(outcome)

                current = CurrentItem(
                    id=item_id,
                    name=item_name,
                    step=outcome.step,
                    fields_filled=outcome.fields_filled,
                    company_matched=outcome.company_matched,
                )
                self._emit(self._event(
                    status, totals, started, batch_index + 1, total_batches, current
                ))

            if self.tracker is not None and self.job_id is not None:
                self.tracker.update_progress(self.job_id, totals)

        if status is ProgressStatus.RUNNING:
            status = ProgressStatus.COMPLETED

        elapsed = time.monotonic() - started
        message = (
            f"{self.operation_type} {status.value}: {totals.processed}/{totals.total} processed, "
            f"{totals.success} success, {totals.failed} failed, "
            f"{totals.skipped} skipped, {totals.matched} matched"
        )
        if self.tracker is not None and self.job_id is not None:
            self.tracker.finish(self.job_id, status, totals, message)
        self._emit(self._event(
            status, totals, started, total_batches, total_batches, message=message
        ))

        logger.info(message)
        return BatchResult(
            totals=totals,
            status=status,
            outcomes=outcomes,
            errors=errors,
            elapsed_seconds=elapsed,
        )
