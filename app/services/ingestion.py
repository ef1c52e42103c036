"""Two-phase ingestion of an uploaded reservation sheet.

The validation pass reads every row and collects all problems without
touching the reservation store. Only a file with zero problems reaches the
apply pass, which upserts reservations in fixed-size concurrent batches.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..exceptions import EmptySheetError, TaskNotFoundError
from ..models import Reservation, TaskStatus, UploadJob
from ..storage.repo import TaskRepo
from ..storage.reservations import ReservationRepo
from ..utils.batching import chunked
from .duplicates import DuplicateKeyTracker
from .notifier import TaskNotifier
from .report import ReportWriter
from .sheet import ReservationSheet
from .validation import validate_row

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


@dataclass
class IngestionResult:
    task_id: str
    status: TaskStatus
    applied: int = 0
    errors: List[str] = field(default_factory=list)
    report_path: Optional[str] = None
    outcomes: Dict[str, int] = field(default_factory=dict)


class IngestionWorker:
    def __init__(
        self,
        tasks: TaskRepo,
        reservations: ReservationRepo,
        reports: ReportWriter,
        notifier: Optional[TaskNotifier] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.tasks = tasks
        self.reservations = reservations
        self.reports = reports
        self.notifier = notifier
        self.batch_size = batch_size

    async def process(self, job: UploadJob) -> IngestionResult:
        log = {"task_id": job.task_id}
        task = await self.tasks.get(job.task_id)
        if task is None:
            await self._remove_upload(job)
            raise TaskNotFoundError(job.task_id)

        if task.status.is_terminal:
            logger.info("Task already %s, nothing to do", task.status.value, extra=log)
            await self._remove_upload(job)
            return IngestionResult(task_id=job.task_id, status=task.status,
                                   report_path=task.report_path)

        # the upload stays on disk until a terminal status is stored, so a retry can reread it
        recorded = False
        try:
            logger.info("Processing file %s", job.file_path, extra=log)
            if task.status == TaskStatus.PENDING:
                await self._transition(job.task_id, TaskStatus.IN_PROGRESS)
            result = await self._run(job)
            recorded = True
            return result
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            logger.exception("Error while processing task: %s", reason, extra=log)
            await self._transition(job.task_id, TaskStatus.FAILED, fail_reason=reason)
            recorded = True
            return IngestionResult(task_id=job.task_id, status=TaskStatus.FAILED)
        finally:
            if recorded:
                await self._remove_upload(job)
            else:
                logger.warning("Outcome not recorded, keeping %s for a retry", job.file_path, extra=log)

    async def _run(self, job: UploadJob) -> IngestionResult:
        sheet = await asyncio.to_thread(ReservationSheet.load, job.file_path)
        with sheet:
            mapping = sheet.header_mapping()
            reservations, errors = self._validate(sheet, mapping)

        if errors:
            report_path = await self.reports.write(job.task_id, errors)
            reason = f"Validation failed: {len(errors)} error(s) found in the uploaded file"
            logger.warning(reason, extra={"task_id": job.task_id})
            await self._transition(job.task_id, TaskStatus.FAILED,
                                   report_path=report_path, fail_reason=reason)
            return IngestionResult(task_id=job.task_id, status=TaskStatus.FAILED,
                                   errors=errors, report_path=report_path)

        outcomes = await self._apply(job.task_id, reservations)
        await self._transition(job.task_id, TaskStatus.COMPLETED)
        return IngestionResult(task_id=job.task_id, status=TaskStatus.COMPLETED,
                               applied=len(reservations), outcomes=outcomes)

    def _validate(self, sheet: ReservationSheet, mapping: Dict[str, int]) -> Tuple[List[Reservation], List[str]]:
        tracker = DuplicateKeyTracker()
        reservations: List[Reservation] = []
        errors: List[str] = []
        row_count = 0

        for row_number, row in sheet.rows(mapping):
            row_count += 1
            outcome = validate_row(row, row_number)
            errors.extend(outcome.errors)
            duplicate = tracker.check(row.get("reservation_id"), row_number)
            if duplicate:
                errors.append(duplicate)
            elif outcome.is_valid:
                reservations.append(outcome.reservation)

        if row_count == 0:
            raise EmptySheetError()
        return reservations, errors

    async def _apply(self, task_id: str, reservations: List[Reservation]) -> Dict[str, int]:
        outcomes: Counter = Counter()
        for batch_number, batch in enumerate(chunked(reservations, self.batch_size), start=1):
            results = await asyncio.gather(
                *(self.reservations.upsert(reservation) for reservation in batch),
                return_exceptions=True,
            )
            failures = [result for result in results if isinstance(result, BaseException)]
            if failures:
                raise failures[0]
            outcomes.update(result.value for result in results)
            logger.debug("Applied batch %d (%d rows)", batch_number, len(batch),
                         extra={"task_id": task_id})
        logger.info("Applied %d reservations: %s", len(reservations), dict(outcomes),
                    extra={"task_id": task_id})
        return dict(outcomes)

    async def _transition(self, task_id: str, status: TaskStatus,
                          report_path: Optional[str] = None,
                          fail_reason: Optional[str] = None) -> None:
        await self.tasks.set_status(task_id, status, report_path=report_path, fail_reason=fail_reason)
        logger.info("Task moved to %s", status.value, extra={"task_id": task_id})
        if self.notifier is None:
            return
        try:
            await self.notifier.publish(task_id, status, fail_reason)
        except Exception as exc:
            logger.warning("Could not publish task update: %s", exc, extra={"task_id": task_id})

    async def _remove_upload(self, job: UploadJob) -> None:
        try:
            await asyncio.to_thread(Path(job.file_path).unlink)
        except OSError as exc:
            logger.warning("Could not delete uploaded file %s: %s", job.file_path, exc,
                           extra={"task_id": job.task_id})
