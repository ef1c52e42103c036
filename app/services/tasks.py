"""Task use cases exposed over HTTP: upload, status lookup, report download."""
import asyncio
import logging
import uuid
from pathlib import Path
from typing import Callable
from ..exceptions import ReportNotFoundError, TaskNotFoundError, UploadRejectedError
from ..models import StatusResponse, TaskStatus
from ..storage.repo import TaskRepo
from ..storage.schema import TaskRecord
from .report import ReportWriter

logger = logging.getLogger(__name__)

Enqueue = Callable[[str, str], None]

class TasksService:
    def __init__(self, tasks: TaskRepo, reports: ReportWriter, uploads_dir: str | Path,
                 enqueue: Enqueue, extension: str = ".xlsx", max_upload_bytes: int | None = None):
        self.tasks = tasks
        self.reports = reports
        self.uploads_dir = Path(uploads_dir)
        self.enqueue = enqueue
        self.extension = extension
        self.max_upload_bytes = max_upload_bytes

    async def create_task(self, filename: str | None, content: bytes) -> TaskRecord:
        if not filename or not filename.lower().endswith(self.extension):
            raise UploadRejectedError(f"Invalid file extension. Only {self.extension} files are allowed.")
        if not content:
            raise UploadRejectedError("Uploaded file is empty.")
        if self.max_upload_bytes is not None and len(content) > self.max_upload_bytes:
            raise UploadRejectedError(f"Uploaded file exceeds {self.max_upload_bytes} bytes.")

        task_id = str(uuid.uuid4())
        file_path = self.uploads_dir / f"{task_id}{self.extension}"
        await asyncio.to_thread(self._store, file_path, content)

        rec = await self.tasks.create(task_id, str(file_path))
        self.enqueue(task_id, str(file_path))
        logger.info("Queued upload %s", filename, extra={"task_id": task_id})
        return rec

    async def get_status(self, task_id: str) -> StatusResponse:
        rec = await self.tasks.get(task_id)
        if rec is None:
            raise TaskNotFoundError(task_id)
        return StatusResponse(status=rec.status, report_path=rec.report_path, fail_reason=rec.fail_reason)

    async def get_report(self, task_id: str) -> str:
        rec = await self.tasks.get(task_id)
        if rec is None:
            raise TaskNotFoundError(task_id)
        # structural failures and successful tasks have no report
        if rec.status != TaskStatus.FAILED or not rec.report_path:
            raise ReportNotFoundError(task_id)
        return await self.reports.read(task_id)

    def _store(self, file_path: Path, content: bytes) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
