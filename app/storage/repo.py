from datetime import datetime, timezone
from redis.asyncio import Redis
from .schema import TaskRecord
from ..exceptions import InvalidTransitionError, TaskNotFoundError
from ..models import TaskStatus

ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS, TaskStatus.FAILED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.FAILED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.FAILED: set(),
}

def _now() -> datetime:
    return datetime.now(timezone.utc)

class TaskRepo:
    def __init__(self, r: Redis):
        self.r = r

    def _key(self, task_id: str) -> str:
        return f"task:{task_id}"

    async def create(self, task_id: str, file_path: str) -> TaskRecord:
        now = _now()
        rec = TaskRecord(task_id=task_id, file_path=file_path, created_at=now, updated_at=now)
        await self.r.hset(self._key(task_id), mapping={
            "file_path": rec.file_path,
            "status": rec.status.value,
            "report_path": "",
            "fail_reason": "",
            "created_at": rec.created_at.isoformat(),
            "updated_at": rec.updated_at.isoformat(),
        })
        return rec

    async def get(self, task_id: str) -> TaskRecord | None:
        data = await self.r.hgetall(self._key(task_id))
        if not data:
            return None
        return TaskRecord(task_id=task_id,
                          file_path=data.get("file_path", ""),
                          status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
                          report_path=data.get("report_path") or None,
                          fail_reason=data.get("fail_reason") or None,
                          created_at=datetime.fromisoformat(data["created_at"]),
                          updated_at=datetime.fromisoformat(data["updated_at"]))

    async def set_status(self, task_id: str, status: TaskStatus,
                         report_path: str | None = None,
                         fail_reason: str | None = None) -> TaskRecord:
        rec = await self.get(task_id)
        if rec is None:
            raise TaskNotFoundError(task_id)
        if status not in ALLOWED_TRANSITIONS[rec.status]:
            raise InvalidTransitionError(task_id, rec.status, status)

        updated_at = _now()
        await self.r.hset(self._key(task_id), mapping={
            "status": status.value,
            "report_path": report_path or "",
            "fail_reason": fail_reason or "",
            "updated_at": updated_at.isoformat(),
        })
        return rec.model_copy(update={
            "status": status,
            "report_path": report_path,
            "fail_reason": fail_reason,
            "updated_at": updated_at,
        })
