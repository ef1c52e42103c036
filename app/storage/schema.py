from datetime import datetime
from pydantic import BaseModel
from typing import Optional
from ..models import TaskStatus

class TaskRecord(BaseModel):
    task_id: str
    file_path: str
    status: TaskStatus = TaskStatus.PENDING
    report_path: Optional[str] = None  # only for validation failures
    fail_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
