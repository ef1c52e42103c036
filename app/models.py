from enum import Enum
from pydantic import BaseModel
from typing import Optional

class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)

class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        # finalized reservations only accept status changes
        return self in (ReservationStatus.CANCELED, ReservationStatus.COMPLETED)

class Reservation(BaseModel):
    reservation_id: str
    guest_name: str
    status: ReservationStatus
    check_in_date: str  # YYYY-MM-DD
    check_out_date: str  # YYYY-MM-DD

class UploadJob(BaseModel):
    task_id: str
    file_path: str

class TaskResponse(BaseModel):
    task_id: str

class StatusResponse(BaseModel):
    status: TaskStatus
    report_path: Optional[str] = None
    fail_reason: Optional[str] = None
