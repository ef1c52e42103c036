from pydantic import BaseModel
import os

class Settings(BaseModel):
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    uploads_dir: str = os.getenv("UPLOADS_DIR", "data/reservations")
    reports_dir: str = os.getenv("REPORTS_DIR", "data/reports")
    upload_extension: str = ".xlsx"
    apply_batch_size: int = int(os.getenv("APPLY_BATCH_SIZE", 10))
    worker_concurrency: int = int(os.getenv("WORKER_CONCURRENCY", 4))
    max_job_attempts: int = int(os.getenv("MAX_JOB_ATTEMPTS", 3))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    task_events_channel: str = os.getenv("TASK_EVENTS_CHANNEL", "tasks")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
