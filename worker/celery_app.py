import asyncio
from celery import Celery
from celery.signals import setup_logging
import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError
from app.config import settings
from app.logging_setup import configure_logging
from app.models import UploadJob
from app.services.ingestion import IngestionWorker
from app.services.notifier import TaskNotifier
from app.services.report import ReportWriter
from app.storage.repo import TaskRepo
from app.storage.reservations import ReservationRepo

celery_app = Celery(
    "reservations",
    broker=settings.redis_url,
    backend=settings.redis_url,
)
celery_app.conf.update(
    worker_concurrency=settings.worker_concurrency,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

@setup_logging.connect
def _setup_logging(**kwargs):
    configure_logging(settings.log_level)

def build_worker(r: redis.Redis) -> IngestionWorker:
    return IngestionWorker(
        tasks=TaskRepo(r),
        reservations=ReservationRepo(r),
        reports=ReportWriter(settings.reports_dir),
        notifier=TaskNotifier(r, settings.task_events_channel),
        batch_size=settings.apply_batch_size,
    )

async def run_job(task_id: str, file_path: str) -> dict:
    r = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        result = await build_worker(r).process(UploadJob(task_id=task_id, file_path=file_path))
    finally:
        await r.aclose()
    return {"task_id": result.task_id, "status": result.status.value, "applied": result.applied}

# Only infrastructure errors are retried; validation failures end the task.
@celery_app.task(
    name="process_upload",
    autoretry_for=(RedisConnectionError, RedisTimeoutError),
    retry_backoff=True,
    max_retries=settings.max_job_attempts - 1,
)
def process_upload(task_id: str, file_path: str) -> dict:
    return asyncio.run(run_job(task_id, file_path))

def enqueue_upload(task_id: str, file_path: str) -> None:
    process_upload.delay(task_id, file_path)
