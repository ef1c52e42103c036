from functools import lru_cache
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from redis.asyncio import Redis
import redis.asyncio as redis
from ..config import settings
from ..exceptions import ReportNotFoundError, TaskNotFoundError, UploadRejectedError
from ..models import StatusResponse, TaskResponse
from ..services.report import ReportWriter
from ..services.tasks import TasksService
from ..storage.repo import TaskRepo
from worker.celery_app import enqueue_upload

router = APIRouter(prefix="/tasks", tags=["tasks"])

@lru_cache(maxsize=1)
def get_redis() -> Redis:
    return redis.from_url(settings.redis_url, decode_responses=True)

def get_tasks_service(r: Redis = Depends(get_redis)) -> TasksService:
    return TasksService(TaskRepo(r), ReportWriter(settings.reports_dir), settings.uploads_dir,
                        enqueue_upload, extension=settings.upload_extension,
                        max_upload_bytes=settings.max_upload_bytes)

@router.post("/upload", response_model=TaskResponse)
async def upload_file(file: UploadFile = File(...), service: TasksService = Depends(get_tasks_service)):
    content = await file.read()
    try:
        rec = await service.create_task(file.filename, content)
    except UploadRejectedError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return TaskResponse(task_id=rec.task_id)

@router.get("/status/{task_id}", response_model=StatusResponse, response_model_exclude_none=True)
async def get_status(task_id: str, service: TasksService = Depends(get_tasks_service)):
    try:
        return await service.get_status(task_id)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

@router.get("/report/{task_id}", response_class=PlainTextResponse)
async def get_report(task_id: str, service: TasksService = Depends(get_tasks_service)):
    try:
        text = await service.get_report(task_id)
    except (TaskNotFoundError, ReportNotFoundError) as e:
        raise HTTPException(status_code=404, detail=e.message)
    return PlainTextResponse(text, headers={"Content-Disposition": f'attachment; filename="{task_id}.txt"'})
