from fastapi import FastAPI
from .config import settings
from .logging_setup import configure_logging
from .routers import tasks

configure_logging(settings.log_level)

app = FastAPI(title="Reservation Importer API", version="1.0.0")
app.include_router(tasks.router)
