import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from survey_backend.auth import router as auth_router
from survey_backend.config import LOG_LEVEL
from survey_backend.dependencies import get_repository
from survey_backend.routers.surveys import router as surveys_router

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_repository().ensure_indexes()
    logger.info("Unique indexes ensured on responses and students")
    yield


app = FastAPI(title="Survey Responses API", lifespan=lifespan)

app.include_router(auth_router, prefix="/api")
app.include_router(surveys_router, prefix="/api")


@app.get("/api/hello")
def read_root():
    return {"message": "Hello from FastAPI"}
