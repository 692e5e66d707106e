from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from taskrights.config import get_settings
from taskrights.core.dtos.common import ErrorResponse
from taskrights.core.exceptions import RightsError
from taskrights.database.database import engine, init_db

from taskrights.api import sharing

settings = get_settings()
logger = logging.getLogger(__name__)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@asynccontextmanager
async def lifespan(app: FastAPI):

    logger.info("Starting application...")

    await init_db()

    logger.info("Application started successfully")

    yield

    logger.info("Shutting down application...")
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RightsError)
async def rights_error_handler(request: Request, exc: RightsError):
    # denial is 403, a store failure 500; both come from the exception itself
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(**exc.to_dict()).model_dump()
    )


app.include_router(sharing.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskrights.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
