import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from eventcheckin.api.routes import attendance, auth
from eventcheckin.core.config import settings
from eventcheckin.core.env_config import LOADED_ENV_FILES
from eventcheckin.core.errors import AttendanceError
from eventcheckin.core.logging_config import setup_logging
from eventcheckin.core.logging_middleware import RequestLoggingMiddleware
from eventcheckin.db.init_db import init_db

logger = logging.getLogger("eventcheckin.main")

app = FastAPI(title="Event Check-in API")


@app.on_event("startup")
async def startup_event():
    setup_logging()
    init_db()
    logger.info(f"Event check-in API started, config files: {LOADED_ENV_FILES or 'none'}")


app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    logger.info(f"{request.method} {request.url.path} rejected: {type(exc).__name__}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


@app.get("/")
async def root():
    return {"message": "Welcome to the Event Check-in API"}


@app.get("/health")
async def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}


app.include_router(auth.router, prefix="/auth", tags=["Auth"])
app.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
