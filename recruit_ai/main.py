from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recruit_ai.middleware.error_handlers import (
    ExceptionHandlerMiddleware,
    PerformanceMiddleware,
    RequestLoggingMiddleware,
    recruit_ai_exception_handler,
)
from recruit_ai.routers import analysis, resumes, scores
from recruit_ai.services.pipeline import RateLimiter
from recruit_ai.utils.exceptions import RecruitAIBaseException
from recruit_ai.utils.logging_config import configure_for_environment, get_logger

# Configure logging first
configure_for_environment()
logger = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info("Recruit AI scoring API starting up...")

    from recruit_ai.services.db import init_indexes
    await init_indexes()

    logger.info("Recruit AI scoring API startup completed")
    yield
    logger.info("Recruit AI scoring API shutting down...")


app = FastAPI(title="Recruit AI Scoring API", version=VERSION, lifespan=lifespan)

# One provider budget for the whole process (100 calls/minute)
app.state.rate_limiter = RateLimiter(max_calls=100, window_seconds=60)

# Middleware wraps in reverse order of registration: the exception handler sits closest to the routes
app.add_middleware(ExceptionHandlerMiddleware)
app.add_middleware(PerformanceMiddleware, slow_request_threshold=2.0)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RecruitAIBaseException, recruit_ai_exception_handler)


@app.get("/")
@app.head("/")
async def root():
    return {"message": "Welcome to the Recruit AI Scoring API", "version": VERSION, "status": "ok"}


@app.get("/health")
@app.head("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.utcnow().isoformat()}


app.include_router(scores.router, prefix="/api")
app.include_router(analysis.router, prefix="/api")
app.include_router(resumes.router, prefix="/api")

logger.info("Recruit AI scoring API initialized successfully")
