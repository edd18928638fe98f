"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from taskmanager.api.v1 import router as v1_router
from taskmanager.core.config import settings
from taskmanager.core.errors import register_exception_handlers
from taskmanager.core.logging_setup import configure_logging
from taskmanager.core.security import TokenConfig, TokenService

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Manager API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Signing secrets are read once here; handlers receive the service via get_token_service.
app.state.token_service = TokenService(TokenConfig.from_settings(settings))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, client, status, and latency for every request."""
    start = time.perf_counter()
    client = request.client.host if request.client else "unknown"
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s - %s user=%s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        client,
        getattr(request.state, "user_id", None),
        response.status_code,
        elapsed_ms,
    )
    return response


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Task Manager API"}


logger.info("Task Manager API configured (env=%s)", settings.APP_ENV)
