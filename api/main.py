"""
AgentMesh - Main FastAPI Application.

This is the REST API layer over the workflow scheduler: task lifecycle,
agent registry and analytics endpoints.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
import time

from api.dependencies import get_orchestrator, get_settings
from api.errors import register_error_handlers
from api.routes import agents, analytics, health, tasks
from core.infrastructure.logging import LOG_FORMAT, configure_logging


# Setup logging
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


# =============================================================================
# STARTUP/SHUTDOWN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply settings on startup, drain background work on shutdown."""
    settings = get_settings()
    configure_logging(settings.server.log_level)
    logger.info("AgentMesh API starting up...")
    logger.info("Swagger UI available at: /docs")
    yield
    await get_orchestrator().wait_idle()
    logger.info("AgentMesh API shutting down...")


# =============================================================================
# CREATE FASTAPI APP
# =============================================================================

app = FastAPI(
    title="AgentMesh - Workflow Scheduler API",
    description="""
    Schedules multi-step workflows across a pool of registered agents.

    Features:
    - Dependency-ordered workflows (DAG validation)
    - Capability and network based agent matching
    - History-aware agent ranking with deadline and budget penalties
    - Task lifecycle with cancellation
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().server.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["*"],
)


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing."""
    start_time = time.time()

    logger.info(f"-> {request.method} {request.url.path}")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"<- {request.method} {request.url.path} "
        f"[{response.status_code}] ({duration:.3f}s)"
    )

    return response


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

register_error_handlers(app)


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(
    health.router,
    tags=["Health"]
)

app.include_router(
    tasks.router,
    prefix="/api/v1/tasks",
    tags=["Tasks"]
)

app.include_router(
    agents.router,
    prefix="/api/v1/agents",
    tags=["Agents"]
)

app.include_router(
    analytics.router,
    prefix="/api/v1/analytics",
    tags=["Analytics"]
)


# =============================================================================
# ROOT ENDPOINT
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint."""
    return {
        "message": "AgentMesh - Workflow Scheduler API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Serve the API with uvicorn using the server settings."""
    import uvicorn

    settings = get_settings().server
    uvicorn.run("api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
