"""
Dataset Report Pipeline API - Main FastAPI Application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .database.connection import init_db
from .dependencies import get_registry, shutdown_executor
from .routes import datasets, executions, health, pipelines, projects


# API Description for Swagger UI
API_DESCRIPTION = """
## Dataset Report Pipeline API

Turns tabular datasets into AI-narrated reports (Markdown, HTML, PDF, MDX, JSON).

### Quick Start

1. **Pick a pipeline:** `GET /api/v1/pipelines`
2. **Run it:** `POST /api/v1/executions` with `{"pipeline_id": ..., "inputs": {...}}`
3. **Poll for status:** `GET /api/v1/executions/{execution_id}` until `status: completed`
4. **Download result:** `GET /api/v1/executions/{execution_id}/download`

| Status | Description |
|--------|-------------|
| `running` | Inputs validated, pipeline in progress |
| `completed` | Artifact ready for download |
| `failed` | Error occurred; workspace removed |
"""

TAGS_METADATA = [
    {"name": "Pipelines", "description": "Registered pipelines and their input schemas."},
    {"name": "Executions", "description": "Run pipelines, check their status and download artifacts."},
    {"name": "Projects", "description": "Saved report projects."},
    {"name": "Datasets", "description": "Profile an uploaded dataset."},
    {"name": "Health", "description": "Service health and readiness checks."},
]

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown"""
    logger.info("Starting Dataset Report Pipeline API...")

    settings.ensure_directories()
    logger.info(f"Cache directory: {settings.CACHE_DIR}")
    logger.info(f"Projects directory: {settings.PROJECT_DIR}")

    init_db()
    logger.info(f"Database initialized: {settings.DATABASE_URL}")

    if not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY not set - report generation will fail")

    registry = get_registry()
    logger.info(f"Pipelines available: {', '.join(p.id for p in registry.list())}")

    yield

    logger.info("Shutting down Dataset Report Pipeline API...")
    shutdown_executor()


app = FastAPI(
    title="Dataset Report Pipeline API",
    description=API_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=TAGS_METADATA,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(pipelines.router, prefix="/api/v1", tags=["Pipelines"])
app.include_router(executions.router, prefix="/api/v1", tags=["Executions"])
app.include_router(projects.router, prefix="/api/v1", tags=["Projects"])
app.include_router(datasets.router, prefix="/api/v1", tags=["Datasets"])


@app.get("/")
async def root():
    """Root endpoint with API info"""
    return {
        "name": "Dataset Report Pipeline API",
        "version": "1.0.0",
        "description": "Turn tabular datasets into AI-narrated reports",
        "docs": "/docs",
        "health": "/api/v1/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
