"""
Health check endpoints
"""
from fastapi import APIRouter, Depends
from pathlib import Path
import time
import logging

from ..config import settings
from ..dependencies import get_executor
from ..services.pipeline_executor import PipelineExecutor

logger = logging.getLogger(__name__)
router = APIRouter()

SERVICE_VERSION = "1.0.0"
_started_at = time.time()


@router.get("/health")
async def health_check():
    """Service status, uptime and the configured LLM provider."""
    return {
        "status": "healthy",
        "version": SERVICE_VERSION,
        "uptime_seconds": round(time.time() - _started_at, 2),
        "llm_provider": settings.LLM_PROVIDER,
    }


@router.get("/health/ready")
async def readiness_check(executor: PipelineExecutor = Depends(get_executor)):
    """
    Ready when the execution store answers, an LLM key is configured, the
    schema cache exists and at least one pipeline is registered.
    """
    pipelines = [definition.id for definition in executor.registry.list()]
    checks = {
        "execution_store": executor.store.ping(),
        "llm_api_key": bool(settings.LLM_API_KEY),
        "schema_cache": Path(settings.schema_cache_dir).is_dir(),
        "pipelines": bool(pipelines),
    }
    return {
        "ready": all(checks.values()),
        "checks": checks,
        "pipelines": pipelines,
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness ping."""
    return {"alive": True}
