"""
Shared service instances for the API, exposed as FastAPI dependencies
"""
import threading
from typing import Optional
import logging

from src.stage2_narrator import LLMClient
from src.stage2_narrator.prompts import PromptLibrary

from .config import settings
from .services.execution_store import ExecutionStore
from .services.pipeline_executor import PipelineExecutor
from .services.pipeline_registry import PipelineRegistry
from .services.processors import register_builtin_pipelines
from .services.project_service import ProjectService

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_registry: Optional[PipelineRegistry] = None
_executor: Optional[PipelineExecutor] = None
_project_service: Optional[ProjectService] = None
_prompt_library: Optional[PromptLibrary] = None


def create_llm_client() -> Optional[LLMClient]:
    """LLM client from settings, or None when no API key is configured"""
    if not settings.LLM_API_KEY:
        return None
    return LLMClient(
        api_key=settings.LLM_API_KEY,
        model=settings.LLM_MODEL,
        provider=settings.LLM_PROVIDER
    )


def get_prompt_library() -> PromptLibrary:
    global _prompt_library
    with _lock:
        if _prompt_library is None:
            _prompt_library = PromptLibrary(settings.PROMPTS_DIR or None)
        return _prompt_library


def get_project_service() -> ProjectService:
    global _project_service
    with _lock:
        if _project_service is None:
            _project_service = ProjectService(settings.PROJECT_DIR)
        return _project_service


def get_registry() -> PipelineRegistry:
    """Built-in pipelines plus any descriptors under PIPELINES_DIR"""
    global _registry
    project_service = get_project_service()
    prompt_library = get_prompt_library()
    with _lock:
        if _registry is None:
            registry = PipelineRegistry()
            register_builtin_pipelines(registry, project_service, prompt_library)
            registry.scan(settings.PIPELINES_DIR)
            _registry = registry
        return _registry


def get_executor() -> PipelineExecutor:
    global _executor
    registry = get_registry()
    with _lock:
        if _executor is None:
            _executor = PipelineExecutor(
                registry,
                ExecutionStore(),
                llm_client_factory=create_llm_client,
                max_workers=settings.MAX_CONCURRENT_EXECUTIONS
            )
        return _executor


def shutdown_executor() -> None:
    global _executor
    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=False)
            _executor = None
