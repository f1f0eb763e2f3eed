"""Business logic services"""
from .execution_store import ExecutionStore, ExecutionStateError
from .input_handlers import download_dataset, resolve_data_source, save_upload
from .pipeline_executor import PipelineExecutor
from .pipeline_registry import (
    PipelineDefinition,
    PipelineNotFoundError,
    PipelineProcessor,
    PipelineRegistry,
    ProcessorContext
)
from .processors import ProjectReportProcessor, SalesAnalysisProcessor, register_builtin_pipelines
from .project_service import ProjectService

__all__ = [
    "ExecutionStore",
    "ExecutionStateError",
    "download_dataset",
    "resolve_data_source",
    "save_upload",
    "PipelineExecutor",
    "PipelineDefinition",
    "PipelineNotFoundError",
    "PipelineProcessor",
    "PipelineRegistry",
    "ProcessorContext",
    "ProjectReportProcessor",
    "SalesAnalysisProcessor",
    "register_builtin_pipelines",
    "ProjectService"
]
