"""Pydantic models for API requests and responses"""
from .execution import (
    ExecutionCreateRequest,
    ExecutionCreateResponse,
    ExecutionStatusResponse,
    ExecutionListResponse
)
from .pipeline import PipelineSummary, PipelineListResponse
from .project import ProjectSummary, ProjectDetail, ProjectListResponse, DatasetProfileResponse

__all__ = [
    "ExecutionCreateRequest",
    "ExecutionCreateResponse",
    "ExecutionStatusResponse",
    "ExecutionListResponse",
    "PipelineSummary",
    "PipelineListResponse",
    "ProjectSummary",
    "ProjectDetail",
    "ProjectListResponse",
    "DatasetProfileResponse"
]
