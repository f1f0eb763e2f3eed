"""
Pydantic models for pipeline listings
"""
from typing import Dict, Any, List
from pydantic import BaseModel, Field


class PipelineSummary(BaseModel):
    """A registered pipeline and the inputs it accepts"""
    id: str = Field(..., description="Pipeline id")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What the pipeline produces")
    version: str = Field(..., description="Pipeline version")
    output_formats: List[str] = Field(..., description="Formats the pipeline can export")
    input_schema: Dict[str, Any] = Field(..., description="JSON schema of the pipeline inputs")


class PipelineListResponse(BaseModel):
    pipelines: List[PipelineSummary] = Field(..., description="Registered pipelines")
    total: int = Field(..., description="Number of pipelines")
