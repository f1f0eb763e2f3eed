"""
Pydantic models for saved projects and dataset profiles
"""
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ProjectSummary(BaseModel):
    """A saved report project"""
    id: str = Field(..., description="Project directory name")
    name: str = Field(..., description="Report name from the project config")
    path: str = Field(..., description="Project directory")
    last_modified: datetime = Field(..., description="Modification time of the project config")

    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }


class ProjectDetail(ProjectSummary):
    """A saved project with its full configuration"""
    config: Dict[str, Any] = Field(..., description="Validated project configuration")


class ProjectListResponse(BaseModel):
    projects: List[ProjectSummary] = Field(..., description="Projects, most recently modified first")
    total: int = Field(..., description="Number of projects")


class DatasetProfileResponse(BaseModel):
    """Processed-bundle profile of an uploaded dataset"""
    filename: str = Field(..., description="Uploaded file name")
    record_count: int = Field(..., description="Number of records")
    schema_id: Optional[str] = Field(None, description="Registered schema id")
    schema_description: Dict[str, str] = Field(default_factory=dict, description="Human-readable field types")
    validation: Dict[str, Any] = Field(default_factory=dict, description="Schema coercion report")
    stats: Dict[str, Any] = Field(default_factory=dict, description="Basic and enhanced statistics")
    samples: List[Dict[str, Any]] = Field(default_factory=list, description="First records")
