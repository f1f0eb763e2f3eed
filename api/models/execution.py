"""
Pydantic models for execution requests and responses
"""
from datetime import datetime
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class ExecutionCreateRequest(BaseModel):
    """Request to run a pipeline"""
    pipeline_id: str = Field(..., description="Registered pipeline id")
    inputs: Dict[str, Any] = Field(default_factory=dict, description="Pipeline inputs (validated against its schema)")


class ExecutionCreateResponse(BaseModel):
    """Response for execution creation"""
    execution_id: str = Field(..., description="Unique execution identifier (UUID)")
    status: str = Field(..., description="Initial execution status")
    message: str = Field(..., description="Status message")


class ExecutionStatusResponse(BaseModel):
    """Response for execution status query"""
    execution_id: str = Field(..., description="Unique execution identifier")
    pipeline_id: str = Field(..., description="Pipeline that was run")
    status: str = Field(..., description="running, completed or failed")
    started_at: Optional[datetime] = Field(None, description="Start timestamp")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    output_format: Optional[str] = Field(None, description="Format of the artifact")
    download_url: Optional[str] = Field(None, description="URL to download the artifact if completed")
    error: Optional[str] = Field(None, description="Error message if failed")

    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat() if v else None
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ExecutionStatusResponse":
        completed = record["status"] == "completed"
        return cls(
            execution_id=record["id"],
            pipeline_id=record["pipeline_id"],
            status=record["status"],
            started_at=record.get("started_at"),
            completed_at=record.get("completed_at"),
            output_format=record.get("output_format"),
            download_url=f"/api/v1/executions/{record['id']}/download" if completed else None,
            error=record.get("error_message"),
        )


class ExecutionListResponse(BaseModel):
    """Response for execution listing"""
    executions: List[ExecutionStatusResponse] = Field(..., description="Executions, newest first")
    total: int = Field(..., description="Number of executions returned")
