"""
Execution endpoints - run pipelines, poll status, download artifacts
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from pydantic import ValidationError
from pathlib import Path
from typing import Optional
import logging

from ..database.models import ExecutionStatus
from ..dependencies import get_executor
from ..models.execution import (
    ExecutionCreateRequest, ExecutionCreateResponse,
    ExecutionListResponse, ExecutionStatusResponse
)
from ..services.pipeline_executor import PipelineExecutor
from ..services.pipeline_registry import PipelineNotFoundError

logger = logging.getLogger(__name__)
router = APIRouter()

MEDIA_TYPES = {
    "md": "text/markdown",
    "mdx": "text/markdown",
    "html": "text/html",
    "pdf": "application/pdf",
    "json": "application/json",
}


@router.post("/executions", response_model=ExecutionCreateResponse, status_code=202)
async def create_execution(
    request: ExecutionCreateRequest,
    executor: PipelineExecutor = Depends(get_executor)
):
    """
    Run a pipeline in the background.

    Inputs are validated against the pipeline's input schema before the
    execution is queued; poll GET /executions/{id} for the outcome.
    """
    try:
        definition = executor.registry.get(request.pipeline_id)
    except PipelineNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        definition.input_model.model_validate(request.inputs)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    execution_id = executor.submit(request.pipeline_id, request.inputs)
    return ExecutionCreateResponse(
        execution_id=execution_id,
        status=ExecutionStatus.RUNNING.value,
        message="Execution started"
    )


@router.get("/executions", response_model=ExecutionListResponse)
async def list_executions(
    pipeline_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
    executor: PipelineExecutor = Depends(get_executor)
):
    """List executions, newest first."""
    status_filter = None
    if status:
        try:
            status_filter = ExecutionStatus(status)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    records = executor.store.list(pipeline_id=pipeline_id, status_filter=status_filter, limit=limit)
    executions = [ExecutionStatusResponse.from_record(record) for record in records]
    return ExecutionListResponse(executions=executions, total=len(executions))


@router.get("/executions/{execution_id}", response_model=ExecutionStatusResponse)
async def get_execution(execution_id: str, executor: PipelineExecutor = Depends(get_executor)):
    """Get execution status, and the download URL once completed."""
    record = executor.store.get(execution_id)
    if not record:
        raise HTTPException(status_code=404, detail="Execution not found")
    return ExecutionStatusResponse.from_record(record)


@router.get("/executions/{execution_id}/download")
async def download_artifact(execution_id: str, executor: PipelineExecutor = Depends(get_executor)):
    """Download the artifact of a completed execution."""
    record = executor.store.get(execution_id)
    if not record:
        raise HTTPException(status_code=404, detail="Execution not found")

    if record["status"] != ExecutionStatus.COMPLETED.value:
        raise HTTPException(
            status_code=400,
            detail=f"Execution not completed. Current status: {record['status']}"
        )

    artifact = Path(record["output_path"] or "")
    if not artifact.is_file():
        logger.error(f"Artifact missing for execution {execution_id}: {artifact}")
        raise HTTPException(status_code=404, detail="Artifact not found")

    return FileResponse(
        path=str(artifact),
        filename=artifact.name,
        media_type=MEDIA_TYPES.get(record["output_format"], "application/octet-stream")
    )
