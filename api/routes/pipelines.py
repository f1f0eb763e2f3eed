"""
Pipeline listing endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_registry
from ..models.pipeline import PipelineListResponse, PipelineSummary
from ..services.pipeline_registry import PipelineNotFoundError, PipelineRegistry

router = APIRouter()


@router.get("/pipelines", response_model=PipelineListResponse)
async def list_pipelines(registry: PipelineRegistry = Depends(get_registry)):
    """List registered pipelines with their input schemas."""
    pipelines = [PipelineSummary(**definition.to_dict()) for definition in registry.list()]
    return PipelineListResponse(pipelines=pipelines, total=len(pipelines))


@router.get("/pipelines/{pipeline_id}", response_model=PipelineSummary)
async def get_pipeline(pipeline_id: str, registry: PipelineRegistry = Depends(get_registry)):
    """Get one pipeline by id."""
    try:
        definition = registry.get(pipeline_id)
    except PipelineNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PipelineSummary(**definition.to_dict())
