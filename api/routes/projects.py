"""
Saved project endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import get_project_service
from ..models.project import ProjectDetail, ProjectListResponse, ProjectSummary
from ..services.project_service import ProjectService

router = APIRouter()


@router.get("/projects", response_model=ProjectListResponse)
async def list_projects(service: ProjectService = Depends(get_project_service)):
    """List saved projects, most recently modified first."""
    projects = [
        ProjectSummary(id=p["id"], name=p["name"], path=p["path"], last_modified=p["last_modified"])
        for p in service.list_projects()
    ]
    return ProjectListResponse(projects=projects, total=len(projects))


@router.get("/projects/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    """Get a project and its configuration."""
    project = service.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")

    return ProjectDetail(
        id=project["id"],
        name=project["name"],
        path=project["path"],
        last_modified=project["last_modified"],
        config=project["config"].model_dump()
    )
