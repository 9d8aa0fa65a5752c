# File: pmtool/api/endpoints/projects.py
"""
Project API endpoints for PMTool.

Users see the projects they own and the projects containing tasks assigned
to them. Only the owner may update or delete a project.
"""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from pmtool.api.deps import get_current_active_user, get_project_service
from pmtool.core.exceptions import ForbiddenException, ProjectNotFoundException
from pmtool.db.models.user import User
from pmtool.schemas.project import Project, ProjectCreate, ProjectUpdate
from pmtool.services.project_service import ProjectService

router = APIRouter()


@router.post("/", response_model=Project, status_code=status.HTTP_201_CREATED)
def create_project(
    *,
    project_in: ProjectCreate,
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """Create a new project owned by the current user."""
    return project_service.create_project(project_in.model_dump(), current_user.id)


@router.get("/", response_model=List[Project])
def list_projects(
    *,
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """
    Retrieve the projects visible to the current user.
    """
    return project_service.list_projects(current_user.id)


@router.get("/search", response_model=List[Project])
def search_projects(
    *,
    query: str = Query(..., min_length=1, description="Text to look for in name or description"),
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    return project_service.search_projects(current_user.id, query)


@router.get("/{project_id}", response_model=Project)
def get_project(
    *,
    project_id: str = Path(..., description="The ID of the project to retrieve"),
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """
    Get a project.

    Raises:
        HTTPException: 404 if the project doesn't exist, 403 without access
    """
    try:
        return project_service.get_project(project_id, current_user.id)
    except ProjectNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with ID {project_id} not found",
        )
    except ForbiddenException as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.patch("/{project_id}", response_model=Project)
def update_project(
    *,
    project_id: str = Path(..., description="The ID of the project to update"),
    project_in: ProjectUpdate,
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """Update a project. Owner only."""
    try:
        return project_service.update_project(
            project_id, project_in.model_dump(exclude_unset=True), current_user.id
        )
    except ProjectNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with ID {project_id} not found",
        )
    except ForbiddenException as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    *,
    project_id: str = Path(..., description="The ID of the project to delete"),
    current_user: User = Depends(get_current_active_user),
    project_service: ProjectService = Depends(get_project_service),
) -> None:
    """Delete a project and its tasks. Owner only."""
    try:
        project_service.delete_project(project_id, current_user.id)
    except ProjectNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with ID {project_id} not found",
        )
    except ForbiddenException as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
