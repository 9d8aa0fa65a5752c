# File: pmtool/api/endpoints/tasks.py
"""
Task API endpoints for PMTool.

Besides task CRUD this module exposes the dependency graph: recording
prerequisites for a task, reading them back, and ordering a project's
tasks so that prerequisites come first.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from pmtool.api.deps import (
    get_current_active_user,
    get_project_service,
    get_task_dependency_service,
    get_task_service,
)
from pmtool.core.exceptions import (
    CycleDetectedException,
    ForbiddenException,
    ProjectNotFoundException,
    TaskNotFoundException,
    UserNotFoundException,
)
from pmtool.db.models.user import User
from pmtool.schemas.task import (
    DependencyCreate,
    Task,
    TaskCreate,
    TaskDependency,
    TaskUpdate,
)
from pmtool.services.project_service import ProjectService
from pmtool.services.task_dependency_service import TaskDependencyService
from pmtool.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_project_member(project_service: ProjectService, project_id: str, user: User) -> None:
    try:
        project_service.check_member(project_id, user.id)
    except ForbiddenException as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)


def _check_task_member(
    dependency_service: TaskDependencyService, project_service: ProjectService, task_id: str, user: User
) -> None:
    task = dependency_service.task_repository.find_task_by_id(task_id)
    if task is not None:
        _check_project_member(project_service, task.project_id, user)


@router.get("/", response_model=List[Task])
def list_tasks(
    *,
    project_id: Optional[str] = Query(None, description="Filter by project"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records to return"),
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> Any:
    return task_service.list_tasks(project_id=project_id, skip=skip, limit=limit)


@router.get("/search", response_model=List[Task])
def search_tasks(
    *,
    query: str = Query(..., min_length=1, description="Text to look for in title or description"),
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> Any:
    return task_service.search_tasks(query)


@router.get("/topo/{project_id}", response_model=List[Task])
def get_topological_order(
    *,
    project_id: str = Path(..., description="The project whose tasks to order"),
    current_user: User = Depends(get_current_active_user),
    dependency_service: TaskDependencyService = Depends(get_task_dependency_service),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """
    Order a project's tasks so that every prerequisite precedes its dependents.

    Tasks without a constraint between them come in no guaranteed order.

    Raises:
        HTTPException: 403 if the user is not a member of the project,
            409 if the project's dependencies contain a cycle
    """
    _check_project_member(project_service, project_id, current_user)
    try:
        return dependency_service.topo_sort(project_id)
    except CycleDetectedException as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.to_dict())


@router.post("/", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    *,
    task_in: TaskCreate,
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> Any:
    """
    Create a task, optionally with prerequisites (``depends_on_ids``).

    Raises:
        HTTPException: 404 if the project or assignee doesn't exist
    """
    try:
        return task_service.create_task(task_in.model_dump(), user_id=current_user.id)
    except (ProjectNotFoundException, UserNotFoundException) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/{task_id}", response_model=Task)
def get_task(
    *,
    task_id: str = Path(..., description="The ID of the task to retrieve"),
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> Any:
    try:
        return task_service.get_task(task_id)
    except TaskNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task with ID {task_id} not found",
        )


@router.patch("/{task_id}", response_model=Task)
def update_task(
    *,
    task_id: str = Path(..., description="The ID of the task to update"),
    task_in: TaskUpdate,
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> Any:
    """Update a task. Assigning it to someone new notifies them."""
    try:
        return task_service.update_task(
            task_id, task_in.model_dump(exclude_unset=True), user_id=current_user.id
        )
    except (TaskNotFoundException, UserNotFoundException) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    *,
    task_id: str = Path(..., description="The ID of the task to delete"),
    current_user: User = Depends(get_current_active_user),
    task_service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task and every dependency edge that references it."""
    try:
        task_service.delete_task(task_id, user_id=current_user.id)
    except TaskNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task with ID {task_id} not found",
        )


@router.post(
    "/{task_id}/dependencies",
    response_model=List[TaskDependency],
    status_code=status.HTTP_201_CREATED,
)
def add_task_dependencies(
    *,
    task_id: str = Path(..., description="The dependent task"),
    dependency_in: DependencyCreate,
    current_user: User = Depends(get_current_active_user),
    dependency_service: TaskDependencyService = Depends(get_task_dependency_service),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """
    Record that the task depends on each listed prerequisite.

    Unknown prerequisite ids are ignored. No cycle check is made here.

    Returns:
        Every dependency of the task after the insert
    """
    _check_task_member(dependency_service, project_service, task_id, current_user)
    try:
        return dependency_service.add_dependencies(task_id, dependency_in.prerequisite_ids)
    except TaskNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task with ID {task_id} not found",
        )


@router.get("/{task_id}/dependencies", response_model=List[TaskDependency])
def get_task_dependencies(
    *,
    task_id: str = Path(..., description="The dependent task"),
    current_user: User = Depends(get_current_active_user),
    dependency_service: TaskDependencyService = Depends(get_task_dependency_service),
    project_service: ProjectService = Depends(get_project_service),
) -> Any:
    """The task's dependencies; empty for an unknown task."""
    _check_task_member(dependency_service, project_service, task_id, current_user)
    return dependency_service.get_dependencies(task_id)
