# File: pmtool/api/endpoints/analytics.py

from datetime import datetime
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from pmtool.api.deps import get_analytics_service, get_current_active_user
from pmtool.core.exceptions import ProjectNotFoundException
from pmtool.db.models.user import User
from pmtool.schemas.analytics import (
    ProjectProgress,
    ProjectStatistics,
    TaskStatistics,
    TimeBasedAnalytics,
    UserProductivity,
)
from pmtool.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects", response_model=ProjectStatistics, summary="Project Statistics")
def get_project_stats(
    current_user: User = Depends(get_current_active_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Any:
    return service.get_project_stats()


@router.get("/tasks", response_model=TaskStatistics, summary="Task Statistics")
def get_task_stats(
    current_user: User = Depends(get_current_active_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Any:
    return service.get_task_stats()


@router.get("/users/productivity", response_model=List[UserProductivity], summary="User Productivity")
def get_user_productivity(
    current_user: User = Depends(get_current_active_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Any:
    return service.get_user_productivity()


@router.get("/projects/{project_id}/progress", response_model=ProjectProgress, summary="Project Progress")
def get_project_progress(
    project_id: str = Path(..., description="The project to report on"),
    current_user: User = Depends(get_current_active_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Any:
    try:
        return service.get_project_progress(project_id)
    except ProjectNotFoundException:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project with ID {project_id} not found",
        )


@router.get("/time-based", response_model=TimeBasedAnalytics, summary="Time Based Analytics")
def get_time_based_analytics(
    start_date: Optional[datetime] = Query(None, description="Window start (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Window end (ISO 8601)"),
    current_user: User = Depends(get_current_active_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Any:
    """
    Tasks created, tasks completed and projects created in a time window.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date",
        )
    return service.get_time_based_analytics(start_date, end_date)
