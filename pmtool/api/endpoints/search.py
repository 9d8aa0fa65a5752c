# File: pmtool/api/endpoints/search.py

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from pmtool.api.deps import get_current_active_user, get_search_service
from pmtool.db.models.user import User
from pmtool.services.search_service import SearchService

router = APIRouter()


@router.get("/", response_model=List[Dict[str, Any]])
def search(
    *,
    query: str = Query(..., min_length=1, description="Text to look for"),
    limit: int = Query(50, ge=1, le=500, description="Maximum results per entity type"),
    current_user: User = Depends(get_current_active_user),
    search_service: SearchService = Depends(get_search_service),
) -> Any:
    """
    Search tasks and projects.

    Each result carries ``entity_type`` ("task" or "project").
    """
    return search_service.search(query, limit=limit)
