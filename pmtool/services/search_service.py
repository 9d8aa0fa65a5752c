# File: pmtool/services/search_service.py

"""
Search service for PMTool.

Searches tasks and projects with case-insensitive substring matching in the
database. Results from every entity type share one flat dict format, tagged
with ``entity_type``.
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from pmtool.repositories.project_repository import ProjectRepository
from pmtool.repositories.task_repository import TaskRepository

logger = logging.getLogger(__name__)

SEARCH_FIELDS = {
    "task": ["title", "description"],
    "project": ["name", "description"],
}


class SearchService:
    """
    Service for search across PMTool entities.
    """

    def __init__(self, session: Session, repositories: Optional[Dict[str, Any]] = None):
        """
        Initialize search service.

        Args:
            session: Database session
            repositories: Optional mapping of entity type to repository
        """
        self.session = session
        self.repositories = repositories or {
            "task": TaskRepository(session),
            "project": ProjectRepository(session),
        }

    def search(
        self, query: str, entity_types: Optional[List[str]] = None, limit: int = 50
    ) -> List[Dict[str, Any]]:
        """
        Search the given entity types (default: all).

        Args:
            query: Text to look for
            entity_types: Subset of "task" / "project"
            limit: Maximum results per entity type

        Returns:
            Matching entities as dicts carrying an ``entity_type`` key
        """
        query = (query or "").strip()
        if not query:
            return []

        results: List[Dict[str, Any]] = []
        for entity_type in entity_types or list(SEARCH_FIELDS):
            repository = self.repositories.get(entity_type)
            if repository is None:
                logger.warning(f"No repository registered for entity type '{entity_type}'")
                continue
            for entity in repository.search(query, SEARCH_FIELDS[entity_type], limit=limit):
                item = entity.to_dict()
                item["entity_type"] = entity_type
                results.append(item)

        logger.debug(f"Search '{query}' returned {len(results)} results")
        return results

    def search_tasks(self, query: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self.search(query, ["task"], limit=limit)

    def search_projects(self, query: str, limit: int = 50) -> List[Dict[str, Any]]:
        return self.search(query, ["project"], limit=limit)
