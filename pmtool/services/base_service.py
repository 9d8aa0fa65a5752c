# File: pmtool/services/base_service.py

from typing import TypeVar, Generic, Optional, Type, Dict, Any
from contextlib import contextmanager
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import logging
from datetime import datetime

from pmtool.core.exceptions import (
    PMToolException,
    DuplicateEntityException,
    DatabaseException,
)
from pmtool.repositories.base_repository import BaseRepository

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BaseService(Generic[T]):
    """
    Base service for all PMTool services.

    Provides common functionality including:
    - Transaction management
    - Error handling and standardization
    - Logging
    - Event and cache wiring
    """

    def __init__(
            self,
            session: Session,
            repository_class: Optional[Type[BaseRepository]] = None,
            repository: Optional[BaseRepository] = None,
            event_bus=None,
            cache_service=None,
    ):
        """
        Initialize service with dependencies.

        Args:
            session: Database session for persistence operations
            repository_class: Repository class to instantiate (optional if repository is provided)
            repository: Repository instance (optional if repository_class is provided)
            event_bus: Optional event bus for publishing domain events
            cache_service: Optional cache service for data caching
        """
        self.session = session

        if repository is not None:
            self.repository = repository
        elif repository_class is not None:
            self.repository = repository_class(session)
        else:
            # Subclasses may initialize repository directly
            self.repository = None

        self.event_bus = event_bus
        self.cache_service = cache_service

    @contextmanager
    def transaction(self):
        """
        Provide a transactional scope around operations.

        Raises:
            PMToolException: Transformed database error, or the original exception
        """
        try:
            yield
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            if isinstance(e, PMToolException):
                raise
            logger.error(f"Transaction failed: {str(e)}", exc_info=True)

            transformed = self._transform_error(e)
            if transformed:
                raise transformed from e
            raise

    def _publish(self, event) -> None:
        if self.event_bus:
            self.event_bus.publish(event)

    def _log_operation(
            self,
            operation: str,
            entity_type: str,
            entity_id: Any = None,
            user_id: Any = None,
            details: Dict[str, Any] = None,
    ) -> None:
        """
        Log an operation for auditing purposes.

        Args:
            operation: Operation name (create, update, delete, etc.)
            entity_type: Type of entity being operated on
            entity_id: Optional entity ID
            user_id: Optional acting user ID
            details: Optional operation details
        """
        log_data = {
            "operation": operation,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "user_id": user_id,
            "timestamp": datetime.now().isoformat(),
            "details": details,
        }

        logger.info(f"{operation.upper()} {entity_type} {entity_id}", extra=log_data)

    def _transform_error(self, error: Exception) -> Optional[PMToolException]:
        """
        Transform database exceptions to domain exceptions.

        Override this method in service subclasses to handle
        specific error cases.

        Args:
            error: The original exception

        Returns:
            Transformed domain exception, or None to re-raise original
        """
        if isinstance(error, IntegrityError):
            return DuplicateEntityException(
                "Operation violates a database constraint",
                {"original_error": str(error.orig)},
            )
        if isinstance(error, SQLAlchemyError):
            entity_type = self.repository.model.__name__ if self.repository else None
            return DatabaseException(f"Database error: {error}", entity_type=entity_type)
        return None
