# File: pmtool/repositories/base_repository.py

from typing import Generic, TypeVar, Dict, Any, Optional, List, Type
from sqlalchemy.orm import Session
from sqlalchemy import select, or_

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository class providing common CRUD operations for all entities using
    modern SQLAlchemy select() syntax.

    Attributes:
        session (Session): The SQLAlchemy session for database operations
        model (Type[T]): The SQLAlchemy model class this repository manages
    """

    def __init__(self, session: Session, model: Optional[Type[T]] = None):
        """
        Initialize the repository with a database session and the specific model.

        Args:
            session (Session): SQLAlchemy database session
            model (Type[T]): The SQLAlchemy model class this repository manages.
                             Subclasses must set it.
        """
        self.session = session
        self.model = model

    def _get_model(self) -> Type[T]:
        """Ensures the model is set before use."""
        if self.model is None:
            raise TypeError(f"Repository model is not set for {self.__class__.__name__}")
        return self.model

    def get_by_id(self, id: str) -> Optional[T]:
        """
        Retrieve an entity by its primary key ID.

        Args:
            id (str): The primary key ID of the entity

        Returns:
            Optional[T]: The entity if found, None otherwise
        """
        model_class = self._get_model()
        stmt = select(model_class).where(getattr(model_class, "id") == id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list(self, skip: int = 0, limit: int = 100, **filters) -> List[T]:
        """
        Retrieve a list of entities with pagination.

        Args:
            skip (int): Number of records to skip (for pagination)
            limit (int): Maximum number of records to return
            **filters: Additional filters to apply (field=value pairs)

        Returns:
            List[T]: List of entities matching the criteria
        """
        model_class = self._get_model()
        stmt = select(model_class)

        for key, value in filters.items():
            if hasattr(model_class, key):
                stmt = stmt.where(getattr(model_class, key) == value)

        stmt = stmt.offset(skip).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def create(self, data: Dict[str, Any]) -> T:
        """
        Create a new entity.

        Args:
            data (Dict[str, Any]): Dictionary containing entity field values

        Returns:
            T: The created entity
        """
        model_class = self._get_model()
        # Only columns present in the model are passed to the constructor
        model_columns = {c.name for c in model_class.__table__.columns}
        filtered_data = {k: v for k, v in data.items() if k in model_columns}

        entity = model_class(**filtered_data)
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def update(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        """
        Update an existing entity.

        Args:
            id (str): The primary key ID of the entity to update
            data (Dict[str, Any]): Dictionary containing the fields to update

        Returns:
            Optional[T]: The updated entity if found, None otherwise
        """
        entity = self.get_by_id(id)
        if not entity:
            return None

        for key, value in data.items():
            if key in entity.__table__.columns.keys():
                setattr(entity, key, value)

        self.session.commit()
        self.session.refresh(entity)
        return entity

    def delete(self, id: str) -> bool:
        """
        Delete an entity by ID.

        Args:
            id (str): The primary key ID of the entity to delete

        Returns:
            bool: True if entity was deleted, False if not found
        """
        entity = self.get_by_id(id)
        if not entity:
            return False

        self.session.delete(entity)
        self.session.commit()
        return True

    def search(
        self, query: str, fields: List[str], skip: int = 0, limit: int = 100
    ) -> List[T]:
        """
        Search for entities across specified fields (case-insensitive substring).

        Args:
            query (str): The search query string
            fields (List[str]): Fields to search in
            skip (int): Records to skip (pagination)
            limit (int): Max records to return

        Returns:
            List[T]: List of matching entities
        """
        model_class = self._get_model()
        stmt = select(model_class)

        if query and fields:
            search_term = f"%{query}%"
            search_criteria = [
                getattr(model_class, field).ilike(search_term)
                for field in fields
                if hasattr(model_class, field)
            ]
            if search_criteria:
                stmt = stmt.where(or_(*search_criteria))

        stmt = stmt.offset(skip).limit(limit)
        return list(self.session.execute(stmt).scalars().all())
