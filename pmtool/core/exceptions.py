# File: pmtool/core/exceptions.py

from typing import Dict, Any, List, Optional
from datetime import datetime


class PMToolException(Exception):
    """Base exception for all PMTool errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a PMTool exception.

        Args:
            message: Human-readable error message
            code: Optional machine-processable error code
            details: Additional error details
        """
        self.message = message
        self.code = code or "GENERIC_ERROR"
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for API responses.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": datetime.now().isoformat(),
        }


# Domain-specific exceptions
class DomainException(PMToolException):
    """Base exception for domain-related errors."""

    CODE_PREFIX = "DOMAIN_"


class EntityNotFoundException(DomainException):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            f"{entity_type} with ID {entity_id} not found",
            f"{self.CODE_PREFIX}001",
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class TaskNotFoundException(EntityNotFoundException):
    """Raised when a requested task does not exist."""

    def __init__(self, task_id: Any):
        super().__init__("Task", task_id)


class ProjectNotFoundException(EntityNotFoundException):
    """Raised when a requested project does not exist."""

    def __init__(self, project_id: Any):
        super().__init__("Project", project_id)


class UserNotFoundException(EntityNotFoundException):
    """Raised when a requested user does not exist."""

    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


# Validation exceptions
class ValidationException(PMToolException):
    """Raised when input validation fails."""

    def __init__(
        self, message: str, validation_errors: Optional[Dict[str, List[str]]] = None
    ):
        super().__init__(
            message, "VALIDATION_001", {"validation_errors": validation_errors or {}}
        )


# Business rule exceptions
class BusinessRuleException(PMToolException):
    """Raised when a business rule or constraint is violated."""

    CODE_PREFIX = "BUSINESS_"

    def __init__(
        self,
        message: str,
        rule_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
    ):
        error_details = details or {}
        if rule_name:
            error_details["rule_name"] = rule_name
        super().__init__(message, code or f"{self.CODE_PREFIX}001", error_details)


class CycleDetectedException(BusinessRuleException):
    """Raised when a project's task dependencies cannot be ordered."""

    def __init__(
        self,
        project_id: Any,
        ordered_count: int,
        task_count: int,
        unordered_task_ids: Optional[List[Any]] = None,
    ):
        super().__init__(
            f"Cycle detected in task dependencies of project {project_id}",
            rule_name="ACYCLIC_DEPENDENCIES",
            details={
                "project_id": project_id,
                "ordered_count": ordered_count,
                "task_count": task_count,
                "unordered_task_ids": unordered_task_ids or [],
            },
            code=f"{self.CODE_PREFIX}002",
        )


class DuplicateEntityException(PMToolException):
    """Raised when an attempt is made to create an entity that already exists."""

    def __init__(
        self,
        message: str = "Duplicate entity detected",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, "DUPLICATE_ENTITY", details or {})


# Security exceptions
class SecurityException(PMToolException):
    """Base exception for security-related errors."""

    CODE_PREFIX = "SECURITY_"


class ForbiddenException(SecurityException):
    """Raised when a user is forbidden from accessing a resource."""

    def __init__(self, resource_type: str, resource_id: Any = None, message: Optional[str] = None):
        details = {"resource_type": resource_type}
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(
            message
            or f"Access forbidden to {resource_type}"
            + (f" with ID {resource_id}" if resource_id else ""),
            f"{self.CODE_PREFIX}002",
            details,
        )


class AuthenticationException(SecurityException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, f"{self.CODE_PREFIX}003", {})


class DatabaseException(PMToolException):
    """
    Exception raised for database-related errors.
    """

    CODE_PREFIX = "DATABASE_"

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if entity_type:
            error_details["entity_type"] = entity_type
        code = error_code or f"{self.CODE_PREFIX}001"
        super().__init__(message=message, code=code, details=error_details)


class StoreIOException(DatabaseException):
    """
    Raised when the task store cannot be read or written.

    Wraps the underlying driver/ORM error; never retried.
    """

    def __init__(self, operation: str, original_error: Optional[Exception] = None):
        details = {"operation": operation}
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(
            message=f"Task store failure during {operation}",
            error_code=f"{self.CODE_PREFIX}002",
            details=details,
        )
