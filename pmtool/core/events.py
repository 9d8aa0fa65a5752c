# File: pmtool/core/events.py

from typing import Dict, Any, Callable, List, Optional, Union, Type
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
import uuid
import asyncio
import logging

from fastapi import FastAPI

logger = logging.getLogger(__name__)


# --- Base DomainEvent ---
@dataclass(eq=False)
class DomainEvent:
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["event_type"] = self.__class__.__name__
        for key, value in result.items():
            if isinstance(value, (datetime, date)):
                result[key] = value.isoformat()
        return result


# --- Project Event Definitions ---
@dataclass(eq=False)
class ProjectCreated(DomainEvent):
    project_id: str = ""
    name: str = ""
    owner_id: Optional[str] = None


@dataclass(eq=False)
class ProjectUpdated(DomainEvent):
    project_id: str = ""
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class ProjectDeleted(DomainEvent):
    project_id: str = ""


# --- Task Event Definitions ---
@dataclass(eq=False)
class TaskCreated(DomainEvent):
    task_id: str = ""
    project_id: str = ""
    title: str = ""
    assigned_to_id: Optional[str] = None


@dataclass(eq=False)
class TaskUpdated(DomainEvent):
    task_id: str = ""
    project_id: str = ""
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class TaskDeleted(DomainEvent):
    task_id: str = ""
    project_id: Optional[str] = None


@dataclass(eq=False)
class DependenciesAdded(DomainEvent):
    task_id: str = ""
    prerequisite_ids: List[str] = field(default_factory=list)


class EventBus:
    """
    Central event bus for domain events.

    Handler exceptions are logged and never propagate to the publisher.

    Usage:
        global_event_bus.subscribe(TaskCreated, handle_task_created)
        global_event_bus.publish(TaskCreated(task_id="..."))
    """

    def __init__(self):
        self.subscribers: Dict[str, List[Callable]] = defaultdict(list)

    @staticmethod
    def _event_type_name(event_type: Union[str, Type[DomainEvent]]) -> str:
        return event_type.__name__ if isinstance(event_type, type) else str(event_type)

    def publish(self, event: DomainEvent) -> None:
        """
        Publish an event synchronously to all registered handlers.

        Coroutine handlers cannot run here and are skipped with a warning.
        """
        event_type = type(event).__name__
        logger.debug(f"Publishing sync event {event_type} ID {event.event_id}")
        for handler in list(self.subscribers.get(event_type, [])):
            if asyncio.iscoroutinefunction(handler):
                logger.warning(f"Skipping async handler {handler.__name__} for {event_type}")
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in sync handler {handler.__name__} for {event_type} ID {event.event_id}: {e}",
                             exc_info=True)

    def subscribe(self, event_type: Union[str, Type[DomainEvent]], handler: Callable) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Event class or event type name string
            handler: Callable to handle the event
        """
        event_type_name = self._event_type_name(event_type)
        self.subscribers[event_type_name].append(handler)
        logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {event_type_name}")

    def unsubscribe(self, event_type: Union[str, Type[DomainEvent]], handler: Callable) -> bool:
        """
        Unsubscribe from an event type.

        Returns:
            True if handler was found and removed, False otherwise
        """
        event_type_name = self._event_type_name(event_type)
        try:
            self.subscribers[event_type_name].remove(handler)
        except ValueError:
            return False
        logger.debug(f"Unsubscribed handler {getattr(handler, '__name__', repr(handler))} from {event_type_name}")
        return True

    def clear_subscriptions(self) -> None:
        """Clear all event subscriptions."""
        self.subscribers.clear()
        logger.debug("Cleared all event subscriptions")


# Global event bus instance - use this throughout the application
global_event_bus = EventBus()


# --- FastAPI Event Handlers Setup ---
def setup_event_handlers(app: FastAPI) -> None:
    """
    Set up FastAPI lifecycle event handlers.

    Args:
        app: FastAPI application instance
    """

    @app.on_event("startup")
    async def startup_event():
        logger.info("Application starting up")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutting down")
        global_event_bus.clear_subscriptions()
