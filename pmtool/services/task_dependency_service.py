# File: pmtool/services/task_dependency_service.py
"""
Task dependency graph for PMTool.

Dependencies are stored as edges "task depends on depends_on". Within a
project they form a directed graph whose arcs run from the prerequisite to
the dependent task; topo_sort orders the project's tasks with Kahn's
algorithm and reports a cycle when no total order exists.

The service keeps no state between calls. Concurrent add_dependencies calls
may store the same edge twice; duplicates are kept and simply count twice in
the graph.
"""

from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pmtool.core.config import settings
from pmtool.core.events import DependenciesAdded
from pmtool.core.exceptions import (
    CycleDetectedException,
    PMToolException,
    StoreIOException,
    TaskNotFoundException,
)
from pmtool.db.models.task import Task, TaskDependency
from pmtool.repositories.task_dependency_repository import TaskDependencyRepository
from pmtool.repositories.task_repository import TaskRepository
from pmtool.services.base_service import BaseService

logger = logging.getLogger(__name__)


class TaskDependencyService(BaseService[TaskDependency]):
    """
    Service for recording task dependencies and ordering a project's tasks.
    """

    def __init__(
        self,
        session: Session,
        repository: Optional[TaskDependencyRepository] = None,
        task_repository: Optional[TaskRepository] = None,
        event_bus=None,
        global_edge_scan: Optional[bool] = None,
    ):
        """
        Initialize the dependency service.

        Args:
            session: Database session
            repository: Optional edge repository
            task_repository: Optional task repository
            event_bus: Optional event bus for DependenciesAdded events
            global_edge_scan: Load every edge of the store when ordering a
                project instead of the edges touching its tasks. Defaults to
                settings.TOPO_SORT_GLOBAL_EDGE_SCAN.
        """
        super().__init__(
            session,
            repository=repository or TaskDependencyRepository(session),
            event_bus=event_bus,
        )
        self.task_repository = task_repository or TaskRepository(session)
        self.global_edge_scan = (
            settings.TOPO_SORT_GLOBAL_EDGE_SCAN if global_edge_scan is None else global_edge_scan
        )

    def add_dependencies(self, task_id: str, prerequisite_ids: Sequence[str]) -> List[TaskDependency]:
        """
        Record that a task depends on each of the given prerequisites.

        Prerequisite ids that match no task are dropped without error. No
        check is made for existing edges or for cycles; cycles surface later
        in topo_sort.

        Args:
            task_id: ID of the dependent task
            prerequisite_ids: IDs of the tasks that must be finished first

        Returns:
            Every edge whose dependent task is task_id, after the insert

        Raises:
            TaskNotFoundException: If task_id matches no task (nothing is written)
            StoreIOException: If the store cannot be read or written
        """
        task = self._read("find_task_by_id", self.task_repository.find_task_by_id, task_id)
        if task is None:
            raise TaskNotFoundException(task_id)

        prerequisites = self._read(
            "find_tasks_by_ids", self.task_repository.find_tasks_by_ids, list(prerequisite_ids)
        )

        with self.transaction():
            for prerequisite in prerequisites:
                self.repository.create_dependency_edge(task.id, prerequisite.id)

        added_ids = [prerequisite.id for prerequisite in prerequisites]
        self._log_operation(
            "add_dependencies",
            "Task",
            task.id,
            details={"requested": len(prerequisite_ids), "added": len(added_ids)},
        )
        if added_ids:
            self._publish(DependenciesAdded(task_id=task.id, prerequisite_ids=added_ids))

        return self.get_dependencies(task.id)

    def get_dependencies(self, task_id: str) -> List[TaskDependency]:
        """
        Get the edges whose dependent task is task_id.

        An unknown task id yields an empty list.
        """
        return self._read(
            "find_dependency_edges_by_task_id",
            self.repository.find_dependency_edges_by_task_id,
            task_id,
        )

    def topo_sort(self, project_id: str) -> List[Task]:
        """
        Order a project's tasks so that every prerequisite precedes its dependents.

        Tasks with no constraint between them keep the order in which the
        store returned them, which callers should not rely on. Prerequisites
        that belong to another project do not hold back their dependents and
        never appear in the result.

        Args:
            project_id: ID of the project

        Returns:
            The project's tasks in a valid execution order (empty for an
            unknown or empty project)

        Raises:
            CycleDetectedException: If the project's dependencies contain a cycle
            StoreIOException: If the store cannot be read
        """
        tasks = self._read("list_tasks_by_project", self.task_repository.list_tasks_by_project, project_id)
        task_ids = [task.id for task in tasks]

        if self.global_edge_scan:
            edges = self._read("list_all_dependency_edges", self.repository.list_all_dependency_edges)
        else:
            edges = self._read(
                "list_dependency_edges_by_task_ids",
                self.repository.list_dependency_edges_by_task_ids,
                task_ids,
            )

        in_degree, adjacency = self._build_graph(task_ids, edges)
        order = self._kahn_order(task_ids, in_degree, adjacency)

        if len(order) != len(task_ids):
            ordered = set(order)
            unordered = [task_id for task_id in task_ids if task_id not in ordered]
            logger.warning(
                f"Cycle detected in project {project_id}: "
                f"{len(order)} of {len(task_ids)} tasks ordered"
            )
            raise CycleDetectedException(project_id, len(order), len(task_ids), unordered)

        tasks_by_id = {task.id: task for task in tasks}
        logger.debug(f"Topologically sorted {len(order)} tasks of project {project_id}")
        return [tasks_by_id[task_id] for task_id in order]

    @staticmethod
    def _build_graph(
        task_ids: List[str], edges: Sequence[TaskDependency]
    ) -> Tuple[Dict[str, int], Dict[str, List[str]]]:
        """
        Build in-degree and adjacency maps for the given task set.

        Arcs run from prerequisite to dependent. Adjacency and in-degree
        entries for ids outside the set are created on demand. An arc only
        adds to its destination's in-degree when its source is in the set,
        since an outside source is never dequeued and could never release it.
        """
        members = set(task_ids)
        in_degree: Dict[str, int] = {task_id: 0 for task_id in task_ids}
        adjacency: Dict[str, List[str]] = {task_id: [] for task_id in task_ids}

        for edge in edges:
            source = edge.depends_on_id
            destination = edge.task_id
            adjacency.setdefault(source, []).append(destination)
            in_degree.setdefault(destination, 0)
            if source in members:
                in_degree[destination] += 1

        return in_degree, adjacency

    @staticmethod
    def _kahn_order(
        task_ids: List[str], in_degree: Dict[str, int], adjacency: Dict[str, List[str]]
    ) -> List[str]:
        """
        Run Kahn's algorithm over the task set.

        Only members of the set are seeded or enqueued, so ids that were
        added on demand never appear in the result.
        """
        members = set(task_ids)
        remaining = dict(in_degree)
        queue = deque(task_id for task_id in task_ids if remaining[task_id] == 0)
        order: List[str] = []

        while queue:
            node = queue.popleft()
            order.append(node)
            for neighbor in adjacency.get(node, []):
                remaining[neighbor] -= 1
                if remaining[neighbor] == 0 and neighbor in members:
                    queue.append(neighbor)

        return order

    def _read(self, operation: str, func, *args):
        try:
            return func(*args)
        except SQLAlchemyError as e:
            logger.error(f"Task store read failed during {operation}: {e}", exc_info=True)
            raise StoreIOException(operation, e) from e

    def _transform_error(self, error: Exception) -> Optional[PMToolException]:
        if isinstance(error, SQLAlchemyError):
            return StoreIOException("create_dependency_edge", error)
        return None
