# tests/services/test_task_dependency_service.py
import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from pmtool.core.events import DependenciesAdded, EventBus
from pmtool.core.exceptions import (
    CycleDetectedException,
    StoreIOException,
    TaskNotFoundException,
)
from pmtool.db.models import TaskDependency
from pmtool.services.task_dependency_service import TaskDependencyService


@pytest.fixture()
def service(db_session):
    return TaskDependencyService(db_session, global_edge_scan=False)


def assert_valid_order(ordered, edges):
    position = {task.id: index for index, task in enumerate(ordered)}
    for dependent, prerequisite in edges:
        assert position[prerequisite.id] < position[dependent.id]


def edge_count(session):
    return len(session.execute(select(TaskDependency)).scalars().all())


class TestAddDependencies:
    def test_unknown_task_writes_nothing(self, service, db_session, factory, project):
        prerequisite = factory.task(project, "Prerequisite")

        with pytest.raises(TaskNotFoundException):
            service.add_dependencies("missing-task", [prerequisite.id])

        assert edge_count(db_session) == 0

    def test_unknown_prerequisites_are_dropped(self, service, factory, project):
        task = factory.task(project, "Task")
        prerequisite = factory.task(project, "Prerequisite")

        edges = service.add_dependencies(task.id, [prerequisite.id, "missing-prerequisite"])

        assert len(edges) == 1
        assert edges[0].task_id == task.id
        assert edges[0].depends_on_id == prerequisite.id

    def test_returns_all_edges_of_task(self, service, factory, project):
        task = factory.task(project, "Task")
        first = factory.task(project, "First")
        second = factory.task(project, "Second")

        service.add_dependencies(task.id, [first.id])
        edges = service.add_dependencies(task.id, [second.id])

        assert {edge.depends_on_id for edge in edges} == {first.id, second.id}

    def test_duplicates_are_kept(self, service, factory, project):
        task = factory.task(project, "Task")
        prerequisite = factory.task(project, "Prerequisite")

        service.add_dependencies(task.id, [prerequisite.id])
        edges = service.add_dependencies(task.id, [prerequisite.id])

        assert len(edges) == 2

    def test_empty_prerequisite_list(self, service, factory, project):
        task = factory.task(project, "Task")

        assert service.add_dependencies(task.id, []) == []

    def test_publishes_event(self, db_session, factory, project):
        bus = EventBus()
        received = []
        bus.subscribe(DependenciesAdded, received.append)
        service = TaskDependencyService(db_session, event_bus=bus)
        task = factory.task(project, "Task")
        prerequisite = factory.task(project, "Prerequisite")

        service.add_dependencies(task.id, [prerequisite.id, "missing"])

        assert len(received) == 1
        assert received[0].task_id == task.id
        assert received[0].prerequisite_ids == [prerequisite.id]

    def test_failed_edge_write_rolls_back(self, service, db_session, factory, project, monkeypatch):
        task = factory.task(project, "Task")
        first = factory.task(project, "First")
        second = factory.task(project, "Second")
        create_edge = service.repository.create_dependency_edge
        calls = []

        def fail_on_second(task_id, depends_on_id):
            calls.append(depends_on_id)
            if len(calls) == 2:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            return create_edge(task_id, depends_on_id)

        monkeypatch.setattr(service.repository, "create_dependency_edge", fail_on_second)

        with pytest.raises(StoreIOException) as exc_info:
            service.add_dependencies(task.id, [first.id, second.id])

        assert exc_info.value.details["operation"] == "create_dependency_edge"
        assert len(calls) == 2
        assert edge_count(db_session) == 0


class TestGetDependencies:
    def test_unknown_task_returns_empty_list(self, service):
        assert service.get_dependencies("missing-task") == []

    def test_only_edges_of_task(self, service, factory, project):
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        c = factory.task(project, "C")
        factory.edge(a, b)
        factory.edge(b, c)

        edges = service.get_dependencies(a.id)

        assert [(e.task_id, e.depends_on_id) for e in edges] == [(a.id, b.id)]


@pytest.mark.parametrize("global_edge_scan", [False, True])
class TestTopoSort:
    def test_prerequisites_come_first(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        c = factory.task(project, "C")
        factory.edge(a, b)
        factory.edge(a, c)

        ordered = service.topo_sort(project.id)

        assert len(ordered) == 3
        assert ordered[-1].id == a.id
        assert {task.id for task in ordered[:2]} == {b.id, c.id}

    def test_chain_and_diamond(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        design = factory.task(project, "Design")
        backend = factory.task(project, "Backend")
        frontend = factory.task(project, "Frontend")
        release = factory.task(project, "Release")
        docs = factory.task(project, "Docs")
        edges = [
            (backend, design),
            (frontend, design),
            (release, backend),
            (release, frontend),
        ]
        for dependent, prerequisite in edges:
            factory.edge(dependent, prerequisite)

        ordered = service.topo_sort(project.id)

        assert sorted(t.id for t in ordered) == sorted(
            t.id for t in [design, backend, frontend, release, docs]
        )
        assert_valid_order(ordered, edges)

    def test_two_task_cycle(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        factory.edge(a, b)
        factory.edge(b, a)

        with pytest.raises(CycleDetectedException) as exc_info:
            service.topo_sort(project.id)

        details = exc_info.value.details
        assert details["project_id"] == project.id
        assert details["ordered_count"] == 0
        assert details["task_count"] == 2
        assert set(details["unordered_task_ids"]) == {a.id, b.id}

    def test_self_dependency_is_a_cycle(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        factory.task(project, "Free")
        factory.edge(a, a)

        with pytest.raises(CycleDetectedException) as exc_info:
            service.topo_sort(project.id)

        assert exc_info.value.details["unordered_task_ids"] == [a.id]
        assert exc_info.value.details["ordered_count"] == 1

    def test_cycle_downstream_tasks_stay_unordered(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        c = factory.task(project, "C")
        factory.edge(a, b)
        factory.edge(b, a)
        factory.edge(c, a)

        with pytest.raises(CycleDetectedException) as exc_info:
            service.topo_sort(project.id)

        assert set(exc_info.value.details["unordered_task_ids"]) == {a.id, b.id, c.id}

    def test_empty_project(self, db_session, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)

        assert service.topo_sort(project.id) == []

    def test_unknown_project(self, db_session, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)

        assert service.topo_sort("missing-project") == []

    def test_external_prerequisite_does_not_block(self, db_session, factory, owner, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        other_project = factory.project(owner, name="Other")
        external = factory.task(other_project, "External")
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        factory.edge(a, external)
        factory.edge(b, a)

        ordered = service.topo_sort(project.id)

        assert [task.id for task in ordered] == [a.id, b.id]
        assert external.id not in {task.id for task in ordered}

    def test_external_dependent_is_not_listed(self, db_session, factory, owner, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        other_project = factory.project(owner, name="Other")
        a = factory.task(project, "A")
        external = factory.task(other_project, "External")
        factory.edge(external, a)

        ordered = service.topo_sort(project.id)

        assert [task.id for task in ordered] == [a.id]

    def test_cycle_in_other_project_is_ignored(self, db_session, factory, owner, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        other_project = factory.project(owner, name="Other")
        x = factory.task(other_project, "X")
        y = factory.task(other_project, "Y")
        factory.edge(x, y)
        factory.edge(y, x)
        a = factory.task(project, "A")

        assert [task.id for task in service.topo_sort(project.id)] == [a.id]
        with pytest.raises(CycleDetectedException):
            service.topo_sort(other_project.id)

    def test_duplicate_edges(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        factory.edge(a, b)
        factory.edge(a, b)

        ordered = service.topo_sort(project.id)

        assert [task.id for task in ordered] == [b.id, a.id]

    def test_repeated_calls_agree(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        c = factory.task(project, "C")
        edges = [(a, b), (b, c)]
        for dependent, prerequisite in edges:
            factory.edge(dependent, prerequisite)

        first = service.topo_sort(project.id)
        second = service.topo_sort(project.id)

        assert {t.id for t in first} == {t.id for t in second}
        assert_valid_order(first, edges)
        assert_valid_order(second, edges)

    def test_does_not_write(self, db_session, factory, project, global_edge_scan):
        service = TaskDependencyService(db_session, global_edge_scan=global_edge_scan)
        a = factory.task(project, "A")
        b = factory.task(project, "B")
        factory.edge(a, b)

        service.topo_sort(project.id)

        assert edge_count(db_session) == 1


def test_kahn_order_skips_nodes_outside_task_set():
    in_degree, adjacency = TaskDependencyService._build_graph(
        ["a", "b"],
        [
            TaskDependency(task_id="a", depends_on_id="outside"),
            TaskDependency(task_id="b", depends_on_id="a"),
            TaskDependency(task_id="outside-dependent", depends_on_id="b"),
        ],
    )

    assert in_degree == {"a": 0, "b": 1, "outside-dependent": 1}
    assert adjacency["outside"] == ["a"]
    assert TaskDependencyService._kahn_order(["a", "b"], in_degree, adjacency) == ["a", "b"]


def test_store_failure_is_wrapped(db_session, monkeypatch):
    service = TaskDependencyService(db_session)

    def broken(project_id):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(service.task_repository, "list_tasks_by_project", broken)

    with pytest.raises(StoreIOException) as exc_info:
        service.topo_sort("any-project")

    assert exc_info.value.details["operation"] == "list_tasks_by_project"
