# tests/test_db_models.py
import pytest
from sqlalchemy import select

from pmtool.db.models import Notification, Project, Task, TaskDependency, TaskStatus, UserRole


def test_defaults(factory, owner, project):
    task = factory.task(project, "  Write docs  ")

    assert owner.role == UserRole.MEMBER
    assert owner.is_active is True
    assert task.title == "Write docs"
    assert task.status == TaskStatus.TODO
    assert len(task.id) == 36
    assert task.created_at is not None


def test_blank_names_are_rejected(owner):
    with pytest.raises(ValueError):
        Project(name="   ", owner_id=owner.id)
    with pytest.raises(ValueError):
        Task(title="", project_id="p")


def test_to_dict_serializes_enums_and_dates(factory, project):
    task = factory.task(project, "Task")

    data = task.to_dict()

    assert data["status"] == "todo"
    assert data["priority"] == "medium"
    assert isinstance(data["created_at"], str)


def test_deleting_task_removes_edges_on_both_sides(db_session, factory, project):
    a = factory.task(project, "A")
    b = factory.task(project, "B")
    c = factory.task(project, "C")
    factory.edge(a, b)
    factory.edge(b, c)

    db_session.delete(b)
    db_session.commit()

    assert db_session.execute(select(TaskDependency)).scalars().all() == []


def test_deleting_project_removes_tasks_and_edges(db_session, factory, owner, project):
    other = factory.project(owner, name="Other")
    a = factory.task(project, "A")
    outside = factory.task(other, "Outside")
    factory.edge(outside, a)

    db_session.delete(project)
    db_session.commit()

    assert db_session.execute(select(Task)).scalars().all() == [outside]
    assert db_session.execute(select(TaskDependency)).scalars().all() == []


def test_notification_belongs_to_user(db_session, owner):
    db_session.add(Notification(user_id=owner.id, message="hello"))
    db_session.commit()
    db_session.refresh(owner)

    assert [n.message for n in owner.notifications] == ["hello"]
    assert owner.notifications[0].read is False
