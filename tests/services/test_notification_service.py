# tests/services/test_notification_service.py
import asyncio
from datetime import datetime, timedelta

import pytest

from pmtool.core.exceptions import EntityNotFoundException
from pmtool.db.models import Notification
from pmtool.services.notification_service import ConnectionManager, NotificationService


class FakeWebSocket:
    def __init__(self, fail=False):
        self.accepted = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


def test_connection_manager_delivers_to_user_sockets_only():
    async def scenario():
        manager = ConnectionManager()
        mine, other = FakeWebSocket(), FakeWebSocket()
        await manager.connect("user-1", mine)
        await manager.connect("user-2", other)

        delivered = await manager.send_to_user("user-1", {"type": "notification"})
        return manager, mine, other, delivered

    manager, mine, other, delivered = asyncio.run(scenario())

    assert mine.accepted
    assert delivered == 1
    assert mine.sent == [{"type": "notification"}]
    assert other.sent == []
    assert manager.connection_count("user-1") == 1


def test_connection_manager_drops_failing_socket():
    async def scenario():
        manager = ConnectionManager()
        await manager.connect("user-1", FakeWebSocket(fail=True))
        delivered = await manager.send_to_user("user-1", {"type": "notification"})
        return manager, delivered

    manager, delivered = asyncio.run(scenario())

    assert delivered == 0
    assert manager.connection_count("user-1") == 0


def test_notify_from_running_loop_schedules_send():
    async def scenario():
        manager = ConnectionManager()
        socket = FakeWebSocket()
        await manager.connect("user-1", socket)
        manager.notify("user-1", {"type": "notification", "message": "hi"})
        scheduled = len(manager._pending)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        return manager, socket, scheduled

    manager, socket, scheduled = asyncio.run(scenario())

    assert scheduled == 1
    assert manager._pending == set()
    assert socket.sent == [{"type": "notification", "message": "hi"}]


def test_notify_without_sockets_is_a_no_op():
    ConnectionManager().notify("nobody", {"type": "notification"})


def test_disconnect_forgets_user():
    async def scenario():
        manager = ConnectionManager()
        socket = FakeWebSocket()
        await manager.connect("user-1", socket)
        manager.disconnect("user-1", socket)
        manager.disconnect("user-1", socket)
        return manager

    manager = asyncio.run(scenario())

    assert manager.active_connections == {}


class RecordingManager(ConnectionManager):
    def __init__(self):
        super().__init__()
        self.notified = []

    def notify(self, user_id, message):
        self.notified.append((user_id, message))


@pytest.fixture()
def manager():
    return RecordingManager()


@pytest.fixture()
def service(db_session, manager):
    return NotificationService(db_session, manager=manager)


def test_create_notification_pushes_to_recipient(service, manager, owner):
    notification = service.create_notification(owner.id, "You have been assigned to task: A")

    assert notification.read is False
    assert manager.notified[0][0] == owner.id
    assert manager.notified[0][1]["type"] == "notification"
    assert manager.notified[0][1]["message"] == "You have been assigned to task: A"


def test_list_is_newest_first(service, db_session, owner):
    now = datetime.now()
    db_session.add_all([
        Notification(user_id=owner.id, message="old", created_at=now - timedelta(hours=1)),
        Notification(user_id=owner.id, message="new", created_at=now),
    ])
    db_session.commit()

    assert [n.message for n in service.list_for_user(owner.id)] == ["new", "old"]


def test_mark_as_read_checks_owner(service, factory, owner):
    stranger = factory.user(email="stranger@example.com", name="Stranger")
    notification = service.create_notification(owner.id, "hello")

    with pytest.raises(EntityNotFoundException):
        service.mark_as_read(notification.id, stranger.id)

    assert service.mark_as_read(notification.id, owner.id).read is True


def test_mark_all_as_read(service, owner):
    service.create_notification(owner.id, "one")
    service.create_notification(owner.id, "two")

    assert service.mark_all_as_read(owner.id) == 2
    assert all(n.read for n in service.list_for_user(owner.id))
