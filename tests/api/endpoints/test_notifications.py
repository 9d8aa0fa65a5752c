# tests/api/endpoints/test_notifications.py
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
from starlette.websockets import WebSocketDisconnect

from pmtool.api.api import api_router
from pmtool.core.security import create_access_token, get_password_hash
from pmtool.db.models import Notification, User
from pmtool.db.session import enable_sqlite_foreign_keys, get_db, init_db
from pmtool.services.notification_service import connection_manager


def notify(db_session, user, message, read=False):
    notification = Notification(user_id=user.id, message=message, read=read)
    db_session.add(notification)
    db_session.commit()
    return notification


def test_list_only_own_notifications(client, factory, db_session, owner):
    other = factory.user(email="other@example.com", name="Other")
    notify(db_session, owner, "Mine")
    notify(db_session, other, "Theirs")

    response = client.get("/api/notifications/", headers=factory.headers(owner))

    assert response.status_code == 200
    assert [n["message"] for n in response.json()] == ["Mine"]


def test_mark_as_read(client, factory, db_session, owner):
    notification = notify(db_session, owner, "Ping")

    response = client.put(f"/api/notifications/{notification.id}/read", headers=factory.headers(owner))

    assert response.status_code == 200
    assert response.json()["read"] is True


def test_cannot_mark_someone_elses_notification(client, factory, db_session, owner):
    other = factory.user(email="other@example.com", name="Other")
    notification = notify(db_session, other, "Private")

    response = client.put(f"/api/notifications/{notification.id}/read", headers=factory.headers(owner))

    assert response.status_code == 404


def test_mark_all_as_read(client, factory, db_session, owner):
    notify(db_session, owner, "One")
    notify(db_session, owner, "Two")
    notify(db_session, owner, "Old", read=True)
    headers = factory.headers(owner)

    response = client.put("/api/notifications/read-all", headers=headers)

    assert response.json() == {"updated": 2}
    assert all(n["read"] for n in client.get("/api/notifications/", headers=headers).json())


def test_websocket_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/notifications/ws?token=garbage") as websocket:
            websocket.receive_json()


def test_websocket_receives_assignment(client, factory, owner, project):
    member = factory.user(email="member@example.com", name="Member")
    token = factory.headers(member)["Authorization"].split(" ", 1)[1]

    with client.websocket_connect(f"/api/notifications/ws?token={token}") as websocket:
        assert connection_manager.connection_count(member.id) == 1
        client.post(
            "/api/tasks/",
            json={"title": "Ship it", "project_id": project.id, "assigned_to_id": member.id},
            headers=factory.headers(owner),
        )
        message = websocket.receive_json()

    assert message["type"] == "notification"
    assert message["message"] == "You have been assigned to task: Ship it"
    assert message["read"] is False


def test_open_socket_does_not_hold_a_pooled_connection(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'pool.db'}",
        connect_args={"check_same_thread": False},
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=1,
    )
    enable_sqlite_foreign_keys(engine)
    init_db(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    with session_factory() as session:
        user = User(name="Pooled", email="pooled@example.com", hashed_password=get_password_hash("secret123"))
        session.add(user)
        session.commit()
        token = create_access_token(user.id)
    headers = {"Authorization": f"Bearer {token}"}

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = FastAPI()
    app.dependency_overrides[get_db] = override_get_db
    app.include_router(api_router, prefix="/api")
    client = TestClient(app)

    try:
        with client.websocket_connect(f"/api/notifications/ws?token={token}"):
            assert client.get("/api/notifications/", headers=headers).status_code == 200
    finally:
        engine.dispose()
