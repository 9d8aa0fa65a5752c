# tests/conftest.py
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pmtool.api import deps
from pmtool.api.api import api_router
from pmtool.core.exceptions import PMToolException
from pmtool.core.security import create_access_token, get_password_hash
from pmtool.db.models import Base, Project, Task, TaskDependency, User
from pmtool.db.session import enable_sqlite_foreign_keys, get_db, init_db
from pmtool.main import pmtool_exception_handler
from pmtool.services.cache_service import CacheService

TEST_DATABASE_URL = "sqlite://"


@pytest.fixture()
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def cache_service():
    return CacheService(namespace="test", default_ttl=300)


@pytest.fixture()
def test_app(session_factory, cache_service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = FastAPI()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_cache_service] = lambda: cache_service
    app.add_exception_handler(PMToolException, pmtool_exception_handler)
    app.include_router(api_router, prefix="/api")
    return app


@pytest.fixture()
def client(test_app):
    return TestClient(test_app)


class Factory:
    """Creates persisted test records."""

    def __init__(self, session):
        self.session = session

    def user(self, email="owner@example.com", name="Owner", password="secret123", **fields):
        user = User(name=name, email=email, hashed_password=get_password_hash(password), **fields)
        self.session.add(user)
        self.session.commit()
        return user

    def project(self, owner, name="Project"):
        project = Project(name=name, description=f"{name} description", owner_id=owner.id)
        self.session.add(project)
        self.session.commit()
        return project

    def task(self, project, title, **fields):
        task = Task(title=title, project_id=project.id, **fields)
        self.session.add(task)
        self.session.commit()
        return task

    def edge(self, task, depends_on):
        edge = TaskDependency(task_id=task.id, depends_on_id=depends_on.id)
        self.session.add(edge)
        self.session.commit()
        return edge

    @staticmethod
    def headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def factory(db_session):
    return Factory(db_session)


@pytest.fixture()
def owner(factory):
    return factory.user()


@pytest.fixture()
def project(factory, owner):
    return factory.project(owner)
