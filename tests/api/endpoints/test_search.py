# tests/api/endpoints/test_search.py
from pmtool.services.search_service import SearchService


def test_search_tasks_and_projects(client, factory, owner, project):
    roadmap = factory.project(owner, name="Roadmap")
    factory.task(project, "Draft roadmap slides")
    factory.task(roadmap, "Unrelated")

    results = client.get(
        "/api/search/", params={"query": "ROADMAP"}, headers=factory.headers(owner)
    ).json()

    assert sorted((r["entity_type"], r.get("title") or r.get("name")) for r in results) == [
        ("project", "Roadmap"),
        ("task", "Draft roadmap slides"),
    ]


def test_search_requires_query(client, factory, owner):
    assert client.get("/api/search/", headers=factory.headers(owner)).status_code == 422


def test_blank_query_returns_nothing(db_session, project, factory):
    factory.task(project, "Anything")

    assert SearchService(db_session).search("   ") == []


def test_search_single_entity_type(db_session, factory, owner, project):
    factory.task(project, "Project kickoff")

    assert [r["entity_type"] for r in SearchService(db_session).search_tasks("project")] == ["task"]
    assert [r["name"] for r in SearchService(db_session).search_projects("project")] == ["Project"]
