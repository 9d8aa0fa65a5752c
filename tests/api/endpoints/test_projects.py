# tests/api/endpoints/test_projects.py
from pmtool.core.events import ProjectCreated, global_event_bus


def test_create_and_list_projects(client, factory, owner):
    headers = factory.headers(owner)
    received = []
    global_event_bus.subscribe(ProjectCreated, received.append)
    try:
        response = client.post(
            "/api/projects/", json={"name": "Launch", "description": "Q3 launch"}, headers=headers
        )
    finally:
        global_event_bus.unsubscribe(ProjectCreated, received.append)

    assert response.status_code == 201
    project = response.json()
    assert project["owner_id"] == owner.id
    assert [e.project_id for e in received] == [project["id"]]

    listed = client.get("/api/projects/", headers=headers).json()
    assert [p["id"] for p in listed] == [project["id"]]


def test_blank_project_name_is_rejected(client, factory, owner):
    response = client.post("/api/projects/", json={"name": "  "}, headers=factory.headers(owner))

    assert response.status_code == 422


def test_assignee_sees_project(client, factory, owner, project):
    member = factory.user(email="member@example.com", name="Member")
    member_headers = factory.headers(member)

    assert client.get("/api/projects/", headers=member_headers).json() == []
    assert client.get(f"/api/projects/{project.id}", headers=member_headers).status_code == 403

    client.post(
        "/api/tasks/",
        json={"title": "Help out", "project_id": project.id, "assigned_to_id": member.id},
        headers=factory.headers(owner),
    )

    assert [p["id"] for p in client.get("/api/projects/", headers=member_headers).json()] == [project.id]
    assert client.get(f"/api/projects/{project.id}", headers=member_headers).status_code == 200


def test_only_owner_may_modify(client, factory, owner, project):
    member = factory.user(email="member@example.com", name="Member")
    factory.task(project, "Assigned", assigned_to_id=member.id)
    member_headers = factory.headers(member)

    assert client.patch(
        f"/api/projects/{project.id}", json={"name": "Hijacked"}, headers=member_headers
    ).status_code == 403
    assert client.delete(f"/api/projects/{project.id}", headers=member_headers).status_code == 403


def test_update_invalidates_cached_project(client, factory, owner, project, cache_service):
    headers = factory.headers(owner)
    assert client.get(f"/api/projects/{project.id}", headers=headers).json()["name"] == "Project"
    assert cache_service.exists(f"project:{project.id}")

    updated = client.patch(f"/api/projects/{project.id}", json={"name": "Renamed"}, headers=headers)

    assert updated.status_code == 200
    assert not cache_service.exists(f"project:{project.id}")
    assert client.get(f"/api/projects/{project.id}", headers=headers).json()["name"] == "Renamed"
    assert client.get("/api/projects/", headers=headers).json()[0]["name"] == "Renamed"


def test_delete_project_removes_tasks(client, factory, owner, project):
    headers = factory.headers(owner)
    project_id = project.id
    task_id = factory.task(project, "Doomed").id

    assert client.delete(f"/api/projects/{project_id}", headers=headers).status_code == 204
    assert client.get(f"/api/projects/{project_id}", headers=headers).status_code == 404
    assert client.get(f"/api/tasks/{task_id}", headers=headers).status_code == 404


def test_unknown_project(client, factory, owner):
    headers = factory.headers(owner)

    assert client.get("/api/projects/missing", headers=headers).status_code == 404
    assert client.patch("/api/projects/missing", json={"name": "X"}, headers=headers).status_code == 404


def test_search_projects(client, factory, owner, project):
    factory.project(owner, name="Website redesign")
    stranger = factory.user(email="stranger@example.com", name="Stranger")
    factory.project(stranger, name="Secret website")

    found = client.get(
        "/api/projects/search", params={"query": "website"}, headers=factory.headers(owner)
    ).json()

    assert [p["name"] for p in found] == ["Website redesign"]
