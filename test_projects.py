import pytest

from taskpulse.models import Project, Role, Task
from taskpulse.services.notifier import EventKind


@pytest.fixture
def setup(make_user, make_department):
    admin = make_user(Role.ADMIN, name="Ada Admin")
    manager = make_user(Role.MANAGER, name="Max Manager")
    member = make_user(name="Mia Member")
    outsider = make_user(name="Otto Outsider")
    department = make_department(manager)
    return admin, manager, member, outsider, department


def project_payload(manager_id, department_id, **overrides):
    payload = {
        "name": "Apollo",
        "description": "Launch the thing",
        "start_date": "2026-01-01T00:00:00Z",
        "end_date": "2026-03-31T00:00:00Z",
        "manager_id": manager_id,
        "department_id": department_id,
    }
    payload.update(overrides)
    return payload


def test_manager_creates_project_and_team_is_notified(client, setup, auth_headers, delivered):
    admin, manager, member, _, department = setup
    response = client.post("/projects/", headers=auth_headers(manager),
                           json=project_payload(manager.id, department.id, team=[member.id]))
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "planning"
    assert body["priority"] == "medium"
    assert [m["id"] for m in body["team"]] == [member.id]
    assert delivered(EventKind.PROJ_CREATE) == [manager.id, member.id, admin.id]


def test_employee_cannot_create(client, setup, auth_headers):
    _, manager, member, _, department = setup
    response = client.post("/projects/", headers=auth_headers(member),
                           json=project_payload(manager.id, department.id))
    assert response.status_code == 403


def test_unknown_manager_stores_nothing(client, db, setup, auth_headers):
    admin, _, _, _, department = setup
    response = client.post("/projects/", headers=auth_headers(admin),
                           json=project_payload("ghost", department.id))
    assert response.status_code == 400
    assert response.json()["field"] == "manager_id"
    assert db.query(Project).count() == 0


def test_unknown_team_member_stores_nothing(client, db, setup, auth_headers):
    admin, manager, _, _, department = setup
    response = client.post("/projects/", headers=auth_headers(admin),
                           json=project_payload(manager.id, department.id, team=["ghost"]))
    assert response.status_code == 400
    assert response.json()["field"] == "team"
    assert db.query(Project).count() == 0


@pytest.mark.parametrize("end_date", ["2026-01-01T00:00:00Z", "2025-12-01T00:00:00Z"])
def test_end_date_must_follow_start_date(client, db, setup, auth_headers, end_date):
    admin, manager, _, _, department = setup
    response = client.post("/projects/", headers=auth_headers(admin),
                           json=project_payload(manager.id, department.id, end_date=end_date))
    assert response.status_code == 400
    assert db.query(Project).count() == 0


def test_update_rechecks_dates(client, setup, make_project, auth_headers):
    _, manager, _, _, department = setup
    project = make_project(manager, department)
    response = client.put(f"/projects/{project.id}", headers=auth_headers(manager),
                          json={"end_date": "2025-06-01T00:00:00Z"})
    assert response.status_code == 400

    response = client.put(f"/projects/{project.id}", headers=auth_headers(manager),
                          json={"status": "active", "end_date": "2026-06-01T00:00:00Z"})
    assert response.status_code == 200
    assert response.json()["status"] == "active"


def test_visibility(client, setup, make_project, make_user, auth_headers):
    admin, manager, member, outsider, department = setup
    visible = make_project(manager, department, team=[member], name="Visible")
    make_project(make_user(Role.MANAGER), department, name="Hidden")

    names = [p["name"] for p in client.get("/projects/", headers=auth_headers(member)).json()]
    assert names == ["Visible"]
    assert len(client.get("/projects/", headers=auth_headers(admin)).json()) == 2
    assert client.get("/projects/", headers=auth_headers(outsider)).json() == []

    assert client.get(f"/projects/{visible.id}", headers=auth_headers(member)).status_code == 200
    assert client.get(f"/projects/{visible.id}", headers=auth_headers(outsider)).status_code == 403
    assert client.get("/projects/missing", headers=auth_headers(outsider)).status_code == 404


def test_status_filter(client, setup, make_project, auth_headers):
    admin, manager, _, _, department = setup
    make_project(manager, department)
    assert len(client.get("/projects/?status=planning", headers=auth_headers(admin)).json()) == 1
    assert client.get("/projects/?status=active", headers=auth_headers(admin)).json() == []
    assert client.get(f"/projects/?department={department.id}", headers=auth_headers(admin)).status_code == 200


def test_team_add_and_remove(client, db, setup, make_project, auth_headers, delivered):
    admin, manager, member, outsider, department = setup
    project = make_project(manager, department)
    url = f"/projects/{project.id}/team"

    assert client.post(url, json={"user_id": member.id}, headers=auth_headers(outsider)).status_code == 403

    response = client.post(url, json={"user_id": member.id}, headers=auth_headers(manager))
    assert response.status_code == 200
    assert [m["id"] for m in response.json()["team"]] == [member.id]
    assert delivered(EventKind.PROJ_ADD_MEMBER) == [member.id, manager.id, admin.id]

    response = client.post(url, json={"user_id": member.id}, headers=auth_headers(manager))
    assert response.status_code == 400

    response = client.request("DELETE", url, json={"user_id": member.id}, headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["team"] == []

    response = client.request("DELETE", url, json={"user_id": member.id}, headers=auth_headers(manager))
    assert response.status_code == 400
    assert "not a member" in response.json()["detail"]


def test_delete_unlinks_tasks(client, db, setup, make_project, make_task, auth_headers):
    admin, manager, member, _, department = setup
    project = make_project(manager, department)
    task = make_task(manager, member, project=project)

    assert client.delete(f"/projects/{project.id}", headers=auth_headers(member)).status_code == 403
    response = client.delete(f"/projects/{project.id}", headers=auth_headers(manager))
    assert response.status_code == 200

    db.expire_all()
    assert db.query(Project).count() == 0
    assert db.get(Task, task.id).project_id is None
