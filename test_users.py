from conftest import PASSWORD
from taskpulse.models import Department, Role, User


def new_user(**overrides):
    payload = {
        "email": "New.Person@Example.com",
        "password": "secret123",
        "display_name": "New Person",
        "matricule": "N-0001",
        "phone_number": "+1-555-9999",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_users(client, make_user, make_department, auth_headers):
    admin = make_user(Role.ADMIN)
    department = make_department()
    response = client.post("/users/", headers=auth_headers(admin),
                           json=new_user(role="manager", department_id=department.id))
    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "new.person@example.com"
    assert body["role"] == "manager"
    assert body["department_id"] == department.id
    assert "password_hash" not in body


def test_non_admin_cannot_create(client, make_user, auth_headers):
    response = client.post("/users/", headers=auth_headers(make_user(Role.MANAGER)), json=new_user())
    assert response.status_code == 403


def test_duplicate_email_and_matricule(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    assert client.post("/users/", headers=auth_headers(admin), json=new_user()).status_code == 201

    response = client.post("/users/", headers=auth_headers(admin), json=new_user(matricule="N-0002"))
    assert response.status_code == 409
    response = client.post("/users/", headers=auth_headers(admin),
                           json=new_user(email="other@example.com"))
    assert response.status_code == 409


def test_list_is_role_filtered(client, make_user, make_department, auth_headers):
    admin = make_user(Role.ADMIN)
    department = make_department()
    manager = make_user(Role.MANAGER, department=department)
    colleague = make_user(department=department)
    stranger = make_user()

    def ids(user):
        return {u["id"] for u in client.get("/users/", headers=auth_headers(user)).json()}

    assert ids(admin) == {admin.id, manager.id, colleague.id, stranger.id}
    assert ids(manager) == {manager.id, colleague.id}
    assert ids(stranger) == {stranger.id}


def test_read_scope(client, make_user, make_department, auth_headers):
    department = make_department()
    manager = make_user(Role.MANAGER, department=department)
    colleague = make_user(department=department)
    stranger = make_user()

    assert client.get(f"/users/{colleague.id}", headers=auth_headers(manager)).status_code == 200
    assert client.get(f"/users/{stranger.id}", headers=auth_headers(manager)).status_code == 403
    assert client.get(f"/users/{stranger.id}", headers=auth_headers(stranger)).status_code == 200
    assert client.get(f"/users/{colleague.id}", headers=auth_headers(stranger)).status_code == 403
    assert client.get("/users/ghost", headers=auth_headers(stranger)).status_code == 404


def test_role_change_is_admin_only(client, db, make_user, make_department, auth_headers):
    admin = make_user(Role.ADMIN)
    department = make_department()
    manager = make_user(Role.MANAGER, department=department)
    employee = make_user(department=department)

    response = client.put(f"/users/{employee.id}", json={"role": "manager"}, headers=auth_headers(manager))
    assert response.status_code == 403
    assert response.json()["detail"] == "Only admins can change user roles"

    response = client.put(f"/users/{employee.id}", json={"role": "employee", "position": "Lead"},
                          headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["position"] == "Lead"

    response = client.put(f"/users/{employee.id}", json={"role": "manager"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["role"] == "manager"


def test_self_update_changes_password(client, make_user, auth_headers):
    user = make_user()
    response = client.put(f"/users/{user.id}", json={"password": "brand-new-pass"}, headers=auth_headers(user))
    assert response.status_code == 200

    response = client.post("/auth/login", json={"email": user.email, "password": "brand-new-pass"})
    assert response.status_code == 200


def test_manager_cannot_take_over_an_admin_account(client, make_user, make_department, auth_headers):
    admin_department = make_department()
    admin = make_user(Role.ADMIN, department=admin_department)
    manager = make_user(Role.MANAGER)

    response = client.put(f"/users/{manager.id}", json={"department_id": admin_department.id},
                          headers=auth_headers(manager))
    assert response.status_code == 200

    response = client.put(f"/users/{admin.id}", json={"password": "taken-over-1"}, headers=auth_headers(manager))
    assert response.status_code == 403
    response = client.put(f"/users/{admin.id}", json={"position": "Intern"}, headers=auth_headers(manager))
    assert response.status_code == 403

    response = client.post("/auth/login", json={"email": admin.email, "password": "taken-over-1"})
    assert response.status_code == 401
    response = client.post("/auth/login", json={"email": admin.email, "password": PASSWORD})
    assert response.status_code == 200


def test_manager_edits_profile_but_not_credentials(client, make_user, make_department, auth_headers):
    department = make_department()
    manager = make_user(Role.MANAGER, department=department)
    employee = make_user(department=department)

    for payload in ({"password": "reset-by-boss"}, {"email": "boss-picked@example.com"},
                    {"matricule": "X-9999"}):
        response = client.put(f"/users/{employee.id}", json=payload, headers=auth_headers(manager))
        assert response.status_code == 403

    response = client.put(f"/users/{employee.id}", json={"position": "Analyst", "display_name": "Renamed"},
                          headers=auth_headers(manager))
    assert response.status_code == 200
    assert response.json()["position"] == "Analyst"
    assert response.json()["display_name"] == "Renamed"


def test_blank_department_id_is_rejected(client, db, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    employee = make_user()

    response = client.put(f"/users/{employee.id}", json={"department_id": ""}, headers=auth_headers(admin))
    assert response.status_code == 400
    response = client.post("/users/", headers=auth_headers(admin), json=new_user(department_id=""))
    assert response.status_code == 400

    db.expire_all()
    assert db.get(User, employee.id).department_id is None


def test_delete_rules(client, db, make_user, make_department, make_task, auth_headers):
    admin = make_user(Role.ADMIN)
    manager = make_user(Role.MANAGER)
    busy = make_user()
    idle = make_user()
    department = make_department(manager=idle, employees=[idle])
    make_task(manager, busy)
    idle_id, department_id = idle.id, department.id

    assert client.delete(f"/users/{idle.id}", headers=auth_headers(manager)).status_code == 403
    assert client.delete(f"/users/{admin.id}", headers=auth_headers(admin)).status_code == 400
    assert client.delete(f"/users/{busy.id}", headers=auth_headers(admin)).status_code == 409

    response = client.delete(f"/users/{idle_id}", headers=auth_headers(admin))
    assert response.status_code == 200

    db.expire_all()
    assert db.query(User).filter(User.id == idle_id).count() == 0
    refreshed = db.get(Department, department_id)
    assert refreshed.manager_id is None
    assert refreshed.employees == []
