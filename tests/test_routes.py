import jwt
import pytest

from app.core import config
from app.features.assignments.schemas import AssignmentPermissions
from conftest import FailingStorage, SIGNING_KEY


ADMIN = "admin@x.edu"
STAFF = "staff@x.edu"


def grant(store, project_id="proj-1", email=STAFF, **flags):
    store.assign(project_id, "Roof Repair", email, "Staff", ADMIN, AssignmentPermissions(**flags))


def assign_body(email=STAFF, **permissions):
    return {
        "projectTitle": "Roof Repair",
        "staffEmail": email,
        "staffName": "Staff Member",
        "permissions": {"canEdit": True, "canDelete": False, **permissions},
    }


# ----------------------------------------------------------------------
# Authentication
# ----------------------------------------------------------------------

def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_missing_token_is_rejected(client):
    assert client.get("/permissions/me").status_code in (401, 403)


def test_garbage_token_is_unauthorized(client):
    response = client.get("/permissions/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_token_without_email_is_unauthorized(client):
    token = jwt.encode({"role": "Admin"}, SIGNING_KEY, algorithm="HS256")
    response = client.get("/permissions/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_expired_token_is_unauthorized(client, auth):
    response = client.get("/permissions/me", headers=auth(STAFF, exp=1))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token has expired"


def test_signature_checked_when_secret_configured(client, auth, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", "a-different-secret-that-is-long-enough")
    assert client.get("/permissions/me", headers=auth(STAFF)).status_code == 401
    
    monkeypatch.setattr(config, "JWT_SECRET", SIGNING_KEY)
    assert client.get("/permissions/me", headers=auth(STAFF)).status_code == 200


def test_self_minted_admin_token_refused(client):
    token = jwt.encode({"email": "attacker@evil", "role": "Admin"}, "anything-at-all-but-the-real-key")
    response = client.get("/assignments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_every_token_refused_without_secret(client, auth, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", None)
    
    response = client.get("/assignments", headers=auth(ADMIN, "Admin"))
    assert response.status_code == 401
    assert response.json()["detail"] == "Token verification is not configured"


def test_unsigned_tokens_only_with_explicit_dev_flag(client, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", None)
    monkeypatch.setattr(config, "ALLOW_UNSIGNED_TOKENS", True)
    token = jwt.encode({"email": ADMIN, "role": "Admin"}, "any-key-since-signatures-are-off")
    
    response = client.get("/assignments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200



# ----------------------------------------------------------------------
# Assignments
# ----------------------------------------------------------------------

def test_admin_assigns_staff(client, store, auth):
    response = client.put("/assignments/projects/proj-1/staff", json=assign_body(), headers=auth(ADMIN, "Admin"))
    
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["persisted"] is True
    assert data["assignment"]["assignedBy"] == ADMIN
    assert data["assignment"]["projectId"] == "proj-1"
    assert store.get("proj-1", STAFF).permissions.can_edit is True


def test_reassign_over_api_replaces(client, store, auth):
    headers = auth(ADMIN, "Admin")
    client.put("/assignments/projects/proj-1/staff", json=assign_body(), headers=headers)
    client.put("/assignments/projects/proj-1/staff", json=assign_body(canDelete=True), headers=headers)
    
    records = store.list_by_project("proj-1")
    assert len(records) == 1
    assert records[0].permissions.can_delete is True


def test_blank_staff_selection_is_a_validation_error(client, store, auth):
    response = client.put(
        "/assignments/projects/proj-1/staff", json=assign_body(email="  "), headers=auth(ADMIN, "Admin")
    )
    
    assert response.status_code == 400
    assert "Please select a staff member" in response.json()["staffEmail"]
    assert len(store) == 0


def test_staff_in_department_may_not_assign(client, store, auth):
    response = client.put(
        "/assignments/projects/proj-1/staff",
        json=assign_body(email="helper@x.edu"),
        headers=auth(STAFF, "Staff", "Maintenance"),
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "Only administrators can manage project personnel"
    assert len(store) == 0


def test_staff_cannot_grant_themselves_an_unviewable_project(client, store, auth):
    headers = auth("nobody@x.edu", "Staff", "General")
    response = client.put(
        "/assignments/projects/class-main-001/staff",
        json=assign_body(email="nobody@x.edu", canDelete=True),
        headers=headers,
    )
    
    assert response.status_code == 403
    assert store.get("class-main-001", "nobody@x.edu") is None
    access = client.get("/permissions/projects/class-main-001", headers=headers).json()
    assert access["can_view"] is False
    assert access["can_edit"] is False
    assert access["can_delete"] is False


def test_assigned_editor_cannot_change_personnel(client, store, auth):
    grant(store, project_id="proj-1", can_edit=True, can_delete=True)
    grant(store, project_id="proj-1", email="other@x.edu")
    headers = auth(STAFF, "Editor", "Maintenance")
    
    put = client.put("/assignments/projects/proj-1/staff", json=assign_body(email="friend@x.edu"), headers=headers)
    delete = client.delete("/assignments/projects/proj-1/staff/other@x.edu", headers=headers)
    
    assert put.status_code == 403
    assert delete.status_code == 403
    assert [a.staff_email for a in store.list_by_project("proj-1")] == [STAFF, "other@x.edu"]


def test_staff_may_not_remove_others(client, store, auth):
    grant(store, project_id="proj-1", email="other@x.edu")
    response = client.delete("/assignments/projects/proj-1/staff/other@x.edu", headers=auth(STAFF, "Staff"))
    
    assert response.status_code == 403
    assert store.get("proj-1", "other@x.edu") is not None


def test_client_may_not_assign(client, store, auth):
    response = client.put("/assignments/projects/proj-1/staff", json=assign_body(), headers=auth("c@x.edu", "Client"))
    assert response.status_code == 403
    assert len(store) == 0


def test_mutations_are_rate_limited(client, store, auth, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT", "2/minute")
    # Own identity so earlier requests in the run do not count against this key
    headers = auth("limited-admin@x.edu", "Admin")
    
    responses = [
        client.put(f"/assignments/projects/proj-{n}/staff", json=assign_body(), headers=headers)
        for n in range(3)
    ]
    
    assert [r.status_code for r in responses] == [200, 200, 429]
    assert responses[2].json() == {"error": "You are going too fast"}
    assert store.get("proj-2", STAFF) is None


def test_remove_staff(client, store, auth):
    grant(store)
    response = client.delete(f"/assignments/projects/proj-1/staff/{STAFF}", headers=auth(ADMIN, "Admin"))
    
    assert response.status_code == 200
    assert response.json() == {"success": True, "persisted": True, "persistenceError": None}
    assert store.list_by_project("proj-1") == []


def test_remove_unknown_assignment_succeeds(client, store, auth):
    grant(store)
    response = client.delete("/assignments/projects/proj-9/staff/ghost@x.edu", headers=auth(ADMIN, "Admin"))
    
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(store) == 1


def test_persistence_failure_is_reported_not_raised(client, store, auth):
    store.persistence.storage = FailingStorage()
    response = client.put("/assignments/projects/proj-1/staff", json=assign_body(), headers=auth(ADMIN, "Admin"))
    
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["persisted"] is False
    assert "disk full" in data["persistenceError"]
    assert store.get("proj-1", STAFF) is not None


def test_list_project_staff_requires_assignment(client, store, auth):
    grant(store, project_id="proj-1")
    
    ok = client.get("/assignments/projects/proj-1", headers=auth(STAFF, "Staff"))
    assert ok.status_code == 200
    assert [a["staffEmail"] for a in ok.json()] == [STAFF]
    
    denied = client.get("/assignments/projects/proj-2", headers=auth(STAFF, "Staff"))
    assert denied.status_code == 403


def test_client_lists_any_project(client, auth):
    response = client.get("/assignments/projects/unknown", headers=auth("c@x.edu", "Client"))
    assert response.status_code == 200
    assert response.json() == []


def test_my_assignments(client, store, auth):
    grant(store, project_id="proj-1")
    grant(store, project_id="proj-2")
    grant(store, project_id="proj-3", email="other@x.edu")
    
    response = client.get("/assignments/me", headers=auth(STAFF, "Staff"))
    assert sorted(a["projectId"] for a in response.json()) == ["proj-1", "proj-2"]


def test_staff_assignments_self_or_admin(client, store, auth):
    grant(store)
    path = f"/assignments/staff/{STAFF}"
    
    assert client.get(path, headers=auth(STAFF, "Staff")).status_code == 200
    assert len(client.get(path, headers=auth(ADMIN, "Admin")).json()) == 1
    assert client.get(path, headers=auth("other@x.edu", "Staff")).status_code == 403


def test_list_all_is_admin_only(client, store, auth):
    grant(store, project_id="proj-1")
    grant(store, project_id="proj-2", email="other@x.edu")
    
    response = client.get("/assignments", headers=auth(ADMIN, "Admin"))
    assert response.status_code == 200
    assert response.json()["total"] == 2
    
    assert client.get("/assignments", headers=auth(STAFF, "Staff")).status_code == 403


# ----------------------------------------------------------------------
# Permissions
# ----------------------------------------------------------------------

def test_my_permissions_without_assignments(client, auth):
    response = client.get("/permissions/me?category=repairs", headers=auth(STAFF, "Staff", "General"))
    
    assert response.status_code == 200
    data = response.json()
    assert data["canAdd"] is True
    assert data["canEdit"] is False
    assert data["canDelete"] is False
    assert data["canManageDocuments"] is False
    assert data["assignedProjects"] == []


def test_my_permissions_for_admin(client, auth):
    data = client.get("/permissions/me", headers=auth(ADMIN, "Admin")).json()
    assert data["canDelete"] is True
    assert data["canManageInsights"] is True
    assert data["assignedProjects"] == []


def test_page_access(client, store, auth):
    headers = auth(STAFF, "Staff", "Maintenance")
    
    allowed = client.get("/permissions/pages/classrooms", headers=headers).json()
    assert allowed["has_permission"] is True
    assert allowed["reason"] is None
    
    denied = client.get("/permissions/pages/construction-of-infrastructure", headers=headers).json()
    assert denied["has_permission"] is False
    assert "Maintenance" in denied["reason"]
    
    grant(store, project_id="anything")
    unlocked = client.get("/permissions/pages/construction-of-infrastructure", headers=headers).json()
    assert unlocked["has_permission"] is True


def test_project_access(client, store, auth):
    grant(store, project_id="proj-1", can_edit=True, can_view_documents=True)
    headers = auth(STAFF, "Staff")
    
    assert client.get("/permissions/projects/proj-1", headers=headers).json() == {
        "project_id": "proj-1",
        "can_view": True,
        "can_edit": True,
        "can_delete": False,
        "can_view_documents": True,
        "can_upload_documents": False,
    }
    other = client.get("/permissions/projects/proj-2", headers=headers).json()
    assert not any(v for k, v in other.items() if k != "project_id")


def test_visible_projects(client, store, auth):
    grant(store, project_id="proj-2")
    body = {"projects": [{"id": "proj-1", "title": "Roof"}, {"id": "proj-2", "title": "HVAC"}]}
    
    response = client.post("/permissions/projects/visible", json=body, headers=auth(STAFF, "Staff"))
    assert response.status_code == 200
    assert response.json() == [{"id": "proj-2", "title": "HVAC"}]


def test_visible_projects_needs_ids(client, auth):
    response = client.post(
        "/permissions/projects/visible", json={"projects": [{"title": "Roof"}]}, headers=auth(STAFF, "Staff")
    )
    assert response.status_code == 400


def test_departments(client, auth):
    data = client.get("/permissions/departments", headers=auth(STAFF, "Staff")).json()
    by_name = {d["department"]: d["allowed_pages"] for d in data}
    assert by_name["General"] == []
    assert "repairs" in by_name["Facilities Management"]


@pytest.mark.parametrize("role,prefix", [
    ("Admin", "Full Access"),
    ("Editor", "Department-Based Access"),
    ("Client", "View Only"),
])
def test_permission_label(client, auth, role, prefix):
    data = client.get("/permissions/label", headers=auth("u@x.edu", role)).json()
    assert data["role"] == role
    assert data["label"].startswith(prefix)


def test_store_not_initialized(auth, monkeypatch):
    monkeypatch.setattr(config, "JWT_SECRET", SIGNING_KEY)
    from fastapi.testclient import TestClient
    from app.main import app
    
    response = TestClient(app).get("/permissions/me", headers=auth(STAFF, "Staff"))
    assert response.status_code == 503
