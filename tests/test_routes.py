# tests/test_routes.py

from __future__ import annotations

from unittest import mock

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from taskboard.models.user_model import Role

from .factories import checklist


def test_health(client) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_missing_token_is_401_with_message(client) -> None:
    resp = client.get("/api/tasks/")
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Not authorized, no token"}


def test_garbage_token_is_401(client) -> None:
    resp = client.get("/api/tasks/", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert "message" in resp.get_json()


def test_token_for_deleted_user_is_401(client, auth_headers) -> None:
    resp = client.get("/api/tasks/", headers=auth_headers({"_id": ObjectId()}))
    assert resp.status_code == 401


def test_create_task_admin_only(client, http_user, auth_headers) -> None:
    member = http_user("Mia")
    body = {"title": "T", "dueDate": "2026-11-01T00:00:00", "assignedTo": []}

    resp = client.post("/api/tasks/", json=body, headers=auth_headers(member))

    assert resp.status_code == 403
    assert resp.get_json() == {"message": "Access denied, admin only"}


def test_create_and_fetch_task(client, http_user, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    member = http_user("Mia")
    body = {
        "title": "Plan sprint",
        "description": "Pick stories",
        "priority": "Low",
        "dueDate": "2026-11-01T10:00:00Z",
        "assignedTo": [str(member["_id"])],
        "attachments": [],
        "todoChecklist": [{"text": "groom", "completed": False}],
    }

    resp = client.post("/api/tasks/", json=body, headers=auth_headers(admin))
    assert resp.status_code == 201
    created = resp.get_json()["task"]
    assert created["createdBy"] == str(admin["_id"])
    assert created["dueDate"] == "2026-11-01T10:00:00"

    resp = client.get(f"/api/tasks/{created['_id']}", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.get_json()["assignedTo"] == [
        {
            "_id": str(member["_id"]),
            "name": "Mia",
            "email": member["email"],
            "profileImageUrl": member["profileImageUrl"],
        }
    ]


def test_create_rejects_non_array_assignees(client, http_user, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    body = {"title": "T", "dueDate": "2026-11-01", "assignedTo": "x"}

    resp = client.post("/api/tasks/", json=body, headers=auth_headers(admin))

    assert resp.status_code == 400
    assert resp.get_json() == {"message": "AssignedTo must be an array of user IDs"}


def test_list_tasks_scoped_for_member(client, http_user, http_task, auth_headers) -> None:
    member = http_user("Mia")
    mine = http_task(assignedTo=[member["_id"]], todoChecklist=checklist(True, False))
    http_task(assignedTo=[ObjectId()])

    resp = client.get("/api/tasks", headers=auth_headers(member))

    assert resp.status_code == 200
    payload = resp.get_json()
    assert [t["_id"] for t in payload["tasks"]] == [str(mine["_id"])]
    assert payload["tasks"][0]["completedCount"] == 1
    assert payload["statusSummary"]["all"] == 1


def test_list_tasks_bad_status_filter(client, http_user, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    resp = client.get("/api/tasks/?status=Archived", headers=auth_headers(admin))
    assert resp.status_code == 400


def test_create_rejects_list_body(client, http_user, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    resp = client.post("/api/tasks/", json=[{"title": "x"}], headers=auth_headers(admin))
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Request body must be a JSON object"}


def test_status_rejects_string_body(client, http_user, http_task, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    task = http_task()
    resp = client.put(
        f"/api/tasks/{task['_id']}/status", json="Completed", headers=auth_headers(admin)
    )
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Request body must be a JSON object"}


def test_login_rejects_list_body(client) -> None:
    resp = client.post("/api/auth/login", json=["a@example.com", "secret"])
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Request body must be a JSON object"}


def test_get_unknown_task_is_404(client, http_user, auth_headers) -> None:
    member = http_user("Mia")
    resp = client.get(f"/api/tasks/{ObjectId()}", headers=auth_headers(member))
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Task not found!"}


def test_update_status_flow(client, http_user, http_task, auth_headers, app_db) -> None:
    member = http_user("Mia")
    outsider = http_user("Olaf")
    task = http_task(assignedTo=[member["_id"]], todoChecklist=checklist(False, False))
    url = f"/api/tasks/{task['_id']}/status"

    resp = client.put(url, json={"status": "Completed"}, headers=auth_headers(outsider))
    assert resp.status_code == 403
    assert app_db.tasks.find_one({"_id": task["_id"]})["status"] == "Pending"

    resp = client.put(url, json={"status": "Completed"}, headers=auth_headers(member))
    assert resp.status_code == 200
    updated = resp.get_json()["task"]
    assert updated["progress"] == 100
    assert [i["completed"] for i in updated["todoChecklist"]] == [True, True]


def test_update_checklist_flow(client, http_user, http_task, auth_headers) -> None:
    member = http_user("Mia")
    task = http_task(assignedTo=[member["_id"]], todoChecklist=checklist(False, False, False))

    resp = client.put(
        f"/api/tasks/{task['_id']}/todo",
        json={"todoChecklist": checklist(True, True, True)},
        headers=auth_headers(member),
    )

    assert resp.status_code == 200
    updated = resp.get_json()["task"]
    assert (updated["progress"], updated["status"]) == (100, "Completed")
    assert updated["assignedTo"][0]["name"] == "Mia"


def test_partial_update(client, http_user, http_task, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    task = http_task(title="Old", priority="Low")

    resp = client.put(
        f"/api/tasks/{task['_id']}", json={"priority": "High"}, headers=auth_headers(admin)
    )

    assert resp.status_code == 200
    assert resp.get_json()["task"]["title"] == "Old"
    assert resp.get_json()["task"]["priority"] == "High"


def test_delete_task(client, http_user, http_task, auth_headers, app_db) -> None:
    admin = http_user("Ada", Role.ADMIN)
    member = http_user("Mia")
    task = http_task(assignedTo=[member["_id"]])
    url = f"/api/tasks/{task['_id']}"

    assert client.delete(url, headers=auth_headers(member)).status_code == 403
    assert client.delete(url, headers=auth_headers(admin)).status_code == 200
    assert app_db.tasks.count_documents({}) == 0
    assert client.delete(url, headers=auth_headers(admin)).status_code == 404


def test_dashboards(client, http_user, http_task, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    member = http_user("Mia")
    http_task(status="Completed", priority="High", assignedTo=[member["_id"]])
    http_task(status="Pending", priority="Low")

    resp = client.get("/api/tasks/dashboard-data", headers=auth_headers(member))
    assert resp.status_code == 403

    resp = client.get("/api/tasks/dashboard-data", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.get_json()["charts"]["taskDistribution"] == {
        "Pending": 1,
        "InProgress": 0,
        "Completed": 1,
        "All": 2,
    }

    resp = client.get("/api/tasks/user-dashboard-data", headers=auth_headers(member))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["statistics"]["totalTasks"] == 1
    assert body["charts"]["tasksPriorityLevels"] == {"Low": 0, "Medium": 0, "High": 1}


def test_users_listing_admin_only(client, http_user, http_task, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    member = http_user("Mia")
    http_task(status="In Progress", assignedTo=[member["_id"]])

    assert client.get("/api/users/", headers=auth_headers(member)).status_code == 403

    resp = client.get("/api/users/", headers=auth_headers(admin))
    assert resp.status_code == 200
    [row] = resp.get_json()
    assert row["name"] == "Mia"
    assert row["inProgressTasks"] == 1
    assert "password" not in row


def test_get_user_by_id(client, http_user, auth_headers) -> None:
    member = http_user("Mia")
    other = http_user("Olaf")

    resp = client.get(f"/api/users/{other['_id']}", headers=auth_headers(member))
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Olaf"
    assert "password" not in resp.get_json()

    resp = client.get(f"/api/users/{ObjectId()}", headers=auth_headers(member))
    assert resp.status_code == 404


def test_register_login_profile(client) -> None:
    resp = client.post(
        "/api/auth/register",
        json={
            "name": "Root",
            "email": "root@example.com",
            "password": "secret1",
            "adminInviteToken": "let-me-in",
        },
    )
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "admin"

    resp = client.post("/api/auth/login", json={"email": "root@example.com", "password": "secret1"})
    assert resp.status_code == 200
    token = resp.get_json()["token"]

    resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["email"] == "root@example.com"

    resp = client.post("/api/auth/login", json={"email": "root@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_store_failure_is_generic_500(client, http_user, auth_headers) -> None:
    admin = http_user("Ada", Role.ADMIN)
    boom = ServerSelectionTimeoutError("db01:27017 connection refused")

    with mock.patch("mongomock.collection.Collection.count_documents", side_effect=boom):
        resp = client.get("/api/tasks/dashboard-data", headers=auth_headers(admin))

    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Server Error"}
