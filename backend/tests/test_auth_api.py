from sqlmodel import select

from pm_system.models import User

TEST_PASSWORD = "Password123"


def _register(api, username="bob", email=None, password="Secret#1", role="Employee"):
    return api.post(
        "/auth/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "role": role,
        },
    )


def test_register_stores_hashed_password(api, session):
    resp = _register(api)
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "bob"
    assert body["role"] == "Employee"
    assert body["isActive"] is True
    assert "password" not in body and "passwordHash" not in body

    stored = session.get(User, body["id"])
    assert stored.password_hash != "Secret#1"
    assert stored.password_hash.startswith("$2")


def test_register_same_username_twice_is_rejected(api):
    assert _register(api).status_code == 200

    resp = _register(api, email="other@example.com")
    assert resp.status_code == 400
    assert resp.json()["error"] == "conflict"
    assert "username already exists" in resp.json()["message"].lower()


def test_register_duplicate_email_is_rejected(api):
    assert _register(api, username="bob", email="shared@example.com").status_code == 200

    resp = _register(api, username="alice", email="shared@example.com")
    assert resp.status_code == 400
    assert resp.json()["error"] == "conflict"


def test_register_requires_fields(api):
    resp = api.post("/auth/register", json={"username": "bob"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_login_returns_token_and_profile(api):
    _register(api, role="Manager")

    resp = api.post("/auth/login", json={"username": "bob", "password": "Secret#1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["tokenType"] == "bearer"
    assert body["username"] == "bob"
    assert body["email"] == "bob@example.com"
    assert body["role"] == "Manager"
    assert body["expiresAt"]

    me = api.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json() == {
        "userId": body["userId"],
        "username": "bob",
        "email": "bob@example.com",
        "role": "Manager",
    }


def test_login_with_wrong_password_issues_no_token(api):
    _register(api)

    resp = api.post("/auth/login", json={"username": "bob", "password": "wrong"})
    assert resp.status_code == 401
    assert "token" not in resp.json()
    assert resp.json()["error"] == "unauthenticated"


def test_login_unknown_or_inactive_user_is_rejected(api, make_user):
    make_user("ghost", is_active=False)

    assert api.post("/auth/login", json={"username": "ghost", "password": TEST_PASSWORD}).status_code == 401
    assert api.post("/auth/login", json={"username": "nobody", "password": "x"}).status_code == 401


def test_protected_endpoints_require_a_token(api):
    resp = api.get("/clients")
    assert resp.status_code == 401
    assert resp.json()["message"].startswith("Authentication required")

    resp = api.get("/projects", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


def test_token_of_deactivated_user_is_rejected(api, session, make_user, headers_for):
    user = make_user("carol")
    headers = headers_for(user)
    assert api.get("/auth/me", headers=headers).status_code == 200

    user.is_active = False
    session.add(user)
    session.commit()
    assert api.get("/auth/me", headers=headers).status_code == 401


def test_user_listing_is_manager_only(api, make_user, manager_headers, headers_for):
    employee = make_user("dave")

    resp = api.get("/auth/users", headers=headers_for(employee))
    assert resp.status_code == 403
    assert resp.json()["error"] == "unauthorized"

    resp = api.get("/auth/users", headers=manager_headers)
    assert resp.status_code == 200
    assert {u["username"] for u in resp.json()} == {"manager1", "dave"}


def test_active_users_can_be_filtered_by_role(api, make_user, manager_headers):
    make_user("erin")
    make_user("frank", is_active=False)

    resp = api.get("/auth/active-users", headers=manager_headers)
    assert [u["username"] for u in resp.json()] == ["erin", "manager1"]

    resp = api.get("/auth/active-users", params={"role": "manager"}, headers=manager_headers)
    assert [u["username"] for u in resp.json()] == ["manager1"]


def test_get_user_by_id(api, manager, manager_headers):
    resp = api.get(f"/auth/users/{manager.id}", headers=manager_headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "manager1@example.com"

    resp = api.get("/auth/users/9999", headers=manager_headers)
    assert resp.status_code == 404
    assert resp.json() == {"message": "User not found", "error": "not_found"}


def test_health_needs_no_token(api):
    resp = api.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_register_rejects_malformed_email(api, session):
    resp = _register(api, username="carol", email="not-an-email")
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"
    assert session.exec(select(User)).all() == []
