from conftest import PASSWORD, login


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_login_by_email_is_case_insensitive(client):
    resp = client.post("/api/auth/login", json={"email": "ADMIN@example.com", "password": PASSWORD})
    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["user"]["role"] == "Admin"
    assert "password_hash" not in data["user"]
    assert data["token"]


def test_login_by_username(client):
    resp = client.post("/api/auth/login", json={"username": "viewer", "password": PASSWORD})
    assert resp.status_code == 200


def test_bad_password(client):
    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Invalid email or password"}


def test_me_requires_token(client, headers):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers=headers["treasurer"])
    assert resp.get_json()["data"]["username"] == "treasurer"


def test_only_admin_manages_users(client, headers):
    body = {"username": "clerk", "email": "clerk@example.com", "password": "clerk123", "role": "Treasurer"}
    assert client.post("/api/users", json=body, headers=headers["treasurer"]).status_code == 403
    resp = client.post("/api/users", json=body, headers=headers["admin"])
    assert resp.status_code == 201
    assert resp.get_json()["data"]["role"] == "Treasurer"
    assert client.post("/api/users", json=body, headers=headers["admin"]).status_code == 409


def test_user_validation_details(client, headers):
    resp = client.post("/api/users", json={"username": "x", "email": "bad", "password": "1"},
                       headers=headers["admin"])
    assert resp.status_code == 422
    paths = {d["path"] for d in resp.get_json()["details"]}
    assert {"username", "email", "password"} <= paths


def test_deactivated_user_cannot_log_in(client, headers):
    users = client.get("/api/users", headers=headers["admin"]).get_json()["data"]
    viewer = next(u for u in users if u["username"] == "viewer")
    resp = client.delete(f"/api/users/{viewer['id']}", headers=headers["admin"])
    assert resp.get_json()["data"]["status"] == "Inactive"

    resp = client.post("/api/auth/login", json={"email": "viewer@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Account is inactive"


def test_admin_cannot_deactivate_self(client, headers):
    me = client.get("/api/auth/me", headers=headers["admin"]).get_json()["data"]
    assert client.delete(f"/api/users/{me['id']}", headers=headers["admin"]).status_code == 400


def test_password_change(client, headers):
    users = client.get("/api/users", headers=headers["admin"]).get_json()["data"]
    treasurer = next(u for u in users if u["username"] == "treasurer")
    resp = client.patch(f"/api/users/{treasurer['id']}", json={"password": "changed99"},
                        headers=headers["admin"])
    assert resp.status_code == 200
    assert login(client, "treasurer@example.com", "changed99")


def _tokens(client, email="treasurer@example.com"):
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    return resp.get_json()["data"]


def test_refresh_token_trades_for_a_new_pair(client):
    tokens = _tokens(client)
    assert tokens["refresh_token"] and tokens["refresh_token"] != tokens["token"]

    resp = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert resp.status_code == 200
    fresh = resp.get_json()["data"]
    assert fresh["user"]["username"] == "treasurer"
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {fresh['token']}"})
    assert me.get_json()["data"]["role"] == "Treasurer"


def test_refresh_rejects_access_tokens(client):
    tokens = _tokens(client)
    resp = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {tokens['token']}"})
    assert resp.status_code != 200
    assert client.post("/api/auth/refresh").status_code == 401


def test_refresh_stops_working_after_deactivation(client, headers):
    tokens = _tokens(client, "viewer@example.com")
    users = client.get("/api/users", headers=headers["admin"]).get_json()["data"]
    viewer = next(u for u in users if u["username"] == "viewer")
    client.delete(f"/api/users/{viewer['id']}", headers=headers["admin"])

    resp = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Account is inactive"


def test_failed_logins_are_rate_limited(client):
    bad = {"email": "admin@example.com", "password": "wrong"}
    for _ in range(5):
        assert client.post("/api/auth/login", json=bad).status_code == 401

    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert resp.status_code == 429
    assert resp.get_json() == {"success": False, "error": "Too many login attempts, please try again later"}


def test_successful_logins_do_not_count_towards_the_limit(client):
    for _ in range(7):
        assert login(client, "admin@example.com")
