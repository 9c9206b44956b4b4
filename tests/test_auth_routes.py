from conftest import bearer, login, register


def test_register_login_logout_refresh_flow(client):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "alice@x.com"
    assert user["role"] == "job_seeker"
    assert "password_hash" not in user
    assert body["data"]["tokens"]["accessToken"]
    assert body["data"]["tokens"]["refreshToken"]

    response = login(client, "alice@x.com", "Passw0rd!")
    assert response.status_code == 200
    tokens = response.json()["data"]["tokens"]
    assert response.json()["data"]["user"]["id"] == user["id"]

    response = client.post(
        "/api/v1/auth/logout",
        json={"refreshToken": tokens["refreshToken"]},
        headers=bearer(tokens["accessToken"]),
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Logged out successfully"}

    response = client.post("/api/v1/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid refresh token"}


def test_refresh_token_returns_access_token(client):
    tokens = register(client).json()["data"]["tokens"]

    response = client.post("/api/v1/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 200
    access = response.json()["data"]["accessToken"]

    response = client.get("/api/v1/auth/profile", headers=bearer(access))
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "alice@x.com"


def test_duplicate_registration_conflicts(client):
    register(client)
    response = register(client, email="Alice@X.com")
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_register_validation_errors_are_400(client):
    response = register(client, email="not-an-email", password="weak")
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert "body.email" in fields
    assert "body.password" in fields


def test_register_as_admin_is_refused(client):
    response = register(client, role="admin")
    assert response.status_code == 400


def test_login_failures_are_indistinguishable(client):
    register(client)
    wrong_password = login(client, "alice@x.com", "Wrong0ne!")
    unknown_email = login(client, "nobody@x.com", "Passw0rd!")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()


def test_change_password_revokes_refresh_tokens(client):
    tokens = register(client).json()["data"]["tokens"]

    response = client.post(
        "/api/v1/auth/change-password",
        json={"oldPassword": "Passw0rd!", "newPassword": "N3wPassw0rd!"},
        headers=bearer(tokens["accessToken"]),
    )
    assert response.status_code == 200
    assert response.json()["data"]["revokedSessions"] == 1

    response = client.post("/api/v1/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 401
    assert login(client, "alice@x.com", "N3wPassw0rd!").status_code == 200


def test_change_password_with_wrong_old_password(client):
    tokens = register(client).json()["data"]["tokens"]

    response = client.post(
        "/api/v1/auth/change-password",
        json={"oldPassword": "Wrong0ne!", "newPassword": "N3wPassw0rd!"},
        headers=bearer(tokens["accessToken"]),
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Current password is incorrect"
    assert login(client, "alice@x.com", "Passw0rd!").status_code == 200


def test_profile_requires_token(client):
    response = client.get("/api/v1/auth/profile")
    assert response.status_code == 401
    assert response.json()["message"] == "Authorization header missing or malformed"


def test_malformed_authorization_header(client):
    response = client.get("/api/v1/auth/profile", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


def test_bearer_scheme_is_case_insensitive(client):
    tokens = register(client).json()["data"]["tokens"]
    response = client.get(
        "/api/v1/auth/profile", headers={"Authorization": f"bearer {tokens['accessToken']}"}
    )
    assert response.status_code == 200


def test_refresh_token_is_not_an_access_token(client):
    tokens = register(client).json()["data"]["tokens"]
    response = client.get("/api/v1/auth/profile", headers=bearer(tokens["refreshToken"]))
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_responses_carry_security_headers(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Request-ID"]


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["success"] is False
