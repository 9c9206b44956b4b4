from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, bearer, login, register


def _admin_headers(client):
    tokens = login(client, ADMIN_EMAIL, ADMIN_PASSWORD).json()["data"]["tokens"]
    return bearer(tokens["accessToken"])


def test_update_profile_ignores_protected_fields(client):
    tokens = register(client).json()["data"]["tokens"]
    response = client.put(
        "/api/v1/users/profile",
        json={"full_name": "Alice Smith", "phone": "+1 555 0100", "role": "admin", "email": "x@y.z"},
        headers=bearer(tokens["accessToken"]),
    )
    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["full_name"] == "Alice Smith"
    assert user["phone"] == "+1 555 0100"
    assert user["role"] == "job_seeker"
    assert user["email"] == "alice@x.com"


def test_update_profile_with_nothing_to_change(client):
    tokens = register(client).json()["data"]["tokens"]
    response = client.put("/api/v1/users/profile", json={}, headers=bearer(tokens["accessToken"]))
    assert response.status_code == 400


def test_delete_account_ends_access(client):
    tokens = register(client).json()["data"]["tokens"]
    headers = bearer(tokens["accessToken"])

    assert client.delete("/api/v1/users/account", headers=headers).status_code == 200
    assert client.get("/api/v1/users/profile", headers=headers).status_code == 401
    assert login(client, "alice@x.com", "Passw0rd!").status_code == 401


def test_admin_lists_users_with_filters(client):
    register(client)
    register(client, email="boss@corp.io", role="employer")
    headers = _admin_headers(client)

    data = client.get("/api/v1/admin/users", headers=headers).json()["data"]
    assert data["total"] == 3

    data = client.get("/api/v1/admin/users", params={"role": "employer"}, headers=headers).json()["data"]
    assert [user["email"] for user in data["users"]] == ["boss@corp.io"]


def test_deactivated_user_loses_access_immediately(client):
    registered = register(client).json()["data"]
    user_headers = bearer(registered["tokens"]["accessToken"])
    admin_headers = _admin_headers(client)

    response = client.put(
        f"/api/v1/admin/users/{registered['user']['id']}/status",
        json={"is_active": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["user"]["is_active"] is False

    response = client.get("/api/v1/users/profile", headers=user_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "User account is disabled"

    response = client.post(
        "/api/v1/auth/refresh-token", json={"refreshToken": registered["tokens"]["refreshToken"]}
    )
    assert response.status_code == 401


def test_admin_deletes_user_but_not_admin(client):
    user_id = register(client).json()["data"]["user"]["id"]
    headers = _admin_headers(client)

    assert client.delete(f"/api/v1/admin/users/{user_id}", headers=headers).status_code == 200
    assert client.delete(f"/api/v1/admin/users/{user_id}", headers=headers).status_code == 404

    admin_id = login(client, ADMIN_EMAIL, ADMIN_PASSWORD).json()["data"]["user"]["id"]
    response = client.delete(f"/api/v1/admin/users/{admin_id}", headers=headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Cannot delete admin user"


def test_unknown_user_status_update_is_404(client):
    response = client.put(
        "/api/v1/admin/users/missing/status", json={"is_active": True}, headers=_admin_headers(client)
    )
    assert response.status_code == 404


def test_profile_is_the_same_under_auth_and_users(client):
    tokens = register(client, company_name="Acme").json()["data"]["tokens"]
    headers = bearer(tokens["accessToken"])

    from_auth = client.get("/api/v1/auth/profile", headers=headers)
    from_users = client.get("/api/v1/users/profile", headers=headers)
    assert from_auth.status_code == from_users.status_code == 200
    assert from_auth.json() == from_users.json()
