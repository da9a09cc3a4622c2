def _register_and_login(client, email="new.chef@example.com", password="s3cret-pass"):
    resp = client.post(
        "/auth/register",
        json={"email": email, "password": password, "name": "New Chef"},
    )
    assert resp.status_code == 201, resp.text

    resp = client.post("/auth/jwt/login", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def test_register_login_and_whoami(raw_client):
    token = _register_and_login(raw_client)

    resp = raw_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "new.chef@example.com"
    assert resp.json()["name"] == "New Chef"


def test_bad_credentials_and_missing_token(raw_client):
    _register_and_login(raw_client)

    resp = raw_client.post(
        "/auth/jwt/login", data={"username": "new.chef@example.com", "password": "wrong"}
    )
    assert resp.status_code == 400

    assert raw_client.get("/whoami").status_code == 401
    assert raw_client.get("/restaurants/mine").status_code == 401


def test_token_opens_staff_routes(raw_client):
    token = _register_and_login(raw_client, email="founder@example.com")
    headers = {"Authorization": f"Bearer {token}"}

    resp = raw_client.post("/restaurants", json={"name": "Founders Grill"}, headers=headers)
    assert resp.status_code == 201, resp.text
    restaurant_id = resp.json()["id"]

    resp = raw_client.get(f"/restaurants/{restaurant_id}/views/admin", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["orders"] == []


def test_health(raw_client):
    assert raw_client.get("/health").json() == {"status": "ok"}
