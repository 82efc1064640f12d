def test_register_login_and_me(client):
    r = client.post(
        "/api/auth/register",
        json={"email": "Rahim@Example.com", "password": "secret123", "name": "Rahim"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["role"] == "user"
    assert body["email"] == "rahim@example.com"

    login = client.post("/api/auth/login", json={"email": "rahim@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Rahim"


def test_duplicate_email_rejected(client):
    payload = {"email": "dup@example.com", "password": "secret123", "name": "Dup"}
    assert client.post("/api/auth/register", json=payload).status_code == 201
    again = client.post("/api/auth/register", json=payload)
    assert again.status_code == 400
    assert again.json()["detail"] == "Email already registered"


def test_admin_role_cannot_be_self_assigned(client):
    r = client.post(
        "/api/auth/register",
        json={"email": "boss@example.com", "password": "secret123", "name": "Boss", "role": "admin"},
    )
    assert r.status_code == 400


def test_wrong_password_is_unauthorized(client, make_user):
    user, _ = make_user("user", email="karim@example.com")
    r = client.post("/api/auth/login", json={"email": "karim@example.com", "password": "nope-nope"})
    assert r.status_code == 401


def test_deactivated_account_cannot_log_in(client, make_user):
    make_user("user", email="gone@example.com", is_active=False)
    r = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "secret123"})
    assert r.status_code == 403


def test_protected_route_requires_token(client):
    assert client.get("/api/profile/").status_code == 401
    bad = client.get("/api/profile/", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401


def test_admin_user_management(client, make_user, admin_headers, user_headers):
    target, _ = make_user("user")
    assert client.get("/api/users/", headers=user_headers).status_code == 403

    listed = client.get("/api/users/", headers=admin_headers)
    assert listed.status_code == 200
    assert any(u["id"] == target.id for u in listed.json())

    promoted = client.put(f"/api/users/{target.id}", headers=admin_headers, json={"role": "pharmacy"})
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "pharmacy"

    invalid = client.put(f"/api/users/{target.id}", headers=admin_headers, json={"role": "wizard"})
    assert invalid.status_code == 400


def test_profile_update_and_password_change(client, user_headers):
    r = client.put("/api/profile/", headers=user_headers, json={"address": "House 7, Road 3, Dhaka"})
    assert r.status_code == 200
    assert r.json()["address"] == "House 7, Road 3, Dhaka"

    wrong = client.put(
        "/api/profile/password",
        headers=user_headers,
        json={"current_password": "bad-guess", "new_password": "newsecret1"},
    )
    assert wrong.status_code == 400

    ok = client.put(
        "/api/profile/password",
        headers=user_headers,
        json={"current_password": "secret123", "new_password": "newsecret1"},
    )
    assert ok.status_code == 200


def test_notification_inbox(client, db_session, make_user):
    from models.notification import Notification, NotificationType

    user, headers = make_user("user")
    for title in ("First", "Second"):
        db_session.add(Notification(user_id=user.id, type=NotificationType.system, title=title, body="Hello"))
    db_session.commit()

    unread = client.get("/api/users/me/notifications", params={"unread_only": True}, headers=headers).json()
    assert len(unread) == 2

    one = client.put(f"/api/users/me/notifications/{unread[0]['id']}/read", headers=headers)
    assert one.json()["is_read"] is True

    rest = client.put("/api/users/me/notifications/read-all", headers=headers)
    assert rest.json() == {"updated": 1}
    assert client.get("/api/users/me/notifications", params={"unread_only": True}, headers=headers).json() == []
