import jwt

from conftest import API, auth
from storefront import config
from storefront.models import User


def test_register_example(client):
    body = {"first_name": "A", "last_name": "B", "email": "a@b.com", "password": "pw"}
    resp = client.post(f"{API}/users/register", json=body)
    assert resp.status_code == 201
    payload = resp.json()
    assert payload["success"] is True
    assert payload["data"]["user"]["role"] == "user"
    assert "password_hash" not in payload["data"]["user"]

    claim = jwt.decode(payload["data"]["token"], config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    assert claim["email"] == "a@b.com"
    assert claim["user_id"] == payload["data"]["user"]["user_id"]

    again = client.post(f"{API}/users/register", json=body)
    assert again.status_code == 400
    assert again.json() == {"success": False, "message": "User already exists with this email"}


def test_register_stores_hash_not_plaintext(client, db, register):
    user_id = register("hash@shop.com", password="plain-secret").json()["data"]["user"]["user_id"]
    stored = db.get(User, user_id)
    assert stored.password_hash != "plain-secret"
    assert stored.password_hash.startswith("$2b$")


def test_register_missing_fields(client):
    resp = client.post(f"{API}/users/register", json={"first_name": "A", "email": "x@shop.com", "password": "pw"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "All required fields must be provided"}

    blank = client.post(
        f"{API}/users/register",
        json={"first_name": "A", "last_name": "B", "email": "", "password": "pw"},
    )
    assert blank.status_code == 400
    assert blank.json()["message"] == "All required fields must be provided"


def test_register_rejects_malformed_email(client):
    resp = client.post(
        f"{API}/users/register",
        json={"first_name": "A", "last_name": "B", "email": "not-an-email", "password": "pw"},
    )
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]
    assert "error" not in resp.json()


def test_register_admin_role_is_honoured(register):
    resp = register("boss@shop.com", role="admin")
    assert resp.json()["data"]["user"]["role"] == "admin"


def test_register_unknown_role_falls_back_to_user(register):
    resp = register("odd@shop.com", role="superuser")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == "user"


def test_register_optional_fields(client, register):
    resp = register("dob@shop.com", phone="+2348000000", date_of_birth="1990-05-01")
    token = resp.json()["data"]["token"]
    profile = client.get(f"{API}/users/profile", headers=auth(token)).json()["data"]
    assert profile["phone"] == "+2348000000"
    assert profile["date_of_birth"] == "1990-05-01"
    assert profile["is_active"] is True


def test_login_success(client, register):
    register("login@shop.com", password="password123")
    resp = client.post(f"{API}/users/login", json={"email": "login@shop.com", "password": "password123"})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["email"] == "login@shop.com"
    claim = jwt.decode(data["token"], config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    assert claim["role"] == "user"


def test_login_failures_share_one_message(client, register):
    register("login@shop.com", password="password123")
    wrong_pw = client.post(f"{API}/users/login", json={"email": "login@shop.com", "password": "nope"})
    no_user = client.post(f"{API}/users/login", json={"email": "ghost@shop.com", "password": "nope"})
    assert wrong_pw.status_code == no_user.status_code == 401
    assert wrong_pw.json() == no_user.json() == {"success": False, "message": "Invalid email or password"}


def test_login_missing_fields(client):
    resp = client.post(f"{API}/users/login", json={"email": "login@shop.com"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email and password are required"


def test_get_profile(client, user_token):
    resp = client.get(f"{API}/users/profile", headers=auth(user_token))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["email"] == "customer@shop.com"
    assert "password_hash" not in data
    assert {"created_at", "updated_at", "is_active"} <= set(data)


def test_get_profile_of_vanished_user(client, db, user_token):
    db.query(User).delete()
    db.commit()
    resp = client.get(f"{API}/users/profile", headers=auth(user_token))
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


def test_update_profile_changes_only_given_fields(client, user_token):
    resp = client.put(
        f"{API}/users/profile",
        json={"first_name": "Grace", "phone": "555-0100"},
        headers=auth(user_token),
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["first_name"] == "Grace"
    assert data["last_name"] == "Lovelace"
    assert data["phone"] == "555-0100"


def test_update_profile_validation(client, user_token):
    empty = client.put(f"{API}/users/profile", json={}, headers=auth(user_token))
    assert empty.status_code == 400
    blank = client.put(f"{API}/users/profile", json={"last_name": " "}, headers=auth(user_token))
    assert blank.status_code == 400
    bad_date = client.put(f"{API}/users/profile", json={"date_of_birth": "yesterday"}, headers=auth(user_token))
    assert bad_date.status_code == 400


def test_update_profile_of_vanished_user(client, db, user_token):
    db.query(User).delete()
    db.commit()
    resp = client.put(f"{API}/users/profile", json={"first_name": "X"}, headers=auth(user_token))
    assert resp.status_code == 404


def test_get_all_users_newest_first(client, admin_token, register):
    register("first@shop.com")
    register("second@shop.com")
    resp = client.get(f"{API}/users", headers=auth(admin_token))
    assert resp.status_code == 200
    emails = [u["email"] for u in resp.json()["data"]]
    assert emails == ["second@shop.com", "first@shop.com", "admin@shop.com"]
    assert all("password_hash" not in u for u in resp.json()["data"])


def test_update_user_role_and_activation(client, admin_token, register):
    user_id = register("promote@shop.com").json()["data"]["user"]["user_id"]
    resp = client.put(
        f"{API}/users/{user_id}",
        json={"role": "admin", "is_active": False},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["role"] == "admin"
    assert data["is_active"] is False


def test_update_user_keeps_activation_when_omitted(client, admin_token, register):
    user_id = register("keep@shop.com").json()["data"]["user"]["user_id"]
    resp = client.put(f"{API}/users/{user_id}", json={"role": "user"}, headers=auth(admin_token))
    assert resp.json()["data"]["is_active"] is True


def test_update_user_invalid_role(client, admin_token, register):
    user_id = register("x@shop.com").json()["data"]["user"]["user_id"]
    resp = client.put(f"{API}/users/{user_id}", json={"role": "root"}, headers=auth(admin_token))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid role. Must be 'user' or 'admin'"


def test_update_user_not_found(client, admin_token):
    resp = client.put(f"{API}/users/does-not-exist", json={"role": "user"}, headers=auth(admin_token))
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "User not found"}


def test_register_keeps_email_as_typed(client, register):
    resp = register("Ada@Shop.COM", password="password123")
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["user"]["email"] == "Ada@Shop.COM"
    claim = jwt.decode(data["token"], config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    assert claim["email"] == "Ada@Shop.COM"

    login = client.post(f"{API}/users/login", json={"email": "Ada@Shop.COM", "password": "password123"})
    assert login.status_code == 200
    assert login.json()["data"]["user"]["email"] == "Ada@Shop.COM"


def test_register_accepts_special_use_domain(register):
    resp = register("someone@shop.test")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["email"] == "someone@shop.test"


def test_duplicate_email_caught_by_unique_constraint(client, register, monkeypatch):
    import storefront.routers.users as users_router

    assert register("race@shop.com").status_code == 201
    # simula la carrera: la comprobación previa no ve la fila
    monkeypatch.setattr(users_router, "_email_taken", lambda db, email: False)

    resp = register("race@shop.com")
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "User already exists with this email"}
