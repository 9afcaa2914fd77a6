# tests/test_api_users.py
from fastapi.testclient import TestClient

from conftest import bearer, login, register
from userhub.main import create_app
from userhub.services.user_store import MemoryUserStore


class RecordingStore(MemoryUserStore):
    last_filter = None

    def list(self, opts):
        self.last_filter = opts
        return super().list(opts)


def _auth(client) -> dict:
    register(client)
    return bearer(login(client))


def test_register_returns_user_without_password(client):
    r = client.post("/users", json={"name": "testname", "email": "a@b.com", "password": "secret1", "password2": "secret1"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["ok"] is True
    assert body["data"]["email"] == "a@b.com"
    assert body["data"]["name"] == "testname"
    assert "password" not in body["data"]
    assert "error" not in body


def test_register_duplicate_email(client):
    register(client)
    r = client.post("/users", json={"name": "another", "email": "a@b.com", "password": "secret1", "password2": "secret1"})
    assert r.status_code == 400
    assert r.json()["ok"] is False
    assert "email" in r.json()["error"]


def test_register_validation_errors(client):
    cases = [
        {"name": "abc", "email": "a@b.com", "password": "secret1", "password2": "secret1"},          # 名字过短
        {"name": "testname", "email": "not-an-email", "password": "secret1", "password2": "secret1"},
        {"name": "testname", "email": "a@b.com", "password": "123", "password2": "123"},           # 口令过短
        {"name": "testname", "email": "a@b.com", "password": "secret1", "password2": "secret2"},   # 两次不一致
        {"name": "testname", "email": "a@b.com"},
    ]
    for body in cases:
        r = client.post("/users", json=body)
        assert r.status_code == 400, body
        assert r.json()["ok"] is False
        assert r.json()["error"]


def test_protected_routes_require_bearer(client):
    for method, path in [("get", "/users"), ("get", "/users/x"), ("put", "/users/x"), ("delete", "/users/x")]:
        r = getattr(client, method)(path) if method != "put" else client.put(path, json={"name": "newname"})
        assert r.status_code == 401, path
        assert r.json()["ok"] is False


def test_bad_bearer_is_rejected(client):
    r = client.get("/users", headers=bearer("garbage"))
    assert r.status_code == 401
    assert r.json() == {"ok": False, "error": "invalid token"}


def test_get_user_and_not_found(client):
    headers = _auth(client)
    me = client.get("/auth/authorize", headers=headers).json()["data"]

    r = client.get(f"/users/{me['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "a@b.com"

    r = client.get("/users/00000000-0000-0000-0000-000000000000", headers=headers)
    assert r.status_code == 404
    assert r.json()["ok"] is False
    assert "data" not in r.json()


def test_update_partial_and_empty(client):
    headers = _auth(client)
    uid = client.get("/auth/authorize", headers=headers).json()["data"]["id"]

    r = client.put(f"/users/{uid}", headers=headers, json={"name": "newname"})
    assert r.status_code == 200, r.text
    assert r.json()["data"]["name"] == "newname"
    assert r.json()["data"]["email"] == "a@b.com"

    # 口令未变，仍可登录
    assert login(client)

    r = client.put(f"/users/{uid}", headers=headers, json={})
    assert r.status_code == 400
    assert r.json()["ok"] is False

    r = client.put(f"/users/{uid}", headers=headers, json={"password": "secret2", "password2": "nomatch"})
    assert r.status_code == 400


def test_update_password_changes_login(client):
    headers = _auth(client)
    uid = client.get("/auth/authorize", headers=headers).json()["data"]["id"]
    r = client.put(f"/users/{uid}", headers=headers, json={"password": "secret2", "password2": "secret2"})
    assert r.status_code == 200
    assert client.post("/auth/login", json={"email": "a@b.com", "password": "secret1"}).status_code == 401
    assert login(client, password="secret2")


def test_delete_returns_deleted_user(client):
    headers = _auth(client)
    other = register(client, name="bobby", email="bob@mail.com")

    r = client.delete(f"/users/{other['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "bob@mail.com"

    r = client.delete(f"/users/{other['id']}", headers=headers)
    assert r.status_code == 404


def test_list_filters(client):
    headers = _auth(client)
    register(client, name="bobby", email="bob@mail.com")
    register(client, name="bobby", email="bob2@mail.com")

    r = client.get("/users", headers=headers)
    assert r.status_code == 200
    assert len(r.json()["data"]) == 3

    r = client.get("/users", headers=headers, params={"name": "bobby"})
    assert sorted(u["email"] for u in r.json()["data"]) == ["bob2@mail.com", "bob@mail.com"]

    r = client.get("/users", headers=headers, params={"name": "bobby", "email": "bob@mail.com"})
    assert [u["email"] for u in r.json()["data"]] == ["bob@mail.com"]

    r = client.get("/users", headers=headers, params={"limit": 1, "offset": 1})
    assert len(r.json()["data"]) == 1


def test_list_limit_is_clamped_to_100(settings):
    store = RecordingStore()
    with TestClient(create_app(settings, user_store=store)) as c:
        headers = _auth(c)
        r = c.get("/users", headers=headers, params={"limit": 500})
        assert r.status_code == 200
        assert store.last_filter.limit == 100

        c.get("/users", headers=headers)
        assert (store.last_filter.limit, store.last_filter.offset) == (20, 0)


def test_list_rejects_bad_pagination(client):
    headers = _auth(client)
    for params in ({"offset": -1}, {"limit": 0}, {"limit": "many"}):
        r = client.get("/users", headers=headers, params=params)
        assert r.status_code == 400, params
        assert r.json()["ok"] is False


def test_list_rejects_bad_filters(client):
    headers = _auth(client)
    for params in ({"name": "x"}, {"name": "much-too-long-name"}, {"email": "not-an-email"}):
        r = client.get("/users", headers=headers, params=params)
        assert r.status_code == 400, params
        assert r.json()["ok"] is False


def test_list_email_filter_matches_normalized_registration(client):
    headers = _auth(client)
    stored = register(client, name="bobby", email="Bob@Mail.COM")
    assert stored["email"] == "Bob@mail.com"

    r = client.get("/users", headers=headers, params={"email": "Bob@Mail.COM"})
    assert r.status_code == 200
    assert [u["id"] for u in r.json()["data"]] == [stored["id"]]
