import pytest
import requests
from bson import ObjectId
from fastapi.testclient import TestClient

import github_repos
from database import get_db
from main import app


class TestAuth:
    def test_missing_token(self, client):
        res = client.get("/posts")
        assert res.status_code == 401
        assert res.json() == {"msg": "No token, authorization denied"}

    def test_invalid_token(self, client):
        res = client.get("/posts", headers={"x-auth-token": "garbage"})
        assert res.status_code == 401
        assert res.json() == {"msg": "Token is not valid"}

    def test_register_login_and_me(self, client):
        res = client.post("/users", json={"name": "Alice", "email": "alice@devconnector.io", "password": "secret1"})
        assert res.status_code == 200
        token = res.json()["token"]

        res = client.get("/auth", headers={"x-auth-token": token})
        assert res.status_code == 200
        me = res.json()
        assert me["name"] == "Alice"
        assert me["avatar"].startswith("//www.gravatar.com/avatar/")
        assert "password" not in me

        res = client.post("/auth", json={"email": "alice@devconnector.io", "password": "secret1"})
        assert res.status_code == 200
        assert "token" in res.json()

    def test_register_validation(self, client):
        res = client.post("/users", json={"name": "", "email": "nope", "password": "123"})
        assert res.status_code == 400
        assert [e["msg"] for e in res.json()["errors"]] == [
            "Name is required",
            "Please include a valid email",
            "Please enter a password with 6 or more characters",
        ]

    def test_register_duplicate(self, client):
        body = {"name": "Alice", "email": "alice@devconnector.io", "password": "secret1"}
        client.post("/users", json=body)
        res = client.post("/users", json=body)
        assert res.status_code == 400
        assert res.json() == {"errors": [{"msg": "User already exists"}]}

    def test_login_failures(self, client):
        client.post("/users", json={"name": "Alice", "email": "alice@devconnector.io", "password": "secret1"})

        res = client.post("/auth", json={"email": "bob@devconnector.io", "password": "secret1"})
        assert res.json() == {"errors": [{"msg": "User does not exist"}]}

        res = client.post("/auth", json={"email": "alice@devconnector.io", "password": "wrong"})
        assert res.status_code == 400
        assert res.json() == {"errors": [{"msg": "Password does not match"}]}

    def test_deleted_user(self, client, auth_headers):
        res = client.get("/auth", headers=auth_headers(str(ObjectId())))
        assert res.status_code == 400
        assert res.json() == {"errors": [{"msg": "User was deleted"}]}


def test_post_scenario(client, make_user, auth_headers):
    a, b = make_user("Alice"), make_user("Bob")
    as_a, as_b = auth_headers(a), auth_headers(b)

    res = client.post("/posts", json={"text": "hello"}, headers=as_a)
    assert res.status_code == 200
    public = res.json()
    assert public["ispublic"] is True

    res = client.post("/posts", json={"text": "secret", "ispublic": False}, headers=as_a)
    secret = res.json()
    assert secret["ispublic"] is False

    res = client.get(f"/posts/{secret['_id']}", headers=as_a)
    assert res.status_code == 404
    assert res.json() == {"errors": [{"msg": "Post not found or is private"}]}

    listed = [p["_id"] for p in client.get("/posts", headers=as_a).json()]
    assert listed == [public["_id"]]

    res = client.put(f"/posts/like/{public['_id']}", headers=as_a)
    assert res.status_code == 200
    assert [like["user"] for like in res.json()] == [a]

    res = client.put(f"/posts/like/{public['_id']}", headers=as_a)
    assert res.status_code == 400
    assert res.json() == {"errors": [{"msg": "Post already liked"}]}

    res = client.post(f"/posts/comment/{public['_id']}", json={"text": ""}, headers=as_b)
    assert res.status_code == 400
    assert res.json()["errors"][0]["msg"] == "Text is required"

    res = client.post(f"/posts/comment/{public['_id']}", json={"text": "nice"}, headers=as_b)
    comment_id = res.json()[0]["_id"]

    res = client.delete(f"/posts/comment/{public['_id']}/{comment_id}", headers=as_a)
    assert res.status_code == 401
    assert res.json() == {"errors": [{"msg": "User not authorized"}]}

    res = client.delete(f"/posts/comment/{public['_id']}/{comment_id}", headers=as_b)
    assert res.status_code == 200
    assert res.json() == []


def test_ispublic_string_is_ignored(client, make_user, auth_headers):
    a = make_user("Alice")
    res = client.post("/posts", json={"text": "hello", "ispublic": "false"}, headers=auth_headers(a))
    assert res.json()["ispublic"] is True


def test_create_post_requires_text(client, make_user, auth_headers):
    res = client.post("/posts", json={}, headers=auth_headers(make_user("Alice")))
    assert res.status_code == 400
    assert res.json()["errors"] == [{"msg": "Comment text is required", "param": "text", "location": "body"}]


def test_delete_post(client, make_user, auth_headers):
    a, b = make_user("Alice"), make_user("Bob")
    post = client.post("/posts", json={"text": "hello"}, headers=auth_headers(a)).json()

    res = client.delete(f"/posts/{post['_id']}", headers=auth_headers(b))
    assert res.status_code == 401
    assert res.json() == {"errors": [{"msg": "User unauthorized to delete post"}]}

    res = client.delete(f"/posts/{post['_id']}", headers=auth_headers(a))
    assert res.json() == {"msg": "Post removed"}

    res = client.delete("/posts/not-an-id", headers=auth_headers(a))
    assert res.status_code == 404
    assert res.json() == {"errors": [{"msg": "Post not found"}]}


def test_unlike_never_liked(client, make_user, auth_headers):
    a = make_user("Alice")
    post = client.post("/posts", json={"text": "hello"}, headers=auth_headers(a)).json()
    res = client.put(f"/posts/unlike/{post['_id']}", headers=auth_headers(a))
    assert res.status_code == 400
    assert res.json() == {"errors": [{"msg": "Post was never liked"}]}


class TestProfileRoutes:
    def test_profile_lifecycle(self, client, make_user, auth_headers):
        a = make_user("Alice")
        headers = auth_headers(a)

        res = client.get("/profile/me", headers=headers)
        assert res.status_code == 400
        assert res.json() == {"msg": "There is no profile for this user"}

        res = client.post("/profile", json={"status": "Developer", "skills": "python, go"}, headers=headers)
        assert res.status_code == 200
        assert res.json()["skills"] == ["python", "go"]

        res = client.put("/profile/experience",
                         json={"title": "Dev", "company": "Acme", "from": "2020-01-01"}, headers=headers)
        exp_id = res.json()["experience"][0]["_id"]

        res = client.delete(f"/profile/experience/{exp_id}", headers=headers)
        assert res.json()["experience"] == []

        me = client.get("/profile/me", headers=headers).json()
        assert me["user"]["name"] == "Alice"

        assert len(client.get("/profile").json()) == 1
        assert client.get(f"/profile/user/{a}").json()["status"] == "Developer"

        res = client.delete("/profile", headers=headers)
        assert res.json() == {"msg": "User deleted"}
        assert client.get("/profile").json() == []

    def test_profile_validation(self, client, make_user, auth_headers):
        res = client.post("/profile", json={}, headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert [e["msg"] for e in res.json()["errors"]] == ["Status is required", "Skills is required"]

    def test_profile_by_malformed_user_id(self, client):
        res = client.get("/profile/user/bogus")
        assert res.status_code == 400
        assert res.json() == {"errors": [{"msg": "User does not exist"}]}

    def test_experience_validation(self, client, make_user, auth_headers):
        res = client.put("/profile/experience", json={"title": "Dev"}, headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert [e["msg"] for e in res.json()["errors"]] == ["Company is required", "Form date is required"]


class _Response:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class TestGithub:
    def test_repos(self, client, monkeypatch):
        calls = []

        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            return _Response(200, [{"name": "dotfiles"}])

        monkeypatch.setattr(github_repos.requests, "get", fake_get)
        res = client.get("/profile/github/octocat")
        assert res.json() == [{"name": "dotfiles"}]
        assert calls[0][0] == "https://api.github.com/users/octocat/repos"
        assert calls[0][1]["params"] == {"per_page": 5, "sort": "created:asc"}

    def test_unknown_user(self, client, monkeypatch):
        monkeypatch.setattr(github_repos.requests, "get", lambda url, **kwargs: _Response(404))
        res = client.get("/profile/github/nobody")
        assert res.status_code == 400
        assert res.json() == {"msg": "No Github profile found"}

    def test_transport_error(self, monkeypatch):
        def boom(url, **kwargs):
            raise requests.ConnectionError("down")

        monkeypatch.setattr(github_repos.requests, "get", boom)
        with TestClient(app, raise_server_exceptions=False) as c:
            res = c.get("/profile/github/octocat")
        assert res.status_code == 500
        assert res.text == "Server Error"


def test_database_not_configured(monkeypatch):
    import database

    monkeypatch.setattr(database, "db", None)
    app.dependency_overrides.pop(get_db, None)
    with TestClient(app) as c:
        res = c.get("/profile")
    assert res.status_code == 500
    assert res.json() == {"msg": "Database not configured"}


@pytest.mark.parametrize("path", ["/posts/comment/not-an-id", "/posts/comment/" + "0" * 24])
def test_comment_on_missing_post(client, make_user, auth_headers, path):
    res = client.post(path, json={"text": "hi"}, headers=auth_headers(make_user("Alice")))
    assert res.status_code == 404
    assert res.json() == {"errors": [{"msg": "Post not found or is private"}]}


class TestMissingBodies:
    def test_post_without_body(self, client, make_user, auth_headers):
        res = client.post("/posts", headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert res.json()["errors"] == [{"msg": "Comment text is required", "param": "text", "location": "body"}]

    def test_profile_without_body(self, client, make_user, auth_headers):
        res = client.post("/profile", headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert [e["msg"] for e in res.json()["errors"]] == ["Status is required", "Skills is required"]

    def test_form_encoded_body_reads_as_empty(self, client, make_user, auth_headers):
        res = client.post("/posts", data={"text": "hello"}, headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert res.json()["errors"][0]["msg"] == "Comment text is required"

    def test_json_array_body_reads_as_empty(self, client, make_user, auth_headers):
        res = client.put("/profile/experience", json=["Dev"], headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert [e["msg"] for e in res.json()["errors"]] == [
            "Title is required", "Company is required", "Form date is required",
        ]

    def test_register_without_body(self, client):
        res = client.post("/users")
        assert res.status_code == 400
        assert [e["param"] for e in res.json()["errors"]] == ["name", "email", "password"]

    def test_wrong_field_type(self, client, make_user, auth_headers):
        res = client.post("/posts", json={"text": 5}, headers=auth_headers(make_user("Alice")))
        assert res.status_code == 400
        assert res.json()["errors"][0]["param"] == "text"
        assert res.json()["errors"][0]["location"] == "body"

    def test_token_checked_before_body(self, client):
        res = client.post("/posts")
        assert res.status_code == 401
        assert res.json() == {"msg": "No token, authorization denied"}


def test_login_failure_answers_lowercase_server_error(client, make_user):
    # Stored password is not a bcrypt hash, so verification blows up.
    make_user("Alice")
    res = client.post("/auth", json={"email": "alice@devconnector.io", "password": "secret1"})
    assert res.status_code == 500
    assert res.text == "Server error"
