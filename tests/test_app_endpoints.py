from fastapi.testclient import TestClient

from folio.app import create_app
from folio.auth.session import MemorySessionStore, SessionManager
from folio.auth.users import register_user
from folio.config import Settings
from folio.core.mapping import PROJECTS, SKILLS
from folio.infra.workbook_store import WorkbookStore

from conftest import ADMIN, SECRET

PROJECT = {
    "title": "Orrery",
    "description": "A model of the solar system",
    "longDescription": "Built with WebGL shaders.",
    "imageUrl": "https://example.com/orrery.png",
    "technologies": ["Three.js", "React"],
    "featured": True,
    "order": 2,
}

SKILL = {"name": "Rust", "category": "Backend", "proficiency": 70, "order": 5}

CONTACT = {"name": "Jo Lee", "email": "jo@example.com", "message": "Hello, I would like to discuss a project with you."}

ABOUT = {"name": "Ada Lovelace", "title": "Engineer", "bio": "Writes programs for engines.", "email": "ada@example.com"}


# ------------------ Auth ------------------


def test_login_sets_http_only_cookie(client, settings):
    r = client.post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Login successful"
    assert body["user"]["username"] == "admin"
    assert body["user"]["isAdmin"] is True
    assert "passwordHash" not in body["user"]
    assert "password_hash" not in r.text

    set_cookie = r.headers["set-cookie"]
    assert set_cookie.startswith(settings.cookie_name + "=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=2592000" in set_cookie
    assert "samesite=lax" in set_cookie.lower()
    assert "Secure" not in set_cookie


def test_login_cookie_is_secure_when_configured(store, sessions):
    app = create_app(Settings(secret_key=SECRET, cookie_secure=True), store=store, sessions=sessions)
    r = TestClient(app).post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200
    assert "Secure" in r.headers["set-cookie"]


def test_login_failures_are_indistinguishable(client):
    wrong = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    unknown = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"error": "Invalid username or password"}
    assert "set-cookie" not in wrong.headers


def test_login_with_missing_fields_is_unauthorized(client):
    assert client.post("/api/auth/login", json={}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "admin"}).status_code == 401
    assert client.post("/api/auth/login").status_code == 401


def test_current_user(client, auth_client):
    r = client.get("/api/auth/user")
    assert r.status_code == 401
    assert r.json() == {"error": "Not authenticated"}

    r = auth_client.get("/api/auth/user")
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "admin"
    assert body["isAdmin"] is True
    assert set(body) == {"id", "username", "isAdmin"}


def test_logout_revokes_the_session(app, auth_client, settings, sessions):
    token = auth_client.cookies.get(settings.cookie_name)
    assert token
    assert len(sessions.store) == 1

    r = auth_client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}
    assert len(sessions.store) == 0
    assert auth_client.get("/api/auth/user").status_code == 401

    # Replaying the old cookie after logout does not work either
    replay = TestClient(app)
    replay.cookies.set(settings.cookie_name, token)
    assert replay.get("/api/auth/user").status_code == 401
    assert replay.post("/api/skills", json=SKILL).status_code == 401


def test_logout_without_session_succeeds(client):
    r = client.post("/api/auth/logout")
    assert r.status_code == 200
    assert r.json() == {"message": "Logout successful"}


def test_relogin_replaces_previous_session(auth_client, sessions):
    assert len(sessions.store) == 1
    r = auth_client.post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200
    assert len(sessions.store) == 1
    assert auth_client.get("/api/auth/user").status_code == 200


def test_expired_session_is_treated_as_absent(auth_client, clock):
    assert auth_client.get("/api/auth/user").status_code == 200
    clock.advance(days=30, seconds=1)
    assert auth_client.get("/api/auth/user").status_code == 401
    r = auth_client.post("/api/skills", json=SKILL)
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_tampered_cookie_is_rejected(app, settings, store):
    c = TestClient(app)
    c.cookies.set(settings.cookie_name, "forged.token")
    assert c.get("/api/auth/user").status_code == 401
    assert c.post("/api/projects", json=PROJECT).status_code == 401
    assert store.list(PROJECTS) == []


# ------------------ Projects ------------------


def test_project_crud(client, auth_client, store):
    r = client.post("/api/projects", json=PROJECT)
    assert r.status_code == 401
    assert store.list(PROJECTS) == []

    r = auth_client.post("/api/projects", json=PROJECT)
    assert r.status_code == 201
    created = r.json()
    pid = created["id"]
    assert created["title"] == "Orrery"
    assert created["longDescription"] == "Built with WebGL shaders."
    assert created["technologies"] == ["Three.js", "React"]
    assert created["featured"] is True
    assert created["demoUrl"] is None
    assert "createdAt" in created

    assert client.get(f"/api/projects/{pid}").json() == created

    r = auth_client.put(f"/api/projects/{pid}", json={"title": "Orrery II"})
    assert r.status_code == 200
    updated = r.json()
    assert updated["title"] == "Orrery II"
    assert updated["description"] == PROJECT["description"]
    assert updated["technologies"] == PROJECT["technologies"]

    assert client.put(f"/api/projects/{pid}", json={"title": "x"}).status_code == 401
    assert client.delete(f"/api/projects/{pid}").status_code == 401

    r = auth_client.delete(f"/api/projects/{pid}")
    assert r.status_code == 200
    assert r.json() == {"message": "Project deleted successfully"}

    r = client.get(f"/api/projects/{pid}")
    assert r.status_code == 404
    assert r.json() == {"error": "Project not found"}
    assert auth_client.delete(f"/api/projects/{pid}").status_code == 404


def test_projects_are_ordered(client, auth_client):
    for title, order in (("C", 3), ("A", 1), ("B", 2)):
        assert auth_client.post("/api/projects", json={**PROJECT, "title": title, "order": order}).status_code == 201
    assert [p["title"] for p in client.get("/api/projects").json()] == ["A", "B", "C"]


def test_project_without_technologies_is_rejected(auth_client, store):
    r = auth_client.post("/api/projects", json={**PROJECT, "technologies": []})
    assert r.status_code == 400
    body = r.json()
    assert "At least one technology is required" in body["error"]
    assert body["details"][0]["field"] == "technologies"
    assert store.list(PROJECTS) == []


def test_project_update_validation_and_missing(auth_client):
    pid = auth_client.post("/api/projects", json=PROJECT).json()["id"]
    r = auth_client.put(f"/api/projects/{pid}", json={"title": None})
    assert r.status_code == 400
    assert "title cannot be null" in r.json()["error"]

    r = auth_client.put("/api/projects/does-not-exist", json={"title": "x"})
    assert r.status_code == 404
    assert r.json() == {"error": "Project not found"}


# ------------------ Skills ------------------


def test_skill_create_requires_a_session(client, store):
    r = client.post("/api/skills", json=SKILL)
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}

    r = client.post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200
    r = client.post("/api/skills", json=SKILL)
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Rust"
    assert body["category"] == "Backend"
    assert body["proficiency"] == 70
    assert body["order"] == 5
    assert body["icon"] is None
    assert [s.id for s in store.list(SKILLS)] == [body["id"]]


def test_skill_proficiency_out_of_range(auth_client, store):
    r = auth_client.post("/api/skills", json={**SKILL, "proficiency": 101})
    assert r.status_code == 400
    assert "proficiency must be between 1 and 100" in r.json()["error"]
    assert store.list(SKILLS) == []


def test_skill_get_update_delete(client, auth_client):
    sid = auth_client.post("/api/skills", json={**SKILL, "icon": "rust.svg"}).json()["id"]

    r = client.get(f"/api/skills/{sid}")
    assert r.status_code == 200
    assert r.json()["icon"] == "rust.svg"

    r = auth_client.put(f"/api/skills/{sid}", json={"proficiency": 90, "category": "Tools"})
    assert r.status_code == 200
    assert r.json()["proficiency"] == 90
    assert r.json()["name"] == "Rust"

    assert client.get("/api/skills").json()[0]["category"] == "Tools"

    r = auth_client.delete(f"/api/skills/{sid}")
    assert r.json() == {"message": "Skill deleted successfully"}
    assert client.get(f"/api/skills/{sid}").status_code == 404
    assert auth_client.put(f"/api/skills/{sid}", json={"name": "Go"}).status_code == 404


# ------------------ About ------------------


def test_about_upsert(client, auth_client, store):
    r = client.get("/api/about")
    assert r.status_code == 404
    assert r.json() == {"error": "About info not found"}

    assert client.put("/api/about", json=ABOUT).status_code == 401

    r = auth_client.put("/api/about", json=ABOUT)
    assert r.status_code == 200
    first = r.json()
    assert first["id"] == "main"
    assert first["name"] == "Ada Lovelace"

    r = auth_client.put("/api/about", json={**ABOUT, "title": "Analyst", "githubUrl": "https://github.com/ada"})
    assert r.status_code == 200
    second = r.json()
    assert second["id"] == "main"
    assert second["title"] == "Analyst"

    got = client.get("/api/about").json()
    assert got["title"] == "Analyst"
    assert got["githubUrl"] == "https://github.com/ada"
    assert store.get_about().title == "Analyst"


def test_about_requires_name_title_bio(auth_client):
    r = auth_client.put("/api/about", json={"name": "Ada", "title": "Engineer"})
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "bio"


# ------------------ Contact ------------------


def test_contact_flow(client, auth_client):
    r = client.post("/api/contact", json=CONTACT)
    assert r.status_code == 201
    msg = r.json()
    assert msg["read"] is False
    assert msg["subject"] is None
    assert msg["email"] == "jo@example.com"
    assert msg["name"] == "Jo Lee"
    assert msg["message"] == CONTACT["message"]

    assert client.get("/api/contact/messages").status_code == 401

    messages = auth_client.get("/api/contact/messages").json()
    assert [m["id"] for m in messages] == [msg["id"]]
    assert messages[0]["read"] is False

    for _ in range(2):
        r = auth_client.put(f"/api/contact/messages/{msg['id']}/read")
        assert r.status_code == 200
        assert r.json() == {"message": "Message marked as read"}
    assert auth_client.get("/api/contact/messages").json()[0]["read"] is True

    assert client.put(f"/api/contact/messages/{msg['id']}/read").status_code == 401
    assert client.delete(f"/api/contact/messages/{msg['id']}").status_code == 401

    r = auth_client.delete(f"/api/contact/messages/{msg['id']}")
    assert r.json() == {"message": "Message deleted successfully"}
    assert auth_client.get("/api/contact/messages").json() == []


def test_contact_validation(client):
    r = client.post("/api/contact", json={**CONTACT, "message": "too short"})
    assert r.status_code == 400
    assert "Message must be at least 10 characters" in r.json()["error"]

    r = client.post("/api/contact", json={**CONTACT, "email": "not-an-email"})
    assert r.status_code == 400


def test_unknown_message_ids_are_not_found(auth_client):
    r = auth_client.delete("/api/contact/messages/nonexistent")
    assert r.status_code == 404
    assert r.json() == {"error": "Message not found"}
    assert auth_client.put("/api/contact/messages/nonexistent/read").status_code == 404


# ------------------ Errors ------------------


def test_malformed_json_is_a_bad_request(auth_client):
    r = auth_client.post("/api/skills", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_unknown_route_uses_error_shape(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_unexpected_failure_is_generic_500(app, store, monkeypatch):
    def boom(kind):
        raise RuntimeError("disk on fire at /var/secret")

    monkeypatch.setattr(store, "list", boom)
    c = TestClient(app, raise_server_exceptions=False)
    r = c.get("/api/projects")
    assert r.status_code == 500
    assert r.json() == {"error": "Internal server error"}
    assert "secret" not in r.text


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_session_for_missing_user_has_no_identity(app, settings, sessions):
    _, cookie = sessions.create("no-such-user")
    c = TestClient(app)
    c.cookies.set(settings.cookie_name, cookie)
    assert c.get("/api/auth/user").status_code == 401
    assert c.get("/api/contact/messages").status_code == 401


def test_cookie_max_age_follows_the_session_lifetime(settings, store, clock):
    short = SessionManager(MemorySessionStore(), SECRET, max_age=3600, clock=clock)
    app = create_app(settings, store=store, sessions=short)
    r = TestClient(app).post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200
    assert "Max-Age=3600" in r.headers["set-cookie"]


def test_numbers_and_flags_are_not_coerced(auth_client, store):
    for payload in ({**SKILL, "proficiency": "70"}, {**SKILL, "proficiency": True}, {**SKILL, "order": "5"}):
        r = auth_client.post("/api/skills", json=payload)
        assert r.status_code == 400
    assert store.list(SKILLS) == []

    r = auth_client.post("/api/projects", json={**PROJECT, "featured": "yes"})
    assert r.status_code == 400
    assert store.list(PROJECTS) == []


def test_control_characters_are_a_bad_request(client, auth_client):
    r = client.post("/api/contact", json={**CONTACT, "message": "hello\x01 there friend"})
    assert r.status_code == 400
    assert "message contains unsupported control characters" in r.json()["error"]
    assert auth_client.get("/api/contact/messages").json() == []


def test_workbook_backend_returns_submitted_text(tmp_path):
    store = WorkbookStore(str(tmp_path / "portfolio.xlsx"))
    register_user(store, ADMIN["username"], ADMIN["password"])
    app = create_app(Settings(secret_key=SECRET), store=store)
    anon = TestClient(app)
    admin = TestClient(app)
    assert admin.post("/api/auth/login", json=ADMIN).status_code == 200

    formula_like = {**CONTACT, "message": "=1+1 hello there friend"}
    assert anon.post("/api/contact", json=formula_like).status_code == 201
    assert anon.post("/api/contact", json={**CONTACT, "name": "NA"}).status_code == 201
    assert admin.post("/api/skills", json={**SKILL, "name": "NA"}).status_code == 201
    assert admin.post("/api/skills", json={**SKILL, "name": "None", "order": 6}).status_code == 201

    r = admin.get("/api/contact/messages")
    assert r.status_code == 200
    assert sorted((m["name"], m["message"]) for m in r.json()) == sorted(
        [("Jo Lee", "=1+1 hello there friend"), ("NA", CONTACT["message"])]
    )

    r = anon.get("/api/skills")
    assert r.status_code == 200
    assert [s["name"] for s in r.json()] == ["NA", "None"]

    r = anon.post("/api/contact", json={**CONTACT, "message": "hello\x01 there friend"})
    assert r.status_code == 400
    assert len(admin.get("/api/contact/messages").json()) == 2
