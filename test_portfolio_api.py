"""
End-to-end tests for the Portfolio API over an in-memory store
"""
import pytest
from fastapi.testclient import TestClient

from apps.portfolio.main import app, get_state
from apps.portfolio.session_slot import MemorySessionSlot
from apps.portfolio.state import PortfolioState
from apps.portfolio.store import OfflineStore
from conftest import seed_admin, seed_project, seed_story


@pytest.fixture
def portfolio(store):
    seed_admin(store, email="admin@techschool.com", password="admin@123")
    seed_project(store, project_title="Bot", category="Automation", created_at="2024-01-01T00:00:00")
    seed_project(store, project_title="Shop", category="Web Application", created_at="2024-06-01T00:00:00")
    seed_story(store, achievement_type="certification")

    state = PortfolioState(store, MemorySessionSlot())
    state.startup()
    state.notices.drain()
    app.dependency_overrides[get_state] = lambda: state
    yield state
    app.dependency_overrides.clear()


@pytest.fixture
def client(portfolio):
    return TestClient(app)


def login(client):
    """Log in as the seeded admin and return the auth headers for later requests."""
    response = client.post("/portfolio/auth/login", json={"email": "admin@techschool.com", "password": "admin@123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def titles(response):
    return [p["project_title"] for p in response.json()]


def test_health_reports_database(client):
    response = client.get("/portfolio/health")
    assert response.json() == {"status": "ok", "service": "portfolio", "database": "connected"}


def test_listing_filters(client):
    assert titles(client.get("/portfolio/projects")) == ["Shop", "Bot"]
    assert titles(client.get("/portfolio/projects", params={"sort": "oldest"})) == ["Bot", "Shop"]
    assert titles(client.get("/portfolio/projects", params={"category": "Automation"})) == ["Bot"]
    assert titles(client.get("/portfolio/projects", params={"search": "sho"})) == ["Shop"]
    assert titles(client.get("/portfolio/projects", params={"sort": "date", "date": "2024-06"})) == ["Shop"]


def test_invalid_sort_mode_is_rejected(client):
    assert client.get("/portfolio/projects", params={"sort": "popular"}).status_code == 422


def test_get_single_project(client, portfolio):
    project = portfolio.projects.projects[0]
    assert client.get(f"/portfolio/projects/{project.id}").json()["project_title"] == project.project_title
    assert client.get("/portfolio/projects/missing").status_code == 404


def test_mutations_require_admin(client):
    response = client.post("/portfolio/projects", json={
        "student_name": "Asha", "project_title": "Blog", "category": "Web Application",
    })
    assert response.status_code == 401
    assert response.json()["category"] == "security"


def test_admin_login_does_not_authorize_other_clients(portfolio):
    admin = TestClient(app)
    stranger = TestClient(app)
    headers = login(admin)
    draft = {"student_name": "Asha", "project_title": "Blog", "category": "Web Application"}

    assert stranger.post("/portfolio/projects", json=draft).status_code == 401
    forged = {"Authorization": "Bearer not-an-admin-id"}
    assert stranger.post("/portfolio/projects", json=draft, headers=forged).status_code == 401
    assert stranger.delete(f"/portfolio/projects/{portfolio.projects.projects[0].id}").status_code == 401
    assert stranger.get("/portfolio/notices").status_code == 401

    assert admin.post("/portfolio/projects", json=draft, headers=headers).status_code == 201


def test_token_of_non_admin_record_is_rejected(client, store):
    user = seed_admin(store, email="student@techschool.com", password="pw", role="user")

    response = client.post(
        "/portfolio/projects",
        json={"student_name": "Asha", "project_title": "Blog", "category": "Web Application"},
        headers={"Authorization": f"Bearer {user['id']}"},
    )

    assert response.status_code == 401


def test_admin_project_lifecycle(client, portfolio):
    headers = login(client)

    created = client.post("/portfolio/projects", headers=headers, json={
        "student_name": "Asha",
        "project_title": "Blog",
        "category": "Web Application",
        "tools_technologies": "React, Supabase",
    })
    assert created.status_code == 201
    assert created.json() == {"ok": True, "message": "Project created successfully!"}

    blog = next(p for p in client.get("/portfolio/projects").json() if p["project_title"] == "Blog")
    assert blog["tools_technologies"] == ["React", "Supabase"]
    assert blog["likes_count"] == 0

    updated = client.put(f"/portfolio/projects/{blog['id']}", json={"description": "A blog"}, headers=headers)
    assert updated.status_code == 200
    assert client.get(f"/portfolio/projects/{blog['id']}").json()["description"] == "A blog"

    deleted = client.delete(f"/portfolio/projects/{blog['id']}", headers=headers)
    assert deleted.json()["message"] == "Project deleted successfully!"
    assert titles(client.get("/portfolio/projects")) == ["Shop", "Bot"]


def test_delete_unknown_project_fails(client):
    headers = login(client)

    response = client.delete("/portfolio/projects/does-not-exist", headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Failed to delete project", "category": "client_error"}
    assert titles(client.get("/portfolio/projects")) == ["Shop", "Bot"]


def test_reply_reports_own_outcome_not_latest_notice(client, portfolio):
    headers = login(client)
    # Another request's failure lands on the board first
    portfolio.notices.error("Failed to delete project")

    response = client.post("/portfolio/projects", headers=headers, json={
        "student_name": "Asha", "project_title": "Blog", "category": "Web Application",
    })

    assert response.json() == {"ok": True, "message": "Project created successfully!"}


def test_reply_survives_drained_board(client, portfolio):
    headers = login(client)
    project_id = portfolio.projects.projects[0].id
    portfolio.notices.drain()

    response = client.put(f"/portfolio/projects/{project_id}", json={"description": "x"}, headers=headers)

    assert response.json()["message"] == "Project updated successfully!"


def test_create_with_missing_field_is_rejected(client):
    headers = login(client)
    response = client.post("/portfolio/projects", json={"project_title": "Blog", "category": "Automation"}, headers=headers)
    assert response.status_code == 422


def test_login_failure_is_generic(client):
    wrong_password = client.post("/portfolio/auth/login", json={"email": "admin@techschool.com", "password": "nope"})
    unknown_email = client.post("/portfolio/auth/login", json={"email": "nobody@x.com", "password": "admin@123"})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"error": "Invalid credentials", "category": "security"}


def test_session_follows_the_callers_token(client, portfolio):
    assert client.get("/portfolio/auth/session").json()["state"] == "anonymous"

    response = client.post("/portfolio/auth/login", json={"email": "admin@techschool.com", "password": "admin@123"})
    session = response.json()
    token = session.pop("token")
    assert token
    assert session == {
        "state": "authenticated",
        "is_authenticated": True,
        "is_admin": True,
        "email": "admin@techschool.com",
    }

    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/portfolio/auth/session", headers=headers).json()["is_admin"] is True
    # Without the header the same client is anonymous
    assert client.get("/portfolio/auth/session").json()["is_admin"] is False
    # Logging in over HTTP leaves the process session alone
    assert portfolio.auth.is_authenticated is False

    assert client.post("/portfolio/auth/logout").json() == {"ok": True, "message": "Logged out successfully"}


def test_stories_listing_and_admin_create(client):
    assert len(client.get("/portfolio/stories").json()) == 1
    assert client.get("/portfolio/stories", params={"achievement_type": "startup"}).json() == []

    headers = login(client)
    response = client.post("/portfolio/stories", headers=headers, json={
        "student_name": "Suhail Muhammad",
        "title": "From Student to Software Engineer",
        "content": "Landed a remote job within 3 months.",
        "achievement_type": "job_placement",
    })
    assert response.status_code == 201

    placements = client.get("/portfolio/stories", params={"achievement_type": "job_placement"}).json()
    assert [s["student_name"] for s in placements] == ["Suhail Muhammad"]
    assert placements[0]["student_image"].startswith("https://ui-avatars.com/api/?name=Suhail%20Muhammad")


def test_notices_are_drained(client):
    headers = login(client)
    client.delete("/portfolio/projects/does-not-exist", headers=headers)

    notices = client.get("/portfolio/notices", headers=headers).json()

    assert notices == [
        {"level": "success", "message": "Login successful!"},
        {"level": "error", "message": "Failed to delete project"},
    ]
    assert client.get("/portfolio/notices", headers=headers).json() == []


def test_unexpected_error_is_sanitized(portfolio):
    class BrokenStore(OfflineStore):
        def ping(self):
            raise RuntimeError("password=hunter2 leaked in driver message")

    broken = PortfolioState(BrokenStore(), MemorySessionSlot())
    app.dependency_overrides[get_state] = lambda: broken
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/portfolio/health")

    assert response.status_code == 500
    body = response.json()
    assert body["category"] == "server_error"
    assert body["error"].startswith("An unexpected server error occurred.")
    assert "Error ID:" in body["error"]
    assert "hunter2" not in body["error"]


def test_no_backend_mode_serves_empty_lists():
    state = PortfolioState(OfflineStore(), MemorySessionSlot())
    state.startup()
    app.dependency_overrides[get_state] = lambda: state
    try:
        client = TestClient(app)
        assert client.get("/portfolio/projects").json() == []
        assert client.get("/portfolio/health").json()["status"] == "degraded"
        assert client.post("/portfolio/auth/login", json={"email": "a@b.c", "password": "x"}).status_code == 401
    finally:
        app.dependency_overrides.clear()
