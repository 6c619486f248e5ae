"""
Tests for FastAPI application endpoints.
"""

from fastapi.testclient import TestClient

from conftest import FakeProvider, routed_reply
from devassist.config import Settings
from devassist.main import create_app


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_check_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_format(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestProcessEndpoint:
    """Tests for POST /process."""

    def test_process_returns_merged_result(self, store, fake_provider, client):
        fake_provider.reply = routed_reply(
            error="Declare x first.",
            suggestions="- Initialise x\n- Add a test",
        )

        response = client.post(
            "/process",
            json={"text": "E12: x not found", "source_app": "vscode", "language": "rust"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["suggestions"] == ["Initialise x", "Add a test"]
        assert data["errors"] == [{"error": "E12: x not found", "solution": "Declare x first."}]
        assert data["snippets"] is None
        assert store.get_current_context().current_app == "vscode"

    def test_process_empty_text(self, client):
        response = client.post("/process", json={})

        assert response.status_code == 200
        assert response.json() == {"suggestions": [], "errors": None, "snippets": None}

    def test_process_publishes_result(self, store, fake_provider):
        app = create_app(store=store, llm_provider=fake_provider, config=Settings())
        queue = app.state.publisher.subscribe()

        TestClient(app).post("/process", json={"text": "x = 1"})

        message = queue.get_nowait()
        assert message["type"] == "process_result"
        assert message["data"]["suggestions"] == []


class TestSnippetEndpoints:
    """Tests for the snippet endpoints."""

    def test_create_snippet(self, fake_provider, client):
        fake_provider.reply = '{"language": "python", "tags": ["math"]}'

        response = client.post(
            "/snippets",
            json={"content": "def add(a, b): return a + b", "source_app": "vscode",
                  "file_path": "/home/dev/calc/ops.py"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["language"] == "python"
        assert data["tags"] == ["math"]
        assert data["projectContext"] == "calc"
        assert data["favorited"] is False

    def test_create_snippet_requires_content(self, client):
        assert client.post("/snippets", json={"content": ""}).status_code == 422

    def test_list_snippets_with_filters(self, store, client):
        store.save_snippet(content="print(1)", language="python", source_app="vim")
        store.save_snippet(content="console.log(1)", language="javascript", source_app="vim")

        response = client.get("/snippets", params={"language": "python"})

        assert response.status_code == 200
        assert [s["content"] for s in response.json()] == ["print(1)"]
        assert [s["content"] for s in client.get("/snippets", params={"search": "console"}).json()] == [
            "console.log(1)"
        ]

    def test_list_snippets_rejects_bad_limit(self, client):
        assert client.get("/snippets", params={"limit": 0}).status_code == 422

    def test_favorite_snippet(self, store, client):
        snippet = store.save_snippet(content="x", language="python", source_app="vim")

        response = client.post(f"/snippets/{snippet.id}/favorite", json={"favorited": True})

        assert response.status_code == 200
        assert response.json()["favorited"] is True

    def test_favorite_unknown_snippet(self, client):
        response = client.post("/snippets/missing/favorite", json={})
        assert response.status_code == 404


class TestContextAndErrorEndpoints:
    """Tests for /context and /errors/solutions."""

    def test_context_not_found(self, client):
        assert client.get("/context").status_code == 404

    def test_context_latest(self, store, client):
        store.update_developer_context(current_app="vscode", active_file="/src/a.py")

        data = client.get("/context").json()

        assert data["currentApp"] == "vscode"
        assert data["activeFile"] == "/src/a.py"

    def test_error_solutions(self, store, client):
        store.record_error(error_text="E7: broken", solution="fix it", language="go")

        response = client.get("/errors/solutions", params={"error_text": "E7: broken", "language": "go"})

        assert response.status_code == 200
        [pattern] = response.json()
        assert pattern["solution"] == "fix it"
        assert pattern["frequency"] == 1

    def test_error_solutions_requires_params(self, client):
        assert client.get("/errors/solutions").status_code == 422


class TestCleanupEndpoint:
    """Tests for POST /maintenance/cleanup."""

    def test_cleanup_uses_configured_default(self, client):
        response = client.post("/maintenance/cleanup", json={})

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "days_to_keep": 30,
            "deleted": {"snippets": 0, "contexts": 0},
        }

    def test_cleanup_explicit_days(self, store, client):
        store.save_snippet(content="x", language="python", source_app="vim")
        store.update_developer_context(current_app="vim")

        response = client.post("/maintenance/cleanup", json={"days_to_keep": 0})

        assert response.json()["deleted"] == {"snippets": 1, "contexts": 1}

    def test_cleanup_rejects_negative_days(self, client):
        assert client.post("/maintenance/cleanup", json={"days_to_keep": -1}).status_code == 422


class TestLifespan:
    """Tests for collaborator ownership."""

    def test_injected_collaborators_not_closed(self, store):
        provider = FakeProvider()
        app = create_app(store=store, llm_provider=provider, config=Settings())

        with TestClient(app) as test_client:
            assert test_client.get("/health").status_code == 200

        assert provider.closed is False
        assert store.is_initialized

    def test_owned_store_created_and_closed(self, tmp_path):
        config = Settings(
            database_url=f"sqlite:///{tmp_path / 'assist.db'}",
            enable_retention_job=False,
        )
        provider = FakeProvider()
        app = create_app(llm_provider=provider, config=config)

        with TestClient(app) as test_client:
            assert app.state.store.is_initialized
            assert test_client.post("/snippets", json={"content": "x"}).status_code == 201

        assert app.state.store is None
