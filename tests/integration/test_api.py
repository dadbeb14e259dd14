"""Integration tests for the HTTP API (docubuddy.main)."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from docubuddy.api.middleware.error_handler import LLMNotConfiguredError
from docubuddy.core.config import Settings, get_settings
from docubuddy.core.dependencies import (
    get_analysis_service,
    get_github_service,
    get_knowledge_service,
    get_qa_service,
    get_store,
)
from docubuddy.main import app

from tests.fakes import REPO_URL

API = "/api/v1"


@pytest.fixture
def client(store, github_service, analysis_service, qa_service, knowledge_service):
    app.dependency_overrides.update({
        get_settings: lambda: Settings(openai_api_key="sk-test"),
        get_store: lambda: store,
        get_github_service: lambda: github_service,
        get_analysis_service: lambda: analysis_service,
        get_qa_service: lambda: qa_service,
        get_knowledge_service: lambda: knowledge_service,
    })
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def function_id(client, repository):
    resp = client.post(f"{API}/repositories/{repository.id}/functions", json={"functions": [{
        "file_path": "src/auth.ts",
        "function_name": "validateToken",
        "function_signature": "validateToken(token: string): boolean",
        "description": "Checks a session token against the token table",
        "parameters": [{"name": "token", "type": "string"}],
        "complexity_level": "simple",
        "tags": ["auth"],
    }]})
    assert resp.status_code == 201
    return resp.json()[0]["id"]


# ── Health endpoints ─────────────────────────────────────────────────────────


class TestHealthEndpoints:
    def test_health(self, client):
        resp = client.get(f"{API}/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_ready(self, client):
        data = client.get(f"{API}/ready").json()
        assert data["ready"] is True
        assert data["checks"]["database"] is True
        assert data["checks"]["llm_configured"] is True

    def test_not_ready_without_llm_key(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(openai_api_key=None)
        data = client.get(f"{API}/ready").json()
        assert data["ready"] is False
        assert data["checks"]["llm_configured"] is False

    def test_live_and_root(self, client):
        assert client.get(f"{API}/live").json() == {"status": "alive"}
        assert client.get("/").json()["health"] == f"{API}/health"


# ── Repository submission ────────────────────────────────────────────────────


class TestRepositoryEndpoints:
    def test_submit_runs_analysis(self, client):
        resp = client.post(f"{API}/repositories", json={"github_url": REPO_URL})
        assert resp.status_code == 202
        data = resp.json()
        assert data["started"] is True
        assert data["message"] == "Analysis started"
        repository_id = data["repository"]["id"]

        # TestClient runs background tasks before returning
        progress = client.get(f"{API}/repositories/{repository_id}/status").json()
        assert progress["status"] == "completed"
        assert progress["qa_items"] == 10
        assert progress["architecture_sections"] == 2

        detail = client.get(f"{API}/repositories/{repository_id}").json()
        assert detail["language"] == "TypeScript"
        assert detail["stars"] == 120

    def test_resubmit_completed(self, client, repository):
        resp = client.post(f"{API}/repositories", json={"github_url": f"{REPO_URL}/"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["started"] is False
        assert data["message"] == "Repository already analyzed"
        assert data["repository"]["id"] == repository.id

    def test_submit_invalid_url(self, client):
        resp = client.post(f"{API}/repositories", json={"github_url": "https://gitlab.com/a/b"})
        assert resp.status_code == 400
        data = resp.json()
        assert data["success"] is False
        assert data["error"] == "Please enter a valid GitHub repository URL"
        assert data["error_code"] == "INVALID_REPO_URL"

    def test_submit_missing_body(self, client):
        resp = client.post(f"{API}/repositories", json={})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_list_with_status_filter(self, client, repository, store):
        store.create_repository("https://github.com/acme/other", "acme", "other")
        assert client.get(f"{API}/repositories").json()["total"] == 2
        completed = client.get(f"{API}/repositories", params={"status": "completed"}).json()
        assert [r["id"] for r in completed["repositories"]] == [repository.id]

    def test_unknown_repository(self, client):
        resp = client.get(f"{API}/repositories/missing")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "REPO_NOT_FOUND"
        assert client.get(f"{API}/repositories/missing/status").status_code == 404

    def test_delete(self, client, repository):
        resp = client.delete(f"{API}/repositories/{repository.id}")
        assert resp.json() == {"success": True, "id": repository.id}
        assert client.get(f"{API}/repositories/{repository.id}").status_code == 404
        assert client.delete(f"{API}/repositories/{repository.id}").status_code == 404


# ── GitHub passthroughs ──────────────────────────────────────────────────────


class TestGitHubEndpoints:
    def test_metadata(self, client):
        data = client.post(f"{API}/github/metadata", json={"github_url": REPO_URL}).json()
        assert data["owner"] == "acme"
        assert data["license"] == "MIT License"

    def test_metadata_not_found(self, client):
        resp = client.post(f"{API}/github/metadata", json={"github_url": "https://github.com/acme/missing"})
        assert resp.status_code == 404

    def test_metadata_rejects_other_hosts(self, client):
        resp = client.post(f"{API}/github/metadata", json={"github_url": "https://example.com/a/b"})
        assert resp.status_code == 422

    def test_code(self, client):
        data = client.post(f"{API}/github/code", json={
            "github_url": REPO_URL,
            "file_path": "src/auth.ts",
            "function_name": "validateToken",
        }).json()
        assert data["found"] is True
        assert (data["start_line"], data["end_line"]) == (3, 8)
        assert data["language"] == "typescript"

    def test_code_missing_file(self, client):
        resp = client.post(f"{API}/github/code", json={"github_url": REPO_URL, "file_path": "src/nope.ts"})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NOT_FOUND"

    def test_malformed_github_body_is_an_upstream_error(self, client, make_github_service):
        broken = make_github_service(lambda request: httpx.Response(200, text="<html>oops</html>"))
        app.dependency_overrides[get_github_service] = lambda: broken

        resp = client.post(f"{API}/github/metadata", json={"github_url": REPO_URL})
        assert resp.status_code == 502
        assert resp.json()["error_code"] == "GITHUB_API_ERROR"

        resp = client.post(f"{API}/github/code", json={"github_url": REPO_URL, "file_path": "src/auth.ts"})
        assert resp.status_code == 502
        assert resp.json()["error_code"] == "GITHUB_API_ERROR"


# ── Functions and proposals ──────────────────────────────────────────────────


class TestFunctionEndpoints:
    def test_record_and_list(self, client, repository, function_id):
        functions = client.get(f"{API}/repositories/{repository.id}/functions").json()
        assert [f["id"] for f in functions] == [function_id]
        assert functions[0]["tags"] == ["auth"]
        assert functions[0]["complexity_level"] == "simple"

    def test_record_requires_repository(self, client):
        resp = client.post(f"{API}/repositories/missing/functions", json={"functions": [{
            "file_path": "a.ts", "function_name": "a", "description": "does a",
        }]})
        assert resp.status_code == 404

    def test_function_questions(self, client, function_id):
        resp = client.post(f"{API}/functions/{function_id}/questions")
        assert resp.status_code == 201
        assert len(resp.json()) == 5

    def test_proposal_review(self, client, repository, function_id, fake_llm):
        fake_llm.replies = ["/** Checks a token. */"]
        resp = client.post(f"{API}/functions/{function_id}/proposals", json={"proposal_type": "documentation"})
        assert resp.status_code == 201
        proposal = resp.json()
        assert proposal["status"] == "pending"
        assert proposal["ai_generated_content"] == "/** Checks a token. */"

        reviewed = client.patch(f"{API}/proposals/{proposal['id']}", json={
            "status": "approved",
            "user_content": "/** Validates a session token. */",
        }).json()
        assert reviewed["status"] == "approved"
        assert reviewed["user_content"] == "/** Validates a session token. */"

        listed = client.get(f"{API}/repositories/{repository.id}/proposals").json()
        assert [p["id"] for p in listed] == [proposal["id"]]

    def test_invalid_proposal_type(self, client, function_id):
        resp = client.post(f"{API}/functions/{function_id}/proposals", json={"proposal_type": "poem"})
        assert resp.status_code == 422

    def test_unknown_proposal(self, client):
        assert client.patch(f"{API}/proposals/missing", json={"status": "rejected"}).status_code == 404


# ── Q&A ──────────────────────────────────────────────────────────────────────


class TestQAEndpoints:
    def test_generate_questions(self, client, repository, fake_llm):
        fake_llm.replies = [json.dumps({"questions": [{"question": "How is it deployed?", "question_type": "deployment"}]})]
        resp = client.post(f"{API}/repositories/{repository.id}/questions", json={"view_mode": "dev"})
        assert resp.status_code == 201
        assert resp.json()[0]["question"] == "How is it deployed?"

    def test_ask_business(self, client, repository, fake_llm):
        fake_llm.replies = ["It saves analysts hours.", "Like a dashboard kit."]
        resp = client.post(f"{API}/repositories/{repository.id}/ask", json={
            "question": "What business problem does this solve?",
            "view_mode": "business",
        })
        assert resp.status_code == 201
        item = resp.json()
        assert item["answer"] == "It saves analysts hours."
        assert item["analogy_content"] == "Like a dashboard kit."
        assert item["view_mode"] == "business"

        listed = client.get(f"{API}/repositories/{repository.id}/qa", params={"view_mode": "business"}).json()
        assert [i["id"] for i in listed] == [item["id"]]

    def test_ask_validation(self, client, repository):
        resp = client.post(f"{API}/repositories/{repository.id}/ask", json={"question": "?"})
        assert resp.status_code == 422

    def test_ask_llm_failure(self, client, repository, fake_llm):
        fake_llm.replies = [LLMNotConfiguredError()]
        resp = client.post(f"{API}/repositories/{repository.id}/ask", json={"question": "How?"})
        assert resp.status_code == 503
        assert resp.json()["error_code"] == "LLM_NOT_CONFIGURED"

    def test_manual_item_and_approve(self, client, repository):
        resp = client.post(f"{API}/repositories/{repository.id}/qa", json={
            "question": "Where are the docs?",
            "answer": "In the docs folder.",
        })
        assert resp.status_code == 201
        item = resp.json()
        assert item["is_approved"] is False
        assert item["question_type"] == "general"

        approved = client.post(f"{API}/qa/{item['id']}/approve").json()
        assert approved["is_approved"] is True
        assert client.post(f"{API}/qa/missing/approve").status_code == 404


# ── Chat ─────────────────────────────────────────────────────────────────────


class TestChatEndpoints:
    def test_conversation_flow(self, client, repository, fake_llm):
        conversation = client.post(
            f"{API}/repositories/{repository.id}/conversations",
            json={"conversation_type": "business", "title": "Costs"},
        ).json()
        assert conversation["conversation_type"] == "business"

        fake_llm.replies = ["## Business Impact Summary\nLow cost."]
        reply = client.post(
            f"{API}/conversations/{conversation['id']}/messages",
            json={"message": "What does running it cost?"},
        ).json()
        assert reply["response_style"] == "business"
        assert reply["metrics"]["code_examples"] == "Patterns Included"
        assert [m["role"] for m in reply["messages"]] == ["user", "assistant"]

        messages = client.get(f"{API}/conversations/{conversation['id']}/messages").json()
        assert len(messages) == 2

        fake_llm.replies = [
            '{"question": "What does it cost to run?", "questionType": "business", "viewMode": "business"}',
            "Hosting is cheap.",
            "Like renting a small office.",
        ]
        qa = client.post(f"{API}/conversations/{conversation['id']}/qa").json()
        assert qa["question"] == "What does it cost to run?"
        assert qa["answer"] == "Hosting is cheap."
        assert qa["qa_item"]["analogy_content"] == "Like renting a small office."

        listed = client.get(f"{API}/repositories/{repository.id}/conversations").json()
        assert [c["id"] for c in listed] == [conversation["id"]]

    def test_unknown_conversation(self, client):
        resp = client.post(f"{API}/conversations/missing/messages", json={"message": "hi"})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NOT_FOUND"


# ── Documents and search ─────────────────────────────────────────────────────


class TestDocumentEndpoints:
    def test_generate_and_list(self, client, repository, fake_llm):
        fake_llm.replies = [
            "Components overview",
            "Requests flow",
            json.dumps({"explanations": [{"category": "value", "question": "Why?", "answer": "Faster reports"}]}),
        ]
        data = client.post(f"{API}/repositories/{repository.id}/architecture").json()
        assert [d["title"] for d in data["architecture_docs"]] == ["Architecture Overview", "Data Flow"]
        assert data["business_explanations"][0]["answer"] == "Faster reports"

        assert len(client.get(f"{API}/repositories/{repository.id}/architecture").json()) == 2
        explanations = client.get(f"{API}/repositories/{repository.id}/business-explanations").json()
        assert explanations[0]["category"] == "value"

    def test_search(self, client, repository, function_id):
        resp = client.post(f"{API}/repositories/{repository.id}/search", json={"query": "session token"})
        data = resp.json()
        assert data["success"] is True
        assert data["total_results"] == 1
        assert data["results"][0]["metadata"]["source_id"] == function_id

    def test_search_unknown_repository(self, client):
        resp = client.post(f"{API}/repositories/missing/search", json={"query": "tokens"})
        assert resp.status_code == 404
