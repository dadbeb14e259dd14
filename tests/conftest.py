"""Shared test fixtures for the Docu Buddy test suite."""

from typing import Callable, List

import httpx
import pytest

from docubuddy.agents import (
    ArchitectureWriter,
    BusinessExplainer,
    ChatAssistant,
    ChatQAExtractor,
    DocumentationWriter,
    QAResponder,
    QuestionGenerator,
)
from docubuddy.models.schemas import AnalysisStatus, RepoMetadata
from docubuddy.services.analysis_service import AnalysisConfig, AnalysisService
from docubuddy.services.github_service import GitHubService
from docubuddy.services.knowledge_service import KnowledgeService
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store, StoreConfig
from docubuddy.services.vector_store import VectorStore, VectorStoreConfig

from tests.fakes import REPO_PAYLOAD, REPO_URL, TS_SOURCE, FakeEmbeddingService, FakeLLM, contents_payload


# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def store(tmp_path):
    """Empty store backed by a temporary sqlite file."""
    s = Store(StoreConfig(database_path=str(tmp_path / "data" / "test.db")))
    s.initialize()
    return s


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def knowledge_service():
    return KnowledgeService(
        embedding_service=FakeEmbeddingService(),
        vector_store=VectorStore(VectorStoreConfig(backend="memory"))
    )


@pytest.fixture
def make_github_service() -> Callable[[Callable[[httpx.Request], httpx.Response]], GitHubService]:
    """Build a GitHubService whose HTTP traffic goes to ``handler``."""

    def _make(handler):
        return GitHubService(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def github_handler():
    """Serves REPO_PAYLOAD and TS_SOURCE for acme/widgets; 404 for anything else."""
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path == "/repos/acme/widgets":
            return httpx.Response(200, json=REPO_PAYLOAD)
        if path == "/repos/acme/widgets/contents/src/auth.ts":
            return httpx.Response(200, json=contents_payload(TS_SOURCE))
        return httpx.Response(404, json={"message": "Not Found"})

    handler.requests = requests
    return handler


@pytest.fixture
def github_service(make_github_service, github_handler):
    return make_github_service(github_handler)


@pytest.fixture
def repository(store):
    """A completed repository record with metadata applied."""
    record = store.create_repository(REPO_URL, "acme", "widgets")
    store.apply_metadata(record.id, RepoMetadata(
        owner="acme",
        name="widgets",
        description="Widget toolkit for dashboards",
        language="TypeScript",
        stars=120,
        forks=8,
    ))
    return store.set_repository_status(record.id, AnalysisStatus.COMPLETED)


@pytest.fixture
def analysis_service(store, github_service, fake_llm, knowledge_service):
    return AnalysisService(
        store=store,
        github_service=github_service,
        question_generator=QuestionGenerator(fake_llm),
        architecture_writer=ArchitectureWriter(fake_llm),
        business_explainer=BusinessExplainer(fake_llm),
        knowledge_service=knowledge_service,
        config=AnalysisConfig(generate_architecture_docs=True, index_knowledge=True)
    )


@pytest.fixture
def qa_service(store, analysis_service, fake_llm):
    return QAService(
        store=store,
        analysis_service=analysis_service,
        question_generator=QuestionGenerator(fake_llm),
        qa_responder=QAResponder(fake_llm),
        documentation_writer=DocumentationWriter(fake_llm),
        chat_assistant=ChatAssistant(fake_llm),
        chat_qa_extractor=ChatQAExtractor(fake_llm)
    )
