"""
Dependencies - Dependency injection for services and components.

Provides singleton instances of services. Routes depend on the getters
below, so tests can swap any of them through ``app.dependency_overrides``.
The MCP stdio server uses the same getters.
"""

from docubuddy.core.config import get_settings
from docubuddy.agents import (
    ArchitectureWriter,
    BusinessExplainer,
    ChatAssistant,
    ChatQAExtractor,
    DocumentationWriter,
    QAResponder,
    QuestionGenerator,
)
from docubuddy.services.analysis_service import AnalysisConfig, AnalysisService
from docubuddy.services.embedding_service import EmbeddingConfig, EmbeddingService
from docubuddy.services.github_service import GitHubService, GitHubServiceConfig
from docubuddy.services.knowledge_service import KnowledgeService
from docubuddy.services.llm_service import LLMClient, LLMConfig
from docubuddy.services.qa_service import QAService
from docubuddy.services.store import Store, StoreConfig
from docubuddy.services.vector_store import VectorStore, VectorStoreConfig


# Singleton instances
_store = None
_github_service = None
_llm_client = None
_embedding_service = None
_vector_store = None
_knowledge_service = None
_analysis_service = None
_qa_service = None


def get_store() -> Store:
    """Get the store, creating tables on first use."""
    global _store
    if _store is None:
        settings = get_settings()
        _store = Store(StoreConfig(database_path=settings.database_path))
        _store.initialize()
    return _store


def get_github_service() -> GitHubService:
    """Get GitHub service instance."""
    global _github_service
    if _github_service is None:
        settings = get_settings()
        config = GitHubServiceConfig(
            api_url=settings.github_api_url,
            token=settings.github_token,
            timeout_seconds=settings.github_timeout_seconds,
            user_agent=settings.github_user_agent
        )
        _github_service = GitHubService(config=config)
    return _github_service


def get_llm_client() -> LLMClient:
    """Get LLM client; calls fail with 503 until an API key is configured."""
    global _llm_client
    if _llm_client is None:
        settings = get_settings()
        config = LLMConfig(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            default_model=settings.question_model,
            timeout_seconds=settings.llm_timeout_seconds
        )
        _llm_client = LLMClient(config=config)
    return _llm_client


def get_embedding_service() -> EmbeddingService:
    """Get embedding service instance (fully local, no API keys)."""
    global _embedding_service
    if _embedding_service is None:
        settings = get_settings()
        config = EmbeddingConfig(
            model=settings.embedding_model,
            dimension=settings.embedding_dimension,
            device=settings.embedding_device
        )
        _embedding_service = EmbeddingService(config=config)
    return _embedding_service


def get_vector_store() -> VectorStore:
    """Get vector store instance."""
    global _vector_store
    if _vector_store is None:
        settings = get_settings()
        config = VectorStoreConfig(
            backend=settings.vector_store_backend,
            collection_name=settings.vector_store_collection,
            persist_directory=settings.vector_store_path
        )
        _vector_store = VectorStore(config=config)
    return _vector_store


def get_knowledge_service() -> KnowledgeService:
    global _knowledge_service
    if _knowledge_service is None:
        _knowledge_service = KnowledgeService(
            embedding_service=get_embedding_service(),
            vector_store=get_vector_store()
        )
    return _knowledge_service


def get_analysis_service() -> AnalysisService:
    """Get analysis pipeline instance."""
    global _analysis_service
    if _analysis_service is None:
        settings = get_settings()
        llm = get_llm_client()
        _analysis_service = AnalysisService(
            store=get_store(),
            github_service=get_github_service(),
            question_generator=QuestionGenerator(llm, model=settings.question_model),
            architecture_writer=ArchitectureWriter(llm, model=settings.question_model),
            business_explainer=BusinessExplainer(llm, model=settings.question_model),
            knowledge_service=get_knowledge_service(),
            config=AnalysisConfig(
                generate_architecture_docs=settings.generate_architecture_docs,
                index_knowledge=settings.index_knowledge
            )
        )
    return _analysis_service


def get_qa_service() -> QAService:
    """Get Q&A / chat service instance."""
    global _qa_service
    if _qa_service is None:
        settings = get_settings()
        llm = get_llm_client()
        _qa_service = QAService(
            store=get_store(),
            analysis_service=get_analysis_service(),
            question_generator=QuestionGenerator(llm, model=settings.question_model),
            qa_responder=QAResponder(llm, model=settings.answer_model, analogy_model=settings.question_model),
            documentation_writer=DocumentationWriter(llm, model=settings.documentation_model),
            chat_assistant=ChatAssistant(llm, model=settings.chat_model),
            chat_qa_extractor=ChatQAExtractor(llm, model=settings.question_model)
        )
    return _qa_service
