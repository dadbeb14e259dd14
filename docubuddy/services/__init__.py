"""
Services Layer for Docu Buddy
=============================

Services handle persistence and external integrations:

- GitHubService: Repository metadata and file contents
- LLMClient: Chat completions (OpenAI-compatible)
- Store: sqlite persistence for every generated row
- EmbeddingService / VectorStore / KnowledgeService: semantic search
- AnalysisService (analysis_service): submission and background pipeline
- QAService (qa_service): questions, answers, proposals and chat

DEPENDENCY FLOW:
----------------
    GitHubService ──┐
    Store ──────────┼──► AnalysisService ──► QAService
    Agents ─────────┤
    KnowledgeService┘

AnalysisService and QAService import the agents, which import this package,
so they are not re-exported here.
"""

from docubuddy.services.github_service import GitHubService
from docubuddy.services.llm_service import LLMClient
from docubuddy.services.store import Store
from docubuddy.services.embedding_service import EmbeddingService
from docubuddy.services.vector_store import VectorStore
from docubuddy.services.knowledge_service import KnowledgeService

__all__ = [
    "GitHubService",
    "LLMClient",
    "Store",
    "EmbeddingService",
    "VectorStore",
    "KnowledgeService",
]
