"""
Knowledge Service - Semantic search over a repository's generated documentation.

Q&A items, function analyses and architecture sections are embedded and
kept in the vector store, tagged with their repository. A search is always
scoped to one repository.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from docubuddy.models.schemas import ArchitectureDoc, FunctionAnalysis, KnowledgeHit, QAItem
from docubuddy.services.embedding_service import EmbeddingService
from docubuddy.services.vector_store import VectorStore

logger = logging.getLogger(__name__)


def qa_document(item: QAItem) -> Dict[str, Any]:
    content = f"Q: {item.question}"
    if item.answer:
        content += f"\n\nA: {item.answer}"
    return {
        "id": f"qa:{item.id}",
        "content": content,
        "metadata": {
            "repository_id": item.repository_id,
            "kind": "qa",
            "source_id": item.id,
            "view_mode": item.view_mode.value if item.view_mode else "",
            "function_name": item.function_name,
        },
    }


def function_document(function: FunctionAnalysis) -> Dict[str, Any]:
    parts = [f"{function.function_name} ({function.file_path})"]
    if function.function_signature:
        parts.append(function.function_signature)
    parts.append(function.description)
    return {
        "id": f"function:{function.id}",
        "content": "\n".join(parts),
        "metadata": {
            "repository_id": function.repository_id,
            "kind": "function",
            "source_id": function.id,
            "file_path": function.file_path,
            "function_name": function.function_name,
        },
    }


def architecture_document(doc: ArchitectureDoc) -> Dict[str, Any]:
    return {
        "id": f"architecture:{doc.id}",
        "content": f"{doc.title}\n\n{doc.content}",
        "metadata": {
            "repository_id": doc.repository_id,
            "kind": "architecture",
            "source_id": doc.id,
            "section_type": doc.section_type,
        },
    }


class KnowledgeService:
    """
    Indexes and searches generated documentation.

    Usage:
        knowledge = KnowledgeService(embedding_service, vector_store)
        await knowledge.index(repo_id, qa_items=items)
        hits = await knowledge.search(repo_id, "how are tests run?")
    """

    def __init__(self, embedding_service: EmbeddingService, vector_store: VectorStore):
        self.embedding_service = embedding_service
        self.vector_store = vector_store

    async def index(
        self,
        repository_id: str,
        qa_items: Iterable[QAItem] = (),
        functions: Iterable[FunctionAnalysis] = (),
        architecture_docs: Iterable[ArchitectureDoc] = ()
    ) -> int:
        """
        Embed and upsert documents for one repository.

        Returns:
            Number of documents written
        """
        documents = (
            [qa_document(item) for item in qa_items]
            + [function_document(function) for function in functions]
            + [architecture_document(doc) for doc in architecture_docs]
        )
        if not documents:
            return 0

        embeddings = await self.embedding_service.embed_many([doc["content"] for doc in documents])
        for doc, embedding in zip(documents, embeddings):
            doc["embedding"] = embedding

        await self.vector_store.upsert(documents)
        logger.info(f"Indexed {len(documents)} documents for repository {repository_id}")
        return len(documents)

    async def search(
        self,
        repository_id: str,
        query: str,
        top_k: int = 5,
        kind: Optional[str] = None
    ) -> List[KnowledgeHit]:
        """Return the ``top_k`` documents of ``repository_id`` closest to ``query``."""
        where: Dict[str, Any] = {"repository_id": repository_id}
        if kind:
            where["kind"] = kind

        embedding = await self.embedding_service.embed(query)
        results = await self.vector_store.search(embedding, top_k=top_k, where=where)

        return [
            KnowledgeHit(
                id=result.id,
                content=result.content,
                score=round(result.score, 4),
                kind=result.metadata.get("kind", ""),
                metadata=result.metadata,
            )
            for result in results
        ]

    async def forget(
        self,
        repository_id: str,
        kind: Optional[str] = None,
        source_ids: Optional[Iterable[str]] = None
    ) -> None:
        """
        Drop indexed documents of a repository.

        Args:
            repository_id: Repository whose documents go
            kind: Only documents of this kind ("qa", "function", "architecture")
            source_ids: Only these rows of ``kind``
        """
        if source_ids is not None:
            if not kind:
                raise ValueError("source_ids needs a kind")
            await self.vector_store.delete([f"{kind}:{source_id}" for source_id in source_ids])
            return

        where: Dict[str, Any] = {"repository_id": repository_id}
        if kind:
            where["kind"] = kind
        await self.vector_store.delete_where(where)
