"""
Vector Store - Stores and searches embedded documents.

SUPPORTED BACKENDS:
- ChromaDB (local, persistent)
- In-Memory (testing only)

Every document carries a ``repository_id`` in its metadata; searches and
deletes are scoped by metadata equality filters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class VectorStoreConfig:
    """Configuration for vector store."""
    backend: str = "chroma"  # chroma or memory
    collection_name: str = "documents"
    persist_directory: str = "./data/vector_db"


@dataclass
class SearchResult:
    """Result from vector similarity search."""
    id: str
    content: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class BaseVectorBackend(ABC):
    """Base class for vector store backends."""

    @abstractmethod
    async def upsert(
        self,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str],
        metadatas: List[Dict[str, Any]]
    ) -> None:
        """Insert or replace documents."""

    @abstractmethod
    async def search(
        self,
        embedding: List[float],
        top_k: int = 10,
        where: Optional[Dict[str, Any]] = None
    ) -> List[SearchResult]:
        """Search for similar embeddings."""

    @abstractmethod
    async def delete(self, ids: List[str]) -> None:
        """Delete documents by id."""

    @abstractmethod
    async def delete_where(self, where: Dict[str, Any]) -> None:
        """Delete documents whose metadata matches ``where``."""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored documents."""


class InMemoryBackend(BaseVectorBackend):
    """
    In-memory vector store for testing.

    Not recommended for production - no persistence.
    """

    def __init__(self):
        self._store: Dict[str, Dict[str, Any]] = {}

    async def upsert(
        self,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str],
        metadatas: List[Dict[str, Any]]
    ) -> None:
        for id, embedding, content, metadata in zip(ids, embeddings, contents, metadatas):
            self._store[id] = {
                "embedding": embedding,
                "content": content,
                "metadata": metadata
            }

    async def search(
        self,
        embedding: List[float],
        top_k: int = 10,
        where: Optional[Dict[str, Any]] = None
    ) -> List[SearchResult]:
        """Search using cosine similarity."""
        results = []

        for id, data in self._store.items():
            if where and not self._matches(data["metadata"], where):
                continue

            results.append(SearchResult(
                id=id,
                content=data["content"],
                score=self._cosine_similarity(embedding, data["embedding"]),
                metadata=data["metadata"]
            ))

        results.sort(key=lambda x: x.score, reverse=True)
        return results[:top_k]

    async def delete(self, ids: List[str]) -> None:
        for id in ids:
            self._store.pop(id, None)

    async def delete_where(self, where: Dict[str, Any]) -> None:
        for id in [id for id, data in self._store.items() if self._matches(data["metadata"], where)]:
            del self._store[id]

    async def count(self) -> int:
        return len(self._store)

    def _cosine_similarity(self, a: List[float], b: List[float]) -> float:
        dot_product = sum(x * y for x, y in zip(a, b))
        norm_a = sum(x * x for x in a) ** 0.5
        norm_b = sum(x * x for x in b) ** 0.5
        if norm_a == 0 or norm_b == 0:
            return 0.0
        return dot_product / (norm_a * norm_b)

    def _matches(self, metadata: Dict[str, Any], where: Dict[str, Any]) -> bool:
        return all(metadata.get(key) == value for key, value in where.items())


class ChromaBackend(BaseVectorBackend):
    """ChromaDB backend for local persistent storage."""

    def __init__(self, collection_name: str, persist_directory: str):
        self.collection_name = collection_name
        self.persist_directory = persist_directory
        self._client = None
        self._collection = None

    @property
    def collection(self):
        """Lazy initialization of ChromaDB collection."""
        if self._collection is None:
            import chromadb

            self._client = chromadb.PersistentClient(path=self.persist_directory)
            self._collection = self._client.get_or_create_collection(
                name=self.collection_name,
                metadata={"hnsw:space": "cosine"}
            )

        return self._collection

    @staticmethod
    def _where(where: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        # Chroma wants an explicit $and for more than one condition
        if not where or len(where) == 1:
            return where or None
        return {"$and": [{key: value} for key, value in where.items()]}

    async def upsert(
        self,
        ids: List[str],
        embeddings: List[List[float]],
        contents: List[str],
        metadatas: List[Dict[str, Any]]
    ) -> None:
        self.collection.upsert(
            ids=ids,
            embeddings=embeddings,
            documents=contents,
            metadatas=metadatas
        )

    async def search(
        self,
        embedding: List[float],
        top_k: int = 10,
        where: Optional[Dict[str, Any]] = None
    ) -> List[SearchResult]:
        results = self.collection.query(
            query_embeddings=[embedding],
            n_results=top_k,
            where=self._where(where)
        )

        search_results = []
        if results["ids"] and results["ids"][0]:
            for i, id in enumerate(results["ids"][0]):
                search_results.append(SearchResult(
                    id=id,
                    content=results["documents"][0][i] if results["documents"] else "",
                    score=1 - results["distances"][0][i] if results["distances"] else 0,
                    metadata=results["metadatas"][0][i] if results["metadatas"] else {}
                ))

        return search_results

    async def delete(self, ids: List[str]) -> None:
        self.collection.delete(ids=ids)

    async def delete_where(self, where: Dict[str, Any]) -> None:
        self.collection.delete(where=self._where(where))

    async def count(self) -> int:
        return self.collection.count()


class VectorStore:
    """
    Vector store service with pluggable backends.

    Usage:
        store = VectorStore(VectorStoreConfig(backend="memory"))
        await store.upsert([{"id": "qa-1", "embedding": vec, "content": "...",
                             "metadata": {"repository_id": "r1"}}])
        hits = await store.search(query_vec, top_k=5, where={"repository_id": "r1"})
    """

    def __init__(self, config: Optional[VectorStoreConfig] = None):
        self.config = config or VectorStoreConfig()
        self._backend = self._create_backend()

    def _create_backend(self) -> BaseVectorBackend:
        if self.config.backend == "memory":
            return InMemoryBackend()

        elif self.config.backend == "chroma":
            return ChromaBackend(
                collection_name=self.config.collection_name,
                persist_directory=self.config.persist_directory
            )

        else:
            raise ValueError(f"Unknown backend: {self.config.backend}")

    async def upsert(self, items: List[Dict[str, Any]]) -> None:
        """
        Insert or replace documents.

        Args:
            items: Dicts with id, embedding, content, metadata
        """
        if not items:
            return
        await self._backend.upsert(
            [item["id"] for item in items],
            [item["embedding"] for item in items],
            [item.get("content", "") for item in items],
            [item.get("metadata", {}) for item in items],
        )

    async def search(
        self,
        embedding: List[float],
        top_k: int = 10,
        where: Optional[Dict[str, Any]] = None
    ) -> List[SearchResult]:
        return await self._backend.search(embedding, top_k, where)

    async def delete(self, ids: List[str]) -> None:
        if ids:
            await self._backend.delete(ids)

    async def delete_where(self, where: Dict[str, Any]) -> None:
        await self._backend.delete_where(where)

    async def count(self) -> int:
        return await self._backend.count()
