"""
Embedding Service - Local vector embeddings using Sentence Transformers.

Turns generated answers, function descriptions and architecture notes into
dense vectors for the knowledge index. Runs locally; no API key needed.
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingConfig:
    """Configuration for embedding service."""
    model: str = "all-MiniLM-L6-v2"
    dimension: int = 384  # all-MiniLM-L6-v2 produces 384-dim vectors
    batch_size: int = 64
    cache_enabled: bool = True
    device: str = "cpu"  # "cpu", "cuda", or "mps"


class LocalEmbeddingProvider:
    """Sentence Transformers model, loaded on first use and reused."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", device: str = "cpu"):
        self.model_name = model_name
        self.device = device
        self._model = None

    @property
    def model(self):
        """Lazy load the model on first use."""
        if self._model is None:
            logger.info(f"Loading embedding model: {self.model_name}")
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name, device=self.device)
            logger.info(f"Model loaded successfully on device: {self.device}")
        return self._model

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        # encode() is CPU-bound; keep it off the event loop
        embeddings = await asyncio.to_thread(self.model.encode, texts, convert_to_numpy=True)
        return embeddings.tolist()


class EmbeddingService:
    """
    Embedding service with caching and batching.

    Usage:
        service = EmbeddingService(EmbeddingConfig())
        vector = await service.embed("How do I run the tests?")
        vectors = await service.embed_many(["answer one", "answer two"])
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        self.config = config or EmbeddingConfig()
        self._provider = LocalEmbeddingProvider(
            model_name=self.config.model,
            device=self.config.device
        )
        self._cache: Optional[Dict[str, List[float]]] = {} if self.config.cache_enabled else None

    async def embed(self, text: str) -> List[float]:
        """Embed a single text."""
        return (await self.embed_many([text]))[0]

    async def embed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed many texts, serving repeats from the cache.

        Returns:
            One vector per input, in input order
        """
        results: Dict[int, List[float]] = {}
        pending: List[int] = []

        for index, text in enumerate(texts):
            if self._cache is not None:
                cached = self._cache.get(self._get_cache_key(text))
                if cached is not None:
                    results[index] = cached
                    continue
            pending.append(index)

        for batch_start in range(0, len(pending), self.config.batch_size):
            batch_indices = pending[batch_start:batch_start + self.config.batch_size]
            batch = [texts[i] for i in batch_indices]
            embeddings = await self._provider.embed_batch(batch)

            for index, text, embedding in zip(batch_indices, batch, embeddings):
                results[index] = embedding
                if self._cache is not None:
                    self._cache[self._get_cache_key(text)] = embedding

        return [results[i] for i in range(len(texts))]

    def _get_cache_key(self, text: str) -> str:
        return hashlib.md5(text.encode()).hexdigest()

    @property
    def dimension(self) -> int:
        return self.config.dimension
