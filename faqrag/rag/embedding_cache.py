"""Embedding cache for the passage store.

Handles:
- Embedding a single text through the API client
- Loading previously computed passage embeddings from a cache backend
- Rebuilding all passage embeddings with bounded concurrency
- Persisting the rebuilt cache (all-or-nothing)
"""
import asyncio
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

from faqrag import config
from faqrag.llm_client import OpenAIClient

logger = structlog.get_logger()


@dataclass(frozen=True)
class Embedding:
    """An embedding vector plus the token count spent to produce it."""

    vector: Tuple[float, ...]
    tokens: int = 0

    @property
    def dimension(self) -> int:
        return len(self.vector)

    def to_dict(self) -> Dict[str, Any]:
        return {"embedding": list(self.vector), "tokens": self.tokens}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Embedding":
        """Build from the persisted ``{embedding, tokens}`` shape.

        Raises:
            ValueError: If the entry does not have that shape
        """
        if not isinstance(data, dict) or not isinstance(data.get("embedding"), list):
            raise ValueError("entry must be an object with an 'embedding' array")
        vector = tuple(float(x) for x in data["embedding"])
        return cls(vector=vector, tokens=int(data.get("tokens", 0)))


class CacheBackend(ABC):
    """Storage for the index-aligned list of passage embeddings."""

    @abstractmethod
    def load(self) -> Optional[List[Embedding]]:
        """Return the cached embeddings, or None when nothing usable is stored."""

    @abstractmethod
    def save(self, embeddings: List[Embedding]) -> None:
        """Replace the cached embeddings."""


class JsonFileCache(CacheBackend):
    """Cache stored as a JSON array of ``{"embedding": [...], "tokens": n}``."""

    def __init__(self, path: Path = None):
        self.path = Path(path or config.EMBEDDINGS_PATH)

    def load(self) -> Optional[List[Embedding]]:
        if not self.path.exists():
            logger.info("embedding_cache_missing", path=str(self.path))
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("cache root must be a JSON array")
            return [Embedding.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError) as e:
            logger.warning(
                "embedding_cache_unreadable",
                path=str(self.path),
                error=str(e),
            )
            return None

    def save(self, embeddings: List[Embedding]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Temp file + rename: the cache file is either the old or the new list
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([e.to_dict() for e in embeddings], f)
        os.replace(tmp_path, self.path)

        logger.info("embedding_cache_saved", path=str(self.path), count=len(embeddings))


class MemoryCache(CacheBackend):
    """In-process cache backend."""

    def __init__(self, embeddings: Optional[List[Embedding]] = None):
        self.embeddings = list(embeddings) if embeddings is not None else None

    def load(self) -> Optional[List[Embedding]]:
        return list(self.embeddings) if self.embeddings is not None else None

    def save(self, embeddings: List[Embedding]) -> None:
        self.embeddings = list(embeddings)


class Embedder:
    """Turns text into an Embedding through the embeddings API."""

    def __init__(self, client: OpenAIClient = None, model: str = None):
        self.client = client or OpenAIClient()
        self.model = model or config.EMBEDDING_MODEL

    async def embed(self, text: str) -> Embedding:
        response = await self.client.embeddings(text, model=self.model)
        return Embedding(
            vector=tuple(float(x) for x in response["embedding"]),
            tokens=int(response.get("tokens", 0)),
        )


class EmbeddingCache:
    """Index-aligned passage embeddings, loaded from a backend or rebuilt."""

    def __init__(
        self,
        embedder: Embedder,
        backend: CacheBackend,
        concurrency: int = None,
    ):
        """Initialize the embedding cache.

        Args:
            embedder: Embedder used when the cache has to be rebuilt
            backend: Where embeddings are loaded from and saved to
            concurrency: Maximum in-flight embedding calls (default from config)
        """
        self.embedder = embedder
        self.backend = backend
        self.concurrency = max(1, concurrency or config.EMBED_CONCURRENCY)

    async def get_or_build(self, passages: Sequence[str]) -> List[Embedding]:
        """Return one embedding per passage, in passage order.

        A cached list is reused verbatim when its length matches the passage
        count. Content is not compared, so edits that keep the passage count
        unchanged are not detected.

        Raises:
            ServiceFailure: If any embedding call fails (nothing is saved)
        """
        cached = self.backend.load()
        if cached is not None and len(cached) == len(passages):
            logger.info("embedding_cache_hit", count=len(cached))
            return cached

        if cached is not None:
            logger.warning(
                "embedding_cache_stale",
                cached=len(cached),
                passages=len(passages),
            )

        embeddings = await self.build(passages)
        self.backend.save(embeddings)
        return embeddings

    async def build(self, passages: Sequence[str]) -> List[Embedding]:
        """Embed every passage with at most ``concurrency`` calls in flight."""
        logger.info(
            "embedding_cache_build_started",
            passages=len(passages),
            concurrency=self.concurrency,
        )

        semaphore = asyncio.Semaphore(self.concurrency)
        results: List[Optional[Embedding]] = [None] * len(passages)

        async def embed_one(index: int, text: str) -> None:
            async with semaphore:
                results[index] = await self.embedder.embed(text)

        tasks = [
            asyncio.ensure_future(embed_one(i, text))
            for i, text in enumerate(passages)
        ]
        try:
            await asyncio.gather(*tasks)
        except Exception as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error(
                "embedding_cache_build_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info(
            "embedding_cache_build_completed",
            count=len(results),
            total_tokens=sum(e.tokens for e in results),
        )

        return results
