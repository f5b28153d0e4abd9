"""Question answering over the FAQ passage store.

Orchestrates:
- Passage embeddings (cached or rebuilt)
- Query embedding
- Similarity ranking
- Budgeted section selection
- Prompt assembly
- Completion
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import structlog

from faqrag import config
from faqrag.llm_client import OpenAIClient
from faqrag.rag.completion import CompletionInvoker
from faqrag.rag.embedding_cache import Embedder, Embedding, EmbeddingCache, JsonFileCache
from faqrag.rag.passages import load_passages
from faqrag.rag.prompt import HEADER, assemble
from faqrag.rag.ranker import Ranking, rank
from faqrag.rag.selector import LengthFn, Selection, get_length_fn, select

logger = structlog.get_logger()


@dataclass(frozen=True)
class PreparedPrompt:
    """Everything computed for a query before the completion call."""

    query: str
    ranking: Ranking
    selection: Selection
    prompt: str


@dataclass(frozen=True)
class Answer:
    """A completed query."""

    prepared: PreparedPrompt
    text: str

    @property
    def prompt(self) -> str:
        return self.prepared.prompt


class QAPipeline:
    """Retrieval-augmented question answering over a fixed passage store."""

    def __init__(
        self,
        passages: Sequence[str],
        embedding_cache: EmbeddingCache,
        invoker: CompletionInvoker,
        budget: int = None,
        length_fn: LengthFn = None,
        header: str = HEADER,
    ):
        """Initialize the pipeline.

        Args:
            passages: Ordered passage store
            embedding_cache: Source of passage embeddings; its embedder also
                embeds queries
            invoker: Completion invoker for the final prompt
            budget: Maximum context length (default config.MAX_SECTION_LEN)
            length_fn: Length measure for the budget (default from config.LENGTH_UNIT)
            header: Instruction header placed before the context
        """
        self.passages = list(passages)
        self.embedding_cache = embedding_cache
        self.invoker = invoker
        self.budget = config.MAX_SECTION_LEN if budget is None else budget
        self.length_fn = length_fn or get_length_fn()
        self.header = header

        self._passage_embeddings: Optional[List[Embedding]] = None

    @classmethod
    def from_paths(
        cls,
        context_path: Path = None,
        embeddings_path: Path = None,
        client: OpenAIClient = None,
    ) -> "QAPipeline":
        """Build a pipeline from the context and embedding cache files.

        Raises:
            InputUnavailable: If the context file is missing or corrupt
        """
        passages = load_passages(Path(context_path or config.CONTEXT_PATH))
        client = client or OpenAIClient()
        cache = EmbeddingCache(
            embedder=Embedder(client),
            backend=JsonFileCache(embeddings_path or config.EMBEDDINGS_PATH),
        )
        return cls(passages, cache, CompletionInvoker(client))

    async def passage_embeddings(self) -> List[Embedding]:
        if self._passage_embeddings is None:
            self._passage_embeddings = await self.embedding_cache.get_or_build(self.passages)
        return self._passage_embeddings

    async def prepare(self, query: str) -> PreparedPrompt:
        """Rank, select and assemble the prompt for ``query``.

        Raises:
            ServiceFailure: If an embedding call fails
            DimensionMismatch: If cached and query embeddings differ in length
        """
        logger.info("query_started", query_length=len(query), passages=len(self.passages))

        passage_embeddings = await self.passage_embeddings()
        query_embedding = await self.embedding_cache.embedder.embed(query)

        ranking = rank(query_embedding, passage_embeddings)
        selection = select(ranking, self.passages, self.budget, self.length_fn)
        prompt = assemble(self.header, selection.passages, query)

        if not selection.passages:
            logger.warning("empty_context", budget=self.budget)

        return PreparedPrompt(query=query, ranking=ranking, selection=selection, prompt=prompt)

    async def complete(self, prepared: PreparedPrompt) -> Answer:
        text = await self.invoker.complete(prepared.prompt)
        logger.info(
            "query_answered",
            context_passages=len(prepared.selection),
            answer_length=len(text),
        )
        return Answer(prepared=prepared, text=text)

    async def answer(self, query: str) -> Answer:
        """Answer ``query`` end to end."""
        prepared = await self.prepare(query)
        return await self.complete(prepared)
