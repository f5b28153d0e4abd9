"""Unit tests for the end-to-end question answering pipeline."""
import asyncio
import json

import pytest

from fakes import COVID_PASSAGES, COVID_VECTORS, FakeClient, make_pipeline
from faqrag.exceptions import DimensionMismatch, InputUnavailable, ServiceFailure
from faqrag.rag.embedding_cache import Embedding, MemoryCache
from faqrag.rag.pipeline import QAPipeline
from faqrag.rag.prompt import FALLBACK_ANSWER, HEADER


class TestCovidExample:
    """The two-passage example: the matching passage ranks and is selected first."""

    def test_ranking_and_selection(self, covid_pipeline):
        prepared = asyncio.run(covid_pipeline.prepare("What is COVID?"))

        assert [index for _, index in prepared.ranking] == [0, 1]
        assert prepared.ranking[0][0] == pytest.approx(0.9)
        assert prepared.ranking[1][0] == pytest.approx(0.2)
        assert prepared.selection.indexes == (0, 1)

    def test_prompt(self, covid_pipeline):
        prepared = asyncio.run(covid_pipeline.prepare("What is COVID?"))

        assert prepared.prompt == (
            HEADER + COVID_PASSAGES[0] + COVID_PASSAGES[1] + "\n\n Q: What is COVID?\n A:"
        )

    def test_answer_uses_fixed_parameters(self, covid_pipeline, covid_client):
        answer = asyncio.run(covid_pipeline.answer("What is COVID?"))

        assert answer.text == "A virus."
        assert len(covid_client.completion_calls) == 1
        call = covid_client.completion_calls[0]
        assert call["prompt"] == answer.prompt
        assert call["temperature"] == 0
        assert call["max_tokens"] == 1000

    def test_prompt_is_deterministic(self):
        prompts = []
        for _ in range(2):
            pipeline = make_pipeline(COVID_PASSAGES, FakeClient(vectors=COVID_VECTORS))
            prompts.append(asyncio.run(pipeline.prepare("What is COVID?")).prompt)

        assert prompts[0] == prompts[1]


def test_fallback_with_empty_context():
    """Test a budget below every passage length leaves the context empty."""
    client = FakeClient(vectors=COVID_VECTORS, answer=FALLBACK_ANSWER)
    pipeline = make_pipeline(COVID_PASSAGES, client, budget=10)

    answer = asyncio.run(pipeline.answer("What is COVID?"))

    assert answer.prepared.selection.passages == ()
    assert answer.prompt == HEADER + "\n\n Q: What is COVID?\n A:"
    assert answer.text == FALLBACK_ANSWER


def test_pipeline_respects_existing_cache():
    """Test two queries against a populated cache only embed the queries."""
    client = FakeClient(vectors=COVID_VECTORS)
    backend = MemoryCache([Embedding((0.9, 0.1), 5), Embedding((0.2, 0.8), 6)])

    for _ in range(2):
        asyncio.run(make_pipeline(COVID_PASSAGES, client, backend=backend).answer("What is COVID?"))

    assert client.embedding_calls == ["What is COVID?", "What is COVID?"]


def test_passage_embeddings_built_once_per_pipeline():
    client = FakeClient(vectors=COVID_VECTORS)
    pipeline = make_pipeline(COVID_PASSAGES, client)

    asyncio.run(pipeline.prepare("What is COVID?"))
    asyncio.run(pipeline.prepare("What is COVID?"))

    assert client.embedding_calls.count(COVID_PASSAGES[0]) == 1


def test_stale_cache_dimension_mismatch():
    """Test a cache from a different model is reported, not silently ranked."""
    backend = MemoryCache([Embedding((0.1, 0.2, 0.3), 1), Embedding((0.4, 0.5, 0.6), 1)])
    pipeline = make_pipeline(COVID_PASSAGES, FakeClient(vectors=COVID_VECTORS), backend=backend)

    with pytest.raises(DimensionMismatch):
        asyncio.run(pipeline.prepare("What is COVID?"))


def test_service_failure_aborts_before_completion():
    client = FakeClient(vectors=COVID_VECTORS, fail_on="What is COVID?")
    pipeline = make_pipeline(COVID_PASSAGES, client)

    with pytest.raises(ServiceFailure):
        asyncio.run(pipeline.answer("What is COVID?"))

    assert client.completion_calls == []


class TestFromPaths:
    """Tests for building a pipeline from files."""

    def test_builds_and_persists_cache(self, tmp_path):
        context_path = tmp_path / "context.json"
        embeddings_path = tmp_path / "embeddings.json"
        context_path.write_text(json.dumps(COVID_PASSAGES))
        client = FakeClient(vectors=COVID_VECTORS)

        pipeline = QAPipeline.from_paths(context_path, embeddings_path, client=client)
        asyncio.run(pipeline.answer("What is COVID?"))

        saved = json.loads(embeddings_path.read_text())
        assert saved == [
            {"embedding": [0.9, 0.1], "tokens": 7},
            {"embedding": [0.2, 0.8], "tokens": 8},
        ]

    def test_missing_context(self, tmp_path):
        with pytest.raises(InputUnavailable):
            QAPipeline.from_paths(tmp_path / "context.json", tmp_path / "embeddings.json")
