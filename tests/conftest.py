"""Pytest configuration and fixtures."""
import pytest

from fakes import COVID_PASSAGES, COVID_VECTORS, FakeClient, make_pipeline
from faqrag.rag.pipeline import QAPipeline


@pytest.fixture
def covid_client() -> FakeClient:
    """Client returning fixed 2-d vectors for the COVID passages and query."""
    return FakeClient(vectors=COVID_VECTORS)


@pytest.fixture
def covid_pipeline(covid_client: FakeClient) -> QAPipeline:
    return make_pipeline(COVID_PASSAGES, covid_client)
