"""Similarity ranking of passages against a query embedding."""
from typing import List, Sequence, Tuple

import numpy as np
import structlog

from faqrag.exceptions import DimensionMismatch
from faqrag.rag.embedding_cache import Embedding

logger = structlog.get_logger()

Ranking = List[Tuple[float, int]]


def vector_similarity(x: Sequence[float], y: Sequence[float]) -> float:
    """Dot product of two equal-length vectors.

    Not normalized: for unit-length embeddings (such as OpenAI's) this equals
    cosine similarity, for others it does not.
    """
    return float(np.dot(np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)))


def rank(query_embedding: Embedding, passage_embeddings: Sequence[Embedding]) -> Ranking:
    """Rank every passage by similarity to the query, best first.

    Returns:
        ``(score, passage_index)`` pairs sorted by descending score; equal
        scores keep passage order

    Raises:
        DimensionMismatch: If a passage vector's length differs from the query's
    """
    expected = query_embedding.dimension
    for index, embedding in enumerate(passage_embeddings):
        if embedding.dimension != expected:
            logger.error(
                "embedding_dimension_mismatch",
                index=index,
                expected=expected,
                actual=embedding.dimension,
            )
            raise DimensionMismatch(index, expected, embedding.dimension)

    if not passage_embeddings:
        return []

    matrix = np.array([e.vector for e in passage_embeddings], dtype=np.float64)
    query = np.asarray(query_embedding.vector, dtype=np.float64)
    scores = matrix @ query

    order = np.argsort(-scores, kind="stable")
    ranking = [(float(scores[i]), int(i)) for i in order]

    logger.debug(
        "passages_ranked",
        count=len(ranking),
        top_index=ranking[0][1],
        top_score=ranking[0][0],
    )

    return ranking
