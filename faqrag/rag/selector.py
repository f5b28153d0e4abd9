"""Budgeted selection of ranked passages for the prompt context.

Length is measured either in UTF-8 bytes (default, what MAX_SECTION_LEN was
tuned against) or in tiktoken tokens. The same measure is applied to the
passages and to the separator overhead.
"""
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Sequence, Tuple

import structlog
import tiktoken

from faqrag import config
from faqrag.rag.ranker import Ranking

logger = structlog.get_logger()

SEPARATOR = "\n* "

LengthFn = Callable[[str], int]


def byte_length(text: str) -> int:
    """Length of ``text`` in UTF-8 bytes."""
    return len(text.encode("utf-8"))


class TokenLength:
    """Length of a text in tokens of a tiktoken encoding."""

    def __init__(self, encoding_name: str = None):
        self.encoding_name = encoding_name or config.TOKEN_ENCODING
        self.encoding = tiktoken.get_encoding(self.encoding_name)

    def __call__(self, text: str) -> int:
        # FAQ text is data, so special-token markers are counted as plain text
        return len(self.encoding.encode(text, disallowed_special=()))


def get_length_fn(unit: str = None, encoding_name: str = None) -> LengthFn:
    """Return the length measure for ``unit`` ("bytes" or "tokens")."""
    unit = (unit or config.LENGTH_UNIT).lower()
    if unit == "bytes":
        return byte_length
    if unit == "tokens":
        return TokenLength(encoding_name)
    raise ValueError(f"Unknown length unit: {unit!r} (expected 'bytes' or 'tokens')")


@dataclass(frozen=True)
class Selection:
    """Passages chosen for the prompt, in rank order."""

    passages: Tuple[str, ...] = ()
    indexes: Tuple[int, ...] = ()
    length: int = 0

    def __len__(self) -> int:
        return len(self.passages)


def select(
    ranking: Ranking,
    passages: Sequence[str],
    budget: int = None,
    length_fn: LengthFn = byte_length,
) -> Selection:
    """Greedily take ranked passages while the total stays under ``budget``.

    Each passage costs its length plus the separator length. A passage that
    would bring the total to ``budget`` or beyond is skipped, and later
    (possibly shorter) passages are still considered.

    Returns:
        Selection with accepted passages in rank order; empty if none fit
    """
    budget = config.MAX_SECTION_LEN if budget is None else budget
    separator_len = length_fn(SEPARATOR)

    def take(chosen: Selection, ranked: Tuple[float, int]) -> Selection:
        _, index = ranked
        cost = length_fn(passages[index]) + separator_len
        if chosen.length + cost < budget:
            return Selection(
                passages=chosen.passages + (passages[index],),
                indexes=chosen.indexes + (index,),
                length=chosen.length + cost,
            )
        return chosen

    selection = reduce(take, ranking, Selection())

    logger.info(
        "sections_selected",
        selected=len(selection),
        candidates=len(ranking),
        length=selection.length,
        budget=budget,
        indexes=list(selection.indexes),
    )

    return selection
