"""Prompt assembly for FAQ answering."""
from typing import Sequence

# Downstream consumers match on this exact sentence
FALLBACK_ANSWER = "No idea!"

HEADER = (
    "Answer the question truthfully based on the given context. "
    f"If you do not find the answer within the text below, respond with '{FALLBACK_ANSWER}'.\""
    "\n\nContext:\n"
)


def assemble(header: str, passages: Sequence[str], query: str) -> str:
    """Join header, selected passages and the query into the final prompt."""
    return header + "".join(passages) + "\n\n Q: " + query + "\n A:"


def build_prompt(passages: Sequence[str], query: str) -> str:
    """Assemble a prompt with the default instruction header."""
    return assemble(HEADER, passages, query)
