"""Convert a tabular FAQ file into text passages.

Each row with a question and an answer becomes one passage:
``"Q: {question}\\nA: {answer}\\n"``. Rows with a blank question or answer
are dropped here so the passage store only ever holds non-empty text.
"""
import json
from pathlib import Path
from typing import List

import pandas as pd
import structlog

from faqrag.exceptions import InputUnavailable

logger = structlog.get_logger()

REQUIRED_COLS = ["questions", "answers"]


def load_faq(csv_path: Path, sep: str = ",") -> pd.DataFrame:
    """Read the FAQ file and validate its columns.

    Raises:
        InputUnavailable: If the file is missing, unreadable or lacks a required column
    """
    try:
        df = pd.read_csv(csv_path, sep=sep, dtype=str, keep_default_na=False)
    except FileNotFoundError as e:
        raise InputUnavailable(f"FAQ file not found: {csv_path}", path=csv_path) from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise InputUnavailable(f"Cannot parse FAQ file {csv_path}: {e}", path=csv_path) from e

    missing = [c for c in REQUIRED_COLS if c not in df.columns]
    if missing:
        raise InputUnavailable(
            f"Missing required columns in FAQ file: {missing}", path=csv_path
        )

    return df


def faq_to_passages(df: pd.DataFrame) -> List[str]:
    """Format each usable row as a Q/A passage, keeping file order."""
    passages: List[str] = []
    skipped = 0
    for _, row in df.iterrows():
        question = str(row["questions"])
        answer = str(row["answers"])
        if not question.strip() or not answer.strip():
            skipped += 1
            continue
        passages.append(f"Q: {question}\nA: {answer}\n")

    if skipped:
        logger.warning("faq_rows_skipped", skipped=skipped, reason="blank question or answer")

    return passages


def write_context(passages: List[str], context_path: Path) -> None:
    """Persist passages as a JSON array."""
    context_path.parent.mkdir(parents=True, exist_ok=True)
    with open(context_path, "w", encoding="utf-8") as f:
        json.dump(passages, f, ensure_ascii=False)

    logger.info("context_written", path=str(context_path), passages=len(passages))


def convert(csv_path: Path, context_path: Path, sep: str = ",") -> List[str]:
    """Read the FAQ file and write the context file.

    Returns:
        The passages that were written
    """
    df = load_faq(csv_path, sep=sep)
    passages = faq_to_passages(df)
    logger.info("faq_converted", rows=len(df), passages=len(passages), source=str(csv_path))
    write_context(passages, context_path)
    return passages
