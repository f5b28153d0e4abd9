"""Passage store: the ordered FAQ passages searched by the pipeline."""
import json
from pathlib import Path
from typing import List

import structlog

from faqrag.exceptions import InputUnavailable

logger = structlog.get_logger()


def load_passages(context_path: Path) -> List[str]:
    """Load the context file written by the converter.

    Passage identity is its position in the returned list.

    Raises:
        InputUnavailable: If the file is missing, is not valid JSON, or is
            not a list of non-empty strings
    """
    try:
        with open(context_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise InputUnavailable(f"Context file not found: {context_path}", path=context_path) from e
    except (OSError, ValueError) as e:
        raise InputUnavailable(f"Error reading context file {context_path}: {e}", path=context_path) from e

    if not isinstance(data, list):
        raise InputUnavailable(
            f"Context file {context_path} must hold a JSON array", path=context_path
        )

    for i, item in enumerate(data):
        if not isinstance(item, str) or not item.strip():
            raise InputUnavailable(
                f"Context file {context_path} has an empty or non-text passage at index {i}",
                path=context_path,
            )

    logger.info("passages_loaded", path=str(context_path), count=len(data))

    return data
