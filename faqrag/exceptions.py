"""Exceptions raised by the FAQ question-answering pipeline."""
from pathlib import Path
from typing import Optional, Union


class FaqRagError(Exception):
    """Base exception for all pipeline errors."""


class InputUnavailable(FaqRagError):
    """A required input file is missing or cannot be parsed.

    Raised when:
    - The context file does not exist or is not valid JSON
    - The context file is not a list of non-empty strings
    - The FAQ CSV lacks the required columns
    """

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = str(path) if path is not None else None


class ServiceFailure(FaqRagError):
    """An embedding or completion request failed.

    Raised when:
    - The API is unreachable or the request times out
    - The API returns an error status
    - The response payload is missing the expected fields
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class DimensionMismatch(FaqRagError):
    """A passage embedding does not match the query embedding's length.

    Usually means the embedding cache was produced by a different model.
    Delete the cache file to rebuild it.
    """

    def __init__(self, index: int, expected: int, actual: int):
        super().__init__(
            f"Embedding dimension mismatch at passage {index}: expected "
            f"{expected}, got {actual}. The embedding cache is likely corrupted "
            f"or stale; delete it to rebuild."
        )
        self.index = index
        self.expected = expected
        self.actual = actual
