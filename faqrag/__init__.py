"""FAQ question answering with retrieval-augmented prompts."""

__version__ = "0.1.0"
