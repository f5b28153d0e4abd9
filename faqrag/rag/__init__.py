"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- FAQ CSV to passage conversion
- Passage store loading
- Embedding generation and caching
- Similarity ranking
- Budgeted context selection
- Prompt assembly and completion
"""
