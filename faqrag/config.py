"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
FAQ_CSV_PATH = Path(os.getenv("FAQ_CSV_PATH", str(DATA_DIR / "covid_faq.csv")))
CONTEXT_PATH = Path(os.getenv("CONTEXT_PATH", str(DATA_DIR / "context.json")))
EMBEDDINGS_PATH = Path(os.getenv("EMBEDDINGS_PATH", str(DATA_DIR / "embeddings.json")))

# OpenAI-compatible API
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_ORGANIZATION = os.getenv("OPENAI_ORGANIZATION")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-ada-002")
COMPLETIONS_MODEL = os.getenv("COMPLETIONS_MODEL", "text-davinci-003")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "60.0"))

# Generation parameters (deterministic answers)
COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "1000"))
COMPLETION_TEMPERATURE = float(os.getenv("COMPLETION_TEMPERATURE", "0.0"))

# Retrieval parameters
# The 1000 budget was tuned against UTF-8 byte lengths; switch LENGTH_UNIT to
# "tokens" only together with a budget tuned for TOKEN_ENCODING.
MAX_SECTION_LEN = int(os.getenv("MAX_SECTION_LEN", "1000"))
LENGTH_UNIT = os.getenv("LENGTH_UNIT", "bytes")            # bytes | tokens
TOKEN_ENCODING = os.getenv("TOKEN_ENCODING", "gpt2")
EMBED_CONCURRENCY = int(os.getenv("EMBED_CONCURRENCY", "8"))

# CLI
DEFAULT_QUERY = os.getenv("DEFAULT_QUERY", "Do I have a question?")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
