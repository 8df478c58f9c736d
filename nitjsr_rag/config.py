import os
from pathlib import Path

from .exceptions import ConfigurationError

# Where run_crawl writes its snapshots
SCRAPED_DATA_DIR = Path(os.getenv("SCRAPED_DATA_DIR", "scraped_data"))

# Qdrant connection config
QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY") or None
QDRANT_COLLECTION = os.getenv("QDRANT_COLLECTION", "nitjsr_chunks")
QDRANT_TIMEOUT = int(os.getenv("QDRANT_TIMEOUT", 30))

# Embedding model settings
EMBEDDING_MODEL_NAME = os.getenv("EMBEDDING_MODEL_NAME", "intfloat/multilingual-e5-base")
EMBEDDING_DIM = int(os.getenv("EMBEDDING_DIM", 768))
EMBEDDING_DEVICE = os.getenv("EMBEDDING_DEVICE", "auto")  # 'auto', 'cuda', 'mps' or 'cpu'

# Upsert batching (small batches with a pause, to stay kind to the embedder)
EMBED_BATCH_SIZE = int(os.getenv("EMBED_BATCH_SIZE", 5))
EMBED_BATCH_DELAY = float(os.getenv("EMBED_BATCH_DELAY", 2.0))

# Chunking
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", 1200))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", 300))
MIN_TEXT_LENGTH = 100
METADATA_TEXT_LIMIT = 1000

# Retrieval
TOP_K = int(os.getenv("TOP_K", 8))
MAX_RELEVANT_LINKS = 5

# LLM configuration (Ollama server)
OLLAMA_MODEL_NAME = os.getenv("OLLAMA_MODEL_NAME", "mistral")
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_NUM_CTX = int(os.getenv("OLLAMA_NUM_CTX", 16384))
OLLAMA_NUM_PREDICT = int(os.getenv("OLLAMA_NUM_PREDICT", 2048))
OLLAMA_TIMEOUT = int(os.getenv("OLLAMA_TIMEOUT", 600))

REQUIRED_SETTINGS = ("QDRANT_URL", "QDRANT_COLLECTION", "EMBEDDING_MODEL_NAME", "OLLAMA_HOST", "OLLAMA_MODEL_NAME")


def validate():
    """Raise ConfigurationError naming every required setting that is empty."""
    missing = [name for name in REQUIRED_SETTINGS if not str(globals()[name]).strip()]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
    if EMBED_BATCH_SIZE < 1:
        raise ConfigurationError("EMBED_BATCH_SIZE must be at least 1")
