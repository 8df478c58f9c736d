import logging
from pathlib import Path
from typing import Optional

from nitjsr_scraper.snapshot import latest_snapshot, load_snapshot

from . import config
from .link_db import LinkDatabase
from .local_models import OllamaLLM, QdrantVectorStore, SentenceTransformerEmbedder
from .retrieval import RagSystem

log = logging.getLogger(__name__)

_rag_system: Optional[RagSystem] = None


def load_link_database(snapshot_dir: Path = config.SCRAPED_DATA_DIR) -> LinkDatabase:
    """Rebuild the link database from the newest snapshot, or return an empty one."""
    link_db = LinkDatabase()
    path = latest_snapshot(snapshot_dir)
    if path is None:
        log.warning(f"No snapshot found in '{snapshot_dir}'; answering without link suggestions.")
        return link_db
    link_db.build(load_snapshot(path))
    return link_db


def get_rag_system() -> RagSystem:
    """
    Factory to load and cache the single RagSystem. Raises ConfigurationError
    when settings are missing or Qdrant cannot be reached.
    """
    global _rag_system
    if _rag_system:
        return _rag_system

    config.validate()
    store = QdrantVectorStore()
    store.check_connection()
    store.ensure_collection()

    log.info(f"[*] Loading RAG system on collection: {config.QDRANT_COLLECTION}")
    _rag_system = RagSystem(
        embedder=SentenceTransformerEmbedder(),
        store=store,
        llm=OllamaLLM(),
        link_db=load_link_database(),
    )
    log.info("[*] RAG system loaded successfully.")
    return _rag_system
