import os
os.environ["TOKENIZERS_PARALLELISM"] = "false"  # Avoids excessive parallelism warnings from tokenizer libs

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Tuple

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from nitjsr_scraper.snapshot import latest_snapshot, list_snapshots, load_snapshot

from . import config
from .embed_store import EmbeddingBatcher, StoreResult
from .exceptions import RagError
from .link_db import LinkDatabase
from .local_models import QdrantVectorStore, SentenceTransformerEmbedder
from .rag_manager import load_link_database
from .utils.chunker import create_document_chunks
from .utils.debug_utils import log_config_summary

log = logging.getLogger(__name__)


def print_snapshots(directory: Path, console: Console):
    table = Table(title=f"Snapshots in {directory}", header_style="bold magenta")
    for column in ("File", "Timestamp", "Pages", "PDFs", "Links", "PDF links", "Internal links"):
        table.add_column(column)
    for info in list_snapshots(directory):
        table.add_row(
            info.filename,
            info.timestamp,
            str(info.pages_scraped),
            str(info.pdfs_processed),
            str(info.total_links),
            str(info.pdf_links),
            str(info.internal_links),
        )
    console.print(table)


def print_stats(store: QdrantVectorStore, link_db_size: int, console: Console):
    stats = store.describe_stats()
    console.print(
        f"[bold]Vectors:[/bold] {stats['total_vectors']}  [bold]Dimension:[/bold] {stats['dimension']}  "
        f"[bold]Fullness:[/bold] {stats['fullness']:.2%}  [bold]Link entries:[/bold] {link_db_size}"
    )


async def index_snapshot(snapshot_path: Path, store: QdrantVectorStore, embedder) -> Tuple[StoreResult, LinkDatabase]:
    """
    Chunk one snapshot and push it into the vector store. The collection is
    emptied first so only this snapshot's chunks remain.
    """
    log.info(f"📂 Loading snapshot {snapshot_path}")
    session = load_snapshot(snapshot_path)

    link_db = LinkDatabase()
    link_db.build(session)

    chunks = create_document_chunks(session)
    log.info(f"📊 Split {len(session.pages)} pages and {len(session.pdfs)} PDFs into {len(chunks)} chunks.")

    log.info(f"🗑️ Replacing contents of collection '{store.collection}'")
    store.delete_all()

    batcher = EmbeddingBatcher(embedder, store)
    return await batcher.store(chunks), link_db


async def main(args):
    console = Console()
    log_config_summary(console)
    config.validate()

    directory = Path(args.data_dir)
    if args.list:
        print_snapshots(directory, console)
        return

    store = QdrantVectorStore()
    store.check_connection()

    if args.clear:
        log.info(f"🗑️ Clearing collection '{store.collection}'")
        store.delete_all()
        return
    store.ensure_collection()

    if args.stats:
        print_stats(store, len(load_link_database(directory)), console)
        return

    snapshot_path = Path(args.snapshot) if args.snapshot else latest_snapshot(directory)
    if snapshot_path is None:
        log.error(f"No snapshot found in '{directory}'. Run `python -m nitjsr_scraper.run_crawl` first.")
        return

    embedder = SentenceTransformerEmbedder()
    result, link_db = await index_snapshot(snapshot_path, store, embedder)

    log.info(f"✅ {result.stored}/{result.attempted} chunks stored.")
    if result.failed_batches:
        log.warning(f"❌ {result.failed_batches} batch(es) failed.")
    print_stats(store, len(link_db), console)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Index a crawl snapshot into Qdrant.")
    parser.add_argument("snapshot", nargs="?", default=None, help="Snapshot JSON to index. Defaults to the newest one.")
    parser.add_argument("--data-dir", default=str(config.SCRAPED_DATA_DIR), help="Directory holding crawl snapshots.")
    parser.add_argument("--clear", action="store_true", help="Delete all vectors and exit.")
    parser.add_argument("--stats", action="store_true", help="Only print index statistics.")
    parser.add_argument("--list", action="store_true", help="List available snapshots and exit.")
    args = parser.parse_args()

    logging.basicConfig(
        level="INFO",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    try:
        asyncio.run(main(args))
    except RagError as e:
        log.error(f"❌ {e}")
        raise SystemExit(1)
