import asyncio
from argparse import Namespace

import pytest
from conftest import FakeEmbedder, make_link, make_page
from qdrant_client import QdrantClient

from nitjsr_rag import build_dbs
from nitjsr_rag.build_dbs import index_snapshot
from nitjsr_rag.local_models import QdrantVectorStore
from nitjsr_scraper.models import CrawlOptions
from nitjsr_scraper.session import CrawlSession
from nitjsr_scraper.snapshot import save_snapshot

LONG_TEXT = "The institute publishes notices, results and admission details on this page for students. " * 3


@pytest.fixture(autouse=True)
def no_batch_delay(monkeypatch):
    async def fake_sleep(seconds):
        return None

    monkeypatch.setattr("nitjsr_rag.embed_store.asyncio.sleep", fake_sleep)


def write_snapshot(directory, *paths):
    session = CrawlSession(options=CrawlOptions(seed_urls=["https://nitjsr.ac.in/"]))
    for path in paths:
        session.add_page(make_page(url=f"https://nitjsr.ac.in/{path}", title=path, content=LONG_TEXT))
    return save_snapshot(session, directory)


def indexed_page_urls(store):
    points, _ = store.client.scroll(collection_name=store.collection, limit=100, with_payload=True)
    return sorted(p.payload["url"] for p in points if p.payload.get("source") == "webpage")


def test_reindexing_replaces_previous_snapshot(tmp_path):
    store = QdrantVectorStore(collection="nitjsr_test", dimension=4, client=QdrantClient(":memory:"))
    store.ensure_collection()
    embedder = FakeEmbedder()

    old = write_snapshot(tmp_path / "old", "old/0", "old/1", "old/2")
    asyncio.run(index_snapshot(old, store, embedder))
    assert indexed_page_urls(store) == [f"https://nitjsr.ac.in/old/{i}" for i in range(3)]

    new = write_snapshot(tmp_path / "new", "new/0")
    result, _ = asyncio.run(index_snapshot(new, store, embedder))

    assert result.complete
    assert indexed_page_urls(store) == ["https://nitjsr.ac.in/new/0"]
    assert store.describe_stats()["total_vectors"] == result.stored


def test_stats_reports_link_entries_from_newest_snapshot(tmp_path, monkeypatch):
    session = CrawlSession(options=CrawlOptions(seed_urls=["https://nitjsr.ac.in/"]))
    session.add_page(make_page(url="https://nitjsr.ac.in/About", title="About", content=LONG_TEXT))
    session.add_link(make_link("https://nitjsr.ac.in/docs/placement_2023.pdf", "Placement Report 2023"))
    save_snapshot(session, tmp_path)

    reported = []
    monkeypatch.setattr(build_dbs, "log_config_summary", lambda console: None)
    monkeypatch.setattr(
        build_dbs,
        "QdrantVectorStore",
        lambda: QdrantVectorStore(collection="nitjsr_test", dimension=4, client=QdrantClient(":memory:")),
    )
    monkeypatch.setattr(build_dbs, "print_stats", lambda store, size, console: reported.append(size))

    args = Namespace(data_dir=str(tmp_path), list=False, clear=False, stats=True, snapshot=None)
    asyncio.run(build_dbs.main(args))

    assert reported and reported[0] > 0
    assert reported[0] == len(build_dbs.load_link_database(tmp_path))
