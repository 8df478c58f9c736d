import json
from datetime import datetime, timezone

import pytest

from nitjsr_scraper.models import Category, LinkKind, SessionState
from nitjsr_scraper.snapshot import (
    latest_snapshot,
    list_snapshots,
    load_snapshot,
    save_snapshot,
    snapshot_filename,
)


def test_snapshot_filename_is_filesystem_safe():
    name = snapshot_filename(datetime(2024, 6, 1, 10, 30, 15, 123456, tzinfo=timezone.utc))
    assert name == "nitjsr_scrape_2024-06-01T10_30_15_123456_00_00.json"


def test_snapshot_sections(sample_session, tmp_path):
    data = json.loads(save_snapshot(sample_session, tmp_path).read_text(encoding="utf-8"))

    assert set(data) == {"metadata", "pages", "documents", "links", "categories", "statistics", "failures"}
    assert data["metadata"]["scrape_type"] == "nitjsr_crawl"
    assert set(data["links"]) == {"internal", "external", "pdf", "image"}
    assert data["categories"]["placements"] == ["https://nitjsr.ac.in/Students/Placements"]
    assert data["statistics"]["total_pages"] == 2
    assert data["statistics"]["total_pdfs"] == 1
    assert data["statistics"]["total_links"] == 2
    assert data["documents"]["pdfs"][0]["title"] == "Placement Report 2023"


def test_load_restores_session(sample_session, tmp_path):
    sample_session.record_failure("https://nitjsr.ac.in/broken", "HTTP 500")
    path = save_snapshot(sample_session, tmp_path)

    restored = load_snapshot(path)

    assert restored.state is SessionState.SAVED
    assert restored.pages == sample_session.pages
    assert restored.pdfs == sample_session.pdfs
    assert restored.links[LinkKind.PDF] == sample_session.links[LinkKind.PDF]
    assert restored.categories[Category.PLACEMENTS] == [sample_session.pages[1]]
    assert restored.failed_urls == [{"url": "https://nitjsr.ac.in/broken", "reason": "HTTP 500"}]
    assert restored.statistics == sample_session.update_statistics()


def test_list_and_latest(tmp_path):
    (tmp_path / "nitjsr_scrape_a.json").write_text(
        json.dumps({"metadata": {"timestamp": "2024-01-01T00:00:00+00:00"}, "pages": [{}]}), encoding="utf-8"
    )
    (tmp_path / "nitjsr_scrape_b.json").write_text(
        json.dumps({"metadata": {"timestamp": "2024-03-01T00:00:00+00:00"}, "pages": [], "links": {"pdf": [{}, {}]}}),
        encoding="utf-8",
    )
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")

    snapshots = list_snapshots(tmp_path)

    assert [s.filename for s in snapshots] == ["nitjsr_scrape_b.json", "nitjsr_scrape_a.json"]
    assert snapshots[0].pdf_links == 2
    assert snapshots[1].pages_scraped == 1
    assert latest_snapshot(tmp_path) == tmp_path / "nitjsr_scrape_b.json"


def test_missing_directory_and_file(tmp_path):
    assert list_snapshots(tmp_path / "nope") == []
    assert latest_snapshot(tmp_path / "nope") is None
    with pytest.raises(FileNotFoundError):
        load_snapshot(tmp_path / "missing.json")


def test_non_snapshot_json_is_skipped(tmp_path):
    (tmp_path / "notes.json").write_text("[1, 2]", encoding="utf-8")
    (tmp_path / "nitjsr_scrape_list.json").write_text("[1, 2]", encoding="utf-8")
    (tmp_path / "nitjsr_scrape_ok.json").write_text(
        json.dumps({"metadata": {"timestamp": "2024-05-01T00:00:00+00:00"}}), encoding="utf-8"
    )

    assert [s.filename for s in list_snapshots(tmp_path)] == ["nitjsr_scrape_ok.json"]
    assert latest_snapshot(tmp_path) == tmp_path / "nitjsr_scrape_ok.json"
