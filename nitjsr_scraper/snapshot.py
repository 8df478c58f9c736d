import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from .session import CrawlSession

module_logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "nitjsr_scrape_"


@dataclass
class SnapshotInfo:
    filename: str
    path: Path
    timestamp: str
    pages_scraped: int
    pdfs_processed: int
    total_links: int
    pdf_links: int
    internal_links: int
    scrape_type: str


def snapshot_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.isoformat().replace(":", "_").replace(".", "_").replace("+", "_")
    return f"{SNAPSHOT_PREFIX}{stamp}.json"


def save_snapshot(session: CrawlSession, directory: Union[str, Path]) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / snapshot_filename()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(session.to_snapshot(), f, ensure_ascii=False, indent=2)
    module_logger.info(
        "Saved crawl snapshot",
        extra={"event_type": "snapshot_saved", "path": str(path), "pages": len(session.pages)},
    )
    return path


def read_snapshot(path: Union[str, Path]) -> dict:
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Snapshot '{path}' not found.")
    try:
        return json.loads(json_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Error decoding JSON from snapshot '{path}'.") from e


def load_snapshot(path: Union[str, Path]) -> CrawlSession:
    return CrawlSession.from_snapshot(read_snapshot(path))


def list_snapshots(directory: Union[str, Path]) -> List[SnapshotInfo]:
    """Summaries of every readable snapshot in `directory`, newest first."""
    directory = Path(directory)
    if not directory.is_dir():
        return []

    infos = []
    for path in directory.glob(f"{SNAPSHOT_PREFIX}*.json"):
        try:
            data = read_snapshot(path)
            if not isinstance(data, dict):
                raise ValueError(f"Snapshot '{path}' is not a JSON object.")
        except ValueError as e:
            module_logger.warning(
                "Skipping unreadable snapshot",
                extra={"event_type": "snapshot_unreadable", "path": str(path), "error": str(e)},
            )
            continue
        metadata = data.get("metadata", {})
        links = data.get("links", {})
        infos.append(
            SnapshotInfo(
                filename=path.name,
                path=path,
                timestamp=metadata.get("timestamp", ""),
                pages_scraped=len(data.get("pages", [])),
                pdfs_processed=len(data.get("documents", {}).get("pdfs", [])),
                total_links=data.get("statistics", {}).get("total_links", 0),
                pdf_links=len(links.get("pdf", [])),
                internal_links=len(links.get("internal", [])),
                scrape_type=metadata.get("scrape_type", "unknown"),
            )
        )
    return sorted(infos, key=lambda info: (info.timestamp, info.filename), reverse=True)


def latest_snapshot(directory: Union[str, Path]) -> Optional[Path]:
    snapshots = list_snapshots(directory)
    return snapshots[0].path if snapshots else None
