import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .frontier import CrawlFrontier
from .models import (
    Category,
    CrawlOptions,
    CrawlStatistics,
    LinkKind,
    LinkRecord,
    Page,
    PdfDocument,
    SessionState,
)
from .utils.url_rules import BASE_URL

module_logger = logging.getLogger(__name__)

SITE_NAME = "NIT Jamshedpur Official Website"
SCRAPE_TYPE = "nitjsr_crawl"


@dataclass
class CrawlSession:
    """
    Mutable state of one scrape run.

    Only the spider and the PDF ingestion step write to a session, both driven
    by the crawl controller. The indexing side reads a session rebuilt from a
    snapshot with `from_snapshot`.
    """

    options: CrawlOptions = field(default_factory=CrawlOptions)
    state: SessionState = SessionState.IDLE
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    pages: List[Page] = field(default_factory=list)
    categories: Dict[Category, List[Page]] = field(default_factory=lambda: {c: [] for c in Category})
    links: Dict[LinkKind, List[LinkRecord]] = field(default_factory=lambda: {k: [] for k in LinkKind})
    pdf_urls: Dict[str, None] = field(default_factory=dict)
    pdfs: List[PdfDocument] = field(default_factory=list)
    failed_urls: List[Dict[str, str]] = field(default_factory=list)
    failed_pdfs: List[Dict[str, str]] = field(default_factory=list)
    statistics: CrawlStatistics = field(default_factory=CrawlStatistics)
    frontier: Optional[CrawlFrontier] = None

    def __post_init__(self):
        if self.frontier is None:
            self.frontier = CrawlFrontier(self.options.max_pages, self.options.max_depth)

    @property
    def visited(self):
        return self.frontier.visited

    def add_page(self, page: Page):
        self.pages.append(page)
        self.categories[page.category].append(page)

    def add_link(self, record: LinkRecord):
        if record.kind is LinkKind.PDF:
            self.pdf_urls.setdefault(record.url, None)
        if self.options.track_links:
            self.links[record.kind].append(record)

    def add_pdf(self, pdf: PdfDocument):
        self.pdfs.append(pdf)

    def record_failure(self, url: str, reason: str):
        self.failed_urls.append({"url": url, "reason": reason})

    def record_pdf_failure(self, url: str, reason: str):
        self.failed_pdfs.append({"url": url, "reason": reason})

    def find_link(self, url: str, kind: LinkKind = LinkKind.PDF) -> Optional[LinkRecord]:
        return next((link for link in self.links[kind] if link.url == url), None)

    def update_statistics(self) -> CrawlStatistics:
        self.statistics = CrawlStatistics(
            total_pages=len(self.pages),
            total_pdfs=len(self.pdfs),
            total_images=len(self.links[LinkKind.IMAGE]),
            total_links=sum(len(records) for records in self.links.values()),
            categorized_pages=sum(len(bucket) for bucket in self.categories.values()),
            failed_pages=len(self.failed_urls),
            failed_pdfs=len(self.failed_pdfs),
        )
        return self.statistics

    def to_snapshot(self) -> dict:
        self.update_statistics()
        return {
            "metadata": {
                "timestamp": self.started_at,
                "source": SITE_NAME,
                "base_url": BASE_URL,
                "scrape_type": SCRAPE_TYPE,
                "max_pages": self.options.max_pages,
                "max_depth": self.options.max_depth,
                "options": asdict(self.options),
            },
            "pages": [page.to_dict() for page in self.pages],
            "documents": {"pdfs": [pdf.to_dict() for pdf in self.pdfs]},
            "links": {kind.value: [record.to_dict() for record in records] for kind, records in self.links.items()},
            "categories": {category.value: [page.url for page in bucket] for category, bucket in self.categories.items()},
            "statistics": asdict(self.statistics),
            "failures": {"pages": list(self.failed_urls), "pdfs": list(self.failed_pdfs)},
        }

    @classmethod
    def from_snapshot(cls, data: dict) -> "CrawlSession":
        metadata = data.get("metadata", {})
        known_options = CrawlOptions.__dataclass_fields__
        options = CrawlOptions(**{k: v for k, v in metadata.get("options", {}).items() if k in known_options})
        session = cls(options=options, state=SessionState.SAVED, started_at=metadata.get("timestamp", ""))

        for page_data in data.get("pages", []):
            session.add_page(Page.from_dict(page_data))
        for kind in LinkKind:
            for link_data in data.get("links", {}).get(kind.value, []):
                session.add_link(LinkRecord.from_dict(link_data))
        for pdf_data in data.get("documents", {}).get("pdfs", []):
            session.add_pdf(PdfDocument.from_dict(pdf_data))

        failures = data.get("failures", {})
        session.failed_urls = list(failures.get("pages", []))
        session.failed_pdfs = list(failures.get("pdfs", []))
        session.update_statistics()
        return session

    def summary(self) -> dict:
        stats = self.update_statistics()
        return {
            "timestamp": self.started_at,
            "total_pages": stats.total_pages,
            "total_pdfs": stats.total_pdfs,
            "total_links": stats.total_links,
            "failed_pages": stats.failed_pages,
            "failed_pdfs": stats.failed_pdfs,
            "categories": [{"name": c.value, "count": len(bucket)} for c, bucket in self.categories.items()],
            "pdf_breakdown": [
                {"title": pdf.title, "pages": pdf.page_count, "word_count": pdf.word_count, "category": pdf.category.value}
                for pdf in self.pdfs
            ],
        }
