from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Category(str, Enum):
    ACADEMICS = "academics"
    ADMISSIONS = "admissions"
    PLACEMENTS = "placements"
    FACULTY = "faculty"
    STUDENTS = "students"
    RESEARCH = "research"
    ADMINISTRATION = "administration"
    NEWS = "news"
    EVENTS = "events"
    DEPARTMENTS = "departments"
    GENERAL = "general"


class LinkKind(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    PDF = "pdf"
    IMAGE = "image"


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING_PDFS = "draining_pdfs"
    SAVED = "saved"


@dataclass
class CrawlOptions:
    """Knobs for one crawl run, including which extraction features are on."""

    seed_urls: List[str] = field(default_factory=list)
    max_pages: int = 100
    max_depth: int = 3
    delay_ms: int = 1500
    page_timeout: float = 45.0
    pdf_cap: int = 50
    pdf_max_bytes: int = 50 * 1024 * 1024
    pdf_timeout: float = 60.0
    track_links: bool = True
    extract_tables: bool = True
    extract_lists: bool = True
    process_pdfs: bool = True


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class RawLink:
    """An anchor exactly as it appeared on the page."""

    href: str
    text: str
    title: str = ""
    context: str = ""


@dataclass(frozen=True)
class Page:
    url: str
    depth: int
    title: str
    headings: Tuple[Heading, ...]
    content: str
    tables: Tuple[Tuple[Tuple[str, ...], ...], ...]
    lists: Tuple[Tuple[str, ...], ...]
    raw_links: Tuple[RawLink, ...]
    category: Category
    word_count: int
    timestamp: str
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["category"] = self.category.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Page":
        return cls(
            url=data["url"],
            depth=int(data.get("depth", 0)),
            title=data.get("title") or "",
            headings=tuple(Heading(int(h["level"]), h["text"]) for h in data.get("headings", [])),
            content=data.get("content") or "",
            tables=tuple(tuple(tuple(row) for row in table) for table in data.get("tables", [])),
            lists=tuple(tuple(items) for items in data.get("lists", [])),
            raw_links=tuple(RawLink(**link) for link in data.get("raw_links", [])),
            category=Category(data.get("category", Category.GENERAL.value)),
            word_count=int(data.get("word_count", 0)),
            timestamp=data.get("timestamp") or "",
            meta_description=data.get("meta_description"),
            meta_keywords=data.get("meta_keywords"),
        )


@dataclass(frozen=True)
class LinkRecord:
    url: str
    text: str
    title: str
    source_url: str
    source_title: str
    context: str
    kind: LinkKind

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        return cls(
            url=data["url"],
            text=data.get("text") or "",
            title=data.get("title") or "",
            source_url=data.get("source_url") or "",
            source_title=data.get("source_title") or "",
            context=data.get("context") or "",
            kind=LinkKind(data["kind"]),
        )


@dataclass(frozen=True)
class PdfDocument:
    url: str
    title: str
    text: str
    page_count: int
    category: Category
    word_count: int
    timestamp: str
    source_url: Optional[str] = None
    source_title: Optional[str] = None
    context: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["category"] = self.category.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PdfDocument":
        return cls(
            url=data["url"],
            title=data.get("title") or "",
            text=data.get("text") or "",
            page_count=int(data.get("page_count", 0)),
            category=Category(data.get("category", Category.GENERAL.value)),
            word_count=int(data.get("word_count", 0)),
            timestamp=data.get("timestamp") or "",
            source_url=data.get("source_url"),
            source_title=data.get("source_title"),
            context=data.get("context"),
        )


@dataclass
class CrawlStatistics:
    total_pages: int = 0
    total_pdfs: int = 0
    total_images: int = 0
    total_links: int = 0
    categorized_pages: int = 0
    failed_pages: int = 0
    failed_pdfs: int = 0
