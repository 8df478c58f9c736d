import logging
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote, urlparse

from nitjsr_scraper.models import LinkKind, LinkRecord
from nitjsr_scraper.session import CrawlSession
from nitjsr_scraper.utils.text import slugify

from . import config

log = logging.getLogger(__name__)

PDF_LINK = "pdf"
PAGE_LINK = "page"
PDF_DOCUMENT = "pdf_document"


@dataclass(frozen=True)
class LinkEntry:
    type: str
    url: str
    text: str
    title: str = ""
    source_url: Optional[str] = None
    source_title: Optional[str] = None
    context: Optional[str] = None
    category: Optional[str] = None
    word_count: Optional[int] = None
    page_count: Optional[int] = None

    @property
    def is_pdf(self) -> bool:
        return self.type in (PDF_LINK, PDF_DOCUMENT)

    def to_dict(self) -> dict:
        return asdict(self)


def filename_stem(url: str) -> str:
    tail = unquote(urlparse(url).path.rstrip("/").rsplit("/", 1)[-1])
    if tail.lower().endswith(".pdf"):
        tail = tail[:-4]
    return tail


class LinkDatabase:
    """
    Slug-keyed lookup of every link, page and PDF in a crawl.

    Keys live in a `pdf_` or `page_` namespace. One PDF is reachable under
    both its link text and its filename stem; on a key collision the entry
    written last wins.
    """

    def __init__(self):
        self.entries: Dict[str, LinkEntry] = {}

    def __len__(self):
        return len(self.entries)

    def __contains__(self, key):
        return key in self.entries

    def get(self, key: str) -> Optional[LinkEntry]:
        return self.entries.get(key)

    def clear(self):
        self.entries.clear()

    def _put(self, namespace: str, name: str, entry: LinkEntry):
        slug = slugify(name)
        if slug:
            self.entries[f"{namespace}_{slug}"] = entry

    def _put_pdf(self, entry: LinkEntry):
        self._put("pdf", entry.text, entry)
        self._put("pdf", filename_stem(entry.url), entry)

    @staticmethod
    def _from_link(kind: str, link: LinkRecord) -> LinkEntry:
        return LinkEntry(
            type=kind,
            url=link.url,
            text=link.text,
            title=link.title,
            source_url=link.source_url,
            source_title=link.source_title,
            context=link.context,
        )

    def build(self, session: CrawlSession) -> int:
        """Index PDF links, internal links, pages and PDF documents, in that order."""
        for link in session.links[LinkKind.PDF]:
            if link.text.strip():
                self._put_pdf(self._from_link(PDF_LINK, link))

        for link in session.links[LinkKind.INTERNAL]:
            if link.text.strip():
                self._put("page", link.text, self._from_link(PAGE_LINK, link))

        for page in session.pages:
            self._put(
                "page",
                page.title,
                LinkEntry(
                    type=PAGE_LINK,
                    url=page.url,
                    text=page.title,
                    title=page.title,
                    category=page.category.value,
                    word_count=page.word_count,
                ),
            )

        for pdf in session.pdfs:
            self._put_pdf(
                LinkEntry(
                    type=PDF_DOCUMENT,
                    url=pdf.url,
                    text=pdf.title,
                    title=pdf.title,
                    source_url=pdf.source_url,
                    source_title=pdf.source_title,
                    category=pdf.category.value,
                    word_count=pdf.word_count,
                    page_count=pdf.page_count,
                )
            )

        log.info(f"✅ Built link database with {len(self.entries)} entries")
        return len(self.entries)

    def by_type(self, link_type: str) -> List[LinkEntry]:
        """Distinct entries of one type, aliases collapsed."""
        seen = set()
        result = []
        for entry in self.entries.values():
            if entry.type == link_type and entry.url not in seen:
                seen.add(entry.url)
                result.append(entry)
        return result

    def find_relevant(self, question: str, documents: Iterable = (), limit: int = config.MAX_RELEVANT_LINKS) -> List[LinkEntry]:
        """
        Loose substring matching of the question against link texts.

        PDF entries come first when the question asks about a pdf or document;
        they also match when their text shows up in a retrieved document.
        """
        q = question.lower().strip()
        if not q:
            return []
        doc_texts = [doc.text.lower() for doc in documents]
        found: List[LinkEntry] = []
        seen = set()

        def overlaps(text: str) -> bool:
            t = text.lower().strip()
            return bool(t) and (t in q or q in t)

        def add(entry: LinkEntry):
            if (entry.type, entry.url) not in seen and len(found) < limit:
                seen.add((entry.type, entry.url))
                found.append(entry)

        if "pdf" in q or "document" in q:
            for key, entry in self.entries.items():
                text = entry.text.lower()
                if key.startswith("pdf_") and (overlaps(text) or (text and any(text in d for d in doc_texts))):
                    add(entry)

        for entry in self.entries.values():
            if overlaps(entry.text) or (entry.category and entry.category in q):
                add(entry)

        return found
