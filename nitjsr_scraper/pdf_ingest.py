import logging
from datetime import datetime, timezone
from itertools import islice
from typing import Callable, Iterable, List, Optional
from urllib.parse import unquote, urlparse

import requests

from .exceptions import DecodeError, FetchError
from .models import LinkRecord, PdfDocument
from .parsers.pdf_parser import decode_pdf
from .session import CrawlSession
from .utils.text import count_words
from .utils.url_rules import categorize

module_logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (compatible; nitjsr-scraper-bot/1.0)"
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def title_from_url(url: str) -> str:
    tail = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    return unquote(tail) or url


class PdfIngestor:
    """Downloads and decodes discovered PDFs one at a time."""

    def __init__(
        self,
        http: Optional[requests.Session] = None,
        max_bytes: int = 50 * 1024 * 1024,
        timeout: float = 60.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.http = http or requests.Session()
        self.max_bytes = max_bytes
        self.timeout = timeout
        self.user_agent = user_agent

    def download(self, url: str) -> bytes:
        try:
            with self.http.get(
                url,
                stream=True,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            ) as response:
                response.raise_for_status()

                declared = response.headers.get("Content-Length")
                if declared and declared.isdigit() and int(declared) > self.max_bytes:
                    raise FetchError(url, f"declared size {declared} exceeds {self.max_bytes} bytes")

                body = bytearray()
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    body.extend(chunk)
                    if len(body) > self.max_bytes:
                        raise FetchError(url, f"body exceeds {self.max_bytes} bytes")
                return bytes(body)
        except requests.RequestException as e:
            raise FetchError(url, str(e)) from e

    def ingest(
        self,
        pdf_urls: Iterable[str],
        cap: int,
        find_link: Callable[[str], Optional[LinkRecord]] = lambda url: None,
        on_failure: Callable[[str, str], None] = lambda url, reason: None,
    ) -> List[PdfDocument]:
        """
        Process at most `cap` PDFs. Failures are logged, reported through
        `on_failure` and skipped; they never abort the run.
        """
        selected = list(islice(pdf_urls, cap))
        module_logger.info(
            "Processing discovered PDF documents",
            extra={"event_type": "pdf_ingest_started", "selected": len(selected), "cap": cap},
        )

        documents = []
        for index, url in enumerate(selected, start=1):
            module_logger.info(f"📖 Processing PDF {index}/{len(selected)}: {url}")
            try:
                decoded = decode_pdf(self.download(url), url=url)
            except (FetchError, DecodeError) as e:
                module_logger.error(
                    "Failed to process PDF",
                    extra={"event_type": "pdf_processing_error", "url": url, "error": str(e)},
                )
                on_failure(url, str(e))
                continue

            link = find_link(url)
            document = PdfDocument(
                url=url,
                title=(link.text if link else None) or decoded.title or title_from_url(url),
                text=decoded.text,
                page_count=decoded.page_count,
                category=categorize(url, decoded.text),
                word_count=count_words(decoded.text),
                timestamp=datetime.now(timezone.utc).isoformat(),
                source_url=link.source_url if link else None,
                source_title=link.source_title if link else None,
                context=link.context if link else None,
            )
            documents.append(document)
            module_logger.info(f"✅ Processed PDF: {document.page_count} pages, {document.word_count} words")

        return documents


def ingest_session_pdfs(session: CrawlSession, ingestor: PdfIngestor) -> List[PdfDocument]:
    """Run the ingestor over the session's discovered PDF URLs and record the results."""
    documents = ingestor.ingest(
        session.pdf_urls,
        cap=session.options.pdf_cap,
        find_link=session.find_link,
        on_failure=session.record_pdf_failure,
    )
    for document in documents:
        session.add_pdf(document)
    return documents
