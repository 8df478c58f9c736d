from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from nitjsr_scraper.models import LinkKind, Page, PdfDocument
from nitjsr_scraper.session import CrawlSession

from .. import config

SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", " ", ""]
LINKS_CHUNK_ID = "links-directory"
STATISTICS_CHUNK_ID = "statistics-overview"
MAX_DIRECTORY_INTERNAL_LINKS = 50


@dataclass(frozen=True)
class DocumentChunk:
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def make_splitter(chunk_size: int = config.CHUNK_SIZE, chunk_overlap: int = config.CHUNK_OVERLAP) -> RecursiveCharacterTextSplitter:
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=SEPARATORS,
    )


def page_text(page: Page) -> str:
    """Structured text of a page: labelled fields, blank-line separated, empty ones left out."""
    parts = [
        f"Title: {page.title}" if page.title else "",
        f"URL: {page.url}",
        f"Category: {page.category.value}",
        "\n".join(f"Heading {h.level}: {h.text}" for h in page.headings),
        page.content,
        "\n\n".join("\n".join(" | ".join(row) for row in table) for table in page.tables),
        "\n\n".join("\n".join(f"• {item}" for item in items) for items in page.lists),
        f"Description: {page.meta_description}" if page.meta_description else "",
        f"Keywords: {page.meta_keywords}" if page.meta_keywords else "",
    ]
    return "\n\n".join(part for part in parts if part and part.strip())


def pdf_text(pdf: PdfDocument) -> str:
    parts = [
        f"PDF Title: {pdf.title}",
        f"URL: {pdf.url}",
        f"Category: {pdf.category.value}",
        f"Pages: {pdf.page_count}",
        f"Source Page: {pdf.source_title or 'Unknown'}",
        f"Content: {pdf.text}",
    ]
    return "\n\n".join(parts)


def links_directory_text(session: CrawlSession) -> str:
    pdf_lines = [f"• {link.text} - {link.url} (Found on: {link.source_title})" for link in session.links[LinkKind.PDF]]
    internal_lines = [
        f"• {link.text} - {link.url}" for link in session.links[LinkKind.INTERNAL][:MAX_DIRECTORY_INTERNAL_LINKS]
    ]
    return "\n".join(
        [
            "PDF Documents Available:",
            "\n".join(pdf_lines) or "No PDFs found",
            "\nInternal Pages:",
            "\n".join(internal_lines) or "No internal links found",
        ]
    )


def statistics_text(session: CrawlSession) -> str:
    stats = session.update_statistics()
    category_lines = [f"• {category.value}: {len(bucket)} pages" for category, bucket in session.categories.items()]
    pdf_lines = [
        f"• {pdf.title} ({pdf.page_count} pages, {pdf.word_count} words) - {pdf.category.value}" for pdf in session.pdfs
    ]
    return "\n".join(
        [
            "NIT Jamshedpur Website Statistics and Overview:",
            f"Total Pages Scraped: {stats.total_pages}",
            f"Total PDF Documents: {stats.total_pdfs}",
            f"Total Links Found: {stats.total_links}",
            "Categories Breakdown:",
            "\n".join(category_lines),
            "\nAvailable PDF Documents:",
            "\n".join(pdf_lines) or "No PDFs processed",
        ]
    )


def _without_empty(metadata: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in metadata.items() if v is not None}


def _split(splitter, text: str) -> List[str]:
    return [piece for piece in splitter.split_text(text) if piece.strip()]


def create_document_chunks(session: CrawlSession, splitter: Optional[RecursiveCharacterTextSplitter] = None) -> List[DocumentChunk]:
    """
    Turn a crawl session into embedding-ready chunks.

    Ids are derived from the position of the page or PDF in the session,
    so rebuilding from the same snapshot yields the same ids.
    """
    splitter = splitter or make_splitter()
    chunks: List[DocumentChunk] = []

    for page_index, page in enumerate(session.pages):
        text = page_text(page)
        if len(text.strip()) <= config.MIN_TEXT_LENGTH:
            continue
        pieces = _split(splitter, text)
        for i, piece in enumerate(pieces):
            chunks.append(
                DocumentChunk(
                    id=f"page-{page_index}-chunk-{i}",
                    text=piece,
                    metadata=_without_empty(
                        {
                            "source": "webpage",
                            "source_type": "page",
                            "url": page.url,
                            "title": page.title,
                            "category": page.category.value,
                            "timestamp": page.timestamp,
                            "depth": page.depth,
                            "word_count": page.word_count,
                            "chunk_index": i,
                            "total_chunks": len(pieces),
                            "has_tables": bool(page.tables),
                            "has_lists": bool(page.lists),
                            "has_links": bool(page.raw_links),
                        }
                    ),
                )
            )

    for pdf_index, pdf in enumerate(session.pdfs):
        if len(pdf.text.strip()) <= config.MIN_TEXT_LENGTH:
            continue
        pieces = _split(splitter, pdf_text(pdf))
        for i, piece in enumerate(pieces):
            chunks.append(
                DocumentChunk(
                    id=f"pdf-{pdf_index}-chunk-{i}",
                    text=piece,
                    metadata=_without_empty(
                        {
                            "source": "pdf",
                            "source_type": "pdf_document",
                            "url": pdf.url,
                            "title": pdf.title,
                            "category": pdf.category.value,
                            "timestamp": pdf.timestamp,
                            "page_count": pdf.page_count,
                            "word_count": pdf.word_count,
                            "source_url": pdf.source_url,
                            "source_title": pdf.source_title,
                            "chunk_index": i,
                            "total_chunks": len(pieces),
                            "has_tables": False,
                            "has_lists": False,
                            "has_links": False,
                        }
                    ),
                )
            )

    directory = links_directory_text(session)
    if len(directory) > config.MIN_TEXT_LENGTH:
        chunks.append(
            DocumentChunk(
                id=LINKS_CHUNK_ID,
                text=directory,
                metadata=_without_empty(
                    {
                        "source": "links",
                        "source_type": "link_directory",
                        "title": "Links Directory",
                        "category": "general",
                        "timestamp": session.started_at or None,
                        "chunk_index": 0,
                        "total_chunks": 1,
                        "has_tables": False,
                        "has_lists": False,
                        "has_links": True,
                        "total_pdfs": len(session.links[LinkKind.PDF]),
                        "total_internal_links": len(session.links[LinkKind.INTERNAL]),
                    }
                ),
            )
        )

    chunks.append(
        DocumentChunk(
            id=STATISTICS_CHUNK_ID,
            text=statistics_text(session),
            metadata=_without_empty(
                {
                    "source": "statistics",
                    "source_type": "summary",
                    "title": "Website Statistics and Overview",
                    "category": "general",
                    "timestamp": session.started_at or None,
                    "chunk_index": 0,
                    "total_chunks": 1,
                    "has_tables": False,
                    "has_lists": False,
                    "has_links": False,
                }
            ),
        )
    )
    return chunks
