import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bs4 import BeautifulSoup
from scrapy.http import Response

from ..models import Heading, RawLink
from ..utils.text import clean_text

module_logger = logging.getLogger(__name__)

CONTENT_SELECTORS = (
    "p",
    "div.content",
    ".main-content",
    ".page-content",
    ".article-content",
    ".description",
    ".info",
    ".details",
    ".summary",
    "article",
    "section",
    ".text-content",
)

MIN_BLOCK_LENGTH = 30
MIN_LIST_ITEM_LENGTH = 10
DUPLICATE_PREFIX_LENGTH = 50
LINK_CONTEXT_LENGTH = 100

NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


@dataclass
class RenderedPage:
    """Structured content pulled out of one HTML document."""

    title: str
    headings: List[Heading] = field(default_factory=list)
    content_blocks: List[str] = field(default_factory=list)
    tables: List[List[List[str]]] = field(default_factory=list)
    lists: List[List[str]] = field(default_factory=list)
    raw_links: List[RawLink] = field(default_factory=list)
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None

    def flattened_text(self) -> str:
        """Everything textual on the page, space-joined, for categorization and word counts."""
        parts = [self.title]
        parts.extend(h.text for h in self.headings)
        parts.extend(self.content_blocks)
        parts.extend(cell for table in self.tables for row in table for cell in row)
        parts.extend(item for items in self.lists for item in items)
        parts.extend([self.meta_description, self.meta_keywords])
        return " ".join(p for p in parts if p)


def extract_metadata(soup_full_page: BeautifulSoup) -> dict:
    """Extracts meta description and keywords from the full page soup."""

    def get_meta_content(attrs_dict):
        tag = soup_full_page.find("meta", attrs=attrs_dict)
        return tag["content"].strip() if tag and tag.get("content") else None

    return {
        "meta_description": get_meta_content({"name": "description"}),
        "meta_keywords": get_meta_content({"name": "keywords"}),
    }


def _finalize_title(soup: BeautifulSoup) -> str:
    """Finds the best possible title for the page."""
    title_tag = soup.select_one("title")
    if title_tag and title_tag.get_text(strip=True):
        return clean_text(title_tag.get_text())

    h1 = soup.select_one("h1")
    if h1 and h1.get_text(strip=True):
        return clean_text(h1.get_text())

    return "Untitled Page"


def _extract_headings(soup: BeautifulSoup) -> List[Heading]:
    headings = []
    for tag in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = clean_text(tag.get_text(" "))
        if text:
            headings.append(Heading(level=int(tag.name[1]), text=text))
    return headings


def _extract_content_blocks(soup: BeautifulSoup) -> List[str]:
    blocks: List[str] = []
    for selector in CONTENT_SELECTORS:
        for element in soup.select(selector):
            text = clean_text(element.get_text(" "))
            if len(text) <= MIN_BLOCK_LENGTH:
                continue
            prefix = text[:DUPLICATE_PREFIX_LENGTH]
            if any(prefix in existing for existing in blocks):
                continue
            blocks.append(text)
    return blocks


def _extract_tables(soup: BeautifulSoup) -> List[List[List[str]]]:
    tables = []
    for table in soup.find_all("table"):
        rows = []
        for row in table.find_all("tr"):
            cells = [clean_text(cell.get_text(" ")) for cell in row.find_all(["td", "th"])]
            if cells:
                rows.append(cells)
        if rows:
            tables.append(rows)
    return tables


def _extract_lists(soup: BeautifulSoup) -> List[List[str]]:
    lists = []
    for list_tag in soup.find_all(["ul", "ol"]):
        items = [clean_text(li.get_text(" ")) for li in list_tag.find_all("li")]
        items = [item for item in items if len(item) > MIN_LIST_ITEM_LENGTH]
        if items:
            lists.append(items)
    return lists


def _extract_links(soup: BeautifulSoup) -> List[RawLink]:
    links = []
    for a_tag in soup.find_all("a", href=True):
        href = a_tag["href"].strip()
        if not href:
            continue
        parent_text = clean_text(a_tag.parent.get_text(" ")) if a_tag.parent else ""
        links.append(
            RawLink(
                href=href,
                text=clean_text(a_tag.get_text(" ")) or href,
                title=(a_tag.get("title") or "").strip(),
                context=parent_text[:LINK_CONTEXT_LENGTH],
            )
        )
    return links


def parse_html(response: Response, extract_tables: bool = True, extract_lists: bool = True) -> RenderedPage:
    """
    Main coordinator function for parsing HTML pages.
    """
    module_logger.debug("Starting HTML parsing.", extra={"event_type": "html_parsing_started", "url": response.url})
    soup = BeautifulSoup(response.text, "lxml")
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()

    rendered = RenderedPage(
        title=_finalize_title(soup),
        headings=_extract_headings(soup),
        content_blocks=_extract_content_blocks(soup),
        tables=_extract_tables(soup) if extract_tables else [],
        lists=_extract_lists(soup) if extract_lists else [],
        raw_links=_extract_links(soup),
        **extract_metadata(soup),
    )

    module_logger.debug(
        "Parsed HTML page",
        extra={
            "event_type": "html_parsed_successfully",
            "url": response.url,
            "details": {
                "title": rendered.title,
                "blocks": len(rendered.content_blocks),
                "links": len(rendered.raw_links),
            },
        },
    )
    return rendered
