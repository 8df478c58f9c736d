from datetime import datetime, timezone
from functools import partial
from typing import Iterator, Optional
from urllib.parse import urljoin, urlparse

from scrapy import Request, Spider, signals
from scrapy.http import HtmlResponse, Response
from scrapy.spidermiddlewares.httperror import HttpError

from ..models import CrawlOptions, LinkKind, LinkRecord, Page, SessionState
from ..parsers.html_parser import parse_html
from ..session import CrawlSession
from ..settings import SEED_URLS
from ..utils.env_override import get_setting
from ..utils.stats import StatsReporter
from ..utils.text import count_words
from ..utils.url_rules import (
    SKIP_PATTERNS,
    categorize,
    classify_link_kind,
    is_in_domain_and_visitable,
    normalize_url,
)


class NitjsrSpider(Spider):
    """
    Walks the site breadth-first from the session's seed URLs.

    Requests are chained: the next frontier entry is only scheduled once the
    previous page has been parsed (or has failed), so pages land in the
    session in exactly the order the frontier hands them out.
    """

    name = "nitjsr"
    allowed_domains = ["nitjsr.ac.in"]

    @classmethod
    def from_crawler(cls, crawler, *args, **kwargs):
        spider = super().from_crawler(crawler, *args, **kwargs)
        crawler.signals.connect(spider.spider_opened, signal=signals.spider_opened)
        crawler.signals.connect(spider.spider_closed, signal=signals.spider_closed)

        ignored = get_setting(crawler.settings, "IGNORED_URL_PATTERNS_LIST", [], list)
        spider.session.frontier.url_filter = partial(is_in_domain_and_visitable, skip_patterns=SKIP_PATTERNS + tuple(ignored))
        spider.logger.info(f"Loaded {len(ignored)} ignored URL patterns from settings.")
        return spider

    def __init__(self, *args, session: Optional[CrawlSession] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session or CrawlSession(options=CrawlOptions(seed_urls=list(SEED_URLS)))
        self.reporter = StatsReporter()
        self.start_time = datetime.now(timezone.utc)

    def spider_opened(self, spider):
        options = self.session.options
        self.logger.info(
            f"Spider '{spider.name}' starting",
            extra={
                "event_type": "spider_opened",
                "seeds": len(options.seed_urls),
                "max_pages": options.max_pages,
                "max_depth": options.max_depth,
            },
        )

    def spider_closed(self, reason):
        runtime = datetime.now(timezone.utc) - self.start_time
        self.logger.info(
            "Spider closed",
            extra={
                "event_type": "spider_closed",
                "reason": reason,
                "runtime_seconds": runtime.total_seconds(),
                "pages": len(self.session.pages),
                "failed": len(self.session.failed_urls),
                "pending": len(self.session.frontier),
            },
        )

    def start_requests(self):
        self.session.state = SessionState.RUNNING
        for url in self.session.options.seed_urls:
            self.session.frontier.push(url, 0)
        yield from self._next_requests()

    def _next_requests(self) -> Iterator[Request]:
        entry = self.session.frontier.pop()
        if entry is None:
            self.logger.info(
                "Frontier exhausted",
                extra={"event_type": "frontier_exhausted", "visited": len(self.session.visited)},
            )
            return
        url, depth = entry
        options = self.session.options
        self.logger.info(f"🔍 Scraping [{depth}/{options.max_depth}] ({len(self.session.visited)}/{options.max_pages}): {url}")
        yield Request(
            url,
            callback=self.parse_page,
            errback=self.handle_error,
            cb_kwargs={"depth": depth},
            dont_filter=True,
        )

    def parse_page(self, response: Response, depth: int):
        try:
            self.record_page(response, depth)
        except Exception as e:
            self.logger.error(
                f"❌ Failed to process {response.url}",
                exc_info=True,
                extra={"event_type": "page_processing_error", "url": response.url, "error": str(e)},
            )
            self.session.record_failure(response.url, f"{type(e).__name__}: {e}")
            self.reporter.bump("errors")
        yield from self._next_requests()

    def handle_error(self, failure):
        request = failure.request
        if failure.check(HttpError):
            reason = f"HTTP {failure.value.response.status}"
        else:
            reason = f"{failure.type.__name__}: {failure.getErrorMessage()}"

        self.logger.error(
            f"❌ Failed to scrape {request.url}",
            extra={"event_type": "page_fetch_failed", "url": request.url, "reason": reason},
        )
        self.session.record_failure(request.url, reason)
        self.reporter.bump("errors")
        yield from self._next_requests()

    def record_page(self, response: Response, depth: int) -> Optional[Page]:
        url = normalize_url(response.url)
        redirected = response.request is not None and response.request.meta.get("redirect_urls")
        if redirected and not self.session.frontier.mark_visited(url):
            self.logger.info(
                "Skipped page: redirect target already visited",
                extra={"event_type": "page_skipped", "url": url, "reason": "duplicate_redirect"},
            )
            self.reporter.bump("ignored")
            return None

        if not isinstance(response, HtmlResponse):
            self.logger.info(
                "Skipped page: Unhandled content type",
                extra={
                    "event_type": "page_skipped",
                    "url": url,
                    "reason": "unhandled_content_type",
                    "content_type": response.headers.get("Content-Type", b"").decode(errors="replace"),
                },
            )
            self.reporter.bump("ignored")
            return None

        options = self.session.options
        rendered = parse_html(response, extract_tables=options.extract_tables, extract_lists=options.extract_lists)
        all_text = rendered.flattened_text()
        page = Page(
            url=url,
            depth=depth,
            title=rendered.title,
            headings=tuple(rendered.headings),
            content=" ".join(rendered.content_blocks),
            tables=tuple(tuple(tuple(row) for row in table) for table in rendered.tables),
            lists=tuple(tuple(items) for items in rendered.lists),
            raw_links=tuple(rendered.raw_links),
            category=categorize(url, all_text),
            word_count=count_words(all_text),
            timestamp=datetime.now(timezone.utc).isoformat(),
            meta_description=rendered.meta_description,
            meta_keywords=rendered.meta_keywords,
        )

        self.session.add_page(page)
        self.reporter.bump("pages", page.category.value)
        self.reporter.bump("words", page.category.value, page.word_count)
        self._record_links(page)

        self.logger.info(f"✅ Scraped: {page.title} ({page.word_count} words, {len(page.raw_links)} links)")
        return page

    def _record_links(self, page: Page):
        for raw in page.raw_links:
            if raw.href.startswith("#"):
                continue
            try:
                absolute = urljoin(page.url, raw.href)
                scheme = urlparse(absolute).scheme
            except ValueError:
                continue
            if scheme not in ("http", "https"):
                continue

            kind = classify_link_kind(absolute)
            self.session.add_link(
                LinkRecord(
                    url=absolute,
                    text=raw.text,
                    title=raw.title,
                    source_url=page.url,
                    source_title=page.title,
                    context=raw.context,
                    kind=kind,
                )
            )
            self.reporter.bump(kind.value, page.category.value)

            if kind is LinkKind.INTERNAL:
                self.session.frontier.push(absolute, page.depth + 1)
