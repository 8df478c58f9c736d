"""
Crawl controller: runs the spider, drains the discovered PDFs and writes
the session snapshot.

    python -m nitjsr_scraper.run_crawl --max-pages 50 --max-depth 2
"""

import argparse
import logging
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from scrapy.crawler import CrawlerProcess
from scrapy.settings import Settings

from .models import CrawlOptions, SessionState
from .pdf_ingest import PdfIngestor, ingest_session_pdfs
from .session import CrawlSession
from .snapshot import save_snapshot
from .spiders.nitjsr_spider import NitjsrSpider
from .utils.env_override import get_setting

log = logging.getLogger(__name__)


def load_settings() -> Settings:
    settings = Settings()
    settings.setmodule("nitjsr_scraper.settings", priority="project")
    return settings


def build_options(settings, args=None) -> CrawlOptions:
    """Crawl options from settings (env overridable), then CLI flags on top."""
    options = CrawlOptions(
        seed_urls=get_setting(settings, "SEED_URLS", [], list),
        max_pages=get_setting(settings, "MAX_PAGES", 100, int),
        max_depth=get_setting(settings, "MAX_DEPTH", 3, int),
        delay_ms=get_setting(settings, "INTER_PAGE_DELAY_MS", 1500, int),
        page_timeout=get_setting(settings, "DOWNLOAD_TIMEOUT", 45.0, float),
        pdf_cap=get_setting(settings, "PDF_CAP", 50, int),
        pdf_max_bytes=get_setting(settings, "PDF_MAX_BYTES", 50 * 1024 * 1024, int),
        pdf_timeout=get_setting(settings, "PDF_TIMEOUT", 60.0, float),
        track_links=get_setting(settings, "TRACK_LINKS", True, bool),
        extract_tables=get_setting(settings, "EXTRACT_TABLES", True, bool),
        extract_lists=get_setting(settings, "EXTRACT_LISTS", True, bool),
        process_pdfs=get_setting(settings, "PROCESS_PDFS", True, bool),
    )
    if args is None:
        return options

    if args.seed:
        options.seed_urls = list(args.seed)
    if args.max_pages is not None:
        options.max_pages = args.max_pages
    if args.max_depth is not None:
        options.max_depth = args.max_depth
    if args.pdf_cap is not None:
        options.pdf_cap = args.pdf_cap
    if args.no_pdfs:
        options.process_pdfs = False
    return options


def apply_options(settings: Settings, options: CrawlOptions):
    settings.set("DOWNLOAD_DELAY", options.delay_ms / 1000, priority="cmdline")
    settings.set("DOWNLOAD_TIMEOUT", options.page_timeout, priority="cmdline")


def run(options: CrawlOptions, settings: Settings, output_dir: Path) -> CrawlSession:
    """
    Drive one session through running -> draining_pdfs -> saved.
    Returns the saved session.
    """
    session = CrawlSession(options=options)
    apply_options(settings, options)

    process = CrawlerProcess(settings, install_root_handler=False)
    crawler = process.create_crawler(NitjsrSpider)
    process.crawl(crawler, session=session)
    process.start()

    session.state = SessionState.DRAINING_PDFS
    if options.process_pdfs and session.pdf_urls:
        ingestor = PdfIngestor(
            max_bytes=options.pdf_max_bytes,
            timeout=options.pdf_timeout,
            user_agent=settings.get("USER_AGENT"),
        )
        ingest_session_pdfs(session, ingestor)
    else:
        log.info(
            "PDF processing skipped",
            extra={"event_type": "pdf_ingest_skipped", "enabled": options.process_pdfs, "found": len(session.pdf_urls)},
        )

    path = save_snapshot(session, output_dir)
    session.state = SessionState.SAVED
    log.info(f"💾 Snapshot written to {path}")

    if crawler.spider is not None:
        console = Console()
        console.print(crawler.spider.reporter.get_table(crawler.spider.start_time))
    return session


def print_summary(session: CrawlSession):
    summary = session.summary()
    console = Console()
    console.print(
        f"[bold green]✅ Crawl finished[/bold green]: {summary['total_pages']} pages, "
        f"{summary['total_pdfs']} PDFs, {summary['total_links']} links, "
        f"{summary['failed_pages']} failed pages, {summary['failed_pdfs']} failed PDFs"
    )
    for category in summary["categories"]:
        if category["count"]:
            console.print(f"  [cyan]{category['name']}[/cyan]: {category['count']} pages")
    for pdf in summary["pdf_breakdown"]:
        console.print(f"  📄 {pdf['title']} ({pdf['pages']} pages, {pdf['word_count']} words)")


def main():
    parser = argparse.ArgumentParser(description="Crawl nitjsr.ac.in and save a JSON snapshot.")
    parser.add_argument("--seed", action="append", help="Seed URL (repeatable). Defaults to SEED_URLS.")
    parser.add_argument("--max-pages", type=int, default=None)
    parser.add_argument("--max-depth", type=int, default=None)
    parser.add_argument("--pdf-cap", type=int, default=None)
    parser.add_argument("--no-pdfs", action="store_true", help="Skip downloading discovered PDFs.")
    parser.add_argument("--output-dir", default=None, help="Snapshot directory. Defaults to SCRAPED_DATA_DIR.")
    args = parser.parse_args()

    logging.basicConfig(
        level="INFO",
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )

    settings = load_settings()
    options = build_options(settings, args)
    output_dir = Path(args.output_dir or get_setting(settings, "SCRAPED_DATA_DIR", "scraped_data"))

    started = datetime.now(timezone.utc)
    log.info(
        "Starting crawl",
        extra={"event_type": "crawl_started", "seeds": len(options.seed_urls), "max_pages": options.max_pages},
    )
    session = run(options, settings, output_dir)
    print_summary(session)
    log.info(f"Total runtime: {str(datetime.now(timezone.utc) - started).split('.')[0]}")


if __name__ == "__main__":
    main()
