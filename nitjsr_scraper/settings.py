# Scrapy settings for nitjsr_scraper project
#
# For simplicity, this file contains only settings considered important or
# commonly used. You can find more settings consulting the documentation:
#
#     https://docs.scrapy.org/en/latest/topics/settings.html
#     https://docs.scrapy.org/en/latest/topics/downloader-middleware.html
#     https://docs.scrapy.org/en/latest/topics/spider-middleware.html

import os

# ##################################################
# Crawl values; every one can be overridden via env
# ##################################################

SEED_URLS = [
    "https://nitjsr.ac.in/",
    "https://nitjsr.ac.in/Students/Placements",
    "https://nitjsr.ac.in/Students/Training-Placements",
    "https://nitjsr.ac.in/Admissions",
    "https://nitjsr.ac.in/Academics",
    "https://nitjsr.ac.in/Faculty",
    "https://nitjsr.ac.in/Research",
    "https://nitjsr.ac.in/Students",
    "https://nitjsr.ac.in/Administration",
    "https://nitjsr.ac.in/Departments/CSE",
    "https://nitjsr.ac.in/Departments/ECE",
    "https://nitjsr.ac.in/Departments/EEE",
    "https://nitjsr.ac.in/Departments/ME",
    "https://nitjsr.ac.in/Departments/CE",
    "https://nitjsr.ac.in/Departments/CHE",
    "https://nitjsr.ac.in/Departments/MME",
    "https://nitjsr.ac.in/Departments/Physics",
    "https://nitjsr.ac.in/Departments/Chemistry",
    "https://nitjsr.ac.in/Departments/Mathematics",
    "https://nitjsr.ac.in/Departments/HSS",
    "https://nitjsr.ac.in/About",
    "https://nitjsr.ac.in/Infrastructure",
    "https://nitjsr.ac.in/News",
    "https://nitjsr.ac.in/Events",
    "https://nitjsr.ac.in/Tenders",
    "https://nitjsr.ac.in/Recruitments",
    "https://nitjsr.ac.in/People/Faculty",
]

MAX_PAGES = int(os.getenv("MAX_PAGES", 300))
MAX_DEPTH = int(os.getenv("MAX_DEPTH", 4))
INTER_PAGE_DELAY_MS = int(os.getenv("INTER_PAGE_DELAY_MS", 1500))

PDF_CAP = int(os.getenv("PDF_CAP", 50))
PDF_MAX_BYTES = 50 * 1024 * 1024
PDF_TIMEOUT = 60

TRACK_LINKS = True
EXTRACT_TABLES = True
EXTRACT_LISTS = True
PROCESS_PDFS = True

SCRAPED_DATA_DIR = os.getenv("SCRAPED_DATA_DIR", "scraped_data")

# Extra substrings that keep a URL out of the frontier, on top of the
# mailto:/tel:/social-media denylist in utils.url_rules.
IGNORED_URL_PATTERNS_LIST = [
    "/login",
    "/wp-admin/",
]

# ##################################################

# Identifier for your bot. Used in logs, the default User-Agent header, etc.
BOT_NAME = "nitjsr_scraper"

# Where Scrapy will look for your Spider classes
SPIDER_MODULES = ["nitjsr_scraper.spiders"]
NEWSPIDER_MODULE = "nitjsr_scraper.spiders"

# Crawl responsibly by identifying yourself (and your website) on the user-agent
USER_AGENT = "nitjsr-scraper-bot/1.0"

# Obey robots.txt rules
ROBOTSTXT_OBEY = True

# One page at a time, in frontier order
CONCURRENT_REQUESTS = 1
CONCURRENT_REQUESTS_PER_DOMAIN = 1

# Pause between page fetches; run_crawl sets this from INTER_PAGE_DELAY_MS
DOWNLOAD_DELAY = INTER_PAGE_DELAY_MS / 1000
RANDOMIZE_DOWNLOAD_DELAY = False

# Disable Telnet Console (enabled by default)
TELNETCONSOLE_ENABLED = False

DOWNLOADER_MIDDLEWARES = {
    # default priority is 550
    "nitjsr_scraper.middlewares.NitjsrErrorMiddleware": 550,
}

# Set settings whose default value is deprecated to a future-proof value
TWISTED_REACTOR = "twisted.internet.asyncioreactor.AsyncioSelectorReactor"
FEED_EXPORT_ENCODING = "utf-8"

# How verbose the logs are (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = "INFO"

# A failed page is skipped, not retried
RETRY_ENABLED = False

# Allow the crawler to follow HTTP 3xx redirects
REDIRECT_ENABLED = True

# Stop after following 5 redirects for a single request
REDIRECT_MAX_TIMES = 5

# Abort any page taking longer than 45 seconds
DOWNLOAD_TIMEOUT = 45

# Default allowed length > 2083, 0 to disable it
URLLENGTH_LIMIT = 0
