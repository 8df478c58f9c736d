"""
URL filtering, link kind classification and topical categorization.

Everything here is a pure function of its arguments so the crawl rules can be
tested without a running spider.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Tuple
from urllib.parse import urldefrag, urljoin, urlparse

from ..models import Category, LinkKind

BASE_URL = "https://nitjsr.ac.in"
TARGET_DOMAIN = "nitjsr.ac.in"

SKIP_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".css",
    ".js",
    ".ico",
    ".svg",
    ".woff",
    ".woff2",
    ".ttf",
)

SKIP_PATTERNS = (
    "mailto:",
    "tel:",
    "javascript:",
    "facebook.com",
    "twitter.com",
    "linkedin.com",
    "youtube.com",
    "google.com",
    "maps.google",
    "instagram.com",
)

IMAGE_EXTENSION_RE = re.compile(r"\.(jpg|jpeg|png|gif|webp)$")


@dataclass(frozen=True)
class CategoryRule:
    category: Category
    url_keywords: Tuple[str, ...]
    content_keywords: Tuple[str, ...] = ()

    def matches(self, url_lower: str, content_lower: str) -> bool:
        return any(k in url_lower for k in self.url_keywords) or any(k in content_lower for k in self.content_keywords)


# Order matters: the first matching rule decides the category.
CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        Category.PLACEMENTS,
        ("placement", "career", "training"),
        ("placement", "career", "corporate"),
    ),
    CategoryRule(
        Category.ADMISSIONS,
        ("admission", "apply", "entrance", "jee"),
        ("admission", "eligibility"),
    ),
    CategoryRule(
        Category.ACADEMICS,
        ("academic", "syllabus", "curriculum", "course", "program"),
        ("academic",),
    ),
    CategoryRule(
        Category.FACULTY,
        ("faculty", "staff", "teacher", "hod"),
        ("professor", "faculty"),
    ),
    CategoryRule(
        Category.STUDENTS,
        ("student", "hostel", "activity", "club", "society"),
        ("student life",),
    ),
    CategoryRule(
        Category.RESEARCH,
        ("research", "publication", "phd", "project", "innovation"),
        ("research",),
    ),
    CategoryRule(
        Category.DEPARTMENTS,
        (
            "department",
            "dept",
            "/cse",
            "/ece",
            "/mech",
            "/eee",
            "/civil",
            "/che",
            "/mme",
            "/phy",
            "/chem",
            "/math",
            "/hss",
        ),
    ),
    CategoryRule(
        Category.NEWS,
        ("news", "announcement", "notice", "tender", "recruitment"),
        ("news",),
    ),
    CategoryRule(
        Category.EVENTS,
        ("event", "seminar", "workshop", "conference", "symposium"),
        ("event",),
    ),
    CategoryRule(
        Category.ADMINISTRATION,
        ("admin", "office", "registrar", "director", "dean"),
        ("administration",),
    ),
)


def normalize_url(url: str) -> str:
    """Drop the fragment so '/a#top' and '/a' share one visited-set entry."""
    return urldefrag(url)[0]


def _host_matches(hostname: str, domain: str) -> bool:
    hostname = (hostname or "").lower()
    return hostname == domain or hostname.endswith("." + domain)


def is_in_domain_and_visitable(
    url: str,
    base_url: str = BASE_URL,
    domain: str = TARGET_DOMAIN,
    skip_patterns: Iterable[str] = SKIP_PATTERNS,
) -> bool:
    """True when `url` is an http(s) page on the target site worth fetching."""
    if not url or url.strip().startswith("#"):
        return False

    url_lower = url.lower()
    if any(pattern in url_lower for pattern in skip_patterns):
        return False

    try:
        parsed = urlparse(urljoin(base_url, url.strip()))
        hostname = parsed.hostname
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https") or not _host_matches(hostname, domain):
        return False

    return not parsed.path.lower().endswith(SKIP_EXTENSIONS)


def classify_link_kind(url: str, domain: str = TARGET_DOMAIN) -> LinkKind:
    """Decide once, from extension and host, what kind of link `url` is."""
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return LinkKind.EXTERNAL

    path = parsed.path.lower()
    if path.endswith(".pdf"):
        return LinkKind.PDF
    if IMAGE_EXTENSION_RE.search(path):
        return LinkKind.IMAGE
    if _host_matches(hostname, domain):
        return LinkKind.INTERNAL
    return LinkKind.EXTERNAL


def categorize(url: str, content: str = "") -> Category:
    url_lower = (url or "").lower()
    content_lower = (content or "").lower()
    for rule in CATEGORY_RULES:
        if rule.matches(url_lower, content_lower):
            return rule.category
    return Category.GENERAL
