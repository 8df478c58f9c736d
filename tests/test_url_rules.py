import pytest

from nitjsr_scraper.models import Category, LinkKind
from nitjsr_scraper.utils.url_rules import (
    categorize,
    classify_link_kind,
    is_in_domain_and_visitable,
    normalize_url,
)


class TestIsInDomainAndVisitable:
    @pytest.mark.parametrize(
        "url",
        [
            "https://nitjsr.ac.in/Academics",
            "http://nitjsr.ac.in/",
            "https://www.nitjsr.ac.in/Faculty",
            "/Departments/CSE",
            "https://nitjsr.ac.in/docs/report.pdf",
        ],
    )
    def test_accepts_site_pages(self, url):
        assert is_in_domain_and_visitable(url)

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "#main",
            "mailto:director@nitjsr.ac.in",
            "tel:+91-657-2373407",
            "javascript:void(0)",
            "https://www.facebook.com/nitjsr",
            "https://example.com/nitjsr.ac.in",
            "https://nitjsr.ac.in.evil.com/",
            "ftp://nitjsr.ac.in/file",
            "https://nitjsr.ac.in/static/logo.PNG",
            "https://nitjsr.ac.in/assets/app.js",
            "https://nitjsr.ac.in/fonts/roboto.woff2",
        ],
    )
    def test_rejects_everything_else(self, url):
        assert not is_in_domain_and_visitable(url)

    def test_malformed_url_is_rejected_not_raised(self):
        assert not is_in_domain_and_visitable("http://[nitjsr.ac.in/broken")

    def test_extra_skip_patterns(self):
        assert not is_in_domain_and_visitable("https://nitjsr.ac.in/login", skip_patterns=("/login",))


def test_normalize_url_strips_fragment():
    assert normalize_url("https://nitjsr.ac.in/About#history") == "https://nitjsr.ac.in/About"
    assert normalize_url("https://nitjsr.ac.in/About") == "https://nitjsr.ac.in/About"


class TestClassifyLinkKind:
    @pytest.mark.parametrize(
        "url, kind",
        [
            ("https://nitjsr.ac.in/docs/Placement_Report.PDF", LinkKind.PDF),
            ("https://cdn.example.org/brochure.pdf", LinkKind.PDF),
            ("https://nitjsr.ac.in/images/campus.jpeg", LinkKind.IMAGE),
            ("https://nitjsr.ac.in/images/banner.webp", LinkKind.IMAGE),
            ("https://nitjsr.ac.in/Academics", LinkKind.INTERNAL),
            ("https://library.nitjsr.ac.in/", LinkKind.INTERNAL),
            ("https://www.aicte-india.org/", LinkKind.EXTERNAL),
        ],
    )
    def test_kinds(self, url, kind):
        assert classify_link_kind(url) is kind


class TestCategorize:
    def test_url_keyword(self):
        assert categorize("https://nitjsr.ac.in/Students/Training-Placements") is Category.PLACEMENTS

    def test_first_rule_wins(self):
        # matches both the placements and the students rule
        assert categorize("https://nitjsr.ac.in/Students/Placements") is Category.PLACEMENTS

    def test_content_keyword(self):
        assert categorize("https://nitjsr.ac.in/page/42", "Eligibility criteria for the M.Tech programme") is Category.ADMISSIONS

    def test_department_paths(self):
        assert categorize("https://nitjsr.ac.in/Departments/CSE") is Category.DEPARTMENTS

    def test_general_fallback(self):
        assert categorize("https://nitjsr.ac.in/", "Welcome to the institute") is Category.GENERAL

    def test_placement_rule_precedes_admission_rule(self):
        assert categorize("https://site/placement-and-admission-brochure", "") is Category.PLACEMENTS

    def test_unknown_page_is_general(self):
        assert categorize("https://site/unknown-page", "") is Category.GENERAL
