import fitz
import pytest
from scrapy.http import HtmlResponse, Request

from nitjsr_rag.local_models import VectorMatch
from nitjsr_scraper.models import (
    Category,
    CrawlOptions,
    Heading,
    LinkKind,
    LinkRecord,
    Page,
    PdfDocument,
)
from nitjsr_scraper.session import CrawlSession


def html_response(url: str, body: str, **meta) -> HtmlResponse:
    request = Request(url, meta=meta)
    return HtmlResponse(url=url, body=body.encode("utf-8"), encoding="utf-8", request=request)


def make_pdf_bytes(*pages: str, title: str = "") -> bytes:
    doc = fitz.open()
    if title:
        doc.set_metadata({"title": title})
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_page(url="https://nitjsr.ac.in/About", title="About NIT Jamshedpur", content=None, **overrides) -> Page:
    content = content or (
        "National Institute of Technology Jamshedpur is one of the 31 NITs of India. "
        "It was established in 1960 as a Regional Institute of Technology."
    )
    fields = dict(
        url=url,
        depth=0,
        title=title,
        headings=(Heading(1, title),),
        content=content,
        tables=(),
        lists=(),
        raw_links=(),
        category=Category.GENERAL,
        word_count=len(content.split()),
        timestamp="2024-06-01T10:00:00+00:00",
    )
    fields.update(overrides)
    return Page(**fields)


def make_link(url, text, kind=LinkKind.PDF, source_url="https://nitjsr.ac.in/Students/Placements") -> LinkRecord:
    return LinkRecord(
        url=url,
        text=text,
        title="",
        source_url=source_url,
        source_title="Training & Placement",
        context=f"Download {text}",
        kind=kind,
    )


@pytest.fixture
def sample_session() -> CrawlSession:
    session = CrawlSession(options=CrawlOptions(seed_urls=["https://nitjsr.ac.in/"]))
    session.add_page(make_page())
    session.add_page(
        make_page(
            url="https://nitjsr.ac.in/Students/Placements",
            title="Training & Placement",
            content="The training and placement cell coordinates campus recruitment for all branches. " * 5,
            category=Category.PLACEMENTS,
            tables=((("Year", "Average Package"), ("2023", "12 LPA")),),
            lists=(("Over 200 companies visited",),),
        )
    )
    session.add_link(make_link("https://nitjsr.ac.in/docs/placement_2023.pdf", "Placement Report 2023"))
    session.add_link(
        make_link("https://nitjsr.ac.in/Academics", "Academic Calendar", kind=LinkKind.INTERNAL, source_url="https://nitjsr.ac.in/")
    )
    session.add_pdf(
        PdfDocument(
            url="https://nitjsr.ac.in/docs/placement_2023.pdf",
            title="Placement Report 2023",
            text="Placement statistics for the 2023 batch. " * 10,
            page_count=4,
            category=Category.PLACEMENTS,
            word_count=60,
            timestamp="2024-06-01T10:05:00+00:00",
            source_url="https://nitjsr.ac.in/Students/Placements",
            source_title="Training & Placement",
            context="Download Placement Report 2023",
        )
    )
    return session


class FakeEmbedder:
    def __init__(self, fail_on=None, dimension=4):
        self.fail_on = fail_on or set()
        self.dimension = dimension
        self.queries = []
        self.documents = []

    def embed_query(self, text):
        self.queries.append(text)
        return [0.1] * self.dimension

    def embed_document(self, text):
        if text in self.fail_on:
            raise RuntimeError(f"quota exceeded for {text!r}")
        self.documents.append(text)
        return [float(len(text))] * self.dimension


class FakeStore:
    def __init__(self, matches=None):
        self.matches = matches or []
        self.upserted = []
        self.deleted = False

    def upsert(self, records):
        self.upserted.extend(records)

    def query(self, vector, top_k):
        return self.matches[:top_k]

    def delete_all(self):
        self.deleted = True
        self.upserted.clear()

    def describe_stats(self):
        return {"total_vectors": len(self.upserted), "dimension": 4, "fullness": 1.0}


class FakeLLM:
    def __init__(self, reply="NIT Jamshedpur had a 92% placement rate in 2023.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


def match(chunk_id, score, **payload) -> VectorMatch:
    payload.setdefault("text", f"text of {chunk_id}")
    return VectorMatch(id=chunk_id, score=score, payload=payload)
