import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import config
from .link_db import PDF_DOCUMENT, LinkDatabase, LinkEntry

log = logging.getLogger(__name__)

NO_INFORMATION_ANSWER = (
    "I don't have specific information about that topic in the NIT Jamshedpur data. "
    "Could you please rephrase your question or ask about placements, academics, faculty, "
    "departments, or other college-related topics?"
)

LINK_SOURCE_SCORE = 0.8
PREVIEW_LENGTH = 200

PROMPT_TEMPLATE = """You are an AI assistant specializing in NIT Jamshedpur information. Use the provided context to answer questions accurately and helpfully.

Context:
{context}{links}

Question: {question}

Instructions:
- Answer based primarily on the provided context
- If the context doesn't contain enough information, state that clearly
- Provide specific data points when available (percentages, package amounts, company names)
- Be comprehensive but well-structured
- When mentioning statistics, provide the source or timeframe when available
- If relevant links are available, mention them in your response
- For PDF documents, specify the document name and that it's a PDF
- Include direct URLs when they would be helpful to the user
- Format your response clearly with proper structure
- If asked about documents or PDFs, provide the actual links when available

Answer:"""


@dataclass
class RetrievedDocument:
    text: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Source:
    text: str
    source: Optional[str]
    source_type: Optional[str]
    url: Optional[str]
    title: Optional[str]
    score: float
    category: Optional[str] = None
    page_count: Optional[int] = None


@dataclass
class Answer:
    answer: str
    sources: List[Source] = field(default_factory=list)
    relevant_links: List[LinkEntry] = field(default_factory=list)
    confidence: float = 0.0


def snippet_label(index: int, doc: RetrievedDocument) -> str:
    title = doc.metadata.get("title", "Untitled")
    if doc.metadata.get("source_type") == PDF_DOCUMENT:
        return f"[PDF Document {index}: {title} ({doc.metadata.get('page_count', '?')} pages)]"
    return f"[Page {index}: {title}]"


def build_prompt(question: str, documents: List[RetrievedDocument], links: List[LinkEntry]) -> str:
    context = "\n\n".join(f"{snippet_label(i, doc)} {doc.text}" for i, doc in enumerate(documents, start=1))
    links_section = ""
    if links:
        lines = [f"• {link.text}: {link.url} {'(PDF Document)' if link.is_pdf else '(Web Page)'}" for link in links]
        links_section = "\n\nRelevant Links Available:\n" + "\n".join(lines)
    return PROMPT_TEMPLATE.format(
        context=context or "No relevant context found.",
        links=links_section,
        question=question,
    )


def build_sources(documents: List[RetrievedDocument], links: List[LinkEntry]) -> List[Source]:
    sources = [
        Source(
            text=doc.text[:PREVIEW_LENGTH] + "...",
            source=doc.metadata.get("source"),
            source_type=doc.metadata.get("source_type"),
            url=doc.metadata.get("url"),
            title=doc.metadata.get("title"),
            score=doc.score,
            category=doc.metadata.get("category"),
            page_count=doc.metadata.get("page_count"),
        )
        for doc in documents
    ]
    sources.extend(
        Source(
            text=link.context or link.text,
            source=link.type,
            source_type="link",
            url=link.url,
            title=link.text,
            score=LINK_SOURCE_SCORE,
            category="link",
        )
        for link in links
    )
    return sources


class RagSystem:
    """
    Retrieval-augmented question answering over the crawled site.

    Embedding, search and generation errors are not caught here; they reach
    the caller as EmbeddingError, VectorStoreError or GenerationError.
    """

    def __init__(self, embedder, store, llm, link_db: Optional[LinkDatabase] = None, top_k: int = config.TOP_K):
        self.embedder = embedder
        self.store = store
        self.llm = llm
        self.link_db = link_db if link_db is not None else LinkDatabase()
        self.top_k = top_k

    def query_documents(self, question: str, top_k: Optional[int] = None) -> List[RetrievedDocument]:
        log.info(f"🔍 Searching for: \"{question}\"")
        vector = self.embedder.embed_query(question)
        matches = self.store.query(vector, top_k or self.top_k)
        documents = [
            RetrievedDocument(text=match.payload.get("text", ""), score=match.score, metadata=match.payload)
            for match in matches
        ]
        log.info(f"📋 Found {len(documents)} relevant documents")
        return documents

    def generate_response(self, question: str, documents: List[RetrievedDocument]) -> Answer:
        links = self.link_db.find_relevant(question, documents)
        prompt = build_prompt(question, documents, links)
        text = self.llm.generate(prompt)
        return Answer(
            answer=text,
            sources=build_sources(documents, links),
            relevant_links=links,
            confidence=documents[0].score if documents else 0.0,
        )

    def chat(self, question: str) -> Answer:
        documents = self.query_documents(question, self.top_k)
        if not documents:
            return Answer(answer=NO_INFORMATION_ANSWER)
        return self.generate_response(question, documents)

    def index_stats(self) -> dict:
        stats = self.store.describe_stats()
        return {
            "total_vectors": stats.get("total_vectors", 0),
            "dimension": stats.get("dimension", config.EMBEDDING_DIM),
            "fullness": stats.get("fullness", 0.0),
            "link_database_size": len(self.link_db),
        }

    def clear_index(self):
        log.info("🗑️ Clearing vector index and link database...")
        self.store.delete_all()
        self.link_db.clear()
