import pytest
from conftest import FakeEmbedder, FakeLLM, FakeStore, match

from nitjsr_rag.exceptions import EmbeddingError, GenerationError
from nitjsr_rag.link_db import LinkDatabase
from nitjsr_rag.retrieval import (
    LINK_SOURCE_SCORE,
    NO_INFORMATION_ANSWER,
    RagSystem,
    RetrievedDocument,
    build_prompt,
)


@pytest.fixture
def link_db(sample_session):
    db = LinkDatabase()
    db.build(sample_session)
    return db


@pytest.fixture
def placement_matches():
    return [
        match(
            "pdf-0-chunk-0",
            0.91,
            text="PDF Title: Placement Report 2023\n\n92% of eligible students were placed.",
            source="pdf",
            source_type="pdf_document",
            url="https://nitjsr.ac.in/docs/placement_2023.pdf",
            title="Placement Report 2023",
            page_count=4,
            category="placements",
        ),
        match(
            "page-1-chunk-0",
            0.74,
            text="Title: Training & Placement\n\nThe training and placement cell coordinates recruitment.",
            source="webpage",
            source_type="page",
            url="https://nitjsr.ac.in/Students/Placements",
            title="Training & Placement",
            category="placements",
        ),
    ]


def test_zero_matches_short_circuits_without_generation():
    llm = FakeLLM()
    rag = RagSystem(FakeEmbedder(), FakeStore(matches=[]), llm)

    answer = rag.chat("What is the hostel fee?")

    assert answer.answer == NO_INFORMATION_ANSWER
    assert answer.sources == []
    assert answer.relevant_links == []
    assert answer.confidence == 0
    assert llm.prompts == []


def test_chat_answers_with_sources_and_links(link_db, placement_matches):
    embedder = FakeEmbedder()
    llm = FakeLLM()
    rag = RagSystem(embedder, FakeStore(matches=placement_matches), llm, link_db=link_db)

    answer = rag.chat("Where can I find the placement report 2023 pdf?")

    assert answer.answer == llm.reply
    assert answer.confidence == 0.91
    assert embedder.queries == ["Where can I find the placement report 2023 pdf?"]

    doc_sources = answer.sources[:2]
    assert [s.score for s in doc_sources] == [0.91, 0.74]
    assert doc_sources[0].text.endswith("...")
    assert doc_sources[0].page_count == 4

    link_sources = answer.sources[2:]
    assert [s.url for s in link_sources] == ["https://nitjsr.ac.in/docs/placement_2023.pdf"]
    assert link_sources[0].score == LINK_SOURCE_SCORE
    assert link_sources[0].source_type == "link"


def test_prompt_is_grounded(link_db, placement_matches):
    llm = FakeLLM()
    rag = RagSystem(FakeEmbedder(), FakeStore(matches=placement_matches), llm, link_db=link_db)

    rag.chat("Where can I find the placement report 2023 pdf?")

    [prompt] = llm.prompts
    assert "[PDF Document 1: Placement Report 2023 (4 pages)]" in prompt
    assert "[Page 2: Training & Placement]" in prompt
    assert "Relevant Links Available:" in prompt
    assert "• Placement Report 2023: https://nitjsr.ac.in/docs/placement_2023.pdf (PDF Document)" in prompt
    assert prompt.rstrip().endswith("Answer:")
    assert "Question: Where can I find the placement report 2023 pdf?" in prompt


def test_prompt_without_links_or_context():
    prompt = build_prompt("anything?", [], [])
    assert "No relevant context found." in prompt
    assert "Relevant Links Available" not in prompt


def test_retrieved_documents_take_text_from_payload(placement_matches):
    rag = RagSystem(FakeEmbedder(), FakeStore(matches=placement_matches), FakeLLM())

    docs = rag.query_documents("placements", top_k=1)

    assert docs == [
        RetrievedDocument(
            text=placement_matches[0].payload["text"],
            score=0.91,
            metadata=placement_matches[0].payload,
        )
    ]


def test_generation_failure_propagates(placement_matches):
    rag = RagSystem(FakeEmbedder(), FakeStore(matches=placement_matches), FakeLLM(error=GenerationError("ollama down")))

    with pytest.raises(GenerationError):
        rag.chat("placements?")


def test_embedding_failure_propagates():
    class BrokenEmbedder(FakeEmbedder):
        def embed_query(self, text):
            raise EmbeddingError("model not loaded")

    llm = FakeLLM()
    rag = RagSystem(BrokenEmbedder(), FakeStore(), llm)

    with pytest.raises(EmbeddingError):
        rag.chat("placements?")
    assert llm.prompts == []


def test_index_stats_and_clear(link_db):
    store = FakeStore()
    rag = RagSystem(FakeEmbedder(), store, FakeLLM(), link_db=link_db)

    assert rag.index_stats() == {"total_vectors": 0, "dimension": 4, "fullness": 1.0, "link_database_size": 5}

    rag.clear_index()

    assert store.deleted
    assert rag.index_stats()["link_database_size"] == 0
