"""
local_models.py

• multilingual-e5 embedder via sentence-transformers, on whatever torch device is available
• Generation LLM via Ollama's /api/generate endpoint
• Qdrant collection wrapper used by the batcher and the retriever
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
import torch
from qdrant_client import QdrantClient
from qdrant_client.http.models import Distance, PointStruct, VectorParams
from sentence_transformers import SentenceTransformer

from . import config
from .exceptions import ConfigurationError, EmbeddingError, GenerationError, VectorStoreError

log = logging.getLogger(__name__)

QUERY_PREFIX = "query: "
PASSAGE_PREFIX = "passage: "


def select_device(preferred: str = "auto") -> str:
    if preferred and preferred != "auto":
        return preferred
    if torch.cuda.is_available():
        return "cuda"
    if torch.backends.mps.is_available() and torch.backends.mps.is_built():
        return "mps"
    return "cpu"


# ── embedder ────────────────────────────────────────────────────────────
class SentenceTransformerEmbedder:
    """
    Blocking embedder. e5 models expect "query: " on questions and
    "passage: " on indexed text; vectors come back unit length.
    """

    def __init__(self, model_name: str = config.EMBEDDING_MODEL_NAME, device: str = config.EMBEDDING_DEVICE, model=None):
        self.device = select_device(device)
        self.model_name = model_name
        if model is None:
            log.info(f"🔥 Loading {model_name} on device: {self.device}")
            model = SentenceTransformer(model_name, device=self.device)
        self.model = model

    @property
    def dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()

    def embed_query(self, text: str) -> list[float]:
        return self._encode(QUERY_PREFIX + text)

    def embed_document(self, text: str) -> list[float]:
        return self._encode(PASSAGE_PREFIX + text)

    def _encode(self, text: str) -> list[float]:
        try:
            with torch.no_grad():
                vector = self.model.encode(text, normalize_embeddings=True)
        except Exception as e:
            raise EmbeddingError(f"Embedding with {self.model_name} failed: {e}") from e
        return [float(x) for x in vector]


# ── Ollama wrapper ──────────────────────────────────────────────────────
class OllamaLLM:
    """Thin blocking wrapper around Ollama's /api/generate endpoint."""

    def __init__(
        self,
        model_name: str = config.OLLAMA_MODEL_NAME,
        host: str = config.OLLAMA_HOST,
        http: Optional[requests.Session] = None,
    ):
        self.model_name = model_name
        self.host = host.rstrip("/")
        self.http = http or requests.Session()

    def generate(self, prompt: str) -> str:
        try:
            r = self.http.post(
                f"{self.host}/api/generate",
                json={
                    "model": self.model_name,
                    "prompt": prompt,
                    "stream": False,
                    "options": {
                        "num_ctx": config.OLLAMA_NUM_CTX,
                        "num_predict": config.OLLAMA_NUM_PREDICT,
                    },
                },
                timeout=config.OLLAMA_TIMEOUT,
            )
            r.raise_for_status()
            return r.json()["response"]
        except requests.RequestException as e:
            raise GenerationError(f"Ollama request to {self.host} failed: {e}") from e
        except (KeyError, ValueError) as e:
            raise GenerationError(f"Unexpected response from Ollama: {e}") from e


# ── vector store ────────────────────────────────────────────────────────
@dataclass
class VectorRecord:
    id: str
    vector: List[float]
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorMatch:
    id: str
    score: float
    payload: Dict[str, Any] = field(default_factory=dict)


def point_id(chunk_id: str) -> str:
    # Qdrant only takes unsigned ints or UUIDs as point ids
    return str(uuid.uuid5(uuid.NAMESPACE_URL, chunk_id))


class QdrantVectorStore:
    def __init__(
        self,
        url: str = config.QDRANT_URL,
        collection: str = config.QDRANT_COLLECTION,
        dimension: int = config.EMBEDDING_DIM,
        api_key: Optional[str] = config.QDRANT_API_KEY,
        client: Optional[QdrantClient] = None,
    ):
        self.url = url
        self.collection = collection
        self.dimension = dimension
        self.client = client or QdrantClient(url=url, api_key=api_key, timeout=config.QDRANT_TIMEOUT)

    def check_connection(self):
        try:
            self.client.get_collections()
        except Exception as e:
            raise ConfigurationError(f"Qdrant at {self.url} is unreachable: {e}") from e

    def ensure_collection(self):
        if self.client.collection_exists(self.collection):
            return
        log.info(f"🔨 Creating Qdrant collection: {self.collection}")
        self.client.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(size=self.dimension, distance=Distance.COSINE),
        )

    def upsert(self, records: List[VectorRecord]):
        points = [
            PointStruct(id=point_id(record.id), vector=record.vector, payload={**record.payload, "chunk_id": record.id})
            for record in records
        ]
        try:
            self.client.upsert(collection_name=self.collection, points=points, wait=True)
        except Exception as e:
            raise VectorStoreError(f"Upsert of {len(points)} points into '{self.collection}' failed: {e}") from e

    def query(self, vector: List[float], top_k: int) -> List[VectorMatch]:
        try:
            response = self.client.query_points(
                collection_name=self.collection,
                query=vector,
                limit=top_k,
                with_payload=True,
            )
        except Exception as e:
            raise VectorStoreError(f"Search in '{self.collection}' failed: {e}") from e

        matches = []
        for point in response.points:
            payload = dict(point.payload or {})
            matches.append(VectorMatch(id=payload.get("chunk_id", str(point.id)), score=point.score, payload=payload))
        return matches

    def delete_all(self):
        if self.client.collection_exists(self.collection):
            self.client.delete_collection(collection_name=self.collection)
        self.ensure_collection()

    def describe_stats(self) -> dict:
        if not self.client.collection_exists(self.collection):
            return {"total_vectors": 0, "dimension": self.dimension, "fullness": 0.0}

        info = self.client.get_collection(collection_name=self.collection)
        points = info.points_count or 0
        indexed = info.indexed_vectors_count or 0
        vectors = info.config.params.vectors
        dimension = getattr(vectors, "size", self.dimension)
        return {
            "total_vectors": points,
            "dimension": dimension,
            "fullness": round(indexed / points, 4) if points else 0.0,
        }
