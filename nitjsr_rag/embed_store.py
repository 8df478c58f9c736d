import asyncio
import logging
from dataclasses import dataclass
from typing import List, Sequence

from tqdm import tqdm

from . import config
from .local_models import VectorRecord
from .utils.chunker import DocumentChunk

log = logging.getLogger(__name__)


@dataclass
class StoreResult:
    attempted: int = 0
    stored: int = 0
    failed_batches: int = 0

    @property
    def complete(self) -> bool:
        return self.stored == self.attempted


def batched(items: Sequence, size: int) -> List[Sequence]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class EmbeddingBatcher:
    """
    Embeds chunks and upserts them in small sequential batches.

    Embeddings within a batch run concurrently in worker threads. A batch
    that fails is logged and skipped; the rest still go through.
    """

    def __init__(self, embedder, store, batch_size: int = config.EMBED_BATCH_SIZE, delay: float = config.EMBED_BATCH_DELAY):
        self.embedder = embedder
        self.store_backend = store
        self.batch_size = batch_size
        self.delay = delay

    async def _embed_batch(self, batch: Sequence[DocumentChunk]) -> List[VectorRecord]:
        vectors = await asyncio.gather(*(asyncio.to_thread(self.embedder.embed_document, chunk.text) for chunk in batch))
        return [
            VectorRecord(
                id=chunk.id,
                vector=vector,
                payload={"text": chunk.text[: config.METADATA_TEXT_LIMIT], **chunk.metadata},
            )
            for chunk, vector in zip(batch, vectors)
        ]

    async def store(self, chunks: Sequence[DocumentChunk]) -> StoreResult:
        result = StoreResult(attempted=len(chunks))
        batches = batched(list(chunks), self.batch_size)

        for index, batch in enumerate(tqdm(batches, desc="Embedding & upserting", unit="batch")):
            try:
                records = await self._embed_batch(batch)
                await asyncio.to_thread(self.store_backend.upsert, records)
                result.stored += len(records)
                log.debug(f"✅ Batch {index + 1}/{len(batches)} stored")
            except Exception as e:
                result.failed_batches += 1
                log.error(
                    f"❌ Error processing batch {index + 1}/{len(batches)}: {e}",
                    extra={"event_type": "batch_failed", "batch": index + 1, "size": len(batch)},
                )

            if index < len(batches) - 1:
                await asyncio.sleep(self.delay)

        if result.complete:
            log.info(f"🎉 Stored {result.stored} chunks in {len(batches)} batches")
        else:
            log.warning(
                f"Stored {result.stored} of {result.attempted} chunks; {result.failed_batches} batch(es) failed",
                extra={"event_type": "store_partial", "stored": result.stored, "attempted": result.attempted},
            )
        return result
