import asyncio
import logging

from docqa.db.store import DocumentStore
from docqa.models.files import CHUNKS, FILE_PARTS

logger = logging.getLogger(__name__)

class DeletionService:
    def __init__(self, store: DocumentStore, batch_size: int = 450):
        self.store = store
        self.batch_size = batch_size

    async def delete_where(self, collection: str, query: dict) -> int:
        """Delete every match in bounded batches, one transaction per batch."""
        total = 0
        while True:
            ids = await self.store.fetch_ids(collection, query, self.batch_size)
            if not ids:
                break
            await self.store.delete_batch(collection, ids)
            total += len(ids)
            await asyncio.sleep(0)
        return total

    async def delete_document(self, doc_id: str) -> dict:
        # 1. Chunks
        chunks = await self.delete_where(CHUNKS, {"doc_id": doc_id})
        # 2. File parts
        parts = await self.delete_where(FILE_PARTS, {"file_id": doc_id})
        # 3. File + document metadata together
        await self.store.delete_document_root(doc_id)

        logger.info(f"Deleted document {doc_id}: {chunks} chunks, {parts} file parts")
        return {"chunks": chunks, "file_parts": parts}
