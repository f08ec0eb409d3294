import asyncio
import logging
from datetime import datetime
from typing import Optional

from docqa.config import Settings
from docqa.db.store import DocumentStore
from docqa.errors import InputValidationError, PayloadTooLargeError
from docqa.ingestion.chunker import DocumentChunker
from docqa.models.files import DocumentMetadata
from docqa.services.embedding import EmbeddingService
from docqa.tasks.indexing import IndexingTasks

logger = logging.getLogger(__name__)

def prepare_upload_text(filename: Optional[str], payload: Optional[bytes], settings: Settings) -> str:
    """Validate an uploaded file and return its (possibly truncated) text."""
    if payload is None:
        raise InputValidationError("No file")
    if len(payload) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError(f"TXT too large ({settings.MAX_UPLOAD_BYTES} byte limit)")
    name = (filename or "").lower()
    if not any(name.endswith(suffix.lower()) for suffix in settings.ALLOWED_SUFFIXES):
        raise InputValidationError(f"Only {', '.join(settings.ALLOWED_SUFFIXES)} files are accepted")

    text = payload.decode("utf-8", errors="replace").strip()
    if not text:
        raise InputValidationError("Empty text file")
    if len(text) > settings.MAX_TEXT_CHARS:
        logger.info(f"Truncating {filename} from {len(text)} to {settings.MAX_TEXT_CHARS} chars")
        text = text[:settings.MAX_TEXT_CHARS]
    return text

class IngestionService:
    def __init__(self, store: DocumentStore, embedder: EmbeddingService, tasks: IndexingTasks, settings: Settings):
        self.store = store
        self.embedder = embedder
        self.tasks = tasks
        self.settings = settings
        self.chunker = DocumentChunker(settings.CHUNK_TARGET_CHARS, settings.CHUNK_OVERLAP_CHARS)

    async def accept_upload(self, filename: Optional[str], payload: Optional[bytes]) -> DocumentMetadata:
        text = prepare_upload_text(filename, payload, self.settings)
        name = filename or f"upload-{int(datetime.now().timestamp() * 1000)}"

        # 1. Meta (visible with status=indexing right away)
        doc = await self.store.create_document(name=name, size=len(payload))
        doc_id = str(doc.id)

        # 2. Original text, split into bounded parts
        try:
            await self.store.store_original_text(
                doc_id, text, self.settings.FILE_PART_SIZE, self.settings.FILE_PREVIEW_CHARS
            )
        except Exception as e:
            await self.store.mark_error(doc_id, f"Storing original text failed: {e}")
            raise

        # 3. Index in the background, not awaited
        self.tasks.spawn(doc_id, self.index_document(doc_id, text))
        return doc

    async def index_document(self, doc_id: str, text: str) -> int:
        """
        Embed and commit every chunk of ``text``, then record the terminal
        status. Chunks committed before a failure are kept.
        """
        logger.info(f"Indexing document {doc_id} ({len(text)} chars)")
        batch = []
        count = 0
        try:
            for segment in self.chunker.chunk(text):
                chunk_text = segment.text[:self.settings.MAX_CHUNK_CHARS]
                vector = await self.embedder.embed_document(chunk_text)
                batch.append({
                    "doc_id": doc_id,
                    "page": segment.page,
                    "order": segment.order,
                    "text": chunk_text,
                    "embedding": vector,
                    "created_at": datetime.now()
                })
                count += 1
                if len(batch) >= self.settings.INDEX_BATCH_SIZE:
                    await self._flush(batch)
                    batch = []
            await self._flush(batch)
            await self.store.mark_ready(doc_id, count)
        except Exception as e:
            logger.exception(f"Indexing failed for {doc_id}")
            try:
                await self.store.mark_error(doc_id, str(e) or e.__class__.__name__)
            except Exception:
                logger.exception(f"Could not record error status for {doc_id}")
            return 0

        logger.info(f"Indexed document {doc_id}: {count} chunks")
        return count

    async def _flush(self, batch: list):
        if not batch:
            return
        await self.store.commit_chunks(batch)
        await asyncio.sleep(0)

    async def load_original_text(self, doc_id: str) -> Optional[str]:
        return await self.store.load_original_text(doc_id)
