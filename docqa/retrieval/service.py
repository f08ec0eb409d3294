import logging
from typing import Optional

from docqa.config import Settings
from docqa.db.store import DocumentStore
from docqa.models.query import ContextPassage, DistanceMeasure, RetrievalResult
from docqa.retrieval.lexical import lexical_search
from docqa.services.embedding import EmbeddingService

logger = logging.getLogger(__name__)

class SearchService:
    def __init__(self, store: DocumentStore, embedder: EmbeddingService, settings: Settings):
        self.store = store
        self.embedder = embedder
        self.settings = settings

    async def retrieve(self, question: str, k: Optional[int] = None, measure: Optional[DistanceMeasure] = None) -> RetrievalResult:
        k = k or self.settings.TOP_K
        measure = measure or DistanceMeasure(self.settings.DISTANCE_MEASURE)

        # 1. Vector search
        query_vec = await self.embedder.embed_query(question)
        hits = await self.store.vector_search(query_vec, k, measure)
        logger.info(f"Vector search ({measure.value}, k={k}) returned {len(hits)} hits")

        # 2. Nothing near: fall back to keywords over previews
        if not hits:
            contexts = await self.lexical_fallback(question)
            return RetrievalResult(contexts=contexts, source="lexical" if contexts else "none")

        # 3. Friendly names, one lookup per distinct document
        names = await self.store.get_document_names(h.doc_id for h in hits)
        contexts = [
            ContextPassage(
                id=h.chunk_id,
                doc_id=h.doc_id,
                doc_name=names.get(h.doc_id, h.doc_id),
                order=h.order if h.order is not None else rank,
                text=h.text
            )
            for rank, h in enumerate(hits)
        ]
        return RetrievalResult(contexts=contexts, source="vector")

    async def lexical_fallback(self, question: str):
        previews = await self.store.list_previews()
        contexts = lexical_search(
            question,
            previews,
            span=self.settings.LEXICAL_SNIPPET_SPAN,
            limit=self.settings.LEXICAL_MAX_RESULTS
        )
        logger.info(f"Lexical fallback matched {len(contexts)} of {len(previews)} documents")
        return contexts
