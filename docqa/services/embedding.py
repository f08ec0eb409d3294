import asyncio
from typing import List

import voyageai

from docqa.config import Settings
from docqa.errors import UpstreamServiceError

class EmbeddingService:
    def __init__(self, settings: Settings):
        self.model = settings.VOYAGE_MODEL
        self.client = voyageai.Client(api_key=settings.VOYAGE_API_KEY)

    def _embed(self, text: str, input_type: str) -> List[float]:
        try:
            return self.client.embed([text.strip()], model=self.model, input_type=input_type).embeddings[0]
        except Exception as e:
            raise UpstreamServiceError(f"Embedding failed: {e}") from e

    # Voyage is a sync client, run it off the event loop
    async def embed_document(self, text: str) -> List[float]:
        return await asyncio.to_thread(self._embed, text, "document")

    async def embed_query(self, text: str) -> List[float]:
        return await asyncio.to_thread(self._embed, text, "query")
