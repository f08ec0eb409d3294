import logging
from contextlib import asynccontextmanager

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from pymongo.operations import SearchIndexModel

from docqa.config import Settings
from docqa.models.files import DocumentMetadata, FileRecord, FilePart, Chunk, CHUNKS
from docqa.models.query import DistanceMeasure

logger = logging.getLogger(__name__)

class Database:
    """Single Motor client for the process, built once in the app lifespan."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: AsyncIOMotorClient = None

    async def connect(self):
        self.client = AsyncIOMotorClient(self.settings.MONGODB_URI)
        db = self.client[self.settings.MONGODB_DATABASE]

        await init_beanie(database=db, document_models=[DocumentMetadata, FileRecord, FilePart, Chunk])
        logger.info(f"Connected to MongoDB: {self.settings.MONGODB_DATABASE}")

        if self.settings.CREATE_SEARCH_INDEXES:
            await self.ensure_vector_indexes()

    async def close(self):
        if self.client:
            self.client.close()

    def collection(self, name: str):
        return self.client[self.settings.MONGODB_DATABASE][name]

    @asynccontextmanager
    async def transaction(self):
        """Yield a session whose writes commit together or not at all."""
        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session

    async def ensure_vector_indexes(self):
        chunks = self.collection(CHUNKS)
        existing = {idx["name"] async for idx in chunks.list_search_indexes()}
        models = []
        for measure in DistanceMeasure:
            name = vector_index_name(self.settings.VECTOR_INDEX_PREFIX, measure)
            if name in existing:
                continue
            models.append(SearchIndexModel(
                definition={
                    "fields": [
                        {
                            "type": "vector",
                            "path": "embedding",
                            "numDimensions": self.settings.EMBEDDING_DIMENSIONS,
                            "similarity": measure.similarity,
                        },
                        {"type": "filter", "path": "doc_id"},
                    ]
                },
                name=name,
                type="vectorSearch",
            ))
        if models:
            await chunks.create_search_indexes(models)
            logger.info(f"Requested {len(models)} vector search index(es) on {CHUNKS}")

def vector_index_name(prefix: str, measure: DistanceMeasure) -> str:
    return f"{prefix}_{measure.value.lower()}"
