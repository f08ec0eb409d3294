from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from docqa.config import Settings
from docqa.db.mongo import Database
from docqa.db.store import DocumentStore
from docqa.ingestion.service import IngestionService
from docqa.retrieval.service import SearchService
from docqa.services.answer import AnswerService
from docqa.services.deletion import DeletionService
from docqa.services.embedding import EmbeddingService
from docqa.services.llm import LLMService
from docqa.tasks.indexing import IndexingTasks

@dataclass
class AppServices:
    settings: Settings
    store: DocumentStore
    tasks: IndexingTasks
    ingestion: IngestionService
    search: SearchService
    answers: AnswerService
    deletion: DeletionService
    database: Optional[Database] = None

    @classmethod
    def build(cls, settings: Settings, store: DocumentStore, embedder: EmbeddingService, llm: LLMService,
              database: Optional[Database] = None) -> "AppServices":
        tasks = IndexingTasks()
        return cls(
            settings=settings,
            store=store,
            tasks=tasks,
            ingestion=IngestionService(store, embedder, tasks, settings),
            search=SearchService(store, embedder, settings),
            answers=AnswerService(llm),
            deletion=DeletionService(store, settings.DELETE_BATCH_SIZE),
            database=database
        )

    @classmethod
    async def connect(cls, settings: Settings) -> "AppServices":
        database = Database(settings)
        await database.connect()
        return cls.build(
            settings,
            DocumentStore(database),
            EmbeddingService(settings),
            LLMService(settings),
            database=database
        )

    async def close(self):
        await self.tasks.drain()
        if self.database:
            await self.database.close()

def get_services(request: Request) -> AppServices:
    return request.app.state.services
