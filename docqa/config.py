from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional

from docqa.models.query import DistanceMeasure

class Settings(BaseSettings):
    # MongoDB (Atlas: transactions + $vectorSearch)
    MONGODB_URI: str
    MONGODB_DATABASE: str = "docqa_db"

    # Voyage AI (Embeddings)
    VOYAGE_API_KEY: str
    VOYAGE_MODEL: str = "voyage-3-large"
    EMBEDDING_DIMENSIONS: int = 1024

    # Completion model, any LiteLLM route
    LLM_MODEL: str = "gemini-2.5-flash-lite"
    LLM_API_KEY: Optional[str] = None
    LLM_TEMPERATURE: float = 0.2

    # Retrieval
    DISTANCE_MEASURE: str = "COSINE"
    TOP_K: int = 8
    VECTOR_INDEX_PREFIX: str = "vector_index"
    VECTOR_NUM_CANDIDATES: int = 100
    CREATE_SEARCH_INDEXES: bool = False
    LEXICAL_SNIPPET_SPAN: int = 160
    LEXICAL_MAX_RESULTS: int = 5
    QUERY_TIMEOUT_SECONDS: float = 60.0

    # Ingestion
    CHUNK_TARGET_CHARS: int = 1000
    CHUNK_OVERLAP_CHARS: int = 200
    MAX_CHUNK_CHARS: int = 700
    INDEX_BATCH_SIZE: int = 50
    FILE_PART_SIZE: int = 180_000
    FILE_PREVIEW_CHARS: int = 50_000
    MAX_UPLOAD_BYTES: int = 1024 * 1024
    MAX_TEXT_CHARS: int = 900_000
    ALLOWED_SUFFIXES: List[str] = [".txt"]

    # Deletion
    DELETE_BATCH_SIZE: int = 450

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def check_chunking(self):
        if self.CHUNK_OVERLAP_CHARS >= self.CHUNK_TARGET_CHARS:
            raise ValueError("CHUNK_OVERLAP_CHARS must be smaller than CHUNK_TARGET_CHARS")
        if self.DISTANCE_MEASURE not in {m.value for m in DistanceMeasure}:
            raise ValueError(f"Unknown DISTANCE_MEASURE: {self.DISTANCE_MEASURE}")
        return self

@lru_cache
def get_settings():
    return Settings()
