from beanie import Document
from pydantic import Field
from datetime import datetime
from enum import Enum
from typing import Optional, List

DOCUMENTS = "documents"
FILES = "files"
FILE_PARTS = "file_parts"
CHUNKS = "chunks"

class DocumentStatus(str, Enum):
    INDEXING = "indexing"
    READY = "ready"
    ERROR = "error"

class DocumentMetadata(Document):
    name: str
    size: int
    mime: str = "text/plain"
    storage_path: str = ""
    uploaded_at: datetime = Field(default_factory=datetime.now)
    status: DocumentStatus = DocumentStatus.INDEXING
    num_chunks: int = 0
    error: Optional[str] = None

    class Settings:
        name = DOCUMENTS

class FileRecord(Document):
    # Shares its id with the owning DocumentMetadata
    preview: str
    parts_count: int
    mime: str = "text/plain"
    created_at: datetime = Field(default_factory=datetime.now)

    class Settings:
        name = FILES

class FilePart(Document):
    file_id: str # Ref to FileRecord / DocumentMetadata
    idx: int
    content: str

    class Settings:
        name = FILE_PARTS

class Chunk(Document):
    doc_id: str # Ref to DocumentMetadata, lookup only
    page: int = 0
    order: int
    text: str
    embedding: List[float] # Voyage-3 (1024 dims)
    created_at: datetime = Field(default_factory=datetime.now)

    class Settings:
        name = CHUNKS
