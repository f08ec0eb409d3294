import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from bson import ObjectId

from docqa.db.mongo import Database, vector_index_name
from docqa.models.files import (
    DocumentMetadata, DocumentStatus, FileRecord, FilePart, Chunk,
    DOCUMENTS, FILES,
)
from docqa.models.query import DistanceMeasure, PreviewEntry, SearchHit

logger = logging.getLogger(__name__)

def to_object_id(doc_id: str) -> Optional[PydanticObjectId]:
    if not ObjectId.is_valid(doc_id):
        return None
    return PydanticObjectId(doc_id)

def build_vector_search_pipeline(query_vector: List[float], k: int, index: str, num_candidates: int) -> List[dict]:
    return [
        {
            "$vectorSearch": {
                "index": index,
                "path": "embedding",
                "queryVector": query_vector,
                "numCandidates": max(num_candidates, k),
                "limit": k
            }
        },
        {
            "$project": {"_id": 1, "doc_id": 1, "order": 1, "text": 1, "score": {"$meta": "vectorSearchScore"}}
        }
    ]

class DocumentStore:
    """All MongoDB reads and writes the services need."""

    def __init__(self, database: Database):
        self.db = database
        self.settings = database.settings

    # --- documents ---

    async def create_document(self, name: str, size: int, mime: str = "text/plain") -> DocumentMetadata:
        oid = PydanticObjectId()
        doc = DocumentMetadata(
            id=oid,
            name=name,
            size=size,
            mime=mime,
            storage_path=f"mongodb://{FILES}/{oid}",
            status=DocumentStatus.INDEXING,
            num_chunks=0
        )
        await doc.insert()
        return doc

    async def get_document(self, doc_id: str) -> Optional[DocumentMetadata]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        return await DocumentMetadata.get(oid)

    async def list_documents(self) -> List[DocumentMetadata]:
        return await DocumentMetadata.find_all().sort("-uploaded_at").to_list()

    async def mark_ready(self, doc_id: str, num_chunks: int):
        await DocumentMetadata.find_one(DocumentMetadata.id == to_object_id(doc_id)).update(
            {"$set": {"status": DocumentStatus.READY.value, "num_chunks": num_chunks}}
        )

    async def mark_error(self, doc_id: str, message: str):
        await DocumentMetadata.find_one(DocumentMetadata.id == to_object_id(doc_id)).update(
            {"$set": {"status": DocumentStatus.ERROR.value, "error": message}}
        )

    async def get_document_names(self, doc_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(doc_ids))
        docs = await asyncio.gather(*(self.get_document(doc_id) for doc_id in ids))
        return {doc_id: (doc.name if doc else doc_id) for doc_id, doc in zip(ids, docs)}

    # --- original text ---

    async def store_original_text(self, doc_id: str, text: str, part_size: int, preview_chars: int) -> int:
        parts = [
            FilePart(file_id=doc_id, idx=idx, content=text[start:start + part_size])
            for idx, start in enumerate(range(0, len(text), part_size))
        ]
        record = FileRecord(id=to_object_id(doc_id), preview=text[:preview_chars], parts_count=len(parts))
        await record.insert()
        if parts:
            await FilePart.insert_many(parts)
        return len(parts)

    async def load_original_text(self, doc_id: str) -> Optional[str]:
        oid = to_object_id(doc_id)
        if oid is None or await FileRecord.get(oid) is None:
            return None
        parts = await FilePart.find(FilePart.file_id == doc_id).sort("+idx").to_list()
        return "".join(p.content for p in parts)

    async def list_previews(self) -> List[PreviewEntry]:
        files, docs = await asyncio.gather(
            FileRecord.find_all().to_list(),
            DocumentMetadata.find_all().to_list()
        )
        names = {str(d.id): d.name for d in docs}
        return [
            PreviewEntry(doc_id=str(f.id), doc_name=names.get(str(f.id), str(f.id)), preview=f.preview or "")
            for f in files
        ]

    # --- chunks ---

    async def commit_chunks(self, records: List[Dict[str, Any]]):
        """Insert one batch of chunk records in a single transaction."""
        chunks = [Chunk(**r) for r in records]
        async with self.db.transaction() as session:
            await Chunk.insert_many(chunks, session=session)

    async def vector_search(self, query_vector: List[float], k: int, measure: DistanceMeasure) -> List[SearchHit]:
        pipeline = build_vector_search_pipeline(
            query_vector,
            k,
            vector_index_name(self.settings.VECTOR_INDEX_PREFIX, measure),
            self.settings.VECTOR_NUM_CANDIDATES
        )
        results = []
        for doc in await Chunk.aggregate(pipeline).to_list():
            results.append(SearchHit(
                chunk_id=str(doc["_id"]),
                doc_id=doc["doc_id"],
                order=doc.get("order"),
                text=doc["text"],
                score=doc.get("score", 0.0)
            ))
        return results

    # --- deletion ---

    async def fetch_ids(self, collection: str, query: dict, limit: int) -> list:
        cursor = self.db.collection(collection).find(query, {"_id": 1}).limit(limit)
        return [doc["_id"] for doc in await cursor.to_list(length=limit)]

    async def delete_batch(self, collection: str, ids: list):
        async with self.db.transaction() as session:
            await self.db.collection(collection).delete_many({"_id": {"$in": ids}}, session=session)

    async def delete_document_root(self, doc_id: str):
        oid = to_object_id(doc_id)
        async with self.db.transaction() as session:
            await self.db.collection(FILES).delete_one({"_id": oid}, session=session)
            await self.db.collection(DOCUMENTS).delete_one({"_id": oid}, session=session)
