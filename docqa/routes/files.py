from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from docqa.dependencies import AppServices, get_services
from docqa.errors import InputValidationError, NotFoundError
from docqa.models.files import DocumentStatus
from docqa.models.query import CamelModel

router = APIRouter(prefix="/api", tags=["Documents"])

class DocumentOut(CamelModel):
    id: str
    name: str
    size: int
    mime: str
    storage_path: str
    uploaded_at: datetime
    status: DocumentStatus
    num_chunks: int
    error: Optional[str] = None

    @classmethod
    def from_record(cls, doc) -> "DocumentOut":
        return cls(
            id=str(doc.id),
            name=doc.name,
            size=doc.size,
            mime=doc.mime,
            storage_path=doc.storage_path,
            uploaded_at=doc.uploaded_at,
            status=doc.status,
            num_chunks=doc.num_chunks,
            error=doc.error
        )

class UploadResponse(CamelModel):
    ok: bool = True
    doc_id: str

class OriginalText(CamelModel):
    doc_id: str
    text: str

@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    services: AppServices = Depends(get_services)
):
    payload = None
    if file is not None:
        # One byte over the ceiling is enough to reject
        payload = await file.read(services.settings.MAX_UPLOAD_BYTES + 1)
    doc = await services.ingestion.accept_upload(file.filename if file else None, payload)
    return UploadResponse(doc_id=str(doc.id))

@router.get("/docs", response_model=List[DocumentOut])
async def list_documents(services: AppServices = Depends(get_services)):
    docs = await services.store.list_documents()
    return [DocumentOut.from_record(d) for d in docs]

@router.get("/docs/{doc_id}", response_model=DocumentOut)
async def get_document(doc_id: str, services: AppServices = Depends(get_services)):
    doc = await services.store.get_document(doc_id)
    if not doc:
        raise NotFoundError("Document not found")
    return DocumentOut.from_record(doc)

@router.get("/docs/{doc_id}/text", response_model=OriginalText)
async def get_original_text(doc_id: str, services: AppServices = Depends(get_services)):
    text = await services.ingestion.load_original_text(doc_id)
    if text is None:
        raise NotFoundError("Document not found")
    return OriginalText(doc_id=doc_id, text=text)

@router.delete("/docs/{doc_id}")
async def delete_document(doc_id: str, services: AppServices = Depends(get_services)):
    if not doc_id.strip():
        raise InputValidationError("Missing document id")
    await services.deletion.delete_document(doc_id)
    return {"ok": True}
