import logging
from fastapi import APIRouter, Depends, UploadFile, File, HTTPException
from minio.error import S3Error
from sqlmodel import Session
from ..db import get_session
from ..models import Contract, ContractDocument
from ..serializers import contract_documents
from ..errors import ContractNotEditable
from ..pdfinfo import UnreadablePdf, page_boxes
from ..storage import document_key, get_bytes, put_bytes
from ..utils import sha256_bytes
from ..auth import require_admin_access

logger = logging.getLogger(__name__)

router = APIRouter()

def _serialize_document(doc: ContractDocument):
    return {
        "id": doc.id,
        "filename": doc.filename,
        "originalPath": doc.original_path,
        "pageCount": doc.page_count,
        "createdAt": doc.created_at,
    }

@router.post("/{contract_id}/documents")
async def upload_document(
    contract_id: int,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    contract = session.get(Contract, contract_id)
    if not contract:
        raise HTTPException(404, "contract not found")
    if contract.status != "draft":
        raise ContractNotEditable(contract.status)
    data = await file.read()
    try:
        boxes = page_boxes(data)
    except UnreadablePdf as exc:
        raise HTTPException(422, f"not a readable PDF: {exc}")
    doc = ContractDocument(
        contract_id=contract_id,
        filename=file.filename or "document.pdf",
        original_path="pending",
        page_count=len(boxes),
        sha256=sha256_bytes(data),
        sort_order=len(contract_documents(session, contract_id)),
    )
    session.add(doc)
    session.flush()
    key = document_key(contract_id, doc.id, doc.filename)
    put_bytes(key, data, content_type=file.content_type or "application/pdf")
    doc.original_path = key
    session.add(doc)
    session.commit()
    session.refresh(doc)
    logger.info("contract %s: stored document %s (%s pages)", contract_id, doc.id, doc.page_count)
    return _serialize_document(doc)

@router.get("/{contract_id}/documents/{document_id}/pages")
def document_pages(
    contract_id: int,
    document_id: int,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    doc = session.get(ContractDocument, document_id)
    if not doc or doc.contract_id != contract_id:
        raise HTTPException(404, "document not found")
    try:
        pages = page_boxes(get_bytes(doc.original_path))
    except S3Error:
        raise HTTPException(404, "stored file missing for this document")
    except UnreadablePdf as exc:
        raise HTTPException(422, f"stored file is not a readable PDF: {exc}")
    return {"documentId": doc.id, "pageCount": len(pages), "pages": pages}
