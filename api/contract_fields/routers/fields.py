import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select
from ..db import get_session
from ..models import Contract, ContractDocument, ContractField, ContractSigner
from ..schemas import FieldCreate, FieldUpdate
from ..serializers import contract_fields, contract_signers, serialize_field
from ..errors import ContractNotEditable, InvalidGeometry, UnknownDocument, UnknownField, UnknownSigner
from ..editor.gateway import decode_rect, encode_position, encode_size
from ..editor.pages import parse_pages
from ..auth import require_admin_access

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------- helpers ----------
def _get_contract(session: Session, contract_id: int) -> Contract:
    contract = session.get(Contract, contract_id)
    if not contract:
        raise HTTPException(404, "contract not found")
    return contract

def _get_editable_contract(session: Session, contract_id: int) -> Contract:
    contract = _get_contract(session, contract_id)
    if contract.status != "draft":
        raise ContractNotEditable(contract.status)
    return contract

def _get_document(session: Session, contract_id: int, document_id: int) -> ContractDocument:
    doc = session.get(ContractDocument, document_id)
    if not doc or doc.contract_id != contract_id:
        raise UnknownDocument(document_id)
    return doc

def _check_signer(session: Session, contract_id: int, signer_id):
    if signer_id is None:
        return None
    signer = session.get(ContractSigner, signer_id)
    if not signer or signer.contract_id != contract_id:
        raise UnknownSigner(signer_id)
    return signer

def _find_field(session: Session, contract_id: int, field_id: int):
    return session.exec(
        select(ContractField)
        .join(ContractDocument, ContractField.document_id == ContractDocument.id)
        .where(ContractField.id == field_id, ContractDocument.contract_id == contract_id)
    ).first()

def _normalized_geometry(position: str, size: str):
    """Decode the JSON strings, reject empty boxes, and re-encode compactly."""
    try:
        rect = decode_rect(position, size)
    except (ValueError, KeyError, TypeError) as exc:
        raise HTTPException(422, f"position and size must be JSON objects: {exc}")
    if rect.is_degenerate:
        raise InvalidGeometry(rect.width, rect.height)
    return encode_position(rect.x, rect.y), encode_size(rect.width, rect.height)

# ---------- routes ----------

@router.get("/{contract_id}/fields")
def list_fields(
    contract_id: int,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    _get_contract(session, contract_id)
    signers = {s.id: s for s in contract_signers(session, contract_id)}
    documents = {}
    out = []
    for f in contract_fields(session, contract_id):
        if f.document_id not in documents:
            documents[f.document_id] = session.get(ContractDocument, f.document_id)
        out.append(serialize_field(f, signers.get(f.signer_id), documents[f.document_id]))
    return {"fields": out}

@router.post("/{contract_id}/fields")
def create_field(
    contract_id: int,
    payload: FieldCreate,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    _get_editable_contract(session, contract_id)
    doc = _get_document(session, contract_id, payload.document_id)
    signer = _check_signer(session, contract_id, payload.signer_id)
    position, size = _normalized_geometry(payload.position, payload.size)
    parse_pages(payload.pages, doc.page_count)
    field = ContractField(
        document_id=doc.id,
        signer_id=payload.signer_id,
        field_type=payload.field_type.value,
        pages=payload.pages.strip(),
        position=position,
        size=size,
        content=payload.content or None,
        horizontal_adjust=payload.horizontal_adjust,
        vertical_adjust=payload.vertical_adjust,
    )
    session.add(field); session.commit(); session.refresh(field)
    logger.info("contract %s: created %s field %s on document %s", contract_id, field.field_type, field.id, doc.id)
    return {"success": True, "field": serialize_field(field, signer)}

@router.put("/{contract_id}/fields")
def update_field(
    contract_id: int,
    payload: FieldUpdate,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    _get_editable_contract(session, contract_id)
    field = _find_field(session, contract_id, payload.field_id)
    if not field:
        raise UnknownField(payload.field_id)
    data = payload.model_dump(exclude_unset=True)
    data.pop("field_id")

    # only keys the caller sent are touched
    if "signer_id" in data:
        _check_signer(session, contract_id, data["signer_id"])
        field.signer_id = data["signer_id"]
    if data.get("field_type") is not None:
        field.field_type = data["field_type"].value
    if data.get("pages") is not None:
        doc = session.get(ContractDocument, field.document_id)
        parse_pages(data["pages"], doc.page_count if doc else None)
        field.pages = data["pages"].strip()
    if data.get("position") is not None or data.get("size") is not None:
        field.position, field.size = _normalized_geometry(
            data.get("position") or field.position,
            data.get("size") or field.size,
        )
    if "content" in data:
        field.content = data["content"] or None
    for key in ("horizontal_adjust", "vertical_adjust"):
        if data.get(key) is not None:
            setattr(field, key, data[key])
    session.add(field); session.commit(); session.refresh(field)
    signer = session.get(ContractSigner, field.signer_id) if field.signer_id else None
    return {"success": True, "field": serialize_field(field, signer)}

@router.delete("/{contract_id}/fields")
def delete_field(
    contract_id: int,
    field_id: int = Query(..., alias="fieldId"),
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    _get_editable_contract(session, contract_id)
    field = _find_field(session, contract_id, field_id)
    if not field:
        # already gone: removal is idempotent
        return {"success": True, "deleted": False}
    session.delete(field); session.commit()
    logger.info("contract %s: deleted field %s", contract_id, field_id)
    return {"success": True, "deleted": True}
