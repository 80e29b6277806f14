from typing import Dict, Optional
from sqlmodel import Session, select

from .models import Contract, ContractDocument, ContractField, ContractSigner
from .editor.entities import ContractSnapshot
from .editor.gateway import decode_contract


def serialize_field(field: ContractField, signer: Optional[ContractSigner] = None, document: Optional[ContractDocument] = None):
    data = {
        "id": field.id,
        "documentId": field.document_id,
        "signerId": field.signer_id,
        "signerName": signer.name if signer else None,
        "fieldType": field.field_type,
        "pages": field.pages,
        "position": field.position,
        "size": field.size,
        "content": field.content,
        "horizontalAdjust": field.horizontal_adjust,
        "verticalAdjust": field.vertical_adjust,
    }
    if document is not None:
        data["documentFilename"] = document.filename
    return data


def serialize_signer(signer: ContractSigner):
    return {
        "id": signer.id,
        "name": signer.name,
        "email": signer.email,
        "signerType": signer.signer_type,
        "status": signer.status,
    }


def contract_documents(session: Session, contract_id: int):
    return session.exec(
        select(ContractDocument)
        .where(ContractDocument.contract_id == contract_id)
        .order_by(ContractDocument.sort_order, ContractDocument.id)
    ).all()


def contract_signers(session: Session, contract_id: int):
    return session.exec(
        select(ContractSigner)
        .where(ContractSigner.contract_id == contract_id)
        .order_by(ContractSigner.sort_order, ContractSigner.id)
    ).all()


def contract_fields(session: Session, contract_id: int):
    return session.exec(
        select(ContractField)
        .join(ContractDocument, ContractField.document_id == ContractDocument.id)
        .where(ContractDocument.contract_id == contract_id)
        .order_by(ContractField.created_at, ContractField.id)
    ).all()


def serialize_contract(session: Session, contract: Contract):
    documents = contract_documents(session, contract.id)
    signers = contract_signers(session, contract.id)
    signer_map: Dict[int, ContractSigner] = {s.id: s for s in signers}
    fields_by_doc: Dict[int, list] = {d.id: [] for d in documents}
    for field in contract_fields(session, contract.id):
        fields_by_doc.setdefault(field.document_id, []).append(
            serialize_field(field, signer_map.get(field.signer_id))
        )
    return {
        "id": contract.id,
        "title": contract.title,
        "status": contract.status,
        "expirationDays": contract.expiration_days,
        "lockOrder": contract.lock_order,
        "sentAt": contract.sent_at,
        "expiresAt": contract.expires_at,
        "documents": [
            {
                "id": d.id,
                "filename": d.filename,
                "originalPath": d.original_path,
                "pageCount": d.page_count,
                "fields": fields_by_doc.get(d.id, []),
            }
            for d in documents
        ],
        "signers": [serialize_signer(s) for s in signers],
    }


def load_snapshot(session: Session, contract: Contract) -> ContractSnapshot:
    return decode_contract(serialize_contract(session, contract))
