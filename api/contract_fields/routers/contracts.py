import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from minio.error import S3Error
from sqlmodel import Session
from ..db import get_session
from ..models import Contract, ContractSigner
from ..schemas import ContractCreate, SignerCreate
from ..serializers import contract_documents, contract_signers, load_snapshot, serialize_contract, serialize_signer
from ..errors import ContractNotEditable
from ..editor.readiness import check_readiness
from ..editor.store import FieldStore
from ..export import build_submission
from ..pdfinfo import UnreadablePdf, page_boxes
from ..storage import get_bytes
from ..utils import signing_link
from ..auth import require_admin_access

logger = logging.getLogger(__name__)

router = APIRouter()

def _get_contract(session: Session, contract_id: int) -> Contract:
    contract = session.get(Contract, contract_id)
    if not contract:
        raise HTTPException(404, "contract not found")
    return contract

def _signer_ref(signer):
    return {"id": signer.id, "name": signer.name, "email": signer.email}

def _page_sizes(documents):
    sizes = {}
    for doc in documents:
        try:
            sizes[doc.id] = [(b["width"], b["height"]) for b in page_boxes(get_bytes(doc.original_path))]
        except (S3Error, UnreadablePdf) as exc:
            logger.warning("page boxes of document %s unavailable, assuming A4: %s", doc.id, exc)
    return sizes

@router.post("")
def create_contract(
    data: ContractCreate,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    contract = Contract(title=data.title, expiration_days=data.expiration_days, lock_order=data.lock_order)
    session.add(contract); session.commit(); session.refresh(contract)
    return {"id": contract.id, "status": contract.status}

@router.get("/{contract_id}")
def get_contract(
    contract_id: int,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    contract = _get_contract(session, contract_id)
    return serialize_contract(session, contract)

@router.post("/{contract_id}/signers", status_code=201)
def add_signer(
    contract_id: int,
    payload: SignerCreate,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    contract = _get_contract(session, contract_id)
    if contract.status != "draft":
        raise ContractNotEditable(contract.status)
    existing = contract_signers(session, contract_id)
    if any(s.email.lower() == payload.email.lower() for s in existing):
        raise HTTPException(409, "signer already on this contract")
    signer = ContractSigner(
        contract_id=contract_id,
        name=payload.name,
        email=payload.email,
        signer_type=payload.signer_type.value,
        sort_order=len(existing),
    )
    session.add(signer); session.commit(); session.refresh(signer)
    return serialize_signer(signer)

@router.get("/{contract_id}/readiness")
def get_readiness(
    contract_id: int,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    snapshot = load_snapshot(session, _get_contract(session, contract_id))
    result = check_readiness(snapshot.signers, FieldStore.from_snapshot(snapshot))
    if result:
        return {"ready": True, "missingSigners": []}
    return {
        "ready": False,
        "message": result.message(),
        "missingSigners": [_signer_ref(s) for s in result.missing_signers],
    }

@router.post("/{contract_id}/send")
def send_contract(
    contract_id: int,
    session: Session = Depends(get_session),
    ctx=Depends(require_admin_access),
):
    contract = _get_contract(session, contract_id)
    if contract.status != "draft":
        raise ContractNotEditable(contract.status)
    documents = contract_documents(session, contract_id)
    if not documents:
        raise HTTPException(400, "add at least one document to the contract")
    snapshot = load_snapshot(session, contract)
    if not snapshot.signers:
        raise HTTPException(400, "add at least one signer")
    result = check_readiness(snapshot.signers, FieldStore.from_snapshot(snapshot))
    if not result:
        logger.info("contract %s refused for sending: %s", contract_id, result.message())
        return JSONResponse(
            status_code=400,
            content={
                "error": result.message(),
                "missingSigners": [_signer_ref(s) for s in result.missing_signers],
            },
        )

    submission = build_submission(snapshot, _page_sizes(documents))
    now = datetime.utcnow()
    contract.status = "sent"
    contract.sent_at = now
    contract.expires_at = now + timedelta(days=contract.expiration_days)
    session.add(contract)
    submitters = []
    for signer in contract_signers(session, contract_id):
        if signer.signer_type != "signer":
            continue
        signer.status = "sent"
        session.add(signer)
        submitters.append({
            "name": signer.name,
            "email": signer.email,
            "signingUrl": signing_link(contract_id, signer.id),
        })
    session.commit()
    logger.info("contract %s sent to %s", contract_id, ", ".join(s["email"] for s in submitters))
    return {
        "success": True,
        "status": contract.status,
        "expiresAt": contract.expires_at,
        "submission": submission,
        "submitters": submitters,
    }
