"""Turns a contract layout into the submission a signing provider expects.

Providers place field areas as fractions of the page measured from the
top-left corner, one area per page the field appears on. Submitters are
matched to their fields through the signer name used as the role.
"""
from typing import Dict, List, Optional, Tuple

from .editor.entities import ContractSnapshot, FieldType, SignerRole
from .editor.geometry import Rect, clamp_to_page, to_presentation_space, to_relative_area
from .editor.pages import parse_pages

# A4 in points, used when the page box of a document is unknown
PAGE_WIDTH = 595
PAGE_HEIGHT = 842

PROVIDER_TYPES = {
    FieldType.signature: "signature",
    FieldType.initials: "initials",
    FieldType.name: "text",
    FieldType.date: "date",
    FieldType.text: "text",
    FieldType.input: "text",
}


def build_submission(
    snapshot: ContractSnapshot,
    page_sizes: Optional[Dict[int, List[Tuple[float, float]]]] = None,
) -> dict:
    """``page_sizes`` maps a document id to the (width, height) of each page."""
    page_sizes = page_sizes or {}
    signers = {s.id: s for s in snapshot.signers}
    documents = []
    for doc in snapshot.documents:
        sizes = page_sizes.get(doc.id) or []
        fields = []
        for field in snapshot.fields:
            if field.document_id != doc.id:
                continue
            signer = signers.get(field.signer_id)
            if signer is None:
                continue
            rect = Rect(
                x=field.x + field.horizontal_adjust,
                y=field.y + field.vertical_adjust,
                width=field.width,
                height=field.height,
            )
            areas = []
            for page in sorted(parse_pages(field.pages, doc.page_count)):
                width, height = sizes[page - 1] if page <= len(sizes) else (PAGE_WIDTH, PAGE_HEIGHT)
                top_left = to_presentation_space(clamp_to_page(rect, width, height), height, 1)
                areas.append({**to_relative_area(top_left, width, height), "page": page})
            fields.append({
                "name": f"{field.field_type.value}_{field.id}",
                "type": PROVIDER_TYPES[field.field_type],
                "role": signer.name,
                "required": True,
                "default_value": field.content if field.field_type == FieldType.text else None,
                "areas": areas,
            })
        documents.append({"name": doc.filename, "fields": fields})
    submitters = [
        {"role": s.name, "name": s.name, "email": s.email, "external_id": str(s.id)}
        for s in snapshot.signers
        if s.role == SignerRole.signer
    ]
    return {
        "name": snapshot.title,
        # signers sign one after another only when the order is locked
        "order": "preserved" if snapshot.lock_order else "random",
        "documents": documents,
        "submitters": submitters,
    }
