import uuid
from typing import Dict, Iterable, List, Optional

from ..errors import ContractNotEditable, InvalidGeometry, UnknownDocument, UnknownField, UnknownSigner
from .entities import (
    ContractSnapshot,
    ContractStatus,
    Document,
    Field,
    FieldChanges,
    FieldId,
    FieldType,
    Signer,
)
from .geometry import Rect
from .pages import parse_pages

# attributes a partial update may clear by passing None explicitly
NULLABLE_CHANGES = {"signer_id", "content"}


def new_temporary_id() -> str:
    return f"tmp-{uuid.uuid4().hex}"


class FieldStore:
    """Every field of one contract, keyed by id.

    The store only ever holds page-space geometry. It owns no persistence;
    callers decide when and how mutations reach the server.
    """

    def __init__(
        self,
        contract_id: int,
        documents: Iterable[Document],
        signers: Iterable[Signer] = (),
        status: ContractStatus = ContractStatus.draft,
        title: str = "",
    ):
        self.contract_id = contract_id
        self.title = title
        self.status = ContractStatus(status)
        self.documents: Dict[int, Document] = {d.id: d for d in documents}
        self.signers: Dict[int, Signer] = {s.id: s for s in signers}
        self._fields: Dict[FieldId, Field] = {}

    @classmethod
    def from_snapshot(cls, snapshot: ContractSnapshot) -> "FieldStore":
        store = cls(
            snapshot.id,
            snapshot.documents,
            snapshot.signers,
            status=snapshot.status,
            title=snapshot.title,
        )
        for field in snapshot.fields:
            store._fields[field.id] = field
        return store

    def __len__(self):
        return len(self._fields)

    def __contains__(self, field_id):
        return field_id in self._fields

    @property
    def editable(self) -> bool:
        return self.status == ContractStatus.draft

    def mark_status(self, status: ContractStatus):
        self.status = ContractStatus(status)

    def ensure_editable(self):
        if not self.editable:
            raise ContractNotEditable(self.status.value)

    def get(self, field_id: FieldId) -> Field:
        try:
            return self._fields[field_id]
        except KeyError:
            raise UnknownField(field_id) from None

    def all(self) -> List[Field]:
        return list(self._fields.values())

    def create(
        self,
        document_id: int,
        signer_id: Optional[int],
        field_type,
        pages: str,
        rect: Rect,
        content: Optional[str] = None,
        field_id: Optional[FieldId] = None,
    ) -> Field:
        self.ensure_editable()
        document = self.documents.get(document_id)
        if document is None:
            raise UnknownDocument(document_id)
        if signer_id is not None and signer_id not in self.signers:
            raise UnknownSigner(signer_id)
        if rect.is_degenerate:
            raise InvalidGeometry(rect.width, rect.height)
        parse_pages(pages, document.page_count)
        field = Field(
            id=field_id if field_id is not None else new_temporary_id(),
            document_id=document_id,
            signer_id=signer_id,
            field_type=FieldType(field_type),
            pages=str(pages).strip(),
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            content=content or None,
        )
        self._fields[field.id] = field
        return field

    def update(self, field_id: FieldId, changes: FieldChanges) -> Field:
        self.ensure_editable()
        current = self.get(field_id)
        data = {
            key: value
            for key, value in changes.provided().items()
            if value is not None or key in NULLABLE_CHANGES
        }
        if "signer_id" in data and data["signer_id"] is not None and data["signer_id"] not in self.signers:
            raise UnknownSigner(data["signer_id"])
        width = data.get("width", current.width)
        height = data.get("height", current.height)
        if width <= 0 or height <= 0:
            raise InvalidGeometry(width, height)
        if "pages" in data:
            parse_pages(data["pages"], self.documents[current.document_id].page_count)
            data["pages"] = str(data["pages"]).strip()
        if "content" in data:
            data["content"] = data["content"] or None
        updated = current.model_copy(update=data)
        self._fields[field_id] = updated
        return updated

    def remove(self, field_id: FieldId) -> Optional[Field]:
        self.ensure_editable()
        return self._fields.pop(field_id, None)

    def adopt(self, field: Field) -> Field:
        """Insert a field the server already confirmed, keyed by its server id."""
        self._fields[field.id] = field
        return field

    def rekey(self, old_id: FieldId, new_id: FieldId) -> Field:
        field = self._fields.pop(old_id, None)
        if field is None:
            raise UnknownField(old_id)
        field = field.model_copy(update={"id": new_id})
        self._fields[new_id] = field
        return field

    def fields_for_document(self, document_id: int) -> List[Field]:
        return [f for f in self._fields.values() if f.document_id == document_id]

    def fields_for_signer(self, signer_id: int) -> List[Field]:
        return [f for f in self._fields.values() if f.signer_id == signer_id]

    def signature_fields_for_signer(self, signer_id: int) -> List[Field]:
        return [f for f in self.fields_for_signer(signer_id) if f.field_type == FieldType.signature]
