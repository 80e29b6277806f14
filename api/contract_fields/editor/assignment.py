from typing import Dict, List, Optional, Set

from ..errors import UnknownSigner
from .entities import FieldId, FieldType, SignerRole
from .store import FieldStore


class SignerAssignmentIndex:
    """Which fields belong to which signer.

    Nothing is cached: contracts carry few fields, so every query walks the
    store and can never be stale.
    """

    def __init__(self, store: FieldStore):
        self.store = store

    def fields_by_signer(self) -> Dict[int, Set[FieldId]]:
        index: Dict[int, Set[FieldId]] = {signer_id: set() for signer_id in self.store.signers}
        for field in self.store.all():
            if field.signer_id is not None:
                index.setdefault(field.signer_id, set()).add(field.id)
        return index

    def field_ids_for(self, signer_id: int) -> Set[FieldId]:
        return {f.id for f in self.store.fields_for_signer(signer_id)}

    def has_signature_field(self, signer_id: int) -> bool:
        return any(
            f.field_type == FieldType.signature and f.signer_id == signer_id
            for f in self.store.all()
        )

    def unassigned_fields(self) -> List[FieldId]:
        return [f.id for f in self.store.all() if f.signer_id is None]


class ActiveSelection:
    """Signer and field type applied to the next field placed on a page."""

    def __init__(self, store: FieldStore):
        self.store = store
        self.signer_id: Optional[int] = None
        self.field_type = FieldType.signature
        self.reset()

    def reset(self):
        signers = [s for s in self.store.signers.values() if s.role == SignerRole.signer]
        if not signers:
            signers = list(self.store.signers.values())
        self.signer_id = signers[0].id if signers else None
        self.field_type = FieldType.signature

    def select_signer(self, signer_id: int):
        if signer_id not in self.store.signers:
            raise UnknownSigner(signer_id)
        self.signer_id = signer_id

    def select_field_type(self, field_type):
        self.field_type = FieldType(field_type)
