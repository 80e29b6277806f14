from typing import Iterable, List, Union

from pydantic import BaseModel

from .assignment import SignerAssignmentIndex
from .entities import Signer, SignerRole
from .store import FieldStore


class Ready(BaseModel):
    ready: bool = True

    def __bool__(self):
        return True


class NotReady(BaseModel):
    ready: bool = False
    missing_signers: List[Signer]

    def __bool__(self):
        return False

    def message(self) -> str:
        names = ", ".join(s.name for s in self.missing_signers)
        return f"These signers have no signature field: {names}"


Readiness = Union[Ready, NotReady]


def check_readiness(signers: Iterable[Signer], store: FieldStore) -> Readiness:
    """Every ``signer``-role signer must own at least one signature field.

    Validators and viewers never block sending.
    """
    index = SignerAssignmentIndex(store)
    missing = [
        s for s in signers
        if s.role == SignerRole.signer and not index.has_signature_field(s.id)
    ]
    if missing:
        return NotReady(missing_signers=missing)
    return Ready()
