from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field as ModelField

from .geometry import Rect

FieldId = Union[int, str]

DEFAULT_FIELD_WIDTH = 200
DEFAULT_FIELD_HEIGHT = 50


class ContractStatus(str, Enum):
    draft = "draft"
    sent = "sent"
    signed = "signed"
    declined = "declined"
    expired = "expired"


class SignerRole(str, Enum):
    signer = "signer"
    validator = "validator"
    viewer = "viewer"


class FieldType(str, Enum):
    signature = "signature"
    initials = "initials"
    name = "name"
    date = "date"
    text = "text"
    input = "input"


class Document(BaseModel):
    id: int
    filename: str
    original_path: str = ""
    page_count: Optional[int] = None


class Signer(BaseModel):
    id: int
    name: str
    email: str
    role: SignerRole = SignerRole.signer


class Field(BaseModel):
    id: FieldId
    document_id: int
    signer_id: Optional[int] = None
    field_type: FieldType
    pages: str
    x: float
    y: float
    width: float
    height: float
    content: Optional[str] = None
    horizontal_adjust: int = 0
    vertical_adjust: int = 0

    @property
    def rect(self) -> Rect:
        return Rect(x=self.x, y=self.y, width=self.width, height=self.height)

    @property
    def is_temporary(self) -> bool:
        return isinstance(self.id, str)


class FieldChanges(BaseModel):
    """Partial update of a field. Only attributes that were set are applied."""

    signer_id: Optional[int] = None
    field_type: Optional[FieldType] = None
    pages: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    content: Optional[str] = None
    horizontal_adjust: Optional[int] = None
    vertical_adjust: Optional[int] = None

    @classmethod
    def for_rect(cls, rect: Rect, with_size: bool = True) -> "FieldChanges":
        if with_size:
            return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)
        return cls(x=rect.x, y=rect.y)

    def provided(self) -> dict:
        return self.model_dump(exclude_unset=True)


class ContractSnapshot(BaseModel):
    id: int
    title: str = ""
    status: ContractStatus = ContractStatus.draft
    lock_order: bool = False
    documents: List[Document] = ModelField(default_factory=list)
    signers: List[Signer] = ModelField(default_factory=list)
    fields: List[Field] = ModelField(default_factory=list)
