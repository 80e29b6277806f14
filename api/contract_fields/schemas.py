from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional

from .editor.entities import FieldType, SignerRole


class WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContractCreate(WireModel):
    title: str
    expiration_days: int = 30
    lock_order: bool = False


class SignerCreate(WireModel):
    name: str
    email: str
    signer_type: SignerRole = SignerRole.signer


class FieldCreate(WireModel):
    document_id: int
    signer_id: Optional[int] = None
    field_type: FieldType
    pages: str
    position: str  # JSON string {"x":..,"y":..}
    size: str      # JSON string {"width":..,"height":..}
    content: Optional[str] = None
    horizontal_adjust: int = 0
    vertical_adjust: int = 0


class FieldUpdate(WireModel):
    field_id: int
    signer_id: Optional[int] = None
    field_type: Optional[FieldType] = None
    pages: Optional[str] = None
    position: Optional[str] = None
    size: Optional[str] = None
    content: Optional[str] = None
    horizontal_adjust: Optional[int] = None
    vertical_adjust: Optional[int] = None
