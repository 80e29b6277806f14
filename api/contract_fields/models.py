from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field as ORMField

class Contract(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    title: str
    status: str = "draft"  # draft|sent|signed|declined|expired
    expiration_days: int = 30
    lock_order: bool = False
    sent_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = ORMField(default_factory=datetime.utcnow)

class ContractDocument(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    contract_id: int = ORMField(index=True)
    filename: str
    original_path: str
    page_count: Optional[int] = None
    sha256: Optional[str] = None
    sort_order: int = 0
    created_at: datetime = ORMField(default_factory=datetime.utcnow)

class ContractSigner(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    contract_id: int = ORMField(index=True)
    name: str
    email: str
    signer_type: str = "signer"  # signer|validator|viewer
    status: str = "pending"
    sort_order: int = 0

class ContractField(SQLModel, table=True):
    id: Optional[int] = ORMField(default=None, primary_key=True)
    document_id: int = ORMField(index=True)
    signer_id: Optional[int] = None
    field_type: str  # signature|initials|name|date|text|input
    pages: str = "1"
    position: str  # '{"x":50,"y":700}'
    size: str      # '{"width":200,"height":50}'
    content: Optional[str] = None
    horizontal_adjust: int = 0
    vertical_adjust: int = 0
    created_at: datetime = ORMField(default_factory=datetime.utcnow)
