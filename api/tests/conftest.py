import os
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from minio.error import S3Error
from sqlmodel import SQLModel, Session, create_engine

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("ADMIN_ACCESS_TOKEN", "admin-test-token")

from contract_fields.main import app  # noqa: E402
from contract_fields import db as db_module  # noqa: E402
from contract_fields.db import get_session  # noqa: E402
from contract_fields import storage as storage_module  # noqa: E402
from contract_fields.models import Contract, ContractDocument, ContractSigner  # noqa: E402

ADMIN_HEADERS = {"X-Access-Token": os.environ["ADMIN_ACCESS_TOKEN"]}


@pytest.fixture(scope="session")
def test_engine(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("data") / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    return engine


@pytest.fixture
def setup_db(test_engine):
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


class MissingObject(S3Error):
    def __init__(self, key: str):
        Exception.__init__(self, key)
        self.key = key

    def __str__(self):
        return f"NoSuchKey: {self.key}"


@pytest.fixture
def mock_storage(monkeypatch) -> Dict[str, bytes]:
    store: Dict[str, bytes] = {}

    def fake_put_bytes(key: str, data: bytes, content_type: str = "application/pdf"):
        store[key] = bytes(data)

    def fake_get_bytes(key: str) -> bytes:
        if key not in store:
            raise MissingObject(key)
        return store[key]

    from contract_fields.routers import contracts, documents  # noqa: E402

    for target in (storage_module, contracts, documents):
        if hasattr(target, "put_bytes"):
            monkeypatch.setattr(target, "put_bytes", fake_put_bytes)
        if hasattr(target, "get_bytes"):
            monkeypatch.setattr(target, "get_bytes", fake_get_bytes)
    return store


@pytest.fixture
def client(test_engine, setup_db, mock_storage):
    db_module.engine = test_engine

    def override_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def draft_contract(client, test_engine):
    """Draft contract with one 3-page document and two signers plus a viewer."""
    with Session(test_engine) as session:
        contract = Contract(title="Service agreement")
        session.add(contract)
        session.commit()
        session.refresh(contract)
        doc = ContractDocument(
            contract_id=contract.id,
            filename="agreement.pdf",
            original_path=f"contracts/{contract.id}/documents/agreement.pdf",
            page_count=3,
        )
        s1 = ContractSigner(contract_id=contract.id, name="Alice Martin", email="alice@example.com", sort_order=0)
        s2 = ContractSigner(contract_id=contract.id, name="Bruno Petit", email="bruno@example.com", sort_order=1)
        viewer = ContractSigner(
            contract_id=contract.id, name="Carla Viewer", email="carla@example.com",
            signer_type="viewer", sort_order=2,
        )
        session.add_all([doc, s1, s2, viewer])
        session.commit()
        return {
            "contract_id": contract.id,
            "document_id": doc.id,
            "s1": s1.id,
            "s2": s2.id,
            "viewer": viewer.id,
        }


@pytest.fixture
def field_store():
    from contract_fields.editor.entities import Document, Signer
    from contract_fields.editor.store import FieldStore

    return FieldStore(
        contract_id=1,
        documents=[
            Document(id=10, filename="agreement.pdf", page_count=3),
            Document(id=11, filename="annex.pdf", page_count=1),
        ],
        signers=[
            Signer(id=1, name="S1", email="s1@example.com"),
            Signer(id=2, name="S2", email="s2@example.com"),
            Signer(id=3, name="Val", email="val@example.com", role="validator"),
        ],
        title="Service agreement",
    )
