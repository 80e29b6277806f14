"""Persistence boundary of the editing core.

Fields travel with ``position`` and ``size`` as separately JSON-encoded
strings (``'{"x":50,"y":700}'``, ``'{"width":200,"height":50}'``). This
module is the only place that form exists; everything past it works with
decoded numbers.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..errors import PersistenceFailure
from .entities import ContractSnapshot, Document, Field, FieldChanges, FieldType, Signer
from .geometry import Rect

logger = logging.getLogger(__name__)


def _number(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def encode_position(x, y) -> str:
    return json.dumps({"x": _number(x), "y": _number(y)}, separators=(",", ":"))


def encode_size(width, height) -> str:
    return json.dumps({"width": _number(width), "height": _number(height)}, separators=(",", ":"))


def _decode_json(value) -> dict:
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def decode_rect(position, size) -> Rect:
    pos = _decode_json(position)
    dims = _decode_json(size)
    return Rect(x=pos["x"], y=pos["y"], width=dims["width"], height=dims["height"])


def encode_new_field(field: Field) -> dict:
    return {
        "documentId": field.document_id,
        "signerId": field.signer_id,
        "fieldType": field.field_type.value,
        "pages": field.pages,
        "position": encode_position(field.x, field.y),
        "size": encode_size(field.width, field.height),
        "content": field.content,
        "horizontalAdjust": field.horizontal_adjust,
        "verticalAdjust": field.vertical_adjust,
    }


def encode_changes(field_id, changes: FieldChanges, current: Optional[Field] = None) -> dict:
    """PUT body with only the provided keys.

    Position and size are sent as whole objects; ``current`` fills in the
    coordinate that a partial change left out.
    """
    data = changes.provided()
    body = {"fieldId": field_id}
    if "signer_id" in data:
        body["signerId"] = data["signer_id"]
    if data.get("field_type") is not None:
        body["fieldType"] = FieldType(data["field_type"]).value
    for key, wire in (("pages", "pages"), ("content", "content"),
                      ("horizontal_adjust", "horizontalAdjust"), ("vertical_adjust", "verticalAdjust")):
        if key in data:
            body[wire] = data[key]
    if "x" in data or "y" in data:
        x = data.get("x", current.x if current else None)
        y = data.get("y", current.y if current else None)
        body["position"] = encode_position(x, y)
    if "width" in data or "height" in data:
        width = data.get("width", current.width if current else None)
        height = data.get("height", current.height if current else None)
        body["size"] = encode_size(width, height)
    return body


def decode_field(record: dict) -> Field:
    rect = decode_rect(record["position"], record["size"])
    return Field(
        id=record["id"],
        document_id=record["documentId"],
        signer_id=record.get("signerId"),
        field_type=record["fieldType"],
        pages=record["pages"],
        x=rect.x,
        y=rect.y,
        width=rect.width,
        height=rect.height,
        content=record.get("content"),
        horizontal_adjust=record.get("horizontalAdjust") or 0,
        vertical_adjust=record.get("verticalAdjust") or 0,
    )


def decode_contract(record: dict) -> ContractSnapshot:
    documents = []
    fields = []
    for doc in record.get("documents", []):
        documents.append(Document(
            id=doc["id"],
            filename=doc["filename"],
            original_path=doc.get("originalPath") or "",
            page_count=doc.get("pageCount"),
        ))
        fields.extend(decode_field(f) for f in doc.get("fields", []))
    signers = [
        Signer(id=s["id"], name=s["name"], email=s["email"], role=s.get("signerType") or "signer")
        for s in record.get("signers", [])
    ]
    return ContractSnapshot(
        id=record["id"],
        title=record.get("title") or "",
        status=record.get("status") or "draft",
        lock_order=bool(record.get("lockOrder")),
        documents=documents,
        signers=signers,
        fields=fields,
    )


class FieldGateway(ABC):
    """Calls the editing core makes across the persistence boundary.

    Every method raises PersistenceFailure when the call does not succeed.
    """

    @abstractmethod
    async def fetch_contract(self) -> ContractSnapshot:
        ...

    @abstractmethod
    async def create_field(self, body: dict) -> Field:
        ...

    @abstractmethod
    async def update_field(self, body: dict) -> Field:
        ...

    @abstractmethod
    async def delete_field(self, field_id) -> None:
        ...

    @abstractmethod
    async def send_contract(self) -> dict:
        ...


class HttpFieldGateway(FieldGateway):
    def __init__(self, client: httpx.AsyncClient, contract_id: int, headers: Optional[dict] = None):
        self.client = client
        self.contract_id = contract_id
        self.headers = headers or {}

    @property
    def base(self) -> str:
        return f"/api/contracts/{self.contract_id}"

    async def _call(self, operation: str, method: str, url: str, **kwargs) -> dict:
        try:
            resp = await self.client.request(method, url, headers=self.headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s on contract %s failed: %s", operation, self.contract_id, exc)
            raise PersistenceFailure(operation, str(exc)) from exc
        if resp.is_error:
            detail = _error_detail(resp)
            logger.warning("%s on contract %s answered %s: %s", operation, self.contract_id, resp.status_code, detail)
            raise PersistenceFailure(operation, detail, status_code=resp.status_code)
        return resp.json()

    async def fetch_contract(self) -> ContractSnapshot:
        data = await self._call("fetch contract", "GET", self.base)
        return decode_contract(data)

    async def create_field(self, body: dict) -> Field:
        data = await self._call("create field", "POST", f"{self.base}/fields", json=body)
        return decode_field(data["field"])

    async def update_field(self, body: dict) -> Field:
        data = await self._call("update field", "PUT", f"{self.base}/fields", json=body)
        return decode_field(data["field"])

    async def delete_field(self, field_id) -> None:
        await self._call("delete field", "DELETE", f"{self.base}/fields", params={"fieldId": field_id})

    async def send_contract(self) -> dict:
        return await self._call("send contract", "POST", f"{self.base}/send")


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        return str(data.get("error") or data.get("detail") or data)
    return str(data)
