import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional, Set

from ..errors import NoActiveSession, PersistenceFailure, SessionBusy
from .assignment import ActiveSelection, SignerAssignmentIndex
from .drag import DragSession
from .entities import DEFAULT_FIELD_HEIGHT, DEFAULT_FIELD_WIDTH, ContractStatus, Field, FieldChanges, FieldId
from .gateway import FieldGateway, encode_changes, encode_new_field
from .geometry import Point, Rect, to_page_space
from .readiness import check_readiness
from .store import FieldStore

logger = logging.getLogger(__name__)

GENERIC_FAILURE_NOTICE = "The change could not be saved."

# attributes compared after a create lands, to catch edits made while it was in flight
SYNCED_ATTRIBUTES = (
    "signer_id", "field_type", "pages", "x", "y", "width", "height", "content",
    "horizontal_adjust", "vertical_adjust",
)


class Reconciler(ABC):
    """What to do when the server refuses an optimistic change."""

    @abstractmethod
    async def created_failed(self, service: "ContractFieldService", field: Field, exc: PersistenceFailure):
        ...

    @abstractmethod
    async def updated_failed(self, service: "ContractFieldService", field_id: FieldId, exc: PersistenceFailure):
        ...

    @abstractmethod
    async def deleted_failed(self, service: "ContractFieldService", field_id: FieldId, exc: PersistenceFailure):
        ...


class RefetchReconciler(Reconciler):
    """Drop failed creates; reload the whole contract after any other failure."""

    async def created_failed(self, service, field, exc):
        if field.id in service.store:
            service.store.remove(field.id)

    async def updated_failed(self, service, field_id, exc):
        await service.refetch()

    async def deleted_failed(self, service, field_id, exc):
        await service.refetch()


class ContractFieldService:
    """Applies field edits locally first and then persists them.

    There is no write sequencing and no version check: concurrent editors
    overwrite each other and the last write wins.
    """

    def __init__(
        self,
        gateway: FieldGateway,
        store: Optional[FieldStore] = None,
        reconciler: Optional[Reconciler] = None,
        on_failure: Optional[Callable[[str], None]] = None,
    ):
        self.gateway = gateway
        self.reconciler = reconciler or RefetchReconciler()
        self.on_failure = on_failure
        self.store = store
        self.selection = ActiveSelection(store) if store is not None else None
        self._drag: Optional[DragSession] = None
        # temporary ids the user deleted while their create was in flight
        self._discarded: Set[str] = set()

    async def load(self) -> FieldStore:
        snapshot = await self.gateway.fetch_contract()
        previous_signer = self.selection.signer_id if self.selection else None
        if self._drag is not None and self._drag.active:
            logger.info("dropping drag on field %s, contract %s reloaded", self._drag.field_id, snapshot.id)
            self._drag.cancel()
        self._drag = None
        self.store = FieldStore.from_snapshot(snapshot)
        self.selection = ActiveSelection(self.store)
        if previous_signer in self.store.signers:
            self.selection.select_signer(previous_signer)
        return self.store

    async def refetch(self):
        logger.info("resynchronising contract %s", self.store.contract_id if self.store else "?")
        try:
            await self.load()
        except PersistenceFailure:
            logger.exception("reload failed, keeping local state")

    @property
    def assignments(self) -> SignerAssignmentIndex:
        return SignerAssignmentIndex(self.store)

    def _notify(self, exc: PersistenceFailure):
        logger.warning("persistence failure: %s", exc)
        if self.on_failure is not None:
            self.on_failure(GENERIC_FAILURE_NOTICE)

    # ---------- create ----------

    async def create_field(
        self,
        document_id: int,
        signer_id: Optional[int],
        field_type,
        pages: str,
        rect: Rect,
        content: Optional[str] = None,
    ) -> Optional[Field]:
        field = self.store.create(document_id, signer_id, field_type, pages, rect, content=content)
        try:
            saved = await self.gateway.create_field(encode_new_field(field))
        except PersistenceFailure as exc:
            self._discarded.discard(field.id)
            await self.reconciler.created_failed(self, field, exc)
            self._notify(exc)
            return None

        if field.id in self._discarded:
            self._discarded.discard(field.id)
            logger.info("field %s was removed before the server confirmed it", saved.id)
            if saved.id in self.store:
                # a reload picked up the server copy
                self.store.remove(saved.id)
            try:
                await self.gateway.delete_field(saved.id)
            except PersistenceFailure as exc:
                await self.reconciler.deleted_failed(self, saved.id, exc)
                self._notify(exc)
            return None

        if field.id not in self.store:
            # a reload replaced the store while the create was in flight
            if saved.id not in self.store:
                logger.info("field %s confirmed after a reload, adding it back", saved.id)
                self.store.adopt(saved)
            return self.store.get(saved.id)

        local = self.store.rekey(field.id, saved.id)
        pending = {
            name: getattr(local, name)
            for name in SYNCED_ATTRIBUTES
            if getattr(local, name) != getattr(saved, name)
        }
        if pending:
            await self._persist_update(local.id, FieldChanges(**pending))
        return self.store.get(local.id) if local.id in self.store else None

    async def place_field(
        self,
        document_id: int,
        page: int,
        click: Point,
        page_height_pt: float,
        zoom: float = 1.0,
        signer_id: Optional[int] = None,
        field_type=None,
        width: float = DEFAULT_FIELD_WIDTH,
        height: float = DEFAULT_FIELD_HEIGHT,
    ) -> Optional[Field]:
        """Drop a default-size field centred on a click in the viewer."""
        if signer_id is None:
            signer_id = self.selection.signer_id
        if field_type is None:
            field_type = self.selection.field_type
        shown = Rect(
            x=max(0, click.x - width * zoom / 2),
            y=max(0, click.y - height * zoom / 2),
            width=width * zoom,
            height=height * zoom,
        )
        rect = to_page_space(shown, page_height_pt, zoom)
        return await self.create_field(document_id, signer_id, field_type, str(page), rect)

    # ---------- update ----------

    async def update_field(self, field_id: FieldId, changes: FieldChanges) -> Field:
        field = self.store.update(field_id, changes)
        await self._persist_update(field_id, changes)
        return field

    async def _persist_update(self, field_id: FieldId, changes: FieldChanges):
        current = self.store.get(field_id)
        if current.is_temporary:
            # the pending create sends the latest local values once it lands
            return
        body = encode_changes(field_id, changes, current)
        try:
            await self.gateway.update_field(body)
        except PersistenceFailure as exc:
            await self.reconciler.updated_failed(self, field_id, exc)
            self._notify(exc)

    # ---------- drag ----------

    def begin_drag(self, field_id: FieldId, mode, pointer: Point, page_height_pt: float,
                   zoom: float = 1.0, handle: str = "se") -> Rect:
        if self._drag is not None and self._drag.active:
            raise SessionBusy(self._drag.field_id)
        self._drag = DragSession(self.store, page_height_pt, zoom)
        return self._drag.begin(field_id, mode, pointer, handle=handle)

    @property
    def dragging(self) -> bool:
        return self._drag is not None and self._drag.active

    def drag_to(self, pointer: Point) -> Rect:
        return self._active_drag().update(pointer)

    async def commit_drag(self) -> Field:
        result = self._active_drag().commit()
        await self._persist_update(result.field.id, result.changes)
        return result.field

    def cancel_drag(self):
        if self._drag is not None:
            self._drag.cancel()

    def _active_drag(self) -> DragSession:
        if not self.dragging:
            raise NoActiveSession()
        return self._drag

    # ---------- delete ----------

    async def delete_field(self, field_id: FieldId) -> bool:
        removed = self.store.remove(field_id)
        if removed is None:
            return False
        if removed.is_temporary:
            # the pending create deletes the server copy once it lands
            self._discarded.add(removed.id)
            return True
        try:
            await self.gateway.delete_field(field_id)
        except PersistenceFailure as exc:
            await self.reconciler.deleted_failed(self, field_id, exc)
            self._notify(exc)
        return True

    # ---------- send ----------

    def readiness(self):
        return check_readiness(self.store.signers.values(), self.store)

    async def send_for_signature(self):
        """Return NotReady untouched, otherwise send and lock the contract.

        A failed send leaves the contract in draft and raises PersistenceFailure.
        """
        self.store.ensure_editable()
        result = self.readiness()
        if not result:
            logger.info("contract %s not ready: %s", self.store.contract_id, result.message())
            return result
        try:
            response = await self.gateway.send_contract()
        except PersistenceFailure as exc:
            self._notify(exc)
            raise
        self.store.mark_status(ContractStatus.sent)
        logger.info("contract %s sent for signature", self.store.contract_id)
        return response
