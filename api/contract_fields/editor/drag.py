"""Single in-progress move or resize of one field.

The session keeps its own preview rectangle in presentation space and only
writes to the store when the gesture is committed, so a cancelled gesture
leaves no trace.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..errors import NoActiveSession, SessionBusy
from .entities import Field, FieldChanges, FieldId
from .geometry import Point, Rect, to_page_space, to_presentation_space
from .store import FieldStore

MIN_PREVIEW_SIZE = 10
MIN_PAGE_SIZE = 1
RESIZE_HANDLES = {"n", "s", "e", "w", "ne", "nw", "se", "sw"}


class DragMode(str, Enum):
    move = "move"
    resize = "resize"


class DragResult(BaseModel):
    field: Field
    mode: DragMode
    changes: FieldChanges


class DragSession:
    def __init__(self, store: FieldStore, page_height_pt: float, zoom: float = 1.0):
        self.store = store
        self.page_height_pt = page_height_pt
        self.zoom = zoom
        self.field_id: Optional[FieldId] = None
        self.mode: Optional[DragMode] = None
        self.handle = "se"
        self.anchor: Optional[Rect] = None
        self.start: Optional[Point] = None
        self.preview: Optional[Rect] = None

    @property
    def active(self) -> bool:
        return self.field_id is not None

    def begin(self, field_id: FieldId, mode, start_pointer: Point, handle: str = "se") -> Rect:
        if self.active:
            raise SessionBusy(self.field_id)
        mode = DragMode(mode)
        if mode == DragMode.resize and handle not in RESIZE_HANDLES:
            raise ValueError(f"unknown resize handle {handle!r}")
        self.store.ensure_editable()
        field = self.store.get(field_id)
        self.anchor = to_presentation_space(field.rect, self.page_height_pt, self.zoom)
        self.field_id = field_id
        self.mode = mode
        self.handle = handle
        self.start = start_pointer
        self.preview = self.anchor
        return self.preview

    def update(self, pointer: Point) -> Rect:
        if not self.active:
            raise NoActiveSession()
        dx = pointer.x - self.start.x
        dy = pointer.y - self.start.y
        if self.mode == DragMode.move:
            self.preview = self.anchor.translate(dx, dy)
        else:
            self.preview = self._resized(dx, dy)
        return self.preview

    def _resized(self, dx: float, dy: float) -> Rect:
        a = self.anchor
        left, top = a.x, a.y
        right, bottom = a.x + a.width, a.y + a.height
        if "e" in self.handle:
            right = max(left + MIN_PREVIEW_SIZE, right + dx)
        if "w" in self.handle:
            left = min(right - MIN_PREVIEW_SIZE, left + dx)
        if "s" in self.handle:
            bottom = max(top + MIN_PREVIEW_SIZE, bottom + dy)
        if "n" in self.handle:
            top = min(bottom - MIN_PREVIEW_SIZE, top + dy)
        return Rect(x=left, y=top, width=right - left, height=bottom - top)

    def commit(self) -> DragResult:
        if not self.active:
            raise NoActiveSession()
        page_rect = to_page_space(self.preview, self.page_height_pt, self.zoom)
        # a minimum-size preview at high zoom can round down to nothing
        page_rect = page_rect.model_copy(update={
            "width": max(MIN_PAGE_SIZE, page_rect.width),
            "height": max(MIN_PAGE_SIZE, page_rect.height),
        })
        changes = FieldChanges.for_rect(page_rect, with_size=self.mode == DragMode.resize)
        mode = self.mode
        try:
            field = self.store.update(self.field_id, changes)
        finally:
            self._reset()
        return DragResult(field=field, mode=mode, changes=changes)

    def cancel(self):
        self._reset()

    def _reset(self):
        self.field_id = None
        self.mode = None
        self.handle = "se"
        self.anchor = None
        self.start = None
        self.preview = None
