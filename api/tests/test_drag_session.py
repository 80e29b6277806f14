import pytest

from contract_fields.editor.drag import DragMode, DragSession
from contract_fields.editor.entities import ContractStatus
from contract_fields.editor.geometry import Point, Rect
from contract_fields.errors import ContractNotEditable, NoActiveSession, SessionBusy, UnknownField

A4_HEIGHT = 842


@pytest.fixture
def placed(field_store):
    # shown at {x:100, y:200, width:200, height:50} at zoom 1
    return field_store.create(10, 1, "signature", "1", Rect(x=100, y=592, width=200, height=50))


def test_move_commit_flips_y_once(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT, zoom=1)
    anchor = session.begin(placed.id, "move", Point(x=150, y=220))
    assert anchor == Rect(x=100, y=200, width=200, height=50)

    preview = session.update(Point(x=180, y=210))
    assert preview == Rect(x=130, y=190, width=200, height=50)
    # nothing persisted mid-gesture
    assert field_store.get(placed.id).rect == placed.rect

    result = session.commit()
    assert result.mode == DragMode.move
    assert (result.field.x, result.field.y) == (130, 602)
    assert field_store.get(placed.id).rect == Rect(x=130, y=602, width=200, height=50)
    assert result.changes.provided() == {"x": 130, "y": 602}
    assert not session.active


def test_move_at_zoom_converts_pixels_to_points(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT, zoom=2)
    session.begin(placed.id, "move", Point(x=0, y=0))
    session.update(Point(x=60, y=-20))
    field = session.commit().field
    assert (field.x, field.y) == (130, 602)
    assert (field.width, field.height) == (200, 50)


def test_resize_from_bottom_right_corner(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT)
    session.begin(placed.id, "resize", Point(x=300, y=250))
    preview = session.update(Point(x=340, y=270))
    assert preview == Rect(x=100, y=200, width=240, height=70)
    result = session.commit()
    # the top edge stays put, so the bottom-left origin moves down
    assert result.field.rect == Rect(x=100, y=572, width=240, height=70)
    assert set(result.changes.provided()) == {"x", "y", "width", "height"}


def test_resize_is_clamped_to_minimum(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT)
    session.begin(placed.id, "resize", Point(x=300, y=250))
    preview = session.update(Point(x=-500, y=-500))
    assert preview == Rect(x=100, y=200, width=10, height=10)


def test_resize_from_top_left_keeps_opposite_corner(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT)
    session.begin(placed.id, "resize", Point(x=100, y=200), handle="nw")
    preview = session.update(Point(x=120, y=190))
    assert preview == Rect(x=120, y=190, width=180, height=60)
    preview = session.update(Point(x=1000, y=1000))
    assert preview == Rect(x=290, y=240, width=10, height=10)


def test_unknown_resize_handle(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT)
    with pytest.raises(ValueError):
        session.begin(placed.id, "resize", Point(x=0, y=0), handle="middle")
    assert not session.active


def test_second_begin_is_refused(field_store, placed):
    other = field_store.create(10, 2, "signature", "1", Rect(x=10, y=10, width=200, height=50))
    session = DragSession(field_store, A4_HEIGHT)
    session.begin(placed.id, "move", Point(x=0, y=0))
    with pytest.raises(SessionBusy):
        session.begin(other.id, "resize", Point(x=0, y=0))
    assert session.field_id == placed.id


def test_cancel_leaves_store_untouched(field_store, placed):
    before = [f.model_dump() for f in field_store.all()]
    session = DragSession(field_store, A4_HEIGHT)
    session.begin(placed.id, "resize", Point(x=0, y=0))
    session.update(Point(x=77, y=33))
    session.cancel()
    assert [f.model_dump() for f in field_store.all()] == before
    assert not session.active
    with pytest.raises(NoActiveSession):
        session.commit()


def test_begin_checks_field_and_contract(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT)
    with pytest.raises(UnknownField):
        session.begin("tmp-nope", "move", Point(x=0, y=0))
    field_store.mark_status(ContractStatus.sent)
    with pytest.raises(ContractNotEditable):
        session.begin(placed.id, "move", Point(x=0, y=0))
    assert not session.active


def test_high_zoom_resize_keeps_a_positive_size(field_store, placed):
    session = DragSession(field_store, A4_HEIGHT, zoom=25)
    session.begin(placed.id, "resize", Point(x=7500, y=6250))
    preview = session.update(Point(x=0, y=0))
    assert (preview.width, preview.height) == (10, 10)
    field = session.commit().field
    # 10 px at zoom 25 is 0.4 pt
    assert (field.width, field.height) == (1, 1)
    assert (field.x, field.y) == (100, 642)
