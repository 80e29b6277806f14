import pytest

from contract_fields.editor.entities import ContractSnapshot, Document, Field, Signer
from contract_fields.export import build_submission


def make_snapshot(**field_overrides):
    field = dict(
        id=7, document_id=10, signer_id=1, field_type="signature", pages="1,3",
        x=100, y=600, width=200, height=50,
    )
    field.update(field_overrides)
    return ContractSnapshot(
        id=1,
        title="Lease",
        documents=[Document(id=10, filename="lease.pdf", page_count=3)],
        signers=[
            Signer(id=1, name="Alice", email="alice@example.com"),
            Signer(id=2, name="Val", email="val@example.com", role="validator"),
        ],
        fields=[
            Field(**field),
            Field(id=8, document_id=10, field_type="text", pages="2", x=0, y=0, width=50, height=20),
        ],
    )


def test_areas_are_top_left_fractions_per_page():
    sizes = {10: [(600, 800), (600, 800), (400, 1000)]}
    submission = build_submission(make_snapshot(), sizes)
    doc = submission["documents"][0]
    # unassigned field 8 has nobody to fill it
    assert [f["name"] for f in doc["fields"]] == ["signature_7"]
    first, third = doc["fields"][0]["areas"]
    assert first == {"page": 1, "x": pytest.approx(100 / 600), "y": pytest.approx(150 / 800),
                     "w": pytest.approx(200 / 600), "h": pytest.approx(50 / 800)}
    assert third["page"] == 3
    assert third["y"] == pytest.approx(350 / 1000)
    assert doc["fields"][0]["role"] == "Alice"


def test_adjust_offsets_move_the_exported_box():
    submission = build_submission(make_snapshot(horizontal_adjust=5, vertical_adjust=-10))
    area = submission["documents"][0]["fields"][0]["areas"][0]
    assert area["x"] == pytest.approx(105 / 595)
    # y grows upward in page space, so a negative adjust lowers the box
    assert area["y"] == pytest.approx((842 - 590 - 50) / 842)


def test_box_pushed_off_the_page_is_kept_inside():
    submission = build_submission(make_snapshot(x=500, y=820))
    area = submission["documents"][0]["fields"][0]["areas"][0]
    assert area["x"] == pytest.approx(395 / 595)
    assert area["y"] == 0.0


def test_only_signer_role_signers_are_submitters():
    submission = build_submission(make_snapshot())
    assert submission["name"] == "Lease"
    assert [s["email"] for s in submission["submitters"]] == ["alice@example.com"]


def test_locked_order_is_preserved_for_the_provider():
    assert build_submission(make_snapshot())["order"] == "random"
    locked = make_snapshot().model_copy(update={"lock_order": True})
    assert build_submission(locked)["order"] == "preserved"
