from contract_fields.editor.geometry import (
    Rect,
    clamp_to_page,
    round_half_up,
    to_page_space,
    to_presentation_space,
    to_relative_area,
)

A4_HEIGHT = 842


def test_click_rect_lands_at_bottom_left_origin():
    shown = Rect(x=100, y=200, width=200, height=50)
    assert to_page_space(shown, A4_HEIGHT, 1) == Rect(x=100, y=592, width=200, height=50)


def test_zoom_scales_back_to_points():
    shown = Rect(x=150, y=300, width=300, height=75)
    assert to_page_space(shown, A4_HEIGHT, 1.5) == Rect(x=100, y=592, width=200, height=50)


def test_presentation_is_inverse_of_page_space():
    page = Rect(x=100, y=592, width=200, height=50)
    assert to_presentation_space(page, A4_HEIGHT, 1) == Rect(x=100, y=200, width=200, height=50)
    assert to_presentation_space(page, A4_HEIGHT, 2) == Rect(x=200, y=400, width=400, height=100)


def test_round_trip_stays_within_one_point():
    rects = [
        Rect(x=0, y=0, width=10, height=10),
        Rect(x=13, y=77, width=201, height=49),
        Rect(x=333, y=511, width=97, height=31),
        Rect(x=1, y=790, width=3, height=3),
    ]
    for zoom in (0.5, 0.75, 1, 1.25, 1.5, 2):
        for rect in rects:
            back = to_presentation_space(to_page_space(rect, A4_HEIGHT, zoom), A4_HEIGHT, zoom)
            for attr in ("x", "y", "width", "height"):
                assert abs(getattr(back, attr) - getattr(rect, attr)) <= max(1, zoom), (rect, zoom, attr)


def test_rounding_is_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0


def test_codec_does_not_clamp_off_page_rects():
    shown = Rect(x=-20, y=900, width=100, height=50)
    page = to_page_space(shown, A4_HEIGHT, 1)
    assert page.x == -20
    assert page.y == -108


def test_clamp_to_page_keeps_size():
    clamped = clamp_to_page(Rect(x=-5, y=820, width=200, height=50), 595, A4_HEIGHT)
    assert clamped == Rect(x=0, y=792, width=200, height=50)


def test_relative_area_is_clamped():
    area = to_relative_area(Rect(x=595, y=-10, width=1, height=2000), 595, A4_HEIGHT)
    assert area == {"x": 1.0, "y": 0.0, "w": 0.01, "h": 1.0}
