"""Conversions between page space and presentation space.

Page space is measured in PDF points with the origin at the bottom-left of
the page and y growing upward. Presentation space is whatever the viewer
draws in: pixels, origin top-left, y growing downward, scaled by ``zoom``.

Every conversion rounds to whole points/pixels, the same way the editor
always has. Repeated round trips can therefore drift by one unit.
"""
import math

from pydantic import BaseModel


class Point(BaseModel):
    x: float
    y: float


class Rect(BaseModel):
    x: float
    y: float
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def translate(self, dx: float, dy: float) -> "Rect":
        return Rect(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_page_space(rect: Rect, page_height_pt: float, zoom: float) -> Rect:
    return Rect(
        x=round_half_up(rect.x / zoom),
        y=round_half_up(page_height_pt - (rect.y + rect.height) / zoom),
        width=round_half_up(rect.width / zoom),
        height=round_half_up(rect.height / zoom),
    )


def to_presentation_space(rect: Rect, page_height_pt: float, zoom: float) -> Rect:
    return Rect(
        x=round_half_up(rect.x * zoom),
        y=round_half_up((page_height_pt - rect.y - rect.height) * zoom),
        width=round_half_up(rect.width * zoom),
        height=round_half_up(rect.height * zoom),
    )


def clamp_to_page(rect: Rect, page_width_pt: float, page_height_pt: float) -> Rect:
    """Keep a page-space rect inside the page box without resizing it."""
    x = max(0, min(rect.x, page_width_pt - rect.width))
    y = max(0, min(rect.y, page_height_pt - rect.height))
    return Rect(x=x, y=y, width=rect.width, height=rect.height)


def to_relative_area(rect: Rect, page_width_pt: float, page_height_pt: float) -> dict:
    # signing providers place areas in 0..1 page fractions
    x = rect.x / page_width_pt
    y = rect.y / page_height_pt
    w = rect.width / page_width_pt
    h = rect.height / page_height_pt
    return {
        "x": max(0.0, min(1.0, x)),
        "y": max(0.0, min(1.0, y)),
        "w": max(0.01, min(1.0, w)),
        "h": max(0.01, min(1.0, h)),
    }
