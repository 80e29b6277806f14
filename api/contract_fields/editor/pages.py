from typing import FrozenSet, Iterable, Optional

from ..errors import InvalidPageSpec


def parse_pages(spec: str, page_count: Optional[int] = None) -> FrozenSet[int]:
    """Parse ``"1"``, ``"1,3"``, ``"1-3"`` (and mixes such as ``"1-2,5"``).

    Pages are 1-based. When ``page_count`` is known every page must fall in
    ``[1, page_count]``.
    """
    if spec is None:
        raise InvalidPageSpec(spec, "missing")
    text = str(spec).strip()
    if not text:
        raise InvalidPageSpec(spec, "empty")
    pages = set()
    for part in text.split(","):
        part = part.strip()
        if not part:
            raise InvalidPageSpec(spec, "empty list entry")
        if "-" in part:
            start_text, _, end_text = part.partition("-")
            start = _page_number(spec, start_text)
            end = _page_number(spec, end_text)
            if end < start:
                raise InvalidPageSpec(spec, f"range {part} runs backwards")
            pages.update(range(start, end + 1))
        else:
            pages.add(_page_number(spec, part))
    if page_count is not None:
        beyond = sorted(p for p in pages if p > page_count)
        if beyond:
            raise InvalidPageSpec(spec, f"page {beyond[0]} is past the last page ({page_count})")
    return frozenset(pages)


def _page_number(spec, text: str) -> int:
    text = text.strip()
    if not text.isdigit():
        raise InvalidPageSpec(spec, f"{text!r} is not a page number")
    number = int(text)
    if number < 1:
        raise InvalidPageSpec(spec, "pages start at 1")
    return number


def format_pages(pages: Iterable[int]) -> str:
    ordered = sorted(set(pages))
    if not ordered:
        return ""
    chunks = []
    start = prev = ordered[0]
    for page in ordered[1:]:
        if page == prev + 1:
            prev = page
            continue
        chunks.append(_chunk(start, prev))
        start = prev = page
    chunks.append(_chunk(start, prev))
    return ",".join(chunks)


def _chunk(start: int, end: int) -> str:
    return str(start) if start == end else f"{start}-{end}"
