from io import BytesIO
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadError


class UnreadablePdf(ValueError):
    pass


def page_boxes(pdf_bytes: bytes) -> List[dict]:
    """Width and height in points of every page, in page order."""
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        return [
            {
                "page": index + 1,
                "width": float(page.mediabox.width),
                "height": float(page.mediabox.height),
            }
            for index, page in enumerate(reader.pages)
        ]
    except PdfReadError as exc:
        raise UnreadablePdf(str(exc)) from exc
