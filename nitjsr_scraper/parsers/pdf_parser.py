import logging
from dataclasses import dataclass
from typing import Optional

import fitz

from ..exceptions import DecodeError

module_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodedPdf:
    text: str
    page_count: int
    title: Optional[str] = None


def decode_pdf(pdf_bytes: bytes, url: str = "") -> DecodedPdf:
    """
    Extract the plain text of every page in a PDF.
    Raises DecodeError for anything PyMuPDF cannot open or read.
    """
    if not pdf_bytes:
        raise DecodeError(f"Empty PDF body for {url or 'stream'}")

    try:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            meta = doc.metadata or {}
            pdf_title = meta.get("title", "")
            text = "".join(page.get_text("text") for page in doc)
            page_count = len(doc)
    except Exception as e:
        # RuntimeError, ValueError or fitz.FileDataError depending on the damage
        raise DecodeError(f"PyMuPDF could not read {url or 'stream'}: {e}") from e

    if page_count == 0:
        raise DecodeError(f"No pages in {url or 'stream'}")

    module_logger.debug(
        "Decoded PDF",
        extra={"event_type": "pdf_decoded", "url": url, "page_count": page_count, "text_length": len(text)},
    )
    return DecodedPdf(
        text=text.replace("\x00", ""),
        page_count=page_count,
        title=pdf_title.strip() if isinstance(pdf_title, str) and pdf_title.strip() else None,
    )
