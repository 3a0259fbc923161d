import io
from typing import Optional

import fitz  # PyMuPDF
from pypdf import PdfReader, PdfWriter

from .config import settings
from .errors import FormatError


def first_page_pdf(pdf_bytes: bytes) -> bytes:
    """
    Extract the first page of a PDF as a standalone one-page PDF

    Args:
        pdf_bytes: Source PDF bytes

    Returns:
        One-page PDF bytes
    """
    reader = PdfReader(io.BytesIO(pdf_bytes))
    if not reader.pages:
        raise FormatError("Document has no pages to preview")

    writer = PdfWriter()
    writer.add_page(reader.pages[0])
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def first_page_png(pdf_bytes: bytes, dpi: Optional[int] = None) -> bytes:
    """Render the first page of a PDF to PNG"""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        if doc.page_count == 0:
            raise FormatError("Document has no pages to preview")
        pixmap = doc[0].get_pixmap(dpi=dpi or settings.preview_dpi)
        return pixmap.tobytes("png")
    finally:
        doc.close()
