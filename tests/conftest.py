import io
from typing import List, Optional, Sequence, Union

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import ArrayObject, DecodedStreamObject, NameObject

PageContent = Union[None, bytes, Sequence[bytes]]


def _make_stream(writer: PdfWriter, data: bytes):
    stream = DecodedStreamObject()
    stream.set_data(data)
    return writer._add_object(stream)


def _build_pdf(pages: Sequence[PageContent], width: float = 200, height: float = 100) -> bytes:
    """Build a PDF with one page per entry: None (no /Contents), bytes, or a list of stream chunks."""
    writer = PdfWriter()
    for content in pages:
        page = writer.add_blank_page(width=width, height=height)
        if content is None:
            continue
        if isinstance(content, bytes):
            page[NameObject("/Contents")] = _make_stream(writer, content)
        else:
            page[NameObject("/Contents")] = ArrayObject([_make_stream(writer, chunk) for chunk in content])

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def _read_contents(pdf_bytes: bytes) -> List[Optional[bytes]]:
    """Decoded content of every page; None for pages without /Contents."""
    reader = PdfReader(io.BytesIO(pdf_bytes))
    result = []
    for page in reader.pages:
        if "/Contents" not in page:
            result.append(None)
            continue
        contents = page["/Contents"].get_object()
        if isinstance(contents, ArrayObject):
            result.append(b"\n".join(item.get_object().get_data() for item in contents))
        else:
            result.append(contents.get_data())
    return result


@pytest.fixture
def build_pdf():
    return _build_pdf


@pytest.fixture
def read_contents():
    return _read_contents
