"""
PDF container access for the recolor pipeline.

Wraps pypdf so the rest of the pipeline only deals with pages, their size
and their (logically concatenated) content stream bytes.
"""

import io
import logging
from typing import List, Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import ArrayObject, DecodedStreamObject, NameObject, NullObject

from ..utils.stream_rewriter import PageBox
from .config import settings
from .errors import FormatError

logger = logging.getLogger(__name__)


class RecolorPage:
    """One page of a RecolorDocument"""

    def __init__(self, writer: PdfWriter, page, index: int):
        self._writer = writer
        self._page = page
        self.index = index

    def size(self) -> Tuple[float, float]:
        box = self.box()
        return box.width, box.height

    def box(self) -> PageBox:
        mediabox = self._page.mediabox
        return PageBox(
            x0=float(mediabox.left),
            y0=float(mediabox.bottom),
            width=float(mediabox.width),
            height=float(mediabox.height),
        )

    def get_content_bytes(self) -> Optional[bytes]:
        """
        Return the page content streams joined into one byte sequence

        Returns:
            The decoded content, or None when the page has no content stream
        """
        if '/Contents' not in self._page:
            return None
        contents = self._resolve(self._page['/Contents'])
        if contents is None or isinstance(contents, NullObject):
            return None

        # Handle both single content stream and array of streams
        if isinstance(contents, ArrayObject):
            chunks = []
            for content_stream in contents:
                stream = self._resolve(content_stream)
                if stream is None or not hasattr(stream, 'get_data'):
                    continue
                chunks.append(self._decode(stream))
            if not chunks:
                return None
            return b'\n'.join(chunks)

        if not hasattr(contents, 'get_data'):
            raise FormatError(f"Page {self.index + 1} /Contents is not a stream", page_number=self.index + 1)
        return self._decode(contents)

    def set_content_bytes(self, data: bytes) -> None:
        """Replace every content stream of the page with a single new stream"""
        stream = DecodedStreamObject()
        stream.set_data(data)
        if settings.compress_content_streams:
            stream = stream.flate_encode()
        self._page[NameObject('/Contents')] = self._writer._add_object(stream)

    def _decode(self, stream) -> bytes:
        try:
            return stream.get_data()
        except (PyPdfError, NotImplementedError, ValueError) as e:
            raise FormatError(
                f"Could not decode content stream: {e}",
                page_number=self.index + 1,
            ) from e

    @staticmethod
    def _resolve(value):
        if hasattr(value, 'get_object'):
            return value.get_object()
        return value


class RecolorDocument:
    """A loaded PDF whose page content streams can be replaced"""

    def __init__(self, writer: PdfWriter):
        self._writer = writer
        self._pages = [RecolorPage(writer, page, index) for index, page in enumerate(writer.pages)]

    def pages(self) -> List[RecolorPage]:
        return list(self._pages)

    @property
    def writer(self) -> PdfWriter:
        return self._writer


def load_document(source: bytes) -> RecolorDocument:
    """
    Parse PDF bytes into a RecolorDocument

    Raises:
        FormatError: If the bytes are not a readable, unencrypted PDF
    """
    try:
        reader = PdfReader(io.BytesIO(source))
        if reader.is_encrypted:
            raise FormatError("Encrypted PDF documents are not supported")
        page_count = len(reader.pages)
        writer = PdfWriter(clone_from=reader)
    except FormatError:
        raise
    except (PyPdfError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise FormatError(f"Could not load PDF: {e}") from e

    logger.debug("Loaded PDF with %d page(s)", page_count)
    return RecolorDocument(writer)


def save_document(document: RecolorDocument) -> bytes:
    """Serialize the document, dropping content streams that are no longer referenced"""
    writer = document.writer
    try:
        writer.compress_identical_objects(remove_duplicates=False, remove_unreferenced=True)
        buffer = io.BytesIO()
        writer.write(buffer)
    except (PyPdfError, ValueError, KeyError, TypeError) as e:
        raise FormatError(f"Could not save PDF: {e}") from e
    return buffer.getvalue()
