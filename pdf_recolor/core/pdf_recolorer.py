import logging
from typing import Callable, Dict, Optional, Union

from ..models.schemas import InvertMode, RecolorStats, RemapMode
from ..utils.stream_rewriter import StreamRewriter
from .errors import RecolorError
from .pdf_document import RecolorPage, load_document, save_document

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class PDFRecolorer:
    """Main recolor orchestrator: runs every page through the stream rewriter"""

    def __init__(self, mode: Union[InvertMode, RemapMode]):
        self.mode = mode
        self.rewriter = StreamRewriter(mode)
        self.stats = RecolorStats()

    def transform(self, source: bytes, on_progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Recolor a PDF

        Args:
            source: Input PDF bytes
            on_progress: Called with (i + 1) / page_count after each page

        Returns:
            The recolored PDF bytes

        Raises:
            FormatError: If the PDF cannot be loaded or saved
            MalformedStream: If a page content stream cannot be parsed
            OutOfRangeColor: If a transformed color leaves [0, 1]
        """
        self.rewriter = StreamRewriter(self.mode)
        document = load_document(source)
        pages = document.pages()
        total = len(pages)
        self.stats = RecolorStats(pages_total=total)
        logger.info("Recoloring %d page(s) in %s mode", total, self.mode.kind)

        for index, page in enumerate(pages):
            try:
                self._recolor_page(page)
            except RecolorError as e:
                if e.page_number is None:
                    e.page_number = index + 1
                logger.error("Recolor aborted: %s", e)
                raise
            if on_progress is not None:
                on_progress((index + 1) / total)

        self.stats.color_instructions = self.rewriter.stats['color_instructions']
        result = save_document(document)
        logger.info(
            "Recolored %d page(s), skipped %d, rewrote %d color instruction(s)",
            self.stats.pages_rewritten,
            self.stats.pages_skipped,
            self.stats.color_instructions,
        )
        return result

    def _recolor_page(self, page: RecolorPage) -> None:
        content = page.get_content_bytes()
        if content is None:
            # Blank page, nothing to draw on
            logger.debug("Page %d has no content stream, skipping", page.index + 1)
            self.stats.pages_skipped += 1
            return

        width, height = page.size()
        logger.debug("Rewriting page %d (%gx%g pt)", page.index + 1, width, height)
        page.set_content_bytes(self.rewriter.rewrite(content, page.box()))
        self.stats.pages_rewritten += 1

    def processing_details(self) -> Dict[str, object]:
        details: Dict[str, object] = {'mode': self.mode.kind}
        details.update(self.stats.model_dump())
        details.update({
            'gray_instructions': self.rewriter.stats['gray'],
            'rgb_instructions': self.rewriter.stats['rgb'],
            'cmyk_instructions': self.rewriter.stats['cmyk'],
        })
        if isinstance(self.mode, RemapMode):
            details['content_color'] = self.mode.content_color.to_hex()
            details['background_color'] = self.mode.background_color.to_hex()
        return details


def transform(
    source_bytes: bytes,
    mode: Union[InvertMode, RemapMode],
    on_progress: Optional[ProgressCallback] = None,
) -> bytes:
    """Recolor source_bytes under mode; see PDFRecolorer.transform."""
    return PDFRecolorer(mode).transform(source_bytes, on_progress)
