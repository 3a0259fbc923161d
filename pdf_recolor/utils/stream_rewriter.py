"""
Stream Rewriter

Rebuilds a page content stream with every device color instruction
transformed. Bytes outside the rewritten instructions are copied verbatim;
in remap mode a background fill block is prepended.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Union

from ..core.color_transform import check_channels, format_channel, format_pdf_number, transform_channels
from ..models.schemas import InvertMode, RemapMode
from .color_operators import ColorInstruction, iter_color_instructions
from .content_scanner import scan_content

logger = logging.getLogger(__name__)


class PageBox(NamedTuple):
    """Lower-left corner and size of a page, in default user space units."""

    x0: float
    y0: float
    width: float
    height: float


class StreamRewriter:
    """Rewrites color instructions of content streams under one transform mode"""

    def __init__(self, mode: Union[InvertMode, RemapMode]):
        self.mode = mode
        self.stats: Dict[str, int] = {
            'streams_rewritten': 0,
            'color_instructions': 0,
            'gray': 0,
            'rgb': 0,
            'cmyk': 0,
        }

    def rewrite(self, content: bytes, page_box: Optional[PageBox] = None) -> bytes:
        """
        Rewrite one logical content stream

        Args:
            content: Raw (decoded) content stream bytes
            page_box: Page geometry; required in remap mode to size the background

        Returns:
            The new content stream bytes

        Raises:
            MalformedStream: If the stream cannot be tokenized or an arity check fails
            OutOfRangeColor: If a transformed channel falls outside [0, 1]
        """
        text = content.decode('latin-1')
        pieces: List[str] = []

        if isinstance(self.mode, RemapMode):
            if page_box is None:
                raise ValueError("Remap mode needs the page box to paint the background")
            pieces.append(self.background_block(page_box))

        cursor = 0
        rewritten = 0

        for instruction in iter_color_instructions(scan_content(text)):
            pieces.append(text[cursor:instruction.start])
            # Comments inside the instruction move in front of it
            for comment in instruction.comments:
                pieces.append(comment.text + '\n')
            pieces.append(self._render(instruction))
            cursor = instruction.end
            rewritten += 1

        pieces.append(text[cursor:])

        self.stats['streams_rewritten'] += 1
        self.stats['color_instructions'] += rewritten
        logger.debug("Rewrote %d color instruction(s) in %d byte stream", rewritten, len(content))
        return ''.join(pieces).encode('latin-1')

    def background_block(self, page_box: PageBox) -> str:
        """Fill the page with the background color, then reset the fill to black."""
        background = self.mode.background_color
        check_channels([background.r, background.g, background.b])
        return (
            f"{format_channel(background.r)} {format_channel(background.g)} {format_channel(background.b)} rg\n"
            f"{format_pdf_number(page_box.x0)} {format_pdf_number(page_box.y0)} "
            f"{format_pdf_number(page_box.width)} {format_pdf_number(page_box.height)} re\n"
            "f\n"
            "0.000 0.000 0.000 rg\n"
        )

    def _render(self, instruction: ColorInstruction) -> str:
        channels = transform_channels(instruction.model, instruction.channels, self.mode)
        self.stats[instruction.model.value] += 1
        values = ' '.join(format_channel(channel) for channel in channels)
        return f"{values} {instruction.operator.keyword}"
