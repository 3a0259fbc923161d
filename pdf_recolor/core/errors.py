"""Error taxonomy for the recolor pipeline.

All errors abort the whole run; callers never receive a partially
recolored document.
"""

from typing import Optional


class RecolorError(Exception):
    """Base class for every failure raised by the recolor core."""

    def __init__(self, message: str, page_number: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.page_number = page_number

    def __str__(self) -> str:
        if self.page_number is not None:
            return f"page {self.page_number}: {self.message}"
        return self.message


class FormatError(RecolorError):
    """The PDF container could not be loaded, decoded or saved."""


class MalformedStream(RecolorError):
    """A page content stream could not be tokenized or has an arity mismatch."""

    def __init__(self, message: str, offset: Optional[int] = None, page_number: Optional[int] = None):
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message, page_number=page_number)
        self.offset = offset


class OutOfRangeColor(RecolorError):
    """A color channel fell outside [0, 1]."""
