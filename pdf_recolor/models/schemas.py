import re
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


HEX_COLOR_PATTERN = re.compile(r"#?([0-9a-fA-F]{6})")


class ModeName(str, Enum):
    invert = "invert"
    remap = "remap"


class RGBColor(BaseModel):
    """RGB color with channels in the PDF unit interval"""

    model_config = {"frozen": True}

    r: float = Field(..., ge=0.0, le=1.0, description="Red channel (0-1)")
    g: float = Field(..., ge=0.0, le=1.0, description="Green channel (0-1)")
    b: float = Field(..., ge=0.0, le=1.0, description="Blue channel (0-1)")

    @classmethod
    def from_hex(cls, value: str) -> "RGBColor":
        """Parse '#rrggbb' (leading '#' optional)."""
        match = HEX_COLOR_PATTERN.fullmatch(value.strip())
        if not match:
            raise ValueError(f"Invalid color {value!r}; expected #rrggbb")
        digits = match.group(1)
        r, g, b = (int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
        return cls(r=r, g=g, b=b)

    def to_hex(self) -> str:
        return "#" + "".join(f"{round(c * 255):02x}" for c in (self.r, self.g, self.b))


class InvertMode(BaseModel):
    """Replace every channel c with 1 - c"""

    model_config = {"frozen": True}

    kind: Literal["invert"] = "invert"


class RemapMode(BaseModel):
    """Paint every color instruction with content_color over a background_color page fill"""

    model_config = {"frozen": True}

    kind: Literal["remap"] = "remap"
    content_color: RGBColor = Field(..., description="Color given to every color instruction")
    background_color: RGBColor = Field(..., description="Full-page fill painted beneath the content")


TransformMode = Annotated[Union[InvertMode, RemapMode], Field(discriminator="kind")]


class JobState(str, Enum):
    idle = "idle"
    file_selected = "file_selected"
    processing = "processing"
    done = "done"
    failed = "failed"


class RecolorStats(BaseModel):
    """Counters collected while recoloring a document"""

    pages_total: int = Field(0, description="Number of pages in the document")
    pages_rewritten: int = Field(0, description="Pages whose content stream was rewritten")
    pages_skipped: int = Field(0, description="Pages without a content stream")
    color_instructions: int = Field(0, description="Color instructions rewritten across all pages")


class RecolorResponse(BaseModel):
    """Response from a synchronous recolor request"""

    success: bool = Field(..., description="Whether processing was successful")
    message: str = Field(..., description="Status message")
    filename: str = Field(..., description="Suggested filename of the recolored PDF")
    mode: ModeName = Field(..., description="Transform mode that was applied")
    processing_details: Optional[Dict[str, Any]] = Field(None, description="Details about the processing")
    processed_pdf_base64: Optional[str] = Field(
        None,
        description="Base64-encoded recolored PDF"
    )


class JobStatusResponse(BaseModel):
    """Snapshot of a background recolor job"""

    job_id: str = Field(..., description="Job identifier")
    filename: str = Field(..., description="Uploaded filename")
    state: JobState = Field(..., description="Current job state")
    mode: ModeName = Field(..., description="Transform mode for this job")
    progress: float = Field(0.0, ge=0.0, le=1.0, description="Fraction of pages processed")
    error: Optional[str] = Field(None, description="Failure reason when state is 'failed'")
    stats: Optional[RecolorStats] = Field(None, description="Counters once the job is done")
    created_at: str = Field(..., description="ISO-8601 creation time")
    updated_at: str = Field(..., description="ISO-8601 time of the last state change")


class ErrorResponse(BaseModel):
    """Error response model"""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    page_number: Optional[int] = Field(None, description="1-based page where the error occurred")
