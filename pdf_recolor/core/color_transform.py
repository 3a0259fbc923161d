"""
Color Transform Engine

Pure functions mapping the channels of one color instruction to new channels
under the active transform mode. The color model of an instruction is never
changed, only its operand values.
"""

from typing import List, Sequence, Union

from ..models.schemas import InvertMode, RemapMode, RGBColor
from ..utils.color_operators import ColorModel
from .errors import OutOfRangeColor

# Rec. 601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def invert_channels(channels: Sequence[float]) -> List[float]:
    return [1.0 - channel for channel in channels]


def rgb_to_model(color: RGBColor, model: ColorModel) -> List[float]:
    """
    Express an RGB color with the channel count of the given color model.

    Gray uses the luma of the color; CMYK uses the complements of R, G and B
    with the key channel fixed at 0.
    """
    if model is ColorModel.RGB:
        return [color.r, color.g, color.b]
    if model is ColorModel.GRAY:
        wr, wg, wb = LUMA_WEIGHTS
        # weights sum to 1; rounding keeps white at exactly 1.0
        return [round(wr * color.r + wg * color.g + wb * color.b, 6)]
    return [1.0 - color.r, 1.0 - color.g, 1.0 - color.b, 0.0]


def check_channels(channels: Sequence[float]) -> None:
    for channel in channels:
        if not 0.0 <= channel <= 1.0:
            raise OutOfRangeColor(f"color channel {channel!r} is outside [0, 1]")


def transform_channels(
    model: ColorModel,
    channels: Sequence[float],
    mode: Union[InvertMode, RemapMode],
) -> List[float]:
    """
    Map one instruction's channels under the transform mode.

    Args:
        model: Color model of the instruction
        channels: Original channel values, one per operand
        mode: InvertMode or RemapMode

    Returns:
        New channel values, same count as the input

    Raises:
        OutOfRangeColor: If any resulting channel lies outside [0, 1]
    """
    if len(channels) != model.arity:
        raise ValueError(f"{model.value} color needs {model.arity} channel(s), got {len(channels)}")

    if isinstance(mode, InvertMode):
        result = invert_channels(channels)
    elif isinstance(mode, RemapMode):
        result = rgb_to_model(mode.content_color, model)
    else:
        raise TypeError(f"Unsupported transform mode: {mode!r}")

    check_channels(result)
    return result


def format_channel(value: float) -> str:
    """Render a channel with fixed three-decimal precision."""
    text = f"{value:.3f}"
    if text == "-0.000":
        return "0.000"
    return text


def format_pdf_number(value: float) -> str:
    """Render a coordinate compactly, without exponent notation."""
    if abs(value) < 1e-9:
        return "0"
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text
