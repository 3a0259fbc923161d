"""
Color Operator Classifier

Recognizes the six device color operators of the PDF content stream
language and checks that they receive exactly the operands their color
model requires.

    g / G    DeviceGray  (1 operand)   fill / stroke
    rg / RG  DeviceRGB   (3 operands)  fill / stroke
    k / K    DeviceCMYK  (4 operands)  fill / stroke

Other color operators (cs, CS, sc, SC, scn, SCN) select or use named color
spaces and are passed through unchanged.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.errors import MalformedStream
from .content_scanner import Token, TokenKind


class ColorModel(str, Enum):
    GRAY = "gray"
    RGB = "rgb"
    CMYK = "cmyk"

    @property
    def arity(self) -> int:
        return {"gray": 1, "rgb": 3, "cmyk": 4}[self.value]


class PaintTarget(str, Enum):
    FILL = "fill"
    STROKE = "stroke"


@dataclass(frozen=True)
class ColorOperator:
    keyword: str
    model: ColorModel
    target: PaintTarget


COLOR_OPERATORS: Dict[str, ColorOperator] = {
    op.keyword: op
    for op in (
        ColorOperator("g", ColorModel.GRAY, PaintTarget.FILL),
        ColorOperator("G", ColorModel.GRAY, PaintTarget.STROKE),
        ColorOperator("rg", ColorModel.RGB, PaintTarget.FILL),
        ColorOperator("RG", ColorModel.RGB, PaintTarget.STROKE),
        ColorOperator("k", ColorModel.CMYK, PaintTarget.FILL),
        ColorOperator("K", ColorModel.CMYK, PaintTarget.STROKE),
    )
}


@dataclass(frozen=True)
class ColorInstruction:
    """Numeric operands plus the color operator that consumes them."""

    operator: ColorOperator
    operands: List[Token]
    operator_token: Token
    # comments found between the first operand and the operator
    comments: Tuple[Token, ...] = ()

    @property
    def model(self) -> ColorModel:
        return self.operator.model

    @property
    def channels(self) -> List[float]:
        return [token.value for token in self.operands]

    @property
    def start(self) -> int:
        return self.operands[0].start

    @property
    def end(self) -> int:
        return self.operator_token.end


def classify(operator_token: Token, operands: Sequence[Token]) -> Optional[ColorInstruction]:
    """
    Decide whether an operator and its preceding operands form a color instruction.

    Args:
        operator_token: The operator keyword token
        operands: Depth-0 operand tokens seen since the previous operator

    Returns:
        The ColorInstruction, or None when the operator is not a device color operator

    Raises:
        MalformedStream: If a color operator has the wrong number or type of operands
    """
    operator = COLOR_OPERATORS.get(operator_token.text)
    if operator is None:
        return None

    arity = operator.model.arity
    if len(operands) != arity:
        raise MalformedStream(
            f"'{operator.keyword}' expects {arity} operand(s), found {len(operands)}",
            offset=operator_token.start,
        )
    for operand in operands:
        if operand.kind is not TokenKind.NUMBER:
            raise MalformedStream(
                f"'{operator.keyword}' operand {operand.text!r} is not a number",
                offset=operand.start,
            )

    return ColorInstruction(operator=operator, operands=list(operands), operator_token=operator_token)


def iter_color_instructions(tokens: Iterable[Token]) -> Iterator[ColorInstruction]:
    """Yield every device color instruction of a token stream, in order."""
    operands: List[Token] = []
    comments: List[Token] = []
    for token in tokens:
        if token.kind is TokenKind.OPERATOR:
            instruction = classify(token, operands)
            if instruction is not None:
                inner = tuple(comment for comment in comments if comment.start > instruction.start)
                yield replace(instruction, comments=inner) if inner else instruction
            operands = []
            comments = []
        elif token.kind is TokenKind.COMMENT:
            comments.append(token)
        elif token.depth == 0 and token.is_operand:
            operands.append(token)
