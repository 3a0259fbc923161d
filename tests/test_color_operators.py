import pytest

from pdf_recolor.core.errors import MalformedStream
from pdf_recolor.utils.color_operators import COLOR_OPERATORS, ColorModel, PaintTarget, classify, iter_color_instructions
from pdf_recolor.utils.content_scanner import scan_content


def _classify(data: str):
    tokens = list(scan_content(data))
    return classify(tokens[-1], [t for t in tokens[:-1] if t.depth == 0 and t.is_operand])


@pytest.mark.parametrize("data, model, target", [
    ("0.5 g", ColorModel.GRAY, PaintTarget.FILL),
    ("0.5 G", ColorModel.GRAY, PaintTarget.STROKE),
    ("0.1 0.2 0.3 rg", ColorModel.RGB, PaintTarget.FILL),
    ("0.1 0.2 0.3 RG", ColorModel.RGB, PaintTarget.STROKE),
    ("0 0 0 1 k", ColorModel.CMYK, PaintTarget.FILL),
    ("0 0 0 1 K", ColorModel.CMYK, PaintTarget.STROKE),
])
def test_six_device_color_operators(data, model, target):
    instruction = _classify(data)
    assert instruction is not None
    assert instruction.model is model
    assert instruction.operator.target is target
    assert len(instruction.channels) == model.arity
    assert data[instruction.start:instruction.end] == data


def test_exactly_six_operators_are_recognized():
    assert sorted(COLOR_OPERATORS) == ["G", "K", "RG", "g", "k", "rg"]


@pytest.mark.parametrize("data", [
    "1 0 0 1 72 720 cm",
    "0.1 0.2 0.3 sc",
    "0.1 0.2 0.3 scn",
    "/DeviceRGB cs",
    "10 10 m",
])
def test_other_operators_are_not_color_instructions(data):
    assert _classify(data) is None


@pytest.mark.parametrize("data", [
    "0.1 0.2 rg",
    "0.1 0.2 0.3 0.4 RG",
    "g",
    "0 0 0 k",
    "/Gray g",
    "[0.5] g",
    "(0.5) G",
])
def test_wrong_operands_before_color_operator_raise(data):
    with pytest.raises(MalformedStream):
        _classify(data)


def test_iter_color_instructions_walks_whole_stream():
    data = "q 0.5 g [0.1 0.2 0.3] 0 d (1 rg) Tj 0.1 % note\n0.2 0.3 RG /P0 scn 0 0 0 1 k Q"

    instructions = list(iter_color_instructions(scan_content(data)))

    assert [i.operator.keyword for i in instructions] == ["g", "RG", "k"]
    assert [i.channels for i in instructions] == [[0.5], [0.1, 0.2, 0.3], [0.0, 0.0, 0.0, 1.0]]
    assert [c.text for c in instructions[1].comments] == ["% note"]
    assert instructions[0].comments == ()
