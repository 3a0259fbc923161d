import pytest

from pdf_recolor.core.errors import MalformedStream
from pdf_recolor.utils.content_scanner import TokenKind, scan_content


def _kinds_and_text(data):
    return [(token.kind, token.text) for token in scan_content(data)]


def test_numbers_and_operators_are_split_on_whitespace():
    assert _kinds_and_text(b"0.2 g") == [
        (TokenKind.NUMBER, "0.2"),
        (TokenKind.OPERATOR, "g"),
    ]


@pytest.mark.parametrize("number", ["1", "+1", "-2", "3.", ".25", "-.5", "0.000", "612"])
def test_numeric_literal_forms(number):
    tokens = list(scan_content(f"{number} w"))
    assert tokens[0].kind is TokenKind.NUMBER
    assert tokens[0].text == number
    assert tokens[0].value == float(number)


def test_operators_sharing_letters_stay_distinct():
    operators = [t.text for t in scan_content(b"0 0 0 rg 1 g 0 0 0 RG 0 G 0 0 0 1 k 0 0 0 0 K") if t.kind is TokenKind.OPERATOR]
    assert operators == ["rg", "g", "RG", "G", "k", "K"]


def test_operators_with_star_and_quotes():
    operators = [t.text for t in scan_content(b"f* B* T* (a) ' 1 2 (b) \" d0") if t.kind is TokenKind.OPERATOR]
    assert "f*" in operators and "B*" in operators and "T*" in operators
    assert "'" in operators and '"' in operators and "d0" in operators


def test_literal_string_hides_color_like_text():
    tokens = _kinds_and_text(rb"BT (0.5 g \) (nested) 1 rg) Tj ET")
    assert tokens == [
        (TokenKind.OPERATOR, "BT"),
        (TokenKind.STRING, r"(0.5 g \) (nested) 1 rg)"),
        (TokenKind.OPERATOR, "Tj"),
        (TokenKind.OPERATOR, "ET"),
    ]


def test_comment_runs_to_end_of_line():
    tokens = _kinds_and_text(b"% 1 g in a comment\r\n0 g")
    assert tokens == [
        (TokenKind.COMMENT, "% 1 g in a comment"),
        (TokenKind.NUMBER, "0"),
        (TokenKind.OPERATOR, "g"),
    ]


def test_array_contents_are_nested():
    tokens = list(scan_content(b"[3 2] 0 d"))
    assert [(t.kind, t.depth) for t in tokens] == [
        (TokenKind.ARRAY_START, 0),
        (TokenKind.NUMBER, 1),
        (TokenKind.NUMBER, 1),
        (TokenKind.ARRAY_END, 0),
        (TokenKind.NUMBER, 0),
        (TokenKind.OPERATOR, 0),
    ]


def test_dictionary_hex_string_and_names():
    tokens = _kinds_and_text(b"/OC <</MCID 0 /Alt <48656C6C6F>>> BDC")
    assert tokens == [
        (TokenKind.NAME, "/OC"),
        (TokenKind.DICT_START, "<<"),
        (TokenKind.NAME, "/MCID"),
        (TokenKind.NUMBER, "0"),
        (TokenKind.NAME, "/Alt"),
        (TokenKind.HEX_STRING, "<48656C6C6F>"),
        (TokenKind.DICT_END, ">>"),
        (TokenKind.OPERATOR, "BDC"),
    ]


def test_true_false_null_are_operands():
    kinds = [t.kind for t in scan_content(b"true false null")]
    assert kinds == [TokenKind.KEYWORD] * 3


def test_inline_image_data_is_one_opaque_token():
    data = b"q BI /W 2 /H 1 /CS /G /BPC 8 ID \x00g) EI Q"
    tokens = list(scan_content(data))
    inline = [t for t in tokens if t.kind is TokenKind.INLINE_DATA]
    assert len(inline) == 1
    assert inline[0].text == "\x00g)"
    assert [t.text for t in tokens[-2:]] == ["EI", "Q"]


def test_spans_reproduce_source():
    text = "q 1 0 0 1 72 720 cm /F1 12 Tf (Hi) Tj Q"
    for token in scan_content(text):
        assert text[token.start:token.end] == token.text


def test_scanner_is_lazy():
    tokens = scan_content(b"1 g )")
    first = next(tokens)
    assert first.text == "1"
    with pytest.raises(MalformedStream) as excinfo:
        list(tokens)
    assert excinfo.value.offset == 4


@pytest.mark.parametrize("data", [
    b"1.2.3 g",
    b"12abc w",
    b"(unterminated",
    b"[1 2",
    b"1 2 ]",
    b"<zz> Tj",
    b"<4142",
    b"{ 1 }",
    b"<< /A [1 >> BDC",
    b"[1 g]",
    b"BI /W 1 ID \x01\x02",
])
def test_unclassifiable_input_raises(data):
    with pytest.raises(MalformedStream):
        list(scan_content(data))
