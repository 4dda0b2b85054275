import pytest

from services.req_ir import NO_PREREQS, ReqAnd, ReqOr
from utils.req_parser import (
    PrereqParseError,
    format_req,
    parse_code_list,
    parse_req_text,
    parse_req_value,
)


def test_parse_text_and_of_or():
    expr = parse_req_text("MTH 2301 / MTH 2320 + PHY 1401")
    assert expr == ReqAnd((ReqOr(("MTH 2301", "MTH 2320")), ReqOr(("PHY 1401",))))
    assert expr.codes() == {"MTH2301", "MTH2320", "PHY1401"}


@pytest.mark.parametrize("text", [None, "", "  ", "none", "None", "-", "n/a"])
def test_parse_text_without_prerequisites(text):
    assert parse_req_text(text) == NO_PREREQS


def test_parse_text_strips_parentheses_and_duplicates():
    expr = parse_req_text("(CSC 1401 / csc 1401) + (MTH 1303)")
    assert expr.to_lists() == [["CSC 1401"], ["MTH 1303"]]


def test_parse_text_rejects_empty_group():
    with pytest.raises(PrereqParseError):
        parse_req_text("CSC 1401 + /")


def test_parse_value_shapes():
    assert parse_req_value(["CSC 1401", "CSC 2302"]).to_lists() == [["CSC 1401"], ["CSC 2302"]]
    assert parse_req_value([["MTH 2301", "MTH 2320"]]).to_lists() == [["MTH 2301", "MTH 2320"]]
    assert parse_req_value([{"type": "course", "value": "CSC1401"}]).to_lists() == [["CSC1401"]]
    assert parse_req_value(float("nan")) == NO_PREREQS
    assert parse_req_value([]) == NO_PREREQS


def test_parse_value_rejects_unknown_shapes():
    with pytest.raises(PrereqParseError):
        parse_req_value(42)
    with pytest.raises(PrereqParseError):
        parse_req_value([{"type": "standing", "value": "junior"}])


def test_code_lists():
    assert parse_code_list("CSC 1401, MTH 1303") == ("CSC 1401", "MTH 1303")
    assert parse_code_list(["ENG 1301"]) == ("ENG 1301",)
    assert parse_code_list(None) == ()


def test_format_req_matches_parser_syntax():
    text = "MTH 2301 / MTH 2320 + PHY 1401"
    assert format_req(parse_req_text(text)) == text
    assert format_req(NO_PREREQS) == ""
