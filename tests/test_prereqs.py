from services.prereqs import (
    PREREQ_OVERRIDES,
    effective_prereqs,
    evaluate,
    load_prereq_overrides,
    merged_overrides,
    prereqs_met,
)
from services.req_ir import NO_PREREQS, ReqAnd, ReqOr, req_all
from utils.codes import normalize_code, same_code


def test_normalize_code_ignores_spaces_dashes_and_case():
    assert normalize_code("csc 1401") == "CSC1401"
    assert normalize_code("CSC-1401") == "CSC1401"
    assert normalize_code(" Csc  1401 ") == "CSC1401"
    assert normalize_code(None) == ""
    assert same_code("mth-1303", "MTH 1303")


def test_empty_expressions_are_satisfied():
    assert evaluate(NO_PREREQS, [])
    assert evaluate(None, [])
    assert evaluate(ReqAnd((ReqOr(()),)), [])


def test_and_of_or_groups():
    expr = ReqAnd((ReqOr(("MTH 2301", "MTH 2320")), ReqOr(("PHY 1401",))))

    assert evaluate(expr, ["MTH 2320", "PHY 1401"])
    assert evaluate(expr, ["mth2301", "phy-1401"])
    assert not evaluate(expr, ["MTH 2301"])
    assert not evaluate(expr, ["PHY 1401"])


def test_override_replaces_catalog_prerequisites(catalog):
    course = catalog.get("CSC 2302")
    assert course.prerequisites.is_empty()

    assert effective_prereqs(course) == req_all("CSC 1401")
    assert not prereqs_met(course, [])
    assert prereqs_met(course, ["CSC 1401"])

    # an explicit empty table disables overrides
    assert prereqs_met(course, [], overrides={})


def test_load_prereq_overrides_skips_comments_and_bad_rows(tmp_path):
    path = tmp_path / "overrides.csv"
    path.write_text(
        "# corrections\n"
        "Code,Prerequisites\n"
        "\n"
        "CSC 3351,CSC 2302 + CSC 2306\n"
        "CSC 3309,MTH 3301 / \n"
        "CSC 4000,CSC 1401 + /\n",
        encoding="utf-8",
    )

    table = load_prereq_overrides(str(path))

    assert table["CSC3351"] == req_all("CSC 2302", "CSC 2306")
    assert table["CSC3309"] == ReqAnd((ReqOr(("MTH 3301",)),))
    assert "CSC4000" not in table


def test_load_prereq_overrides_missing_file(tmp_path):
    assert load_prereq_overrides(str(tmp_path / "nope.csv")) == {}


def test_merged_overrides_leaves_builtin_table_alone():
    before = dict(PREREQ_OVERRIDES)
    table = merged_overrides({"csc 2302": NO_PREREQS, "CSC 9000": req_all("CSC 1401")})

    assert table["CSC2302"] == NO_PREREQS
    assert table["CSC9000"] == req_all("CSC 1401")
    assert PREREQ_OVERRIDES == before
