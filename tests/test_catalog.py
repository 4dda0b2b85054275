import json
import logging

import pandas as pd
import pytest

from services.req_ir import ReqAnd, ReqOr, req_all
from utils.course_catalog import (
    CatalogIntegrityError,
    UnknownCourseError,
    build_catalog,
    course_from_record,
    load_catalog,
)


CSV = """code,name,credits,prerequisites,category,required
CSC 1401,Introduction to Programming,3,,,
CSC 2302,Data Structures,3,CSC 1401,,
,Nameless,3,,,
CSC 9001,Bad credits,abc,,,
CSC 9002,Negative credits,-3,,,
CSC 9003,Fractional credits,2.5,,,
CSC 9004,Broken prerequisites,3,CSC 1401 + /,,
ENG 1301,English Composition I,3,,English,yes
"""


def test_load_catalog_skips_malformed_records(tmp_path, caplog):
    (tmp_path / "courses.csv").write_text(CSV, encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        catalog = load_catalog(str(tmp_path))

    assert [c.code for c in catalog] == ["CSC 1401", "CSC 2302", "ENG 1301"]
    assert "Skipped 5 malformed record(s)" in caplog.text

    eng = catalog.get("eng-1301")
    assert eng.category == "English"
    assert eng.required is True
    assert catalog.get("CSC 2302").prerequisites.to_lists() == [["CSC 1401"]]


def test_load_catalog_reads_json_and_xlsx_in_stable_order(tmp_path):
    (tmp_path / "a.csv").write_text("code,name,credits\nMTH 1303,Calculus I,3\n", encoding="utf-8")
    pd.DataFrame([{"Code": "PHY 1401", "Name": "Physics I", "Credits": "3"}]).to_excel(
        tmp_path / "b.xlsx", index=False
    )
    (tmp_path / "c.json").write_text(
        json.dumps({"courses": [
            {"code": "CSC 1401", "name": "Introduction to Programming", "credits": 3},
            {"code": "MTH 1303", "name": "Duplicate", "credits": 4},
        ]}),
        encoding="utf-8",
    )
    # requirement files in sub-directories are not catalog data
    (tmp_path / "degrees").mkdir()
    (tmp_path / "degrees" / "cs.json").write_text(json.dumps({"areas": []}), encoding="utf-8")

    catalog = load_catalog(str(tmp_path))

    assert [c.code for c in catalog] == ["MTH 1303", "PHY 1401", "CSC 1401"]
    # first definition wins
    assert catalog.get("MTH 1303").credits == 3


def test_load_catalog_missing_directory(tmp_path):
    assert len(load_catalog(str(tmp_path / "missing"))) == 0


def test_course_from_record_accepts_list_prerequisites():
    course = course_from_record(
        {"code": "CSC 3309", "credits": 3, "prerequisites": [["CSC 2306", "CSC 2305"], "MTH 3301"]}
    )
    assert course.prerequisites.to_lists() == [["CSC 2306", "CSC 2305"], ["MTH 3301"]]
    assert course.name == "CSC 3309"


def test_lookup_is_spelling_insensitive(catalog):
    assert "csc-1401" in catalog
    assert catalog.require("csc1401").code == "CSC 1401"
    with pytest.raises(UnknownCourseError):
        catalog.require("CSC 0000")


def test_dangling_references_break_consistency():
    catalog = build_catalog(
        [
            {"code": "CSC 1401", "credits": 3},
            {"code": "CSC 2306", "credits": 3, "prerequisites": "CSC 1401 + CSC 2302"},
        ]
    )

    assert catalog.dangling_references() == [("CSC 2306", "CSC 2302")]
    with pytest.raises(CatalogIntegrityError):
        catalog.require_consistent()


def test_catalog_order_is_tie_breaker(catalog):
    assert catalog.position("CSC 1401") < catalog.position("CSC 2302")
    assert catalog.position("NOPE 1") == len(catalog)


def test_overrides_replace_prerequisites_in_consistency_check():
    catalog = build_catalog(
        [
            {"code": "CSC 1401", "credits": 3},
            {"code": "CSC 2306", "credits": 3, "prerequisites": "CSC 1401"},
        ]
    )
    overrides = {"CSC2306": ReqAnd((ReqOr(("CSC 1401", "CSC 9999")), ReqOr(("CSC 3000",))))}

    assert catalog.dangling_references(overrides) == [
        ("CSC 2306", "CSC 9999"),
        ("CSC 2306", "CSC 3000"),
    ]
    with pytest.raises(CatalogIntegrityError):
        catalog.require_consistent(overrides)

    # overrides for courses the catalog does not carry never apply
    catalog.require_consistent({"MTH9999": req_all("NOPE 1")})
