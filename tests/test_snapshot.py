import logging

import pytest

from services.ledger import PlacementLedger, UnknownSemesterError
from services.snapshot import (
    UNKNOWN_COURSE,
    SnapshotFormatError,
    export_snapshot,
    import_snapshot,
    plan_progress,
    slots_for_snapshot,
)
from services.validation import can_place
from utils.course_catalog import UnknownCourseError


def test_export_lists_every_semester_in_order(catalog, slots):
    ledger = PlacementLedger(slots)
    can_place(catalog.require("CSC 1401"), "Fall 2024", ledger)
    can_place(catalog.require("CSC 2302"), "Spring 2025", ledger)

    snapshot = export_snapshot(ledger)

    assert list(snapshot) == [s.name for s in slots]
    assert snapshot["Fall 2024"] == {"courses": ["CSC 1401"], "credits": 3}
    assert snapshot["Summer 2025"] == {"courses": [], "credits": 0}


def test_import_replays_semesters_chronologically(catalog, slots):
    snapshot = {
        "Spring 2025": {"courses": ["CSC 2302"], "credits": 3},
        "Fall 2024": {"courses": ["csc 1401"], "credits": 3},
    }

    report = import_snapshot(snapshot, catalog, slots=slots)

    assert report.ok
    assert report.ledger.semester_of("CSC 2302") == "Spring 2025"
    assert report.credit_mismatches == []


def test_import_validates_by_default(catalog, slots):
    snapshot = {"Fall 2024": {"courses": ["CSC 1401", "CSC 2302", "NOPE 1000"]}}

    report = import_snapshot(snapshot, catalog, slots=slots)

    assert not report.ok
    assert report.accepted == [{"course": "CSC 1401", "semester": "Fall 2024"}]
    assert {r["reason"] for r in report.rejected} == {"prerequisites-unmet", UNKNOWN_COURSE}
    assert report.ledger.codes_in("Fall 2024") == ["CSC 1401"]


def test_trusted_import_skips_rule_checks(catalog, slots, caplog):
    snapshot = {
        "Fall 2024": {"courses": ["CSC 2306", "BIG 5001", "BIG 5002", "BIG 5003", "BIG 5004"]},
        "Spring 2025": {"courses": ["CSC 2306"]},
    }

    with caplog.at_level(logging.WARNING):
        report = import_snapshot(snapshot, catalog, slots=slots, trusted=True)

    assert "trusted" in caplog.text
    assert report.trusted
    assert report.ledger.credits_in("Fall 2024") == 26
    # uniqueness still holds
    assert report.rejected == [{"course": "CSC 2306", "semester": "Spring 2025", "reason": "duplicate-elsewhere"}]
    assert report.ledger.check_invariants() == []


def test_strict_import_raises_for_unknown_courses(catalog, slots):
    with pytest.raises(UnknownCourseError):
        import_snapshot({"Fall 2024": {"courses": ["NOPE 1000"]}}, catalog, slots=slots, strict=True)


def test_semester_outside_plan_raises(catalog, slots):
    with pytest.raises(UnknownSemesterError):
        import_snapshot({"Fall 2030": {"courses": []}}, catalog, slots=slots)


def test_semester_names_are_matched_on_canonical_term(catalog, slots):
    report = import_snapshot({"fall 2024": {"courses": ["CSC 1401"]}}, catalog)
    assert [s.name for s in report.ledger.slots] == ["Fall 2024"]
    assert report.accepted == [{"course": "CSC 1401", "semester": "Fall 2024"}]

    report = import_snapshot({"SPRING 2025": {"courses": ["CSC 2302"]}}, catalog, slots=slots, trusted=True)
    assert report.ledger.codes_in("Spring 2025") == ["CSC 2302"]

    with pytest.raises(UnknownSemesterError):
        import_snapshot({"fall 2030": {"courses": []}}, catalog, slots=slots)
    with pytest.raises(UnknownSemesterError):
        import_snapshot({"Autumn 2024": {"courses": []}}, catalog, slots=slots)
    with pytest.raises(SnapshotFormatError):
        import_snapshot({"fall 2024": {"courses": []}, "Fall 2024": {"courses": []}}, catalog, slots=slots)


def test_malformed_snapshots(catalog):
    with pytest.raises(SnapshotFormatError):
        import_snapshot(["Fall 2024"], catalog)
    with pytest.raises(SnapshotFormatError):
        import_snapshot({"Fall 2024": {"courses": "CSC 1401"}}, catalog)


def test_stated_credits_are_checked(catalog, slots):
    report = import_snapshot({"Fall 2024": {"courses": ["CSC 1401"], "credits": 7}}, catalog, slots=slots)
    assert report.ok
    assert report.credit_mismatches == ["Fall 2024: snapshot says 7, placed courses add up to 3"]


def test_slots_inferred_from_snapshot():
    slots = slots_for_snapshot({"Fall 2025": {"courses": []}, "Spring 2025": {"courses": []}})
    assert [s.name for s in slots] == ["Spring 2025", "Summer 2025", "Fall 2025"]
    assert slots_for_snapshot({}) == []


def test_export_then_import_gives_the_same_plan(plan_catalog, areas, first_semester):
    from services.generator import GeneratorOptions, generate_plan

    plan = generate_plan(
        plan_catalog, areas, GeneratorOptions(include_summer=True, max_summer_terms=1),
        first_semester=first_semester,
    )
    report = import_snapshot(export_snapshot(plan.ledger), plan_catalog, slots=plan.ledger.slots)

    assert report.ok
    assert export_snapshot(report.ledger) == export_snapshot(plan.ledger)


def test_plan_progress(catalog, slots):
    ledger = PlacementLedger(slots)
    can_place(catalog.require("CSC 1401"), "Fall 2024", ledger)
    can_place(catalog.require("MTH 1303"), "Summer 2025", ledger)
    can_place(catalog.require("MTH 1304"), "Fall 2025", ledger)

    progress = plan_progress(ledger, 134)

    assert progress["total_credits"] == 9
    assert progress["remaining_credits"] == 125
    assert progress["credits_by_academic_year"] == {"2024/2025": 6, "2025/2026": 3}
    assert plan_progress(ledger, 5)["remaining_credits"] == 0
