"""Plan snapshot contract: {semester name -> {"courses": [codes], "credits": int}}.

Imports are re-validated through the same rules as manual edits unless the
caller explicitly passes `trusted=True`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from services.ledger import PlacementLedger, UnknownSemesterError
from services.req_ir import Req
from services.validation import can_place, place_trusted
from utils.course_catalog import Catalog, UnknownCourseError
from utils.semesters import (
    TERMS,
    InvalidTermError,
    SemesterSlot,
    build_semester_sequence,
    parse_semester_name,
)

logger = logging.getLogger(__name__)

UNKNOWN_COURSE = "unknown-course"


class SnapshotFormatError(ValueError):
    pass


@dataclass
class ImportReport:
    ledger: PlacementLedger
    trusted: bool
    accepted: List[Dict[str, str]] = field(default_factory=list)
    rejected: List[Dict[str, str]] = field(default_factory=list)
    credit_mismatches: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "trusted": self.trusted,
            "accepted": list(self.accepted),
            "rejected": list(self.rejected),
            "credit_mismatches": list(self.credit_mismatches),
        }


def export_snapshot(ledger: PlacementLedger) -> Dict[str, dict]:
    return ledger.to_snapshot()


def _check_shape(snapshot: Any) -> Dict[str, dict]:
    if not isinstance(snapshot, Mapping):
        raise SnapshotFormatError("Snapshot must be an object keyed by semester name")
    for name, entry in snapshot.items():
        if not isinstance(entry, Mapping) or not isinstance(entry.get("courses", []), list):
            raise SnapshotFormatError(f"Semester {name!r} must hold a 'courses' list")
    return dict(snapshot)


def _anchor(term: str, display_year: int) -> int:
    # display year back to the academic-year anchor
    return display_year if term == "Fall" else display_year - 1


def slots_for_snapshot(snapshot: Mapping[str, Any]) -> List[SemesterSlot]:
    """Smallest contiguous sequence covering every semester named in `snapshot`."""
    snapshot = _check_shape(snapshot)
    if not snapshot:
        return []

    positions = []
    for name in snapshot:
        term, year = parse_semester_name(name)
        positions.append((_anchor(term, year), TERMS.index(term), term))

    first = min(positions)
    last = max(positions)
    return build_semester_sequence(first[2], first[0], last[2], last[0])


def _by_slot_name(snapshot: Mapping[str, Any], ledger: PlacementLedger) -> Dict[str, Any]:
    # "fall 2024" and "Fall 2024" name the same semester
    entries: Dict[str, Any] = {}
    for name, entry in snapshot.items():
        try:
            term, year = parse_semester_name(name)
        except InvalidTermError:
            raise UnknownSemesterError(name) from None
        canonical = f"{term} {year}"
        if not ledger.has_semester(canonical):
            raise UnknownSemesterError(name)
        if canonical in entries:
            raise SnapshotFormatError(f"Semester {canonical!r} appears more than once")
        entries[canonical] = entry
    return entries


def import_snapshot(
    snapshot: Mapping[str, Any],
    catalog: Catalog,
    *,
    slots: Optional[Sequence[SemesterSlot]] = None,
    trusted: bool = False,
    strict: bool = False,
    overrides: Mapping[str, Req] | None = None,
) -> ImportReport:
    """
    Rebuild a ledger from a snapshot.

    Semesters are replayed in chronological order so prerequisite checks see
    every earlier placement. Entries that break a rule are rejected and
    listed in the report; the rest of the plan is kept.

    - trusted=True skips the credit-cap and prerequisite rules (uniqueness
      is always enforced)
    - strict=True raises UnknownCourseError for codes missing from the catalog
      instead of rejecting them
    Semester names are matched case-insensitively on the term ("fall 2024"
    is Fall 2024); names outside `slots` raise UnknownSemesterError.
    """
    snapshot = _check_shape(snapshot)
    if slots is None:
        slots = slots_for_snapshot(snapshot)

    ledger = PlacementLedger(slots)
    report = ImportReport(ledger=ledger, trusted=trusted)

    entries = _by_slot_name(snapshot, ledger)

    if trusted:
        logger.warning("Importing snapshot as trusted: prerequisite and credit checks bypassed")

    for slot in ledger.slots:
        entry = entries.get(slot.name)
        if entry is None:
            continue

        for raw in entry.get("courses") or []:
            course = catalog.get(raw)
            if course is None:
                if strict:
                    raise UnknownCourseError(f"Course {raw!r} is not in the catalog")
                report.rejected.append({"course": str(raw), "semester": slot.name, "reason": UNKNOWN_COURSE})
                continue

            if trusted:
                result = place_trusted(course, slot.name, ledger)
            else:
                result = can_place(course, slot.name, ledger, overrides)

            if result.ok:
                report.accepted.append({"course": course.code, "semester": slot.name})
            else:
                report.rejected.append(
                    {"course": course.code, "semester": slot.name, "reason": result.reason.value}
                )

        stated = entry.get("credits")
        if stated is not None and str(stated).strip().lstrip("-").isdigit():
            if int(stated) != ledger.credits_in(slot.name):
                report.credit_mismatches.append(
                    f"{slot.name}: snapshot says {int(stated)}, placed courses add up to {ledger.credits_in(slot.name)}"
                )

    if report.rejected:
        logger.info("Snapshot import rejected %d course(s)", len(report.rejected))
    return report


def plan_progress(ledger: PlacementLedger, total_required: int) -> Dict[str, Any]:
    # degree summary: totals plus credits per academic year
    by_year: Dict[str, int] = {}
    for slot in ledger:
        by_year[slot.academic_year] = by_year.get(slot.academic_year, 0) + ledger.credits_in(slot.name)

    completed = ledger.total_credits
    return {
        "total_credits": completed,
        "credits_required": int(total_required),
        "remaining_credits": max(0, int(total_required) - completed),
        "credits_by_academic_year": by_year,
    }
