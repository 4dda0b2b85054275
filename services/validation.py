# services/validation.py

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from services.ledger import PlacementLedger
from services.prereqs import effective_prereqs, evaluate
from services.req_ir import Req
from utils.course_catalog import Course


class PlacementReason(str, Enum):
    DUPLICATE_IN_SEMESTER = "duplicate-in-semester"
    DUPLICATE_ELSEWHERE = "duplicate-elsewhere"
    CREDIT_LIMIT_EXCEEDED = "credit-limit-exceeded"
    PREREQUISITES_UNMET = "prerequisites-unmet"
    REMOVAL_BLOCKED = "removal-blocked"
    NOT_IN_SEMESTER = "not-in-semester"


@dataclass(frozen=True)
class PlacementChange:
    # the diff a successful mutation applied to the ledger
    action: str        # "add" | "remove"
    course: str
    semester: str
    credits: int
    semester_credits: int  # semester total after the change


@dataclass(frozen=True)
class PlacementResult:
    ok: bool
    course: str
    semester: str
    reason: Optional[PlacementReason] = None
    blocking_course: Optional[str] = None
    change: Optional[PlacementChange] = None

    @property
    def message(self) -> str:
        if self.ok:
            verb = "added to" if self.change and self.change.action == "add" else "removed from"
            return f"{self.course} {verb} {self.semester}"
        if self.reason is PlacementReason.DUPLICATE_IN_SEMESTER:
            return f"{self.course} is already in {self.semester}"
        if self.reason is PlacementReason.DUPLICATE_ELSEWHERE:
            return f"{self.course} is already in another semester"
        if self.reason is PlacementReason.CREDIT_LIMIT_EXCEEDED:
            return f"Adding {self.course} would exceed the credit limit for {self.semester}"
        if self.reason is PlacementReason.PREREQUISITES_UNMET:
            return f"Prerequisites for {self.course} are not satisfied"
        if self.reason is PlacementReason.REMOVAL_BLOCKED:
            return f"Cannot remove {self.course} because it's a prerequisite for {self.blocking_course}"
        return f"{self.course} is not in {self.semester}"

    def to_dict(self) -> Dict:
        return {
            "ok": self.ok,
            "course": self.course,
            "semester": self.semester,
            "reason": self.reason.value if self.reason else None,
            "blocking_course": self.blocking_course,
            "message": self.message,
        }


def _fail(course: str, semester: str, reason: PlacementReason, blocking: str | None = None) -> PlacementResult:
    return PlacementResult(ok=False, course=course, semester=semester, reason=reason, blocking_course=blocking)


def check_place(
    course: Course,
    semester: str,
    ledger: PlacementLedger,
    overrides: Mapping[str, Req] | None = None,
) -> Optional[PlacementReason]:
    """First failing rule for placing `course` into `semester`, or None.

    Order matters: duplicates, then credit cap, then prerequisites.
    Raises UnknownSemesterError for a semester outside the plan.
    """
    slot = ledger.slot(semester)
    key = course.key

    where = ledger.semester_of(key)
    if where == semester:
        return PlacementReason.DUPLICATE_IN_SEMESTER
    if where is not None:
        return PlacementReason.DUPLICATE_ELSEWHERE

    # exactly at the cap is allowed
    if ledger.credits_in(semester) + int(course.credits) > slot.credit_cap:
        return PlacementReason.CREDIT_LIMIT_EXCEEDED

    # only strictly earlier semesters count; same-semester courses do not
    if not evaluate(effective_prereqs(course, overrides), ledger.codes_before(semester)):
        return PlacementReason.PREREQUISITES_UNMET

    return None


def can_place(
    course: Course,
    semester: str,
    ledger: PlacementLedger,
    overrides: Mapping[str, Req] | None = None,
) -> PlacementResult:
    reason = check_place(course, semester, ledger, overrides)
    if reason is not None:
        return _fail(course.code, semester, reason)

    ledger._append(semester, course)
    return PlacementResult(
        ok=True,
        course=course.code,
        semester=semester,
        change=PlacementChange(
            action="add",
            course=course.code,
            semester=semester,
            credits=int(course.credits),
            semester_credits=ledger.credits_in(semester),
        ),
    )


def find_dependent(
    course_code: str,
    semester: str,
    ledger: PlacementLedger,
    overrides: Mapping[str, Req] | None = None,
) -> Optional[str]:
    """First later course whose prerequisites hold only because of `course_code`."""
    origin = ledger.slot(semester).index
    for slot in ledger.slots:
        if slot.index <= origin:
            continue
        with_it = ledger.codes_before(slot.name)
        without_it = ledger.codes_before(slot.name, exclude=course_code)
        for dependent in ledger.courses_in(slot.name):
            expr = effective_prereqs(dependent, overrides)
            if evaluate(expr, with_it) and not evaluate(expr, without_it):
                return dependent.code
    return None


def can_remove(
    course_code: str,
    semester: str,
    ledger: PlacementLedger,
    overrides: Mapping[str, Req] | None = None,
) -> PlacementResult:
    course = ledger.find(semester, course_code)
    if course is None:
        return _fail(str(course_code), semester, PlacementReason.NOT_IN_SEMESTER)

    blocking = find_dependent(course.code, semester, ledger, overrides)
    if blocking is not None:
        return _fail(course.code, semester, PlacementReason.REMOVAL_BLOCKED, blocking)

    ledger._discard(semester, course)
    return PlacementResult(
        ok=True,
        course=course.code,
        semester=semester,
        change=PlacementChange(
            action="remove",
            course=course.code,
            semester=semester,
            credits=int(course.credits),
            semester_credits=ledger.credits_in(semester),
        ),
    )


def place_trusted(course: Course, semester: str, ledger: PlacementLedger) -> PlacementResult:
    """Restore a placement without the credit-cap and prerequisite rules.

    Only for data this service validated itself (rows read back from the
    database) or imports the caller explicitly marked as trusted. The
    uniqueness invariant is still enforced.
    """
    where = ledger.semester_of(course.key)
    if where == semester:
        return _fail(course.code, semester, PlacementReason.DUPLICATE_IN_SEMESTER)
    if where is not None:
        return _fail(course.code, semester, PlacementReason.DUPLICATE_ELSEWHERE)

    ledger.slot(semester)
    ledger._append(semester, course)
    return PlacementResult(
        ok=True,
        course=course.code,
        semester=semester,
        change=PlacementChange(
            action="add",
            course=course.code,
            semester=semester,
            credits=int(course.credits),
            semester_credits=ledger.credits_in(semester),
        ),
    )


def reset_ledger(ledger: PlacementLedger) -> None:
    # wholesale discard on plan reset / import
    ledger._clear()


# -----------------------------
# Pre-generation guardrails
# -----------------------------

def validate_generator_inputs(
    catalog,
    areas: Sequence,
    *,
    first_semester: Sequence[str] = (),
    total_credits: int | None = None,
    slots: Sequence = (),
    overrides: Mapping[str, Req] | None = None,
) -> List[str]:
    """
    Validate generator inputs BEFORE generating.
    Returns a list of readable hints. Empty list => nothing suspicious.
    Hints never stop generation; they explain residuals afterwards.
    """
    hints: List[str] = []

    if not areas:
        hints.append("No degree areas were supplied; only the first semester will be placed.")

    # Rule 1: empty areas, or areas whose courses cannot reach the minimum
    for area in areas:
        available = sum(int(c.credits) for c in (catalog.get(code) for code in area.courses) if c)
        if not area.courses:
            hints.append(f'Area "{area.name}" has no courses in the catalog.')
        elif available < area.min_credits:
            hints.append(
                f'Area "{area.name}" needs {area.min_credits} credits but its courses '
                f"only add up to {available}."
            )

    # Rule 2: the fixed first semester should not carry prerequisites
    for code in first_semester:
        course = catalog.get(code)
        if course is not None and not effective_prereqs(course, overrides).is_empty():
            hints.append(f'First-semester course "{course.code}" has prerequisites and will be rejected.')

    # Rule 3: total capacity of the semester sequence
    if slots and total_credits:
        capacity = sum(s.credit_cap for s in slots)
        if total_credits > capacity:
            hints.append(
                f"Credit target ({total_credits}) exceeds the capacity of {len(slots)} semesters "
                f"({capacity}). Increase max semesters or include summers."
            )

    return hints
