from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from services.degree_areas import DegreeArea
from services.ledger import PlacementLedger
from services.prereqs import PREREQ_OVERRIDES
from services.req_ir import Req
from services.validation import can_place, validate_generator_inputs
from utils.course_catalog import Catalog, Course
from utils.semesters import SemesterSlot, sequence_from_fall

logger = logging.getLogger(__name__)


_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def parse_flag(value: Any) -> bool:
    """Booleans from JSON, form fields or query strings.

    Accepts real booleans, the ints 0/1 and the words 1/true/yes/on and
    0/false/no/off (any case). Anything else raises ValueError.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"not a boolean flag: {value!r}")


@dataclass
class GeneratorOptions:
    include_summer: bool = False
    max_summer_terms: int = 0
    max_semesters: int = 12
    courses_per_regular_semester: int = 3
    courses_per_summer_semester: int = 3
    # summer is a light load: technical courses above this are left for regular terms
    summer_technical_credit_limit: int = 3
    summer_technical_courses: int = 1
    start_year: int = 2024

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None, **defaults) -> "GeneratorOptions":
        merged = dict(defaults)
        for k, v in (data or {}).items():
            if k in cls.__dataclass_fields__ and v is not None:
                merged[k] = v
        opts = cls(**merged)
        opts.include_summer = parse_flag(opts.include_summer)
        for name in (
            "max_summer_terms",
            "max_semesters",
            "courses_per_regular_semester",
            "courses_per_summer_semester",
            "summer_technical_credit_limit",
            "summer_technical_courses",
            "start_year",
        ):
            value = int(getattr(opts, name))
            if value < 0:
                raise ValueError(f"{name} must not be negative")
            setattr(opts, name, value)
        return opts


# -----------------------------
# Result containers
# -----------------------------

@dataclass
class GeneratorWarning:
    course: str   # course the warning is about
    raw: str      # detail (rejection reason, area name...)
    kind: str     # "first_semester_rejected" | "unscheduled"


@dataclass(frozen=True)
class ResidualRequirement:
    area: str
    min_credits: int
    placed_credits: int

    @property
    def missing_credits(self) -> int:
        return max(0, self.min_credits - self.placed_credits)


@dataclass
class GeneratedPlan:
    ledger: PlacementLedger
    target_credits: int
    residuals: List[ResidualRequirement] = field(default_factory=list)
    unscheduled: List[str] = field(default_factory=list)
    warnings: List[GeneratorWarning] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)

    @property
    def total_credits(self) -> int:
        return self.ledger.total_credits

    @property
    def status(self) -> str:
        if self.total_credits >= self.target_credits and not self.residuals:
            return "complete"
        return "partial"

    def semesters(self) -> List[Dict[str, Any]]:
        # filled semesters only, in sequence order
        out: List[Dict[str, Any]] = []
        for slot in self.ledger:
            codes = self.ledger.codes_in(slot.name)
            if not codes:
                continue
            out.append(
                {
                    "semester": slot.name,
                    "position": slot.index + 1,
                    "type": slot.kind,
                    "courses": codes,
                    "credits": self.ledger.credits_in(slot.name),
                }
            )
        return out

    def to_snapshot(self) -> Dict[str, dict]:
        return self.ledger.to_snapshot()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "total_credits": self.total_credits,
            "target_credits": self.target_credits,
            "semesters": self.semesters(),
            "residuals": [
                {
                    "area": r.area,
                    "min_credits": r.min_credits,
                    "placed_credits": r.placed_credits,
                    "missing_credits": r.missing_credits,
                }
                for r in self.residuals
            ],
            "unscheduled": list(self.unscheduled),
            "warnings": [w.__dict__ for w in self.warnings],
            "hints": list(self.hints),
        }


# -----------------------------
# Helpers
# -----------------------------

class _AreaTally:
    """Placed credits per area; a course counts toward every area listing it."""

    def __init__(self, areas: Sequence[DegreeArea]):
        self.areas = list(areas)
        self.credits: Dict[str, int] = {a.name: 0 for a in self.areas}

    def add(self, course: Course) -> None:
        for a in self.areas:
            if a.contains(course.code):
                self.credits[a.name] += int(course.credits)

    def below_minimum(self, course: Course) -> bool:
        return any(
            a.contains(course.code) and self.credits[a.name] < a.min_credits
            for a in self.areas
        )

    def residuals(self) -> List[ResidualRequirement]:
        return [
            ResidualRequirement(area=a.name, min_credits=a.min_credits, placed_credits=self.credits[a.name])
            for a in self.areas
            if self.credits[a.name] < a.min_credits
        ]


def _members(catalog: Catalog, areas: Iterable[DegreeArea]) -> List[Course]:
    # union of area courses, deduplicated, in catalog order
    seen: Dict[str, Course] = {}
    for area in areas:
        for code in area.courses:
            course = catalog.get(code)
            if course is not None and course.key not in seen:
                seen[course.key] = course
    return sorted(seen.values(), key=lambda c: catalog.position(c.code))


def _is_required(course: Course, areas: Sequence[DegreeArea]) -> bool:
    return any(a.is_required(course.code) for a in areas)


def _is_foundation(course: Course, areas: Sequence[DegreeArea]) -> bool:
    return any(a.foundation and a.contains(course.code) for a in areas)


def _ge_tier(course: Course, areas: Sequence[DegreeArea]) -> int:
    # required (foundation first), then foundation entries, then electives
    required = _is_required(course, areas)
    foundation = _is_foundation(course, areas)
    if required and foundation:
        return 0
    if required:
        return 1
    if foundation:
        return 2
    return 3


def _ordered_ge(catalog: Catalog, ge_areas: Sequence[DegreeArea]) -> List[Course]:
    courses = _members(catalog, ge_areas)
    # sorted() is stable and courses are already in catalog order
    return sorted(courses, key=lambda c: _ge_tier(c, ge_areas))


def _ordered_technical(catalog: Catalog, tech_areas: Sequence[DegreeArea]) -> List[Course]:
    courses = _members(catalog, tech_areas)
    return sorted(courses, key=lambda c: 0 if _is_required(c, tech_areas) else 1)


def _fill(
    slot: SemesterSlot,
    candidates: Sequence[Course],
    limit: int,
    ledger: PlacementLedger,
    tally: _AreaTally,
    *,
    gate_electives: bool,
    group_areas: Sequence[DegreeArea],
    accept=None,
    overrides: Mapping[str, Req] | None = None,
) -> List[Course]:
    """Place up to `limit` candidates into `slot`, in order, skipping illegal ones."""
    placed: List[Course] = []
    if limit <= 0:
        return placed

    for course in candidates:
        if len(placed) >= limit:
            break
        if ledger.semester_of(course.code) is not None:
            continue
        if accept is not None and not accept(course):
            continue
        if gate_electives and not (
            _is_required(course, group_areas)
            or _is_foundation(course, group_areas)
            or tally.below_minimum(course)
        ):
            continue

        result = can_place(course, slot.name, ledger, overrides)
        if not result.ok:
            continue

        tally.add(course)
        placed.append(course)

    return placed


# -----------------------------
# Generator
# -----------------------------

def generate_plan(
    catalog: Catalog,
    areas: Sequence[DegreeArea],
    options: Optional[GeneratorOptions] = None,
    *,
    first_semester: Sequence[str] = (),
    total_credits: Optional[int] = None,
    slots: Optional[Sequence[SemesterSlot]] = None,
    overrides: Mapping[str, Req] | None = None,
) -> GeneratedPlan:
    """
    Build a semester-by-semester plan automatically.

    - first_semester: fixed foundational courses placed in position 1
    - total_credits: stop once this many credits are placed
      (defaults to the sum of area minimums)
    - slots: semester sequence to fill (defaults to `max_semesters` slots
      starting Fall `start_year`, so position p is a summer iff p % 3 == 0)

    Every placement goes through services.validation.can_place, so the
    result satisfies the same rules as manual edits. Unreachable minimums
    and never-satisfiable prerequisites are reported, not raised.
    Raises CatalogIntegrityError / UnknownCourseError for structural defects.
    """
    options = options or GeneratorOptions()
    catalog.require_consistent(PREREQ_OVERRIDES if overrides is None else overrides)

    if slots is None:
        slots = sequence_from_fall(options.start_year, options.max_semesters)
    else:
        slots = list(slots)[: options.max_semesters]

    ledger = PlacementLedger(slots)
    target = int(total_credits) if total_credits is not None else sum(a.min_credits for a in areas)
    tally = _AreaTally(areas)

    plan = GeneratedPlan(ledger=ledger, target_credits=target)
    plan.hints = validate_generator_inputs(
        catalog,
        areas,
        first_semester=first_semester,
        total_credits=target,
        slots=slots,
        overrides=overrides,
    )

    if not slots:
        plan.residuals = tally.residuals()
        return plan

    # 1) fixed first semester
    first_slot = ledger.slots[0]
    for code in first_semester:
        course = catalog.require(code)
        result = can_place(course, first_slot.name, ledger, overrides)
        if result.ok:
            tally.add(course)
        else:
            plan.warnings.append(
                GeneratorWarning(course=course.code, raw=result.reason.value, kind="first_semester_rejected")
            )

    ge_areas = [a for a in areas if a.is_general_education]
    tech_areas = [a for a in areas if not a.is_general_education]
    ge_candidates = _ordered_ge(catalog, ge_areas)
    tech_candidates = _ordered_technical(catalog, tech_areas)

    summer_left = options.max_summer_terms if options.include_summer else 0

    # 2) remaining positions
    for slot in ledger.slots[1:]:
        if ledger.total_credits >= target:
            break

        if slot.is_summer:
            if summer_left <= 0:
                continue

            quota = options.courses_per_summer_semester
            ge = _fill(
                slot, ge_candidates, quota, ledger, tally,
                gate_electives=True, group_areas=ge_areas, overrides=overrides,
            )
            _fill(
                slot, tech_candidates,
                min(options.summer_technical_courses, quota - len(ge)),
                ledger, tally,
                gate_electives=True, group_areas=tech_areas,
                accept=lambda c: int(c.credits) <= options.summer_technical_credit_limit,
                overrides=overrides,
            )
            summer_left -= 1
            continue

        quota = options.courses_per_regular_semester
        _fill(
            slot, tech_candidates, quota, ledger, tally,
            gate_electives=True, group_areas=tech_areas, overrides=overrides,
        )
        _fill(
            slot, ge_candidates, quota, ledger, tally,
            gate_electives=True, group_areas=ge_areas, overrides=overrides,
        )

    # 3) what is left over
    plan.residuals = tally.residuals()
    for area in areas:
        for code in area.courses:
            if area.is_required(code) and ledger.semester_of(code) is None and code not in plan.unscheduled:
                plan.unscheduled.append(code)
                plan.warnings.append(GeneratorWarning(course=code, raw=area.name, kind="unscheduled"))

    logger.info(
        "Generated plan: %d/%d credits in %d semesters, %d residual area(s), %d unscheduled course(s)",
        plan.total_credits,
        target,
        len(plan.semesters()),
        len(plan.residuals),
        len(plan.unscheduled),
    )
    return plan
