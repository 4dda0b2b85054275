from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence

from utils.codes import normalize_code
from utils.course_catalog import Course
from utils.semesters import SemesterSlot


class UnknownSemesterError(KeyError):
    # a semester name outside the plan's sequence is a caller defect
    pass


class PlacementLedger:
    """
    Which course sits in which semester of one student's plan.

    Invariants (kept by the mutators below, which only services/validation.py
    calls):
      - a normalized course code appears in at most one semester
      - a semester's credit total equals the sum of its courses' credits
    """

    def __init__(self, slots: Sequence[SemesterSlot]):
        self._slots: List[SemesterSlot] = sorted(slots, key=lambda s: s.index)
        self._by_name: Dict[str, SemesterSlot] = {s.name: s for s in self._slots}
        if len(self._by_name) != len(self._slots):
            raise ValueError("Semester names must be unique within a plan")

        self._courses: Dict[str, List[Course]] = {s.name: [] for s in self._slots}
        self._credits: Dict[str, int] = {s.name: 0 for s in self._slots}
        # normalized code -> semester name
        self._where: Dict[str, str] = {}

    # ---- reads ----

    @property
    def slots(self) -> List[SemesterSlot]:
        return list(self._slots)

    def __iter__(self) -> Iterator[SemesterSlot]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def slot(self, name: str) -> SemesterSlot:
        slot = self._by_name.get(name)
        if slot is None:
            raise UnknownSemesterError(name)
        return slot

    def has_semester(self, name: str) -> bool:
        return name in self._by_name

    def courses_in(self, name: str) -> List[Course]:
        self.slot(name)
        return list(self._courses[name])

    def codes_in(self, name: str) -> List[str]:
        return [c.code for c in self.courses_in(name)]

    def credits_in(self, name: str) -> int:
        self.slot(name)
        return self._credits[name]

    def semester_of(self, code) -> Optional[str]:
        return self._where.get(normalize_code(code))

    def find(self, name: str, code) -> Optional[Course]:
        key = normalize_code(code)
        for c in self.courses_in(name):
            if c.key == key:
                return c
        return None

    def codes_before(self, name: str, *, exclude: str | None = None) -> set[str]:
        """Normalized codes placed in semesters strictly earlier than `name`."""
        limit = self.slot(name).index
        skip = normalize_code(exclude) if exclude else None
        out: set[str] = set()
        for s in self._slots:
            if s.index >= limit:
                break
            for c in self._courses[s.name]:
                if c.key != skip:
                    out.add(c.key)
        return out

    @property
    def total_credits(self) -> int:
        return sum(self._credits.values())

    def is_empty(self) -> bool:
        return not self._where

    # ---- mutators (services/validation.py only) ----

    def _append(self, name: str, course: Course) -> None:
        self._courses[name].append(course)
        self._credits[name] += int(course.credits)
        self._where[course.key] = name

    def _discard(self, name: str, course: Course) -> None:
        self._courses[name] = [c for c in self._courses[name] if c.key != course.key]
        self._credits[name] -= int(course.credits)
        self._where.pop(course.key, None)

    def _clear(self) -> None:
        for name in self._courses:
            self._courses[name] = []
            self._credits[name] = 0
        self._where.clear()

    # ---- snapshot contract ----

    def to_snapshot(self) -> Dict[str, dict]:
        # {semester name -> {"courses": [codes], "credits": int}}, in sequence order
        return {
            s.name: {
                "courses": [c.code for c in self._courses[s.name]],
                "credits": self._credits[s.name],
            }
            for s in self._slots
        }

    def check_invariants(self) -> List[str]:
        problems: List[str] = []
        seen: Dict[str, str] = {}
        for s in self._slots:
            total = sum(int(c.credits) for c in self._courses[s.name])
            if total != self._credits[s.name]:
                problems.append(f"{s.name}: stored credits {self._credits[s.name]} != {total}")
            for c in self._courses[s.name]:
                if c.key in seen:
                    problems.append(f"{c.code} appears in {seen[c.key]} and {s.name}")
                seen[c.key] = s.name
        return problems

    def __repr__(self) -> str:
        return f"<PlacementLedger semesters={len(self._slots)} courses={len(self._where)}>"
