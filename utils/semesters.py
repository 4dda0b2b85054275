from __future__ import annotations

from dataclasses import dataclass

TERMS = ("Fall", "Spring", "Summer")

REGULAR = "regular"
SUMMER = "summer"

REGULAR_CREDIT_CAP = 22
SUMMER_CREDIT_CAP = 10


class InvalidTermError(ValueError):
    pass


class InvalidSemesterRangeError(ValueError):
    pass


@dataclass(frozen=True)
class SemesterSlot:
    name: str           # "Fall 2024"
    term: str           # "Fall" | "Spring" | "Summer"
    year: int           # display year
    kind: str           # "regular" | "summer"
    index: int          # chronological position, 0-based
    credit_cap: int

    @property
    def is_summer(self) -> bool:
        return self.kind == SUMMER

    @property
    def academic_year(self) -> str:
        # Fall opens the academic year
        start = self.year if self.term == "Fall" else self.year - 1
        return f"{start}/{start + 1}"


def credit_cap_for(kind: str) -> int:
    return SUMMER_CREDIT_CAP if kind == SUMMER else REGULAR_CREDIT_CAP


def canonical_term(term) -> str:
    t = str(term or "").strip().capitalize()
    if t not in TERMS:
        raise InvalidTermError(f"Unknown term {term!r}; expected one of {', '.join(TERMS)}")
    return t


def build_semester_sequence(start_term, start_year: int, end_term, end_year: int) -> list[SemesterSlot]:
    """
    All semesters from start to end, inclusive, in chronological order.

    Years are academic-year anchors: the year of the Fall that opens the
    academic year. Spring and Summer of that academic year display anchor + 1,
    so ("Fall", 2024, "Summer", 2025) yields Fall 2024 ... Summer 2026.
    """
    start = canonical_term(start_term)
    end = canonical_term(end_term)
    start_year = int(start_year)
    end_year = int(end_year)

    start_pos = (start_year, TERMS.index(start))
    end_pos = (end_year, TERMS.index(end))
    if end_pos < start_pos:
        raise InvalidSemesterRangeError(
            f"End {end} {end_year} is before start {start} {start_year}"
        )

    slots: list[SemesterSlot] = []
    anchor, term_idx = start_pos
    while (anchor, term_idx) <= end_pos:
        term = TERMS[term_idx]
        display_year = anchor if term == "Fall" else anchor + 1
        kind = SUMMER if term == "Summer" else REGULAR
        slots.append(
            SemesterSlot(
                name=f"{term} {display_year}",
                term=term,
                year=display_year,
                kind=kind,
                index=len(slots),
                credit_cap=credit_cap_for(kind),
            )
        )

        term_idx = (term_idx + 1) % len(TERMS)
        if term_idx == 0:
            anchor += 1

    return slots


def sequence_from_fall(start_year: int, count: int) -> list[SemesterSlot]:
    # `count` consecutive semesters starting Fall start_year; position p (1-based)
    # is a summer exactly when p % 3 == 0
    if count < 1:
        return []
    last = count - 1
    end_anchor = int(start_year) + last // len(TERMS)
    end_term = TERMS[last % len(TERMS)]
    return build_semester_sequence("Fall", start_year, end_term, end_anchor)


def parse_semester_name(name: str) -> tuple[str, int]:
    # "Spring 2025" -> ("Spring", 2025)
    parts = str(name or "").split()
    if len(parts) != 2 or not parts[1].isdigit():
        raise InvalidTermError(f"Malformed semester name {name!r}")
    return canonical_term(parts[0]), int(parts[1])

