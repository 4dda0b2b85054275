from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import json
import logging
import re
from typing import Any, Iterable, Iterator, Mapping

import pandas as pd

from services.req_ir import Req, NO_PREREQS
from utils.codes import normalize_code
from utils.req_parser import parse_req_value, parse_code_list, PrereqParseError

logger = logging.getLogger(__name__)


class CatalogIntegrityError(ValueError):
    pass


class UnknownCourseError(LookupError):
    pass


@dataclass(frozen=True)
class Course:
    code: str
    name: str
    credits: int
    prerequisites: Req = NO_PREREQS
    corequisites: tuple[str, ...] = ()

    # general-education metadata (empty for major courses)
    category: str | None = None
    required: bool = False

    @property
    def key(self) -> str:
        return normalize_code(self.code)


@dataclass
class Catalog:
    # Ordered: catalog order is the tie-breaker wherever determinism matters.
    courses: list[Course] = field(default_factory=list)

    def __post_init__(self):
        self._by_key: dict[str, Course] = {}
        self._order: dict[str, int] = {}
        kept: list[Course] = []
        for c in self.courses:
            if c.key in self._by_key:
                logger.warning("[catalog] Duplicate course %s ignored", c.code)
                continue
            self._by_key[c.key] = c
            self._order[c.key] = len(kept)
            kept.append(c)
        self.courses = kept

    def __iter__(self) -> Iterator[Course]:
        return iter(self.courses)

    def __len__(self) -> int:
        return len(self.courses)

    def __contains__(self, code) -> bool:
        return normalize_code(code) in self._by_key

    def get(self, code) -> Course | None:
        return self._by_key.get(normalize_code(code))

    def require(self, code) -> Course:
        course = self.get(code)
        if course is None:
            raise UnknownCourseError(f"Course {code!r} is not in the catalog")
        return course

    def position(self, code) -> int:
        # unknown codes sort last
        return self._order.get(normalize_code(code), len(self._order))

    def dangling_references(self, overrides: Mapping[str, Req] | None = None) -> list[tuple[str, str]]:
        """
        (course code, referenced code) pairs whose reference is not in the catalog.

        `overrides` maps normalized codes to the expression that replaces a
        course's own prerequisites. Overrides for courses outside the catalog
        never apply, so they are not checked.
        """
        overrides = overrides or {}
        out: list[tuple[str, str]] = []
        for c in self.courses:
            expr = overrides.get(c.key, c.prerequisites)
            for group in expr.items:
                for alt in group.items:
                    if normalize_code(alt) not in self._by_key:
                        out.append((c.code, alt))
        return out

    def require_consistent(self, overrides: Mapping[str, Req] | None = None) -> None:
        dangling = self.dangling_references(overrides)
        if dangling:
            shown = ", ".join(f"{c} -> {ref}" for c, ref in dangling[:10])
            raise CatalogIntegrityError(
                f"{len(dangling)} prerequisite reference(s) point outside the catalog: {shown}"
            )


def normalize_name_key(s: str) -> str:
    s = str(s or "").strip()
    s = s.replace('"', "").replace("'", "")
    s = re.sub(r"\s+", " ", s)
    return s


def _is_blank(v: Any) -> bool:
    if v is None:
        return True
    if isinstance(v, float) and pd.isna(v):
        return True
    return isinstance(v, str) and not v.strip()


def _pick(record: dict, *names: str) -> Any:
    # tolerate "code" / "Code" / "course_code" headers
    for n in names:
        for key in (n, n.capitalize(), n.upper()):
            if key in record and not _is_blank(record[key]):
                return record[key]
    return None


def _to_credits(v: Any) -> int | None:
    if _is_blank(v):
        return None
    try:
        f = float(str(v).strip())
    except (TypeError, ValueError):
        return None
    if f < 0 or not f.is_integer():
        return None
    return int(f)


def _to_bool(v: Any) -> bool:
    if _is_blank(v):
        return False
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in ("1", "true", "yes", "y", "required")


def course_from_record(record: dict) -> Course | None:
    """Build a Course from one catalog record, or None when it is malformed.

    Malformed means: missing code, missing / non-numeric / negative / fractional
    credits, or prerequisites that cannot be parsed.
    """
    code = _pick(record, "code", "course_code")
    if code is None:
        return None
    code = normalize_name_key(code)

    credits = _to_credits(_pick(record, "credits", "sch"))
    if credits is None:
        return None

    name = _pick(record, "name", "course_name", "title")
    try:
        prereqs = parse_req_value(_pick(record, "prerequisites", "prereqs", "prereq_text"))
        coreqs = parse_code_list(_pick(record, "corequisites", "coreqs", "coreq_text"))
    except PrereqParseError as e:
        logger.warning("[catalog] Skipping %s: %s", code, e)
        return None

    category = _pick(record, "category")
    return Course(
        code=code,
        name=normalize_name_key(name) if name is not None else code,
        credits=credits,
        prerequisites=prereqs,
        corequisites=coreqs,
        category=normalize_name_key(category) if category is not None else None,
        required=_to_bool(_pick(record, "required")),
    )


def build_catalog(records: Iterable[dict]) -> Catalog:
    items: list[Course] = []
    skipped = 0
    for record in records:
        course = course_from_record(record) if isinstance(record, dict) else None
        if course is None:
            skipped += 1
            continue
        items.append(course)

    if skipped:
        logger.warning("[catalog] Skipped %d malformed record(s)", skipped)
    return Catalog(items)


def load_catalog(directory: str) -> Catalog:
    """
    Load every *.csv, *.xlsx and *.json catalog file in `directory`.
    Files are read in name order and records keep their file order, so the
    resulting catalog order is stable.
    """
    p = Path(directory)
    if not p.exists() or not p.is_dir():
        return Catalog([])

    records: list[dict] = []

    for f in sorted(p.glob("*.csv")):
        try:
            records.extend(_load_table(pd.read_csv(f, dtype=str, keep_default_na=False)))
        except Exception as e:
            logger.warning("[catalog] Skipping %s: %s", f.name, e)

    for f in sorted(p.glob("*.xlsx")):
        try:
            records.extend(_load_table(pd.read_excel(f, dtype=str)))
        except Exception as e:
            # Skip unreadable Excel files
            logger.warning("[catalog] Skipping %s: %s", f.name, e)

    for f in sorted(p.glob("*.json")):
        try:
            data = json.loads(f.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("[catalog] Skipping %s: %s", f.name, e)
            continue
        # requirement files live next to the catalog; only course lists are catalog data
        if isinstance(data, dict):
            data = data.get("courses")
        if isinstance(data, list):
            records.extend(r for r in data if isinstance(r, dict))

    catalog = build_catalog(records)
    logger.info("[catalog] Loaded %d courses from %s", len(catalog), p)
    return catalog


def _load_table(df: pd.DataFrame) -> list[dict]:
    df = df.rename(columns=lambda c: str(c).strip().lower())
    return df.to_dict(orient="records")
