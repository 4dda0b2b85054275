"""Prerequisite evaluation and the catalog override table.

Overrides correct catalog entries whose encoded prerequisites are known to be
incomplete. They are data, applied in one place (`effective_prereqs`) before
every evaluation, so no call site special-cases individual courses.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, Mapping

from services.req_ir import Req, ReqAnd, req_all
from utils.codes import normalize_code
from utils.req_parser import parse_req_text, PrereqParseError

logger = logging.getLogger(__name__)


# normalized course code -> replacement expression
PREREQ_OVERRIDES: dict[str, Req] = {
    # source data carries no usable list for Data Structures; it needs Programming
    "CSC2302": req_all("CSC 1401"),
}


def evaluate(expr: Req | None, available: Iterable[str]) -> bool:
    """True when every OR group has at least one alternative in `available`.

    `available` may hold codes in any spelling; they are normalized here.
    Empty AND lists and empty OR groups are vacuously satisfied.
    """
    if expr is None or not expr.items:
        return True

    have = {normalize_code(c) for c in available}
    for group in expr.items:
        if not group.items:
            continue
        if not any(normalize_code(alt) in have for alt in group.items):
            return False
    return True


def effective_prereqs(course, overrides: Mapping[str, Req] | None = None) -> Req:
    table = PREREQ_OVERRIDES if overrides is None else overrides
    override = table.get(normalize_code(course.code))
    if override is not None:
        return override
    return course.prerequisites if course.prerequisites is not None else ReqAnd()


def prereqs_met(course, available: Iterable[str], overrides: Mapping[str, Req] | None = None) -> bool:
    return evaluate(effective_prereqs(course, overrides), available)


def load_prereq_overrides(path: str) -> dict[str, Req]:
    """Load extra overrides from a CSV with `code,prerequisites` columns.

    Same conventions as the alias file: '#' comments and blank lines are
    ignored, header names are case-insensitive. Rows that fail to parse are
    skipped with a warning.
    """
    p = Path(path)
    mapping: dict[str, Req] = {}

    if not p.exists():
        return mapping

    cleaned_lines: list[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        cleaned_lines.append(line)

    if not cleaned_lines:
        return mapping

    with io.StringIO("\n".join(cleaned_lines)) as f:
        reader = csv.DictReader(f)
        if reader.fieldnames:
            reader.fieldnames = [fn.strip().lower() for fn in reader.fieldnames]

        for row in reader:
            code = (row.get("code") or "").strip()
            if not code:
                continue
            try:
                mapping[normalize_code(code)] = parse_req_text(row.get("prerequisites") or "")
            except PrereqParseError as e:
                logger.warning("[overrides] Skipping %s: %s", code, e)

    return mapping


def merged_overrides(extra: Mapping[str, Req] | None = None) -> dict[str, Req]:
    # built-in table plus `extra`; `extra` entries win
    table = dict(PREREQ_OVERRIDES)
    for code, expr in (extra or {}).items():
        table[normalize_code(code)] = expr
    return table
