from __future__ import annotations
import re
from typing import Any

from services.req_ir import Req, ReqAnd, ReqOr, NO_PREREQS


class PrereqParseError(ValueError):
    pass


def normalize_text(s: str) -> str:
    s = s.strip()
    s = s.replace("–", "-")
    s = re.sub(r"\s+", " ", s)
    return s


def split_top(s: str, sep: str) -> list[str]:
    # no nested parentheses in catalog data, so simple split is OK
    return [p.strip() for p in s.split(sep) if p.strip()]


def _strip_parens(s: str) -> str:
    s = s.strip()
    while s.startswith("(") and s.endswith(")"):
        s = s[1:-1].strip()
    return s


def parse_req_text(text: str | None) -> Req:
    """
    Parse catalog prerequisite text into an AND-of-OR expression.

        "MTH 1303"                   -> [[MTH 1303]]
        "CSC 1401 + CSC 2302"        -> [[CSC 1401], [CSC 2302]]
        "MTH 2301 / MTH 2320 + PHY"  -> [[MTH 2301, MTH 2320], [PHY]]

    '+' separates conjuncts and binds loosest, '/' separates alternatives.
    'none' / '-' / blank mean no prerequisites.
    """
    if text is None:
        return NO_PREREQS
    text = normalize_text(str(text))
    if not text or text.lower() in ("none", "-", "n/a", "nan"):
        return NO_PREREQS

    groups: list[ReqOr] = []
    for part in split_top(text, "+"):
        alternatives = [_strip_parens(a) for a in split_top(_strip_parens(part), "/")]
        alternatives = [a for a in alternatives if a]
        if not alternatives:
            raise PrereqParseError(f"empty prerequisite group in {text!r}")
        groups.append(ReqOr(tuple(dedupe(alternatives))))

    return ReqAnd(tuple(groups))


def _leaf_code(item: Any) -> str:
    # original JSON shape: {"type": "course", "value": "CSC1401"}
    if isinstance(item, str):
        code = item.strip()
    elif isinstance(item, dict):
        if item.get("type", "course") != "course":
            raise PrereqParseError(f"unsupported prerequisite type {item.get('type')!r}")
        code = str(item.get("value") or "").strip()
    else:
        raise PrereqParseError(f"unsupported prerequisite entry {item!r}")

    if not code:
        raise PrereqParseError("prerequisite entry without a course code")
    return code


def parse_req_value(value: Any) -> Req:
    """
    Accepts every prerequisite shape found in catalog records:
      - None / ""                    -> no prerequisites
      - text                         -> parse_req_text
      - ReqAnd                       -> returned as-is
      - list of strings              -> each string is its own conjunct
      - list of lists / dicts        -> each inner list is an OR group
    """
    if value is None:
        return NO_PREREQS
    if isinstance(value, ReqAnd):
        return value
    if isinstance(value, str):
        return parse_req_text(value)
    if isinstance(value, float) and value != value:  # NaN from pandas
        return NO_PREREQS
    if not isinstance(value, (list, tuple)):
        raise PrereqParseError(f"unsupported prerequisite value {value!r}")

    groups: list[ReqOr] = []
    for entry in value:
        if isinstance(entry, (list, tuple)):
            groups.append(ReqOr(tuple(dedupe([_leaf_code(x) for x in entry]))))
        else:
            groups.append(ReqOr((_leaf_code(entry),)))
    return ReqAnd(tuple(groups))


def parse_code_list(value: Any) -> tuple[str, ...]:
    # corequisites: "A / B", "A, B" or a list
    if value is None:
        return ()
    if isinstance(value, float) and value != value:
        return ()
    if isinstance(value, str):
        text = normalize_text(value)
        if not text or text.lower() in ("none", "-", "nan"):
            return ()
        return tuple(dedupe(p for p in re.split(r"[,;/+]", text) if p.strip()))
    if isinstance(value, (list, tuple)):
        return tuple(dedupe(_leaf_code(x) for x in value))
    raise PrereqParseError(f"unsupported code list {value!r}")


def format_req(expr: Req) -> str:
    # inverse of parse_req_text, used for display and CSV export
    return " + ".join(" / ".join(group.items) for group in expr.items if group.items)


def dedupe(items) -> list[str]:
    seen = set()
    out = []
    for it in items:
        it = it.strip()
        key = it.upper()
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out
