from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[\s\-]+")


def normalize_code(code) -> str:
    # "csc 1401", "CSC-1401" and "CSC1401" all compare equal
    if code is None:
        return ""
    return _SEPARATORS.sub("", str(code)).upper()


def same_code(a, b) -> bool:
    return normalize_code(a) == normalize_code(b)
