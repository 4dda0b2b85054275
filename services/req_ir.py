from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from utils.codes import normalize_code


@dataclass(frozen=True)
class ReqOr:
    # Interchangeable alternatives; any one of them satisfies the group.
    # An empty group is vacuously satisfied.
    items: Tuple[str, ...] = ()

    def codes(self) -> set[str]:
        return {normalize_code(c) for c in self.items}


@dataclass(frozen=True)
class ReqAnd:
    # Conjunction of OR groups (AND of ORs). An empty AND is vacuously satisfied.
    items: Tuple[ReqOr, ...] = ()

    def codes(self) -> set[str]:
        out: set[str] = set()
        for group in self.items:
            out |= group.codes()
        return out

    def is_empty(self) -> bool:
        return all(not group.items for group in self.items)

    def to_lists(self) -> list[list[str]]:
        return [list(group.items) for group in self.items]


Req = ReqAnd

NO_PREREQS = ReqAnd()


def req_all(*codes: str) -> ReqAnd:
    # every code required ("A + B + C")
    return ReqAnd(tuple(ReqOr((c,)) for c in codes))
