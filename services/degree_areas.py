from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from utils.codes import normalize_code
from utils.course_catalog import Catalog

logger = logging.getLogger(__name__)

TECHNICAL = "technical"
GENERAL_EDUCATION = "general_education"
SPECIALIZATION = "specialization"

AREA_KINDS = (TECHNICAL, GENERAL_EDUCATION, SPECIALIZATION)


class UnknownTrackError(ValueError):
    pass


@dataclass(frozen=True)
class DegreeArea:
    name: str
    kind: str
    min_credits: int
    # codes in catalog order
    courses: tuple[str, ...] = ()
    # normalized codes of fixed entries; the rest are electives
    required: frozenset[str] = frozenset()
    foundation: bool = False

    def contains(self, code) -> bool:
        key = normalize_code(code)
        return any(normalize_code(c) == key for c in self.courses)

    def is_required(self, code) -> bool:
        return normalize_code(code) in self.required

    @property
    def is_general_education(self) -> bool:
        return self.kind == GENERAL_EDUCATION


@dataclass(frozen=True)
class DegreeRequirements:
    name: str
    code: str
    total_credits: int
    first_semester: tuple[str, ...] = ()
    tracks: dict[str, tuple[str, ...]] = field(default_factory=dict)
    areas: tuple[dict[str, Any], ...] = ()


def load_degree_requirements(path: str) -> DegreeRequirements:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return requirements_from_dict(data)


def requirements_from_dict(data: dict) -> DegreeRequirements:
    areas = tuple(data.get("areas") or ())
    for spec in areas:
        kind = spec.get("kind")
        if kind not in AREA_KINDS:
            raise ValueError(f"Area {spec.get('name')!r} has unknown kind {kind!r}")

    tracks = {
        str(name).lower(): tuple(codes or ())
        for name, codes in (data.get("tracks") or {}).items()
    }
    total = data.get("total_credits")
    if total is None:
        total = sum(int(a.get("min_credits") or 0) for a in areas)

    return DegreeRequirements(
        name=str(data.get("name") or ""),
        code=str(data.get("code") or ""),
        total_credits=int(total),
        first_semester=tuple(data.get("first_semester") or ()),
        tracks=tracks,
        areas=areas,
    )


def track_codes(requirements: DegreeRequirements, specializations: Sequence[str]) -> list[str]:
    out: list[str] = []
    for spec in specializations:
        key = str(spec).strip().lower()
        if key not in requirements.tracks:
            raise UnknownTrackError(
                f"Unknown specialization {spec!r}; known: {', '.join(sorted(requirements.tracks))}"
            )
        out.extend(requirements.tracks[key])
    return out


def build_areas(
    requirements: DegreeRequirements,
    catalog: Catalog,
    specializations: Sequence[str] = (),
) -> list[DegreeArea]:
    """
    Turn the area specs of a requirements file into DegreeAreas over `catalog`.

    Membership per kind:
      - technical:          catalog courses whose code starts with one of
                            `prefixes`, minus the chosen tracks' courses
      - general_education:  catalog courses whose category equals `category`
                            (defaults to the area name)
      - specialization:     the chosen tracks' courses
    An explicit `courses` list on the area entry replaces the rule above.
    """
    chosen = {normalize_code(c) for c in track_codes(requirements, specializations)}
    for code in chosen:
        if code not in catalog:
            logger.warning("Track course %s is not in the catalog; skipped", code)

    areas: list[DegreeArea] = []
    for spec in requirements.areas:
        kind = spec["kind"]
        name = str(spec["name"])

        if spec.get("courses"):
            members = [c for c in catalog if any(normalize_code(x) == c.key for x in spec["courses"])]
        elif kind == TECHNICAL:
            prefixes = tuple(normalize_code(p) for p in spec.get("prefixes") or ())
            members = [
                c for c in catalog
                if c.category is None and c.key.startswith(prefixes) and c.key not in chosen
            ]
        elif kind == GENERAL_EDUCATION:
            category = str(spec.get("category") or name)
            members = [c for c in catalog if c.category == category]
        else:
            members = [c for c in catalog if c.key in chosen]

        # technical core and chosen tracks are fixed entries; GE follows the catalog flag
        if kind == GENERAL_EDUCATION:
            required = frozenset(c.key for c in members if c.required)
        else:
            required = frozenset(c.key for c in members)

        areas.append(
            DegreeArea(
                name=name,
                kind=kind,
                min_credits=int(spec.get("min_credits") or 0),
                courses=tuple(c.code for c in members),
                required=required,
                foundation=bool(spec.get("foundation")),
            )
        )

    return areas
