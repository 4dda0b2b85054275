from __future__ import annotations

import logging
from functools import lru_cache

from flask import current_app

from services.degree_areas import DegreeRequirements, load_degree_requirements, requirements_from_dict
from services.prereqs import load_prereq_overrides, merged_overrides
from services.req_ir import Req
from utils.course_catalog import Catalog, load_catalog

logger = logging.getLogger(__name__)


# Cached per path: the files are read once per process.
@lru_cache(maxsize=4)
def _catalog_at(directory: str) -> Catalog:
    return load_catalog(directory)


@lru_cache(maxsize=4)
def _requirements_at(path: str) -> DegreeRequirements:
    try:
        return load_degree_requirements(path)
    except FileNotFoundError:
        logger.warning("No degree requirements at %s; generator has no areas", path)
        return requirements_from_dict({"areas": []})


@lru_cache(maxsize=4)
def _overrides_at(path: str) -> dict[str, Req]:
    extra = load_prereq_overrides(path)
    if extra:
        logger.info("Loaded %d prerequisite override(s) from %s", len(extra), path)
    return merged_overrides(extra)


def current_catalog() -> Catalog:
    return _catalog_at(str(current_app.config["CATALOG_DIR"]))


def current_requirements() -> DegreeRequirements:
    return _requirements_at(str(current_app.config["REQUIREMENTS_PATH"]))


def current_overrides() -> dict[str, Req]:
    path = current_app.config.get("PREREQ_OVERRIDES_PATH")
    if not path:
        return merged_overrides()
    return _overrides_at(str(path))


def clear_caches() -> None:
    _catalog_at.cache_clear()
    _requirements_at.cache_clear()
    _overrides_at.cache_clear()
