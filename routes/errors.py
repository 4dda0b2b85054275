"""JSON error responses for the API.

Caller defects (bad input, unknown semester/course/track) map to 400/404.
A write that lost a race with another request is 409 "stale-plan".
Rule rejections are not errors: handlers return them as 409 with the
PlacementResult body.
"""

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from . import plans_bp
from services.degree_areas import UnknownTrackError
from services.ledger import UnknownSemesterError
from services.plan_store import StalePlanError
from services.snapshot import SnapshotFormatError
from utils.course_catalog import CatalogIntegrityError, UnknownCourseError
from utils.req_parser import PrereqParseError
from utils.semesters import InvalidSemesterRangeError, InvalidTermError

logger = logging.getLogger(__name__)


def _error(status: int, kind: str, message: str):
    return jsonify({"error": kind, "message": message}), status


@plans_bp.errorhandler(UnknownSemesterError)
def unknown_semester(e):
    return _error(400, "unknown-semester", f"Semester {e.args[0]!r} is not part of this plan")


@plans_bp.errorhandler(UnknownCourseError)
def unknown_course(e):
    return _error(404, "unknown-course", str(e))


@plans_bp.errorhandler(StalePlanError)
def stale_plan(e):
    return _error(409, "stale-plan", f"{e}. Reload the plan and try again.")


@plans_bp.errorhandler(InvalidTermError)
@plans_bp.errorhandler(InvalidSemesterRangeError)
@plans_bp.errorhandler(UnknownTrackError)
@plans_bp.errorhandler(SnapshotFormatError)
@plans_bp.errorhandler(PrereqParseError)
def bad_input(e):
    return _error(400, "invalid-input", str(e))


@plans_bp.errorhandler(CatalogIntegrityError)
def broken_catalog(e):
    logger.error("Catalog integrity check failed: %s", e)
    return _error(500, "catalog-integrity", str(e))


@plans_bp.errorhandler(HTTPException)
def http_error(e):
    return _error(e.code or 500, e.name.lower().replace(" ", "-"), e.description or e.name)
