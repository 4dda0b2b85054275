"""Moving a plan between the database and a PlacementLedger.

Rows in plan_placement were validated when they were written, so restoring
them goes through `place_trusted` (uniqueness only). Every write path goes
through services/validation.py first.

Writes are guarded by DegreePlan.version: a request that read an older
version than the one stored gets StalePlanError and writes nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from sqlalchemy.orm.exc import StaleDataError

from extensions import db
from models.degree_plan import DegreePlan
from models.plan_placement import PlanPlacement
from services.ledger import PlacementLedger
from services.validation import place_trusted
from utils.course_catalog import Catalog
from utils.semesters import SemesterSlot, build_semester_sequence

logger = logging.getLogger(__name__)


def slots_for_plan(plan: DegreePlan) -> List[SemesterSlot]:
    return build_semester_sequence(plan.start_term, plan.start_year, plan.end_term, plan.end_year)


def ledger_for_plan(plan: DegreePlan, catalog: Catalog) -> PlacementLedger:
    ledger = PlacementLedger(slots_for_plan(plan))

    for row in PlanPlacement.query.filter_by(plan_id=plan.id).order_by(PlanPlacement.position).all():
        course = catalog.get(row.course_code)
        if course is None:
            # catalog changed under a saved plan; keep the row, skip it in the ledger
            logger.warning("Plan %s: %s is no longer in the catalog", plan.id, row.course_code)
            continue
        if not ledger.has_semester(row.semester_name):
            logger.warning(
                "Plan %s: %s sits in %s, outside the plan's semesters",
                plan.id, row.course_code, row.semester_name,
            )
            continue
        place_trusted(course, row.semester_name, ledger)

    return ledger


class StalePlanError(RuntimeError):
    """Another request changed the plan after this one read it."""


def save_ledger(plan: DegreePlan, ledger: PlacementLedger) -> int:
    """Replace the plan's stored placements with the ledger's. Returns rows written.

    Raises StalePlanError when the plan's version moved since it was loaded.
    """
    plan_id = plan.id
    # touching the plan makes the flush bump `version`, matching only the one we read
    plan.updated_at = datetime.utcnow()
    try:
        db.session.flush()
    except StaleDataError as e:
        db.session.rollback()
        logger.warning("Plan %s changed concurrently; placements not saved", plan_id)
        raise StalePlanError(f"Plan {plan_id} was modified by another request") from e

    PlanPlacement.query.filter_by(plan_id=plan_id).delete()

    position = 0
    for slot in ledger:
        for course in ledger.courses_in(slot.name):
            db.session.add(
                PlanPlacement(
                    plan_id=plan_id,
                    semester_name=slot.name,
                    position=position,
                    course_code=course.key,
                )
            )
            position += 1

    db.session.commit()
    return position
