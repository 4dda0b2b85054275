"""Generator and snapshot endpoints

- POST /plans/<id>/generate replaces the plan's placements with a generated
  plan and stores the outcome as a PlanSolution row
- GET  /plans/<id>/solution returns the latest stored outcome (no re-generate)
- GET  /plans/<id>/export and POST /plans/<id>/import move plan snapshots
"""

import json
from typing import Any, Optional

from flask import current_app, request, abort, jsonify

from . import plans_bp
from .plans import get_plan_or_404, plan_payload
from extensions import db
from models.plan_solution import PlanSolution
from services.catalog_source import current_catalog, current_overrides, current_requirements
from services.degree_areas import build_areas
from services.generator import GeneratedPlan, GeneratorOptions, generate_plan, parse_flag
from services.plan_store import ledger_for_plan, save_ledger, slots_for_plan
from services.snapshot import export_snapshot, import_snapshot


def _save_latest_solution(
    *,
    plan_id: int,
    generated: GeneratedPlan,
    meta: Optional[dict[str, Any]] = None,
) -> PlanSolution:
    """Keep exactly ONE latest generator outcome per plan."""
    PlanSolution.query.filter_by(plan_id=plan_id).delete()

    result = generated.to_dict()
    sol = PlanSolution(
        plan_id=plan_id,
        status=generated.status,
        total_credits=generated.total_credits,
        target_credits=generated.target_credits,
        semesters_json=json.dumps(generated.semesters(), ensure_ascii=False),
        residuals_json=json.dumps(result["residuals"], ensure_ascii=False),
        unscheduled_json=json.dumps(list(generated.unscheduled), ensure_ascii=False),
        warnings_json=json.dumps([w.__dict__ for w in generated.warnings], ensure_ascii=False),
        meta_json=json.dumps(meta or {}, ensure_ascii=False),
    )

    db.session.add(sol)
    db.session.commit()
    return sol


def _flag_arg(name: str) -> bool:
    raw = request.args.get(name)
    if raw is None:
        return False
    try:
        return parse_flag(raw)
    except ValueError as e:
        abort(400, description=f"Query parameter '{name}': {e}")


@plans_bp.route("/plans/<int:plan_id>/generate", methods=["POST"])
def generate(plan_id: int):
    """Run the generator over the plan's semesters.

    Body (all optional): generator options (include_summer, max_summer_terms,
    max_semesters, ...) and `specializations`, which defaults to the plan's.
    """
    plan = get_plan_or_404(plan_id)
    data = request.get_json(silent=True) or {}

    cfg = current_app.config
    try:
        options = GeneratorOptions.from_dict(
            data,
            max_semesters=cfg.get("MAX_SEMESTERS", 12),
            courses_per_regular_semester=cfg.get("COURSES_PER_REGULAR_SEMESTER", 3),
            courses_per_summer_semester=cfg.get("COURSES_PER_SUMMER_SEMESTER", 3),
            start_year=plan.start_year,
        )
    except (TypeError, ValueError) as e:
        abort(400, description=f"Invalid generator options: {e}")

    specializations = data.get("specializations")
    if specializations is None:
        specializations = plan.specialization_list()
    elif isinstance(specializations, str):
        specializations = [specializations]

    catalog = current_catalog()
    requirements = current_requirements()
    areas = build_areas(requirements, catalog, specializations)

    generated = generate_plan(
        catalog,
        areas,
        options,
        first_semester=requirements.first_semester,
        total_credits=plan.total_credits_required or None,
        slots=slots_for_plan(plan),
        overrides=current_overrides(),
    )

    save_ledger(plan, generated.ledger)
    _save_latest_solution(
        plan_id=plan.id,
        generated=generated,
        meta={
            "options": options.__dict__,
            "specializations": list(specializations),
            "hints": list(generated.hints),
        },
    )

    body = generated.to_dict()
    body["plan"] = plan_payload(plan, generated.ledger)
    return jsonify(body)


@plans_bp.route("/plans/<int:plan_id>/solution", methods=["GET"])
def latest_solution(plan_id: int):
    plan = get_plan_or_404(plan_id)

    latest = (
        PlanSolution.query.filter_by(plan_id=plan.id)
        .order_by(PlanSolution.created_at.desc())
        .first()
    )
    if latest is None:
        abort(404, description="No generated plan stored yet. Call generate first.")

    return jsonify(
        {
            "status": latest.status,
            "complete": latest.is_complete,
            "total_credits": latest.total_credits,
            "target_credits": latest.target_credits,
            "created_at": latest.created_at.isoformat(),
            "semesters": json.loads(latest.semesters_json),
            "residuals": json.loads(latest.residuals_json),
            "unscheduled": json.loads(latest.unscheduled_json),
            "warnings": json.loads(latest.warnings_json) if latest.warnings_json else [],
            "meta": json.loads(latest.meta_json) if latest.meta_json else {},
        }
    )


@plans_bp.route("/plans/<int:plan_id>/export", methods=["GET"])
def export_plan(plan_id: int):
    plan = get_plan_or_404(plan_id)
    ledger = ledger_for_plan(plan, current_catalog())
    return jsonify(export_snapshot(ledger))


@plans_bp.route("/plans/<int:plan_id>/import", methods=["POST"])
def import_plan(plan_id: int):
    """Replace the plan's placements with a snapshot.

    Entries are re-validated against the plan's rules; `?trusted=1` skips
    the credit and prerequisite checks. Rejected entries are listed in the
    response and the rest are kept.
    """
    plan = get_plan_or_404(plan_id)
    snapshot = request.get_json(silent=True)
    if snapshot is None:
        abort(400, description="Request body must be a JSON snapshot.")

    report = import_snapshot(
        snapshot,
        current_catalog(),
        slots=slots_for_plan(plan),
        trusted=_flag_arg("trusted"),
        overrides=current_overrides(),
    )
    save_ledger(plan, report.ledger)

    body = report.to_dict()
    body["plan"] = plan_payload(plan, report.ledger)
    return jsonify(body)
