from flask import request, abort, jsonify

from . import plans_bp
from extensions import db
from models.degree_plan import DegreePlan
from services.catalog_source import current_catalog, current_overrides, current_requirements
from services.plan_store import ledger_for_plan, save_ledger, slots_for_plan
from services.snapshot import plan_progress
from services.validation import can_place, can_remove, reset_ledger
from utils.req_parser import format_req
from utils.semesters import build_semester_sequence, canonical_term


def get_plan_or_404(plan_id: int) -> DegreePlan:
    plan = db.session.get(DegreePlan, plan_id)
    if plan is None:
        abort(404, description=f"Plan {plan_id} not found")
    return plan


def _int_field(data: dict, name: str, default=None):
    value = data.get(name, default)
    if value is None:
        abort(400, description=f"'{name}' is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        abort(400, description=f"'{name}' must be an integer")


def plan_payload(plan: DegreePlan, ledger) -> dict:
    semesters = []
    for slot in ledger:
        semesters.append(
            {
                "semester": slot.name,
                "type": slot.kind,
                "academic_year": slot.academic_year,
                "credit_cap": slot.credit_cap,
                "courses": ledger.codes_in(slot.name),
                "credits": ledger.credits_in(slot.name),
            }
        )

    payload = plan.to_dict()
    payload["semesters"] = semesters
    payload["progress"] = plan_progress(ledger, plan.total_credits_required)
    return payload


@plans_bp.route("/catalog", methods=["GET"])
def list_catalog():
    catalog = current_catalog()
    courses = [
        {
            "code": c.code,
            "name": c.name,
            "credits": c.credits,
            "prerequisites": format_req(c.prerequisites),
            "corequisites": list(c.corequisites),
            "category": c.category,
            "required": c.required,
        }
        for c in catalog
    ]
    return jsonify({"count": len(courses), "courses": courses})


@plans_bp.route("/plans", methods=["POST"])
def create_plan():
    data = request.get_json(silent=True) or {}

    name = (data.get("name") or "").strip()
    if not name:
        abort(400, description="Plan name is required.")

    start_term = canonical_term(data.get("start_term") or "Fall")
    start_year = _int_field(data, "start_year")
    end_term = canonical_term(data.get("end_term") or "Summer")
    # four academic years unless told otherwise
    end_year = _int_field(data, "end_year", start_year + 3)

    # raises InvalidSemesterRangeError for an inverted range
    build_semester_sequence(start_term, start_year, end_term, end_year)

    specializations = data.get("specializations") or []
    if isinstance(specializations, str):
        specializations = [specializations]

    plan = DegreePlan(
        name=name,
        student_name=data.get("student_name"),
        student_id=data.get("student_id"),
        major=data.get("major"),
        specializations=",".join(str(s).strip().lower() for s in specializations),
        start_term=start_term,
        start_year=start_year,
        end_term=end_term,
        end_year=end_year,
        total_credits_required=_int_field(
            data, "total_credits_required", current_requirements().total_credits
        ),
    )
    db.session.add(plan)
    db.session.commit()

    ledger = ledger_for_plan(plan, current_catalog())
    return jsonify(plan_payload(plan, ledger)), 201


@plans_bp.route("/plans/<int:plan_id>", methods=["GET"])
def view_plan(plan_id: int):
    plan = get_plan_or_404(plan_id)
    ledger = ledger_for_plan(plan, current_catalog())
    return jsonify(plan_payload(plan, ledger))


@plans_bp.route("/plans/<int:plan_id>/courses", methods=["POST"])
def add_course(plan_id: int):
    plan = get_plan_or_404(plan_id)
    data = request.get_json(silent=True) or {}

    code = (data.get("code") or "").strip()
    semester = (data.get("semester") or "").strip()
    if not code or not semester:
        abort(400, description="Both 'code' and 'semester' are required.")

    catalog = current_catalog()
    course = catalog.require(code)
    ledger = ledger_for_plan(plan, catalog)

    result = can_place(course, semester, ledger, current_overrides())
    if not result.ok:
        return jsonify(result.to_dict()), 409

    save_ledger(plan, ledger)
    body = result.to_dict()
    body["semester_credits"] = result.change.semester_credits
    return jsonify(body)


@plans_bp.route("/plans/<int:plan_id>/courses/<code>", methods=["DELETE"])
def remove_course(plan_id: int, code: str):
    plan = get_plan_or_404(plan_id)
    semester = (request.args.get("semester") or "").strip()
    if not semester:
        abort(400, description="Query parameter 'semester' is required.")

    ledger = ledger_for_plan(plan, current_catalog())
    result = can_remove(code, semester, ledger, current_overrides())
    if not result.ok:
        return jsonify(result.to_dict()), 409

    save_ledger(plan, ledger)
    body = result.to_dict()
    body["semester_credits"] = result.change.semester_credits
    return jsonify(body)


@plans_bp.route("/plans/<int:plan_id>/placements", methods=["DELETE"])
def reset_plan(plan_id: int):
    plan = get_plan_or_404(plan_id)
    ledger = ledger_for_plan(plan, current_catalog())
    reset_ledger(ledger)
    save_ledger(plan, ledger)
    return jsonify(plan_payload(plan, ledger))


@plans_bp.route("/plans/<int:plan_id>/semesters", methods=["GET"])
def list_semesters(plan_id: int):
    plan = get_plan_or_404(plan_id)
    return jsonify(
        [
            {"semester": s.name, "type": s.kind, "position": s.index + 1, "credit_cap": s.credit_cap}
            for s in slots_for_plan(plan)
        ]
    )
