from app import create_app
from extensions import db
from models.degree_plan import DegreePlan
from services.catalog_source import current_catalog, current_overrides, current_requirements
from services.degree_areas import build_areas
from services.generator import GeneratorOptions, generate_plan
from services.plan_store import save_ledger, slots_for_plan

PLAN_NAME = "Demo plan"

def main():
    app = create_app()
    with app.app_context():
        db.create_all()

        plan = DegreePlan.query.filter_by(name=PLAN_NAME).first()
        if plan is None:
            requirements = current_requirements()
            plan = DegreePlan(
                name=PLAN_NAME,
                student_name="Demo Student",
                major=requirements.code,
                specializations="ai",
                start_term="Fall",
                start_year=2024,
                end_term="Summer",
                end_year=2027,
                total_credits_required=requirements.total_credits,
            )
            db.session.add(plan)
            db.session.commit()

        print(f"Using DegreePlan id={plan.id}, name={plan.name!r}")

        catalog = current_catalog()
        requirements = current_requirements()
        generated = generate_plan(
            catalog,
            build_areas(requirements, catalog, plan.specialization_list()),
            GeneratorOptions(include_summer=True, max_summer_terms=2, start_year=plan.start_year),
            first_semester=requirements.first_semester,
            total_credits=plan.total_credits_required,
            slots=slots_for_plan(plan),
            overrides=current_overrides(),
        )
        rows = save_ledger(plan, generated.ledger)

        print(f"Status: {generated.status}, {generated.total_credits}/{generated.target_credits} credits, {rows} placements")
        for sem in generated.semesters():
            print(f"  {sem['semester']:<12} {sem['credits']:>3}  {', '.join(sem['courses'])}")
        for r in generated.residuals:
            print(f"  residual: {r.area} missing {r.missing_credits}")
        for hint in generated.hints:
            print(f"  hint: {hint}")


if __name__ == "__main__":
    main()
