from datetime import datetime
from extensions import db


class PlanSolution(db.Model):
    """Latest generator outcome for a plan (one row per plan)."""

    __tablename__ = "plan_solution"

    id = db.Column(db.Integer, primary_key=True)

    plan_id = db.Column(
        db.Integer,
        db.ForeignKey("degree_plan.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    status = db.Column(db.String(32), nullable=False)  # "complete" | "partial"
    total_credits = db.Column(db.Integer, nullable=False, default=0)
    target_credits = db.Column(db.Integer, nullable=False, default=0)

    # JSON text, one column per part of the GeneratedPlan
    semesters_json = db.Column(db.Text, nullable=False, default="[]")     # filled semesters in order
    residuals_json = db.Column(db.Text, nullable=False, default="[]")     # areas left below their minimum
    unscheduled_json = db.Column(db.Text, nullable=False, default="[]")   # codes no slot could take
    warnings_json = db.Column(db.Text, nullable=True)
    meta_json = db.Column(db.Text, nullable=True)                         # options, specializations, hints

    plan = db.relationship(
        "DegreePlan",
        backref=db.backref("solutions", cascade="all, delete-orphan", lazy="dynamic"),
    )

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    def __repr__(self) -> str:
        return f"<PlanSolution plan={self.plan_id} status={self.status} credits={self.total_credits}/{self.target_credits}>"
