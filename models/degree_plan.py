from datetime import datetime
from extensions import db


class DegreePlan(db.Model):
    __tablename__ = "degree_plan"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Student profile
    student_name = db.Column(db.String(120), nullable=True)
    student_id = db.Column(db.String(32), nullable=True)
    major = db.Column(db.String(64), nullable=True)
    specializations = db.Column(db.String(255), nullable=True)  # comma separated track keys

    # Semester range (academic-year anchors: Fall of that year opens it)
    start_term = db.Column(db.String(16), nullable=False, default="Fall")
    start_year = db.Column(db.Integer, nullable=False)
    end_term = db.Column(db.String(16), nullable=False, default="Summer")
    end_year = db.Column(db.Integer, nullable=False)

    total_credits_required = db.Column(db.Integer, nullable=False, default=0)

    # Bumped on every placement write; SQLAlchemy checks it in the UPDATE's WHERE clause
    version = db.Column(db.Integer, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=True)

    __mapper_args__ = {"version_id_col": version}

    # Children: cascade so a plan delete cleans everything
    placements = db.relationship(
        "PlanPlacement",
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlanPlacement.position",
        lazy=True,
    )

    def specialization_list(self) -> list[str]:
        return [s.strip() for s in (self.specializations or "").split(",") if s.strip()]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "student_name": self.student_name,
            "student_id": self.student_id,
            "major": self.major,
            "specializations": self.specialization_list(),
            "start_term": self.start_term,
            "start_year": self.start_year,
            "end_term": self.end_term,
            "end_year": self.end_year,
            "total_credits_required": self.total_credits_required,
            "version": self.version,
        }

    def __repr__(self) -> str:
        return f"<DegreePlan {self.name}>"
