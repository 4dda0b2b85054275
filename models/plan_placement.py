from extensions import db


class PlanPlacement(db.Model):
    __tablename__ = "plan_placement"

    id = db.Column(db.Integer, primary_key=True)

    # Ownership
    plan_id = db.Column(
        db.Integer,
        db.ForeignKey("degree_plan.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    semester_name = db.Column(db.String(32), nullable=False)  # "Spring 2025"
    # chronological order within the plan; restores replay rows in this order
    position = db.Column(db.Integer, nullable=False, default=0)
    course_code = db.Column(db.String(32), nullable=False)  # normalized code

    plan = db.relationship("DegreePlan", back_populates="placements")

    # a course sits in at most one semester of a plan
    __table_args__ = (
        db.UniqueConstraint("plan_id", "course_code", name="uq_plan_placement_course"),
    )

    def __repr__(self) -> str:
        return f"<PlanPlacement plan={self.plan_id} {self.course_code} @ {self.semester_name}>"
