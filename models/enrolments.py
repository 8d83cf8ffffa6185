from models import db
from sqlalchemy.orm import relationship


class Enrolment(db.Model):
    __tablename__ = 'enrolments'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    # Last computed percentage. A cache only; lesson_progress rows are the source of truth.
    progress = db.Column(db.Integer, default=0, nullable=False)

    student = relationship("User", backref="enrolments")
    course = relationship("Course", backref="enrolments")

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="unique_student_course"),
    )

    def __repr__(self):
        return f"<Enrolment Student {self.student_id} Course {self.course_id}>"
