from models import db
from sqlalchemy.orm import relationship


class Certificate(db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    issued_at = db.Column(db.DateTime, nullable=False)
    verification_code = db.Column(db.String(64), nullable=False, unique=True)

    course = relationship("Course")
    student = relationship("User")

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="unique_student_certificate"),
    )

    def __repr__(self):
        return f"<Certificate {self.verification_code}>"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "course_title": self.course.title if self.course else None,
            "issued_at": self.issued_at.isoformat(),
            "verification_code": self.verification_code,
        }
