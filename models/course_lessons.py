from sqlalchemy.orm import relationship
from models import db


class Lesson(db.Model):
    __tablename__ = "course_lessons"

    id = db.Column(db.Integer, primary_key=True)
    module_id = db.Column(db.Integer, db.ForeignKey("course_modules.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    module = relationship("CourseModule", back_populates="lessons")

    def __repr__(self):
        return f"<Lesson {self.title} (Module ID {self.module_id})>"
