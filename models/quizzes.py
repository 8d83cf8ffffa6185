from models import db
from sqlalchemy.orm import relationship


class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    passing_score = db.Column(db.Integer, nullable=False, default=70)
    time_limit = db.Column(db.Integer, nullable=True)
    lesson_id = db.Column(db.Integer, db.ForeignKey("course_lessons.id"), nullable=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=True)

    questions = relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
        order_by="Question.order",
    )

    def to_definition(self):
        """Snapshot of the quiz as the scoring engine sees it."""
        from classes.quiz_scoring import QuizDefinition
        return QuizDefinition(
            id=self.id,
            passing_score=self.passing_score,
            questions=tuple(q.to_definition() for q in self.questions),
        )

    def __repr__(self):
        return f"<Quiz {self.title}>"
