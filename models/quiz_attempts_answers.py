from models import db


class QuizAnswer(db.Model):
    __tablename__ = "quiz_answers"

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("quiz_attempts.id"), nullable=False)
    question_id = db.Column(db.Integer, nullable=False)
    option_id = db.Column(db.Integer, nullable=False)

    attempt = db.relationship("QuizAttempt", back_populates="answers")

    __table_args__ = (
        db.UniqueConstraint("attempt_id", "question_id", name="unique_attempt_question"),
    )
