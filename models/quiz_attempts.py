from models import db


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    started_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    score = db.Column(db.Integer, nullable=True)
    passed = db.Column(db.Boolean, nullable=True)
    # True while OPEN, NULL once CLOSED. NULLs never collide, so the unique
    # constraint below allows any number of closed attempts but one open one.
    open_slot = db.Column(db.Boolean, nullable=True, default=True)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    answers = db.relationship("QuizAnswer", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("student_id", "quiz_id", "open_slot", name="unique_open_attempt"),
    )

    @property
    def is_open(self):
        return self.completed_at is None

    @property
    def state(self):
        return "OPEN" if self.is_open else "CLOSED"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "quiz_id": self.quiz_id,
            "state": self.state,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "score": self.score,
            "passed": self.passed,
        }
