from datetime import datetime, timedelta, timezone

import jwt
import pytest
from flask import current_app

from app import create_app
from models import (
    db, User, Course, CourseModule, Lesson, Enrolment, Quiz, Question, QuestionOption,
)
from utils.badge_service import seed_default_badges


class FixedClock:
    def __init__(self, start=datetime(2026, 1, 15, 9, 30)):
        self.current = start

    def now(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def notify(self, user_id, template_kind, payload):
        if self.fail:
            raise RuntimeError("SMTP server unavailable")
        self.sent.append((user_id, template_kind, payload))
        return True

    def kinds(self):
        return [kind for _, kind, _ in self.sent]


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(username=None):
        counter["n"] += 1
        username = username or f"learner{counter['n']}"
        user = User(username=username, email=f"{username}@example.com", full_name=username.title())
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def student(make_user):
    return make_user("alice")


@pytest.fixture
def make_course(app):
    """Course with its lessons spread over modules of two lessons each."""

    def _make_course(lesson_count, title="Python Basics"):
        course = Course(title=title)
        db.session.add(course)
        db.session.flush()

        lessons = []
        module = None
        for index in range(lesson_count):
            if index % 2 == 0:
                module = CourseModule(course_id=course.id, title=f"Module {index // 2 + 1}", order=index // 2)
                db.session.add(module)
                db.session.flush()
            lesson = Lesson(module_id=module.id, title=f"Lesson {index + 1}", order=index % 2)
            db.session.add(lesson)
            lessons.append(lesson)
        db.session.commit()
        return course, lessons

    return _make_course


@pytest.fixture
def enrol(app):
    def _enrol(user, course, progress=0):
        enrolment = Enrolment(student_id=user.id, course_id=course.id, progress=progress)
        db.session.add(enrolment)
        db.session.commit()
        return enrolment

    return _enrol


@pytest.fixture
def make_quiz(app):
    """
    ``questions`` is a list of (points, correct_index) pairs; each question
    gets three options and ``correct_index`` None means no correct option.
    """

    def _make_quiz(questions, passing_score=70, title="Checkpoint quiz"):
        quiz = Quiz(title=title, passing_score=passing_score)
        db.session.add(quiz)
        db.session.flush()
        for order, (points, correct_index) in enumerate(questions):
            question = Question(quiz_id=quiz.id, text=f"Question {order + 1}", points=points, order=order)
            db.session.add(question)
            db.session.flush()
            for option_index in range(3):
                db.session.add(QuestionOption(
                    question_id=question.id,
                    text=f"Option {option_index + 1}",
                    is_correct=option_index == correct_index,
                ))
        db.session.commit()
        return quiz

    return _make_quiz


@pytest.fixture
def badges(app):
    seed_default_badges()


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {make_token(user.id)}"}

    return _auth_headers


def make_token(user_id, expires_in=timedelta(hours=24)):
    """Token as the auth service issues it."""
    payload = {"exp": datetime.now(timezone.utc) + expires_in, "user_id": user_id}
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def correct_option_id(question):
    return next(o.id for o in question.options if o.is_correct)


def wrong_option_id(question):
    return next(o.id for o in question.options if not o.is_correct)
