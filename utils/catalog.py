from models import db
from models.badges import Badge
from models.courses import Course, CourseModule
from models.course_lessons import Lesson
from models.quizzes import Quiz


def get_course(course_id):
    return db.session.get(Course, course_id)


def get_quiz(quiz_id):
    return db.session.get(Quiz, quiz_id)


def course_lesson_ids(course_id):
    """Lesson ids of a course, module order first then lesson order."""
    rows = (
        db.session.query(Lesson.id)
        .join(CourseModule, CourseModule.id == Lesson.module_id)
        .filter(CourseModule.course_id == course_id)
        .order_by(CourseModule.order, CourseModule.id, Lesson.order, Lesson.id)
        .all()
    )
    return [row.id for row in rows]


def lesson_course_id(lesson_id):
    row = (
        db.session.query(CourseModule.course_id)
        .join(Lesson, Lesson.module_id == CourseModule.id)
        .filter(Lesson.id == lesson_id)
        .first()
    )
    return row.course_id if row else None


def find_badge(name):
    return Badge.query.filter_by(name=name).first()
