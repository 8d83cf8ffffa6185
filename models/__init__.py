from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.users import User

from models.courses import Course, CourseModule
from models.course_lessons import Lesson
from models.enrolments import Enrolment
from models.lesson_progress import LessonCompletion

from models.quizzes import Quiz
from models.quiz_questions import Question, QuestionOption
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAnswer

from models.certificates import Certificate
from models.badges import Badge, UserBadge
