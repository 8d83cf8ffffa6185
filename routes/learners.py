from flask import Blueprint, jsonify, g, request

from classes.attempt_manager import QuizAttemptManager
from classes.certificate_issuer import CertificateIssuer
from classes.completion_manager import CompletionManager
from classes.errors import PipelineError
from classes.progress_manager import ProgressManager
from classes.validators import validate_answers, validate_id
from utils.badge_service import student_badges
from utils.email import MailNotifier
from utils.helpers import format_datetime
from utils.utils import login_required

learner_bp = Blueprint("learner", __name__)


@learner_bp.errorhandler(PipelineError)
def handle_pipeline_error(error):
    return jsonify(error.to_dict()), error.status_code


def current_student_id():
    return g.user.get("user_id")


#Mark a lesson complete
@learner_bp.route("/lessons/<int:lesson_id>/complete", methods=["POST"])
@login_required
def complete_lesson(lesson_id):
    manager = CompletionManager(notifier=MailNotifier())
    return jsonify(manager.complete_lesson(current_student_id(), lesson_id)), 200


@learner_bp.route("/courses/<int:course_id>/progress", methods=["GET"])
@login_required
def get_course_progress(course_id):
    progress = ProgressManager().get_course_progress(current_student_id(), course_id)
    return jsonify({"course_id": course_id, "progress": progress}), 200


@learner_bp.route("/courses/<int:course_id>/lesson-progress", methods=["GET"])
@login_required
def get_lesson_progress(course_id):
    rows = ProgressManager.lesson_progress(current_student_id(), course_id)
    return jsonify([row.to_dict() for row in rows]), 200


#Enrolments with freshly computed progress
@learner_bp.route("/enrolments", methods=["GET"])
@login_required
def get_enrolments():
    items = ProgressManager().enrolments_with_progress(current_student_id())
    return jsonify([
        {
            "course_id": item["enrolment"].course_id,
            "course_title": item["enrolment"].course.title,
            "enrolled_at": format_datetime(item["enrolment"].enrolled_at),
            "progress": item["progress"],
        }
        for item in items
    ]), 200


# Start a Quiz Attempt
@learner_bp.route("/quiz/<int:quiz_id>/start", methods=["POST"])
@login_required
def start_quiz(quiz_id):
    attempt = QuizAttemptManager().start_attempt(current_student_id(), quiz_id)
    return jsonify(attempt.to_dict()), 200


@learner_bp.route("/quiz/<int:quiz_id>/submit", methods=["POST"])
@login_required
def submit_quiz(quiz_id):
    data = request.get_json(silent=True) or {}
    attempt_id = validate_id("attempt_id", data.get("attempt_id"))
    answers = validate_answers(data.get("answers", []))

    attempt, result = QuizAttemptManager().submit_attempt(current_student_id(), quiz_id, attempt_id, answers)
    return jsonify({"attempt": attempt.to_dict(), "result": result.to_dict()}), 200


@learner_bp.route("/quiz/<int:quiz_id>/attempts", methods=["GET"])
@login_required
def get_quiz_attempts(quiz_id):
    attempts = QuizAttemptManager.list_attempts(current_student_id(), quiz_id)
    return jsonify([attempt.to_dict() for attempt in attempts]), 200


@learner_bp.route("/certificates/generate/<int:course_id>", methods=["POST"])
@login_required
def generate_certificate(course_id):
    manager = CompletionManager(notifier=MailNotifier())
    certificate, created = manager.request_certificate(current_student_id(), course_id)
    message = "Certificate generated" if created else "Certificate already exists"
    return jsonify({"message": message, "certificate": certificate.to_dict()}), 201 if created else 200


@learner_bp.route("/certificates/course/<int:course_id>", methods=["GET"])
@login_required
def get_course_certificate(course_id):
    certificate = CertificateIssuer.find(current_student_id(), course_id)
    if not certificate:
        return jsonify({"error": "Certificate not found"}), 404
    return jsonify(certificate.to_dict()), 200


@learner_bp.route("/certificates", methods=["GET"])
@login_required
def get_my_certificates():
    certificates = CertificateIssuer.list_for_student(current_student_id())
    return jsonify([certificate.to_dict() for certificate in certificates]), 200


# Public lookup, no login
@learner_bp.route("/certificates/verify/<string:code>", methods=["GET"])
def verify_certificate(code):
    certificate = CertificateIssuer.find_by_code(code)
    if not certificate:
        return jsonify({"valid": False}), 404
    return jsonify({"valid": True, "certificate": certificate.to_dict()}), 200


#Fetch user badges
@learner_bp.route("/badges", methods=["GET"])
@login_required
def get_user_badges():
    return jsonify(student_badges(current_student_id())), 200
