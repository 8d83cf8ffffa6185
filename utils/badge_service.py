import logging

from models import db, Badge, UserBadge
from models.enrolments import Enrolment
from utils import catalog
from utils.clock import system_clock
from utils.email import BADGE_EARNED, notify_safely
from utils.helpers import insert_unique

logger = logging.getLogger(__name__)

# (completed courses needed, badge name)
COURSE_COMPLETION_BADGES = (
    (1, "First Step"),
    (5, "Dedicated Learner"),
)

DEFAULT_BADGES = (
    {
        "name": "First Step",
        "icon": "🌱",
        "description": "Completed your first course!",
        "criteria": "complete_1_course",
        "points": 50,
    },
    {
        "name": "Dedicated Learner",
        "icon": "📚",
        "description": "Completed 5 courses.",
        "criteria": "complete_5_courses",
        "points": 200,
    },
    {
        "name": "Fast Learner",
        "icon": "⚡",
        "description": "Completed a course in record time!",
        "criteria": "manual",
        "points": 150,
    },
)


def _find_user_badge(student_id, badge_id):
    return UserBadge.query.filter_by(student_id=student_id, badge_id=badge_id).first()


def award_badge(student_id, badge_name, notifier=None, clock=None):
    """
    Grant ``badge_name`` once. Returns the badge dict when this call created
    the award, None when the badge is unknown or already held.
    """
    badge = catalog.find_badge(badge_name)
    if not badge:
        logger.info("Badge %r not in catalog; skipping award for user %s", badge_name, student_id)
        return None

    if _find_user_badge(student_id, badge.id):
        return None

    clock = clock or system_clock
    _, created = insert_unique(
        UserBadge(student_id=student_id, badge_id=badge.id, earned_at=clock.now()),
        lambda: _find_user_badge(student_id, badge.id),
    )
    if not created:
        return None

    logger.info("Awarded badge %r to user %s", badge.name, student_id)
    notify_safely(notifier, student_id, BADGE_EARNED, {
        "badge_name": badge.name,
        "badge_icon": badge.icon,
        "points": badge.points,
    })
    return badge.to_dict()


def evaluate_course_completion_badges(student_id, notifier=None, clock=None):
    """Check every rule on each run so a re-run after data fixes converges."""
    badges = []
    completed_courses = Enrolment.query.filter_by(student_id=student_id, progress=100).count()

    for threshold, badge_name in COURSE_COMPLETION_BADGES:
        if completed_courses >= threshold:
            b = award_badge(student_id, badge_name, notifier=notifier, clock=clock)
            if b: badges.append(b)
    return badges


def backfill_course_completion_badges(notifier=None, clock=None):
    """Run the cascade for every student with a finished course. Returns {student_id: [badges]}."""
    student_ids = [
        row.student_id
        for row in (
            db.session.query(Enrolment.student_id)
            .filter(Enrolment.progress == 100)
            .distinct()
            .order_by(Enrolment.student_id)
            .all()
        )
    ]
    return {
        student_id: evaluate_course_completion_badges(student_id, notifier=notifier, clock=clock)
        for student_id in student_ids
    }


def seed_default_badges():
    """Insert the default catalog entries that are missing; existing ones are left untouched."""
    created = []
    for spec in DEFAULT_BADGES:
        if catalog.find_badge(spec["name"]):
            continue
        _, was_created = insert_unique(Badge(**spec), lambda name=spec["name"]: catalog.find_badge(name))
        if was_created:
            created.append(spec["name"])
    return created


def student_badges(student_id):
    user_badges = (
        UserBadge.query
        .filter_by(student_id=student_id)
        .join(Badge)
        .order_by(UserBadge.earned_at, UserBadge.id)
        .all()
    )
    return [
        {
            "name": ub.badge.name,
            "description": ub.badge.description,
            "icon": ub.badge.icon,
            "points": ub.badge.points,
            "earned_at": ub.earned_at.isoformat(),
        }
        for ub in user_badges
    ]
