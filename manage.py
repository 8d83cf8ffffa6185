import click
from flask.cli import with_appcontext

from utils.badge_service import backfill_course_completion_badges, seed_default_badges
from utils.email import MailNotifier


@click.command("seed-badges")
@with_appcontext
def seed_badges_command():
    """Create the default badge catalog entries that are missing."""
    created = seed_default_badges()
    if created:
        for name in created:
            click.echo(f"  - {name}")
    click.echo(f"Badges seeded ({len(created)} new).")


@click.command("backfill-badges")
@click.option("--notify/--no-notify", default=False, help="Email learners about newly awarded badges.")
@with_appcontext
def backfill_badges_command(notify):
    """Re-run the course completion badge rules for every learner with a finished course."""
    notifier = MailNotifier() if notify else None
    results = backfill_course_completion_badges(notifier=notifier)
    awarded = 0
    for student_id, badges in results.items():
        for badge in badges:
            click.echo(f"  user {student_id}: awarded {badge['name']}")
            awarded += 1
    click.echo(f"Backfill complete: checked {len(results)} learners, awarded {awarded} badges.")


def register_commands(app):
    app.cli.add_command(seed_badges_command)
    app.cli.add_command(backfill_badges_command)
