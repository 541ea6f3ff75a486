"""
Outgoing email for evaluations: invitations, reminders, answer summaries
and the final report. Every helper takes a `Mailer` and reports success as a
bool; mail failures are logged by the mailer and never raised here.
"""
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.utils import generate_password
from evaluation_app.models import EvaluationParticipant, ParticipantRole
from evaluation_app.services import pdf
from evaluation_app.services.answer_formatter import format_answers
from evaluation_app.services.mailer import Mailer
from evaluation_app.services.report_math import build_report, report_statistics

logger = logging.getLogger(__name__)


def _candidate_name(evaluation):
    candidate = (evaluation.participants
                 .filter(participant_role=ParticipantRole.CANDIDAT)
                 .select_related("user")
                 .first())
    return candidate.user.name if candidate else None


def login_url():
    return f"{settings.FRONTEND_URL}/auth/login"


def evaluation_url(evaluation):
    return f"{settings.FRONTEND_URL}/modules/evaluations/{evaluation.pk}"


# ─── Invitations ─────────────────────────────────────────

def send_invitation(participant, mailer):
    """
    Invite one participant. First-time users get a new temporary password
    (stored hashed, replacing the previous one) printed in the email.
    """
    user = participant.user
    evaluation = participant.evaluation

    temporary_password = None
    if user.is_first_login:
        temporary_password = generate_password(12)
        user.set_password(temporary_password)
        user.save(update_fields=["password", "updated_at"])

    sent = mailer.send(
        user.email,
        f"Invitation à l'évaluation {evaluation.ref}",
        "invitation",
        {
            "name": user.name,
            "email": user.email,
            "ref": evaluation.ref,
            "deadline": evaluation.deadline,
            "is_candidate": participant.is_candidate,
            "candidate_name": _candidate_name(evaluation) or "le candidat",
            "login_url": login_url(),
            "temporary_password": temporary_password,
        },
    )
    if sent:
        participant.mail_sent_at = timezone.now()
        participant.save(update_fields=["mail_sent_at"])
    return sent


def notify_participant_added(participant, mailer):
    """
    Invitations due after `participant` joined its evaluation.

    A candidate is invited at once and releases every evaluator still
    waiting for their first email; an evaluator is only invited once the
    evaluation has a candidate. Returns the participants that were emailed.
    """
    evaluation = participant.evaluation
    invited = []

    if participant.is_candidate:
        if send_invitation(participant, mailer):
            invited.append(participant)
        pending = (evaluation.participants
                   .filter(participant_role=ParticipantRole.EVALUATOR, mail_sent_at__isnull=True)
                   .select_related("user", "evaluation"))
        for evaluator in pending:
            if send_invitation(evaluator, mailer):
                invited.append(evaluator)
        return invited

    has_candidate = evaluation.participants.filter(participant_role=ParticipantRole.CANDIDAT).exists()
    if not has_candidate:
        logger.info(f"Invitation for participant {participant.pk} deferred until {evaluation.ref} has a candidate")
        return invited

    if send_invitation(participant, mailer):
        invited.append(participant)
    return invited


# ─── Reminders ───────────────────────────────────────────

def send_reminder(participant, mailer, candidate_name=None):
    user = participant.user
    evaluation = participant.evaluation
    candidate_name = candidate_name or _candidate_name(evaluation) or "le candidat"

    sent = mailer.send(
        user.email,
        f"Rappel: Evaluation de {candidate_name} en attente",
        "reminder",
        {
            "name": user.name,
            "ref": evaluation.ref,
            "deadline": evaluation.deadline,
            "is_candidate": participant.is_candidate,
            "candidate_name": candidate_name,
            "evaluation_url": evaluation_url(evaluation),
        },
    )
    if sent:
        participant.reminder_sent_at = timezone.now()
        participant.save(update_fields=["reminder_sent_at"])
    return sent


# ─── Completion ──────────────────────────────────────────

def send_answers_summary(participant_id, mailer=None):
    """
    Email a participant the PDF of their submitted answers. Best effort:
    a rendering or delivery failure is logged and reported as False.
    """
    participant = (EvaluationParticipant.objects
                   .select_related("user", "evaluation")
                   .prefetch_related("answers__question", "answers__selected_option",
                                     "answers__selected_options__option")
                   .filter(pk=participant_id)
                   .first())
    if participant is None:
        logger.warning(f"Answer summary skipped: participant {participant_id} no longer exists")
        return False

    evaluation = participant.evaluation
    candidate_name = _candidate_name(evaluation) or participant.user.name
    try:
        content = pdf.render_answers_pdf(
            evaluation_ref=evaluation.ref,
            candidate_name=candidate_name,
            evaluator_name=participant.user.name,
            completed_at=participant.completed_at,
            rows=format_answers(participant.answers.all()),
        )
    except Exception as exc:
        logger.warning(f"Answer summary PDF for participant {participant_id} failed: {exc}")
        return False

    mailer = mailer or Mailer()
    return mailer.send(
        participant.user.email,
        f"Vos réponses à l'évaluation {evaluation.ref}",
        "answers_summary",
        {
            "name": participant.user.name,
            "ref": evaluation.ref,
            "is_candidate": participant.is_candidate,
            "candidate_name": candidate_name,
        },
        attachments=[(f"Evaluation_{evaluation.ref}.pdf", content, "application/pdf")],
    )


def schedule_answers_summary(participant):
    """Send the answer summary once the surrounding transaction has committed."""
    participant_id = participant.pk
    transaction.on_commit(lambda: send_answers_summary(participant_id))


def send_report(evaluation, to, name, mailer):
    """Render the full report PDF for `evaluation` (loaded via `load_evaluation`) and email it."""
    report = build_report(evaluation)
    content = pdf.render_report_pdf(
        evaluation_ref=evaluation.ref,
        deadline=evaluation.deadline,
        candidate_name=name,
        statistics=report_statistics(evaluation, report),
    )
    return mailer.send(
        to,
        f"Votre rapport d'évaluation - {evaluation.ref}",
        "report",
        {"name": name, "ref": evaluation.ref},
        attachments=[(f"Rapport_{evaluation.ref}.pdf", content, "application/pdf")],
    )


# ─── Accounts ────────────────────────────────────────────

def send_password_reset(user, token, mailer):
    return mailer.send(
        user.email,
        "Réinitialisation de votre mot de passe",
        "password_reset",
        {
            "name": user.name,
            "reset_link": f"{settings.FRONTEND_URL}/auth/reset-password?token={token.token}",
            "valid_minutes": settings.PASSWORD_RESET_TIMEOUT_MINUTES,
        },
    )
