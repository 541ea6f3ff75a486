import logging
import threading

from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

from evaluation_app.models import EvaluationParticipant, ParticipantRole, SystemConfig
from evaluation_app.services.mailer import Mailer
from evaluation_app.services.notifications import send_reminder

logger = logging.getLogger(__name__)


def due_participants(now=None):
    """
    Participants owed a reminder: already emailed at least once, not done,
    on an evaluation that is still open and not past its deadline.
    """
    now = now or timezone.now()
    return (EvaluationParticipant.objects
            .filter(mail_sent_at__isnull=False,
                    completed_at__isnull=True,
                    evaluation__is_completed=False,
                    evaluation__deadline__gte=now)
            .select_related("user", "evaluation")
            .order_by("evaluation_id", "id"))


def run_sweep(mailer=None, *, force=False, now=None):
    """
    One reminder pass. Honours SystemConfig (enabled flag and minimum
    interval since the last pass) unless `force`. Returns how many
    reminders went out, or None when the pass was skipped.
    """
    now = now or timezone.now()
    config = SystemConfig.load()

    if not force:
        if not config.reminder_enabled:
            logger.debug("Reminder sweep skipped: reminders disabled")
            return None
        if config.last_reminder_check and now - config.last_reminder_check < config.reminder_interval:
            logger.debug("Reminder sweep skipped: interval not elapsed")
            return None

    mailer = mailer or Mailer()
    candidates = {}
    sent = 0
    for participant in due_participants(now):
        evaluation_id = participant.evaluation_id
        if evaluation_id not in candidates:
            candidate = (EvaluationParticipant.objects
                         .filter(evaluation_id=evaluation_id, participant_role=ParticipantRole.CANDIDAT)
                         .select_related("user")
                         .first())
            candidates[evaluation_id] = candidate.user.name if candidate else None

        candidate_name = candidates[evaluation_id]
        if candidate_name is None:
            logger.debug(f"No candidate on evaluation {evaluation_id}, no reminder")
            continue
        if not participant.user.email:
            continue
        if send_reminder(participant, mailer, candidate_name=candidate_name):
            sent += 1

    config.last_reminder_check = now
    config.save(update_fields=["last_reminder_check", "updated_at"])
    logger.info(f"Reminder sweep done: {sent} reminder(s) sent")
    return sent


class ReminderService:
    """
    Background thread calling `run_sweep` every `interval` seconds.

        service = ReminderService()
        service.start()
        ...
        service.stop()
    """

    def __init__(self, interval=None, mailer_factory=Mailer):
        self.interval = interval or settings.REMINDER_SWEEP_SECONDS
        self.mailer_factory = mailer_factory
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="reminder-sweep", daemon=True)
        self._thread.start()
        logger.info(f"Reminder service started (every {self.interval}s)")

    def stop(self, timeout=None):
        if not self.running:
            return
        self._stop.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Reminder service stopped")

    def tick(self):
        """Run one sweep; failures are logged so the loop keeps going."""
        close_old_connections()
        try:
            return run_sweep(self.mailer_factory())
        except Exception:
            logger.exception("Reminder sweep failed")
            return None
        finally:
            close_old_connections()

    def _loop(self):
        while not self._stop.is_set():
            self.tick()
            self._stop.wait(self.interval)
