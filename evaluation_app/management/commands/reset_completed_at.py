# evaluation_app/management/commands/reset_completed_at.py
from django.core.management.base import BaseCommand, CommandError

from evaluation_app.models import EvaluationParticipant, ParticipantRole


class Command(BaseCommand):
    help = "Re-open evaluator submissions that were marked completed by mistake."

    def add_arguments(self, parser):
        parser.add_argument("participant_ids", nargs="*", type=int)
        parser.add_argument("--evaluation", type=int, help="Reset every evaluator of this evaluation.")

    def handle(self, *args, **options):
        ids = options["participant_ids"]
        evaluation_id = options["evaluation"]
        if not ids and evaluation_id is None:
            raise CommandError("Give participant ids or --evaluation ID.")

        qs = EvaluationParticipant.objects.filter(
            participant_role=ParticipantRole.EVALUATOR,
            completed_at__isnull=False,
        )
        if ids:
            qs = qs.filter(pk__in=ids)
        if evaluation_id is not None:
            qs = qs.filter(evaluation_id=evaluation_id)

        count = 0
        # one save per row so evaluation completion follows
        for participant in qs.select_related("evaluation"):
            participant.completed_at = None
            participant.save(update_fields=["completed_at"])
            count += 1

        self.stdout.write(self.style.SUCCESS(f"{count} submission(s) reset."))
