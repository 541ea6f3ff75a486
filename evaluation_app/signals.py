from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from evaluation_app.models import Evaluation, EvaluationParticipant
from evaluation_app.services.evaluation_progress import sync_evaluation_completion


#-------------------------------------------
# Keep Evaluation.is_completed in step with its evaluators

@receiver(post_save, sender=EvaluationParticipant)
def _participant_saved(sender, instance: EvaluationParticipant, created, update_fields=None, **kwargs):
    if update_fields:
        uf = set(update_fields)
        # mail bookkeeping never changes completion
        if uf.issubset({"mail_sent_at", "reminder_sent_at"}):
            return
    sync_evaluation_completion(instance.evaluation)


@receiver(post_delete, sender=EvaluationParticipant)
def _participant_deleted(sender, instance: EvaluationParticipant, **kwargs):
    # the evaluation may be going away in the same cascade
    evaluation = Evaluation.objects.filter(pk=instance.evaluation_id).first()
    if evaluation is not None:
        sync_evaluation_completion(evaluation)
