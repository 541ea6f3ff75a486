from django.utils import timezone

from evaluation_app.models import Evaluation, ParticipantRole


def evaluation_progress(participants):
    """
    Completion figures over the EVALUATOR participants of an evaluation.
    Works on any iterable of participants (prefetched lists included).
    """
    evaluators = [p for p in participants if p.participant_role == ParticipantRole.EVALUATOR]
    completed = sum(1 for p in evaluators if p.completed_at is not None)
    count = len(evaluators)
    return {
        "evaluatorsCount": count,
        "completedEvaluators": completed,
        "progressPercentage": round(completed / count * 100) if count else 0,
    }


def sync_evaluation_completion(evaluation: Evaluation, *, persist: bool = True) -> bool:
    """
    An evaluation is complete once it has evaluators and all of them have
    submitted. Keeps `is_completed` / `completed_at` in line with that.
    """
    progress = evaluation_progress(evaluation.participants.all())
    done = progress["evaluatorsCount"] > 0 and progress["completedEvaluators"] == progress["evaluatorsCount"]

    if done == evaluation.is_completed:
        return done

    evaluation.is_completed = done
    evaluation.completed_at = timezone.now() if done else None
    if persist:
        Evaluation.objects.filter(pk=evaluation.pk).update(
            is_completed=evaluation.is_completed,
            completed_at=evaluation.completed_at,
        )
    return done
