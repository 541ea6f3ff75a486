from rest_framework.permissions import BasePermission, SAFE_METHODS

from evaluation_app.models import EvaluationParticipant, ParticipantRole


class IsAdmin(BasePermission):
    message = "Administrator access required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.role == "ADMIN")


class ReadOnlyOrAdmin(BasePermission):
    """
    - SAFE methods (GET / HEAD / OPTIONS) → every authenticated user.
    - Mutating methods (POST / PUT / PATCH / DELETE) → Admin only.
    """
    message = "Only administrators can modify this resource."

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.role == "ADMIN"


# ─── Report access ───────────────────────────────────────

EVALUATOR_NOT_DONE = "You must complete your evaluation before viewing this report."
NO_EVALUATOR_DONE = "The report is not available yet: no evaluator has completed the evaluation."
NOT_A_PARTICIPANT = "You are not allowed to access this report."


def report_access_error(user, evaluation):
    """
    None when `user` may read the report of `evaluation`, otherwise the
    message explaining why not.

    ADMIN always; an EVALUATOR participant once they completed; the
    CANDIDAT participant once at least one evaluator completed.
    """
    if user.role == "ADMIN":
        return None

    participations = list(EvaluationParticipant.objects.filter(evaluation=evaluation, user=user))
    if not participations:
        return NOT_A_PARTICIPANT

    as_evaluator = [p for p in participations if p.participant_role == ParticipantRole.EVALUATOR]
    if any(p.completed_at is not None for p in as_evaluator):
        return None

    if any(p.participant_role == ParticipantRole.CANDIDAT for p in participations):
        someone_done = EvaluationParticipant.objects.filter(
            evaluation=evaluation,
            participant_role=ParticipantRole.EVALUATOR,
            completed_at__isnull=False,
        ).exists()
        return None if someone_done else NO_EVALUATOR_DONE

    return EVALUATOR_NOT_DONE
