import logging

from django.db.models import Exists, OuterRef, Prefetch
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from evaluation_app.models import Evaluation, EvaluationParticipant, ParticipantRole
from evaluation_app.permissions import IsAdmin, report_access_error
from evaluation_app.serializers.evaluation_serializer import ReportSummarySerializer
from evaluation_app.services.mailer import Mailer
from evaluation_app.services.notifications import send_report
from evaluation_app.services.report_math import build_report, load_evaluation, participant_roster
from evaluation_app.views.base import positive_int

logger = logging.getLogger(__name__)


class ReportViewSet(viewsets.GenericViewSet):
    """
    • GET  /reports/                     → evaluations whose report the caller may read
    • GET  /reports/{id}/                → aggregated report
    • POST /reports/{id}/send-email/     → PDF report to the candidate (ADMIN)
    """
    serializer_class = ReportSummarySerializer
    results_key = "evaluations"

    def get_permissions(self):
        if self.action == "send_email":
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        participants = EvaluationParticipant.objects.select_related("user").order_by("id")
        qs = (Evaluation.objects
              .select_related("quiz")
              .prefetch_related(Prefetch("participants", queryset=participants))
              .order_by("-created_at"))

        user = self.request.user
        if user.role == "ADMIN":
            return qs

        # same rule as report_access_error, read from the caller's participant rows
        mine = EvaluationParticipant.objects.filter(evaluation=OuterRef("pk"), user=user)
        done_as_evaluator = mine.filter(participant_role=ParticipantRole.EVALUATOR, completed_at__isnull=False)
        as_candidate = mine.filter(participant_role=ParticipantRole.CANDIDAT)
        someone_done = EvaluationParticipant.objects.filter(
            evaluation=OuterRef("pk"),
            participant_role=ParticipantRole.EVALUATOR,
            completed_at__isnull=False,
        )
        return qs.filter(Exists(done_as_evaluator) | (Exists(as_candidate) & Exists(someone_done)))

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    def _load(self, pk):
        try:
            evaluation = load_evaluation(positive_int(pk, "evaluationId"))
        except Evaluation.DoesNotExist:
            raise NotFound("Evaluation not found.")
        if evaluation.quiz is None:
            raise NotFound("This evaluation has no quiz.")
        return evaluation

    def retrieve(self, request, pk=None):
        evaluation = self._load(pk)
        error = report_access_error(request.user, evaluation)
        if error:
            self.permission_denied(request, message=error)

        return Response({
            "evaluationId": evaluation.pk,
            "evaluationRef": evaluation.ref,
            "deadline": evaluation.deadline,
            "isCompleted": evaluation.is_completed,
            "participants": participant_roster(evaluation),
            "report": build_report(evaluation),
        })

    @action(detail=True, methods=["post"], url_path="send-email")
    def send_email(self, request, pk=None):
        evaluation = self._load(pk)

        pending = [p for p in evaluation.participants.all() if p.completed_at is None]
        if pending:
            return Response({
                "error": "Every participant must complete the evaluation before the report is sent.",
                "pendingParticipants": [p.pk for p in pending],
                "statusCode": status.HTTP_400_BAD_REQUEST,
            }, status=status.HTTP_400_BAD_REQUEST)

        candidate = evaluation.candidate
        email = request.data.get("candidatEmail") or (candidate.user.email if candidate else None)
        name = request.data.get("candidatName") or (candidate.user.name if candidate else None) or "Candidat"
        if not email:
            return Response({"error": "Candidate email is not available.",
                             "statusCode": status.HTTP_400_BAD_REQUEST},
                            status=status.HTTP_400_BAD_REQUEST)

        if not send_report(evaluation, email, name, Mailer()):
            return Response({"error": "The report email could not be sent.",
                             "statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR},
                            status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        logger.info(f"Report of {evaluation.ref} sent to {email}")
        return Response({"success": True, "message": f"Report sent to {email}."})
