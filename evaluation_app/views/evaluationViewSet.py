import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from accounts.serializers.user_serializer import ensure_unique_contact
from accounts.utils import generate_password
from evaluation_app.exceptions import Conflict
from evaluation_app.filters import EvaluationFilter
from evaluation_app.models import Evaluation, EvaluationParticipant, ParticipantRole
from evaluation_app.permissions import IsAdmin
from evaluation_app.serializers.evaluation_serializer import (
    AddParticipantSerializer, EvaluationSerializer, ParticipantSerializer,
)
from evaluation_app.services.mailer import Mailer
from evaluation_app.services.notifications import notify_participant_added

logger = logging.getLogger(__name__)
User = get_user_model()


class EvaluationViewSet(viewsets.ModelViewSet):
    """
    Permissions
    -----------
    • ADMIN → full CRUD, participant management.
    • Participants reach their evaluations through /candidate-evaluations/
      and /reports/ instead.
    """
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    permission_classes = [IsAdmin]
    serializer_class = EvaluationSerializer
    filterset_class = EvaluationFilter
    search_fields = ["ref"]
    ordering_fields = ["created_at", "deadline", "ref"]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = "evaluations"

    def get_queryset(self):
        participants = EvaluationParticipant.objects.select_related("user").order_by("id")
        return (Evaluation.objects
                .select_related("quiz")
                .prefetch_related(Prefetch("participants", queryset=participants)))

    def update(self, request, *args, **kwargs):
        if not request.data:
            return Response({"error": "No data to update", "statusCode": status.HTTP_400_BAD_REQUEST},
                            status=status.HTTP_400_BAD_REQUEST)
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        ref = instance.ref
        # participants and answers go with it
        with transaction.atomic():
            instance.delete()
        logger.info(f"Evaluation {ref} deleted by {request.user.email}")
        return Response({"message": "Evaluation deleted successfully."}, status=status.HTTP_200_OK)

    # ─── Participants ────────────────────────────────────────

    @action(detail=False, methods=["post"], url_path="new/participant")
    def add_participant(self, request):
        serializer = AddParticipantSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        evaluation = get_object_or_404(Evaluation, pk=data["evaluationId"])

        with transaction.atomic():
            user = self._participant_user(data, serializer.user_role)
            if EvaluationParticipant.objects.filter(
                evaluation=evaluation, user=user, participant_role=data["role"]
            ).exists():
                raise Conflict("This user is already a participant of the evaluation with this role.")

            participant = EvaluationParticipant.objects.create(
                evaluation=evaluation,
                user=user,
                participant_role=data["role"],
                evaluator_type=data.get("evaluatorType"),
            )

        participant = (EvaluationParticipant.objects
                       .select_related("user", "evaluation")
                       .get(pk=participant.pk))
        invited = notify_participant_added(participant, Mailer())
        participant.refresh_from_db()

        return Response({
            "message": "Participant added successfully.",
            "participant": ParticipantSerializer(participant).data,
            "invited": [p.pk for p in invited],
        }, status=status.HTTP_201_CREATED)

    def _participant_user(self, data, role):
        """Existing account for the email (deleted ones are restored), else a new one."""
        user = User.all_objects.filter(email__iexact=data["email"]).first()
        if user is not None:
            if user.deleted_at is not None:
                user.deleted_at = None
                user.is_active = True
                user.save(update_fields=["deleted_at", "is_active", "updated_at"])
                logger.info(f"Restored deleted account {user.email} as participant")
            return user

        phone = data.get("phone") or None
        ensure_unique_contact(phone=phone)
        user = User(
            name=data["name"],
            email=data["email"],
            phone=phone,
            post=data.get("post") or "",
            role=role,
            is_first_login=True,
        )
        # real password is issued with the invitation
        user.set_password(generate_password(16))
        user.save()
        return user

    @action(detail=True, methods=["get"], url_path="participants")
    def participants(self, request, pk=None):
        evaluation = self.get_object()
        data = ParticipantSerializer(evaluation.participants.all(), many=True).data
        return Response({"participants": data})

    @action(detail=True, methods=["get"], url_path="evaluators")
    def evaluators(self, request, pk=None):
        evaluation = self.get_object()
        evaluators = [p for p in evaluation.participants.all()
                      if p.participant_role == ParticipantRole.EVALUATOR]
        return Response({"evaluators": ParticipantSerializer(evaluators, many=True).data})
