import logging

from rest_framework import mixins, viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from evaluation_app.models import EvaluationParticipant
from evaluation_app.permissions import IsAdmin
from evaluation_app.serializers.evaluation_serializer import ParticipantSerializer
from evaluation_app.services.mailer import Mailer
from evaluation_app.services import notifications

logger = logging.getLogger(__name__)


class ParticipantViewSet(mixins.RetrieveModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """
    ADMIN tools around a single participant: remove it, (re)send its
    invitation or a reminder, re-open a final submission.
    """
    permission_classes = [IsAdmin]
    serializer_class = ParticipantSerializer
    queryset = EvaluationParticipant.objects.select_related("user", "evaluation")

    def destroy(self, request, *args, **kwargs):
        participant = self.get_object()
        self.perform_destroy(participant)
        return Response({"message": "Participant removed successfully."}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="send-mail")
    def send_mail(self, request, pk=None):
        participant = self.get_object()
        if not notifications.send_invitation(participant, Mailer()):
            return Response({"error": "The invitation email could not be sent.", "statusCode": 502},
                            status=status.HTTP_502_BAD_GATEWAY)
        participant.refresh_from_db()
        return Response({
            "message": "Invitation sent.",
            "participant": ParticipantSerializer(participant).data,
        })

    @action(detail=True, methods=["post"], url_path="send-reminder")
    def send_reminder(self, request, pk=None):
        participant = self.get_object()
        if participant.mail_sent_at is None:
            return Response({"error": "The invitation has not been sent to this participant yet.",
                             "statusCode": status.HTTP_400_BAD_REQUEST},
                            status=status.HTTP_400_BAD_REQUEST)
        if participant.completed_at is not None:
            return Response({"error": "This participant has already completed the evaluation.",
                             "statusCode": status.HTTP_400_BAD_REQUEST},
                            status=status.HTTP_400_BAD_REQUEST)
        if not notifications.send_reminder(participant, Mailer()):
            return Response({"error": "The reminder email could not be sent.", "statusCode": 502},
                            status=status.HTTP_502_BAD_GATEWAY)
        participant.refresh_from_db()
        return Response({
            "message": "Reminder sent.",
            "participant": ParticipantSerializer(participant).data,
        })

    @action(detail=True, methods=["post"], url_path="reset-completion")
    def reset_completion(self, request, pk=None):
        participant = self.get_object()
        participant.completed_at = None
        participant.save(update_fields=["completed_at"])
        logger.info(f"Completion of participant {participant.pk} reset by {request.user.email}")
        return Response({
            "message": "Completion reset.",
            "participant": ParticipantSerializer(participant).data,
        })
