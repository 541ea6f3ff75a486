from rest_framework import mixins, viewsets, status
from rest_framework.response import Response

from evaluation_app.filters import QuestionFilter
from evaluation_app.models import Question
from evaluation_app.serializers.quiz_serializer import QuestionSerializer
from evaluation_app.views.base import ReadOnlyAuthFullAdminMixin


class QuestionViewSet(
    ReadOnlyAuthFullAdminMixin,
    mixins.ListModelMixin, mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin, mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
    ):
    """
    • GET    /questions/?quiz_id=&category=&type=  → filtered list
    • GET    /questions/{id}/
    • PUT    /questions/{id}/  → update; `options` replaces the option list
    • DELETE /questions/{id}/
    Questions are created under /quizzes/{id}/questions/.
    """
    serializer_class = QuestionSerializer
    filterset_class = QuestionFilter
    search_fields = ["text", "category"]
    results_key = "questions"

    def get_queryset(self):
        return (Question.objects
                .filter(quiz__deleted_at__isnull=True)
                .prefetch_related("options")
                .order_by("quiz_id", "order", "id"))

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response({"message": "Question deleted successfully."}, status=status.HTTP_200_OK)
