from django.db.models import Prefetch
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from evaluation_app.filters import QuestionFilter
from evaluation_app.models import Option, Question, Quiz
from evaluation_app.serializers.quiz_serializer import (
    QuestionSerializer, QuizListSerializer, QuizSerializer,
)
from evaluation_app.views.base import ReadOnlyAuthFullAdminMixin


class QuizViewSet(ReadOnlyAuthFullAdminMixin, viewsets.ModelViewSet):
    """
    • GET    /quizzes/                 → paginated list
    • POST   /quizzes/                 → create, questions and options nested
    • GET    /quizzes/{id}/            → quiz with its questions
    • DELETE /quizzes/{id}/            → soft delete
    • GET    /quizzes/{id}/questions/  → questions of the quiz
    • POST   /quizzes/{id}/questions/  → add a question
    """
    search_fields = ["title", "description"]
    ordering_fields = ["created_at", "title"]
    results_key = "quizzes"

    def get_queryset(self):
        questions = Question.objects.order_by("order", "id").prefetch_related(
            Prefetch("options", queryset=Option.objects.order_by("id"))
        )
        return Quiz.objects.alive().prefetch_related(Prefetch("questions", queryset=questions))

    def get_serializer_class(self):
        if self.action == "list":
            return QuizListSerializer
        return QuizSerializer

    def destroy(self, request, *args, **kwargs):
        quiz = self.get_object()
        quiz.deleted_at = timezone.now()
        quiz.is_active = False
        quiz.save(update_fields=["deleted_at", "is_active", "updated_at"])
        return Response({"message": "Quiz deleted successfully."}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get", "post"], url_path="questions")
    def questions(self, request, pk=None):
        quiz = self.get_object()

        if request.method == "GET":
            qs = QuestionFilter(request.query_params, queryset=quiz.questions.all()).qs
            return Response({"questions": QuestionSerializer(qs, many=True).data})

        serializer = QuestionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if "order" not in serializer.validated_data:
            serializer.validated_data["order"] = quiz.questions.count() + 1
        question = serializer.save(quiz=quiz)
        return Response(QuestionSerializer(question).data, status=status.HTTP_201_CREATED)
