import math

from django.db.models import Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from evaluation_app.models import (
    Answer, AnswerOption, Evaluation, EvaluationParticipant, ParticipantRole, Quiz,
)
from evaluation_app.serializers.answer_serializer import AnswerSerializer, SubmitAnswersSerializer
from evaluation_app.serializers.evaluation_serializer import CandidateEvaluationSerializer
from evaluation_app.serializers.quiz_serializer import QuestionSerializer, QuizListSerializer
from evaluation_app.services.answer_formatter import format_answers
from evaluation_app.services.answer_submission import AlreadyCompleted, submit_answers
from evaluation_app.views.base import positive_int

OTHER_CATEGORY = "AUTRE"
QUESTIONS_PER_PAGE = 5


class CandidateEvaluationViewSet(viewsets.GenericViewSet):
    """
    What a participant (evaluator or candidate) needs to fill in an evaluation:
    • GET  /candidate-evaluations/                         → my evaluations
    • GET  /candidate-evaluations/{id}/                    → one of them
    • GET  /candidate-evaluations/{id}/answers/            → answers given so far
    • GET  /candidate-evaluations/quiz/{quizId}/           → paginated questionnaire
    • POST /candidate-evaluations/participant/{pid}/       → save / submit answers
    """
    permission_classes = [IsAuthenticated]
    serializer_class = CandidateEvaluationSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = "evaluations"

    def get_queryset(self):
        participants = EvaluationParticipant.objects.select_related("user").order_by("id")
        return (Evaluation.objects
                .filter(participants__user=self.request.user)
                .distinct()
                .select_related("quiz")
                .prefetch_related(Prefetch("participants", queryset=participants))
                .order_by("-created_at"))

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request, pk=None):
        evaluation_id = positive_int(pk, "evaluationId")
        evaluation = get_object_or_404(Evaluation, pk=evaluation_id)
        if not request.user.is_admin and not evaluation.participants.filter(user=request.user).exists():
            self.permission_denied(request, message="You are not allowed to access this evaluation.")

        evaluation = (Evaluation.objects
                      .select_related("quiz")
                      .prefetch_related(Prefetch("participants",
                                                 queryset=EvaluationParticipant.objects.select_related("user")))
                      .get(pk=evaluation_id))
        return Response({"evaluation": self.get_serializer(evaluation).data})

    # ─── Answers given so far ────────────────────────────────

    @action(detail=True, methods=["get"], url_path="answers")
    def answers(self, request, pk=None):
        evaluation_id = positive_int(pk, "evaluationId")
        get_object_or_404(Evaluation, pk=evaluation_id)
        participants = EvaluationParticipant.objects.filter(
            evaluation_id=evaluation_id,
            participant_role__in=[ParticipantRole.EVALUATOR, ParticipantRole.CANDIDAT],
        )

        raw_participant = request.query_params.get("participantId")
        if raw_participant:
            participant = participants.filter(pk=positive_int(raw_participant, "participantId")).first()
            if participant is None:
                raise NotFound("Participant not found for this evaluation.")
            if participant.user_id != request.user.pk and not request.user.is_admin:
                self.permission_denied(request, message="You are not allowed to access these answers.")
        elif request.user.is_admin:
            participant = participants.order_by("id").first()
            if participant is None:
                raise NotFound("No participant found for this evaluation.")
        else:
            participant = participants.filter(user=request.user).order_by("id").first()
            if participant is None:
                self.permission_denied(request, message="You are not allowed to access this evaluation.")

        answers = (Answer.objects
                   .filter(participant=participant)
                   .select_related("question", "selected_option")
                   .prefetch_related(Prefetch("selected_options",
                                              queryset=AnswerOption.objects.select_related("option"))))
        answers = list(answers)
        return Response({
            "participantId": participant.pk,
            "completedAt": participant.completed_at,
            "answers": format_answers(answers),
            "raw": AnswerSerializer(answers, many=True).data,
        })

    # ─── Questionnaire ───────────────────────────────────────

    @action(detail=False, methods=["get"], url_path=r"quiz/(?P<quiz_id>[^/.]+)")
    def quiz(self, request, quiz_id=None):
        quiz = get_object_or_404(Quiz.objects.alive(), pk=positive_int(quiz_id, "quizId"))
        page = positive_int(request.query_params.get("page") or 1, "page")
        limit = positive_int(request.query_params.get("limit") or QUESTIONS_PER_PAGE, "limit")

        questions = list(quiz.questions.prefetch_related("options").order_by("order", "id"))
        # open-ended "AUTRE" questions close the questionnaire
        questions.sort(key=lambda q: q.category == OTHER_CATEGORY)
        total = len(questions)
        total_pages = math.ceil(total / limit)
        start = (page - 1) * limit

        candidate_name, is_candidate = None, False
        raw_participant = request.query_params.get("participantId")
        if raw_participant and str(raw_participant).isdigit() and int(raw_participant) > 0:
            participants = EvaluationParticipant.objects.select_related("evaluation").filter(pk=int(raw_participant))
            # someone else's participation reveals nothing
            if request.user.role != "ADMIN":
                participants = participants.filter(user=request.user)
            participant = participants.first()
            if participant is not None:
                is_candidate = participant.is_candidate
                names = [p.user.name or p.user.email
                         for p in (participant.evaluation.participants
                                   .filter(participant_role=ParticipantRole.CANDIDAT)
                                   .select_related("user"))]
                candidate_name = " et ".join(names) or None

        data = QuizListSerializer(quiz).data
        data.update({
            "questions": QuestionSerializer(questions[start:start + limit], many=True).data,
            "candidateName": candidate_name,
            "isCandidate": is_candidate,
            "pagination": {
                "currentPage": page,
                "totalPages": total_pages,
                "totalQuestions": total,
                "questionsPerPage": limit,
                "hasNextPage": page < total_pages,
                "hasPreviousPage": page > 1,
            },
        })
        return Response({"quiz": data})

    # ─── Submission ──────────────────────────────────────────

    @action(detail=False, methods=["post"], url_path=r"participant/(?P<participant_id>[^/.]+)")
    def submit(self, request, participant_id=None):
        participant_id = positive_int(participant_id, "participantId")
        serializer = SubmitAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        participant = (EvaluationParticipant.objects
                       .select_related("user", "evaluation")
                       .filter(pk=participant_id,
                               evaluation_id=data["evaluationId"],
                               participant_role__in=[ParticipantRole.EVALUATOR, ParticipantRole.CANDIDAT])
                       .first())
        if participant is None:
            raise NotFound("Participant not found for this evaluation.")
        if participant.user_id != request.user.pk and not request.user.is_admin:
            self.permission_denied(request, message="You can only submit your own answers.")

        try:
            saved = submit_answers(
                participant,
                data["answers"],
                is_draft=data["isDraft"],
                is_final_submit=data["isFinalSubmit"],
            )
        except AlreadyCompleted as exc:
            return Response({
                "error": "This evaluation has already been submitted.",
                "completedAt": exc.completed_at,
                "statusCode": status.HTTP_400_BAD_REQUEST,
            }, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "message": "Answers submitted." if data["isFinalSubmit"] else "Answers saved.",
            "participantId": participant.pk,
            "completedAt": participant.completed_at,
            "answers": AnswerSerializer(saved, many=True).data,
        }, status=status.HTTP_201_CREATED)
