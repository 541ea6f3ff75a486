import pytest
from datetime import timedelta
from uuid import uuid4
from django.utils import timezone
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from evaluation_app.models import (
    Quiz, Question, Option, Evaluation, EvaluationParticipant,
    QuestionType, ParticipantRole, EvaluatorType,
)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_user(db):
    User = get_user_model()
    def _create_user(**kw):
        email = kw.pop("email", None) or f"{uuid4().hex[:8]}@test.local"
        data = {
            "username": email,
            "email": email,
            "password": "pass12345",
            "name": "Test User",
            "role": "EVALUATOR",
            "is_first_login": False,
        }
        data.update(kw)
        return User.objects.create_user(**data)
    return _create_user


@pytest.fixture
def admin_account(create_user):
    return create_user(role="ADMIN", name="Admin")


@pytest.fixture
def create_quiz(db):
    """
    Quiz with one question per type, in this order:
    SCALE, SINGLE_CHOICE (values 1..7), TEXT, MULTIPLE_CHOICE.
    """
    def _create_quiz(**kw):
        quiz = Quiz.objects.create(title=kw.pop("title", "Leadership"), **kw)
        Question.objects.create(quiz=quiz, text="Scale", type=QuestionType.SCALE,
                                category="Communication", order=1)
        single = Question.objects.create(quiz=quiz, text="Single", type=QuestionType.SINGLE_CHOICE,
                                         category="Communication", order=2)
        for i in range(1, 8):
            Option.objects.create(question=single, text=str(i), value=i)
        Question.objects.create(quiz=quiz, text="Open", type=QuestionType.TEXT,
                                category="AUTRE", order=3)
        multi = Question.objects.create(quiz=quiz, text="Multi", type=QuestionType.MULTIPLE_CHOICE,
                                        category="Vision stratégique", order=4)
        for label in ("A", "B", "C"):
            Option.objects.create(question=multi, text=label, value=0)
        return quiz
    return _create_quiz


@pytest.fixture
def create_evaluation(db, create_quiz):
    def _create_evaluation(**kw):
        defaults = dict(
            ref=f"EV-{uuid4().hex[:6]}",
            deadline=timezone.now() + timedelta(days=7),
        )
        defaults.update(kw)
        if "quiz" not in defaults:
            defaults["quiz"] = create_quiz()
        return Evaluation.objects.create(**defaults)
    return _create_evaluation


@pytest.fixture
def add_participant(db, create_user):
    def _add_participant(evaluation, role=ParticipantRole.EVALUATOR, **kw):
        user = kw.pop("user", None) or create_user(
            role="CANDIDAT" if role == ParticipantRole.CANDIDAT else "EVALUATOR"
        )
        if role == ParticipantRole.EVALUATOR:
            kw.setdefault("evaluator_type", EvaluatorType.PEER)
        return EvaluationParticipant.objects.create(
            evaluation=evaluation, user=user, participant_role=role, **kw
        )
    return _add_participant
