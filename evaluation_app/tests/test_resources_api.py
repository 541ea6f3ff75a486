import pytest
from django.contrib.auth import get_user_model
from django.urls import reverse
from evaluation_app.models import (
    Answer, Evaluation, EvaluationParticipant, ParticipantRole, Quiz, QuestionType, SystemConfig,
)

User = get_user_model()


@pytest.mark.django_db
class TestUsers:
    def test_admin_lists_with_pagination_meta(self, api_client, admin_account, create_user):
        for _ in range(3):
            create_user()
        api_client.force_authenticate(user=admin_account)
        res = api_client.get(reverse("user-list"), {"page": 1, "limit": 2})

        assert res.status_code == 200
        assert len(res.data["users"]) == 2
        assert res.data["meta"] == {"total": 4, "page": 1, "limit": 2, "totalPages": 2}

    def test_bad_pagination_values_fall_back_to_defaults(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        res = api_client.get(reverse("user-list"), {"page": "zero", "limit": "-3"})
        assert res.data["meta"]["page"] == 1
        assert res.data["meta"]["limit"] == 10

    def test_non_admin_cannot_list(self, api_client, create_user):
        api_client.force_authenticate(user=create_user())
        assert api_client.get(reverse("user-list")).status_code == 403

    def test_delete_is_soft(self, api_client, admin_account, create_user):
        user = create_user()
        api_client.force_authenticate(user=admin_account)
        res = api_client.delete(reverse("user-detail", args=[user.pk]))

        assert res.status_code == 200
        assert not User.objects.filter(pk=user.pk).exists()
        assert User.all_objects.get(pk=user.pk).deleted_at is not None

    def test_create_with_taken_phone_is_409(self, api_client, admin_account, create_user):
        create_user(phone="+33600000000")
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("user-list"), {
            "name": "Other", "email": "other@test.local", "phone": "+33600000000",
        }, format="json")
        assert res.status_code == 409

    def test_me_reads_and_updates_own_profile(self, api_client, create_user):
        user = create_user(name="Before")
        api_client.force_authenticate(user=user)
        url = reverse("user-me")

        assert api_client.get(url).data["email"] == user.email
        res = api_client.patch(url, {"name": "After", "role": "ADMIN"}, format="json")
        assert res.status_code == 200
        user.refresh_from_db()
        assert user.name == "After"
        assert user.role == "EVALUATOR"

    def test_change_password(self, api_client, create_user):
        user = create_user()
        api_client.force_authenticate(user=user)
        res = api_client.post(reverse("user-change-password"), {
            "old_password": "pass12345",
            "new_password": "Str0ng-Passw0rd!",
            "new_password_confirm": "Str0ng-Passw0rd!",
        }, format="json")
        assert res.status_code == 200
        user.refresh_from_db()
        assert user.check_password("Str0ng-Passw0rd!")


@pytest.mark.django_db
class TestQuizzes:
    def test_admin_creates_nested_quiz(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("quiz-list"), {
            "title": "360",
            "questions": [
                {"text": "Écoute", "type": "SCALE", "category": "Communication"},
                {"text": "Choix", "type": "SINGLE_CHOICE", "options": [
                    {"text": "Oui", "value": 7}, {"text": "Non", "value": 1},
                ]},
            ],
        }, format="json")

        assert res.status_code == 201
        quiz = Quiz.objects.get(pk=res.data["id"])
        assert [q.order for q in quiz.questions.all()] == [1, 2]
        assert quiz.questions.get(order=2).options.count() == 2
        assert quiz.questions.get(order=2).category == "SUMMIT"

    def test_everyone_reads_only_admin_writes(self, api_client, create_user, create_quiz):
        quiz = create_quiz()
        api_client.force_authenticate(user=create_user())
        assert api_client.get(reverse("quiz-detail", args=[quiz.pk])).status_code == 200
        assert api_client.post(reverse("quiz-list"), {"title": "x"}, format="json").status_code == 403

    def test_soft_deleted_quiz_disappears(self, api_client, admin_account, create_quiz):
        quiz = create_quiz()
        api_client.force_authenticate(user=admin_account)
        assert api_client.delete(reverse("quiz-detail", args=[quiz.pk])).status_code == 200
        assert api_client.get(reverse("quiz-detail", args=[quiz.pk])).status_code == 404
        assert Quiz.objects.filter(pk=quiz.pk).exists()

    def test_add_and_update_question(self, api_client, admin_account, create_quiz):
        quiz = create_quiz()
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("quiz-questions", args=[quiz.pk]), {
            "text": "Nouvelle", "type": "SCALE",
        }, format="json")
        assert res.status_code == 201
        assert res.data["order"] == 5

        question = quiz.questions.get(type=QuestionType.SINGLE_CHOICE)
        res = api_client.patch(reverse("question-detail", args=[question.pk]), {
            "options": [{"text": "Seule", "value": 3}],
        }, format="json")
        assert res.status_code == 200
        assert [o.text for o in question.options.all()] == ["Seule"]

    def test_choice_question_needs_options(self, api_client, admin_account, create_quiz):
        quiz = create_quiz()
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("quiz-questions", args=[quiz.pk]), {
            "text": "Vide", "type": "MULTIPLE_CHOICE", "options": [],
        }, format="json")
        assert res.status_code == 400


@pytest.mark.django_db
class TestEvaluations:
    def test_create_and_list_with_progress(self, api_client, admin_account, create_quiz):
        quiz = create_quiz()
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("evaluation-list"), {
            "ref": "EV-1", "deadline": "2030-01-01T00:00:00Z", "quizId": quiz.pk,
        }, format="json")
        assert res.status_code == 201

        listing = api_client.get(reverse("evaluation-list"))
        row = listing.data["evaluations"][0]
        assert row["ref"] == "EV-1"
        assert row["quiz"] == {"id": quiz.pk, "title": quiz.title}
        assert row["progressPercentage"] == 0

    def test_empty_update_is_400(self, api_client, admin_account, create_evaluation):
        evaluation = create_evaluation()
        api_client.force_authenticate(user=admin_account)
        res = api_client.patch(reverse("evaluation-detail", args=[evaluation.pk]), {}, format="json")
        assert res.status_code == 400
        assert res.data["error"] == "No data to update"

    def test_progress_counts_evaluators_only(self, api_client, admin_account, create_evaluation, add_participant):
        evaluation = create_evaluation()
        add_participant(evaluation, role=ParticipantRole.CANDIDAT)
        done = add_participant(evaluation)
        add_participant(evaluation)
        done.completed_at = evaluation.created_at
        done.save()

        api_client.force_authenticate(user=admin_account)
        data = api_client.get(reverse("evaluation-detail", args=[evaluation.pk])).data
        assert data["evaluatorsCount"] == 2
        assert data["completedEvaluators"] == 1
        assert data["progressPercentage"] == 50

    def test_delete_cascades(self, api_client, admin_account, create_evaluation, add_participant):
        evaluation = create_evaluation()
        participant = add_participant(evaluation)
        Answer.objects.create(participant=participant, question=evaluation.quiz.questions.first(), numeric_answer=3)

        api_client.force_authenticate(user=admin_account)
        assert api_client.delete(reverse("evaluation-detail", args=[evaluation.pk])).status_code == 200
        assert not Evaluation.objects.filter(pk=evaluation.pk).exists()
        assert not EvaluationParticipant.objects.exists()
        assert not Answer.objects.exists()

    def test_evaluators_action(self, api_client, admin_account, create_evaluation, add_participant):
        evaluation = create_evaluation()
        add_participant(evaluation, role=ParticipantRole.CANDIDAT)
        evaluator = add_participant(evaluation)
        api_client.force_authenticate(user=admin_account)

        res = api_client.get(reverse("evaluation-evaluators", args=[evaluation.pk]))
        assert [p["id"] for p in res.data["evaluators"]] == [evaluator.pk]
        assert res.data["evaluators"][0]["evaluatorType"] == "PAIR"
        res = api_client.get(reverse("evaluation-participants", args=[evaluation.pk]))
        assert len(res.data["participants"]) == 2


@pytest.mark.django_db
class TestCandidateEvaluations:
    def test_list_only_my_evaluations_with_participant_id(self, api_client, create_evaluation, add_participant):
        mine = create_evaluation()
        create_evaluation()
        participant = add_participant(mine)
        api_client.force_authenticate(user=participant.user)

        res = api_client.get(reverse("candidate-evaluation-list"))
        assert res.data["meta"]["total"] == 1
        assert res.data["evaluations"][0]["currentParticipantId"] == participant.pk

    def test_retrieve_requires_participation(self, api_client, create_evaluation, add_participant, create_user):
        evaluation = create_evaluation()
        participant = add_participant(evaluation)
        url = reverse("candidate-evaluation-detail", args=[evaluation.pk])

        api_client.force_authenticate(user=participant.user)
        assert api_client.get(url).data["evaluation"]["currentParticipantId"] == participant.pk
        api_client.force_authenticate(user=create_user())
        assert api_client.get(url).status_code == 403

    def test_quiz_pages_put_autre_last(self, api_client, create_evaluation, add_participant):
        evaluation = create_evaluation()
        candidate = add_participant(evaluation, role=ParticipantRole.CANDIDAT)
        api_client.force_authenticate(user=candidate.user)

        url = reverse("candidate-evaluation-quiz", kwargs={"quiz_id": evaluation.quiz_id})
        res = api_client.get(url, {"participantId": candidate.pk, "limit": 3})
        quiz = res.data["quiz"]
        assert [q["text"] for q in quiz["questions"]] == ["Scale", "Single", "Multi"]
        assert quiz["isCandidate"] is True
        assert quiz["candidateName"] == candidate.user.name
        assert quiz["pagination"]["totalPages"] == 2
        assert quiz["pagination"]["hasNextPage"] is True

        second = api_client.get(url, {"page": 2, "limit": 3}).data["quiz"]
        assert [q["text"] for q in second["questions"]] == ["Open"]
        assert second["candidateName"] is None

    def test_quiz_ignores_someone_elses_participant_id(self, api_client, create_evaluation, add_participant,
                                                       create_user, admin_account):
        evaluation = create_evaluation()
        candidate = add_participant(evaluation, role=ParticipantRole.CANDIDAT)
        url = reverse("candidate-evaluation-quiz", kwargs={"quiz_id": evaluation.quiz_id})

        api_client.force_authenticate(user=create_user())
        quiz = api_client.get(url, {"participantId": candidate.pk}).data["quiz"]
        assert quiz["candidateName"] is None
        assert quiz["isCandidate"] is False

        api_client.force_authenticate(user=admin_account)
        quiz = api_client.get(url, {"participantId": candidate.pk}).data["quiz"]
        assert quiz["candidateName"] == candidate.user.name
        assert quiz["isCandidate"] is True

    def test_answers_of_a_participant(self, api_client, create_evaluation, add_participant):
        evaluation = create_evaluation()
        participant = add_participant(evaluation)
        scale = evaluation.quiz.questions.get(type=QuestionType.SCALE)
        Answer.objects.create(participant=participant, question=scale, numeric_answer=7.0)
        api_client.force_authenticate(user=participant.user)

        res = api_client.get(reverse("candidate-evaluation-answers", args=[evaluation.pk]))
        assert res.status_code == 200
        assert res.data["answers"][0]["answer"] == "7"


@pytest.mark.django_db
class TestConfig:
    def test_admin_reads_and_updates(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        url = reverse("config")
        assert api_client.get(url).data["config"]["reminderFrequency"] == "DAILY_1"

        res = api_client.put(url, {"reminderFrequency": "WEEKLY_1", "reminderEnabled": False}, format="json")
        assert res.status_code == 200
        config = SystemConfig.load()
        assert config.reminder_frequency == "WEEKLY_1"
        assert config.reminder_enabled is False

    def test_unknown_frequency_is_400(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        res = api_client.put(reverse("config"), {"reminderFrequency": "YEARLY"}, format="json")
        assert res.status_code == 400

    def test_non_admin_is_403(self, api_client, create_user):
        api_client.force_authenticate(user=create_user())
        assert api_client.get(reverse("config")).status_code == 403
