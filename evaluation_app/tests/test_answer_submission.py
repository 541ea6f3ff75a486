import json

import pytest
from django.core import mail
from django.urls import reverse
from evaluation_app.models import Answer, AnswerOption, ParticipantRole, QuestionType


def submit_url(participant_id):
    return reverse("candidate-evaluation-submit", kwargs={"participant_id": participant_id})


@pytest.fixture
def setup(create_evaluation, add_participant):
    evaluation = create_evaluation()
    evaluator = add_participant(evaluation)
    quiz = evaluation.quiz
    return {
        "evaluation": evaluation,
        "evaluator": evaluator,
        "scale": quiz.questions.get(type=QuestionType.SCALE),
        "single": quiz.questions.get(type=QuestionType.SINGLE_CHOICE),
        "multi": quiz.questions.get(type=QuestionType.MULTIPLE_CHOICE),
        "text": quiz.questions.get(type=QuestionType.TEXT),
    }


def payload(evaluation, answers, **flags):
    body = {"evaluationId": evaluation.pk, "answers": answers}
    body.update(flags)
    return body


@pytest.mark.django_db
class TestSubmitAnswers:
    def test_draft_save_creates_answers(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": s["scale"].pk, "numericAnswer": 4},
        ], isDraft=True), format="json")

        assert res.status_code == 201
        answer = Answer.objects.get(participant=s["evaluator"], question=s["scale"])
        assert answer.is_draft is True
        assert answer.submitted_at is None
        s["evaluator"].refresh_from_db()
        assert s["evaluator"].completed_at is None

    def test_resubmitting_keeps_one_row_with_latest_values(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        url = submit_url(s["evaluator"].pk)
        api_client.post(url, payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 2}]), format="json")
        api_client.post(url, payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 6}]), format="json")

        answers = Answer.objects.filter(participant=s["evaluator"], question=s["scale"])
        assert answers.count() == 1
        assert answers.get().numeric_answer == 6

    def test_same_question_twice_in_one_body_keeps_last_value(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": s["scale"].pk, "numericAnswer": 2},
            {"questionId": s["scale"].pk, "numericAnswer": 6},
        ]), format="json")

        assert res.status_code == 201
        answers = Answer.objects.filter(participant=s["evaluator"], question=s["scale"])
        assert answers.count() == 1
        assert answers.get().numeric_answer == 6

    def test_multiple_choice_selection_is_replaced(self, api_client, setup):
        s = setup
        a, b, c = s["multi"].options.all()
        api_client.force_authenticate(user=s["evaluator"].user)
        url = submit_url(s["evaluator"].pk)
        api_client.post(url, payload(s["evaluation"], [
            {"questionId": s["multi"].pk, "selectedOptionIds": [a.pk, b.pk]},
        ]), format="json")
        api_client.post(url, payload(s["evaluation"], [
            {"questionId": s["multi"].pk, "selectedOptionIds": [c.pk]},
        ]), format="json")

        picked = AnswerOption.objects.filter(answer__participant=s["evaluator"]).values_list("option_id", flat=True)
        assert list(picked) == [c.pk]

    def test_final_submit_stamps_completion_and_emails_summary(
        self, api_client, setup, django_capture_on_commit_callbacks
    ):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        with django_capture_on_commit_callbacks(execute=True):
            res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
                {"questionId": s["single"].pk, "selectedOptionId": s["single"].options.get(value=5).pk},
                {"questionId": s["text"].pk, "textAnswer": "Rien à signaler"},
            ], isFinalSubmit=True), format="json")

        assert res.status_code == 201
        assert res.data["completedAt"] is not None
        s["evaluator"].refresh_from_db()
        assert s["evaluator"].completed_at is not None
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [s["evaluator"].user.email]
        filename, _, mimetype = mail.outbox[0].attachments[0]
        assert filename == f"Evaluation_{s['evaluation'].ref}.pdf"
        assert mimetype == "application/pdf"

    def test_final_submit_promotes_earlier_drafts(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        url = submit_url(s["evaluator"].pk)
        api_client.post(url, payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 3}], isDraft=True), format="json")
        api_client.post(url, payload(s["evaluation"], [{"questionId": s["text"].pk, "textAnswer": "ok"}], isFinalSubmit=True), format="json")

        assert not Answer.objects.filter(participant=s["evaluator"], is_draft=True).exists()

    def test_second_final_submit_is_rejected_with_original_date(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        url = submit_url(s["evaluator"].pk)
        body = payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 5}], isFinalSubmit=True)
        first = api_client.post(url, body, format="json")
        s["evaluator"].refresh_from_db()
        completed_at = s["evaluator"].completed_at

        second = api_client.post(url, body, format="json")
        assert first.status_code == 201
        assert second.status_code == 400
        assert second.data["completedAt"] == completed_at
        s["evaluator"].refresh_from_db()
        assert s["evaluator"].completed_at == completed_at

    def test_drafts_still_accepted_after_completion(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        url = submit_url(s["evaluator"].pk)
        api_client.post(url, payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 5}], isFinalSubmit=True), format="json")
        res = api_client.post(url, payload(s["evaluation"], [{"questionId": s["scale"].pk, "numericAnswer": 6}], isDraft=True), format="json")
        assert res.status_code == 201

    def test_multipart_body_with_json_answers(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), {
            "evaluationId": str(s["evaluation"].pk),
            "isDraft": "true",
            "answers": json.dumps([{"questionId": s["scale"].pk, "numericAnswer": 0}]),
        }, format="multipart")

        assert res.status_code == 201
        assert Answer.objects.get(participant=s["evaluator"]).numeric_answer == 0

    def test_evaluation_completes_when_every_evaluator_is_done(self, api_client, setup, add_participant):
        s = setup
        add_participant(s["evaluation"], role=ParticipantRole.CANDIDAT)
        api_client.force_authenticate(user=s["evaluator"].user)
        api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": s["scale"].pk, "numericAnswer": 5},
        ], isFinalSubmit=True), format="json")

        s["evaluation"].refresh_from_db()
        assert s["evaluation"].is_completed is True
        assert s["evaluation"].completed_at is not None


@pytest.mark.django_db
class TestSubmitValidation:
    def test_question_outside_quiz_is_rejected(self, api_client, setup, create_quiz):
        s = setup
        foreign = create_quiz().questions.get(type=QuestionType.SCALE)
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": foreign.pk, "numericAnswer": 5},
        ]), format="json")
        assert res.status_code == 400
        assert not Answer.objects.exists()

    def test_option_of_another_question_is_rejected(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": s["single"].pk, "selectedOptionId": s["multi"].options.first().pk},
        ]), format="json")
        assert res.status_code == 400

    def test_non_numeric_participant_id_is_400(self, api_client, setup):
        s = setup
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url("abc"), payload(s["evaluation"], []), format="json")
        assert res.status_code == 400
        assert "error" in res.data

    def test_participant_of_another_evaluation_is_404(self, api_client, setup, create_evaluation):
        s = setup
        other = create_evaluation()
        api_client.force_authenticate(user=s["evaluator"].user)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(other, []), format="json")
        assert res.status_code == 404

    def test_someone_else_cannot_submit(self, api_client, setup, create_user):
        s = setup
        api_client.force_authenticate(user=create_user())
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], []), format="json")
        assert res.status_code == 403

    def test_admin_may_submit_on_behalf(self, api_client, setup, admin_account):
        s = setup
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], [
            {"questionId": s["scale"].pk, "numericAnswer": 3},
        ]), format="json")
        assert res.status_code == 201

    def test_anonymous_is_401(self, api_client, setup):
        s = setup
        res = api_client.post(submit_url(s["evaluator"].pk), payload(s["evaluation"], []), format="json")
        assert res.status_code == 401
