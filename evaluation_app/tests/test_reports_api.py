import pytest
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from evaluation_app.models import Answer, ParticipantRole, QuestionType
from evaluation_app.permissions import EVALUATOR_NOT_DONE, NO_EVALUATOR_DONE, NOT_A_PARTICIPANT


@pytest.fixture
def evaluation_with_people(create_evaluation, add_participant):
    evaluation = create_evaluation()
    candidate = add_participant(evaluation, role=ParticipantRole.CANDIDAT)
    evaluator = add_participant(evaluation)
    return evaluation, candidate, evaluator


def complete(participant, score=5):
    scale = participant.evaluation.quiz.questions.get(type=QuestionType.SCALE)
    Answer.objects.create(participant=participant, question=scale, numeric_answer=score, submitted_at=timezone.now())
    participant.completed_at = timezone.now()
    participant.save(update_fields=["completed_at"])


@pytest.mark.django_db
class TestReportAccess:
    def test_admin_reads_any_report(self, api_client, admin_account, evaluation_with_people):
        evaluation, _, _ = evaluation_with_people
        api_client.force_authenticate(user=admin_account)
        res = api_client.get(reverse("report-detail", args=[evaluation.pk]))

        assert res.status_code == 200
        assert res.data["evaluationId"] == evaluation.pk
        assert res.data["evaluationRef"] == evaluation.ref
        assert len(res.data["participants"]) == 2
        assert [s["category"] for s in res.data["report"]][0] == "Communication"

    def test_candidate_waits_for_a_completed_evaluator(self, api_client, evaluation_with_people):
        evaluation, candidate, evaluator = evaluation_with_people
        api_client.force_authenticate(user=candidate.user)
        url = reverse("report-detail", args=[evaluation.pk])

        res = api_client.get(url)
        assert res.status_code == 403
        assert res.data["error"] == NO_EVALUATOR_DONE

        complete(evaluator)
        assert api_client.get(url).status_code == 200

    def test_evaluator_must_finish_first(self, api_client, evaluation_with_people):
        evaluation, _, evaluator = evaluation_with_people
        api_client.force_authenticate(user=evaluator.user)
        url = reverse("report-detail", args=[evaluation.pk])

        res = api_client.get(url)
        assert res.status_code == 403
        assert res.data["error"] == EVALUATOR_NOT_DONE

        complete(evaluator)
        assert api_client.get(url).status_code == 200

    def test_outsider_is_refused(self, api_client, create_user, evaluation_with_people):
        evaluation, _, _ = evaluation_with_people
        api_client.force_authenticate(user=create_user())
        res = api_client.get(reverse("report-detail", args=[evaluation.pk]))
        assert res.status_code == 403
        assert res.data["error"] == NOT_A_PARTICIPANT

    def test_missing_evaluation_is_404(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        assert api_client.get(reverse("report-detail", args=[424242])).status_code == 404

    def test_bad_id_is_400(self, api_client, admin_account):
        api_client.force_authenticate(user=admin_account)
        assert api_client.get(reverse("report-detail", args=["x"])).status_code == 400

    def test_anonymous_is_401(self, api_client, evaluation_with_people):
        evaluation, _, _ = evaluation_with_people
        assert api_client.get(reverse("report-detail", args=[evaluation.pk])).status_code == 401


@pytest.mark.django_db
class TestReportList:
    def test_list_is_filtered_by_role(self, api_client, create_evaluation, add_participant, create_user, admin_account):
        evaluator_user = create_user()
        candidate_user = create_user(role="CANDIDAT")

        done = create_evaluation(ref="DONE")
        add_participant(done, role=ParticipantRole.CANDIDAT, user=candidate_user)
        complete(add_participant(done, user=evaluator_user))

        pending = create_evaluation(ref="PENDING")
        add_participant(pending, role=ParticipantRole.CANDIDAT, user=candidate_user)
        add_participant(pending, user=evaluator_user)

        create_evaluation(ref="OTHER")
        url = reverse("report-list")

        api_client.force_authenticate(user=admin_account)
        res = api_client.get(url)
        assert res.data["meta"]["total"] == 3

        api_client.force_authenticate(user=evaluator_user)
        assert [e["ref"] for e in api_client.get(url).data["evaluations"]] == ["DONE"]

        api_client.force_authenticate(user=candidate_user)
        rows = api_client.get(url).data["evaluations"]
        assert [e["ref"] for e in rows] == ["DONE"]
        assert rows[0]["candidat"]["id"] == candidate_user.pk

    def test_list_follows_participation_not_account_role(self, api_client, create_evaluation, add_participant,
                                                         create_user):
        # account role EVALUATOR, but the candidate of this evaluation
        user = create_user()
        evaluation = create_evaluation(ref="MINE")
        add_participant(evaluation, role=ParticipantRole.CANDIDAT, user=user)
        complete(add_participant(evaluation))
        api_client.force_authenticate(user=user)

        assert api_client.get(reverse("report-detail", args=[evaluation.pk])).status_code == 200
        rows = api_client.get(reverse("report-list")).data["evaluations"]
        assert [e["ref"] for e in rows] == ["MINE"]


@pytest.mark.django_db
class TestSendReportEmail:
    def test_requires_every_participant_completed(self, api_client, admin_account, evaluation_with_people):
        evaluation, _, evaluator = evaluation_with_people
        complete(evaluator)
        api_client.force_authenticate(user=admin_account)
        res = api_client.post(reverse("report-send-email", args=[evaluation.pk]), {}, format="json")
        assert res.status_code == 400
        assert len(mail.outbox) == 0

    def test_sends_pdf_to_candidate(self, api_client, admin_account, evaluation_with_people):
        evaluation, candidate, evaluator = evaluation_with_people
        complete(evaluator, 6)
        complete(candidate, 4)
        api_client.force_authenticate(user=admin_account)

        res = api_client.post(reverse("report-send-email", args=[evaluation.pk]), {}, format="json")
        assert res.status_code == 200
        assert mail.outbox[0].to == [candidate.user.email]
        filename, content, mimetype = mail.outbox[0].attachments[0]
        assert filename == f"Rapport_{evaluation.ref}.pdf"
        assert content[:4] == b"%PDF"

    def test_only_admin(self, api_client, evaluation_with_people):
        evaluation, candidate, _ = evaluation_with_people
        api_client.force_authenticate(user=candidate.user)
        res = api_client.post(reverse("report-send-email", args=[evaluation.pk]), {}, format="json")
        assert res.status_code == 403
