import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from evaluation_app.models import Answer, AnswerOption, Option, Question, QuestionType
from evaluation_app.services.notifications import schedule_answers_summary

logger = logging.getLogger(__name__)


class AlreadyCompleted(Exception):
    """A second final submission for a participant that already completed."""
    def __init__(self, completed_at):
        super().__init__(f"already completed at {completed_at}")
        self.completed_at = completed_at


def _check_answers(evaluation, answers):
    """Every question must belong to the evaluation's quiz, every option to its question."""
    question_ids = {a["questionId"] for a in answers}
    questions = {q.pk: q for q in Question.objects.filter(pk__in=question_ids, quiz_id=evaluation.quiz_id)}
    unknown = sorted(question_ids - set(questions))
    if unknown:
        raise ValidationError({"answers": [f"Question {qid} is not part of this evaluation's quiz."
                                           for qid in unknown]})

    option_ids = set()
    for a in answers:
        if a.get("selectedOptionId") is not None:
            option_ids.add(a["selectedOptionId"])
        option_ids.update(a.get("selectedOptionIds") or [])
    options = {o.pk: o for o in Option.objects.filter(pk__in=option_ids)}

    for a in answers:
        picked = list(a.get("selectedOptionIds") or [])
        if a.get("selectedOptionId") is not None:
            picked.append(a["selectedOptionId"])
        for option_id in picked:
            option = options.get(option_id)
            if option is None or option.question_id != a["questionId"]:
                raise ValidationError({"answers": [f"Option {option_id} does not belong to question {a['questionId']}."]})
    return questions, options


def submit_answers(participant, answers, *, is_draft=False, is_final_submit=False, now=None):
    """
    Upsert `answers` for `participant` in one transaction.

    Each item is the validated `AnswerInputSerializer` payload. A final
    submission stamps `completed_at` and queues the answer-summary email for
    after commit; a second final submission raises AlreadyCompleted. Draft
    saves are accepted at any time.
    """
    if is_final_submit and participant.completed_at is not None:
        raise AlreadyCompleted(participant.completed_at)

    now = now or timezone.now()
    # a question listed twice keeps its last value
    answers = list({item["questionId"]: item for item in answers}.values())
    questions, options = _check_answers(participant.evaluation, answers)
    draft = is_draft and not is_final_submit

    saved = []
    with transaction.atomic():
        for item in answers:
            question = questions[item["questionId"]]
            selected_option = None
            if item.get("selectedOptionId") is not None:
                selected_option = options[item["selectedOptionId"]]

            answer, _ = Answer.objects.update_or_create(
                participant=participant,
                question=question,
                defaults={
                    "selected_option": selected_option,
                    "text_answer": item.get("textAnswer"),
                    "numeric_answer": item.get("numericAnswer"),
                    "is_draft": draft,
                    "submitted_at": None if draft else now,
                },
            )

            # previous ticks are replaced, not merged
            AnswerOption.objects.filter(answer=answer).delete()
            if question.type == QuestionType.MULTIPLE_CHOICE:
                AnswerOption.objects.bulk_create([
                    AnswerOption(answer=answer, option=options[option_id])
                    for option_id in dict.fromkeys(item.get("selectedOptionIds") or [])
                ])
            saved.append(answer)

        if is_final_submit:
            # earlier autosaves become part of the final submission
            Answer.objects.filter(participant=participant, is_draft=True).update(is_draft=False, submitted_at=now)
            participant.completed_at = now
            participant.save(update_fields=["completed_at"])
            schedule_answers_summary(participant)

    logger.info(
        f"Participant {participant.pk}: {len(saved)} answer(s) saved"
        f"{' (final)' if is_final_submit else ' (draft)' if draft else ''}"
    )
    return saved
