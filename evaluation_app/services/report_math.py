from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Prefetch

from evaluation_app.models import (
    Answer, AnswerOption, Evaluation, EvaluationParticipant,
    ParticipantRole, Question, QuestionType,
)
from evaluation_app.utils import CANDIDATE_KEY, REPORT_KEYS, evaluator_type_key

SCORED_TYPES = (QuestionType.SCALE, QuestionType.SINGLE_CHOICE)

CATEGORY_DESCRIPTIONS = {
    "Affirmation de soi": "Capacité à exprimer ses opinions et à défendre ses idées de manière constructive.",
    "Développement des autres": "Aptitude à accompagner et faire progresser les membres de l'équipe.",
    "Vision stratégique": "Capacité à définir une direction claire et à anticiper les évolutions.",
    "Gestion du changement": "Compétence à conduire et accompagner les transformations.",
    "Communication": "Aptitude à transmettre efficacement l'information et à écouter.",
}

INTRODUCTION = (
    "Ce rapport présente les résultats de votre évaluation de leadership. Il compile les réponses "
    "de l'ensemble des participants (managers, pairs, subordonnés et votre auto-évaluation) pour "
    "vous offrir une vision complète de vos compétences en leadership.\n\n"
    "Les scores sont présentés sur une échelle de 1 à 7, où 7 représente le niveau le plus élevé. "
    "Les résultats sont organisés par catégorie de compétences pour faciliter l'analyse et "
    "l'identification des axes de développement."
)


def _round2(x) -> float:
    return float(Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _mean(total, count):
    return _round2(total / count) if count else None


def load_evaluation(evaluation_id):
    """
    Evaluation with everything a report reads, in a fixed number of queries.
    Raises Evaluation.DoesNotExist.
    """
    answers = (Answer.objects
               .select_related("selected_option")
               .prefetch_related(Prefetch("selected_options",
                                          queryset=AnswerOption.objects.select_related("option").order_by("id"))))
    participants = (EvaluationParticipant.objects
                    .select_related("user")
                    .prefetch_related(Prefetch("answers", queryset=answers)))
    return (Evaluation.objects
            .select_related("quiz")
            .prefetch_related(
                Prefetch("quiz__questions", queryset=Question.objects.order_by("order", "id").prefetch_related("options")),
                Prefetch("participants", queryset=participants),
            )
            .get(pk=evaluation_id))


def answer_score(question, answer):
    """Numeric score of one answer, or None when the answer carries none."""
    if answer is None:
        return None
    if question.type == QuestionType.SCALE:
        return answer.numeric_answer
    if question.type == QuestionType.SINGLE_CHOICE and answer.selected_option is not None:
        return answer.selected_option.value
    return None


def _split_participants(evaluation):
    evaluators, candidate = [], None
    for p in evaluation.participants.all():
        if p.participant_role == ParticipantRole.EVALUATOR:
            evaluators.append(p)
        elif p.participant_role == ParticipantRole.CANDIDAT and candidate is None:
            candidate = p
    return evaluators, candidate


def _answers_by_question(participant):
    return {a.question_id: a for a in participant.answers.all()} if participant else {}


def question_scores(question, evaluators, candidate, answer_index):
    """
    (bucket, score) for each scored answer to `question`; evaluators first in
    participant order, the candidate's own score last under CANDIDAT.
    """
    scores = []
    for evaluator in evaluators:
        score = answer_score(question, answer_index[evaluator.pk].get(question.pk))
        if score is not None:
            scores.append((evaluator_type_key(evaluator.evaluator_type), score))
    if candidate is not None:
        score = answer_score(question, answer_index[candidate.pk].get(question.pk))
        if score is not None:
            scores.append((CANDIDATE_KEY, score))
    return scores


def _question_head(question):
    return {
        "questionId": question.pk,
        "questionText": question.text,
        "questionType": question.type,
        "subcategory": question.subcategory,
        "order": question.order,
    }


def _text_entry(question, evaluators, candidate, answer_index):
    answers = []
    for evaluator in evaluators:
        answer = answer_index[evaluator.pk].get(question.pk)
        if answer is not None and (answer.text_answer or "").strip():
            answers.append({"evaluatorType": evaluator_type_key(evaluator.evaluator_type),
                            "answer": answer.text_answer})
    if candidate is not None:
        answer = answer_index[candidate.pk].get(question.pk)
        if answer is not None and (answer.text_answer or "").strip():
            answers.append({"evaluatorType": CANDIDATE_KEY, "answer": answer.text_answer})
    return {**_question_head(question), "answers": answers}


def _multiple_choice_entry(question, evaluators, candidate, answer_index):
    selections = []
    respondents = [(evaluator_type_key(e.evaluator_type), e) for e in evaluators]
    if candidate is not None:
        respondents.append((CANDIDATE_KEY, candidate))
    for key, participant in respondents:
        answer = answer_index[participant.pk].get(question.pk)
        if answer is None:
            continue
        options = [ao.option.text for ao in answer.selected_options.all()]
        if options:
            selections.append({"evaluatorType": key, "options": options})
    return {**_question_head(question), "selections": selections}


def _scored_entry(question, evaluators, candidate, answer_index):
    scores = question_scores(question, evaluators, candidate, answer_index)

    sums = {key: 0.0 for key in REPORT_KEYS}
    counts = {key: 0 for key in REPORT_KEYS}
    for key, score in scores:
        sums[key] += score
        counts[key] += 1

    total = sum(score for _, score in scores)
    candidate_score = next((score for key, score in scores if key == CANDIDATE_KEY), None)

    return {
        **_question_head(question),
        "overallAverage": _mean(total, len(scores)),
        # every bucket is present; nobody answering reads 0
        "averagesByEvaluatorType": {key: _mean(sums[key], counts[key]) or 0 for key in REPORT_KEYS},
        "countsByEvaluatorType": counts,
        "candidateScore": _round2(candidate_score) if candidate_score is not None else None,
        "totalEvaluators": len(evaluators),
        "answeredEvaluators": len(scores) - (1 if candidate_score is not None else 0),
    }


def build_report(evaluation):
    """
    Category-grouped report for an evaluation loaded with `load_evaluation`.

    TEXT questions list the raw answers, MULTIPLE_CHOICE questions list the
    ticked options, SCALE / SINGLE_CHOICE questions are averaged overall and
    per evaluator type with the candidate's own score folded in as CANDIDAT.
    """
    evaluators, candidate = _split_participants(evaluation)
    answer_index = {p.pk: _answers_by_question(p) for p in evaluators}
    if candidate is not None:
        answer_index[candidate.pk] = _answers_by_question(candidate)

    sections = {}
    for question in evaluation.quiz.questions.all():
        if question.type == QuestionType.TEXT:
            entry = _text_entry(question, evaluators, candidate, answer_index)
        elif question.type in SCORED_TYPES:
            entry = _scored_entry(question, evaluators, candidate, answer_index)
        else:
            entry = _multiple_choice_entry(question, evaluators, candidate, answer_index)

        section = sections.setdefault(question.category, {
            "category": question.category,
            "description": CATEGORY_DESCRIPTIONS.get(question.category, ""),
            "questions": [],
        })
        section["questions"].append(entry)

    return list(sections.values())


def participant_roster(evaluation):
    return [
        {
            "id": p.pk,
            "name": p.user.name,
            "participantRole": p.participant_role,
            "evaluatorType": evaluator_type_key(p.evaluator_type) if p.participant_role == ParticipantRole.EVALUATOR else None,
            "completedAt": p.completed_at,
        }
        for p in evaluation.participants.all()
    ]


def report_statistics(evaluation, report):
    """
    Figures for the PDF report: global stats over every individual score,
    per-category means of the question averages, and the open questions.
    """
    evaluators, candidate = _split_participants(evaluation)
    answer_index = {p.pk: _answers_by_question(p) for p in evaluators}
    if candidate is not None:
        answer_index[candidate.pk] = _answers_by_question(candidate)

    all_scores = []
    for question in evaluation.quiz.questions.all():
        if question.type in SCORED_TYPES:
            all_scores.extend(score for _, score in question_scores(question, evaluators, candidate, answer_index))

    categories = []
    open_questions = []
    for section in report:
        scored = [q for q in section["questions"] if q["questionType"] in SCORED_TYPES and q["overallAverage"] is not None]
        for q in section["questions"]:
            if q["questionType"] == QuestionType.TEXT:
                open_questions.append({"text": q["questionText"], "answers": q["answers"]})
        if not scored:
            continue

        average_by_type, count_by_type = {}, {}
        for key in REPORT_KEYS:
            answered = [q for q in scored if q["countsByEvaluatorType"][key]]
            count_by_type[key] = sum(q["countsByEvaluatorType"][key] for q in scored)
            if answered:
                average_by_type[key] = _mean(sum(q["averagesByEvaluatorType"][key] for q in answered), len(answered))

        categories.append({
            "name": section["category"],
            "description": section["description"],
            "overallAverage": _mean(sum(q["overallAverage"] for q in scored), len(scored)),
            "averageByType": average_by_type,
            "countByType": count_by_type,
            "questions": scored,
        })

    return {
        "introduction": INTRODUCTION,
        "globalStats": {
            "overallAverage": _mean(sum(all_scores), len(all_scores)),
            "totalResponses": len(all_scores),
            "maxScore": max(all_scores) if all_scores else None,
            "minScore": min(all_scores) if all_scores else None,
        },
        "categories": categories,
        "openQuestions": open_questions,
    }
