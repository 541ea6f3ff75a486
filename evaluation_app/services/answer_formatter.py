from evaluation_app.models import QuestionType


def format_answer(answer):
    """Human readable value of an answer, by question type."""
    qtype = answer.question.type
    if qtype == QuestionType.TEXT:
        return answer.text_answer or ""
    if qtype == QuestionType.SCALE:
        if answer.numeric_answer is None:
            return ""
        value = answer.numeric_answer
        return str(int(value)) if float(value).is_integer() else str(value)
    if qtype == QuestionType.SINGLE_CHOICE:
        return answer.selected_option.text if answer.selected_option else ""
    if qtype == QuestionType.MULTIPLE_CHOICE:
        return ", ".join(ao.option.text for ao in answer.selected_options.all())
    return ""


def format_answers(answers):
    """Rows for the answer-summary PDF and the candidate answers endpoint, in quiz order."""
    rows = sorted(answers, key=lambda a: (a.question.order, a.question_id))
    return [
        {
            "questionId": a.question_id,
            "questionText": a.question.text,
            "questionType": a.question.type,
            "category": a.question.category,
            "answer": format_answer(a),
            "isDraft": a.is_draft,
            "submittedAt": a.submitted_at,
        }
        for a in rows
    ]
