"""PDF rendering (ReportLab) for answer summaries and evaluation reports."""
import logging
from io import BytesIO
from xml.sax.saxutils import escape

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from evaluation_app.utils import REPORT_KEYS

logger = logging.getLogger(__name__)

HEADER_COLOR = colors.HexColor("#4A5568")
ACCENT_COLOR = colors.HexColor("#4F46E5")

REPORT_KEY_LABELS = {
    "MANAGER": "Manager",
    "PAIR": "Pairs",
    "SUBORDONNES": "Subordonnés",
    "AUTRES": "Autres",
    "CANDIDAT": "Auto-évaluation",
}

QUESTION_TYPE_LABELS = {
    "TEXT": "Texte",
    "SCALE": "Échelle",
    "SINGLE_CHOICE": "Choix unique",
    "MULTIPLE_CHOICE": "Choix multiple",
}


def _styles():
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("DocTitle", parent=styles["Heading1"], alignment=TA_CENTER, fontSize=20, spaceAfter=12),
        "subtitle": ParagraphStyle("DocSubtitle", parent=styles["Normal"], alignment=TA_CENTER, fontSize=11, spaceAfter=4),
        "h2": ParagraphStyle("Section", parent=styles["Heading2"], textColor=ACCENT_COLOR, spaceBefore=12, spaceAfter=6),
        "h3": ParagraphStyle("SubSection", parent=styles["Heading3"], spaceBefore=8, spaceAfter=4),
        "body": ParagraphStyle("Body", parent=styles["Normal"], fontSize=10, leading=14),
        "cell": ParagraphStyle("Cell", parent=styles["Normal"], fontSize=9, leading=11),
        "muted": ParagraphStyle("Muted", parent=styles["Normal"], fontSize=9, textColor=colors.grey),
    }


def _p(text, style):
    return Paragraph(escape(str(text if text is not None else "")).replace("\n", "<br/>"), style)


def _table(data, col_widths):
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F2F2F2")]),
        ("LEFTPADDING", (0, 0), (-1, -1), 5),
        ("RIGHTPADDING", (0, 0), (-1, -1), 5),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    return table


def _fmt_score(value):
    return "-" if value is None else f"{value:.2f}"


def _build(story):
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
    )
    doc.build(story)
    return buffer.getvalue()


# ─── Answer summary ───────────────────────────────────────

def render_answers_pdf(*, evaluation_ref, candidate_name, evaluator_name, completed_at, rows):
    """
    One participant's answers as a table. `rows` come from
    `answer_formatter.format_answers`.
    """
    logger.debug(f"Rendering answers PDF for {evaluation_ref} ({len(rows)} rows)")
    s = _styles()
    completed_at = timezone.localtime(completed_at) if completed_at else None

    story = [
        _p("Évaluation", s["title"]),
        _p(f"Référence : {evaluation_ref}", s["subtitle"]),
        _p(f"Candidat évalué : {candidate_name}", s["subtitle"]),
        _p(f"Évaluateur : {evaluator_name}", s["subtitle"]),
    ]
    if completed_at:
        story.append(_p(f"Date de complétion : {completed_at:%d/%m/%Y à %H:%M}", s["subtitle"]))
    story += [Spacer(1, 0.8 * cm), _p("Réponses au questionnaire", s["h2"])]

    data = [["N°", "Question", "Type", "Réponse"]]
    for index, row in enumerate(rows, start=1):
        data.append([
            str(index),
            _p(row["questionText"], s["cell"]),
            QUESTION_TYPE_LABELS.get(row["questionType"], row["questionType"]),
            _p(row["answer"] or "-", s["cell"]),
        ])
    story.append(_table(data, [1.2 * cm, 8 * cm, 2.8 * cm, 6 * cm]))
    story += [Spacer(1, 0.6 * cm), _p(f"Document généré le {timezone.localtime():%d/%m/%Y}", s["muted"])]
    return _build(story)


# ─── Evaluation report ────────────────────────────────────

def render_report_pdf(*, evaluation_ref, deadline, candidate_name, statistics):
    """Full report; `statistics` is the output of `report_math.report_statistics`."""
    s = _styles()
    stats = statistics["globalStats"]
    keys = REPORT_KEYS

    story = [
        Spacer(1, 3 * cm),
        _p("Rapport d'évaluation 360°", s["title"]),
        _p(candidate_name, s["subtitle"]),
        _p(f"Référence : {evaluation_ref}", s["subtitle"]),
        _p(f"Échéance : {timezone.localtime(deadline):%d/%m/%Y}" if deadline else "", s["subtitle"]),
        Spacer(1, 1.5 * cm),
        _p("INTRODUCTION", s["h2"]),
        _p(statistics["introduction"], s["body"]),
        Spacer(1, 0.8 * cm),
        _p("Vue d'ensemble", s["h2"]),
        _table([
            ["Moyenne générale", "Réponses", "Score max", "Score min"],
            [_fmt_score(stats["overallAverage"]), str(stats["totalResponses"]),
             _fmt_score(stats["maxScore"]), _fmt_score(stats["minScore"])],
        ], [4.5 * cm] * 4),
    ]

    if statistics["categories"]:
        story += [Spacer(1, 0.6 * cm), _p("Synthèse par catégorie", s["h2"])]
        data = [["Catégorie", "Moyenne"] + [REPORT_KEY_LABELS[k] for k in keys]]
        for category in statistics["categories"]:
            data.append(
                [_p(category["name"], s["cell"]), _fmt_score(category["overallAverage"])]
                + [_fmt_score(category["averageByType"].get(k)) for k in keys]
            )
        story.append(_table(data, [4.5 * cm, 2 * cm] + [2.3 * cm] * len(keys)))

    for category in statistics["categories"]:
        story += [PageBreak(), _p(category["name"], s["h2"])]
        if category["description"]:
            story.append(_p(category["description"], s["body"]))
        data = [["Question", "Moy."] + [REPORT_KEY_LABELS[k] for k in keys]]
        for q in category["questions"]:
            per_type = q["averagesByEvaluatorType"]
            data.append(
                [_p(q["questionText"], s["cell"]), _fmt_score(q["overallAverage"])]
                + [_fmt_score(per_type[k]) if q["countsByEvaluatorType"][k] else "-" for k in keys]
            )
        story += [Spacer(1, 0.3 * cm), _table(data, [6.5 * cm, 1.5 * cm] + [1.9 * cm] * len(keys))]

    if statistics["openQuestions"]:
        story += [PageBreak(), _p("Questions ouvertes", s["h2"])]
        for question in statistics["openQuestions"]:
            story.append(_p(question["text"], s["h3"]))
            if not question["answers"]:
                story.append(_p("Aucune réponse.", s["muted"]))
            for answer in question["answers"]:
                label = REPORT_KEY_LABELS.get(answer["evaluatorType"], answer["evaluatorType"])
                story.append(_p(f"[{label}] {answer['answer']}", s["body"]))

    logger.debug(f"Rendering report PDF for {evaluation_ref}")
    return _build(story)
