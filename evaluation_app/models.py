from datetime import timedelta

from django.db import models
from django.utils import timezone
from django.conf import settings

# ── Lookup / Enum helpers ────────────────────────────────────────────────

class ParticipantRole(models.TextChoices):
    CANDIDAT  = "CANDIDAT",  "Candidat"
    EVALUATOR = "EVALUATOR", "Evaluator"

class EvaluatorType(models.TextChoices):
    DIRECT_MANAGER   = "DIRECT_MANAGER",   "Direct manager"
    DIRECT_COLLEAGUE = "DIRECT_COLLEAGUE", "Direct colleague"
    PEER             = "PEER",             "Peer"
    OTHER            = "OTHER",            "Other"

class QuestionType(models.TextChoices):
    TEXT            = "TEXT",            "Text"
    SCALE           = "SCALE",           "Scale"
    SINGLE_CHOICE   = "SINGLE_CHOICE",   "Single choice"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE", "Multiple choice"

class ReminderFrequency(models.TextChoices):
    HOURLY_1 = "HOURLY_1", "Every hour"
    HOURLY_2 = "HOURLY_2", "Every 2 hours"
    DAILY_1  = "DAILY_1",  "Every day"
    DAILY_3  = "DAILY_3",  "Every 3 days"
    WEEKLY_1 = "WEEKLY_1", "Every week"

REMINDER_INTERVALS = {
    ReminderFrequency.HOURLY_1: timedelta(hours=1),
    ReminderFrequency.HOURLY_2: timedelta(hours=2),
    ReminderFrequency.DAILY_1:  timedelta(days=1),
    ReminderFrequency.DAILY_3:  timedelta(days=3),
    ReminderFrequency.WEEKLY_1: timedelta(weeks=1),
}

DEFAULT_CATEGORY = "SUMMIT"


# ── Question bank ────────────────────────────────────────────────────────

class QuizQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)


class Quiz(models.Model):
    title       = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    is_active   = models.BooleanField(default=True)
    deleted_at  = models.DateTimeField(null=True, blank=True)
    created_at  = models.DateTimeField(default=timezone.now)
    updated_at  = models.DateTimeField(auto_now=True)

    objects = QuizQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "quizzes"

    def __str__(self):
        return self.title


class Question(models.Model):
    quiz           = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    text           = models.TextField()
    type           = models.CharField(max_length=16, choices=QuestionType.choices, default=QuestionType.SINGLE_CHOICE)
    category       = models.CharField(max_length=60, default=DEFAULT_CATEGORY)
    subcategory    = models.CharField(max_length=60, null=True, blank=True)
    order          = models.PositiveIntegerField(default=0)
    weight         = models.DecimalField(max_digits=6, decimal_places=2, default=1)
    language       = models.CharField(max_length=8, default="fr")
    develop_others = models.BooleanField(default=False)
    created_at     = models.DateTimeField(default=timezone.now)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.order}. {self.text[:60]}"


class Option(models.Model):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="options")
    text     = models.CharField(max_length=255)
    value    = models.FloatField(default=0)
    is_key   = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.text} ({self.value})"


# ── Evaluations ──────────────────────────────────────────────────────────

class Evaluation(models.Model):
    ref          = models.CharField(max_length=60)
    deadline     = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    is_completed = models.BooleanField(default=False)
    quiz         = models.ForeignKey(Quiz, on_delete=models.SET_NULL, null=True, blank=True, related_name="evaluations")
    created_at   = models.DateTimeField(default=timezone.now)
    updated_at   = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.ref

    @property
    def candidate(self):
        """First CANDIDAT participant, or None."""
        for p in self.participants.all():
            if p.participant_role == ParticipantRole.CANDIDAT:
                return p
        return None


class EvaluationParticipant(models.Model):
    evaluation       = models.ForeignKey(Evaluation, on_delete=models.CASCADE, related_name="participants")
    user             = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="participations")
    participant_role = models.CharField(max_length=10, choices=ParticipantRole.choices)
    evaluator_type   = models.CharField(max_length=20, choices=EvaluatorType.choices, null=True, blank=True)
    completed_at     = models.DateTimeField(null=True, blank=True)
    mail_sent_at     = models.DateTimeField(null=True, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    created_at       = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["evaluation", "user", "participant_role"], name="uniq_participant_role_per_eval")
        ]

    def __str__(self):
        return f"{self.user} → {self.evaluation} ({self.participant_role})"

    @property
    def is_candidate(self):
        return self.participant_role == ParticipantRole.CANDIDAT


class Answer(models.Model):
    participant     = models.ForeignKey(EvaluationParticipant, on_delete=models.CASCADE, related_name="answers")
    question        = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="answers")
    selected_option = models.ForeignKey(Option, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    text_answer     = models.TextField(null=True, blank=True)
    numeric_answer  = models.FloatField(null=True, blank=True)
    is_draft        = models.BooleanField(default=False)
    submitted_at    = models.DateTimeField(null=True, blank=True)
    created_at      = models.DateTimeField(default=timezone.now)
    updated_at      = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["participant", "question"], name="uniq_answer_per_question")
        ]

    def __str__(self):
        return f"answer {self.participant_id}/{self.question_id}"


class AnswerOption(models.Model):
    """One ticked option of a MULTIPLE_CHOICE answer."""
    answer = models.ForeignKey(Answer, on_delete=models.CASCADE, related_name="selected_options")
    option = models.ForeignKey(Option, on_delete=models.CASCADE, related_name="+")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["answer", "option"], name="uniq_option_per_answer")
        ]


# ── System configuration ─────────────────────────────────────────────────

class SystemConfig(models.Model):
    reminder_frequency  = models.CharField(max_length=10, choices=ReminderFrequency.choices, default=ReminderFrequency.DAILY_1)
    reminder_enabled    = models.BooleanField(default=True)
    last_reminder_check = models.DateTimeField(null=True, blank=True)
    updated_at          = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "system configuration"

    @classmethod
    def load(cls):
        config = cls.objects.order_by("id").first()
        if config is None:
            config = cls.objects.create()
        return config

    @property
    def reminder_interval(self):
        return REMINDER_INTERVALS[self.reminder_frequency]

    def __str__(self):
        return f"reminders {self.reminder_frequency} ({'on' if self.reminder_enabled else 'off'})"
