from django.contrib import admin
from .import models as m
from .services.evaluation_progress import sync_evaluation_completion


# ───────────────────────────────
#  Basic inline helpers
# ───────────────────────────────
class OptionInline(admin.TabularInline):
    model = m.Option
    extra = 0


class QuestionInline(admin.TabularInline):
    model = m.Question
    extra = 0
    fields = ("order", "text", "type", "category", "subcategory", "weight")
    show_change_link = True


class ParticipantInline(admin.TabularInline):
    model = m.EvaluationParticipant
    extra = 0
    autocomplete_fields = ["user"]
    fields = ("user", "participant_role", "evaluator_type", "mail_sent_at", "reminder_sent_at", "completed_at")
    readonly_fields = ("mail_sent_at", "reminder_sent_at")


class AnswerOptionInline(admin.TabularInline):
    model = m.AnswerOption
    extra = 0


# ───────────────────────────────
#  Quiz / Question
# ───────────────────────────────
@admin.register(m.Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "is_active", "deleted_at", "created_at")
    search_fields = ("title",)
    list_filter = ("is_active",)
    inlines = [QuestionInline]


@admin.register(m.Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("text", "quiz", "type", "category", "order")
    search_fields = ("text", "category", "quiz__title")
    list_filter = ("type", "category", "quiz")
    inlines = [OptionInline]


# ───────────────────────────────
#  Evaluation
# ───────────────────────────────
@admin.register(m.Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = ("ref", "quiz", "deadline", "is_completed", "completed_at")
    search_fields = ("ref",)
    list_filter = ("is_completed",)
    inlines = [ParticipantInline]
    actions = ["recompute_completion"]

    @admin.action(description="Recompute completion from participants")
    def recompute_completion(self, request, queryset):
        for evaluation in queryset:
            sync_evaluation_completion(evaluation)
        self.message_user(request, f"Recomputed for {queryset.count()} evaluations.")


@admin.register(m.EvaluationParticipant)
class EvaluationParticipantAdmin(admin.ModelAdmin):
    list_display = ("user", "evaluation", "participant_role", "evaluator_type", "mail_sent_at", "completed_at")
    search_fields = ("user__email", "user__name", "evaluation__ref")
    list_filter = ("participant_role", "evaluator_type")
    autocomplete_fields = ["user", "evaluation"]


@admin.register(m.Answer)
class AnswerAdmin(admin.ModelAdmin):
    list_display = ("participant", "question", "is_draft", "submitted_at")
    list_filter = ("is_draft",)
    search_fields = ("participant__user__email", "question__text")
    inlines = [AnswerOptionInline]


# ───────────────────────────────
#  System configuration
# ───────────────────────────────
@admin.register(m.SystemConfig)
class SystemConfigAdmin(admin.ModelAdmin):
    list_display = ("reminder_frequency", "reminder_enabled", "last_reminder_check", "updated_at")
