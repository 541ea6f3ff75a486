import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "quizzes",
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.TextField()),
                ("type", models.CharField(choices=[("TEXT", "Text"), ("SCALE", "Scale"), ("SINGLE_CHOICE", "Single choice"), ("MULTIPLE_CHOICE", "Multiple choice")], default="SINGLE_CHOICE", max_length=16)),
                ("category", models.CharField(default="SUMMIT", max_length=60)),
                ("subcategory", models.CharField(blank=True, max_length=60, null=True)),
                ("order", models.PositiveIntegerField(default=0)),
                ("weight", models.DecimalField(decimal_places=2, default=1, max_digits=6)),
                ("language", models.CharField(default="fr", max_length=8)),
                ("develop_others", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="questions", to="evaluation_app.quiz")),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Option",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.CharField(max_length=255)),
                ("value", models.FloatField(default=0)),
                ("is_key", models.BooleanField(default=False)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="options", to="evaluation_app.question")),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Evaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ref", models.CharField(max_length=60)),
                ("deadline", models.DateTimeField()),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("is_completed", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quiz", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="evaluations", to="evaluation_app.quiz")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="EvaluationParticipant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("participant_role", models.CharField(choices=[("CANDIDAT", "Candidat"), ("EVALUATOR", "Evaluator")], max_length=10)),
                ("evaluator_type", models.CharField(blank=True, choices=[("DIRECT_MANAGER", "Direct manager"), ("DIRECT_COLLEAGUE", "Direct colleague"), ("PEER", "Peer"), ("OTHER", "Other")], max_length=20, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("mail_sent_at", models.DateTimeField(blank=True, null=True)),
                ("reminder_sent_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("evaluation", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participants", to="evaluation_app.evaluation")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="participations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.AddConstraint(
            model_name="evaluationparticipant",
            constraint=models.UniqueConstraint(fields=("evaluation", "user", "participant_role"), name="uniq_participant_role_per_eval"),
        ),
        migrations.CreateModel(
            name="Answer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text_answer", models.TextField(blank=True, null=True)),
                ("numeric_answer", models.FloatField(blank=True, null=True)),
                ("is_draft", models.BooleanField(default=False)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("participant", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="evaluation_app.evaluationparticipant")),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="answers", to="evaluation_app.question")),
                ("selected_option", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="evaluation_app.option")),
            ],
        ),
        migrations.AddConstraint(
            model_name="answer",
            constraint=models.UniqueConstraint(fields=("participant", "question"), name="uniq_answer_per_question"),
        ),
        migrations.CreateModel(
            name="AnswerOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("answer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="selected_options", to="evaluation_app.answer")),
                ("option", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to="evaluation_app.option")),
            ],
        ),
        migrations.AddConstraint(
            model_name="answeroption",
            constraint=models.UniqueConstraint(fields=("answer", "option"), name="uniq_option_per_answer"),
        ),
        migrations.CreateModel(
            name="SystemConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reminder_frequency", models.CharField(choices=[("HOURLY_1", "Every hour"), ("HOURLY_2", "Every 2 hours"), ("DAILY_1", "Every day"), ("DAILY_3", "Every 3 days"), ("WEEKLY_1", "Every week")], default="DAILY_1", max_length=10)),
                ("reminder_enabled", models.BooleanField(default=True)),
                ("last_reminder_check", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "system configuration",
            },
        ),
    ]
