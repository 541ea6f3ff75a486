# evaluation_app/management/commands/seed_demo.py
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from accounts.models import Role
from evaluation_app import models as m

User = get_user_model()

SCALE = [(str(i), i) for i in range(1, 8)]

QUESTIONS = [
    # (category, type, text, options)
    ("Affirmation de soi", m.QuestionType.SCALE,
     "Exprime ses opinions de manière claire et constructive.", SCALE),
    ("Affirmation de soi", m.QuestionType.SCALE,
     "Défend ses idées face à la contradiction.", SCALE),
    ("Développement des autres", m.QuestionType.SINGLE_CHOICE,
     "Accompagne les membres de l'équipe dans leur progression.",
     [("Jamais", 1), ("Parfois", 3), ("Souvent", 5), ("Toujours", 7)]),
    ("Communication", m.QuestionType.MULTIPLE_CHOICE,
     "Canaux de communication privilégiés.",
     [("Réunions", 0), ("Email", 0), ("Entretiens individuels", 0)]),
    ("AUTRE", m.QuestionType.TEXT,
     "Quels sont les principaux points forts de la personne évaluée ?", []),
]


class Command(BaseCommand):
    help = "Seed database with a demo 360° evaluation."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="demo1234", help="Password of every demo account.")

    @transaction.atomic
    def handle(self, *args, **options):
        now = timezone.now()
        password = options["password"]

        # helper
        def mk_user(name, email, role, post):
            user, created = User.all_objects.get_or_create(
                email=email,
                defaults=dict(name=name, role=role, post=post, is_first_login=False),
            )
            if created:
                user.set_password(password)
                if role == Role.ADMIN:
                    user.is_staff = True
                    user.is_superuser = True
                user.save()
            return user

        # 1) users
        mk_user("Alice Admin", "admin@demo.local", Role.ADMIN, "RH")
        candidate = mk_user("Chloé Candidate", "chloe@demo.local", Role.CANDIDAT, "Directrice commerciale")
        evaluators = [
            (mk_user("Marc Manager", "marc@demo.local", Role.EVALUATOR, "Directeur général"), m.EvaluatorType.DIRECT_MANAGER),
            (mk_user("Paul Pair", "paul@demo.local", Role.EVALUATOR, "Directeur marketing"), m.EvaluatorType.PEER),
            (mk_user("Sara Collègue", "sara@demo.local", Role.EVALUATOR, "Responsable des ventes"), m.EvaluatorType.DIRECT_COLLEAGUE),
        ]

        # 2) quiz
        quiz, created = m.Quiz.objects.get_or_create(
            title="Leadership 360",
            defaults=dict(description="Questionnaire de démonstration."),
        )
        if created:
            for order, (category, qtype, text, options_) in enumerate(QUESTIONS, start=1):
                question = m.Question.objects.create(
                    quiz=quiz, text=text, type=qtype, category=category, order=order,
                )
                m.Option.objects.bulk_create([
                    m.Option(question=question, text=label, value=value) for label, value in options_
                ])

        # 3) evaluation + participants
        evaluation, _ = m.Evaluation.objects.get_or_create(
            ref="DEMO-360",
            defaults=dict(quiz=quiz, deadline=now + timedelta(days=14)),
        )
        m.EvaluationParticipant.objects.get_or_create(
            evaluation=evaluation, user=candidate, participant_role=m.ParticipantRole.CANDIDAT,
        )
        for user, evaluator_type in evaluators:
            m.EvaluationParticipant.objects.get_or_create(
                evaluation=evaluation, user=user, participant_role=m.ParticipantRole.EVALUATOR,
                defaults=dict(evaluator_type=evaluator_type),
            )

        # 4) settings
        m.SystemConfig.load()

        self.stdout.write(self.style.SUCCESS(
            f"Demo data ready: evaluation {evaluation.ref} with {evaluation.participants.count()} participants."
        ))
