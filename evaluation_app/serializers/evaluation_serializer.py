from rest_framework import serializers

from accounts.models import Role
from evaluation_app.models import Evaluation, EvaluationParticipant, ParticipantRole, Quiz
from evaluation_app.services.evaluation_progress import evaluation_progress
from evaluation_app.utils import EvaluatorTypeField, LabelChoiceField


class ParticipantUserSerializer(serializers.Serializer):
    id    = serializers.IntegerField()
    name  = serializers.CharField()
    email = serializers.EmailField()
    phone = serializers.CharField(allow_null=True)
    post  = serializers.CharField()
    role  = serializers.CharField()


class ParticipantSerializer(serializers.ModelSerializer):
    """Read shape of a participant, evaluator type in the client vocabulary."""
    evaluationId    = serializers.IntegerField(source="evaluation_id", read_only=True)
    userId          = serializers.IntegerField(source="user_id", read_only=True)
    participantRole = serializers.CharField(source="participant_role", read_only=True)
    evaluatorType   = EvaluatorTypeField(source="evaluator_type", read_only=True)
    completedAt     = serializers.DateTimeField(source="completed_at", read_only=True)
    mailSentAt      = serializers.DateTimeField(source="mail_sent_at", read_only=True)
    reminderSentAt  = serializers.DateTimeField(source="reminder_sent_at", read_only=True)
    createdAt       = serializers.DateTimeField(source="created_at", read_only=True)
    user            = ParticipantUserSerializer(read_only=True)

    class Meta:
        model = EvaluationParticipant
        fields = ["id", "evaluationId", "userId", "participantRole", "evaluatorType",
                  "completedAt", "mailSentAt", "reminderSentAt", "createdAt", "user"]


class EvaluationSerializer(serializers.ModelSerializer):
    """
    • Nested participants and completion progress (read-only).
    • Quiz is written as `quizId`.
    """
    quizId      = serializers.PrimaryKeyRelatedField(
        source="quiz", queryset=Quiz.objects.alive(), allow_null=True, required=False
    )
    completedAt = serializers.DateTimeField(source="completed_at", allow_null=True, required=False)
    isCompleted = serializers.BooleanField(source="is_completed", required=False)
    createdAt   = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt   = serializers.DateTimeField(source="updated_at", read_only=True)
    quiz        = serializers.SerializerMethodField()
    participants = ParticipantSerializer(many=True, read_only=True)

    class Meta:
        model = Evaluation
        fields = ["id", "ref", "deadline", "completedAt", "isCompleted", "quizId", "quiz",
                  "createdAt", "updatedAt", "participants"]
        read_only_fields = ("id",)

    def get_quiz(self, obj):
        if obj.quiz_id is None:
            return None
        return {"id": obj.quiz_id, "title": obj.quiz.title}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data.update(evaluation_progress(instance.participants.all()))
        return data


class AddParticipantSerializer(serializers.Serializer):
    """
    Body of POST /evaluations/new/participant/. Arrives as JSON or multipart;
    either way the view only ever sees these typed values.
    """
    evaluationId  = serializers.IntegerField(min_value=1)
    name          = serializers.CharField(max_length=120)
    email         = serializers.EmailField()
    phone         = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)
    post          = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    role          = LabelChoiceField(choices=ParticipantRole.choices)
    evaluatorType = EvaluatorTypeField(required=False, allow_null=True)

    def validate_email(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        if attrs["role"] == ParticipantRole.EVALUATOR and not attrs.get("evaluatorType"):
            raise serializers.ValidationError({"evaluatorType": "Evaluator type is required for evaluators."})
        if attrs["role"] == ParticipantRole.CANDIDAT:
            attrs["evaluatorType"] = None
        return attrs

    @property
    def user_role(self):
        """Account role given to a user created for this participant."""
        return Role.CANDIDAT if self.validated_data["role"] == ParticipantRole.CANDIDAT else Role.EVALUATOR


class CandidateEvaluationSerializer(EvaluationSerializer):
    """Evaluation as seen by one of its participants."""
    currentParticipantId = serializers.SerializerMethodField()

    class Meta(EvaluationSerializer.Meta):
        fields = EvaluationSerializer.Meta.fields + ["currentParticipantId"]

    def get_currentParticipantId(self, obj):
        user = self.context["request"].user
        for p in obj.participants.all():
            if p.user_id == user.pk:
                return p.pk
        return None


class ReportSummarySerializer(EvaluationSerializer):
    """Row of the reports list: the evaluation, its candidate and its progress."""
    candidat = serializers.SerializerMethodField()

    class Meta(EvaluationSerializer.Meta):
        fields = EvaluationSerializer.Meta.fields + ["candidat"]

    def get_candidat(self, obj):
        candidate = obj.candidate
        if candidate is None:
            return None
        return ParticipantUserSerializer(candidate.user).data
