from django.db import transaction
from rest_framework import serializers

from evaluation_app.models import Option, Question, QuestionType, Quiz
from evaluation_app.utils import LabelChoiceField


class OptionSerializer(serializers.ModelSerializer):
    isKey = serializers.BooleanField(source="is_key", required=False, default=False)

    class Meta:
        model = Option
        fields = ["id", "text", "value", "isKey"]
        read_only_fields = ("id",)


class QuestionSerializer(serializers.ModelSerializer):
    """
    Question with its options. Writing `options` replaces the whole option
    list of the question.
    """
    type          = LabelChoiceField(choices=QuestionType.choices, required=False)
    quizId        = serializers.IntegerField(source="quiz_id", read_only=True)
    developOthers = serializers.BooleanField(source="develop_others", required=False)
    options       = OptionSerializer(many=True, required=False)

    class Meta:
        model = Question
        fields = ["id", "quizId", "text", "type", "category", "subcategory",
                  "order", "weight", "language", "developOthers", "options"]
        read_only_fields = ("id",)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["type"] = instance.type
        return data

    def validate(self, attrs):
        qtype = attrs.get("type", getattr(self.instance, "type", QuestionType.SINGLE_CHOICE))
        options = attrs.get("options")
        if qtype in (QuestionType.SINGLE_CHOICE, QuestionType.MULTIPLE_CHOICE) and options is not None and not options:
            raise serializers.ValidationError({"options": "Choice questions need at least one option."})
        return attrs

    @staticmethod
    def _write_options(question, options):
        question.options.all().delete()
        Option.objects.bulk_create([Option(question=question, **o) for o in options])

    @transaction.atomic
    def create(self, validated_data):
        options = validated_data.pop("options", [])
        question = Question.objects.create(**validated_data)
        self._write_options(question, options)
        return question

    @transaction.atomic
    def update(self, instance, validated_data):
        options = validated_data.pop("options", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if options is not None:
            self._write_options(instance, options)
        return instance


class QuizSerializer(serializers.ModelSerializer):
    isActive      = serializers.BooleanField(source="is_active", required=False)
    createdAt     = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt     = serializers.DateTimeField(source="updated_at", read_only=True)
    questions     = QuestionSerializer(many=True, required=False)
    questionCount = serializers.SerializerMethodField()

    class Meta:
        model = Quiz
        fields = ["id", "title", "description", "isActive", "createdAt", "updatedAt",
                  "questionCount", "questions"]
        read_only_fields = ("id",)

    def get_questionCount(self, obj):
        return len(obj.questions.all())

    @transaction.atomic
    def create(self, validated_data):
        questions = validated_data.pop("questions", [])
        quiz = Quiz.objects.create(**validated_data)
        for index, data in enumerate(questions):
            options = data.pop("options", [])
            data.setdefault("order", index + 1)
            question = Question.objects.create(quiz=quiz, **data)
            QuestionSerializer._write_options(question, options)
        return quiz

    def update(self, instance, validated_data):
        # questions are edited through their own endpoints
        validated_data.pop("questions", None)
        return super().update(instance, validated_data)


class QuizListSerializer(QuizSerializer):
    class Meta(QuizSerializer.Meta):
        fields = ["id", "title", "description", "isActive", "createdAt", "updatedAt", "questionCount"]
