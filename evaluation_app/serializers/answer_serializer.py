import json

from rest_framework import serializers

from evaluation_app.models import Answer

class AnswerInputSerializer(serializers.Serializer):
    questionId        = serializers.IntegerField(min_value=1)
    selectedOptionId  = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    selectedOptionIds = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False, allow_empty=True)
    textAnswer        = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    numericAnswer     = serializers.FloatField(required=False, allow_null=True)

class SubmitAnswersSerializer(serializers.Serializer):
    evaluationId  = serializers.IntegerField(min_value=1)
    isDraft       = serializers.BooleanField(required=False, default=False)
    isFinalSubmit = serializers.BooleanField(required=False, default=False)
    answers       = AnswerInputSerializer(many=True, allow_empty=True)

    def to_internal_value(self, data):
        # multipart bodies carry the answer list as a JSON string
        if hasattr(data, "getlist"):
            data = data.dict()
            if isinstance(data.get("answers"), str):
                try:
                    data["answers"] = json.loads(data["answers"] or "[]")
                except ValueError:
                    raise serializers.ValidationError({"answers": ["Expected a JSON list of answers."]})
        return super().to_internal_value(data)


class AnswerSerializer(serializers.ModelSerializer):
    questionId        = serializers.IntegerField(source="question_id", read_only=True)
    selectedOptionId  = serializers.IntegerField(source="selected_option_id", read_only=True)
    selectedOptionIds = serializers.SerializerMethodField()
    textAnswer        = serializers.CharField(source="text_answer", read_only=True)
    numericAnswer     = serializers.FloatField(source="numeric_answer", read_only=True)
    isDraft           = serializers.BooleanField(source="is_draft", read_only=True)
    submittedAt       = serializers.DateTimeField(source="submitted_at", read_only=True)

    class Meta:
        model = Answer
        fields = ["id", "questionId", "selectedOptionId", "selectedOptionIds",
                  "textAnswer", "numericAnswer", "isDraft", "submittedAt"]

    def get_selectedOptionIds(self, obj):
        return [ao.option_id for ao in obj.selected_options.all()]
