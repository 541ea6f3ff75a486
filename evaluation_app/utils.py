from rest_framework import serializers

from evaluation_app.models import EvaluatorType

class LabelChoiceField(serializers.ChoiceField):
    def to_internal_value(self, data):
        data_str = str(data)
        if data_str in self.choices:
            return data_str
        for key, label in self.choices.items():
            if label == data:
                return key

        for key, label in self.choices.items():
            if label.lower() == data_str.lower():
                return key
        self.fail('invalid_choice', input=data)
    def to_representation(self, value):
        return self.choices.get(value, super().to_representation(value))


# ── Evaluator type vocabulary ────────────────────────────────────────────
# Stored enum value ↔ key used by the frontend and in reports.
CANDIDATE_KEY = "CANDIDAT"

EVALUATOR_TYPE_KEYS = {
    EvaluatorType.DIRECT_MANAGER:   "MANAGER",
    EvaluatorType.PEER:             "PAIR",
    EvaluatorType.DIRECT_COLLEAGUE: "SUBORDONNES",
    EvaluatorType.OTHER:            "AUTRES",
}
EVALUATOR_TYPES_BY_KEY = {key: value for value, key in EVALUATOR_TYPE_KEYS.items()}

# every bucket a report shows, candidate last
REPORT_KEYS = list(EVALUATOR_TYPE_KEYS.values()) + [CANDIDATE_KEY]


def evaluator_type_key(evaluator_type):
    """Stored type → client key. Untyped evaluators count as AUTRES."""
    return EVALUATOR_TYPE_KEYS.get(evaluator_type, EVALUATOR_TYPE_KEYS[EvaluatorType.OTHER])


def evaluator_type_from_key(key):
    """Client key (or stored value) → stored type; None when unknown."""
    if key in EVALUATOR_TYPES_BY_KEY:
        return EVALUATOR_TYPES_BY_KEY[key]
    if key in EvaluatorType.values:
        return key
    return None


class EvaluatorTypeField(LabelChoiceField):
    """Accepts MANAGER / PAIR / ... as well as the stored values and labels."""
    def __init__(self, **kwargs):
        super().__init__(choices=EvaluatorType.choices, **kwargs)

    def to_internal_value(self, data):
        value = evaluator_type_from_key(str(data).upper())
        if value is not None:
            return value
        return super().to_internal_value(data)

    def to_representation(self, value):
        return evaluator_type_key(value) if value else None
