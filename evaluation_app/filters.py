import django_filters as filters
from evaluation_app.models import Evaluation, Question
class QuestionFilter(filters.FilterSet):
    # expose nice query params…
    quiz_id  = filters.NumberFilter(field_name="quiz_id", lookup_expr="exact")
    category = filters.CharFilter(field_name="category", lookup_expr="iexact")
    type     = filters.CharFilter(field_name="type", lookup_expr="exact")  # use keys e.g. SCALE
    language = filters.CharFilter(field_name="language", lookup_expr="exact")

    class Meta:
        model = Question
        fields = ["quiz_id", "category", "type", "language"]

class EvaluationFilter(filters.FilterSet):
    ref          = filters.CharFilter(field_name="ref", lookup_expr="icontains")
    is_completed = filters.BooleanFilter(field_name="is_completed")
    quiz_id      = filters.NumberFilter(field_name="quiz_id")
    user_id      = filters.NumberFilter(field_name="participants__user_id", distinct=True)

    class Meta:
        model = Evaluation
        fields = ["ref", "is_completed", "quiz_id", "user_id"]
