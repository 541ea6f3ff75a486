from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from evaluation_app.permissions import ReadOnlyOrAdmin


class ReadOnlyAuthFullAdminMixin:
    """Any authenticated user reads, only ADMIN writes."""

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [IsAuthenticated()]
        return [ReadOnlyOrAdmin()]


def positive_int(raw, name):
    """Parse an id coming from the URL or query string; 400 when it is not a positive integer."""
    try:
        value = int(str(raw))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {name}.")
    if value < 1:
        raise ValidationError(f"Invalid {name}.")
    return value
