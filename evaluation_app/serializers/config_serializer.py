from rest_framework import serializers

from evaluation_app.models import ReminderFrequency, SystemConfig
from evaluation_app.utils import LabelChoiceField


class SystemConfigSerializer(serializers.ModelSerializer):
    reminderFrequency = LabelChoiceField(source="reminder_frequency", choices=ReminderFrequency.choices, required=False)
    reminderEnabled   = serializers.BooleanField(source="reminder_enabled", required=False)
    lastReminderCheck = serializers.DateTimeField(source="last_reminder_check", read_only=True)
    updatedAt         = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = SystemConfig
        fields = ["id", "reminderFrequency", "reminderEnabled", "lastReminderCheck", "updatedAt"]
        read_only_fields = ("id",)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["reminderFrequency"] = instance.reminder_frequency
        return data
