import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from evaluation_app.models import SystemConfig
from evaluation_app.permissions import IsAdmin
from evaluation_app.serializers.config_serializer import SystemConfigSerializer

logger = logging.getLogger(__name__)


class SystemConfigView(APIView):
    """
    GET  /config/ → reminder settings
    PUT  /config/ → change `reminderFrequency` / `reminderEnabled`
    """
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response({"config": SystemConfigSerializer(SystemConfig.load()).data})

    def put(self, request):
        if not request.data:
            return Response({"error": "No data to update", "statusCode": status.HTTP_400_BAD_REQUEST},
                            status=status.HTTP_400_BAD_REQUEST)
        config = SystemConfig.load()
        serializer = SystemConfigSerializer(config, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Reminder settings updated by {request.user.email}: "
                    f"{config.reminder_frequency}, enabled={config.reminder_enabled}")
        return Response({"message": "Configuration updated.", "config": serializer.data})

    patch = put
