import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from accounts.models import PasswordResetToken
from accounts.serializers.password_change_serializer import (
    PasswordResetConfirmSerializer, PasswordResetRequestSerializer,
)
from accounts.serializers.user_serializer import SignUpSerializer, UserSerializer
from evaluation_app.serializers.auth_serializers import (
    EmailLoginSerializer, blacklist_user_tokens, tokens_for,
)
from evaluation_app.services.mailer import Mailer
from evaluation_app.services.notifications import send_password_reset

logger = logging.getLogger(__name__)
User = get_user_model()

class EmailLoginView(TokenObtainPairView):
    serializer_class = EmailLoginSerializer


class SignUpView(APIView):
    """POST /api/auth/signup/ (JSON or multipart with `avatar`)."""
    permission_classes = [AllowAny]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request):
        serializer = SignUpSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(
            {"user": UserSerializer(user, context={"request": request}).data, **tokens_for(user)},
            status=status.HTTP_201_CREATED,
        )


class RequestPasswordResetView(APIView):
    """
    Always answers 200 so the endpoint cannot be used to probe which
    emails have an account.
    """
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(email__iexact=serializer.validated_data["email"]).first()
        if user is not None:
            # one live link at a time
            PasswordResetToken.objects.filter(user=user, used=False).update(used=True)
            token = PasswordResetToken.objects.create(user=user)
            if not send_password_reset(user, token, Mailer()):
                logger.warning(f"Password reset email for user {user.pk} could not be sent")

        return Response(
            {"message": "If an account exists for this email, a reset link has been sent."},
            status=status.HTTP_200_OK,
        )


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = PasswordResetConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        token = (PasswordResetToken.objects
                 .select_related("user")
                 .filter(token=serializer.validated_data["token"])
                 .first())
        if token is None or not token.is_valid or token.user.deleted_at is not None:
            return Response({"error": "Invalid or expired token."}, status=status.HTTP_400_BAD_REQUEST)

        user = token.user
        with transaction.atomic():
            user.set_password(serializer.validated_data["new_password"])
            user.is_first_login = False
            user.save(update_fields=["password", "is_first_login", "updated_at"])
            token.used = True
            token.save(update_fields=["used"])
            # every session opened with the old password ends here
            blacklist_user_tokens(user)

        return Response({"message": "Password has been reset."}, status=status.HTTP_200_OK)
