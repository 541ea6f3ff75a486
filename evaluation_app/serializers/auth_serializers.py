# evaluation_app/serializers/auth_serializers.py
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from django.contrib.auth import authenticate, get_user_model
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from accounts.serializers.user_serializer import UserSerializer

User = get_user_model()

class EmailLoginSerializer(TokenObtainPairSerializer):
    """
    email + password login.

    Returns both tokens plus the user. `isFirstLogin` in the response tells the
    frontend the password was a temporary one; the flag is cleared right after.
    """
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # SimpleJWT auto-adds a required field named self.username_field (usually "username")
        # Relax it so email-only logins don't error.
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False
            self.fields[self.username_field].allow_blank = True

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["name"] = user.name or user.email
        return token

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get("request"),
            email=attrs.get("email"),
            password=attrs.get("password"),
        )
        if not user:
            raise AuthenticationFailed("Invalid email or password.")

        was_first_login = user.is_first_login
        refresh = self.get_token(user)
        data = {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user": {**UserSerializer(user, context=self.context).data, "isFirstLogin": was_first_login},
        }

        if was_first_login:
            user.is_first_login = False
            user.save(update_fields=["is_first_login", "updated_at"])

        self.user = user
        return data


def blacklist_user_tokens(user):
    """Revoke every outstanding refresh token of `user`."""
    for outstanding in OutstandingToken.objects.filter(user=user):
        BlacklistedToken.objects.get_or_create(token=outstanding)


def tokens_for(user):
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}
