from rest_framework import serializers
from django.contrib.auth import get_user_model

from accounts.models import Role
from evaluation_app.exceptions import Conflict
from evaluation_app.utils import LabelChoiceField


User = get_user_model()


def ensure_unique_contact(email=None, phone=None, exclude_pk=None):
    """409 when another (non-deleted or deleted) account already owns the email or phone."""
    qs = User.all_objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if email and qs.filter(email__iexact=email).exists():
        raise Conflict("A user with this email already exists.")
    if phone and qs.filter(phone=phone).exists():
        raise Conflict("A user with this phone number already exists.")


class UserSerializer(serializers.ModelSerializer):
    """Read shape shared by every endpoint returning a user."""
    role         = LabelChoiceField(choices=Role.choices, required=False)
    isFirstLogin = serializers.BooleanField(source="is_first_login", read_only=True)
    createdAt    = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt    = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "post", "role", "avatar",
                  "isFirstLogin", "createdAt", "updatedAt"]
        read_only_fields = ("id",)
        extra_kwargs = {
            "email": {"validators": []},
            "phone": {"validators": []},
        }

    def to_representation(self, instance):
        data = super().to_representation(instance)
        # clients switch on the raw role key
        data["role"] = instance.role
        return data


class UserCreateSerializer(UserSerializer):
    """Admin create / update. Hashes password when supplied."""
    password = serializers.CharField(write_only=True, min_length=6, required=False)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["password"]

    def validate(self, attrs):
        ensure_unique_contact(
            email=attrs.get("email"),
            phone=attrs.get("phone"),
            exclude_pk=getattr(self.instance, "pk", None),
        )
        return attrs

    def create(self, validated_data):  # called by viewset
        password = validated_data.pop("password", None)
        user = User(**validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    #---------------UPDATE / PATCH----------------
    def update(self, instance, validated_data):
        pwd = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if pwd:
            instance.set_password(pwd)
        instance.save()
        return instance


class SignUpSerializer(serializers.ModelSerializer):
    """
    Public sign-up. Accepts JSON or multipart (avatar upload); DRF's parsers hand us
    plain values either way so nothing downstream sees the transport format.
    """
    password = serializers.CharField(write_only=True, min_length=6)
    role = LabelChoiceField(choices=Role.choices, required=False)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "post", "role", "avatar", "password"]
        read_only_fields = ("id",)
        extra_kwargs = {
            "email": {"validators": []},
            "phone": {"validators": []},
        }

    def validate_role(self, value):
        # nobody signs themselves up as an administrator
        if value == Role.ADMIN:
            raise serializers.ValidationError("Invalid role.")
        return value

    def validate(self, attrs):
        ensure_unique_contact(email=attrs.get("email"), phone=attrs.get("phone"))
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    """What a user may change about themselves."""

    isFirstLogin = serializers.BooleanField(source="is_first_login", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "email", "phone", "post", "role", "avatar", "isFirstLogin"]
        read_only_fields = ("id", "email", "role")
        extra_kwargs = {"phone": {"validators": []}}

    def validate_phone(self, value):
        if value:
            ensure_unique_contact(phone=value, exclude_pk=self.instance.pk)
        return value or None
