import secrets
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.contrib.auth.models import AbstractUser, UserManager

# Create your models here.
class Role(models.TextChoices):
    ADMIN     = "ADMIN",     "Admin"
    EVALUATOR = "EVALUATOR", "Evaluator"
    CANDIDAT  = "CANDIDAT",  "Candidat"


class ActiveUserManager(UserManager):
    """Default manager hides soft-deleted accounts."""
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class User(AbstractUser):
    name       = models.CharField(max_length=120)
    email      = models.EmailField(unique=True)
    phone      = models.CharField(max_length=30, unique=True, null=True, blank=True)
    avatar     = models.FileField(upload_to="avatars/", blank=True, null=True)
    role       = models.CharField(max_length=10, choices=Role.choices, default=Role.EVALUATOR)
    post       = models.CharField(max_length=120, blank=True)
    is_first_login = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects     = ActiveUserManager()
    all_objects = UserManager()

    class Meta:
        base_manager_name = "all_objects"

    def save(self, *args, **kwargs):
        # logins are email based; username just mirrors it
        if not self.username:
            self.username = self.email
        if self.phone == "":
            self.phone = None
        super().save(*args, **kwargs)

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.is_active = False
        self.save(update_fields=["deleted_at", "is_active", "updated_at"])

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def __str__(self):
        return self.name or self.email


def _reset_token():
    return secrets.token_hex(32)

def _reset_expiry():
    return timezone.now() + timedelta(minutes=settings.PASSWORD_RESET_TIMEOUT_MINUTES)


class PasswordResetToken(models.Model):
    user       = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="password_reset_tokens")
    token      = models.CharField(max_length=64, unique=True, default=_reset_token)
    expires_at = models.DateTimeField(default=_reset_expiry)
    used       = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def is_valid(self):
        return not self.used and self.expires_at > timezone.now()

    def __str__(self):
        return f"reset token for {self.user_id}"
