from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model

User = get_user_model()

class FlexibleAuthBackend(ModelBackend):
    """
    Authenticate with email + password. `username` is accepted as an alias
    because simplejwt and the admin login both post the identifier under it.
    """
    def authenticate(self, request, username=None, password=None, **kwargs):
        identifier = kwargs.get("email") or username

        if not password or not identifier:
            return None

        try:
            user = User.objects.get(email__iexact=identifier.strip())
        except User.DoesNotExist:
            # run the hasher anyway to keep timing flat
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    def user_can_authenticate(self, user):
        return super().user_can_authenticate(user) and user.deleted_at is None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
