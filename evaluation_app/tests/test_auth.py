import pytest
from datetime import timedelta
from django.contrib.auth import get_user_model
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from accounts.models import PasswordResetToken

User = get_user_model()
NEW_PASSWORD = "Str0ng-Passw0rd!"


@pytest.mark.django_db
class TestLogin:
    def test_login_returns_tokens_and_clears_first_login(self, api_client, create_user):
        user = create_user(email="first@test.local", is_first_login=True)
        res = api_client.post(reverse("jwt-login"),
                              {"email": "first@test.local", "password": "pass12345"}, format="json")

        assert res.status_code == 200
        assert res.data["access"] and res.data["refresh"]
        assert res.data["user"]["isFirstLogin"] is True
        user.refresh_from_db()
        assert user.is_first_login is False

    def test_email_is_case_insensitive(self, api_client, create_user):
        create_user(email="case@test.local")
        res = api_client.post(reverse("jwt-login"),
                              {"email": "CASE@test.local", "password": "pass12345"}, format="json")
        assert res.status_code == 200

    def test_wrong_password_is_401(self, api_client, create_user):
        create_user(email="who@test.local")
        res = api_client.post(reverse("jwt-login"),
                              {"email": "who@test.local", "password": "nope"}, format="json")
        assert res.status_code == 401
        assert "error" in res.data

    def test_soft_deleted_account_cannot_login(self, api_client, create_user):
        user = create_user(email="gone@test.local")
        user.soft_delete()
        res = api_client.post(reverse("jwt-login"),
                              {"email": "gone@test.local", "password": "pass12345"}, format="json")
        assert res.status_code == 401


@pytest.mark.django_db
class TestSignUp:
    def test_signup_creates_account_and_tokens(self, api_client):
        res = api_client.post(reverse("signup"), {
            "name": "Nina", "email": "nina@test.local", "password": "secret1", "role": "CANDIDAT",
        }, format="json")

        assert res.status_code == 201
        assert res.data["user"]["role"] == "CANDIDAT"
        assert "access" in res.data
        assert User.objects.get(email="nina@test.local").check_password("secret1")

    def test_signup_as_admin_is_rejected(self, api_client):
        res = api_client.post(reverse("signup"), {
            "name": "Eve", "email": "eve@test.local", "password": "secret1", "role": "ADMIN",
        }, format="json")
        assert res.status_code == 400

    def test_duplicate_email_is_409(self, api_client, create_user):
        create_user(email="taken@test.local")
        res = api_client.post(reverse("signup"), {
            "name": "Dup", "email": "taken@test.local", "password": "secret1",
        }, format="json")
        assert res.status_code == 409

    def test_short_password_is_400(self, api_client):
        res = api_client.post(reverse("signup"), {
            "name": "Shorty", "email": "short@test.local", "password": "12345",
        }, format="json")
        assert res.status_code == 400
        assert "password" in res.data["details"]


@pytest.mark.django_db
class TestPasswordReset:
    def test_request_always_answers_200(self, api_client):
        res = api_client.post(reverse("request-password-reset"), {"email": "nobody@test.local"}, format="json")
        assert res.status_code == 200
        assert len(mail.outbox) == 0

    def test_request_emails_a_single_live_token(self, api_client, create_user):
        user = create_user(email="reset@test.local")
        url = reverse("request-password-reset")
        api_client.post(url, {"email": "reset@test.local"}, format="json")
        api_client.post(url, {"email": "reset@test.local"}, format="json")

        assert len(mail.outbox) == 2
        live = PasswordResetToken.objects.filter(user=user, used=False)
        assert live.count() == 1
        assert live.get().token in mail.outbox[1].body

    def test_reset_sets_password_and_revokes_sessions(self, api_client, create_user):
        user = create_user(email="reset@test.local")
        login = api_client.post(reverse("jwt-login"),
                                {"email": "reset@test.local", "password": "pass12345"}, format="json")
        assert login.status_code == 200
        token = PasswordResetToken.objects.create(user=user)

        res = api_client.post(reverse("reset-password"),
                              {"token": token.token, "newPassword": NEW_PASSWORD}, format="json")

        assert res.status_code == 200
        user.refresh_from_db()
        token.refresh_from_db()
        assert user.check_password(NEW_PASSWORD)
        assert token.used is True
        outstanding = OutstandingToken.objects.filter(user=user)
        assert outstanding.exists()
        assert BlacklistedToken.objects.filter(token__in=outstanding).count() == outstanding.count()

        refreshed = api_client.post(reverse("jwt-refresh"), {"refresh": login.data["refresh"]}, format="json")
        assert refreshed.status_code == 401

    def test_expired_or_used_token_is_400(self, api_client, create_user):
        user = create_user()
        expired = PasswordResetToken.objects.create(user=user, expires_at=timezone.now() - timedelta(minutes=1))
        used = PasswordResetToken.objects.create(user=user, used=True)
        url = reverse("reset-password")

        for token in (expired, used):
            res = api_client.post(url, {"token": token.token, "newPassword": NEW_PASSWORD}, format="json")
            assert res.status_code == 400
        res = api_client.post(url, {"token": "bogus", "newPassword": NEW_PASSWORD}, format="json")
        assert res.status_code == 400


@pytest.mark.django_db
def test_logout_blacklists_refresh_token(api_client, create_user):
    create_user(email="bye@test.local")
    login = api_client.post(reverse("jwt-login"),
                            {"email": "bye@test.local", "password": "pass12345"}, format="json")
    res = api_client.post(reverse("jwt-logout"), {"refresh": login.data["refresh"]}, format="json")
    assert res.status_code == 200
    again = api_client.post(reverse("jwt-refresh"), {"refresh": login.data["refresh"]}, format="json")
    assert again.status_code == 401
