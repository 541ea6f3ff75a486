# evaluation_app/urls/api.py
from rest_framework.routers import DefaultRouter
from accounts.views import UserViewSet
from evaluation_app.views.auth import (
    EmailLoginView, SignUpView, RequestPasswordResetView, ResetPasswordView,
)
from evaluation_app.views.quizViewSet import QuizViewSet
from evaluation_app.views.questionViewSet import QuestionViewSet
from evaluation_app.views.evaluationViewSet import EvaluationViewSet
from evaluation_app.views.participantViewSet import ParticipantViewSet
from evaluation_app.views.candidateEvaluationViewSet import CandidateEvaluationViewSet
from evaluation_app.views.reportViewSet import ReportViewSet
from evaluation_app.views.systemConfigViewSet import SystemConfigView

from django.urls import path
from rest_framework_simplejwt.views import  (
           TokenRefreshView,    # POST /api/auth/refresh/
           TokenBlacklistView     # POST /api/auth/logout/ (requires blacklist app)
)

router = DefaultRouter()

router.register("users", UserViewSet, basename="user")  #GET /api/users/  & /api/users/me/
router.register("quizzes", QuizViewSet, basename="quiz")  #GET /api/quizzes/ & /api/quizzes/{id}/questions/
router.register("questions", QuestionViewSet, basename="question")
router.register("evaluations", EvaluationViewSet, basename="evaluation")  #POST /api/evaluations/new/participant/
router.register("evaluation-participants", ParticipantViewSet, basename="participant")
#GET /api/candidate-evaluations/quiz/{quizId}/ & POST /api/candidate-evaluations/participant/{id}/
router.register("candidate-evaluations", CandidateEvaluationViewSet, basename="candidate-evaluation")
router.register("reports", ReportViewSet, basename="report")

urlpatterns = [
    # JWT
    path("auth/login/",   EmailLoginView.as_view(),   name="jwt-login"),
    path("auth/refresh/", TokenRefreshView.as_view(),      name="jwt-refresh"),
    path("auth/logout/",  TokenBlacklistView.as_view(),    name="jwt-logout"),
    path("auth/signup/",  SignUpView.as_view(),            name="signup"),
    path("auth/request-password-reset/", RequestPasswordResetView.as_view(), name="request-password-reset"),
    path("auth/reset-password/",         ResetPasswordView.as_view(),        name="reset-password"),
    # settings
    path("config/", SystemConfigView.as_view(), name="config"),
    # REST resources
    *router.urls
]
