from accounts.serializers.user_serializer import UserCreateSerializer, ProfileSerializer
from django.contrib.auth import get_user_model
from evaluation_app.permissions import IsAdmin
from rest_framework.permissions import IsAuthenticated
from rest_framework import viewsets, filters
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from accounts.serializers.password_change_serializer import PasswordChangeSerializer
from rest_framework.response import Response
from rest_framework import status
from rest_framework.decorators import action
User = get_user_model()

class UserViewSet(viewsets.ModelViewSet):
    """
    • ADMIN → list / create / update / delete any account.
    • Everybody → `me` (own profile) and `change-password`.
    Deleting only soft-deletes: the account disappears from every query
    but its evaluation history stays intact.
    """
    serializer_class = UserCreateSerializer
    queryset = User.objects.all().order_by("-created_at")
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "email", "phone", "post"]
    ordering_fields = ["name", "email", "created_at"]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    results_key = "users"

    def get_permissions(self):
        if self.action in ("me", "change_password"):
            return [IsAuthenticated()]
        return [IsAdmin()]

    def get_queryset(self):
        qs = super().get_queryset()
        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role.upper())
        return qs

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            self.permission_denied(self.request, message="You cannot delete your own account.")
        instance.soft_delete()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response({
            "message": "User deleted successfully."
        }, status=status.HTTP_200_OK)

    #--------------------------------------------
    @action(detail=False, methods=["get", "put", "patch"], url_path="me")
    def me(self, request):
        user = request.user
        if request.method == "GET":
            return Response(ProfileSerializer(user, context={"request": request}).data)

        serializer = ProfileSerializer(user, data=request.data, partial=True, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data, status=status.HTTP_200_OK)

    #--------------------------------------------
    @action(
            detail=False,
            methods=["post"],
            url_path="change-password",
    )
    def change_password(self, request):
        user = request.user
        serializers =  PasswordChangeSerializer(
            data = request.data,
            context = {'request': request}
        )

        if serializers.is_valid():
            if not user.check_password(serializers.validated_data['old_password']):
                return Response(
                    {"error": "Wrong password"},
                    status=status.HTTP_400_BAD_REQUEST
                )

            user.set_password(serializers.validated_data['new_password'])
            user.is_first_login = False
            user.save()

            response_data= {
                "status": "success",
                "message": "Password changed successfully",
            }

            return Response(response_data, status=status.HTTP_200_OK)

        return Response({"error": "Invalid request data.", "details": serializers.errors},
                        status=status.HTTP_400_BAD_REQUEST)
