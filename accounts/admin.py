from django.contrib import admin
from django.utils import timezone
from .models import User, PasswordResetToken
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

# ───────────────────────────────
#  User
# ───────────────────────────────

@admin.register(User)
class UserAdmin(BaseUserAdmin):
     list_display = ("email", "name", "role", "post", "is_first_login", "deleted_at", "created_at")
     list_filter  = ("role", "is_staff", "is_active", "is_first_login")
     search_fields = ("email", "name", "phone", "post")
     ordering = ("-created_at",)
     fieldsets = (
            (None, {"fields": ("email", "password")}),
            ("Personal info", {"fields": ("name", "phone", "post", "avatar")}),
            ("Permissions",   {"fields": ("is_active", "is_staff", "is_superuser", "role", "is_first_login")}),
            ("Dates",         {"fields": ("last_login", "created_at", "deleted_at")}),
        )
     add_fieldsets = (
            (None, {"classes": ("wide",), "fields": ("email", "name", "role", "password1", "password2")}),
        )
     actions = ["restore_accounts"]

     def get_queryset(self, request):
          # soft-deleted accounts stay manageable here
          return User.all_objects.all()

     @admin.action(description="Restore soft-deleted accounts")
     def restore_accounts(self, request, queryset):
          count = queryset.filter(deleted_at__isnull=False).update(deleted_at=None, is_active=True)
          self.message_user(request, f"Restored {count} account(s).")


@admin.register(PasswordResetToken)
class PasswordResetTokenAdmin(admin.ModelAdmin):
     list_display = ("user", "created_at", "expires_at", "used", "is_still_valid")
     list_filter = ("used",)
     search_fields = ("user__email",)
     readonly_fields = ("token", "created_at")

     @admin.display(boolean=True, description="valid")
     def is_still_valid(self, obj):
          return not obj.used and obj.expires_at > timezone.now()
