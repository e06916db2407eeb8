from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import CasaOrg, User


@admin.register(CasaOrg)
class CasaOrgAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "display_name", "created_at")
    search_fields = ("name", "display_name")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "display_name", "role",
                    "casa_org", "is_active")
    list_filter = ("role", "casa_org", "is_active")
    search_fields = ("username", "email", "display_name")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("CASA", {"fields": ("casa_org", "role", "display_name",
                             "supervisor", "address")}),
    )
