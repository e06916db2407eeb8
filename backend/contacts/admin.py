from django.contrib import admin

from .models import CaseContact, ContactType, ContactTypeGroup, LearningHour, OtherDuty


class ContactTypeInline(admin.TabularInline):
    model = ContactType
    extra = 0


@admin.register(ContactTypeGroup)
class ContactTypeGroupAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "casa_org", "active")
    list_filter = ("casa_org", "active")
    inlines = [ContactTypeInline]


@admin.register(CaseContact)
class CaseContactAdmin(admin.ModelAdmin):
    list_display = ("id", "casa_case", "creator", "occurred_at",
                    "contact_made", "miles_driven", "want_driving_reimbursement")
    list_filter = ("contact_made", "want_driving_reimbursement", "medium_type")
    search_fields = ("notes", "casa_case__case_number")
    filter_horizontal = ("contact_types",)


@admin.register(OtherDuty)
class OtherDutyAdmin(admin.ModelAdmin):
    list_display = ("id", "creator", "occurred_at", "duration_minutes")


@admin.register(LearningHour)
class LearningHourAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "name", "learning_type", "occurred_at")
    list_filter = ("learning_type",)
