from django.contrib import admin

from .models import CasaCase, CaseAssignment, CaseCourtOrder


class CaseCourtOrderInline(admin.TabularInline):
    model = CaseCourtOrder
    extra = 0


class CaseAssignmentInline(admin.TabularInline):
    model = CaseAssignment
    extra = 0


@admin.register(CasaCase)
class CasaCaseAdmin(admin.ModelAdmin):
    list_display = ("id", "case_number", "casa_org", "active",
                    "transition_aged_youth", "court_report_status")
    list_filter = ("casa_org", "active", "transition_aged_youth",
                   "court_report_status")
    search_fields = ("case_number",)
    readonly_fields = ("transition_aged_youth",)
    filter_horizontal = ("contact_types",)
    inlines = [CaseCourtOrderInline, CaseAssignmentInline]


@admin.register(CaseAssignment)
class CaseAssignmentAdmin(admin.ModelAdmin):
    list_display = ("casa_case", "volunteer", "active", "created_at")
    list_filter = ("active",)
