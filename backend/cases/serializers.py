"""
Cases app serializers.

Field definitions, read/write constraints, and field-level validation
only.  Which fields an actor may submit at all is decided by
``cases.policies`` *before* data reaches a write serializer.

Write serializers use the shared ``error_messages`` from
``core.domain.validation`` so that views can flatten
``serializer.errors`` into sentences such as
``"Case number can't be blank"``.

Structure
---------
1. Filter / query-param serializers
2. Case read serializers (list, detail)
3. Case write serializers (create, update)
"""

from __future__ import annotations

from typing import Any

from rest_framework import ISO_8601, serializers

from accounts.serializers import UserSummarySerializer
from contacts.models import ContactType, OtherDuty
from core.domain.validation import (
    CHOICE_ERRORS,
    INVALID,
    REQUIRED_DATE_ERRORS,
    REQUIRED_TEXT_ERRORS,
    TAKEN,
)

from .models import CasaCase, CaseCourtOrder, CourtReportStatus

# The youth's birth month may be given as a full date, "2010-05" or "May 2010".
BIRTH_MONTH_INPUT_FORMATS = [ISO_8601, "%Y-%m", "%B %Y"]


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/casa_cases/``.

    Query Parameters
    ----------------
    ``active``                : bool — active / inactive cases only
    ``transition_aged_youth`` : bool — transition-aged youth only
    ``case_number``           : str  — case-insensitive substring
    """

    active = serializers.BooleanField(required=False, allow_null=True)
    transition_aged_youth = serializers.BooleanField(required=False, allow_null=True)
    case_number = serializers.CharField(required=False, max_length=255)


# ═══════════════════════════════════════════════════════════════════
#  2. Case Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ContactTypeSummarySerializer(serializers.ModelSerializer):
    group = serializers.CharField(source="contact_type_group.name", read_only=True)

    class Meta:
        model = ContactType
        fields = ["id", "name", "group"]
        read_only_fields = fields


class CaseCourtOrderSerializer(serializers.ModelSerializer):
    implementation_status_display = serializers.CharField(
        source="get_implementation_status_display",
        read_only=True,
    )

    class Meta:
        model = CaseCourtOrder
        fields = ["id", "text", "implementation_status", "implementation_status_display"]
        read_only_fields = fields


class OtherDutySerializer(serializers.ModelSerializer):
    """Read-only; listed next to a volunteer's cases."""

    class Meta:
        model = OtherDuty
        fields = ["id", "occurred_at", "duration_minutes", "notes", "truncated_notes"]
        read_only_fields = fields


class CaseListSerializer(serializers.ModelSerializer):
    """Compact representation for the index endpoint."""

    court_report_status_display = serializers.CharField(
        source="get_court_report_status_display",
        read_only=True,
    )
    assigned_volunteers = serializers.SerializerMethodField()

    class Meta:
        model = CasaCase
        fields = [
            "id",
            "case_number",
            "transition_aged_youth",
            "active",
            "court_report_status",
            "court_report_status_display",
            "upcoming_hearing_date",
            "assigned_volunteers",
        ]
        read_only_fields = fields

    def get_assigned_volunteers(self, obj: CasaCase) -> list[str]:
        return [
            assignment.volunteer.get_display_name()
            for assignment in obj.case_assignments.all()
            if assignment.active
        ]


class CaseDetailSerializer(serializers.ModelSerializer):
    """Full case representation used by show, create, edit and update."""

    court_report_status_display = serializers.CharField(
        source="get_court_report_status_display",
        read_only=True,
    )
    contact_types = ContactTypeSummarySerializer(many=True, read_only=True)
    case_court_orders = CaseCourtOrderSerializer(many=True, read_only=True)
    assigned_volunteers = serializers.SerializerMethodField()

    class Meta:
        model = CasaCase
        fields = [
            "id",
            "case_number",
            "birth_month_year_youth",
            "transition_aged_youth",
            "active",
            "court_report_status",
            "court_report_status_display",
            "upcoming_hearing_date",
            "casa_org",
            "contact_types",
            "case_court_orders",
            "assigned_volunteers",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_assigned_volunteers(self, obj: CasaCase) -> list[dict[str, Any]]:
        volunteers = [
            assignment.volunteer
            for assignment in obj.case_assignments.select_related("volunteer")
            if assignment.active
        ]
        return UserSummarySerializer(volunteers, many=True).data


# ═══════════════════════════════════════════════════════════════════
#  3. Case Write Serializers
# ═══════════════════════════════════════════════════════════════════


class _CaseNumberMixin:
    """``case_number`` is unique within the organization in context."""

    def validate_case_number(self, value: str) -> str:
        value = value.strip()
        casa_org = self.context["casa_org"]
        qs = CasaCase.objects.filter(casa_org=casa_org, case_number__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(TAKEN)
        return value


class CaseCreateSerializer(_CaseNumberMixin, serializers.Serializer):
    """
    Validates a new case.

    The owning organization is never read from the payload: the view
    places the actor's organization in ``context["casa_org"]``.
    ``casa_org_id`` is accepted (and ignored) so an admin form can post
    it back unchanged.
    """

    case_number = serializers.CharField(max_length=255, error_messages=REQUIRED_TEXT_ERRORS)
    birth_month_year_youth = serializers.DateField(
        input_formats=BIRTH_MONTH_INPUT_FORMATS,
        error_messages=REQUIRED_DATE_ERRORS,
    )
    court_report_status = serializers.ChoiceField(
        choices=CourtReportStatus.choices,
        required=False,
        error_messages=CHOICE_ERRORS,
    )
    upcoming_hearing_date = serializers.DateField(
        required=False,
        allow_null=True,
        error_messages={"invalid": INVALID},
    )
    contact_type_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
        error_messages={"not_a_list": INVALID},
    )
    casa_org_id = serializers.IntegerField(required=False, write_only=True)


class CaseUpdateSerializer(_CaseNumberMixin, serializers.Serializer):
    """
    Validates a (partial) case update.

    ``case_court_orders_attributes`` is passed through untouched: a
    malformed batch does not fail the update, it is skipped by
    ``CourtOrderService``.
    """

    case_number = serializers.CharField(max_length=255, error_messages=REQUIRED_TEXT_ERRORS)
    court_report_status = serializers.ChoiceField(
        choices=CourtReportStatus.choices,
        error_messages=CHOICE_ERRORS,
    )
    upcoming_hearing_date = serializers.DateField(
        allow_null=True,
        error_messages={"invalid": INVALID},
    )
    contact_type_ids = serializers.ListField(
        child=serializers.IntegerField(),
        allow_empty=True,
        error_messages={"not_a_list": INVALID},
    )
    case_court_orders_attributes = serializers.JSONField()
    casa_org_id = serializers.IntegerField(write_only=True)
