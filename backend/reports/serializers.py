"""
Reports app serializers.

``ReportFilterSerializer`` validates the filter form posted to every
export endpoint.  The response serializers describe the metadata
returned by ``GET /api/reports/``.
"""

from __future__ import annotations

from typing import Any

from rest_framework import ISO_8601, serializers

from contacts.models import ContactType, ContactTypeGroup
from core.constants import REPORT_DATE_INPUT_FORMATS

from .exporters import EXPORTERS


class ReportFilterSerializer(serializers.Serializer):
    """
    Filters for a report export.  Every field is optional.

    Dates accept ISO 8601 as well as ``"January 05, 2024"``; both ends
    of the range are inclusive.
    """

    start_date = serializers.DateField(
        required=False,
        allow_null=True,
        input_formats=[ISO_8601, *REPORT_DATE_INPUT_FORMATS],
    )
    end_date = serializers.DateField(
        required=False,
        allow_null=True,
        input_formats=[ISO_8601, *REPORT_DATE_INPUT_FORMATS],
    )
    contact_type_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    contact_type_group_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    creator_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    supervisor_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    casa_case_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    contact_made = serializers.BooleanField(required=False, allow_null=True)
    want_driving_reimbursement = serializers.BooleanField(required=False, allow_null=True)
    has_transitioned = serializers.BooleanField(required=False, allow_null=True)
    file_format = serializers.ChoiceField(
        choices=sorted(EXPORTERS),
        required=False,
        default="csv",
        help_text="Output format: 'csv' (default) or 'xlsx'.",
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        start = attrs.get("start_date")
        end = attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("Start date must be on or before end date.")
        return attrs


class ContactTypeChoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactType
        fields = ["id", "name", "contact_type_group"]
        read_only_fields = fields


class ContactTypeGroupChoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactTypeGroup
        fields = ["id", "name"]
        read_only_fields = fields


class ReportSummarySerializer(serializers.Serializer):
    slug = serializers.CharField()
    name = serializers.CharField()
    headers = serializers.ListField(child=serializers.CharField())
