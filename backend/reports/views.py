"""
Reports app views — **Thin Views**.

View Map
--------
- ``ReportIndexView``  — GET  /api/reports/
- ``ReportExportView`` — POST /api/reports/<slug>/
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from cases.policies import CasePolicy
from contacts.services import ContactTypeService
from core.domain.exceptions import NotFound
from core.permissions_constants import ReportActions

from .exporters import attachment_response
from .serializers import (
    ContactTypeChoiceSerializer,
    ContactTypeGroupChoiceSerializer,
    ReportFilterSerializer,
    ReportSummarySerializer,
)
from .services import REPORTS, ReportExportService


class ReportIndexView(APIView):
    """
    **GET /api/reports/**

    The available exports and the filter choices for the actor's
    organization.  Admins and supervisors only.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List available reports",
        responses={
            200: OpenApiResponse(description="Reports plus contact type / group filter choices."),
            403: OpenApiResponse(description="Not authorized to export reports."),
        },
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        CasePolicy(request.user).authorize(ReportActions.EXPORT)
        payload = {
            "reports": ReportSummarySerializer(ReportExportService.available_reports(), many=True).data,
            "contact_types": ContactTypeChoiceSerializer(
                ContactTypeService.contact_types_for(request.user), many=True,
            ).data,
            "contact_type_groups": ContactTypeGroupChoiceSerializer(
                ContactTypeService.contact_type_groups_for(request.user), many=True,
            ).data,
        }
        return Response(payload, status=status.HTTP_200_OK)


class ReportExportView(APIView):
    """
    **POST /api/reports/<slug>/**

    Build the named report for the actor's organization and return it
    as a file download named ``<report-name>-<YYYY-MM-DD>.<ext>``.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Export a report",
        request=ReportFilterSerializer,
        responses={
            200: OpenApiResponse(description="CSV or XLSX attachment."),
            400: OpenApiResponse(description="Invalid filters."),
            403: OpenApiResponse(description="Not authorized to export reports."),
            404: OpenApiResponse(description="Unknown report."),
        },
        tags=["Reports"],
    )
    def post(self, request: Request, report_slug: str):
        if report_slug not in REPORTS:
            raise NotFound(f"Unknown report '{report_slug}'.")

        serializer = ReportFilterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        filters = dict(serializer.validated_data)
        file_format = filters.pop("file_format")

        job = ReportExportService.enqueue(report_slug, request.user, filters, file_format)
        return attachment_response(job.run())
