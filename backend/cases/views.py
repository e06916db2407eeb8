"""
Cases app ViewSets.

Architecture: Views are intentionally thin.
Every write view follows the same pattern:

    1. Look the case up through ``CaseQueryService`` (org-scoped).
    2. Drop the submitted keys the actor may not set (``CasePolicy``).
    3. Validate via a serializer; failures become a 422 list of
       full messages.
    4. Delegate to the service class and serialize the result.

ViewSets
--------
- ``CaseViewSet`` — The single ViewSet for all case endpoints.  The
  ``new`` / ``edit`` form-metadata reads and the lifecycle transitions
  are @action methods.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from core.domain.exceptions import UnprocessableEntity
from core.domain.validation import full_messages
from core.permissions_constants import CaseActions
from reports.exporters import attachment_response
from reports.renderers import CSVRenderer, XLSXRenderer
from reports.services import ReportExportService

from .models import CourtReportStatus, ImplementationStatus
from .policies import CasePolicy
from .serializers import (
    CaseCreateSerializer,
    CaseDetailSerializer,
    CaseFilterSerializer,
    CaseListSerializer,
    CaseUpdateSerializer,
    ContactTypeSummarySerializer,
    OtherDutySerializer,
)
from .services import (
    CaseCreationService,
    CaseLifecycleService,
    CaseQueryService,
    CaseUpdateService,
)

logger = logging.getLogger(__name__)

_EXPORT_FORMATS = (CSVRenderer.format, XLSXRenderer.format)


def _choices(choices) -> list[dict[str, str]]:
    return [{"value": value, "label": label} for value, label in choices]


class CaseViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the cases app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined, preventing accidental exposure of unintended
    CRUD operations.

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  What each role may do
    is decided by ``cases.policies`` inside the service layer; the view
    only uses the policy to filter submitted attributes.
    """

    permission_classes = [IsAuthenticated]

    def get_renderers(self):
        renderers = super().get_renderers()
        # ``?format=csv|xlsx`` on show downloads the case's contacts.
        if getattr(self, "action", None) == "retrieve":
            renderers += [CSVRenderer(), XLSXRenderer()]
        return renderers

    def _form_payload(self, request: Request, form_action: str) -> dict:
        metadata = CaseQueryService.get_form_metadata(request.user, form_action)
        return {
            "permitted_fields": metadata["permitted_fields"],
            "contact_types": ContactTypeSummarySerializer(metadata["contact_types"], many=True).data,
            "court_report_statuses": _choices(CourtReportStatus.choices),
            "implementation_statuses": _choices(ImplementationStatus.choices),
        }

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List cases",
        description=(
            "Cases visible to the authenticated user (whole organization for "
            "admins and supervisors, assigned cases for volunteers), plus the "
            "volunteer's own other duties."
        ),
        parameters=[
            OpenApiParameter(name="active", type=bool, location=OpenApiParameter.QUERY, description="Only active / inactive cases."),
            OpenApiParameter(name="transition_aged_youth", type=bool, location=OpenApiParameter.QUERY, description="Only transition-aged youth."),
            OpenApiParameter(name="case_number", type=str, location=OpenApiParameter.QUERY, description="Case number substring."),
        ],
        responses={200: OpenApiResponse(description='{"casa_cases": [...], "other_duties": [...]}')},
        tags=["Cases"],
    )
    def list(self, request: Request) -> Response:
        """
        GET /api/casa_cases/
        """
        filter_serializer = CaseFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        cases = CaseQueryService.get_filtered_queryset(request.user, filter_serializer.validated_data)
        duties = CaseQueryService.get_other_duties(request.user)
        return Response(
            {
                "casa_cases": CaseListSerializer(cases, many=True).data,
                "other_duties": OtherDutySerializer(duties, many=True).data,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="Create a case",
        description=(
            "Admins only.  The case is always created in the admin's own "
            "organization; attributes outside the create field set are ignored."
        ),
        request=CaseCreateSerializer,
        responses={
            201: OpenApiResponse(response=CaseDetailSerializer, description="Case created."),
            403: OpenApiResponse(description="Not authorized."),
            422: OpenApiResponse(description='List of messages, e.g. ["Case number can\'t be blank"].'),
        },
        tags=["Cases"],
    )
    def create(self, request: Request) -> Response:
        """
        POST /api/casa_cases/
        """
        policy = CasePolicy(request.user)
        policy.authorize(CaseActions.CREATE)

        attrs = policy.permitted_attributes(CaseActions.CREATE, request.data)
        serializer = CaseCreateSerializer(data=attrs, context={"casa_org": request.user.casa_org})
        if not serializer.is_valid():
            raise UnprocessableEntity(full_messages(serializer.errors))

        case = CaseCreationService.create_case(serializer.validated_data, request.user)
        out = CaseDetailSerializer(case, context={"request": request})
        return Response(out.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a case",
        description=(
            "Full case detail.  With ?format=csv or ?format=xlsx the case's "
            "contacts are returned as a file download instead."
        ),
        parameters=[
            OpenApiParameter(name="format", type=str, location=OpenApiParameter.QUERY, description="json (default), csv or xlsx."),
        ],
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Case detail or export file."),
            403: OpenApiResponse(description="Case belongs to another organization or is not assigned."),
            404: OpenApiResponse(description="Case not found."),
        },
        tags=["Cases"],
    )
    def retrieve(self, request: Request, pk: int = None):
        """
        GET /api/casa_cases/{id}/
        """
        case = CaseQueryService.get_case_detail(request.user, pk)

        file_format = getattr(request.accepted_renderer, "format", None)
        if file_format in _EXPORT_FORMATS:
            job = ReportExportService.case_contacts_for_case(case, request.user, file_format)
            return attachment_response(job.run())

        serializer = CaseDetailSerializer(case, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update a case",
        description=(
            "Attributes the actor's role may not change are ignored.  The "
            "response carries a `notice` summarising what changed."
        ),
        request=CaseUpdateSerializer,
        responses={
            200: OpenApiResponse(response=CaseDetailSerializer, description="Case detail plus `notice`."),
            403: OpenApiResponse(description="Not authorized."),
            404: OpenApiResponse(description="Case not found in the actor's organization."),
            422: OpenApiResponse(description="List of validation messages."),
        },
        tags=["Cases"],
    )
    def partial_update(self, request: Request, pk: int = None) -> Response:
        """
        PATCH /api/casa_cases/{id}/
        """
        case = CaseQueryService.get_case_in_organization(request.user, pk)
        policy = CasePolicy(request.user)
        policy.authorize(CaseActions.UPDATE, case)

        attrs = policy.permitted_attributes(CaseActions.UPDATE, request.data)
        serializer = CaseUpdateSerializer(
            case,
            data=attrs,
            partial=True,
            context={"casa_org": case.casa_org},
        )
        if not serializer.is_valid():
            raise UnprocessableEntity(full_messages(serializer.errors))

        case, notice = CaseUpdateService.update_case(case, serializer.validated_data, request.user)
        out = CaseDetailSerializer(case, context={"request": request}).data
        return Response({**out, "notice": notice}, status=status.HTTP_200_OK)

    @extend_schema(exclude=True)
    def update(self, request: Request, pk: int = None) -> Response:
        """PUT behaves like PATCH: absent attributes are left unchanged."""
        return self.partial_update(request, pk)

    # ── Form metadata @actions ───────────────────────────────────────

    @action(detail=False, methods=["get"], url_path="new")
    @extend_schema(
        summary="New case form",
        description="Fields the actor may submit on create plus the choices to offer.",
        responses={
            200: OpenApiResponse(description="Form metadata."),
            403: OpenApiResponse(description="Volunteers may not open the new case form."),
        },
        tags=["Cases"],
    )
    def new(self, request: Request) -> Response:
        """
        GET /api/casa_cases/new/
        """
        return Response(self._form_payload(request, CaseActions.NEW), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="edit")
    @extend_schema(
        summary="Edit case form",
        description="Case detail plus the fields the actor may change.",
        responses={
            200: OpenApiResponse(description="Case detail plus form metadata."),
            403: OpenApiResponse(description="Not authorized."),
            404: OpenApiResponse(description="Case not found in the actor's organization."),
        },
        tags=["Cases"],
    )
    def edit(self, request: Request, pk: int = None) -> Response:
        """
        GET /api/casa_cases/{id}/edit/
        """
        case = CaseQueryService.get_case_in_organization(request.user, pk)
        CasePolicy(request.user).authorize(CaseActions.EDIT, case)

        payload = CaseDetailSerializer(case, context={"request": request}).data
        payload.update(self._form_payload(request, CaseActions.EDIT))
        return Response(payload, status=status.HTTP_200_OK)

    # ── Lifecycle @actions ───────────────────────────────────────────

    @action(detail=True, methods=["patch"], url_path="deactivate")
    @extend_schema(
        summary="Deactivate a case",
        description="Admins only.  Ends every volunteer assignment on the case.",
        request=None,
        responses={
            200: OpenApiResponse(description='"Case <number> has been deactivated."'),
            403: OpenApiResponse(description="Not authorized."),
            404: OpenApiResponse(description="Case not found in the actor's organization."),
            422: OpenApiResponse(description="[] when the case could not be deactivated."),
        },
        tags=["Cases – Lifecycle"],
    )
    def deactivate(self, request: Request, pk: int = None) -> Response:
        """
        PATCH /api/casa_cases/{id}/deactivate/
        """
        case = CaseQueryService.get_case_in_organization(request.user, pk)
        message = CaseLifecycleService.deactivate(case, request.user)
        return Response(message, status=status.HTTP_200_OK)

    @action(detail=True, methods=["patch"], url_path="reactivate")
    @extend_schema(
        summary="Reactivate a case",
        description="Admins only.",
        request=None,
        responses={
            200: OpenApiResponse(description='"Case <number> has been reactivated."'),
            403: OpenApiResponse(description="Not authorized."),
            404: OpenApiResponse(description="Case not found in the actor's organization."),
            422: OpenApiResponse(description="[] when the case could not be reactivated."),
        },
        tags=["Cases – Lifecycle"],
    )
    def reactivate(self, request: Request, pk: int = None) -> Response:
        """
        PATCH /api/casa_cases/{id}/reactivate/
        """
        case = CaseQueryService.get_case_in_organization(request.user, pk)
        message = CaseLifecycleService.reactivate(case, request.user)
        return Response(message, status=status.HTTP_200_OK)
