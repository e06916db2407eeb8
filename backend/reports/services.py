"""
Reports app Service Layer.

Architecture
------------
- ``filter_case_contacts``  — org-scoped case-contact query + filters.
- ``*Report`` classes       — header row and data rows of one export.
- ``ReportJob``             — handle for one export; ``run()`` builds
                              the file synchronously.
- ``ReportExportService``   — authorization + job construction.

Filter semantics
----------------
  start_date / end_date            inclusive on ``occurred_at``
  contact_type_ids ∪ group ids     OR-combined; a group matches through
                                   any of its contact types
  everything else                  AND-combined
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Mapping

from django.db.models import Exists, OuterRef, Q, QuerySet
from django.utils import timezone

from cases.models import CasaCase, CaseCourtOrder
from cases.policies import CasePolicy
from contacts.models import CaseContact, LearningHour
from core.constants import EXPORT_DATE_FORMAT
from core.permissions_constants import CaseActions, ReportActions

from .exporters import get_exporter

logger = logging.getLogger(__name__)

OCCURRED_AT_FORMAT = "%B %d, %Y"
ADDED_AT_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
BIRTH_MONTH_FORMAT = "%B %Y"
MISSING = "MISSING"


# ═══════════════════════════════════════════════════════════════════
#  Query
# ═══════════════════════════════════════════════════════════════════


def filter_case_contacts(casa_org: Any, filters: Mapping[str, Any]) -> QuerySet:
    """
    Case contacts of ``casa_org`` narrowed by ``filters``.

    ``filters`` is the cleaned dict from ``ReportFilterSerializer``;
    missing or ``None`` values do not filter.
    """
    qs = CaseContact.objects.filter(casa_case__casa_org=casa_org)

    if filters.get("start_date"):
        qs = qs.filter(occurred_at__gte=filters["start_date"])
    if filters.get("end_date"):
        qs = qs.filter(occurred_at__lte=filters["end_date"])

    type_ids = filters.get("contact_type_ids") or []
    group_ids = filters.get("contact_type_group_ids") or []
    if type_ids or group_ids:
        qs = qs.filter(
            Q(contact_types__id__in=type_ids)
            | Q(contact_types__contact_type_group_id__in=group_ids)
        ).distinct()

    if filters.get("creator_ids"):
        qs = qs.filter(creator_id__in=filters["creator_ids"])
    if filters.get("supervisor_ids"):
        qs = qs.filter(creator__supervisor_id__in=filters["supervisor_ids"])
    if filters.get("casa_case_ids"):
        qs = qs.filter(casa_case_id__in=filters["casa_case_ids"])
    if filters.get("contact_made") is not None:
        qs = qs.filter(contact_made=filters["contact_made"])
    if filters.get("want_driving_reimbursement") is not None:
        qs = qs.filter(want_driving_reimbursement=filters["want_driving_reimbursement"])
    if filters.get("has_transitioned") is not None:
        qs = qs.filter(casa_case__transition_aged_youth=filters["has_transitioned"])

    return (
        qs.select_related("casa_case", "creator", "creator__supervisor")
        .prefetch_related("contact_types")
        .order_by("occurred_at", "id")
    )


def _contact_type_names(contact: CaseContact) -> str:
    return "|".join(sorted(contact_type.name for contact_type in contact.contact_types.all()))


def _supervisor_name(user: Any) -> str:
    supervisor = getattr(user, "supervisor", None)
    return supervisor.get_display_name() if supervisor else ""


# ═══════════════════════════════════════════════════════════════════
#  Reports
# ═══════════════════════════════════════════════════════════════════


class BaseReport:
    """One export: a file-name stem, a header row and data rows."""

    name: str = ""
    headers: ClassVar[tuple[str, ...]] = ()

    def __init__(self, casa_org: Any, filters: Mapping[str, Any] | None = None, *, name: str | None = None) -> None:
        self.casa_org = casa_org
        self.filters = dict(filters or {})
        if name:
            self.name = name

    def rows(self) -> Iterable[list[Any]]:
        raise NotImplementedError

    def filename(self, extension: str) -> str:
        return f"{self.name}-{timezone.localdate().strftime(EXPORT_DATE_FORMAT)}.{extension}"


class CaseContactsReport(BaseReport):
    name = "case-contacts-report"
    headers = (
        "Internal Contact Number",
        "Duration Minutes",
        "Contact Types",
        "Contact Made",
        "Contact Medium",
        "Occurred At",
        "Added To System At",
        "Miles Driven",
        "Wants Driving Reimbursement",
        "Casa Case Number",
        "Creator Email",
        "Creator Name",
        "Supervisor Name",
        "Case Contact Notes",
    )

    def rows(self) -> Iterable[list[Any]]:
        for contact in filter_case_contacts(self.casa_org, self.filters):
            yield [
                contact.pk,
                contact.duration_minutes,
                _contact_type_names(contact),
                contact.contact_made,
                contact.get_medium_type_display() if contact.medium_type else "",
                contact.occurred_at.strftime(OCCURRED_AT_FORMAT),
                timezone.localtime(contact.created_at).strftime(ADDED_AT_FORMAT),
                contact.miles_driven,
                contact.want_driving_reimbursement,
                contact.casa_case.case_number,
                contact.creator.email,
                contact.creator.get_display_name(),
                _supervisor_name(contact.creator),
                contact.notes,
            ]


class MileageReport(BaseReport):
    """Only contacts whose creator asked for driving reimbursement."""

    name = "mileage-report"
    headers = (
        "Contact Types",
        "Occurred At",
        "Miles Driven",
        "Casa Case Number",
        "Creator Name",
        "Supervisor Name",
        "Volunteer Address",
        "Reimbursed",
    )

    def rows(self) -> Iterable[list[Any]]:
        filters = {**self.filters, "want_driving_reimbursement": True}
        for contact in filter_case_contacts(self.casa_org, filters):
            yield [
                _contact_type_names(contact),
                contact.occurred_at.strftime(OCCURRED_AT_FORMAT),
                contact.miles_driven,
                contact.casa_case.case_number,
                contact.creator.get_display_name(),
                _supervisor_name(contact.creator),
                contact.creator.address,
                contact.reimbursement_complete,
            ]


class MissingDataReport(BaseReport):
    """Active cases with no upcoming hearing date or no court orders."""

    name = "missing-data-report"
    headers = (
        "Casa Case Number",
        "Youth Birth Month And Year",
        "Upcoming Hearing Date",
        "Court Orders",
    )

    def rows(self) -> Iterable[list[Any]]:
        cases = (
            CasaCase.objects.filter(casa_org=self.casa_org, active=True)
            .annotate(has_court_orders=Exists(
                CaseCourtOrder.objects.filter(casa_case=OuterRef("pk"))
            ))
            .filter(Q(upcoming_hearing_date__isnull=True) | Q(has_court_orders=False))
            .order_by("case_number")
        )
        for case in cases:
            yield [
                case.case_number,
                case.birth_month_year_youth.strftime(BIRTH_MONTH_FORMAT),
                MISSING if case.upcoming_hearing_date is None else "",
                "" if case.has_court_orders else MISSING,
            ]


class LearningHoursReport(BaseReport):
    name = "learning-hours-report"
    headers = (
        "Volunteer Name",
        "Learning Hours Title",
        "Learning Hours Type",
        "Duration",
        "Date Of Learning",
    )

    def rows(self) -> Iterable[list[Any]]:
        qs = LearningHour.objects.filter(user__casa_org=self.casa_org).select_related("user")
        if self.filters.get("start_date"):
            qs = qs.filter(occurred_at__gte=self.filters["start_date"])
        if self.filters.get("end_date"):
            qs = qs.filter(occurred_at__lte=self.filters["end_date"])
        for hour in qs.order_by("occurred_at", "id"):
            yield [
                hour.user.get_display_name(),
                hour.name,
                hour.get_learning_type_display(),
                hour.duration_display,
                hour.occurred_at.strftime(OCCURRED_AT_FORMAT),
            ]


#: URL slug → report class.
REPORTS: dict[str, type[BaseReport]] = {
    "case-contacts": CaseContactsReport,
    "mileage": MileageReport,
    "missing-data": MissingDataReport,
    "learning-hours": LearningHoursReport,
}


# ═══════════════════════════════════════════════════════════════════
#  Jobs
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ReportFile:
    filename: str
    content_type: str
    content: bytes


@dataclass
class ReportJob:
    """
    A requested export.  Nothing is queried until ``run()``; the file is
    built synchronously in the calling request.
    """

    report: BaseReport
    file_format: str = "csv"

    def run(self) -> ReportFile:
        exporter = get_exporter(self.file_format)
        content = exporter.render(self.report.headers, self.report.rows())
        filename = self.report.filename(exporter.extension)
        logger.info(
            "Generated %s for org %s (%d bytes)",
            filename, getattr(self.report.casa_org, "pk", None), len(content),
        )
        return ReportFile(filename=filename, content_type=exporter.content_type, content=content)


def generate_report(casa_org: Any, filters: Mapping[str, Any], report_name: str = "case-contacts", file_format: str = "csv") -> ReportFile:
    """Build a report for ``casa_org`` without any authorization check."""
    return ReportJob(REPORTS[report_name](casa_org, filters), file_format).run()


class ReportExportService:
    """Authorizes exports and hands back ``ReportJob`` handles."""

    @staticmethod
    def enqueue(report_name: str, requesting_user: Any, filters: Mapping[str, Any], file_format: str = "csv") -> ReportJob:
        """
        Prepare an organization-wide export.

        Raises
        ------
        PermissionDenied
            If the actor may not export reports.
        KeyError
            If ``report_name`` is not one of ``REPORTS``.
        """
        CasePolicy(requesting_user).authorize(ReportActions.EXPORT)
        report = REPORTS[report_name](requesting_user.casa_org, filters)
        return ReportJob(report, file_format)

    @staticmethod
    def case_contacts_for_case(case: CasaCase, requesting_user: Any, file_format: str) -> ReportJob:
        """Contacts of a single case, for anyone allowed to see the case."""
        CasePolicy(requesting_user).authorize(CaseActions.SHOW, case)
        report = CaseContactsReport(case.casa_org, {"casa_case_ids": [case.pk]}, name="case-contacts")
        return ReportJob(report, file_format)

    @staticmethod
    def available_reports() -> list[dict[str, Any]]:
        return [
            {"slug": slug, "name": report.name, "headers": list(report.headers)}
            for slug, report in REPORTS.items()
        ]
