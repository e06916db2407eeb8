"""
Cases app models.

Covers the CASA case itself, its court orders, and the volunteer
assignments that decide which cases a volunteer may see.  A case is
either *active* or *inactive*; deactivation also ends every volunteer
assignment on the case.
"""

import datetime

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.constants import TRANSITION_AGE_YEARS
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class CourtReportStatus(models.TextChoices):
    """Progress of the volunteer's report for the next hearing."""

    NOT_SUBMITTED = "not_submitted", "Not Submitted"
    SUBMITTED = "submitted", "Submitted"
    COMPLETED = "completed", "Completed"


class ImplementationStatus(models.TextChoices):
    """How far a court order has been carried out."""

    NOT_IMPLEMENTED = "not_implemented", "Not Implemented"
    PARTIALLY_IMPLEMENTED = "partially_implemented", "Partially Implemented"
    IMPLEMENTED = "implemented", "Implemented"


def years_ago(years: int, today: datetime.date | None = None) -> datetime.date:
    """The date ``years`` years before ``today`` (Feb 29 → Feb 28)."""
    today = today or timezone.localdate()
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return today.replace(year=today.year - years, day=28)


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class CasaCase(TimeStampedModel):
    """
    A youth's case, owned by one organization.

    * ``case_number`` is unique within the organization.
    * ``transition_aged_youth`` is derived from the youth's birth month
      on every save.
    * ``casa_org`` is fixed at creation to the creator's organization.
    """

    casa_org = models.ForeignKey(
        "accounts.CasaOrg",
        on_delete=models.PROTECT,
        related_name="casa_cases",
        verbose_name="Organization",
    )
    case_number = models.CharField(
        max_length=255,
        verbose_name="Case Number",
    )
    birth_month_year_youth = models.DateField(
        verbose_name="Youth Birth Month And Year",
    )
    transition_aged_youth = models.BooleanField(
        default=False,
        verbose_name="Transition Aged Youth",
        db_index=True,
    )
    active = models.BooleanField(
        default=True,
        verbose_name="Active",
        db_index=True,
    )
    court_report_status = models.CharField(
        max_length=20,
        choices=CourtReportStatus.choices,
        default=CourtReportStatus.NOT_SUBMITTED,
        verbose_name="Court Report Status",
    )
    upcoming_hearing_date = models.DateField(
        null=True,
        blank=True,
        verbose_name="Upcoming Hearing Date",
    )
    contact_types = models.ManyToManyField(
        "contacts.ContactType",
        blank=True,
        related_name="casa_cases",
        verbose_name="Contact Types",
    )
    volunteers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        through="CaseAssignment",
        related_name="assigned_cases",
        blank=True,
    )

    class Meta:
        verbose_name = "CASA Case"
        verbose_name_plural = "CASA Cases"
        ordering = ["case_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["casa_org", "case_number"],
                name="unique_case_number_per_org",
            ),
        ]

    def __str__(self):
        return self.case_number

    def save(self, *args, **kwargs):
        if self.birth_month_year_youth:
            self.transition_aged_youth = (
                self.birth_month_year_youth <= years_ago(TRANSITION_AGE_YEARS)
            )
        super().save(*args, **kwargs)

    # ── Lifecycle ────────────────────────────────────────────────────

    def deactivate(self) -> bool:
        """
        Mark the case inactive and end its volunteer assignments.

        Returns ``False`` (and writes nothing) if the case does not
        validate.  Deactivating an inactive case is a no-op success.
        """
        self.active = False
        try:
            self.full_clean()
        except ValidationError:
            return False
        self.save()
        self.case_assignments.filter(active=True).update(active=False)
        return True

    def reactivate(self) -> bool:
        """Mark the case active again.  Assignments are not restored."""
        self.active = True
        try:
            self.full_clean()
        except ValidationError:
            return False
        self.save()
        return True


class CaseCourtOrder(TimeStampedModel):
    """A single court order on a case.  Orders keep insertion order."""

    casa_case = models.ForeignKey(
        CasaCase,
        on_delete=models.CASCADE,
        related_name="case_court_orders",
        verbose_name="CASA Case",
    )
    text = models.TextField(verbose_name="Text")
    implementation_status = models.CharField(
        max_length=30,
        choices=ImplementationStatus.choices,
        null=True,
        blank=True,
        verbose_name="Implementation Status",
    )

    class Meta:
        verbose_name = "Court Order"
        verbose_name_plural = "Court Orders"
        ordering = ["id"]

    def __str__(self):
        return f"Court order #{self.pk} on {self.casa_case_id}"


class CaseAssignment(TimeStampedModel):
    """
    Links a volunteer to a case.

    Only *active* assignments grant a volunteer access to the case.
    """

    casa_case = models.ForeignKey(
        CasaCase,
        on_delete=models.CASCADE,
        related_name="case_assignments",
        verbose_name="CASA Case",
    )
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="case_assignments",
        verbose_name="Volunteer",
    )
    active = models.BooleanField(default=True, verbose_name="Active")

    class Meta:
        verbose_name = "Case Assignment"
        verbose_name_plural = "Case Assignments"
        constraints = [
            models.UniqueConstraint(
                fields=["casa_case", "volunteer"],
                name="unique_case_assignment",
            ),
        ]

    def __str__(self):
        state = "active" if self.active else "inactive"
        return f"{self.volunteer_id} → {self.casa_case_id} ({state})"
