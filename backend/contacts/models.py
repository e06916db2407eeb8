"""
Contacts app models.

Covers everything a volunteer logs: the organization's contact-type
taxonomy, case contacts (the source of every report), non-case "other
duties", and learning hours.
"""

from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ContactMedium(models.TextChoices):
    """How a contact took place."""

    IN_PERSON = "in-person", "In Person"
    TEXT_EMAIL = "text/email", "Text/Email"
    VIDEO = "video", "Video"
    VOICE_ONLY = "voice-only", "Voice Only"
    LETTER = "letter", "Letter"


class LearningType(models.TextChoices):
    """Kind of volunteer training recorded as learning hours."""

    BOOK = "book", "Book"
    CONTINUING_EDUCATION = "continuing_education", "Continuing Education"
    MOVIE = "movie", "Movie"
    WEBINAR = "webinar", "Webinar"
    OTHER = "other", "Other"


# ────────────────────────────────────────────────────────────────────
# Contact-type taxonomy
# ────────────────────────────────────────────────────────────────────

class ContactTypeGroup(TimeStampedModel):
    """A named bucket of contact types (e.g. "Education"), per organization."""

    casa_org = models.ForeignKey(
        "accounts.CasaOrg",
        on_delete=models.CASCADE,
        related_name="contact_type_groups",
        verbose_name="Organization",
    )
    name = models.CharField(max_length=255, verbose_name="Name")
    active = models.BooleanField(default=True, verbose_name="Active")

    class Meta:
        verbose_name = "Contact Type Group"
        verbose_name_plural = "Contact Type Groups"
        ordering = ["name"]
        unique_together = [("casa_org", "name")]

    def __str__(self):
        return self.name


class ContactType(TimeStampedModel):
    """A single contact classification (e.g. "Court", "School")."""

    contact_type_group = models.ForeignKey(
        ContactTypeGroup,
        on_delete=models.CASCADE,
        related_name="contact_types",
        verbose_name="Group",
    )
    name = models.CharField(max_length=255, verbose_name="Name")
    active = models.BooleanField(default=True, verbose_name="Active")

    class Meta:
        verbose_name = "Contact Type"
        verbose_name_plural = "Contact Types"
        ordering = ["name"]
        unique_together = [("contact_type_group", "name")]

    def __str__(self):
        return self.name


# ────────────────────────────────────────────────────────────────────
# Logged activity
# ────────────────────────────────────────────────────────────────────

class CaseContact(TimeStampedModel):
    """
    A logged contact event on a case.

    ``created_at`` doubles as the "Added To System At" report column.
    """

    casa_case = models.ForeignKey(
        "cases.CasaCase",
        on_delete=models.CASCADE,
        related_name="case_contacts",
        verbose_name="CASA Case",
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="case_contacts",
        verbose_name="Creator",
    )
    contact_types = models.ManyToManyField(
        ContactType,
        blank=True,
        related_name="case_contacts",
        verbose_name="Contact Types",
    )
    occurred_at = models.DateField(verbose_name="Occurred At", db_index=True)
    duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Duration (minutes)",
    )
    contact_made = models.BooleanField(default=False, verbose_name="Contact Made")
    medium_type = models.CharField(
        max_length=20,
        choices=ContactMedium.choices,
        blank=True,
        default="",
        verbose_name="Contact Medium",
    )
    notes = models.TextField(blank=True, default="", verbose_name="Notes")
    miles_driven = models.PositiveIntegerField(default=0, verbose_name="Miles Driven")
    want_driving_reimbursement = models.BooleanField(
        default=False,
        verbose_name="Wants Driving Reimbursement",
    )
    reimbursement_complete = models.BooleanField(
        default=False,
        verbose_name="Reimbursement Complete",
    )

    class Meta:
        verbose_name = "Case Contact"
        verbose_name_plural = "Case Contacts"
        ordering = ["occurred_at", "id"]
        indexes = [
            models.Index(fields=["casa_case", "occurred_at"]),
        ]

    def __str__(self):
        return f"Contact #{self.pk} on Case #{self.casa_case_id} ({self.occurred_at})"


class OtherDuty(TimeStampedModel):
    """Volunteer work that is not tied to a specific case."""

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="other_duties",
        verbose_name="Creator",
    )
    occurred_at = models.DateField(verbose_name="Occurred At")
    duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name="Duration (minutes)",
    )
    notes = models.TextField(verbose_name="Notes")

    class Meta:
        verbose_name = "Other Duty"
        verbose_name_plural = "Other Duties"
        ordering = ["-occurred_at", "-id"]

    def __str__(self):
        return f"Other duty #{self.pk} by {self.creator_id}"

    @property
    def truncated_notes(self) -> str:
        """Notes cut to 100 characters for list views."""
        if len(self.notes) <= 100:
            return self.notes
        return self.notes[:97] + "..."


class LearningHour(TimeStampedModel):
    """Training time a volunteer has logged."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="learning_hours",
        verbose_name="Volunteer",
    )
    name = models.CharField(max_length=255, verbose_name="Title")
    learning_type = models.CharField(
        max_length=30,
        choices=LearningType.choices,
        default=LearningType.OTHER,
        verbose_name="Type",
    )
    duration_hours = models.PositiveSmallIntegerField(default=0, verbose_name="Hours")
    duration_minutes = models.PositiveSmallIntegerField(default=0, verbose_name="Minutes")
    occurred_at = models.DateField(verbose_name="Date Of Learning")

    class Meta:
        verbose_name = "Learning Hour"
        verbose_name_plural = "Learning Hours"
        ordering = ["occurred_at", "id"]

    def __str__(self):
        return f"{self.name} ({self.user_id})"

    @property
    def duration_display(self) -> str:
        """``"H:MM"``."""
        return f"{self.duration_hours}:{self.duration_minutes:02d}"
