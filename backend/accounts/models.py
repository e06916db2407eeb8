"""
Accounts app models.

Defines the tenant boundary (``CasaOrg``) and a custom ``User`` model
extending Django's ``AbstractUser``.  Every user belongs to exactly one
organization and holds exactly one role.

Roles are a closed set (``CasaRole``).  What each role may do is not
encoded on the user: it lives in the capability table in
``cases.policies`` so the whole permission matrix can be read in one
place.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models

from core.models import TimeStampedModel


class CasaOrg(TimeStampedModel):
    """
    A CASA program — the tenant boundary.

    Every case, user and contact-type group belongs to exactly one
    organization, and no entity is visible to or mutable by an actor of
    a different organization.
    """

    name = models.CharField(
        max_length=255,
        unique=True,
        verbose_name="Name",
    )
    display_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Display Name",
    )
    address = models.CharField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Address",
    )

    class Meta:
        verbose_name = "CASA Organization"
        verbose_name_plural = "CASA Organizations"
        ordering = ["name"]

    def __str__(self):
        return self.display_name or self.name


class CasaRole(models.TextChoices):
    """The three actor roles.  Each is a capability set, not a subtype."""

    ADMIN = "casa_admin", "CASA Admin"
    SUPERVISOR = "supervisor", "Supervisor"
    VOLUNTEER = "volunteer", "Volunteer"


class User(AbstractUser):
    """
    Custom user model.

    Login is supported via *either* the username or the email address
    together with the password (see ``accounts.backends``).
    """

    email = models.EmailField(
        unique=True,
        verbose_name="Email Address",
    )
    display_name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        verbose_name="Display Name",
    )
    casa_org = models.ForeignKey(
        CasaOrg,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="users",
        verbose_name="Organization",
        help_text="Only superusers created from the CLI may lack an organization.",
    )
    role = models.CharField(
        max_length=20,
        choices=CasaRole.choices,
        default=CasaRole.VOLUNTEER,
        verbose_name="Role",
        db_index=True,
    )
    supervisor = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supervised_volunteers",
        verbose_name="Supervisor",
        limit_choices_to={"role": CasaRole.SUPERVISOR},
    )
    address = models.CharField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Mailing Address",
        help_text="Used for mileage reimbursement.",
    )

    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        indexes = [
            models.Index(fields=["casa_org", "role"]),
        ]

    def __str__(self):
        return f"{self.get_display_name()} ({self.get_role_display()})"

    def get_display_name(self) -> str:
        """Display name, falling back to the full name, then the username."""
        return self.display_name or self.get_full_name() or self.username

    # ── Helper predicates for role checks ────────────────────────────

    @property
    def is_casa_admin(self) -> bool:
        return self.role == CasaRole.ADMIN

    @property
    def is_supervisor(self) -> bool:
        return self.role == CasaRole.SUPERVISOR

    @property
    def is_volunteer(self) -> bool:
        return self.role == CasaRole.VOLUNTEER
