"""
Contacts app Service Layer.

Architecture
------------
- ``ContactTypeService`` — org-scoped taxonomy queries and seeding of
  the default contact-type groups for a new organization.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.db import transaction
from django.db.models import QuerySet

from core.domain.access import scope_to_organization

from .models import ContactType, ContactTypeGroup

if TYPE_CHECKING:
    from accounts.models import CasaOrg

logger = logging.getLogger(__name__)

# ────────────────────────────────────────────────────────────────────
# Group name → contact type names seeded for every new organization.
# ────────────────────────────────────────────────────────────────────
DEFAULT_CONTACT_TYPES: dict[str, list[str]] = {
    "CASA": ["Youth", "Supervisor"],
    "Family": [
        "Parent",
        "Other Family",
        "Sibling",
        "Grandparent",
        "Aunt Uncle or Cousin",
        "Fictive Kin",
    ],
    "Placement": ["Foster Parent", "Caregiver Family", "Therapeutic Agency Worker"],
    "Social Services": ["Social Worker"],
    "Legal": ["Court", "Attorney"],
    "Health": [
        "Medical Professional",
        "Mental Health Therapist",
        "Other Therapist",
        "Psychiatric Practitioner",
    ],
    "Education": ["School", "Guidance Counselor", "Teacher", "IEP Team"],
}


class ContactTypeService:
    """Queries and seeding for the per-organization contact taxonomy."""

    @staticmethod
    def contact_types_for(user: Any) -> QuerySet:
        """Active contact types of the user's organization."""
        qs = ContactType.objects.filter(active=True).select_related("contact_type_group")
        return scope_to_organization(qs, user, org_lookup="contact_type_group__casa_org")

    @staticmethod
    def contact_type_groups_for(user: Any) -> QuerySet:
        """Active contact-type groups of the user's organization."""
        return scope_to_organization(ContactTypeGroup.objects.filter(active=True), user)

    @staticmethod
    def resolve_contact_types(casa_org_id: int, contact_type_ids: list[int]) -> list[ContactType]:
        """
        Return the contact types among ``contact_type_ids`` that belong
        to the organization.  Foreign or unknown ids are dropped.
        """
        if not contact_type_ids:
            return []
        return list(
            ContactType.objects.filter(
                pk__in=contact_type_ids,
                contact_type_group__casa_org_id=casa_org_id,
            ).order_by("name")
        )

    @staticmethod
    @transaction.atomic
    def seed_defaults(casa_org: CasaOrg) -> tuple[int, int]:
        """
        Create the default groups and types for ``casa_org``.

        Idempotent: existing groups/types are left as they are.

        Returns
        -------
        tuple[int, int]
            ``(groups_created, types_created)``.
        """
        groups_created = 0
        types_created = 0
        for group_name, type_names in DEFAULT_CONTACT_TYPES.items():
            group, created = ContactTypeGroup.objects.get_or_create(
                casa_org=casa_org,
                name=group_name,
            )
            groups_created += int(created)
            for type_name in type_names:
                _, created = ContactType.objects.get_or_create(
                    contact_type_group=group,
                    name=type_name,
                )
                types_created += int(created)

        logger.info(
            "Seeded contact types for org %s: %d groups, %d types created",
            casa_org.pk, groups_created, types_created,
        )
        return groups_created, types_created
