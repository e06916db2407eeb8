"""
Cases app Service Layer.

This module is the **single source of truth** for all business logic
in the ``cases`` app.  Views must remain thin: filter the payload
through the case policy, validate it via a serializer, call a service
method, and return the result wrapped in a DRF ``Response``.

Architecture
------------
- ``CaseQueryService``      — Org- and role-scoped lookups and listings.
- ``CaseCreationService``   — New cases, always inside the actor's org.
- ``CaseUpdateService``     — One-transaction update + change summary.
- ``CaseLifecycleService``  — Deactivate / reactivate.
- ``CourtOrderService``     — Persists a ``CourtOrderPlan``.
- ``reconcile_court_orders`` / ``build_change_summary`` — pure helpers.

Lookup rules
------------
  show                       → global lookup, then policy check (403)
  edit / update / (re|de)act → org-scoped lookup (404), then policy (403)

Lifecycle Overview
------------------
  ACTIVE ──deactivate()──▶ INACTIVE   (volunteer assignments end)
  INACTIVE ──reactivate()──▶ ACTIVE
  Both transitions are idempotent and admin-only.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from django.db import transaction
from django.db.models import Prefetch, QuerySet
from django.utils.html import escape

from contacts.models import OtherDuty
from contacts.services import ContactTypeService
from core.constants import CASE_UPDATED_NOTICE
from core.domain.access import ScopeRules, apply_role_scope, scope_to_organization
from core.domain.exceptions import NotFound, PermissionDenied, UnprocessableEntity
from core.domain.transactions import atomic_capability
from core.domain.validation import humanize
from core.permissions_constants import CaseActions, CaseAttributes

from .models import CasaCase, CaseAssignment, CaseCourtOrder, ImplementationStatus
from .policies import CASE_CAPABILITIES, CasePolicy, CaseScope, authorize_case_create

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Role scope rules
# ═══════════════════════════════════════════════════════════════════

_SCOPE_FILTERS = {
    CaseScope.ORGANIZATION: lambda qs, user: qs,
    CaseScope.ASSIGNED: lambda qs, user: qs.filter(
        case_assignments__volunteer=user,
        case_assignments__active=True,
    ).distinct(),
}

#: Role value → queryset filter, derived from the capability table.
CASE_SCOPE_RULES: ScopeRules = {
    role: _SCOPE_FILTERS[capabilities.case_scope]
    for role, capabilities in CASE_CAPABILITIES.items()
}


# ═══════════════════════════════════════════════════════════════════
#  Case Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """
    Lookups and listings of ``CasaCase``.

    Every lookup passes the organization boundary; listings additionally
    apply the role scope from ``CASE_SCOPE_RULES``.
    """

    @staticmethod
    def get_filtered_queryset(requesting_user: Any, filters: Mapping[str, Any]) -> QuerySet:
        """
        Build the org- and role-scoped case list.

        Parameters
        ----------
        requesting_user : User
            From ``request.user``.
        filters : dict
            Cleaned dict from ``CaseFilterSerializer``.  Supported keys:
            ``active`` (bool|None), ``transition_aged_youth`` (bool|None),
            ``case_number`` (str).

        Returns
        -------
        QuerySet[CasaCase]
        """
        CasePolicy(requesting_user).authorize(CaseActions.INDEX)

        qs = scope_to_organization(CasaCase.objects.all(), requesting_user)
        qs = apply_role_scope(qs, requesting_user, scope_rules=CASE_SCOPE_RULES)

        if filters.get("active") is not None:
            qs = qs.filter(active=filters["active"])
        if filters.get("transition_aged_youth") is not None:
            qs = qs.filter(transition_aged_youth=filters["transition_aged_youth"])
        if filters.get("case_number"):
            qs = qs.filter(case_number__icontains=filters["case_number"])

        return qs.prefetch_related(
            Prefetch(
                "case_assignments",
                queryset=CaseAssignment.objects.select_related("volunteer"),
            ),
        ).order_by("case_number")

    @staticmethod
    def get_other_duties(requesting_user: Any) -> QuerySet:
        """A volunteer's own non-case duties; empty for other roles."""
        if not getattr(requesting_user, "is_volunteer", False):
            return OtherDuty.objects.none()
        return OtherDuty.objects.filter(creator=requesting_user)

    @staticmethod
    def get_case(pk: Any) -> CasaCase:
        """Global lookup by PK.  Raises ``NotFound``."""
        case = CasaCase.objects.filter(pk=pk).first()
        if case is None:
            raise NotFound(f"CASA case with pk={pk} does not exist.")
        return case

    @staticmethod
    def get_case_detail(requesting_user: Any, pk: Any) -> CasaCase:
        """
        Case for the *show* action.

        A case of another organization (or an unassigned case for a
        volunteer) raises ``PermissionDenied`` rather than ``NotFound``.
        """
        case = CaseQueryService.get_case(pk)
        CasePolicy(requesting_user).authorize(CaseActions.SHOW, case)
        return case

    @staticmethod
    def get_case_in_organization(requesting_user: Any, pk: Any) -> CasaCase:
        """
        Org-scoped lookup used by edit, update, deactivate and reactivate.

        A case from another organization is reported as missing.
        """
        qs = scope_to_organization(CasaCase.objects.all(), requesting_user)
        case = qs.filter(pk=pk).first()
        if case is None:
            raise NotFound(f"CASA case with pk={pk} does not exist.")
        return case

    @staticmethod
    def get_form_metadata(requesting_user: Any, action: str) -> dict[str, Any]:
        """
        Everything a client needs to render the new / edit form: the
        fields the actor may submit and the org's contact types.
        """
        policy = CasePolicy(requesting_user)
        policy.authorize(action)
        return {
            "permitted_fields": list(policy.permitted_fields(action)),
            "contact_types": ContactTypeService.contact_types_for(requesting_user),
        }


# ═══════════════════════════════════════════════════════════════════
#  Case Creation Service
# ═══════════════════════════════════════════════════════════════════


class CaseCreationService:
    """Creates cases.  The owning organization is always the actor's."""

    @staticmethod
    @transaction.atomic
    def create_case(validated_data: dict[str, Any], requesting_user: Any) -> CasaCase:
        """
        Create a new ``CasaCase``.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``CaseCreateSerializer`` (already filtered
            to the actor's create fields).
        requesting_user : User
            Must hold the ``create`` capability.

        Returns
        -------
        CasaCase

        Raises
        ------
        PermissionDenied
            If the actor may not create cases.
        """
        if not authorize_case_create(requesting_user):
            raise PermissionDenied()

        data = dict(validated_data)
        contact_type_ids = data.pop(CaseAttributes.CONTACT_TYPE_IDS, [])
        data.pop(CaseAttributes.CASA_ORG_ID, None)

        case = CasaCase.objects.create(casa_org_id=requesting_user.casa_org_id, **data)
        if contact_type_ids:
            case.contact_types.set(
                ContactTypeService.resolve_contact_types(case.casa_org_id, contact_type_ids)
            )

        logger.info(
            "Case %s (pk=%s) created in org %s by user %s",
            case.case_number, case.pk, case.casa_org_id, requesting_user.pk,
        )
        return case


# ═══════════════════════════════════════════════════════════════════
#  Court Order Reconciliation
# ═══════════════════════════════════════════════════════════════════


class InvalidCourtOrderBatch(ValueError):
    """A submitted court-order batch cannot be applied at all."""


@dataclass
class CourtOrderPlan:
    """
    What applying a submitted court-order batch would do.

    ``skipped`` lists the ids of existing orders left untouched because
    their submitted text was blank.
    """

    to_create: list[dict[str, Any]] = field(default_factory=list)
    to_update: list[tuple[CaseCourtOrder, dict[str, Any]]] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return len(self.to_create) + len(self.to_update)


_VALID_IMPLEMENTATION_STATUSES = set(ImplementationStatus.values)


def _normalize_entries(submitted: Any) -> list[Mapping[str, Any]]:
    """Accept a list, or a mapping keyed by position (``{"0": {...}}``)."""
    if isinstance(submitted, Mapping):
        try:
            keys = sorted(submitted, key=int)
        except (TypeError, ValueError) as exc:
            raise InvalidCourtOrderBatch("Court order keys must be numeric.") from exc
        entries = [submitted[key] for key in keys]
    elif isinstance(submitted, (list, tuple)):
        entries = list(submitted)
    else:
        raise InvalidCourtOrderBatch("Court orders must be a list or a mapping.")

    if not all(isinstance(entry, Mapping) for entry in entries):
        raise InvalidCourtOrderBatch("Each court order must be an object.")
    return entries


def _clean_status(entry: Mapping[str, Any], default: str | None = None) -> str | None:
    if "implementation_status" not in entry:
        return default
    status = entry["implementation_status"] or None
    if status is not None and status not in _VALID_IMPLEMENTATION_STATUSES:
        raise InvalidCourtOrderBatch(f"Unknown implementation status {status!r}.")
    return status


def reconcile_court_orders(
    existing_orders: Iterable[CaseCourtOrder],
    submitted_orders: Any,
) -> CourtOrderPlan:
    """
    Merge a submitted batch into a case's existing court orders.

    Rules
    -----
    * No ``id`` and non-blank ``text`` → new order.
    * No ``id`` and blank ``text``     → ignored.
    * Known ``id``                     → update the submitted keys;
                                         an absent key keeps its value.
    * Known ``id`` and blank text      → order left as stored.
    * Unknown ``id``                   → ``InvalidCourtOrderBatch``.

    Pure: nothing is written.
    """
    by_id = {order.pk: order for order in existing_orders}
    plan = CourtOrderPlan()

    for entry in _normalize_entries(submitted_orders):
        text = str(entry.get("text") or "").strip()
        raw_id = entry.get("id")

        if raw_id in (None, ""):
            status = _clean_status(entry)
            if text:
                plan.to_create.append({"text": text, "implementation_status": status})
            continue

        try:
            order = by_id[int(raw_id)]
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidCourtOrderBatch(
                f"Court order {raw_id!r} does not belong to this case."
            ) from exc

        if "text" in entry and not text:
            plan.skipped.append(order.pk)
            continue
        text = text or order.text
        status = _clean_status(entry, default=order.implementation_status)
        if order.text != text or order.implementation_status != status:
            plan.to_update.append((order, {"text": text, "implementation_status": status}))

    return plan


class CourtOrderService:
    """Applies submitted court-order batches to a case."""

    @staticmethod
    def apply(case: CasaCase, submitted_orders: Any) -> int:
        """
        Reconcile and persist ``submitted_orders``.

        Must run inside the caller's transaction so order writes commit
        with the parent case.  An invalid batch is logged and skipped.

        Returns
        -------
        int
            Number of orders added or updated.
        """
        try:
            plan = reconcile_court_orders(case.case_court_orders.all(), submitted_orders)
        except InvalidCourtOrderBatch as exc:
            logger.warning("Skipping court orders for case %s: %s", case.pk, exc)
            return 0

        for attrs in plan.to_create:
            CaseCourtOrder.objects.create(casa_case=case, **attrs)
        for order, attrs in plan.to_update:
            for name, value in attrs.items():
                setattr(order, name, value)
            order.save(update_fields=["text", "implementation_status", "updated_at"])
        if plan.skipped:
            logger.info(
                "Kept court orders %s of case %s: blank text submitted",
                plan.skipped, case.pk,
            )
        return plan.changed_count


# ═══════════════════════════════════════════════════════════════════
#  Change Summary
# ═══════════════════════════════════════════════════════════════════


def _name_list(names: list[str]) -> str:
    return json.dumps([escape(name) for name in names], ensure_ascii=False)


class ChangeSummaryBuilder:
    """
    Builds the notice shown after an update::

        CASA case was successfully updated.<ul><li>Changed Case number</li>
        <li>["Court"] Contact types added</li>
        <li>2 Court orders added or updated</li></ul>
    """

    @staticmethod
    def snapshot(case: CasaCase) -> dict[str, Any]:
        state = {name: getattr(case, name) for name in CaseAttributes.SIMPLE}
        state["contact_types"] = list(
            case.contact_types.order_by("name").values_list("name", flat=True)
        )
        return state

    @staticmethod
    def lines(before: Mapping[str, Any], after: Mapping[str, Any], court_orders_changed: int) -> list[str]:
        lines = [
            f"Changed {humanize(name)}"
            for name in CaseAttributes.SIMPLE
            if before.get(name) != after.get(name)
        ]

        old_types = before.get("contact_types", [])
        new_types = after.get("contact_types", [])
        added = [name for name in new_types if name not in old_types]
        removed = [name for name in old_types if name not in new_types]
        if added:
            lines.append(f"{_name_list(added)} Contact types added")
        if removed:
            lines.append(f"{_name_list(removed)} Contact types removed")

        if court_orders_changed:
            lines.append(f"{court_orders_changed} Court orders added or updated")
        return lines


def build_change_summary(before: Mapping[str, Any], after: Mapping[str, Any], court_orders_changed: int = 0) -> str:
    lines = ChangeSummaryBuilder.lines(before, after, court_orders_changed)
    if not lines:
        return CASE_UPDATED_NOTICE
    items = "".join(f"<li>{line}</li>" for line in lines)
    return f"{CASE_UPDATED_NOTICE}<ul>{items}</ul>"


# ═══════════════════════════════════════════════════════════════════
#  Case Update Service
# ═══════════════════════════════════════════════════════════════════


class CaseUpdateService:
    """Applies a validated update to a case in a single transaction."""

    @staticmethod
    def update_case(
        case: CasaCase,
        validated_data: Mapping[str, Any],
        requesting_user: Any,
    ) -> tuple[CasaCase, str]:
        """
        Update scalar fields, contact types and court orders.

        Parameters
        ----------
        case : CasaCase
            From ``CaseQueryService.get_case_in_organization``.
        validated_data : dict
            Cleaned data from ``CaseUpdateSerializer``; keys outside the
            actor's update fields must already be dropped.
        requesting_user : User

        Returns
        -------
        tuple[CasaCase, str]
            The refreshed case and the change-summary notice.

        Raises
        ------
        PermissionDenied
            If the actor may not update this case.
        """
        CasePolicy(requesting_user).authorize(CaseActions.UPDATE, case)

        with transaction.atomic():
            before = ChangeSummaryBuilder.snapshot(case)

            for name in CaseAttributes.SIMPLE:
                if name in validated_data:
                    setattr(case, name, validated_data[name])
            case.save()

            if CaseAttributes.CONTACT_TYPE_IDS in validated_data:
                case.contact_types.set(
                    ContactTypeService.resolve_contact_types(
                        case.casa_org_id,
                        validated_data[CaseAttributes.CONTACT_TYPE_IDS],
                    )
                )

            orders_changed = 0
            if CaseAttributes.CASE_COURT_ORDERS in validated_data:
                orders_changed = CourtOrderService.apply(
                    case, validated_data[CaseAttributes.CASE_COURT_ORDERS],
                )

            after = ChangeSummaryBuilder.snapshot(case)

        logger.info("Case %s updated by user %s", case.pk, requesting_user.pk)
        return case, build_change_summary(before, after, orders_changed)


# ═══════════════════════════════════════════════════════════════════
#  Case Lifecycle Service
# ═══════════════════════════════════════════════════════════════════


class CaseLifecycleService:
    """
    Deactivate / reactivate.

    The capability method on ``CasaCase`` runs on a locked row inside a
    transaction; when it reports failure the transaction is rolled back
    and ``UnprocessableEntity([])`` is raised.
    """

    @staticmethod
    def deactivate(case: CasaCase, requesting_user: Any) -> str:
        return CaseLifecycleService._transition(
            case, requesting_user, CaseActions.DEACTIVATE, "deactivated",
        )

    @staticmethod
    def reactivate(case: CasaCase, requesting_user: Any) -> str:
        return CaseLifecycleService._transition(
            case, requesting_user, CaseActions.REACTIVATE, "reactivated",
        )

    @staticmethod
    def _transition(case: CasaCase, requesting_user: Any, action: str, verb: str) -> str:
        CasePolicy(requesting_user).authorize(action, case)

        case, succeeded = atomic_capability(instance=case, capability=action)
        if not succeeded:
            logger.warning("Case %s could not be %s", case.pk, verb)
            raise UnprocessableEntity([])

        logger.info("Case %s %s by user %s", case.pk, verb, requesting_user.pk)
        return f"Case {case.case_number} has been {verb}."
