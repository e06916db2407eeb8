"""
Case authorization policy.

The whole permission matrix lives in ``CASE_CAPABILITIES``: one row per
role listing the actions it may perform, the attributes it may submit
on create and update, and the cases it can see.  Views and services
never branch on roles directly; they ask a ``CasePolicy``.

    ┌──────────────┬────────┬────────────┬─────────────────┐
    │ action       │ admin  │ supervisor │ volunteer       │
    ├──────────────┼────────┼────────────┼─────────────────┤
    │ index/show   │ org    │ org        │ assigned cases  │
    │ edit/update  │ org    │ org        │ assigned cases  │
    │ new          │ yes    │ yes        │ no              │
    │ create       │ yes    │ no         │ no              │
    │ (re/de)activ │ yes    │ no         │ no              │
    │ export       │ yes    │ yes        │ no              │
    └──────────────┴────────┴────────────┴─────────────────┘
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from accounts.models import CasaRole
from core.domain.access import belongs_to_organization
from core.domain.exceptions import PermissionDenied
from core.permissions_constants import CaseActions, CaseAttributes, ReportActions


class CaseScope:
    """Which cases inside the actor's organization a role can reach."""

    ORGANIZATION = "organization"
    ASSIGNED = "assigned"


@dataclass(frozen=True)
class RoleCapabilities:
    actions: frozenset[str]
    create_fields: tuple[str, ...] = ()
    update_fields: tuple[str, ...] = ()
    case_scope: str = CaseScope.ORGANIZATION


CASE_CAPABILITIES: dict[str, RoleCapabilities] = {
    CasaRole.ADMIN: RoleCapabilities(
        actions=frozenset({
            CaseActions.INDEX,
            CaseActions.SHOW,
            CaseActions.NEW,
            CaseActions.CREATE,
            CaseActions.EDIT,
            CaseActions.UPDATE,
            CaseActions.DEACTIVATE,
            CaseActions.REACTIVATE,
            ReportActions.EXPORT,
        }),
        create_fields=(
            CaseAttributes.CASE_NUMBER,
            CaseAttributes.BIRTH_MONTH_YEAR_YOUTH,
            CaseAttributes.CASA_ORG_ID,
            CaseAttributes.COURT_REPORT_STATUS,
            CaseAttributes.CONTACT_TYPE_IDS,
            CaseAttributes.UPCOMING_HEARING_DATE,
        ),
        update_fields=(
            CaseAttributes.CASE_NUMBER,
            CaseAttributes.COURT_REPORT_STATUS,
            CaseAttributes.CASE_COURT_ORDERS,
            CaseAttributes.CONTACT_TYPE_IDS,
            CaseAttributes.UPCOMING_HEARING_DATE,
            CaseAttributes.CASA_ORG_ID,
        ),
    ),
    CasaRole.SUPERVISOR: RoleCapabilities(
        actions=frozenset({
            CaseActions.INDEX,
            CaseActions.SHOW,
            CaseActions.NEW,
            CaseActions.EDIT,
            CaseActions.UPDATE,
            ReportActions.EXPORT,
        }),
        update_fields=(
            CaseAttributes.COURT_REPORT_STATUS,
            CaseAttributes.CASE_COURT_ORDERS,
            CaseAttributes.CONTACT_TYPE_IDS,
            CaseAttributes.UPCOMING_HEARING_DATE,
        ),
    ),
    CasaRole.VOLUNTEER: RoleCapabilities(
        actions=frozenset({
            CaseActions.INDEX,
            CaseActions.SHOW,
            CaseActions.EDIT,
            CaseActions.UPDATE,
        }),
        update_fields=(
            CaseAttributes.COURT_REPORT_STATUS,
            CaseAttributes.CASE_COURT_ORDERS,
        ),
        case_scope=CaseScope.ASSIGNED,
    ),
}

_NO_CAPABILITIES = RoleCapabilities(actions=frozenset())


class CasePolicy:
    """
    Answers "may this actor do X (to this case)?" from the capability
    table.

    Usage::

        policy = CasePolicy(request.user)
        policy.authorize(CaseActions.UPDATE, case)
        attrs = policy.permitted_attributes(CaseActions.UPDATE, request.data)
    """

    def __init__(self, user: Any) -> None:
        self.user = user
        self.capabilities = CASE_CAPABILITIES.get(
            getattr(user, "role", None), _NO_CAPABILITIES,
        )

    def can(self, action: str) -> bool:
        return action in self.capabilities.actions

    def can_access(self, case: Any) -> bool:
        """Organization boundary plus the role's case scope."""
        if not belongs_to_organization(case, self.user):
            return False
        if self.capabilities.case_scope == CaseScope.ASSIGNED:
            return case.case_assignments.filter(
                volunteer=self.user, active=True,
            ).exists()
        return True

    def authorize(self, action: str, case: Any = None) -> None:
        """
        Raise ``PermissionDenied`` (carrying the not-authorized notice)
        unless the actor may perform ``action`` on ``case``.
        """
        if not self.can(action):
            raise PermissionDenied()
        if case is not None and not self.can_access(case):
            raise PermissionDenied()

    def permitted_fields(self, action: str) -> tuple[str, ...]:
        if action in (CaseActions.CREATE, CaseActions.NEW):
            return self.capabilities.create_fields
        if action in (CaseActions.UPDATE, CaseActions.EDIT):
            return self.capabilities.update_fields
        return ()

    def permitted_attributes(self, action: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Keep only the submitted keys the actor may set for ``action``.
        Everything else is dropped without error.

        ``casa_org_id`` survives only when it names the actor's own
        organization.
        """
        allowed = self.permitted_fields(action)
        accepted = {key: data[key] for key in allowed if key in data}
        if CaseAttributes.CONTACT_TYPE_IDS in accepted and hasattr(data, "getlist"):
            # Form-encoded submissions repeat the key once per id.
            accepted[CaseAttributes.CONTACT_TYPE_IDS] = data.getlist(CaseAttributes.CONTACT_TYPE_IDS)
        if CaseAttributes.CASA_ORG_ID in accepted:
            if str(accepted[CaseAttributes.CASA_ORG_ID]) != str(self.user.casa_org_id):
                del accepted[CaseAttributes.CASA_ORG_ID]
        return accepted


def authorize_case_create(actor: Any) -> bool:
    return CasePolicy(actor).can(CaseActions.CREATE)


def filter_permitted_attributes(actor: Any, action: str, submitted: Mapping[str, Any]) -> dict[str, Any]:
    return CasePolicy(actor).permitted_attributes(action, submitted)
