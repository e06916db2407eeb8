"""
Smoke tests — verify that Django boots, URL routing resolves, and
the core domain modules are importable.

These tests do NOT require real data; they just prove the plumbing
works.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from django.urls import resolve, reverse


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all top-level app URL names reverse to their API prefix."""

    EXPECTED_URLS = [
        # (url_name, expected_path)
        ("casa-case-list",   "/api/casa_cases/"),
        ("casa-case-new",    "/api/casa_cases/new/"),
        ("reports:index",    "/api/reports/"),
        ("accounts:login",   "/api/accounts/auth/login/"),
        ("accounts:me",      "/api/accounts/me/"),
    ]

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, expected_path: str):
        assert reverse(url_name) == expected_path

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_path_resolves_to_view(self, url_name: str, expected_path: str):
        match = resolve(expected_path)
        assert match.func is not None

    def test_detail_routes(self):
        assert reverse("casa-case-detail", kwargs={"pk": 7}) == "/api/casa_cases/7/"
        assert reverse("casa-case-edit", kwargs={"pk": 7}) == "/api/casa_cases/7/edit/"
        assert reverse("casa-case-deactivate", kwargs={"pk": 7}) == "/api/casa_cases/7/deactivate/"
        assert reverse("casa-case-reactivate", kwargs={"pk": 7}) == "/api/casa_cases/7/reactivate/"
        assert reverse("reports:export", kwargs={"report_slug": "mileage"}) == "/api/reports/mileage/"


# ════════════════════════════════════════════════════════════════════
#  Core Domain Module Import Tests
# ════════════════════════════════════════════════════════════════════

class TestCoreDomainImports:

    def test_import_exceptions(self):
        from core.domain.exceptions import (
            DomainError,
            NotFound,
            PermissionDenied,
            UnprocessableEntity,
        )
        assert issubclass(PermissionDenied, DomainError)
        assert issubclass(NotFound, DomainError)
        assert issubclass(UnprocessableEntity, DomainError)

    def test_import_transactions(self):
        from core.domain.transactions import atomic_capability, lock_for_update
        assert callable(atomic_capability)
        assert callable(lock_for_update)

    def test_import_access(self):
        from core.domain.access import (
            apply_role_scope,
            belongs_to_organization,
            get_user_role_name,
            scope_to_organization,
        )
        assert callable(apply_role_scope)
        assert callable(belongs_to_organization)
        assert callable(get_user_role_name)
        assert callable(scope_to_organization)


# ════════════════════════════════════════════════════════════════════
#  Exception Behaviour Tests
# ════════════════════════════════════════════════════════════════════

class TestDomainExceptions:

    def test_permission_denied_defaults_to_notice(self):
        from core.constants import NOT_AUTHORIZED_NOTICE
        from core.domain.exceptions import PermissionDenied
        assert str(PermissionDenied()) == NOT_AUTHORIZED_NOTICE

    def test_status_map_covers_exactly_the_raised_errors(self):
        from core.domain.exception_handler import _STATUS_MAP
        assert sorted(_STATUS_MAP.values()) == [400, 403, 404, 422]

    def test_plain_domain_error_is_bad_request(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import DomainError

        response = domain_exception_handler(DomainError("Nope."), {"view": None})
        assert response.status_code == 400
        assert response.data == {"detail": "Nope."}

    def test_unprocessable_entity_renders_message_list(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import UnprocessableEntity

        response = domain_exception_handler(
            UnprocessableEntity(["Case number can't be blank"]), {"view": None},
        )
        assert response.status_code == 422
        assert response.data == ["Case number can't be blank"]

    def test_empty_unprocessable_entity_renders_empty_list(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import UnprocessableEntity

        response = domain_exception_handler(UnprocessableEntity(), {"view": None})
        assert response.data == []

    def test_unknown_exception_is_not_handled(self):
        from core.domain.exception_handler import domain_exception_handler
        assert domain_exception_handler(RuntimeError("boom"), {"view": None}) is None


# ════════════════════════════════════════════════════════════════════
#  Validation Helper Unit Tests
# ════════════════════════════════════════════════════════════════════

class TestValidationHelpers:

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("case_number", "Case number"),
            ("birth_month_year_youth", "Birth month year youth"),
            ("casa_org_id", "Casa org"),
        ],
    )
    def test_humanize(self, field, expected):
        from core.domain.validation import humanize
        assert humanize(field) == expected

    def test_full_messages_keeps_order_and_drops_duplicates(self):
        from core.domain.validation import full_messages
        errors = {
            "case_number": ["can't be blank"],
            "birth_month_year_youth": ["can't be blank", "can't be blank"],
            "non_field_errors": ["Something else"],
        }
        assert full_messages(errors) == [
            "Case number can't be blank",
            "Birth month year youth can't be blank",
            "Something else",
        ]


# ════════════════════════════════════════════════════════════════════
#  Access Helper Unit Tests
# ════════════════════════════════════════════════════════════════════

class TestAccessHelpers:

    def _user(self, role="volunteer", casa_org_id=3):
        user = MagicMock()
        user.is_authenticated = True
        user.role = role
        user.casa_org_id = casa_org_id
        return user

    def test_apply_role_scope_unknown_role_default_all(self):
        from core.domain.access import apply_role_scope

        qs = MagicMock()
        result = apply_role_scope(qs, self._user(role="x"), scope_rules={}, default="all")
        assert result is qs

    def test_apply_role_scope_unknown_role_default_none(self):
        from core.domain.access import apply_role_scope

        qs = MagicMock()
        apply_role_scope(qs, self._user(role="x"), scope_rules={}, default="none")
        qs.none.assert_called_once()

    def test_apply_role_scope_dispatches_on_role(self):
        from core.domain.access import apply_role_scope

        qs = MagicMock()
        rule = MagicMock(return_value="scoped")
        user = self._user(role="volunteer")
        assert apply_role_scope(qs, user, scope_rules={"volunteer": rule}) == "scoped"
        rule.assert_called_once_with(qs, user)

    def test_scope_to_organization_filters_on_org_id(self):
        from core.domain.access import scope_to_organization

        qs = MagicMock()
        scope_to_organization(qs, self._user(), org_lookup="casa_case__casa_org")
        qs.filter.assert_called_once_with(casa_case__casa_org_id=3)

    def test_scope_to_organization_without_org_is_empty(self):
        from core.domain.access import scope_to_organization

        qs = MagicMock()
        scope_to_organization(qs, self._user(casa_org_id=None))
        qs.none.assert_called_once()

    def test_get_user_role_name_anonymous(self):
        from core.domain.access import get_user_role_name

        user = MagicMock()
        user.is_authenticated = False
        assert get_user_role_name(user) is None
