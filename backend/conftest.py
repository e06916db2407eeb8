"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_org`` factory fixture for organizations.
  - ``create_user`` factory fixture for users of a given role.
  - ``create_case`` factory fixture for CASA cases.
  - ``create_contact_type`` factory fixture (group created on demand).
  - ``auth_client`` fixture returning a client authenticated as a user.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_org(db):
    """
    Factory fixture that creates a ``CasaOrg``.

    Usage::

        def test_something(create_org):
            org = create_org()
            other = create_org(name="Other County CASA")
    """
    from accounts.models import CasaOrg

    _counter = 0

    def _factory(*, name: str | None = None, **kwargs) -> CasaOrg:
        nonlocal _counter
        _counter += 1
        return CasaOrg.objects.create(name=name or f"CASA Org {_counter}", **kwargs)

    return _factory


@pytest.fixture()
def create_user(db, create_org):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            volunteer = create_user()
            admin = create_user(role="casa_admin", casa_org=volunteer.casa_org)
    """
    from accounts.models import CasaRole, User

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        role: str = CasaRole.VOLUNTEER,
        casa_org=None,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"
        if casa_org is None:
            casa_org = create_org()

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            role=role,
            casa_org=casa_org,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def create_case(db):
    """
    Factory fixture that creates a ``CasaCase`` in ``casa_org``.

    Volunteers passed in ``volunteers`` get an active assignment.
    """
    from cases.models import CasaCase, CaseAssignment, years_ago

    _counter = 0

    def _factory(casa_org, *, case_number: str | None = None, volunteers=(), **kwargs) -> CasaCase:
        nonlocal _counter
        _counter += 1
        kwargs.setdefault("birth_month_year_youth", years_ago(10))
        case = CasaCase.objects.create(
            casa_org=casa_org,
            case_number=case_number or f"CINA-{_counter:04d}",
            **kwargs,
        )
        for volunteer in volunteers:
            CaseAssignment.objects.create(casa_case=case, volunteer=volunteer)
        return case

    return _factory


@pytest.fixture()
def create_contact_type(db):
    """Factory fixture: ``create_contact_type(org, "Court", group="Legal")``."""
    from contacts.models import ContactType, ContactTypeGroup

    def _factory(casa_org, name: str, *, group: str = "General") -> ContactType:
        contact_type_group, _ = ContactTypeGroup.objects.get_or_create(casa_org=casa_org, name=group)
        return ContactType.objects.create(contact_type_group=contact_type_group, name=name)

    return _factory


@pytest.fixture()
def auth_client():
    """
    Return a function that builds a DRF client authenticated as ``user``.

    Usage::

        def test_something(auth_client, create_user):
            client = auth_client(create_user(role="casa_admin"))
    """

    def _factory(user) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _factory
