"""
Model-level tests for ``CasaCase``: derived flags, uniqueness and the
deactivate / reactivate capabilities.
"""

from __future__ import annotations

import datetime

import pytest
from django.db import IntegrityError, transaction

from cases.models import CasaCase, CaseAssignment, years_ago
from core.constants import TRANSITION_AGE_YEARS


@pytest.mark.django_db
class TestCasaCaseModel:

    def test_transition_aged_youth_is_derived_on_save(self, create_org, create_case):
        org = create_org()
        older = create_case(org, birth_month_year_youth=years_ago(TRANSITION_AGE_YEARS + 1))
        younger = create_case(org, birth_month_year_youth=years_ago(TRANSITION_AGE_YEARS - 1))

        assert older.transition_aged_youth is True
        assert younger.transition_aged_youth is False

        younger.birth_month_year_youth = years_ago(TRANSITION_AGE_YEARS)
        younger.save()
        assert younger.transition_aged_youth is True

    def test_case_number_unique_per_org(self, create_org, create_case):
        org = create_org()
        create_case(org, case_number="CINA-1")
        create_case(create_org(), case_number="CINA-1")

        with pytest.raises(IntegrityError), transaction.atomic():
            create_case(org, case_number="CINA-1")

    def test_deactivate_ends_assignments_and_is_idempotent(self, create_org, create_user, create_case):
        org = create_org()
        volunteer = create_user(casa_org=org)
        case = create_case(org, volunteers=[volunteer])

        assert case.deactivate() is True
        assert case.deactivate() is True

        case.refresh_from_db()
        assert case.active is False
        assert CaseAssignment.objects.get(casa_case=case).active is False

    def test_reactivate(self, create_org, create_case):
        case = create_case(create_org(), active=False)

        assert case.reactivate() is True
        case.refresh_from_db()
        assert case.active is True

    def test_deactivate_reports_failure_for_invalid_case(self, create_org, create_case):
        case = create_case(create_org())
        case.case_number = ""

        assert case.deactivate() is False
        assert CasaCase.objects.get(pk=case.pk).active is True


def test_years_ago_handles_leap_day():
    assert years_ago(1, today=datetime.date(2024, 2, 29)) == datetime.date(2023, 2, 28)
