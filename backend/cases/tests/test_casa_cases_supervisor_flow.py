"""
Integration tests: a supervisor works with every case of their
organization but cannot create, rename, deactivate or reactivate cases.
"""

from __future__ import annotations

import datetime

import pytest
from django.urls import reverse
from rest_framework import status

from accounts.models import CasaRole
from cases.models import CasaCase
from core.constants import NOT_AUTHORIZED_NOTICE


@pytest.fixture()
def org(create_org):
    return create_org(name="Anne Arundel CASA")


@pytest.fixture()
def supervisor(create_user, org):
    return create_user(role=CasaRole.SUPERVISOR, casa_org=org)


@pytest.fixture()
def client(auth_client, supervisor):
    return auth_client(supervisor)


@pytest.mark.django_db
class TestSupervisorCases:

    def test_index_lists_every_case_in_org(self, client, create_case, org, create_org):
        create_case(org, case_number="CINA-30-0002")
        create_case(org, case_number="CINA-30-0001")
        create_case(create_org(), case_number="CINA-OTHER")

        resp = client.get(reverse("casa-case-list"))

        assert resp.status_code == status.HTTP_200_OK
        assert [row["case_number"] for row in resp.data["casa_cases"]] == [
            "CINA-30-0001",
            "CINA-30-0002",
        ]

    def test_new_is_allowed_but_offers_no_create_fields(self, client):
        resp = client.get(reverse("casa-case-new"))

        assert resp.status_code == status.HTTP_200_OK
        assert resp.data["permitted_fields"] == []

    def test_create_is_not_authorized(self, client):
        payload = {"case_number": "CINA-30-9999", "birth_month_year_youth": "2012-01-01"}

        resp = client.post(reverse("casa-case-list"), payload, format="json")

        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert resp.json() == {"detail": NOT_AUTHORIZED_NOTICE}
        assert not CasaCase.objects.filter(case_number="CINA-30-9999").exists()

    def test_update_applies_permitted_fields_only(self, client, create_case, create_contact_type, org):
        case = create_case(org, case_number="CINA-30-0001")
        court = create_contact_type(org, "Court", group="Legal")

        resp = client.patch(
            reverse("casa-case-detail", kwargs={"pk": case.pk}),
            {
                "case_number": "CINA-30-RENAMED",
                "upcoming_hearing_date": "2030-06-15",
                "contact_type_ids": [court.pk],
            },
            format="json",
        )

        assert resp.status_code == status.HTTP_200_OK
        case.refresh_from_db()
        assert case.case_number == "CINA-30-0001"
        assert case.upcoming_hearing_date == datetime.date(2030, 6, 15)
        assert list(case.contact_types.values_list("name", flat=True)) == ["Court"]
        assert "Changed Case number" not in resp.data["notice"]
        assert "<li>Changed Upcoming hearing date</li>" in resp.data["notice"]

    def test_update_ignores_contact_types_of_another_org(self, client, create_case, create_contact_type, org, create_org):
        case = create_case(org)
        foreign = create_contact_type(create_org(), "Court", group="Legal")

        resp = client.patch(
            reverse("casa-case-detail", kwargs={"pk": case.pk}),
            {"contact_type_ids": [foreign.pk]},
            format="json",
        )

        assert resp.status_code == status.HTTP_200_OK
        assert case.contact_types.count() == 0

    def test_removing_contact_types_is_summarised(self, client, create_case, create_contact_type, org):
        case = create_case(org)
        court = create_contact_type(org, "Court", group="Legal")
        school = create_contact_type(org, "School", group="Education")
        case.contact_types.set([court, school])

        resp = client.patch(
            reverse("casa-case-detail", kwargs={"pk": case.pk}),
            {"contact_type_ids": [school.pk]},
            format="json",
        )

        assert resp.data["notice"] == (
            'CASA case was successfully updated.<ul><li>["Court"] Contact types removed</li></ul>'
        )

    def test_update_other_org_case_is_not_found(self, client, create_case, create_org):
        other = create_case(create_org(), case_number="CINA-OTHER")

        resp = client.patch(
            reverse("casa-case-detail", kwargs={"pk": other.pk}),
            {"court_report_status": "completed"},
            format="json",
        )

        assert resp.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("transition", ["deactivate", "reactivate"])
    def test_lifecycle_is_not_authorized(self, client, create_case, org, transition):
        case = create_case(org)
        url = reverse(f"casa-case-{transition}", kwargs={"pk": case.pk})

        resp = client.patch(url, format="json")

        assert resp.status_code == status.HTTP_403_FORBIDDEN
        case.refresh_from_db()
        assert case.active is True
