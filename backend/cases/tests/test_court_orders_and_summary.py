"""
Unit tests for court-order reconciliation and the update change summary.
"""

from __future__ import annotations

import pytest

from cases.models import CaseCourtOrder
from cases.services import (
    CourtOrderService,
    InvalidCourtOrderBatch,
    build_change_summary,
    reconcile_court_orders,
)


def _order(pk, text, status=None):
    return CaseCourtOrder(pk=pk, text=text, implementation_status=status)


class TestReconcileCourtOrders:

    def test_new_entries_with_text_are_created(self):
        plan = reconcile_court_orders([], [{"text": "Order A"}, {"text": "  "}])

        assert plan.to_create == [{"text": "Order A", "implementation_status": None}]
        assert plan.changed_count == 1

    def test_indexed_mapping_is_applied_in_numeric_order(self):
        submitted = {"10": {"text": "Third"}, "2": {"text": "Second"}, "0": {"text": "First"}}

        plan = reconcile_court_orders([], submitted)

        assert [attrs["text"] for attrs in plan.to_create] == ["First", "Second", "Third"]

    def test_known_id_updates_text_and_status(self):
        existing = _order(1, "Old text")

        plan = reconcile_court_orders(
            [existing],
            [{"id": "1", "text": "New text", "implementation_status": "implemented"}],
        )

        assert plan.to_update == [(existing, {"text": "New text", "implementation_status": "implemented"})]

    def test_blank_text_leaves_order_untouched_but_others_apply(self):
        first, second = _order(1, "A"), _order(2, "B")

        plan = reconcile_court_orders(
            [first, second],
            [{"id": 1, "text": ""}, {"id": 2, "text": "B2"}],
        )

        assert plan.skipped == [1]
        assert plan.to_update == [(second, {"text": "B2", "implementation_status": None})]

    def test_text_only_update_keeps_stored_status(self):
        existing = _order(1, "Old", "implemented")

        plan = reconcile_court_orders([existing], [{"id": 1, "text": "New"}])

        assert plan.to_update == [(existing, {"text": "New", "implementation_status": "implemented"})]

    def test_status_only_update_keeps_stored_text(self):
        existing = _order(1, "Order")

        plan = reconcile_court_orders([existing], [{"id": 1, "implementation_status": "implemented"}])

        assert plan.skipped == []
        assert plan.to_update == [(existing, {"text": "Order", "implementation_status": "implemented"})]

    def test_unchanged_order_is_not_counted(self):
        plan = reconcile_court_orders([_order(1, "Same", "implemented")], [{"id": 1, "text": "Same", "implementation_status": "implemented"}])

        assert plan.changed_count == 0

    @pytest.mark.parametrize(
        "submitted",
        [
            [{"id": 99, "text": "Not on this case"}],
            [{"id": "abc", "text": "Bad id"}],
            {"first": {"text": "Non-numeric key"}},
            ["not an object"],
            "a string",
            [{"text": "Bad status", "implementation_status": "done"}],
        ],
    )
    def test_structurally_invalid_batches_raise(self, submitted):
        with pytest.raises(InvalidCourtOrderBatch):
            reconcile_court_orders([_order(1, "A")], submitted)


@pytest.mark.django_db
class TestCourtOrderService:

    def test_invalid_batch_is_skipped_without_writes(self, create_org, create_case):
        case = create_case(create_org())
        CaseCourtOrder.objects.create(casa_case=case, text="Existing")

        changed = CourtOrderService.apply(case, [{"text": "New"}, {"id": 123456, "text": "Foreign"}])

        assert changed == 0
        assert list(case.case_court_orders.values_list("text", flat=True)) == ["Existing"]

    def test_apply_creates_and_updates(self, create_org, create_case):
        case = create_case(create_org())
        existing = CaseCourtOrder.objects.create(casa_case=case, text="Existing")

        changed = CourtOrderService.apply(
            case,
            {"0": {"id": existing.pk, "text": "Existing, revised"}, "1": {"text": "Brand new"}},
        )

        assert changed == 2
        assert list(case.case_court_orders.values_list("text", flat=True)) == [
            "Existing, revised",
            "Brand new",
        ]

    def test_partial_entries_update_only_submitted_keys(self, create_org, create_case):
        case = create_case(create_org())
        first = CaseCourtOrder.objects.create(casa_case=case, text="Old", implementation_status="implemented")
        second = CaseCourtOrder.objects.create(casa_case=case, text="Pending")

        changed = CourtOrderService.apply(
            case,
            [{"id": first.pk, "text": "New"}, {"id": second.pk, "implementation_status": "partially_implemented"}],
        )

        assert changed == 2
        first.refresh_from_db()
        second.refresh_from_db()
        assert (first.text, first.implementation_status) == ("New", "implemented")
        assert (second.text, second.implementation_status) == ("Pending", "partially_implemented")


class TestChangeSummary:

    BEFORE = {
        "case_number": "CINA-1",
        "birth_month_year_youth": None,
        "court_report_status": "not_submitted",
        "upcoming_hearing_date": None,
        "contact_types": ["Court", "School"],
    }

    def test_no_changes_is_just_the_notice(self):
        assert build_change_summary(self.BEFORE, dict(self.BEFORE), 0) == "CASA case was successfully updated."

    def test_lines_in_order(self):
        after = {
            **self.BEFORE,
            "case_number": "CINA-2",
            "court_report_status": "submitted",
            "contact_types": ["School", "Therapist", "Youth"],
        }

        summary = build_change_summary(self.BEFORE, after, 3)

        assert summary == (
            "CASA case was successfully updated.<ul>"
            "<li>Changed Case number</li>"
            "<li>Changed Court report status</li>"
            '<li>["Therapist", "Youth"] Contact types added</li>'
            '<li>["Court"] Contact types removed</li>'
            "<li>3 Court orders added or updated</li>"
            "</ul>"
        )

    def test_court_orders_only(self):
        summary = build_change_summary(self.BEFORE, dict(self.BEFORE), 1)

        assert summary == (
            "CASA case was successfully updated.<ul><li>1 Court orders added or updated</li></ul>"
        )

    def test_contact_type_names_are_escaped_and_kept_readable(self):
        after = {**self.BEFORE, "contact_types": ["Court", "School", "Médecin <Dr>"]}

        summary = build_change_summary(self.BEFORE, after)

        assert '<li>["Médecin &lt;Dr&gt;"] Contact types added</li>' in summary
