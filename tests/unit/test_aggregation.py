"""Tests for multi-service aggregation and the booking draft."""
from datetime import date

import pytest
from pydantic import ValidationError

from salon_calendar.aggregation import (
    AppointmentDraft,
    ServiceAggregate,
    aggregate_services,
    reconstruct_selection,
    toggle_service,
    unmatched_service_names,
)
from salon_calendar.errors import DraftIncompleteError
from salon_calendar.models import AppointmentStatus, Service


class TestAggregateServices:

    def test_two_services(self, catalog):
        result = aggregate_services(["srv-a", "srv-b"], catalog)
        assert result == ServiceAggregate("A, B", 90, 4500)

    def test_names_follow_selection_order(self, catalog):
        result = aggregate_services(["srv-b", "srv-a"], catalog)
        assert result.service_names == "B, A"

    def test_empty_selection_defaults(self, catalog):
        """No services yet: 60 minute slot and an unset price, not zero."""
        result = aggregate_services([], catalog)
        assert result.total_duration == 60
        assert result.total_price is None
        assert result.service_names == ""

    def test_free_service_is_zero_not_unset(self):
        free = [Service(id="srv-free", name="Consultation", duration=15, price=0)]
        result = aggregate_services(["srv-free"], free)
        assert result.total_price == 0
        assert result.total_price is not None

    def test_unknown_ids_are_ignored(self, catalog):
        result = aggregate_services(["srv-a", "srv-missing"], catalog)
        assert result == ServiceAggregate("A", 60, 3000)


class TestToggle:

    def test_add_and_remove(self):
        selection = toggle_service([], "srv-a")
        selection = toggle_service(selection, "srv-b")
        assert selection == ["srv-a", "srv-b"]
        assert toggle_service(selection, "srv-a") == ["srv-b"]

    def test_returns_new_list(self):
        original = ["srv-a"]
        toggle_service(original, "srv-b")
        assert original == ["srv-a"]


class TestReconstructSelection:

    def test_exact_name_match(self, catalog):
        assert reconstruct_selection("Precision Cut, Full Color", catalog) == ["srv-cut", "srv-color"]

    def test_unmatched_names_are_dropped(self, catalog):
        """Known lossy edit: names missing from the catalog vanish from the selection."""
        label = "Precision Cut, Discontinued Perm, Full Color"
        assert reconstruct_selection(label, catalog) == ["srv-cut", "srv-color"]
        assert unmatched_service_names(label, catalog) == ["Discontinued Perm"]

    def test_match_is_case_sensitive(self, catalog):
        assert reconstruct_selection("precision cut", catalog) == []

    def test_empty_label(self, catalog):
        assert reconstruct_selection("", catalog) == []
        assert unmatched_service_names("", catalog) == []

    def test_round_trips_with_aggregate(self, catalog):
        selection = ["srv-color", "srv-b"]
        label = aggregate_services(selection, catalog).service_names
        assert reconstruct_selection(label, catalog) == selection


class TestAppointmentDraft:

    def test_new_draft_from_slot(self):
        draft = AppointmentDraft.new(date(2025, 12, 10), "10:15 AM", staff_name="Emma Wilson", staff_id="st-1")
        assert draft.date == "2025-12-10"
        assert draft.time == "10:15 AM"
        assert draft.duration == 60
        assert draft.price is None
        assert draft.status == AppointmentStatus.CONFIRMED
        assert not draft.is_edit

    def test_toggle_recomputes_everything(self, catalog):
        draft = AppointmentDraft.new(date(2025, 12, 10), "9:00 AM")
        draft.toggle("srv-a", catalog)
        draft.toggle("srv-b", catalog)
        assert (draft.service_label, draft.duration, draft.price) == ("A, B", 90, 4500)

        draft.toggle("srv-a", catalog)
        assert (draft.service_label, draft.duration, draft.price) == ("B", 30, 1500)

        draft.toggle("srv-b", catalog)
        assert (draft.service_label, draft.duration, draft.price) == ("", 60, None)

    def test_to_appointment(self, catalog):
        draft = AppointmentDraft.new(date(2025, 12, 10), "9:00 AM", staff_name="Emma Wilson")
        draft.client_name = "Jennifer Adams"
        draft.toggle("srv-cut", catalog)

        appointment = draft.to_appointment(local_id=42)
        assert appointment.id == 42
        assert appointment.service == "Precision Cut"
        assert appointment.duration == 45
        assert appointment.price == 85
        assert appointment.backend_id is None

    def test_generates_local_id(self):
        draft = AppointmentDraft.new(date(2025, 12, 10), "9:00 AM", staff_name="Emma Wilson")
        draft.client_name = "Jennifer Adams"
        draft.price = 50
        assert draft.to_appointment().id > 0

    def test_missing_price_is_incomplete(self):
        draft = AppointmentDraft.new(date(2025, 12, 10), "9:00 AM", staff_name="Emma Wilson")
        draft.client_name = "Jennifer Adams"
        with pytest.raises(DraftIncompleteError, match="price"):
            draft.to_appointment()

    def test_missing_client_is_incomplete(self):
        draft = AppointmentDraft.new(date(2025, 12, 10), "9:00 AM", staff_name="Emma Wilson")
        draft.price = 10
        with pytest.raises(DraftIncompleteError, match="client_name"):
            draft.to_appointment()

    def test_invalid_time_fails_validation(self):
        draft = AppointmentDraft.new(date(2025, 12, 10), "09:00 AM", staff_name="Emma Wilson")
        draft.client_name = "Jennifer Adams"
        draft.price = 10
        with pytest.raises(ValidationError):
            draft.to_appointment()

    def test_edit_draft_keeps_stored_values(self, make_appointment, catalog):
        appointment = make_appointment(
            id=7, backend_id="apt-7", service="Full Color, Old Service", duration=150, price=200
        )
        draft = AppointmentDraft.from_appointment(appointment, catalog)
        assert draft.is_edit
        assert draft.service_ids == ["srv-color"]
        assert draft.duration == 150
        assert draft.price == 200
        assert draft.to_appointment().id == 7
        assert draft.to_appointment().backend_id == "apt-7"
