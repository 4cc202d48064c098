"""Tests for the salon REST client."""
from datetime import date
from unittest.mock import ANY, Mock

import pytest
import requests
from structlog.contextvars import get_contextvars

from salon_calendar.api_client import SalonApiClient, unwrap_envelope
from salon_calendar.errors import ApiError, AuthenticationRequired
from salon_calendar.models import RevenueMetrics


def _response(status_code=200, body=None, invalid_json=False):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if invalid_json:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def client(session):
    return SalonApiClient(base_url="http://salon.test/api/", token="tok", session=session)


class TestUnwrapEnvelope:

    def test_data_envelope(self):
        assert unwrap_envelope({"success": True, "data": [{"_id": "a"}]}) == [{"_id": "a"}]

    def test_extra_keys_without_data(self):
        body = {"success": True, "message": "ok", "total": 3, "items": []}
        assert unwrap_envelope(body) == {"total": 3, "items": []}

    def test_extra_keys_with_data(self):
        body = {"success": True, "year": 2025, "data": [{"month": "Jan"}]}
        assert unwrap_envelope(body) == {"year": 2025, "data": [{"month": "Jan"}]}

    def test_failure_raises(self):
        with pytest.raises(ApiError, match="Staff not found"):
            unwrap_envelope({"success": False, "message": "Staff not found"})

    def test_plain_bodies(self):
        assert unwrap_envelope([1, 2]) == [1, 2]
        assert unwrap_envelope({"data": {"x": 1}}) == {"x": 1}


class TestRequests:

    def test_requires_token(self, session):
        client = SalonApiClient(base_url="http://salon.test/api", token=None, session=session)
        with pytest.raises(AuthenticationRequired) as exc_info:
            client.list_staff()
        assert exc_info.value.status == 401
        session.get.assert_not_called()

    def test_list_appointments_sends_range(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": [{"_id": "apt-1"}]})

        records = client.list_appointments(date(2025, 12, 8), date(2025, 12, 14))

        assert records == [{"_id": "apt-1"}]
        session.get.assert_called_once_with(
            "http://salon.test/api/appointments",
            params={"startDate": "2025-12-08", "endDate": "2025-12-14"},
            headers=ANY,
        )

    def test_list_without_range(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": []})
        assert client.list_appointments() == []
        session.get.assert_called_once_with("http://salon.test/api/appointments", headers=ANY)

    def test_create_update_delete(self, client, session):
        session.post.return_value = _response(201, {"success": True, "data": {"_id": "apt-9"}})
        session.put.return_value = _response(200, {"success": True, "data": {"_id": "apt-9"}})
        session.delete.return_value = _response(204)

        assert client.create_appointment({"price": 10}) == {"_id": "apt-9"}
        client.update_appointment("apt-9", {"price": 12})
        assert client.delete_appointment("apt-9") is None

        session.post.assert_called_once_with("http://salon.test/api/appointments", json={"price": 10}, headers=ANY)
        session.put.assert_called_once_with("http://salon.test/api/appointments/apt-9", json={"price": 12}, headers=ANY)
        session.delete.assert_called_once_with("http://salon.test/api/appointments/apt-9", headers=ANY)

    def test_error_status_uses_backend_message(self, client, session):
        session.post.return_value = _response(409, {"success": False, "message": "Slot already booked"})
        with pytest.raises(ApiError) as exc_info:
            client.create_appointment({})
        assert exc_info.value.message == "Slot already booked"
        assert exc_info.value.status == 409

    def test_error_status_without_message(self, client, session):
        session.get.return_value = _response(500, {})
        with pytest.raises(ApiError, match="Request failed with status 500"):
            client.list_services()

    def test_invalid_json(self, client, session):
        session.get.return_value = _response(502, invalid_json=True)
        with pytest.raises(ApiError) as exc_info:
            client.list_customers()
        assert exc_info.value.status == 502

    def test_network_failure(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("Connection refused")
        with pytest.raises(ApiError, match="Connection refused"):
            client.list_staff()

    def test_retries_exhausted_on_5xx(self, client, session):
        failed = _response(503)
        session.get.side_effect = requests.exceptions.HTTPError("503", response=failed)
        with pytest.raises(ApiError) as exc_info:
            client.list_staff()
        assert exc_info.value.status == 503

    def test_empty_catalog(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": None})
        assert client.list_staff() == []

    def test_request_id_header_is_bound_to_log_context(self, client, session):
        seen = {}

        def _get(url, **kwargs):
            seen["header"] = kwargs["headers"]["X-Request-ID"]
            seen["context"] = get_contextvars().get("request_id")
            return _response(body={"success": True, "data": []})

        session.get.side_effect = _get
        client.list_staff()

        assert seen["header"].startswith("req-")
        assert seen["context"] == seen["header"]
        assert "request_id" not in get_contextvars()

    def test_each_request_gets_its_own_id(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": []})
        client.list_staff()
        client.list_services()
        first, second = (call.kwargs["headers"]["X-Request-ID"] for call in session.get.call_args_list)
        assert first != second


class TestRevenue:

    def test_metrics(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": {
            "totalRevenue": 15400.5, "totalAppointments": 120,
            "avgTransaction": 128.3, "totalCustomers": 64,
        }})

        metrics = client.revenue_metrics(year=2025)

        assert isinstance(metrics, RevenueMetrics)
        assert metrics.total_revenue == 15400.5
        assert metrics.total_customers == 64
        session.get.assert_called_once_with(
            "http://salon.test/api/revenue/metrics", params={"year": 2025}, headers=ANY
        )

    def test_metrics_no_content(self, client, session):
        session.get.return_value = _response(204)
        assert client.revenue_metrics(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)) is None

    def test_by_staff_and_category(self, client, session):
        session.get.return_value = _response(body={"success": True, "data": [
            {"staffName": "Emma Wilson", "totalRevenue": 5000, "appointmentCount": 40},
        ]})
        rows = client.revenue_by_staff(2025)
        assert rows[0].staff_name == "Emma Wilson"
        assert rows[0].appointment_count == 40

        session.get.return_value = _response(body={"success": True, "data": [
            {"category": "Hair", "totalRevenue": 9000, "serviceCount": 12},
        ]})
        assert client.revenue_by_category()[0].service_count == 12

    def test_trends_unwraps_year_envelope(self, client, session):
        session.get.return_value = _response(body={"success": True, "year": 2025, "data": [
            {"month": "Jan", "revenue": 1200, "expenses": 300, "appointmentCount": 14},
            {"month": "Feb", "revenue": 900},
        ]})
        rows = client.revenue_trends(2025)
        assert [row.month for row in rows] == ["Jan", "Feb"]
        assert rows[1].appointment_count == 0
