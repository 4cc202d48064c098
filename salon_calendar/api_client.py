"""REST client for the salon backend.

Responses come wrapped in an envelope that is not always the same shape:
- {"success": true, "data": {...}}               -> data
- {"success": true, "year": 2025, "data": [...]} -> everything but success/message
- {"success": true, "total": 3, ...}             -> everything but success/message
- HTTP 204                                        -> None (nothing for the period)

Appointment, staff, service and customer calls return raw records; see
salon_calendar.adapter for conversion. Revenue calls return models.
"""
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from salon_calendar import config
from salon_calendar.errors import ApiError, AuthenticationRequired
from salon_calendar.http_client import create_http_session
from salon_calendar.logging_config import get_logger, request_context
from salon_calendar.models import (
    RevenueByCategoryItem,
    RevenueByStaffItem,
    RevenueMetrics,
    RevenueTrendItem,
)
from salon_calendar.timemodel import format_date_to_string

logger = get_logger(__name__)


def unwrap_envelope(body: Any) -> Any:
    """
    Normalize a successful response body to its payload.

    Raises:
        ApiError: If the body reports success: false
    """
    if not isinstance(body, dict):
        return body

    if body.get("success") is False:
        raise ApiError(body.get("message") or "Request failed")

    if body.get("success"):
        extra_keys = set(body) - {"success", "data", "message"}
        if "data" not in body and extra_keys:
            return {k: v for k, v in body.items() if k not in ("success", "message")}
        if body.get("data") and extra_keys:
            return {k: v for k, v in body.items() if k not in ("success", "message")}

    return body.get("data")


class SalonApiClient:
    """
    Authenticated access to the salon REST API.

    Every call needs a token; without one AuthenticationRequired is raised
    before any request is sent.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        token: Optional[str] = config.API_TOKEN,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or create_http_session(token=token)

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Send a request and return the unwrapped payload.

        Raises:
            AuthenticationRequired: If no token is configured
            ApiError: On non-2xx responses, network failures or success: false
        """
        if not self.token:
            raise AuthenticationRequired()

        url = f"{self.base_url}{endpoint}"
        kwargs = {}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = body
        send = getattr(self.session, method.lower())

        # request_id rides on the X-Request-ID header and on every log event below
        with request_context() as request_id:
            kwargs["headers"] = {"X-Request-ID": request_id}
            try:
                response = send(url, **kwargs)
            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                logger.error("api_request_failed", method=method, endpoint=endpoint, status=status)
                raise ApiError(f"Request failed with status {status}", status) from e
            except requests.exceptions.RequestException as e:
                logger.error("api_request_failed", method=method, endpoint=endpoint, error=str(e))
                raise ApiError(str(e) or "Network error. Please check your connection.") from e

            if response.status_code == 204:
                logger.info("api_no_content", endpoint=endpoint)
                return None

            try:
                data = response.json()
            except ValueError as e:
                raise ApiError(
                    f"Invalid JSON in response (status {response.status_code})",
                    response.status_code
                ) from e

            if not response.ok:
                message = None
                if isinstance(data, dict):
                    message = data.get("message")
                logger.warning(
                    "api_request_rejected",
                    method=method,
                    endpoint=endpoint,
                    status=response.status_code
                )
                raise ApiError(
                    message or f"Request failed with status {response.status_code}",
                    response.status_code
                )

            return unwrap_envelope(data)

    # Appointments

    def list_appointments(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        params = {}
        if start is not None:
            params["startDate"] = format_date_to_string(start)
        if end is not None:
            params["endDate"] = format_date_to_string(end)
        return self._request("GET", "/appointments", params=params) or []

    def create_appointment(self, payload: Dict[str, Any]) -> Any:
        return self._request("POST", "/appointments", body=payload)

    def update_appointment(self, backend_id: str, payload: Dict[str, Any]) -> Any:
        return self._request("PUT", f"/appointments/{backend_id}", body=payload)

    def delete_appointment(self, backend_id: str) -> Any:
        return self._request("DELETE", f"/appointments/{backend_id}")

    # Catalog

    def list_staff(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/staff") or []

    def list_services(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/services") or []

    def list_customers(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/customers") or []

    # Revenue

    def revenue_metrics(
        self,
        year: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> Optional[RevenueMetrics]:
        """Totals for a year or a date range (None when the period has no data)."""
        params = {}
        if year:
            params["year"] = year
        if start_date:
            params["startDate"] = format_date_to_string(start_date)
        if end_date:
            params["endDate"] = format_date_to_string(end_date)
        data = self._request("GET", "/revenue/metrics", params=params)
        return RevenueMetrics.model_validate(data) if data else None

    def _year_params(self, year: Optional[int]) -> Dict[str, Any]:
        return {"year": year} if year else {}

    def revenue_by_staff(self, year: Optional[int] = None) -> List[RevenueByStaffItem]:
        data = self._request("GET", "/revenue/by-staff", params=self._year_params(year))
        return [RevenueByStaffItem.model_validate(item) for item in data or []]

    def revenue_by_category(self, year: Optional[int] = None) -> List[RevenueByCategoryItem]:
        data = self._request("GET", "/revenue/by-category", params=self._year_params(year))
        return [RevenueByCategoryItem.model_validate(item) for item in data or []]

    def revenue_trends(self, year: Optional[int] = None) -> List[RevenueTrendItem]:
        """Monthly trend rows; the backend sends {"year": ..., "data": [...]}."""
        data = self._request("GET", "/revenue/trends", params=self._year_params(year))
        if isinstance(data, dict):
            data = data.get("data")
        return [RevenueTrendItem.model_validate(item) for item in data or []]
