"""
CRM Client
----------
What the data-entry and dashboard screens do against the gateway: load the
three collections, submit forms, mark activities done, push a CSV import.
Submissions come back as the inline banner (SubmitResult); transport
failures never leak detail beyond the generic network-error message.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from crm.aggregator import DashboardView, build_dashboard
from crm.config import ClientSettings
from crm.errors import NETWORK_ERROR_MESSAGE, CrmError, NetworkError, UpstreamUnavailable
from crm.forms import ActivityFormState, PropertyFormState
from crm.runtime import PerfTimer, gather, get_logger

logger = get_logger("client")

BULK_NETWORK_ERROR = "Network error occurred"


@dataclass
class SubmitResult:
    success: bool
    message: str


class CrmClient:
    def __init__(self, settings: Optional[ClientSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or ClientSettings.from_env()
        self.session = session or requests.Session()

    # ---------------- transport ----------------
    def _url(self, path: str) -> str:
        return f"{self.settings.api_url.rstrip('/')}{path}"

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Tuple[int, Any]:
        try:
            resp = self.session.request(method, self._url(path), json=payload, timeout=self.settings.timeout)
        except requests.RequestException as exc:
            logger.error("❌ %s %s failed: %s", method, path, exc)
            raise NetworkError() from exc
        try:
            body = resp.json()
        except ValueError:
            body = None
        return resp.status_code, body

    def _get_list(self, path: str, resource: str) -> List[Dict[str, Any]]:
        status, body = self._request("GET", path)
        if status >= 400 or not isinstance(body, list):
            message = body.get("error") if isinstance(body, dict) else None
            raise UpstreamUnavailable(message or f"Failed to fetch {resource}", body=body, resource=resource)
        return body

    def _submit(self, path: str, payload: Dict[str, Any], success_message: str, fallback: str) -> SubmitResult:
        try:
            status, body = self._request("POST", path, payload)
        except NetworkError:
            return SubmitResult(False, NETWORK_ERROR_MESSAGE)
        if 200 <= status < 300:
            return SubmitResult(True, success_message)
        error = body.get("error") if isinstance(body, dict) else None
        return SubmitResult(False, error or fallback)

    # ---------------- reads ----------------
    def list_properties(self) -> List[Dict[str, Any]]:
        return self._get_list("/api/properties", "properties")

    def list_contacts(self) -> List[Dict[str, Any]]:
        return self._get_list("/api/contacts", "contacts")

    def list_activities(self) -> List[Dict[str, Any]]:
        return self._get_list("/api/activities", "activities")

    def fetch_dashboard(self, now: Optional[datetime] = None) -> DashboardView:
        """
        Fire the three list calls together, wait for all, aggregate locally.

        A failure of any one fails the whole load; calling again is the retry.
        """
        with PerfTimer("dashboard fetch", logger):
            props, people, acts = gather(self.list_properties, self.list_contacts, self.list_activities)
        return build_dashboard(props, people, acts, now=now)

    # ---------------- writes ----------------
    def submit_property(self, state: PropertyFormState) -> SubmitResult:
        try:
            state.validate()
        except CrmError as exc:
            return SubmitResult(False, exc.message)
        result = self._submit(
            "/api/properties/create",
            state.to_payload(),
            "Property created successfully!",
            "Failed to create property",
        )
        if result.success:
            state.reset()
        return result

    def submit_activity(self, state: ActivityFormState) -> SubmitResult:
        try:
            state.validate()
        except CrmError as exc:
            return SubmitResult(False, exc.message)
        result = self._submit(
            "/api/activities/create",
            state.to_payload(),
            "Activity created successfully!",
            "Failed to create activity",
        )
        if result.success:
            state.reset()
        return result

    def complete_activity(self, activity_id: str) -> SubmitResult:
        return self._submit(
            "/api/activities/complete",
            {"activityId": activity_id},
            "Activity marked as completed",
            "Failed to complete activity",
        )

    def bulk_import(self, rows: List[Dict[str, str]]) -> Dict[str, Any]:
        """Send every parsed row in one call; no retry, no partial resubmit."""
        failed_all = {
            "success": False,
            "total": len(rows),
            "successful": 0,
            "failed": len(rows),
            "errors": [BULK_NETWORK_ERROR],
        }
        try:
            status, body = self._request("POST", "/api/properties/bulk-create", {"data": rows})
        except NetworkError:
            return failed_all
        if isinstance(body, dict) and "total" in body:
            return body
        if isinstance(body, dict) and body.get("error"):
            return {**failed_all, "errors": [str(body["error"])]}
        logger.error("❌ Unexpected bulk import response (HTTP %s): %r", status, body)
        return failed_all
