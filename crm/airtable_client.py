"""
Airtable Client
---------------
Thin wrapper around one pyairtable table that turns transport and HTTP
failures into the CRM error types. No retries: a single upstream failure
is surfaced immediately.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from pyairtable.formulas import match

from crm.errors import UpstreamRejected, UpstreamUnavailable, extract_error_message
from crm.runtime import get_logger

logger = get_logger("airtable_client")


def _error_body(exc: BaseException) -> Any:
    """Parse the JSON error body from an HTTP failure; fallback to plain text."""
    resp: Optional[requests.Response] = getattr(exc, "response", None)
    if resp is None:
        return None
    try:
        return resp.json()
    except ValueError:
        text = getattr(resp, "text", None)
        return text.strip() if text else None


class RecordStore:
    """One Airtable table, seen through list / find / create-one / update-one."""

    def __init__(self, table: Any, resource: str):
        self.table = getattr(table, "table", table)
        self.resource = resource

    def list(self) -> List[Dict[str, Any]]:
        """All records in the order Airtable returns them."""
        try:
            return list(self.table.all())
        except requests.RequestException as exc:
            body = _error_body(exc)
            logger.error("❌ list %s failed: %s", self.resource, exc)
            raise UpstreamUnavailable.for_resource(self.resource, body=body) from exc

    def find_by(self, field_name: str, value: str) -> List[Dict[str, Any]]:
        """Records whose ``field_name`` equals ``value`` per Airtable's formula semantics."""
        try:
            return list(self.table.all(formula=match({field_name: value})))
        except requests.RequestException as exc:
            body = _error_body(exc)
            logger.error("❌ lookup %s by %s failed: %s", self.resource, field_name, exc)
            raise UpstreamUnavailable.for_resource(self.resource, body=body) from exc

    def create_one(self, fields: Dict[str, Any], *, fallback: str) -> Dict[str, Any]:
        """POST ``{records: [{fields}]}`` and return the single created record."""
        try:
            created = self.table.batch_create([fields])
        except requests.RequestException as exc:
            raise self._rejected(exc, fallback) from exc
        if not created:
            raise UpstreamRejected(fallback, resource=self.resource)
        return created[0]

    def update_one(self, record_id: str, fields: Dict[str, Any], *, fallback: str) -> Dict[str, Any]:
        """PATCH ``{records: [{id, fields}]}`` and return the updated record."""
        try:
            updated = self.table.batch_update([{"id": record_id, "fields": fields}])
        except KeyError as exc:
            # in-memory tables signal unknown ids with KeyError
            raise UpstreamRejected(fallback, body=str(exc), resource=self.resource) from exc
        except requests.RequestException as exc:
            raise self._rejected(exc, fallback) from exc
        if not updated:
            raise UpstreamRejected(fallback, resource=self.resource)
        return updated[0]

    def _rejected(self, exc: requests.RequestException, fallback: str) -> UpstreamRejected:
        body = _error_body(exc)
        message = extract_error_message(body, fallback)
        logger.error("❌ write to %s rejected: %s", self.resource, message)
        return UpstreamRejected(message, body=body, resource=self.resource)
