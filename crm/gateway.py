"""
Record Gateway
--------------
Stateless translation between the CRM's form payloads and Airtable's
record shape: list, create (with contact find-or-create for properties),
complete, and bulk property import.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PayloadError

from crm.aggregator import DashboardView, build_dashboard
from crm.airtable_client import RecordStore
from crm.config import AirtableSettings, settings
from crm.csv_ingest import row_to_payload, unknown_headers
from crm.datastore import DataConnector
from crm.errors import CrmError
from crm.forms import ActivityForm, CompleteActivityRequest, PropertyForm
from crm.models import completion_patch
from crm.resolver import ContactResolver
from crm.runtime import PerfTimer, gather, get_logger

logger = get_logger("gateway")

Records = List[Dict[str, Any]]


def _first_payload_error(exc: PayloadError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid row"
    err = errors[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg', 'invalid value')}" if loc else str(err.get("msg", "invalid value"))


class RecordGateway:
    def __init__(self, settings: AirtableSettings, connector: Optional[DataConnector] = None):
        self.settings = settings
        self.connector = connector or DataConnector(settings)
        self.properties = RecordStore(self.connector.properties(), "properties")
        self.contacts = RecordStore(self.connector.contacts(), "contacts")
        self.activities = RecordStore(self.connector.activities(), "activities")
        self.resolver = ContactResolver(self.contacts, strict=settings.strict_contact_link)

    # ---------------- reads ----------------
    def list_properties(self) -> Records:
        return self.properties.list()

    def list_contacts(self) -> Records:
        return self.contacts.list()

    def list_activities(self) -> Records:
        return self.activities.list()

    def snapshot(self) -> Tuple[Records, Records, Records]:
        """Fetch all three tables concurrently; any failure fails the whole snapshot."""
        with PerfTimer("dashboard snapshot", logger):
            props, people, acts = gather(self.list_properties, self.list_contacts, self.list_activities)
        return props, people, acts

    def dashboard(self, now: Optional[datetime] = None) -> DashboardView:
        props, people, acts = self.snapshot()
        return build_dashboard(props, people, acts, now=now)

    # ---------------- writes ----------------
    def create_property(self, form: PropertyForm) -> Dict[str, Any]:
        contact_id = self.resolver.resolve(
            form.contact_name,
            email=form.contact_email,
            phone=form.contact_phone,
            contact_type=form.contact_type,
        )
        fields = form.to_property(contact_id).to_fields()
        record = self.properties.create_one(fields, fallback="Failed to create property")
        logger.info("🏠 Created property %s (%s)", record.get("id"), form.address)
        return {"success": True, "property": record, "message": "Property created successfully"}

    def create_activity(self, form: ActivityForm) -> Dict[str, Any]:
        fields = form.to_activity().to_fields()
        record = self.activities.create_one(fields, fallback="Failed to create activity")
        logger.info("📝 Created activity %s (%s)", record.get("id"), form.next_action)
        return {"success": True, "activity": record, "message": "Activity created successfully"}

    def complete_activity(self, request: CompleteActivityRequest) -> Dict[str, Any]:
        activity_id = request.require_id()
        record = self.activities.update_one(activity_id, completion_patch(), fallback="Failed to complete activity")
        logger.info("✅ Activity %s marked as completed", activity_id)
        return {"success": True, "activity": record, "message": "Activity marked as completed"}

    def bulk_create_properties(self, rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        """Create one property per CSV row; row failures are collected, never fatal."""
        rows = list(rows)
        if rows:
            extra = unknown_headers(rows[0].keys())
            if extra:
                logger.warning("⚠️ Ignoring unknown CSV columns: %s", ", ".join(extra))

        successful = 0
        errors: List[str] = []
        for n, row in enumerate(rows, start=1):
            try:
                form = PropertyForm.model_validate(row_to_payload(row))
            except PayloadError as exc:
                errors.append(f"Row {n}: {_first_payload_error(exc)}")
                continue
            if not form.address.strip():
                errors.append(f"Row {n}: Address is required")
                continue
            try:
                self.create_property(form)
                successful += 1
            except CrmError as exc:
                errors.append(f"Row {n}: {exc.message}")

        failed = len(rows) - successful
        logger.info("📦 Bulk import: %s/%s created, %s failed", successful, len(rows), failed)
        return {
            "success": failed == 0,
            "total": len(rows),
            "successful": successful,
            "failed": failed,
            "errors": errors,
        }


@lru_cache(maxsize=1)
def get_gateway() -> RecordGateway:
    """Process-wide gateway built from the environment (FastAPI dependency)."""
    return RecordGateway(settings())
