"""
Typed CRM entities
------------------
Dataclasses for the three Airtable tables plus the mapping layer between
them and Airtable's label-keyed ``fields`` dicts. Business logic works on
these objects; only this module knows the wire labels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from crm.airtable_schema import (
    ActivityStatus,
    activities_field_map,
    contacts_field_map,
    properties_field_map,
)

PROPERTY_FIELDS = properties_field_map()
CONTACT_FIELDS = contacts_field_map()
ACTIVITY_FIELDS = activities_field_map()


# -----------------------------
# Helpers
# -----------------------------
def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _text(value: Any) -> Optional[str]:
    return None if _blank(value) else str(value)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or _blank(value):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).replace(",", "").replace("$", "").strip())
    except ValueError:
        return None


def _ids(value: Any) -> List[str]:
    if _blank(value):
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if not _blank(v)]
    return []


def _link(ids: List[str]) -> Optional[List[str]]:
    return list(ids) if ids else None


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Drop absent values; ``False`` and ``0`` are values and stay."""
    return {k: v for k, v in payload.items() if not _blank(v)}


# -----------------------------
# Entities
# -----------------------------
@dataclass
class Property:
    address: str = ""
    asking_price: Optional[float] = None
    property_type: Optional[str] = None
    deal_stage: Optional[str] = None
    arv_estimate: Optional[float] = None
    repair_estimate: Optional[float] = None
    notes: Optional[str] = None
    contact_ids: List[str] = field(default_factory=list)
    id: Optional[str] = None
    created_time: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Property":
        f = record.get("fields", {}) or {}
        return cls(
            address=str(f.get(PROPERTY_FIELDS["ADDRESS"]) or ""),
            asking_price=_number(f.get(PROPERTY_FIELDS["ASKING_PRICE"])),
            property_type=_text(f.get(PROPERTY_FIELDS["PROPERTY_TYPE"])),
            deal_stage=_text(f.get(PROPERTY_FIELDS["DEAL_STAGE"])),
            arv_estimate=_number(f.get(PROPERTY_FIELDS["ARV_ESTIMATE"])),
            repair_estimate=_number(f.get(PROPERTY_FIELDS["REPAIR_ESTIMATE"])),
            notes=_text(f.get(PROPERTY_FIELDS["NOTES"])),
            contact_ids=_ids(f.get(PROPERTY_FIELDS["CONTACT"])),
            id=record.get("id"),
            created_time=record.get("createdTime"),
        )

    def to_fields(self) -> Dict[str, Any]:
        payload = _compact({
            PROPERTY_FIELDS["ADDRESS"]: self.address,
            PROPERTY_FIELDS["ASKING_PRICE"]: self.asking_price,
            PROPERTY_FIELDS["ARV_ESTIMATE"]: self.arv_estimate,
            PROPERTY_FIELDS["REPAIR_ESTIMATE"]: self.repair_estimate,
            PROPERTY_FIELDS["NOTES"]: self.notes,
            PROPERTY_FIELDS["CONTACT"]: _link(self.contact_ids),
        })
        # single-selects are always sent
        if self.property_type is not None:
            payload[PROPERTY_FIELDS["PROPERTY_TYPE"]] = self.property_type
        if self.deal_stage is not None:
            payload[PROPERTY_FIELDS["DEAL_STAGE"]] = self.deal_stage
        return payload


@dataclass
class Contact:
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_type: Optional[str] = None
    temperature: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    last_contact_date: Optional[str] = None
    next_follow_up_date: Optional[str] = None
    id: Optional[str] = None
    created_time: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Contact":
        f = record.get("fields", {}) or {}
        return cls(
            name=str(f.get(CONTACT_FIELDS["NAME"]) or ""),
            email=_text(f.get(CONTACT_FIELDS["EMAIL"])),
            phone=_text(f.get(CONTACT_FIELDS["PHONE"])),
            contact_type=_text(f.get(CONTACT_FIELDS["CONTACT_TYPE"])),
            temperature=_text(f.get(CONTACT_FIELDS["TEMPERATURE"])),
            preferred_contact_method=_text(f.get(CONTACT_FIELDS["PREFERRED_METHOD"])),
            last_contact_date=_text(f.get(CONTACT_FIELDS["LAST_CONTACT_DATE"])),
            next_follow_up_date=_text(f.get(CONTACT_FIELDS["NEXT_FOLLOW_UP_DATE"])),
            id=record.get("id"),
            created_time=record.get("createdTime"),
        )

    def to_fields(self) -> Dict[str, Any]:
        payload = _compact({
            CONTACT_FIELDS["NAME"]: self.name,
            CONTACT_FIELDS["EMAIL"]: self.email,
            CONTACT_FIELDS["PHONE"]: self.phone,
            CONTACT_FIELDS["LAST_CONTACT_DATE"]: self.last_contact_date,
            CONTACT_FIELDS["NEXT_FOLLOW_UP_DATE"]: self.next_follow_up_date,
        })
        for key, value in (
            ("CONTACT_TYPE", self.contact_type),
            ("TEMPERATURE", self.temperature),
            ("PREFERRED_METHOD", self.preferred_contact_method),
        ):
            if value is not None:
                payload[CONTACT_FIELDS[key]] = value
        return payload


@dataclass
class Activity:
    next_action: str = ""
    activity_type: Optional[str] = None
    date: Optional[str] = None
    notes: Optional[str] = None
    follow_up_required: bool = False
    status: Optional[str] = None
    contact_ids: List[str] = field(default_factory=list)
    property_ids: List[str] = field(default_factory=list)
    contact_names: List[str] = field(default_factory=list)
    property_addresses: List[str] = field(default_factory=list)
    id: Optional[str] = None
    created_time: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == ActivityStatus.COMPLETED.value

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Activity":
        f = record.get("fields", {}) or {}
        return cls(
            next_action=str(f.get(ACTIVITY_FIELDS["NEXT_ACTION"]) or ""),
            activity_type=_text(f.get(ACTIVITY_FIELDS["ACTIVITY_TYPE"])),
            date=_text(f.get(ACTIVITY_FIELDS["DATE"])),
            notes=_text(f.get(ACTIVITY_FIELDS["NOTES"])),
            follow_up_required=bool(f.get(ACTIVITY_FIELDS["FOLLOW_UP_REQUIRED"], False)),
            status=_text(f.get(ACTIVITY_FIELDS["STATUS"])),
            contact_ids=_ids(f.get(ACTIVITY_FIELDS["CONTACT"])),
            property_ids=_ids(f.get(ACTIVITY_FIELDS["PROPERTY"])),
            contact_names=_ids(f.get(ACTIVITY_FIELDS["CONTACT_NAME"])),
            property_addresses=_ids(f.get(ACTIVITY_FIELDS["PROPERTY_ADDRESS"])),
            id=record.get("id"),
            created_time=record.get("createdTime"),
        )

    def to_fields(self) -> Dict[str, Any]:
        payload = _compact({
            ACTIVITY_FIELDS["NEXT_ACTION"]: self.next_action,
            ACTIVITY_FIELDS["DATE"]: self.date,
            ACTIVITY_FIELDS["NOTES"]: self.notes,
            ACTIVITY_FIELDS["CONTACT"]: _link(self.contact_ids),
            ACTIVITY_FIELDS["PROPERTY"]: _link(self.property_ids),
        })
        if self.activity_type is not None:
            payload[ACTIVITY_FIELDS["ACTIVITY_TYPE"]] = self.activity_type
        payload[ACTIVITY_FIELDS["FOLLOW_UP_REQUIRED"]] = bool(self.follow_up_required)
        if self.status is not None:
            payload[ACTIVITY_FIELDS["STATUS"]] = self.status
        return payload


def completion_patch() -> Dict[str, Any]:
    """Fields written when an activity is marked done."""
    return {
        ACTIVITY_FIELDS["STATUS"]: ActivityStatus.COMPLETED.value,
        ACTIVITY_FIELDS["FOLLOW_UP_REQUIRED"]: False,
    }
