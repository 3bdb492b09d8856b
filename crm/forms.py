"""
Form payloads
-------------
Request bodies accepted by the gateway (pydantic, camelCase on the wire)
and the client-side form state the data-entry screens keep between
keystrokes. Required fields are checked at submission time only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields as dataclass_fields
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crm.airtable_schema import ActivityStatus, ActivityType, ContactType, DealStage, PropertyType
from crm.errors import ValidationError
from crm.models import Activity, Property

Blankable = Union[float, int, str, None]


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def combine_date_time(date: Optional[str], time: Optional[str]) -> Optional[str]:
    """Join the date and time inputs into the timestamp Airtable stores."""
    if date and time:
        return f"{date}T{time}:00.000Z"
    if date:
        return f"{date}T12:00:00.000Z"
    return None


# ─────────────────────────── Gateway request bodies ───────────────────────────
class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PropertyForm(_Payload):
    address: str = ""
    asking_price: Optional[float] = Field(default=None, alias="askingPrice")
    property_type: Optional[str] = Field(default=PropertyType.SINGLE_FAMILY.value, alias="propertyType")
    deal_stage: Optional[str] = Field(default=DealStage.NEW_LEAD.value, alias="dealStage")
    arv_estimate: Optional[float] = Field(default=None, alias="arvEstimate")
    repair_estimate: Optional[float] = Field(default=None, alias="repairEstimate")
    notes: Optional[str] = ""
    contact_name: Optional[str] = Field(default="", alias="contactName")
    contact_email: Optional[str] = Field(default="", alias="contactEmail")
    contact_phone: Optional[str] = Field(default="", alias="contactPhone")
    contact_type: Optional[str] = Field(default=ContactType.SELLER.value, alias="contactType")

    @field_validator("asking_price", "arv_estimate", "repair_estimate", mode="before")
    @classmethod
    def _blank_number(cls, value: Any) -> Any:
        # a blank input means "leave the field out", never zero
        if _blank(value):
            return None
        if isinstance(value, str):
            return value.replace(",", "").replace("$", "").strip()
        return value

    def to_property(self, contact_id: Optional[str] = None) -> Property:
        return Property(
            address=self.address,
            asking_price=self.asking_price,
            property_type=self.property_type,
            deal_stage=self.deal_stage,
            arv_estimate=self.arv_estimate,
            repair_estimate=self.repair_estimate,
            notes=self.notes or None,
            contact_ids=[contact_id] if contact_id else [],
        )


class ActivityForm(_Payload):
    next_action: str = Field(default="", alias="nextAction")
    activity_type: Optional[str] = Field(default=ActivityType.CALL.value, alias="activityType")
    date_time: Optional[str] = Field(default=None, alias="dateTime")
    notes: Optional[str] = ""
    followup_required: bool = Field(default=False, alias="followupRequired")
    contact_id: Optional[str] = Field(default="", alias="contactId")
    property_id: Optional[str] = Field(default="", alias="propertyId")

    def to_activity(self) -> Activity:
        return Activity(
            next_action=self.next_action,
            activity_type=self.activity_type,
            date=self.date_time or None,
            notes=self.notes or None,
            follow_up_required=self.followup_required,
            status=ActivityStatus.PENDING.value,
            contact_ids=[self.contact_id] if self.contact_id else [],
            property_ids=[self.property_id] if self.property_id else [],
        )


class CompleteActivityRequest(_Payload):
    activity_id: Optional[str] = Field(default=None, alias="activityId")

    def require_id(self) -> str:
        if _blank(self.activity_id):
            raise ValidationError("Activity ID is required")
        return str(self.activity_id).strip()


class BulkCreateRequest(_Payload):
    data: List[Dict[str, Any]] = Field(default_factory=list)


# ─────────────────────────── Client-side form state ───────────────────────────
@dataclass
class PropertyFormState:
    address: str = ""
    askingPrice: Blankable = ""
    propertyType: str = PropertyType.SINGLE_FAMILY.value
    dealStage: str = DealStage.NEW_LEAD.value
    arvEstimate: Blankable = ""
    repairEstimate: Blankable = ""
    notes: str = ""
    contactName: str = ""
    contactEmail: str = ""
    contactPhone: str = ""
    contactType: str = ContactType.SELLER.value

    def validate(self) -> None:
        if _blank(self.address):
            raise ValidationError("Address is required")

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

    def reset(self) -> None:
        for f in dataclass_fields(self):
            setattr(self, f.name, f.default)


@dataclass
class ActivityFormState:
    nextAction: str = ""
    activityType: str = ActivityType.CALL.value
    date: str = ""
    time: str = ""
    notes: str = ""
    followupRequired: bool = True
    contactId: str = ""
    propertyId: str = ""

    def validate(self) -> None:
        if _blank(self.nextAction):
            raise ValidationError("Next Action is required")

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["dateTime"] = combine_date_time(self.date, self.time)
        return payload

    def reset(self) -> None:
        for f in dataclass_fields(self):
            setattr(self, f.name, f.default)
