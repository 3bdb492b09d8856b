from __future__ import annotations

"""
Central Airtable schema definitions and helpers.

This module keeps the canonical field names for the CRM tables together so
business logic can import lightweight helpers instead of hard-coding strings.
Environment variables can still override individual field names (to align
with custom Airtable copies), but the defaults here should always reflect the
live base.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple


# ---------------------------------------------------------------------------
# Core data containers
# ---------------------------------------------------------------------------


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    v = value.strip()
    return v if v else None


@dataclass(frozen=True)
class FieldDefinition:
    """
    Represents an Airtable column.

    Args:
        default: Canonical field name in Airtable.
        env_vars: Ordered list of env vars that can override the field name
                  (first non-empty wins).
    """

    default: str
    env_vars: Tuple[str, ...] = field(default_factory=tuple)

    def resolve(self) -> str:
        """Return the active field name (env override or default)."""
        for env in self.env_vars:
            override = _clean(os.getenv(env))
            if override:
                return override
        return self.default


@dataclass(frozen=True)
class TableDefinition:
    """
    Airtable table metadata with helpers to resolve field names.

    Args:
        default: Human-readable table name in Airtable.
        env_vars: Env vars that can rename the table.
        fields: Mapping of logical keys → FieldDefinition.
    """

    default: str
    env_vars: Tuple[str, ...] = field(default_factory=tuple)
    fields: Dict[str, FieldDefinition] = field(default_factory=dict)

    def name(self) -> str:
        for env in self.env_vars:
            override = _clean(os.getenv(env))
            if override:
                return override
        return self.default

    def field_names(self) -> Dict[str, str]:
        return {key: f.resolve() for key, f in self.fields.items()}


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class PropertyType(str, Enum):
    SINGLE_FAMILY = "Single Family"
    DUPLEX = "Duplex"
    TRIPLEX = "Triplex"
    APARTMENT = "Apartment"
    COMMERCIAL = "Commercial"


class DealStage(str, Enum):
    NEW_LEAD = "New Lead"
    CONTACTED = "Contacted"
    UNDER_REVIEW = "Under Review"
    ANALYZING = "Analyzing"
    NEGOTIATING = "Negotiating"
    OFFER_MADE = "Offer Made"
    UNDER_CONTRACT = "Under Contract"
    CLOSED = "Closed"
    DEAD = "Dead"


# Stages that no longer count as an active deal
INACTIVE_DEAL_STAGES = frozenset({DealStage.CLOSED.value, DealStage.DEAD.value})


class ContactType(str, Enum):
    SELLER = "Seller"
    BUYER = "Buyer"
    AGENT = "Agent"
    WHOLESALER = "Wholesaler"
    OTHER = "Other"


class Temperature(str, Enum):
    HOT = "Hot"
    WARM = "Warm"
    COLD = "Cold"


class PreferredContactMethod(str, Enum):
    EMAIL = "Email"
    PHONE = "Phone"


class ActivityType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    TEXT = "Text"
    MEETING = "Meeting"
    SITE_VISIT = "Site Visit"
    OFFER = "Offer"
    OTHER = "Other"


class ActivityStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

PROPERTIES_TABLE = TableDefinition(
    default="Properties",
    env_vars=("PROPERTIES_TABLE",),
    fields={
        "ADDRESS": FieldDefinition("Address", ("PROPERTY_ADDRESS_FIELD",)),
        "ASKING_PRICE": FieldDefinition("Asking Price", ("PROPERTY_ASKING_PRICE_FIELD",)),
        "PROPERTY_TYPE": FieldDefinition("Property Type", ("PROPERTY_TYPE_FIELD",)),
        "DEAL_STAGE": FieldDefinition("Deal Stage", ("PROPERTY_DEAL_STAGE_FIELD",)),
        "ARV_ESTIMATE": FieldDefinition("ARV Estimate", ("PROPERTY_ARV_FIELD",)),
        "REPAIR_ESTIMATE": FieldDefinition("Repair Estimate", ("PROPERTY_REPAIR_FIELD",)),
        "NOTES": FieldDefinition("Notes"),
        "CONTACT": FieldDefinition("Contact", ("PROPERTY_CONTACT_LINK_FIELD",)),
    },
)


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

CONTACTS_TABLE = TableDefinition(
    default="Contacts",
    env_vars=("CONTACTS_TABLE",),
    fields={
        "NAME": FieldDefinition("Name", ("CONTACT_NAME_FIELD",)),
        "EMAIL": FieldDefinition("Email", ("CONTACT_EMAIL_FIELD",)),
        "PHONE": FieldDefinition("Phone Number", ("CONTACT_PHONE_FIELD",)),
        "CONTACT_TYPE": FieldDefinition("Contact Type", ("CONTACT_TYPE_FIELD",)),
        "TEMPERATURE": FieldDefinition("Temperature", ("CONTACT_TEMPERATURE_FIELD",)),
        "PREFERRED_METHOD": FieldDefinition("Preferred Contact Method"),
        "LAST_CONTACT_DATE": FieldDefinition("Last Contact Date"),
        "NEXT_FOLLOW_UP_DATE": FieldDefinition("Next Follow-up Date"),
    },
)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------

ACTIVITIES_TABLE = TableDefinition(
    default="Activities",
    env_vars=("ACTIVITIES_TABLE",),
    fields={
        "NEXT_ACTION": FieldDefinition("Next Action"),
        "ACTIVITY_TYPE": FieldDefinition("Activity Type"),
        "DATE": FieldDefinition("Date", ("ACTIVITY_DATE_FIELD",)),
        "NOTES": FieldDefinition("Notes"),
        "FOLLOW_UP_REQUIRED": FieldDefinition("Follow-up Required"),
        "STATUS": FieldDefinition("Status", ("ACTIVITY_STATUS_FIELD",)),
        "CONTACT": FieldDefinition("Contact"),
        "PROPERTY": FieldDefinition("Property"),
        # lookup columns (read-only)
        "CONTACT_NAME": FieldDefinition("Name (from Contact)"),
        "PROPERTY_ADDRESS": FieldDefinition("Address (from Property)"),
    },
)


def properties_field_map() -> Dict[str, str]:
    return PROPERTIES_TABLE.field_names()


def contacts_field_map() -> Dict[str, str]:
    return CONTACTS_TABLE.field_names()


def activities_field_map() -> Dict[str, str]:
    return ACTIVITIES_TABLE.field_names()
