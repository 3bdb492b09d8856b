"""
Contact Resolver
----------------
Find-or-create the contact a new property should link to, so the caller
never needs a second round trip to supply a contact id.

Two policies:
  • best-effort (default): a failed lookup reads as "no match" and a failed
    create leaves the property unlinked; both are logged.
  • strict: any lookup/create failure raises ContactResolutionError and the
    property write is never attempted.
"""

from __future__ import annotations

from typing import Optional

from crm.airtable_client import RecordStore
from crm.airtable_schema import ContactType, PreferredContactMethod, Temperature, contacts_field_map
from crm.errors import ContactResolutionError, CrmError
from crm.models import Contact
from crm.runtime import get_logger

logger = get_logger("resolver")

CONTACT_FIELDS = contacts_field_map()


def new_contact(
    name: str,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    contact_type: Optional[str] = None,
) -> Contact:
    """The contact written when no existing one matches ``name``."""
    return Contact(
        name=name,
        email=email or None,
        phone=phone or None,
        contact_type=contact_type or ContactType.SELLER.value,
        temperature=Temperature.WARM.value,
        preferred_contact_method=(
            PreferredContactMethod.EMAIL.value if email else PreferredContactMethod.PHONE.value
        ),
    )


class ContactResolver:
    def __init__(self, contacts: RecordStore, *, strict: bool = False):
        self.contacts = contacts
        self.strict = strict

    def lookup(self, name: str) -> Optional[str]:
        """Id of the first contact named exactly ``name`` (Airtable's order), else None."""
        try:
            matches = self.contacts.find_by(CONTACT_FIELDS["NAME"], name)
        except CrmError as exc:
            if self.strict:
                raise ContactResolutionError(
                    f"Failed to look up contact '{name}'", body=exc.body, resource="contacts"
                ) from exc
            # indistinguishable from "no match" in best-effort mode
            logger.warning("⚠️ Contact lookup for '%s' failed, treating as no match: %s", name, exc)
            return None
        if matches:
            return matches[0].get("id")
        return None

    def create(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        contact_type: Optional[str] = None,
    ) -> Optional[str]:
        contact = new_contact(name, email, phone, contact_type)
        try:
            record = self.contacts.create_one(contact.to_fields(), fallback="Failed to create contact")
        except CrmError as exc:
            if self.strict:
                raise ContactResolutionError(exc.message, body=exc.body, resource="contacts") from exc
            logger.warning("⚠️ Contact create for '%s' failed, property will be unlinked: %s", name, exc)
            return None
        logger.info("👤 Created contact %s for '%s'", record.get("id"), name)
        return record.get("id")

    def resolve(
        self,
        name: Optional[str],
        email: Optional[str] = None,
        phone: Optional[str] = None,
        contact_type: Optional[str] = None,
    ) -> Optional[str]:
        """Contact id to link, or None when no name was given (or best-effort linking failed)."""
        if not name:
            return None
        existing = self.lookup(name)
        if existing:
            logger.debug("Reusing contact %s for '%s'", existing, name)
            return existing
        return self.create(name, email, phone, contact_type)
