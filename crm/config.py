from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from crm.airtable_schema import ACTIVITIES_TABLE, CONTACTS_TABLE, PROPERTIES_TABLE

# -----------------------------
# .env Loader
# -----------------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
ENV_PATH = os.path.join(BASE_DIR, "..", ".env")
load_dotenv(dotenv_path=ENV_PATH, override=False)


# -----------------------------
# Env helpers
# -----------------------------
def env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return str(v).strip().lower() in ("1", "true", "yes", "on")


def env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


def env_float(key: str, default: float) -> float:
    try:
        return float(os.getenv(key, default))
    except (TypeError, ValueError):
        return default


def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(key)
    return v if (v and str(v).strip() != "") else default


def _first_env(*names: str) -> Optional[str]:
    for n in names:
        v = env_str(n)
        if v:
            return v
    return None


def mask_secret(value: Optional[str]) -> str:
    """Mask sensitive values (tokens, keys) for logs and diagnostics."""
    if not value:
        return "<missing>"
    trimmed = value.strip()
    if len(trimmed) <= 4:
        return "*" * len(trimmed)
    if len(trimmed) <= 8:
        return f"{trimmed[:2]}...{trimmed[-2:]}"
    return f"{trimmed[:4]}...{trimmed[-4:]}"


# -----------------------------
# Settings Objects
# -----------------------------
@dataclass(frozen=True)
class AirtableSettings:
    """
    Connection settings for the Airtable base backing the CRM.

    Built once (usually via ``from_env``) and handed to the gateway at
    construction time; nothing downstream reads the environment mid-call.
    """

    base_id: Optional[str] = None
    token: Optional[str] = None
    public_base_id: Optional[str] = None
    properties_table: str = "Properties"
    contacts_table: str = "Contacts"
    activities_table: str = "Activities"
    force_in_memory: bool = False
    strict_contact_link: bool = False
    timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "AirtableSettings":
        base_id = env_str("AIRTABLE_BASE_ID")
        return cls(
            base_id=base_id,
            token=_first_env("AIRTABLE_PERSONAL_ACCESS_TOKEN", "AIRTABLE_API_KEY"),
            public_base_id=_first_env("NEXT_PUBLIC_AIRTABLE_BASE_ID", "PUBLIC_AIRTABLE_BASE_ID") or base_id,
            properties_table=PROPERTIES_TABLE.name(),
            contacts_table=CONTACTS_TABLE.name(),
            activities_table=ACTIVITIES_TABLE.name(),
            force_in_memory=env_bool("CRM_FORCE_IN_MEMORY"),
            strict_contact_link=env_bool("CRM_STRICT_CONTACT_LINK"),
            timeout=env_float("AIRTABLE_TIMEOUT_SEC", 30.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_id and self.token)

    def masked(self) -> Dict[str, Any]:
        return {
            "base_id": self.base_id or "<missing>",
            "token": mask_secret(self.token),
            "tables": [self.properties_table, self.contacts_table, self.activities_table],
            "configured": self.configured,
            "in_memory": self.force_in_memory,
            "strict_contact_link": self.strict_contact_link,
        }


@dataclass(frozen=True)
class ClientSettings:
    """Where the CRM client finds the gateway."""

    api_url: str = "http://localhost:8000"
    timeout: float = 15.0

    @classmethod
    def from_env(cls) -> "ClientSettings":
        return cls(
            api_url=(env_str("CRM_API_URL", "http://localhost:8000") or "").rstrip("/"),
            timeout=env_float("CRM_API_TIMEOUT_SEC", 15.0),
        )


@lru_cache(maxsize=1)
def settings() -> AirtableSettings:
    return AirtableSettings.from_env()
