"""Airtable table connector; the in-memory table is used only when forced (local runs, tests)."""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pyairtable import Api as _Api

from crm.config import AirtableSettings
from crm.errors import UpstreamUnavailable
from crm.runtime import get_logger, iso_now

logger = get_logger(__name__)

AIRTABLE_NOT_CONFIGURED = "Airtable is not configured"

_FORMULA_EQ = re.compile(r"\{([^}]+)\}\s*=\s*(['\"])((?:\\.|(?!\2).)*)\2")


class InMemoryTable:
    """Minimal Airtable drop-in replacement used for local runs and tests."""

    def __init__(self, name: str):
        self.name = name
        self._records: Dict[str, Dict[str, Any]] = {}
        self._sequence = itertools.count(1)

    def create(self, fields: Dict[str, Any], typecast: bool = False):
        record_id = f"rec{self.name[:3].upper()}{next(self._sequence):05d}"
        record = {"id": record_id, "createdTime": iso_now(), "fields": dict(fields)}
        self._records[record_id] = record
        return record

    def batch_create(self, records: Iterable[Dict[str, Any]], typecast: bool = False):
        return [self.create(fields) for fields in records]

    def update(self, record_id: str, fields: Dict[str, Any], replace: bool = False, typecast: bool = False):
        if record_id not in self._records:
            raise KeyError(f"Unknown record id {record_id} in {self.name}")
        if replace:
            self._records[record_id]["fields"] = dict(fields)
        else:
            self._records[record_id]["fields"].update(fields)
        return self._records[record_id]

    def batch_update(self, records: Iterable[Dict[str, Any]], replace: bool = False, typecast: bool = False):
        return [self.update(r["id"], r.get("fields", {}), replace=replace) for r in records]

    def get(self, record_id: str):
        return self._records.get(record_id)

    def all(self, **kwargs):
        records = list(self._records.values())
        formula = kwargs.get("formula")
        max_records = kwargs.get("max_records")
        if formula:
            records = [rec for rec in records if _formula_match(rec, str(formula))]
        if max_records is not None:
            records = records[: int(max_records)]
        return records


def _formula_match(record: Dict[str, Any], formula: str) -> bool:
    matches = _FORMULA_EQ.findall(formula)
    if not matches:
        return False
    fields = record.get("fields", {})
    for field_name, _quote, expected in matches:
        expected = re.sub(r"\\(.)", r"\1", expected)
        if str(fields.get(field_name)) != expected:
            return False
    return True


@dataclass
class TableHandle:
    table: Any
    in_memory: bool
    base_id: Optional[str]
    table_name: str


# ============================================================
# CONNECTOR
# ============================================================


class DataConnector:
    """Lazy pyairtable connector; one table handle per CRM table."""

    def __init__(self, settings: AirtableSettings) -> None:
        self.settings = settings
        self._api = None
        self._tables: Dict[Tuple[str, str], TableHandle] = {}

    def _get_api(self):
        if self._api is None:
            # retries are the caller's decision, never pyairtable's
            self._api = _Api(
                self.settings.token,
                timeout=(self.settings.timeout, self.settings.timeout),
                retry_strategy=None,
            )
        return self._api

    def _table(self, table_name: str) -> TableHandle:
        base = self.settings.base_id
        key = (base or "memory", table_name)
        if key in self._tables:
            return self._tables[key]

        if self.settings.force_in_memory:
            handle = TableHandle(InMemoryTable(table_name), True, base, table_name)
        elif self.settings.configured:
            handle = TableHandle(self._get_api().table(base, table_name), False, base, table_name)
        else:
            logger.error(
                "❌ Airtable not configured (base=%s, token=%s); cannot open %s",
                bool(self.settings.base_id),
                bool(self.settings.token),
                table_name,
            )
            raise UpstreamUnavailable(AIRTABLE_NOT_CONFIGURED, resource=table_name)

        self._tables[key] = handle
        return handle

    def properties(self) -> TableHandle:
        return self._table(self.settings.properties_table)

    def contacts(self) -> TableHandle:
        return self._table(self.settings.contacts_table)

    def activities(self) -> TableHandle:
        return self._table(self.settings.activities_table)

    def handles(self) -> List[TableHandle]:
        return [self.properties(), self.contacts(), self.activities()]
