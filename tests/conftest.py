import json
import os
import sys

# Ensure project root is in sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import requests

from crm.airtable_client import RecordStore
from crm.config import AirtableSettings, settings
from crm.datastore import DataConnector, InMemoryTable
from crm.gateway import RecordGateway, get_gateway


@pytest.fixture(autouse=True)
def _in_memory_env():
    for key in [
        "AIRTABLE_API_KEY",
        "AIRTABLE_PERSONAL_ACCESS_TOKEN",
        "AIRTABLE_BASE_ID",
        "NEXT_PUBLIC_AIRTABLE_BASE_ID",
        "PUBLIC_AIRTABLE_BASE_ID",
        "CRM_STRICT_CONTACT_LINK",
    ]:
        os.environ.pop(key, None)
    os.environ["CRM_FORCE_IN_MEMORY"] = "1"
    settings.cache_clear()
    get_gateway.cache_clear()
    yield
    settings.cache_clear()
    get_gateway.cache_clear()


def http_error(status, body):
    """requests.HTTPError carrying an Airtable-style JSON body."""
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
    resp.headers["Content-Type"] = "application/json"
    return requests.HTTPError(f"{status} Client Error", response=resp)


class StubTable:
    """Airtable table double: records calls, optionally fails on demand."""

    def __init__(self, rows=None, fail_all=None, fail_create=None, fail_update=None):
        self._rows = list(rows or [])
        self.fail_all = fail_all
        self.fail_create = fail_create
        self.fail_update = fail_update
        self.all_calls = []
        self.created = []
        self.updated = []

    def all(self, **kwargs):
        self.all_calls.append(kwargs)
        if self.fail_all is not None:
            raise self.fail_all
        return list(self._rows)

    def batch_create(self, records, typecast=False):
        if self.fail_create is not None:
            raise self.fail_create
        out = []
        for fields in records:
            self.created.append(fields)
            rec = {"id": f"recNEW{len(self.created):03d}", "createdTime": "2024-01-01T00:00:00Z", "fields": fields}
            self._rows.append(rec)
            out.append(rec)
        return out

    def batch_update(self, records, replace=False, typecast=False):
        if self.fail_update is not None:
            raise self.fail_update
        out = []
        for rec in records:
            self.updated.append((rec["id"], rec["fields"]))
            out.append({"id": rec["id"], "createdTime": "2024-01-01T00:00:00Z", "fields": rec["fields"]})
        return out


class StubConnector:
    """Hands the gateway fixed tables instead of building them from settings."""

    def __init__(self, properties=None, contacts=None, activities=None):
        self._properties = properties if properties is not None else StubTable()
        self._contacts = contacts if contacts is not None else StubTable()
        self._activities = activities if activities is not None else StubTable()

    def properties(self):
        return self._properties

    def contacts(self):
        return self._contacts

    def activities(self):
        return self._activities


@pytest.fixture
def memory_settings():
    return AirtableSettings(force_in_memory=True)


@pytest.fixture
def gateway(memory_settings):
    return RecordGateway(memory_settings, DataConnector(memory_settings))


@pytest.fixture
def contacts_store():
    return RecordStore(InMemoryTable("Contacts"), "contacts")
