import pytest
import requests
from pyairtable.formulas import match

from conftest import StubTable, http_error
from crm.airtable_client import RecordStore
from crm.config import AirtableSettings
from crm.datastore import DataConnector, InMemoryTable
from crm.errors import UpstreamRejected, UpstreamUnavailable, extract_error_message


def test_in_memory_formula_lookup_handles_quotes():
    table = InMemoryTable("Contacts")
    table.create({"Name": "Pat O'Brien"})
    table.create({"Name": "Pat"})

    found = table.all(formula=match({"Name": "Pat O'Brien"}))

    assert [r["fields"]["Name"] for r in found] == ["Pat O'Brien"]


def test_in_memory_update_unknown_id_raises_key_error():
    with pytest.raises(KeyError):
        InMemoryTable("Activities").update("recNOPE", {"Status": "Completed"})


def test_connector_refuses_unconfigured_store():
    connector = DataConnector(AirtableSettings(base_id="appX"))
    with pytest.raises(UpstreamUnavailable) as excinfo:
        connector.properties()
    assert excinfo.value.message == "Airtable is not configured"
    assert excinfo.value.resource == "Properties"


def test_connector_forced_memory_reuses_handles():
    connector = DataConnector(AirtableSettings(force_in_memory=True))
    handle = connector.properties()
    assert handle.in_memory is True
    assert handle is connector.properties()
    assert [h.table_name for h in connector.handles()] == ["Properties", "Contacts", "Activities"]


def test_connector_uses_pyairtable_when_configured():
    connector = DataConnector(AirtableSettings(base_id="appX", token="patX"))
    handle = connector.contacts()
    assert handle.in_memory is False
    assert handle.table.name == "Contacts"


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"error": {"type": "INVALID_REQUEST", "message": "Bad field"}}, "Bad field"),
        ({"error": "NOT_FOUND"}, "NOT_FOUND"),
        ({"error": {"type": "X"}}, "fallback"),
        ("plain text", "fallback"),
        (None, "fallback"),
    ],
)
def test_extract_error_message(body, expected):
    assert extract_error_message(body, "fallback") == expected


def test_update_rejection_carries_body():
    table = StubTable(fail_update=http_error(404, {"error": "NOT_FOUND"}))
    store = RecordStore(table, "activities")

    with pytest.raises(UpstreamRejected) as excinfo:
        store.update_one("recA", {"Status": "Completed"}, fallback="Failed to complete activity")
    assert excinfo.value.message == "NOT_FOUND"
    assert excinfo.value.body == {"error": "NOT_FOUND"}


def test_empty_create_response_uses_fallback():
    class EmptyTable(StubTable):
        def batch_create(self, records, typecast=False):
            return []

    with pytest.raises(UpstreamRejected) as excinfo:
        RecordStore(EmptyTable(), "properties").create_one({"Address": "x"}, fallback="Failed to create property")
    assert excinfo.value.message == "Failed to create property"


def test_transport_error_has_no_body():
    store = RecordStore(StubTable(fail_all=requests.ConnectionError("down")), "activities")
    with pytest.raises(UpstreamUnavailable) as excinfo:
        store.list()
    assert excinfo.value.body is None
    assert excinfo.value.message == "Failed to fetch activities"


def test_non_json_rejection_body_falls_back_to_generic_message():
    resp = requests.Response()
    resp.status_code = 502
    resp._content = b"<html>Bad Gateway</html>"
    table = StubTable(fail_create=requests.HTTPError("502 Server Error", response=resp))

    with pytest.raises(UpstreamRejected) as excinfo:
        RecordStore(table, "properties").create_one({"Address": "x"}, fallback="Failed to create property")
    assert excinfo.value.message == "Failed to create property"
    assert excinfo.value.body == "<html>Bad Gateway</html>"
