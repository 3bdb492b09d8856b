"""
CSV Ingest
----------
Turns an uploaded property sheet into flat rows keyed by its header line.

The split is literal: lines on "\\n", cells on ",". There is no quoting or
escaping, so a comma or newline inside a value shifts every cell after it.
The template columns (addresses, prices, types, contact details) are not
expected to contain commas.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List

from crm.errors import ValidationError

CSV_TEMPLATE_HEADERS = (
    "Address",
    "Asking Price",
    "Property Type",
    "ARV Estimate",
    "Repair Estimate",
    "Notes",
    "Contact Name",
    "Contact Email",
    "Contact Phone",
    "Contact Type",
)

# Header → PropertyForm wire key
CSV_COLUMN_FIELDS: Dict[str, str] = {
    "Address": "address",
    "Asking Price": "askingPrice",
    "Property Type": "propertyType",
    "Deal Stage": "dealStage",
    "ARV Estimate": "arvEstimate",
    "Repair Estimate": "repairEstimate",
    "Notes": "notes",
    "Contact Name": "contactName",
    "Contact Email": "contactEmail",
    "Contact Phone": "contactPhone",
    "Contact Type": "contactType",
}


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Rows of ``{header: value}``; missing trailing cells are "", extra cells dropped."""
    lines = text.split("\n")
    headers = [h.strip() for h in lines[0].split(",")]
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        values = [v.strip() for v in line.split(",")]
        rows.append({h: (values[i] if i < len(values) else "") for i, h in enumerate(headers)})
    return rows


def unknown_headers(headers: Iterable[str]) -> List[str]:
    return [h for h in headers if h not in CSV_COLUMN_FIELDS]


def row_to_payload(row: Dict[str, Any]) -> Dict[str, Any]:
    """Map one CSV row onto the property form keys; unknown columns are ignored."""
    payload: Dict[str, Any] = {}
    for header, value in row.items():
        key = CSV_COLUMN_FIELDS.get(str(header).strip())
        if key and value not in (None, ""):
            payload[key] = value
    return payload


def read_csv_file(path: str) -> List[Dict[str, str]]:
    if not path.lower().endswith(".csv"):
        raise ValidationError("Please select a valid CSV file")
    if not os.path.isfile(path):
        raise ValidationError(f"File not found: {path}")
    with open(path, "r", encoding="utf-8-sig") as fh:
        return parse_csv(fh.read())
