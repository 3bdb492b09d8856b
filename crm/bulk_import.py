"""
Bulk CSV import (command line)
------------------------------
Reads a property sheet, previews the first rows, and sends every row to the
gateway's bulk endpoint in one call.

    python -m crm.bulk_import properties.csv
    python -m crm.bulk_import properties.csv --dry-run
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Dict, List, Optional, Sequence

from crm.client import CrmClient
from crm.config import ClientSettings
from crm.csv_ingest import CSV_TEMPLATE_HEADERS, read_csv_file, unknown_headers
from crm.errors import CrmError
from crm.runtime import get_logger

logger = get_logger("bulk_import")

PREVIEW_ROWS = 5


def preview(rows: List[Dict[str, str]], limit: int = PREVIEW_ROWS) -> str:
    """Header line plus the first ``limit`` rows, tab separated."""
    if not rows:
        return "(no rows)"
    headers = list(rows[0].keys())
    lines = ["\t".join(headers)]
    for row in rows[:limit]:
        lines.append("\t".join(row.get(h, "") for h in headers))
    if len(rows) > limit:
        lines.append(f"... {len(rows) - limit} more row(s)")
    return "\n".join(lines)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import properties from a CSV sheet into the CRM.")
    p.add_argument("csv_path", help="Path to a .csv file with the template header line.")
    p.add_argument("--dry-run", action="store_true", help="Parse and preview only; nothing is sent.")
    p.add_argument("--api-url", default=None, help="Gateway base URL (defaults to CRM_API_URL).")
    p.add_argument("--template", action="store_true", help="Print the expected header line and exit.")
    return p.parse_args(argv)


def run(argv: Optional[Sequence[str]] = None, client: Optional[CrmClient] = None) -> int:
    args = _parse_args(argv)
    if args.template:
        print(",".join(CSV_TEMPLATE_HEADERS))
        return 0

    try:
        rows = read_csv_file(args.csv_path)
    except CrmError as exc:
        print(exc.message, file=sys.stderr)
        return 2

    if not rows:
        print("No data rows found", file=sys.stderr)
        return 2

    extra = unknown_headers(rows[0].keys())
    if extra:
        logger.warning("⚠️ Columns not in the template will be ignored: %s", ", ".join(extra))

    print(preview(rows))
    if args.dry_run:
        logger.info("🧪 Dry run: %s row(s) parsed, nothing sent", len(rows))
        return 0

    if client is None:
        cfg = ClientSettings.from_env()
        if args.api_url:
            cfg = ClientSettings(api_url=args.api_url.rstrip("/"), timeout=cfg.timeout)
        client = CrmClient(cfg)

    result = client.bulk_import(rows)
    print(json.dumps(result, indent=2))
    logger.info(
        "📦 Import finished: %s/%s successful, %s failed",
        result.get("successful", 0),
        result.get("total", len(rows)),
        result.get("failed", 0),
    )
    return 0 if result.get("success") else 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
