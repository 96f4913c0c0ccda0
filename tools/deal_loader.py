"""Submit a file of FX deals to the deal service batch import endpoint."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import time
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any
from urllib import error, request

from openpyxl import load_workbook

LOGGER = logging.getLogger("deal_loader")

EXIT_ALL_ACCEPTED = 0
EXIT_ALL_REJECTED = 1
EXIT_PARTIAL = 2

WIRE_FIELDS = ("dealId", "fromCurrency", "toCurrency", "dealTimestamp", "dealAmount")


def _normalized_key(value: str) -> str:
    return "".join(ch for ch in value.lower() if ch.isalnum())


_FIELD_INDEX = {_normalized_key(name): name for name in WIRE_FIELDS}


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return None if stripped == "" else stripped
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


def normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """Maps loosely spelled headers (deal_id, Deal Id, DEALID) onto wire names."""
    normalized: dict[str, Any] = {}
    for raw_key, raw_value in row.items():
        if raw_key is None:
            continue
        field = _FIELD_INDEX.get(_normalized_key(str(raw_key)))
        if field is None:
            continue
        value = _normalize_value(raw_value)
        if value is not None:
            normalized[field] = value
    return normalized


def _parse_csv(content: bytes) -> list[dict[str, Any]]:
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(StringIO(text))
    return [dict(row) for row in reader]


def _parse_xlsx(content: bytes) -> list[dict[str, Any]]:
    workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    try:
        rows = list(workbook.active.iter_rows(values_only=True))
    finally:
        workbook.close()
    if not rows:
        return []

    headers = [str(cell).strip() if cell is not None else "" for cell in rows[0]]
    records: list[dict[str, Any]] = []
    for row_values in rows[1:]:
        if row_values is None:
            continue
        row_dict = {
            headers[index]: row_values[index] if index < len(row_values) else None
            for index in range(len(headers))
            if headers[index]
        }
        if any(value is not None and str(value).strip() != "" for value in row_dict.values()):
            records.append(row_dict)
    return records


def _parse_json(content: bytes) -> list[dict[str, Any]]:
    payload = json.loads(content.decode("utf-8-sig"))
    if isinstance(payload, dict):
        payload = payload.get("deals", [])
    if not isinstance(payload, list):
        raise ValueError("JSON input must be a list of deals or an object with a 'deals' list.")
    if not all(isinstance(row, dict) for row in payload):
        raise ValueError("JSON input must contain one object per deal.")
    return payload


def load_deals(path: Path) -> list[dict[str, Any]]:
    content = path.read_bytes()
    suffix = path.suffix.lower()
    if suffix == ".csv":
        rows = _parse_csv(content)
    elif suffix == ".xlsx":
        rows = _parse_xlsx(content)
    elif suffix == ".json":
        rows = _parse_json(content)
    else:
        raise ValueError(f"Unsupported file format '{suffix}'. Use .csv, .xlsx or .json.")
    return [normalize_row(row) for row in rows]


def _request_json(method: str, url: str, payload: dict[str, Any] | None = None) -> tuple[int, Any]:
    req = request.Request(
        url=url,
        method=method.upper(),
        data=(None if payload is None else json.dumps(payload).encode("utf-8")),
        headers={"Content-Type": "application/json"},
    )
    try:
        with request.urlopen(req, timeout=30) as response:
            body = response.read().decode("utf-8")
            return response.status, (json.loads(body) if body else {})
    except error.HTTPError as exc:
        detail = exc.read().decode("utf-8", errors="replace")
        # An all-rejected batch still carries a batch summary
        if exc.code == 400:
            try:
                body = json.loads(detail)
            except ValueError:
                body = None
            if isinstance(body, dict) and "totalRequested" in body:
                return exc.code, body
        raise RuntimeError(f"{method} {url} failed ({exc.code}): {detail}") from exc
    except error.URLError as exc:
        raise RuntimeError(f"{method} {url} connection error: {exc}") from exc


def _wait_ready(url: str, wait_seconds: int, poll_interval_seconds: int) -> None:
    deadline = time.time() + wait_seconds
    while time.time() < deadline:
        try:
            status_code, _ = _request_json("GET", url)
            if status_code == 200:
                return
        except RuntimeError:
            pass
        time.sleep(poll_interval_seconds)
    raise TimeoutError(f"Timed out waiting for {url}.")


def exit_code_for(summary: dict[str, Any]) -> int:
    if summary.get("failureCount", 0) == 0:
        return EXIT_ALL_ACCEPTED
    if summary.get("successCount", 0) == 0:
        return EXIT_ALL_REJECTED
    return EXIT_PARTIAL


def submit_batch(base_url: str, deals: list[dict[str, Any]]) -> dict[str, Any]:
    _, summary = _request_json("POST", f"{base_url}/api/deals/batch", payload={"deals": deals})
    return summary


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a file of FX deals through the batch API")
    parser.add_argument("file", type=Path, help="CSV, XLSX or JSON file of deals")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--wait-seconds", type=int, default=60)
    parser.add_argument("--poll-interval-seconds", type=int, default=2)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    base_url = args.base_url.rstrip("/")

    deals = load_deals(args.file)
    if not deals:
        LOGGER.error("No deals found in %s.", args.file)
        return EXIT_ALL_REJECTED

    _wait_ready(f"{base_url}/health/ready", args.wait_seconds, args.poll_interval_seconds)
    LOGGER.info("Submitting %d deals from %s", len(deals), args.file)
    summary = submit_batch(base_url, deals)

    LOGGER.info(
        "Batch import finished: total=%d successful=%d failed=%d",
        summary.get("totalRequested", 0),
        summary.get("successCount", 0),
        summary.get("failureCount", 0),
    )
    for failure in summary.get("failedDeals") or []:
        LOGGER.warning(
            "Row %s (%s) rejected: %s",
            failure.get("rowNumber"),
            failure.get("dealId"),
            failure.get("errorMessage"),
        )
    return exit_code_for(summary)


if __name__ == "__main__":
    raise SystemExit(main())
