"""
Scanner report parsing.

Decodes the scanner's JSON envelope into typed usage reports. Validation is
strict: any structural problem fails the whole report set, nothing is
partially recovered.
"""

import json
from typing import Any, Dict, Union

from .errors import ParseError
from scp_guard.storage.models import (
    Account,
    Partition,
    ReportSet,
    UsageEntry,
    UsageReport
)


def parse_report(raw: Union[bytes, str]) -> ReportSet:
    """Parse raw scanner output into a non-empty report set.

    Args:
        raw: JSON array of report envelopes

    Returns:
        Tuple of UsageReport in file order

    Raises:
        ParseError: If the JSON is malformed, does not match the envelope
            schema, or contains no reports
    """
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError(f"invalid scanner report JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError("scanner report must be a JSON array")
    if not data:
        raise ParseError("scanner report contains no reports")

    return tuple(_parse_envelope(item, f"[{i}]") for i, item in enumerate(data))


def extract_service_name(event_source: str) -> str:
    """Return the service prefix of an event source.

    ``"s3.amazonaws.com"`` becomes ``"s3"``; a value without a dot is
    returned unchanged.
    """
    return event_source.split(".")[0]


def _parse_envelope(item: Any, path: str) -> UsageReport:
    if not isinstance(item, dict):
        raise ParseError(f"{path} must be an object")

    account_data = _optional_object(item, "account", path)
    partition_data = _optional_object(item, "partition", path)

    results = item.get("results")
    if not isinstance(results, dict):
        raise ParseError(f"Missing required 'results' object in {path}")

    event_source = results.get("event_source")
    if not isinstance(event_source, str):
        raise ParseError(f"'results.event_source' in {path} must be a string")

    usage = results.get("service_usage")
    if usage is None:
        usage = []
    if not isinstance(usage, list):
        raise ParseError(f"'results.service_usage' in {path} must be an array")

    entries = tuple(
        _parse_entry(entry, f"{path}.results.service_usage[{i}]")
        for i, entry in enumerate(usage)
    )

    return UsageReport(
        event_source=event_source,
        entries=entries,
        account=Account(
            identifier=_optional_string(account_data, "identifier", f"{path}.account"),
            name=_optional_string(account_data, "name", f"{path}.account")
        ),
        partition=Partition(
            year=_optional_string(partition_data, "year", f"{path}.partition"),
            month=_optional_string(partition_data, "month", f"{path}.partition")
        ),
        description=_optional_string(item, "description", path)
    )


def _parse_entry(entry: Any, path: str) -> UsageEntry:
    if not isinstance(entry, dict):
        raise ParseError(f"{path} must be an object")

    name = entry.get("event_name")
    if not isinstance(name, str):
        raise ParseError(f"'event_name' in {path} must be a string")

    # bool is a subclass of int
    count = entry.get("count")
    if isinstance(count, bool) or not isinstance(count, int):
        raise ParseError(f"'count' in {path} must be an integer")

    return UsageEntry(event_name=name, count=count)


def _optional_object(data: Dict[str, Any], key: str, path: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"'{key}' in {path} must be an object")
    return value


def _optional_string(data: Dict[str, Any], key: str, path: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ParseError(f"'{key}' in {path} must be a string")
    return value
