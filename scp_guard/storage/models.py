"""
Data models for scanner usage reports.

Defines the immutable records decoded from the scanner's JSON output.
"""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class UsageEntry:
    """One API action and how many times it was called."""
    event_name: str
    count: int


@dataclass(frozen=True)
class Account:
    """Account the scan was taken from."""
    identifier: str = ""
    name: str = ""


@dataclass(frozen=True)
class Partition:
    """Time partition covered by the scan."""
    year: str = ""
    month: str = ""


@dataclass(frozen=True)
class UsageReport:
    """Usage of a single service as reported by the scanner.

    Only ``event_source`` and ``entries`` drive policy generation; the
    account, partition and description are carried for display.
    """
    event_source: str
    entries: Tuple[UsageEntry, ...] = ()
    account: Account = field(default_factory=Account)
    partition: Partition = field(default_factory=Partition)
    description: str = ""


ReportSet = Tuple[UsageReport, ...]
