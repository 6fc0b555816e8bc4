"""
Action tallies.

Filters a report's usage entries down to the actions whose call counts
satisfy a threshold predicate.
"""

from types import MappingProxyType
from typing import Dict, Mapping

from .classifier import Predicate
from .errors import ValidationError
from scp_guard.storage.models import UsageReport

ActionTally = Mapping[str, int]


def build_tally(threshold: int, report: UsageReport, predicate: Predicate) -> ActionTally:
    """Map each qualifying action name to its call count.

    Entries are visited in report order. A repeated event name that
    qualifies again overwrites the earlier count instead of adding to it.

    Args:
        threshold: Call count to compare against, must be > 0
        report: Usage report to filter
        predicate: Called as ``predicate(count, threshold)``

    Returns:
        Read-only mapping of action name to count

    Raises:
        ValidationError: If threshold is not a positive integer
    """
    if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0:
        raise ValidationError("threshold must be greater than zero")

    tally: Dict[str, int] = {}
    for entry in report.entries:
        if predicate(entry.count, threshold):
            tally[entry.event_name] = entry.count

    return MappingProxyType(tally)
