"""
Threshold predicates.

Decides whether an observed call count clears or misses the usage threshold.
"""

from types import MappingProxyType
from typing import Callable

from .policy import PolicyMode

Predicate = Callable[[int, int], bool]


def meets_or_exceeds(value: int, threshold: int) -> bool:
    """Actions used at least ``threshold`` times are safe to allow."""
    return value >= threshold


def is_below(value: int, threshold: int) -> bool:
    """Actions used fewer than ``threshold`` times are candidates for denial."""
    return value < threshold


PREDICATES = MappingProxyType({
    PolicyMode.ALLOW: meets_or_exceeds,
    PolicyMode.DENY: is_below,
})


def predicate_for(mode: PolicyMode) -> Predicate:
    """Return the threshold predicate for a policy mode."""
    return PREDICATES[mode]
