"""Severity tiers and the breach classifier.

A variable may configure up to four ascending tiers. A reading is classified
by the highest tier it strictly exceeds, so one reading never yields more
than one severity.
"""

import enum
import functools
import math
from dataclasses import dataclass
from typing import Optional


@functools.total_ordering
class Severity(enum.Enum):
    """Alert severity, ordered low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_RANK = {s: i for i, s in enumerate(Severity)}


@dataclass(frozen=True)
class Tiers:
    """Configured thresholds for one variable. Any tier may be unset."""
    low: Optional[float] = None
    medium: Optional[float] = None
    high: Optional[float] = None
    critical: Optional[float] = None

    def get(self, severity: Severity) -> Optional[float]:
        return getattr(self, severity.value)

    @property
    def is_empty(self) -> bool:
        return all(self.get(s) is None for s in Severity)

    @property
    def is_ascending(self) -> bool:
        """True when the configured tiers increase strictly from low to critical."""
        values = [self.get(s) for s in Severity if self.get(s) is not None]
        return all(a < b for a, b in zip(values, values[1:]))


@dataclass(frozen=True)
class Breach:
    """Result of a classification that crossed a tier."""
    severity: Severity
    threshold: float
    value: float


def classify(value: float, tiers: Tiers) -> Optional[Breach]:
    """Return the highest tier strictly exceeded by value, or None.

    Tiers are checked critical first; a value equal to a threshold does not
    breach it.
    """
    if math.isnan(value):
        return None
    for severity in sorted(Severity, reverse=True):
        threshold = tiers.get(severity)
        if threshold is not None and value > threshold:
            return Breach(severity=severity, threshold=threshold, value=value)
    return None


def _fmt(number: float) -> str:
    """Render 40.0 as "40" and 15.5 as "15.5"."""
    if float(number).is_integer():
        return str(int(number))
    return str(number)


def format_message(variable_id: str, breach: Breach) -> str:
    """Operator-facing alert text referencing the breached tier."""
    return (
        f"{variable_id} value {_fmt(breach.value)} exceeds "
        f"{breach.severity.value} threshold of {_fmt(breach.threshold)}"
    )
