"""Severity scale shared by the trace builder and the hotspot aggregator."""

from enum import Enum
from functools import total_ordering


@total_ordering
class Severity(Enum):
    """Vulnerability severity, totally ordered INFO < LOW < MEDIUM < HIGH < CRITICAL."""

    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    @classmethod
    def parse(cls, raw: "str | Severity") -> "Severity":
        """Parse a severity name such as "HIGH", "medium" or "informational"."""
        if isinstance(raw, Severity):
            return raw
        value = str(raw).strip().lower()
        if value in ("informational", "information", "note"):
            value = "info"
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown severity: {raw!r}") from None


class ImpactLevel(Enum):
    """Confidentiality/integrity/availability impact of one trace step."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@total_ordering
class ConfidenceLevel(Enum):
    """Confidence in a reconstructed security trace."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __lt__(self, other):
        if not isinstance(other, ConfidenceLevel):
            return NotImplemented
        order = list(ConfidenceLevel)
        return order.index(self) < order.index(other)


_RANKS = {
    Severity.INFO: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}

# Weight added to a hotspot's risk score per contributing vulnerability.
RISK_WEIGHTS: dict[Severity, float] = {
    Severity.INFO: 1.0,
    Severity.LOW: 3.0,
    Severity.MEDIUM: 5.0,
    Severity.HIGH: 7.0,
    Severity.CRITICAL: 10.0,
}

# Initial score of a trace's impact chain. Critical is 9.0 here but 10.0 in
# RISK_WEIGHTS; both are kept until one value is agreed on.
IMPACT_SCORES: dict[Severity, float] = {
    Severity.INFO: 1.0,
    Severity.LOW: 3.0,
    Severity.MEDIUM: 5.0,
    Severity.HIGH: 7.0,
    Severity.CRITICAL: 9.0,
}


def risk_weight(severity: Severity) -> float:
    """Weight of a single vulnerability in hotspot risk aggregation."""
    return RISK_WEIGHTS[severity]


def impact_score(severity: Severity) -> float:
    """Initial impact score of a vulnerability in its trace."""
    return IMPACT_SCORES[severity]


def severity_confidentiality(severity: Severity) -> ImpactLevel:
    """Confidentiality impact at the vulnerable site itself."""
    if severity == Severity.CRITICAL:
        return ImpactLevel.CRITICAL
    if severity == Severity.HIGH:
        return ImpactLevel.HIGH
    if severity == Severity.MEDIUM:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


def propagated_confidentiality(severity: Severity) -> ImpactLevel:
    """Confidentiality impact one step downstream of the vulnerable site."""
    if severity == Severity.CRITICAL:
        return ImpactLevel.HIGH
    if severity == Severity.HIGH:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW
