"""Aggregation of vulnerabilities into ranked per-file security hotspots."""

from dataclasses import dataclass

from loguru import logger

from ..graph.node_types import FileInfo
from ..errors import InputUnavailableError
from ..utils.source_reader import SourceReader
from .owasp import CategoryClassifier, KeywordCategoryClassifier, OwaspCategory, category_recommendations
from .security_trace import Vulnerability, VulnerabilityLocation
from .severity import Severity, risk_weight


@dataclass(frozen=True)
class SecurityHotspot:
    """A file accumulating vulnerabilities, ranked by aggregate risk."""
    location: VulnerabilityLocation  # first vulnerability seen in the file
    severity: Severity  # most severe vulnerability seen
    vulnerability_count: int
    risk_score: float
    description: str


@dataclass
class _HotspotAccumulator:
    location: VulnerabilityLocation
    severity: Severity
    vulnerability_count: int = 0
    risk_score: float = 0.0

    def add(self, vulnerability: Vulnerability) -> None:
        self.vulnerability_count += 1
        self.risk_score += risk_weight(vulnerability.severity)
        if vulnerability.severity > self.severity:
            self.severity = vulnerability.severity

    def freeze(self) -> SecurityHotspot:
        noun = "vulnerability" if self.vulnerability_count == 1 else "vulnerabilities"
        return SecurityHotspot(
            location=self.location,
            severity=self.severity,
            vulnerability_count=self.vulnerability_count,
            risk_score=self.risk_score,
            description=(
                f"Security hotspot with {self.vulnerability_count} {noun} "
                f"(max severity: {self.severity.value})"
            ),
        )


class SecurityHotspotAggregator:
    """Groups vulnerabilities by file and ranks the files by risk score."""

    def __init__(
        self,
        min_severity: Severity = Severity.MEDIUM,
        classifier: CategoryClassifier | None = None,
    ):
        self.min_severity = min_severity
        self.classifier = classifier or KeywordCategoryClassifier()

    def aggregate(
        self, vulnerabilities: list[Vulnerability], min_severity: Severity | None = None
    ) -> list[SecurityHotspot]:
        """Return hotspots sorted by descending risk score.

        Only vulnerabilities at or above `min_severity` (defaulting to the
        aggregator's threshold) contribute; ties keep first-seen file order.
        """
        threshold = min_severity if min_severity is not None else self.min_severity
        accumulators: dict[str, _HotspotAccumulator] = {}

        for vuln in vulnerabilities:
            if vuln.severity < threshold:
                continue
            key = str(vuln.location.file)
            if key not in accumulators:
                accumulators[key] = _HotspotAccumulator(
                    location=vuln.location, severity=vuln.severity
                )
            accumulators[key].add(vuln)

        hotspots = sorted(
            (acc.freeze() for acc in accumulators.values()),
            key=lambda h: h.risk_score,
            reverse=True,
        )
        logger.info(
            f"Aggregated {len(hotspots)} hotspots at or above {threshold.value} severity"
        )
        return hotspots

    def detect_categories(self, file: FileInfo, reader: SourceReader) -> list[OwaspCategory]:
        """OWASP categories suggested by the text of `file`; empty if it cannot be read."""
        try:
            text = reader.read(file.path)
        except InputUnavailableError as e:
            logger.debug(f"Skipping OWASP category detection for {file.path}: {e.reason}")
            return []
        return self.classifier.classify(text)

    @staticmethod
    def recommendations_for(categories: list[OwaspCategory]) -> dict[OwaspCategory, list[str]]:
        return {category: category_recommendations(category) for category in categories}
