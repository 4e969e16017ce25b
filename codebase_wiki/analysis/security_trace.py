"""Security trace reconstruction for detected vulnerabilities."""

from dataclasses import dataclass, replace
from enum import Enum

from loguru import logger

from ..graph.node_types import ControlFlowGraph
from .owasp import HIGH_SEVERITY_MITIGATIONS, OwaspCategory, trace_mitigations
from .severity import (
    ConfidenceLevel,
    ImpactLevel,
    Severity,
    impact_score,
    propagated_confidentiality,
    severity_confidentiality,
)

MIN_TRACE_SEVERITY = Severity.MEDIUM
PROPAGATION_STEPS = 3
IMPACT_DECAY = 0.7

AUTH_MARKERS = ("admin", "auth")
SANITIZER_MARKERS = ("sanitize", "escape")
HANDLER_MARKER = "handler"
DOWNSTREAM_FUNCTION = "process_data"


class TrustBoundary(Enum):
    """Trust classification of a call site with respect to data origin."""

    EXTERNAL = "external"
    INTERNAL = "internal"
    TRUSTED = "trusted"


@dataclass(frozen=True)
class VulnerabilityLocation:
    """Where a vulnerability was found."""
    file: str
    function: str | None
    start_line: int
    end_line: int
    column: int = 0


@dataclass(frozen=True)
class Vulnerability:
    """A detected vulnerability, as supplied by the detection collaborator."""
    id: str
    title: str
    severity: Severity
    owasp_category: OwaspCategory
    location: VulnerabilityLocation


@dataclass(frozen=True)
class SecurityContext:
    """Security-relevant facts at a call site."""
    has_user_input: bool
    requires_auth: bool
    is_sanitized: bool
    trust_boundary: TrustBoundary


@dataclass(frozen=True)
class SecurityCallSite:
    """One step of a propagation path."""
    function_name: str
    location: VulnerabilityLocation
    context: SecurityContext


@dataclass(frozen=True)
class SecurityImpact:
    """Estimated impact at one point of the chain."""
    confidentiality: ImpactLevel
    integrity: ImpactLevel
    availability: ImpactLevel
    score: float


@dataclass(frozen=True)
class SecurityTrace:
    """Propagation path, impact chain and mitigations of one vulnerability."""
    id: str
    source: Vulnerability
    propagation_path: tuple[SecurityCallSite, ...]
    impact_chain: tuple[SecurityImpact, ...]
    confidence: ConfidenceLevel
    mitigations: tuple[str, ...]


class SecurityTraceBuilder:
    """Builds security traces for vulnerabilities of Medium severity or above.

    Propagation is modelled by name heuristics rather than call-graph
    traversal: the vulnerable function is the entry site and request handlers
    get one synthetic downstream site. The impact chain always has one entry
    for the vulnerability plus PROPAGATION_STEPS decayed entries, independent
    of the path length.
    """

    def __init__(self, min_severity: Severity = MIN_TRACE_SEVERITY):
        self.min_severity = min_severity

    def build(
        self, vulnerability: Vulnerability, cfg: ControlFlowGraph | None = None
    ) -> SecurityTrace | None:
        """Build the trace for `vulnerability`, or None if it is below the threshold."""
        if vulnerability.severity < self.min_severity:
            return None

        path = self.trace_propagation_path(vulnerability.location)
        return SecurityTrace(
            id=f"trace_{vulnerability.id}",
            source=vulnerability,
            propagation_path=tuple(path),
            impact_chain=tuple(self.calculate_impact_chain(vulnerability.severity)),
            confidence=self.assess_confidence(vulnerability.location, cfg),
            mitigations=tuple(self.generate_mitigations(vulnerability)),
        )

    def build_all(
        self,
        vulnerabilities: list[Vulnerability],
        cfgs: dict[str, ControlFlowGraph] | None = None,
    ) -> list[SecurityTrace]:
        """Build traces for every qualifying vulnerability, in input order."""
        cfgs = cfgs or {}
        traces = []
        for vuln in vulnerabilities:
            trace = self.build(vuln, cfgs.get(vuln.location.file))
            if trace is not None:
                traces.append(trace)
        logger.info(f"Built {len(traces)} security traces from {len(vulnerabilities)} vulnerabilities")
        return traces

    def trace_propagation_path(self, location: VulnerabilityLocation) -> list[SecurityCallSite]:
        """Call sites the vulnerability is modelled as passing through."""
        function_name = location.function
        if not function_name:
            return []

        lowered = function_name.lower()
        path = [
            SecurityCallSite(
                function_name=function_name,
                location=location,
                context=SecurityContext(
                    has_user_input=True,
                    requires_auth=any(marker in lowered for marker in AUTH_MARKERS),
                    is_sanitized=any(marker in lowered for marker in SANITIZER_MARKERS),
                    trust_boundary=TrustBoundary.EXTERNAL,
                ),
            )
        ]

        # Handlers pass request data on to a processing step
        if HANDLER_MARKER in lowered:
            path.append(
                SecurityCallSite(
                    function_name=DOWNSTREAM_FUNCTION,
                    location=replace(
                        location,
                        function=DOWNSTREAM_FUNCTION,
                        start_line=location.start_line + 10,
                        end_line=location.end_line + 15,
                        column=0,
                    ),
                    context=SecurityContext(
                        has_user_input=False,
                        requires_auth=False,
                        is_sanitized=False,
                        trust_boundary=TrustBoundary.INTERNAL,
                    ),
                )
            )
        return path

    @staticmethod
    def calculate_impact_chain(severity: Severity) -> list[SecurityImpact]:
        """Initial impact followed by PROPAGATION_STEPS geometrically decaying impacts."""
        initial = impact_score(severity)
        impacts = [
            SecurityImpact(
                confidentiality=severity_confidentiality(severity),
                integrity=ImpactLevel.MEDIUM,
                availability=ImpactLevel.LOW,
                score=initial,
            )
        ]
        for step in range(1, PROPAGATION_STEPS + 1):
            impacts.append(
                SecurityImpact(
                    confidentiality=propagated_confidentiality(severity),
                    integrity=ImpactLevel.LOW,
                    availability=ImpactLevel.LOW,
                    score=initial * IMPACT_DECAY**step,
                )
            )
        return impacts

    @staticmethod
    def assess_confidence(
        location: VulnerabilityLocation, cfg: ControlFlowGraph | None
    ) -> ConfidenceLevel:
        if not location.function:
            return ConfidenceLevel.LOW
        if cfg is not None and location.function in cfg.call_sequence():
            return ConfidenceLevel.HIGH
        return ConfidenceLevel.MEDIUM

    @staticmethod
    def generate_mitigations(vulnerability: Vulnerability) -> list[str]:
        mitigations = trace_mitigations(vulnerability.owasp_category)
        if vulnerability.severity >= Severity.HIGH:
            mitigations.extend(HIGH_SEVERITY_MITIGATIONS)
        return mitigations
