"""Runs the security trace and hotspot engines according to configuration."""

from dataclasses import dataclass, field

from loguru import logger

from ..config import SecurityWikiConfig
from ..diagrams.mermaid import hotspot_diagram, trace_diagram
from ..graph.node_types import AnalysisResult, ControlFlowGraph
from ..utils.source_reader import SourceReader
from .hotspots import SecurityHotspot, SecurityHotspotAggregator
from .owasp import CategoryClassifier, OwaspCategory
from .security_trace import SecurityTrace, SecurityTraceBuilder, Vulnerability


@dataclass
class SecurityInsights:
    """Security narratives for a codebase."""
    traces: list[SecurityTrace] = field(default_factory=list)
    hotspots: list[SecurityHotspot] = field(default_factory=list)
    trace_diagrams: dict[str, str] = field(default_factory=dict)  # trace id -> mermaid
    hotspot_diagram: str | None = None
    owasp_recommendations: dict[str, dict[OwaspCategory, list[str]]] = field(
        default_factory=dict
    )  # file path -> category -> recommendations


class SecurityInsightAnalyzer:
    """Security trace, propagation diagram, OWASP and hotspot analysis."""

    def __init__(
        self,
        config: SecurityWikiConfig | None = None,
        classifier: CategoryClassifier | None = None,
    ):
        self.config = config or SecurityWikiConfig()
        self.trace_builder = SecurityTraceBuilder()
        self.hotspot_aggregator = SecurityHotspotAggregator(
            min_severity=self.config.min_hotspot_severity, classifier=classifier
        )

    def analyze(
        self,
        analysis: AnalysisResult,
        vulnerabilities: list[Vulnerability],
        reader: SourceReader | None = None,
        cfgs: dict[str, ControlFlowGraph] | None = None,
        categories: dict[str, list[OwaspCategory]] | None = None,
    ) -> SecurityInsights:
        """Run every enabled engine over the vulnerability list and files.

        `categories` holds OWASP categories already classified per file path;
        files missing from it are read and classified here.
        """
        insights = SecurityInsights()

        if self.config.enable_trace_analysis:
            insights.traces = self.trace_builder.build_all(vulnerabilities, cfgs)
            if self.config.enable_propagation_diagrams:
                insights.trace_diagrams = {
                    trace.id: trace_diagram(trace) for trace in insights.traces
                }
        elif self.config.enable_propagation_diagrams:
            logger.warning("Propagation diagrams need trace analysis, which is disabled")

        if self.config.enable_hotspot_visualization:
            insights.hotspots = self.hotspot_aggregator.aggregate(vulnerabilities)
            insights.hotspot_diagram = hotspot_diagram(insights.hotspots)

        if self.config.enable_owasp_recommendations:
            known = categories or {}
            if reader is None and not known:
                logger.warning("No source reader supplied, skipping OWASP recommendations")
            for file in analysis.files:
                if file.path in known:
                    found = known[file.path]
                elif reader is not None:
                    found = self.hotspot_aggregator.detect_categories(file, reader)
                else:
                    continue
                if found:
                    insights.owasp_recommendations[file.path] = (
                        self.hotspot_aggregator.recommendations_for(found)
                    )

        logger.info(
            f"Security insights: {len(insights.traces)} traces, "
            f"{len(insights.hotspots)} hotspots, "
            f"{len(insights.owasp_recommendations)} files with OWASP recommendations"
        )
        return insights
