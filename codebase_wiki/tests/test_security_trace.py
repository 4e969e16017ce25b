"""Test security trace reconstruction."""

import pytest

from codebase_wiki.analysis.owasp import HIGH_SEVERITY_MITIGATIONS, OwaspCategory, trace_mitigations
from codebase_wiki.analysis.security_trace import (
    DOWNSTREAM_FUNCTION,
    SecurityTraceBuilder,
    TrustBoundary,
    Vulnerability,
    VulnerabilityLocation,
)
from codebase_wiki.analysis.severity import ConfidenceLevel, ImpactLevel, Severity
from codebase_wiki.graph.node_types import CallNode, ControlFlowGraph, OtherNode


def make_vulnerability(
    severity=Severity.HIGH,
    category=OwaspCategory.INJECTION,
    function="run_query",
    vuln_id="V1",
    file="app/db.py",
):
    return Vulnerability(
        id=vuln_id,
        title="SQL built from user input",
        severity=severity,
        owasp_category=category,
        location=VulnerabilityLocation(
            file=file, function=function, start_line=12, end_line=14, column=4
        ),
    )


class TestTraceThreshold:
    """Test which severities produce traces."""

    @pytest.fixture
    def builder(self):
        return SecurityTraceBuilder()

    @pytest.mark.parametrize("severity", [Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL])
    def test_medium_and_above_produce_traces(self, builder, severity):
        trace = builder.build(make_vulnerability(severity=severity))
        assert trace is not None
        assert trace.id == "trace_V1"

    @pytest.mark.parametrize("severity", [Severity.INFO, Severity.LOW])
    def test_below_medium_produces_none(self, builder, severity):
        assert builder.build(make_vulnerability(severity=severity)) is None

    def test_build_all_keeps_input_order(self, builder):
        vulns = [
            make_vulnerability(vuln_id="A", severity=Severity.CRITICAL),
            make_vulnerability(vuln_id="B", severity=Severity.LOW),
            make_vulnerability(vuln_id="C", severity=Severity.MEDIUM),
        ]
        traces = builder.build_all(vulns)
        assert [t.id for t in traces] == ["trace_A", "trace_C"]


class TestImpactChain:
    """Test the fixed-length decaying impact chain."""

    @pytest.mark.parametrize("severity", [Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL])
    def test_chain_has_four_strictly_decreasing_scores(self, severity):
        chain = SecurityTraceBuilder.calculate_impact_chain(severity)
        assert len(chain) == 4
        scores = [impact.score for impact in chain]
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_high_chain_values(self):
        chain = SecurityTraceBuilder.calculate_impact_chain(Severity.HIGH)
        assert chain[0].score == pytest.approx(7.0)
        assert chain[1].score == pytest.approx(4.9)
        assert chain[2].score == pytest.approx(3.43)
        assert chain[3].score == pytest.approx(2.401)
        assert chain[0].confidentiality == ImpactLevel.HIGH
        assert chain[0].integrity == ImpactLevel.MEDIUM
        assert chain[1].confidentiality == ImpactLevel.MEDIUM
        assert all(impact.availability == ImpactLevel.LOW for impact in chain)

    def test_critical_starts_at_nine(self):
        chain = SecurityTraceBuilder.calculate_impact_chain(Severity.CRITICAL)
        assert chain[0].score == pytest.approx(9.0)

    def test_chain_length_independent_of_path(self):
        builder = SecurityTraceBuilder()
        plain = builder.build(make_vulnerability(function="run_query"))
        handler = builder.build(make_vulnerability(function="login_handler"))
        no_function = builder.build(make_vulnerability(function=None))
        assert len(plain.propagation_path) == 1
        assert len(handler.propagation_path) == 2
        assert len(no_function.propagation_path) == 0
        assert len(plain.impact_chain) == len(handler.impact_chain) == len(no_function.impact_chain) == 4


class TestPropagationPath:
    """Test name-based propagation heuristics."""

    def test_entry_site_context(self):
        path = SecurityTraceBuilder().trace_propagation_path(
            make_vulnerability(function="admin_sanitize_input").location
        )
        entry = path[0]
        assert entry.function_name == "admin_sanitize_input"
        assert entry.context.has_user_input is True
        assert entry.context.requires_auth is True
        assert entry.context.is_sanitized is True
        assert entry.context.trust_boundary == TrustBoundary.EXTERNAL

    def test_handler_gets_downstream_site(self):
        path = SecurityTraceBuilder().trace_propagation_path(
            make_vulnerability(function="UploadHandler").location
        )
        assert len(path) == 2
        downstream = path[1]
        assert downstream.function_name == DOWNSTREAM_FUNCTION
        assert downstream.location.start_line == 22
        assert downstream.location.end_line == 29
        assert downstream.location.file == "app/db.py"
        assert downstream.context.has_user_input is False
        assert downstream.context.trust_boundary == TrustBoundary.INTERNAL


class TestMitigationsAndConfidence:
    """Test mitigation selection and confidence assessment."""

    def test_injection_high_gets_five_mitigations(self):
        trace = SecurityTraceBuilder().build(make_vulnerability(severity=Severity.HIGH))
        injection = trace_mitigations(OwaspCategory.INJECTION)
        assert list(trace.mitigations) == injection + HIGH_SEVERITY_MITIGATIONS
        assert len(trace.mitigations) == 5

    def test_injection_medium_gets_three_mitigations(self):
        trace = SecurityTraceBuilder().build(make_vulnerability(severity=Severity.MEDIUM))
        assert list(trace.mitigations) == trace_mitigations(OwaspCategory.INJECTION)

    def test_confidence_levels(self):
        builder = SecurityTraceBuilder()
        cfg = ControlFlowGraph(nodes=(OtherNode(), CallNode("run_query")))

        assert builder.build(make_vulnerability(function=None)).confidence == ConfidenceLevel.LOW
        assert builder.build(make_vulnerability()).confidence == ConfidenceLevel.MEDIUM
        assert builder.build(make_vulnerability(), cfg).confidence == ConfidenceLevel.HIGH

    def test_build_all_uses_cfg_of_vulnerable_file(self):
        cfgs = {"app/db.py": ControlFlowGraph(nodes=(CallNode("run_query"),))}
        traces = SecurityTraceBuilder().build_all(
            [make_vulnerability(), make_vulnerability(vuln_id="V2", file="other.py")], cfgs
        )
        assert [t.confidence for t in traces] == [ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM]

    def test_trace_is_frozen(self):
        trace = SecurityTraceBuilder().build(make_vulnerability())
        with pytest.raises(AttributeError):
            trace.id = "changed"
