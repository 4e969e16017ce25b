"""Test the severity scale and its weight tables."""

import pytest

from codebase_wiki.analysis.severity import (
    ConfidenceLevel,
    ImpactLevel,
    Severity,
    impact_score,
    propagated_confidentiality,
    risk_weight,
    severity_confidentiality,
)


class TestSeverityOrdering:
    """Test the total order over severities."""

    def test_strict_total_order(self):
        ordered = [
            Severity.INFO,
            Severity.LOW,
            Severity.MEDIUM,
            Severity.HIGH,
            Severity.CRITICAL,
        ]
        assert sorted(reversed(ordered)) == ordered
        for lower, higher in zip(ordered, ordered[1:]):
            assert lower < higher
            assert higher > lower
            assert lower <= higher
            assert not higher < lower

    def test_max_picks_most_severe(self):
        assert max([Severity.LOW, Severity.CRITICAL, Severity.MEDIUM]) == Severity.CRITICAL

    def test_confidence_is_ordered(self):
        assert ConfidenceLevel.LOW < ConfidenceLevel.MEDIUM < ConfidenceLevel.HIGH


class TestSeverityParsing:
    """Test parsing severities from collaborator strings."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("HIGH", Severity.HIGH),
            ("medium", Severity.MEDIUM),
            (" Critical ", Severity.CRITICAL),
            ("informational", Severity.INFO),
            ("note", Severity.INFO),
            (Severity.LOW, Severity.LOW),
        ],
    )
    def test_parse_known_values(self, raw, expected):
        assert Severity.parse(raw) == expected

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown severity"):
            Severity.parse("catastrophic")


class TestWeights:
    """Test risk weights and impact scores."""

    def test_risk_weights(self):
        assert risk_weight(Severity.INFO) == 1.0
        assert risk_weight(Severity.LOW) == 3.0
        assert risk_weight(Severity.MEDIUM) == 5.0
        assert risk_weight(Severity.HIGH) == 7.0
        assert risk_weight(Severity.CRITICAL) == 10.0

    def test_impact_scores_differ_only_at_critical(self):
        for severity in Severity:
            if severity == Severity.CRITICAL:
                assert impact_score(severity) == 9.0
            else:
                assert impact_score(severity) == risk_weight(severity)

    def test_confidentiality_levels(self):
        assert severity_confidentiality(Severity.CRITICAL) == ImpactLevel.CRITICAL
        assert severity_confidentiality(Severity.HIGH) == ImpactLevel.HIGH
        assert severity_confidentiality(Severity.MEDIUM) == ImpactLevel.MEDIUM
        assert severity_confidentiality(Severity.LOW) == ImpactLevel.LOW

        assert propagated_confidentiality(Severity.CRITICAL) == ImpactLevel.HIGH
        assert propagated_confidentiality(Severity.HIGH) == ImpactLevel.MEDIUM
        assert propagated_confidentiality(Severity.MEDIUM) == ImpactLevel.LOW
