"""Security trace, hotspot and OWASP analysis over detected vulnerabilities."""

from .hotspots import SecurityHotspot, SecurityHotspotAggregator
from .owasp import CategoryClassifier, KeywordCategoryClassifier, OwaspCategory
from .security_trace import (
    SecurityTrace,
    SecurityTraceBuilder,
    Vulnerability,
    VulnerabilityLocation,
)
from .severity import ConfidenceLevel, ImpactLevel, Severity

__all__ = [
    "CategoryClassifier",
    "ConfidenceLevel",
    "ImpactLevel",
    "KeywordCategoryClassifier",
    "OwaspCategory",
    "SecurityHotspot",
    "SecurityHotspotAggregator",
    "SecurityTrace",
    "SecurityTraceBuilder",
    "Severity",
    "Vulnerability",
    "VulnerabilityLocation",
]
