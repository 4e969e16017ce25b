"""OWASP Top 10 taxonomy, mitigation tables and file category classification."""

import re
from enum import Enum
from typing import Protocol

from loguru import logger


class OwaspCategory(Enum):
    """OWASP Top 10 (2021) categories."""

    BROKEN_ACCESS_CONTROL = "A01:2021 - Broken Access Control"
    CRYPTOGRAPHIC_FAILURES = "A02:2021 - Cryptographic Failures"
    INJECTION = "A03:2021 - Injection"
    INSECURE_DESIGN = "A04:2021 - Insecure Design"
    SECURITY_MISCONFIGURATION = "A05:2021 - Security Misconfiguration"
    VULNERABLE_COMPONENTS = "A06:2021 - Vulnerable and Outdated Components"
    AUTHENTICATION_FAILURES = "A07:2021 - Identification and Authentication Failures"
    INTEGRITY_FAILURES = "A08:2021 - Software and Data Integrity Failures"
    LOGGING_FAILURES = "A09:2021 - Security Logging and Monitoring Failures"
    SERVER_SIDE_REQUEST_FORGERY = "A10:2021 - Server-Side Request Forgery"
    OTHER = "Other"

    @property
    def code(self) -> str:
        """Short code such as "A03", or "Other"."""
        return self.value.split(":")[0]

    @classmethod
    def parse(cls, raw: "str | OwaspCategory") -> "OwaspCategory":
        """Parse a category from its code ("A03"), member name or label."""
        if isinstance(raw, OwaspCategory):
            return raw
        value = str(raw).strip()
        normalized = re.sub(r"[^a-z0-9]", "", value.lower())
        for category in cls:
            if value.upper() == category.code.upper():
                return category
            if normalized == re.sub(r"[^a-z0-9]", "", category.name.lower()):
                return category
            if value.lower() == category.value.lower():
                return category
        logger.debug(f"Unrecognized OWASP category {raw!r}, using OTHER")
        return cls.OTHER


# Category-specific mitigations attached to security traces.
TRACE_MITIGATIONS: dict[OwaspCategory, list[str]] = {
    OwaspCategory.INJECTION: [
        "Use parameterized queries or stored procedures",
        "Validate and sanitize all user inputs",
        "Use an ORM or query builder with built-in protection",
    ],
    OwaspCategory.BROKEN_ACCESS_CONTROL: [
        "Implement proper authorization checks",
        "Use role-based access control (RBAC)",
        "Follow principle of least privilege",
    ],
    OwaspCategory.CRYPTOGRAPHIC_FAILURES: [
        "Use strong encryption algorithms (AES-256)",
        "Store encryption keys securely",
        "Implement key rotation policies",
    ],
}

GENERIC_MITIGATIONS = [
    "Review and fix security weakness",
    "Follow secure coding best practices",
]

HIGH_SEVERITY_MITIGATIONS = [
    "Conduct thorough security testing",
    "Implement monitoring and alerting",
]

# Recommendations shown for categories detected in a file's text.
CATEGORY_RECOMMENDATIONS: dict[OwaspCategory, list[str]] = {
    OwaspCategory.BROKEN_ACCESS_CONTROL: [
        "Implement proper authorization checks before sensitive operations",
        "Use role-based access control (RBAC)",
        "Apply the principle of least privilege",
        "Implement proper session management",
    ],
    OwaspCategory.CRYPTOGRAPHIC_FAILURES: [
        "Use strong encryption algorithms and key sizes",
        "Store encryption keys securely",
        "Implement proper key management and rotation",
        "Use secure random number generators",
    ],
    OwaspCategory.INJECTION: [
        "Use parameterized queries or prepared statements",
        "Validate and sanitize all user inputs",
        "Use an ORM with built-in injection protection",
        "Implement content security policies",
    ],
    OwaspCategory.INSECURE_DESIGN: [
        "Follow secure design principles from the start",
        "Implement threat modeling",
        "Use secure defaults and fail-safe behavior",
        "Regular security reviews of design decisions",
    ],
    OwaspCategory.SECURITY_MISCONFIGURATION: [
        "Secure default configurations",
        "Regular configuration reviews",
        "Environment-specific configurations",
        "Automated configuration validation",
    ],
}

DEFAULT_RECOMMENDATIONS = ["Review and apply security best practices"]

DEFAULT_CATEGORY_KEYWORDS: dict[OwaspCategory, tuple[str, ...]] = {
    OwaspCategory.BROKEN_ACCESS_CONTROL: ("admin", "access", "auth", "authorize"),
    OwaspCategory.CRYPTOGRAPHIC_FAILURES: ("encrypt", "decrypt", "password", "secret"),
    OwaspCategory.INJECTION: ("select", "insert", "update", "delete", "exec", "system"),
    OwaspCategory.INSECURE_DESIGN: ("random", "token", "session"),
    OwaspCategory.SECURITY_MISCONFIGURATION: ("debug", "config", "environment"),
}


def trace_mitigations(category: OwaspCategory) -> list[str]:
    """Mitigations for a traced vulnerability of the given category."""
    return list(TRACE_MITIGATIONS.get(category, GENERIC_MITIGATIONS))


def category_recommendations(category: OwaspCategory) -> list[str]:
    """Recommendations for a category detected in a file."""
    return list(CATEGORY_RECOMMENDATIONS.get(category, DEFAULT_RECOMMENDATIONS))


def _keyword_pattern(words: tuple[str, ...]) -> re.Pattern:
    word_start = "|".join(re.escape(k) for k in words)
    humps = "|".join(
        re.escape(k[0].upper()) + "(?i:" + re.escape(k[1:]) + ")" for k in words if k[:1].isalpha()
    )
    pattern = rf"(?<![A-Za-z0-9])(?i:{word_start})"
    if humps:
        # lowercase-to-uppercase change starts a new word in camelCase names
        pattern += rf"|(?<=[a-z0-9])(?:{humps})"
    return re.compile(pattern)


class CategoryClassifier(Protocol):
    """Decides which OWASP categories a piece of source text is relevant to."""

    def classify(self, text: str) -> list[OwaspCategory]:
        ...


class KeywordCategoryClassifier:
    """Classifies text by category-indicative keywords.

    Keywords match at the start of an identifier word, case-insensitively, or
    at a camelCase hump, so "auth" matches "authenticate", "user_auth" and
    "isAuthorized" but not "oauth". This is a heuristic and may both over- and
    under-report.
    """

    def __init__(self, keywords: dict[OwaspCategory, tuple[str, ...]] | None = None):
        self.keywords = keywords if keywords is not None else DEFAULT_CATEGORY_KEYWORDS
        self._patterns = {
            category: _keyword_pattern(words)
            for category, words in self.keywords.items()
            if words
        }

    def classify(self, text: str) -> list[OwaspCategory]:
        """Return matching categories in taxonomy order."""
        if not text:
            return []
        return [
            category
            for category in OwaspCategory
            if category in self._patterns and self._patterns[category].search(text)
        ]
