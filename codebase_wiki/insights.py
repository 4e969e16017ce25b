"""Documentation insights from a pluggable text-generation provider."""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from loguru import logger

from .errors import InternalError
from .graph.node_types import AnalysisResult, FileInfo

AI_FAILED_PLACEHOLDER = "AI generation failed. Showing defaults."
AI_DISABLED_PLACEHOLDER = "Enable AI to generate rich documentation."
PROJECT_OVERVIEW_FILES = 10


class InsightFeature(Enum):
    DOCUMENTATION = "documentation_generation"
    REFACTORING = "refactoring_suggestions"
    SECURITY = "security_analysis"


class InsightProvider(Protocol):
    def complete(self, feature: InsightFeature, prompt: str) -> str: ...


class MockInsightProvider:
    """Offline provider returning stable text derived from the prompt."""

    def complete(self, feature: InsightFeature, prompt: str) -> str:
        digest = hashlib.sha1(prompt.encode("utf-8")).hexdigest()[:8]
        first_line = prompt.splitlines()[0] if prompt else ""
        return f"[mock {feature.value} {digest}] {first_line}"


class UnconfiguredInsightProvider:
    """Stands in when AI is enabled but no provider is available."""

    def complete(self, feature: InsightFeature, prompt: str) -> str:
        raise InternalError("ai", f"No insight provider configured for {feature.value}")


def create_provider(use_mock: bool) -> InsightProvider:
    if use_mock:
        return MockInsightProvider()
    logger.warning("No AI provider is configured; insights will fall back to defaults")
    return UnconfiguredInsightProvider()


@dataclass
class FileInsights:
    """Insight sections for one file, keyed by heading."""
    path: str
    sections: dict[str, str] = field(default_factory=dict)
    failed: bool = False


def _file_prompts(file: FileInfo) -> list[tuple[str, InsightFeature, str]]:
    title = f"File: {file.path}"
    return [
        ("Module Overview", InsightFeature.DOCUMENTATION, f"Module overview for {title}"),
        (
            "Function Docs",
            InsightFeature.DOCUMENTATION,
            f"Function docs for {title}: {len(file.symbols)} symbols",
        ),
        (
            "Refactoring Suggestions",
            InsightFeature.REFACTORING,
            f"Refactoring suggestions for {title}",
        ),
        ("Security Insights", InsightFeature.SECURITY, f"Security insights for {title}"),
    ]


def generate_file_insights(file: FileInfo, provider: InsightProvider) -> FileInsights:
    """Ask the provider for every section; any failure degrades the whole file."""
    insights = FileInsights(path=file.path)
    try:
        for heading, feature, prompt in _file_prompts(file):
            insights.sections[heading] = provider.complete(feature, prompt)
    except Exception as e:
        logger.warning(f"AI insights failed for {file.path}: {e}")
        return FileInsights(
            path=file.path, sections={"AI Insights": AI_FAILED_PLACEHOLDER}, failed=True
        )
    return insights


def project_overview_prompt(analysis: AnalysisResult) -> str:
    lines = [
        "Generate a documentation overview for the following codebase summary.",
        "Emphasize key modules, entry points, and notable flows.",
        "",
        "Project Overview:",
    ]
    for file in analysis.files[:PROJECT_OVERVIEW_FILES]:
        lines.append(f"- {file.path} ({len(file.symbols)} symbols, {file.lines} lines)")
    return "\n".join(lines)


def generate_project_insights(analysis: AnalysisResult, provider: InsightProvider) -> str:
    try:
        return provider.complete(InsightFeature.DOCUMENTATION, project_overview_prompt(analysis))
    except Exception as e:
        logger.warning(f"AI project overview failed: {e}")
        return AI_FAILED_PLACEHOLDER
