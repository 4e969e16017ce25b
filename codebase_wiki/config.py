"""Configuration for documentation and security insight generation."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import toml
import yaml
from loguru import logger

from .analysis.severity import Severity
from .errors import ConfigurationError


@dataclass
class SecurityWikiConfig:
    """Switches for the security trace and hotspot engines."""

    # Enable security trace analysis
    enable_trace_analysis: bool = True
    # Enable vulnerability propagation diagrams (needs trace analysis)
    enable_propagation_diagrams: bool = True
    # Enable per-file OWASP recommendations
    enable_owasp_recommendations: bool = True
    # Enable security hotspot ranking and visualization
    enable_hotspot_visualization: bool = True
    # Minimum severity for a vulnerability to count toward a hotspot
    min_hotspot_severity: Severity = Severity.MEDIUM


@dataclass
class WikiConfig:
    """Configuration for a documentation run."""

    output_dir: Path
    site_title: str = "Code Wiki"
    include_api_docs: bool = True
    ai_enabled: bool = False
    ai_use_mock: bool = False
    max_workers: int | None = None
    deadline_seconds: float | None = None
    security: SecurityWikiConfig = field(default_factory=SecurityWikiConfig)

    @staticmethod
    def builder() -> "WikiConfigBuilder":
        return WikiConfigBuilder()


class WikiConfigBuilder:
    """Fluent builder for WikiConfig."""

    def __init__(self):
        self._output_dir: Path | None = None
        self._site_title: str | None = None
        self._include_api_docs = True
        self._ai_enabled = False
        self._ai_use_mock = False
        self._max_workers: int | None = None
        self._deadline_seconds: float | None = None
        self._security = SecurityWikiConfig()

    @property
    def has_output_dir(self) -> bool:
        return self._output_dir is not None

    def with_site_title(self, title: str) -> "WikiConfigBuilder":
        self._site_title = title
        return self

    def with_output_dir(self, output_dir: str | Path) -> "WikiConfigBuilder":
        self._output_dir = Path(output_dir)
        return self

    def include_api_docs(self, yes: bool) -> "WikiConfigBuilder":
        self._include_api_docs = yes
        return self

    def with_ai_enabled(self, yes: bool) -> "WikiConfigBuilder":
        self._ai_enabled = yes
        return self

    def with_ai_mock(self, yes: bool) -> "WikiConfigBuilder":
        self._ai_use_mock = yes
        return self

    def with_max_workers(self, workers: int | None) -> "WikiConfigBuilder":
        if workers is not None and workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {workers}")
        self._max_workers = workers
        return self

    def with_deadline(self, seconds: float | None) -> "WikiConfigBuilder":
        if seconds is not None and seconds <= 0:
            raise ConfigurationError(f"deadline must be positive, got {seconds}")
        self._deadline_seconds = seconds
        return self

    def with_security(self, security: SecurityWikiConfig) -> "WikiConfigBuilder":
        self._security = security
        return self

    def with_min_hotspot_severity(self, severity: str | Severity) -> "WikiConfigBuilder":
        self._security.min_hotspot_severity = _parse_severity(severity)
        return self

    def build(self) -> WikiConfig:
        """Build the config; an output directory is required."""
        if self._output_dir is None:
            raise ConfigurationError(
                "WikiConfig requires an output directory; call with_output_dir()"
            )
        return WikiConfig(
            output_dir=self._output_dir,
            site_title=self._site_title or "Code Wiki",
            include_api_docs=self._include_api_docs,
            ai_enabled=self._ai_enabled,
            ai_use_mock=self._ai_use_mock,
            max_workers=self._max_workers,
            deadline_seconds=self._deadline_seconds,
            security=self._security,
        )


def _parse_severity(value: str | Severity) -> Severity:
    try:
        return Severity.parse(value)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def _read_config_file(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    try:
        if suffix == ".toml":
            data = toml.loads(text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            raise ConfigurationError(f"Unsupported config format: {path.suffix}")
    except (toml.TomlDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | Path) -> WikiConfigBuilder:
    """Load `[wiki]` and `[security]` sections from a TOML or YAML file.

    Returns a builder so command-line options can still override values.
    """
    path = Path(path)
    data = _read_config_file(path)
    wiki = data.get("wiki", {}) or {}
    security_data = data.get("security", {}) or {}

    builder = WikiConfigBuilder()
    if "output_dir" in wiki:
        builder.with_output_dir(wiki["output_dir"])
    if "site_title" in wiki:
        builder.with_site_title(str(wiki["site_title"]))
    if "include_api_docs" in wiki:
        builder.include_api_docs(bool(wiki["include_api_docs"]))
    if "ai_enabled" in wiki:
        builder.with_ai_enabled(bool(wiki["ai_enabled"]))
    if "ai_use_mock" in wiki:
        builder.with_ai_mock(bool(wiki["ai_use_mock"]))
    if "max_workers" in wiki:
        builder.with_max_workers(int(wiki["max_workers"]))
    if "deadline_seconds" in wiki:
        builder.with_deadline(float(wiki["deadline_seconds"]))

    security = SecurityWikiConfig()
    known = {f.name for f in fields(SecurityWikiConfig)}
    for key, value in security_data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown security option '{key}' in {path}")
            continue
        if key == "min_hotspot_severity":
            value = _parse_severity(value)
        else:
            value = bool(value)
        setattr(security, key, value)
    builder.with_security(security)

    logger.debug(f"Loaded configuration from {path}")
    return builder
