"""JSON loaders for analysis results and vulnerability lists."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from .analysis.owasp import OwaspCategory
from .analysis.security_trace import Vulnerability, VulnerabilityLocation
from .analysis.severity import Severity
from .errors import ConfigurationError, InputUnavailableError
from .graph.node_types import AnalysisResult, FileInfo, Symbol, SymbolKind


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputUnavailableError(str(path), str(e)) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def parse_analysis(data: dict[str, Any]) -> AnalysisResult:
    """Build an AnalysisResult from `{"root_path": ..., "files": [...]}`."""
    if not isinstance(data, dict) or not isinstance(data.get("files", []), list):
        raise ConfigurationError("Analysis JSON must be an object with a 'files' list")

    files = []
    for entry in data.get("files", []):
        try:
            symbols = [
                Symbol(name=str(s["name"]), kind=SymbolKind.parse(s.get("kind", "other")))
                for s in entry.get("symbols", [])
            ]
            files.append(
                FileInfo(
                    path=str(entry["path"]),
                    language=str(entry.get("language", "")),
                    symbols=symbols,
                    lines=int(entry.get("lines", 0)),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(f"Malformed file entry in analysis JSON: {e}") from e

    return AnalysisResult(root_path=Path(data.get("root_path", ".")), files=files)


def parse_vulnerability(entry: dict[str, Any]) -> Vulnerability:
    try:
        location = entry.get("location", {})
        start_line = int(location.get("start_line", 0))
        return Vulnerability(
            id=str(entry["id"]),
            title=str(entry.get("title", entry["id"])),
            severity=Severity.parse(entry["severity"]),
            owasp_category=OwaspCategory.parse(entry.get("owasp_category", "")),
            location=VulnerabilityLocation(
                file=str(location["file"]),
                function=location.get("function") or None,
                start_line=start_line,
                end_line=int(location.get("end_line", start_line)),
                column=int(location.get("column", 0)),
            ),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"Malformed vulnerability entry: {e}") from e


def load_analysis(path: str | Path) -> AnalysisResult:
    analysis = parse_analysis(_read_json(path))
    logger.info(f"Loaded analysis of {analysis.total_files} files from {path}")
    return analysis


def load_vulnerabilities(path: str | Path) -> list[Vulnerability]:
    """Load a JSON list of vulnerabilities, bare or under a "vulnerabilities" key."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("vulnerabilities", [])
    if not isinstance(data, list):
        raise ConfigurationError(f"Vulnerability JSON in {path} must be a list")

    vulnerabilities = [parse_vulnerability(entry) for entry in data]
    logger.info(f"Loaded {len(vulnerabilities)} vulnerabilities from {path}")
    return vulnerabilities
