"""End-to-end documentation run: per-file diagrams, security insights and output files."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from .analysis.security_insights import SecurityInsightAnalyzer, SecurityInsights
from .analysis.security_trace import Vulnerability
from .config import WikiConfig
from .errors import InternalError
from .graph.node_types import AnalysisResult
from .insights import (
    AI_DISABLED_PLACEHOLDER,
    FileInsights,
    create_provider,
    generate_file_insights,
    generate_project_insights,
)
from .parsers.cfg_builder import CfgProvider, TreeSitterCfgBuilder
from .processing.parallel_processor import (
    FileDocumentation,
    FileDocumenter,
    ParallelProcessor,
)
from .utils.source_reader import SourceReader


@dataclass
class WikiReport:
    """Everything produced by one documentation run."""

    site_title: str
    analysis: AnalysisResult
    documents: list[FileDocumentation]
    skipped_files: list[str]
    security: SecurityInsights
    project_insights: str = AI_DISABLED_PLACEHOLDER
    file_insights: dict[str, FileInsights] = field(default_factory=dict)
    elapsed_time: float = 0.0


def sanitize_filename(path: str) -> str:
    return path.replace("/", "_").replace("\\", "_").replace("\n", "_").replace(" ", "_")


def diagram_filenames(doc: FileDocumentation) -> list[str]:
    """Names of the `.mmd` files written for `doc`, one per diagram."""
    name = sanitize_filename(doc.path)
    if len(doc.mermaid) == 1:
        return [f"{name}.mmd"]
    return [f"{name}_{i}.mmd" for i in range(len(doc.mermaid))]


class WikiGenerator:
    """Runs the diagram and security engines over an analyzed codebase."""

    def __init__(
        self,
        config: WikiConfig,
        reader: SourceReader | None = None,
        cfg_provider: CfgProvider | None = None,
        show_progress: bool = True,
    ):
        self.config = config
        self.reader = reader
        self.cfg_provider = cfg_provider if cfg_provider is not None else TreeSitterCfgBuilder()
        self.documenter = FileDocumenter(reader=reader, cfg_provider=self.cfg_provider)
        self.processor = ParallelProcessor(
            self.documenter,
            max_workers=config.max_workers,
            deadline_seconds=config.deadline_seconds,
            show_progress=show_progress,
        )
        self.security_analyzer = SecurityInsightAnalyzer(config.security)

    def generate(
        self, analysis: AnalysisResult, vulnerabilities: list[Vulnerability] | None = None
    ) -> WikiReport:
        logger.info(f"Generating documentation for {analysis.total_files} files")
        processing = self.processor.process_files(analysis.files)

        cfgs = {d.path: d.cfg for d in processing.documents if d.cfg is not None}
        categories = {d.path: d.owasp_categories for d in processing.documents if not d.error}
        security = self.security_analyzer.analyze(
            analysis,
            list(vulnerabilities or []),
            reader=self.reader,
            cfgs=cfgs,
            categories=categories,
        )

        report = WikiReport(
            site_title=self.config.site_title,
            analysis=analysis,
            documents=processing.documents,
            skipped_files=processing.skipped_files,
            security=security,
            elapsed_time=processing.elapsed_time,
        )

        if self.config.ai_enabled:
            provider = create_provider(self.config.ai_use_mock)
            report.project_insights = generate_project_insights(analysis, provider)
            for file in analysis.files:
                report.file_insights[file.path] = generate_file_insights(file, provider)

        if processing.failed_files:
            logger.warning(f"{len(processing.failed_files)} files degraded to class diagrams")
        return report

    def write(self, report: WikiReport) -> Path:
        """Write report.json, a search index and Mermaid files to the output directory."""
        out = self.config.output_dir
        diagrams_dir = out / "diagrams"
        security_dir = out / "security"
        diagrams_dir.mkdir(parents=True, exist_ok=True)
        security_dir.mkdir(parents=True, exist_ok=True)

        for doc in report.documents:
            for filename, mermaid in zip(diagram_filenames(doc), doc.mermaid):
                (diagrams_dir / filename).write_text(mermaid, encoding="utf-8")

        for trace_id, mermaid in report.security.trace_diagrams.items():
            (security_dir / f"{sanitize_filename(trace_id)}.mmd").write_text(
                mermaid, encoding="utf-8"
            )
        if report.security.hotspot_diagram is not None:
            (security_dir / "hotspots.mmd").write_text(
                report.security.hotspot_diagram, encoding="utf-8"
            )

        report_path = out / "report.json"
        self._write_json(report_path, report_to_dict(report, self.config.include_api_docs))
        self._write_json(out / "search_index.json", search_index(report))
        logger.info(f"Wrote documentation for {len(report.documents)} files to {out}")
        return report_path

    @staticmethod
    def _write_json(path: Path, data: Any) -> None:
        try:
            text = json.dumps(data, indent=2)
        except (TypeError, ValueError) as e:
            raise InternalError("wiki", f"Cannot serialize {path.name}: {e}") from e
        path.write_text(text, encoding="utf-8")


def search_index(report: WikiReport) -> list[dict[str, Any]]:
    """One entry per analyzed file; files skipped at the deadline list no diagrams."""
    written = {doc.path: diagram_filenames(doc) for doc in report.documents}
    return [
        {
            "title": file.path,
            "diagrams": [f"diagrams/{name}" for name in written.get(file.path, [])],
            "description": f"{len(file.symbols)} symbols, {file.lines} lines",
            "symbols": [s.name for s in file.symbols],
        }
        for file in report.analysis.files
    ]


def _trace_to_dict(trace) -> dict[str, Any]:
    return {
        "id": trace.id,
        "vulnerability": trace.source.id,
        "title": trace.source.title,
        "severity": trace.source.severity.value,
        "owasp_category": trace.source.owasp_category.value,
        "propagation_path": [
            {
                "function": site.function_name,
                "file": site.location.file,
                "start_line": site.location.start_line,
                "trust_boundary": site.context.trust_boundary.value,
                "requires_auth": site.context.requires_auth,
                "is_sanitized": site.context.is_sanitized,
            }
            for site in trace.propagation_path
        ],
        "impact_chain": [round(impact.score, 3) for impact in trace.impact_chain],
        "confidence": trace.confidence.value,
        "mitigations": list(trace.mitigations),
    }


def report_to_dict(report: WikiReport, include_api_docs: bool = True) -> dict[str, Any]:
    files = []
    symbols_by_path = {f.path: f.symbols for f in report.analysis.files}
    for doc in report.documents:
        entry: dict[str, Any] = {
            "path": doc.path,
            "shape": doc.shape.value,
            "diagrams": [d.kind for d in doc.descriptors],
            "signal_origin": doc.signal_origin.value if doc.signal_origin else None,
            "owasp_categories": [c.value for c in doc.owasp_categories],
            "error": doc.error,
        }
        if include_api_docs:
            entry["symbols"] = [
                {"name": s.name, "kind": s.kind.value} for s in symbols_by_path.get(doc.path, [])
            ]
        if doc.path in report.file_insights:
            entry["ai_insights"] = report.file_insights[doc.path].sections
        files.append(entry)

    security = report.security
    return {
        "site_title": report.site_title,
        "root_path": str(report.analysis.root_path),
        "total_files": report.analysis.total_files,
        "total_lines": report.analysis.total_lines,
        "files": files,
        "skipped_files": report.skipped_files,
        "ai_insights": report.project_insights,
        "security": {
            "traces": [_trace_to_dict(t) for t in security.traces],
            "hotspots": [
                {
                    "file": h.location.file,
                    "severity": h.severity.value,
                    "vulnerability_count": h.vulnerability_count,
                    "risk_score": h.risk_score,
                    "description": h.description,
                }
                for h in security.hotspots
            ],
            "owasp_recommendations": {
                path: {category.value: recs for category, recs in by_category.items()}
                for path, by_category in security.owasp_recommendations.items()
            },
        },
        "elapsed_time": round(report.elapsed_time, 3),
    }
