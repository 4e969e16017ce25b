"""Command-line entry point for generating codebase documentation."""

import argparse
import sys
from pathlib import Path

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.severity import Severity
from .config import WikiConfig, WikiConfigBuilder, load_config
from .errors import ConfigurationError, InputUnavailableError
from .loaders import load_analysis, load_vulnerabilities
from .parsers.symbol_extractor import SymbolExtractor
from .utils.source_reader import FileSystemSourceReader
from .wiki_generator import WikiGenerator, WikiReport

console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
    Severity.INFO: "dim",
}


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codebase-wiki",
        description="Generate diagram-rich documentation and security insights for a codebase",
    )
    parser.add_argument("repo_path", help="Path to the repository to document")
    parser.add_argument("-o", "--output", help="Output directory (default: <repo>/wiki)")
    parser.add_argument("--analysis", help="Pre-computed analysis result (JSON)")
    parser.add_argument("--vulnerabilities", help="Detected vulnerabilities (JSON)")
    parser.add_argument("--config", help="Configuration file (TOML or YAML)")
    parser.add_argument("--title", help="Site title")
    parser.add_argument("--workers", type=int, help="Number of worker threads")
    parser.add_argument("--deadline", type=float, help="Stop diagram generation after N seconds")
    parser.add_argument(
        "--min-severity", help="Minimum severity counted toward hotspots (default: medium)"
    )
    parser.add_argument("--ai", action="store_true", help="Generate AI documentation insights")
    parser.add_argument("--ai-mock", action="store_true", help="Use the offline mock AI provider")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def build_config(args: argparse.Namespace, repo_path: Path) -> WikiConfig:
    builder = load_config(args.config) if args.config else WikiConfigBuilder()
    if args.output:
        builder.with_output_dir(args.output)
    elif not builder.has_output_dir:
        builder.with_output_dir(repo_path / "wiki")
    if args.title:
        builder.with_site_title(args.title)
    if args.workers is not None:
        builder.with_max_workers(args.workers)
    if args.deadline is not None:
        builder.with_deadline(args.deadline)
    if args.min_severity:
        builder.with_min_hotspot_severity(args.min_severity)
    if args.ai or args.ai_mock:
        builder.with_ai_enabled(True)
    if args.ai_mock:
        builder.with_ai_mock(True)
    return builder.build()


def display_diagram_shapes(report: WikiReport) -> None:
    table = Table(title="Diagrams per File")
    table.add_column("File", style="cyan")
    table.add_column("Shape", style="bold")
    table.add_column("Signals")
    table.add_column("Error", style="red")

    for doc in report.documents:
        table.add_row(
            doc.path,
            doc.shape.value,
            doc.signal_origin.value if doc.signal_origin else "-",
            doc.error or "",
        )
    console.print(table)

    if report.skipped_files:
        console.print(
            f"[yellow]{len(report.skipped_files)} files skipped at the deadline[/yellow]"
        )


def display_hotspots(report: WikiReport) -> None:
    security = report.security
    console.print(Panel("[bold red]Security Insights[/bold red]", style="red"))
    console.print(
        f"Built [red]{len(security.traces)}[/red] security traces and "
        f"[yellow]{len(security.hotspots)}[/yellow] hotspots"
    )
    if not security.hotspots:
        return

    table = Table(title="Security Hotspots")
    table.add_column("File", style="cyan")
    table.add_column("Max Severity")
    table.add_column("Vulnerabilities", justify="right")
    table.add_column("Risk Score", justify="right")

    for hotspot in security.hotspots:
        style = SEVERITY_STYLES.get(hotspot.severity, "")
        table.add_row(
            str(hotspot.location.file),
            f"[{style}]{hotspot.severity.value}[/{style}]",
            str(hotspot.vulnerability_count),
            f"{hotspot.risk_score:.1f}",
        )
    console.print(table)


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    repo_path = Path(args.repo_path).resolve()
    if not repo_path.exists():
        console.print(f"[red]Error: Repository path does not exist: {repo_path}[/red]")
        return 1

    try:
        config = build_config(args, repo_path)
        analysis = (
            load_analysis(args.analysis)
            if args.analysis
            else SymbolExtractor(repo_path).analyze()
        )
        vulnerabilities = load_vulnerabilities(args.vulnerabilities) if args.vulnerabilities else []
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 1
    except InputUnavailableError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    console.print(
        Panel(
            f"[bold cyan]{config.site_title}[/bold cyan]\n"
            f"Repository: {repo_path}\n"
            f"Files: {analysis.total_files} ({analysis.total_lines} lines)\n"
            f"Vulnerabilities: {len(vulnerabilities)}",
            style="cyan",
        )
    )

    root = analysis.root_path if analysis.root_path.is_absolute() else repo_path
    reader = FileSystemSourceReader(root)
    generator = WikiGenerator(config, reader=reader, show_progress=not args.no_progress)
    report = generator.generate(analysis, vulnerabilities)
    report_path = generator.write(report)

    display_diagram_shapes(report)
    display_hotspots(report)
    console.print(f"\n[green]Documentation written to: {report_path.parent}[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
