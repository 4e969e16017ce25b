"""Mermaid text for diagram descriptors, security traces and hotspots."""

import html

from ..analysis.hotspots import SecurityHotspot
from ..analysis.security_trace import SecurityTrace
from ..analysis.severity import Severity
from ..errors import InternalError
from .descriptors import (
    END_NODE_ID,
    START_NODE_ID,
    ClassDiagram,
    DiagramDescriptor,
    FlowchartDiagram,
    SequenceDiagram,
    SummaryDiagram,
)

HOTSPOT_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "orange",
    Severity.MEDIUM: "yellow",
}


def mm_text(text: str) -> str:
    """Escape text for a quoted Mermaid label."""
    return html.escape(text, quote=False).replace('"', "#quot;")


def flowchart_to_mermaid(diagram: FlowchartDiagram) -> str:
    lines = ["flowchart TB", f'  {START_NODE_ID}(["Start"])', f'  {END_NODE_ID}(["End"])']
    for node in diagram.nodes:
        lines.append(f'  {node.id}(["{mm_text(node.label)}"])')
    for edge in diagram.edges:
        if edge.label:
            lines.append(f"  {edge.source} -->|{edge.label}| {edge.target}")
        else:
            lines.append(f"  {edge.source} --> {edge.target}")
    return "\n".join(lines)


def sequence_to_mermaid(diagram: SequenceDiagram) -> str:
    lines = ["sequenceDiagram"]
    lines.extend(f"  participant {p}" for p in diagram.participants)
    lines.extend(f"  {caller}->>{callee}: call" for caller, callee in diagram.messages)
    return "\n".join(lines)


def class_to_mermaid(diagram: ClassDiagram) -> str:
    lines = ["classDiagram"]
    lines.extend(f"  class {name} {{}}" for name in diagram.classes)
    return "\n".join(lines)


def summary_to_mermaid(diagram: SummaryDiagram) -> str:
    lines = ["flowchart LR", f'  file(["{diagram.total_count} functions"])']
    for i, name in enumerate(diagram.shown):
        lines.append(f'  S{i}(["{mm_text(name)}"])')
        lines.append(f"  file --> S{i}")
    hidden = diagram.total_count - len(diagram.shown)
    if hidden > 0:
        lines.append(f'  more(["... {hidden} more"])')
        lines.append("  file --> more")
    return "\n".join(lines)


def to_mermaid(descriptor: DiagramDescriptor) -> str:
    """Render any diagram descriptor as Mermaid source."""
    if isinstance(descriptor, FlowchartDiagram):
        return flowchart_to_mermaid(descriptor)
    if isinstance(descriptor, SequenceDiagram):
        return sequence_to_mermaid(descriptor)
    if isinstance(descriptor, ClassDiagram):
        return class_to_mermaid(descriptor)
    if isinstance(descriptor, SummaryDiagram):
        return summary_to_mermaid(descriptor)
    raise InternalError("mermaid", f"Unsupported descriptor type: {type(descriptor).__name__}")


def trace_diagram(trace: SecurityTrace) -> str:
    """Vulnerability -> initial impact -> call sites, each with its decayed impact."""
    lines = [
        "graph TD",
        f'  A["{mm_text(trace.source.title)}"]',
        f'  A --> B["Impact: {trace.impact_chain[0].score:.1f}"]',
    ]
    for i, call_site in enumerate(trace.propagation_path):
        node_id = f"C{i}"
        lines.append(f'  {node_id}(["{mm_text(call_site.function_name)}"])')
        previous = "B" if i == 0 else f"C{i - 1}"
        lines.append(f"  {previous} --> {node_id}")
        if i + 1 < len(trace.impact_chain):
            impact_id = f"D{i}"
            lines.append(f'  {impact_id}["Impact: {trace.impact_chain[i + 1].score:.1f}"]')
            lines.append(f"  {node_id} --> {impact_id}")
    return "\n".join(lines)


def hotspot_diagram(hotspots: list[SecurityHotspot]) -> str:
    """One colored node per hotspot, in ranking order."""
    lines = ["graph TD"]
    for i, hotspot in enumerate(hotspots):
        color = HOTSPOT_COLORS.get(hotspot.severity, "green")
        lines.append(
            f'  H{i}["{mm_text(str(hotspot.location.file))}\\n'
            f"Risk: {hotspot.risk_score:.1f}\\n"
            f'Vulnerabilities: {hotspot.vulnerability_count}"]'
        )
        lines.append(f"  style H{i} fill:{color};")
    return "\n".join(lines)
