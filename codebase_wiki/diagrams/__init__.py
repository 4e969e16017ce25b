"""Diagram selection, rendering and Mermaid serialization."""

from .descriptors import (
    ClassDiagram,
    DiagramShape,
    FileDiagrams,
    FlowchartDiagram,
    SequenceDiagram,
    SummaryDiagram,
)
from .flowchart import FlowchartRenderer
from .mermaid import to_mermaid
from .selector import DiagramSelector
from .sequence import SequenceRenderer
from .signals import ControlFlowSignalExtractor, ControlFlowSignals, SignalOrigin

__all__ = [
    "ClassDiagram",
    "ControlFlowSignalExtractor",
    "ControlFlowSignals",
    "DiagramSelector",
    "DiagramShape",
    "FileDiagrams",
    "FlowchartDiagram",
    "FlowchartRenderer",
    "SequenceDiagram",
    "SequenceRenderer",
    "SignalOrigin",
    "SummaryDiagram",
    "to_mermaid",
]
