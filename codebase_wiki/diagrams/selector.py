"""Per-file diagram shape selection."""

from loguru import logger

from ..graph.node_types import ControlFlowGraph, FileInfo
from .descriptors import (
    ClassDiagram,
    DiagramDescriptor,
    DiagramShape,
    FileDiagrams,
    SummaryDiagram,
    class_ident,
)
from .flowchart import FlowchartRenderer
from .sequence import SequenceRenderer
from .signals import ControlFlowSignals

LARGE_FILE_FUNCTION_THRESHOLD = 20
SUMMARY_SIZE = 10


class DiagramSelector:
    """Chooses and renders the diagram(s) that best describe a file.

    | branching | >= 2 functions | shape                  |
    |-----------|----------------|------------------------|
    | yes       | yes            | flowchart + sequence   |
    | yes       | no             | flowchart              |
    | no        | yes            | sequence               |
    | no        | no             | class/module diagram   |

    Files with more than `large_file_threshold` functions get a summary
    instead, regardless of the table.
    """

    def __init__(
        self,
        flowchart_renderer: FlowchartRenderer | None = None,
        sequence_renderer: SequenceRenderer | None = None,
        large_file_threshold: int = LARGE_FILE_FUNCTION_THRESHOLD,
        summary_size: int = SUMMARY_SIZE,
    ):
        self.flowchart_renderer = flowchart_renderer or FlowchartRenderer()
        self.sequence_renderer = sequence_renderer or SequenceRenderer()
        self.large_file_threshold = large_file_threshold
        self.summary_size = summary_size

    def select(self, file: FileInfo, signals: ControlFlowSignals) -> DiagramShape:
        function_count = len(file.callables)
        if function_count > self.large_file_threshold:
            return DiagramShape.SUMMARY

        multi_function = function_count >= 2
        if signals.has_decision_point and multi_function:
            return DiagramShape.FLOWCHART_AND_SEQUENCE
        if signals.has_decision_point:
            return DiagramShape.FLOWCHART
        if multi_function:
            return DiagramShape.SEQUENCE
        return DiagramShape.CLASS

    def render(
        self,
        file: FileInfo,
        signals: ControlFlowSignals,
        cfg: ControlFlowGraph | None = None,
        source_text: str | None = None,
    ) -> FileDiagrams:
        """Select a shape for `file` and build its descriptors."""
        shape = self.select(file, signals)
        logger.debug(f"{file.path}: {shape.value} ({signals.origin.value} signals)")

        descriptors: list[DiagramDescriptor] = []
        if shape == DiagramShape.SUMMARY:
            descriptors.append(self.summary(file))
        elif shape == DiagramShape.CLASS:
            descriptors.append(self.class_diagram(file))
        else:
            if shape in (DiagramShape.FLOWCHART_AND_SEQUENCE, DiagramShape.FLOWCHART):
                descriptors.append(self.flowchart_renderer.render(cfg, file.symbols))
            if shape in (DiagramShape.FLOWCHART_AND_SEQUENCE, DiagramShape.SEQUENCE):
                descriptors.append(self.sequence_renderer.render(file, signals, source_text))

        return FileDiagrams(path=file.path, shape=shape, descriptors=tuple(descriptors))

    @staticmethod
    def class_diagram(file: FileInfo) -> ClassDiagram:
        """Relationship stub with one entry per declared symbol."""
        return ClassDiagram(classes=tuple(dict.fromkeys(class_ident(s.name) for s in file.symbols)))

    def summary(self, file: FileInfo) -> SummaryDiagram:
        functions = file.callables
        return SummaryDiagram(
            shown=tuple(s.name for s in functions[: self.summary_size]),
            total_count=len(functions),
        )
