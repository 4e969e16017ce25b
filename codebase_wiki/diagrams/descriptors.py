"""Rendering-agnostic diagram descriptors."""

from dataclasses import dataclass, field
from enum import Enum


class DiagramShape(Enum):
    """Diagram layout chosen for a file."""

    FLOWCHART_AND_SEQUENCE = "flowchart+sequence"
    FLOWCHART = "flowchart"
    SEQUENCE = "sequence"
    CLASS = "class"
    SUMMARY = "summary"


@dataclass(frozen=True)
class FlowNode:
    """A rendered flowchart node."""
    id: str
    label: str
    is_loop: bool = False
    is_branch: bool = False


@dataclass(frozen=True)
class FlowEdge:
    """A directed flowchart edge, optionally labelled ("repeat", "true", "false")."""
    source: str
    target: str
    label: str | None = None


START_NODE_ID = "start"
END_NODE_ID = "end"


@dataclass(frozen=True)
class FlowchartDiagram:
    """Control flow approximation.

    `nodes` holds the rendered body nodes only; the implicit terminals are
    referenced from `edges` as START_NODE_ID and END_NODE_ID.
    """
    nodes: tuple[FlowNode, ...] = ()
    edges: tuple[FlowEdge, ...] = ()
    from_cfg: bool = True

    @property
    def kind(self) -> str:
        return "flowchart"


@dataclass(frozen=True)
class SequenceDiagram:
    """Caller -> callee messages between diagram-safe participant identifiers."""
    participants: tuple[str, ...] = ()
    messages: tuple[tuple[str, str], ...] = ()

    @property
    def kind(self) -> str:
        return "sequence"


@dataclass(frozen=True)
class ClassDiagram:
    """Relationship stub listing the declared symbols."""
    classes: tuple[str, ...] = ()

    @property
    def kind(self) -> str:
        return "class"


@dataclass(frozen=True)
class SummaryDiagram:
    """Bounded listing used instead of structural diagrams for large files."""
    shown: tuple[str, ...] = ()
    total_count: int = 0

    @property
    def kind(self) -> str:
        return "summary"


DiagramDescriptor = FlowchartDiagram | SequenceDiagram | ClassDiagram | SummaryDiagram


@dataclass(frozen=True)
class FileDiagrams:
    """The diagrams chosen for one file."""
    path: str
    shape: DiagramShape
    descriptors: tuple[DiagramDescriptor, ...] = field(default_factory=tuple)


def anchorize(name: str) -> str:
    """Lowercase, separator-safe form of a symbol name for anchors."""
    return name.replace(" ", "-").replace(":", "-").lower()


def safe_ident(name: str) -> str:
    """Diagram identifier for a symbol name; the same name always maps to the same id."""
    return anchorize(name).replace("-", "_")


def class_ident(name: str) -> str:
    """Case-preserving class diagram identifier for a symbol name."""
    return name.replace(":", "_").replace(" ", "_")
