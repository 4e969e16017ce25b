"""Input records supplied by the analysis and control-flow collaborators."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class SymbolKind(Enum):
    """Kind of a declared symbol."""

    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    STRUCT = "struct"
    TRAIT = "trait"
    INTERFACE = "interface"
    ENUM = "enum"
    MODULE = "module"
    CONSTANT = "constant"
    VARIABLE = "variable"
    OTHER = "other"

    @property
    def is_callable(self) -> bool:
        return self in (SymbolKind.FUNCTION, SymbolKind.METHOD)

    @classmethod
    def parse(cls, raw: "str | SymbolKind") -> "SymbolKind":
        """Map a collaborator's kind string ("fn", "function_item", "class") to a kind."""
        if isinstance(raw, SymbolKind):
            return raw
        value = str(raw).strip().lower()
        if value in _KIND_ALIASES:
            return _KIND_ALIASES[value]
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


_KIND_ALIASES = {
    "fn": SymbolKind.FUNCTION,
    "func": SymbolKind.FUNCTION,
    "function_item": SymbolKind.FUNCTION,
    "function_definition": SymbolKind.FUNCTION,
    "function_declaration": SymbolKind.FUNCTION,
    "async_function": SymbolKind.FUNCTION,
    "method_definition": SymbolKind.METHOD,
    "associated_function": SymbolKind.METHOD,
    "impl_fn": SymbolKind.METHOD,
    "class_definition": SymbolKind.CLASS,
    "class_declaration": SymbolKind.CLASS,
    "struct_item": SymbolKind.STRUCT,
    "trait_item": SymbolKind.TRAIT,
    "enum_item": SymbolKind.ENUM,
    "mod": SymbolKind.MODULE,
    "mod_item": SymbolKind.MODULE,
    "const": SymbolKind.CONSTANT,
    "static": SymbolKind.CONSTANT,
    "let": SymbolKind.VARIABLE,
    "var": SymbolKind.VARIABLE,
}


@dataclass(frozen=True)
class Symbol:
    """A symbol declared in a source file."""
    name: str
    kind: SymbolKind


@dataclass
class FileInfo:
    """A source file as reported by the analysis collaborator."""
    path: str
    language: str
    symbols: list[Symbol] = field(default_factory=list)
    lines: int = 0

    @property
    def callables(self) -> list[Symbol]:
        """Function and method symbols in declaration order."""
        return [s for s in self.symbols if s.kind.is_callable]


@dataclass
class AnalysisResult:
    """Analysis of a whole codebase."""
    root_path: Path
    files: list[FileInfo] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.lines for f in self.files)


LOOP_MARKERS = ("for", "while", "loop")
CONDITIONAL_MARKERS = ("if", "match", "switch", "conditional", "ternary")


@dataclass(frozen=True)
class BranchNode:
    """A decision point in the control-flow graph."""
    node_type: str  # syntax kind, e.g. "if_statement", "for_expression"

    @property
    def is_loop(self) -> bool:
        return any(marker in self.node_type for marker in LOOP_MARKERS)

    @property
    def is_conditional(self) -> bool:
        return not self.is_loop and any(
            marker in self.node_type for marker in CONDITIONAL_MARKERS
        )


@dataclass(frozen=True)
class CallNode:
    """A call expression in the control-flow graph."""
    function_name: str
    line_number: int = 0


@dataclass(frozen=True)
class OtherNode:
    """Any other control-flow node (entry, exit, return, statements)."""
    node_type: str = "statement"


CfgNode = BranchNode | CallNode | OtherNode


@dataclass(frozen=True)
class ControlFlowGraph:
    """Ordered control-flow nodes of one file."""
    nodes: tuple[CfgNode, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def decision_points(self) -> list[BranchNode]:
        """All branch and loop nodes, in order."""
        return [n for n in self.nodes if isinstance(n, BranchNode)]

    def call_sequence(self) -> list[str]:
        """Callee names in the order they appear."""
        return [n.function_name for n in self.nodes if isinstance(n, CallNode)]
