"""Control-flow signals used to choose a file's diagram shape."""

import re
from dataclasses import dataclass
from enum import Enum

from loguru import logger

from ..errors import InputUnavailableError
from ..graph.node_types import ControlFlowGraph, FileInfo
from ..parsers.call_extraction import CallExtractionStrategy, PatternCallExtractor
from ..parsers.cfg_builder import CfgProvider
from ..utils.source_reader import SourceReader

# if/match/switch and while/for/loop families across python, javascript and rust
BRANCH_KEYWORD_PATTERN = re.compile(r"\b(?:if|match|switch|while|for|loop|do)\b")
COMMENT_PATTERN = re.compile(r"(?m)(?:#|//).*$")


class SignalOrigin(Enum):
    """Which fallback tier produced a set of signals."""

    CFG = "cfg"
    HEURISTIC = "heuristic"
    ADJACENCY = "adjacency"


@dataclass(frozen=True)
class ControlFlowSignals:
    """Branching and call information for one file."""
    has_decision_point: bool
    call_sequence: tuple[str, ...] = ()
    origin: SignalOrigin = SignalOrigin.CFG


def adjacency_signals(file: FileInfo) -> ControlFlowSignals:
    """Weakest signals: no branching, each function 'calls' the next one declared."""
    names = tuple(s.name for s in file.callables[1:])
    return ControlFlowSignals(
        has_decision_point=False, call_sequence=names, origin=SignalOrigin.ADJACENCY
    )


class ControlFlowSignalExtractor:
    """Derives ControlFlowSignals from a CFG, falling back to text heuristics.

    Tiers, first available wins: the supplied or built CFG, a keyword and
    call-shape scan of the file text, then symbol adjacency. Extraction never
    raises.
    """

    def __init__(
        self,
        reader: SourceReader | None = None,
        cfg_provider: CfgProvider | None = None,
        call_extractor: CallExtractionStrategy | None = None,
    ):
        self.reader = reader
        self.cfg_provider = cfg_provider
        self.call_extractor = call_extractor or PatternCallExtractor()

    def extract(
        self,
        file: FileInfo,
        cfg: ControlFlowGraph | None = None,
        source_text: str | None = None,
    ) -> ControlFlowSignals:
        try:
            if cfg is not None and not cfg.is_empty:
                return self.from_cfg(cfg)

            text = source_text if source_text is not None else self._read(file)
            if text is None:
                return adjacency_signals(file)

            if cfg is None:
                cfg = self._build_cfg(file, text)
                if cfg is not None and not cfg.is_empty:
                    return self.from_cfg(cfg)

            return self._heuristic_signals(file, text)
        except Exception as e:
            logger.debug(f"Signal extraction failed for {file.path}, using symbol adjacency: {e}")
            return adjacency_signals(file)

    @staticmethod
    def from_cfg(cfg: ControlFlowGraph) -> ControlFlowSignals:
        return ControlFlowSignals(
            has_decision_point=bool(cfg.decision_points()),
            call_sequence=tuple(cfg.call_sequence()),
            origin=SignalOrigin.CFG,
        )

    def _read(self, file: FileInfo) -> str | None:
        if self.reader is None:
            return None
        try:
            return self.reader.read(file.path)
        except InputUnavailableError as e:
            logger.debug(f"No source text for {file.path}: {e.reason}")
            return None

    def _build_cfg(self, file: FileInfo, text: str) -> ControlFlowGraph | None:
        if self.cfg_provider is None:
            return None
        try:
            return self.cfg_provider.build(text, file.language)
        except InputUnavailableError as e:
            logger.debug(f"CFG unavailable for {file.path}: {e.reason}")
            return None

    def _heuristic_signals(self, file: FileInfo, text: str) -> ControlFlowSignals:
        code = COMMENT_PATTERN.sub("", text)
        has_branch = BRANCH_KEYWORD_PATTERN.search(code) is not None

        try:
            calls = self.call_extractor.extract_calls(code, file.language)
        except InputUnavailableError as e:
            logger.debug(f"Call extraction unavailable for {file.path}: {e.reason}")
            calls = []

        return ControlFlowSignals(
            has_decision_point=has_branch,
            call_sequence=tuple(c.callee for c in calls),
            origin=SignalOrigin.HEURISTIC,
        )
