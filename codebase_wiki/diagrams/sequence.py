"""Sequence diagram rendering with CFG, heuristic and adjacency fallbacks."""

from loguru import logger

from ..errors import InputUnavailableError
from ..graph.node_types import FileInfo
from ..parsers.call_extraction import CallExtractionStrategy, PatternCallExtractor
from .descriptors import SequenceDiagram, safe_ident
from .signals import ControlFlowSignals, SignalOrigin


class SequenceRenderer:
    """Builds participants and caller->callee messages for a file."""

    def __init__(self, call_extractor: CallExtractionStrategy | None = None):
        self.call_extractor = call_extractor or PatternCallExtractor()

    def render(
        self,
        file: FileInfo,
        signals: ControlFlowSignals,
        source_text: str | None = None,
    ) -> SequenceDiagram:
        functions = [s.name for s in file.callables]
        participants = tuple(dict.fromkeys(safe_ident(name) for name in functions))

        messages = (
            self._messages_from_cfg(functions, signals)
            or self._messages_from_call_sites(file, functions, source_text)
            or self._messages_from_adjacency(functions)
        )
        return SequenceDiagram(participants=participants, messages=tuple(messages))

    def _messages_from_cfg(
        self, functions: list[str], signals: ControlFlowSignals
    ) -> list[tuple[str, str]]:
        # The flat CFG has no caller information, so every call is attributed
        # to the first declared function.
        if signals.origin != SignalOrigin.CFG or not signals.call_sequence or not functions:
            return []
        caller = safe_ident(functions[0])
        return [(caller, safe_ident(callee)) for callee in signals.call_sequence]

    def _messages_from_call_sites(
        self, file: FileInfo, functions: list[str], source_text: str | None
    ) -> list[tuple[str, str]]:
        if not source_text:
            return []
        try:
            call_sites = self.call_extractor.extract_calls(source_text, file.language)
        except InputUnavailableError as e:
            logger.debug(f"Call extraction unavailable for {file.path}: {e.reason}")
            return []

        known = set(functions)
        return [
            (safe_ident(site.caller), safe_ident(site.callee))
            for site in call_sites
            if site.caller in known and site.callee in known
        ]

    @staticmethod
    def _messages_from_adjacency(functions: list[str]) -> list[tuple[str, str]]:
        return [
            (safe_ident(first), safe_ident(second))
            for first, second in zip(functions, functions[1:])
        ]
