"""Test control-flow signal fallbacks and sequence message tiers."""

from unittest.mock import MagicMock

import pytest

from codebase_wiki.diagrams.sequence import SequenceRenderer
from codebase_wiki.diagrams.signals import (
    ControlFlowSignalExtractor,
    ControlFlowSignals,
    SignalOrigin,
    adjacency_signals,
)
from codebase_wiki.errors import InputUnavailableError
from codebase_wiki.graph.node_types import (
    BranchNode,
    CallNode,
    ControlFlowGraph,
    FileInfo,
    Symbol,
    SymbolKind,
)
from codebase_wiki.parsers.call_extraction import CallSite
from codebase_wiki.utils.source_reader import InMemorySourceReader


@pytest.fixture
def two_function_file():
    return FileInfo(
        path="service.py",
        language="python",
        symbols=[
            Symbol("Service", SymbolKind.CLASS),
            Symbol("start", SymbolKind.METHOD),
            Symbol("stop", SymbolKind.METHOD),
        ],
    )


class TestSignalExtraction:
    """Test the CFG, heuristic and adjacency tiers."""

    def test_supplied_cfg_wins(self, two_function_file):
        cfg = ControlFlowGraph(nodes=(BranchNode("while_statement"), CallNode("stop")))
        signals = ControlFlowSignalExtractor().extract(two_function_file, cfg=cfg)
        assert signals == ControlFlowSignals(True, ("stop",), SignalOrigin.CFG)

    def test_cfg_built_from_reader_text(self, two_function_file):
        provider = MagicMock()
        provider.build.return_value = ControlFlowGraph(nodes=(CallNode("stop"),))
        reader = InMemorySourceReader({"service.py": "def start():\n    stop()\n"})
        signals = ControlFlowSignalExtractor(reader=reader, cfg_provider=provider).extract(
            two_function_file
        )
        provider.build.assert_called_once_with("def start():\n    stop()\n", "python")
        assert signals.origin == SignalOrigin.CFG
        assert signals.call_sequence == ("stop",)
        assert signals.has_decision_point is False

    def test_failed_cfg_build_uses_heuristics(self, two_function_file):
        provider = MagicMock()
        provider.build.side_effect = InputUnavailableError("python", "no grammar")
        text = "def start():\n    if ready:\n        stop()\n"
        signals = ControlFlowSignalExtractor(cfg_provider=provider).extract(
            two_function_file, source_text=text
        )
        assert signals.origin == SignalOrigin.HEURISTIC
        assert signals.has_decision_point is True
        assert signals.call_sequence == ("stop",)

    def test_keywords_in_comments_are_ignored(self, two_function_file):
        text = "def start():\n    # if this were a loop\n    stop()  // for later\n"
        signals = ControlFlowSignalExtractor().extract(two_function_file, source_text=text)
        assert signals.origin == SignalOrigin.HEURISTIC
        assert signals.has_decision_point is False

    def test_unreadable_file_uses_adjacency(self, two_function_file):
        reader = InMemorySourceReader({})
        signals = ControlFlowSignalExtractor(reader=reader).extract(two_function_file)
        assert signals == adjacency_signals(two_function_file)
        assert signals.origin == SignalOrigin.ADJACENCY
        assert signals.call_sequence == ("stop",)

    def test_unexpected_failure_uses_adjacency(self, two_function_file):
        extractor = MagicMock()
        extractor.extract_calls.side_effect = RuntimeError("boom")
        signals = ControlFlowSignalExtractor(call_extractor=extractor).extract(
            two_function_file, source_text="def start(): pass"
        )
        assert signals.origin == SignalOrigin.ADJACENCY


class TestSequenceRenderer:
    """Test the three message tiers."""

    def test_cfg_calls_attributed_to_first_function(self, two_function_file):
        signals = ControlFlowSignals(False, ("stop", "Logger::flush"), SignalOrigin.CFG)
        diagram = SequenceRenderer().render(two_function_file, signals)
        assert diagram.participants == ("start", "stop")
        assert diagram.messages == (("start", "stop"), ("start", "logger__flush"))

    def test_call_sites_filtered_to_known_functions(self, two_function_file):
        extractor = MagicMock()
        extractor.extract_calls.return_value = [
            CallSite("start", "stop"),
            CallSite("start", "print"),
            CallSite("helper", "stop"),
        ]
        signals = ControlFlowSignals(False, (), SignalOrigin.HEURISTIC)
        diagram = SequenceRenderer(call_extractor=extractor).render(
            two_function_file, signals, source_text="..."
        )
        assert diagram.messages == (("start", "stop"),)

    def test_pattern_extraction_on_source_text(self, two_function_file):
        text = "class Service:\n    def start(self):\n        self.stop()\n\n    def stop(self):\n        pass\n"
        signals = ControlFlowSignals(False, (), SignalOrigin.HEURISTIC)
        diagram = SequenceRenderer().render(two_function_file, signals, source_text=text)
        assert diagram.messages == (("start", "stop"),)

    def test_adjacency_when_nothing_else(self, two_function_file):
        signals = ControlFlowSignals(False, (), SignalOrigin.ADJACENCY)
        diagram = SequenceRenderer().render(two_function_file, signals)
        assert diagram.messages == (("start", "stop"),)

    def test_participants_are_deduplicated(self):
        file = FileInfo(
            path="x.rs",
            language="rust",
            symbols=[
                Symbol("new", SymbolKind.METHOD),
                Symbol("new", SymbolKind.METHOD),
                Symbol("Parse:Input", SymbolKind.FUNCTION),
            ],
        )
        diagram = SequenceRenderer().render(file, ControlFlowSignals(False, (), SignalOrigin.ADJACENCY))
        assert diagram.participants == ("new", "parse_input")
