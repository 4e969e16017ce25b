"""Test flowchart rendering from control-flow graphs."""

from codebase_wiki.diagrams.descriptors import END_NODE_ID, START_NODE_ID
from codebase_wiki.diagrams.flowchart import (
    MAX_FLOWCHART_NODES,
    FlowchartRenderer,
    truncate_label,
)
from codebase_wiki.graph.node_types import (
    BranchNode,
    CallNode,
    ControlFlowGraph,
    OtherNode,
    Symbol,
    SymbolKind,
)


def cfg(*nodes):
    return ControlFlowGraph(nodes=tuple(nodes))


class TestFlowchartRenderer:
    """Test node capping, loop edges and branch labelling."""

    def test_node_cap(self):
        nodes = [CallNode(f"fn_{i}") for i in range(40)] + [BranchNode("if_statement")] * 10
        diagram = FlowchartRenderer().render(cfg(*nodes), [])
        assert len(diagram.nodes) <= MAX_FLOWCHART_NODES
        assert len(diagram.nodes) == 15

    def test_loop_gets_self_edge(self):
        diagram = FlowchartRenderer().render(cfg(BranchNode("for_statement")), [])
        loop = diagram.nodes[0]
        assert loop.is_loop and loop.is_branch
        assert any(
            e.source == loop.id and e.target == loop.id and e.label == "repeat"
            for e in diagram.edges
        )

    def test_conditional_gets_true_and_false_edges(self):
        diagram = FlowchartRenderer().render(
            cfg(CallNode("setup"), BranchNode("if_statement"), CallNode("finish")), []
        )
        labels = {(e.source, e.target): [] for e in diagram.edges}
        for e in diagram.edges:
            labels[(e.source, e.target)].append(e.label)
        assert sorted(labels[("N0", "N1")]) == ["false", "true"]
        assert labels[("N1", "N2")] == [None]
        assert (START_NODE_ID, "N0") in labels
        assert ("N2", END_NODE_ID) in labels

    def test_first_conditional_labels_edges_from_start(self):
        diagram = FlowchartRenderer().render(cfg(BranchNode("if_expression")), [])
        labelled = [e.label for e in diagram.edges if e.source == START_NODE_ID]
        assert sorted(labelled) == ["false", "true"]

    def test_other_nodes_are_not_rendered(self):
        diagram = FlowchartRenderer().render(
            cfg(OtherNode("function_definition"), CallNode("work"), OtherNode("return_statement")),
            [],
        )
        assert [n.label for n in diagram.nodes] == ["call:work"]
        assert diagram.from_cfg

    def test_call_labels_are_truncated(self):
        name = "a_really_long_function_name_that_keeps_going"
        diagram = FlowchartRenderer().render(cfg(CallNode(name)), [])
        label = diagram.nodes[0].label
        assert len(label) == 32
        assert label.endswith("...")
        assert label.startswith("call:a_really")

    def test_symbol_flow_fallback(self):
        symbols = [Symbol("main", SymbolKind.FUNCTION), Symbol("Config", SymbolKind.CLASS)]
        diagram = FlowchartRenderer().render(None, symbols)
        assert not diagram.from_cfg
        assert [n.id for n in diagram.nodes] == ["F0", "F1"]
        assert [(e.source, e.target) for e in diagram.edges] == [
            (START_NODE_ID, "F0"),
            ("F0", "F1"),
            ("F1", END_NODE_ID),
        ]

    def test_cfg_with_only_other_nodes_falls_back(self):
        diagram = FlowchartRenderer().render(
            cfg(OtherNode()), [Symbol("only", SymbolKind.FUNCTION)]
        )
        assert [n.label for n in diagram.nodes] == ["only"]

    def test_symbol_flow_is_capped(self):
        symbols = [Symbol(f"s{i}", SymbolKind.FUNCTION) for i in range(30)]
        diagram = FlowchartRenderer().render_symbol_flow(symbols)
        assert len(diagram.nodes) == MAX_FLOWCHART_NODES


class TestTruncateLabel:
    def test_short_text_unchanged(self):
        assert truncate_label("call:x") == "call:x"

    def test_exact_width_unchanged(self):
        assert truncate_label("x" * 32) == "x" * 32
