"""Flowchart rendering from control-flow graph nodes."""

from loguru import logger

from ..graph.node_types import BranchNode, CallNode, ControlFlowGraph, Symbol
from .descriptors import END_NODE_ID, START_NODE_ID, FlowchartDiagram, FlowEdge, FlowNode

MAX_FLOWCHART_NODES = 15
CALL_LABEL_WIDTH = 32


def truncate_label(text: str, width: int = CALL_LABEL_WIDTH) -> str:
    """Shorten `text` to `width` characters, marking the cut with '...'."""
    if len(text) <= width:
        return text
    return text[: max(width - 3, 0)] + "..."


class FlowchartRenderer:
    """Renders CFG nodes into a capped flowchart.

    Edges follow node order, so the result approximates control flow: loop
    nodes get a "repeat" self edge and a conditional's incoming edge is drawn
    twice, labelled "true" and "false", without resolving which successor each
    branch actually reaches.
    """

    def __init__(self, max_nodes: int = MAX_FLOWCHART_NODES, label_width: int = CALL_LABEL_WIDTH):
        self.max_nodes = max_nodes
        self.label_width = label_width

    def render(self, cfg: ControlFlowGraph | None, symbols: list[Symbol]) -> FlowchartDiagram:
        """Render `cfg`, or a symbol-ordered flow when it has nothing renderable."""
        if cfg is not None:
            diagram = self._render_cfg(cfg)
            if diagram.nodes:
                return diagram
        logger.debug("No renderable CFG nodes, using symbol-ordered flow")
        return self.render_symbol_flow(symbols)

    def _render_cfg(self, cfg: ControlFlowGraph) -> FlowchartDiagram:
        nodes: list[FlowNode] = []
        edges: list[FlowEdge] = []

        for cfg_node in cfg.nodes:
            if len(nodes) >= self.max_nodes:
                break

            node_id = f"N{len(nodes)}"
            previous_id = nodes[-1].id if nodes else START_NODE_ID

            if isinstance(cfg_node, BranchNode):
                nodes.append(
                    FlowNode(
                        id=node_id,
                        label=cfg_node.node_type,
                        is_loop=cfg_node.is_loop,
                        is_branch=True,
                    )
                )
                if cfg_node.is_loop:
                    edges.append(FlowEdge(node_id, node_id, "repeat"))
                if cfg_node.is_conditional:
                    edges.append(FlowEdge(previous_id, node_id, "true"))
                    edges.append(FlowEdge(previous_id, node_id, "false"))
                else:
                    edges.append(FlowEdge(previous_id, node_id))
            elif isinstance(cfg_node, CallNode):
                label = truncate_label(f"call:{cfg_node.function_name}", self.label_width)
                nodes.append(FlowNode(id=node_id, label=label))
                edges.append(FlowEdge(previous_id, node_id))

        if nodes:
            edges.append(FlowEdge(nodes[-1].id, END_NODE_ID))
        return FlowchartDiagram(nodes=tuple(nodes), edges=tuple(edges), from_cfg=True)

    def render_symbol_flow(self, symbols: list[Symbol]) -> FlowchartDiagram:
        """Synthetic flow: start -> each symbol in declaration order -> end."""
        nodes = [
            FlowNode(id=f"F{i}", label=symbol.name)
            for i, symbol in enumerate(symbols[: self.max_nodes])
        ]
        edges = []
        previous_id = START_NODE_ID
        for node in nodes:
            edges.append(FlowEdge(previous_id, node.id))
            previous_id = node.id
        edges.append(FlowEdge(previous_id, END_NODE_ID))
        return FlowchartDiagram(nodes=tuple(nodes), edges=tuple(edges), from_cfg=False)
