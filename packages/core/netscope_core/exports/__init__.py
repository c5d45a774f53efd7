"""Text exports of query results."""

from netscope_core.exports.mermaid import render_display_graph, render_node_detail

__all__ = ["render_display_graph", "render_node_detail"]
