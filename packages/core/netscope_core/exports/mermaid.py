"""Mermaid flowchart export for display graphs and node details."""

from __future__ import annotations

import re

from netscope_core.schemas import DisplayGraph, DisplayNode, NodeDetail

_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_]")

_CLASS_DEFS = {
    "node": "fill:white,stroke:#000000,color:#000000",
    "net": "fill:white,stroke:#CC0000,color:#CC0000",
    "pin": "fill:white,stroke:#AAAAAA,color:#AAAAAA",
    "source": "fill:white,stroke:#008000,color:#008000,stroke-width:2px",
    "target": "fill:white,stroke:#0000CC,color:#0000CC,stroke-width:2px",
}


def _safe_id(kind: str, name: str) -> str:
    return f"{kind}_{_UNSAFE_ID.sub('_', name)}"


def _safe_text(value: str | None, fallback: str = "") -> str:
    text = str(value or fallback).strip()
    if not text:
        text = fallback
    return text.replace('"', "'").replace("\n", " ").strip()


def _pin_label(pin_name: str, friendly_name: str | None) -> str:
    label = f"Pin {_safe_text(pin_name)}"
    if friendly_name:
        label += f" / {_safe_text(friendly_name)}"
    return label


def _node_label(node: DisplayNode) -> str:
    label = _safe_text(node.name)
    if node.part_name:
        label += f"<br/><small>({_safe_text(node.part_name)})</small>"
    return label


def render_display_graph(graph: DisplayGraph) -> str:
    """Render a display graph as a left-to-right Mermaid flowchart.

    Source and target nodes get their own classes so they stand out from
    interior nodes and nets.
    """
    lines = ["graph LR"]
    for style, definition in _CLASS_DEFS.items():
        lines.append(f"  classDef {style}Style {definition}")

    ids: dict[str, str] = {}
    for node in graph.nodes:
        node_id = _safe_id(node.type, node.name)
        ids.setdefault(node.name, node_id)
        lines.append(f'  {node_id}["{_node_label(node)}"]')
        lines.append(f"  class {node_id} {node.role or node.type}Style")

    for connection in graph.connections:
        from_id = ids.get(connection.from_, _safe_id("node", connection.from_))
        to_id = ids.get(connection.to, _safe_id("node", connection.to))
        label = _pin_label(connection.pin_name, connection.pin_friendly_name)
        lines.append(f'  {from_id} ---|"{label}"| {to_id}')

    return "\n".join(lines) + "\n"


def render_node_detail(detail: NodeDetail) -> str:
    """Render a node and its nets as a Mermaid flowchart.

    Pins are grouped by net; nets are split between the left and right side
    of the node.
    """
    node_id = _safe_id("node", detail.name)
    lines = [
        "graph LR",
        f"  classDef nodeStyle {_CLASS_DEFS['source']}",
        f"  classDef netStyle {_CLASS_DEFS['net']}",
        f'  {node_id}["{_safe_text(detail.name)}<br/><small>({_safe_text(detail.part.name)})</small>"]',
        f"  class {node_id} nodeStyle",
    ]

    by_net: dict[str, list[str]] = {}
    for pin in sorted(detail.pins, key=lambda p: p.pin_name):
        if pin.net is None:
            continue
        by_net.setdefault(pin.net.name, []).append(_pin_label(pin.pin_name, pin.pin_friendly_name))

    nets = list(by_net.items())
    split = (len(nets) + 1) // 2
    for side, group in (("L", nets[:split]), ("R", nets[split:])):
        for index, (net_name, labels) in enumerate(group):
            net_id = f"net{side}{index}"
            lines.append(f'  {net_id}["{_safe_text(net_name)}"]')
            lines.append(f"  class {net_id} netStyle")
            for label in labels:
                if side == "L":
                    lines.append(f'  {net_id} ---|"{label}"| {node_id}')
                else:
                    lines.append(f'  {node_id} ---|"{label}"| {net_id}')

    return "\n".join(lines) + "\n"
