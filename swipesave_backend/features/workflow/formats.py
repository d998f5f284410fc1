"""Workflow format detection and the tagged GUI/API representation."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from ...shared import FormatError, WorkflowFormat

_NODE_ID_KEY_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class GuiWorkflow:
    """litegraph export: positional `widgets_values` plus link tuples."""

    document: dict[str, Any]
    nodes: list[Any] = field(default_factory=list)
    links: list[Any] = field(default_factory=list)
    kind: Literal["gui"] = "gui"


@dataclass(frozen=True)
class ApiWorkflow:
    """Execution graph: `{node_id: {class_type, inputs}}`."""

    graph: dict[str, Any]
    kind: Literal["api"] = "api"


ParsedWorkflow = Union[GuiWorkflow, ApiWorkflow]


def is_connection(value: Any) -> bool:
    """
    True for API-format link references: a 2-item `[str, int]` pair.

    A genuine data value shaped like this is indistinguishable from a link;
    it is treated as a link everywhere.
    """
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    src, slot = value[0], value[1]
    return isinstance(src, str) and isinstance(slot, int) and not isinstance(slot, bool)


def _is_api_node(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("class_type"), str)


def detect_format(doc: Any) -> WorkflowFormat:
    """Classify a document as GUI, API or unknown. Never raises."""
    if not isinstance(doc, dict):
        return WorkflowFormat.UNKNOWN
    if isinstance(doc.get("nodes"), list):
        return WorkflowFormat.GUI
    for key, value in doc.items():
        if isinstance(key, str) and _NODE_ID_KEY_RE.match(key) and _is_api_node(value):
            return WorkflowFormat.API
    return WorkflowFormat.UNKNOWN


def parse_workflow(doc: Any) -> ParsedWorkflow:
    """Detect the format once and wrap the document in its variant."""
    fmt = detect_format(doc)
    if fmt is WorkflowFormat.GUI:
        links = doc.get("links")
        return GuiWorkflow(document=doc, nodes=doc["nodes"], links=links if isinstance(links, list) else [])
    if fmt is WorkflowFormat.API:
        return ApiWorkflow(graph=doc)
    raise FormatError("Unrecognized workflow format: expected a GUI export (nodes/links) or an API prompt graph")


def parse_workflow_text(raw: Any) -> dict[str, Any] | None:
    """Accept a JSON string (PNG text chunk) or an already-decoded object."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def iter_api_nodes(graph: dict[str, Any]):
    """Yield `(node_id, node)` for every node-shaped entry of an API graph."""
    for node_id, node in graph.items():
        if _is_api_node(node):
            yield str(node_id), node


def node_inputs(node: Any) -> dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    ins = node.get("inputs")
    return ins if isinstance(ins, dict) else {}
