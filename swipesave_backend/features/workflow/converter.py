"""GUI (litegraph export) -> API (execution prompt) conversion."""

from __future__ import annotations

from typing import Any

from ...shared import ConversionError, get_logger
from .node_schema import NodeSchemaResolver, UnmappedNodeWarning, default_resolver

logger = get_logger(__name__)

LINK_ARITY = 6


def _node_label(node: Any) -> tuple[Any, Any]:
    if not isinstance(node, dict):
        return None, None
    return node.get("id"), node.get("type")


def _validate_nodes(gui_doc: Any) -> list[dict[str, Any]]:
    if not isinstance(gui_doc, dict):
        raise ConversionError("Workflow must be a JSON object")
    nodes = gui_doc.get("nodes")
    if not isinstance(nodes, list):
        raise ConversionError("GUI workflow has no 'nodes' list")
    for position, node in enumerate(nodes):
        if not isinstance(node, dict):
            raise ConversionError(f"Node entry #{position} is not an object")
        node_id, node_type = _node_label(node)
        if node_id is None or isinstance(node_id, bool) or isinstance(node_id, (list, dict)):
            raise ConversionError("Node has no usable id", node_id=node_id, node_type=node_type)
        if not isinstance(node_type, str) or not node_type:
            raise ConversionError("Node has no type", node_id=node_id, node_type=node_type)
    return nodes


def _index_links_by_target(links: Any) -> dict[str, list[list[Any]]]:
    by_target: dict[str, list[list[Any]]] = {}
    if links is None:
        return by_target
    if not isinstance(links, list):
        raise ConversionError("GUI workflow 'links' must be a list")
    for link in links:
        if not isinstance(link, (list, tuple)) or len(link) < LINK_ARITY:
            logger.warning("Skipping malformed link %r (expected %d fields)", link, LINK_ARITY)
            continue
        by_target.setdefault(str(link[3]), []).append(list(link))
    return by_target


def _apply_widget_values(
    node: dict[str, Any],
    inputs: dict[str, Any],
    resolver: NodeSchemaResolver,
    warnings: list[UnmappedNodeWarning],
) -> None:
    widgets = node.get("widgets_values")
    if isinstance(widgets, dict):
        # Some custom nodes (VHS) serialize widgets as a name -> value map.
        for key, value in widgets.items():
            inputs[str(key)] = value
        return
    if not isinstance(widgets, list):
        return
    node_type = node["type"]
    for index, value in enumerate(widgets):
        if resolver.is_ignored_widget(node_type, index):
            continue
        name = resolver.widget_input_name(node_type, index)
        if name is None:
            continue
        if not resolver.is_mapped_widget(node_type, index):
            warnings.append(UnmappedNodeWarning(node.get("id"), node_type, "widget", index, name))
        inputs[name] = value


def _apply_links(
    node: dict[str, Any],
    inputs: dict[str, Any],
    incoming: list[list[Any]],
    resolver: NodeSchemaResolver,
    warnings: list[UnmappedNodeWarning],
) -> None:
    node_type = node["type"]
    for link in incoming:
        _link_id, src_id, src_slot, _target_id, target_slot, type_tag = link[:LINK_ARITY]
        try:
            slot = int(target_slot)
        except (TypeError, ValueError):
            logger.warning("Skipping link %r with non-integer target slot", link)
            continue
        name = resolver.connection_input_name(node_type, slot, type_tag)
        if name is None:
            logger.debug("Ignoring connection for %s node %s slot %s", node_type, node.get("id"), slot)
            continue
        if not resolver.is_mapped_connection(node_type, slot, type_tag):
            warnings.append(UnmappedNodeWarning(node.get("id"), node_type, "connection", slot, name))
        inputs[name] = [str(src_id), src_slot]


def convert_node(
    node: dict[str, Any],
    incoming: list[list[Any]],
    resolver: NodeSchemaResolver,
    warnings: list[UnmappedNodeWarning],
) -> dict[str, Any]:
    inputs: dict[str, Any] = {}
    _apply_widget_values(node, inputs, resolver, warnings)
    # Links after widgets: a converted widget fed by a link must override its stale value.
    _apply_links(node, inputs, incoming, resolver, warnings)
    converted: dict[str, Any] = {"class_type": node["type"], "inputs": inputs}
    title = node.get("title")
    if isinstance(title, str) and title:
        converted["_meta"] = {"title": title}
    return converted


def convert_gui_to_api(
    gui_doc: Any,
    resolver: NodeSchemaResolver | None = None,
    warnings: list[UnmappedNodeWarning] | None = None,
) -> dict[str, Any]:
    """
    Rewrite a GUI workflow into an API prompt graph.

    Pure: the input document is not modified. Layout (`pos`, `size`) is
    dropped. Slots that fall back to synthesized names are appended to
    `warnings` when a list is supplied, and always logged.

    Raises:
        ConversionError: `nodes` missing/malformed or a node without id/type.
    """
    resolver = resolver or default_resolver()
    nodes = _validate_nodes(gui_doc)
    links_by_target = _index_links_by_target(gui_doc.get("links"))
    node_ids = {str(node["id"]) for node in nodes}
    for target_id in sorted(set(links_by_target) - node_ids):
        dangling = [link[0] for link in links_by_target.pop(target_id)]
        logger.warning("Skipping links %s: target node %s is not in the workflow", dangling, target_id)
    collected: list[UnmappedNodeWarning] = []

    api: dict[str, Any] = {}
    for node in nodes:
        node_id = str(node["id"])
        api[node_id] = convert_node(node, links_by_target.get(node_id, []), resolver, collected)

    for warning in collected:
        logger.warning("UnmappedNodeWarning: %s", warning)
    if warnings is not None:
        warnings.extend(collected)

    logger.debug("Converted GUI workflow to API format: %d nodes", len(api))
    return api
