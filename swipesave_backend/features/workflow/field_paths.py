"""
Dotted-path access into workflow documents.

Paths are the ones emitted by the field classifier:
`nodes.{index}.widgets_values.{i}` for GUI documents and
`{node_id}.inputs.{name}` for API graphs. Input names may themselves contain
dots or spaces, so dict lookups prefer the longest key that matches.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ...shared import get_logger
from .formats import GuiWorkflow, parse_workflow
from .node_schema import NodeSchemaResolver, default_resolver, is_synthesized_widget_name

logger = get_logger(__name__)

_MISSING = object()


def _split(path: Any) -> list[str]:
    if not isinstance(path, str) or not path.strip():
        raise ValueError("Field path must be a non-empty string")
    return path.split(".")


def _dict_key(container: dict[str, Any], parts: list[str], start: int) -> tuple[str, int] | None:
    # Longest match first so "a.b" wins over "a" when both exist.
    for end in range(len(parts), start, -1):
        candidate = ".".join(parts[start:end])
        if candidate in container:
            return candidate, end
    return None


def _list_index(container: list[Any], token: str) -> int | None:
    try:
        index = int(token)
    except ValueError:
        return None
    if 0 <= index < len(container):
        return index
    return None


def _resolve_parent(doc: Any, parts: list[str]) -> tuple[Any, Any] | None:
    """Walk to the container holding the last segment; returns (container, key)."""
    current = doc
    pos = 0
    while pos < len(parts):
        if isinstance(current, dict):
            found = _dict_key(current, parts, pos)
            if found is None:
                # Only a trailing key (or an input name under `inputs`) may be created.
                if pos == len(parts) - 1 or (pos > 0 and parts[pos - 1] == "inputs"):
                    return current, ".".join(parts[pos:])
                return None
            key, end = found
            if end == len(parts):
                return current, key
            current = current[key]
            pos = end
        elif isinstance(current, list):
            index = _list_index(current, parts[pos])
            if index is None:
                return None
            if pos == len(parts) - 1:
                return current, index
            current = current[index]
            pos += 1
        else:
            return None
    return None


def get_value_by_path(doc: Any, path: str, default: Any = None) -> Any:
    parent = _resolve_parent(doc, _split(path))
    if parent is None:
        return default
    container, key = parent
    if isinstance(container, dict):
        return container.get(key, default)
    return container[key]


def set_value_by_path(doc: Any, path: str, value: Any) -> bool:
    """
    Write `value` at `path`. Returns False when the path does not resolve.

    Missing keys are only created on the final dict segment (a new API input);
    list indices must already exist.
    """
    parent = _resolve_parent(doc, _split(path))
    if parent is None:
        return False
    container, key = parent
    container[key] = value
    return True


def _iter_edits(edits: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(edits, Mapping):
        return list(edits.items())
    if isinstance(edits, list):
        out = []
        for item in edits:
            if isinstance(item, Mapping) and "path" in item:
                out.append((item.get("path"), item.get("value")))
        return out
    return []


def apply_field_edits(doc: Any, edits: Any) -> int:
    """
    Apply `{path: value}` (or `[{path, value}]`) edits in place.

    Unresolvable paths are logged and skipped. Returns the number applied.
    """
    applied = 0
    for path, value in _iter_edits(edits):
        try:
            ok = set_value_by_path(doc, path, value)
        except ValueError:
            ok = False
        if ok:
            applied += 1
        else:
            logger.warning("Skipping edit for unresolvable field path %r", path)
    logger.debug("Applied %d field edits", applied)
    return applied


def _widget_index_for(node_type: Any, field_name: str, resolver: NodeSchemaResolver) -> int | None:
    if is_synthesized_widget_name(field_name):
        return int(field_name[len("widget_"):])
    mapping = resolver.mapping_for(node_type)
    if mapping is None:
        return None
    try:
        return mapping.widget_input_names.index(field_name)
    except ValueError:
        return None


def apply_node_edits(
    doc: Any,
    node_edits: Any,
    resolver: NodeSchemaResolver | None = None,
) -> int:
    """
    Apply `{node_id: {field_name: value}}` edits in place to either format.

    GUI field names are mapped back to widget indices through the resolver;
    synthesized `widget_{i}` names address index `i` directly.
    """
    if not isinstance(node_edits, Mapping):
        return 0
    resolver = resolver or default_resolver()
    workflow = parse_workflow(doc)
    applied = 0

    if isinstance(workflow, GuiWorkflow):
        by_id = {str(n.get("id")): n for n in workflow.nodes if isinstance(n, dict)}
        for node_id, fields in node_edits.items():
            node = by_id.get(str(node_id))
            widgets = node.get("widgets_values") if node else None
            if not isinstance(fields, Mapping) or widgets is None:
                logger.warning("Node %s not found or has no widgets_values", node_id)
                continue
            for name, value in fields.items():
                if isinstance(widgets, dict):
                    widgets[str(name)] = value
                    applied += 1
                    continue
                index = _widget_index_for(node.get("type"), str(name), resolver)
                if index is None or not isinstance(widgets, list) or index >= len(widgets):
                    logger.warning("Cannot map field %r of %s node %s to a widget", name, node.get("type"), node_id)
                    continue
                widgets[index] = value
                applied += 1
        return applied

    for node_id, fields in node_edits.items():
        node = workflow.graph.get(str(node_id))
        inputs = node.get("inputs") if isinstance(node, dict) else None
        if not isinstance(inputs, dict) or not isinstance(fields, Mapping):
            logger.warning("Node %s not found in API graph", node_id)
            continue
        for name, value in fields.items():
            inputs[str(name)] = value
            applied += 1
    return applied
