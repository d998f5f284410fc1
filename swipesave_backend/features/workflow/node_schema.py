"""
Per-node-type naming of GUI widget slots and connection slots.

GUI exports store widget values positionally and links by slot index; the API
format wants named inputs. The static table below covers the common core and
custom nodes. Unknown types fall back to synthesized `widget_{i}` /
`input_{slot}` names so no value is ever dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...shared import get_logger

logger = get_logger(__name__)

CONTROL_AFTER_GENERATE = "control_after_generate"
SEED_INPUT_NAMES: frozenset[str] = frozenset({"seed", "noise_seed"})
WIDGET_VALUE_TYPES: frozenset[str] = frozenset({"INT", "FLOAT", "STRING", "BOOLEAN", "COMBO"})


@dataclass(frozen=True)
class NodeTypeMapping:
    """
    Positional input names for one node type.

    A `None` entry marks a slot that exists in the GUI but has no API input
    (e.g. `control_after_generate`); it is skipped, never renamed.
    """

    widget_input_names: tuple[Optional[str], ...] = ()
    connection_input_names: tuple[Optional[str], ...] = ()


@dataclass(frozen=True)
class UnmappedNodeWarning:
    """Non-fatal record of a slot that received a synthesized name."""

    node_id: Any
    node_type: str
    slot_kind: str  # "widget" | "connection"
    index: int
    synthesized_name: str

    def __str__(self) -> str:
        return (
            f"{self.node_type} node {self.node_id}: {self.slot_kind} slot {self.index} "
            f"has no known input name, using {self.synthesized_name!r}"
        )


def _mapping(widgets: tuple[Optional[str], ...] = (), connections: tuple[Optional[str], ...] = ()) -> NodeTypeMapping:
    return NodeTypeMapping(widget_input_names=widgets, connection_input_names=connections)


# Widget order follows the GUI's widgets_values order, not the API input order.
NODE_TYPE_MAPPINGS: dict[str, NodeTypeMapping] = {
    "CLIPTextEncode": _mapping(("text",), ("text", "clip")),
    "CheckpointLoaderSimple": _mapping(("ckpt_name",)),
    "KSampler": _mapping(
        ("seed", None, "steps", "cfg", "sampler_name", "scheduler", "denoise"),
        ("model", "positive", "negative", "latent_image"),
    ),
    "KSamplerAdvanced": _mapping(
        (
            "add_noise",
            "noise_seed",
            None,
            "steps",
            "cfg",
            "sampler_name",
            "scheduler",
            "start_at_step",
            "end_at_step",
            "return_with_leftover_noise",
        ),
        ("model", "positive", "negative", "latent_image"),
    ),
    "VAEDecode": _mapping((), ("samples", "vae")),
    "VAEEncode": _mapping((), ("pixels", "vae")),
    "VAELoader": _mapping(("vae_name",)),
    "SaveImage": _mapping(("filename_prefix",), ("images",)),
    "PreviewImage": _mapping((), ("images",)),
    "ImpactWildcardEncode": _mapping(
        ("wildcard_text", "populated_text", "mode", "Select to add LoRA", "Select to add Wildcard", "seed", None),
        ("model", "clip"),
    ),
    "JWStringMultiline": _mapping(("text",)),
    "EmptyLatentImage": _mapping(("width", "height", "batch_size")),
    "LoraLoader": _mapping(("lora_name", "strength_model", "strength_clip"), ("model", "clip")),
    "ControlNetLoader": _mapping(("control_net_name",)),
    "ControlNetApply": _mapping(("strength",), ("conditioning", "control_net", "image")),
    "UpscaleModelLoader": _mapping(("model_name",)),
    "ImageUpscaleWithModel": _mapping((), ("upscale_model", "image")),
    "LoadImage": _mapping(("image", "upload")),
}

# Node types whose connection slot must be chosen from the link's data type tag.
# TODO: audit other multi-typed slots against a live /object_info catalog.
TYPE_TAGGED_CONNECTIONS: dict[str, dict[str, str]] = {
    "CLIPTextEncode": {"STRING": "text", "CLIP": "clip"},
}


def synthesized_widget_name(index: int) -> str:
    return f"widget_{index}"


def synthesized_connection_name(slot: int) -> str:
    return f"input_{slot}"


def is_synthesized_widget_name(name: Any) -> bool:
    if not isinstance(name, str) or not name.startswith("widget_"):
        return False
    return name[len("widget_"):].isdigit()


def _is_widget_spec(spec: Any) -> bool:
    if not isinstance(spec, (list, tuple)) or not spec:
        return False
    kind = spec[0]
    if isinstance(kind, (list, tuple)):
        return True
    return isinstance(kind, str) and kind.upper() in WIDGET_VALUE_TYPES


def _spec_options(spec: Any) -> dict[str, Any]:
    if isinstance(spec, (list, tuple)) and len(spec) > 1 and isinstance(spec[1], dict):
        return spec[1]
    return {}


def _ordered_input_specs(definition: Mapping[str, Any]) -> list[tuple[str, Any]]:
    inputs = definition.get("input")
    if not isinstance(inputs, dict):
        return []
    order = definition.get("input_order") if isinstance(definition.get("input_order"), dict) else {}
    out: list[tuple[str, Any]] = []
    for section in ("required", "optional"):
        specs = inputs.get(section)
        if not isinstance(specs, dict):
            continue
        names = order.get(section) if isinstance(order.get(section), list) else list(specs.keys())
        for name in names:
            if name in specs:
                out.append((str(name), specs[name]))
    return out


def mapping_from_object_info(definition: Mapping[str, Any]) -> NodeTypeMapping:
    """
    Derive a NodeTypeMapping from one ComfyUI `/object_info` node definition.

    Widgets keep definition order; seed-like INT inputs get the GUI's extra
    `control_after_generate` slot and `image_upload` combos their `upload` slot.
    """
    widgets: list[Optional[str]] = []
    connections: list[Optional[str]] = []
    for name, spec in _ordered_input_specs(definition):
        if not _is_widget_spec(spec):
            connections.append(name)
            continue
        widgets.append(name)
        options = _spec_options(spec)
        kind = spec[0] if isinstance(spec[0], str) else ""
        if options.get(CONTROL_AFTER_GENERATE) or (kind.upper() == "INT" and name in SEED_INPUT_NAMES):
            widgets.append(None)
        if options.get("image_upload"):
            widgets.append("upload")
    return NodeTypeMapping(widget_input_names=tuple(widgets), connection_input_names=tuple(connections))


class NodeSchemaResolver:
    """
    Answers "what is widget #i / connection slot #s of this node type called?".

    The static table always wins; `object_info` definitions only fill in node
    types the table does not know.
    """

    def __init__(
        self,
        mappings: Mapping[str, NodeTypeMapping] | None = None,
        object_info: Mapping[str, Any] | None = None,
    ):
        self._mappings: dict[str, NodeTypeMapping] = dict(NODE_TYPE_MAPPINGS if mappings is None else mappings)
        if object_info:
            self.extend_from_object_info(object_info)

    def extend_from_object_info(self, object_info: Mapping[str, Any]) -> int:
        """Add mappings for unknown node types; returns how many were added."""
        added = 0
        for node_type, definition in object_info.items():
            if node_type in self._mappings or not isinstance(definition, dict):
                continue
            mapping = mapping_from_object_info(definition)
            if not mapping.widget_input_names and not mapping.connection_input_names:
                continue
            self._mappings[str(node_type)] = mapping
            added += 1
        if added:
            logger.debug("Extended node schema table with %d object_info definitions", added)
        return added

    def mapping_for(self, node_type: Any) -> NodeTypeMapping | None:
        return self._mappings.get(str(node_type or ""))

    def knows(self, node_type: Any) -> bool:
        return self.mapping_for(node_type) is not None

    def is_ignored_widget(self, node_type: Any, index: int) -> bool:
        mapping = self.mapping_for(node_type)
        if mapping is None or index < 0 or index >= len(mapping.widget_input_names):
            return False
        return mapping.widget_input_names[index] is None

    def is_mapped_widget(self, node_type: Any, index: int) -> bool:
        mapping = self.mapping_for(node_type)
        if mapping is None or index < 0 or index >= len(mapping.widget_input_names):
            return False
        return mapping.widget_input_names[index] is not None

    def widget_input_name(self, node_type: Any, index: int) -> str | None:
        """
        Name of widget slot `index`.

        Returns None only for an explicitly ignored slot; unknown types and
        out-of-range indices get `widget_{index}`.
        """
        mapping = self.mapping_for(node_type)
        if mapping is not None and 0 <= index < len(mapping.widget_input_names):
            return mapping.widget_input_names[index]
        return synthesized_widget_name(index)

    def connection_input_name(self, node_type: Any, slot: int, type_tag: Any = None) -> str | None:
        """
        Name of connection slot `slot`.

        For node types listed in TYPE_TAGGED_CONNECTIONS the link's data type
        tag decides the name before position is considered.
        """
        key = str(node_type or "")
        tagged = TYPE_TAGGED_CONNECTIONS.get(key)
        if tagged and isinstance(type_tag, str):
            by_tag = tagged.get(type_tag.upper())
            if by_tag:
                return by_tag
        mapping = self.mapping_for(key)
        if mapping is not None and 0 <= slot < len(mapping.connection_input_names):
            return mapping.connection_input_names[slot]
        return synthesized_connection_name(slot)

    def is_mapped_connection(self, node_type: Any, slot: int, type_tag: Any = None) -> bool:
        key = str(node_type or "")
        tagged = TYPE_TAGGED_CONNECTIONS.get(key)
        if tagged and isinstance(type_tag, str) and type_tag.upper() in tagged:
            return True
        mapping = self.mapping_for(key)
        return mapping is not None and 0 <= slot < len(mapping.connection_input_names)


def default_resolver() -> NodeSchemaResolver:
    """Fresh resolver over the static table only."""
    return NodeSchemaResolver()


def widget_input_name(node_type: Any, index: int) -> str | None:
    return default_resolver().widget_input_name(node_type, index)


def connection_input_name(node_type: Any, slot: int, type_tag: Any = None) -> str | None:
    return default_resolver().connection_input_name(node_type, slot, type_tag)
