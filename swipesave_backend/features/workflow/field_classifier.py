"""
Editable-field extraction for the workflow editor.

Every scalar parameter of every node is assigned exactly one category by a
priority cascade: name-based semantic rules first, value-shape rules after,
so a `cfg` of 7.5 lands in "sampling" rather than "number".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Optional

from ...shared import IMAGE_EXTENSIONS, MODEL_EXTENSIONS, FieldCategory, get_logger
from .formats import ApiWorkflow, GuiWorkflow, is_connection, iter_api_nodes, node_inputs, parse_workflow
from .node_schema import CONTROL_AFTER_GENERATE, NodeSchemaResolver, default_resolver

logger = get_logger(__name__)

SEED_NAMES: frozenset[str] = frozenset({"seed", "noise_seed"})
SEED_NAME_TOKENS: tuple[str, ...] = ("seed", "random_seed")
SAMPLER_SEED_MIN = 100000

PROMPT_NAME_TOKENS: tuple[str, ...] = ("text", "prompt", "positive", "negative", "description")
PROMPT_NODE_TYPES: frozenset[str] = frozenset({"CLIPTextEncode", "JWStringMultiline", "String (Multiline)"})
PROMPT_NODE_TYPE_TOKENS: tuple[str, ...] = ("textenc", "wildcard")
PROMPT_MIN_FREE_TEXT = 30

MODEL_NAME_TOKENS: tuple[str, ...] = ("model", "checkpoint", "lora", "vae", "unet", "clip")
SAMPLING_NAME_TOKENS: tuple[str, ...] = ("steps", "cfg", "sampler", "scheduler", "denoise", "strength", "guidance")
DIMENSION_NAME_TOKENS: tuple[str, ...] = ("width", "height", "batch", "size", "resolution", "frames", "fps")
BOOLEAN_NAME_TOKENS: tuple[str, ...] = ("enable", "disable")
DROPDOWN_MAX_LEN = 20

KNOWN_ENUM_VALUES: frozenset[str] = frozenset({
    # samplers
    "dpm", "euler", "euler_ancestral", "heun", "lms", "dpmpp", "dpmpp_2m", "dpmpp_sde", "ddim", "plms", "uni_pc",
    # schedulers
    "normal", "karras", "exponential", "sgm_uniform", "simple", "ddim_uniform", "beta",
    # precisions / devices
    "fp32", "fp16", "bf16", "fp8_e4m3fn", "cpu", "gpu", "cuda", "auto", "default",
    # formats / interpolation
    "latent", "model", "rgb", "hsv", "linear", "nearest", "nearest-exact", "bilinear", "bicubic", "lanczos",
    # control_after_generate
    "none", "fixed", "increment", "decrement", "randomize",
})


@dataclass(frozen=True)
class FieldDescriptor:
    """One editable value; `path` addresses it for write-back."""

    node_id: str
    node_type: str
    field_name: str
    path: str
    value: Any
    category: FieldCategory
    is_prompt_like: bool = False
    schema_source: bool = False
    widget_index: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["category"] = self.category.value
        return out


@dataclass(frozen=True)
class FieldClassification:
    fields: list[FieldDescriptor] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    def by_category(self, category: FieldCategory | str) -> list[FieldDescriptor]:
        wanted = FieldCategory(category)
        return [f for f in self.fields if f.category is wanted]

    def to_dict(self) -> dict[str, Any]:
        return {"fields": [f.to_dict() for f in self.fields], "summary": dict(self.summary)}


def _lower(value: Any) -> str:
    return str(value or "").lower()


def _contains_any(value: str, tokens: tuple[str, ...]) -> bool:
    return any(token in value for token in tokens)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _has_path_separator(value: str) -> bool:
    return "/" in value or "\\" in value


def _is_seed(name: str, node_type: str, value: Any) -> bool:
    if name in SEED_NAMES or _contains_any(name, SEED_NAME_TOKENS):
        return True
    return "sampler" in node_type and _is_int(value) and value > SAMPLER_SEED_MIN


def _is_prompt(name: str, raw_node_type: str, node_type: str, value: Any) -> bool:
    if _contains_any(name, PROMPT_NAME_TOKENS):
        return True
    if not isinstance(value, str):
        return False
    if raw_node_type in PROMPT_NODE_TYPES or _contains_any(node_type, PROMPT_NODE_TYPE_TOKENS):
        return True
    return len(value) > PROMPT_MIN_FREE_TEXT and " " in value and not _has_path_separator(value)


def _is_model(name: str, value: Any) -> bool:
    if isinstance(value, str) and value.lower().endswith(MODEL_EXTENSIONS):
        return True
    # Numeric knobs like `strength_model` belong to sampling, not the model picker.
    return _contains_any(name, MODEL_NAME_TOKENS) and not _is_number(value) and not isinstance(value, bool)


def _is_dropdown(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    if value.lower() in KNOWN_ENUM_VALUES:
        return True
    return 0 < len(value) < DROPDOWN_MAX_LEN and " " not in value and not _has_path_separator(value)


def _is_boolean(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if str(value).lower() in ("true", "false"):
        return True
    return _contains_any(name, BOOLEAN_NAME_TOKENS)


def _is_image(name: str, value: Any) -> bool:
    if "image" in name:
        return True
    return isinstance(value, str) and value.lower().endswith(IMAGE_EXTENSIONS)


_Rule = Callable[[str, str, str, Any], bool]

# Order matters: first match wins.
_CASCADE: tuple[tuple[FieldCategory, _Rule], ...] = (
    (FieldCategory.SEED, lambda n, _raw, t, v: _is_seed(n, t, v)),
    (FieldCategory.PROMPT, lambda n, raw, t, v: _is_prompt(n, raw, t, v)),
    (FieldCategory.MODEL, lambda n, _raw, _t, v: _is_model(n, v)),
    (FieldCategory.SAMPLING, lambda n, _raw, _t, _v: _contains_any(n, SAMPLING_NAME_TOKENS)),
    (FieldCategory.DIMENSION, lambda n, _raw, _t, _v: _contains_any(n, DIMENSION_NAME_TOKENS)),
    (FieldCategory.DROPDOWN, lambda _n, _raw, _t, v: _is_dropdown(v)),
    (FieldCategory.BOOLEAN, lambda n, _raw, _t, v: _is_boolean(n, v)),
    (FieldCategory.IMAGE, lambda n, _raw, _t, v: _is_image(n, v)),
    (FieldCategory.NUMBER, lambda _n, _raw, _t, v: isinstance(v, float)),
)


def categorize(field_name: Any, node_type: Any, value: Any) -> FieldCategory | None:
    """
    Category for one scalar value. Connection references and other
    containers (lists, dicts) are not editable fields and yield None.
    """
    if is_connection(value) or isinstance(value, (list, tuple, dict)):
        return None
    name = _lower(field_name)
    raw_type = str(node_type or "")
    type_lower = raw_type.lower()
    for category, rule in _CASCADE:
        if rule(name, raw_type, type_lower, value):
            return category
    return FieldCategory.OTHER


def _descriptor(
    *,
    node_id: Any,
    node_type: Any,
    field_name: str,
    path: str,
    value: Any,
    schema_source: bool,
    widget_index: int | None = None,
) -> FieldDescriptor | None:
    category = categorize(field_name, node_type, value)
    if category is None:
        return None
    return FieldDescriptor(
        node_id=str(node_id),
        node_type=str(node_type or "Unknown"),
        field_name=field_name,
        path=path,
        value=value,
        category=category,
        is_prompt_like=category is FieldCategory.PROMPT and isinstance(value, str),
        schema_source=schema_source,
        widget_index=widget_index,
    )


def _gui_widget_fields(position: int, node: dict[str, Any], resolver: NodeSchemaResolver) -> list[FieldDescriptor]:
    out: list[FieldDescriptor] = []
    node_type = node.get("type")
    widgets = node.get("widgets_values")
    base = f"nodes.{position}.widgets_values"
    if isinstance(widgets, dict):
        for key, value in widgets.items():
            desc = _descriptor(
                node_id=node.get("id"), node_type=node_type, field_name=str(key),
                path=f"{base}.{key}", value=value, schema_source=True,
            )
            if desc:
                out.append(desc)
        return out
    if not isinstance(widgets, list):
        return out
    for index, value in enumerate(widgets):
        ignored = resolver.is_ignored_widget(node_type, index)
        name = CONTROL_AFTER_GENERATE if ignored else (resolver.widget_input_name(node_type, index) or f"widget_{index}")
        desc = _descriptor(
            node_id=node.get("id"),
            node_type=node_type,
            field_name=name,
            path=f"{base}.{index}",
            value=value,
            schema_source=ignored or resolver.is_mapped_widget(node_type, index),
            widget_index=index,
        )
        if desc:
            out.append(desc)
    return out


def _gui_fields(workflow: GuiWorkflow, resolver: NodeSchemaResolver) -> list[FieldDescriptor]:
    out: list[FieldDescriptor] = []
    for position, node in enumerate(workflow.nodes):
        if isinstance(node, dict):
            out.extend(_gui_widget_fields(position, node, resolver))
    return out


def _api_fields(workflow: ApiWorkflow, resolver: NodeSchemaResolver) -> list[FieldDescriptor]:
    out: list[FieldDescriptor] = []
    for node_id, node in iter_api_nodes(workflow.graph):
        node_type = node.get("class_type")
        mapping = resolver.mapping_for(node_type)
        known = set(mapping.widget_input_names) if mapping else set()
        for name, value in node_inputs(node).items():
            desc = _descriptor(
                node_id=node_id,
                node_type=node_type,
                field_name=str(name),
                path=f"{node_id}.inputs.{name}",
                value=value,
                schema_source=name in known,
            )
            if desc:
                out.append(desc)
    return out


def summarize(fields: list[FieldDescriptor]) -> dict[str, int]:
    summary = {category.value: 0 for category in FieldCategory}
    for desc in fields:
        summary[desc.category.value] += 1
    return summary


def classify_fields(doc: Any, resolver: NodeSchemaResolver | None = None) -> FieldClassification:
    """
    Extract and categorize every editable value of a GUI or API workflow.

    Read-only. Raises FormatError for documents of unknown shape.
    """
    resolver = resolver or default_resolver()
    workflow = parse_workflow(doc)
    if isinstance(workflow, GuiWorkflow):
        fields = _gui_fields(workflow, resolver)
    else:
        fields = _api_fields(workflow, resolver)
    summary = summarize(fields)
    logger.debug("Classified %d fields (%s): %s", len(fields), workflow.kind, summary)
    return FieldClassification(fields=fields, summary=summary)
