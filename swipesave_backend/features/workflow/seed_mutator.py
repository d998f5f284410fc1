"""
Seed rewriting for queued workflows.

Mutators own their argument for the duration of the call and change it in
place; callers that need the original must deep-copy first (the orchestrator
does).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from ...shared import MAX_SEED, ControlMode, SeedMode, get_logger
from .formats import GuiWorkflow, iter_api_nodes, node_inputs, parse_workflow
from .node_schema import (
    CONTROL_AFTER_GENERATE,
    SEED_INPUT_NAMES,
    NodeSchemaResolver,
    default_resolver,
    is_synthesized_widget_name,
)

logger = get_logger(__name__)


class SeedHeuristic(Protocol):
    """Decides whether an unnamed positional widget value is a seed."""

    def is_seed(self, index: int, value: Any) -> bool: ...


class PositionalSeedHeuristic:
    """
    Best-effort guess for custom nodes without a schema mapping.

    Slots 0 and 3 commonly hold the seed in ComfyUI samplers, so any positive
    integer there counts; elsewhere the value must be at least `min_value`.
    Small integers (`tiny_range`) look like step counts and are skipped.
    May misfire on custom nodes.
    """

    def __init__(
        self,
        lenient_indices: tuple[int, ...] = (0, 3),
        min_value: int = 100,
        tiny_range: tuple[int, int] = (2, 10),
    ):
        self.lenient_indices = lenient_indices
        self.min_value = min_value
        self.tiny_range = tiny_range

    def is_seed(self, index: int, value: Any) -> bool:
        if not _is_int(value) or value <= 0:
            return False
        low, high = self.tiny_range
        if low <= value <= high:
            return False
        if index in self.lenient_indices:
            return True
        return value >= self.min_value


@dataclass(frozen=True)
class SeedMutationResult:
    mutated_count: int = 0


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class _SeedWriter:
    """Produces the next seed value for one mutation pass."""

    def __init__(
        self,
        mode: SeedMode,
        base_seed: Optional[int],
        rng: random.Random | None,
        occurrence: Optional[int] = None,
    ):
        self.mode = mode
        self.base_seed = base_seed
        self.rng = rng or random.Random()
        self.occurrence = occurrence or 0
        # A pinned occurrence gives every seed of the pass the same value.
        self.pinned = occurrence is not None

    def next_value(self, previous: Any) -> int:
        if self.mode is SeedMode.RANDOMIZE:
            value = self.rng.randint(1, MAX_SEED)
        elif self.base_seed is not None:
            value = self.base_seed + self.occurrence + 1
        else:
            value = int(previous) + 1
        if not self.pinned:
            self.occurrence += 1
        return value


def _mutate_gui(
    workflow: GuiWorkflow,
    writer: _SeedWriter,
    resolver: NodeSchemaResolver,
    heuristic: SeedHeuristic,
) -> int:
    count = 0
    for node in workflow.nodes:
        if not isinstance(node, dict):
            continue
        widgets = node.get("widgets_values")
        node_type = node.get("type")
        if isinstance(widgets, dict):
            for key, value in list(widgets.items()):
                if key in SEED_INPUT_NAMES and _is_numeric(value):
                    widgets[key] = writer.next_value(value)
                    count += 1
            continue
        if not isinstance(widgets, list):
            continue
        for index, value in enumerate(widgets):
            if resolver.is_ignored_widget(node_type, index):
                continue
            name = resolver.widget_input_name(node_type, index)
            if resolver.is_mapped_widget(node_type, index):
                hit = name in SEED_INPUT_NAMES and _is_numeric(value)
            else:
                hit = heuristic.is_seed(index, value)
            if hit:
                new_value = writer.next_value(value)
                logger.debug("Seed %s[%d] (%s): %s -> %s", node_type, index, name, value, new_value)
                widgets[index] = new_value
                count += 1
    return count


def _mutate_api(graph: dict[str, Any], writer: _SeedWriter, heuristic: SeedHeuristic) -> int:
    count = 0
    for node_id, node in iter_api_nodes(graph):
        inputs = node_inputs(node)
        for name, value in list(inputs.items()):
            if name in SEED_INPUT_NAMES:
                hit = _is_numeric(value)
            elif is_synthesized_widget_name(name):
                hit = heuristic.is_seed(int(name[len("widget_"):]), value)
            else:
                hit = False
            if hit:
                new_value = writer.next_value(value)
                logger.debug("Seed %s.%s: %s -> %s", node_id, name, value, new_value)
                inputs[name] = new_value
                count += 1
    return count


def mutate_seeds(
    doc: Any,
    mode: SeedMode | str,
    base_seed: int | None = None,
    heuristic: SeedHeuristic | None = None,
    rng: random.Random | None = None,
    resolver: NodeSchemaResolver | None = None,
    *,
    occurrence: int | None = None,
) -> SeedMutationResult:
    """
    Rewrite every seed-like value of `doc` in place.

    - original: no-op
    - randomize: uniform integer in [1, 2**31 - 1]
    - increment: previous + 1, or `base_seed + occurrence + 1` with a base;
      `occurrence` counts seed fields unless pinned by the caller (the
      orchestrator pins it to the batch index)

    Raises FormatError for documents of unknown shape. Non-seed values are
    never touched, including `control_after_generate`.
    """
    seed_mode = SeedMode.parse(mode)
    if seed_mode is SeedMode.ORIGINAL:
        return SeedMutationResult(0)

    workflow = parse_workflow(doc)
    writer = _SeedWriter(seed_mode, base_seed, rng, occurrence)
    heuristic = heuristic or PositionalSeedHeuristic()
    if isinstance(workflow, GuiWorkflow):
        count = _mutate_gui(workflow, writer, resolver or default_resolver(), heuristic)
    else:
        count = _mutate_api(workflow.graph, writer, heuristic)

    if count:
        logger.info("Mutated %d seed(s) (%s)", count, seed_mode.value)
    else:
        logger.debug("No seed-like fields found (%s)", seed_mode.value)
    return SeedMutationResult(count)


def set_control_after_generate(
    doc: Any,
    mode: ControlMode | str,
    resolver: NodeSchemaResolver | None = None,
) -> int:
    """
    Overwrite every `control_after_generate` value with the literal `mode`.

    API graphs: the `control_after_generate` input key. GUI documents: every
    widget slot the schema marks as the ignored control slot. Returns the
    number of values written.
    """
    value = mode.value if isinstance(mode, ControlMode) else str(mode)
    workflow = parse_workflow(doc)
    count = 0
    if isinstance(workflow, GuiWorkflow):
        resolver = resolver or default_resolver()
        for node in workflow.nodes:
            if not isinstance(node, dict):
                continue
            widgets = node.get("widgets_values")
            if isinstance(widgets, dict):
                if CONTROL_AFTER_GENERATE in widgets:
                    widgets[CONTROL_AFTER_GENERATE] = value
                    count += 1
                continue
            if not isinstance(widgets, list):
                continue
            for index in range(len(widgets)):
                if resolver.is_ignored_widget(node.get("type"), index):
                    widgets[index] = value
                    count += 1
    else:
        for _node_id, node in iter_api_nodes(workflow.graph):
            inputs = node_inputs(node)
            if CONTROL_AFTER_GENERATE in inputs:
                inputs[CONTROL_AFTER_GENERATE] = value
                count += 1

    if count == 0:
        logger.debug("No control_after_generate fields found")
    else:
        logger.debug("Set %d control_after_generate value(s) to %s", count, value)
    return count
