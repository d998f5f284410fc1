"""
Turn a raw workflow document into ready-to-submit API graphs.

No network I/O happens here; the submission service sends what this returns.
"""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field
from typing import Any, Optional

from ...shared import ControlMode, SeedMode, get_logger
from .converter import convert_gui_to_api
from .field_paths import apply_field_edits, apply_node_edits
from .formats import GuiWorkflow, parse_workflow
from .node_schema import NodeSchemaResolver, UnmappedNodeWarning, default_resolver
from .seed_mutator import SeedHeuristic, mutate_seeds, set_control_after_generate

logger = get_logger(__name__)


@dataclass
class PreparedGraph:
    """One unit of a batch: the API prompt plus the untouched GUI source, if any."""

    prompt: dict[str, Any]
    index: int = 0
    source_workflow: Optional[dict[str, Any]] = None
    seeds_mutated: int = 0
    controls_set: int = 0
    warnings: list[UnmappedNodeWarning] = field(default_factory=list)

    def extra_pnginfo(self) -> dict[str, Any] | None:
        if self.source_workflow is None:
            return None
        return {"workflow": self.source_workflow}


def _parse_control_mode(value: Any) -> ControlMode | None:
    if value is None or value == "" or value is False:
        return None
    if isinstance(value, ControlMode):
        return value
    return ControlMode(str(value).strip().lower())


def prepare_for_submission(
    raw_doc: Any,
    seed_mode: SeedMode | str = SeedMode.ORIGINAL,
    control_mode: ControlMode | str | None = None,
    quantity: int = 1,
    base_seed: int | None = None,
    *,
    edits: Any = None,
    node_edits: Any = None,
    resolver: NodeSchemaResolver | None = None,
    heuristic: SeedHeuristic | None = None,
    rng: random.Random | None = None,
) -> list[PreparedGraph]:
    """
    Build `quantity` independent API graphs from `raw_doc`.

    The caller's document is never modified. GUI documents are converted once
    and the original is kept as `source_workflow` for `extra_pnginfo`.
    Increment mode continues across the batch: with a base seed every seed of
    unit `i` becomes `base_seed + i + 1`, without one each unit increments the
    previous unit's seeds.

    Raises:
        FormatError: the document is neither GUI nor API.
        ConversionError: the GUI document cannot be translated.
        ValueError: quantity < 1 or an unknown control mode.
    """
    if quantity < 1:
        raise ValueError("quantity must be >= 1")
    mode = SeedMode.parse(seed_mode)
    control = _parse_control_mode(control_mode)
    resolver = resolver or default_resolver()

    working = copy.deepcopy(raw_doc)
    if edits:
        apply_field_edits(working, edits)
    if node_edits:
        apply_node_edits(working, node_edits, resolver)

    workflow = parse_workflow(working)
    warnings: list[UnmappedNodeWarning] = []
    source_workflow: dict[str, Any] | None = None
    if isinstance(workflow, GuiWorkflow):
        graph = convert_gui_to_api(workflow.document, resolver=resolver, warnings=warnings)
        source_workflow = workflow.document
        # The API graph has no control slot; record the mode on the GUI copy shown in ComfyUI.
        if control is not None:
            set_control_after_generate(source_workflow, control, resolver)
    else:
        graph = workflow.graph

    prepared: list[PreparedGraph] = []
    previous = graph
    for index in range(quantity):
        unit = copy.deepcopy(previous)
        controls = set_control_after_generate(unit, control) if control is not None else 0
        result = mutate_seeds(unit, mode, base_seed=base_seed, heuristic=heuristic, rng=rng, occurrence=index)
        prepared.append(
            PreparedGraph(
                prompt=unit,
                index=index,
                source_workflow=source_workflow,
                seeds_mutated=result.mutated_count,
                controls_set=controls,
                warnings=list(warnings),
            )
        )
        if mode is SeedMode.INCREMENT and base_seed is None:
            previous = unit

    logger.info(
        "Prepared %d graph(s) from %s workflow (seed mode %s)",
        len(prepared),
        workflow.kind,
        mode.value,
    )
    return prepared
