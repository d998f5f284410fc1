"""
ComfyUI workflow engine: format detection, GUI -> API conversion, field
classification and seed mutation.
"""

from .converter import convert_gui_to_api
from .field_classifier import FieldClassification, FieldDescriptor, categorize, classify_fields
from .field_paths import apply_field_edits, apply_node_edits, get_value_by_path, set_value_by_path
from .formats import ApiWorkflow, GuiWorkflow, ParsedWorkflow, detect_format, is_connection, parse_workflow
from .node_schema import NodeSchemaResolver, NodeTypeMapping, UnmappedNodeWarning, default_resolver
from .orchestrator import PreparedGraph, prepare_for_submission
from .seed_mutator import (
    PositionalSeedHeuristic,
    SeedHeuristic,
    SeedMutationResult,
    mutate_seeds,
    set_control_after_generate,
)

__all__ = [
    "ApiWorkflow",
    "FieldClassification",
    "FieldDescriptor",
    "GuiWorkflow",
    "NodeSchemaResolver",
    "NodeTypeMapping",
    "ParsedWorkflow",
    "PositionalSeedHeuristic",
    "PreparedGraph",
    "SeedHeuristic",
    "SeedMutationResult",
    "UnmappedNodeWarning",
    "apply_field_edits",
    "apply_node_edits",
    "categorize",
    "classify_fields",
    "convert_gui_to_api",
    "default_resolver",
    "detect_format",
    "get_value_by_path",
    "is_connection",
    "mutate_seeds",
    "parse_workflow",
    "prepare_for_submission",
    "set_control_after_generate",
    "set_value_by_path",
]
