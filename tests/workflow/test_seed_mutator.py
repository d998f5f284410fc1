import copy
import random

import pytest

from swipesave_backend.features.workflow import (
    PositionalSeedHeuristic,
    mutate_seeds,
    set_control_after_generate,
)
from swipesave_backend.shared import MAX_SEED, ControlMode, FormatError, SeedMode


def _sampler(doc: dict) -> dict:
    return next(n for n in doc["nodes"] if n["type"] == "KSampler")


def test_original_mode_is_noop(gui_workflow) -> None:
    before = list(_sampler(gui_workflow)["widgets_values"])
    assert mutate_seeds(gui_workflow, SeedMode.ORIGINAL).mutated_count == 0
    assert _sampler(gui_workflow)["widgets_values"] == before


def test_randomize_gui_only_touches_seed(gui_workflow) -> None:
    result = mutate_seeds(gui_workflow, "randomize", rng=random.Random(7))
    widgets = _sampler(gui_workflow)["widgets_values"]
    assert result.mutated_count == 1
    assert 1 <= widgets[0] <= MAX_SEED
    assert widgets[1:] == ["randomize", 20, 8, "euler", "normal", 1]


def test_randomize_api_range(api_workflow) -> None:
    for seed in range(20):
        mutate_seeds(api_workflow, SeedMode.RANDOMIZE, rng=random.Random(seed))
        assert 1 <= api_workflow["3"]["inputs"]["seed"] <= MAX_SEED


def test_increment_from_previous(api_workflow) -> None:
    mutate_seeds(api_workflow, "increment")
    assert api_workflow["3"]["inputs"]["seed"] == 156680208700287


def test_increment_with_base_seed_counts_occurrences() -> None:
    doc = {
        "1": {"class_type": "KSampler", "inputs": {"seed": 5}},
        "2": {"class_type": "KSamplerAdvanced", "inputs": {"noise_seed": 9}},
    }
    result = mutate_seeds(doc, SeedMode.INCREMENT, base_seed=100)
    assert result.mutated_count == 2
    assert sorted([doc["1"]["inputs"]["seed"], doc["2"]["inputs"]["noise_seed"]]) == [101, 102]


def test_increment_with_pinned_occurrence_shares_one_seed() -> None:
    doc = {
        "1": {"class_type": "KSampler", "inputs": {"seed": 5}},
        "2": {"class_type": "KSamplerAdvanced", "inputs": {"noise_seed": 9}},
    }
    result = mutate_seeds(doc, SeedMode.INCREMENT, base_seed=100, occurrence=2)
    assert result.mutated_count == 2
    assert doc["1"]["inputs"]["seed"] == doc["2"]["inputs"]["noise_seed"] == 103


@pytest.mark.parametrize("mode", [SeedMode.RANDOMIZE, SeedMode.INCREMENT])
def test_only_seed_values_change_in_gui(gui_workflow, mode) -> None:
    expected = copy.deepcopy(gui_workflow)
    mutate_seeds(gui_workflow, mode, rng=random.Random(3))
    _sampler(expected)["widgets_values"][0] = _sampler(gui_workflow)["widgets_values"][0]
    assert gui_workflow == expected


@pytest.mark.parametrize("mode", [SeedMode.RANDOMIZE, SeedMode.INCREMENT])
def test_only_seed_values_change_in_api(api_workflow, mode) -> None:
    expected = copy.deepcopy(api_workflow)
    mutate_seeds(api_workflow, mode, rng=random.Random(3))
    expected["3"]["inputs"]["seed"] = api_workflow["3"]["inputs"]["seed"]
    assert api_workflow == expected


@pytest.mark.parametrize("mode", list(SeedMode))
def test_no_seed_fields_is_zero(mode) -> None:
    doc = {"1": {"class_type": "SaveImage", "inputs": {"filename_prefix": "ComfyUI", "images": ["2", 0]}}}
    assert mutate_seeds(doc, mode).mutated_count == 0
    assert doc["1"]["inputs"]["filename_prefix"] == "ComfyUI"


def test_unmapped_gui_node_uses_heuristic() -> None:
    doc = {"nodes": [{"id": 1, "type": "WanVideoSampler", "widgets_values": [30, 5.0, 8, 424242, 50, 1234]}]}
    result = mutate_seeds(doc, "increment")
    assert result.mutated_count == 3
    assert doc["nodes"][0]["widgets_values"] == [31, 5.0, 8, 424243, 50, 1235]


def test_synthesized_api_inputs_use_heuristic() -> None:
    doc = {"1": {"class_type": "MyCustomNode", "inputs": {"widget_0": 777, "widget_1": 5, "steps": 777}}}
    assert mutate_seeds(doc, "increment").mutated_count == 1
    assert doc["1"]["inputs"] == {"widget_0": 778, "widget_1": 5, "steps": 777}


@pytest.mark.parametrize(
    "index, value, expected",
    [
        (0, 1, True),
        (3, 11, True),
        (0, 5, False),
        (1, 99, False),
        (1, 100, True),
        (2, 0, False),
        (0, -5, False),
        (0, 12.0, False),
        (0, True, False),
        (0, "12345", False),
    ],
)
def test_positional_heuristic(index, value, expected) -> None:
    assert PositionalSeedHeuristic().is_seed(index, value) is expected


def test_custom_heuristic_is_used() -> None:
    class NeverSeed:
        def is_seed(self, index, value):
            return False

    doc = {"nodes": [{"id": 1, "type": "Custom", "widgets_values": [123456]}]}
    assert mutate_seeds(doc, "randomize", heuristic=NeverSeed()).mutated_count == 0
    assert doc["nodes"][0]["widgets_values"] == [123456]


def test_unknown_shape_raises() -> None:
    with pytest.raises(FormatError):
        mutate_seeds({"foo": 1}, "randomize")


def test_set_control_after_generate_gui(gui_workflow) -> None:
    assert set_control_after_generate(gui_workflow, ControlMode.FIXED) == 1
    widgets = _sampler(gui_workflow)["widgets_values"]
    assert widgets[1] == "fixed"
    assert widgets[0] == 156680208700286


def test_set_control_after_generate_api() -> None:
    doc = {
        "1": {"class_type": "Custom", "inputs": {"seed": 1, "control_after_generate": "randomize"}},
        "2": {"class_type": "Other", "inputs": {"seed": 2}},
    }
    assert set_control_after_generate(doc, "increment") == 1
    assert doc["1"]["inputs"]["control_after_generate"] == "increment"
    assert "control_after_generate" not in doc["2"]["inputs"]


def test_set_control_after_generate_without_fields(api_workflow) -> None:
    assert set_control_after_generate(api_workflow, "fixed") == 0
