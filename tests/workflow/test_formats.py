import pytest

from swipesave_backend.features.workflow import formats
from swipesave_backend.shared import FormatError, WorkflowFormat


def test_detect_gui_and_api(gui_workflow, api_workflow) -> None:
    assert formats.detect_format(gui_workflow) is WorkflowFormat.GUI
    assert formats.detect_format(api_workflow) is WorkflowFormat.API


@pytest.mark.parametrize(
    "doc",
    [
        None,
        [],
        "text",
        {},
        {"nodes": "not-a-list"},
        {"abc": {"class_type": "KSampler"}},
        {"3": {"inputs": {}}},
        {"3": {"class_type": 42}},
    ],
)
def test_detect_unknown(doc) -> None:
    assert formats.detect_format(doc) is WorkflowFormat.UNKNOWN


def test_api_detection_only_needs_one_numeric_node() -> None:
    doc = {"extra": {"foo": 1}, "12": {"class_type": "SaveImage", "inputs": {}}}
    assert formats.detect_format(doc) is WorkflowFormat.API


def test_parse_workflow_returns_tagged_variants(gui_workflow, api_workflow) -> None:
    gui = formats.parse_workflow(gui_workflow)
    assert isinstance(gui, formats.GuiWorkflow)
    assert gui.kind == "gui"
    assert gui.nodes is gui_workflow["nodes"]
    assert len(gui.links) == 9

    api = formats.parse_workflow(api_workflow)
    assert isinstance(api, formats.ApiWorkflow)
    assert api.kind == "api"


def test_parse_workflow_rejects_unknown() -> None:
    with pytest.raises(FormatError):
        formats.parse_workflow({"hello": "world"})


def test_is_connection() -> None:
    assert formats.is_connection(["4", 0])
    assert formats.is_connection(("4", 1))
    assert not formats.is_connection([4, 0])
    assert not formats.is_connection(["4", True])
    assert not formats.is_connection(["4", 0, 1])
    assert not formats.is_connection("4")


def test_parse_workflow_text() -> None:
    assert formats.parse_workflow_text('{"a": 1}') == {"a": 1}
    assert formats.parse_workflow_text(b'{"a": 1}') == {"a": 1}
    assert formats.parse_workflow_text({"a": 1}) == {"a": 1}
    assert formats.parse_workflow_text("[1, 2]") is None
    assert formats.parse_workflow_text("{broken") is None
    assert formats.parse_workflow_text("  ") is None
