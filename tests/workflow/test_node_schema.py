from swipesave_backend.features.workflow import node_schema as ns


def test_static_mapping_names_widgets_in_gui_order() -> None:
    resolver = ns.NodeSchemaResolver()
    assert resolver.widget_input_name("KSampler", 0) == "seed"
    assert resolver.widget_input_name("KSampler", 2) == "steps"
    assert resolver.widget_input_name("EmptyLatentImage", 2) == "batch_size"


def test_control_after_generate_slot_is_ignored_not_unknown() -> None:
    resolver = ns.NodeSchemaResolver()
    assert resolver.is_ignored_widget("KSampler", 1)
    assert resolver.widget_input_name("KSampler", 1) is None
    assert not resolver.is_ignored_widget("MyCustomNode", 1)
    assert resolver.widget_input_name("MyCustomNode", 1) == "widget_1"


def test_out_of_range_index_is_synthesized() -> None:
    resolver = ns.NodeSchemaResolver()
    assert resolver.widget_input_name("SaveImage", 5) == "widget_5"
    assert not resolver.is_mapped_widget("SaveImage", 5)
    assert resolver.connection_input_name("SaveImage", 3) == "input_3"


def test_clip_text_encode_uses_link_type_tag() -> None:
    resolver = ns.NodeSchemaResolver()
    assert resolver.connection_input_name("CLIPTextEncode", 0, "CLIP") == "clip"
    assert resolver.connection_input_name("CLIPTextEncode", 0, "STRING") == "text"
    assert resolver.connection_input_name("CLIPTextEncode", 1) == "clip"
    assert resolver.is_mapped_connection("CLIPTextEncode", 0, "clip")


def test_mapping_from_object_info_inserts_gui_only_slots() -> None:
    definition = {
        "input": {
            "required": {
                "model": ["MODEL"],
                "noise_seed": ["INT", {"default": 0, "min": 0}],
                "steps": ["INT", {"default": 20}],
                "sampler_name": [["euler", "dpmpp_2m"]],
                "image": [["a.png"], {"image_upload": True}],
            },
            "optional": {"mask": ["MASK"]},
        },
        "input_order": {
            "required": ["model", "noise_seed", "steps", "sampler_name", "image"],
            "optional": ["mask"],
        },
    }
    mapping = ns.mapping_from_object_info(definition)
    assert mapping.widget_input_names == ("noise_seed", None, "steps", "sampler_name", "image", "upload")
    assert mapping.connection_input_names == ("model", "mask")


def test_object_info_only_fills_unknown_types() -> None:
    object_info = {
        "KSampler": {"input": {"required": {"seed": ["INT", {}]}}},
        "WanVideoSampler": {
            "input": {"required": {"model": ["WANVIDEOMODEL"], "steps": ["INT", {}], "seed": ["INT", {}]}}
        },
        "Broken": "nope",
    }
    resolver = ns.NodeSchemaResolver(object_info=object_info)
    assert resolver.widget_input_name("KSampler", 2) == "steps"
    assert resolver.widget_input_name("WanVideoSampler", 1) == "seed"
    assert resolver.is_ignored_widget("WanVideoSampler", 2)
    assert resolver.connection_input_name("WanVideoSampler", 0) == "model"
    assert not resolver.knows("Broken")


def test_resolvers_do_not_share_state() -> None:
    a = ns.NodeSchemaResolver()
    a.extend_from_object_info({"Custom": {"input": {"required": {"x": ["INT", {}]}}}})
    b = ns.NodeSchemaResolver()
    assert a.knows("Custom")
    assert not b.knows("Custom")


def test_unmapped_warning_text() -> None:
    warning = ns.UnmappedNodeWarning(12, "MyCustomNode", "widget", 0, "widget_0")
    assert "MyCustomNode" in str(warning)
    assert "widget_0" in str(warning)
