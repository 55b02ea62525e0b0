import pytest

from terraformat.core.config import FormatConfig
from terraformat.core.models import ROOT_CONTEXT, Context, Item, ItemKind, SortKey
from terraformat.formatting.ordering import (
    NESTED_KEYERS, default_key, keyer_for, resource_key, should_sort, sort_items,
)

DEFAULT = FormatConfig.default()


def attr(name, index=0):
    return Item(kind=ItemKind.ATTRIBUTE, name=name, orig_index=index)


def block(name, label="", index=0):
    return Item(kind=ItemKind.BLOCK, name=name, label_key=label, orig_index=index)


def ordered(items, block_type=None, cfg=DEFAULT):
    ctx = ROOT_CONTEXT if block_type is None else Context(root=False, block_type=block_type)
    for index, item in enumerate(items):
        item.orig_index = index
    sort_items(items, ctx, cfg)
    return [(i.name, i.label_key) if i.label_key else i.name for i in items]


def test_root_block_table():
    items = [block("output", "o"), block("resource", "r"), block("check", "c"),
             block("module", "m"), block("data", "d"), block("locals"),
             block("variable", "v"), block("provider", "p"), block("terraform"),
             block("import"), block("moved"), block("assert")]
    assert [i if isinstance(i, str) else i[0] for i in ordered(items)] == [
        "terraform", "provider", "variable", "locals", "data", "resource",
        "module", "output", "moved", "import", "check", "assert",
    ]


def test_root_unknown_blocks_last_in_physical_order():
    items = [block("foo", "2"), block("resource", "r"), block("bar"), block("foo", "1")]
    assert ordered(items) == [("resource", "r"), ("foo", "2"), "bar", ("foo", "1")]


def test_root_variables_and_outputs_sorted_by_label():
    items = [block("variable", "b"), block("output", "z"), block("variable", "a"),
             block("output", "y")]
    assert ordered(items) == [("variable", "a"), ("variable", "b"), ("output", "y"), ("output", "z")]


def test_root_resources_keep_physical_order():
    items = [block("resource", "b.x"), block("resource", "a.x")]
    assert ordered(items) == [("resource", "b.x"), ("resource", "a.x")]


def test_root_attributes_alphabetical_and_before_blocks():
    items = [block("terraform"), attr("zone"), attr("app")]
    assert ordered(items) == ["app", "zone", "terraform"]


def test_root_attribute_order_disabled():
    cfg = FormatConfig(enforce_attribute_order=False)
    items = [block("terraform"), attr("zone"), attr("app")]
    assert ordered(items, cfg=cfg) == ["zone", "app", "terraform"]


def test_root_block_order_disabled():
    cfg = FormatConfig(enforce_block_order=False)
    items = [block("resource", "r"), block("terraform")]
    assert ordered(items, cfg=cfg) == [("resource", "r"), "terraform"]


def test_resource_body():
    items = [attr("depends_on"), block("lifecycle"), attr("ami"), block("ebs"),
             attr("provider"), attr("instance_type"), attr("for_each"), attr("count")]
    assert ordered(items, "resource") == [
        "count", "for_each", "provider", "ami", "instance_type", "ebs", "lifecycle", "depends_on",
    ]


def test_generic_resource_attributes_keep_physical_order():
    items = [attr("zeta"), attr("alpha"), attr("mid")]
    assert ordered(items, "resource") == ["zeta", "alpha", "mid"]


def test_data_shares_resource_keyer():
    assert NESTED_KEYERS["data"] is resource_key
    items = [attr("filter_x"), attr("count")]
    assert ordered(items, "data") == ["count", "filter_x"]


def test_variable_body():
    items = [block("validation"), attr("zz"), attr("nullable"), attr("aa"), attr("sensitive"),
             attr("default"), attr("description"), attr("type")]
    assert ordered(items, "variable") == [
        "type", "description", "default", "sensitive", "nullable", "aa", "zz", "validation",
    ]


def test_variable_validation_before_other_blocks():
    items = [block("zeta"), block("validation"), block("alpha")]
    assert ordered(items, "variable") == ["validation", "alpha", "zeta"]


def test_output_body():
    items = [attr("depends_on"), attr("sensitive"), attr("value"), attr("extra"),
             attr("description"), block("precondition")]
    assert ordered(items, "output") == [
        "description", "value", "sensitive", "extra", "precondition", "depends_on",
    ]


def test_module_body():
    items = [attr("depends_on"), attr("name"), attr("for_each"), attr("count"),
             attr("providers"), attr("version"), attr("source")]
    assert ordered(items, "module") == [
        "source", "version", "providers", "count", "for_each", "name", "depends_on",
    ]


def test_provider_body():
    items = [block("assume_role"), attr("region"), attr("alias"), attr("profile")]
    assert ordered(items, "provider") == ["alias", "profile", "region", "assume_role"]


def test_terraform_body():
    items = [block("cloud"), block("experiments_x"), block("backend", "s3"),
             attr("zz"), block("required_providers"), attr("required_version")]
    assert ordered(items, "terraform") == [
        "required_version", "zz", "required_providers", ("backend", "s3"), "cloud", "experiments_x",
    ]


def test_locals_keep_physical_order():
    items = [attr("z"), attr("a"), attr("m")]
    assert ordered(items, "locals") == ["z", "a", "m"]


def test_lifecycle_body():
    items = [attr("replace_triggered_by"), attr("other"), attr("ignore_changes"),
             attr("prevent_destroy"), attr("create_before_destroy")]
    assert ordered(items, "lifecycle") == [
        "create_before_destroy", "prevent_destroy", "ignore_changes", "replace_triggered_by", "other",
    ]


def test_unknown_block_type_uses_default_keyer():
    assert keyer_for(Context(block_type="dynamic"), DEFAULT) is default_key
    items = [block("content"), attr("b"), attr("a")]
    assert ordered(items, "dynamic") == ["b", "a", "content"]


def test_every_key_carries_the_physical_index():
    item = attr("anything", index=7)
    for block_type in list(NESTED_KEYERS) + ["unknown"]:
        key = keyer_for(Context(block_type=block_type), DEFAULT)(item)
        assert isinstance(key, SortKey)
        assert key.index == 7
    assert keyer_for(ROOT_CONTEXT, DEFAULT)(item).index == 7


def test_duplicate_keys_keep_input_order():
    items = [block("variable", "same"), block("variable", "same")]
    first, second = items
    sort_items(items, ROOT_CONTEXT, DEFAULT)
    assert items[0] is first and items[1] is second


@pytest.mark.parametrize("cfg, root, expected", [
    (FormatConfig(), True, True),
    (FormatConfig(), False, True),
    (FormatConfig(enforce_attribute_order=False), True, True),
    (FormatConfig(enforce_attribute_order=False), False, False),
    (FormatConfig(enforce_attribute_order=False, enforce_block_order=False), True, False),
])
def test_should_sort(cfg, root, expected):
    assert should_sort(Context(root=root), cfg) is expected
