#!/usr/bin/env python3
"""
TERRAFORMAT ORDERING POLICY
---------------------------
Maps each body item to a SortKey (group, order, name, label, index).
The keyer is chosen by context: the document root, or the type of the
block that encloses the body. Block types without a table of their own
keep the author's order.

Well-known structural arguments (type, source, value, count, for_each)
float to the top in a fixed order; depends_on and lifecycle sink to the
bottom; anything unrecognised keeps its physical position or is sorted by
name within an "other" bucket, depending on the block type.
"""

import logging
from functools import partial
from typing import Callable, Dict, List

from terraformat.core.config import FormatConfig
from terraformat.core.models import Context, Item, SortKey

logger = logging.getLogger("terraformat.ordering")

Keyer = Callable[[Item], SortKey]

ORDER_OTHER = 10
ORDER_UNKNOWN_TOP_LEVEL = 100

TOP_LEVEL_BLOCK_ORDER = {
    name: rank for rank, name in enumerate([
        "terraform",
        "provider",
        "variable",
        "locals",
        "data",
        "resource",
        "module",
        "output",
        "moved",
        "import",
        "check",
        "assert",
    ])
}

# Top-level block types whose instances are sorted by their label.
LABEL_SORTED_BLOCKS = frozenset({"variable", "output"})

RESOURCE_META_ARGUMENTS = {"count": 0, "for_each": 1, "provider": 2}
VARIABLE_ATTRIBUTES = {"type": 0, "description": 1, "default": 2, "sensitive": 3, "nullable": 4}
OUTPUT_ATTRIBUTES = {"description": 0, "value": 1, "sensitive": 2}
MODULE_ATTRIBUTES = {"source": 0, "version": 1, "providers": 2, "count": 3, "for_each": 4}
PROVIDER_ATTRIBUTES = {"alias": 0}
TERRAFORM_ATTRIBUTES = {"required_version": 0}
TERRAFORM_BLOCKS = {"required_providers": 0, "backend": 1, "cloud": 2}
LIFECYCLE_ATTRIBUTES = {
    "create_before_destroy": 0,
    "prevent_destroy": 1,
    "ignore_changes": 2,
    "replace_triggered_by": 3,
}


def _ranked(item: Item, group: int, ranks: Dict[str, int], other: int) -> SortKey:
    """Known names take their rank; the rest share `other`, sorted by name."""
    rank = ranks.get(item.name)
    if rank is None:
        return SortKey(group, other, item.name, "", item.orig_index)
    return SortKey(group, rank, "", "", item.orig_index)


def _physical(item: Item, group: int) -> SortKey:
    return SortKey(group, item.orig_index, "", "", item.orig_index)


def _named_block(item: Item, group: int = 1, order: int = 0) -> SortKey:
    return SortKey(group, order, item.name, item.label_key, item.orig_index)


def resource_key(item: Item) -> SortKey:
    """resource and data bodies: meta-arguments, arguments, blocks, lifecycle, depends_on."""
    if item.is_attribute:
        if item.name in RESOURCE_META_ARGUMENTS:
            return SortKey(0, RESOURCE_META_ARGUMENTS[item.name], "", "", item.orig_index)
        if item.name == "depends_on":
            return SortKey(4, 0, "", "", item.orig_index)
        return _physical(item, 1)
    if item.name == "lifecycle":
        return SortKey(3, 0, "", "", item.orig_index)
    return _physical(item, 2)


def variable_key(item: Item) -> SortKey:
    if item.is_attribute:
        return _ranked(item, 0, VARIABLE_ATTRIBUTES, ORDER_OTHER)
    if item.name == "validation":
        return SortKey(1, 0, "", "", item.orig_index)
    return _named_block(item, order=1)


def output_key(item: Item) -> SortKey:
    if item.is_attribute:
        if item.name == "depends_on":
            return SortKey(2, 0, "", "", item.orig_index)
        return _ranked(item, 0, OUTPUT_ATTRIBUTES, ORDER_OTHER)
    return _named_block(item)


def module_key(item: Item) -> SortKey:
    if item.is_attribute:
        if item.name == "depends_on":
            return SortKey(2, 0, "", "", item.orig_index)
        return _ranked(item, 0, MODULE_ATTRIBUTES, ORDER_OTHER)
    return _named_block(item)


def provider_key(item: Item) -> SortKey:
    if item.is_attribute:
        return _ranked(item, 0, PROVIDER_ATTRIBUTES, 1)
    return _named_block(item)


def terraform_key(item: Item) -> SortKey:
    if item.is_attribute:
        return _ranked(item, 0, TERRAFORM_ATTRIBUTES, 1)
    rank = TERRAFORM_BLOCKS.get(item.name)
    if rank is None:
        return _named_block(item, order=ORDER_OTHER)
    return SortKey(1, rank, "", "", item.orig_index)


def locals_key(item: Item) -> SortKey:
    return _physical(item, 0 if item.is_attribute else 1)


def lifecycle_key(item: Item) -> SortKey:
    if item.is_attribute:
        return _ranked(item, 0, LIFECYCLE_ATTRIBUTES, ORDER_OTHER)
    return _named_block(item)


def default_key(item: Item) -> SortKey:
    return _physical(item, 0 if item.is_attribute else 1)


def root_key(item: Item, cfg: FormatConfig) -> SortKey:
    """Top-level attributes (tfvars) first, then blocks by the top-level table."""
    if item.is_attribute:
        if cfg.enforce_attribute_order:
            return SortKey(0, 0, item.name, "", item.orig_index)
        return _physical(item, 0)

    if not cfg.enforce_block_order:
        return _physical(item, 1)

    order = TOP_LEVEL_BLOCK_ORDER.get(item.name, ORDER_UNKNOWN_TOP_LEVEL)
    label = item.label_key if item.name in LABEL_SORTED_BLOCKS else ""
    return SortKey(1, order, "", label, item.orig_index)


NESTED_KEYERS: Dict[str, Keyer] = {
    "resource": resource_key,
    "data": resource_key,
    "variable": variable_key,
    "output": output_key,
    "module": module_key,
    "provider": provider_key,
    "terraform": terraform_key,
    "locals": locals_key,
    "lifecycle": lifecycle_key,
}


def keyer_for(ctx: Context, cfg: FormatConfig) -> Keyer:
    if ctx.root:
        return partial(root_key, cfg=cfg)
    return NESTED_KEYERS.get(ctx.block_type, default_key)


def should_sort(ctx: Context, cfg: FormatConfig) -> bool:
    if cfg.enforce_attribute_order:
        return True
    return cfg.enforce_block_order and ctx.root


def sort_items(items: List[Item], ctx: Context, cfg: FormatConfig):
    """Stable in-place sort; ties fall back to physical order via the index field."""
    keyer = keyer_for(ctx, cfg)
    items.sort(key=keyer)
    logger.debug("sorted %d items for %s", len(items), ctx.block_type or "root")
