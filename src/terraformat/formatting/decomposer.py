#!/usr/bin/env python3
"""
TERRAFORMAT BODY DECOMPOSER
---------------------------
Splits one Body into `leading`, ordered Items with their prefixes, and
`trailing`, such that

    leading + sum(item.prefix + item.tokens) + trailing

is exactly the body's original token list.
"""

import logging
from typing import List

from terraformat.core.errors import LocateItemSpanError
from terraformat.core.models import BodyDecomposition, Item, ItemKind
from terraformat.formatting.spans import find_span
from terraformat.hcl.tokens import Token
from terraformat.hcl.tree import Body

logger = logging.getLogger("terraformat.decomposer")


def collect_items(body: Body) -> List[Item]:
    """Attributes first, then blocks; physical order is restored later."""
    items = [
        Item(kind=ItemKind.ATTRIBUTE, name=name, tokens=attribute.build_tokens())
        for name, attribute in body.attributes().items()
    ]
    items.extend(
        Item(
            kind=ItemKind.BLOCK,
            name=block.type,
            label_key=".".join(block.labels),
            tokens=block.build_tokens(),
        )
        for block in body.blocks()
    )
    return items


def assign_spans(items: List[Item], body_tokens: List[Token]):
    for item in items:
        span = find_span(body_tokens, item.tokens)
        if span is None:
            raise LocateItemSpanError(item.name)
        item.start, item.end = span


def order_by_start(items: List[Item]):
    items.sort(key=lambda item: item.start)
    for index, item in enumerate(items):
        item.orig_index = index


def decompose(body: Body) -> BodyDecomposition:
    items = collect_items(body)
    if not items:
        return BodyDecomposition()

    body_tokens = body.build_tokens()
    assign_spans(items, body_tokens)
    order_by_start(items)

    prev_end = -1
    for item in items:
        item.prefix = body_tokens[prev_end + 1:item.start]
        prev_end = item.end

    leading = items[0].prefix
    items[0].prefix = []
    trailing = body_tokens[prev_end + 1:]

    logger.debug("decomposed body: %d items, %d leading, %d trailing tokens",
                 len(items), len(leading), len(trailing))
    return BodyDecomposition(leading=leading, items=items, trailing=trailing)
