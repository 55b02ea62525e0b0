#!/usr/bin/env python3
"""
TERRAFORMAT SPAN LOCATOR
------------------------
Finds where an item's tokens sit inside its parent body's token list.
Tokens compare by identity, so a match can only be the item itself and
never a look-alike elsewhere in the body.
"""

from typing import List, Optional

from terraformat.core.models import Span
from terraformat.hcl.tokens import Token


def _matches_at(all_tokens: List[Token], item_tokens: List[Token], start: int) -> bool:
    for offset, token in enumerate(item_tokens):
        if all_tokens[start + offset] is not token:
            return False
    return True


def find_span(all_tokens: List[Token], item_tokens: List[Token]) -> Optional[Span]:
    """Returns the first inclusive span holding `item_tokens`, or None."""
    if not item_tokens:
        return None

    last_start = len(all_tokens) - len(item_tokens)
    first = item_tokens[0]
    for start in range(last_start + 1):
        if all_tokens[start] is not first:
            continue
        if _matches_at(all_tokens, item_tokens, start):
            return Span(start=start, end=start + len(item_tokens) - 1)
    return None
