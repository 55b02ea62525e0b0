#!/usr/bin/env python3
"""
TERRAFORMAT SPACING NORMALIZER
------------------------------
Re-establishes whitespace between items after they have been reordered.

Each item's own tokens end with the newline that terminates it, so a
prefix made only of blank lines can be dropped. A prefix that carries a
comment is kept from the first comment on, with at most the one newline
a block comment needs after it.
"""

from typing import List

from terraformat.core.config import FormatConfig
from terraformat.core.models import Context, Item
from terraformat.hcl.tokens import Token, TokenType, newline_token


def contains_newline(tokens: List[Token]) -> bool:
    return any(token.type == TokenType.NEWLINE for token in tokens)


def contains_comment(tokens: List[Token]) -> bool:
    return any(token.type == TokenType.COMMENT for token in tokens)


def first_comment_index(tokens: List[Token]) -> int:
    for index, token in enumerate(tokens):
        if token.type == TokenType.COMMENT:
            return index
    return -1


def trailing_newlines_after_comment(tokens: List[Token]) -> int:
    """0 when the last comment already ends its line, else 1."""
    for token in reversed(tokens):
        if token.type == TokenType.COMMENT:
            return 0 if token.bytes.endswith(b"\n") else 1
    return 0


def trim_trailing_newlines(tokens: List[Token], max_newlines: int) -> List[Token]:
    if not tokens:
        return []

    last = len(tokens) - 1
    while last >= 0 and tokens[last].type == TokenType.NEWLINE:
        last -= 1
    if last == len(tokens) - 1:
        return tokens

    return tokens[:min(last + 1 + max_newlines, len(tokens))]


def _keep_from_first_comment(tokens: List[Token]) -> List[Token]:
    kept = tokens[first_comment_index(tokens):]
    return trim_trailing_newlines(kept, trailing_newlines_after_comment(kept))


def normalize_leading(tokens: List[Token], eol: bytes = b"\n") -> List[Token]:
    """
    The run before a body's first item. A comment on its own line keeps
    the line break in front of it, so a second pass sees the same run.
    """
    if not tokens:
        return []

    if contains_comment(tokens):
        kept = _keep_from_first_comment(tokens)
        if contains_newline(tokens[:first_comment_index(tokens)]):
            return [newline_token(eol)] + kept
        return kept

    if contains_newline(tokens):
        return [newline_token(eol)]
    return []


def normalize_prefix(tokens: List[Token]) -> List[Token]:
    """The run between two items: kept only when it carries a comment."""
    if not tokens or not contains_comment(tokens):
        return []
    return _keep_from_first_comment(tokens)


def should_insert_blank_line(items: List[Item], index: int, ctx: Context, cfg: FormatConfig) -> bool:
    """One blank line between consecutive top-level blocks."""
    if index == 0 or not cfg.enforce_top_level_spacing or not ctx.root:
        return False
    return items[index - 1].is_block and items[index].is_block
