#!/usr/bin/env python3
"""
TERRAFORMAT CORE MODELS
-----------------------
Defines the data structures the format engine passes between its phases.
Items live only for the duration of one body's rewrite: the decomposer
builds them, the ordering policy sorts them, the renderer consumes them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple

from terraformat.hcl.tokens import Token


class ItemKind(Enum):
    ATTRIBUTE = "attribute"
    BLOCK = "block"


@dataclass
class Item:
    """
    One attribute or block of a body, as seen by the engine.

    `tokens` are the item's own tokens, carried verbatim. `prefix` is the
    run that sat between the previous item and this one in the source.
    """
    kind: ItemKind
    name: str                        # attribute name, or the block type
    label_key: str = ""              # block labels joined with "."
    tokens: List[Token] = field(default_factory=list)
    prefix: List[Token] = field(default_factory=list)
    orig_index: int = 0              # physical position in the source body
    start: int = 0                   # inclusive token index in the parent body
    end: int = 0                     # inclusive token index in the parent body

    @property
    def is_block(self) -> bool:
        return self.kind is ItemKind.BLOCK

    @property
    def is_attribute(self) -> bool:
        return self.kind is ItemKind.ATTRIBUTE


@dataclass
class BodyDecomposition:
    """A body split into the run before the first item, the items, and the run after."""
    leading: List[Token] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    trailing: List[Token] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class Context:
    """The scope a body is rewritten in: the document root or a named block type."""
    root: bool = False
    block_type: str = ""


ROOT_CONTEXT = Context(root=True, block_type="")


class SortKey(NamedTuple):
    """Compared field by field: group, order, name, label, then physical index."""
    group: int
    order: int
    name: str
    label: str
    index: int


class Span(NamedTuple):
    start: int
    end: int
