#!/usr/bin/env python3
"""
TERRAFORMAT SYNTAX TREE - Token-Preserving Document Model
---------------------------------------------------------
A File holds a root Body; a Body holds an ordered mix of Attributes,
Blocks and unstructured token runs (blank lines and detached comments).

Every node keeps references to the very Token objects the lexer produced,
so building a node's tokens and searching for them in the parent body's
tokens is an identity match. Writing a File back out concatenates the
tokens of its nodes in order.
"""

from typing import Dict, List, Union

from terraformat.hcl.tokens import Token, render_tokens


class Unstructured:
    """A run of tokens that belongs to no attribute or block."""

    def __init__(self, tokens: List[Token]):
        self.tokens = list(tokens)

    def build_tokens(self) -> List[Token]:
        return list(self.tokens)


class Attribute:
    """
    `name = expression`, together with the comments directly above it,
    any comment on the same line, and the newline that ends it.
    """

    def __init__(self, name: str, lead_comments: List[Token], name_token: Token,
                 equals: Token, expression: List[Token],
                 line_comments: List[Token], newline: List[Token]):
        self.name = name
        self.lead_comments = lead_comments
        self.name_token = name_token
        self.equals = equals
        self.expression = expression
        self.line_comments = line_comments
        self.newline = newline

    def build_tokens(self) -> List[Token]:
        return (
            self.lead_comments
            + [self.name_token, self.equals]
            + self.expression
            + self.line_comments
            + self.newline
        )


class Block:
    """
    `type label... { body }`. The header runs from the lead comments to the
    opening brace; the closing part from the closing brace to the newline.
    """

    def __init__(self, block_type: str, labels: List[str], header: List[Token],
                 body: "Body", closing: List[Token]):
        self.type = block_type
        self.labels = labels
        self.header = header
        self.body = body
        self.closing = closing

    def build_tokens(self) -> List[Token]:
        return self.header + self.body.build_tokens() + self.closing


Node = Union[Attribute, Block, Unstructured]


class Body:
    """The contents of a file root or of a block."""

    def __init__(self, children: List[Node] = None):
        self.children: List[Node] = list(children or [])

    def attributes(self) -> Dict[str, Attribute]:
        return {
            child.name: child for child in self.children
            if isinstance(child, Attribute)
        }

    def blocks(self) -> List[Block]:
        return [child for child in self.children if isinstance(child, Block)]

    def append(self, node: Node):
        self.children.append(node)

    def append_unstructured_tokens(self, tokens: List[Token]):
        if tokens:
            self.children.append(Unstructured(tokens))

    def clear(self):
        self.children = []

    def build_tokens(self) -> List[Token]:
        tokens: List[Token] = []
        for child in self.children:
            tokens.extend(child.build_tokens())
        return tokens


class File:
    """A parsed document: the root body plus the end-of-file token."""

    def __init__(self, body: Body, eof: List[Token]):
        self.body = body
        self.eof = eof

    def build_tokens(self) -> List[Token]:
        return self.body.build_tokens() + self.eof

    def bytes(self) -> bytes:
        return render_tokens(self.build_tokens())
