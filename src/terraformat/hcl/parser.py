#!/usr/bin/env python3
"""
TERRAFORMAT PARSER - Structural Recovery
----------------------------------------
Groups the lexer's flat token list into the File/Body/Block/Attribute
tree. Expressions are not interpreted: an attribute's expression is every
token up to the newline that ends it at bracket depth zero. That is all
the format engine needs, since it moves items around but never rewrites
what is inside them.

Comments directly above an item (no blank line in between) are its lead
comments and travel with it. A comment on the same line after an item
belongs to that item as well.
"""

import logging
from typing import List, Optional, Tuple

from terraformat.hcl.diagnostics import Diagnostic, HclSyntaxError
from terraformat.hcl.lexer import HclLexer
from terraformat.hcl.tokens import (
    CLOSERS, OPENERS, START_POS, Pos, Token, TokenType,
)
from terraformat.hcl.tree import Attribute, Block, Body, File

logger = logging.getLogger("terraformat.hcl")


def _unescape_label(raw: str) -> str:
    return raw.replace('\\"', '"').replace("\\\\", "\\")


class HclParser:
    """Recursive descent over bodies; one instance per token list."""

    def __init__(self, tokens: List[Token], filename: str = ""):
        self.tokens = tokens
        self.filename = filename
        self.index = 0

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _next(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _fail(self, token: Token, summary: str, detail: str = ""):
        raise HclSyntaxError(Diagnostic(
            summary=summary, detail=detail, filename=self.filename,
            pos=Pos(line=token.line, column=token.column),
        ))

    def parse_file(self) -> File:
        body = self._parse_body(in_block=False)
        eof = self._next()
        return File(body, [eof])

    def _parse_body(self, in_block: bool) -> Body:
        body = Body()
        pending: List[Token] = []
        first_item = True
        seen_attributes = set()

        while True:
            token = self._peek()
            if token.type in (TokenType.NEWLINE, TokenType.COMMENT):
                pending.append(self._next())
                continue
            if token.type == TokenType.EOF:
                if in_block:
                    self._fail(token, "Unclosed configuration block",
                               "There is no closing brace for this block before the end of the file.")
                break
            if token.type == TokenType.CBRACE:
                if not in_block:
                    self._fail(token, "Argument or block definition required",
                               "Unexpected closing brace.")
                break
            if token.type != TokenType.IDENT:
                self._fail(token, "Argument or block definition required",
                           "An argument or block definition is required here.")

            split = self._lead_comment_start(pending, first_item and in_block)
            body.append_unstructured_tokens(pending[:split])
            lead = pending[split:]
            pending = []

            item = self._parse_item(lead, in_block)
            if isinstance(item, Attribute):
                if item.name in seen_attributes:
                    self._fail(item.name_token, "Attribute redefined",
                               f"The argument {item.name!r} was already set.")
                seen_attributes.add(item.name)
            body.append(item)
            first_item = False

        body.append_unstructured_tokens(pending)
        return body

    @staticmethod
    def _lead_comment_start(pending: List[Token], after_open_brace: bool) -> int:
        """
        Index in `pending` where the comments attached to the next item
        begin. A comment sharing the line of an opening brace stays put.
        """
        split = len(pending)
        while split > 0 and pending[split - 1].type == TokenType.COMMENT:
            split -= 1
        at_line_start = split > 0 or not after_open_brace
        while split < len(pending) and not at_line_start:
            at_line_start = pending[split].bytes.endswith(b"\n")
            split += 1
        return split

    def _parse_item(self, lead: List[Token], in_block: bool):
        name_token = self._next()
        following = self._peek()
        if following.type == TokenType.EQUAL:
            return self._parse_attribute(lead, name_token, in_block)
        if following.type in (TokenType.IDENT, TokenType.OQUOTE, TokenType.OBRACE):
            return self._parse_block(lead, name_token, in_block)
        self._fail(following, "Argument or block definition required",
                   f"An argument named {name_token.text!r} must be followed by an equals "
                   "sign, or a block must have an opening brace.")

    def _parse_attribute(self, lead: List[Token], name_token: Token, in_block: bool) -> Attribute:
        equals = self._next()
        expression = self._parse_expression(in_block)
        if not expression:
            self._fail(self._peek(), "Invalid expression",
                       "Expected the start of an expression, but found the end of the line.")
        line_comments, newline = self._parse_line_end(in_block)
        return Attribute(
            name=name_token.text, lead_comments=lead, name_token=name_token,
            equals=equals, expression=expression,
            line_comments=line_comments, newline=newline,
        )

    def _parse_expression(self, in_block: bool) -> List[Token]:
        tokens: List[Token] = []
        expected: List[TokenType] = []

        while True:
            token = self._peek()
            if token.type == TokenType.EOF:
                if expected:
                    self._fail(token, "Unclosed bracket",
                               "The expression reached the end of the file inside a bracket.")
                break
            if not expected:
                if token.type == TokenType.NEWLINE:
                    break
                if token.type == TokenType.COMMENT and self._ends_line(token):
                    break
                if token.type == TokenType.CBRACE:
                    if in_block:
                        break
                    self._fail(token, "Argument or block definition required",
                               "Unexpected closing brace.")
                if token.type == TokenType.EQUAL:
                    self._fail(token, "Invalid expression",
                               "An equals sign is not valid here; use == for comparison.")

            if token.type in OPENERS:
                expected.append(OPENERS[token.type])
            elif token.type in CLOSERS:
                if not expected or expected[-1] != token.type:
                    self._fail(token, "Mismatched bracket",
                               f"Unexpected {token.text!r} in expression.")
                expected.pop()
            tokens.append(self._next())

        return tokens

    def _ends_line(self, comment: Token) -> bool:
        if comment.bytes.endswith(b"\n"):
            return True
        return self._peek(1).type in (TokenType.NEWLINE, TokenType.EOF)

    def _parse_line_end(self, in_block: bool) -> Tuple[List[Token], List[Token]]:
        comments: List[Token] = []
        while self._peek().type == TokenType.COMMENT:
            comment = self._next()
            comments.append(comment)
            if comment.bytes.endswith(b"\n"):
                return comments, []

        token = self._peek()
        if token.type == TokenType.NEWLINE:
            return comments, [self._next()]
        if token.type == TokenType.EOF or (token.type == TokenType.CBRACE and in_block):
            return comments, []
        self._fail(token, "Missing newline after argument",
                   "An argument or block definition must end with a newline.")

    def _parse_block(self, lead: List[Token], type_token: Token, in_block: bool) -> Block:
        header = lead + [type_token]
        labels: List[str] = []

        while True:
            token = self._peek()
            if token.type == TokenType.IDENT:
                header.append(self._next())
                labels.append(token.text)
            elif token.type == TokenType.OQUOTE:
                header.append(self._next())
                parts = []
                while self._peek().type == TokenType.QUOTED_LIT:
                    literal = self._next()
                    header.append(literal)
                    parts.append(literal.text)
                if self._peek().type != TokenType.CQUOTE:
                    self._fail(self._peek(), "Invalid block label",
                               "Template sequences are not allowed in block labels.")
                header.append(self._next())
                labels.append(_unescape_label("".join(parts)))
            elif token.type == TokenType.OBRACE:
                header.append(self._next())
                break
            else:
                self._fail(token, "Invalid block definition",
                           "Either a quoted string block label or an opening brace is expected here.")

        body = self._parse_body(in_block=True)
        closing = [self._next()]
        comments, newline = self._parse_line_end(in_block)
        closing.extend(comments)
        closing.extend(newline)

        logger.debug("parsed block %s %s", type_token.text, labels)
        return Block(type_token.text, labels, header, body, closing)


def parse_config(src: bytes, filename: str = "",
                 start: Pos = START_POS) -> Tuple[Optional[File], List[Diagnostic]]:
    """
    Parses native-syntax source. Returns the File and an empty list, or
    None and the diagnostics that stopped the parse.
    """
    try:
        text = src.decode("utf-8")
    except UnicodeDecodeError as e:
        return None, [Diagnostic(
            summary="Invalid character encoding",
            detail="All input files must be UTF-8 encoded.",
            filename=filename, pos=Pos(line=start.line, column=start.column, byte=e.start),
        )]

    try:
        tokens = HclLexer(text, filename, start).tokenize()
        return HclParser(tokens, filename).parse_file(), []
    except HclSyntaxError as e:
        return None, [e.diagnostic]
