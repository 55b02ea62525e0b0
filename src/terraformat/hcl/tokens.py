#!/usr/bin/env python3
"""
TERRAFORMAT TOKENS - The Atomic Units
-------------------------------------
Token types and the Token record shared by the lexer, the syntax tree and
the format engine.

A Token is compared by identity: two tokens with the same type and bytes
are still different tokens when they come from different places in the
source. The format engine relies on this to locate an item's tokens
inside its parent body without false matches.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class TokenType(Enum):
    NEWLINE = "Newline"
    COMMENT = "Comment"
    IDENT = "Ident"
    NUMBER = "NumberLit"
    OQUOTE = "OQuote"
    CQUOTE = "CQuote"
    QUOTED_LIT = "QuotedLit"
    OHEREDOC = "OHeredoc"
    CHEREDOC = "CHeredoc"
    STRING_LIT = "StringLit"
    TEMPLATE_INTERP = "TemplateInterp"
    TEMPLATE_CONTROL = "TemplateControl"
    TEMPLATE_SEQ_END = "TemplateSeqEnd"
    OBRACE = "OBrace"
    CBRACE = "CBrace"
    OBRACK = "OBrack"
    CBRACK = "CBrack"
    OPAREN = "OParen"
    CPAREN = "CParen"
    EQUAL = "Equal"
    COMMA = "Comma"
    COLON = "Colon"
    DOT = "Dot"
    ELLIPSIS = "Ellipsis"
    QUESTION = "Question"
    FAT_ARROW = "FatArrow"
    OPERATOR = "Operator"
    EOF = "EOF"


# Tokens that open a nesting level inside an expression, mapped to the
# token type that closes them.
OPENERS = {
    TokenType.OBRACE: TokenType.CBRACE,
    TokenType.OBRACK: TokenType.CBRACK,
    TokenType.OPAREN: TokenType.CPAREN,
    TokenType.OQUOTE: TokenType.CQUOTE,
    TokenType.OHEREDOC: TokenType.CHEREDOC,
    TokenType.TEMPLATE_INTERP: TokenType.TEMPLATE_SEQ_END,
    TokenType.TEMPLATE_CONTROL: TokenType.TEMPLATE_SEQ_END,
}

CLOSERS = frozenset(OPENERS.values())


@dataclass(eq=False)
class Token:
    """
    One lexical unit. `whitespace` holds the horizontal whitespace that
    preceded the token on its line and is written back verbatim.
    """
    type: TokenType
    bytes: bytes
    whitespace: bytes = b""
    line: int = 0     # 1-based source line, 0 for synthesized tokens
    column: int = 0   # 1-based source column, 0 for synthesized tokens

    def render(self) -> bytes:
        return self.whitespace + self.bytes

    @property
    def text(self) -> str:
        return self.bytes.decode("utf-8")


@dataclass(frozen=True)
class Pos:
    """A source position; the parser starts at line 1, column 1, byte 0."""
    line: int = 1
    column: int = 1
    byte: int = 0


START_POS = Pos(line=1, column=1, byte=0)


def newline_token(eol: bytes = b"\n") -> Token:
    """Returns a fresh newline token. Never share one between positions."""
    return Token(TokenType.NEWLINE, eol)


def detect_newline(tokens: List[Token]) -> bytes:
    """The line ending of the first newline token; LF when there is none."""
    for token in tokens:
        if token.type == TokenType.NEWLINE:
            return token.bytes
    return b"\n"


def render_tokens(tokens: List[Token]) -> bytes:
    return b"".join(token.render() for token in tokens)


def is_line_terminated(tokens: List[Token]) -> bool:
    """True when the run ends with a newline or a newline-carrying comment."""
    if not tokens:
        return False
    last = tokens[-1]
    if last.type == TokenType.NEWLINE:
        return True
    return last.type == TokenType.COMMENT and last.bytes.endswith(b"\n")
