#!/usr/bin/env python3
"""
TERRAFORMAT LEXER - Native Syntax Scanner
-----------------------------------------
Turns Terraform/HCL native-syntax text into a flat list of Tokens.

Every byte of the input ends up either in a token's payload or in the
whitespace run carried in front of a token, so joining the rendered
tokens reproduces the source exactly (minus a leading BOM).

The scanner keeps just enough state to know whether it is reading an
expression, a quoted template or a heredoc; it does not understand the
grammar beyond that. Structure is recovered by the parser.
"""

import re
from typing import List, Optional

from terraformat.hcl.diagnostics import Diagnostic, HclSyntaxError
from terraformat.hcl.tokens import START_POS, Pos, Token, TokenType

_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_IDENT = re.compile(r"[^\W\d][\w-]*")
_HEREDOC_OPEN = re.compile(r"<<(-?)([^\W\d][\w-]*)(\r?\n)")

# Longest operators first so that "==" wins over "=".
_OPERATORS = [
    ("...", TokenType.ELLIPSIS),
    ("=>", TokenType.FAT_ARROW),
    ("==", TokenType.OPERATOR),
    ("!=", TokenType.OPERATOR),
    ("<=", TokenType.OPERATOR),
    (">=", TokenType.OPERATOR),
    ("&&", TokenType.OPERATOR),
    ("||", TokenType.OPERATOR),
    ("::", TokenType.OPERATOR),
    ("=", TokenType.EQUAL),
    (",", TokenType.COMMA),
    (":", TokenType.COLON),
    (".", TokenType.DOT),
    ("?", TokenType.QUESTION),
    ("[", TokenType.OBRACK),
    ("]", TokenType.CBRACK),
    ("(", TokenType.OPAREN),
    (")", TokenType.CPAREN),
    ("+", TokenType.OPERATOR),
    ("-", TokenType.OPERATOR),
    ("*", TokenType.OPERATOR),
    ("/", TokenType.OPERATOR),
    ("%", TokenType.OPERATOR),
    ("<", TokenType.OPERATOR),
    (">", TokenType.OPERATOR),
    ("!", TokenType.OPERATOR),
]


class HclLexer:
    """
    Single-use scanner. Call tokenize() once per source text.
    """

    def __init__(self, text: str, filename: str = "", start: Pos = START_POS):
        # Remove Byte Order Mark if present
        self.text = text.lstrip("\ufeff")
        self.filename = filename
        self.pos = 0
        self.line = start.line
        self.column = start.column
        self.byte = start.byte
        self.tokens: List[Token] = []
        self._pending_ws = ""

    # --- position bookkeeping ---

    def _advance_to(self, end: int):
        chunk = self.text[self.pos:end]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(chunk) - chunk.rfind("\n")
        else:
            self.column += len(chunk)
        self.byte += len(chunk.encode("utf-8"))
        self.pos = end

    def _here(self) -> Pos:
        return Pos(line=self.line, column=self.column, byte=self.byte)

    def _fail(self, summary: str, detail: str = ""):
        raise HclSyntaxError(Diagnostic(
            summary=summary, detail=detail,
            filename=self.filename, pos=self._here()
        ))

    def _emit(self, token_type: TokenType, end: int) -> Token:
        token = Token(
            type=token_type,
            bytes=self.text[self.pos:end].encode("utf-8"),
            whitespace=self._pending_ws.encode("utf-8"),
            line=self.line,
            column=self.column,
        )
        self._pending_ws = ""
        self._advance_to(end)
        self.tokens.append(token)
        return token

    def _flush_literal(self, token_type: TokenType, end: int):
        if end > self.pos:
            self._emit(token_type, end)

    def _skip_whitespace(self):
        start = self.pos
        end = start
        while end < len(self.text):
            char = self.text[end]
            if char in " \t":
                end += 1
            elif char == "\r" and not self.text.startswith("\r\n", end):
                end += 1
            else:
                break
        if end > start:
            self._pending_ws += self.text[start:end]
            self._advance_to(end)

    # --- scanning ---

    def tokenize(self) -> List[Token]:
        self._scan_expression(in_template=False)
        self._emit(TokenType.EOF, self.pos)
        return self.tokens

    def _scan_expression(self, in_template: bool):
        """
        Scans expression-mode tokens. Inside a template interpolation this
        returns when it meets the `}` (or `~}`) that closes the sequence.
        """
        text = self.text
        depth = 0
        while True:
            self._skip_whitespace()
            if self.pos >= len(text):
                break
            pos = self.pos
            char = text[pos]

            if char == "\n" or text.startswith("\r\n", pos):
                self._emit(TokenType.NEWLINE, pos + (1 if char == "\n" else 2))
            elif char == "#" or text.startswith("//", pos):
                end = text.find("\n", pos)
                self._emit(TokenType.COMMENT, len(text) if end == -1 else end + 1)
            elif text.startswith("/*", pos):
                end = text.find("*/", pos + 2)
                if end == -1:
                    self._fail("Unterminated block comment",
                               "A block comment started with /* was never closed by */.")
                self._emit(TokenType.COMMENT, end + 2)
            elif char == "{":
                depth += 1
                self._emit(TokenType.OBRACE, pos + 1)
            elif in_template and depth == 0 and (char == "}" or text.startswith("~}", pos)):
                return
            elif char == "}":
                depth -= 1
                self._emit(TokenType.CBRACE, pos + 1)
            elif char == '"':
                self._scan_quoted()
            elif text.startswith("<<", pos) and _HEREDOC_OPEN.match(text, pos):
                self._scan_heredoc(_HEREDOC_OPEN.match(text, pos))
            elif char in "0123456789":
                self._emit(TokenType.NUMBER, _NUMBER.match(text, pos).end())
            elif _IDENT.match(text, pos):
                self._emit(TokenType.IDENT, _IDENT.match(text, pos).end())
            else:
                operator = self._match_operator(pos)
                if operator is None:
                    self._fail("Invalid character",
                               f"This character is not used within the language: {char!r}")
                symbol, token_type = operator
                self._emit(token_type, pos + len(symbol))

        if in_template:
            self._fail("Unterminated template interpolation",
                       "Expected a closing brace to end the interpolation sequence.")

    def _match_operator(self, pos: int) -> Optional[tuple]:
        for symbol, token_type in _OPERATORS:
            if self.text.startswith(symbol, pos):
                return symbol, token_type
        return None

    def _scan_interpolation(self):
        """Scans `${ ... }` or `%{ ... }` starting at the current position."""
        text = self.text
        token_type = TokenType.TEMPLATE_INTERP if text[self.pos] == "$" else TokenType.TEMPLATE_CONTROL
        end = self.pos + 2
        if text.startswith("~", end):
            end += 1
        self._emit(token_type, end)
        self._scan_expression(in_template=True)
        closer = 2 if text.startswith("~}", self.pos) else 1
        self._emit(TokenType.TEMPLATE_SEQ_END, self.pos + closer)

    def _scan_quoted(self):
        text = self.text
        self._emit(TokenType.OQUOTE, self.pos + 1)
        i = self.pos
        while True:
            if i >= len(text) or text[i] in "\r\n":
                self._advance_to(min(i, len(text)))
                self._fail("Unterminated template string",
                           "No closing marker was found for the string.")
            char = text[i]
            if char == '"':
                self._flush_literal(TokenType.QUOTED_LIT, i)
                self._emit(TokenType.CQUOTE, i + 1)
                return
            if char == "\\":
                i += 2
            elif text.startswith("$${", i) or text.startswith("%%{", i):
                i += 3
            elif text.startswith("${", i) or text.startswith("%{", i):
                self._flush_literal(TokenType.QUOTED_LIT, i)
                self._scan_interpolation()
                i = self.pos
            else:
                i += 1

    def _scan_heredoc(self, opener):
        text = self.text
        marker = opener.group(2)
        closing = re.compile(r"[ \t]*" + re.escape(marker) + r"(?=\r?\n|$)")
        self._emit(TokenType.OHEREDOC, opener.end())

        i = self.pos
        at_line_start = True
        while True:
            if at_line_start:
                match = closing.match(text, i)
                if match:
                    self._flush_literal(TokenType.STRING_LIT, i)
                    self._skip_whitespace()
                    self._emit(TokenType.CHEREDOC, match.end())
                    return
            if i >= len(text):
                self._fail("Unterminated template string",
                           f"No closing marker was found for the heredoc {marker}.")
            if text.startswith("$${", i) or text.startswith("%%{", i):
                i += 3
                at_line_start = False
            elif text.startswith("${", i) or text.startswith("%{", i):
                self._flush_literal(TokenType.STRING_LIT, i)
                self._scan_interpolation()
                i = self.pos
                at_line_start = False
            elif text[i] == "\n":
                i += 1
                at_line_start = True
            else:
                i += 1
                at_line_start = False


def tokenize(text: str, filename: str = "", start: Pos = START_POS) -> List[Token]:
    return HclLexer(text, filename, start).tokenize()
