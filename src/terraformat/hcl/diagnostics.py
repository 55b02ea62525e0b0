#!/usr/bin/env python3
"""
TERRAFORMAT DIAGNOSTICS
-----------------------
Syntax problems reported by the lexer and parser.
"""

from dataclasses import dataclass
from typing import List

from terraformat.hcl.tokens import Pos


@dataclass(frozen=True)
class Diagnostic:
    summary: str
    detail: str = ""
    filename: str = ""
    pos: Pos = Pos()

    def __str__(self) -> str:
        location = f"{self.filename}:{self.pos.line},{self.pos.column}"
        text = f"{location}: {self.summary}"
        if self.detail:
            text += f"; {self.detail}"
        return text


class HclSyntaxError(Exception):
    """Raised inside the lexer/parser; converted to diagnostics by parse_config."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


def format_diagnostics(diagnostics: List[Diagnostic]) -> str:
    return "; ".join(str(d) for d in diagnostics)
