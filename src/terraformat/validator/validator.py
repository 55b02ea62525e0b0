#!/usr/bin/env python3
"""
TERRAFORMAT VALIDATOR - Pre-Flight Syntax Gate
----------------------------------------------
Runs each input through a full HCL2 grammar (python-hcl2) before it is
formatted, and re-parses the formatted result with the token parser
before anything is written. The first check rejects input the formatter's
structural parser would tolerate; the second guarantees the formatter
never emits a document it cannot read back.
"""

import logging

import hcl2
from lark.exceptions import LarkError

from terraformat.core.errors import ParseConfigError, TerraformatError
from terraformat.hcl.diagnostics import Diagnostic
from terraformat.hcl.parser import parse_config
from terraformat.hcl.tokens import Pos

logger = logging.getLogger("terraformat.validator")


def _diagnostic_from_lark(error: LarkError, path: str) -> Diagnostic:
    line = getattr(error, "line", None) or 0
    column = getattr(error, "column", None) or 0
    summary = str(error).strip().splitlines()[0] if str(error).strip() else type(error).__name__
    return Diagnostic(summary=summary, filename=path, pos=Pos(line=line, column=column))


class HclValidator:
    """
    Syntax gate around the formatter. `enabled=False` skips the grammar
    check but keeps the read-back check on formatted output.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def validate(self, src: bytes, path: str = ""):
        """Raises ParseConfigError when the source is not valid HCL2."""
        if not self.enabled:
            return
        try:
            text = src.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseConfigError([Diagnostic(
                summary="Invalid character encoding",
                detail="All input files must be UTF-8 encoded.",
                filename=path, pos=Pos(byte=e.start),
            )]) from e

        if not text.endswith("\n"):
            text += "\n"
        try:
            hcl2.loads(text)
        except LarkError as e:
            logger.debug("hcl2 rejected %s: %s", path or "<stdin>", e)
            raise ParseConfigError([_diagnostic_from_lark(e, path)]) from e

    def verify_output(self, formatted: bytes, path: str = ""):
        """Self-abort: the formatted document must parse again."""
        _, diagnostics = parse_config(formatted, path)
        if diagnostics:
            logger.error("formatted output for %s does not parse: %s", path or "<stdin>", diagnostics[0])
            raise TerraformatError(
                f"Formatting {path or '<stdin>'} produced invalid output; no changes were made"
            )
