#!/usr/bin/env python3
"""
TERRAFORMAT ERRORS
------------------
Every failure the formatter can report. The engine raises these and never
hands back partially formatted output; the CLI turns them into messages
on stderr and a non-zero exit status.
"""

from typing import List

from terraformat.hcl.diagnostics import Diagnostic, format_diagnostics


class TerraformatError(Exception):
    """Base class for all formatter errors."""


class ParseConfigError(TerraformatError):
    """The source is not valid native-syntax HCL."""

    def __init__(self, diagnostics: List[Diagnostic]):
        self.diagnostics = diagnostics
        super().__init__(f"parse config: {format_diagnostics(diagnostics)}")


class LocateItemSpanError(TerraformatError):
    """An item's tokens could not be found in its parent body."""

    def __init__(self, item_name: str = ""):
        self.item_name = item_name
        message = "locate item span"
        if item_name:
            message += f": {item_name}"
        super().__init__(message)


class ConfigError(TerraformatError):
    """The formatter configuration file is unreadable or invalid."""


class PathError(TerraformatError):
    """A target path is missing or unreadable, or a result cannot be written."""

    def __init__(self, message: str, path: str):
        self.path = path
        super().__init__(message % path)


class UnsupportedFileError(TerraformatError):
    def __init__(self):
        super().__init__(
            "Only .tf, .tfvars, and .tftest.hcl files can be processed with terraform fmt"
        )


class WriteWithStdinError(TerraformatError):
    def __init__(self):
        super().__init__("Option -write cannot be used when reading from stdin")
