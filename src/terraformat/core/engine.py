#!/usr/bin/env python3
"""
TERRAFORMAT ENGINE - The File Orchestrator
------------------------------------------
Connects the format pipeline to the filesystem: decides which files are
Terraform files, walks directories, validates and formats content, and
writes results back atomically.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from terraformat.core.config import FormatConfig
from terraformat.core.errors import PathError, UnsupportedFileError
from terraformat.formatting.pipeline import FormatPipeline
from terraformat.validator.validator import HclValidator

logger = logging.getLogger("terraformat.engine")

TERRAFORM_SUFFIXES = (".tftest.hcl", ".tfmock.hcl", ".tf", ".tfvars")
FORMATTED_FILE_MODE = 0o644


def is_terraform_file(path) -> bool:
    name = Path(path).name.lower()
    return name.endswith(TERRAFORM_SUFFIXES)


def should_skip(name: str) -> bool:
    return name.startswith(".")


@dataclass
class FormatResult:
    path: str
    source: bytes
    formatted: bytes

    @property
    def changed(self) -> bool:
        return self.source != self.formatted


class FormatEngine:
    """
    Principal orchestrator for formatting documents on disk or in memory.
    """

    def __init__(self, cfg: Optional[FormatConfig] = None,
                 validator: Optional[HclValidator] = None):
        self.cfg = cfg or FormatConfig.default()
        self.pipeline = FormatPipeline(self.cfg)
        self.validator = validator or HclValidator(enabled=self.cfg.validate_syntax)

    def format_bytes(self, src: bytes, path: str = "") -> FormatResult:
        """Validates, formats, and checks the result parses again."""
        self.validator.validate(src, path)
        formatted = self.pipeline.run(src, path)
        self.validator.verify_output(formatted, path)
        return FormatResult(path=path, source=src, formatted=formatted)

    def format_file(self, path: Path) -> FormatResult:
        if not is_terraform_file(path):
            raise UnsupportedFileError()
        try:
            src = Path(path).read_bytes()
        except OSError as e:
            raise PathError("Failed to read file %s", str(path)) from e
        return self.format_bytes(src, str(path))

    def iter_directory(self, path: Path, recursive: bool = False) -> Iterator[Path]:
        """
        Yields Terraform files in name order. Dot-names are skipped, and
        symlinked directories are never followed to avoid loops.
        """
        path = Path(path)
        try:
            entries = sorted(path.iterdir(), key=lambda entry: entry.name)
        except FileNotFoundError as e:
            raise PathError("There is no configuration directory at %s", str(path)) from e
        except OSError as e:
            raise PathError("Cannot read directory %s", str(path)) from e

        for entry in entries:
            if should_skip(entry.name):
                continue
            if entry.is_dir():
                if recursive and not entry.is_symlink():
                    yield from self.iter_directory(entry, recursive=True)
                continue
            if is_terraform_file(entry.name):
                yield entry

    def write_atomic(self, target_path: Path, content: bytes):
        target_path = Path(target_path)
        temp_file = target_path.with_name(target_path.name + ".terraformat.tmp")
        try:
            temp_file.write_bytes(content)
            os.chmod(temp_file, FORMATTED_FILE_MODE)
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise PathError("Failed to write %s", str(target_path)) from e
        logger.debug("wrote %s (%d bytes)", target_path, len(content))
