#!/usr/bin/env python3
"""
TERRAFORMAT CLI - Command Line Front-End
----------------------------------------
Translates `terraformat [options] [target...]` into FormatEngine calls.
Accepts the single-dash flag spelling of `terraform fmt` (`-list=false`,
`-recursive`) on top of argparse's double-dash form.

Exit codes: 0 success, 1 flag error, 2 runtime error, 3 `-check` found
files that are not formatted.
"""

import argparse
import io
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from terraformat.cli.formatter import DiffFormatter
from terraformat.core.config import resolve_config
from terraformat.core.engine import FormatEngine, FormatResult
from terraformat.core.errors import PathError, TerraformatError, WriteWithStdinError

logger = logging.getLogger("terraformat.cli")

EXIT_OK = 0
EXIT_FLAG_ERROR = 1
EXIT_ERROR = 2
EXIT_CHECK_DIFF = 3

STDIN_ARG = "-"
LOG_LEVEL_ENV = "TERRAFORMAT_LOG"

BOOLEAN_FLAGS = ("list", "write", "diff", "check", "no-color", "recursive")
VALUE_FLAGS = ("config",)
LONG_FLAGS = BOOLEAN_FLAGS + VALUE_FLAGS + ("help",)

TRUE_VALUES = ("1", "t", "true")
FALSE_VALUES = ("0", "f", "false")

HELP_TEXT = """Usage: terraformat [options] [target...]

  Rewrites all Terraform configuration files to a canonical format. All
  configuration files (.tf), variables files (.tfvars), and testing files
  (.tftest.hcl) are updated. JSON files (.tf.json, .tfvars.json, or
  .tftest.json) are not modified.

  Attributes and blocks are reordered by block type: meta-arguments such
  as count and for_each come first, lifecycle and depends_on last, and
  top-level blocks are grouped (terraform, provider, variable, locals,
  data, resource, module, output, ...). Top-level blocks are separated
  by exactly one blank line.

  By default, terraformat scans the current directory for configuration
  files. If you provide a directory for the target argument, then it will
  scan that directory instead. If you provide a file, then only that file
  is processed. If you provide a single dash ("-"), then input is read
  from standard input (STDIN).

  The content must be in the Terraform language native syntax; JSON is not
  supported.

Options:

  -list=false    Don't list files whose formatting differs
                 (always disabled if using STDIN)

  -write=false   Don't write to source files
                 (always disabled if using STDIN or -check)

  -diff          Display diffs of formatting changes

  -check         Check if the input is formatted. Exit status will be 0 if all
                 input is properly formatted and non-zero otherwise.

  -no-color      If specified, output won't contain any color.

  -recursive     Also process files in subdirectories. By default, only the
                 given directory (or current directory) is processed.

  -config=PATH   Read formatting options from a YAML file. Defaults to
                 .terraformat.yaml in the current directory when present.
"""


class FlagError(Exception):
    pass


class _FlagParser(argparse.ArgumentParser):
    """argparse reports errors by exiting; raise instead so run() owns the exit code."""

    def error(self, message):
        raise FlagError(message)


def rewrite_single_dash_arg(arg: str) -> str:
    """
    `-list=false` -> `--no-list`, `-diff` -> `--diff`. Anything that is not
    one of the known long flags is left for argparse to judge.
    """
    if arg == STDIN_ARG or not arg.startswith("-"):
        return arg

    trimmed = arg[2:] if arg.startswith("--") else arg[1:]
    name, sep, value = trimmed.partition("=")
    if name not in LONG_FLAGS:
        return arg

    if name in BOOLEAN_FLAGS and sep:
        lowered = value.lower()
        if lowered in TRUE_VALUES:
            return f"--{name}"
        if lowered in FALSE_VALUES:
            return f"--no-{name}"
        raise FlagError(f'invalid boolean value "{value}" for -{name}')
    return f"--{trimmed}"


def rewrite_single_dash_args(args: List[str]) -> List[str]:
    return [rewrite_single_dash_arg(arg) for arg in args]


def build_parser() -> argparse.ArgumentParser:
    parser = _FlagParser(prog="terraformat", add_help=False, allow_abbrev=False)
    parser.add_argument("--help", "-h", action="store_true")
    parser.add_argument("--list", action=argparse.BooleanOptionalAction, default=True)
    # None means "not given": an explicit -write is an error with stdin.
    parser.add_argument("--write", "-w", action=argparse.BooleanOptionalAction, default=None)
    for name in ("diff", "check", "no-color", "recursive"):
        parser.add_argument(f"--{name}", action=argparse.BooleanOptionalAction, default=False)
    parser.add_argument("--config", default=None)
    parser.add_argument("targets", nargs="*")
    return parser


def configure_logging():
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


class TerraformatCLI:
    """
    CLI wrapper: resolves flags into a run plan, walks the targets, and
    reports per-target errors without stopping the remaining targets.
    """

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.parser = build_parser()

    def run(self, argv: List[str]) -> int:
        try:
            args = self.parser.parse_args(rewrite_single_dash_args(argv))
        except FlagError as e:
            self.stderr.write(f"Error parsing command-line flags: {e}\n")
            self.stdout.write(HELP_TEXT)
            return EXIT_FLAG_ERROR

        if args.help:
            self.stdout.write(HELP_TEXT)
            return EXIT_OK

        try:
            cfg = resolve_config(args.config, Path.cwd())
        except TerraformatError as e:
            DiffFormatter(self.stdout, self.stderr, no_color=args.no_color).show_error(e)
            return EXIT_ERROR

        return FormatRun(args, FormatEngine(cfg), self.stdin, self.stdout, self.stderr).execute()


class FormatRun:
    """
    One invocation: the resolved options plus the output sinks. In check
    mode listing is forced on and written to a buffer, which is copied to
    stdout at the end only when listing was not switched off.
    """

    def __init__(self, args: argparse.Namespace, engine: FormatEngine,
                 stdin: TextIO, stdout: TextIO, stderr: TextIO):
        self.engine = engine
        self.stdin = stdin
        self.stdout = stdout

        self.targets = args.targets or ["."]
        self.use_stdin = self.targets[0] == STDIN_ARG
        self.write_requested = args.write is True
        self.list = args.list
        self.write = args.write is not False
        self.diff = args.diff
        self.check = args.check
        self.recursive = args.recursive

        if self.check:
            self.write = False
        if self.use_stdin:
            self.list = False
            self.write = False
        self.report_list = self.list

        if self.check:
            self.list = True
            self.out = io.StringIO()
        else:
            self.out = stdout
        self.formatter = DiffFormatter(self.out, stderr, no_color=args.no_color)

        self.changed_any = False

    def execute(self) -> int:
        if self.use_stdin:
            errors = self._collect(self.format_stdin)
        else:
            errors = []
            for target in self.targets:
                errors.extend(self.process_target(target))

        for error in errors:
            self.formatter.show_error(error)
        if errors:
            return EXIT_ERROR

        if not self.check:
            return EXIT_OK
        if self.report_list:
            self.stdout.write(self.out.getvalue())
        return EXIT_CHECK_DIFF if self.changed_any else EXIT_OK

    def format_stdin(self):
        if self.write_requested:
            raise WriteWithStdinError()
        # Read bytes where possible so CRLF line endings survive.
        data = getattr(self.stdin, "buffer", self.stdin).read()
        src = data.encode("utf-8") if isinstance(data, str) else data
        self.handle_result(self.engine.format_bytes(src, ""))

    def process_target(self, target: str) -> List[Exception]:
        path = Path(os.path.normpath(target))
        if not path.exists():
            return [PathError("No file or directory at %s", str(path))]

        if not path.is_dir():
            return self._collect(self.process_file, path)

        errors = []
        try:
            for entry in self.engine.iter_directory(path, recursive=self.recursive):
                errors.extend(self._collect(self.process_file, entry))
        except TerraformatError as e:
            errors.append(e)
        return errors

    @staticmethod
    def _collect(func, *args) -> List[Exception]:
        try:
            func(*args)
        except (TerraformatError, OSError) as e:
            return [e]
        return []

    def process_file(self, path: Path):
        logger.debug("formatting %s", path)
        self.handle_result(self.engine.format_file(path))

    def handle_result(self, result: FormatResult):
        if result.changed:
            self.changed_any = True
            if self.list and result.path:
                self.out.write(result.path + "\n")
            if self.write:
                self.engine.write_atomic(Path(result.path), result.formatted)
            if self.diff:
                self.formatter.display_diff(result.source, result.formatted, result.path)

        if not self.list and not self.write and not self.diff:
            self.out.write(result.formatted.decode("utf-8"))


def main():
    """Application entry point with interrupt handling."""
    configure_logging()
    try:
        sys.exit(TerraformatCLI().run(sys.argv[1:]))
    except KeyboardInterrupt:
        sys.stderr.write("\nTerminated by user.\n")
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
