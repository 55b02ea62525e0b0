# src/terraformat/cli/formatter.py
import difflib
from typing import TextIO

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax


def unified_diff(before: bytes, after: bytes, path: str) -> str:
    """Unified diff in the layout `diff -u --label=old/<path> --label=new/<path>` prints."""
    lines = difflib.unified_diff(
        before.decode("utf-8", errors="replace").splitlines(keepends=True),
        after.decode("utf-8", errors="replace").splitlines(keepends=True),
        fromfile=f"old/{path}",
        tofile=f"new/{path}",
    )
    out = []
    for line in lines:
        out.append(line)
        if not line.endswith("\n"):
            out.append("\n\\ No newline at end of file\n")
    return "".join(out)


class DiffFormatter:
    """
    DiffFormatter: renders diffs and error messages for the CLI.
    Colour is only used when the stream is a terminal and -no-color was not given.
    """

    def __init__(self, stdout: TextIO, stderr: TextIO, no_color: bool = False):
        self.stdout = stdout
        self.no_color = no_color
        self.out_console = Console(file=stdout, no_color=no_color, soft_wrap=True, highlight=False)
        self.err_console = Console(file=stderr, no_color=no_color, soft_wrap=True, highlight=False)

    @property
    def colored(self) -> bool:
        return not self.no_color and self.out_console.is_terminal

    def display_diff(self, before: bytes, after: bytes, path: str):
        diff = unified_diff(before, after, path)
        if not diff:
            return

        if self.colored:
            self.out_console.print(Syntax(diff.rstrip("\n"), "diff", theme="monokai"))
        else:
            self.stdout.write(diff)

    def show_error(self, error: Exception):
        # Messages may contain HCL such as `[for x in y : x]`.
        self.err_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
