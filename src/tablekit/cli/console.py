from collections.abc import Sequence
from dataclasses import dataclass

from rich.console import Console
from rich.style import Style
from rich.table import Table


@dataclass(frozen=True, slots=True)
class SpecCliTheme:
    h1: str = "#7C3AED"
    h3: str = "#4ADE80"
    warning: str = "#F59E0B"


class CliHeadings:
    def __init__(
        self, *, console: Console | None = None, theme: SpecCliTheme | None = None
    ):
        self.console = console or Console()
        self.theme = theme or SpecCliTheme()

    def h1(self, text: str) -> None:
        self.console.rule(
            f"[bold]{text}[/bold]",
            style=Style(color=self.theme.h1, bold=True),
            characters="=",
        )

    def h3(self, text: str) -> None:
        self.console.rule(
            f"[italic]{text}[/italic]",
            style=Style(color=self.theme.h3),
            characters="┄",
        )

    def summary(self, rows: Sequence[tuple[str, str]]) -> None:
        """Print ``(key, value)`` pairs as a two-column table."""
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column(style=Style(color=self.theme.h3, bold=True))
        table.add_column()
        for _key, _value in rows:
            table.add_row(_key, _value)
        self.console.print(table)

    def warnings(self, messages: Sequence[str]) -> None:
        if not messages:
            return
        self.h3(f"{len(messages)} warning(s)")
        for _msg in messages:
            self.console.print(f"- {_msg}", style=Style(color=self.theme.warning), markup=False)
