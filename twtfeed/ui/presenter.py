"""Timeline rendering for the terminal."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Iterable, Sequence

from rich.console import Console

from ..engine import MentionTransformer, Record


def render(
    records: Iterable[Record],
    time_format: str,
    transformer: MentionTransformer | None = None,
) -> list[str]:
    """Format one ``<time> <author>: <text>`` line per record."""

    lines: list[str] = []
    for record in records:
        text = transformer.collapse(record.text) if transformer is not None else record.text
        lines.append(f"{record.strftime(time_format)} {record.author}: {text}")
    return lines


def display(lines: Sequence[str], use_pager: bool = False, console: Console | None = None) -> None:
    console = console or Console()
    with console.pager(styles=False) if use_pager else nullcontext():
        for line in lines:
            console.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)


__all__ = ["display", "render"]
