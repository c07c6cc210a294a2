"""
Equilibrium - ui/renderer.py
TCOD Renderer: root console and presentation.
=============================================
Version:     1.0
Stack:       Python 3.11+ | tcod
"""

from __future__ import annotations
from typing import Iterable, Optional, Tuple
import tcod

class Renderer:
    """
    Owns the tcod root console. The context is attached by Engine.run().
    """
    def __init__(self, width: int, height: int, title: str = "Equilibrium"):
        self.width = width
        self.height = height
        self.title = title
        self.root_console = tcod.console.Console(width, height)
        self.context: Optional[tcod.context.Context] = None

    def clear(self) -> None:
        """Clear the console with black."""
        self.root_console.clear()

    def print_lines(self, x: int, y: int, lines: Iterable[Tuple[str, Tuple[int, int, int]]], max_rows: Optional[int] = None) -> int:
        """Prints colored lines top-down. Returns the number of rows written."""
        rows = 0
        for text, color in lines:
            if max_rows is not None and rows >= max_rows:
                break
            self.root_console.print(x, y + rows, text, fg=color)
            rows += 1
        return rows

    def present(self, context: tcod.context.Context) -> None:
        """Present the current console to the screen."""
        context.present(self.root_console)
