"""Redraw plans and draw intents emitted by modules.

All coordinates are local to the emitting module's rectangle; the host
translates them to screen coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .actions import Mode


class CursorStyle(Enum):
    """Terminal caret shapes, valued by their DECSCUSR parameter."""
    BLINKING_BLOCK = 1
    STEADY_BLOCK = 2
    STEADY_UNDERSCORE = 4
    BLINKING_BAR = 5


MODE_CURSOR_STYLES = {
    Mode.NORMAL: CursorStyle.STEADY_BLOCK,
    Mode.INSERT: CursorStyle.BLINKING_BAR,
    Mode.VISUAL: CursorStyle.STEADY_UNDERSCORE,
    Mode.COMMAND: CursorStyle.BLINKING_BLOCK,
}


@dataclass(frozen=True)
class RedrawCursor:
    """Only the cursor moved."""


@dataclass(frozen=True)
class RedrawAll:
    """Everything in the module's rectangle must be repainted."""


@dataclass(frozen=True)
class RedrawLine:
    """Repaint one row.

    ``dim`` is the number of leading columns of ``text`` rendered dim.
    """
    y: int
    text: str
    dim: int = 0


@dataclass(frozen=True)
class RedrawRange:
    start: int
    end: int


Redraw = Union[RedrawCursor, RedrawAll, RedrawLine, RedrawRange]


@dataclass(frozen=True)
class CursorTo:
    x: int
    y: int
    style: CursorStyle = CursorStyle.STEADY_BLOCK


@dataclass(frozen=True)
class AskRedraw:
    redraw: Redraw


DrawIntent = Union[CursorTo, AskRedraw]
