"""Editing vocabulary shared by modules: modes, movements and actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Mode(Enum):
    """Editing modes."""
    NORMAL = "normal"
    INSERT = "insert"
    VISUAL = "visual"
    COMMAND = "command"


class Movement(Enum):
    """Cursor movements."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    LINE_START = "line_start"
    LINE_END = "line_end"


@dataclass(frozen=True)
class Move:
    direction: Movement


@dataclass(frozen=True)
class InsertChar:
    char: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class Delete:
    pass


@dataclass(frozen=True)
class ScrollBy:
    lines: int


@dataclass(frozen=True)
class Resize:
    """New container edges, in the same order as Module.on_resize."""
    top: int
    right: int
    bottom: int
    left: int


@dataclass(frozen=True)
class ChangeMode:
    mode: Mode


@dataclass(frozen=True)
class SaveFile:
    pass


@dataclass(frozen=True)
class OpenFile:
    path: str


@dataclass(frozen=True)
class WriteFile:
    """Write the buffer to path without changing the file being edited."""
    path: str


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Noop:
    pass


Action = Union[
    Move, InsertChar, Backspace, Delete, ScrollBy, Resize, ChangeMode,
    SaveFile, OpenFile, WriteFile, Quit, Noop,
]
