"""Events flowing between the host and its modules.

Incoming events go from the host to modules. Host events are requests a
module returns to the host, which is the only party allowed to change
focus, proxying and process lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .actions import Mode
from .keyboard import KeyEvent


# --- Incoming (host -> module) ---

@dataclass(frozen=True)
class Key:
    key: KeyEvent


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class File:
    path: str


@dataclass(frozen=True)
class ModeChanged:
    """Broadcast through the proxy pass after a module changed mode."""
    mode: Mode


@dataclass(frozen=True)
class SaveRequest:
    """Write the buffer; to path when given, else to the file being edited."""
    path: Optional[str] = None


@dataclass(frozen=True)
class Notice:
    """A module message, relayed to every module for display."""
    module: str
    text: str


IncomingEvent = Union[Key, ResizeEvent, File, ModeChanged, SaveRequest, Notice]


# --- Host events (module -> host) ---

@dataclass(frozen=True)
class FocusMe:
    index: int


@dataclass(frozen=True)
class UnfocusMe:
    pass


@dataclass(frozen=True)
class EnableProxy:
    pass


@dataclass(frozen=True)
class DisableProxy:
    pass


@dataclass(frozen=True)
class HostQuit:
    pass


@dataclass(frozen=True)
class Interrupt:
    """Skip the remaining event handlers of the current frame."""


@dataclass(frozen=True)
class Message:
    module: str
    text: str


@dataclass(frozen=True)
class HostChangeMode:
    mode: Mode


@dataclass(frozen=True)
class Broadcast:
    """Deliver event to the on_event of every module."""
    event: IncomingEvent


HostEvent = Union[
    FocusMe, UnfocusMe, EnableProxy, DisableProxy, HostQuit, Interrupt,
    Message, HostChangeMode, Broadcast,
]
