"""Capability set every module attached to the host must provide."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .drawing import DrawIntent
from .events import HostEvent, IncomingEvent
from .layout import Rect


class Module(ABC):
    """Base class for interactive components occupying one layout tile.

    The host owns every module and addresses it by its index in the
    module list. Modules never touch the host directly; they return host
    events and draw intents instead.
    """

    name: str = "module"

    def on_load(self) -> None:
        """Called once, right after the module is attached."""

    def on_event(self, event: IncomingEvent) -> Optional[List[HostEvent]]:
        """Handle an event dispatched to the focused module."""
        return None

    def on_draw(self) -> Optional[List[DrawIntent]]:
        """Return draw intents in local coordinates, or None when clean."""
        return None

    def on_resize(self, top: int, right: int, bottom: int, left: int) -> None:
        """Adopt a new rectangle assigned by the layout."""

    def on_destroy(self) -> None:
        """Called once when the host shuts down."""

    def proxy_trigger(self, event: IncomingEvent, self_index: int) -> Optional[List[HostEvent]]:
        """Observe every input before focused dispatch.

        Only modules with globally scoped behavior override this.
        """
        return None

    @abstractmethod
    def get_container(self) -> Rect:
        """Rectangle the module currently occupies."""
