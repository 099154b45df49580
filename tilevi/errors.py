"""Exception hierarchy for tilevi.

Every error raised by the editor core inherits from TileviError so the
host can recover from any of them with a single except clause.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class TileviError(Exception):
    """Base exception for tilevi errors.

    Attributes:
        message: Human-readable error description
        context: Additional context for debugging
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}
        logger.debug(f"{self.__class__.__name__}: {self.message}")

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} [{ctx}]"
        return self.message


class LayoutError(TileviError):
    """Raised when the screen layout cannot satisfy a request."""


class LayoutFullError(LayoutError):
    """No free leaf is left to place a module in."""


class LayoutMissingError(LayoutError):
    """The requested module id is not placed in the layout."""


class UnknownCommandError(TileviError):
    """The command prompt received a command it does not recognize."""


class UnresolvedPositionError(TileviError):
    """A (col, row) coordinate does not map to an offset in the buffer."""


class UnsupportedError(TileviError):
    """The requested mode or redraw plan is not implemented."""


class ConfigError(TileviError):
    """Raised for invalid configuration values."""
