"""Debug output routed through a replaceable handler."""

from __future__ import annotations

import sys
from typing import Any, Callable

DebugHandler = Callable[[str], None]


def _default_debug_handler(message: str) -> None:
    print(f"DEBUG: {message}", file=sys.stderr)


class _DebugState:
    """Holds the handler that receives debug messages."""

    def __init__(self) -> None:
        self.handler: DebugHandler = _default_debug_handler


_state = _DebugState()


def debug_str(message: str) -> None:
    """Send a message to the current debug handler."""
    _state.handler(message)


def debug(fmt: str, *args: Any, **kwargs: Any) -> None:
    """Format a message with str.format and send it; silent under -O."""
    if __debug__:
        debug_str(fmt.format(*args, **kwargs))


def set_debug_handler(handler: DebugHandler) -> None:
    """Route subsequent debug messages to ``handler``."""
    _state.handler = handler


def reset_debug_handler() -> None:
    """Route debug messages back to standard error."""
    _state.handler = _default_debug_handler