"""
Request-handling actions for Python web applications.

This package provides per-endpoint action objects that turn a transport
envelope into an HTTP response, with callbacks, halting, exception-to-status
mapping, content negotiation, cookies, sessions and flash messages.
"""

from http_actions.config import ActionConfig
from http_actions.core.action import Action, ActionDefinition
from http_actions.core.halt import Halt, halt
from http_actions.exceptions import (
    ActionError,
    MissingSessionError,
    UnknownFormatError,
    UnknownStatusError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Action",
    "ActionConfig",
    "ActionDefinition",
    "ActionError",
    "Halt",
    "MissingSessionError",
    "UnknownFormatError",
    "UnknownStatusError",
    "halt",
]
