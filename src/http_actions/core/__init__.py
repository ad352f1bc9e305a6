"""Core request-handling logic: halting, callbacks, exception policy,
per-request state and the lifecycle controller."""

from http_actions.core.action import Action, ActionDefinition
from http_actions.core.callbacks import Callback, CallbackChain
from http_actions.core.cookie_jar import CookieJar
from http_actions.core.exception_policy import ExceptionPolicy
from http_actions.core.flash import Flash
from http_actions.core.halt import Halt, halt
from http_actions.core.request import Request
from http_actions.core.response import Response
from http_actions.core.state_machine import CallContext, run_action

__all__ = [
    "Action",
    "ActionDefinition",
    "CallContext",
    "Callback",
    "CallbackChain",
    "CookieJar",
    "ExceptionPolicy",
    "Flash",
    "Halt",
    "Request",
    "Response",
    "halt",
    "run_action",
]
