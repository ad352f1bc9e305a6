"""Lifecycle of one action call.

This module drives an action through its states:

    CONSTRUCTING -> BEFORE_CALLBACKS -> HANDLING -> AFTER_CALLBACKS -> FINALIZING -> DONE

plus RECOVERING, entered when a stage raises, and HALTED, entered when a
stage (or a recovery handler) halts.

Each stage is a plain function taking the :class:`CallContext`. The driver
wraps the three middle stages in a single halt guard:

- A halt jumps straight to finalization with the halted status and body.
- An exception is matched against the exception policy. A match either
  halts with a status or runs a recovery method on the action. No match
  means the exception is reported and re-raised; no response is returned.
- Finalization always runs for halted, recovered and completed calls.

Examples:
    Running an action directly::

        from http_actions.core.state_machine import run_action

        status, headers, body = run_action(action, env)
"""

import time
import traceback
from typing import TYPE_CHECKING, Any

from http_actions import mime
from http_actions import status as status_table
from http_actions.constants import CONTENT_TYPE_HEADER, ERRORS, EXCEPTION, FORMAT
from http_actions.core.halt import Halt
from http_actions.core.request import Request
from http_actions.core.response import Response
from http_actions.exceptions import ActionError
from http_actions.models import LifecycleState, Outcome
from http_actions.observability.logging import call_context, get_logger
from http_actions.observability.metrics import record_call, record_duration
from http_actions.utils.headers import has_header, merge_headers, requires_no_body, strip_to_entity_headers

if TYPE_CHECKING:
    from http_actions.core.action import Action

logger = get_logger(__name__)

Serialized = tuple[int, dict[str, str], list[bytes]]


class CallContext:
    """Per-call state threaded through the lifecycle stages.

    Attributes:
        action: The action instance being called.
        env: Transport envelope.
        request: Request built during construction.
        response: Response built during construction.
        state: Current lifecycle state.
        history: Every state entered, in order.
        outcome: How the call ended so far.
        exception: Exception being recovered from, if any.
    """

    def __init__(self, action: "Action", env: dict[str, Any]) -> None:
        self.action = action
        self.env = env
        self.request: Request
        self.response: Response
        self.state = LifecycleState.CONSTRUCTING
        self.history: list[LifecycleState] = [self.state]
        self.outcome = Outcome.COMPLETED
        self.exception: Exception | None = None

    def transition(self, state: LifecycleState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def action_name(self) -> str:
        return type(self.action).__name__


def construct(action: "Action", env: dict[str, Any]) -> CallContext:
    """Build the request and the response, negotiating the content type.

    Raises:
        UnknownFormatError: If accepted formats, defaults or the explicit
            format override name an unknown format.
    """
    ctx = CallContext(action, env)
    config = action.config
    request = Request(env, config)

    accepted = mime.restrict_mime_types(config, action.definition.accepted_formats)
    content_type = mime.resolve_content_type(
        config,
        accept=request.accept,
        accepted_mime_types=accepted or config.mime_types,
        explicit_format=env.get(FORMAT),
        path=request.path,
        restricted=accepted is not None,
    )

    ctx.request = request
    ctx.response = Response(env, request, config, content_type, sessions_enabled=action.sessions_active)
    return ctx


def run_before_callbacks(ctx: CallContext) -> None:
    ctx.transition(LifecycleState.BEFORE_CALLBACKS)
    ctx.action.definition.before_callbacks.run(ctx.action, ctx.request, ctx.response)


def run_handler(ctx: CallContext) -> None:
    ctx.transition(LifecycleState.HANDLING)
    ctx.action.handle(ctx.request, ctx.response)


def run_after_callbacks(ctx: CallContext) -> None:
    ctx.transition(LifecycleState.AFTER_CALLBACKS)
    ctx.action.definition.after_callbacks.run(ctx.action, ctx.request, ctx.response)


STAGES = (run_before_callbacks, run_handler, run_after_callbacks)


def recover(ctx: CallContext, exception: Exception) -> bool:
    """Apply the exception policy to an exception raised by a stage.

    A status target halts with that status. A handler name that matches a
    method on the action calls it with ``(request, response, exception)``;
    any other string is resolved as a status code or alias.

    Configuration errors never match, so they always escape the call.

    Returns:
        False when no policy entry matches.

    Raises:
        Halt: When the policy resolves to a status, or the handler halts.
        UnknownStatusError: When a string target is neither a method nor a status.
    """
    ctx.transition(LifecycleState.RECOVERING)
    ctx.exception = exception

    if isinstance(exception, ActionError):
        return False

    target = ctx.action.exception_policy.resolve(exception)
    if target is None:
        return False

    ctx.outcome = Outcome.RECOVERED
    logger.warning(
        "action.recovered",
        exception=type(exception).__name__,
        target=target,
    )

    if isinstance(target, str):
        handler = getattr(ctx.action, target, None)
        if callable(handler):
            handler(ctx.request, ctx.response, exception)
            return True

    raise Halt(status_table.code_for(target))


def report_unhandled(ctx: CallContext, exception: BaseException) -> None:
    """Record an exception that escapes the call."""
    ctx.outcome = Outcome.ERROR
    ctx.env[EXCEPTION] = exception

    errors = ctx.env.get(ERRORS)
    if errors is not None:
        errors.write(f"{type(exception).__name__}: {exception}\n")
        errors.write("".join(traceback.format_tb(exception.__traceback__)))
        flush = getattr(errors, "flush", None)
        if flush is not None:
            flush()

    logger.error(
        "action.unhandled_exception",
        exception=type(exception).__name__,
        state=ctx.state.value,
        exc_info=exception,
    )


def apply_halt(ctx: CallContext, signal: Halt) -> None:
    ctx.transition(LifecycleState.HALTED)
    if ctx.outcome is not Outcome.RECOVERED:
        ctx.outcome = Outcome.HALTED

    ctx.response.status = signal.status
    ctx.response.body = signal.body
    logger.debug("action.halted", status=signal.status)


def finalize(ctx: CallContext) -> Serialized:
    """Assemble the wire response.

    Cookies and flash are flushed, class-level cache headers and the
    Content-Type are filled in when missing, and responses that cannot
    carry a body (1xx, 204, 205, 304, HEAD) are emptied and stripped to
    entity headers.
    """
    ctx.transition(LifecycleState.FINALIZING)
    action, request, response = ctx.action, ctx.request, ctx.response

    response.flush_state()

    for directives in (action.definition.cache_control, action.definition.expires):
        if directives is not None and not has_header(response.headers, directives.header):
            merge_headers(response.headers, directives.headers())

    no_body = requires_no_body(response.status, request.method)

    if not no_body and not has_header(response.headers, CONTENT_TYPE_HEADER):
        response.headers[CONTENT_TYPE_HEADER] = mime.content_type_with_charset(
            response.content_type, response.charset
        )

    if no_body:
        response.body = None
        response.headers = strip_to_entity_headers(
            response.headers,
            keep=[name for name in response.headers if action.keep_response_header(name)],
        )

    response.exposures["params"] = request.params
    response.exposures["format"] = response.format

    ctx.transition(LifecycleState.DONE)
    return response.to_tuple()


def run_guarded(ctx: CallContext) -> None:
    """Run the stages inside the halt guard, recovering from exceptions.

    Raises:
        Exception: When recovery finds no match or the recovery handler fails.
    """
    try:
        try:
            for stage in STAGES:
                stage(ctx)
        except Exception as exc:
            try:
                recovered = recover(ctx, exc)
            except Exception as handler_exc:
                report_unhandled(ctx, handler_exc)
                raise
            if not recovered:
                report_unhandled(ctx, exc)
                raise
    except Halt as signal:
        apply_halt(ctx, signal)


def run_action(action: "Action", env: dict[str, Any]) -> Serialized:
    """Run one call of ``action`` against ``env``.

    Returns:
        ``(status, headers, body)``

    Raises:
        Exception: Any exception not matched by the exception policy, and
            configuration errors raised during construction.
    """
    started = time.perf_counter()
    ctx = construct(action, env)
    request = ctx.request

    try:
        with call_context(ctx.action_name, request.id, request.method, request.path):
            try:
                run_guarded(ctx)
            except Exception:
                record_call(ctx.action_name, Outcome.ERROR.value, "error")
                raise
            result = finalize(ctx)
    finally:
        record_duration(ctx.action_name, time.perf_counter() - started)

    record_call(ctx.action_name, ctx.outcome.value, result[0])
    return result
