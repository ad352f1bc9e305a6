"""Callback chains run before and after an action's handler.

A chain is an immutable, ordered tuple of :class:`Callback` entries. Adding
entries returns a new chain, so a subclass extending its parent's chain
never changes the parent.

An entry targets either a method name, resolved on the action instance at
call time, or an inline function. Arguments are passed according to how
many positional parameters the target declares:

=====================  ============================  ====================
Declared parameters    Method name target            Inline function
=====================  ============================  ====================
0                      ``()``                        ``()``
1                      ``(request,)``                ``(request,)``
2                      ``(request, response)``       ``(request, response)``
3 or more              ``(request, response)`` [1]   ``(action, request, response)``
``*args``              ``(request, response)``       ``(request, response)``
=====================  ============================  ====================

[1] Parameters past the second must have defaults; a method requiring
more than two arguments raises :class:`TypeError` when invoked.

Any entry may call :func:`~http_actions.core.halt.halt`, which aborts the
rest of the chain and the handler.

Examples:
    Building a chain::

        chain = CallbackChain().append("authenticate").prepend(log_request)
        chain = chain.append("audit", when=lambda request: request.method == "POST")
"""

import inspect
from collections.abc import Callable, Iterable, Iterator
from typing import Any

CallbackTarget = str | Callable[..., Any]


def _positional_arity(target: Callable[..., Any]) -> int | None:
    """Count positional parameters of a callable; None means ``*args``."""
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return None

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count


def _required_positional(target: Callable[..., Any]) -> int:
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return 0
    return sum(
        1
        for parameter in signature.parameters.values()
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and parameter.default is inspect.Parameter.empty
    )


def invoke(target: CallbackTarget, action: Any, request: Any, response: Any) -> Any:
    """Call a callback target with the arguments it declares.

    Args:
        target: Method name or inline function.
        action: The action instance running the chain.
        request: The in-flight request.
        response: The in-flight response.

    Returns:
        Whatever the target returns.

    Raises:
        AttributeError: If a method name does not exist on the action.
        TypeError: If a named method requires more than ``(request, response)``.
    """
    if isinstance(target, str):
        method = getattr(action, target)
        if _required_positional(method) > 2:
            raise TypeError(f"Callback method {target!r} must accept at most (request, response)")
        arity = _positional_arity(method)
        if arity == 0:
            return method()
        if arity == 1:
            return method(request)
        return method(request, response)

    arity = _positional_arity(target)
    if arity is None or arity == 2:
        return target(request, response)
    if arity == 0:
        return target()
    if arity == 1:
        return target(request)
    return target(action, request, response)


class Callback:
    """One entry of a callback chain.

    Attributes:
        target: Method name or inline function to run.
        when: Optional condition, resolved like ``target``. The entry is
            skipped when it returns a falsy value.
    """

    __slots__ = ("target", "when")

    def __init__(self, target: CallbackTarget, when: CallbackTarget | None = None) -> None:
        if not (isinstance(target, str) or callable(target)):
            raise TypeError(f"Callback must be a method name or a callable, got {target!r}")
        if when is not None and not (isinstance(when, str) or callable(when)):
            raise TypeError(f"Callback condition must be a method name or a callable, got {when!r}")
        self.target = target
        self.when = when

    def __call__(self, action: Any, request: Any, response: Any) -> None:
        if self.when is not None and not invoke(self.when, action, request, response):
            return
        invoke(self.target, action, request, response)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Callback):
            return NotImplemented
        return self.target == other.target and self.when == other.when

    def __hash__(self) -> int:
        return hash((self.target, self.when))

    def __repr__(self) -> str:
        name = self.target if isinstance(self.target, str) else getattr(self.target, "__name__", self.target)
        return f"Callback({name!r})" if self.when is None else f"Callback({name!r}, when={self.when!r})"


def _wrap(targets: Iterable[CallbackTarget | Callback], when: CallbackTarget | None) -> tuple[Callback, ...]:
    wrapped = []
    for target in targets:
        if isinstance(target, Callback):
            wrapped.append(target if when is None else Callback(target.target, when))
        else:
            wrapped.append(Callback(target, when))
    return tuple(wrapped)


class CallbackChain:
    """Immutable ordered sequence of callbacks."""

    __slots__ = ("_callbacks",)

    def __init__(self, callbacks: Iterable[Callback] = ()) -> None:
        self._callbacks = tuple(callbacks)

    def append(self, *targets: CallbackTarget | Callback, when: CallbackTarget | None = None) -> "CallbackChain":
        """Return a new chain with ``targets`` added at the end, in the given order."""
        return CallbackChain(self._callbacks + _wrap(targets, when))

    def prepend(self, *targets: CallbackTarget | Callback, when: CallbackTarget | None = None) -> "CallbackChain":
        """Return a new chain with ``targets`` added at the front, in the given order.

        Example:
            >>> CallbackChain().append("c").prepend("a", "b").targets
            ('a', 'b', 'c')
        """
        return CallbackChain(_wrap(targets, when) + self._callbacks)

    def run(self, action: Any, request: Any, response: Any) -> None:
        """Run every callback in order.

        A halt raised by a callback propagates and stops the chain.
        """
        for callback in self._callbacks:
            callback(action, request, response)

    @property
    def targets(self) -> tuple[CallbackTarget, ...]:
        return tuple(callback.target for callback in self._callbacks)

    def __iter__(self) -> Iterator[Callback]:
        return iter(self._callbacks)

    def __len__(self) -> int:
        return len(self._callbacks)

    def __bool__(self) -> bool:
        return bool(self._callbacks)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallbackChain):
            return NotImplemented
        return self._callbacks == other._callbacks

    def __hash__(self) -> int:
        return hash(self._callbacks)

    def __repr__(self) -> str:
        return f"CallbackChain({list(self._callbacks)!r})"
