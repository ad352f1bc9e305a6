"""Action base class and its immutable class-level definition.

An action is a class whose ``handle(request, response)`` method answers one
kind of request. Cross-cutting behavior is declared in the class body and
folded into an immutable :class:`ActionDefinition` when the subclass is
created:

- ``before_callbacks`` / ``after_callbacks``: appended to the inherited chains
- ``handled_exceptions``: layered on top of the inherited exception policy
- ``accepted_formats``: restricts negotiation and installs the accept filter
- ``sessions_enabled``: overrides the application configuration

Class methods (``before``, ``prepend_before``, ``handle_exception``,
``accept``, ``cache_control``...) replace the class's definition with an
updated copy. The parent's definition is never changed.

Examples:
    Declaring an action::

        class Show(Action):
            before_callbacks = ("authenticate",)
            handled_exceptions = {LookupError: 404}
            accepted_formats = ("html", "json")
            sessions_enabled = True

            def authenticate(self, request, response):
                if "user_id" not in response.session:
                    self.halt(401)

            def handle(self, request, response):
                response.body = f"book {request.params['id']}"

        status, headers, body = Show()(env)
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from http_actions import mime
from http_actions.cache import CacheDirectives
from http_actions.config import ActionConfig
from http_actions.core.callbacks import CallbackChain, CallbackTarget
from http_actions.core.exception_policy import ExceptionPolicy, PolicyTarget
from http_actions.core.halt import halt
from http_actions.core.request import Request
from http_actions.core.response import Response
from http_actions.core.state_machine import Serialized, run_action

ACCEPT_FILTER = "enforce_accepted_mime_types"


class ActionDefinition(BaseModel):
    """Immutable class-level configuration of an action.

    Attributes:
        before_callbacks: Callbacks run before the handler.
        after_callbacks: Callbacks run after the handler.
        exception_policy: Action-level exception policy; overrides the
            application-wide one.
        accepted_formats: Formats the action responds with. Empty means any.
        sessions_enabled: Overrides ``ActionConfig.sessions_enabled`` when set.
        cache_control: Default Cache-Control directives.
        expires: Default Expires directives.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    before_callbacks: CallbackChain = Field(default_factory=CallbackChain)
    after_callbacks: CallbackChain = Field(default_factory=CallbackChain)
    exception_policy: ExceptionPolicy = Field(default_factory=ExceptionPolicy)
    accepted_formats: tuple[str, ...] = ()
    sessions_enabled: bool | None = None
    cache_control: CacheDirectives | None = None
    expires: CacheDirectives | None = None

    def with_accepted_formats(self, formats: tuple[str, ...]) -> "ActionDefinition":
        """Return a copy restricted to ``formats``, with the accept filter installed once."""
        before = self.before_callbacks
        if ACCEPT_FILTER not in before.targets:
            before = before.append(ACCEPT_FILTER)
        return self.model_copy(update={"accepted_formats": formats, "before_callbacks": before})


class Action:
    """Base class for actions.

    Args:
        config: Application-wide configuration.
        **deps: Collaborators made available as ``self.deps``.
    """

    definition: ClassVar[ActionDefinition] = ActionDefinition()

    before_callbacks: ClassVar[tuple[CallbackTarget, ...]] = ()
    after_callbacks: ClassVar[tuple[CallbackTarget, ...]] = ()
    handled_exceptions: ClassVar[Mapping[type[BaseException], PolicyTarget]] = {}
    accepted_formats: ClassVar[tuple[str, ...]] = ()
    sessions_enabled: ClassVar[bool | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        namespace = cls.__dict__
        definition = cls.definition

        if "accepted_formats" in namespace:
            definition = definition.with_accepted_formats(tuple(str(f) for f in namespace["accepted_formats"]))
        if "before_callbacks" in namespace:
            definition = definition.model_copy(
                update={"before_callbacks": definition.before_callbacks.append(*namespace["before_callbacks"])}
            )
        if "after_callbacks" in namespace:
            definition = definition.model_copy(
                update={"after_callbacks": definition.after_callbacks.append(*namespace["after_callbacks"])}
            )
        if "handled_exceptions" in namespace:
            definition = definition.model_copy(
                update={"exception_policy": definition.exception_policy.handle(namespace["handled_exceptions"])}
            )
        if "sessions_enabled" in namespace and namespace["sessions_enabled"] is not None:
            definition = definition.model_copy(update={"sessions_enabled": bool(namespace["sessions_enabled"])})

        cls.definition = definition

    @classmethod
    def _update(cls, **changes: Any) -> None:
        cls.definition = cls.definition.model_copy(update=changes)

    @classmethod
    def before(cls, *targets: CallbackTarget, when: CallbackTarget | None = None) -> None:
        """Append before callbacks."""
        cls._update(before_callbacks=cls.definition.before_callbacks.append(*targets, when=when))

    append_before = before

    @classmethod
    def prepend_before(cls, *targets: CallbackTarget, when: CallbackTarget | None = None) -> None:
        """Insert before callbacks at the front of the chain."""
        cls._update(before_callbacks=cls.definition.before_callbacks.prepend(*targets, when=when))

    @classmethod
    def after(cls, *targets: CallbackTarget, when: CallbackTarget | None = None) -> None:
        """Append after callbacks."""
        cls._update(after_callbacks=cls.definition.after_callbacks.append(*targets, when=when))

    append_after = after

    @classmethod
    def prepend_after(cls, *targets: CallbackTarget, when: CallbackTarget | None = None) -> None:
        """Insert after callbacks at the front of the chain."""
        cls._update(after_callbacks=cls.definition.after_callbacks.prepend(*targets, when=when))

    @classmethod
    def handle_exception(cls, mapping: Mapping[type[BaseException], PolicyTarget]) -> None:
        """Map exception classes to a status code or a recovery method name.

        Example:
            >>> class Show(Action):
            ...     pass
            >>> Show.handle_exception({LookupError: 404, PermissionError: "deny"})
        """
        cls._update(exception_policy=cls.definition.exception_policy.handle(mapping))

    @classmethod
    def accept(cls, *formats: str) -> None:
        """Restrict the formats this action responds with."""
        cls.definition = cls.definition.with_accepted_formats(tuple(str(f) for f in formats))

    @classmethod
    def cache_control(cls, *names: str, **values: Any) -> None:
        """Declare default Cache-Control directives."""
        cls._update(cache_control=CacheDirectives(*names, **values))

    @classmethod
    def expires(cls, amount: int, *names: str, **values: Any) -> None:
        """Declare a default Expires header ``amount`` seconds ahead."""
        cls._update(expires=CacheDirectives(*names, expires_in=int(amount), **values))

    def __init__(self, config: ActionConfig | None = None, **deps: Any) -> None:
        self.config = config or ActionConfig()
        self.deps = deps

    def __call__(self, env: dict[str, Any]) -> Serialized:
        """Run the action against a transport envelope.

        Returns:
            ``(status, headers, body)``
        """
        return run_action(self, env)

    def handle(self, request: Request, response: Response) -> None:
        """Answer the request. Subclasses override this."""

    @property
    def sessions_active(self) -> bool:
        """Whether session and flash are available, from the action or the configuration."""
        if self.definition.sessions_enabled is not None:
            return self.definition.sessions_enabled
        return self.config.sessions_enabled

    @property
    def exception_policy(self) -> ExceptionPolicy:
        """Application-wide policy overridden by this action's policy."""
        return self.definition.exception_policy.merged_over(self.config.handled_exceptions)

    def keep_response_header(self, name: str) -> bool:
        """Return True to keep a non-entity header on body-less responses."""
        return False

    def halt(self, status: int | str, body: str | bytes | None = None) -> None:
        """Stop the call and respond with ``status``."""
        halt(status, body)

    def enforce_accepted_mime_types(self, request: Request, response: Response) -> None:
        """Reject requests whose Content-Type or Accept fall outside ``accepted_formats``.

        A request without a Content-Type is checked against
        ``default_request_format`` when one is configured.

        Halts with 415 when the request Content-Type is not accepted and
        with 406 when the Accept header rejects every accepted type.
        """
        accepted = mime.restrict_mime_types(self.config, self.definition.accepted_formats)
        if not accepted:
            return

        default_content_type = mime.format_to_mime_type(self.config.default_request_format, self.config)
        if not mime.accepted_mime_type(request.content_type, accepted, default_content_type):
            halt(415)

        if request.accept is not None and not any(mime.accepts(request.accept, mime_type) for mime_type in accepted):
            halt(406)
