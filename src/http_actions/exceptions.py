"""Custom exceptions for http_actions.

These are programmer errors raised at the point of misuse (an unknown
format symbol, a session accessed while sessions are disabled, a status
code that does not exist). They are never converted into responses by
the framework and always escape ``Action.__call__``.

Halting is not an error and lives in :mod:`http_actions.core.halt`.

Examples:
    Catching every configuration error::

        from http_actions.exceptions import ActionError

        try:
            status, headers, body = action(env)
        except ActionError as e:
            logger.error("action.misconfigured", error=e.message)
            raise
"""


class ActionError(Exception):
    """Base exception for all http_actions configuration errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
        """
        self.message = message
        super().__init__(message)


class UnknownFormatError(ActionError):
    """A format name has no corresponding MIME type.

    Raised when a format such as ``"jsonx"`` is used for ``accepted_formats``,
    ``default_response_format`` or ``response.format`` without being present
    in the configured formats or in the built-in table.

    Attributes:
        message: Human-readable error description.
        format: The offending format (may be None).

    Examples:
        Registering the missing format::

            config = ActionConfig().add_format("jsonapi", "application/vnd.api+json")
    """

    def __init__(self, format: object) -> None:
        """Initialize the error for the given format.

        Args:
            format: The format that could not be resolved.
        """
        if format is not None and str(format) != "":
            message = (
                f"Cannot find a corresponding MIME type for format {format!r}. "
                f"Configure one via `ActionConfig().add_format({str(format)!r}, \"MIME_TYPE\")`."
            )
        else:
            message = "Cannot find a corresponding MIME type for `None` format."
        super().__init__(message)
        self.format = format


class MissingSessionError(ActionError):
    """Session or flash accessed while session support is disabled.

    Attributes:
        message: Human-readable error description.
        accessor: Name of the accessor that was used (e.g. "Response.flash").
    """

    def __init__(self, accessor: str) -> None:
        """Initialize the error for the given accessor.

        Args:
            accessor: Qualified name of the session accessor that was used.
        """
        super().__init__(
            f"Sessions are not enabled. To use `{accessor}`, set "
            "`sessions_enabled = True` on the action or pass "
            "`ActionConfig(sessions_enabled=True)`."
        )
        self.accessor = accessor


class UnknownStatusError(ActionError, LookupError):
    """A status code or symbolic status name is not in the status table.

    Attributes:
        message: Human-readable error description.
        status: The code or name that was looked up.
    """

    def __init__(self, status: object) -> None:
        """Initialize the error for the given status.

        Args:
            status: The unknown code or name.
        """
        super().__init__(f"Unknown HTTP status: {status!r}")
        self.status = status
