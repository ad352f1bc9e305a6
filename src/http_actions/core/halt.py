"""Halting: non-local exit out of an action's pipeline.

``halt(status, body)`` raises :class:`Halt`. The lifecycle controller
catches it exactly once per call, applies its status and body to the
response and goes straight to finalization. Nothing else in the pipeline
runs after a halt.

``Halt`` derives from ``BaseException`` so that ``except Exception`` blocks
in user code do not swallow it, in the same way ``KeyboardInterrupt`` and
``SystemExit`` pass through.

Examples:
    Denying a request from a before callback::

        from http_actions import halt

        def authenticate(self, request, response):
            if "user_id" not in response.session:
                halt(401)

    Halting with a custom body::

        halt(422, "title is required")
"""

from http_actions import status as status_table


class Halt(BaseException):
    """Raised to stop an action call and respond immediately.

    Attributes:
        status: Numeric HTTP status.
        body: Response body. Defaults to the status reason phrase.
    """

    def __init__(self, status: int | str, body: str | bytes | None = None) -> None:
        """Initialize a halt.

        Args:
            status: Status code, numeric string or symbolic name.
            body: Optional response body.

        Raises:
            UnknownStatusError: If the status is not in the status table.
        """
        code = status_table.code_for(status)
        if body is None:
            body = status_table.message_for(code)
        super().__init__(code, body)
        self.status = code
        self.body = body

    def __repr__(self) -> str:
        return f"Halt(status={self.status!r}, body={self.body!r})"


def halt(status: int | str, body: str | bytes | None = None) -> None:
    """Stop the running action call and respond with ``status``.

    Args:
        status: Status code, numeric string or symbolic name.
        body: Optional response body. Defaults to the reason phrase.

    Raises:
        Halt: Always.
        UnknownStatusError: If the status is not in the status table.

    Example:
        >>> halt(404)
        Traceback (most recent call last):
        ...
        http_actions.core.halt.Halt: (404, 'Not Found')
    """
    raise Halt(status, body)
