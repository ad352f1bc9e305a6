"""HTTP status table.

Maps numeric status codes to reason phrases and symbolic names to codes.
The table covers the IANA-registered codes in the 100-511 range plus a few
widely seen vendor extensions.

Unknown codes are rejected: both :func:`message_for` and :func:`code_for`
raise :class:`~http_actions.exceptions.UnknownStatusError`. A halt with an
unknown status is a programmer error, not a request-data error.

Examples:
    >>> message_for(404)
    'Not Found'
    >>> code_for("unprocessable_content")
    422
    >>> code_for("418")
    418
"""

import re

from http_actions.exceptions import UnknownStatusError

STATUS_MESSAGES: dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    103: "Early Hints",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Content Too Large",
    414: "URI Too Long",
    415: "Unsupported Media Type",
    416: "Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Content",
    423: "Locked",
    424: "Failed Dependency",
    425: "Too Early",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
}

# Vendor extensions seen in the wild (nginx, Twitter, IIS)
EXTENDED_STATUS_MESSAGES: dict[int, str] = {
    420: "Enhance Your Calm",
    444: "No Response",
    449: "Retry With",
    499: "Client Closed Request",
    598: "Network Read Timeout Error",
    599: "Network Connect Timeout Error",
}

ALL: dict[int, str] = {**STATUS_MESSAGES, **EXTENDED_STATUS_MESSAGES}


def _symbolize(message: str) -> str:
    # "I'm a teapot" -> "im_a_teapot", "Non-Authoritative Information" -> "non_authoritative_information"
    cleaned = message.lower().replace("'", "")
    return re.sub(r"[^a-z0-9]+", "_", cleaned).strip("_")


SYMBOLS: dict[str, int] = {_symbolize(message): code for code, message in ALL.items()}

# Names that changed in RFC 9110 keep their older aliases
SYMBOLS.update(
    {
        "payload_too_large": 413,
        "request_entity_too_large": 413,
        "request_uri_too_long": 414,
        "requested_range_not_satisfiable": 416,
        "unprocessable_entity": 422,
    }
)


def message_for(code: int) -> str:
    """Return the reason phrase for a status code.

    Args:
        code: Numeric HTTP status code.

    Returns:
        The reason phrase, e.g. "Not Found".

    Raises:
        UnknownStatusError: If the code is not in the table.
    """
    try:
        return ALL[int(code)]
    except (KeyError, TypeError, ValueError):
        raise UnknownStatusError(code) from None


def code_for(status: int | str) -> int:
    """Resolve a status given as an integer, a numeric string or a symbolic name.

    Args:
        status: 404, "404" or "not_found".

    Returns:
        The numeric status code.

    Raises:
        UnknownStatusError: If the status cannot be resolved.
    """
    if isinstance(status, bool):
        raise UnknownStatusError(status)

    if isinstance(status, int):
        if status in ALL:
            return status
        raise UnknownStatusError(status)

    if isinstance(status, str):
        name = status.strip()
        if name.isdigit():
            return code_for(int(name))
        try:
            return SYMBOLS[_symbolize(name)]
        except KeyError:
            raise UnknownStatusError(status) from None

    raise UnknownStatusError(status)


def is_known(code: int) -> bool:
    """Return True if the code is present in the status table."""
    return code in ALL
