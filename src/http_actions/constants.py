"""Keys of the transport envelope and protocol-level constants.

The envelope is a plain dict in the WSGI spirit. An external component
(router, server adapter) builds it and hands it to an action.
"""

REQUEST_METHOD = "REQUEST_METHOD"
PATH_INFO = "PATH_INFO"
QUERY_STRING = "QUERY_STRING"
CONTENT_TYPE = "CONTENT_TYPE"
CONTENT_LENGTH = "CONTENT_LENGTH"
HTTP_ACCEPT = "HTTP_ACCEPT"
HTTP_COOKIE = "HTTP_COOKIE"
HTTP_IF_NONE_MATCH = "HTTP_IF_NONE_MATCH"
HTTP_IF_MODIFIED_SINCE = "HTTP_IF_MODIFIED_SINCE"

INPUT = "wsgi.input"
ERRORS = "wsgi.errors"
ROUTER_PARAMS = "router.params"
SESSION = "http_actions.session"
FORMAT = "http_actions.format"
REQUEST_ID = "http_actions.request_id"
BODY = "http_actions.body"
EXCEPTION = "http_actions.exception"

DEFAULT_REQUEST_METHOD = "GET"
HEAD = "HEAD"
DEFAULT_ACCEPT = "*/*"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_CHARSET = "utf-8"

LOCATION = "Location"
SET_COOKIE = "Set-Cookie"
CONTENT_TYPE_HEADER = "Content-Type"

# RFC 7230: 1xx, 204, 205 and 304 responses never carry a body
HTTP_STATUSES_WITHOUT_BODY = frozenset([*range(100, 200), 204, 205, 304])
