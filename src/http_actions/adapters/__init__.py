"""Server adapters for http-actions."""

from http_actions.adapters.asgi import ActionEndpoint

__all__ = ["ActionEndpoint"]
