"""Conformance test scenarios for http-actions.

This package contains end-to-end scenario tests that call actions the way
a server would and check the serialized ``(status, headers, body)``
triple. Each scenario tests a specific aspect of the action lifecycle.
"""
