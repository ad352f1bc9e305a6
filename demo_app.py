"""Demo FastAPI application serving http-actions.

This application demonstrates actions with sessions, flash messages,
content negotiation and exception mapping.
Run with: python demo_app.py
"""

import contextlib
import json
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel
from starlette.routing import Route

from http_actions import Action, ActionConfig
from http_actions.adapters.asgi import ActionEndpoint
from http_actions.core.cleanup import SessionCleanup
from http_actions.observability.logging import configure_logging
from http_actions.storage.memory import MemorySessionStore

configure_logging(level="INFO", json_output=False)

store = MemorySessionStore()
cleanup = SessionCleanup(store, interval_seconds=60)
config = ActionConfig(
    default_response_format="html",
    default_headers={"X-Frame-Options": "DENY"},
    cookies={"path": "/", "http_only": True},
    sessions_enabled=True,
)


class Book(BaseModel):
    id: int
    title: str


BOOKS = {
    1: Book(id=1, title="The Pragmatic Programmer"),
    2: Book(id=2, title="Structure and Interpretation of Computer Programs"),
}


class Authenticated(Action):
    before_callbacks = ("authenticate",)

    def authenticate(self, request, response):
        if "user_id" not in response.session:
            self.halt(401)


class Login(Action):
    def handle(self, request, response):
        response.session["user_id"] = request.params.get("user_id", "23")
        response.flash["notice"] = "Welcome back"
        response.redirect_to("/dashboard", status=303)


class Logout(Action):
    def handle(self, request, response):
        response.session.clear()
        response.redirect_to("/")


class Dashboard(Authenticated):
    def handle(self, request, response):
        notice = response.flash["notice"] or ""
        response.body = f"<h1>Dashboard of user {response.session['user_id']}</h1><p>{notice}</p>"


class ShowBook(Action):
    accepted_formats = ("json", "html")
    handled_exceptions = {LookupError: 404, ValueError: 400}

    def handle(self, request, response):
        book = BOOKS[int(request.params["id"])]
        response.cache_control("public", max_age=60)
        response.fresh(etag=f'"book-{book.id}"')
        if response.format == "json":
            response.body = book.model_dump_json()
        else:
            response.body = f"<h1>{book.title}</h1>"


class Status(Action):
    def handle(self, request, response):
        response.format = "json"
        response.body = json.dumps({"status": "ok", "timestamp": datetime.now(UTC).isoformat()})


@contextlib.asynccontextmanager
async def lifespan(app):
    cleanup.start()
    yield
    await cleanup.stop()


app = FastAPI(
    title="http-actions Demo",
    description="Demo API served by http-actions",
    version="0.1.0",
    lifespan=lifespan,
)

app.router.routes.extend(
    [
        Route("/login", ActionEndpoint(Login(config), session_store=store), methods=["POST"]),
        Route("/logout", ActionEndpoint(Logout(config), session_store=store), methods=["POST"]),
        Route("/dashboard", ActionEndpoint(Dashboard(config), session_store=store)),
        Route("/books/{id}", ActionEndpoint(ShowBook(config))),
        Route("/api/status", ActionEndpoint(Status(config))),
    ]
)


if __name__ == "__main__":
    print("=" * 60)
    print("http-actions Demo Server")
    print("=" * 60)
    print("\nStarting server at http://localhost:8000")
    print("\nTry these commands:")
    print("  curl -i http://localhost:8000/books/1 -H 'Accept: application/json'")
    print("  curl -i -c jar -X POST http://localhost:8000/login")
    print("  curl -i -b jar http://localhost:8000/dashboard")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)
    print()

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
