"""Tests for stackpeek.app: App lifecycle, registration, and ASGI entry."""

import asyncio
import logging
import sys
from typing import Any

import pytest

from stackpeek.app import App
from stackpeek.cache import MemoryCache, NullCache
from stackpeek.config import AppConfig
from stackpeek.errors import HTTPError, NotFound
from stackpeek.http.request import Request
from stackpeek.testing import TestClient


class TestAppRegistration:
    def test_route_decorator(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return "hello"

        assert len(app._registrations) == 1
        assert app._registrations[0].path == "/"

    def test_route_with_methods_and_middleware(self) -> None:
        app = App()

        async def audit(request, next):
            return await next(request)

        @app.route("/users", methods=["GET", "POST"], middleware=[audit])
        def users():
            return "users"

        pending = app._registrations[0]
        assert pending.methods == ["GET", "POST"]
        assert pending.middleware == (audit,)

    def test_routes_property_closes_registration(self) -> None:
        app = App()
        app.add_route("/a", lambda: "a", name="a")
        assert [r.name for r in app.routes] == ["a"]
        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.add_route("/b", lambda: "b")

    def test_methods_upper_cased(self) -> None:
        app = App()
        app.add_route("/", lambda: "x", methods=["post"])
        assert app.routes[0].methods == frozenset({"POST"})

    def test_error_decorator(self) -> None:
        app = App()

        @app.error(404)
        def not_found():
            return "Not found"

        assert 404 in app._error_handlers


class TestAppServices:
    def test_db_from_url(self) -> None:
        assert App(db="sqlite:///:memory:").db.driver == "sqlite"

    def test_db_from_config(self) -> None:
        app = App(AppConfig(database_url="sqlite:///:memory:"))
        assert app.has_db
        assert app.db.url == "sqlite:///:memory:"

    def test_no_db(self) -> None:
        app = App()
        assert not app.has_db
        with pytest.raises(RuntimeError, match="No database configured"):
            _ = app.db

    def test_cache_from_driver(self) -> None:
        assert isinstance(App(AppConfig(cache_driver="null")).cache, NullCache)
        assert isinstance(App().cache, MemoryCache)

    def test_explicit_cache(self) -> None:
        cache = MemoryCache(max_items=1)
        assert App(cache=cache).cache is cache


class TestRequestPipeline:
    async def test_str_response(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return "hello"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "hello"
        assert response.content_type == "text/html; charset=utf-8"

    async def test_json_and_status_tuple(self) -> None:
        app = App()

        @app.route("/items", methods=["POST"])
        async def create():
            return {"ok": True}, 201

        async with TestClient(app) as client:
            response = await client.post("/items")
        assert response.status == 201
        assert response.text == '{"ok": true}'
        assert response.content_type.startswith("application/json")

    async def test_path_params_converted(self) -> None:
        app = App()

        @app.route("/users/{id:int}")
        def show(id: int):
            return f"{type(id).__name__}:{id}"

        async with TestClient(app) as client:
            assert (await client.get("/users/42")).text == "int:42"

    async def test_request_injected(self) -> None:
        app = App()

        @app.route("/who")
        def who(request: Request):
            return request.headers.get("x-user", "anon")

        async with TestClient(app) as client:
            assert (await client.get("/who", headers={"X-User": "ada"})).text == "ada"

    async def test_middleware_order(self) -> None:
        app = App()
        calls: list[str] = []

        async def outer(request, next):
            calls.append("outer")
            return await next(request)

        async def inner(request, next):
            calls.append("inner")
            response = await next(request)
            return response.with_header("X-Inner", "1")

        app.add_middleware(outer)

        @app.route("/", middleware=[inner])
        def index():
            calls.append("handler")
            return "ok"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert calls == ["outer", "inner", "handler"]
        assert ("x-inner", "1") in response.headers

    async def test_not_found(self) -> None:
        async with TestClient(App()) as client:
            response = await client.get("/missing")
        assert response.status == 404

    async def test_method_not_allowed(self) -> None:
        app = App()
        app.add_route("/", lambda: "x")
        async with TestClient(app) as client:
            response = await client.post("/")
        assert response.status == 405
        assert ("allow", "GET") in response.headers

    async def test_empty_detail_gives_empty_body(self) -> None:
        app = App()

        @app.route("/hidden")
        def hidden():
            raise NotFound("")

        async with TestClient(app) as client:
            response = await client.get("/hidden")
        assert response.status == 404
        assert response.body_bytes == b""

    async def test_custom_error_handler(self) -> None:
        app = App()

        @app.error(404)
        def not_found(request: Request):
            return f"nothing at {request.path}"

        async with TestClient(app) as client:
            response = await client.get("/nope")
        assert response.status == 404
        assert response.text == "nothing at /nope"

    async def test_http_error_status(self) -> None:
        app = App()

        @app.route("/teapot")
        def teapot():
            raise HTTPError(status=418, detail="short and stout")

        async with TestClient(app) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.text == "short and stout"


class TestInternalErrors:
    async def test_500_production(self, caplog) -> None:
        app = App()

        @app.route("/boom")
        def boom():
            raise ValueError("kaboom")

        with caplog.at_level(logging.ERROR, logger="stackpeek.server"):
            async with TestClient(app) as client:
                response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"
        assert "500 GET /boom" in caplog.text

    async def test_500_debug_shows_traceback(self) -> None:
        app = App(AppConfig(debug=True))

        @app.route("/boom")
        def boom():
            raise ValueError("kaboom <b>")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "ValueError" in response.text
        assert "kaboom &lt;b&gt;" in response.text

    async def test_unconvertible_return(self) -> None:
        app = App()
        app.add_route("/", lambda: object())
        async with TestClient(app) as client:
            assert (await client.get("/")).status == 500


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


async def _lifespan_exchange(app: App) -> tuple[list[dict[str, Any]], bool]:
    """Drive the full lifespan protocol and return messages sent by the app.

    Returns (sent_messages, startup_ok).
    """
    sent: list[dict[str, Any]] = []
    receive_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    async def receive() -> dict[str, Any]:
        return await receive_queue.get()

    async def send(message: dict[str, Any]) -> None:
        sent.append(message)

    scope: dict[str, Any] = {"type": "lifespan", "asgi": {"version": "3.0", "spec_version": "2.0"}}
    task = asyncio.create_task(app(scope, receive, send))

    await receive_queue.put({"type": "lifespan.startup"})
    for _ in range(200):
        if sent or task.done():
            break
        await asyncio.sleep(0.01)

    startup_ok = any(m["type"] == "lifespan.startup.complete" for m in sent)
    if startup_ok:
        await receive_queue.put({"type": "lifespan.shutdown"})
    await asyncio.wait_for(task, timeout=2.0)
    return sent, startup_ok


class TestLifespanProtocol:
    async def test_happy_path(self) -> None:
        app = App()
        events: list[str] = []

        @app.on_startup
        async def setup():
            events.append("startup")

        @app.on_shutdown
        def teardown():
            events.append("shutdown")

        sent, ok = await _lifespan_exchange(app)

        assert ok is True
        assert events == ["startup", "shutdown"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_startup_failure(self) -> None:
        app = App()

        @app.on_startup
        def setup():
            raise RuntimeError("no config")

        sent, ok = await _lifespan_exchange(app)

        assert ok is False
        assert sent == [{"type": "lifespan.startup.failed", "message": "no config"}]

    async def test_database_connected_and_closed(self, tmp_path) -> None:
        app = App(db=f"sqlite:///{tmp_path / 'app.db'}")
        seen: list[bool] = []

        @app.on_startup
        def check():
            seen.append(app.db.connected)

        _, ok = await _lifespan_exchange(app)

        assert ok is True
        assert seen == [True]
        assert not app.db.connected


class TestRun:
    def test_run_uses_uvicorn(self, monkeypatch) -> None:
        calls: list[tuple[Any, dict[str, Any]]] = []

        class FakeUvicorn:
            @staticmethod
            def run(app: Any, **kwargs: Any) -> None:
                calls.append((app, kwargs))

        monkeypatch.setitem(sys.modules, "uvicorn", FakeUvicorn)
        app = App(AppConfig(port=9001))
        app.run(host="0.0.0.0")

        assert calls[0][0] is app
        assert calls[0][1]["host"] == "0.0.0.0"
        assert calls[0][1]["port"] == 9001

    def test_run_without_uvicorn(self, monkeypatch) -> None:
        monkeypatch.setitem(sys.modules, "uvicorn", None)
        with pytest.raises(RuntimeError, match="stackpeek\\[server\\]"):
            App().run()


class TestHead:
    async def test_head_served_by_get_route(self) -> None:
        app = App()
        app.add_route("/", lambda: "hello")
        async with TestClient(app) as client:
            response = await client.head("/")
        assert response.status == 200
        assert response.body_bytes == b""
