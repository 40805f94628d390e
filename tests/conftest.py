"""
Fixtures y helpers para probar el stream SSE directamente sobre ASGI.

El TestClient de Starlette espera a que la respuesta termine antes de
devolverla, así que para streams infinitos se maneja la conexión a mano.
"""
import asyncio
import importlib
from typing import Any, Dict, List

import pytest
from sse_starlette.sse import AppStatus

from app.sse import iter_events


def make_scope(path: str = "/sse-item") -> Dict[str, Any]:
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("ascii"),
        "root_path": "",
        "query_string": b"",
        "headers": [
            (b"host", b"testserver"),
            (b"accept", b"text/event-stream"),
        ],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }


class FakeConnection:
    """Conexión ASGI simulada: guarda lo enviado y permite desconectar."""

    def __init__(self, fail_after: int = None):
        self.messages: List[Dict[str, Any]] = []
        self.arrivals: List[float] = []
        self.fail_after = fail_after
        self._request_sent = False
        self._disconnected = asyncio.Event()

    async def receive(self) -> Dict[str, Any]:
        if not self._request_sent:
            self._request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await self._disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: Dict[str, Any]) -> None:
        if message["type"] == "http.response.body" and message.get("body"):
            if self.fail_after is not None and len(self.body_chunks) >= self.fail_after:
                raise BrokenPipeError("broken pipe")
            self.arrivals.append(asyncio.get_running_loop().time())
        self.messages.append(message)

    def disconnect(self) -> None:
        self._disconnected.set()

    @property
    def start(self) -> Dict[str, Any]:
        return next(m for m in self.messages if m["type"] == "http.response.start")

    @property
    def status(self) -> int:
        return self.start["status"]

    @property
    def headers(self) -> Dict[str, str]:
        return {k.decode("latin-1"): v.decode("latin-1") for k, v in self.start["headers"]}

    @property
    def body_chunks(self) -> List[bytes]:
        return [
            m["body"]
            for m in self.messages
            if m["type"] == "http.response.body" and m.get("body")
        ]

    @property
    def body(self) -> bytes:
        return b"".join(self.body_chunks)

    @property
    def events(self) -> List[Dict[str, Any]]:
        return list(iter_events(self.body.split(b"\n")))


async def open_stream(asgi_app, conn: FakeConnection, path: str = "/sse-item") -> asyncio.Task:
    return asyncio.create_task(asgi_app(make_scope(path), conn.receive, conn.send))


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """El evento de apagado de sse-starlette queda ligado al loop que lo creó."""
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


def pending_tasks() -> List[asyncio.Task]:
    current = asyncio.current_task()
    return [t for t in asyncio.all_tasks() if t is not current and not t.done()]


@pytest.fixture
def current_app():
    """La instancia FastAPI vigente (app.app puede haber sido recargado)."""
    import app.app as app_module
    return app_module.app


@pytest.fixture
def sse_app(current_app):
    """Devuelve la app con los parámetros del stream reemplazados (intervalo corto)."""
    import app.app as app_module
    from app.models import StreamSettings

    def _override(**kwargs):
        settings = StreamSettings(**kwargs)
        current_app.dependency_overrides[app_module.get_stream_settings] = lambda: settings
        return current_app

    yield _override
    current_app.dependency_overrides.clear()


@pytest.fixture
def reload_app(monkeypatch):
    """Recarga app.config, app.models y app.app con otras variables de entorno."""
    import app.config as config_module
    import app.models as models_module
    import app.app as app_module

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        importlib.reload(config_module)
        importlib.reload(models_module)
        return importlib.reload(app_module).app

    yield _reload
    monkeypatch.undo()
    importlib.reload(config_module)
    importlib.reload(models_module)
    importlib.reload(app_module)
