# app/sse.py
"""
Serialización de eventos al formato Server-Sent Events (text/event-stream)
y response que los escribe sobre la conexión abierta (sse-starlette).

Formato por evento:

    retry: 60000
    event: heartRate
    data: 75
    <linea en blanco>

La linea `retry:` se escribe en cada evento que la trae (el emitter la
adjunta a todos), no solo en el primero. El servidor no usa el campo `id:`.
"""
import asyncio
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, List, Mapping, Optional, Union

import anyio
from sse_starlette.sse import EventSourceResponse

from app.config import SSE_PING_SECONDS
from app.logger import get_logger
from app.models import SseEvent

logger = get_logger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"


def split_payload(data: str) -> List[str]:
    """Divide el payload en lineas; "" produce una sola linea vacia."""
    return data.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def encode_event(event: SseEvent) -> bytes:
    """
    Serializa un SseEvent al wire format SSE (UTF-8).

    Función pura: el mismo evento produce siempre los mismos bytes.
    """
    lines = []
    if event.retry is not None:
        lines.append(f"retry: {event.retry}")
    lines.append(f"event: {event.event_type}")
    for chunk in split_payload(event.data):
        lines.append(f"data: {chunk}")
    # linea en blanco final = fin del evento
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def iter_events(lines: Iterable[Union[str, bytes]]) -> Iterator[Dict[str, Any]]:
    """
    Decodifica lineas de un stream SSE (lado cliente).

    Pensado para `requests.Response.iter_lines()`. Cada evento despachado es un
    dict con `event`, `data` y, si vinieron, `retry` (int) e `id`. Los comentarios (`:`)
    se ignoran y un evento sin lineas `data:` no se despacha.
    """
    fields: Dict[str, Any] = {}
    data_lines: List[str] = []

    for raw in lines:
        line = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        line = line.rstrip("\r\n")

        if not line:
            if data_lines:
                event = {"event": fields.get("event", "message"), "data": "\n".join(data_lines)}
                for key in ("retry", "id"):
                    if key in fields:
                        event[key] = fields[key]
                yield event
            fields = {}
            data_lines = []
            continue

        if line.startswith(":"):
            continue

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name == "data":
            data_lines.append(value)
        elif name == "event":
            fields["event"] = value
        elif name == "retry":
            if value.isdigit():
                fields["retry"] = int(value)
        elif name == "id":
            fields["id"] = value


async def _aclose(events: AsyncIterator[SseEvent]) -> None:
    aclose = getattr(events, "aclose", None)
    if aclose is not None:
        await aclose()


async def encode_stream(events: AsyncIterator[SseEvent], cancel: asyncio.Event) -> AsyncIterator[bytes]:
    """
    Serializa cada evento a bytes a medida que llega.

    Al terminar por cualquier motivo (desconexión, apagado, error de escritura)
    dispara `cancel` y cierra el iterador de eventos.
    """
    try:
        async for event in events:
            yield encode_event(event)
    except asyncio.CancelledError:
        logger.info("Stream cancelado (cliente desconectado o servidor apagándose)")
        raise
    finally:
        cancel.set()
        with anyio.CancelScope(shield=True):
            await _aclose(events)


class EventStreamResponse(EventSourceResponse):
    """EventSourceResponse que siempre cierra el iterador, también si falla la escritura."""

    media_type = SSE_MEDIA_TYPE

    async def __call__(self, scope, receive, send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await _aclose(self.body_iterator)


def event_stream_response(
    events: AsyncIterator[SseEvent],
    cancel: asyncio.Event,
    headers: Optional[Mapping[str, str]] = None,
) -> EventStreamResponse:
    """
    Response text/event-stream para un stream de SseEvent.

    Los bytes ya van serializados por `encode_event`; EventSourceResponse se
    encarga de escribir cada chunk, escuchar `http.disconnect` y cortar el
    stream cuando el servidor se apaga.
    """
    stream_headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    stream_headers.update(headers or {})
    return EventStreamResponse(
        encode_stream(events, cancel),
        headers=stream_headers,
        sep="\n",
        # los pings son comentarios extra en el body; con este intervalo no se envían
        ping=SSE_PING_SECONDS,
    )
