import asyncio
from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from app.models import SseEvent, StreamSettings
from app.emitter import HeartRateEmitter
from app.sse import EventStreamResponse, SSE_MEDIA_TYPE, encode_event, event_stream_response
from app.logger import get_logger
from app.config import APP_ENV, HTTPS_REDIRECT

logger = get_logger(__name__)

# OpenAPI / docs solo en development
_docs_enabled = APP_ENV == "development"

app = FastAPI(
    title="Heart Rate SSE",
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    openapi_url="/openapi.json" if _docs_enabled else None,
)

if HTTPS_REDIRECT:
    app.add_middleware(HTTPSRedirectMiddleware)

app.state.active_streams = 0

_EXAMPLE_STREAM = (
    encode_event(SseEvent(data="72", retry=60000))
    + encode_event(SseEvent(data="85", retry=60000))
).decode("utf-8")

SSE_ITEM_RESPONSES = {
    200: {
        "description": (
            "Stream Server-Sent Events. Un evento `heartRate` cada 2 segundos "
            "con un entero en [60, 100). Cada evento incluye `retry: 60000`."
        ),
        "content": {
            SSE_MEDIA_TYPE: {
                "schema": {"type": "string"},
                "example": _EXAMPLE_STREAM,
            }
        },
    }
}


@app.on_event("startup")
def startup():
    logger.info(f"Aplicación iniciada - env: {APP_ENV}, https_redirect: {HTTPS_REDIRECT}")


@app.on_event("shutdown")
def shutdown():
    logger.info(f"Cerrando aplicación - streams activos: {app.state.active_streams}")


# se valida al importar: una variable de entorno inválida corta el arranque
STREAM_SETTINGS = StreamSettings()


def get_stream_settings() -> StreamSettings:
    """Parámetros del stream tomados de app.config."""
    return STREAM_SETTINGS


@app.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns:
        - status: "healthy"
        - checks: estado del servicio y cantidad de streams abiertos
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "checks": {
                "service": "healthy",
                "active_streams": request.app.state.active_streams,
            },
        },
    )


async def _tracked(request: Request, emitter: HeartRateEmitter):
    state = request.app.state
    events = emitter.events()
    state.active_streams += 1
    try:
        async for event in events:
            yield event
    finally:
        await events.aclose()
        state.active_streams -= 1


@app.get(
    "/sse-item",
    response_class=EventStreamResponse,
    responses=SSE_ITEM_RESPONSES,
)
async def stream_heart_rate(
    request: Request,
    settings: StreamSettings = Depends(get_stream_settings),
):
    """
    Emite un heart rate aleatorio cada `interval_ms` como evento SSE,
    hasta que el cliente se desconecta.
    """
    cancel = asyncio.Event()
    emitter = HeartRateEmitter(cancel, settings)
    logger.info(f"Nueva conexión SSE - client: {request.client}")
    return event_stream_response(_tracked(request, emitter), cancel)
