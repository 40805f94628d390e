# app/emitter.py
"""
Generador de eventos de heart rate para el endpoint SSE.

Cada conexión crea su propio HeartRateEmitter: su propio generador aleatorio,
su propia señal de cancelación y su propio estado. No hay estado compartido
entre conexiones.
"""
import asyncio
import enum
import random
from typing import AsyncIterator, Optional

from app.logger import get_logger
from app.models import HeartRateSample, SseEvent, StreamSettings

logger = get_logger(__name__)


class EmitterState(str, enum.Enum):
    RUNNING = "running"
    STOPPED = "stopped"


def draw_heart_rate(rng: random.Random, min_rate: int, max_rate: int) -> HeartRateSample:
    """Sortea un heart rate uniforme en [min_rate, max_rate)."""
    return HeartRateSample(value=rng.randrange(min_rate, max_rate))


async def wait_cancelled(cancel: asyncio.Event, timeout: float) -> bool:
    """
    Espera `timeout` segundos o hasta que se dispare la señal.

    Returns:
        True si la señal se disparó, False si se cumplió el timeout
    """
    try:
        await asyncio.wait_for(cancel.wait(), timeout)
    except asyncio.TimeoutError:
        return False
    return True


class HeartRateEmitter:
    """
    Produce una secuencia (infinita hasta cancelar) de SseEvent espaciados
    `interval_ms` milisegundos.

    Estados: RUNNING mientras el generador esté vivo, STOPPED al terminar
    (señal disparada, aclose() del consumidor o cancelación de la tarea).
    Un emitter detenido no se reinicia: una conexión nueva crea uno nuevo.
    """

    def __init__(
        self,
        cancel: asyncio.Event,
        settings: Optional[StreamSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cancel = cancel
        self.settings = settings or StreamSettings()
        self.rng = rng or random.Random()
        self.state = EmitterState.RUNNING
        self.emitted = 0

    @property
    def stopped(self) -> bool:
        return self.state is EmitterState.STOPPED

    async def events(self) -> AsyncIterator[SseEvent]:
        settings = self.settings
        interval = settings.interval_ms / 1000.0
        logger.info(f"Stream iniciado - intervalo: {settings.interval_ms}ms, evento: {settings.event_type}")
        try:
            while not self.cancel.is_set():
                sample = draw_heart_rate(self.rng, settings.min_rate, settings.max_rate)
                event = SseEvent.from_sample(
                    sample,
                    event_type=settings.event_type,
                    retry=settings.retry_ms,
                )
                self.emitted += 1
                logger.debug(f"Evento #{self.emitted} emitido - heart_rate: {sample.value}")
                yield event

                if await wait_cancelled(self.cancel, interval):
                    break
        finally:
            self.state = EmitterState.STOPPED
            logger.info(f"Stream finalizado - eventos emitidos: {self.emitted}")
