from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from app.config import (
    SSE_EVENT_TYPE,
    SSE_INTERVAL_MS,
    SSE_RETRY_MS,
    HEART_RATE_MIN,
    HEART_RATE_MAX,
)


class HeartRateSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: int = Field(..., ge=60, lt=100, examples=[75])  # [60, 100)


class SseEvent(BaseModel):
    """
    Envelope de un evento SSE.

    - event_type: etiqueta del evento (linea `event:`)
    - data: payload serializado, puede contener saltos de linea
    - retry: intervalo de reconexion sugerido al cliente, en milisegundos
    """
    model_config = ConfigDict(frozen=True, validate_default=True)

    event_type: str = Field(SSE_EVENT_TYPE, min_length=1, examples=["heartRate"])
    data: str = Field(..., examples=["75"])
    retry: Optional[int] = Field(None, ge=0, examples=[60000])

    @field_validator("event_type")
    @classmethod
    def _single_line(cls, value: str) -> str:
        # el tipo viaja en una sola linea del wire format
        if "\n" in value or "\r" in value:
            raise ValueError("event_type no puede contener saltos de linea")
        return value

    @classmethod
    def from_sample(
        cls,
        sample: HeartRateSample,
        event_type: str = SSE_EVENT_TYPE,
        retry: Optional[int] = SSE_RETRY_MS,
    ) -> "SseEvent":
        return cls(event_type=event_type, data=str(sample.value), retry=retry)


class StreamSettings(BaseModel):
    """Parámetros de un stream de heart rate (uno por conexión)."""
    model_config = ConfigDict(frozen=True, validate_default=True)

    event_type: str = Field(SSE_EVENT_TYPE, min_length=1)
    interval_ms: int = Field(SSE_INTERVAL_MS, gt=0)
    retry_ms: Optional[int] = Field(SSE_RETRY_MS, ge=0)
    min_rate: int = Field(HEART_RATE_MIN, ge=60)
    max_rate: int = Field(HEART_RATE_MAX, le=100)

    @model_validator(mode="after")
    def _check_range(self) -> "StreamSettings":
        if self.min_rate >= self.max_rate:
            raise ValueError(
                f"min_rate ({self.min_rate}) debe ser menor que max_rate ({self.max_rate})"
            )
        return self
