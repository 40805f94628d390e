"""
Configuración centralizada del sistema.
Todas las constantes y configuraciones del proyecto están definidas aquí.
"""
import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ============================================================================
# Application Configuration
# ============================================================================
APP_ENV = os.getenv("APP_ENV", "development")
HTTPS_REDIRECT = _env_bool("HTTPS_REDIRECT", "false")

# ============================================================================
# Server Configuration
# ============================================================================
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
RELOAD = _env_bool("RELOAD", "false")
# segundos que uvicorn espera antes de cancelar los streams abiertos al apagar
SHUTDOWN_TIMEOUT = int(os.getenv("SHUTDOWN_TIMEOUT", "5"))

# ============================================================================
# SSE Stream Configuration
# ============================================================================
SSE_EVENT_TYPE = os.getenv("SSE_EVENT_TYPE", "heartRate")
SSE_INTERVAL_MS = int(os.getenv("SSE_INTERVAL_MS", "2000"))
SSE_RETRY_MS = int(os.getenv("SSE_RETRY_MS", "60000"))  # 1 minuto
# intervalo de pings (comentarios `: ping`); alto para que el body solo lleve eventos
SSE_PING_SECONDS = int(os.getenv("SSE_PING_SECONDS", "86400"))

# ============================================================================
# Heart Rate Configuration
# ============================================================================
# rango semiabierto [HEART_RATE_MIN, HEART_RATE_MAX)
HEART_RATE_MIN = int(os.getenv("HEART_RATE_MIN", "60"))
HEART_RATE_MAX = int(os.getenv("HEART_RATE_MAX", "100"))

# ============================================================================
# Logging Configuration
# ============================================================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# ============================================================================
# Test/Development Configuration
# ============================================================================
BASE_URL = os.getenv("BASE_URL", "http://localhost:8000")
