#!/usr/bin/env python3
"""
Cliente SSE de consola: se conecta a /sse-item e imprime cada evento recibido.
note: must be running the server (python main.py)
"""
import os
import sys
import time
import argparse
from typing import Optional

import requests

# Agregar el directorio raíz al PYTHONPATH para que pueda encontrar el módulo 'app'
script_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(script_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from app.config import BASE_URL
from app.logger import get_logger, setup_logging
from app.sse import SSE_MEDIA_TYPE, iter_events

setup_logging()
logger = get_logger(__name__)


def consume(
    base_url: str = BASE_URL,
    count: Optional[int] = None,
    seconds: Optional[float] = None,
) -> int:
    """
    Lee eventos de /sse-item hasta recibir `count` eventos o pasar `seconds`.

    El límite de tiempo se evalúa al llegar cada evento.

    Returns:
        Cantidad de eventos recibidos
    """
    url = f"{base_url}/sse-item"
    received = 0
    start = time.monotonic()
    last = None

    logger.info(f"Conectando a {url}")
    with requests.get(url, headers={"Accept": SSE_MEDIA_TYPE}, stream=True, timeout=(5, 90)) as response:
        response.raise_for_status()
        logger.info(f"Conectado - status: {response.status_code}, content-type: {response.headers.get('content-type')}")

        for event in iter_events(response.iter_lines(decode_unicode=True)):
            now = time.monotonic()
            gap = f"{(now - last) * 1000:.0f}ms" if last is not None else "-"
            last = now
            received += 1
            print(f"[{received}] {event['event']}: {event['data']} (retry: {event.get('retry')}, gap: {gap})")

            if count is not None and received >= count:
                break
            if seconds is not None and now - start >= seconds:
                break

    logger.info(f"Desconectado - eventos recibidos: {received}")
    return received


def main():
    parser = argparse.ArgumentParser(description="Consumidor SSE de heart rate")
    parser.add_argument("--url", default=BASE_URL, help="URL base del servidor")
    parser.add_argument("--count", type=int, default=None, help="Cantidad de eventos a leer")
    parser.add_argument("--seconds", type=float, default=None, help="Segundos a leer")
    args = parser.parse_args()

    try:
        consume(args.url, args.count, args.seconds)
    except KeyboardInterrupt:
        logger.info("Interrumpido por el usuario")
    except requests.RequestException as e:
        logger.error(f"Error de conexión: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
