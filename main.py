import uvicorn
from app.logger import setup_logging
from app.config import HOST, PORT, RELOAD, SHUTDOWN_TIMEOUT

setup_logging()

if __name__ == "__main__":
    uvicorn.run(
        "app.app:app",
        host=HOST,
        port=PORT,
        reload=RELOAD,
        # sse-starlette corta los streams al recibir la señal; esto cubre lo que quede colgado
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT,
    )
