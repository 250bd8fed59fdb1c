"""Run the service: ``python -m paygate``."""
from __future__ import annotations

import uvicorn

from .config import settings


def main() -> None:
    # server_header=False keeps uvicorn from announcing itself.
    uvicorn.run(
        "paygate.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        server_header=False,
        date_header=False,
        ssl_keyfile=settings.ssl_keyfile,
        ssl_certfile=settings.ssl_certfile,
    )


if __name__ == "__main__":
    main()
