"""Entry point for serving the Lessons API.

Host and port are read from the environment variables ``API_HOST`` and
``API_PORT`` (defaults ``0.0.0.0`` and ``8000``).  Storage, logging and
pricing are configured through the variables read by
``lessons_api.app.core.config``.

Usage:
    python run.py
"""
import logging
import os

from uvicorn import Config, Server

from lessons_api.app.main import app


def main() -> None:
    """Serve the API with Uvicorn until interrupted."""
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    logging.getLogger(__name__).info("Serving Lessons API on %s:%s", host, port)
    server.run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
