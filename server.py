#!/usr/bin/env python3
"""
Content-mix server - Entry Point

Loads .env, configures logging, builds the Flask app and serves it.

Start:
    python3 server.py

Endpoints:
    GET /?count=<n>&offset=<n>   mixed content list
    GET /health/live             liveness probe
    GET /health/ready            readiness probe
"""

import logging
import os
import signal
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before anything else
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from config.loader import config  # noqa: E402  (reads env set by .env)

logging.basicConfig(
    level=getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from app import create_app  # noqa: E402

app = create_app()

# A broken pattern is reported here and by /health/ready; requests still get
# a 500 with the diagnostic instead of the process refusing to start.
for _problem in app.content_mixer.validate():
    logger.error(f"Content mix configuration problem: {_problem}")


if __name__ == "__main__":
    port = int(config.get("server.port", 8080))
    host = config.get("server.host", "127.0.0.1")

    # Clean SIGTERM shutdown so systemd stop/restart works correctly.
    def _handle_sigterm(signum, frame):
        logger.info("SIGTERM received - shutting down.")
        os._exit(0)

    signal.signal(signal.SIGTERM, _handle_sigterm)

    logger.info(f"Content mix starting on port {port}")
    logger.info(f"  Content   → http://localhost:{port}/?count=10&offset=0")
    logger.info(f"  Health    → http://localhost:{port}/health/ready")
    logger.info(f"  Pattern   → {len(app.content_mixer.pattern)} entries, "
                f"providers {sorted(app.content_mixer.clients.keys())}")

    app.run(host=host, port=port, debug=False, threaded=True)
