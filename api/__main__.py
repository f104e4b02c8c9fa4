"""
Development server: `python -m api`.
Production deployments serve `api:create_app()` from a WSGI server instead.
"""
import logging
import os

from . import create_app

logger = logging.getLogger(__name__)

app = create_app()

if __name__ == "__main__":
    host = os.getenv("BUDGET_API_HOST", "127.0.0.1")
    port = int(os.getenv("BUDGET_API_PORT", "8000"))
    logger.info("Budget API (%s) listening on %s:%d", app.config.get("APP_ENV"), host, port)
    app.run(host=host, port=port, debug=app.config.get("DEBUG", False))
