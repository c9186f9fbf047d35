import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)

VERSION = "1.0.0"


@bp.get("/health")
def health():
    """
    Health check (also pings the database)
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
            token_store:
              type: string
              example: sql
      503:
        description: Database unreachable
    """
    store = current_app.config.get("TOKEN_STORE", "sql")
    try:
        with current_app.extensions["storage"].engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return {"status": "degraded", "version": VERSION, "token_store": store}, 503
    return {"status": "ok", "version": VERSION, "token_store": store}, 200
