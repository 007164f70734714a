"""Request/response plumbing shared by every handler."""
import base64
import functools
import json
import logging

from . import config
from .errors import GameError, NotFoundError, ValidationError
from .store import acquire_store

logger = logging.getLogger(__name__)
logging.getLogger().setLevel(config.LOG_LEVEL)

_PROXY_KEYS = ('body', 'requestContext', 'queryStringParameters', 'pathParameters', 'httpMethod')


def _resp(body, code=200):
    return {
        "statusCode": code,
        "headers": {"content-type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def get_params(event):
    """Flatten an API Gateway proxy event (or a direct invocation) into one dict."""
    event = event or {}
    if not any(k in event for k in _PROXY_KEYS):
        return dict(event)

    raw = event.get("body")
    if isinstance(raw, str) and raw:
        if event.get("isBase64Encoded"):
            raw = base64.b64decode(raw).decode("utf-8")
        try:
            body = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON in request body")
    else:
        body = raw or {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    params = dict(body)
    params.update(event.get("queryStringParameters") or {})
    params.update(event.get("pathParameters") or {})
    return params


def require_game_id(params, key="_id", message="Game _id is required"):
    game_id = params.get(key)
    if not game_id:
        raise ValidationError(message)
    if not isinstance(game_id, str):
        raise ValidationError(f"{key} must be a string")
    return game_id


def _apply_log_level(params):
    # per-invocation override, e.g. {"LOG_LEVEL": "debug"}
    level = params.get("LOG_LEVEL")
    if isinstance(level, str) and isinstance(logging.getLevelName(level.upper()), int):
        logging.getLogger().setLevel(level.upper())


def api_handler(action, not_found_status=500):
    """Turn ``fn(params, store)`` into a Lambda ``handler(event, ctx)``.

    Domain errors become their status code, anything else a logged 500. A
    missing game answers ``not_found_status``. The store is released before
    the response is returned.
    """
    def wrap(fn):
        @functools.wraps(fn)
        def handler(event, ctx=None, store=None):
            logger.info("Calling the main action to %s", action)
            try:
                params = get_params(event)
                _apply_log_level(params)
                logger.debug("params: %s", params)
                with acquire_store(store) as s:
                    return fn(params, s)
            except GameError as e:
                code = not_found_status if isinstance(e, NotFoundError) else e.status_code
                logger.warning("%s failed (%d): %s", action, code, e.message)
                if not e.expose:
                    return _resp({"success": False, "error": "Internal server error"}, code)
                return _resp({"success": False, "message": e.message}, code)
            except Exception:
                logger.exception("Unhandled error while trying to %s", action)
                return _resp({"success": False, "error": "Internal server error"}, 500)
            finally:
                logging.getLogger().setLevel(config.LOG_LEVEL)
        return handler
    return wrap
