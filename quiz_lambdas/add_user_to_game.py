import logging

from .api import _resp, api_handler, require_game_id
from .dates import now_iso
from .errors import NotFoundError
from .merge import merge_users
from .schemas import parse_user

logger = logging.getLogger(__name__)


@api_handler("add user to game")
def handler(params, store):
    game_id = require_game_id(params, message="Game ID is required for adding user to game")

    existing = store.find_one(game_id)
    if not existing:
        raise NotFoundError("Game with this ID does not exist")

    user = parse_user(params.get("user"))
    now = now_iso()
    users, added, _ = merge_users(existing.get("users"), [user], now)
    game = store.update_fields(game_id, {"users": users, "updatedAt": now}, existing.get("version", 0))

    user_name = user["userName"]
    is_new = bool(added)
    if is_new:
        message = f"User '{user_name}' successfully added to game"
    else:
        message = f"User '{user_name}' successfully updated in game"
    logger.info("Game %s: %s", game_id, message)

    return _resp({
        "success": True,
        "message": message,
        "_id": game_id,
        "userName": user_name,
        "totalUsers": len(users),
        "isNewUser": is_new,
        "isUpdated": not is_new,
        "game": game,
    })
