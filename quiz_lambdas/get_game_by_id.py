from .api import _resp, api_handler, require_game_id
from .errors import NotFoundError


@api_handler("get game by id", not_found_status=404)
def handler(params, store):
    key = "id" if params.get("id") is not None else "_id"
    game_id = require_game_id(params, key=key, message="Game id is required")
    game = store.find_one(game_id)
    if not game:
        raise NotFoundError("Game not found")
    return _resp({"success": True, "game": game})
